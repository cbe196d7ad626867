"""Console messages for the REPL, rendered with rich."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..engine.render import OutputMode
from .session import ReplSession


class Display:
    """REPL chrome: banner, notices, help and status. Query results go
    through the session's output sink, not here."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def banner(self) -> None:
        self.console.print(Panel("SQLRunner REPL: end statements with ';', type :help for commands", title="SQLRunner"))

    def info(self, message: str) -> None:
        self.console.print(f"[cyan]{message}[/cyan]")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]{message}[/yellow]")

    def error(self, message: str) -> None:
        self.console.print(Panel(message, title="Error", border_style="red"))

    def render_status(self, repl_session: ReplSession) -> None:
        table = Table(title="Session", show_lines=False)
        table.add_column("Field", style="bold cyan")
        table.add_column("Value")

        session = repl_session.session
        connection = repl_session.config.connections.get(repl_session.connection_name)
        table.add_row("Connection", repl_session.connection_name)
        if connection is not None:
            table.add_row("Driver", connection.driver)
            table.add_row("URL", connection.url)
        table.add_row("Connected", "yes" if session is not None and not session.closed else "no")
        mode = session.output_mode.label if session is not None else OutputMode.parse(repl_session.output_mode).label
        table.add_row("Mode", mode)
        output = session.sink.path if session is not None else None
        table.add_row("Output", str(output) if output else "stdout")
        table.add_row("Debug", "on" if repl_session.debug else "off")
        self.console.print(table)
