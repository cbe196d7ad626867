"""CLI commands for SQLRunner using Typer."""

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .engine.tracing import ExecutionTracer
from .repl import start_repl
from .runtime import (
    ConfigurationError,
    ScriptStatus,
    Session,
    configure_logging,
    create_default_config,
    load_config,
)

app = typer.Typer(help="SQLRunner - run SQL scripts against any DB-API database")
console = Console(stderr=True)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    help_: bool = typer.Option(
        False,
        "--help",
        "-h",
        help="Show this message and exit.",
        is_eager=True,
    ),
) -> None:
    """Default callback to launch the REPL when no subcommand is invoked."""
    if ctx.invoked_subcommand is not None:
        return
    if help_:
        typer.echo(ctx.command.get_help(ctx))
        raise typer.Exit()

    start_repl()
    raise typer.Exit()


@app.command()
def run(
    scripts: Optional[List[Path]] = typer.Argument(None, help="Script files to run; stdin when omitted"),
    config_file: Optional[Path] = typer.Option(None, "--config-file", "-f", help="Configuration file"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Named connection to use"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Output mode: t, h or s"),
    debug: bool = typer.Option(False, "--debug", help="Abort on the first SQL error"),
    ask_password: bool = typer.Option(False, "--ask-password", help="Prompt for the connection password"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Run SQL scripts, or standard input when no script is given."""
    session: Optional[Session] = None
    tracer = ExecutionTracer()
    try:
        settings = load_config(config_file)
        configure_logging("DEBUG" if verbose else settings.log_level)

        connection = settings.get_connection(config or settings.default_connection)
        password = None
        if ask_password:
            password = typer.prompt(f"Connection password for {config or settings.default_connection}", hide_input=True)

        session = Session.open(
            connection.to_params(password),
            mode or settings.output_mode,
            stdout=sys.stdout,
            console=console,
            debug=debug or settings.debug,
            autocommit=settings.autocommit,
            tracer=tracer,
        )

        if not scripts:
            session.run_script(sys.stdin)
        else:
            for script in scripts:
                if verbose:
                    console.print(f"[blue]Info:[/blue] Running {script}")
                if session.run_file(script) is ScriptStatus.TERMINATED:
                    break

    except (ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)
    finally:
        if session is not None:
            session.close()
            if verbose:
                console.print(_summary_table(tracer.get_summary()))
            if settings.tracing.enabled:
                trace_file = tracer.write_trace_file(settings.tracing.trace_dir)
                if verbose:
                    console.print(f"[blue]Info:[/blue] Trace written to {trace_file}")


@app.command()
def repl(
    config_file: Optional[Path] = typer.Option(None, "--config-file", "-f", help="Configuration file"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Named connection to use"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Initial output mode: t, h or s"),
) -> None:
    """Start the interactive REPL."""
    start_repl(config_file, config, mode)


@app.command()
def connections(
    config_file: Optional[Path] = typer.Option(None, "--config-file", "-f", help="Configuration file"),
) -> None:
    """List the configured connections."""
    try:
        settings = load_config(config_file)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not settings.connections:
        console.print("[yellow]No connections configured[/yellow]")
        return

    table = Table(title="Configured Connections")
    table.add_column("Name", style="cyan")
    table.add_column("Driver", style="magenta")
    table.add_column("URL", style="green")
    table.add_column("User")
    table.add_column("Password")

    for name, connection in sorted(settings.connections.items()):
        marker = " *" if name == settings.default_connection else ""
        table.add_row(
            name + marker,
            connection.driver,
            connection.url,
            connection.user or "",
            "yes" if connection.has_password() else "no",
        )
    Console().print(table)


@app.command()
def init() -> None:
    """Initialize SQLRunner configuration."""
    try:
        path = create_default_config()
        console.print(f"[green]Success:[/green] SQLRunner configuration initialized at {path}")
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show SQLRunner version information."""
    try:
        from importlib.metadata import version as _v

        ver = _v("sqlrunner")
    except Exception:
        ver = "unknown"
    typer.echo(f"SQLRunner v{ver}")


def _summary_table(summary: dict) -> Table:
    table = Table(title="Execution Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    for key, value in summary.items():
        table.add_row(key.replace("_", " ").title(), str(value))

    return table


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
