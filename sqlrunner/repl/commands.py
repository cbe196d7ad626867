"""Colon-prefixed REPL commands (``:mode``, ``:run``, ``:save`` ...)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from rich.table import Table

from ..engine.escapes import EscapeError
from ..engine.render import OutputMode
from ..runtime import ConfigurationError, ScriptStatus
from .display import Display
from .session import ReplSession

TEMPLATES = [
    "SELECT * FROM table WHERE x = y;",
    "INSERT INTO table(col, col) VALUES(val, val);",
    "UPDATE table SET x = y WHERE x = y;",
    "DELETE FROM table WHERE x = y;",
]

TRUTHY = {"on", "true", "1", "yes", "y"}
FALSY = {"off", "false", "0", "no", "n"}


@dataclass
class MetaCommand:
    name: str
    args: List[str] = field(default_factory=list)


@dataclass
class CommandOutcome:
    """What the prompt loop should do after a command."""
    exit_repl: bool = False
    new_buffer: Optional[str] = None


Handler = Callable[[List[str], str], Optional[CommandOutcome]]


class CommandExecutor:
    """Runs meta commands against a :class:`ReplSession`."""

    def __init__(self, repl_session: ReplSession, display: Display) -> None:
        self._repl = repl_session
        self._display = display
        self._handlers: Dict[str, Handler] = {
            "help": self._help,
            "mode": self._mode,
            "output": self._output,
            "run": self._run,
            "connect": self._connect,
            "debug": self._debug,
            "status": self._status,
            "open": self._open,
            "save": self._save,
            "template": self._template,
            "quit": self._quit,
        }

    def execute(self, raw_command: str, buffer_text: str = "") -> CommandOutcome:
        command = parse_meta_command(raw_command)
        if command is None:
            self._display.error(f"Unknown command: {raw_command}")
            return CommandOutcome()
        handler = self._handlers.get(command.name)
        if handler is None:
            self._display.error(f"Unsupported command: {raw_command}")
            return CommandOutcome()
        try:
            return handler(command.args, buffer_text) or CommandOutcome()
        except (ConfigurationError, EscapeError, ValueError, OSError) as exc:
            self._display.error(str(exc))
            return CommandOutcome()

    # Handlers -------------------------------------------------------------------
    def _help(self, args: List[str], buffer_text: str) -> None:
        commands = Table(title="REPL commands")
        commands.add_column("Command", style="bold cyan")
        commands.add_column("Description")
        for usage, description in (
            (":help", "Show this help"),
            (":mode <t|h|s>", "Output as text, HTML or SQL inserts"),
            (":output [file]", "Send output to a file, or back to the terminal"),
            (":run <file>", "Run a script file in this session"),
            (":connect [name]", "Reconnect, optionally to another configured connection"),
            (":debug [on|off]", "Toggle debug mode; SQL errors then abort the script"),
            (":status", "Show connection and output settings"),
            (":open <file>", "Load a file into the buffer"),
            (":save [file]", "Save the buffer, by default to the last opened file"),
            (":template [n]", "List input templates or load one"),
            (":quit", "Leave the REPL"),
        ):
            commands.add_row(usage, description)
        self._display.console.print(commands)

        escapes = Table(title="Script escapes")
        escapes.add_column("Escape", style="bold green")
        escapes.add_column("Description")
        escapes.add_row("\\mt;  \\mh;  \\ms;", "Switch output mode")
        escapes.add_row("\\o<file>;", "Redirect output to a file")
        escapes.add_row("\\q;", "Quit")
        self._display.console.print(escapes)

    def _mode(self, args: List[str], buffer_text: str) -> None:
        if not args:
            self._display.error("Usage: :mode <t|h|s>")
            return
        mode = OutputMode.parse(args[0])
        if self._repl.session is not None:
            self._repl.session.set_output_mode(mode)
        self._repl.output_mode = mode.value
        self._repl.set_status(f"Mode: {mode.label}")

    def _output(self, args: List[str], buffer_text: str) -> None:
        session = self._repl.ensure_session()
        target = Path(args[0]).expanduser() if args else None
        session.set_output_file(target)
        self._repl.set_status(f"Output: {target or 'stdout'}")

    def _run(self, args: List[str], buffer_text: str) -> Optional[CommandOutcome]:
        path = self._existing_file(args, ":run")
        if path is None:
            return None
        self._repl.set_status(f"Running {path}")
        status = self._repl.run_file(path)
        return CommandOutcome(exit_repl=status is ScriptStatus.TERMINATED)

    def _connect(self, args: List[str], buffer_text: str) -> None:
        self._repl.connect(args[0] if args else None)
        self._display.info(f"Connected to {self._repl.connection_name}")

    def _debug(self, args: List[str], buffer_text: str) -> None:
        if not args:
            enabled = not self._repl.debug
        elif args[0].lower() in TRUTHY:
            enabled = True
        elif args[0].lower() in FALSY:
            enabled = False
        else:
            self._display.error("Usage: :debug [on|off]")
            return
        self._repl.set_debug(enabled)
        self._display.info(f"Debug {'on' if enabled else 'off'}")

    def _status(self, args: List[str], buffer_text: str) -> None:
        self._display.render_status(self._repl)

    def _open(self, args: List[str], buffer_text: str) -> Optional[CommandOutcome]:
        path = self._existing_file(args, ":open")
        if path is None:
            return None
        content = path.read_text(encoding="utf-8")
        self._repl.current_file = path
        self._repl.set_status(f"Opened {path}")
        return CommandOutcome(new_buffer=content)

    def _save(self, args: List[str], buffer_text: str) -> None:
        path = Path(args[0]).expanduser() if args else self._repl.current_file
        if path is None:
            self._display.error("No target file; give a path or :open one first")
            return
        path.write_text(buffer_text, encoding="utf-8")
        self._repl.current_file = path
        self._repl.set_status(f"Saved {path}")
        self._display.info(f"Buffer saved to {path}")

    def _template(self, args: List[str], buffer_text: str) -> Optional[CommandOutcome]:
        if not args:
            table = Table(title="Input Templates")
            table.add_column("#", style="bold")
            table.add_column("Template")
            for number, template in enumerate(TEMPLATES, start=1):
                table.add_row(str(number), template)
            self._display.console.print(table)
            return None
        if not args[0].isdigit() or not 1 <= int(args[0]) <= len(TEMPLATES):
            self._display.error(f"Template number must be 1-{len(TEMPLATES)}")
            return None
        return CommandOutcome(new_buffer=TEMPLATES[int(args[0]) - 1])

    def _quit(self, args: List[str], buffer_text: str) -> CommandOutcome:
        return CommandOutcome(exit_repl=True)

    def _existing_file(self, args: List[str], command: str) -> Optional[Path]:
        if not args:
            self._display.error(f"{command} needs a file path")
            return None
        path = Path(args[0]).expanduser()
        if not path.is_file():
            self._display.error(f"File not found: {path}")
            return None
        return path


def parse_meta_command(text: str) -> Optional[MetaCommand]:
    """Split ``:name arg ...``; ``None`` when ``text`` is not a meta command."""
    words = text.strip().split()
    if not words or not words[0].startswith(":") or words[0] == ":":
        return None
    return MetaCommand(name=words[0][1:].lower(), args=words[1:])
