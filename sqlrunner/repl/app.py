"""prompt_toolkit front end: prompt loop, toolbar and submit rules."""

from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Optional

from prompt_toolkit import PromptSession, prompt
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from prompt_toolkit.lexers import PygmentsLexer
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.styles import Style
from pygments.lexers.sql import SqlLexer
from rich.console import Console

from ..engine.extractor import TERMINATOR, is_comment
from ..runtime import ScriptStatus
from .commands import CommandExecutor
from .completer import SqlCompleter
from .display import Display
from .keybinds import create_key_bindings
from .session import ReplSession

STYLE = Style.from_dict(
    {
        "prompt": "ansigreen bold",
        "continuation": "ansibrightblack",
        "bottom-toolbar": "noreverse ansibrightblack",
    }
)

KEY_HELP = "Enter run | Alt-Enter newline | Ctrl-R force | Ctrl-C cancel | Ctrl-S save | Ctrl-O open"


def start_repl(
    config_file: Optional[Path] = None,
    connection_name: Optional[str] = None,
    output_mode: Optional[str] = None,
) -> None:
    """Run the interactive loop until EOF, :quit or a \\q escape."""
    display = Display(Console())
    try:
        repl_session = ReplSession.create(config_file, connection_name, output_mode)
    except ValueError as exc:
        display.error(str(exc))
        raise SystemExit(1) from exc

    repl_session.password_prompt = lambda message: prompt(message, is_password=True)
    executor = CommandExecutor(repl_session, display)
    prompt_session = _build_prompt(repl_session, executor)
    display.banner()

    seed = ""
    try:
        while True:
            try:
                with patch_stdout():
                    text = prompt_session.prompt(default=seed)
            except KeyboardInterrupt:
                repl_session.set_status("(cancelled)")
                seed = ""
                continue
            except EOFError:
                break
            seed = ""

            if not text.strip():
                continue
            if text.lstrip().startswith(":"):
                outcome = executor.execute(text.strip(), text)
                if outcome.exit_repl:
                    break
                seed = outcome.new_buffer or ""
            elif run_buffer(repl_session, display, text) is ScriptStatus.TERMINATED:
                break
    finally:
        display.info("Bye")
        repl_session.close()


def _build_prompt(repl_session: ReplSession, executor: CommandExecutor) -> PromptSession:
    return PromptSession(
        message=HTML("<prompt>sql&gt; </prompt>"),
        prompt_continuation=lambda width, line_number, wrap: HTML("<continuation>...&gt; </continuation>"),
        multiline=True,
        lexer=PygmentsLexer(SqlLexer),
        completer=SqlCompleter(),
        history=FileHistory(str(repl_session.history_file)),
        auto_suggest=AutoSuggestFromHistory(),
        bottom_toolbar=lambda: toolbar_text(repl_session),
        key_bindings=create_key_bindings(should_submit, executor.execute),
        style=STYLE,
    )


def toolbar_text(repl_session: ReplSession) -> HTML:
    parts = [f"<b>{escape(repl_session.connection_name)}</b>"]
    if repl_session.status_message:
        parts.append(escape(repl_session.status_message))
    parts.append(KEY_HELP)
    return HTML("  ·  ".join(parts))


def run_buffer(repl_session: ReplSession, display: Display, text: str) -> Optional[ScriptStatus]:
    """Run one submitted buffer; errors are shown, never raised."""
    try:
        status = repl_session.run_text(terminate_buffer(text))
    except Exception as exc:
        display.error(f"{type(exc).__name__}: {exc}")
        repl_session.set_status("Error")
        return None
    repl_session.set_status("Cancelled" if status is ScriptStatus.CANCELLED else "Ran statements")
    return status


def terminate_buffer(text: str) -> str:
    """Close a trailing unterminated statement so a forced submit still runs it."""
    code_lines = [line for line in text.splitlines() if line.strip() and not is_comment(line)]
    if code_lines and not code_lines[-1].rstrip().endswith(TERMINATOR):
        return text.rstrip("\n") + "\n" + TERMINATOR + "\n"
    return text


def should_submit(text: str) -> bool:
    """Submit on Enter once the buffer holds a complete statement or a meta command."""
    stripped = text.strip()
    if not stripped:
        return False
    if stripped.startswith(":"):
        return True
    last_line = stripped.splitlines()[-1]
    if is_comment(last_line) or not last_line.rstrip().endswith(TERMINATOR):
        return False
    return not _open_quote(stripped)


def _open_quote(text: str) -> Optional[str]:
    """The quote character left unclosed in ``text``, if any.

    Doubled quotes cancel out, so tracking the innermost open quote is enough.
    """
    quote = None
    for ch in text:
        if quote is None and ch in ("'", '"'):
            quote = ch
        elif ch == quote:
            quote = None
    return quote
