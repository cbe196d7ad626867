"""Key bindings for the SQLRunner REPL buffer."""

from __future__ import annotations

from typing import Callable, Optional

from prompt_toolkit.document import Document
from prompt_toolkit.key_binding import KeyBindings

from .commands import CommandOutcome

ShouldSubmitFn = Callable[[str], bool]
CommandRunner = Callable[[str, str], Optional[CommandOutcome]]


def create_key_bindings(should_submit: ShouldSubmitFn, run_command: CommandRunner) -> KeyBindings:
    """Enter submits complete statements; Alt-Enter always inserts a newline.

    Ctrl-R submits whatever is in the buffer, Ctrl-S saves it and Ctrl-O
    loads a file into it.
    """
    kb = KeyBindings()

    def run_outside_prompt(event, command: Callable[[str], Optional[CommandOutcome]]) -> None:
        text = event.current_buffer.text
        result: list = []
        event.app.run_in_terminal(lambda: result.append(command(text)))
        outcome = result[0] if result else None
        if outcome is None:
            return
        if outcome.new_buffer is not None:
            event.current_buffer.document = Document(outcome.new_buffer, len(outcome.new_buffer))
        if outcome.exit_repl:
            event.app.exit(result="")

    @kb.add("enter")
    def _submit_or_newline(event) -> None:
        buffer = event.current_buffer
        if should_submit(buffer.text):
            event.app.exit(result=buffer.text)
        else:
            buffer.newline()

    @kb.add("escape", "enter")
    def _newline(event) -> None:
        event.current_buffer.newline()

    @kb.add("c-r")
    def _force_submit(event) -> None:
        event.app.exit(result=event.current_buffer.text)

    @kb.add("c-s")
    def _save(event) -> None:
        run_outside_prompt(event, lambda text: run_command(":save", text))

    @kb.add("c-o")
    def _open(event) -> None:
        def ask(text: str) -> Optional[CommandOutcome]:
            path = input("Open file: ").strip()
            return run_command(f":open {path}", text) if path else None

        run_outside_prompt(event, ask)

    return kb
