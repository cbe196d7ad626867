"""REPL session state management."""

from __future__ import annotations

import io
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, TextIO

import structlog
from rich.console import Console

from ..runtime import ScriptStatus, Session, SQLRunnerConfig, ensure_config_dir, load_config

logger = structlog.get_logger(__name__)

PasswordPrompt = Callable[[str], str]


def _worker() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=1, thread_name_prefix="sqlrunner-worker")


@dataclass
class ReplSession:
    """Container for interactive REPL state.

    All database work happens on one worker thread so the prompt stays
    responsive and a running statement can be cancelled from the UI thread.
    """

    config: SQLRunnerConfig
    connection_name: str
    history_file: Path
    output_mode: str = "t"
    debug: bool = False
    console: Optional[Console] = None
    stdout: Optional[TextIO] = None
    password_prompt: Optional[PasswordPrompt] = None
    session: Optional[Session] = None
    current_file: Optional[Path] = None
    status_message: str = ""
    _executor: ThreadPoolExecutor = field(default_factory=_worker, repr=False)

    @classmethod
    def create(
        cls,
        config_file: Optional[Path] = None,
        connection_name: Optional[str] = None,
        output_mode: Optional[str] = None,
    ) -> "ReplSession":
        """Factory that wires configuration and history paths."""
        config = load_config(config_file)
        history_file = ensure_config_dir() / "history"

        return cls(
            config=config,
            connection_name=connection_name or config.default_connection,
            history_file=history_file,
            output_mode=output_mode or config.output_mode,
            debug=config.debug,
        )

    # Connection ------------------------------------------------------------------
    def connect(self, name: Optional[str] = None) -> Session:
        """(Re)open the session on the named connection."""
        connection = self.config.get_connection(name or self.connection_name)
        self.disconnect()

        password = None
        if connection.user and not connection.has_password() and self.password_prompt:
            password = self.password_prompt(f"Connection password for {name or self.connection_name}: ")

        self.session = self.submit(
            Session.open,
            connection.to_params(password),
            self.output_mode,
            stdout=self.stdout,
            console=self.console,
            debug=self.debug,
            autocommit=self.config.autocommit,
        ).result()
        if name:
            self.connection_name = name
        self.set_status(f"Connected: {self.connection_name}")
        logger.info("repl.connected", connection=self.connection_name)
        return self.session

    def ensure_session(self) -> Session:
        if self.session is None or self.session.closed:
            return self.connect()
        return self.session

    def disconnect(self) -> None:
        if self.session is None:
            return
        self.output_mode = self.session.output_mode.value
        session, self.session = self.session, None
        self.submit(session.close).result()

    # Execution -------------------------------------------------------------------
    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        return self._executor.submit(fn, *args, **kwargs)

    def wait(self, future: Future) -> Any:
        """Wait for ``future``; Ctrl-C cancels the running statement."""
        while True:
            try:
                return future.result()
            except KeyboardInterrupt:
                self.cancel()

    def run_text(self, text: str) -> ScriptStatus:
        """Run buffer text as a script (statements and escapes)."""
        session = self.ensure_session()
        return self.wait(self.submit(session.run_script, io.StringIO(text)))

    def run_file(self, path: Path) -> ScriptStatus:
        session = self.ensure_session()
        return self.wait(self.submit(session.run_file, path))

    def cancel(self) -> None:
        if self.session is not None:
            self.session.cancel()
            self.set_status("(cancelled)")

    def close(self) -> None:
        try:
            self.disconnect()
        finally:
            self._executor.shutdown(wait=True)

    def set_debug(self, enabled: bool) -> None:
        self.debug = enabled
        if self.session is not None:
            self.session.debug = enabled

    def set_status(self, message: str) -> None:
        self.status_message = message
