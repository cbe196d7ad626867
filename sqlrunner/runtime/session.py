"""Session management for SQLRunner.

The session owns one database connection and runs scripts against it:
- Statements are extracted from the script one at a time
- Escape directives change the output mode or destination
- Everything else is executed and handed to the current renderer
"""

import time
from enum import Enum
from pathlib import Path
from typing import Any, Optional, TextIO, Union

import structlog
from rich.console import Console

from ..engine.escapes import EscapeResult, dispatch, is_escape
from ..engine.extractor import extract_statement
from ..engine.render import OutputMode, ResultRenderer, get_renderer
from ..engine.rowset import RowSet
from ..engine.sink import OutputSink
from ..engine.tracing import ExecutionTracer
from .connection import ConnectionParams, create_connection, driver_error_type

logger = structlog.get_logger(__name__)


class ScriptStatus(Enum):
    COMPLETED = "completed"
    TERMINATED = "terminated"
    CANCELLED = "cancelled"


class Session:
    """Runs SQL scripts and statements against one connection."""

    def __init__(
        self,
        connection: Any,
        output_mode: Union[OutputMode, str] = OutputMode.TEXT,
        *,
        stdout: Optional[TextIO] = None,
        console: Optional[Console] = None,
        debug: bool = False,
        autocommit: bool = True,
        tracer: Optional[ExecutionTracer] = None,
    ):
        initial_mode = OutputMode.parse(output_mode)
        self.connection = connection
        self.console = console or Console(stderr=True, highlight=False)
        self.debug = debug
        self.autocommit = autocommit
        self.tracer = tracer
        self.sink = OutputSink(stdout)
        self._error_type = driver_error_type(connection)
        self._mode: Optional[OutputMode] = None
        self._closed = False
        self._cancelled = False

        driver = type(connection).__module__.split(".")[0]
        self._notify(f"Connected to {driver}", event="session.connected", driver=driver)
        self.cursor = connection.cursor()
        self.set_output_mode(initial_mode)

    @classmethod
    def open(cls, params: ConnectionParams, output_mode: Union[OutputMode, str] = OutputMode.TEXT, **kwargs: Any) -> "Session":
        """Open a connection from ``params`` and wrap it in a session."""
        return cls(create_connection(params), output_mode, **kwargs)

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # State ------------------------------------------------------------------------
    @property
    def output_mode(self) -> OutputMode:
        return self._mode

    @property
    def renderer(self) -> ResultRenderer:
        return get_renderer(self._mode)

    @property
    def closed(self) -> bool:
        return self._closed

    def set_output_mode(self, mode: Union[OutputMode, str]) -> None:
        """Switch the renderer; ``ValueError`` for an unknown mode."""
        new_mode = OutputMode.parse(mode)
        if new_mode is self._mode:
            return
        self._mode = new_mode
        self._notify(f"Mode set to {new_mode.label}", event="session.mode.changed", mode=new_mode.label)

    def set_output_file(self, path: Union[str, Path, None] = None) -> None:
        """Send output to ``path``, or back to the default stream when None."""
        self._check_open()
        if path is None:
            self.sink.reset()
            self._notify("Output set to default", event="session.output.changed", path=None)
            return
        resolved = self.sink.redirect(path)
        self._notify(f"Output set to {resolved}", event="session.output.changed", path=str(resolved))

    # Execution ----------------------------------------------------------------------
    def run_file(self, path: Union[str, Path]) -> ScriptStatus:
        """Run one script file."""
        # Open first: an unreadable script is the most likely error
        with open(path, "r", encoding="utf-8") as handle:
            logger.info("session.script.file", path=str(path))
            return self.run_script(handle)

    def run_script(self, stream: TextIO) -> ScriptStatus:
        """Run every statement in ``stream`` until it ends, a quit escape or a cancel."""
        self._check_open()
        self._cancelled = False
        logger.info("session.script.started")
        while True:
            statement = extract_statement(stream)
            if statement is None:
                break
            if is_escape(statement):
                if dispatch(statement, self) is EscapeResult.TERMINATE:
                    logger.info("session.script.terminated")
                    return ScriptStatus.TERMINATED
            else:
                self.run_statement(statement)
            if self._cancelled:
                logger.info("session.script.cancelled")
                return ScriptStatus.CANCELLED
        logger.info("session.script.completed")
        return ScriptStatus.COMPLETED

    def run_statement(self, statement: str) -> None:
        """Execute one statement and render its outcome.

        Driver errors are reported on the sink and swallowed unless the
        session is in debug mode.
        """
        self._check_open()
        statement = statement.strip()
        renderer = self.renderer
        renderer.render_note(f"Executing : <<{statement}>>", self.sink)
        self.sink.flush()

        start_time = time.time()
        try:
            self.cursor.execute(statement)
            if self.cursor.description is not None:
                rows = RowSet(self.cursor, statement)
                renderer.render_rows(rows, self.sink)
                rows.drain()
                kind, count = "rows", rows.row_count
            else:
                count = max(self.cursor.rowcount, 0)
                renderer.render_update(count, self.sink)
                kind = "update"
            if self.autocommit:
                self.connection.commit()
        except self._error_type as e:
            self._trace(statement, start_time, success=False, error=str(e))
            logger.warning("session.statement.failed", statement=statement, error=str(e))
            self._rollback()
            if self.debug:
                raise
            renderer.render_note(f"ERROR: {type(e).__name__}: {e}", self.sink)
        else:
            self._trace(statement, start_time, success=True, kind=kind, count=count)
            logger.debug("session.statement.executed", kind=kind, count=count)
        finally:
            self.sink.write_line()
            self.sink.flush()

    def cancel(self) -> None:
        """Abort the running statement and the rest of its script from another thread.

        Uses the driver's ``interrupt()`` or ``cancel()`` when there is one,
        otherwise closes the connection. Racing a statement that is just
        finishing is left to the caller.
        """
        self._cancelled = True
        for name in ("interrupt", "cancel"):
            method = getattr(self.connection, name, None)
            if callable(method):
                logger.info("session.cancel", method=name)
                method()
                return
        logger.info("session.cancel", method="close")
        self.connection.close()

    def close(self) -> None:
        """Release the cursor, the connection and the output sink."""
        if self._closed:
            return
        self._closed = True
        try:
            self.cursor.close()
            self.connection.close()
        finally:
            self.sink.close()
        logger.info("session.closed")

    # Helpers --------------------------------------------------------------------------
    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Session is closed")

    def _notify(self, message: str, event: str, **fields: Any) -> None:
        self.console.print(message, markup=False)
        logger.info(event, **fields)

    def _rollback(self) -> None:
        if not self.autocommit:
            return
        try:
            self.connection.rollback()
        except self._error_type as e:
            logger.warning("session.rollback.failed", error=str(e))

    def _trace(self, statement: str, start_time: float, **fields: Any) -> None:
        if self.tracer is None:
            return
        elapsed_ms = (time.time() - start_time) * 1000
        self.tracer.trace_statement(statement_text=statement, execution_time_ms=elapsed_ms, **fields)
