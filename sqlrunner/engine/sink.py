"""Output sink: where rendered results are written."""

import sys
from pathlib import Path
from typing import Optional, TextIO, Union

import structlog

logger = structlog.get_logger(__name__)


class OutputSink:
    """The current destination for rendered output.

    Writes go to a default stream (stdout unless given) until the sink is
    redirected to a file. Redirecting again or resetting closes the file that
    was current; the default stream is only ever flushed.
    """

    def __init__(self, default: Optional[TextIO] = None):
        self._default = default if default is not None else sys.stdout
        self._file: Optional[TextIO] = None
        self._path: Optional[Path] = None
        self._closed = False

    @property
    def stream(self) -> TextIO:
        return self._file if self._file is not None else self._default

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, text: str) -> None:
        self.stream.write(text)

    def write_line(self, text: str = "") -> None:
        self.stream.write(text + "\n")

    def flush(self) -> None:
        self.stream.flush()

    def redirect(self, path: Union[str, Path]) -> Path:
        """Send output to ``path``, truncating or creating it."""
        target = Path(path)
        handle = open(target, "w", encoding="utf-8")
        self._release_current()
        self._file = handle
        self._path = target.resolve()
        logger.debug("sink.redirected", path=str(self._path))
        return self._path

    def reset(self) -> None:
        """Send output back to the default stream."""
        self._release_current()

    def close(self) -> None:
        if self._closed:
            return
        self._release_current()
        self._closed = True

    def _release_current(self) -> None:
        if self._file is not None:
            self._file.flush()
            self._file.close()
            logger.debug("sink.closed", path=str(self._path))
            self._file = None
            self._path = None
        self._default.flush()
