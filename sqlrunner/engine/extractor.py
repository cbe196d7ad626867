"""Statement extraction from a line-oriented SQL script.

A script is a sequence of lines. Blank lines and comment lines (starting
with ``#`` or ``--``) are ignored; every other line is accumulated until a
line ending with the terminator closes the statement.
"""

from typing import Iterator, List, Optional, TextIO

import structlog

logger = structlog.get_logger(__name__)

TERMINATOR = ";"
COMMENT_PREFIXES = ("#", "--")


def is_comment(line: str) -> bool:
    """Return True if the line is a comment line."""
    return line.lstrip().startswith(COMMENT_PREFIXES)


def extract_statement(stream: TextIO) -> Optional[str]:
    """Read the next statement from ``stream``.

    Returns the statement text with the terminator removed and surrounding
    whitespace stripped, or ``None`` once the stream is exhausted without a
    terminated statement. Successive calls resume where the last one stopped.
    """
    parts: List[str] = []

    while True:
        line = stream.readline()
        if not line:
            break

        line = line.rstrip()
        if not line or is_comment(line):
            continue

        if line.strip() == TERMINATOR:
            # A stray ";" closes pending text but never yields an empty statement
            if parts:
                return " ".join(parts).strip()
            continue

        parts.append(line)
        if line.endswith(TERMINATOR):
            return " ".join(parts)[: -len(TERMINATOR)].strip()

    if parts:
        logger.warning("extract.unterminated", text=" ".join(parts))
    return None


def iter_statements(stream: TextIO) -> Iterator[str]:
    """Yield statements from ``stream`` until it is exhausted."""
    while True:
        statement = extract_statement(stream)
        if statement is None:
            return
        yield statement
