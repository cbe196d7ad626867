"""Escape directives embedded in a script.

An escape is a statement starting with a backslash followed by a one-letter
code and an optional argument::

    \\mh;              switch output to HTML
    \\o/tmp/out.txt;   send output to a file
    \\q;               stop the script
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

import structlog

if TYPE_CHECKING:
    from ..runtime.session import Session

logger = structlog.get_logger(__name__)

ESCAPE_PREFIX = "\\"

CODE_MODE = "m"
CODE_OUTPUT = "o"
CODE_QUIT = "q"


class EscapeError(ValueError):
    """Raised for an unknown escape or a missing required argument."""


class EscapeResult(Enum):
    CONTINUE = "continue"
    TERMINATE = "terminate"


@dataclass(frozen=True)
class EscapeDirective:
    code: str
    argument: Optional[str] = None

    def __str__(self) -> str:
        return f"{ESCAPE_PREFIX}{self.code}{self.argument or ''}"


def is_escape(statement: str) -> bool:
    return statement.startswith(ESCAPE_PREFIX)


def parse_escape(statement: str) -> EscapeDirective:
    """Split an escape statement into its code and verbatim argument."""
    if not is_escape(statement):
        raise EscapeError(f"Not an escape: {statement}")
    if len(statement) < 2:
        raise EscapeError(f"Unknown escape: {statement}")
    argument = statement[2:] if len(statement) > 2 else None
    return EscapeDirective(code=statement[1], argument=argument)


def dispatch(escape: Union[str, EscapeDirective], session: "Session") -> EscapeResult:
    """Apply an escape directive to ``session``."""
    directive = escape if isinstance(escape, EscapeDirective) else parse_escape(escape)
    logger.debug("escape.dispatch", code=directive.code, argument=directive.argument)

    if directive.code == CODE_MODE:
        if directive.argument is None:
            raise EscapeError(f"{ESCAPE_PREFIX}{CODE_MODE} needs output mode arg")
        session.set_output_mode(directive.argument)
    elif directive.code == CODE_OUTPUT:
        if directive.argument is None:
            raise EscapeError(f"{ESCAPE_PREFIX}{CODE_OUTPUT} needs output file arg")
        session.set_output_file(directive.argument)
    elif directive.code == CODE_QUIT:
        return EscapeResult.TERMINATE
    else:
        raise EscapeError(f"Unknown escape: {directive}")

    return EscapeResult.CONTINUE
