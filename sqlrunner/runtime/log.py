"""Structured logging with structlog."""

import logging
import sys
from typing import Union

import structlog


def _stderr_logger(*args) -> structlog.PrintLogger:
    # Resolved per call: sys.stderr may be swapped after configuration
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: Union[str, int] = "WARNING") -> None:
    """Route structlog output to stderr, filtered at ``level``.

    Rendered results go to stdout, so log lines must never share it.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
