"""SQLRunner execution engine."""

from .escapes import ESCAPE_PREFIX, EscapeDirective, EscapeError, EscapeResult, dispatch, parse_escape
from .extractor import extract_statement, iter_statements
from .render import (
    HtmlRenderer,
    OutputMode,
    ResultRenderer,
    SqlRenderer,
    TextRenderer,
    get_renderer,
)
from .rowset import RowSet
from .sink import OutputSink
from .tracing import ExecutionTracer, TraceRecord

__all__ = [
    "ESCAPE_PREFIX",
    "EscapeDirective",
    "EscapeError",
    "EscapeResult",
    "dispatch",
    "parse_escape",
    "extract_statement",
    "iter_statements",
    "HtmlRenderer",
    "OutputMode",
    "ResultRenderer",
    "SqlRenderer",
    "TextRenderer",
    "get_renderer",
    "RowSet",
    "OutputSink",
    "ExecutionTracer",
    "TraceRecord",
]
