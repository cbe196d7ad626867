"""Result renderers for executed statements.

Three interchangeable strategies turn a statement outcome (rows or an update
count) into text, HTML or SQL ``INSERT`` statements. Renderers are stateless:
the session hands them its current sink on every call.
"""

import html
import math
import re
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Protocol, Sequence, Union

from .rowset import RowSet
from .sink import OutputSink


class OutputMode(str, Enum):
    """Output modes selectable with ``\\m`` or ``--mode``."""

    TEXT = "t"
    HTML = "h"
    SQL = "s"

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: Union["OutputMode", str, None]) -> "OutputMode":
        """Resolve a mode from an ``OutputMode``, a code or a name."""
        if isinstance(value, cls):
            return value
        key = (value or "").lower()
        for mode in cls:
            if key in (mode.value, mode.label):
                return mode
        raise ValueError(f"invalid mode: {value!r}; must be t, h or s")


class ResultRenderer(Protocol):
    """Capability shared by every output mode."""

    name: str

    def render_update(self, count: int, out: OutputSink) -> None: ...

    def render_rows(self, rows: RowSet, out: OutputSink) -> None: ...

    def render_note(self, text: str, out: OutputSink) -> None: ...


def _plural(count: int) -> str:
    return f"{count} row{'' if count == 1 else 's'}"


class TextRenderer:
    """Plain text: one line per row, columns separated by ``DELIMITER``."""

    name = "text"
    DELIMITER = " | "
    NULL = "(null)"

    def format_value(self, value: Any) -> str:
        if value is None:
            return self.NULL
        if isinstance(value, bytes):
            return value.hex()
        return str(value)

    def render_update(self, count: int, out: OutputSink) -> None:
        out.write_line(f"{_plural(count)} affected")

    def render_rows(self, rows: RowSet, out: OutputSink) -> None:
        header = self.DELIMITER.join(rows.columns)
        out.write_line(header)
        out.write_line("-" * len(header))
        count = 0
        for row in rows:
            out.write_line(self.DELIMITER.join(self.format_value(v) for v in row))
            count += 1
        out.write_line(f"({_plural(count)})")

    def render_note(self, text: str, out: OutputSink) -> None:
        out.write_line(text)


class HtmlRenderer:
    """An HTML table per row set."""

    name = "html"
    NULL = "<i>(null)</i>"

    def format_value(self, value: Any) -> str:
        if value is None:
            return self.NULL
        if isinstance(value, bytes):
            return value.hex()
        return html.escape(str(value))

    def render_update(self, count: int, out: OutputSink) -> None:
        out.write_line(f"<p>{_plural(count)} affected</p>")

    def render_rows(self, rows: RowSet, out: OutputSink) -> None:
        out.write_line('<table border="1">')
        out.write_line(self._row("th", (html.escape(c) for c in rows.columns)))
        for row in rows:
            out.write_line(self._row("td", (self.format_value(v) for v in row)))
        out.write_line("</table>")

    def render_note(self, text: str, out: OutputSink) -> None:
        out.write_line(f"<p>{html.escape(text)}</p>")

    @staticmethod
    def _row(tag: str, cells: Iterable[str]) -> str:
        return "<tr>" + "".join(f"<{tag}>{cell}</{tag}>" for cell in cells) + "</tr>"


_PLAIN_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_QUOTED_IDENTIFIER = re.compile(r'^(?:"[^"]+"|`[^`]+`|\[[^\]]+\])$')


class SqlRenderer:
    """``INSERT`` statements that re-create the rows in an identical table."""

    name = "sql"
    NULL = "NULL"

    def format_identifier(self, name: str) -> str:
        parts = name.split(".") if not _QUOTED_IDENTIFIER.match(name) else [name]
        return ".".join(self._identifier_part(part) for part in parts)

    @staticmethod
    def _identifier_part(part: str) -> str:
        if _PLAIN_IDENTIFIER.match(part) or _QUOTED_IDENTIFIER.match(part):
            return part
        return '"' + part.replace('"', '""') + '"'

    def format_value(self, value: Any) -> str:
        if value is None:
            return self.NULL
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, (float, Decimal)) and not math.isfinite(value):
            # SQL has no infinity literal; an overflowing one reads back as infinity
            if math.isnan(value):
                return self.NULL
            return "9e999" if value > 0 else "-9e999"
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return "X'" + bytes(value).hex().upper() + "'"
        if isinstance(value, (datetime, date, time)):
            value = value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
        return "'" + str(value).replace("'", "''") + "'"

    def insert_statement(self, table: str, columns: Sequence[str], row: Sequence[Any]) -> str:
        names = ", ".join(self.format_identifier(c) for c in columns)
        values = ", ".join(self.format_value(v) for v in row)
        return f"INSERT INTO {self.format_identifier(table)}({names}) VALUES({values});"

    def render_update(self, count: int, out: OutputSink) -> None:
        self.render_note(f"{_plural(count)} affected", out)

    def render_rows(self, rows: RowSet, out: OutputSink) -> None:
        for row in rows:
            out.write_line(self.insert_statement(rows.table, rows.columns, row))

    def render_note(self, text: str, out: OutputSink) -> None:
        for line in text.splitlines() or [""]:
            out.write_line(f"-- {line}")


RENDERERS: Dict[OutputMode, ResultRenderer] = {
    OutputMode.TEXT: TextRenderer(),
    OutputMode.HTML: HtmlRenderer(),
    OutputMode.SQL: SqlRenderer(),
}


def get_renderer(mode: Union[OutputMode, str]) -> ResultRenderer:
    """Return the renderer for ``mode`` (``ValueError`` if unknown)."""
    return RENDERERS[OutputMode.parse(mode)]
