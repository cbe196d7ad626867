"""Row set wrapper around an executed DB-API cursor."""

import re
from typing import Any, Iterator, List, Optional, Sequence

DEFAULT_TABLE_NAME = "table"

_IDENT = r'(?:"[^"]+"|`[^`]+`|\[[^\]]+\]|[A-Za-z_][A-Za-z0-9_$]*)'
_FROM_RE = re.compile(r"\bfrom\s+(" + _IDENT + r"(?:\s*\.\s*" + _IDENT + r")*)", re.IGNORECASE)


def table_name_from_statement(statement: Optional[str]) -> str:
    """Best-effort table name: the first ``FROM`` target of the statement."""
    if statement:
        match = _FROM_RE.search(statement)
        if match:
            return re.sub(r"\s+", "", match.group(1))
    return DEFAULT_TABLE_NAME


class RowSet:
    """Rows produced by one statement.

    Iterating fetches rows from the cursor in batches until it is exhausted.
    A row set can be iterated once.
    """

    def __init__(self, cursor: Any, statement: Optional[str] = None, table: Optional[str] = None):
        self._cursor = cursor
        self.columns: List[str] = [column[0] for column in cursor.description or ()]
        self.table = table or table_name_from_statement(statement)
        self.row_count = 0
        self._exhausted = False

    def __iter__(self) -> Iterator[Sequence[Any]]:
        batch_size = getattr(self._cursor, "arraysize", 1) or 1
        batch_size = max(batch_size, 100)
        while not self._exhausted:
            batch = self._cursor.fetchmany(batch_size)
            if not batch:
                self._exhausted = True
                break
            for row in batch:
                self.row_count += 1
                yield row

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def drain(self) -> int:
        """Consume any remaining rows; return how many were skipped."""
        skipped = 0
        for _ in self:
            skipped += 1
        return skipped
