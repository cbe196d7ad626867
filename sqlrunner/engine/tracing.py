"""Per-statement run traces, written as JSON lines."""

import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

OutcomeKind = Literal["rows", "update"]


class TraceRecord(BaseModel):
    """What happened to one statement."""
    trace_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    run_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    statement_index: int
    statement_text: str
    success: bool
    kind: Optional[OutcomeKind] = None
    count: Optional[int] = None
    execution_time_ms: float
    error: Optional[str] = None


class ExecutionTracer:
    """Collects a record for every statement a session executes."""

    def __init__(self, run_id: Optional[str] = None):
        self.run_id = run_id or uuid.uuid4().hex
        self.traces: List[TraceRecord] = []
        self.started = time.monotonic()

    def trace_statement(
        self,
        statement_text: str,
        success: bool,
        execution_time_ms: float,
        kind: Optional[OutcomeKind] = None,
        count: Optional[int] = None,
        error: Optional[str] = None,
    ) -> TraceRecord:
        record = TraceRecord(
            run_id=self.run_id,
            statement_index=len(self.traces),
            statement_text=statement_text,
            success=success,
            kind=kind,
            count=count,
            execution_time_ms=execution_time_ms,
            error=error,
        )
        self.traces.append(record)
        return record

    def write_trace_file(self, trace_dir: str) -> Path:
        """Write one JSON line per record into ``trace_dir``; returns the file."""
        directory = Path(trace_dir).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = directory / f"run_{stamp}_{self.run_id[:8]}.jsonl"
        path.write_text("".join(record.model_dump_json() + "\n" for record in self.traces), encoding="utf-8")
        return path

    def get_summary(self) -> Dict[str, Any]:
        totals = {"rows": 0, "update": 0}
        failed = 0
        busy_ms = 0.0
        for record in self.traces:
            busy_ms += record.execution_time_ms
            if not record.success:
                failed += 1
            elif record.kind is not None:
                totals[record.kind] += record.count or 0

        return {
            "run_id": self.run_id,
            "total_statements": len(self.traces),
            "successful_statements": len(self.traces) - failed,
            "failed_statements": failed,
            "rows_returned": totals["rows"],
            "rows_affected": totals["update"],
            "total_time_seconds": round(time.monotonic() - self.started, 3),
            "total_execution_time_ms": round(busy_ms, 3),
        }
