"""Latency timing and token accounting for completion calls."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(slots=True)
class CallTrace:
    """Trace record for one successful completion call."""

    model: str
    prompt_tokens: int
    completion_tokens: int
    latency_ms: float
    timestamp_utc: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class UsageTracker:
    """In-memory usage metrics across completion calls.

    The gateway may be shared by a concurrent summarize and ask, so recording
    is guarded by a lock.
    """

    def __init__(self) -> None:
        self._records: list[CallTrace] = []
        self._lock = threading.Lock()

    def record(self, trace: CallTrace) -> None:
        with self._lock:
            self._records.append(trace)

    def list_recent(self, limit: int = 20) -> list[CallTrace]:
        with self._lock:
            return list(self._records[-limit:])

    def summary(self) -> dict[str, float | int]:
        """Aggregate call metrics for dashboard display."""
        with self._lock:
            records = list(self._records)
        total = len(records)
        if total == 0:
            return {
                "total_calls": 0,
                "avg_latency_ms": 0.0,
                "total_prompt_tokens": 0,
                "total_completion_tokens": 0,
            }

        return {
            "total_calls": total,
            "avg_latency_ms": sum(record.latency_ms for record in records) / total,
            "total_prompt_tokens": sum(record.prompt_tokens for record in records),
            "total_completion_tokens": sum(record.completion_tokens for record in records),
        }


class Timer:
    """Simple context timer used around network calls."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
