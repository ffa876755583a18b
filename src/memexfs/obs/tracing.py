"""Tool call tracing and latency accounting."""

from __future__ import annotations

import threading
import time
from collections import Counter, deque

from memexfs.types import ToolTrace


class TraceLog:
    """Bounded in-memory log of tool calls for API-level observability.

    Register :meth:`record` as the dispatcher observer. Only the most recent
    ``capacity`` traces are retained; the call counters cover every call.
    Safe to share across the worker threads of a sync HTTP server.
    """

    def __init__(self, capacity: int = 1000) -> None:
        self._records: deque[ToolTrace] = deque(maxlen=capacity)
        self._calls: Counter[str] = Counter()
        self._lock = threading.Lock()

    def record(self, trace: ToolTrace) -> None:
        with self._lock:
            self._records.append(trace)
            self._calls[trace.name] += 1

    def list_recent(self, limit: int = 20) -> list[ToolTrace]:
        if limit <= 0:
            return []
        with self._lock:
            return list(self._records)[-limit:]

    def summary(self) -> dict[str, float | int | dict[str, int]]:
        """Aggregate call metrics for dashboard display."""
        with self._lock:
            records = list(self._records)
            calls = dict(self._calls)
        total = len(records)
        if total == 0:
            return {
                "total_calls": sum(calls.values()),
                "calls_by_tool": calls,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_calls": sum(calls.values()),
            "calls_by_tool": calls,
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
        }


class Timer:
    """Simple context timer."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
