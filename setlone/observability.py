"""In-memory observability helpers for uptime and request latency."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from time import perf_counter


@dataclass
class RequestMetricsSnapshot:
    """Snapshot of aggregate request timing metrics."""

    request_count: int
    error_count: int
    average_ms: float
    max_ms: float
    last_ms: float


class RuntimeObservability:
    """Tracks process start and request latency."""

    def __init__(self):
        self.process_started_at = datetime.now(timezone.utc)
        self._request_count = 0
        self._error_count = 0
        self._request_total_ms = 0.0
        self._request_max_ms = 0.0
        self._request_last_ms = 0.0
        self._lock = Lock()

    def mark_request_timing(self, elapsed_ms: float, failed: bool = False):
        """Record request timing in milliseconds."""
        with self._lock:
            self._request_count += 1
            if failed:
                self._error_count += 1
            self._request_total_ms += elapsed_ms
            self._request_last_ms = elapsed_ms
            if elapsed_ms > self._request_max_ms:
                self._request_max_ms = elapsed_ms

    def request_metrics(self) -> RequestMetricsSnapshot:
        with self._lock:
            average = 0.0 if self._request_count == 0 else self._request_total_ms / self._request_count
            return RequestMetricsSnapshot(
                request_count=self._request_count,
                error_count=self._error_count,
                average_ms=round(average, 3),
                max_ms=round(self._request_max_ms, 3),
                last_ms=round(self._request_last_ms, 3),
            )

    def uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self.process_started_at).total_seconds()


class RequestTimer:
    """Small helper for request timing."""

    def __init__(self):
        self._started = perf_counter()

    def elapsed_ms(self) -> float:
        return (perf_counter() - self._started) * 1000
