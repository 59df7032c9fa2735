"""Observability: in-process counters and latency timers for voice turns."""

import threading
import time
from contextlib import contextmanager
from typing import Any

import structlog

logger = structlog.get_logger().bind(source="observability")


class Metrics:
    """Thread-safe counters and timers.

    Upstream calls run in worker threads, so every mutation takes the lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: dict[str, int] = {}
        self._timers: dict[str, list[float]] = {}

    def counter(self, name: str, value: int = 1):
        """Increment a counter by the given value."""
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + value

    def get(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    @contextmanager
    def timer(self, name: str):
        """Context manager recording the wall-clock duration (ms) of the block."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            with self._lock:
                self._timers.setdefault(name, []).append(elapsed_ms)

    def summary(self) -> dict[str, Any]:
        """Return a summary of all collected metrics."""
        with self._lock:
            counters = dict(self._counters)
            timers = {k: list(v) for k, v in self._timers.items()}

        timer_summary = {}
        for name, durations in timers.items():
            if not durations:
                timer_summary[name] = {"count": 0}
                continue
            ordered = sorted(durations)
            p95 = ordered[min(len(ordered) - 1, int(len(ordered) * 0.95))]
            timer_summary[name] = {
                "count": len(ordered),
                "avg_ms": round(sum(ordered) / len(ordered), 1),
                "p95_ms": round(p95, 1),
                "max_ms": round(ordered[-1], 1),
            }
        return {"counters": counters, "timers": timer_summary}

    def reset(self):
        """Clear all metrics."""
        with self._lock:
            self._counters.clear()
            self._timers.clear()


# Module-level singleton
metrics = Metrics()


def log_run_summary():
    """Log the current metrics summary via structlog."""
    logger.info("metrics.summary", **metrics.summary())
