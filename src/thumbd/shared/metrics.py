"""Metrics collection for the worker."""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Any, Iterator, List


class MetricsCollector:
    """
    Collects durations and counters for job processing.
    Implements IMetricsCollector protocol.

    Rendition units report from worker threads, so every mutation goes
    through a lock and timers are keyed by the caller's start mark rather
    than by name.
    """

    def __init__(self):
        self._start_time = time.monotonic()
        self._lock = threading.Lock()
        self._metrics: Dict[str, List[float]] = defaultdict(list)
        self._counters: Dict[str, int] = defaultdict(int)

    def start_timer(self, name: str) -> float:
        """Start a timer and return its start mark."""
        return time.monotonic()

    def stop_timer(self, name: str, started: float) -> float:
        """
        Record the time elapsed since `started`.

        Args:
            name: Timer name, recorded as ``<name>_duration``
            started: Value returned by `start_timer`

        Returns:
            Elapsed time in seconds
        """
        elapsed = time.monotonic() - started
        self.record_metric(f"{name}_duration", elapsed)
        return elapsed

    @contextmanager
    def timed(self, name: str) -> Iterator[None]:
        """Time the enclosed block, whether or not it raises."""
        started = self.start_timer(name)
        try:
            yield
        finally:
            self.stop_timer(name, started)

    def record_metric(self, name: str, value: float) -> None:
        """Record a metric value."""
        with self._lock:
            self._metrics[name].append(value)

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        with self._lock:
            self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        with self._lock:
            return self._counters.get(name, 0)

    def get_metric(self, name: str) -> list:
        """Get all values for a metric."""
        with self._lock:
            return list(self._metrics.get(name, []))

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary of all metrics.

        Returns:
            Dictionary with metric summaries
        """
        with self._lock:
            counters = dict(self._counters)
            metrics = {name: list(values) for name, values in self._metrics.items()}

        summary = {
            "total_elapsed": self.elapsed_time(),
            "counters": counters,
            "metrics": {}
        }

        for name, values in metrics.items():
            if values:
                summary["metrics"][name] = {
                    "count": len(values),
                    "sum": sum(values),
                    "avg": sum(values) / len(values),
                    "min": min(values),
                    "max": max(values),
                }

        return summary

    def elapsed_time(self) -> float:
        """Get total elapsed time since initialization."""
        return time.monotonic() - self._start_time

    def log_summary(self, logger) -> None:
        """Write a formatted summary of metrics to `logger`."""
        summary = self.get_summary()
        logger.info(f"Uptime: {summary['total_elapsed']:.2f}s")

        for name, value in sorted(summary['counters'].items()):
            logger.info(f"  {name}: {value}")

        for name, data in sorted(summary['metrics'].items()):
            logger.info(
                f"  {name}: count={data['count']} avg={data['avg']:.3f} "
                f"min={data['min']:.3f} max={data['max']:.3f}"
            )
