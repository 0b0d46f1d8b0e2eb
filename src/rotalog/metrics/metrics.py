"""
Sink activity metrics.

Implements minimal Prometheus-compatible counters for the admission queue and
the rotating file sink.

Design goals:
- Safe to call from producer threads and the consumer thread alike
- Zero global state; every collector owns an isolated registry
- In-memory counters are always kept so tests can assert on them even when
  Prometheus export is disabled
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter


@dataclass
class SinkMetrics:
    """Captured counters for quick assertions in tests."""

    records_submitted: int = 0
    records_dropped: int = 0
    records_written: int = 0
    records_coalesced: int = 0
    rotations: int = 0
    backups_removed: int = 0
    sink_errors: int = 0


_COUNTERS: dict[str, str] = {
    "records_submitted": "Total number of records offered to sinks",
    "records_dropped": "Records discarded because the admission queue was full",
    "records_written": "Lines written by sinks",
    "records_coalesced": "Duplicate records folded into a coalesced line",
    "rotations": "Completed file rotations",
    "backups_removed": "Expired backup files deleted during rotation",
    "sink_errors": "Fatal sink errors",
}


class MetricsCollector:
    """Thread-safe metrics collector.

    If metrics are disabled, only the in-memory counters are updated.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = SinkMetrics()
        self._registry: CollectorRegistry | None = None
        self._counters: dict[str, Any] = {}

        if self._enabled:
            # Isolated registry to avoid global duplication in tests
            self._registry = CollectorRegistry()
            for field_name, doc in _COUNTERS.items():
                self._counters[field_name] = Counter(
                    f"rotalog_{field_name}_total",
                    doc,
                    ["sink"],
                    registry=self._registry,
                )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def _inc(self, field_name: str, count: int, sink: str | None) -> None:
        if count <= 0:
            return
        with self._lock:
            setattr(self._state, field_name, getattr(self._state, field_name) + count)
        counter = self._counters.get(field_name)
        if counter is not None:
            counter.labels(sink=sink or "unknown").inc(count)

    def record_submitted(self, count: int = 1, *, sink: str | None = None) -> None:
        self._inc("records_submitted", count, sink)

    def record_dropped(self, count: int = 1, *, sink: str | None = None) -> None:
        self._inc("records_dropped", count, sink)

    def record_written(self, count: int = 1, *, sink: str | None = None) -> None:
        self._inc("records_written", count, sink)

    def record_coalesced(self, count: int = 1, *, sink: str | None = None) -> None:
        self._inc("records_coalesced", count, sink)

    def record_rotation(self, *, removed: int = 0, sink: str | None = None) -> None:
        self._inc("rotations", 1, sink)
        self._inc("backups_removed", removed, sink)

    def record_sink_error(self, *, sink: str | None = None) -> None:
        self._inc("sink_errors", 1, sink)

    def snapshot(self) -> SinkMetrics:
        with self._lock:
            return SinkMetrics(**vars(self._state))
