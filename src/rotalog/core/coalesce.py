"""
Consecutive-duplicate coalescing.

A tight loop logging the same ``(source, message)`` would otherwise fill the
file with identical lines. The coalescer holds back the most recent distinct
record and counts how many times it repeats; the run is released as a single
record once something different arrives or the owner flushes.
"""

from __future__ import annotations

from .record import LogRecord


def annotate(record: LogRecord, occurrences: int) -> LogRecord:
    """Embed the occurrence count of a run into its message."""
    if occurrences <= 1:
        return record
    return record.with_message(f"{occurrences} times: {record.message}")


class Coalescer:
    """Single-entry accumulator for repeated records.

    Not thread-safe: owned by exactly one sink consumer.
    """

    __slots__ = ("_pending", "_repeats", "_coalesced")

    def __init__(self) -> None:
        self._pending: LogRecord | None = None
        self._repeats = 0
        self._coalesced = 0

    @property
    def pending(self) -> LogRecord | None:
        return self._pending

    @property
    def repeats(self) -> int:
        """Duplicates seen after the pending record (0 for a single record)."""
        return self._repeats

    @property
    def coalesced(self) -> int:
        """Total duplicates suppressed since creation."""
        return self._coalesced

    def offer(self, record: LogRecord) -> LogRecord | None:
        """Accept ``record`` and return the entry now ready to be written.

        Returns None when ``record`` repeats the pending one, or when there
        was nothing pending yet.
        """
        if self._pending is not None and self._pending.dedup_key == record.dedup_key:
            self._repeats += 1
            self._coalesced += 1
            return None
        ready = self.flush()
        self._pending = record
        return ready

    def flush(self) -> LogRecord | None:
        """Remove and return the pending entry, annotated if it repeated."""
        if self._pending is None:
            return None
        ready = annotate(self._pending, self._repeats + 1)
        self._pending = None
        self._repeats = 0
        return ready
