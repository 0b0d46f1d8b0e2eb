"""
Log record value type.

A record is produced once by the caller and handed by reference to every
sink that accepts it, so it must never be mutated after creation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from .levels import Level


@dataclass(frozen=True, slots=True)
class LogRecord:
    """Immutable unit of work flowing from producers to sinks."""

    level: Level
    created: datetime
    source: str
    message: str

    @classmethod
    def synthetic(cls, now: datetime) -> LogRecord:
        """Timestamp-only record used to render headers and trailers."""
        return cls(level=Level.FINEST, created=now, source="", message="")

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.source, self.message)

    def with_message(self, message: str) -> LogRecord:
        return replace(self, message=message)

    def to_dict(self) -> dict[str, str]:
        """Convert record to a plain mapping (diagnostics, debugging)."""
        return {
            "level": self.level.label,
            "created": self.created.isoformat(),
            "source": self.source,
            "message": self.message,
        }
