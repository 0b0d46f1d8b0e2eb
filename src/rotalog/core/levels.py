"""Severity levels for log records.

Levels form a total order so a sink threshold can be compared with ``<=``.
Each level also carries the fixed four-character tag written by the
``%L`` pattern verb.

Example:
    from rotalog.core.levels import Level, to_log_level

    to_log_level("warn")          # Level.WARNING
    to_log_level("bogus")         # Level.TRACE (default)
    Level.ERROR > Level.INFO      # True
    Level.ERROR.label             # "EROR"
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class Level(IntEnum):
    FINEST = 0
    FINE = 1
    DEBUG = 2
    TRACE = 3
    INFO = 4
    WARNING = 5
    ERROR = 6
    CRITICAL = 7
    ALARM = 8

    @property
    def label(self) -> str:
        """Four-character tag used in formatted output."""
        return _LABELS[self]

    def __str__(self) -> str:
        return self.label


_LABELS: Final[dict[Level, str]] = {
    Level.FINEST: "FNST",
    Level.FINE: "FINE",
    Level.DEBUG: "DEBG",
    Level.TRACE: "TRAC",
    Level.INFO: "INFO",
    Level.WARNING: "WARN",
    Level.ERROR: "EROR",
    Level.CRITICAL: "CRIT",
    Level.ALARM: "ALRM",
}

_NAMES: Final[dict[str, Level]] = {
    "finest": Level.FINEST,
    "fine": Level.FINE,
    "debug": Level.DEBUG,
    "trace": Level.TRACE,
    "info": Level.INFO,
    "warn": Level.WARNING,
    "warning": Level.WARNING,
    "error": Level.ERROR,
    "critical": Level.CRITICAL,
    "alarm": Level.ALARM,
}


def to_log_level(name: str, default: Level = Level.TRACE) -> Level:
    """Parse a level name (case-insensitive).

    Args:
        name: Level name such as ``"info"`` or ``"WARN"``.
        default: Returned for names that are not recognized.

    Returns:
        The matching level, or ``default``.
    """
    return _NAMES.get(name.strip().lower(), default)


def get_all_levels() -> dict[str, Level]:
    """Return every accepted level name and the level it maps to."""
    return dict(_NAMES)
