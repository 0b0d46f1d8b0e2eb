"""Core building blocks: records, levels, formatting, queues, rotation."""

from .coalesce import Coalescer
from .concurrency import AdmissionQueue, BackpressurePolicy, SignalSlot
from .errors import (
    ErrorCategory,
    ErrorSeverity,
    RotalogError,
    RotationExhaustedError,
    SinkConstructionError,
    SinkIOError,
)
from .formatting import DEFAULT_FORMAT, format_record
from .levels import Level, to_log_level
from .record import LogRecord
from .settings import CoreSettings, FileSettings, Settings

__all__ = [
    "AdmissionQueue",
    "BackpressurePolicy",
    "Coalescer",
    "CoreSettings",
    "DEFAULT_FORMAT",
    "ErrorCategory",
    "ErrorSeverity",
    "FileSettings",
    "Level",
    "LogRecord",
    "RotalogError",
    "RotationExhaustedError",
    "Settings",
    "SignalSlot",
    "SinkConstructionError",
    "SinkIOError",
    "format_record",
    "to_log_level",
]
