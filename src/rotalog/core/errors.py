"""
Error hierarchy for rotalog sinks.

Errors raised inside a sink's consumer never reach producers; the consumer
reports them once through :mod:`rotalog.core.diagnostics` and stops. Only
construction failures are raised to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


class ErrorCategory(str, Enum):
    CONFIG = "config"
    ROTATION = "rotation"
    IO = "io"
    SINK = "sink"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Metadata attached to every :class:`RotalogError`."""

    category: ErrorCategory
    severity: ErrorSeverity
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    component_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def create_error_context(
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    *,
    component_name: str | None = None,
    **metadata: Any,
) -> ErrorContext:
    return ErrorContext(
        category=category,
        severity=severity,
        component_name=component_name,
        metadata=dict(metadata),
    )


class RotalogError(Exception):
    """Base error carrying a structured :class:`ErrorContext`."""

    default_category: ErrorCategory = ErrorCategory.SINK
    default_severity: ErrorSeverity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        cause: BaseException | None = None,
        component_name: str | None = None,
        **metadata: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = create_error_context(
            category or self.default_category,
            severity or self.default_severity,
            component_name=component_name,
            **metadata,
        )
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for diagnostics output."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "error_id": self.context.error_id,
            "category": self.context.category.value,
            "severity": self.context.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        if self.context.component_name:
            data["component"] = self.context.component_name
        if self.context.metadata:
            data.update({k: str(v) for k, v in self.context.metadata.items()})
        if self.__cause__ is not None:
            data["cause"] = f"{type(self.__cause__).__name__}: {self.__cause__}"
        return data


class SinkConstructionError(RotalogError):
    """The sink could not acquire its resource; no usable sink exists."""

    default_category = ErrorCategory.SINK
    default_severity = ErrorSeverity.HIGH


class RotationExhaustedError(RotalogError):
    """Every backup suffix ``.001``..``.999`` is taken."""

    default_category = ErrorCategory.ROTATION
    default_severity = ErrorSeverity.CRITICAL


class SinkIOError(RotalogError):
    """Open, rename, write or close of the sink's resource failed."""

    default_category = ErrorCategory.IO
    default_severity = ErrorSeverity.CRITICAL
