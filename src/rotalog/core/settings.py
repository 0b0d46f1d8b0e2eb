"""
Configuration models for rotalog using Pydantic v2 Settings.

Values come from keyword arguments or ``ROTALOG_``-prefixed environment
variables, nested with ``__`` (for example ``ROTALOG_CORE__QUEUE_CAPACITY``
or ``ROTALOG_FILE__PATH``).
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .formatting import DEFAULT_FORMAT

DEFAULT_QUEUE_CAPACITY = 32


class CoreSettings(BaseModel):
    """Process-wide defaults shared by every sink."""

    queue_capacity: int = Field(
        default=DEFAULT_QUEUE_CAPACITY,
        ge=1,
        description="Default admission queue capacity for sinks without an override",
    )
    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit warning diagnostics for non-fatal internal errors",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Expose Prometheus counters for sink activity",
    )
    atexit_close_enabled: bool = Field(
        default=True,
        description="Close registered loggers from an atexit hook",
    )


class FileSettings(BaseModel):
    """Rotating file sink used by ``get_logger()`` when ``path`` is set."""

    path: Path | None = Field(default=None, description="Active log file path")
    level: str = Field(default="debug", description="Minimum level written")
    rotate: bool = Field(default=True, description="Keep numbered backups")
    discard_when_busy: bool = Field(
        default=False, description="Drop records instead of blocking when full"
    )
    format: str = Field(default=DEFAULT_FORMAT, description="Line pattern")
    max_lines: int = Field(default=0, description="Rotate after N lines (<=0 off)")
    max_bytes: int = Field(default=0, description="Rotate after N bytes (<=0 off)")
    daily: bool = Field(default=False, description="Rotate on calendar day change")
    retention_seconds: float = Field(
        default=0.0, description="Delete backups older than this (<=0 off)"
    )

    @field_validator("level")
    @classmethod
    def _ensure_level_non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("level must not be empty")
        return value


class Settings(BaseSettings):
    """Top-level configuration model."""

    core: CoreSettings = Field(default_factory=CoreSettings)
    file: FileSettings = Field(default_factory=FileSettings)

    model_config = SettingsConfigDict(
        env_prefix="ROTALOG_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(mode="json", exclude_none=True),
        )


def default_queue_capacity() -> int:
    """Resolve the process-wide queue capacity, tolerating bad env values."""
    try:
        return Settings().core.queue_capacity
    except Exception:
        return DEFAULT_QUEUE_CAPACITY
