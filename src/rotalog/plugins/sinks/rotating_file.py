"""
Rotating file sink.

Producers hand records to a bounded admission queue; one consumer thread
owns the open file and everything about it:

- consecutive duplicates are coalesced into a single ``"N times: ..."`` line
- before each line is written, the line/byte/daily triggers are checked
  against the wall clock and a rotation runs first if any fires
- rotation writes the trailer, closes the file, moves it to the first free
  ``<path>.NNN`` slot (deleting expired backups on the way), reopens the
  path and writes the header
- ``request_rotation()`` is a signal on a separate single-slot channel
- ``close()`` drains the queue, flushes the pending run, writes the trailer
  and only then returns

Any rotation or I/O error is fatal to the sink: it is reported on the
diagnostics stream and records still queued are lost.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, BinaryIO

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...core import diagnostics
from ...core.coalesce import Coalescer
from ...core.concurrency import BackpressurePolicy
from ...core.errors import RotalogError, SinkConstructionError, SinkIOError
from ...core.formatting import (
    DEFAULT_FORMAT,
    XML_FORMAT,
    XML_HEADER,
    XML_TRAILER,
    format_record,
)
from ...core.record import LogRecord
from ...core.rotation import RotationTriggers, open_append, rotate_out
from ...core.settings import default_queue_capacity
from ...metrics.metrics import MetricsCollector
from ..utils import parse_plugin_config
from ._threaded import SinkStatus, ThreadedSink

__all__ = ["RotatingFileSink", "RotatingFileSinkConfig", "xml_file_sink"]

DEFAULT_PERM = 0o660


def _now() -> datetime:
    # Wall clock used for triggers, headers and trailers
    return datetime.now()


class RotatingFileSinkConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    path: Path
    rotate: bool = False
    discard_when_busy: bool = False
    perm: int = Field(default=DEFAULT_PERM, ge=0, le=0o7777)
    format: str = DEFAULT_FORMAT
    header: str = ""
    trailer: str = ""
    max_lines: int = 0
    max_bytes: int = 0
    daily: bool = False
    retention_seconds: float = 0.0
    queue_capacity: int | None = Field(default=None, ge=1)

    @field_validator("perm")
    @classmethod
    def _default_perm(cls, value: int) -> int:
        return value or DEFAULT_PERM

    @field_validator("retention_seconds", mode="before")
    @classmethod
    def _coerce_retention(cls, value: Any) -> Any:
        if isinstance(value, timedelta):
            return value.total_seconds()
        return value

    @field_validator("path")
    @classmethod
    def _ensure_path(cls, value: Path) -> Path:
        if not str(value).strip() or value.name in ("", ".", ".."):
            raise ValueError("path must name a file")
        return value


class RotatingFileSink(ThreadedSink):
    """Asynchronous line-oriented file sink with rotation and backups."""

    name = "rotating_file"

    def __init__(
        self,
        config: RotatingFileSinkConfig | dict | None = None,
        *,
        metrics: MetricsCollector | None = None,
        **kwargs: Any,
    ) -> None:
        cfg = parse_plugin_config(RotatingFileSinkConfig, config, **kwargs)
        super().__init__(
            queue_capacity=cfg.queue_capacity or default_queue_capacity(),
            policy=(
                BackpressurePolicy.DROP
                if cfg.discard_when_busy
                else BackpressurePolicy.WAIT
            ),
            metrics=metrics,
            accepts_signals=True,
        )
        self._config = cfg
        self._path = cfg.path
        self._triggers = RotationTriggers(
            max_lines=cfg.max_lines, max_bytes=cfg.max_bytes, daily=cfg.daily
        )
        self._coalescer = Coalescer()
        self._file: BinaryIO | None = None
        self._lines = 0
        self._size = 0
        self._opened_on: date | None = None

        # First open happens on the caller's thread so failures surface here
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._rotate()
        except (RotalogError, OSError) as exc:
            diagnostics.error(
                "sink",
                "file sink construction failed",
                sink=self.name,
                path=str(self._path),
                error=str(exc),
            )
            self._abandon()
            raise SinkConstructionError(
                f"cannot open log file {self._path}",
                cause=exc,
                component_name=self.name,
                path=str(self._path),
            ) from exc
        self._start()

    @property
    def config(self) -> RotatingFileSinkConfig:
        return self._config

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lines_since_rotation(self) -> int:
        return self._lines

    @property
    def bytes_since_rotation(self) -> int:
        return self._size

    def request_rotation(self) -> None:
        """Ask the consumer to rotate; returns without waiting.

        Repeated requests before the consumer services them collapse into one.
        """
        if self._signal is not None:
            self._signal.raise_signal()

    # Consumer side -------------------------------------------------------

    def _handle_record(self, record: LogRecord) -> None:
        before = self._coalescer.coalesced
        ready = self._coalescer.offer(record)
        if self._coalescer.coalesced > before:
            self._metrics.record_coalesced(sink=self.name)
        if ready is not None:
            self._emit(ready, check_triggers=True)

    def _handle_signal(self) -> None:
        ready = self._coalescer.flush()
        if ready is not None:
            self._emit(ready, check_triggers=False)
        self._rotate()

    def _finish(self) -> None:
        ready = self._coalescer.flush()
        if ready is not None:
            self._emit(ready, check_triggers=True)
        self._close_file(_now())

    def _abandon(self) -> None:
        fh, self._file = self._file, None
        if fh is not None:
            fh.close()

    def _emit(self, record: LogRecord, *, check_triggers: bool) -> None:
        if check_triggers and self._triggers.should_rotate(
            lines=self._lines,
            size=self._size,
            opened_on=self._opened_on,
            today=_now().date(),
        ):
            self._rotate()
        self._size += self._write(format_record(self._config.format, record))
        self._lines += 1
        self._metrics.record_written(sink=self.name)

    def _write(self, text: str) -> int:
        if not text:
            return 0
        if self._file is None:
            raise SinkIOError(f"{self._path} is not open", component_name=self.name)
        data = text.encode("utf-8")
        try:
            self._file.write(data)
            self._file.flush()
        except OSError as exc:
            raise SinkIOError(
                f"write {self._path} failed", cause=exc, component_name=self.name
            ) from exc
        return len(data)

    def _close_file(self, now: datetime) -> None:
        if self._file is None:
            return
        try:
            self._write(format_record(self._config.trailer, LogRecord.synthetic(now)))
        finally:
            self._abandon()

    def _rotate(self) -> None:
        """Trailer, close, move to backup, reopen, header, reset counters."""
        rotating = self._file is not None
        self._status = SinkStatus.ROTATING
        now = _now()
        self._close_file(now)

        scan = None
        if self._config.rotate:
            scan = rotate_out(
                self._path, retention_seconds=self._config.retention_seconds
            )

        self._file = open_append(self._path, self._config.perm)
        self._write(format_record(self._config.header, LogRecord.synthetic(now)))
        self._opened_on = now.date()
        self._lines = 0
        self._size = 0
        self._status = SinkStatus.OPEN

        removed = len(scan.removed) if scan is not None else 0
        if rotating:
            self._metrics.record_rotation(removed=removed, sink=self.name)
        if removed:
            diagnostics.warn(
                "rotation",
                "expired backups removed",
                sink=self.name,
                path=str(self._path),
                removed=removed,
            )


def xml_file_sink(
    path: str | Path, rotate: bool = False, **kwargs: Any
) -> RotatingFileSink:
    """Rotating file sink writing XML ``<record>`` elements inside ``<log>``."""
    return RotatingFileSink(
        path=Path(path),
        rotate=rotate,
        format=XML_FORMAT,
        header=XML_HEADER,
        trailer=XML_TRAILER,
        **kwargs,
    )
