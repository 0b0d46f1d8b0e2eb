"""
Unix stream socket sink (syslog-ng style).

Each record is sent as ``<tag>,<unix seconds>,<message>\\n``. Sends carry a
timeout so a stalled collector cannot wedge the consumer for long; a failed
send is reported and that record skipped, the sink keeps running.
"""

from __future__ import annotations

import socket
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ...core import diagnostics
from ...core.concurrency import BackpressurePolicy
from ...core.errors import SinkConstructionError
from ...core.record import LogRecord
from ...core.settings import default_queue_capacity
from ...metrics.metrics import MetricsCollector
from ..utils import parse_plugin_config
from ._threaded import ThreadedSink


class SocketSinkConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path
    tag: str
    timeout_seconds: float = Field(default=2.0, gt=0.0)
    discard_when_busy: bool = False
    queue_capacity: int | None = Field(default=None, ge=1)


def format_socket_line(tag: str, record: LogRecord) -> bytes:
    return f"{tag},{int(record.created.timestamp())},{record.message}\n".encode(
        "utf-8"
    )


class SocketSink(ThreadedSink):
    name = "socket"

    def __init__(
        self,
        config: SocketSinkConfig | dict | None = None,
        *,
        metrics: MetricsCollector | None = None,
        **kwargs: Any,
    ) -> None:
        cfg = parse_plugin_config(SocketSinkConfig, config, **kwargs)
        super().__init__(
            queue_capacity=cfg.queue_capacity or default_queue_capacity(),
            policy=(
                BackpressurePolicy.DROP
                if cfg.discard_when_busy
                else BackpressurePolicy.WAIT
            ),
            metrics=metrics,
        )
        self._config = cfg
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(cfg.timeout_seconds)
        try:
            sock.connect(str(cfg.path))
        except OSError as exc:
            sock.close()
            diagnostics.error(
                "sink",
                "socket sink construction failed",
                sink=self.name,
                path=str(cfg.path),
                error=str(exc),
            )
            raise SinkConstructionError(
                f"cannot connect to {cfg.path}",
                cause=exc,
                component_name=self.name,
                path=str(cfg.path),
            ) from exc
        self._sock: socket.socket | None = sock
        self._start()

    def _handle_record(self, record: LogRecord) -> None:
        if self._sock is None:
            return
        try:
            self._sock.sendall(format_socket_line(self._config.tag, record))
        except OSError as exc:
            self._metrics.record_dropped(sink=self.name)
            diagnostics.warn(
                "sink",
                "socket send failed",
                sink=self.name,
                error=str(exc),
                _rate_limit_key="socket-send",
            )
            return
        self._metrics.record_written(sink=self.name)

    def _finish(self) -> None:
        self._abandon()

    def _abandon(self) -> None:
        sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()
