"""
Console sink.

Writes one formatted line per record to standard output from the sink's
consumer thread. Records are neither coalesced nor rotated.
"""

from __future__ import annotations

import sys
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ...core.concurrency import BackpressurePolicy
from ...core.formatting import format_record
from ...core.record import LogRecord
from ...core.settings import default_queue_capacity
from ...metrics.metrics import MetricsCollector
from ..utils import parse_plugin_config
from ._threaded import ThreadedSink

CONSOLE_FORMAT = "[%d %T] [%L] (%S) %M"


class ConsoleSinkConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    format: str = CONSOLE_FORMAT
    discard_when_busy: bool = False
    queue_capacity: int | None = Field(default=None, ge=1)


class ConsoleSink(ThreadedSink):
    """Stdout sink: one formatted line per record, flushed as written.

    - No rotation and no coalescing
    - ``sys.stdout`` is resolved per write so redirection is honored
    """

    name = "console"

    def __init__(
        self,
        config: ConsoleSinkConfig | dict | None = None,
        *,
        metrics: MetricsCollector | None = None,
        **kwargs: Any,
    ) -> None:
        cfg = parse_plugin_config(ConsoleSinkConfig, config, **kwargs)
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
        self._start()

    def _handle_record(self, record: LogRecord) -> None:
        out = sys.stdout
        out.write(format_record(self._config.format, record))
        out.flush()
        self._metrics.record_written(sink=self.name)

    def _finish(self) -> None:
        sys.stdout.flush()
