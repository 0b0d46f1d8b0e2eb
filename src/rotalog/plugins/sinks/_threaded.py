"""
Shared consumer machinery for sinks.

Every sink owns one admission queue and exactly one consumer thread. The
consumer is the only code that touches the sink's destination (file handle,
stream, socket), so the destination needs no lock of its own.

Consumer states::

    OPEN -> ROTATING -> OPEN        (rotation, file sinks only)
    OPEN -> CLOSING -> CLOSED       (queue closed and drained)
    any  -> FAILED                  (terminal; queued records are lost)
"""

from __future__ import annotations

import threading
from enum import Enum

from ...core import diagnostics
from ...core.concurrency import AdmissionQueue, BackpressurePolicy, SignalSlot
from ...core.errors import RotalogError
from ...core.record import LogRecord
from ...metrics.metrics import MetricsCollector


class SinkStatus(str, Enum):
    OPEN = "open"
    ROTATING = "rotating"
    FAILED = "failed"
    CLOSING = "closing"
    CLOSED = "closed"


class _Message(Enum):
    RECORD = "record"
    SIGNAL = "signal"
    CLOSE = "close"


class ThreadedSink:
    """Base class wiring an :class:`AdmissionQueue` to one consumer thread.

    Subclasses implement ``_handle_record`` and ``_finish`` and, when they
    accept signals, ``_handle_signal``. ``_abandon`` releases the destination
    after a failure. Subclasses call ``_start()`` once their destination is
    ready.
    """

    name = "threaded"

    def __init__(
        self,
        *,
        queue_capacity: int,
        policy: BackpressurePolicy = BackpressurePolicy.WAIT,
        metrics: MetricsCollector | None = None,
        accepts_signals: bool = False,
    ) -> None:
        self._queue: AdmissionQueue[LogRecord] = AdmissionQueue(
            queue_capacity, policy=policy
        )
        self._signal: SignalSlot | None = (
            self._queue.new_signal() if accepts_signals else None
        )
        self._metrics = metrics or MetricsCollector()
        self._status = SinkStatus.OPEN
        self._done = threading.Event()
        self._thread: threading.Thread | None = None
        self._prefer_signal = False

    @property
    def status(self) -> SinkStatus:
        return self._status

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def dropped(self) -> int:
        return self._queue.dropped

    def _start(self) -> None:
        self._thread = threading.Thread(
            target=self._run, name=f"rotalog-{self.name}", daemon=True
        )
        self._thread.start()

    def write(self, record: LogRecord) -> None:
        """Admit ``record``; blocks or drops per the admission policy."""
        self._metrics.record_submitted(sink=self.name)
        if not self._queue.put(record):
            self._metrics.record_dropped(sink=self.name)

    def close(self) -> None:
        """Signal end of input and wait until the consumer has finished.

        Must be called exactly once; ``write`` after ``close`` is an error.
        """
        self._queue.close()
        self._done.wait()
        if self._thread is not None:
            self._thread.join()

    def _next_message(self) -> tuple[_Message, LogRecord | None]:
        while True:
            self._queue.wait_ready(self._signal)
            signal_ready = self._signal is not None and self._signal.pending
            record_ready = not self._queue.is_empty()
            if signal_ready and record_ready:
                # Both ready: alternate so neither channel starves
                take_signal = self._prefer_signal
                self._prefer_signal = not self._prefer_signal
            else:
                take_signal = signal_ready
            if take_signal and self._signal is not None and self._signal.consume():
                return _Message.SIGNAL, None
            ok, record = self._queue.try_dequeue()
            if ok and record is not None:
                return _Message.RECORD, record
            if self._queue.closed and not (
                self._signal is not None and self._signal.pending
            ):
                return _Message.CLOSE, None

    def _run(self) -> None:
        try:
            while True:
                kind, record = self._next_message()
                if kind is _Message.RECORD and record is not None:
                    self._handle_record(record)
                elif kind is _Message.SIGNAL:
                    self._handle_signal()
                else:
                    self._status = SinkStatus.CLOSING
                    self._finish()
                    self._status = SinkStatus.CLOSED
                    return
        except Exception as exc:
            self._fail(exc)
        finally:
            self._done.set()

    def _fail(self, exc: Exception) -> None:
        self._status = SinkStatus.FAILED
        self._metrics.record_sink_error(sink=self.name)
        if isinstance(exc, RotalogError):
            detail = exc.to_dict()
        else:
            detail = {"error_type": type(exc).__name__, "message": str(exc)}
        diagnostics.error(
            "sink",
            "sink stopped",
            sink=self.name,
            unconsumed=self._queue.qsize(),
            error=detail,
        )
        try:
            self._abandon()
        except Exception as cleanup_exc:
            diagnostics.warn(
                "sink",
                "cleanup after failure failed",
                sink=self.name,
                error=str(cleanup_exc),
            )

    def _handle_record(self, record: LogRecord) -> None:
        raise NotImplementedError

    def _handle_signal(self) -> None:
        return None

    def _finish(self) -> None:
        raise NotImplementedError

    def _abandon(self) -> None:
        return None
