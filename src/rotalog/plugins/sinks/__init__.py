from __future__ import annotations

from typing import Protocol, runtime_checkable

from ...core.record import LogRecord
from ._threaded import SinkStatus, ThreadedSink
from .console import ConsoleSink, ConsoleSinkConfig
from .rotating_file import RotatingFileSink, RotatingFileSinkConfig, xml_file_sink
from .unix_socket import SocketSink, SocketSinkConfig


@runtime_checkable
class BaseSink(Protocol):
    """Base sink interface.

    Sinks consume records on their own consumer and persist them to a
    destination (console, file, socket). ``write`` must return quickly per
    the sink's admission policy; consumer errors never reach the caller.
    ``close`` drains, releases the destination, and must be called once.
    """

    def write(self, record: LogRecord) -> None:  # noqa: D401
        """Hand a single record to the sink."""
        ...

    def close(self) -> None: ...


@runtime_checkable
class RotatableSink(BaseSink, Protocol):
    def request_rotation(self) -> None: ...


__all__ = [
    "BaseSink",
    "ConsoleSink",
    "ConsoleSinkConfig",
    "RotatableSink",
    "RotatingFileSink",
    "RotatingFileSinkConfig",
    "SinkStatus",
    "SocketSink",
    "SocketSinkConfig",
    "ThreadedSink",
    "xml_file_sink",
]
