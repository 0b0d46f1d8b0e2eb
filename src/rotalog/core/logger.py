"""
Logger facade: fans records out to named sink filters.

Each filter pairs a minimum level with a sink. One immutable
:class:`LogRecord` is built per call and the same reference is handed to
every sink whose threshold it meets.
"""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from . import diagnostics
from .levels import Level
from .record import LogRecord
from .shutdown import unregister_logger

if TYPE_CHECKING:
    from ..plugins.sinks import BaseSink


@dataclass(frozen=True)
class Filter:
    level: Level
    sink: BaseSink


class Logger:
    """Thread-safe front end over a set of sinks.

    A record dispatched while another thread runs ``close()`` or
    ``delete_filter()`` is dropped for the sinks being closed.
    """

    def __init__(self, name: str = "root") -> None:
        self._name = name
        self._filters: dict[str, Filter] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    def filters(self) -> dict[str, Filter]:
        with self._lock:
            return dict(self._filters)

    def add_filter(self, name: str, level: Level, sink: BaseSink) -> None:
        """Route records at ``level`` or above to ``sink`` under ``name``.

        Raises:
            ValueError: if ``name`` is already registered.
            RuntimeError: if the logger is closed.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("logger is closed")
            if name in self._filters:
                raise ValueError(f"filter '{name}' already exists")
            self._filters[name] = Filter(level=level, sink=sink)

    def delete_filter(self, name: str) -> bool:
        """Remove a filter and close its sink. Returns False if unknown."""
        with self._lock:
            removed = self._filters.pop(name, None)
        if removed is None:
            return False
        removed.sink.close()
        return True

    def log(
        self,
        level: Level,
        message: str,
        *args: Any,
        source: str | None = None,
        stacklevel: int = 1,
    ) -> None:
        with self._lock:
            if self._closed:
                return
            targets = [f.sink for f in self._filters.values() if level >= f.level]
        if not targets:
            return
        if args:
            message = message % args
        if source is None:
            source = _caller_source(stacklevel + 1)
        record = LogRecord(
            level=level, created=datetime.now(), source=source, message=message
        )
        for sink in targets:
            try:
                sink.write(record)
            except RuntimeError:
                # Sink closed by a concurrent close() or delete_filter()
                if self._is_registered(sink):
                    raise

    def _is_registered(self, sink: BaseSink) -> bool:
        with self._lock:
            return any(f.sink is sink for f in self._filters.values())

    def finest(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.FINEST, message, *args, stacklevel=2, **kwargs)

    def fine(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.FINE, message, *args, stacklevel=2, **kwargs)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.DEBUG, message, *args, stacklevel=2, **kwargs)

    def trace(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.TRACE, message, *args, stacklevel=2, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.INFO, message, *args, stacklevel=2, **kwargs)

    def warn(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.WARNING, message, *args, stacklevel=2, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.ERROR, message, *args, stacklevel=2, **kwargs)

    def critical(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.CRITICAL, message, *args, stacklevel=2, **kwargs)

    def alarm(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.ALARM, message, *args, stacklevel=2, **kwargs)

    def rotate(self) -> None:
        """Request rotation on every sink that supports it."""
        for f in self.filters().values():
            request = getattr(f.sink, "request_rotation", None)
            if request is not None:
                request()

    def close(self) -> None:
        """Close every sink once; later calls do nothing."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            filters = list(self._filters.items())
            self._filters.clear()
        for name, f in filters:
            try:
                f.sink.close()
            except Exception as exc:
                diagnostics.error(
                    "logger", "sink close failed", filter=name, error=str(exc)
                )
        unregister_logger(self)


def _caller_source(depth: int) -> str:
    """``module:lineno`` of the frame ``depth`` levels above this function."""
    try:
        frame = sys._getframe(depth)
    except ValueError:
        return "?"
    return f"{frame.f_globals.get('__name__', '?')}:{frame.f_lineno}"
