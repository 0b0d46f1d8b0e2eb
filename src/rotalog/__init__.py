"""
Public entrypoints for rotalog.

Provides zero-config `get_logger()` and `runtime()`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from ._version import __version__
from .core.levels import Level, to_log_level
from .core.logger import Logger
from .core.record import LogRecord
from .core.settings import Settings
from .core.shutdown import register_logger as _register_logger
from .metrics.metrics import MetricsCollector as _MetricsCollector
from .plugins.sinks import (
    ConsoleSink,
    RotatingFileSink,
    RotatingFileSinkConfig,
    SocketSink,
    xml_file_sink,
)

__all__ = [
    "ConsoleSink",
    "Level",
    "LogRecord",
    "Logger",
    "RotatingFileSink",
    "RotatingFileSinkConfig",
    "Settings",
    "SocketSink",
    "get_logger",
    "runtime",
    "to_log_level",
    "xml_file_sink",
    "__version__",
    "VERSION",
]


def get_logger(
    name: str | None = None,
    *,
    settings: Settings | None = None,
) -> Logger:
    """Return a logger with one default sink chosen from settings.

    When ``file.path`` is configured (``ROTALOG_FILE__PATH``) the logger
    writes to a rotating file sink built from the ``file`` group; otherwise
    it writes to stdout through a console sink at DEBUG and above.

    Example:
        ```python
        from rotalog import get_logger

        logger = get_logger("worker")
        logger.info("started %d jobs", 4)
        logger.close()
        ```

    Loggers are closed from an atexit hook unless
    ``core.atexit_close_enabled`` is off, in which case the caller must call
    ``close()`` to avoid losing queued records.
    """
    cfg = settings or Settings()
    metrics = _MetricsCollector(enabled=cfg.core.enable_metrics)
    logger = Logger(name or "root")

    file_cfg = cfg.file
    if file_cfg.path is not None:
        sink: RotatingFileSink | ConsoleSink = RotatingFileSink(
            RotatingFileSinkConfig(
                path=file_cfg.path,
                rotate=file_cfg.rotate,
                discard_when_busy=file_cfg.discard_when_busy,
                format=file_cfg.format,
                max_lines=file_cfg.max_lines,
                max_bytes=file_cfg.max_bytes,
                daily=file_cfg.daily,
                retention_seconds=file_cfg.retention_seconds,
                queue_capacity=cfg.core.queue_capacity,
            ),
            metrics=metrics,
        )
        logger.add_filter("file", to_log_level(file_cfg.level), sink)
    else:
        sink = ConsoleSink(queue_capacity=cfg.core.queue_capacity, metrics=metrics)
        logger.add_filter("stdout", Level.DEBUG, sink)

    if cfg.core.atexit_close_enabled:
        _register_logger(logger)
    return logger


@contextmanager
def runtime(*, settings: Settings | None = None) -> Iterator[Logger]:
    """Context manager that builds the default logger and closes it on exit.

    Closing drains every sink, so all records logged inside the block are
    written when the block ends.
    """
    logger = get_logger(settings=settings)
    try:
        yield logger
    finally:
        logger.close()


VERSION = __version__
