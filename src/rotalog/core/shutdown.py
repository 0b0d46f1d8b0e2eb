"""Process-exit handling for rotalog loggers.

Sink consumers run on daemon threads, so records still queued at interpreter
exit would be lost. Loggers registered here are closed from an ``atexit``
hook, which drains every sink they own.

Registration uses a WeakSet so it never keeps a logger alive.
"""

from __future__ import annotations

import atexit
import weakref
from typing import TYPE_CHECKING, Any

from . import diagnostics

if TYPE_CHECKING:
    from .logger import Logger


_shutdown_in_progress: bool = False
_registered_loggers: weakref.WeakSet[Any] = weakref.WeakSet()


def register_logger(logger: Logger) -> None:
    """Register a logger to be closed at interpreter exit."""
    _registered_loggers.add(logger)


def unregister_logger(logger: Logger) -> None:
    """Unregister a logger; called once it was closed explicitly."""
    _registered_loggers.discard(logger)


def registered_count() -> int:
    return len(_registered_loggers)


def _atexit_handler() -> None:
    """Close every still-registered logger. Never raises."""
    global _shutdown_in_progress

    if _shutdown_in_progress:
        return
    _shutdown_in_progress = True

    # Snapshot; WeakSet iteration can fail if GC runs mid-loop
    loggers = list(_registered_loggers)
    for logger in loggers:
        try:
            logger.close()
        except Exception as exc:
            diagnostics.warn(
                "shutdown",
                "logger close failed at exit",
                logger=getattr(logger, "name", "?"),
                error=str(exc),
            )


atexit.register(_atexit_handler)
