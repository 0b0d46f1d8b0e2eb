"""
Internal diagnostics stream.

A sink cannot report its own failures through itself, so consumer errors are
written here instead: one orjson-encoded line per payload on ``sys.stderr``.

- ``error()`` always emits; it is used for fail-stop conditions.
- ``warn()`` emits only when ``core.internal_logging_enabled`` is set.
- ``_rate_limit_key`` suppresses repeats of the same key inside a window.
"""

from __future__ import annotations

import sys
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable

import orjson

Writer = Callable[[dict[str, Any]], None]

_RATE_LIMIT_WINDOW_SECONDS = 10.0

# Cached gate; None means "read settings on next use"
_internal_logging_enabled: bool | None = None
_rate_lock = threading.Lock()
_last_emit: dict[str, float] = {}


def _stderr_writer(payload: dict[str, Any]) -> None:
    line = orjson.dumps(payload, default=str) + b"\n"
    stream = sys.stderr
    buf = getattr(stream, "buffer", None)
    if buf is not None:
        buf.write(line)
    else:
        stream.write(line.decode("utf-8", errors="replace"))
    stream.flush()


_writer: Writer = _stderr_writer


def set_writer_for_tests(writer: Writer) -> None:
    global _writer
    _writer = writer


def _reset_for_tests() -> None:
    global _writer, _internal_logging_enabled
    _writer = _stderr_writer
    _internal_logging_enabled = None
    with _rate_lock:
        _last_emit.clear()


def _is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(
                Settings().core.internal_logging_enabled
            )
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def _rate_limited(key: str | None) -> bool:
    if key is None:
        return False
    now = time.monotonic()
    with _rate_lock:
        last = _last_emit.get(key)
        if last is not None and now - last < _RATE_LIMIT_WINDOW_SECONDS:
            return True
        _last_emit[key] = now
    return False


def _emit(level: str, component: str, message: str, fields: dict[str, Any]) -> None:
    if _rate_limited(fields.pop("_rate_limit_key", None)):
        return
    payload: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "component": component,
        "message": message,
    }
    payload.update(fields)
    try:
        _writer(payload)
    except Exception:
        # Diagnostics must never take the caller down
        pass


def warn(component: str, message: str, **fields: Any) -> None:
    """Emit a non-fatal diagnostic when internal logging is enabled."""
    if not _is_enabled():
        return
    _emit("WARN", component, message, fields)


def error(component: str, message: str, **fields: Any) -> None:
    """Emit a diagnostic unconditionally (sink stopped, data lost)."""
    _emit("ERROR", component, message, fields)
