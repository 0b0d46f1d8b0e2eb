"""
Rotation decisions and on-disk backup handling for the rotating file sink.

Everything here is called from the sink's consumer thread only; no locking
is involved. Backups live next to the active file as ``<path>.001`` ..
``<path>.999``.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import BinaryIO

from . import diagnostics
from .errors import RotationExhaustedError, SinkIOError

MAX_BACKUPS = 999


@dataclass(frozen=True)
class RotationTriggers:
    """Thresholds that force a rotation; ``<= 0`` disables a threshold."""

    max_lines: int = 0
    max_bytes: int = 0
    daily: bool = False

    def should_rotate(
        self,
        *,
        lines: int,
        size: int,
        opened_on: date | None,
        today: date,
    ) -> bool:
        if self.max_lines > 0 and lines >= self.max_lines:
            return True
        if self.max_bytes > 0 and size >= self.max_bytes:
            return True
        return self.daily and opened_on is not None and today != opened_on


@dataclass
class BackupScan:
    """Outcome of walking the backup suffixes."""

    backup: Path | None = None
    removed: list[Path] = field(default_factory=list)


def backup_path(path: Path, num: int) -> Path:
    return path.with_name(f"{path.name}.{num:03d}")


def _exists(path: Path) -> os.stat_result | None:
    try:
        return os.lstat(path)
    except FileNotFoundError:
        return None


def scan_backups(
    path: Path,
    *,
    retention_seconds: float = 0.0,
    now: float | None = None,
) -> BackupScan:
    """Pick the first free backup slot and GC expired backups.

    The whole range is always walked: every existing backup older than
    ``retention_seconds`` is deleted, independent of which slot is picked.
    When no slot was free at scan time, the first slot freed by GC is used.
    A backup that cannot be deleted is reported on diagnostics and kept.
    """
    if now is None:
        now = time.time()
    result = BackupScan()
    for num in range(1, MAX_BACKUPS + 1):
        candidate = backup_path(path, num)
        st = _exists(candidate)
        if st is None:
            if result.backup is None:
                result.backup = candidate
            continue
        if retention_seconds > 0 and now - st.st_mtime > retention_seconds:
            try:
                os.remove(candidate)
            except FileNotFoundError:
                pass
            except OSError as exc:
                # Cleanup is best effort; the slot stays occupied
                diagnostics.warn(
                    "rotation",
                    "expired backup not removed",
                    path=str(candidate),
                    error=str(exc),
                )
                continue
            result.removed.append(candidate)
    if result.backup is None and result.removed:
        result.backup = result.removed[0]
    return result


def rotate_out(
    path: Path,
    *,
    retention_seconds: float = 0.0,
    now: float | None = None,
) -> BackupScan | None:
    """Move an existing active file to its backup slot.

    Returns None when there was no file to move.

    Raises:
        RotationExhaustedError: if all backup suffixes are in use.
        SinkIOError: if the rename fails.
    """
    if _exists(path) is None:
        return None
    scan = scan_backups(path, retention_seconds=retention_seconds, now=now)
    if scan.backup is None:
        raise RotationExhaustedError(
            f"cannot find free log number to rename {path}",
            component_name="rotation",
            path=str(path),
        )
    try:
        os.rename(path, scan.backup)
    except OSError as exc:
        raise SinkIOError(
            f"rename {path} -> {scan.backup} failed",
            cause=exc,
            component_name="rotation",
        ) from exc
    return scan


def open_append(path: Path, perm: int) -> BinaryIO:
    """Open (or create) ``path`` for appending with permission bits ``perm``."""
    try:
        fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, perm)
    except OSError as exc:
        raise SinkIOError(
            f"open {path} failed", cause=exc, component_name="rotation"
        ) from exc
    return os.fdopen(fd, "ab")
