from __future__ import annotations

import os
import stat
import time
from datetime import date
from pathlib import Path

import pytest

from rotalog.core.errors import RotationExhaustedError, SinkIOError
from rotalog.core.rotation import (
    MAX_BACKUPS,
    RotationTriggers,
    backup_path,
    open_append,
    rotate_out,
    scan_backups,
)

pytestmark = pytest.mark.critical


class TestTriggers:
    def test_disabled_thresholds_never_fire(self) -> None:
        t = RotationTriggers()
        assert not t.should_rotate(
            lines=10**6, size=10**9, opened_on=date(2024, 1, 1), today=date(2025, 1, 1)
        )

    def test_line_threshold(self) -> None:
        t = RotationTriggers(max_lines=3)
        today = date(2024, 1, 1)
        assert not t.should_rotate(lines=2, size=0, opened_on=today, today=today)
        assert t.should_rotate(lines=3, size=0, opened_on=today, today=today)

    def test_byte_threshold(self) -> None:
        t = RotationTriggers(max_bytes=100)
        today = date(2024, 1, 1)
        assert not t.should_rotate(lines=0, size=99, opened_on=today, today=today)
        assert t.should_rotate(lines=0, size=100, opened_on=today, today=today)

    def test_daily_compares_calendar_date(self) -> None:
        t = RotationTriggers(daily=True)
        # same day-of-month, different month
        assert t.should_rotate(
            lines=0, size=0, opened_on=date(2024, 1, 5), today=date(2024, 2, 5)
        )
        assert not t.should_rotate(
            lines=0, size=0, opened_on=date(2024, 1, 5), today=date(2024, 1, 5)
        )


class TestBackupScan:
    def test_backup_names(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        assert backup_path(path, 1).name == "app.log.001"
        assert backup_path(path, 999).name == "app.log.999"

    def test_first_missing_suffix_is_chosen(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        backup_path(path, 1).write_text("x")
        backup_path(path, 3).write_text("x")
        scan = scan_backups(path)
        assert scan.backup == backup_path(path, 2)
        assert scan.removed == []

    def test_expired_backups_removed_across_whole_range(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        old = time.time() - 3600
        expired = backup_path(path, 2)
        expired.write_text("old")
        os.utime(expired, (old, old))
        fresh = backup_path(path, 5)
        fresh.write_text("new")

        scan = scan_backups(path, retention_seconds=60)
        assert scan.backup == backup_path(path, 1)
        assert scan.removed == [expired]
        assert not expired.exists()
        assert fresh.exists()

    def test_freed_slot_used_when_range_full(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        for num in range(1, MAX_BACKUPS + 1):
            backup_path(path, num).write_text("x")
        old = time.time() - 3600
        os.utime(backup_path(path, 7), (old, old))
        scan = scan_backups(path, retention_seconds=60)
        assert scan.backup == backup_path(path, 7)


class TestRotateOut:
    def test_missing_active_file_is_noop(self, tmp_path: Path) -> None:
        assert rotate_out(tmp_path / "absent.log") is None

    def test_moves_active_file(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        path.write_text("content")
        scan = rotate_out(path)
        assert scan is not None
        assert not path.exists()
        assert backup_path(path, 1).read_text() == "content"

    def test_exhausted_range_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        path.write_text("active")
        for num in range(1, MAX_BACKUPS + 1):
            backup_path(path, num).write_text("x")
        with pytest.raises(RotationExhaustedError):
            rotate_out(path)
        assert path.read_text() == "active"


class TestOpenAppend:
    def test_appends_and_applies_permissions(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        path.write_bytes(b"first\n")
        old_umask = os.umask(0)
        try:
            fh = open_append(tmp_path / "new.log", 0o640)
        finally:
            os.umask(old_umask)
        fh.close()
        assert stat.S_IMODE(os.stat(tmp_path / "new.log").st_mode) == 0o640

        fh = open_append(path, 0o660)
        fh.write(b"second\n")
        fh.close()
        assert path.read_bytes() == b"first\nsecond\n"

    def test_open_failure_raises_sink_io_error(self, tmp_path: Path) -> None:
        with pytest.raises(SinkIOError):
            open_append(tmp_path / "missing-dir" / "app.log", 0o660)
