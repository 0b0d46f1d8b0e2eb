from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from rotalog.core.settings import (
    DEFAULT_QUEUE_CAPACITY,
    Settings,
    default_queue_capacity,
)


class TestDefaults:
    def test_defaults(self) -> None:
        s = Settings()
        assert s.core.queue_capacity == DEFAULT_QUEUE_CAPACITY == 32
        assert s.core.internal_logging_enabled is False
        assert s.core.atexit_close_enabled is True
        assert s.file.path is None
        assert s.file.rotate is True

    def test_to_dict_excludes_unset_path(self) -> None:
        data = Settings().to_dict()
        assert "path" not in data["file"]  # type: ignore[operator]


class TestEnvironment:
    def test_nested_env_values(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("ROTALOG_CORE__QUEUE_CAPACITY", "8")
        monkeypatch.setenv("ROTALOG_FILE__PATH", str(tmp_path / "app.log"))
        monkeypatch.setenv("ROTALOG_FILE__MAX_LINES", "100")
        s = Settings()
        assert s.core.queue_capacity == 8
        assert s.file.path == tmp_path / "app.log"
        assert s.file.max_lines == 100
        assert default_queue_capacity() == 8

    def test_invalid_capacity_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ROTALOG_CORE__QUEUE_CAPACITY", "0")
        with pytest.raises(ValidationError):
            Settings()

    def test_default_capacity_tolerates_bad_env(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ROTALOG_CORE__QUEUE_CAPACITY", "not-a-number")
        assert default_queue_capacity() == DEFAULT_QUEUE_CAPACITY

    def test_empty_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(file={"level": "  "})
