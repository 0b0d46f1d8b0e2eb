from __future__ import annotations

from pathlib import Path

import pytest

import rotalog
from rotalog import Level, Settings, get_logger, runtime
from rotalog.core import shutdown
from rotalog.plugins.sinks import ConsoleSink, RotatingFileSink


def test_version_exposed() -> None:
    assert rotalog.__version__ == rotalog.VERSION


def test_default_logger_uses_console(capsys: pytest.CaptureFixture[str]) -> None:
    logger = get_logger("console-test")
    filters = logger.filters()
    assert list(filters) == ["stdout"]
    assert isinstance(filters["stdout"].sink, ConsoleSink)
    assert filters["stdout"].level is Level.DEBUG
    logger.info("to stdout")
    logger.close()
    assert "to stdout" in capsys.readouterr().out


def test_file_logger_from_settings(tmp_path: Path) -> None:
    path = tmp_path / "app.log"
    settings = Settings(
        file={"path": path, "level": "warn", "format": "%L %M", "max_lines": 2}
    )
    logger = get_logger(settings=settings)
    sink = logger.filters()["file"].sink
    assert isinstance(sink, RotatingFileSink)
    assert sink.config.rotate is True
    logger.info("filtered out")
    for i in range(3):
        logger.warn("w%d", i)
    logger.close()
    assert path.with_name("app.log.001").read_text().splitlines() == [
        "WARN w0",
        "WARN w1",
    ]
    assert path.read_text().splitlines() == ["WARN w2"]


def test_file_logger_from_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "env.log"
    monkeypatch.setenv("ROTALOG_FILE__PATH", str(path))
    monkeypatch.setenv("ROTALOG_FILE__FORMAT", "%M")
    with runtime() as logger:
        logger.error("from env")
    assert path.read_text() == "from env\n"


def test_atexit_registration_follows_settings() -> None:
    logger = get_logger(settings=Settings(core={"atexit_close_enabled": False}))
    try:
        assert logger not in set(shutdown._registered_loggers)
    finally:
        logger.close()

    logger = get_logger()
    try:
        assert logger in set(shutdown._registered_loggers)
    finally:
        logger.close()
    assert logger not in set(shutdown._registered_loggers)


def test_runtime_closes_logger() -> None:
    with runtime() as logger:
        pass
    assert logger.closed
