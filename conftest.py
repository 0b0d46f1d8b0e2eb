"""
Root pytest configuration.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "standard: Default risk category for typical unit tests",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests touching the real filesystem end to end",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics() -> Generator[None, None, None]:
    """Reset the diagnostics writer, gate cache and rate limiter per test."""
    from rotalog.core import diagnostics

    diagnostics._reset_for_tests()
    yield
    diagnostics._reset_for_tests()


@pytest.fixture
def captured_diagnostics() -> list[dict[str, Any]]:
    """Collect diagnostics payloads instead of writing them to stderr."""
    from rotalog.core import diagnostics

    captured: list[dict[str, Any]] = []
    diagnostics.set_writer_for_tests(captured.append)
    return captured


@pytest.fixture
def internal_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable warn-level diagnostics for the current test."""
    from rotalog.core import diagnostics

    monkeypatch.setattr(diagnostics, "_internal_logging_enabled", True)
