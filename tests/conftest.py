"""
Shared pytest fixtures and configuration for underbar tests.

This module provides:
- Process-state reset (settings cache, default timer facility, shuffle RNG,
  logging context) for test isolation
- A virtual-clock timer facility for throttle/delay tests
- Call-recording helpers

Usage:
    Fixtures are auto-discovered by pytest; request them by name.

    def test_trailing(timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
"""

from pathlib import Path

import pytest

from underbar.collection.arrays import reset_shuffle_rng
from underbar.core.logging import clear_context, configure_logging
from underbar.core.settings import reset_settings
from underbar.execution.testing import ManualTimerFacility
from underbar.execution.timers import set_default_timers


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit speed marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch, tmp_path: Path):
    """Reset cached settings, default timers, shuffle RNG and log context."""
    # Keep a developer's .env from leaking into tests
    monkeypatch.chdir(tmp_path)
    for name in ("UNDERBAR_LOG_LEVEL", "UNDERBAR_JSON_LOGS", "UNDERBAR_TIMER_BACKEND", "UNDERBAR_SHUFFLE_SEED"):
        monkeypatch.delenv(name, raising=False)

    reset_settings()
    reset_shuffle_rng()
    previous = set_default_timers(None)
    configure_logging(level="DEBUG", json_format=True)
    clear_context()
    yield
    clear_context()
    set_default_timers(previous)
    reset_shuffle_rng()
    reset_settings()


# =============================================================================
# Helpers
# =============================================================================


class Recorder:
    """Callable that records every call and returns a running call count."""

    def __init__(self, result=None):
        self.calls: list[tuple[tuple, dict]] = []
        self._result = result

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self._result is not None:
            return self._result
        return len(self.calls)

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def args(self) -> list[tuple]:
        return [args for args, _ in self.calls]


@pytest.fixture
def recorder() -> Recorder:
    """A fresh call recorder."""
    return Recorder()


@pytest.fixture
def timers() -> ManualTimerFacility:
    """Virtual-clock timer facility starting at t=0ms."""
    return ManualTimerFacility()
