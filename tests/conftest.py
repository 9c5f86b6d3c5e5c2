"""
Shared pytest fixtures and configuration for serial-spine tests.

This module provides:
- Settings cache isolation between tests
- A fresh SerialExecutor per test
- An event recorder for ordering assertions
"""

import os
import sys
from pathlib import Path

import pytest
import structlog

# Ensure serial_spine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from serial_spine.core.settings import get_settings
from serial_spine.execution import SerialExecutor


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Drop cached settings and SERIAL_SPINE_* env vars around each test."""
    for key in list(os.environ):
        if key.startswith("SERIAL_SPINE_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after tests that configure logging."""
    yield
    structlog.reset_defaults()


# =============================================================================
# Executor Fixtures
# =============================================================================


@pytest.fixture
def executor() -> SerialExecutor:
    """A fresh, idle executor."""
    return SerialExecutor(name="test")


class Recorder:
    """Collects ordered (kind, label) events from work items."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []
        self.active = 0
        self.max_active = 0

    def start(self, label: object) -> None:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.events.append(("start", label))

    def end(self, label: object) -> None:
        self.active -= 1
        self.events.append(("end", label))

    def labels(self, kind: str) -> list[object]:
        return [label for k, label in self.events if k == kind]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
