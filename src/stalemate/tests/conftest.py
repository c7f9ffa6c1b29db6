"""Shared fixtures: every test starts with a fresh registry, settings and logging."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest

from stalemate.foundation.clock import FixedClock
from stalemate.foundation.config import clear_settings_cache
from stalemate.registry import reset_registry
from stalemate.runtime.observability import MemoryRenderer, reset_logging, set_renderer


@pytest.fixture(autouse=True)
def clean_globals() -> Iterator[None]:
    """Reset global registry, settings cache and logging around each test."""
    reset_registry()
    clear_settings_cache()
    reset_logging()
    yield
    reset_registry()
    clear_settings_cache()
    reset_logging()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 1, 10, 0, tzinfo=UTC))


@pytest.fixture
def log_entries() -> MemoryRenderer:
    """Capture structured log output."""
    renderer = MemoryRenderer()
    set_renderer(renderer)
    return renderer
