"""Tests for clock, error taxonomy and settings."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from stalemate.foundation.clock import Clock, FixedClock, SystemClock, default_clock
from stalemate.foundation.config import StaleMateSettings, clear_settings_cache, get_settings
from stalemate.foundation.errors import (
    Err,
    ErrorKind,
    LoaderError,
    NoLocalDataError,
    NotSupportedError,
    Ok,
    PartialFetchError,
    StaleMateError,
    classify_exception,
)
from stalemate.foundation.types import DataSource


# ═════════════════════════════════════════════════════════════════════════════
# Clock
# ═════════════════════════════════════════════════════════════════════════════


def test_fixed_clock_only_moves_when_told() -> None:
    start = datetime(2024, 3, 1, 8, 30, tzinfo=UTC)
    clock = FixedClock(start)

    assert clock.now() == start
    clock.advance(timedelta(minutes=90))
    assert clock.now() == datetime(2024, 3, 1, 10, 0, tzinfo=UTC)
    clock.set_now(start)
    assert clock.now() == start


def test_system_clock_is_timezone_aware() -> None:
    now = SystemClock().now()

    assert now.tzinfo is not None
    assert isinstance(default_clock(), Clock)
    assert isinstance(FixedClock(), Clock)


# ═════════════════════════════════════════════════════════════════════════════
# Errors
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (NoLocalDataError(), ErrorKind.NO_LOCAL_DATA),
        (NotSupportedError("nope"), ErrorKind.NOT_SUPPORTED),
        (NotImplementedError(), ErrorKind.NOT_SUPPORTED),
        (ConnectionError("offline"), ErrorKind.FETCH_FAILED),
        (StaleMateError("generic"), ErrorKind.FETCH_FAILED),
    ],
)
def test_classify_exception(exc: Exception, kind: ErrorKind) -> None:
    assert classify_exception(exc) is kind


def test_loader_error_from_exception() -> None:
    cause = TimeoutError("took too long")
    error = LoaderError.from_exception(cause, source=DataSource.REMOTE)

    assert error.kind is ErrorKind.FETCH_FAILED
    assert error.message == "took too long"
    assert error.cause is cause
    assert error.details is None
    assert error.recoverable
    assert "[FETCH_FAILED]" in str(error)
    assert "remote" in error.render()


def test_loader_error_kind_override_and_trace() -> None:
    try:
        raise OSError("disk full")
    except OSError as exc:
        error = LoaderError.from_exception(
            exc, source=DataSource.LOCAL, kind=ErrorKind.PERSIST_FAILED, include_trace=True,
        )

    assert error.kind is ErrorKind.PERSIST_FAILED
    assert error.details is not None and "OSError" in error.details


def test_loader_error_is_frozen() -> None:
    error = LoaderError.from_exception(NotSupportedError(), source=DataSource.REMOTE)

    assert not error.recoverable
    assert error.message == "NotSupportedError"
    with pytest.raises(ValidationError):
        error.message = "changed"  # type: ignore[misc]


def test_partial_fetch_error_carries_results() -> None:
    boom = ValueError("boom")
    error = PartialFetchError([Ok(1), Err(boom), Ok(3)])

    assert error.errors == [boom]
    assert error.kind is ErrorKind.FETCH_FAILED
    assert "1 of 3" in str(error)


# ═════════════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════════════


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STALEMATE_LOG_LEVEL", raising=False)
    settings = StaleMateSettings()

    assert settings.update_on_init is True
    assert settings.logging.level == "none"
    assert settings.logging.format == "console"
    assert settings.refresh.stale_period is None


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STALEMATE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("STALEMATE_LOG_FORMAT", "json")
    monkeypatch.setenv("STALEMATE_REFRESH_STALE_PERIOD_SECONDS", "300")
    monkeypatch.setenv("STALEMATE_UPDATE_ON_INIT", "0")

    settings = StaleMateSettings()

    assert settings.logging.level == "debug"
    assert settings.logging.format == "json"
    assert settings.refresh.stale_period == timedelta(minutes=5)
    assert settings.update_on_init is False


def test_settings_are_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("STALEMATE_UPDATE_ON_INIT", "false")
    assert get_settings().update_on_init is first.update_on_init

    clear_settings_cache()
    assert get_settings().update_on_init is False


def test_invalid_settings_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STALEMATE_REFRESH_STALE_PERIOD_SECONDS", "-1")

    with pytest.raises(ValueError):
        StaleMateSettings()
