"""Time source abstraction.

Everything in stalemate that depends on "now" (refresh scheduling, refresh
results, fetch-more timings) reads the time through a Clock so tests can pin
and advance it deterministically.

Example:
    >>> clock = FixedClock(datetime(2024, 1, 1, 12, 0, tzinfo=UTC))
    >>> clock.advance(timedelta(minutes=5))
    >>> clock.now().minute
    5
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol for time sources."""

    def now(self) -> datetime: ...


class SystemClock:
    """Clock backed by the system time (timezone-aware, local zone)."""

    __slots__ = ()

    def now(self) -> datetime:
        return datetime.now().astimezone()

    def __repr__(self) -> str:
        return "SystemClock()"


class FixedClock:
    """Clock that only moves when told to. Intended for tests.

    Args:
        now: Initial time (defaults to the current UTC time)
    """

    __slots__ = ("_now",)

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime.now(tz=UTC)

    def now(self) -> datetime:
        return self._now

    def set_now(self, now: datetime) -> None:
        self._now = now

    def advance(self, delta: timedelta) -> None:
        self._now = self._now + delta

    def __repr__(self) -> str:
        return f"FixedClock({self._now.isoformat()})"


_default_clock: Clock = SystemClock()


def default_clock() -> Clock:
    """Shared SystemClock used when no clock is injected."""
    return _default_clock
