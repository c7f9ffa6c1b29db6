"""When should a loader refresh itself?

A RefreshConfig answers one question: given the time of the last refresh
attempt, how long until the next one is due. A negative delay means the data
is already stale.

Example:
    >>> config = StalePeriodRefreshConfig(timedelta(minutes=5), clock=clock)
    >>> config.is_stale(clock.now() - timedelta(minutes=10))
    True
    >>> daily = TimeOfDayRefreshConfig(time(hour=4), clock=clock)  # every day at 04:00
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, time, timedelta

from stalemate.foundation.clock import Clock, default_clock


class RefreshConfig(ABC):
    """Abstract refresh schedule."""

    __slots__ = ("_clock",)

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or default_clock()

    @property
    def clock(self) -> Clock:
        return self._clock

    @abstractmethod
    def next_refresh_delay(self, last_refresh: datetime) -> timedelta:
        """Time from now until the next refresh is due (negative when overdue)."""
        ...

    def is_stale(self, last_refresh: datetime) -> bool:
        return self.next_refresh_delay(last_refresh) < timedelta(0)


class StalePeriodRefreshConfig(RefreshConfig):
    """Data goes stale a fixed period after the last refresh.

    Args:
        stale_period: How long data stays fresh
        clock: Time source (defaults to the system clock)
    """

    __slots__ = ("stale_period",)

    def __init__(self, stale_period: timedelta, clock: Clock | None = None) -> None:
        if stale_period <= timedelta(0):
            raise ValueError(f"stale_period must be positive, got {stale_period}")
        super().__init__(clock)
        self.stale_period = stale_period

    def next_refresh_delay(self, last_refresh: datetime) -> timedelta:
        return self.stale_period - (self._clock.now() - last_refresh)

    def __repr__(self) -> str:
        return f"StalePeriodRefreshConfig(stale_period={self.stale_period})"


class TimeOfDayRefreshConfig(RefreshConfig):
    """Data goes stale once a day at a fixed wall-clock time.

    The time is interpreted in the clock's timezone. If the last refresh
    already happened after today's refresh time, the next one is tomorrow.

    Args:
        refresh_time: Time of day to refresh at (seconds are ignored)
        clock: Time source (defaults to the system clock)
    """

    __slots__ = ("refresh_time",)

    def __init__(self, refresh_time: time, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self.refresh_time = refresh_time

    def next_refresh_delay(self, last_refresh: datetime) -> timedelta:
        now = self._clock.now()
        next_refresh = now.replace(
            hour=self.refresh_time.hour, minute=self.refresh_time.minute, second=0, microsecond=0,
        )
        if last_refresh > next_refresh:
            next_refresh += timedelta(days=1)
        return next_refresh - now

    def __repr__(self) -> str:
        return f"TimeOfDayRefreshConfig(refresh_time={self.refresh_time.strftime('%H:%M')})"
