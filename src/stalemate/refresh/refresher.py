"""Automatic refresh scheduling and refresh coalescing.

The refresher owns the single in-flight refresh of a loader. Calls to
refresh() made while one is running join it and receive the same result, so
a loader never has two remote fetches racing each other.

With a RefreshConfig it also schedules the next refresh on the running event
loop (``loop.call_later``). The last refresh time is updated after every
attempt, successful or not, before the next one is scheduled.

Lifecycle:
    start()   begin automatic scheduling (needs a running loop)
    pause()   stop the timer, e.g. while the host application is backgrounded
    resume()  refresh at once if stale, otherwise reschedule
    dispose() stop for good
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Generic, TypeVar

from stalemate.foundation.clock import Clock, default_clock

from .config import RefreshConfig

R = TypeVar("R")

logger = logging.getLogger("stalemate.refresh")


class StaleMateRefresher(Generic[R]):
    """Runs ``on_refresh`` at most once at a time and on a schedule.

    Args:
        on_refresh: Coroutine function performing one refresh
        config: Automatic refresh schedule (None = manual refresh only)
        clock: Time source for staleness checks

    Example:
        >>> refresher = StaleMateRefresher(fetch, StalePeriodRefreshConfig(timedelta(minutes=5)))
        >>> refresher.start()
        >>> result = await refresher.refresh()  # manual refresh, also resets the timer
    """

    __slots__ = (
        "_on_refresh", "_config", "_clock", "_last_refresh",
        "_task", "_timer", "_started", "_paused", "_disposed",
    )

    def __init__(
        self,
        on_refresh: Callable[[], Awaitable[R]],
        config: RefreshConfig | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._on_refresh = on_refresh
        self._config = config
        self._clock = clock or default_clock()
        self._last_refresh = self._clock.now()
        self._task: asyncio.Task[R] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._started = False
        self._paused = False
        self._disposed = False

    # ─── State ──────────────────────────────────────────────────────

    @property
    def config(self) -> RefreshConfig | None:
        return self._config

    @property
    def supports_auto_refresh(self) -> bool:
        return self._config is not None

    @property
    def last_refresh(self) -> datetime:
        return self._last_refresh

    @property
    def is_stale(self) -> bool:
        return self._config is not None and self._config.is_stale(self._last_refresh)

    @property
    def is_refreshing(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_scheduled(self) -> bool:
        return self._timer is not None

    @property
    def _active(self) -> bool:
        return self._started and not self._paused and not self._disposed and self._config is not None

    # ─── Refresh ────────────────────────────────────────────────────

    async def refresh(self) -> R:
        """Start a refresh, or join the one already running."""
        return await asyncio.shield(self._ensure_task())

    def invalidate(self) -> None:
        """Forget the in-flight refresh so the next refresh() starts a new one.

        The forgotten task keeps running; its owner is expected to discard
        its result.
        """
        self._task = None

    def _ensure_task(self) -> asyncio.Task[R]:
        task = self._task
        if task is None or task.done():
            task = self._task = asyncio.get_running_loop().create_task(self._run())
            task.add_done_callback(_log_failure)
        return task

    async def _run(self) -> R:
        try:
            return await self._on_refresh()
        finally:
            if self._task is asyncio.current_task():
                self._task = None
            self._last_refresh = self._clock.now()
            self._schedule()

    # ─── Scheduling ─────────────────────────────────────────────────

    def start(self) -> None:
        """Begin automatic refreshes. No-op without a config."""
        if self._disposed:
            return
        self._started = True
        self._schedule()

    def pause(self) -> None:
        self._paused = True
        self._cancel_timer()

    def resume(self) -> None:
        self._paused = False
        if not self._active:
            return
        if self.is_stale:
            self._fire()
        else:
            self._schedule()

    def disable_auto_refresh(self) -> None:
        """Drop the schedule permanently; manual refresh() keeps working."""
        self._config = None
        self._cancel_timer()

    def dispose(self) -> None:
        self._disposed = True
        self._cancel_timer()
        self._task = None

    def _schedule(self) -> None:
        self._cancel_timer()
        if not self._active:
            return
        assert self._config is not None
        if self.is_stale:
            self._fire()
            return
        delay = self._config.next_refresh_delay(self._last_refresh)
        logger.debug("Next refresh in %.1fs", delay.total_seconds())
        self._timer = asyncio.get_running_loop().call_later(delay.total_seconds(), self._fire)

    def _fire(self) -> None:
        self._timer = None
        if self._active:
            self._ensure_task()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __repr__(self) -> str:
        return f"StaleMateRefresher(config={self._config!r}, last_refresh={self._last_refresh.isoformat()})"


def _log_failure(task: asyncio.Task[object]) -> None:
    if task.cancelled():
        return
    if (exc := task.exception()) is not None:
        logger.error("Refresh raised %s: %s", type(exc).__name__, exc)
