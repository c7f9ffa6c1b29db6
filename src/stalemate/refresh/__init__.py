"""Refresh scheduling, coalescing and results."""

from .config import RefreshConfig, StalePeriodRefreshConfig, TimeOfDayRefreshConfig
from .refresher import StaleMateRefresher
from .result import RefreshResult, RefreshStatus

__all__ = [
    "RefreshConfig",
    "StalePeriodRefreshConfig",
    "TimeOfDayRefreshConfig",
    "StaleMateRefresher",
    "RefreshResult",
    "RefreshStatus",
]
