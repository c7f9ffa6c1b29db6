"""stalemate: stale-while-revalidate data loaders for asyncio.

A loader exposes one value backed by a fast local cache and a slower remote
source, reconciled into a single stream of states. Show cached data at once,
replace it when fresh data arrives, keep the last good value when a fetch
fails.

Quick Start:
    >>> from stalemate import StaleMateHandler, StaleMateLoader, Loaded, Error
    >>>
    >>> class GreetingHandler(StaleMateHandler[str]):
    ...     empty_value = ""
    ...     async def get_local_data(self) -> str: return await cache.read("greeting")
    ...     async def store_local_data(self, value: str) -> None: await cache.write("greeting", value)
    ...     async def remove_local_data(self) -> None: await cache.delete("greeting")
    ...     async def get_remote_data(self) -> str: return await api.greeting()
    >>>
    >>> loader = await StaleMateLoader.create(GreetingHandler())
    >>> loader.value
    'hello'

Modules:
    loader      handler contract, states, the loader itself
    refresh     automatic refresh schedules and refresh results
    registry    application-wide refresh/reset of live loaders
    pagination  page/offset/cursor pagination and fetch_more()
    runtime     concurrent execution, structured logging
    foundation  clock, errors, result type, settings
"""

from __future__ import annotations

from .foundation import (
    Clock,
    DataSource,
    Err,
    ErrorKind,
    FixedClock,
    LoaderError,
    NoLocalDataError,
    NotSupportedError,
    Ok,
    PartialFetchError,
    Result,
    StaleMateError,
    StaleMateSettings,
    SystemClock,
    classify_exception,
    clear_settings_cache,
    get_settings,
    partition_results,
)
from .loader import (
    BatchedRemoteHandler,
    Error,
    Initial,
    Loaded,
    LoaderState,
    Loading,
    LocalOnlyHandler,
    RemoteOnlyHandler,
    StaleMateHandler,
    StaleMateLoader,
    StateStatus,
    StateSubject,
)
from .pagination import (
    CursorPagination,
    FetchMoreResult,
    FetchMoreStatus,
    OffsetLimitPagination,
    PagePagination,
    PaginatedHandler,
    PaginatedLoader,
    PaginationConfig,
)
from .refresh import (
    RefreshConfig,
    RefreshResult,
    RefreshStatus,
    StaleMateRefresher,
    StalePeriodRefreshConfig,
    TimeOfDayRefreshConfig,
)
from .registry import StaleMateRegistry, get_registry, reset_registry, set_registry
from .runtime import StaleMateLogLevel, configure_logging, execute_concurrently, gather_values, get_logger

__version__ = "0.1.0"

__all__ = [
    # Loader
    "StaleMateLoader", "StaleMateHandler", "LocalOnlyHandler", "RemoteOnlyHandler", "BatchedRemoteHandler",
    "LoaderState", "Initial", "Loading", "Loaded", "Error", "StateStatus", "StateSubject", "DataSource",
    # Refresh
    "RefreshConfig", "StalePeriodRefreshConfig", "TimeOfDayRefreshConfig",
    "StaleMateRefresher", "RefreshResult", "RefreshStatus",
    # Registry
    "StaleMateRegistry", "get_registry", "set_registry", "reset_registry",
    # Pagination
    "PaginationConfig", "PagePagination", "OffsetLimitPagination", "CursorPagination",
    "PaginatedHandler", "PaginatedLoader", "FetchMoreResult", "FetchMoreStatus",
    # Errors
    "ErrorKind", "LoaderError", "classify_exception",
    "StaleMateError", "NoLocalDataError", "NotSupportedError", "PartialFetchError",
    "Result", "Ok", "Err", "partition_results",
    # Runtime
    "execute_concurrently", "gather_values",
    "StaleMateLogLevel", "configure_logging", "get_logger",
    # Foundation
    "Clock", "SystemClock", "FixedClock",
    "StaleMateSettings", "get_settings", "clear_settings_cache",
]
