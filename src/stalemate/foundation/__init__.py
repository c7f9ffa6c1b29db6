"""Foundation - building blocks shared by every stalemate module.

Contains: clock, error taxonomy, result type, configuration.
"""

from __future__ import annotations

from .clock import Clock, FixedClock, SystemClock, default_clock
from .config import StaleMateSettings, clear_settings_cache, get_settings
from .errors import (
    Err,
    ErrorKind,
    LoaderError,
    NoLocalDataError,
    NotSupportedError,
    Ok,
    PartialFetchError,
    Result,
    StaleMateError,
    classify_exception,
    partition_results,
)
from .types import DataSource

__all__ = [
    # Clock
    "Clock", "SystemClock", "FixedClock", "default_clock",
    # Errors
    "ErrorKind", "LoaderError", "classify_exception",
    "StaleMateError", "NoLocalDataError", "NotSupportedError", "PartialFetchError",
    "Result", "Ok", "Err", "partition_results",
    # Config
    "StaleMateSettings", "get_settings", "clear_settings_cache",
    # Types
    "DataSource",
]
