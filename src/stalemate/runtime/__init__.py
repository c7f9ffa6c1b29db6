"""Runtime - concurrency helpers and observability."""

from __future__ import annotations

from .concurrency import execute_concurrently, gather_values
from .observability import StaleMateLogLevel, configure_logging, get_logger

__all__ = [
    "execute_concurrently",
    "gather_values",
    "StaleMateLogLevel",
    "configure_logging",
    "get_logger",
]
