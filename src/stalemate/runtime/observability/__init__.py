"""Observability: structured logging with per-loader levels."""

from .logging import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogRenderer,
    MemoryRenderer,
    NoOpRenderer,
    StaleMateLogLevel,
    configure_logging,
    default_level,
    get_logger,
    log_context,
    reset_logging,
    set_renderer,
)

__all__ = [
    "BoundLogger",
    "ConsoleRenderer",
    "JsonRenderer",
    "LogEntry",
    "LogRenderer",
    "MemoryRenderer",
    "NoOpRenderer",
    "StaleMateLogLevel",
    "configure_logging",
    "default_level",
    "get_logger",
    "log_context",
    "reset_logging",
    "set_renderer",
]
