"""Configuration management using pydantic-settings."""

from .settings import (
    LoggingSettings,
    RefreshSettings,
    StaleMateSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "LoggingSettings",
    "RefreshSettings",
    "StaleMateSettings",
    "clear_settings_cache",
    "get_settings",
]
