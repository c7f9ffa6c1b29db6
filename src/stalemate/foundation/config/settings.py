"""Environment-based configuration using pydantic-settings.

Settings provide process-wide defaults; arguments passed to a loader's
constructor always take precedence.

Example:
    >>> from stalemate.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.logging.level
    'none'

    # Or with environment variables:
    # STALEMATE_LOG_LEVEL=debug
    # STALEMATE_REFRESH_STALE_PERIOD_SECONDS=300
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, PositiveFloat, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STALEMATE_LOG_",
        extra="ignore",
    )

    level: Literal["none", "error", "warning", "info", "debug"] = "none"
    format: Literal["console", "json", "none"] = "console"
    colors: bool | None = Field(default=None, description="Force console colors (None = auto-detect)")

    @field_validator("level", "format", mode="before")
    @classmethod
    def _lowercase(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v


class RefreshSettings(BaseSettings):
    """Defaults for automatic refresh."""

    model_config = SettingsConfigDict(
        env_prefix="STALEMATE_REFRESH_",
        extra="ignore",
    )

    stale_period_seconds: PositiveFloat | None = Field(
        default=None,
        description="Refresh loaders automatically after this many seconds (None = manual only)",
    )

    @computed_field
    @property
    def stale_period(self) -> timedelta | None:
        if self.stale_period_seconds is None:
            return None
        return timedelta(seconds=self.stale_period_seconds)


class StaleMateSettings(BaseSettings):
    """Root settings for stalemate.

    Example environment variables:
        STALEMATE_UPDATE_ON_INIT=false
        STALEMATE_LOG_LEVEL=info
        STALEMATE_LOG_FORMAT=json
        STALEMATE_REFRESH_STALE_PERIOD_SECONDS=600
    """

    model_config = SettingsConfigDict(
        env_prefix="STALEMATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    update_on_init: bool = Field(default=True, description="Fetch remote data when a loader initializes")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    refresh: RefreshSettings = Field(default_factory=RefreshSettings)


@lru_cache(maxsize=1)
def get_settings() -> StaleMateSettings:
    """Get the global settings instance (cached)."""
    return StaleMateSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
