"""Shared enums used across loader, errors and refresh modules."""

from __future__ import annotations

from enum import StrEnum


class DataSource(StrEnum):
    """Where a value (or a failure) came from."""
    LOCAL = "local"
    REMOTE = "remote"
