"""Concurrency helpers for fan-out remote calls.

Pure asyncio; every operation runs on the caller's event loop, no threads.

Example:
    >>> from stalemate.runtime.concurrency import execute_concurrently
    >>> results = await execute_concurrently([fetch("a"), fetch("b")])
"""

from __future__ import annotations

from .wait import execute_concurrently, gather_values

__all__ = [
    "execute_concurrently",
    "gather_values",
]
