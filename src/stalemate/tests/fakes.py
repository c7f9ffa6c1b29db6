"""In-memory handlers for loader tests."""

from __future__ import annotations

import asyncio

from stalemate.foundation.errors import NoLocalDataError
from stalemate.loader import Error, Loaded, LoaderState, StaleMateHandler, StaleMateLoader
from stalemate.pagination import PaginatedHandler, PaginationConfig, QueryParams


class MemoryHandler(StaleMateHandler[str]):
    """String handler backed by attributes, with per-operation failure toggles.

    ``local=None`` means nothing is cached.
    """

    def __init__(self, local: str | None = None, remote: str = "fresh", *, empty: str = "") -> None:
        self.local = local
        self.remote = remote
        self._empty = empty
        self.local_error: Exception | None = None
        self.remote_error: Exception | None = None
        self.store_error: Exception | None = None
        self.remove_error: Exception | None = None
        self.stored: list[str] = []
        self.local_calls = 0
        self.remote_calls = 0
        self.remove_calls = 0

    @property
    def empty_value(self) -> str:
        return self._empty

    async def get_local_data(self) -> str:
        self.local_calls += 1
        if self.local_error is not None:
            raise self.local_error
        if self.local is None:
            raise NoLocalDataError("nothing cached")
        return self.local

    async def store_local_data(self, value: str) -> None:
        if self.store_error is not None:
            raise self.store_error
        self.stored.append(value)
        self.local = value

    async def remove_local_data(self) -> None:
        self.remove_calls += 1
        if self.remove_error is not None:
            raise self.remove_error
        self.local = None

    async def get_remote_data(self) -> str:
        self.remote_calls += 1
        if self.remote_error is not None:
            raise self.remote_error
        return self.remote


class GatedHandler(MemoryHandler):
    """Remote calls block until release() so tests control interleavings."""

    def __init__(self, local: str | None = None, remote: str = "fresh", *, empty: str = "") -> None:
        super().__init__(local, remote, empty=empty)
        self.started = asyncio.Event()
        self.gate = asyncio.Event()

    def release(self) -> None:
        self.gate.set()

    async def get_remote_data(self) -> str:
        self.remote_calls += 1
        self.started.set()
        await self.gate.wait()
        if self.remote_error is not None:
            raise self.remote_error
        return self.remote


class SlowStoreHandler(MemoryHandler):
    """Stores block until release() so tests can act while one is running."""

    def __init__(self, local: str | None = None, remote: str = "fresh", *, empty: str = "") -> None:
        super().__init__(local, remote, empty=empty)
        self.store_started = asyncio.Event()
        self.store_gate = asyncio.Event()

    def release(self) -> None:
        self.store_gate.set()

    async def store_local_data(self, value: str) -> None:
        self.store_started.set()
        await self.store_gate.wait()
        await super().store_local_data(value)


class ItemHandler(PaginatedHandler[int]):
    """Paginates over range(total) using page/page_size params."""

    def __init__(self, pagination: PaginationConfig[int], total: int = 45) -> None:
        super().__init__(pagination)
        self.items = list(range(total))
        self.local: list[int] | None = None
        self.page_calls: list[QueryParams] = []
        self.page_error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()

    async def get_local_data(self) -> list[int]:
        if self.local is None:
            raise NoLocalDataError()
        return self.local

    async def store_local_data(self, value: list[int]) -> None:
        self.local = list(value)

    async def remove_local_data(self) -> None:
        self.local = None

    async def get_remote_paginated_data(self, params: QueryParams) -> list[int]:
        self.page_calls.append(params)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.page_error is not None:
            raise self.page_error
        size = int(params["page_size"])  # type: ignore[call-overload]
        start = (int(params["page"]) - 1) * size  # type: ignore[call-overload]
        return self.items[start:start + size]


def record(loader: StaleMateLoader[object]) -> list[LoaderState[object]]:
    """Collect every state the loader emits, starting with the current one."""
    states: list[LoaderState[object]] = []
    loader.listen(states.append)
    return states


def settled(states: list[LoaderState[object]]) -> list[LoaderState[object]]:
    """Only Loaded and Error states."""
    return [s for s in states if isinstance(s, (Loaded, Error))]
