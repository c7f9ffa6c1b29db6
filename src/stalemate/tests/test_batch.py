"""Tests for handlers that build their remote value from several calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable

import pytest

from stalemate.foundation.errors import ErrorKind, NoLocalDataError, PartialFetchError, Result, partition_results
from stalemate.foundation.types import DataSource
from stalemate.loader import BatchedRemoteHandler, Error, Loaded, StaleMateLoader


class ProfileHandler(BatchedRemoteHandler[dict[str, str]]):
    """Assembles a profile from one call per field."""

    def __init__(self, fields: dict[str, str], failing: frozenset[str] = frozenset()) -> None:
        self.fields = fields
        self.failing = failing
        self.stored: dict[str, str] | None = None

    @property
    def empty_value(self) -> dict[str, str]:
        return {}

    async def get_local_data(self) -> dict[str, str]:
        raise NoLocalDataError()

    async def store_local_data(self, value: dict[str, str]) -> None:
        self.stored = value

    async def remove_local_data(self) -> None:
        self.stored = None

    async def fetch_field(self, name: str) -> tuple[str, str]:
        await asyncio.sleep(0)
        if name in self.failing:
            raise ConnectionError(f"{name} unavailable")
        return name, self.fields[name]

    def remote_operations(self) -> list[Awaitable[object]]:
        return [self.fetch_field(name) for name in self.fields]

    def merge(self, values: list[object]) -> dict[str, str]:
        return dict(values)  # type: ignore[arg-type]


class LenientProfileHandler(ProfileHandler):
    """Keeps whatever fields arrived."""

    def combine(self, results: list[Result[object, Exception]]) -> dict[str, str]:
        values, _ = partition_results(results)
        return self.merge(values)


FIELDS = {"name": "Ada", "city": "London", "lang": "en"}


@pytest.mark.asyncio
async def test_all_operations_succeed() -> None:
    handler = ProfileHandler(FIELDS)

    loader = await StaleMateLoader.create(handler)

    assert loader.state == Loaded(FIELDS, DataSource.REMOTE)
    assert handler.stored == FIELDS


@pytest.mark.asyncio
async def test_partial_failure_is_a_fetch_error() -> None:
    handler = ProfileHandler(FIELDS, failing=frozenset({"city"}))

    loader = await StaleMateLoader.create(handler)

    state = loader.state
    assert isinstance(state, Error)
    assert state.error.kind is ErrorKind.FETCH_FAILED
    assert state.value == {}
    cause = state.cause
    assert isinstance(cause, PartialFetchError)
    assert [str(e) for e in cause.errors] == ["city unavailable"]
    assert [r.is_ok() for r in cause.results] == [True, False, True]
    assert handler.stored is None


@pytest.mark.asyncio
async def test_combine_override_accepts_partial_results() -> None:
    handler = LenientProfileHandler(FIELDS, failing=frozenset({"city"}))

    loader = await StaleMateLoader.create(handler)

    assert loader.state == Loaded({"name": "Ada", "lang": "en"}, DataSource.REMOTE)


@pytest.mark.asyncio
async def test_failed_batch_keeps_previous_value() -> None:
    handler = ProfileHandler(FIELDS)
    loader = await StaleMateLoader.create(handler)

    handler.failing = frozenset({"name", "lang"})
    result = await loader.refresh()

    assert result.is_failure
    assert loader.value == FIELDS
    assert "2 of 3" in result.require_error.message
