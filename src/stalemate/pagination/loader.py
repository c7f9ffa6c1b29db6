"""Paginated handlers and loaders.

A refresh always starts over from the first page; fetch_more() appends the
next page to the current value. A refresh or reset that happens while a page
is in flight cancels that page: its result is dropped and fetch_more()
reports CANCELLED.

Example:
    >>> class FeedHandler(PaginatedHandler[Post]):
    ...     async def get_remote_paginated_data(self, params):
    ...         return await self.api.posts(**params)
    ...     ...  # local cache methods
    >>>
    >>> loader = await PaginatedLoader.create(FeedHandler(PagePagination(page_size=20)))
    >>> result = await loader.fetch_more()
    >>> result.more_data_available
    True
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TypeVar

from stalemate.foundation.errors import LoaderError, NotSupportedError
from stalemate.foundation.types import DataSource
from stalemate.loader import Error, StaleMateHandler, StaleMateLoader
from stalemate.refresh import RefreshResult

from .config import PaginationConfig, QueryParams
from .result import FetchMoreResult, FetchMoreStatus

T = TypeVar("T")


class PaginatedHandler(StaleMateHandler[list[T]]):
    """Handler for a list fetched page by page.

    Subclasses implement get_remote_paginated_data() plus the local cache
    methods. get_remote_data() resets the pagination and returns page one.
    """

    def __init__(self, pagination: PaginationConfig[T]) -> None:
        self.pagination = pagination

    @property
    def empty_value(self) -> list[T]:
        return []

    @property
    def can_fetch_more(self) -> bool:
        return self.pagination.can_fetch_more

    @abstractmethod
    async def get_remote_paginated_data(self, params: QueryParams) -> list[T]:
        """Fetch one page described by params."""
        ...

    async def get_remote_data(self) -> list[T]:
        self.pagination.reset()
        data = await self.get_remote_paginated_data(self.pagination.query_params(0, None))
        return self.pagination.on_received_data(data, [])


class PaginatedLoader(StaleMateLoader[list[T]]):
    """Loader with fetch_more() for paginated remote data.

    Only one fetch_more() runs at a time; a second call while one is in flight
    returns ALREADY_FETCHING without touching the handler.
    """

    def __init__(self, handler: PaginatedHandler[T], **kwargs: object) -> None:
        super().__init__(handler, **kwargs)  # type: ignore[arg-type]
        self._paginated_handler = handler
        self._fetching_more = False
        self._page_token = 0

    @property
    def pagination(self) -> PaginationConfig[T]:
        return self._paginated_handler.pagination

    @property
    def can_fetch_more(self) -> bool:
        return self._paginated_handler.can_fetch_more

    @property
    def is_fetching_more(self) -> bool:
        return self._fetching_more

    async def fetch_more(self) -> FetchMoreResult[T]:
        """Fetch the next page and append it to the current value."""
        if self._fetching_more:
            self._log.info("fetch more already in progress")
            return FetchMoreResult(FetchMoreStatus.ALREADY_FETCHING)

        current = list(self.value)
        last_item = current[-1] if current else None
        initiated_at = self._clock.now()
        params = self.pagination.query_params(len(current), last_item)

        if not self.pagination.can_fetch_more:
            self._log.info("fetch more called, but no more data available")
            return FetchMoreResult(
                FetchMoreStatus.DONE, initiated_at, self._clock.now(), params, new_data=[], merged_data=current,
            )
        if not self._supports_remote:
            error = LoaderError.from_exception(
                NotSupportedError("remote data is not supported"), source=DataSource.REMOTE,
            )
            return FetchMoreResult(FetchMoreStatus.FAILURE, initiated_at, self._clock.now(), params, error=error)

        self._fetching_more = True
        generation, token = self._generation, self._page_token
        self._log.info("fetching more", params=params)
        try:
            new_data = await self._paginated_handler.get_remote_paginated_data(params)
        except Exception as exc:
            if self._is_stale_page(generation, token):
                return FetchMoreResult(FetchMoreStatus.CANCELLED, initiated_at, self._clock.now(), params)
            error = self._read_error(exc, DataSource.REMOTE)
            self._emit(Error(self.value, error, DataSource.REMOTE))
            return FetchMoreResult(FetchMoreStatus.FAILURE, initiated_at, self._clock.now(), params, error=error)
        finally:
            self._fetching_more = False

        if self._is_stale_page(generation, token):
            self._log.debug("discarding page fetched before refresh or reset")
            return FetchMoreResult(FetchMoreStatus.CANCELLED, initiated_at, self._clock.now(), params)

        merged = self.pagination.on_received_data(new_data, current)
        self._log.info("received page", received=len(new_data), total=len(merged))
        await self.add_data(merged, source=DataSource.REMOTE)
        status = FetchMoreStatus.MORE_DATA_AVAILABLE if self.pagination.can_fetch_more else FetchMoreStatus.DONE
        return FetchMoreResult(status, initiated_at, self._clock.now(), params, new_data=new_data, merged_data=merged)

    async def reset(self) -> None:
        self._page_token += 1
        self.pagination.reset()
        await super().reset()

    async def _load_remote(self) -> RefreshResult[list[T]]:
        self._page_token += 1
        return await super()._load_remote()

    def _is_stale_page(self, generation: int, token: int) -> bool:
        return generation != self._generation or token != self._page_token or self._disposed

