"""Handlers whose remote value is assembled from several independent calls.

The remote fetch fans out through execute_concurrently, so every call runs at
once and one failure never hides the outcome of the others. combine() decides
what partial success means for the value being built.

Example:
    >>> class ProfileHandler(BatchedRemoteHandler[Profile]):
    ...     def remote_operations(self):
    ...         return [self.api.user(), self.api.settings(), self.api.avatar()]
    ...
    ...     def merge(self, values):
    ...         user, settings, avatar = values
    ...         return Profile(user=user, settings=settings, avatar=avatar)
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Awaitable, Iterable
from typing import TypeVar

from stalemate.foundation.errors import PartialFetchError, Result, partition_results
from stalemate.runtime.concurrency import execute_concurrently

from .handler import StaleMateHandler

T = TypeVar("T")


class BatchedRemoteHandler(StaleMateHandler[T]):
    """Handler whose get_remote_data runs a batch of operations concurrently.

    Subclasses provide remote_operations() and merge(). The default combine()
    is all-or-nothing: it raises PartialFetchError (a transient fetch failure
    carrying every settled result) unless every operation succeeded. Override
    combine() to accept partial results.
    """

    @abstractmethod
    def remote_operations(self) -> Iterable[Awaitable[object]]:
        """Fresh awaitables for one fetch. Called once per refresh."""
        ...

    @abstractmethod
    def merge(self, values: list[object]) -> T:
        """Build the value from the successful results, in submission order."""
        ...

    def combine(self, results: list[Result[object, Exception]]) -> T:
        values, errors = partition_results(results)
        if errors:
            raise PartialFetchError(results)
        return self.merge(values)

    async def get_remote_data(self) -> T:
        return self.combine(await execute_concurrently(self.remote_operations()))
