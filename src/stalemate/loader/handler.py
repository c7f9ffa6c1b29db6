"""Handler contract: how a loader reads, writes and fetches one value type.

A handler adapts a concrete cache and a concrete remote source to the four
calls the loader makes. It holds no loader state; one handler instance is
owned by exactly one loader.

Signalling conventions:
    - get_local_data() raises NoLocalDataError when nothing is cached
    - any operation the handler cannot perform raises NotSupportedError
    - every other exception is treated as a transient failure

Example:
    >>> class UserHandler(StaleMateHandler[list[User]]):
    ...     @property
    ...     def empty_value(self) -> list[User]:
    ...         return []
    ...
    ...     async def get_local_data(self) -> list[User]:
    ...         users = await self.db.load_users()
    ...         if users is None:
    ...             raise NoLocalDataError("no users cached")
    ...         return users
    ...
    ...     async def get_remote_data(self) -> list[User]:
    ...         return await self.api.fetch_users()
    ...
    ...     async def store_local_data(self, value: list[User]) -> None:
    ...         await self.db.save_users(value)
    ...
    ...     async def remove_local_data(self) -> None:
    ...         await self.db.clear_users()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from stalemate.foundation.errors import NotSupportedError

T = TypeVar("T")


class StaleMateHandler(ABC, Generic[T]):
    """Abstract base for handlers backed by both a local cache and a remote source.

    Subclasses that only support one side should derive from LocalOnlyHandler
    or RemoteOnlyHandler instead, so the loader never calls the missing side.
    """

    supports_local: ClassVar[bool] = True
    supports_remote: ClassVar[bool] = True

    @property
    @abstractmethod
    def empty_value(self) -> T:
        """Value shown before anything is loaded and after a reset."""
        ...

    @abstractmethod
    async def get_local_data(self) -> T:
        """Read the cached value. Raises NoLocalDataError when absent."""
        ...

    @abstractmethod
    async def store_local_data(self, value: T) -> None:
        """Persist value to the local cache."""
        ...

    @abstractmethod
    async def remove_local_data(self) -> None:
        """Clear the local cache."""
        ...

    @abstractmethod
    async def get_remote_data(self) -> T:
        """Fetch the authoritative value from the remote source."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class LocalOnlyHandler(StaleMateHandler[T]):
    """Handler for data that only lives locally. Refreshes are never attempted."""

    supports_remote: ClassVar[bool] = False

    async def get_remote_data(self) -> T:
        raise NotSupportedError(f"{type(self).__name__} does not support remote data")


class RemoteOnlyHandler(StaleMateHandler[T]):
    """Handler for data that is never cached. Every load goes to the remote source."""

    supports_local: ClassVar[bool] = False

    async def get_local_data(self) -> T:
        raise NotSupportedError(f"{type(self).__name__} does not support local data")

    async def store_local_data(self, value: T) -> None:
        raise NotSupportedError(f"{type(self).__name__} does not support storing local data")

    async def remove_local_data(self) -> None:
        raise NotSupportedError(f"{type(self).__name__} does not support removing local data")
