"""Outcome of one refresh attempt."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Callable, Generic, TypeVar

from stalemate.foundation.errors import LoaderError

T = TypeVar("T")
U = TypeVar("U")


class RefreshStatus(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"
    NOT_SUPPORTED = "not_supported"  # handler has no remote side
    DISCARDED = "discarded"          # loader was reset or disposed mid-flight


@dataclass(frozen=True, slots=True)
class RefreshResult(Generic[T]):
    """What a refresh did, and when.

    Callers that joined an in-flight refresh receive the same instance as the
    caller that started it.

    Example:
        >>> result = await loader.refresh()
        >>> result.match(success=show, failure=lambda e: toast(e.message))
    """

    status: RefreshStatus
    initiated_at: datetime
    finished_at: datetime
    data: T | None = None
    error: LoaderError | None = None
    persist_error: LoaderError | None = None

    @property
    def duration(self) -> timedelta:
        return self.finished_at - self.initiated_at

    @property
    def is_success(self) -> bool:
        return self.status is RefreshStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status is RefreshStatus.FAILURE

    @property
    def is_not_supported(self) -> bool:
        return self.status is RefreshStatus.NOT_SUPPORTED

    @property
    def is_discarded(self) -> bool:
        return self.status is RefreshStatus.DISCARDED

    @property
    def require_data(self) -> T:
        """Refreshed value. Raises RuntimeError unless the refresh succeeded."""
        if not self.is_success:
            raise RuntimeError(f"require_data on a {self.status} refresh result")
        return self.data  # type: ignore[return-value]

    @property
    def require_error(self) -> LoaderError:
        """Failure record. Raises RuntimeError unless the refresh failed."""
        if self.error is None:
            raise RuntimeError(f"require_error on a {self.status} refresh result")
        return self.error

    def match(
        self,
        success: Callable[[T], U],
        failure: Callable[[LoaderError], U] | None = None,
    ) -> U | None:
        """Dispatch on the outcome. Discarded results call neither branch."""
        if self.is_success:
            return success(self.data)  # type: ignore[arg-type]
        if self.error is not None and failure is not None:
            return failure(self.error)
        return None

    # ─── Constructors ───────────────────────────────────────────────

    @classmethod
    def success(
        cls, data: T, *, initiated_at: datetime, finished_at: datetime, persist_error: LoaderError | None = None,
    ) -> RefreshResult[T]:
        return cls(RefreshStatus.SUCCESS, initiated_at, finished_at, data=data, persist_error=persist_error)

    @classmethod
    def failure(cls, error: LoaderError, *, initiated_at: datetime, finished_at: datetime) -> RefreshResult[T]:
        return cls(RefreshStatus.FAILURE, initiated_at, finished_at, error=error)

    @classmethod
    def not_supported(
        cls, error: LoaderError | None, *, initiated_at: datetime, finished_at: datetime,
    ) -> RefreshResult[T]:
        return cls(RefreshStatus.NOT_SUPPORTED, initiated_at, finished_at, error=error)

    @classmethod
    def discarded(cls, *, initiated_at: datetime, finished_at: datetime) -> RefreshResult[T]:
        return cls(RefreshStatus.DISCARDED, initiated_at, finished_at)
