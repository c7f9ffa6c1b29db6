"""Outcome of one fetch_more() call."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Callable, Generic, TypeVar

from stalemate.foundation.errors import LoaderError

T = TypeVar("T")


class FetchMoreStatus(StrEnum):
    ALREADY_FETCHING = "already_fetching"
    MORE_DATA_AVAILABLE = "more_data_available"
    DONE = "done"
    FAILURE = "failure"
    CANCELLED = "cancelled"  # refresh or reset happened while the page was in flight


@dataclass(frozen=True, slots=True)
class FetchMoreResult(Generic[T]):
    status: FetchMoreStatus
    initiated_at: datetime | None = None
    finished_at: datetime | None = None
    params: dict[str, object] | None = None
    new_data: list[T] = field(default_factory=list)
    merged_data: list[T] = field(default_factory=list)
    error: LoaderError | None = None

    @property
    def duration(self) -> timedelta | None:
        if self.initiated_at is None or self.finished_at is None:
            return None
        return self.finished_at - self.initiated_at

    @property
    def more_data_available(self) -> bool:
        return self.status is FetchMoreStatus.MORE_DATA_AVAILABLE

    @property
    def is_done(self) -> bool:
        return self.status is FetchMoreStatus.DONE

    @property
    def is_failure(self) -> bool:
        return self.status is FetchMoreStatus.FAILURE

    @property
    def is_already_fetching(self) -> bool:
        return self.status is FetchMoreStatus.ALREADY_FETCHING

    @property
    def is_cancelled(self) -> bool:
        return self.status is FetchMoreStatus.CANCELLED

    @property
    def has_data(self) -> bool:
        return self.more_data_available or self.is_done

    @property
    def require_error(self) -> LoaderError:
        if self.error is None:
            raise RuntimeError(f"require_error on a {self.status} fetch-more result")
        return self.error

    def match(
        self,
        success: Callable[[list[T], list[T], bool], object] | None = None,
        failure: Callable[[LoaderError], object] | None = None,
    ) -> None:
        """success(merged_data, new_data, is_done) or failure(error)."""
        if self.is_failure and failure is not None:
            failure(self.require_error)
        elif self.has_data and success is not None:
            success(self.merged_data, self.new_data, self.is_done)
