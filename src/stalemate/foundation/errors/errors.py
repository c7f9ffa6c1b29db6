"""Exception taxonomy and structured loader errors.

Handlers signal conditions by raising; the loader translates every exception
into a LoaderError tagged with an ErrorKind so downstream code branches on the
kind instead of on exception classes.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, ConfigDict

from ..types import DataSource

if TYPE_CHECKING:
    from .result import Result


class ErrorKind(StrEnum):
    """Classification of loader failures."""
    NO_LOCAL_DATA = "NO_LOCAL_DATA"    # expected absence, never surfaced as a state
    NOT_SUPPORTED = "NOT_SUPPORTED"    # permanent capability gap, never retried
    FETCH_FAILED = "FETCH_FAILED"      # transient read failure, retryable
    PERSIST_FAILED = "PERSIST_FAILED"  # store/remove failure, warning only


class StaleMateError(Exception):
    """Base class for exceptions raised by stalemate and its handlers."""

    kind: ErrorKind = ErrorKind.FETCH_FAILED

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{type(self).__name__}: {self.message}" if self.message else type(self).__name__


class NoLocalDataError(StaleMateError):
    """Raised by a handler when no cached value exists."""

    kind = ErrorKind.NO_LOCAL_DATA


class NotSupportedError(StaleMateError):
    """Raised by a handler for an operation it does not implement."""

    kind = ErrorKind.NOT_SUPPORTED


class PartialFetchError(StaleMateError):
    """A batched remote fetch where at least one operation failed.

    Carries every settled result so callers can inspect what did succeed.
    """

    kind = ErrorKind.FETCH_FAILED

    def __init__(self, results: list[Result[object, Exception]]) -> None:
        self.results = results
        failed = [i for i, r in enumerate(results) if r.is_err()]
        super().__init__(f"{len(failed)} of {len(results)} operations failed (indices {failed})")

    @property
    def errors(self) -> list[Exception]:
        return [e for r in self.results if (e := r.err()) is not None]


def classify_exception(exc: BaseException) -> ErrorKind:
    """Map an exception to its ErrorKind. Anything unknown is a fetch failure."""
    if isinstance(exc, StaleMateError):
        return exc.kind
    if isinstance(exc, NotImplementedError):
        return ErrorKind.NOT_SUPPORTED
    return ErrorKind.FETCH_FAILED


class LoaderError(BaseModel):
    """Structured record of a failed loader operation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ErrorKind
    message: str
    source: DataSource
    cause: BaseException | None = None
    details: str | None = None

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        *,
        source: DataSource,
        kind: ErrorKind | None = None,
        include_trace: bool = False,
    ) -> Self:
        """Create from an exception with automatic classification."""
        return cls(
            kind=kind or classify_exception(exc),
            message=str(exc) or type(exc).__name__,
            source=source,
            cause=exc,
            details="".join(traceback.format_exception(exc)) if include_trace else None,
        )

    @property
    def recoverable(self) -> bool:
        """Whether a later refresh may succeed."""
        return self.kind is not ErrorKind.NOT_SUPPORTED

    def render(self) -> str:
        parts = [f"[{self.kind}] {self.source} operation failed: {self.message}"]
        if self.details:
            parts.append(f"\n{self.details}")
        return "".join(parts)

    __str__ = render
