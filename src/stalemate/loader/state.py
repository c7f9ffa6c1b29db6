"""Loader states.

Every state carries ``value``, the most recent value known to be good (or the
handler's empty value), so subscribers never need to remember it themselves.

    Initial(value)                    nothing loaded, value is the empty value
    Loading(value, source, generation) a read from source is in flight
    Loaded(value, source)             value was just read from source
    Error(value, error, source)       a read from source failed

Pattern matching works on all of them:

    >>> match state:
    ...     case Loaded(value, DataSource.REMOTE):
    ...         render(value)
    ...     case Error(value, error):
    ...         render(value, banner=error.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Generic, TypeVar, Union

from stalemate.foundation.errors import LoaderError
from stalemate.foundation.types import DataSource

T = TypeVar("T")


class StateStatus(StrEnum):
    INITIAL = "initial"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Initial(Generic[T]):
    value: T

    status: ClassVar[StateStatus] = StateStatus.INITIAL


@dataclass(frozen=True, slots=True)
class Loading(Generic[T]):
    value: T
    source: DataSource
    generation: int = 0

    status: ClassVar[StateStatus] = StateStatus.LOADING


@dataclass(frozen=True, slots=True)
class Loaded(Generic[T]):
    value: T
    source: DataSource

    status: ClassVar[StateStatus] = StateStatus.LOADED


@dataclass(frozen=True, slots=True)
class Error(Generic[T]):
    value: T
    error: LoaderError
    source: DataSource

    status: ClassVar[StateStatus] = StateStatus.ERROR

    @property
    def cause(self) -> BaseException | None:
        return self.error.cause


LoaderState = Union[Initial[T], Loading[T], Loaded[T], Error[T]]
