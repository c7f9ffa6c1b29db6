"""Pagination strategies: how to ask for the next page and when to stop.

Each strategy turns "how many items do I have, and what is the last one"
into query parameters for the remote call, then merges the page it gets
back. A page shorter than the requested size means there is nothing left.

    PagePagination(page_size=20)          {"page": 3, "page_size": 20}
    OffsetLimitPagination(limit=20)       {"offset": 40, "limit": 20}
    CursorPagination(20, lambda i: i.id)  {"cursor": "item-40", "limit": 20}
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

QueryParams = dict[str, object]


class PaginationConfig(ABC, Generic[T]):
    """Base strategy. Subclasses implement query_params()."""

    def __init__(self) -> None:
        self.can_fetch_more = True

    @abstractmethod
    def query_params(self, count: int, last_item: T | None) -> QueryParams:
        """Parameters for the page after the first `count` items."""
        ...

    def on_received_data(self, new_data: list[T], old_data: list[T]) -> list[T]:
        """Merge a received page into the existing items (append by default)."""
        return [*old_data, *new_data]

    def reset(self) -> None:
        self.can_fetch_more = True


class PagePagination(PaginationConfig[T]):
    """Numbered pages of a fixed size.

    Args:
        page_size: Items per page
        zero_based: Number the first page 0 instead of 1
    """

    def __init__(self, page_size: int, *, zero_based: bool = False) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        super().__init__()
        self.page_size = page_size
        self.zero_based = zero_based

    def query_params(self, count: int, last_item: T | None) -> QueryParams:
        return {
            "page": math.ceil(count / self.page_size) + (0 if self.zero_based else 1),
            "page_size": self.page_size,
        }

    def on_received_data(self, new_data: list[T], old_data: list[T]) -> list[T]:
        self.can_fetch_more = len(new_data) == self.page_size
        return super().on_received_data(new_data, old_data)


class OffsetLimitPagination(PaginationConfig[T]):
    """Offset into the full list plus a maximum count."""

    def __init__(self, limit: int) -> None:
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        super().__init__()
        self.limit = limit

    def query_params(self, count: int, last_item: T | None) -> QueryParams:
        return {"offset": count, "limit": self.limit}

    def on_received_data(self, new_data: list[T], old_data: list[T]) -> list[T]:
        self.can_fetch_more = len(new_data) == self.limit
        return super().on_received_data(new_data, old_data)


class CursorPagination(PaginationConfig[T]):
    """Opaque cursor derived from the last item (usually an id or timestamp).

    Args:
        limit: Maximum items per page
        get_cursor: Extracts the cursor from the last loaded item
    """

    def __init__(self, limit: int, get_cursor: Callable[[T], str]) -> None:
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        super().__init__()
        self.limit = limit
        self.get_cursor = get_cursor

    def query_params(self, count: int, last_item: T | None) -> QueryParams:
        return {"cursor": None if last_item is None else self.get_cursor(last_item), "limit": self.limit}

    def on_received_data(self, new_data: list[T], old_data: list[T]) -> list[T]:
        self.can_fetch_more = len(new_data) == self.limit
        return super().on_received_data(new_data, old_data)
