"""Paginated loading: strategies, handler, loader and fetch-more results."""

from .config import CursorPagination, OffsetLimitPagination, PagePagination, PaginationConfig, QueryParams
from .loader import PaginatedHandler, PaginatedLoader
from .result import FetchMoreResult, FetchMoreStatus

__all__ = [
    "PaginationConfig", "PagePagination", "OffsetLimitPagination", "CursorPagination", "QueryParams",
    "PaginatedHandler", "PaginatedLoader",
    "FetchMoreResult", "FetchMoreStatus",
]
