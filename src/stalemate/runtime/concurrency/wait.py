"""Wait strategies for concurrent operations.

    - execute_concurrently: run everything at once, capture each outcome as a Result
    - gather_values: same, but keep only the values that succeeded

Unlike ``asyncio.gather`` without ``return_exceptions``, a failing operation
never aborts collection of the others.

Example:
    >>> results = await execute_concurrently([fetch_a(), fetch_b(), fetch_c()])
    >>> for r in results:
    ...     r.match(ok=print, err=lambda e: print(f"failed: {e}"))
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable
from typing import TypeVar

from stalemate.foundation.errors import Err, Ok, Result, partition_results

T = TypeVar("T")


async def _settle(task: asyncio.Future[T]) -> Result[T, Exception]:
    try:
        return Ok(await task)
    except Exception as e:  # CancelledError is a BaseException and propagates
        return Err(e)


async def execute_concurrently(operations: Iterable[Awaitable[T]]) -> list[Result[T, Exception]]:
    """Run independent operations concurrently and settle every one of them.

    All operations are scheduled as tasks before any is awaited. The returned
    list has the same length and order as the input; a failed operation
    contributes ``Err(exception)`` at its index. Nothing is raised.

    Args:
        operations: Awaitables (coroutines, tasks or futures), possibly empty

    Returns:
        One Result per operation, in submission order

    Example:
        >>> results = await execute_concurrently([fetch_user(1), fetch_user(2)])
        >>> [r.is_ok() for r in results]
        [True, False]
    """
    tasks = [asyncio.ensure_future(op) for op in operations]
    if not tasks:
        return []
    try:
        return list(await asyncio.gather(*(_settle(t) for t in tasks)))
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise


async def gather_values(operations: Iterable[Awaitable[T]]) -> tuple[list[T], list[Exception]]:
    """Run operations concurrently and split the outcomes into (values, errors)."""
    return partition_results(await execute_concurrently(operations))
