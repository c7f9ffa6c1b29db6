"""Replay-last broadcast of loader states.

A StateSubject holds the current value and fans every new value out to all
subscribers. New subscribers receive the current value first, then live
updates; history before that is not kept.

Two ways to subscribe:
    - stream(): async iterator, one unbounded queue per subscriber
    - listen(callback): synchronous callback, invoked inline on emit

Example:
    >>> subject = StateSubject(Initial(""))
    >>> unsubscribe = subject.listen(print)
    Initial(value='')
    >>> subject.emit(Loaded("fresh", DataSource.REMOTE))
    Loaded(value='fresh', source=<DataSource.REMOTE: 'remote'>)
    >>> async for state in subject.stream():
    ...     ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger("stalemate.subject")

Listener = Callable[[T], object]


class _Closed:
    __slots__ = ()


_CLOSED = _Closed()


class StateSubscription(Generic[T]):
    """Async iterator over a subject's values. Ends when the subject closes."""

    __slots__ = ("_subject", "_queue", "_done")

    def __init__(self, subject: StateSubject[T], queue: asyncio.Queue[T | _Closed]) -> None:
        self._subject = subject
        self._queue = queue
        self._done = False

    def __aiter__(self) -> StateSubscription[T]:
        return self

    async def __anext__(self) -> T:
        if self._done:
            raise StopAsyncIteration
        item = await self._queue.get()
        if isinstance(item, _Closed):
            self._finish()
            raise StopAsyncIteration
        return item

    async def aclose(self) -> None:
        """Stop receiving values."""
        self._finish()

    def _finish(self) -> None:
        if not self._done:
            self._done = True
            self._subject._detach(self._queue)


class StateSubject(Generic[T]):
    """Multi-subscriber broadcast that replays the latest value on subscribe."""

    __slots__ = ("_value", "_queues", "_listeners", "_closed")

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._queues: list[asyncio.Queue[T | _Closed]] = []
        self._listeners: list[Listener[T]] = []
        self._closed = False

    @property
    def value(self) -> T:
        return self._value

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._queues) + len(self._listeners)

    def emit(self, value: T) -> bool:
        """Publish value to every subscriber. Returns False once closed."""
        if self._closed:
            return False
        self._value = value
        for queue in self._queues:
            queue.put_nowait(value)
        for listener in tuple(self._listeners):
            self._notify(listener, value)
        return True

    def stream(self) -> StateSubscription[T]:
        """Subscribe with an async iterator. The current value is delivered first.

        Every later value is queued for the subscriber, unbounded and in
        order. A subscriber that falls behind works through the whole
        backlog rather than skipping to the latest value, and its queue
        grows until it catches up. Use listen() to only react to the newest
        state, or read ``value`` after draining.
        """
        queue: asyncio.Queue[T | _Closed] = asyncio.Queue()
        queue.put_nowait(self._value)
        if self._closed:
            queue.put_nowait(_CLOSED)
        else:
            self._queues.append(queue)
        return StateSubscription(self, queue)

    def listen(self, listener: Listener[T]) -> Callable[[], None]:
        """Subscribe with a callback. Called immediately with the current value.

        Returns:
            Callable that removes the listener (safe to call twice)
        """
        self._notify(listener, self._value)
        if self._closed:
            return lambda: None
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """End every stream and drop all listeners. Later emits are ignored."""
        if self._closed:
            return
        self._closed = True
        for queue in self._queues:
            queue.put_nowait(_CLOSED)
        self._queues.clear()
        self._listeners.clear()

    def _detach(self, queue: asyncio.Queue[T | _Closed]) -> None:
        if queue in self._queues:
            self._queues.remove(queue)

    @staticmethod
    def _notify(listener: Listener[T], value: T) -> None:
        try:
            listener(value)
        except Exception:
            logger.exception("State listener %r raised", listener)
