"""Multicast sources used on both sides of a search pipeline.

``Broadcast`` only reaches listeners attached at emit time. ``ReplayLatest``
also remembers the last value and hands it to every new listener first.
Both are meant to be driven from a single event loop thread.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Callable, Generic, TypeVar

from typeahead.services.exceptions import ChannelClosed

T = TypeVar("T")

Disposer = Callable[[], None]
ValueCallback = Callable[[T], None]
CloseCallback = Callable[[], None]


class _Listener(Generic[T]):
    __slots__ = ("on_value", "on_close")

    def __init__(self, on_value: ValueCallback[T], on_close: CloseCallback | None) -> None:
        self.on_value = on_value
        self.on_close = on_close


class Broadcast(Generic[T]):
    """Push-based multicast source without replay."""

    def __init__(self) -> None:
        self._listeners: list[_Listener[T]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def listen(
        self,
        on_value: ValueCallback[T],
        on_close: CloseCallback | None = None,
    ) -> Disposer:
        """Register callbacks. Returns a function that detaches them."""

        if self._closed:
            if on_close is not None:
                on_close()
            return _noop

        listener = _Listener(on_value, on_close)
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    def emit(self, value: T) -> None:
        if self._closed:
            raise ChannelClosed("Cannot emit into a closed source.")
        # Snapshot so listeners may detach while being notified.
        for listener in tuple(self._listeners):
            listener.on_value(value)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            if listener.on_close is not None:
                listener.on_close()

    def subscribe(self) -> "Subscription[T]":
        return Subscription(self)


class ReplayLatest(Broadcast[T]):
    """Broadcast that stores the latest value and replays it on listen."""

    def __init__(self, seed: T) -> None:
        super().__init__()
        self._value = seed

    @property
    def value(self) -> T:
        return self._value

    def listen(
        self,
        on_value: ValueCallback[T],
        on_close: CloseCallback | None = None,
    ) -> Disposer:
        on_value(self._value)
        return super().listen(on_value, on_close)

    def emit(self, value: T) -> None:
        if self._closed:
            raise ChannelClosed("Cannot emit into a closed source.")
        self._value = value
        super().emit(value)


_DONE = object()


class Subscription(Generic[T]):
    """Async iterator over a source; every listener gets its own queue.

    Registration happens on construction, so nothing emitted after the
    subscription object exists is missed even if iteration starts later.
    """

    def __init__(self, source: Broadcast[T]) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._finished = False
        self._dispose = source.listen(self._queue.put_nowait, self._on_close)

    def _on_close(self) -> None:
        self._queue.put_nowait(_DONE)

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        if self._finished:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _DONE:
            self._finished = True
            self._dispose()
            raise StopAsyncIteration
        return item

    def pending(self) -> list[T]:
        """Drain values that are already buffered, without waiting."""

        drained: list[T] = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _DONE:
                self._finished = True
                self._dispose()
                break
            drained.append(item)
        return drained

    def close(self) -> None:
        if self._finished:
            return
        self._dispose()
        self._queue.put_nowait(_DONE)


def _noop() -> None:
    return None


__all__ = ["Broadcast", "Disposer", "ReplayLatest", "Subscription"]
