"""Observable holder for the latest snapshot of a view."""

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class SnapshotChannel(Generic[T]):
    """Keeps the latest value and fans it out to listeners and streams.

    Streams are conflated: a slow consumer only ever sees the newest value.
    After ``close`` every publish is a no-op.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: list[Callable[[T], None]] = []
        self._queues: set[asyncio.Queue[object]] = set()
        self._closed = False

    @property
    def value(self) -> T:
        return self._value

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, value: T) -> None:
        if self._closed:
            return
        self._value = value
        for listener in list(self._listeners):
            listener(value)
        for queue in self._queues:
            _replace(queue, value)

    def listen(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback and return a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def stream(self) -> AsyncIterator[T]:
        """Yield the current value, then every published value until closed."""
        queue: asyncio.Queue[object] = asyncio.Queue(maxsize=1)
        self._queues.add(queue)
        try:
            yield self._value
            if self._closed:
                return
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item  # type: ignore[misc]
        finally:
            self._queues.discard(queue)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        for queue in self._queues:
            _replace(queue, _CLOSED)


def _replace(queue: "asyncio.Queue[object]", item: object) -> None:
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(item)
