"""Bounded, closable stream connecting the pipeline stages."""
import asyncio
from typing import AsyncIterator, Generic, TypeVar


T = TypeVar("T")

_CLOSED = object()


class Stream(Generic[T]):
    """Single-consumer asyncio queue with an explicit end-of-stream signal.

    Producers block on ``put`` while the stream is full. The consumer
    iterates with ``async for`` and sees every item exactly once; iteration
    ends after ``close`` once the buffered items are drained.
    """

    def __init__(self, capacity: int = 128):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def put(self, item: T) -> None:
        if self._closed:
            raise RuntimeError("put() on a closed stream")
        await self._queue.put(item)

    async def close(self) -> None:
        """Signal that no more items will be produced."""
        if not self._closed:
            self._closed = True
            await self._queue.put(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[T]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item
