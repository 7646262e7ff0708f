"""Buffering engine - a bounded window of overlapping upstream pulls.

Slow per-item work upstream (an async mapper, a remote call) is pipelined by
keeping up to ``size`` pulls in flight at once, each as its own asyncio task.
Results are handed downstream in the order the pulls complete, not the order
they were issued, so a slow item never holds up the ones behind it.

Bookkeeping:

- ``_in_flight`` maps a sequence index to the task pulling for it.
- ``_settled`` holds finished tasks whose outcome has not been delivered.
  A task moves from one to the other in its done-callback, whether it
  succeeded or failed, so a failure never disturbs its neighbours.
- Once an absent result is seen the upstream is exhausted: no new pulls are
  issued, but pulls already in flight are still awaited and their values
  delivered.
- After ``stop`` no new pulls are issued either; settled values are still
  drained, tasks in flight are left to finish and their results dropped.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections import deque
from functools import partial
from typing import Generic, TypeVar

from streamline.config import BufferSettings
from streamline.kernel.async_optional import AsyncOptional
from streamline.kernel.optional import Optional
from streamline.kernel.ports import AsyncIterable

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BufferingAsyncIterable(Generic[T]):
    """Prefetches up to ``size`` values from ``upstream`` concurrently."""

    def __init__(self, upstream: AsyncIterable[T], size: int) -> None:
        self._upstream = upstream
        self._size = BufferSettings(size=size).size
        self._sequence = itertools.count()
        self._in_flight: dict[int, asyncio.Task[Optional[T]]] = {}
        self._settled: deque[asyncio.Task[Optional[T]]] = deque()
        self._stopped = False
        self._exhausted = False

    @property
    def size(self) -> int:
        return self._size

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def _fetch(self) -> Optional[T]:
        return await (await self._upstream.next()).to_optional()

    def _settle(self, index: int, task: asyncio.Task[Optional[T]]) -> None:
        self._in_flight.pop(index, None)
        if task.cancelled():
            return
        if self._stopped:
            # nobody will ever ask for this outcome
            error = task.exception()
            if error is not None:
                logger.debug("Fetch %d failed after stop: %r", index, error)
            return
        self._settled.append(task)

    def _refill(self) -> None:
        while not self._stopped and not self._exhausted and len(self._in_flight) < self._size:
            index = next(self._sequence)
            task = asyncio.ensure_future(self._fetch())
            task.add_done_callback(partial(self._settle, index))
            self._in_flight[index] = task
            logger.debug("Issued fetch %d (%d in flight)", index, len(self._in_flight))

    def _deliver(self) -> Optional[T] | None:
        """Pop settled outcomes until a value turns up; re-raise failures."""
        while self._settled:
            optional = self._settled.popleft().result()
            if optional.is_present():
                self._refill()
                return optional
            if not self._exhausted:
                logger.debug("Upstream exhausted, %d fetches still in flight", len(self._in_flight))
            self._exhausted = True
        return None

    async def next(self) -> AsyncOptional[T]:
        while True:
            delivered = self._deliver()
            if delivered is not None:
                return AsyncOptional.of_optional(delivered)
            if self._stopped:
                return AsyncOptional.empty()

            self._refill()
            if not self._in_flight:
                return AsyncOptional.empty()
            await asyncio.wait(list(self._in_flight.values()), return_when=asyncio.FIRST_COMPLETED)

    def stop(self) -> None:
        if not self._stopped:
            logger.debug("Buffer stopped with %d fetches in flight", len(self._in_flight))
        self._stopped = True
        self._upstream.stop()
