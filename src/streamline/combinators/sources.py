"""Async sources - where an async pipeline gets its values from."""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

from streamline.kernel.async_optional import AsyncOptional
from streamline.kernel.functions import AsyncMapper, AsyncSupplier, resolve
from streamline.kernel.optional import Optional
from streamline.kernel.ports import Iterable

T = TypeVar("T")


class EmptyAsyncIterable(Generic[T]):
    async def next(self) -> AsyncOptional[T]:
        return AsyncOptional.empty()

    def stop(self) -> None:
        pass


class SyncToAsyncIterable(Generic[T]):
    """Adapts a synchronous iterable.

    Stopping is a no-op: a synchronous source does no work of its own between
    pulls, so there is nothing to cancel.
    """

    def __init__(self, iterable: Iterable[T]) -> None:
        self._iterable = iterable

    async def next(self) -> AsyncOptional[T]:
        if self._iterable.has_next():
            return AsyncOptional.present(self._iterable.get_next())
        return AsyncOptional.empty()

    def stop(self) -> None:
        pass


class GeneratingAsyncIterable(Generic[T]):
    """Calls a generator for every pull; an absent result ends the source.

    Overlapping pulls call the generator concurrently, so values may come
    back in any order.
    """

    def __init__(self, generator: AsyncSupplier[AsyncOptional[T]]) -> None:
        self._generator = generator
        self._done = False

    async def next(self) -> AsyncOptional[T]:
        if self._done:
            return AsyncOptional.empty()
        optional = await (await resolve(self._generator())).to_optional()
        if optional.is_empty():
            self._done = True
        return AsyncOptional.of_optional(optional)

    def stop(self) -> None:
        self._done = True


class SequentialGeneratingAsyncIterable(GeneratingAsyncIterable[T]):
    """Like GeneratingAsyncIterable but one generator call at a time.

    Overlapping pulls queue on a lock and are served in the order they were
    made.
    """

    def __init__(self, generator: AsyncSupplier[AsyncOptional[T]]) -> None:
        super().__init__(generator)
        self._lock = asyncio.Lock()

    async def next(self) -> AsyncOptional[T]:
        async with self._lock:
            return await super().next()


class IteratingAsyncIterable(Generic[T]):
    """Yields ``seed``, then ``step(previous)`` until ``step`` comes back absent."""

    def __init__(self, seed: T, step: AsyncMapper[T, AsyncOptional[T]]) -> None:
        self._last: Optional[T] = Optional.empty()
        self._seed = seed
        self._step = step
        self._done = False
        self._lock = asyncio.Lock()

    async def next(self) -> AsyncOptional[T]:
        async with self._lock:
            if self._done:
                return AsyncOptional.empty()
            if self._last.is_empty():
                self._last = Optional.present(self._seed)
                return AsyncOptional.present(self._seed)
            following = await (await resolve(self._step(self._last.get()))).to_optional()  # type: ignore[arg-type]
            if following.is_empty():
                self._done = True
            else:
                self._last = following
            return AsyncOptional.of_optional(following)

    def stop(self) -> None:
        self._done = True


class OnceAsyncIterable(Generic[T]):
    """Hands out a single AsyncOptional, once."""

    def __init__(self, optional: AsyncOptional[T]) -> None:
        self._optional = optional
        self._delivered = False

    async def next(self) -> AsyncOptional[T]:
        if self._delivered:
            return AsyncOptional.empty()
        self._delivered = True
        return self._optional

    def stop(self) -> None:
        self._delivered = True
