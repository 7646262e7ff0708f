"""AsyncOptional - a lazily resolved zero-or-one value container."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from streamline.kernel.functions import (
    AsyncConsumer,
    AsyncMapper,
    AsyncPredicate,
    AsyncSupplier,
    Supplier,
    resolve,
)
from streamline.kernel.optional import Optional

if TYPE_CHECKING:
    from streamline.async_stream import AsyncStream

T = TypeVar("T")
R = TypeVar("R")


class AsyncOptional(Generic[T]):
    """Async counterpart of :class:`Optional`.

    Wraps a deferred computation of an ``Optional``. Nothing runs until the
    optional is first awaited through one of its accessors; the outcome
    (value or exception) is then shared by every later awaiter.

    Instances are never mutated in a way callers can observe: ``map``,
    ``flat_map`` and ``filter`` build new instances whose computation awaits
    this one.
    """

    __slots__ = ("_compute", "_future")

    def __init__(self, compute: Callable[[], Awaitable[Optional[T]]]) -> None:
        self._compute = compute
        self._future: asyncio.Future[Optional[T]] | None = None

    # Construction

    @staticmethod
    def of(value: T | None) -> AsyncOptional[T]:
        """Wrap a plain value; None means absent."""
        return AsyncOptional.of_optional(Optional.of(value))

    @staticmethod
    def present(value: T) -> AsyncOptional[T]:
        """Wrap a value that is present even when it is None."""
        return AsyncOptional.of_optional(Optional.present(value))

    @staticmethod
    def empty() -> AsyncOptional[T]:
        return AsyncOptional.of_optional(Optional.empty())

    @staticmethod
    def of_optional(optional: Optional[T]) -> AsyncOptional[T]:
        async def compute() -> Optional[T]:
            return optional

        return AsyncOptional(compute)

    @staticmethod
    def of_awaitable(awaitable: Awaitable[T | None]) -> AsyncOptional[T]:
        """Wrap an awaitable of a value; a None result means absent."""

        async def compute() -> Optional[T]:
            return Optional.of(await awaitable)

        return AsyncOptional(compute)

    @staticmethod
    def flatten(awaitable: Awaitable[AsyncOptional[T]]) -> AsyncOptional[T]:
        """Collapse an awaitable of an AsyncOptional into an AsyncOptional."""

        async def compute() -> Optional[T]:
            inner = await awaitable
            return await inner.to_optional()

        return AsyncOptional(compute)

    # Resolution

    async def to_optional(self) -> Optional[T]:
        """Resolve to the synchronous optional, computing it on first call.

        Cancelling one awaiter (e.g. a timeout) leaves the shared computation
        running for the others.
        """
        if self._future is None:
            self._future = asyncio.ensure_future(self._compute())
        return await asyncio.shield(self._future)

    async def get(self) -> T | None:
        return (await self.to_optional()).get()

    async def is_present(self) -> bool:
        return (await self.to_optional()).is_present()

    async def is_empty(self) -> bool:
        return (await self.to_optional()).is_empty()

    async def or_else(self, other: T) -> T:
        return (await self.to_optional()).or_else(other)

    async def or_else_get(self, supplier: AsyncSupplier[T]) -> T:
        optional = await self.to_optional()
        if optional.is_present():
            return optional.get()  # type: ignore[return-value]
        return await resolve(supplier())

    async def or_else_throw(self, error_supplier: Supplier[BaseException] | None = None) -> T:
        return (await self.to_optional()).or_else_throw(error_supplier)

    async def if_present(self, consumer: AsyncConsumer[T]) -> None:
        optional = await self.to_optional()
        if optional.is_present():
            await resolve(consumer(optional.get()))  # type: ignore[arg-type]

    async def if_present_or_else(
        self,
        consumer: AsyncConsumer[T],
        action: Callable[[], Any],
    ) -> None:
        optional = await self.to_optional()
        if optional.is_present():
            await resolve(consumer(optional.get()))  # type: ignore[arg-type]
        else:
            await resolve(action())

    # Deferred operations

    def map(self, mapper: AsyncMapper[T, R | None]) -> AsyncOptional[R]:
        """Map the value when present; a None result becomes absent."""

        async def compute() -> Optional[R]:
            optional = await self.to_optional()
            if optional.is_empty():
                return Optional.empty()
            return Optional.of(await resolve(mapper(optional.get())))  # type: ignore[arg-type]

        return AsyncOptional(compute)

    def flat_map(self, mapper: AsyncMapper[T, AsyncOptional[R]]) -> AsyncOptional[R]:
        """Map the value to another AsyncOptional without double wrapping.

        A plain ``Optional`` result can be adapted with ``Optional.to_async()``.
        """

        async def compute() -> Optional[R]:
            optional = await self.to_optional()
            if optional.is_empty():
                return Optional.empty()
            mapped = await resolve(mapper(optional.get()))  # type: ignore[arg-type]
            return await mapped.to_optional()

        return AsyncOptional(compute)

    def filter(self, predicate: AsyncPredicate[T]) -> AsyncOptional[T]:
        async def compute() -> Optional[T]:
            optional = await self.to_optional()
            if optional.is_empty():
                return optional
            if await resolve(predicate(optional.get())):  # type: ignore[arg-type]
                return optional
            return Optional.empty()

        return AsyncOptional(compute)

    def stream(self) -> AsyncStream[T]:
        """Convert to a stream of zero or one items."""
        from streamline.async_stream import AsyncStream
        from streamline.combinators.sources import OnceAsyncIterable

        return AsyncStream(OnceAsyncIterable(self))

    def __repr__(self) -> str:
        if self._future is not None and self._future.done() and not self._future.cancelled():
            if self._future.exception() is None:
                return f"AsyncOptional({self._future.result()!r})"
        return "AsyncOptional(<pending>)"
