"""Iteration protocols - the seams every source and combinator plugs into."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    from streamline.kernel.async_optional import AsyncOptional

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Iterable(Protocol[T_co]):
    """Synchronous pull iterator."""

    def has_next(self) -> bool:
        """Return True if ``get_next`` can produce another value."""
        ...

    def get_next(self) -> T_co:
        """Produce the next value, raising NoSuchElementError when exhausted."""
        ...


class AsyncIterable(Protocol[T]):
    """Asynchronous pull iterator with cooperative cancellation.

    ``next`` resolves to an AsyncOptional; an absent optional means the
    source is exhausted. ``stop`` tells the iterable (and, transitively, its
    upstream) that no more values are wanted. It is one-way and idempotent;
    after it, ``next`` reports absent on every call, possibly after handing
    out values that were already fetched.

    Each iterable is owned by exactly one downstream consumer.
    """

    async def next(self) -> AsyncOptional[T]: ...

    def stop(self) -> None: ...
