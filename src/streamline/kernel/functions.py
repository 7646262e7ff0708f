"""Callable shapes shared by the sync and async layers."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")

MaybeAwaitable = T | Awaitable[T]

Mapper = Callable[[T], R]
Predicate = Callable[[T], bool]
Supplier = Callable[[], T]
Consumer = Callable[[T], None]
Comparator = Callable[[T, T], int]

# Callbacks the async layer accepts in either plain or coroutine form
AsyncMapper = Callable[[T], R | Awaitable[R]]
AsyncPredicate = Callable[[T], bool | Awaitable[bool]]
AsyncSupplier = Callable[[], T | Awaitable[T]]
AsyncConsumer = Callable[[T], Awaitable[None] | None]


async def resolve(value: MaybeAwaitable[T]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it as is.

    This is what lets every callback accepted by the library be either a plain
    function or a coroutine function.
    """
    if inspect.isawaitable(value):
        return await value
    return value  # type: ignore[return-value]


def identity(value: T) -> T:
    return value


def negate(predicate: AsyncPredicate[T]) -> Callable[[T], Awaitable[bool]]:
    """Invert a sync or async predicate. The result is always async."""

    async def negated(value: T) -> bool:
        return not await resolve(predicate(value))

    return negated


def natural_order(a: Any, b: Any) -> int:
    if a < b:
        return -1
    if b < a:
        return 1
    return 0


def reverse_order(a: Any, b: Any) -> int:
    return natural_order(b, a)


def compare_string(a: str, b: str) -> int:
    """Case-sensitive lexical comparison."""
    return natural_order(a, b)


def comparing_by(
    key: Mapper[T, Any],
    comparator: Comparator[Any] = natural_order,
) -> Comparator[T]:
    """Build a comparator that compares the keys extracted from each value.

    Args:
        key: Extracts the value to compare on.
        comparator: Compares two extracted keys.

    Returns:
        Comparator over the original values.
    """

    def compare(a: T, b: T) -> int:
        return comparator(key(a), key(b))

    return compare
