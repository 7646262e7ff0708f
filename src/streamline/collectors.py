"""Collectors - reduce a whole source into one result."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from streamline.kernel.functions import Mapper, identity
from streamline.kernel.ports import Iterable

if TYPE_CHECKING:
    from streamline.kernel.ports import AsyncIterable

T = TypeVar("T")
A = TypeVar("A")
R = TypeVar("R")
K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class Collector(Generic[T, A, R]):
    """Descriptor of a reduction.

    Attributes:
        supplier: Creates an empty accumulator.
        accumulator: Folds one element into the accumulator (in place).
        finisher: Turns the accumulator into the final result.
    """

    supplier: Callable[[], A]
    accumulator: Callable[[A, T], None]
    finisher: Callable[[A], R]


def collect(iterable: Iterable[T], collector: Collector[T, A, R]) -> R:
    accumulated = collector.supplier()
    while iterable.has_next():
        collector.accumulator(accumulated, iterable.get_next())
    return collector.finisher(accumulated)


async def collect_async(iterable: AsyncIterable[T], collector: Collector[T, A, R]) -> R:
    """Drain an async iterable into a collector, one pull at a time."""
    accumulated = collector.supplier()
    while True:
        item = await (await iterable.next()).to_optional()
        if item.is_empty():
            return collector.finisher(accumulated)
        collector.accumulator(accumulated, item.get())  # type: ignore[arg-type]


class _Counter:
    __slots__ = ("total",)

    def __init__(self) -> None:
        self.total: Any = 0


def _count_one(counter: _Counter, _: Any) -> None:
    counter.total += 1


class Collectors:
    """Factory for the common collectors."""

    @staticmethod
    def to_list() -> Collector[T, list[T], list[T]]:
        return Collector(supplier=list, accumulator=list.append, finisher=identity)

    @staticmethod
    def counting() -> Collector[Any, _Counter, int]:
        return Collector(
            supplier=_Counter,
            accumulator=_count_one,
            finisher=lambda counter: counter.total,
        )

    @staticmethod
    def summing(mapper: Mapper[T, Any] = identity) -> Collector[T, _Counter, Any]:
        def add(counter: _Counter, item: T) -> None:
            counter.total += mapper(item)

        return Collector(
            supplier=_Counter,
            accumulator=add,
            finisher=lambda counter: counter.total,
        )

    @staticmethod
    def to_dict(
        key_mapper: Mapper[T, K],
        value_mapper: Mapper[T, V] = identity,  # type: ignore[assignment]
    ) -> Collector[T, dict[K, V], dict[K, V]]:
        """Later elements overwrite earlier ones with the same key."""

        def put(mapping: dict[K, V], item: T) -> None:
            mapping[key_mapper(item)] = value_mapper(item)

        return Collector(supplier=dict, accumulator=put, finisher=identity)

    @staticmethod
    def joining(separator: str = "") -> Collector[Any, list[str], str]:
        def add(parts: list[str], item: Any) -> None:
            parts.append(str(item))

        return Collector(supplier=list, accumulator=add, finisher=separator.join)
