"""Transformers - stateful operators that sit in the middle of a stream.

A transformer is like a collector that may emit values before the source is
exhausted. It folds each element into an accumulator and may answer with a
value; a value can come with a request to start over with a fresh
accumulator (e.g. a completed batch). When the source runs dry the finisher
gets one chance to flush whatever is left.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Generic, TypeVar

from streamline.config import BatchSettings
from streamline.kernel.functions import Comparator, natural_order
from streamline.kernel.optional import Optional

T = TypeVar("T")
A = TypeVar("A")
R = TypeVar("R")


@dataclass(frozen=True)
class TransformStep(Generic[R]):
    """Outcome of folding one element.

    Attributes:
        value: Value to emit, if any.
        clear_state: Replace the accumulator before the next element.
            Only honoured when ``value`` is present.
    """

    value: Optional[R]
    clear_state: bool = False

    @staticmethod
    def emit(value: R, clear_state: bool = False) -> TransformStep[R]:
        return TransformStep(Optional.present(value), clear_state)

    @staticmethod
    def skip() -> TransformStep[Any]:
        return TransformStep(Optional.empty())


@dataclass(frozen=True)
class Transformer(Generic[T, A, R]):
    """Descriptor of a mid-stream stateful operator.

    Attributes:
        supplier: Creates a fresh accumulator.
        transformer: Folds an element into the accumulator.
        finisher: Produces an optional trailing value from the accumulator.
    """

    supplier: Callable[[], A]
    transformer: Callable[[A, T], TransformStep[R]]
    finisher: Callable[[A], Optional[R]]


class Transformers:
    """Factory for the common transformers."""

    @staticmethod
    def batch(size: int) -> Transformer[T, list[T], list[T]]:
        """Group elements into lists of ``size``; the last one may be shorter."""
        size = BatchSettings(size=size).size

        def fold(batch: list[T], item: T) -> TransformStep[list[T]]:
            batch.append(item)
            if len(batch) >= size:
                return TransformStep.emit(batch, clear_state=True)
            return TransformStep.skip()

        def finish(batch: list[T]) -> Optional[list[T]]:
            return Optional.of(batch).filter(lambda b: len(b) > 0)

        return Transformer(supplier=list, transformer=fold, finisher=finish)

    @staticmethod
    def distinct() -> Transformer[T, set[T], T]:
        """Only let the first occurrence of each (hashable) value through."""

        def fold(seen: set[T], item: T) -> TransformStep[T]:
            if item in seen:
                return TransformStep.skip()
            seen.add(item)
            return TransformStep.emit(item)

        return Transformer(
            supplier=set,
            transformer=fold,
            finisher=lambda _: Optional.empty(),
        )

    @staticmethod
    def sorted(comparator: Comparator[T] | None = None) -> Transformer[T, list[T], list[T]]:
        """Absorb the whole source and emit it once, sorted, as a single list."""
        key = cmp_to_key(comparator or natural_order)

        def fold(items: list[T], item: T) -> TransformStep[list[T]]:
            items.append(item)
            return TransformStep.skip()

        def finish(items: list[T]) -> Optional[list[T]]:
            return Optional.present(sorted(items, key=key))

        return Transformer(supplier=list, transformer=fold, finisher=finish)
