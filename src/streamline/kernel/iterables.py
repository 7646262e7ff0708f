"""Synchronous pull iterators used as sources and by the sync Stream."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from collections.abc import Iterable as PyIterable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from streamline.kernel.errors import NoSuchElementError
from streamline.kernel.functions import Mapper, Predicate, Supplier
from streamline.kernel.optional import Optional
from streamline.kernel.ports import Iterable

if TYPE_CHECKING:
    from streamline.transformers import Transformer

T = TypeVar("T")
A = TypeVar("A")
R = TypeVar("R")


class ArrayIterable(Generic[T]):
    """Iterates over a sequence by index."""

    def __init__(self, items: Sequence[T]) -> None:
        self._items = items
        self._index = 0

    def has_next(self) -> bool:
        return self._index < len(self._items)

    def get_next(self) -> T:
        if not self.has_next():
            raise NoSuchElementError("Index out of bounds")
        item = self._items[self._index]
        self._index += 1
        return item


class IteratorIterable(Generic[T]):
    """Adapts any Python iterable, peeking one element ahead."""

    def __init__(self, items: PyIterable[T]) -> None:
        self._iterator: Iterator[T] = iter(items)
        self._lookahead: Optional[T] = Optional.empty()
        self._exhausted = False

    def has_next(self) -> bool:
        if self._lookahead.is_present():
            return True
        if self._exhausted:
            return False
        try:
            self._lookahead = Optional.present(next(self._iterator))
        except StopIteration:
            self._exhausted = True
            return False
        return True

    def get_next(self) -> T:
        if not self.has_next():
            raise NoSuchElementError("No elements remaining")
        item = self._lookahead.get()
        self._lookahead = Optional.empty()
        return item  # type: ignore[return-value]


class RangeIterable:
    """Counts from ``start`` up to ``stop`` (exclusive)."""

    def __init__(self, start: int, stop: int, step: int = 1) -> None:
        if step <= 0:
            raise ValueError("step must be positive")
        self._current = start
        self._stop = stop
        self._step = step

    def has_next(self) -> bool:
        return self._current < self._stop

    def get_next(self) -> int:
        if not self.has_next():
            raise NoSuchElementError("Range exhausted")
        value = self._current
        self._current += self._step
        return value


class GeneratingIterable(Generic[T]):
    """Infinite source fed by a supplier."""

    def __init__(self, supplier: Supplier[T]) -> None:
        self._supplier = supplier

    def has_next(self) -> bool:
        return True

    def get_next(self) -> T:
        return self._supplier()


class MappingIterable(Generic[T, R]):
    def __init__(self, source: Iterable[T], mapper: Mapper[T, R]) -> None:
        self._source = source
        self._mapper = mapper

    def has_next(self) -> bool:
        return self._source.has_next()

    def get_next(self) -> R:
        return self._mapper(self._source.get_next())


class _LookaheadIterable(Generic[T]):
    """Base for iterables that must pull ahead to answer ``has_next``."""

    def __init__(self) -> None:
        self._next: Optional[T] = Optional.empty()

    def get_next(self) -> T:
        if self._next.is_empty() and not self.has_next():  # type: ignore[attr-defined]
            raise NoSuchElementError("No elements remaining")
        item = self._next.get()
        self._next = Optional.empty()
        return item  # type: ignore[return-value]


class FilteringIterable(_LookaheadIterable[T]):
    def __init__(self, source: Iterable[T], predicate: Predicate[T]) -> None:
        super().__init__()
        self._source = source
        self._predicate = predicate

    def has_next(self) -> bool:
        while self._next.is_empty() and self._source.has_next():
            self._next = Optional.present(self._source.get_next()).filter(self._predicate)
        return self._next.is_present()


class TakeWhileIterable(_LookaheadIterable[T]):
    """Yields values until the first one failing the predicate."""

    def __init__(self, source: Iterable[T], predicate: Predicate[T]) -> None:
        super().__init__()
        self._source = source
        self._predicate = predicate
        self._done = False

    def has_next(self) -> bool:
        if self._next.is_present():
            return True
        if self._done or not self._source.has_next():
            return False
        self._next = Optional.present(self._source.get_next()).filter(self._predicate)
        self._done = self._next.is_empty()
        return not self._done


class DropWhileIterable(_LookaheadIterable[T]):
    """Skips leading values matching the predicate, then yields everything."""

    def __init__(self, source: Iterable[T], predicate: Predicate[T]) -> None:
        super().__init__()
        self._source = source
        self._predicate = predicate
        self._dropping = True

    def has_next(self) -> bool:
        if self._next.is_present():
            return True
        while self._dropping and self._source.has_next():
            candidate = self._source.get_next()
            if not self._predicate(candidate):
                self._dropping = False
                self._next = Optional.present(candidate)
                return True
        self._dropping = False
        return self._source.has_next()

    def get_next(self) -> T:
        if not self.has_next():
            raise NoSuchElementError("No elements remaining")
        if self._next.is_present():
            return super().get_next()
        return self._source.get_next()


class LimitingIterable(Generic[T]):
    def __init__(self, source: Iterable[T], limit: int) -> None:
        self._source = source
        self._limit = limit
        self._read = 0

    def has_next(self) -> bool:
        if self._read >= self._limit:
            return False
        return self._source.has_next()

    def get_next(self) -> T:
        if self._read >= self._limit:
            raise NoSuchElementError("Limit reached")
        self._read += 1
        return self._source.get_next()


class FlatteningIterable(Generic[T]):
    """Iterates an iterable of iterables, depth first."""

    def __init__(self, source: Iterable[Iterable[T]]) -> None:
        self._source = source
        self._current: Iterable[T] | None = None

    def has_next(self) -> bool:
        while (self._current is None or not self._current.has_next()) and self._source.has_next():
            self._current = self._source.get_next()
        return self._current is not None and self._current.has_next()

    def get_next(self) -> T:
        if not self.has_next():
            raise NoSuchElementError("No elements remaining")
        return self._current.get_next()  # type: ignore[union-attr]


class TransformingIterable(_LookaheadIterable[R], Generic[T, A, R]):
    """Feeds a Transformer and yields whatever it emits."""

    def __init__(self, source: Iterable[T], transformer: Transformer[T, A, R]) -> None:
        super().__init__()
        self._source = source
        self._transformer = transformer
        self._accumulator: Any = transformer.supplier()
        self._finished = False

    def has_next(self) -> bool:
        if self._next.is_present():
            return True
        while self._source.has_next():
            step = self._transformer.transformer(self._accumulator, self._source.get_next())
            if step.value.is_present():
                if step.clear_state:
                    self._accumulator = self._transformer.supplier()
                self._next = step.value
                return True
        if not self._finished:
            self._finished = True
            self._next = self._transformer.finisher(self._accumulator)
        return self._next.is_present()
