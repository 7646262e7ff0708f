"""Stream - the synchronous pull pipeline, and the usual way into AsyncStream."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterator
from collections.abc import Iterable as PyIterable
from typing import TYPE_CHECKING, Generic, TypeVar

from streamline.collectors import Collector, Collectors, collect
from streamline.kernel.functions import Consumer, Mapper, Predicate, Supplier
from streamline.kernel.iterables import (
    ArrayIterable,
    DropWhileIterable,
    FilteringIterable,
    FlatteningIterable,
    GeneratingIterable,
    IteratorIterable,
    LimitingIterable,
    MappingIterable,
    RangeIterable,
    TakeWhileIterable,
    TransformingIterable,
)
from streamline.kernel.optional import Optional
from streamline.kernel.ports import Iterable

if TYPE_CHECKING:
    from streamline.async_stream import AsyncStream, Indexed
    from streamline.transformers import Transformer

T = TypeVar("T")
A = TypeVar("A")
R = TypeVar("R")


class Stream(Generic[T]):
    """Lazy synchronous pipeline over an Iterable. Consumed by reading it."""

    def __init__(self, iterable: Iterable[T]) -> None:
        self._iterable = iterable

    @staticmethod
    def of(*items: T) -> Stream[T]:
        return Stream(ArrayIterable(items))

    @staticmethod
    def of_iterable(items: PyIterable[T]) -> Stream[T]:
        return Stream(IteratorIterable(items))

    @staticmethod
    def range(start: int, stop: int) -> Stream[int]:
        return Stream(RangeIterable(start, stop))

    @staticmethod
    def range_closed(start: int, stop: int) -> Stream[int]:
        return Stream(RangeIterable(start, stop + 1))

    @staticmethod
    def generate(supplier: Supplier[T]) -> Stream[T]:
        """Infinite stream; bound it with ``limit`` or ``take_while``."""
        return Stream(GeneratingIterable(supplier))

    @staticmethod
    def empty() -> Stream[T]:
        return Stream.of()

    @staticmethod
    def concat(*streams: Stream[T]) -> Stream[T]:
        return Stream.of(*streams).flat_map(lambda stream: stream)

    def get_iterable(self) -> Iterable[T]:
        return self._iterable

    def map(self, mapper: Mapper[T, R]) -> Stream[R]:
        return Stream(MappingIterable(self._iterable, mapper))

    def filter(self, predicate: Predicate[T]) -> Stream[T]:
        return Stream(FilteringIterable(self._iterable, predicate))

    def flat_map(self, mapper: Mapper[T, Stream[R]]) -> Stream[R]:
        return Stream(FlatteningIterable(MappingIterable(self._iterable, lambda item: mapper(item).get_iterable())))

    def take_while(self, predicate: Predicate[T]) -> Stream[T]:
        return Stream(TakeWhileIterable(self._iterable, predicate))

    def drop_while(self, predicate: Predicate[T]) -> Stream[T]:
        return Stream(DropWhileIterable(self._iterable, predicate))

    def limit(self, max: int) -> Stream[T]:
        return Stream(LimitingIterable(self._iterable, max))

    def transform(self, transformer: Transformer[T, A, R]) -> Stream[R]:
        return Stream(TransformingIterable(self._iterable, transformer))

    def indexed(self) -> Stream[Indexed[T]]:
        from streamline.async_stream import Indexed

        counter = itertools.count()
        return self.map(lambda value: Indexed(index=next(counter), value=value))

    def peek(self, consumer: Consumer[T]) -> Stream[T]:
        def observe(item: T) -> T:
            consumer(item)
            return item

        return self.map(observe)

    def to_async(self) -> AsyncStream[T]:
        from streamline.async_stream import AsyncStream

        return AsyncStream.of_stream(self)

    # Terminal operations

    def collect(self, collector: Collector[T, A, R]) -> R:
        return collect(self._iterable, collector)

    def to_list(self) -> list[T]:
        return self.collect(Collectors.to_list())

    def count(self) -> int:
        return self.collect(Collectors.counting())

    def find_first(self) -> Optional[T]:
        if self._iterable.has_next():
            return Optional.present(self._iterable.get_next())
        return Optional.empty()

    def any_match(self, predicate: Predicate[T]) -> bool:
        return any(predicate(item) for item in self)

    def none_match(self, predicate: Predicate[T]) -> bool:
        return not self.any_match(predicate)

    def all_match(self, predicate: Predicate[T]) -> bool:
        return all(predicate(item) for item in self)

    def reduce(self, accumulator: Callable[[T, T], T]) -> Optional[T]:
        result: Optional[T] = Optional.empty()
        for item in self:
            if result.is_empty():
                result = Optional.present(item)
            else:
                result = Optional.present(accumulator(result.get(), item))  # type: ignore[arg-type]
        return result

    def for_each(self, consumer: Consumer[T]) -> None:
        for item in self:
            consumer(item)

    def __iter__(self) -> Iterator[T]:
        while self._iterable.has_next():
            yield self._iterable.get_next()
