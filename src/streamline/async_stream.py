"""AsyncStream - fluent, single-use facade over an AsyncIterable."""

from __future__ import annotations

import itertools
import logging
from collections.abc import AsyncIterator, Awaitable
from collections.abc import Iterable as PyIterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from streamline.collectors import Collector, Collectors, collect_async
from streamline.combinators.buffer import BufferingAsyncIterable
from streamline.combinators.ops import (
    FilteringAsyncIterable,
    FlatMappingAsyncIterable,
    LimitingAsyncIterable,
    MappingAsyncIterable,
    TransformingAsyncIterable,
)
from streamline.combinators.sources import (
    EmptyAsyncIterable,
    GeneratingAsyncIterable,
    IteratingAsyncIterable,
    SequentialGeneratingAsyncIterable,
    SyncToAsyncIterable,
)
from streamline.config import DEFAULT_BUFFER_SIZE
from streamline.kernel.async_optional import AsyncOptional
from streamline.kernel.errors import TerminatedStreamError
from streamline.kernel.functions import (
    AsyncConsumer,
    AsyncMapper,
    AsyncPredicate,
    AsyncSupplier,
    Comparator,
    identity,
    negate,
    resolve,
)
from streamline.kernel.iterables import ArrayIterable, IteratorIterable
from streamline.kernel.optional import Optional
from streamline.kernel.ports import AsyncIterable
from streamline.transformers import Transformer, Transformers

if TYPE_CHECKING:
    from streamline.stream import Stream

T = TypeVar("T")
A = TypeVar("A")
R = TypeVar("R")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Indexed(Generic[T]):
    """A value paired with its 0-based position in the stream."""

    index: int
    value: T


class AsyncStream(Generic[T]):
    """Lazy pipeline over an asynchronous source.

    Intermediate operations (``map``, ``filter``, ``buffer``...) wrap the
    current iterable in a new combinator and return a fresh stream; nothing is
    pulled until a terminal operation runs. Callbacks may be plain functions or
    coroutine functions.

    A stream is single-use. The first terminal operation claims it; any later
    terminal call raises TerminatedStreamError immediately, before anything is
    awaited.
    """

    def __init__(self, iterable: AsyncIterable[T]) -> None:
        self._iterable = iterable
        self._terminated = False

    # Construction

    @staticmethod
    def of(*items: T) -> AsyncStream[T]:
        return AsyncStream(SyncToAsyncIterable(ArrayIterable(items)))

    @staticmethod
    def of_iterable(items: PyIterable[T]) -> AsyncStream[T]:
        """Stream any Python iterable, pulled lazily."""
        return AsyncStream(SyncToAsyncIterable(IteratorIterable(items)))

    @staticmethod
    def of_stream(stream: Stream[T]) -> AsyncStream[T]:
        return AsyncStream(SyncToAsyncIterable(stream.get_iterable()))

    @staticmethod
    def empty() -> AsyncStream[T]:
        return AsyncStream(EmptyAsyncIterable())

    @staticmethod
    def concat(*streams: AsyncStream[T]) -> AsyncStream[T]:
        """Join streams end to end, each drained fully before the next."""
        return AsyncStream.of(*streams).flat_map(identity)

    @staticmethod
    def generate(generator: AsyncSupplier[AsyncOptional[T]]) -> AsyncStream[T]:
        """Stream fed by ``generator`` until it returns an absent optional.

        Under a buffer the generator is called concurrently and values may
        arrive out of order. Combine with ``limit`` for unbounded generators.
        """
        return AsyncStream(GeneratingAsyncIterable(generator))

    @staticmethod
    def generate_finite(
        generator: AsyncSupplier[AsyncOptional[T]],
        sequential: bool = False,
    ) -> AsyncStream[T]:
        """Like ``generate``; ``sequential`` serializes generator calls.

        With ``sequential=True`` values keep their generation order even when
        the stream is buffered.
        """
        if sequential:
            return AsyncStream(SequentialGeneratingAsyncIterable(generator))
        return AsyncStream(GeneratingAsyncIterable(generator))

    @staticmethod
    def iterate(seed: T, step: AsyncMapper[T, AsyncOptional[T]]) -> AsyncStream[T]:
        """``seed``, ``step(seed)``, ``step(step(seed))``... until absent."""
        return AsyncStream(IteratingAsyncIterable(seed, step))

    # Intermediate operations

    def filter(self, predicate: AsyncPredicate[T]) -> AsyncStream[T]:
        return AsyncStream(FilteringAsyncIterable(self._iterable, predicate))

    def map(self, mapper: AsyncMapper[T, R]) -> AsyncStream[R]:
        return AsyncStream(MappingAsyncIterable(self._iterable, mapper))

    def flat_map(self, mapper: AsyncMapper[T, AsyncStream[R]]) -> AsyncStream[R]:
        """Expand each value into a stream and flatten, in order.

        A sync ``Stream`` result can be adapted with ``Stream.to_async()``.
        """
        return AsyncStream(FlatMappingAsyncIterable(self._iterable, mapper))

    def flat_map_iterable(self, mapper: AsyncMapper[T, PyIterable[R]]) -> AsyncStream[R]:
        """Like ``flat_map`` for mappers returning plain Python iterables."""

        async def expand(item: T) -> AsyncStream[R]:
            return AsyncStream.of_iterable(await resolve(mapper(item)))

        return self.flat_map(expand)

    def transform(self, transformer: Transformer[T, A, R]) -> AsyncStream[R]:
        return AsyncStream(TransformingAsyncIterable(self._iterable, transformer))

    def buffer(self, size: int = DEFAULT_BUFFER_SIZE) -> AsyncStream[T]:
        """Keep up to ``size`` upstream pulls in flight.

        Values are delivered as they complete, so order is only guaranteed for
        ``size == 1``. The buffer stops pulling as soon as a terminal
        operation such as ``find_first`` loses interest.
        """
        return AsyncStream(BufferingAsyncIterable(self._iterable, size))

    def limit(self, max: int) -> AsyncStream[T]:
        return AsyncStream(LimitingAsyncIterable(self._iterable, max))

    def batch(self, size: int) -> AsyncStream[list[T]]:
        return self.transform(Transformers.batch(size))

    def peek(self, consumer: AsyncConsumer[T]) -> AsyncStream[T]:
        """Observe each value on its way through."""

        async def observe(item: T) -> T:
            await resolve(consumer(item))
            return item

        return self.map(observe)

    def indexed(self) -> AsyncStream[Indexed[T]]:
        """Pair each value with a 0-based index counted from this point."""
        counter = itertools.count()
        return self.map(lambda value: Indexed(index=next(counter), value=value))

    def sorted(self, comparator: Comparator[T] | None = None) -> AsyncStream[T]:
        """Sort mid-stream. Absorbs the whole upstream before emitting."""
        return self.transform(Transformers.sorted(comparator)).flat_map_iterable(identity)

    def distinct(self) -> AsyncStream[T]:
        return self.transform(Transformers.distinct())

    # Terminal operations

    def _terminate(self, operation: str) -> AsyncIterable[T]:
        if self._terminated:
            raise TerminatedStreamError(operation)
        self._terminated = True
        logger.debug("Terminal operation %s", operation)
        return self._iterable

    def get_iterable(self) -> AsyncIterable[T]:
        """Hand over the underlying iterable. Counts as a terminal operation."""
        return self._terminate("get_iterable")

    def find_first(self, predicate: AsyncPredicate[T] | None = None) -> AsyncOptional[T]:
        """First value (matching ``predicate``, if given), then stop the chain.

        Stopping propagates upstream so buffers stop issuing new pulls.
        """
        iterable = self._terminate("find_first")
        if predicate is not None:
            return AsyncStream(FilteringAsyncIterable(iterable, predicate)).find_first()

        async def first() -> Optional[T]:
            try:
                return await (await iterable.next()).to_optional()
            finally:
                iterable.stop()

        return AsyncOptional(first)

    def any_match(self, predicate: AsyncPredicate[T]) -> Awaitable[bool]:
        iterable = self._terminate("any_match")
        return AsyncStream(iterable).find_first(predicate).is_present()

    def none_match(self, predicate: AsyncPredicate[T]) -> Awaitable[bool]:
        iterable = self._terminate("none_match")
        return AsyncStream(iterable).find_first(predicate).is_empty()

    def all_match(self, predicate: AsyncPredicate[T]) -> Awaitable[bool]:
        """True when no value fails ``predicate`` (so also for an empty stream)."""
        iterable = self._terminate("all_match")
        return AsyncStream(iterable).none_match(negate(predicate))

    def collect(self, collector: Collector[T, A, R]) -> Awaitable[R]:
        return collect_async(self._terminate("collect"), collector)

    def to_list(self) -> Awaitable[list[T]]:
        return collect_async(self._terminate("to_list"), Collectors.to_list())

    def count(self) -> Awaitable[int]:
        return collect_async(self._terminate("count"), Collectors.counting())

    def for_each(self, consumer: AsyncConsumer[T]) -> Awaitable[None]:
        iterable = self._terminate("for_each")

        async def drain() -> None:
            while True:
                item = await (await iterable.next()).to_optional()
                if item.is_empty():
                    return
                await resolve(consumer(item.get()))  # type: ignore[arg-type]

        return drain()

    def __aiter__(self) -> AsyncIterator[T]:
        """Iterate with ``async for``.

        The upstream chain is stopped when the iterator closes. After an early
        ``break`` that happens on ``aclose()`` (e.g. via
        ``contextlib.aclosing``) or when the iterator is finalized.
        """
        iterable = self._terminate("__aiter__")

        async def values() -> AsyncIterator[T]:
            try:
                while True:
                    item = await (await iterable.next()).to_optional()
                    if item.is_empty():
                        return
                    yield item.get()  # type: ignore[misc]
            finally:
                iterable.stop()

        return values()
