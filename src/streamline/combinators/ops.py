"""Pass-through combinators: filter, map, flat_map, transform and limit.

Each wraps exactly one upstream AsyncIterable, pulls from it on demand and
forwards ``stop`` to it. All of them preserve source order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from streamline.combinators.sources import EmptyAsyncIterable
from streamline.config import LimitSettings
from streamline.kernel.async_optional import AsyncOptional
from streamline.kernel.functions import AsyncMapper, AsyncPredicate, resolve
from streamline.kernel.ports import AsyncIterable

if TYPE_CHECKING:
    from streamline.async_stream import AsyncStream
    from streamline.transformers import Transformer

T = TypeVar("T")
A = TypeVar("A")
R = TypeVar("R")

logger = logging.getLogger(__name__)


class FilteringAsyncIterable(Generic[T]):
    """Pulls until a value passes the predicate or the upstream runs dry."""

    def __init__(self, upstream: AsyncIterable[T], predicate: AsyncPredicate[T]) -> None:
        self._upstream = upstream
        self._predicate = predicate
        self._stopped = False

    async def next(self) -> AsyncOptional[T]:
        while not self._stopped:
            item = await (await self._upstream.next()).to_optional()
            if item.is_empty():
                return AsyncOptional.empty()
            if await resolve(self._predicate(item.get())):  # type: ignore[arg-type]
                return AsyncOptional.of_optional(item)
        return AsyncOptional.empty()

    def stop(self) -> None:
        self._stopped = True
        self._upstream.stop()


class MappingAsyncIterable(Generic[T, R]):
    """Applies a sync or async mapper to every upstream value.

    Whatever the mapper returns is delivered, None included; only an absent
    upstream pull produces an absent result.
    """

    def __init__(self, upstream: AsyncIterable[T], mapper: AsyncMapper[T, R]) -> None:
        self._upstream = upstream
        self._mapper = mapper
        self._stopped = False

    async def next(self) -> AsyncOptional[R]:
        if self._stopped:
            return AsyncOptional.empty()
        item = await (await self._upstream.next()).to_optional()
        if item.is_empty():
            return AsyncOptional.empty()
        return AsyncOptional.present(await resolve(self._mapper(item.get())))  # type: ignore[arg-type]

    def stop(self) -> None:
        self._stopped = True
        self._upstream.stop()


class FlatMappingAsyncIterable(Generic[T, R]):
    """Maps each upstream value to a stream and drains those streams in turn.

    Strictly sequential: the stream made from upstream element ``i`` is
    drained completely before element ``i + 1`` is pulled.
    """

    def __init__(
        self,
        upstream: AsyncIterable[T],
        mapper: AsyncMapper[T, AsyncStream[R]],
    ) -> None:
        self._upstream = upstream
        self._mapper = mapper
        self._current: AsyncIterable[R] = EmptyAsyncIterable()
        self._done = False

    async def next(self) -> AsyncOptional[R]:
        while not self._done:
            item = await (await self._current.next()).to_optional()
            if item.is_present():
                return AsyncOptional.of_optional(item)

            source = await (await self._upstream.next()).to_optional()
            if source.is_empty():
                self._done = True
                break
            mapped = await resolve(self._mapper(source.get()))  # type: ignore[arg-type]
            self._current = mapped.get_iterable()
        return AsyncOptional.empty()

    def stop(self) -> None:
        # the inner stream being drained is simply abandoned
        self._done = True
        self._upstream.stop()


class TransformingAsyncIterable(Generic[T, A, R]):
    """Runs a Transformer over the upstream values.

    The accumulator is created on first use. When the upstream is exhausted
    the finisher is consulted exactly once.
    """

    def __init__(self, upstream: AsyncIterable[T], transformer: Transformer[T, A, R]) -> None:
        self._upstream = upstream
        self._transformer = transformer
        self._accumulator: Any = None
        self._has_accumulator = False
        self._done = False

    def _ensure_accumulator(self) -> A:
        if not self._has_accumulator:
            self._accumulator = self._transformer.supplier()
            self._has_accumulator = True
        return self._accumulator

    async def next(self) -> AsyncOptional[R]:
        while not self._done:
            item = await (await self._upstream.next()).to_optional()
            if item.is_empty():
                self._done = True
                return AsyncOptional.of_optional(self._transformer.finisher(self._ensure_accumulator()))

            step = self._transformer.transformer(self._ensure_accumulator(), item.get())  # type: ignore[arg-type]
            if step.value.is_present():
                if step.clear_state:
                    self._has_accumulator = False
                    self._accumulator = None
                return AsyncOptional.of_optional(step.value)
        return AsyncOptional.empty()

    def stop(self) -> None:
        self._done = True
        self._upstream.stop()


class LimitingAsyncIterable(Generic[T]):
    """Delivers at most ``max`` values, even under overlapping pulls.

    The committed count is checked before pulling and again once the pull
    resolves, so concurrent callers racing past the bound have their values
    discarded. Which upstream values win such a race is not deterministic;
    strictly sequential callers get exactly the first ``max`` values.
    """

    def __init__(self, source: AsyncIterable[T], max: int) -> None:
        self._source = source
        self._max = LimitSettings(max=max).max
        self._committed = 0
        self._stopped = False

    async def next(self) -> AsyncOptional[T]:
        if self._stopped:
            return AsyncOptional.empty()
        if self._committed >= self._max:
            logger.debug("Limit of %d reached, stopping source", self._max)
            self.stop()
            return AsyncOptional.empty()

        item = await (await self._source.next()).to_optional()
        if item.is_empty():
            return AsyncOptional.empty()
        if self._stopped or self._committed >= self._max:
            logger.debug("Discarding value pulled past the limit of %d", self._max)
            return AsyncOptional.empty()
        self._committed += 1
        return AsyncOptional.of_optional(item)

    def stop(self) -> None:
        self._stopped = True
        self._source.stop()
