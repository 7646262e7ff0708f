from __future__ import annotations

import asyncio

import pytest
from pydantic import ValidationError

from fakes import FakeAsyncIterable, pull_all
from streamline import AsyncOptional, AsyncStream, Transformers
from streamline.combinators import (
    BufferingAsyncIterable,
    EmptyAsyncIterable,
    FilteringAsyncIterable,
    FlatMappingAsyncIterable,
    GeneratingAsyncIterable,
    IteratingAsyncIterable,
    LimitingAsyncIterable,
    MappingAsyncIterable,
    SequentialGeneratingAsyncIterable,
    SyncToAsyncIterable,
    TransformingAsyncIterable,
)
from streamline.kernel.iterables import ArrayIterable


def from_list(values):
    return SyncToAsyncIterable(ArrayIterable(values))


async def next_value(iterable):
    return await (await iterable.next()).get()


class TestSyncSources:
    @pytest.mark.asyncio
    async def test_first_item(self):
        assert await next_value(from_list([1, 2, 3])) == 1

    @pytest.mark.asyncio
    async def test_all_items_then_absent(self):
        iterable = from_list([1, 2, 3])
        assert [await next_value(iterable) for _ in range(3)] == [1, 2, 3]
        assert await (await iterable.next()).is_empty()

    @pytest.mark.asyncio
    async def test_stopping_an_array_source_does_nothing(self):
        iterable = from_list([1, 2, 3])
        assert await next_value(iterable) == 1
        assert await next_value(iterable) == 2
        iterable.stop()
        assert await next_value(iterable) == 3
        assert await (await iterable.next()).is_empty()

    @pytest.mark.asyncio
    async def test_none_elements_pass_through(self):
        assert await pull_all(from_list([1, None, 3])) == [1, None, 3]

    @pytest.mark.asyncio
    async def test_empty_source(self):
        iterable = EmptyAsyncIterable()
        iterable.stop()
        assert await (await iterable.next()).is_empty()


class TestFiltering:
    @pytest.mark.asyncio
    async def test_provides_next_matching_item(self):
        iterable = FilteringAsyncIterable(from_list([1, 2, 3, 4, 5, 6]), lambda v: v % 2 == 0)
        assert await pull_all(iterable) == [2, 4, 6]

    @pytest.mark.asyncio
    async def test_async_predicate(self):
        async def odd(v):
            await asyncio.sleep(0)
            return v % 2 == 1

        assert await pull_all(FilteringAsyncIterable(from_list([1, 2, 3]), odd)) == [1, 3]

    @pytest.mark.asyncio
    async def test_can_be_stopped(self):
        source = FakeAsyncIterable(values=[1, 2, 3, 4, 5, 6])
        iterable = FilteringAsyncIterable(source, lambda v: v % 2 == 0)
        assert await next_value(iterable) == 2
        iterable.stop()
        assert await (await iterable.next()).is_empty()
        assert source.stops == 1


class TestMapping:
    @pytest.mark.asyncio
    async def test_maps_values(self):
        assert await pull_all(MappingAsyncIterable(from_list([1, 2, 3]), lambda v: v * 2)) == [2, 4, 6]

    @pytest.mark.asyncio
    async def test_mapper_returning_none_is_still_a_value(self):
        assert await pull_all(MappingAsyncIterable(from_list([1, 2]), lambda _: None)) == [None, None]

    @pytest.mark.asyncio
    async def test_absent_passes_through_without_calling_mapper(self):
        calls = []
        iterable = MappingAsyncIterable(EmptyAsyncIterable(), calls.append)
        assert await (await iterable.next()).is_empty()
        assert calls == []

    @pytest.mark.asyncio
    async def test_stop_forwards(self):
        source = FakeAsyncIterable(values=[1])
        MappingAsyncIterable(source, str).stop()
        assert source.stops == 1

    @pytest.mark.asyncio
    async def test_nothing_mapped_after_stop(self):
        calls = []

        def record(v):
            calls.append(v)
            return v * 10

        iterable = MappingAsyncIterable(from_list([1, 2, 3]), record)
        assert await next_value(iterable) == 10
        iterable.stop()
        assert await (await iterable.next()).is_empty()
        assert await (await iterable.next()).is_empty()
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_stopped_stream_map_over_sync_source(self):
        calls = []
        iterable = AsyncStream.of(1, 2, 3).map(lambda v: calls.append(v) or v).get_iterable()
        assert await next_value(iterable) == 1
        iterable.stop()
        assert await (await iterable.next()).is_empty()
        assert calls == [1]


class TestFlatMapping:
    @pytest.mark.asyncio
    async def test_flattens_in_order(self):
        iterable = FlatMappingAsyncIterable(from_list([[1, 2, 3], [4, 5, 6]]), AsyncStream.of_iterable)
        assert await pull_all(iterable) == [1, 2, 3, 4, 5, 6]

    @pytest.mark.asyncio
    async def test_skips_empty_inner_streams(self):
        iterable = FlatMappingAsyncIterable(
            from_list([[1, 2, 3], [], [4, 5, 6], []]),
            AsyncStream.of_iterable,
        )
        assert await pull_all(iterable) == [1, 2, 3, 4, 5, 6]

    @pytest.mark.asyncio
    async def test_nothing_after_stop(self):
        source = FakeAsyncIterable(values=[[1, 2, 3], [4, 5, 6]])
        iterable = FlatMappingAsyncIterable(source, AsyncStream.of_iterable)
        assert await next_value(iterable) == 1
        iterable.stop()
        assert await (await iterable.next()).is_empty()
        assert source.stops == 1

    @pytest.mark.asyncio
    async def test_inner_stream_drained_before_next_upstream_pull(self):
        source = FakeAsyncIterable(values=[[1, 2], [3]])
        iterable = FlatMappingAsyncIterable(source, AsyncStream.of_iterable)
        assert await next_value(iterable) == 1
        assert await next_value(iterable) == 2
        assert source.pulls == 1
        assert await next_value(iterable) == 3
        assert source.pulls == 2


class TestTransforming:
    @pytest.mark.asyncio
    async def test_batches(self):
        iterable = TransformingAsyncIterable(from_list(["a", "b", "c", "d", "e"]), Transformers.batch(2))
        assert await pull_all(iterable) == [["a", "b"], ["c", "d"], ["e"]]

    @pytest.mark.asyncio
    async def test_finisher_runs_once(self):
        flushes = []
        transformer = Transformers.batch(2)
        counted = type(transformer)(
            supplier=transformer.supplier,
            transformer=transformer.transformer,
            finisher=lambda batch: flushes.append(list(batch)) or transformer.finisher(batch),
        )
        iterable = TransformingAsyncIterable(from_list(["a"]), counted)
        assert await next_value(iterable) == ["a"]
        assert await (await iterable.next()).is_empty()
        assert await (await iterable.next()).is_empty()
        assert flushes == [["a"]]

    @pytest.mark.asyncio
    async def test_stop_marks_done_and_forwards(self):
        source = FakeAsyncIterable(values=["a", "b", "c"])
        iterable = TransformingAsyncIterable(source, Transformers.batch(1))
        assert await next_value(iterable) == ["a"]
        iterable.stop()
        assert await (await iterable.next()).is_empty()
        assert source.stops == 1


class TestLimiting:
    @pytest.mark.asyncio
    async def test_returns_max_items_if_not_stopped(self):
        iterable = LimitingAsyncIterable(GeneratingAsyncIterable(lambda: AsyncOptional.of("a")), 2)
        assert await next_value(iterable) == "a"
        assert await next_value(iterable) == "a"
        assert await next_value(iterable) is None

    @pytest.mark.asyncio
    async def test_sequential_use_gives_the_first_items_in_order(self):
        source = FakeAsyncIterable(values=[1, 2, 3, 4, 5])
        iterable = LimitingAsyncIterable(source, 3)
        assert [await next_value(iterable) for _ in range(5)] == [1, 2, 3, None, None]
        assert source.stops == 1

    @pytest.mark.asyncio
    async def test_returns_nothing_if_stopped_by_someone_else(self):
        iterable = LimitingAsyncIterable(GeneratingAsyncIterable(lambda: AsyncOptional.of("a")), 2)
        iterable.stop()
        assert await next_value(iterable) is None

    @pytest.mark.asyncio
    async def test_zero_limit_never_pulls(self):
        source = FakeAsyncIterable(values=[1])
        iterable = LimitingAsyncIterable(source, 0)
        assert await (await iterable.next()).is_empty()
        assert source.pulls == 0

    @pytest.mark.asyncio
    async def test_concurrent_pulls_return_at_most_max(self):
        async def slow_a():
            await asyncio.sleep(0.01)
            return AsyncOptional.of("a")

        iterable = LimitingAsyncIterable(GeneratingAsyncIterable(slow_a), 2)
        results = await asyncio.gather(*(next_value(iterable) for _ in range(4)))
        assert len([r for r in results if r is not None]) == 2

    def test_negative_limit_rejected(self):
        with pytest.raises(ValidationError):
            LimitingAsyncIterable(EmptyAsyncIterable(), -1)


class TestGenerating:
    @pytest.mark.asyncio
    async def test_ends_at_first_absent(self):
        values = iter([1, 2])
        iterable = GeneratingAsyncIterable(lambda: AsyncOptional.of(next(values, None)))
        assert await pull_all(iterable) == [1, 2]
        assert await (await iterable.next()).is_empty()

    @pytest.mark.asyncio
    async def test_sequential_generation_keeps_order_under_overlap(self):
        counter = iter(range(100))

        async def generate():
            value = next(counter)
            await asyncio.sleep(0.01 if value % 2 == 0 else 0)
            return AsyncOptional.of(value)

        iterable = SequentialGeneratingAsyncIterable(generate)
        results = await asyncio.gather(*(next_value(iterable) for _ in range(4)))
        assert results == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_iterate_from_seed(self):
        async def step(last):
            return AsyncOptional.of(last * 2 if last < 8 else None)

        assert await pull_all(IteratingAsyncIterable(1, step)) == [1, 2, 4, 8]


class TestBufferingBasics:
    @pytest.mark.asyncio
    async def test_stopped_buffer_never_returns_anything(self):
        buffer = BufferingAsyncIterable(from_list([1, 2, 3]), 3)
        buffer.stop()
        assert await (await buffer.next()).is_empty()

    def test_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            BufferingAsyncIterable(EmptyAsyncIterable(), 0)
