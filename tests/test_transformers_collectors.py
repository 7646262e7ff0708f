import pytest
from pydantic import ValidationError

from streamline import (
    BatchSettings,
    BufferSettings,
    Collectors,
    DEFAULT_BUFFER_SIZE,
    LimitSettings,
    Transformer,
    TransformStep,
    Transformers,
    comparing_by,
    natural_order,
    reverse_order,
)
from streamline.collectors import collect
from streamline.kernel.iterables import ArrayIterable, TransformingIterable


def run_transformer(transformer, values):
    iterable = TransformingIterable(ArrayIterable(values), transformer)
    out = []
    while iterable.has_next():
        out.append(iterable.get_next())
    return out


def test_batch_rejects_non_positive_size() -> None:
    with pytest.raises(ValidationError):
        Transformers.batch(0)


def test_distinct_keeps_first_occurrence() -> None:
    assert run_transformer(Transformers.distinct(), [3, 1, 3, 2, 1]) == [3, 1, 2]


def test_sorted_emits_once() -> None:
    assert run_transformer(Transformers.sorted(), [3, 1, 2]) == [[1, 2, 3]]
    assert run_transformer(Transformers.sorted(reverse_order), [3, 1, 2]) == [[3, 2, 1]]


def test_custom_ascending_transformer() -> None:
    # emit only values strictly greater than everything before them
    def fold(best, item):
        if best and item <= best[0]:
            return TransformStep.skip()
        best[:] = [item]
        return TransformStep.emit(item)

    ascending = Transformer(supplier=list, transformer=fold, finisher=lambda _: TransformStep.skip().value)
    assert run_transformer(ascending, [1, 3, 2, 5, 4, 6]) == [1, 3, 5, 6]


def test_clear_state_gives_fresh_accumulator() -> None:
    accumulators = []

    def supplier():
        accumulators.append([])
        return accumulators[-1]

    def fold(acc, item):
        acc.append(item)
        return TransformStep.emit(list(acc), clear_state=item == "|")

    transformer = Transformer(supplier=supplier, transformer=fold, finisher=lambda _: TransformStep.skip().value)
    assert run_transformer(transformer, ["a", "|", "b"]) == [["a"], ["a", "|"], ["b"]]
    assert len(accumulators) == 2


def test_collectors() -> None:
    assert collect(ArrayIterable([1, 2, 3]), Collectors.to_list()) == [1, 2, 3]
    assert collect(ArrayIterable([1, 2, 3]), Collectors.counting()) == 3
    assert collect(ArrayIterable(["a", "bb"]), Collectors.summing(len)) == 3
    assert collect(ArrayIterable([]), Collectors.summing()) == 0
    assert collect(ArrayIterable(["x", "yy", "z"]), Collectors.to_dict(len)) == {1: "z", 2: "yy"}
    assert collect(ArrayIterable([1, 2]), Collectors.joining("-")) == "1-2"


def test_comparators() -> None:
    by_length = comparing_by(len)
    assert by_length("aa", "b") == 1
    assert natural_order(1, 1) == 0
    assert reverse_order(1, 2) == 1


def test_settings() -> None:
    assert BufferSettings().size == DEFAULT_BUFFER_SIZE
    assert LimitSettings(max=0).max == 0
    with pytest.raises(ValidationError):
        BufferSettings(size=0)
    with pytest.raises(ValidationError):
        LimitSettings(max=-1)
    with pytest.raises(ValidationError):
        BatchSettings(size=-3)
