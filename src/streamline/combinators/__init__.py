"""Combinators - AsyncIterable implementations the streams are built from."""

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
    OnceAsyncIterable,
    SequentialGeneratingAsyncIterable,
    SyncToAsyncIterable,
)

__all__ = [
    # Sources
    "EmptyAsyncIterable",
    "SyncToAsyncIterable",
    "GeneratingAsyncIterable",
    "SequentialGeneratingAsyncIterable",
    "IteratingAsyncIterable",
    "OnceAsyncIterable",
    # Pass-through
    "FilteringAsyncIterable",
    "MappingAsyncIterable",
    "FlatMappingAsyncIterable",
    "TransformingAsyncIterable",
    "LimitingAsyncIterable",
    # Buffering
    "BufferingAsyncIterable",
]
