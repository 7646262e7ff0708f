from .async_stream import AsyncStream, Indexed
from .collectors import Collector, Collectors
from .config import DEFAULT_BUFFER_SIZE, BatchSettings, BufferSettings, LimitSettings
from .kernel import (
    AsyncIterable,
    AsyncOptional,
    Iterable,
    NoSuchElementError,
    Optional,
    StreamError,
    TerminatedStreamError,
)
from .kernel.functions import compare_string, comparing_by, natural_order, reverse_order
from .stream import Stream
from .transformers import Transformer, Transformers, TransformStep

__all__ = [
    # Streams
    "AsyncStream",
    "Stream",
    "Indexed",
    # Optionals
    "Optional",
    "AsyncOptional",
    # Protocols
    "Iterable",
    "AsyncIterable",
    # Descriptors
    "Collector",
    "Collectors",
    "Transformer",
    "TransformStep",
    "Transformers",
    # Comparators
    "natural_order",
    "reverse_order",
    "compare_string",
    "comparing_by",
    # Settings
    "DEFAULT_BUFFER_SIZE",
    "BufferSettings",
    "LimitSettings",
    "BatchSettings",
    # Errors
    "StreamError",
    "TerminatedStreamError",
    "NoSuchElementError",
]
