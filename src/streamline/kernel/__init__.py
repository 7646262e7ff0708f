"""Kernel layer - optionals, protocols and the errors everything else shares."""

from streamline.kernel.async_optional import AsyncOptional
from streamline.kernel.errors import NoSuchElementError, StreamError, TerminatedStreamError
from streamline.kernel.optional import Optional
from streamline.kernel.ports import AsyncIterable, Iterable

__all__ = [
    "Optional",
    "AsyncOptional",
    # Protocols
    "Iterable",
    "AsyncIterable",
    # Errors
    "StreamError",
    "TerminatedStreamError",
    "NoSuchElementError",
]
