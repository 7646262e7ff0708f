"""Error types raised by streamline itself.

Failures raised by user callbacks (mappers, predicates, generators) are not
wrapped: they propagate unchanged through every combinator awaiting them.
"""

from __future__ import annotations


class StreamError(Exception):
    """Base class for errors raised by the library."""


class TerminatedStreamError(StreamError):
    """Raised when a terminal operation is invoked on a stream a second time.

    Streams are single-use; this is a programming error and is raised
    synchronously, before anything is pulled from the source.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot reuse a terminated stream (attempted {operation})")

    def __repr__(self) -> str:
        return f"TerminatedStreamError(operation={self.operation!r})"


class NoSuchElementError(StreamError, LookupError):
    """Raised when a value is demanded from something that has none."""
