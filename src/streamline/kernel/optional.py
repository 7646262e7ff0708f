"""Synchronous zero-or-one value container."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from streamline.kernel.errors import NoSuchElementError
from streamline.kernel.functions import Consumer, Mapper, Predicate, Supplier

if TYPE_CHECKING:
    from streamline.kernel.async_optional import AsyncOptional
    from streamline.stream import Stream

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class Optional(Generic[T]):
    """A value which may be absent.

    ``None`` passed to ``of`` (or returned by a ``map`` function) means
    "no value". ``present`` is for the rare case where ``None`` itself is the
    value being carried, e.g. a ``None`` element travelling through a stream.
    """

    _value: T | None = None
    _present: bool = False

    @staticmethod
    def of(value: T | None) -> Optional[T]:
        if value is None:
            return Optional()
        return Optional(_value=value, _present=True)

    @staticmethod
    def present(value: T) -> Optional[T]:
        return Optional(_value=value, _present=True)

    @staticmethod
    def empty() -> Optional[T]:
        return Optional()

    def is_present(self) -> bool:
        return self._present

    def is_empty(self) -> bool:
        return not self._present

    def get(self) -> T | None:
        """Return the value, or None when empty."""
        return self._value

    def or_else(self, other: T) -> T:
        if self._present:
            return self._value  # type: ignore[return-value]
        return other

    def or_else_get(self, supplier: Supplier[T]) -> T:
        if self._present:
            return self._value  # type: ignore[return-value]
        return supplier()

    def or_else_throw(self, error_supplier: Supplier[BaseException] | None = None) -> T:
        if self._present:
            return self._value  # type: ignore[return-value]
        if error_supplier is None:
            raise NoSuchElementError("Empty optional")
        raise error_supplier()

    def if_present(self, consumer: Consumer[T]) -> None:
        if self._present:
            consumer(self._value)  # type: ignore[arg-type]

    def if_present_or_else(self, consumer: Consumer[T], action: Callable[[], Any]) -> None:
        if self._present:
            consumer(self._value)  # type: ignore[arg-type]
        else:
            action()

    def map(self, mapper: Mapper[T, R | None]) -> Optional[R]:
        if not self._present:
            return Optional()
        return Optional.of(mapper(self._value))  # type: ignore[arg-type]

    def flat_map(self, mapper: Mapper[T, Optional[R]]) -> Optional[R]:
        if not self._present:
            return Optional()
        return mapper(self._value)  # type: ignore[arg-type]

    def filter(self, predicate: Predicate[T]) -> Optional[T]:
        if self._present and not predicate(self._value):  # type: ignore[arg-type]
            return Optional()
        return self

    def filter_not_none(self) -> Optional[T]:
        if self._value is None:
            return Optional()
        return self

    def stream(self) -> Stream[T]:
        """Stream of zero or one item."""
        from streamline.stream import Stream

        if not self._present:
            return Stream.empty()
        return Stream.of(self._value)  # type: ignore[arg-type]

    def to_async(self) -> AsyncOptional[T]:
        from streamline.kernel.async_optional import AsyncOptional

        return AsyncOptional.of_optional(self)
