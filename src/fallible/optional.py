"""Optional container whose callbacks may fail.

`CheckedOptional` holds zero or one value. Callbacks given to its methods may
be `Checked` objects or plain callables; their failures propagate unchanged.
`None` is never a present value, so `of_nullable(None)` is empty.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from .errors import NoValueError
from .result import Err, Ok, Result

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .stream import CheckedStream

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")

_MISSING: Any = object()


class CheckedOptional(Generic[T]):
    """Immutable container of at most one non-None value."""

    __slots__ = ("_value",)

    def __init__(self, value: T = _MISSING) -> None:
        if value is None:
            raise ValueError("CheckedOptional cannot hold None; use of_nullable() or empty()")
        self._value = value

    @classmethod
    def of(cls, value: T) -> CheckedOptional[T]:
        """Present optional. Raises ValueError for None."""
        return cls(value)

    @classmethod
    def of_nullable(cls, value: T | None) -> CheckedOptional[T]:
        return cls.empty() if value is None else cls(value)

    @classmethod
    def empty(cls) -> CheckedOptional[T]:
        return _EMPTY  # type: ignore[return-value]

    def is_present(self) -> bool:
        return self._value is not _MISSING

    def is_empty(self) -> bool:
        return self._value is _MISSING

    def get(self) -> T:
        """Return the value. Raises NoValueError when empty."""
        if self._value is _MISSING:
            raise NoValueError()
        return self._value

    def if_present(self, consumer: Callable[[T], object]) -> None:
        if self._value is not _MISSING:
            consumer(self._value)

    def if_present_or_else(self, consumer: Callable[[T], object], action: Callable[[], object]) -> None:
        if self._value is not _MISSING:
            consumer(self._value)
        else:
            action()

    def filter(self, predicate: Callable[[T], bool]) -> CheckedOptional[T]:
        if self._value is _MISSING or predicate(self._value):
            return self
        return _EMPTY

    def map(self, mapper: Callable[[T], U | None]) -> CheckedOptional[U]:
        """Apply mapper to a present value. A None result gives an empty optional."""
        if self._value is _MISSING:
            return _EMPTY
        return CheckedOptional.of_nullable(mapper(self._value))

    def flat_map(self, mapper: Callable[[T], CheckedOptional[U]]) -> CheckedOptional[U]:
        if self._value is _MISSING:
            return _EMPTY
        out = mapper(self._value)
        if not isinstance(out, CheckedOptional):
            raise TypeError(f"flat_map mapper must return CheckedOptional, got {type(out).__name__}")
        return out

    def or_else(self, other: T) -> T:
        return other if self._value is _MISSING else self._value

    def or_else_get(self, supplier: Callable[[], T]) -> T:
        """Return the value, or supplier() when empty. supplier may fail."""
        return supplier() if self._value is _MISSING else self._value

    def or_else_raise(self, exc_factory: Callable[[], BaseException] = NoValueError) -> T:
        if self._value is _MISSING:
            raise exc_factory()
        return self._value

    def to_result(self, error: E) -> Result[T, E]:
        """Ok(value) when present, Err(error) when empty."""
        return Err(error) if self._value is _MISSING else Ok(self._value)

    def stream(self) -> CheckedStream[T]:
        from .stream import CheckedStream
        return CheckedStream.of(iter(self))

    def __iter__(self) -> Iterator[T]:
        if self._value is not _MISSING:
            yield self._value

    def __bool__(self) -> bool:
        return self._value is not _MISSING

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheckedOptional):
            return NotImplemented
        return self._value is other._value or self._value == other._value

    def __hash__(self) -> int:
        return 0 if self._value is _MISSING else hash(self._value)

    def __repr__(self) -> str:
        return "CheckedOptional.empty" if self._value is _MISSING else f"CheckedOptional[{self._value!r}]"


_EMPTY: CheckedOptional[Any] = CheckedOptional()
