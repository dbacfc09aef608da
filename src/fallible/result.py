"""Result type for capturing failures as values.

A Result is either Ok(value) or Err(error). When the error is an exception,
`unwrap()` re-raises it, so a Result can always be turned back into the
raising form at a call boundary.

Example:
    >>> attempt(int, "42").map(lambda n: n * 2).unwrap()
    84
    >>> attempt(int, "x", raises=ValueError).is_err()
    True
"""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from .errors import ExcTypes, UnwrapError, is_declared, normalize_raises

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable, Iterator

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")

_OK = True
_ERR = False


class Result(Generic[T, E]):
    """Discriminated union of success (Ok) and failure (Err).

    Examples:
        >>> Ok(42).map(lambda x: x * 2).unwrap()
        84
        >>> Err(KeyError("k")).unwrap_or(0)
        0
        >>> Ok(5).flat_map(lambda x: Ok(x * 2) if x > 0 else Err("neg")).unwrap()
        10
    """

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)

    def __init__(self, value: T | E, is_ok: bool) -> None:
        self._value = value
        self._is_ok = is_ok

    # ─── Variant Checks ──────────────────────────────────────────────

    def is_ok(self) -> bool:
        """True for the Ok variant."""
        return self._is_ok

    def is_err(self) -> bool:
        """True for the Err variant."""
        return not self._is_ok

    # ─── Value Extraction ────────────────────────────────────────────

    def unwrap(self) -> T:
        """Extract Ok value. On Err, re-raise the held exception or raise UnwrapError."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        if isinstance(self._value, BaseException):
            raise self._value
        raise UnwrapError(f"unwrap() on Err: {self._value!r}")

    def unwrap_err(self) -> E:
        """Extract Err value. Raises UnwrapError on Ok."""
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise UnwrapError(f"unwrap_err() on Ok: {self._value!r}")

    def unwrap_or(self, default: T) -> T:
        """Extract Ok value or return default."""
        return self._value if self._is_ok else default  # type: ignore[return-value]

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        """Extract Ok value or compute one from the error."""
        return self._value if self._is_ok else f(self._value)  # type: ignore[return-value,arg-type]

    def expect(self, msg: str) -> T:
        """Extract Ok value, raising UnwrapError with msg (chained to the error) on Err."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        cause = self._value if isinstance(self._value, BaseException) else None
        raise UnwrapError(f"{msg}: {self._value}") from cause

    def raise_for(self, mapper: Callable[[E], BaseException]) -> T:
        """Extract Ok value. On Err, raise mapper(error), chained to the error."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        cause = self._value if isinstance(self._value, BaseException) else None
        raise mapper(self._value) from cause  # type: ignore[arg-type]

    # ─── Mapping ─────────────────────────────────────────────────────

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Transform the Ok value; Err passes through."""
        return Result(f(self._value), _OK) if self._is_ok else Result(self._value, _ERR)  # type: ignore[arg-type]

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """Transform the Err value; Ok passes through."""
        return Result(f(self._value), _ERR) if not self._is_ok else Result(self._value, _OK)  # type: ignore[arg-type]

    def bimap(self, ok_fn: Callable[[T], U], err_fn: Callable[[E], F]) -> Result[U, F]:
        """Transform whichever side is present."""
        return Result(ok_fn(self._value), _OK) if self._is_ok else Result(err_fn(self._value), _ERR)  # type: ignore[arg-type]

    # ─── Chaining ────────────────────────────────────────────────────

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain an operation that itself returns a Result."""
        return f(self._value) if self._is_ok else Result(self._value, _ERR)  # type: ignore[arg-type]

    and_then = flat_map

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        """On Err, apply f to recover. On Ok, pass through."""
        return f(self._value) if not self._is_ok else Result(self._value, _OK)  # type: ignore[arg-type]

    def and_(self, other: Result[U, E]) -> Result[U, E]:
        """Return other if Ok, else self's Err."""
        return other if self._is_ok else Result(self._value, _ERR)  # type: ignore[arg-type]

    def or_(self, other: Result[T, F]) -> Result[T, F]:
        """Return self if Ok, else other."""
        return Result(self._value, _OK) if self._is_ok else other  # type: ignore[arg-type]

    # ─── Inspection ──────────────────────────────────────────────────

    def ok(self) -> T | None:
        """Ok value, or None."""
        return self._value if self._is_ok else None  # type: ignore[return-value]

    def err(self) -> E | None:
        """Err value, or None."""
        return self._value if not self._is_ok else None  # type: ignore[return-value]

    def inspect(self, f: Callable[[T], None]) -> Result[T, E]:
        """Call f with Ok value for side effects, return self."""
        if self._is_ok:
            f(self._value)  # type: ignore[arg-type]
        return self

    def inspect_err(self, f: Callable[[E], None]) -> Result[T, E]:
        """Call f with Err value for side effects, return self."""
        if not self._is_ok:
            f(self._value)  # type: ignore[arg-type]
        return self

    def match(self, *, ok: Callable[[T], U], err: Callable[[E], U]) -> U:
        """Exhaustive case analysis over both variants."""
        return ok(self._value) if self._is_ok else err(self._value)  # type: ignore[arg-type]

    def to_tuple(self) -> tuple[T | None, E | None]:
        return (self._value, None) if self._is_ok else (None, self._value)  # type: ignore[return-value]

    def flatten(self: Result[Result[T, E], E]) -> Result[T, E]:
        return self._value if self._is_ok else Result(self._value, _ERR)  # type: ignore[return-value,arg-type]

    # ─── Dunder Methods ──────────────────────────────────────────────

    __bool__ = lambda self: self._is_ok  # noqa: E731
    __repr__ = lambda self: f"{'Ok' if self._is_ok else 'Err'}({self._value!r})"  # noqa: E731
    __str__ = __repr__

    def __hash__(self) -> int:
        return hash((self._is_ok, _eq_key(self._value)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._is_ok == other._is_ok and _eq_key(self._value) == _eq_key(other._value)

    def __iter__(self) -> Iterator[T]:
        """Yield the value if Ok, nothing if Err."""
        if self._is_ok:
            yield self._value  # type: ignore[misc]


def _eq_key(value: object) -> object:
    # Exceptions compare by identity; compare them by type and args instead.
    if isinstance(value, BaseException):
        return (type(value), value.args)
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# Constructors
# ═══════════════════════════════════════════════════════════════════════════════


def Ok(value: T) -> Result[T, Any]:  # noqa: N802
    """Construct Ok variant (success)."""
    return Result(value, _OK)


def Err(error: E) -> Result[Any, E]:  # noqa: N802
    """Construct Err variant (failure)."""
    return Result(error, _ERR)


def attempt(
    fn: Callable[..., T],
    *args: object,
    raises: type[BaseException] | ExcTypes = Exception,
    **kwargs: object,
) -> Result[T, BaseException]:
    """Call fn, capturing declared exceptions as Err. Undeclared ones propagate."""
    declared = normalize_raises(raises)
    try:
        return Result(fn(*args, **kwargs), _OK)
    except BaseException as e:
        if is_declared(e, declared):
            return Result(e, _ERR)
        raise


async def attempt_async(
    fn: Callable[..., T] | Callable[..., Awaitable[T]],
    *args: object,
    raises: type[BaseException] | ExcTypes = Exception,
    **kwargs: object,
) -> Result[T, BaseException]:
    """Async attempt: awaits coroutine functions, runs sync ones in a thread.

    Wrappers such as Checked are unwrapped to find an async target, and any
    awaitable a sync callable returns is awaited too.
    """
    declared = normalize_raises(raises)
    try:
        if inspect.iscoroutinefunction(inspect.unwrap(fn)):
            value = await fn(*args, **kwargs)  # type: ignore[misc]
        else:
            value = await asyncio.to_thread(fn, *args, **kwargs)
        if inspect.isawaitable(value):
            value = await value
        return Result(value, _OK)  # type: ignore[arg-type]
    except BaseException as e:
        if is_declared(e, declared):
            return Result(e, _ERR)
        raise


# ═══════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═══════════════════════════════════════════════════════════════════════════════


def sequence(results: Iterable[Result[T, E]]) -> Result[list[T], E]:
    """Iterable[Result[T,E]] → Result[list[T], E]. Fail-fast on first Err."""
    values: list[T] = []
    for r in results:
        if not r._is_ok:
            return Result(r._value, _ERR)  # type: ignore[arg-type]
        values.append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK)


def traverse(items: Iterable[T], f: Callable[[T], Result[U, E]]) -> Result[list[U], E]:
    """Map f over items, sequence results. Fail-fast on first Err."""
    return sequence(f(item) for item in items)


def collect_results(results: Iterable[Result[T, E]]) -> Result[list[T], list[E]]:
    """Collect all Results, accumulating ALL errors (not fail-fast)."""
    values: list[T] = []
    errors: list[E] = []
    for r in results:
        (values if r._is_ok else errors).append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK) if not errors else Result(errors, _ERR)
