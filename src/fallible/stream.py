"""Lazy, single-use pipelines whose stages may fail.

A `CheckedStream` wraps an iterable and records the exception types its
stages declare. Stages run lazily when a terminal operation pulls elements;
the first failing element stops the pipeline and its exception reaches the
caller of the terminal operation unchanged.

Example:
    >>> from fallible import checked
    >>> parse = checked(int, raises=ValueError)
    >>> CheckedStream.of(["1", "2", "3"]).map(parse).sum()
    6
    >>> CheckedStream.of(["1", "x"]).map(parse.or_return(0)).to_list()
    [1, 0]

A stream is consumed by its first operation: intermediate operations hand
the source to the new stream, terminal operations drain it. Reuse raises
StreamConsumedError.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from .checked import Checked, Raises, _raises_of, _suppressed, _union
from .errors import ExcTypes, StreamConsumedError, normalize_raises
from .optional import _MISSING, CheckedOptional
from .result import Result, _ERR, _OK

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

T = TypeVar("T")
U = TypeVar("U")
A = TypeVar("A")

logger = logging.getLogger("fallible.stream")


@dataclass(frozen=True, slots=True)
class SummaryStatistics:
    """Count, sum, min and max of a numeric stream."""

    count: int = 0
    sum: float = 0
    min: float | None = None
    max: float | None = None

    @property
    def average(self) -> float | None:
        return self.sum / self.count if self.count else None


class CheckedStream(Generic[T]):
    """Fluent lazy pipeline carrying the failure types of its stages."""

    __slots__ = ("_source", "_raises", "_linked")

    def __init__(self, source: Iterable[T], raises: Raises = Exception) -> None:
        self._source = source
        self._raises = normalize_raises(raises)
        self._linked = False

    # ─── Construction ──────────────────────────────────────────────────

    @classmethod
    def of(cls, source: Iterable[T], raises: Raises = Exception) -> CheckedStream[T]:
        return cls(source, raises)

    @classmethod
    def empty(cls, raises: Raises = Exception) -> CheckedStream[Any]:
        return cls((), raises)

    @classmethod
    def iterate(
        cls, seed: T, fn: Callable[[T], T], limit: int | None = None, raises: Raises = Exception,
    ) -> CheckedStream[T]:
        """seed, fn(seed), fn(fn(seed)), ... lazily, optionally limited."""
        def gen() -> Iterator[T]:
            value = seed
            while True:
                yield value
                value = fn(value)

        source: Iterable[T] = gen() if limit is None else itertools.islice(gen(), _non_negative(limit))
        return cls(source, _union(normalize_raises(raises), _raises_of(fn)))

    @classmethod
    def range(cls, start: int, stop: int | None = None, step: int = 1) -> CheckedStream[int]:
        r = range(start) if stop is None else range(start, stop, step)
        return cls(r, ())

    @property
    def raises(self) -> ExcTypes:
        return self._raises

    def with_raises(self, *types: type[BaseException]) -> CheckedStream[T]:
        """Declare additional failure types for the rest of the pipeline."""
        return self._link(self._take(), _union(self._raises, normalize_raises(types)))

    def _take(self) -> Iterator[T]:
        if self._linked:
            raise StreamConsumedError()
        self._linked = True
        return iter(self._source)

    def _link(self, source: Iterable[U], raises: ExcTypes | None = None) -> CheckedStream[U]:
        return CheckedStream(source, self._raises if raises is None else raises)

    def _with(self, stage: object) -> ExcTypes:
        return _union(self._raises, _raises_of(stage))

    # ─── Intermediate Operations ───────────────────────────────────────

    def filter(self, predicate: Callable[[T], bool]) -> CheckedStream[T]:
        return self._link(filter(predicate, self._take()), self._with(predicate))

    def map(self, fn: Callable[[T], U]) -> CheckedStream[U]:
        return self._link(map(fn, self._take()), self._with(fn))

    def flat_map(self, fn: Callable[[T], Iterable[U]]) -> CheckedStream[U]:
        """Map each element to an iterable (or stream) and flatten."""
        return self._link(itertools.chain.from_iterable(map(fn, self._take())), self._with(fn))

    def peek(self, action: Callable[[T], object]) -> CheckedStream[T]:
        """Run action on each element as it passes."""
        def gen(src: Iterator[T]) -> Iterator[T]:
            for item in src:
                action(item)
                yield item

        return self._link(gen(self._take()), self._with(action))

    def limit(self, n: int) -> CheckedStream[T]:
        n = _non_negative(n)
        return self._link(itertools.islice(self._take(), n))

    def skip(self, n: int) -> CheckedStream[T]:
        n = _non_negative(n)
        return self._link(itertools.islice(self._take(), n, None))

    def distinct(self) -> CheckedStream[T]:
        """Drop repeated elements, keeping the first occurrence in order.

        Unhashable elements are compared by equality against those seen so far.
        """
        def gen(src: Iterator[T]) -> Iterator[T]:
            seen: set[Any] = set()
            unhashable: list[Any] = []
            for item in src:
                try:
                    if item in seen:
                        continue
                    seen.add(item)
                except TypeError:
                    if item in unhashable:
                        continue
                    unhashable.append(item)
                yield item

        return self._link(gen(self._take()))

    def sorted(self, key: Callable[[T], Any] | None = None, *, reverse: bool = False) -> CheckedStream[T]:
        """Sort lazily; the whole upstream is drained on first pull."""
        def gen(src: Iterator[T]) -> Iterator[T]:
            yield from sorted(src, key=key, reverse=reverse)  # type: ignore[arg-type]

        return self._link(gen(self._take()), self._with(key))

    def take_while(self, predicate: Callable[[T], bool]) -> CheckedStream[T]:
        return self._link(itertools.takewhile(predicate, self._take()), self._with(predicate))

    def drop_while(self, predicate: Callable[[T], bool]) -> CheckedStream[T]:
        return self._link(itertools.dropwhile(predicate, self._take()), self._with(predicate))

    def map_to_result(self, fn: Callable[[T], U]) -> CheckedStream[Result[U, BaseException]]:
        """Map each element to Ok(fn(x)) or Err(exc) for failures fn declares.

        Declared types come from fn when it is a Checked, otherwise from the
        stream. Undeclared failures still stop the pipeline.
        """
        declared = fn.raises if isinstance(fn, Checked) else self._raises
        name = getattr(fn, "__name__", repr(fn))

        def gen(src: Iterator[T]) -> Iterator[Result[U, BaseException]]:
            for item in src:
                try:
                    yield Result(fn(item), _OK)
                except declared as e:
                    _suppressed(name, e)
                    yield Result(e, _ERR)

        return self._link(gen(self._take()))

    # ─── Terminal Operations ───────────────────────────────────────────

    def __iter__(self) -> Iterator[T]:
        return self._take()

    def to_list(self) -> list[T]:
        return list(self._take())

    def collect(self, collector: Callable[[Iterator[T]], A]) -> A:
        """Hand the remaining elements to collector, e.g. set, dict or ', '.join."""
        return collector(self._take())

    def for_each(self, action: Callable[[T], object]) -> None:
        for item in self._take():
            action(item)

    def count(self) -> int:
        return sum(1 for _ in self._take())

    def reduce(self, fn: Callable[[T, T], T], identity: T = _MISSING) -> Any:
        """Fold with fn. Without identity, returns a CheckedOptional (empty for no elements)."""
        src = self._take()
        if identity is not _MISSING:
            acc = identity
            for item in src:
                acc = fn(acc, item)
            return acc
        acc = next(src, _MISSING)
        if acc is _MISSING:
            return CheckedOptional.empty()
        for item in src:
            acc = fn(acc, item)
        return CheckedOptional.of_nullable(acc)

    def min(self, key: Callable[[T], Any] | None = None) -> CheckedOptional[T]:
        return CheckedOptional.of_nullable(min(self._take(), key=key, default=None))  # type: ignore[type-var]

    def max(self, key: Callable[[T], Any] | None = None) -> CheckedOptional[T]:
        return CheckedOptional.of_nullable(max(self._take(), key=key, default=None))  # type: ignore[type-var]

    def find_first(self) -> CheckedOptional[T]:
        return CheckedOptional.of_nullable(next(self._take(), None))

    def all_match(self, predicate: Callable[[T], bool]) -> bool:
        return all(predicate(item) for item in self._take())

    def any_match(self, predicate: Callable[[T], bool]) -> bool:
        return any(predicate(item) for item in self._take())

    def none_match(self, predicate: Callable[[T], bool]) -> bool:
        return not any(predicate(item) for item in self._take())

    def sum(self, start: Any = 0) -> Any:
        return sum(self._take(), start)

    def average(self) -> CheckedOptional[float]:
        return CheckedOptional.of_nullable(self.summary().average)

    def summary(self) -> SummaryStatistics:
        """Count, sum, min and max in a single pass."""
        count, total, lo, hi = 0, 0, None, None
        for item in self._take():
            count += 1
            total += item  # type: ignore[operator]
            lo = item if lo is None or item < lo else lo  # type: ignore[operator]
            hi = item if hi is None or item > hi else hi  # type: ignore[operator]
        logger.debug("summary over %d elements", count)
        return SummaryStatistics(count, total, lo, hi)

    def __repr__(self) -> str:
        names = ", ".join(t.__name__ for t in self._raises)
        state = "consumed" if self._linked else "open"
        return f"CheckedStream({state}, raises=({names}))"


def _non_negative(n: int) -> int:
    if n < 0:
        raise ValueError(f"expected a non-negative count, got {n}")
    return n
