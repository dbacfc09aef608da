"""Fallible callables and their combinators.

A `Checked` wraps any callable together with the exception types it declares
(`raises`). Declared exceptions are *checked failures*; anything else it
raises is *unchecked*. Combinators turn a checked callable into another shape:

- erasing: `optional`, `result`, `ignore` (consumers)
- substituting: `fallback_to`, `or_return`
- rethrow-mapped: `rethrow`, `rethrow_unchecked`
- still fallible: `except_`, `except_unchecked`, `log_failures`, `or_try`,
  `and_then`, `compose`

Substituting and erasing combinators return *adapters*: `Checked` objects
that declare nothing (`raises == ()`), so they can still be chained.

Example:
    >>> parse = checked(int, raises=ValueError)
    >>> parse.or_return(-1)("x")
    -1
    >>> parse.optional()("x") is None
    True
    >>> parse.rethrow(LookupError)("x")
    Traceback (most recent call last):
    ...
    LookupError: invalid literal for int() with base 10: 'x'
"""

from __future__ import annotations

import logging
from functools import update_wrapper, wraps
from types import MethodType
from typing import TYPE_CHECKING, Any, Callable, Generic, ParamSpec, TypeVar

from .config import get_settings
from .errors import ExcTypes, FailureKind, FailureRecord, is_declared, normalize_raises
from .result import Result, _ERR, _OK

if TYPE_CHECKING:
    from typing import Self

P = ParamSpec("P")
R = TypeVar("R")
V = TypeVar("V")
X = TypeVar("X", bound=BaseException)

logger = logging.getLogger("fallible.checked")

Raises = type[BaseException] | ExcTypes


def _require(obj: object, name: str) -> None:
    if obj is None or not callable(obj):
        raise TypeError(f"{name} must be callable, got {obj!r}")


def _raises_of(obj: object) -> ExcTypes:
    return obj.raises if isinstance(obj, Checked) else ()


def _union(*groups: ExcTypes) -> ExcTypes:
    seen: dict[type[BaseException], None] = {}
    for group in groups:
        seen.update(dict.fromkeys(group))
    return tuple(seen)


def _suppressed(operation: str, exc: BaseException) -> None:
    """Report a failure swallowed by an erasing or substituting combinator."""
    settings = get_settings().logging
    if settings.suppressed and logger.isEnabledFor(logging.DEBUG):
        record = FailureRecord.from_exception(operation, exc, include_trace=settings.include_trace)
        logger.debug(record.render(), extra={"failure": record.model_dump()})


class Checked(Generic[P, R]):
    """A callable that may raise one of its declared exception types.

    Calling a Checked invokes the wrapped callable unchanged; exceptions
    propagate. Every combinator returns a new object and leaves the receiver
    untouched.
    """

    def __init__(self, fn: Callable[P, R], *, raises: Raises = Exception) -> None:
        _require(fn, "fn")
        update_wrapper(self, fn, updated=())
        self._fn = fn
        self._raises = normalize_raises(raises)

    @property
    def raises(self) -> ExcTypes:
        """Declared (checked) exception types."""
        return self._raises

    @property
    def name(self) -> str:
        return getattr(self, "__qualname__", None) or getattr(self, "__name__", None) or repr(self._fn)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> R:
        return self._fn(*args, **kwargs)

    def __get__(self, obj: object, objtype: type | None = None) -> Self:
        # Bind like a function when used as a method decorator
        if obj is None:
            return self
        return self._derive(MethodType(self._fn, obj), self._raises)

    def __repr__(self) -> str:
        names = ", ".join(t.__name__ for t in self._raises)
        return f"{type(self).__name__}({self.name}, raises=({names}))"

    def _derive(self, fn: Callable[..., Any], raises: ExcTypes, kind: type[Checked] | None = None) -> Any:
        return (kind or type(self))(fn, raises=raises)

    # ─── Erasing ───────────────────────────────────────────────────────

    def sneaky_throw(self) -> Callable[P, R]:
        """Expose as an ordinary callable. Exceptions still propagate, undeclared.

        Mainly useful for code that hands the callable to an API that does its
        own exception handling, such as a stream stage.
        """
        fn = self._fn

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> R:
            return fn(*args, **kwargs)

        return call

    def optional(self) -> Checked[P, R | None]:
        """On any failure return None instead."""
        fn, name = self._fn, self.name

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> R | None:
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                _suppressed(name, e)
                return None

        return self._derive(call, (), Checked)

    def result(self) -> Checked[P, Result[R, Exception]]:
        """Capture the outcome as Ok(value) or Err(exception)."""
        fn, name = self._fn, self.name

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> Result[R, Exception]:
            try:
                return Result(fn(*args, **kwargs), _OK)
            except Exception as e:
                _suppressed(name, e)
                return Result(e, _ERR)

        return self._derive(call, (), Checked)

    # ─── Substituting ──────────────────────────────────────────────────

    def fallback_to(self, other: Callable[P, R]) -> Self:
        """On any failure, return other(*args). Otherwise other is never called."""
        _require(other, "other")
        fn, name = self._fn, self.name

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                _suppressed(name, e)
                return other(*args, **kwargs)

        return self._derive(call, ())

    def or_return(self, value: R) -> Self:
        """On any failure, return value."""
        fn, name = self._fn, self.name

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                _suppressed(name, e)
                return value

        return self._derive(call, ())

    # ─── Rethrowing ────────────────────────────────────────────────────

    def rethrow_unchecked(self, mapper: Callable[[Any], BaseException]) -> Self:
        """Raise mapper(e) for declared failures; the result declares nothing."""
        return self._rethrow(mapper, ())

    def rethrow(self, mapper: Callable[[Any], BaseException], raises: Raises | None = None) -> Self:
        """Raise mapper(e) for declared failures, declaring the mapped types.

        The new declared types default to `mapper` itself when it is an
        exception class, otherwise to `Exception`. Undeclared exceptions pass
        through unchanged.
        """
        if raises is not None:
            declared = normalize_raises(raises)
        elif isinstance(mapper, type) and issubclass(mapper, BaseException):
            declared = (mapper,)
        else:
            declared = (Exception,)
        return self._rethrow(mapper, declared)

    def _rethrow(self, mapper: Callable[[Any], BaseException], declared: ExcTypes) -> Self:
        _require(mapper, "mapper")
        fn, raises = self._fn, self._raises

        @wraps(fn, updated=())
        def call(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except raises as e:
                raise mapper(e) from e

        return self._derive(call, declared)

    # ─── Observing ─────────────────────────────────────────────────────

    def except_(
        self,
        cls_or_handler: type[X] | Callable[[Any], object],
        handler: Callable[[X], object] | None = None,
    ) -> Self:
        """Pass declared failures to a handler, then re-raise them unchanged.

        Either `except_(handler)` for every declared failure or
        `except_(cls, handler)` for declared failures of type cls only.
        """
        if handler is None:
            cls, handler = BaseException, cls_or_handler
        else:
            cls = cls_or_handler
            if not (isinstance(cls, type) and issubclass(cls, BaseException)):
                raise TypeError(f"cls must be an exception class, got {cls!r}")
        _require(handler, "handler")
        fn, raises = self._fn, self._raises

        @wraps(fn, updated=())
        def call(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except raises as e:
                if isinstance(e, cls):
                    handler(e)
                raise

        return self._derive(call, raises)

    def except_unchecked(self, handler: Callable[[X], object], cls: type[X] = Exception) -> Self:  # type: ignore[assignment]
        """Pass undeclared failures of type cls to a handler, then re-raise them."""
        _require(handler, "handler")
        if not (isinstance(cls, type) and issubclass(cls, BaseException)):
            raise TypeError(f"cls must be an exception class, got {cls!r}")
        fn, raises = self._fn, self._raises

        @wraps(fn, updated=())
        def call(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except BaseException as e:
                if not is_declared(e, raises) and isinstance(e, cls):
                    handler(e)
                raise

        return self._derive(call, raises)

    def log_failures(
        self,
        log: logging.Logger | None = None,
        level: int = logging.WARNING,
        *,
        operation: str | None = None,
    ) -> Self:
        """Log declared failures as FailureRecords, then re-raise them."""
        target = log or logger
        op = operation or self.name

        def report(e: BaseException) -> None:
            record = FailureRecord.from_exception(
                op, e, FailureKind.CHECKED, include_trace=get_settings().logging.include_trace,
            )
            target.log(level, record.render(), extra={"failure": record.model_dump()})

        return self.except_(report)

    # ─── Composing ─────────────────────────────────────────────────────

    def or_try(self, other: Callable[P, R]) -> Self:
        """On any failure, call other(*args). Failures of other propagate."""
        _require(other, "other")
        fn = self._fn

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return fn(*args, **kwargs)
            except Exception:
                return other(*args, **kwargs)

        return self._derive(call, _union(self._raises, _raises_of(other)))

    def and_then(self, after: Callable[[R], V]) -> Checked[P, V]:
        """Feed the result into after. Failures of either propagate."""
        _require(after, "after")
        fn = self._fn

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> V:
            return after(fn(*args, **kwargs))

        return self._derive(call, _union(self._raises, _raises_of(after)), Checked)

    def compose(self, before: Callable[..., Any]) -> Self:
        """Apply before first, then self: self(before(*args))."""
        _require(before, "before")
        fn = self._fn

        @wraps(fn, updated=())
        def call(*args: Any, **kwargs: Any) -> Any:
            return fn(before(*args, **kwargs))

        return self._derive(call, _union(_raises_of(before), self._raises))


class CheckedPredicate(Checked[P, bool]):
    """Fallible predicate with short-circuit boolean algebra.

    `and_`, `or_` and `negate` do not influence exceptions; use
    `fallback_to_or` or `or_try` to involve the other predicate on failure.
    """

    def fallback_to(self, other: Callable[P, bool] | bool) -> Self:  # type: ignore[override]
        """On any failure, use other(*args), or other itself when it is a bool."""
        if isinstance(other, bool):
            return self.or_return(other)
        return super().fallback_to(other)

    def fallback_to_or(self, other: Callable[P, bool]) -> Self:
        """Short-circuit or, where a failure of self yields other(*args) alone."""
        _require(other, "other")
        fn, name = self._fn, self.name

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> bool:
            try:
                if fn(*args, **kwargs):
                    return True
            except Exception as e:
                _suppressed(name, e)
            return bool(other(*args, **kwargs))

        return self._derive(call, ())

    def and_(self, other: Callable[P, bool]) -> Self:
        """Short-circuit and. Failures of either predicate propagate."""
        _require(other, "other")
        fn = self._fn

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> bool:
            return bool(fn(*args, **kwargs)) and bool(other(*args, **kwargs))

        return self._derive(call, _union(self._raises, _raises_of(other)))

    def or_(self, other: Callable[P, bool]) -> Self:
        """Short-circuit or. Failures of either predicate propagate."""
        _require(other, "other")
        fn = self._fn

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> bool:
            return bool(fn(*args, **kwargs)) or bool(other(*args, **kwargs))

        return self._derive(call, _union(self._raises, _raises_of(other)))

    def negate(self) -> Self:
        """Logical not, keeping the declared types."""
        fn = self._fn

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> bool:
            return not fn(*args, **kwargs)

        return self._derive(call, self._raises)

    __and__ = and_
    __or__ = or_
    __invert__ = negate


class CheckedConsumer(Checked[P, None]):
    """Fallible callable run for its side effects."""

    def ignore(self) -> Self:
        """Swallow any failure."""
        fn, name = self._fn, self.name

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> None:
            try:
                fn(*args, **kwargs)
            except Exception as e:
                _suppressed(name, e)

        return self._derive(call, ())

    def and_then(self, other: Callable[P, object]) -> Self:  # type: ignore[override]
        """Run other with the same arguments after self, if self succeeded."""
        _require(other, "other")
        fn = self._fn

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> None:
            fn(*args, **kwargs)
            other(*args, **kwargs)

        return self._derive(call, _union(self._raises, _raises_of(other)))

    def and_then_try(self, other: Callable[P, object]) -> Self:
        """Always run other exactly once after self. A failure of self is masked."""
        _require(other, "other")
        fn, name = self._fn, self.name

        @wraps(fn, updated=())
        def call(*args: P.args, **kwargs: P.kwargs) -> None:
            try:
                fn(*args, **kwargs)
            except Exception as e:
                _suppressed(name, e)
            other(*args, **kwargs)

        return self._derive(call, _raises_of(other))


# ═══════════════════════════════════════════════════════════════════════════════
# Factories
# ═══════════════════════════════════════════════════════════════════════════════


def _factory(kind: type[Checked], fn: Callable[..., Any] | None, raises: Raises) -> Any:
    if fn is None:
        return lambda f: kind(f._fn if isinstance(f, Checked) else f, raises=raises)
    return kind(fn._fn if isinstance(fn, Checked) else fn, raises=raises)


def checked(fn: Callable[P, R] | None = None, *, raises: Raises = Exception) -> Any:
    """Wrap fn as a Checked. Works as `checked(fn)`, `@checked` or `@checked(raises=...)`."""
    return _factory(Checked, fn, raises)


def supplier(fn: Callable[[], R] | None = None, *, raises: Raises = Exception) -> Any:
    """Wrap a zero-argument callable as a Checked."""
    return _factory(Checked, fn, raises)


def predicate(fn: Callable[P, bool] | None = None, *, raises: Raises = Exception) -> Any:
    """Wrap fn as a CheckedPredicate."""
    return _factory(CheckedPredicate, fn, raises)


def consumer(fn: Callable[P, object] | None = None, *, raises: Raises = Exception) -> Any:
    """Wrap fn as a CheckedConsumer."""
    return _factory(CheckedConsumer, fn, raises)


def adapt(fn: Callable[P, R], kind: type[Checked] = Checked) -> Any:
    """Wrap an ordinary callable as an adapter that declares no failures."""
    return kind(fn, raises=())
