"""Exception types and structured failure records.

Provides the library's own exceptions and a pydantic record used when a
declared failure is logged before being rethrown.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from typing import Self

from pydantic import BaseModel

ExcTypes = tuple[type[BaseException], ...]


class FallibleError(Exception):
    """Base class for errors raised by fallible itself."""


class UnwrapError(FallibleError, RuntimeError):
    """Unwrap called on the wrong Result variant."""


class NoValueError(FallibleError, LookupError):
    """Value requested from an empty optional."""

    def __init__(self, message: str = "No value present") -> None:
        super().__init__(message)


class StreamConsumedError(FallibleError, RuntimeError):
    """Stream operated upon after it was consumed or linked."""

    def __init__(self, message: str = "stream has already been operated upon or closed") -> None:
        super().__init__(message)


class FailureKind(StrEnum):
    """Whether a failure was declared by the callable that raised it."""
    CHECKED = "CHECKED"
    UNCHECKED = "UNCHECKED"


def normalize_raises(raises: type[BaseException] | ExcTypes | None) -> ExcTypes:
    """Coerce a `raises` argument to a tuple of exception classes."""
    if raises is None:
        return ()
    types = raises if isinstance(raises, tuple) else (raises,)
    for t in types:
        if not (isinstance(t, type) and issubclass(t, BaseException)):
            raise TypeError(f"raises must contain exception classes, got {t!r}")
    return types


def is_declared(exc: BaseException, raises: ExcTypes) -> bool:
    """True if exc is an instance of one of the declared types."""
    return bool(raises) and isinstance(exc, raises)


class FailureRecord(BaseModel):
    """Structured description of a failure observed by a combinator."""

    model_config = {"frozen": True}

    operation: str
    exc_type: str
    message: str
    kind: FailureKind = FailureKind.CHECKED
    details: str | None = None

    @classmethod
    def from_exception(
        cls,
        operation: str,
        exc: BaseException,
        kind: FailureKind = FailureKind.CHECKED,
        *,
        include_trace: bool = False,
    ) -> Self:
        """Build a record from an exception, optionally with its traceback."""
        details = "".join(traceback.format_exception(exc)) if include_trace else None
        return cls(
            operation=operation,
            exc_type=type(exc).__qualname__,
            message=str(exc),
            kind=kind,
            details=details,
        )

    def render(self) -> str:
        """Format the record as a single log line (plus traceback if present)."""
        line = f"[{self.operation}] {self.kind.value.lower()} failure {self.exc_type}: {self.message}"
        return f"{line}\n{self.details}" if self.details else line

    __str__ = render
