"""fallible - combinators for callbacks that may fail.

Wrap a callable with the exceptions it declares, then decide per call site
whether to suppress, substitute, map, log-and-rethrow or defer the failure.

Quick Start:
    >>> from fallible import checked, predicate, CheckedStream
    >>>
    >>> parse = checked(int, raises=ValueError)
    >>> parse.or_return(0)("x")
    0
    >>> parse.rethrow(KeyError).optional()("x") is None
    True
    >>>
    >>> @predicate(raises=OSError)
    ... def exists(path: str) -> bool:
    ...     ...
    >>>
    >>> CheckedStream.of(["1", "2", "x"]).map(parse.result()).filter(bool).count()
    2

Containers:
    >>> import fallible
    >>> d = {"a": 1}
    >>> fallible.of(d).compute_if_absent("b", lambda k: 2)
    2
"""

from __future__ import annotations

__version__ = "0.1.0"

from .checked import (
    Checked,
    CheckedConsumer,
    CheckedPredicate,
    adapt,
    checked,
    consumer,
    predicate,
    supplier,
)
from .config import FallibleSettings, LoggingSettings, clear_settings_cache, configure_logging, get_settings
from .containers import CheckedCollection, CheckedList, CheckedMap, of
from .errors import (
    FailureKind,
    FailureRecord,
    FallibleError,
    NoValueError,
    StreamConsumedError,
    UnwrapError,
    is_declared,
)
from .optional import CheckedOptional
from .result import Err, Ok, Result, attempt, attempt_async, collect_results, sequence, traverse
from .stream import CheckedStream, SummaryStatistics

__all__ = [
    # Callables
    "Checked", "CheckedPredicate", "CheckedConsumer",
    "checked", "predicate", "consumer", "supplier", "adapt",
    # Result
    "Result", "Ok", "Err", "attempt", "attempt_async", "sequence", "traverse", "collect_results",
    # Containers
    "CheckedOptional", "CheckedStream", "SummaryStatistics",
    "CheckedCollection", "CheckedList", "CheckedMap", "of",
    # Errors
    "FallibleError", "UnwrapError", "NoValueError", "StreamConsumedError",
    "FailureKind", "FailureRecord", "is_declared",
    # Config
    "FallibleSettings", "LoggingSettings", "get_settings", "clear_settings_cache", "configure_logging",
]
