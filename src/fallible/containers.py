"""Views over standard containers that accept fallible callbacks.

The views never leave a container half-updated: `remove_if` and
`replace_all` evaluate the callback for every element before mutating, and
the map compute methods only write after the callback returned. A `None`
returned by a remapping function removes the key.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator, MutableMapping, MutableSequence, MutableSet
from functools import singledispatch
from typing import Any, Callable, Generic, TypeVar

from .checked import Raises, adapt
from .optional import CheckedOptional
from .stream import CheckedStream

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")


class CheckedCollection(Generic[T]):
    """View over any collection: iteration, conditional removal, streaming."""

    __slots__ = ("_delegate",)

    def __init__(self, delegate: Collection[T]) -> None:
        self._delegate = delegate

    @property
    def delegate(self) -> Collection[T]:
        return self._delegate

    def for_each(self, action: Callable[[T], object]) -> None:
        for item in self._delegate:
            action(item)

    def remove_if(self, predicate: Callable[[T], bool]) -> bool:
        """Remove matching elements; True if any were removed.

        The container must be a mutable sequence or set.
        """
        doomed = [bool(predicate(item)) for item in self._delegate]
        if not any(doomed):
            return False
        d = self._delegate
        if isinstance(d, MutableSequence):
            d[:] = [item for item, drop in zip(d, doomed) if not drop]
        elif isinstance(d, MutableSet):
            for item in [item for item, drop in zip(d, doomed) if drop]:
                d.discard(item)
        else:
            raise TypeError(f"cannot remove from immutable {type(d).__name__}")
        return True

    def stream(self, raises: Raises = Exception) -> CheckedStream[T]:
        return CheckedStream.of(self._delegate, raises)

    def __len__(self) -> int:
        return len(self._delegate)

    def __iter__(self) -> Iterator[T]:
        return iter(self._delegate)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._delegate!r})"


class CheckedList(CheckedCollection[T]):
    """View over a list."""

    __slots__ = ()

    _delegate: MutableSequence[T]

    def replace_all(self, operator: Callable[[T], T]) -> None:
        """Replace every element with operator(element)."""
        self._delegate[:] = [operator(item) for item in self._delegate]


class CheckedMap(Generic[K, V]):
    """View over a mutable mapping."""

    __slots__ = ("_delegate",)

    def __init__(self, delegate: MutableMapping[K, V]) -> None:
        self._delegate = delegate

    @property
    def delegate(self) -> MutableMapping[K, V]:
        return self._delegate

    def for_each(self, action: Callable[[K, V], object]) -> None:
        for k, v in list(self._delegate.items()):
            action(k, v)

    def replace_all(self, fn: Callable[[K, V], V]) -> None:
        """Replace every value with fn(key, value)."""
        self._delegate.update({k: fn(k, v) for k, v in self._delegate.items()})

    def compute_if_absent(self, key: K, fn: Callable[[K], V | None]) -> V | None:
        """Return the value for key, computing and storing it when absent or None."""
        current = self._delegate.get(key)
        if current is not None:
            return current
        value = fn(key)
        if value is not None:
            self._delegate[key] = value
        return value

    def compute_if_present(self, key: K, fn: Callable[[K, V], V | None]) -> V | None:
        """Remap a present value; a None result removes the key."""
        current = self._delegate.get(key)
        if current is None:
            return None
        return self._store(key, fn(key, current))

    def compute(self, key: K, fn: Callable[[K, V | None], V | None]) -> V | None:
        """Remap the value (None when absent); a None result removes the key."""
        return self._store(key, fn(key, self._delegate.get(key)))

    def merge(self, key: K, value: V, fn: Callable[[V, V], V | None]) -> V | None:
        """Store value when absent, else fn(old, value); a None result removes the key."""
        if value is None:
            raise ValueError("merge() requires a non-None value")
        current = self._delegate.get(key)
        return self._store(key, value if current is None else fn(current, value))

    def _store(self, key: K, value: V | None) -> V | None:
        if value is None:
            self._delegate.pop(key, None)
        else:
            self._delegate[key] = value
        return value

    def stream(self, raises: Raises = Exception) -> CheckedStream[tuple[K, V]]:
        """Stream of (key, value) pairs."""
        return CheckedStream.of(self._delegate.items(), raises)

    def __len__(self) -> int:
        return len(self._delegate)

    def __repr__(self) -> str:
        return f"CheckedMap({self._delegate!r})"


# ═══════════════════════════════════════════════════════════════════════════════
# Dispatch
# ═══════════════════════════════════════════════════════════════════════════════


@singledispatch
def of(obj: Any, raises: Raises = Exception) -> Any:
    """Wrap obj in the matching checked view.

    dict → CheckedMap, list → CheckedList, other collections →
    CheckedCollection, iterators → CheckedStream, None → empty
    CheckedOptional, callables → adapter.
    """
    if isinstance(obj, MutableMapping):
        return CheckedMap(obj)
    if isinstance(obj, MutableSequence):
        return CheckedList(obj)
    if isinstance(obj, Collection):
        return CheckedCollection(obj)
    if isinstance(obj, Iterator):
        return CheckedStream.of(obj, raises)
    if callable(obj):
        return adapt(obj)
    raise TypeError(f"no checked view for {type(obj).__name__}")


@of.register
def _(obj: dict, raises: Raises = Exception) -> CheckedMap[Any, Any]:
    return CheckedMap(obj)


@of.register
def _(obj: list, raises: Raises = Exception) -> CheckedList[Any]:
    return CheckedList(obj)


@of.register
def _(obj: CheckedStream, raises: Raises = Exception) -> CheckedStream[Any]:
    return obj.with_raises(*_as_tuple(raises))


@of.register(type(None))
def _(obj: None, raises: Raises = Exception) -> CheckedOptional[Any]:
    return CheckedOptional.empty()


def _as_tuple(raises: Raises) -> tuple[type[BaseException], ...]:
    return raises if isinstance(raises, tuple) else (raises,)
