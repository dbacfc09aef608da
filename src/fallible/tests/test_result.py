"""Tests for the Result type and attempt helpers.

Validates:
- Functor and monad laws
- Exception re-raising on unwrap
- attempt/attempt_async declared-failure capture
- Collection operations
"""

from __future__ import annotations

import asyncio
from typing import Callable

import pytest

from fallible import Err, Ok, Result, UnwrapError, attempt, attempt_async, checked, collect_results, sequence, traverse


# ═════════════════════════════════════════════════════════════════════════════
# Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_functor_identity() -> None:
    """Functor law: fmap id = id"""
    result: Result[int, str] = Ok(42)
    assert result.map(lambda x: x) == result

    err_result: Result[int, str] = Err("fail")
    assert err_result.map(lambda x: x) == err_result


def test_functor_composition() -> None:
    """Functor law: fmap (f . g) = fmap f . fmap g"""
    f: Callable[[int], int] = lambda x: x + 1
    g: Callable[[int], int] = lambda x: x * 2
    result: Result[int, str] = Ok(5)

    assert result.map(lambda x: f(g(x))) == result.map(g).map(f)


def test_monad_left_identity() -> None:
    """Monad law: return a >>= f = f a"""
    f: Callable[[int], Result[int, str]] = lambda x: Ok(x * 2)
    assert Ok(42).flat_map(f) == f(42)


def test_monad_associativity() -> None:
    """Monad law: (m >>= f) >>= g = m >>= (\\x -> f x >>= g)"""
    m: Result[int, str] = Ok(5)
    f: Callable[[int], Result[int, str]] = lambda x: Ok(x + 1)
    g: Callable[[int], Result[int, str]] = lambda x: Ok(x * 2)

    assert m.flat_map(f).flat_map(g) == m.flat_map(lambda x: f(x).flat_map(g))


# ═════════════════════════════════════════════════════════════════════════════
# Extraction
# ═════════════════════════════════════════════════════════════════════════════


def test_unwrap_reraises_held_exception() -> None:
    """unwrap on an Err holding an exception raises that same exception."""
    exc = KeyError("missing")
    with pytest.raises(KeyError) as info:
        Err(exc).unwrap()
    assert info.value is exc


def test_unwrap_non_exception_error() -> None:
    """unwrap on a plain Err raises UnwrapError."""
    with pytest.raises(UnwrapError, match="fail"):
        Err("fail").unwrap()


def test_unwrap_err_on_ok() -> None:
    with pytest.raises(UnwrapError):
        Ok(1).unwrap_err()


def test_expect_chains_cause() -> None:
    """expect wraps the held exception as __cause__."""
    with pytest.raises(UnwrapError, match="loading config") as info:
        Err(ValueError("bad")).expect("loading config")
    assert isinstance(info.value.__cause__, ValueError)


def test_raise_for_maps_error() -> None:
    """raise_for raises the mapped exception chained to the original."""
    with pytest.raises(LookupError) as info:
        Err(ValueError("bad")).raise_for(lambda e: LookupError(f"wrapped {e}"))
    assert str(info.value) == "wrapped bad"
    assert isinstance(info.value.__cause__, ValueError)
    assert Ok(3).raise_for(LookupError) == 3


def test_unwrap_or_and_else() -> None:
    assert Ok(5).unwrap_or(10) == 5
    assert Err("fail").unwrap_or(10) == 10
    assert Err("fail").unwrap_or_else(len) == 4


# ═════════════════════════════════════════════════════════════════════════════
# Operational
# ═════════════════════════════════════════════════════════════════════════════


def test_map_err_and_bimap() -> None:
    assert Err("fail").map_err(str.upper) == Err("FAIL")
    assert Ok(2).map_err(str.upper) == Ok(2)
    assert Ok(2).bimap(lambda x: x * 2, str.upper) == Ok(4)
    assert Err("e").bimap(lambda x: x * 2, str.upper) == Err("E")


def test_or_else_recovers() -> None:
    assert Err("fail").or_else(lambda _: Ok(42)) == Ok(42)
    assert Ok(5).or_else(lambda _: Ok(42)) == Ok(5)


def test_exception_equality_by_type_and_args() -> None:
    """Err values holding equal exceptions compare equal."""
    assert Err(ValueError("x")) == Err(ValueError("x"))
    assert Err(ValueError("x")) != Err(ValueError("y"))
    assert Err(ValueError("x")) != Err(KeyError("x"))
    assert hash(Err(ValueError("x"))) == hash(Err(ValueError("x")))


def test_match_and_iteration() -> None:
    assert Ok(1).match(ok=lambda v: f"ok {v}", err=lambda e: f"err {e}") == "ok 1"
    assert Err("x").match(ok=lambda v: f"ok {v}", err=lambda e: f"err {e}") == "err x"
    assert list(Ok(1)) == [1]
    assert list(Err("x")) == []
    assert bool(Ok(0)) is True
    assert bool(Err(0)) is False


def test_flatten_and_tuple() -> None:
    assert Ok(Ok(1)).flatten() == Ok(1)
    assert Ok(Err("e")).flatten() == Err("e")
    assert Ok(1).to_tuple() == (1, None)
    assert Err("e").to_tuple() == (None, "e")


def test_public_methods_documented() -> None:
    from fallible import CheckedPredicate

    for name in ("map", "map_err", "bimap", "and_", "or_", "ok", "err", "is_ok", "unwrap_or"):
        assert getattr(Result, name).__doc__, name
    for name in ("and_", "or_", "negate"):
        assert getattr(CheckedPredicate, name).__doc__, name


def test_inspect_side_effects() -> None:
    seen: list[object] = []
    Ok(1).inspect(seen.append).inspect_err(seen.append)
    Err("e").inspect(seen.append).inspect_err(seen.append)
    assert seen == [1, "e"]


# ═════════════════════════════════════════════════════════════════════════════
# attempt
# ═════════════════════════════════════════════════════════════════════════════


def test_attempt_captures_declared() -> None:
    result = attempt(int, "x", raises=ValueError)
    assert result.is_err()
    assert isinstance(result.unwrap_err(), ValueError)
    assert attempt(int, "7") == Ok(7)


def test_attempt_propagates_undeclared() -> None:
    """Exceptions outside `raises` are not captured."""
    with pytest.raises(ValueError):
        attempt(int, "x", raises=KeyError)


def test_attempt_passes_kwargs() -> None:
    assert attempt(int, "ff", base=16) == Ok(255)


@pytest.mark.asyncio
async def test_attempt_async_coroutine() -> None:
    async def fetch(n: int) -> int:
        await asyncio.sleep(0)
        if n < 0:
            raise ValueError("negative")
        return n * 2

    assert await attempt_async(fetch, 2) == Ok(4)
    err = await attempt_async(fetch, -1, raises=ValueError)
    assert err.is_err()


@pytest.mark.asyncio
async def test_attempt_async_sync_callable() -> None:
    """Sync callables run in a worker thread."""
    assert await attempt_async(int, "12") == Ok(12)
    with pytest.raises(ValueError):
        await attempt_async(int, "x", raises=())


@pytest.mark.asyncio
async def test_attempt_async_checked_coroutine() -> None:
    """A Checked wrapping an async function is awaited, not run in a thread."""
    async def fetch(n: int) -> int:
        await asyncio.sleep(0)
        if n < 0:
            raise ValueError("negative")
        return n * 2

    wrapped = checked(fetch, raises=ValueError)
    assert await attempt_async(wrapped, 2) == Ok(4)
    err = await attempt_async(wrapped, -1, raises=ValueError)
    assert isinstance(err.unwrap_err(), ValueError)


@pytest.mark.asyncio
async def test_attempt_async_awaits_returned_awaitable() -> None:
    """A sync callable returning a coroutine has that coroutine awaited."""
    async def double(n: int) -> int:
        return n * 2

    assert await attempt_async(lambda n: double(n), 3) == Ok(6)


# ═════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═════════════════════════════════════════════════════════════════════════════


def test_sequence() -> None:
    assert sequence([Ok(1), Ok(2)]) == Ok([1, 2])
    assert sequence([Ok(1), Err("fail"), Ok(3)]) == Err("fail")
    assert sequence([]) == Ok([])


def test_traverse_stops_at_first_failure() -> None:
    """traverse does not call f after the first Err."""
    calls: list[str] = []

    def parse(s: str) -> Result[int, BaseException]:
        calls.append(s)
        return attempt(int, s, raises=ValueError)

    result = traverse(["1", "bad", "3"], parse)
    assert result.is_err()
    assert calls == ["1", "bad"]


def test_collect_results_accumulates() -> None:
    assert collect_results([Ok(1), Err("e1"), Ok(3), Err("e2")]) == Err(["e1", "e2"])
    assert collect_results([Ok(1), Ok(2)]) == Ok([1, 2])
