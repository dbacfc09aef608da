"""Tests for CheckedOptional."""

from __future__ import annotations

import pytest

from fallible import CheckedOptional, Err, NoValueError, Ok, checked


class ParseError(Exception):
    pass


def throw_parse_error(s: str) -> str:
    raise ParseError(s)


# ═════════════════════════════════════════════════════════════════════════════
# Construction
# ═════════════════════════════════════════════════════════════════════════════


def test_of_rejects_none() -> None:
    with pytest.raises(ValueError):
        CheckedOptional.of(None)


def test_constructor_rejects_none() -> None:
    """None can never be a present value, whichever constructor is used."""
    with pytest.raises(ValueError):
        CheckedOptional(None)
    assert CheckedOptional().is_empty()
    assert CheckedOptional(0).is_present()


def test_of_nullable_and_empty() -> None:
    assert CheckedOptional.of_nullable(None) is CheckedOptional.empty()
    assert CheckedOptional.of_nullable(0).is_present()
    assert CheckedOptional.empty().is_empty()
    assert not CheckedOptional.empty()
    assert CheckedOptional.of("") == CheckedOptional.of("")


def test_get_empty_raises_no_value() -> None:
    with pytest.raises(NoValueError, match="No value present"):
        CheckedOptional.empty().get()
    # NoValueError is also a LookupError
    with pytest.raises(LookupError):
        CheckedOptional.empty().or_else_raise()


# ═════════════════════════════════════════════════════════════════════════════
# Callbacks
# ═════════════════════════════════════════════════════════════════════════════


def test_map_failure_propagates() -> None:
    with pytest.raises(ParseError):
        CheckedOptional.of("a").map(throw_parse_error)


def test_map_handled_failure() -> None:
    handled = checked(throw_parse_error, raises=ParseError).or_return("z")
    assert CheckedOptional.of("a").map(handled).get() == "z"


def test_map_none_gives_empty() -> None:
    assert CheckedOptional.of(1).map(lambda _: None).is_empty()


def test_callbacks_skipped_when_empty() -> None:
    """No callback runs on an empty optional."""
    empty: CheckedOptional[str] = CheckedOptional.empty()
    assert empty.map(throw_parse_error).is_empty()
    assert empty.filter(throw_parse_error).is_empty()
    assert empty.flat_map(throw_parse_error).is_empty()
    empty.if_present(throw_parse_error)


def test_filter() -> None:
    assert CheckedOptional.of(4).filter(lambda n: n > 3).get() == 4
    assert CheckedOptional.of(2).filter(lambda n: n > 3).is_empty()


def test_flat_map_requires_optional() -> None:
    assert CheckedOptional.of(2).flat_map(lambda n: CheckedOptional.of(n * 2)).get() == 4
    with pytest.raises(TypeError):
        CheckedOptional.of(2).flat_map(lambda n: n * 2)


def test_if_present_or_else() -> None:
    seen: list[object] = []
    CheckedOptional.of(1).if_present_or_else(seen.append, lambda: seen.append("empty"))
    CheckedOptional.empty().if_present_or_else(seen.append, lambda: seen.append("empty"))
    assert seen == [1, "empty"]


# ═════════════════════════════════════════════════════════════════════════════
# Extraction
# ═════════════════════════════════════════════════════════════════════════════


def test_or_else_variants() -> None:
    assert CheckedOptional.empty().or_else(5) == 5
    assert CheckedOptional.of(1).or_else(5) == 1
    assert CheckedOptional.of(1).or_else_get(lambda: throw_parse_error("unused")) == 1
    with pytest.raises(ParseError):
        CheckedOptional.empty().or_else_get(lambda: throw_parse_error("used"))


def test_or_else_raise_custom() -> None:
    with pytest.raises(KeyError):
        CheckedOptional.empty().or_else_raise(lambda: KeyError("k"))
    assert CheckedOptional.of(3).or_else_raise(lambda: KeyError("k")) == 3


def test_to_result_and_stream() -> None:
    assert CheckedOptional.of(1).to_result("missing") == Ok(1)
    assert CheckedOptional.empty().to_result("missing") == Err("missing")
    assert CheckedOptional.of(1).stream().to_list() == [1]
    assert CheckedOptional.empty().stream().count() == 0
    assert list(CheckedOptional.of("v")) == ["v"]


def test_repr_and_hash() -> None:
    assert repr(CheckedOptional.of(1)) == "CheckedOptional[1]"
    assert repr(CheckedOptional.empty()) == "CheckedOptional.empty"
    assert hash(CheckedOptional.of(1)) == hash(CheckedOptional.of(1))
