"""Tests for the Result type.

Validates:
- Functor and monad laws
- Extraction on both variants
- partition_results keeps every entry
"""

from __future__ import annotations

from typing import Callable

import pytest

from stalemate.foundation.errors import Err, Ok, Result, partition_results


# ═════════════════════════════════════════════════════════════════════════════
# Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_functor_identity() -> None:
    """fmap id = id"""
    assert Ok(42).map(lambda x: x) == Ok(42)
    assert Err("fail").map(lambda x: x) == Err("fail")


def test_functor_composition() -> None:
    """fmap (f . g) = fmap f . fmap g"""
    f: Callable[[int], int] = lambda x: x + 1
    g: Callable[[int], int] = lambda x: x * 2
    result: Result[int, str] = Ok(5)

    assert result.map(lambda x: f(g(x))) == result.map(g).map(f)


def test_monad_left_identity() -> None:
    """return a >>= f = f a"""
    f: Callable[[int], Result[int, str]] = lambda x: Ok(x * 2)

    assert Ok(21).flat_map(f) == f(21)


def test_monad_right_identity() -> None:
    """m >>= return = m"""
    assert Ok(3).flat_map(Ok) == Ok(3)
    assert Err("e").flat_map(Ok) == Err("e")


def test_flat_map_short_circuits_on_err() -> None:
    calls: list[int] = []

    def track(x: int) -> Result[int, str]:
        calls.append(x)
        return Ok(x)

    assert Err("early").flat_map(track) == Err("early")
    assert calls == []


# ═════════════════════════════════════════════════════════════════════════════
# Extraction
# ═════════════════════════════════════════════════════════════════════════════


def test_unwrap_variants() -> None:
    assert Ok(1).unwrap() == 1
    assert Err("e").unwrap_err() == "e"
    with pytest.raises(RuntimeError):
        Err("e").unwrap()
    with pytest.raises(RuntimeError):
        Ok(1).unwrap_err()


def test_optional_accessors() -> None:
    assert Ok(1).ok() == 1 and Ok(1).err() is None
    assert Err("e").ok() is None and Err("e").err() == "e"
    assert Err("e").unwrap_or(0) == 0


def test_map_err_and_match() -> None:
    assert Err("boom").map_err(str.upper) == Err("BOOM")
    assert Ok(1).map_err(str.upper) == Ok(1)
    assert Ok(2).match(ok=lambda v: v * 10, err=lambda e: -1) == 20
    assert Err("x").match(ok=lambda v: v, err=lambda e: f"failed: {e}") == "failed: x"


def test_truthiness_and_iteration() -> None:
    assert Ok(0)
    assert not Err("e")
    assert list(Ok(5)) == [5]
    assert list(Err("e")) == []


def test_ok_and_err_with_same_payload_differ() -> None:
    assert Ok("x") != Err("x")
    assert hash(Ok(1)) == hash(Ok(1))


def test_pattern_matching() -> None:
    match Ok(7):
        case Result(value):
            assert value == 7


# ═════════════════════════════════════════════════════════════════════════════
# partition_results
# ═════════════════════════════════════════════════════════════════════════════


def test_partition_results() -> None:
    values, errors = partition_results([Ok(1), Err("e1"), Ok(3), Err("e2")])

    assert values == [1, 3]
    assert errors == ["e1", "e2"]


def test_partition_results_empty() -> None:
    assert partition_results([]) == ([], [])
