"""Tests for changesets_gitlab.core.result module."""

import pytest

from changesets_gitlab.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_ok_unwrap_or_ignores_default(self) -> None:
        assert Ok(42).unwrap_or(0) == 42

    def test_ok_map(self) -> None:
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_ok_map_err_is_identity(self) -> None:
        assert Ok(42).map_err(lambda e: f"error: {e}") == Ok(42)


class TestErr:
    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("boom").unwrap()

    def test_err_unwrap_or_returns_default(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_err_map_err(self) -> None:
        """map_err converts errors at layer boundaries."""
        assert Err("push").map_err(lambda e: f"git {e} failed") == Err("git push failed")


class TestMatch:
    def test_pattern_matching(self) -> None:
        result: Result[int, str] = Err("no changesets")
        match result:
            case Ok(value):
                seen = f"ok {value}"
            case Err(error):
                seen = f"err {error}"
        assert seen == "err no changesets"

    def test_type_guards(self) -> None:
        assert is_ok(Ok(1))
        assert not is_ok(Err(1))
        assert is_err(Err(1))
        assert not is_err(Ok(1))
