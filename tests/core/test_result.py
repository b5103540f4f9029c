"""Tests for rdao.core.result module."""

import pytest

from rdao.core.errors import TemplateError
from rdao.core.result import Err, Ok, Result, try_result


class TestOk:
    """Test Ok class."""

    def test_create_ok(self):
        result = Ok(42)
        assert result.value == 42
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_unwrap(self):
        assert Ok("hello").unwrap() == "hello"
        assert Ok(10).unwrap_or(99) == 10

    def test_map(self):
        assert Ok(3).map(lambda x: x * 2).map(lambda x: x + 1).unwrap() == 7

    def test_callback_args(self):
        """Ok becomes (None, value) for a continuation."""
        assert Ok([1, 2]).to_callback_args() == (None, [1, 2])

    def test_callback_args_none_value(self):
        assert Ok(None).to_callback_args() == (None, None)

    def test_to_dict(self):
        assert Ok(1).to_dict() == {"ok": True, "value": 1}


class TestErr:
    """Test Err class."""

    def test_unwrap_raises_original_error(self):
        error = ValueError("bad")
        with pytest.raises(ValueError) as exc_info:
            Err(error).unwrap()
        assert exc_info.value is error

    def test_unwrap_or(self):
        assert Err(ValueError("bad")).unwrap_or(5) == 5

    def test_map_is_noop(self):
        error = ValueError("bad")
        result = Err(error).map(lambda x: x * 2)
        assert result.is_err()
        assert result.error is error

    def test_callback_args(self):
        """Err becomes (error, None): never a partial value."""
        error = RuntimeError("driver")
        assert Err(error).to_callback_args() == (error, None)

    def test_to_dict_rdao_error(self):
        data = Err(TemplateError("Missing parameter: id")).to_dict()
        assert data["ok"] is False
        assert data["error"]["error_type"] == "TemplateError"
        assert data["error"]["category"] == "QUERY"

    def test_to_dict_foreign_error(self):
        assert Err(KeyError("k")).to_dict()["error"]["error_type"] == "KeyError"


class TestTryResult:
    def test_success(self):
        result: Result[int] = try_result(lambda: 1 + 1)
        assert result == Ok(2)

    def test_failure(self):
        result = try_result(lambda: 1 / 0)
        assert isinstance(result.error, ZeroDivisionError)
