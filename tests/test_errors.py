"""Unit tests for the public exceptions and the error translator."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from minidb.builder.errors import InvalidArgumentError, InvalidQueryError
from minidb.connection.errors import BindingError, ExecutionError
from minidb.errors import (
    DatabaseException,
    IncorrectQueryException,
    InvalidArgumentException,
    InvalidReturnValueException,
    MiniDBException,
    render_value,
    render_values,
    translate_error,
    translating_errors,
)


@pytest.mark.parametrize("exc_cls", [
    DatabaseException,
    IncorrectQueryException,
    InvalidArgumentException,
    InvalidReturnValueException,
])
def test_public_errors_share_a_base(exc_cls):
    assert issubclass(exc_cls, MiniDBException)


def test_database_exception_message():
    exc = DatabaseException("near \"WRONG\": syntax error", "WRONG SQL", ["foo", "bar", True, 123])
    assert str(exc) == (
        'near "WRONG": syntax error; SQL query: (WRONG SQL); '
        'bound values: ["foo", "bar", true, 123]'
    )
    assert exc.sql == "WRONG SQL"
    assert exc.bindings == ["foo", "bar", True, 123]


def test_database_exception_without_sql():
    exc = DatabaseException("Cannot connect to the database: refused")
    assert str(exc) == "Cannot connect to the database: refused"
    assert exc.sql is None
    assert exc.bindings == []


@pytest.mark.parametrize(("value", "rendered"), [
    (None, "null"),
    (True, "true"),
    (False, "false"),
    (12, "12"),
    (1.5, "1.5"),
    (Decimal("2.50"), "2.50"),
    ("it's \"quoted\"", '"it\'s \\"quoted\\""'),
    (date(2024, 2, 29), '"2024-02-29"'),
    (b"\x00", "b'\\x00'"),
])
def test_render_value(value, rendered):
    assert render_value(value) == rendered


def test_render_values():
    assert render_values([]) == ""
    assert render_values(["a", None]) == '"a", null'


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(("original", "expected"), [
    (InvalidArgumentError("bad argument"), InvalidArgumentException),
    (BindingError("bad binding"), InvalidArgumentException),
    (InvalidQueryError("bad query", clause="FROM"), IncorrectQueryException),
    (ExecutionError("failed", "SELECT 1", [1]), DatabaseException),
])
def test_translate_error_rewraps_known_errors(original, expected):
    with pytest.raises(expected) as exc_info:
        translate_error(original)
    assert exc_info.value.__cause__ is original
    assert str(original) in str(exc_info.value)


def test_translated_execution_error_carries_statement():
    with pytest.raises(DatabaseException) as exc_info:
        translate_error(ExecutionError("failed", "SELECT ?", ["x"]))
    assert exc_info.value.sql == "SELECT ?"
    assert exc_info.value.bindings == ["x"]
    assert str(exc_info.value) == 'failed; SQL query: (SELECT ?); bound values: ["x"]'


def test_unknown_errors_propagate_unchanged():
    original = TypeError("programming error")
    with pytest.raises(TypeError) as exc_info:
        translate_error(original)
    assert exc_info.value is original


def test_translating_errors_context_manager():
    with pytest.raises(IncorrectQueryException):
        with translating_errors():
            raise InvalidQueryError("no table")
    with pytest.raises(KeyError):
        with translating_errors():
            raise KeyError("x")
