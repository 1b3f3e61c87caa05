"""Public exception hierarchy and the error translator.

All public errors inherit from :class:`MiniDBException` so callers can catch
the base class for any minidb failure.  Errors raised by the query builder,
the grammars and the connection layer are translated into these types by
:func:`translate_error`; the original error stays reachable as
``__cause__``.
"""
from __future__ import annotations

import json
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import date, time
from decimal import Decimal
from typing import Any, NoReturn

from minidb.builder.errors import InvalidArgumentError, InvalidQueryError
from minidb.connection.errors import BindingError, ExecutionError


class MiniDBException(Exception):
    """Base exception for all minidb errors."""


class DatabaseException(MiniDBException):
    """Raised when the database fails to connect or to execute a statement.

    The message carries the failing statement and its bound values::

        no such table: pre_items; SQL query: (SELECT * FROM "pre_items"); bound values: []

    Args:
        message: The underlying error message.
        sql: The failing statement, when there is one.
        bindings: The values bound to the statement.
    """

    def __init__(
        self,
        message: str,
        sql: str | None = None,
        bindings: Sequence[Any] | None = None,
    ) -> None:
        values = list(bindings) if bindings is not None else []
        if sql is not None:
            message = f"{message}; SQL query: ({sql}); bound values: [{render_values(values)}]"
        super().__init__(message)
        self.sql = sql
        self.bindings = values


class IncorrectQueryException(MiniDBException):
    """Raised when a built query cannot be compiled to SQL."""


class InvalidArgumentException(MiniDBException):
    """Raised when a method receives a malformed argument."""


class InvalidReturnValueException(MiniDBException):
    """Raised when an operation gets a result its contract does not allow."""


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------


def translate_error(exception: BaseException) -> NoReturn:
    """Raise the public counterpart of ``exception``.

    Rules, in order:

    1. builder/grammar :class:`InvalidArgumentError` and connection
       :class:`BindingError` → :class:`InvalidArgumentException`;
    2. grammar :class:`InvalidQueryError` → :class:`IncorrectQueryException`;
    3. connection :class:`ExecutionError` → :class:`DatabaseException` with
       the statement and bound values attached;
    4. anything else is re-raised unchanged.
    """
    if isinstance(exception, (InvalidArgumentError, BindingError)):
        raise InvalidArgumentException(str(exception)) from exception
    if isinstance(exception, InvalidQueryError):
        raise IncorrectQueryException(str(exception)) from exception
    if isinstance(exception, ExecutionError):
        raise DatabaseException(str(exception), exception.sql, exception.bindings) from exception
    raise exception


@contextmanager
def translating_errors() -> Iterator[None]:
    """Context manager applying :func:`translate_error` to escaping errors."""
    try:
        yield
    except Exception as exc:
        translate_error(exc)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_value(value: Any) -> str:
    """Render a bound value for an error message.

    Strings are double-quoted, booleans are ``true`` / ``false``, ``None`` is
    ``null`` and numbers are written as is.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (date, time)):
        return json.dumps(value.isoformat())
    return repr(value)


def render_values(values: Sequence[Any]) -> str:
    return ", ".join(render_value(value) for value in values)
