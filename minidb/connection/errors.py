"""Exceptions raised by the connection layer.

SQLAlchemy and DB-API driver exceptions never leave
:class:`~minidb.connection.Connection` unwrapped; they are chained as the
``__cause__`` of the errors below.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class DriverError(Exception):
    """Base exception for connection layer failures."""


class BindingError(DriverError):
    """Raised when bound values are malformed (e.g. a list as a value)."""


class ExecutionError(DriverError):
    """Raised when connecting or executing a statement fails.

    Args:
        message: The driver's error message.
        sql: The statement that failed; ``None`` for connection failures.
        bindings: The values bound to the statement.
    """

    def __init__(
        self,
        message: str,
        sql: str | None = None,
        bindings: Sequence[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.sql = sql
        self.bindings: list[Any] = list(bindings) if bindings is not None else []
