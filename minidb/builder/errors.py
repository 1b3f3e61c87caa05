"""Exceptions raised by the query builder and the grammars.

All of them inherit from :class:`QueryBuilderError`.  The
:mod:`minidb.errors` translator maps them onto the public facade
exceptions, so application code rarely needs to catch these directly.
"""
from __future__ import annotations


class QueryBuilderError(Exception):
    """Base exception for query building and compilation failures."""


class InvalidArgumentError(QueryBuilderError):
    """Raised when a builder method receives a malformed argument.

    Examples: a filter value of an unsupported type, an unknown comparison
    operator, a negative limit.
    """


class InvalidQueryError(QueryBuilderError):
    """Raised when an accumulated query cannot be compiled to SQL.

    Args:
        message: Human-readable description.
        clause: The clause being compiled when the problem was detected
            (``"FROM"``, ``"LIMIT"``, ``"SET"``…).
    """

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause
