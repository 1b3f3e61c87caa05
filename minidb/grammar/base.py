"""Grammar abstractions: CompiledQuery and the Grammar ABC.

The Template Method pattern is used:
- ``Grammar`` defines the compilation algorithm (through
  :class:`~minidb.grammar.builder.StatementBuilder`) and the default clause
  rendering.
- Dialect grammars override the dialect-specific steps: identifier quoting,
  LIMIT/OFFSET rendering, and what UPDATE/DELETE statements may carry.

Every grammar emits ``?`` placeholders; the connection layer converts them
to the paramstyle of the DB-API driver in use.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from minidb.builder.errors import InvalidQueryError
from minidb.builder.query import BaseQuery
from minidb.grammar.builder import StatementBuilder
from minidb.grammar.context import CompiledQuery

__all__ = ["CompiledQuery", "Grammar"]


class Grammar(ABC):
    """Abstract base for dialect grammars."""

    #: Placeholder written for every bound value.
    placeholder: ClassVar[str] = "?"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compile_select(self, query: BaseQuery) -> CompiledQuery:
        """Compile ``query`` to a SELECT statement.

        Raises:
            InvalidQueryError: If the query cannot be expressed in this
                dialect.
            InvalidArgumentError: If the query holds a value that cannot be
                bound.
        """
        return StatementBuilder(self).build_select(query)

    def compile_update(self, query: BaseQuery) -> CompiledQuery:
        """Compile ``query`` and its ``updates`` to an UPDATE statement."""
        return StatementBuilder(self).build_update(query)

    def compile_delete(self, query: BaseQuery) -> CompiledQuery:
        """Compile ``query`` to a DELETE statement."""
        return StatementBuilder(self).build_delete(query)

    # ------------------------------------------------------------------
    # Dialect hooks
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name (``'common'``, ``'mysql'``…)."""

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Return a properly-quoted SQL identifier.

        Args:
            name: Unquoted identifier (table, column or alias name).

        Returns:
            Quoted identifier.
        """

    def quote_column(self, column: str) -> str:
        """Quote a possibly qualified column name (``table.column``, ``t.*``)."""
        return ".".join(
            part if part == "*" else self.quote_identifier(part)
            for part in column.split(".")
        )

    def compile_limit(self, limit: int | None, offset: int | None) -> str:
        """Render the LIMIT/OFFSET tail of a SELECT statement.

        The portable form cannot skip rows without a row limit, so an
        offset without a limit is rejected.

        Raises:
            InvalidQueryError: If ``offset`` is set and ``limit`` is not.
        """
        if limit is None:
            if offset:
                raise InvalidQueryError(
                    f"OFFSET without LIMIT is not supported by the {self.dialect_name} grammar",
                    clause="OFFSET",
                )
            return ""
        if offset:
            return f"LIMIT {limit} OFFSET {offset}"
        return f"LIMIT {limit}"

    def compile_write_tail(self, statement: str, query: BaseQuery, orders_sql: str) -> str:
        """Render what follows the WHERE clause of an UPDATE/DELETE statement.

        Args:
            statement: ``"UPDATE"`` or ``"DELETE"``.
            query: The query being compiled.
            orders_sql: The compiled ``ORDER BY`` clause, or ``""``.

        Raises:
            InvalidQueryError: If the query carries ordering, a limit or an
                offset; the portable forms of UPDATE and DELETE have none.
        """
        if orders_sql or query.row_limit is not None or query.row_offset:
            raise InvalidQueryError(
                f"{statement} queries with ORDER BY, LIMIT or OFFSET are not supported "
                f"by the {self.dialect_name} grammar",
                clause=statement,
            )
        return ""

    def compile_delete_head(self, table_sql: str, alias_sql: str | None) -> str:
        """Render ``DELETE FROM <table> [AS <alias>]``."""
        if alias_sql:
            return f"DELETE FROM {table_sql} AS {alias_sql}"
        return f"DELETE FROM {table_sql}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
