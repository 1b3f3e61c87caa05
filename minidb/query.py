"""Executable queries.

``Query`` extends :class:`~minidb.builder.BaseQuery` with terminal methods
that compile the accumulated clauses with the database's grammar and run the
resulting SQL through the database.  Terminal methods never modify the query
they are called on, so a query can be reused::

    published = database.table("posts").where("status", "published")
    total = published.count()
    page = published.order_by_desc("created_at").limit(20).get()
"""
from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, NoReturn

from minidb.builder.query import BaseQuery
from minidb.errors import (
    InvalidArgumentException,
    InvalidReturnValueException,
    translate_error,
    translating_errors,
)

if TYPE_CHECKING:
    from minidb.database import Database

#: Alias of the aggregate column selected by count/avg/sum/min/max.
AGGREGATE_ALIAS = "aggregate"


class Query(BaseQuery):
    """A query bound to a :class:`~minidb.Database`.

    Errors raised while building (a malformed ``where()`` argument, for
    instance) are translated to the public exception types as well.

    Args:
        database: The database the query runs on.
    """

    def __init__(self, database: Database) -> None:
        super().__init__()
        self.database = database

    def make_empty_copy(self) -> Query:
        return Query(self.database)

    def handle_exception(self, exception: Exception) -> NoReturn:
        translate_error(exception)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get(self) -> list[dict[str, Any]]:
        """Execute the query and return all rows.

        Raises:
            IncorrectQueryException: If the query cannot be compiled.
            InvalidArgumentException: If a bound value has an unsupported type.
            DatabaseException: If the database fails to execute the query.
        """
        with translating_errors():
            compiled = self.database.grammar.compile_select(self._prefixed())
        return self.database.select(compiled.sql, compiled.bindings)

    def first(self) -> dict[str, Any] | None:
        """Execute the query limited to one row and return that row.

        Returns:
            The first row, or ``None`` when nothing matches.
        """
        query = self.copy().limit(1)
        with translating_errors():
            compiled = self.database.grammar.compile_select(query._prefixed())
        return self.database.select_first(compiled.sql, compiled.bindings)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def count(self, column: Any = "*") -> int:
        """Return the number of matching rows (or non-null ``column`` values)."""
        value = self._aggregate("COUNT", column)
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise InvalidReturnValueException(
                f"The database returned a non-integer count: {value!r}"
            ) from exc

    def avg(self, column: Any) -> Any:
        """Return the average of ``column``, or ``None`` when nothing matches."""
        return self._aggregate("AVG", column)

    def sum(self, column: Any) -> Any:
        """Return the sum of ``column``, or ``None`` when nothing matches."""
        return self._aggregate("SUM", column)

    def min(self, column: Any) -> Any:
        """Return the smallest ``column`` value, or ``None`` when nothing matches."""
        return self._aggregate("MIN", column)

    def max(self, column: Any) -> Any:
        """Return the largest ``column`` value, or ``None`` when nothing matches."""
        return self._aggregate("MAX", column)

    def _aggregate(self, function: str, column: Any) -> Any:
        query = self.copy()
        query.columns = []
        query.orders = []
        query.add_aggregate(function, column, AGGREGATE_ALIAS).offset(None).limit(None)
        with translating_errors():
            compiled = self.database.grammar.compile_select(query._prefixed())
        row = self.database.select_first(compiled.sql, compiled.bindings)
        if row is None or AGGREGATE_ALIAS not in row:
            raise InvalidReturnValueException(
                f"The {function} query returned no {AGGREGATE_ALIAS!r} value"
            )
        return row[AGGREGATE_ALIAS]

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------

    def chunk(self, size: int, callback: Callable[[list[dict[str, Any]]], Any]) -> None:
        """Walk the matching rows page by page.

        ``callback`` receives each non-empty page of at most ``size`` rows,
        in order.  Its return value is ignored; iterate :meth:`chunks` to
        stop early.  Every page is a separate query, so rows written
        concurrently may be skipped or seen twice.

        Raises:
            InvalidArgumentException: If ``size`` is not a positive integer.
                Nothing is executed in that case.
        """
        for rows in self.chunks(size):
            callback(rows)

    def chunks(self, size: int) -> Iterator[list[dict[str, Any]]]:
        """Return an iterator over pages of at most ``size`` rows.

        The size is checked immediately, not on first iteration.
        """
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise InvalidArgumentException(
                f"The chunk size must be a positive integer, {size!r} given"
            )
        return self._pages(size)

    def _pages(self, size: int) -> Iterator[list[dict[str, Any]]]:
        query = self.copy()
        offset = 0
        while True:
            rows = query.offset(offset).limit(size).get()
            if not rows:
                return
            yield rows
            if len(rows) < size:
                return
            offset += size

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def update(self, values: Mapping[str, Any]) -> int:
        """Update the matching rows and return the number of affected rows.

        Args:
            values: Column → new value.  Values may be scalars,
                :class:`~minidb.Raw` expressions or subqueries.

        Raises:
            IncorrectQueryException: If there is no target table or no value.
            InvalidArgumentException: If a value has an unsupported type.
            DatabaseException: If the database fails to execute the statement.
        """
        query = self.copy().add_update(values)
        with translating_errors():
            compiled = self.database.grammar.compile_update(query._prefixed())
        return self.database.update(compiled.sql, compiled.bindings)

    def delete(self) -> int:
        """Delete the matching rows and return the number of deleted rows."""
        with translating_errors():
            compiled = self.database.grammar.compile_delete(self._prefixed())
        return self.database.delete(compiled.sql, compiled.bindings)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prefixed(self) -> BaseQuery:
        return self.database.table_prefixer.process(self)

    def __repr__(self) -> str:
        return f"Query(table={self.table!r}, database={self.database!r})"
