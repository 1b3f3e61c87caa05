"""Table name prefixing.

A table prefix lets several logical schemas share one physical database:
with the prefix ``"blog_"`` the query ``from_("posts")`` targets the
``blog_posts`` table.  Prefixes are applied to a snapshot of the query right
before compilation, never to the query the application holds.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any

from minidb.builder.expressions import Aggregate, map_criterion
from minidb.builder.query import BaseQuery


class TablePrefixer:
    """Adds a fixed prefix to every table referenced by a query.

    Table references rewritten by :meth:`process`:

    * the target table and joined tables given by name;
    * ``table.column`` qualifiers, including the column names of an UPDATE,
      unless ``table`` is an alias declared by the query or by an enclosing
      query;
    * the same references inside nested subqueries.

    :class:`~minidb.builder.expressions.Raw` SQL is never rewritten.

    Args:
        prefix: The prefix; an empty string disables prefixing.
    """

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def add_table_prefix(self, table: str) -> str:
        """Return ``table`` with the prefix applied.

        For schema-qualified names (``"archive.posts"``) the prefix goes onto
        the table part.
        """
        if not self._prefix:
            return table
        schema, dot, name = table.rpartition(".")
        return f"{schema}{dot}{self._prefix}{name}"

    def process(self, query: BaseQuery) -> BaseQuery:
        """Return a prefixed copy of ``query``; ``query`` is not modified."""
        if not self._prefix:
            return query.copy()
        return self._process_query(query, frozenset())

    def process_value(self, value: Any) -> Any:
        """Prefix ``value`` when it is a subquery; return other values as is."""
        if isinstance(value, BaseQuery):
            return self.process(value)
        return value

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _process_query(self, query: BaseQuery, outer_aliases: frozenset[str]) -> BaseQuery:
        aliases = outer_aliases | _declared_aliases(query)

        def column(value: Any) -> Any:
            return self._process_column(value, aliases)

        def value(item: Any) -> Any:
            if isinstance(item, BaseQuery):
                return self._process_query(item, aliases)
            return item

        clone = query.copy()
        clone.table = self._process_table(query.table, aliases)
        clone.columns = [replace(item, expr=column(item.expr)) for item in query.columns]
        clone.joins = [
            replace(
                join,
                table=self._process_table(join.table, aliases),
                criteria=tuple(map_criterion(c, column, value) for c in join.criteria),
            )
            for join in query.joins
        ]
        clone.wheres = [map_criterion(c, column, value) for c in query.wheres]
        clone.orders = [replace(order, column=column(order.column)) for order in query.orders]
        clone.updates = {column(name): value(item) for name, item in query.updates.items()}
        return clone

    def _process_table(self, table: Any, aliases: frozenset[str]) -> Any:
        if isinstance(table, str):
            return self.add_table_prefix(table)
        if isinstance(table, BaseQuery):
            return self._process_query(table, aliases)
        return table

    def _process_column(self, column: Any, aliases: frozenset[str]) -> Any:
        if isinstance(column, str):
            table, dot, name = column.rpartition(".")
            if dot and table not in aliases:
                return f"{self.add_table_prefix(table)}.{name}"
            return column
        if isinstance(column, Aggregate):
            return replace(column, column=self._process_column(column.column, aliases))
        if isinstance(column, BaseQuery):
            return self._process_query(column, aliases)
        return column


def _declared_aliases(query: BaseQuery) -> frozenset[str]:
    aliases = {join.alias for join in query.joins if join.alias}
    if query.table_alias:
        aliases.add(query.table_alias)
    return frozenset(aliases)
