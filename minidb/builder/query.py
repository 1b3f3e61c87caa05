"""Fluent query builder.

``BaseQuery`` accumulates the clauses of a single statement.  It knows
nothing about SQL text or databases: grammars in :mod:`minidb.grammar` turn
its state into SQL, and subclasses (see :class:`minidb.Query`) add execution.

Clause methods mutate the query in place and return ``self`` so calls can be
chained::

    query = (
        BaseQuery()
        .from_("posts", "p")
        .add_select("p.title")
        .where("p.views", ">", 100)
        .where(lambda q: q.where("p.draft", False).or_where_null("p.draft"))
        .order_by_desc("p.created_at")
        .limit(10)
    )

Callables passed where a subquery or a criteria group is expected receive a
fresh empty query made by :meth:`BaseQuery.make_empty_copy`.

Argument errors are raised through :meth:`BaseQuery.handle_exception` so
that subclasses can substitute their own exception types.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any, NoReturn

from minidb.builder.errors import InvalidArgumentError
from minidb.builder.expressions import (
    AGGREGATE_FUNCTIONS,
    COMPARISON_OPERATORS,
    Aggregate,
    ColumnsCriterion,
    Criterion,
    ExistsCriterion,
    GroupCriterion,
    InCriterion,
    Join,
    NullCriterion,
    Order,
    Raw,
    RawCriterion,
    SelectItem,
    ValueCriterion,
    is_scalar,
    map_criterion,
)

_MISSING: Any = object()


class BaseQuery:
    """Accumulates the clauses of a SELECT, UPDATE or DELETE statement.

    Attributes:
        table: Target table name, :class:`Raw` fragment or subquery.
        table_alias: Alias of the target table.
        columns: Select list; empty means ``*``.
        joins: Joined tables.
        wheres: WHERE criteria.
        orders: ORDER BY items.
        row_limit: LIMIT value.
        row_offset: OFFSET value.
        updates: Column → value mapping for UPDATE statements.
    """

    def __init__(self) -> None:
        self.table: Any = None
        self.table_alias: str | None = None
        self.columns: list[SelectItem] = []
        self.joins: list[Join] = []
        self.wheres: list[Criterion] = []
        self.orders: list[Order] = []
        self.row_limit: int | None = None
        self.row_offset: int | None = None
        self.updates: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------

    def make_empty_copy(self) -> BaseQuery:
        """Return a new empty query of the same kind.

        Used for criteria groups and subqueries built from callables.
        Subclasses carrying extra state (a database handle, for instance)
        override this.
        """
        return type(self)()

    def copy(self) -> BaseQuery:
        """Return an independent snapshot of this query.

        Clause nodes are immutable, so copying the containers is enough for
        the snapshot to be modified without affecting the original.
        """
        clone = self.make_empty_copy()
        clone.table = self.table
        clone.table_alias = self.table_alias
        clone.columns = list(self.columns)
        clone.joins = list(self.joins)
        clone.wheres = list(self.wheres)
        clone.orders = list(self.orders)
        clone.row_limit = self.row_limit
        clone.row_offset = self.row_offset
        clone.updates = dict(self.updates)
        return clone

    # ------------------------------------------------------------------
    # Error hook
    # ------------------------------------------------------------------

    def handle_exception(self, exception: Exception) -> NoReturn:
        """Raise ``exception``, or an exception derived from it.

        Every error detected by the builder goes through this method.
        """
        raise exception

    def _invalid_argument(self, message: str) -> NoReturn:
        self.handle_exception(InvalidArgumentError(message))

    # ------------------------------------------------------------------
    # FROM
    # ------------------------------------------------------------------

    def from_(self, table: Any, alias: str | None = None) -> BaseQuery:
        """Set the target table.

        Args:
            table: Table name, :class:`Raw` fragment, subquery or a callable
                building a subquery.
            alias: Optional table alias.
        """
        self.table = self._check_table(table, "from_")
        self.table_alias = self._check_alias(alias)
        return self

    # ------------------------------------------------------------------
    # SELECT
    # ------------------------------------------------------------------

    def select(self, *columns: Any) -> BaseQuery:
        """Replace the select list with ``columns``."""
        self.columns = []
        for column in columns:
            self.add_select(column)
        return self

    def add_select(self, column: Any, alias: str | None = None) -> BaseQuery:
        """Append a column, raw expression or subquery to the select list."""
        self.columns.append(
            SelectItem(self._check_column(column, "add_select"), self._check_alias(alias))
        )
        return self

    def add_aggregate(self, function: str, column: Any, alias: str | None = None) -> BaseQuery:
        """Append ``FUNCTION(column)`` to the select list."""
        function = function.upper()
        if function not in AGGREGATE_FUNCTIONS:
            self._invalid_argument(f"Unknown aggregate function: {function!r}")
        aggregate = Aggregate(function, self._check_column(column, function.lower()))
        self.columns.append(SelectItem(aggregate, self._check_alias(alias)))
        return self

    def add_count(self, column: Any = "*", alias: str | None = None) -> BaseQuery:
        return self.add_aggregate("COUNT", column, alias)

    def add_avg(self, column: Any, alias: str | None = None) -> BaseQuery:
        return self.add_aggregate("AVG", column, alias)

    def add_sum(self, column: Any, alias: str | None = None) -> BaseQuery:
        return self.add_aggregate("SUM", column, alias)

    def add_min(self, column: Any, alias: str | None = None) -> BaseQuery:
        return self.add_aggregate("MIN", column, alias)

    def add_max(self, column: Any, alias: str | None = None) -> BaseQuery:
        return self.add_aggregate("MAX", column, alias)

    # ------------------------------------------------------------------
    # WHERE
    # ------------------------------------------------------------------

    def where(
        self,
        column: Any,
        operator: Any = _MISSING,
        value: Any = _MISSING,
        *,
        boolean: str = "AND",
    ) -> BaseQuery:
        """Add a WHERE criterion.

        Supported forms::

            where("age", 18)                    # age = 18
            where("age", ">=", 18)
            where("deleted_at", None)           # deleted_at IS NULL
            where(lambda q: q.where(...).or_where(...))   # grouped
            where(raw("age > ?", 18))

        Args:
            column: Column name, :class:`Raw`, subquery, or a callable
                building a criteria group.
            operator: Comparison operator, or the value when ``value`` is
                omitted.
            value: Scalar, :class:`Raw`, subquery or a callable building a
                subquery.
            boolean: ``"AND"`` or ``"OR"``.
        """
        if operator is _MISSING and value is _MISSING:
            if isinstance(column, Raw):
                self.wheres.append(RawCriterion(column, boolean))
                return self
            if callable(column) and not isinstance(column, BaseQuery):
                return self._add_group(column, boolean)
            self._invalid_argument(
                f"where() expects a callable or a Raw expression when called with "
                f"a single argument, {type(column).__name__} given"
            )
        if value is _MISSING:
            operator, value = "=", operator

        column = self._check_column(column, "where")
        operator = self._check_operator(operator)
        value = self._check_value(value, "where")

        if value is None and operator in ("=", "!=", "<>"):
            self.wheres.append(NullCriterion(column, operator != "=", boolean))
        else:
            self.wheres.append(ValueCriterion(column, operator, value, boolean))
        return self

    def or_where(self, column: Any, operator: Any = _MISSING, value: Any = _MISSING) -> BaseQuery:
        return self.where(column, operator, value, boolean="OR")

    def where_null(self, column: Any, *, boolean: str = "AND", negated: bool = False) -> BaseQuery:
        self.wheres.append(NullCriterion(self._check_column(column, "where_null"), negated, boolean))
        return self

    def or_where_null(self, column: Any) -> BaseQuery:
        return self.where_null(column, boolean="OR")

    def where_not_null(self, column: Any) -> BaseQuery:
        return self.where_null(column, negated=True)

    def or_where_not_null(self, column: Any) -> BaseQuery:
        return self.where_null(column, boolean="OR", negated=True)

    def where_in(
        self,
        column: Any,
        values: Any,
        *,
        boolean: str = "AND",
        negated: bool = False,
    ) -> BaseQuery:
        """Add ``column [NOT] IN (...)``.

        ``values`` is a list/tuple/set of scalars, a subquery or a callable
        building one.
        """
        column = self._check_column(column, "where_in")
        if isinstance(values, (list, tuple, set, frozenset)):
            values = tuple(self._check_scalar(item, "where_in") for item in values)
        elif isinstance(values, (BaseQuery, Raw)):
            pass
        elif callable(values):
            values = self._build_subquery(values)
        else:
            self._invalid_argument(
                f"where_in() expects a sequence of values or a subquery, "
                f"{type(values).__name__} given"
            )
        self.wheres.append(InCriterion(column, values, negated, boolean))
        return self

    def or_where_in(self, column: Any, values: Any) -> BaseQuery:
        return self.where_in(column, values, boolean="OR")

    def where_not_in(self, column: Any, values: Any) -> BaseQuery:
        return self.where_in(column, values, negated=True)

    def or_where_not_in(self, column: Any, values: Any) -> BaseQuery:
        return self.where_in(column, values, boolean="OR", negated=True)

    def where_column(
        self,
        first: Any,
        operator: Any,
        second: Any = _MISSING,
        *,
        boolean: str = "AND",
    ) -> BaseQuery:
        """Compare two columns: ``where_column("a.x", "b.x")``."""
        if second is _MISSING:
            operator, second = "=", operator
        self.wheres.append(ColumnsCriterion(
            self._check_column(first, "where_column"),
            self._check_operator(operator),
            self._check_column(second, "where_column"),
            boolean,
        ))
        return self

    def or_where_column(self, first: Any, operator: Any, second: Any = _MISSING) -> BaseQuery:
        return self.where_column(first, operator, second, boolean="OR")

    def where_raw(self, sql: str, bindings: Any = (), *, boolean: str = "AND") -> BaseQuery:
        if not isinstance(sql, str):
            self._invalid_argument(f"where_raw() expects SQL text, {type(sql).__name__} given")
        values = tuple(self._check_scalar(item, "where_raw") for item in bindings)
        self.wheres.append(RawCriterion(Raw(sql, values), boolean))
        return self

    def or_where_raw(self, sql: str, bindings: Any = ()) -> BaseQuery:
        return self.where_raw(sql, bindings, boolean="OR")

    def where_exists(self, subquery: Any, *, boolean: str = "AND", negated: bool = False) -> BaseQuery:
        if callable(subquery) and not isinstance(subquery, BaseQuery):
            subquery = self._build_subquery(subquery)
        if not isinstance(subquery, (BaseQuery, Raw)):
            self._invalid_argument(
                f"where_exists() expects a subquery, {type(subquery).__name__} given"
            )
        self.wheres.append(ExistsCriterion(subquery, negated, boolean))
        return self

    def or_where_exists(self, subquery: Any) -> BaseQuery:
        return self.where_exists(subquery, boolean="OR")

    def where_not_exists(self, subquery: Any) -> BaseQuery:
        return self.where_exists(subquery, negated=True)

    # ------------------------------------------------------------------
    # JOIN
    # ------------------------------------------------------------------

    def join(
        self,
        table: Any,
        first: Any,
        operator: Any = _MISSING,
        second: Any = _MISSING,
        *,
        alias: str | None = None,
        kind: str = "INNER",
    ) -> BaseQuery:
        """Add a JOIN.

        ``first`` is either a column compared with ``second`` or a callable
        receiving an empty query on which the ON criteria are built with
        ``where_column()`` / ``where()``.
        """
        table = self._check_table(table, "join")
        if callable(first) and not isinstance(first, BaseQuery):
            group = self.make_empty_copy()
            first(group)
            criteria = tuple(group.wheres)
        else:
            if second is _MISSING:
                operator, second = "=", operator
            if second is _MISSING:
                self._invalid_argument("join() requires two columns to compare")
            criteria = (ColumnsCriterion(
                self._check_column(first, "join"),
                self._check_operator(operator),
                self._check_column(second, "join"),
            ),)
        if not criteria:
            self._invalid_argument("join() requires at least one ON criterion")
        self.joins.append(Join(kind.upper(), table, criteria, self._check_alias(alias)))
        return self

    def left_join(
        self,
        table: Any,
        first: Any,
        operator: Any = _MISSING,
        second: Any = _MISSING,
        *,
        alias: str | None = None,
    ) -> BaseQuery:
        return self.join(table, first, operator, second, alias=alias, kind="LEFT")

    # ------------------------------------------------------------------
    # ORDER / LIMIT / OFFSET
    # ------------------------------------------------------------------

    def order_by(self, column: Any, direction: str = "asc") -> BaseQuery:
        direction_upper = direction.upper() if isinstance(direction, str) else ""
        if direction_upper not in ("ASC", "DESC"):
            self._invalid_argument(f"Unknown order direction: {direction!r}")
        self.orders.append(Order(self._check_column(column, "order_by"), direction_upper))
        return self

    def order_by_desc(self, column: Any) -> BaseQuery:
        return self.order_by(column, "desc")

    def limit(self, limit: int | None) -> BaseQuery:
        """Set the maximum number of rows; ``None`` removes the limit."""
        self.row_limit = self._check_count(limit, "limit")
        return self

    def offset(self, offset: int | None) -> BaseQuery:
        """Set the number of rows to skip; ``None`` removes the offset."""
        self.row_offset = self._check_count(offset, "offset")
        return self

    # ------------------------------------------------------------------
    # UPDATE
    # ------------------------------------------------------------------

    def add_update(self, values: Mapping[str, Any]) -> BaseQuery:
        """Add column values for an UPDATE statement.

        Values may be scalars, :class:`Raw` expressions, subqueries or
        callables building a subquery.
        """
        if not isinstance(values, Mapping):
            self._invalid_argument(
                f"Update values must be a mapping, {type(values).__name__} given"
            )
        for column, value in values.items():
            if not isinstance(column, str) or not column:
                self._invalid_argument(f"Update column names must be strings, {column!r} given")
            self.updates[column] = self._check_value(value, "add_update")
        return self

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def add_tables_to_column_names(self) -> BaseQuery:
        """Return a copy where unqualified column names name the target table.

        ``SELECT name FROM items`` becomes ``SELECT items.name FROM items``;
        the target alias is used when there is one.  Raw expressions and
        subqueries are left untouched.  The query itself is not modified.
        """
        clone = self.copy()
        if self.table_alias:
            table = self.table_alias
        elif isinstance(self.table, str):
            table = self.table
        else:
            return clone

        def qualify(column: Any) -> Any:
            if isinstance(column, str) and "." not in column:
                return f"{table}.{column}"
            if isinstance(column, Aggregate) and column.column != "*":
                return replace(column, column=qualify(column.column))
            return column

        def keep(value: Any) -> Any:
            return value

        clone.columns = [replace(item, expr=qualify(item.expr)) for item in self.columns]
        clone.wheres = [map_criterion(c, qualify, keep) for c in self.wheres]
        clone.orders = [replace(order, column=qualify(order.column)) for order in self.orders]
        return clone

    # ------------------------------------------------------------------
    # Argument checks
    # ------------------------------------------------------------------

    def _add_group(self, callback: Callable[[BaseQuery], Any], boolean: str) -> BaseQuery:
        group = self.make_empty_copy()
        callback(group)
        if group.wheres:
            self.wheres.append(GroupCriterion(tuple(group.wheres), boolean))
        return self

    def _build_subquery(self, callback: Callable[[BaseQuery], Any]) -> BaseQuery:
        subquery = self.make_empty_copy()
        result = callback(subquery)
        return result if isinstance(result, BaseQuery) else subquery

    def _check_table(self, table: Any, method: str) -> Any:
        if isinstance(table, str) and table:
            return table
        if isinstance(table, (Raw, BaseQuery)):
            return table
        if callable(table):
            return self._build_subquery(table)
        self._invalid_argument(
            f"{method}() expects a table name or a subquery, {type(table).__name__} given"
        )

    def _check_column(self, column: Any, method: str) -> Any:
        if isinstance(column, str) and column:
            return column
        if isinstance(column, (Raw, BaseQuery)):
            return column
        if callable(column):
            return self._build_subquery(column)
        self._invalid_argument(
            f"{method}() expects a column name, a Raw expression or a subquery, "
            f"{type(column).__name__} given"
        )

    def _check_value(self, value: Any, method: str) -> Any:
        if is_scalar(value) or isinstance(value, (Raw, BaseQuery)):
            return value
        if callable(value):
            return self._build_subquery(value)
        self._invalid_argument(
            f"{method}() got a value of unsupported type {type(value).__name__}"
        )

    def _check_scalar(self, value: Any, method: str) -> Any:
        if not is_scalar(value):
            self._invalid_argument(
                f"{method}() got a value of unsupported type {type(value).__name__}"
            )
        return value

    def _check_operator(self, operator: Any) -> str:
        normalized = " ".join(operator.upper().split()) if isinstance(operator, str) else None
        if normalized not in COMPARISON_OPERATORS:
            self._invalid_argument(f"Unknown comparison operator: {operator!r}")
        return normalized

    def _check_alias(self, alias: Any) -> str | None:
        if alias is None or (isinstance(alias, str) and alias):
            return alias
        self._invalid_argument(f"Aliases must be non-empty strings, {alias!r} given")

    def _check_count(self, count: Any, method: str) -> int | None:
        if count is None:
            return None
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            self._invalid_argument(
                f"{method}() expects a non-negative integer or None, {count!r} given"
            )
        return count
