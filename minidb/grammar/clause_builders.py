"""Clause-level SQL builders.

Each class handles exactly one clause and delegates expressions to the
shared :class:`~minidb.grammar.expression_builder.ExpressionBuilder`.

Classes
-------
SelectClauseBuilder   — ``SELECT <items>``
TableBuilder          — ``<table | (subquery)> [AS alias]``
JoinClauseBuilder     — ``<kind> JOIN … ON …``
OrderClauseBuilder    — ``ORDER BY …``
SetClauseBuilder      — ``SET column = value, …``
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from minidb.builder.errors import InvalidQueryError
from minidb.builder.expressions import Join, Order, Raw, SelectItem
from minidb.builder.query import BaseQuery
from minidb.grammar.expression_builder import CriteriaBuilder, ExpressionBuilder


class SelectClauseBuilder:
    """Builds the ``SELECT …`` clause."""

    def __init__(self, expressions: ExpressionBuilder) -> None:
        self._expr = expressions

    def build(self, columns: Sequence[SelectItem]) -> str:
        if not columns:
            return "SELECT *"
        return f"SELECT {', '.join(self._build_item(item) for item in columns)}"

    def _build_item(self, item: SelectItem) -> str:
        sql = self._expr.column(item.expr)
        if item.alias:
            return f"{sql} AS {self._expr.quote(item.alias)}"
        return sql


class TableBuilder:
    """Builds a table reference used by FROM, JOIN, UPDATE and DELETE."""

    def __init__(self, expressions: ExpressionBuilder) -> None:
        self._expr = expressions

    def build(self, table: Any, alias: str | None) -> str:
        if isinstance(table, str):
            sql = self._expr.column(table)
        elif isinstance(table, Raw):
            sql = self._expr.raw(table)
        elif isinstance(table, BaseQuery):
            sql = self._expr.column(table)
        else:
            raise InvalidQueryError(
                f"Unsupported table reference of type {type(table).__name__}", clause="FROM"
            )
        if alias:
            return f"{sql} AS {self._expr.quote(alias)}"
        return sql


class JoinClauseBuilder:
    """Builds one ``… JOIN … ON …`` clause."""

    def __init__(self, tables: TableBuilder, criteria: CriteriaBuilder) -> None:
        self._tables = tables
        self._criteria = criteria

    def build(self, join: Join) -> str:
        table_sql = self._tables.build(join.table, join.alias)
        return f"{join.kind} JOIN {table_sql} ON {self._criteria.build(join.criteria)}"


class OrderClauseBuilder:
    """Builds the ``ORDER BY …`` clause."""

    def __init__(self, expressions: ExpressionBuilder) -> None:
        self._expr = expressions

    def build(self, orders: Sequence[Order]) -> str:
        items = [f"{self._expr.column(order.column)} {order.direction}" for order in orders]
        return f"ORDER BY {', '.join(items)}"


class SetClauseBuilder:
    """Builds the ``SET …`` clause of an UPDATE statement."""

    def __init__(self, expressions: ExpressionBuilder) -> None:
        self._expr = expressions

    def build(self, values: Mapping[str, Any]) -> str:
        if not values:
            raise InvalidQueryError("No values given to update", clause="SET")
        items = [
            f"{self._expr.column(column)} = {self._expr.value(value)}"
            for column, value in values.items()
        ]
        return f"SET {', '.join(items)}"
