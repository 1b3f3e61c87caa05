"""Column, value and criteria SQL compilers.

``ExpressionBuilder`` and ``CriteriaBuilder`` share a module because they
are mutually dependent: criteria contain expressions, and expressions may
contain subqueries whose WHERE clause contains criteria.

Subqueries are compiled through ``build_subquery``, a callable injected by
:class:`~minidb.grammar.builder.StatementBuilder` that reuses the outer
:class:`~minidb.grammar.context.BindingContext`.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from minidb.builder.errors import InvalidArgumentError, InvalidQueryError
from minidb.builder.expressions import (
    Aggregate,
    ColumnsCriterion,
    ExistsCriterion,
    GroupCriterion,
    InCriterion,
    NullCriterion,
    Raw,
    RawCriterion,
    ValueCriterion,
    is_scalar,
)
from minidb.builder.query import BaseQuery
from minidb.grammar.context import BindingContext


class ExpressionBuilder:
    """Compiles column references and values to SQL fragments.

    Args:
        bindings: Shared bound-value accumulator for this statement.
        build_subquery: Compiles a nested SELECT into the same bindings.
    """

    def __init__(
        self,
        bindings: BindingContext,
        build_subquery: Callable[[BaseQuery], str],
    ) -> None:
        self._bindings = bindings
        self._grammar = bindings.grammar
        self._build_subquery = build_subquery

    def column(self, column: Any) -> str:
        """Compile something that appears in a column position."""
        if isinstance(column, str):
            return self._grammar.quote_column(column)
        if isinstance(column, Raw):
            return self.raw(column)
        if isinstance(column, Aggregate):
            return f"{column.function}({self.column(column.column)})"
        if isinstance(column, BaseQuery):
            return f"({self._build_subquery(column)})"
        raise InvalidArgumentError(
            f"Unsupported column expression of type {type(column).__name__}"
        )

    def value(self, value: Any) -> str:
        """Compile something that appears in a value position."""
        if isinstance(value, Raw):
            return self.raw(value)
        if isinstance(value, BaseQuery):
            return f"({self._build_subquery(value)})"
        if is_scalar(value):
            return self._bindings.add(value)
        raise InvalidArgumentError(f"Unsupported value of type {type(value).__name__}")

    def raw(self, expression: Raw) -> str:
        self._bindings.extend(expression.bindings)
        return expression.sql

    def quote(self, identifier: str) -> str:
        return self._grammar.quote_identifier(identifier)


class CriteriaBuilder:
    """Compiles WHERE / ON criteria lists to SQL."""

    def __init__(self, expressions: ExpressionBuilder) -> None:
        self._expr = expressions

    def build(self, criteria: Sequence[Any]) -> str:
        parts: list[str] = []
        for index, criterion in enumerate(criteria):
            sql = self._build_one(criterion)
            parts.append(sql if index == 0 else f"{criterion.boolean} {sql}")
        return " ".join(parts)

    def _build_one(self, criterion: Any) -> str:
        expr = self._expr
        if isinstance(criterion, ValueCriterion):
            return f"{expr.column(criterion.column)} {criterion.operator} {expr.value(criterion.value)}"
        if isinstance(criterion, NullCriterion):
            keyword = "IS NOT NULL" if criterion.negated else "IS NULL"
            return f"{expr.column(criterion.column)} {keyword}"
        if isinstance(criterion, InCriterion):
            return self._build_in(criterion)
        if isinstance(criterion, ColumnsCriterion):
            return f"{expr.column(criterion.left)} {criterion.operator} {expr.column(criterion.right)}"
        if isinstance(criterion, RawCriterion):
            return f"({expr.raw(criterion.raw)})"
        if isinstance(criterion, ExistsCriterion):
            keyword = "NOT EXISTS" if criterion.negated else "EXISTS"
            subquery_sql = expr.value(criterion.subquery)
            if isinstance(criterion.subquery, Raw):
                subquery_sql = f"({subquery_sql})"
            return f"{keyword} {subquery_sql}"
        if isinstance(criterion, GroupCriterion):
            if not criterion.criteria:
                raise InvalidQueryError("Empty criteria group", clause="WHERE")
            return f"({self.build(criterion.criteria)})"
        raise InvalidQueryError(
            f"Unknown criterion type: {type(criterion).__name__}", clause="WHERE"
        )

    def _build_in(self, criterion: InCriterion) -> str:
        keyword = "NOT IN" if criterion.negated else "IN"
        if isinstance(criterion.values, tuple):
            if not criterion.values:
                # An empty IN list matches nothing; NOT IN matches everything.
                return "1 = 1" if criterion.negated else "0 = 1"
            column_sql = self._expr.column(criterion.column)
            values_sql = ", ".join(self._expr.value(v) for v in criterion.values)
            return f"{column_sql} {keyword} ({values_sql})"
        column_sql = self._expr.column(criterion.column)
        values_sql = self._expr.value(criterion.values)
        if isinstance(criterion.values, Raw):
            values_sql = f"({values_sql})"
        return f"{column_sql} {keyword} {values_sql}"
