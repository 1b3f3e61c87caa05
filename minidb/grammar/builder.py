"""Statement assembly: query state → SQL text + bindings.

``StatementBuilder`` wires the clause-level and expression-level
sub-builders for one compilation run, then assembles SELECT, UPDATE and
DELETE statements.  Dialect-specific steps are delegated back to the
:class:`~minidb.grammar.base.Grammar` that created it.

Sub-builder hierarchy
---------------------
StatementBuilder
  ├── ExpressionBuilder    (expression_builder.py)
  ├── CriteriaBuilder      (expression_builder.py)
  ├── SelectClauseBuilder  (clause_builders.py)
  ├── TableBuilder         (clause_builders.py)
  ├── JoinClauseBuilder    (clause_builders.py)
  ├── OrderClauseBuilder   (clause_builders.py)
  └── SetClauseBuilder     (clause_builders.py)

A single :class:`~minidb.grammar.context.BindingContext` is created per
statement and shared with every nested subquery, so bound values come out
in placeholder order.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from minidb.builder.errors import InvalidQueryError
from minidb.builder.query import BaseQuery
from minidb.grammar.clause_builders import (
    JoinClauseBuilder,
    OrderClauseBuilder,
    SelectClauseBuilder,
    SetClauseBuilder,
    TableBuilder,
)
from minidb.grammar.context import BindingContext, CompiledQuery
from minidb.grammar.expression_builder import CriteriaBuilder, ExpressionBuilder

if TYPE_CHECKING:
    from minidb.grammar.base import Grammar


class StatementBuilder:
    """Compiles a :class:`~minidb.builder.query.BaseQuery` for one grammar.

    Args:
        grammar: Dialect grammar providing quoting, placeholders and the
            dialect-specific clause rendering.
    """

    def __init__(self, grammar: Grammar) -> None:
        self._grammar = grammar

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_select(self, query: BaseQuery) -> CompiledQuery:
        bindings = BindingContext(self._grammar)
        sub_builders = self._make_sub_builders(bindings)
        sql = self._build_select(query, sub_builders)
        return self._compiled(sql, bindings)

    def build_update(self, query: BaseQuery) -> CompiledQuery:
        self._check_write_target(query, "UPDATE")
        bindings = BindingContext(self._grammar)
        sub_builders = self._make_sub_builders(bindings)

        parts = [
            f"UPDATE {sub_builders['table'].build(query.table, query.table_alias)}",
            sub_builders["set"].build(query.updates),
        ]
        parts.extend(self._build_write_filters(query, "UPDATE", sub_builders))
        return self._compiled(" ".join(p for p in parts if p), bindings)

    def build_delete(self, query: BaseQuery) -> CompiledQuery:
        self._check_write_target(query, "DELETE")
        bindings = BindingContext(self._grammar)
        sub_builders = self._make_sub_builders(bindings)

        table_sql = sub_builders["table"].build(query.table, None)
        alias_sql = self._grammar.quote_identifier(query.table_alias) if query.table_alias else None
        parts = [self._grammar.compile_delete_head(table_sql, alias_sql)]
        parts.extend(self._build_write_filters(query, "DELETE", sub_builders))
        return self._compiled(" ".join(p for p in parts if p), bindings)

    # ------------------------------------------------------------------
    # Statement bodies
    # ------------------------------------------------------------------

    def _build_select(self, query: BaseQuery, sub_builders: dict) -> str:
        if query.table is None and not query.columns:
            raise InvalidQueryError(
                "The query has neither a target table nor selected columns", clause="FROM"
            )

        parts = [sub_builders["select"].build(query.columns)]

        if query.table is not None:
            parts.append(f"FROM {sub_builders['table'].build(query.table, query.table_alias)}")

        for join in query.joins:
            parts.append(sub_builders["join"].build(join))

        if query.wheres:
            parts.append(f"WHERE {sub_builders['criteria'].build(query.wheres)}")

        if query.orders:
            parts.append(sub_builders["order"].build(query.orders))

        parts.append(self._grammar.compile_limit(query.row_limit, query.row_offset))
        return " ".join(p for p in parts if p)

    def _build_write_filters(
        self,
        query: BaseQuery,
        statement: str,
        sub_builders: dict,
    ) -> list[str]:
        parts: list[str] = []
        if query.wheres:
            parts.append(f"WHERE {sub_builders['criteria'].build(query.wheres)}")
        orders_sql = sub_builders["order"].build(query.orders) if query.orders else ""
        parts.append(self._grammar.compile_write_tail(statement, query, orders_sql))
        return parts

    @staticmethod
    def _check_write_target(query: BaseQuery, statement: str) -> None:
        if not isinstance(query.table, str):
            raise InvalidQueryError(
                f"{statement} queries require a target table name", clause=statement
            )
        if query.joins:
            raise InvalidQueryError(
                f"{statement} queries with joins are not supported", clause="JOIN"
            )

    @staticmethod
    def _compiled(sql: str, bindings: BindingContext) -> CompiledQuery:
        return CompiledQuery(sql=sql, bindings=bindings.values)

    # ------------------------------------------------------------------
    # Sub-builder wiring
    # ------------------------------------------------------------------

    def _make_sub_builders(self, bindings: BindingContext) -> dict:
        """Construct and wire the sub-builder graph for one compilation run.

        Nested subqueries are compiled by ``build_subquery`` with the same
        sub-builders, hence the same ``bindings``.
        """

        def build_subquery(subquery: BaseQuery) -> str:
            return self._build_select(subquery, sub_builders)

        expressions = ExpressionBuilder(bindings, build_subquery)
        criteria = CriteriaBuilder(expressions)
        tables = TableBuilder(expressions)

        sub_builders: dict = {
            "expr": expressions,
            "criteria": criteria,
            "select": SelectClauseBuilder(expressions),
            "table": tables,
            "join": JoinClauseBuilder(tables, criteria),
            "order": OrderClauseBuilder(expressions),
            "set": SetClauseBuilder(expressions),
        }
        return sub_builders
