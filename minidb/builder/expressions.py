"""Immutable clause nodes accumulated by :class:`~minidb.builder.query.BaseQuery`.

Every node is a frozen dataclass.  Builders never mutate a node in place;
transformations (table prefixing, column qualification) produce new nodes
with :func:`dataclasses.replace`, which is what makes ``BaseQuery.copy()``
a cheap list copy rather than a deep copy.

Column positions hold a ``str`` (``"name"``, ``"table.name"``, ``"*"``), a
:class:`Raw` fragment, an :class:`Aggregate`, or a subquery.  Value
positions hold a scalar, a :class:`Raw` fragment, or a subquery.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Union

#: Python types that can be sent to the database as bound values.
SCALAR_TYPES: tuple[type, ...] = (
    type(None), bool, int, float, Decimal, str, bytes, date, datetime, time,
)

#: Comparison operators accepted by ``where()``; matched case-insensitively.
COMPARISON_OPERATORS: frozenset[str] = frozenset({
    "=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE",
})

#: Aggregate functions understood by the grammars.
AGGREGATE_FUNCTIONS: frozenset[str] = frozenset({"COUNT", "AVG", "SUM", "MIN", "MAX"})


def is_scalar(value: Any) -> bool:
    """Return ``True`` when ``value`` can be used as a bound value."""
    return isinstance(value, SCALAR_TYPES)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Raw:
    """A SQL fragment inserted verbatim, with its own positional bindings.

    Placeholders inside ``sql`` must use the ``?`` style.

    Attributes:
        sql: The SQL text.
        bindings: Values for the ``?`` placeholders in ``sql``.
    """

    sql: str
    bindings: tuple[Any, ...] = ()


def raw(sql: str, *bindings: Any) -> Raw:
    """Shorthand for ``Raw(sql, bindings)``::

        query.where(raw("LOWER(name) = ?", "alice"))
    """
    return Raw(sql, tuple(bindings))


@dataclass(frozen=True)
class Aggregate:
    """An aggregate function call such as ``COUNT(*)`` or ``AVG(price)``."""

    function: str
    column: Any


@dataclass(frozen=True)
class SelectItem:
    """One entry of the select list."""

    expr: Any
    alias: str | None = None


# ---------------------------------------------------------------------------
# Criteria (WHERE / JOIN ON)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValueCriterion:
    """``column <operator> value``."""

    column: Any
    operator: str
    value: Any
    boolean: str = "AND"


@dataclass(frozen=True)
class NullCriterion:
    """``column IS [NOT] NULL``."""

    column: Any
    negated: bool = False
    boolean: str = "AND"


@dataclass(frozen=True)
class InCriterion:
    """``column [NOT] IN (values | subquery)``.

    ``values`` is either a tuple of scalars or a subquery.
    """

    column: Any
    values: Any
    negated: bool = False
    boolean: str = "AND"


@dataclass(frozen=True)
class ColumnsCriterion:
    """``left <operator> right`` where both sides are columns."""

    left: Any
    operator: str
    right: Any
    boolean: str = "AND"


@dataclass(frozen=True)
class RawCriterion:
    raw: Raw
    boolean: str = "AND"


@dataclass(frozen=True)
class ExistsCriterion:
    """``[NOT] EXISTS (subquery)``."""

    subquery: Any
    negated: bool = False
    boolean: str = "AND"


@dataclass(frozen=True)
class GroupCriterion:
    """A parenthesised group of criteria."""

    criteria: tuple[Any, ...]
    boolean: str = "AND"


Criterion = Union[
    ValueCriterion,
    NullCriterion,
    InCriterion,
    ColumnsCriterion,
    RawCriterion,
    ExistsCriterion,
    GroupCriterion,
]


# ---------------------------------------------------------------------------
# Joins and ordering
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Join:
    """``<kind> JOIN table [AS alias] ON criteria``."""

    kind: str
    table: Any
    criteria: tuple[Any, ...]
    alias: str | None = None


@dataclass(frozen=True)
class Order:
    column: Any
    direction: str = "ASC"


# ---------------------------------------------------------------------------
# Tree mapping
# ---------------------------------------------------------------------------


def map_criterion(
    criterion: Criterion,
    column_fn: Callable[[Any], Any],
    value_fn: Callable[[Any], Any],
) -> Criterion:
    """Return a copy of ``criterion`` with every column and value mapped.

    ``column_fn`` is applied to column positions and ``value_fn`` to value
    positions (including subqueries).  Groups are mapped recursively.
    """
    if isinstance(criterion, ValueCriterion):
        return replace(
            criterion,
            column=column_fn(criterion.column),
            value=value_fn(criterion.value),
        )
    if isinstance(criterion, NullCriterion):
        return replace(criterion, column=column_fn(criterion.column))
    if isinstance(criterion, InCriterion):
        values = criterion.values
        if not isinstance(values, tuple):
            values = value_fn(values)
        return replace(criterion, column=column_fn(criterion.column), values=values)
    if isinstance(criterion, ColumnsCriterion):
        return replace(
            criterion,
            left=column_fn(criterion.left),
            right=column_fn(criterion.right),
        )
    if isinstance(criterion, ExistsCriterion):
        return replace(criterion, subquery=value_fn(criterion.subquery))
    if isinstance(criterion, GroupCriterion):
        return replace(
            criterion,
            criteria=tuple(map_criterion(c, column_fn, value_fn) for c in criterion.criteria),
        )
    return criterion
