"""Compilation result and per-compilation state shared by all sub-builders."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from minidb.grammar.base import Grammar


@dataclass
class CompiledQuery:
    """The output of a successful compilation.

    Attributes:
        sql: SQL text with ``?`` placeholders.
        bindings: Values for the placeholders, in order.
    """

    sql: str
    bindings: list[Any]


@dataclass
class BindingContext:
    """Accumulates positional bound values during a single compilation run.

    One instance is threaded through every sub-builder and every nested
    subquery.  Fragments are compiled in the order they appear in the SQL
    text, so appending here keeps ``values`` aligned with the ``?``
    placeholders.
    """

    grammar: Grammar
    values: list[Any] = field(default_factory=list)

    def add(self, value: Any) -> str:
        """Store a value and return the placeholder to put in the SQL."""
        self.values.append(value)
        return self.grammar.placeholder

    def extend(self, values: Iterable[Any]) -> None:
        self.values.extend(values)
