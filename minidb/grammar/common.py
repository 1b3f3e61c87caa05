"""Dialect-neutral grammar."""
from __future__ import annotations

from minidb.grammar.base import Grammar


class CommonGrammar(Grammar):
    """Compiles queries to standard SQL understood by most databases.

    Identifiers are quoted with double quotes.  Used when the configured
    driver is unset or unknown.
    """

    @property
    def dialect_name(self) -> str:
        return "common"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace('"', '""')
        return f'"{escaped}"'
