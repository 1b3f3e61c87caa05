"""MySQL dialect grammar."""
from __future__ import annotations

from minidb.builder.errors import InvalidQueryError
from minidb.builder.query import BaseQuery
from minidb.grammar.base import Grammar

#: Largest LIMIT MySQL accepts; the documented way to express "no limit".
MAX_LIMIT = 18446744073709551615


class MySQLGrammar(Grammar):
    """Compiles queries to MySQL-flavoured SQL.

    Identifiers are quoted with backticks (`` ` ``) rather than
    double-quotes.

    MySQL requires a LIMIT to accept an OFFSET, and allows ``ORDER BY`` and
    ``LIMIT`` (but not ``OFFSET``) on single-table UPDATE and DELETE.
    """

    @property
    def dialect_name(self) -> str:
        return "mysql"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("`", "``")
        return f"`{escaped}`"

    def compile_limit(self, limit: int | None, offset: int | None) -> str:
        if limit is None and offset:
            return f"LIMIT {MAX_LIMIT} OFFSET {offset}"
        return super().compile_limit(limit, offset)

    def compile_write_tail(self, statement: str, query: BaseQuery, orders_sql: str) -> str:
        if query.row_offset:
            raise InvalidQueryError(
                f"{statement} queries with OFFSET are not supported by MySQL",
                clause=statement,
            )
        parts = [orders_sql]
        if query.row_limit is not None:
            parts.append(f"LIMIT {query.row_limit}")
        return " ".join(p for p in parts if p)

    def compile_delete_head(self, table_sql: str, alias_sql: str | None) -> str:
        # MySQL names the alias between DELETE and FROM.
        if alias_sql:
            return f"DELETE {alias_sql} FROM {table_sql} AS {alias_sql}"
        return f"DELETE FROM {table_sql}"
