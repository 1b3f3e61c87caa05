"""PostgreSQL dialect grammar."""
from __future__ import annotations

from minidb.grammar.common import CommonGrammar


class PostgresGrammar(CommonGrammar):
    """Compiles queries to PostgreSQL-flavoured SQL.

    PostgreSQL accepts ``OFFSET`` on its own, so no LIMIT is invented.
    """

    @property
    def dialect_name(self) -> str:
        return "postgres"

    def compile_limit(self, limit: int | None, offset: int | None) -> str:
        if limit is None and offset:
            return f"OFFSET {offset}"
        return super().compile_limit(limit, offset)
