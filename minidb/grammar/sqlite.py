"""SQLite dialect grammar."""
from __future__ import annotations

from minidb.grammar.common import CommonGrammar


class SQLiteGrammar(CommonGrammar):
    """Compiles queries to SQLite-flavoured SQL.

    SQLite needs a LIMIT to accept an OFFSET; a negative limit means "no
    limit", so ``offset(10)`` alone renders ``LIMIT -1 OFFSET 10``.
    """

    @property
    def dialect_name(self) -> str:
        return "sqlite"

    def compile_limit(self, limit: int | None, offset: int | None) -> str:
        if limit is None and offset:
            return f"LIMIT -1 OFFSET {offset}"
        return super().compile_limit(limit, offset)
