"""minidb grammars: query state → parameterized SQL, per dialect."""
from minidb.grammar.base import CompiledQuery, Grammar
from minidb.grammar.common import CommonGrammar
from minidb.grammar.mysql import MySQLGrammar
from minidb.grammar.postgres import PostgresGrammar
from minidb.grammar.registry import GrammarFactory
from minidb.grammar.sqlite import SQLiteGrammar

# ---------------------------------------------------------------------------
# Register built-in grammars with GrammarFactory
# ---------------------------------------------------------------------------

GrammarFactory.register_class("mysql", MySQLGrammar)
GrammarFactory.register_class("sqlite", SQLiteGrammar)
GrammarFactory.register_class("postgres", PostgresGrammar)
GrammarFactory.register_class("postgresql", PostgresGrammar)
GrammarFactory.register_class("pgsql", PostgresGrammar)

__all__ = [
    "CompiledQuery",
    "Grammar",
    "CommonGrammar",
    "MySQLGrammar",
    "PostgresGrammar",
    "SQLiteGrammar",
    "GrammarFactory",
]
