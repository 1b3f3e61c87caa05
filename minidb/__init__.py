"""minidb – A thin database facade with a fluent query builder.

Public API
----------
``Database``
    Connects from a configuration mapping, executes raw SQL and starts
    queries with ``Database.table()``.

``Query``
    Fluent builder with terminal methods: ``get``, ``first``, ``count``,
    ``avg``, ``sum``, ``min``, ``max``, ``chunk``, ``update``, ``delete``.

Re-exported types
-----------------
``DatabaseConfig``, ``Connection``, the grammars, ``Raw`` / ``raw`` and all
public error classes.

Extensibility
-------------
Grammars for other drivers can be registered via::

    from minidb.grammar import CommonGrammar, GrammarFactory

    @GrammarFactory.register("mssql")
    class MSSQLGrammar(CommonGrammar):
        ...

After registration, ``Database.create`` picks it up for any configuration
with ``driver="mssql"``.
"""

from __future__ import annotations

from minidb.builder import BaseQuery, Raw, TablePrefixer, raw
from minidb.config import DatabaseConfig
from minidb.connection import Connection
from minidb.database import Database
from minidb.errors import (
    DatabaseException,
    IncorrectQueryException,
    InvalidArgumentException,
    InvalidReturnValueException,
    MiniDBException,
)
from minidb.grammar import (
    CommonGrammar,
    CompiledQuery,
    Grammar,
    GrammarFactory,
    MySQLGrammar,
    PostgresGrammar,
    SQLiteGrammar,
)
from minidb.query import Query

__all__ = [
    # Core
    "Database",
    "Query",
    "DatabaseConfig",
    "Connection",
    # Building
    "BaseQuery",
    "Raw",
    "raw",
    "TablePrefixer",
    # Grammars
    "Grammar",
    "CommonGrammar",
    "MySQLGrammar",
    "PostgresGrammar",
    "SQLiteGrammar",
    "GrammarFactory",
    "CompiledQuery",
    # Errors
    "MiniDBException",
    "DatabaseException",
    "IncorrectQueryException",
    "InvalidArgumentException",
    "InvalidReturnValueException",
]
