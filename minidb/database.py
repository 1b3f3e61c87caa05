"""The Database facade.

``Database`` binds a :class:`~minidb.connection.Connection`, a
:class:`~minidb.grammar.Grammar` and a table prefix together.  It executes
raw SQL and creates :class:`~minidb.query.Query` objects::

    database = Database.create({"driver": "sqlite", "dsn": "sqlite://", "prefix": "app_"})
    database.statement(
        f"CREATE TABLE {database.add_table_prefix('users')} (id INTEGER PRIMARY KEY, name TEXT)"
    )
    database.table("users").where("name", "like", "A%").get()
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from minidb.builder.prefixer import TablePrefixer
from minidb.config import DatabaseConfig
from minidb.connection import Connection
from minidb.errors import translating_errors
from minidb.grammar import CommonGrammar, Grammar, GrammarFactory
from minidb.query import Query

logger = logging.getLogger(__name__)


class Database:
    """Executes SQL on a database and builds queries for it.

    Args:
        connection: The connection statements are executed on.
        grammar: Grammar compiling queries; the dialect-neutral
            :class:`~minidb.grammar.CommonGrammar` by default.
        prefix: Prepended to every table name used by queries built with
            :meth:`table`.  Fixed for the lifetime of the instance.
    """

    def __init__(
        self,
        connection: Connection,
        grammar: Grammar | None = None,
        prefix: str = "",
    ) -> None:
        self._connection = connection
        self._grammar = grammar if grammar is not None else CommonGrammar()
        self._table_prefixer = TablePrefixer(prefix)

    @classmethod
    def create(cls, config: Mapping[str, Any] | DatabaseConfig) -> Database:
        """Connect to a database described by a configuration mapping.

        Recognised keys: ``driver``, ``dsn`` (or ``dns``), ``username``,
        ``password``, ``options``, ``prefix``; see
        :class:`~minidb.config.DatabaseConfig`.  Any other key is rejected,
        so a misspelt option fails loudly.  Driver settings such as
        ``charset`` go in ``options`` or in the DSN query string.

        Raises:
            InvalidArgumentException: If the configuration is malformed or
                holds an unrecognised key.
            DatabaseException: If the connection cannot be established.
        """
        settings = DatabaseConfig.load(config)
        grammar = GrammarFactory.create(settings.driver)
        logger.debug("Using %s for driver %r", type(grammar).__name__, settings.driver)
        with translating_errors():
            connection = Connection.create(
                settings.dsn,
                username=settings.username,
                password=settings.password,
                options=settings.options,
            )
        return cls(connection, grammar, settings.prefix)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def grammar(self) -> Grammar:
        return self._grammar

    @property
    def table_prefix(self) -> str:
        return self._table_prefixer.prefix

    @property
    def table_prefixer(self) -> TablePrefixer:
        return self._table_prefixer

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------

    def table(self, name: Any, alias: str | None = None) -> Query:
        """Start a query targeting the ``name`` table.

        The table prefix is applied when the query is executed, so ``name``
        is given without it.
        """
        return Query(self).from_(name, alias)

    def add_table_prefix(self, name: str) -> str:
        """Return ``name`` with the table prefix applied."""
        return self._table_prefixer.add_table_prefix(name)

    # ------------------------------------------------------------------
    # Raw statements
    # ------------------------------------------------------------------

    def select(self, sql: str, bindings: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute a query and return all rows as dicts keyed by column.

        Raises:
            InvalidArgumentException: If a bound value cannot be bound.
            DatabaseException: If the database fails to execute the query.
        """
        with translating_errors():
            return self._connection.select(sql, bindings)

    def select_first(self, sql: str, bindings: Sequence[Any] = ()) -> dict[str, Any] | None:
        """Execute a query and return the first row, or ``None`` if there is none."""
        with translating_errors():
            return self._connection.select_first(sql, bindings)

    def insert(self, sql: str, bindings: Sequence[Any] = ()) -> int:
        """Execute an INSERT statement and return the number of inserted rows."""
        with translating_errors():
            return self._connection.insert(sql, bindings)

    def insert_get_id(self, sql: str, bindings: Sequence[Any] = ()) -> Any:
        """Execute an INSERT statement and return the generated identifier."""
        with translating_errors():
            return self._connection.insert_get_id(sql, bindings)

    def update(self, sql: str, bindings: Sequence[Any] = ()) -> int:
        """Execute an UPDATE statement and return the number of affected rows."""
        with translating_errors():
            return self._connection.update(sql, bindings)

    def delete(self, sql: str, bindings: Sequence[Any] = ()) -> int:
        """Execute a DELETE statement and return the number of affected rows."""
        with translating_errors():
            return self._connection.delete(sql, bindings)

    def statement(self, sql: str, bindings: Sequence[Any] = ()) -> None:
        """Execute any other statement (DDL, ``BEGIN``/``COMMIT``…)."""
        with translating_errors():
            self._connection.statement(sql, bindings)

    def __repr__(self) -> str:
        return f"Database(grammar={self._grammar!r}, prefix={self.table_prefix!r})"
