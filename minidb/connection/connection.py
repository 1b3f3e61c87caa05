"""Raw SQL execution on top of a SQLAlchemy connection.

``Connection`` is small: it executes SQL text with positional
bindings and hands back plain Python values (row dicts, counts, ids).  It
does not build SQL and does not manage transactions; connections created by
:meth:`Connection.create` run in ``AUTOCOMMIT`` mode so that every statement
is applied immediately and explicit ``BEGIN`` / ``COMMIT`` statements pass
straight through to the database.

Example::

    connection = Connection.create("sqlite://")
    connection.statement("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)")
    note_id = connection.insert_get_id("INSERT INTO notes (body) VALUES (?)", ["hi"])
    connection.select_first("SELECT * FROM notes WHERE id = ?", [note_id])
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, CursorResult, Engine, make_url
from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from minidb.connection.errors import BindingError, ExecutionError
from minidb.connection.placeholders import convert_placeholders

logger = logging.getLogger(__name__)

#: Python types DB-API drivers accept as parameters.
_BINDABLE_TYPES: tuple[type, ...] = (
    type(None), bool, int, float, Decimal, str, bytes, date, datetime, time,
)


class Connection:
    """Executes raw SQL statements on one live database connection.

    Every method takes the SQL text with ``?`` placeholders and a sequence
    of values to bind.

    Args:
        connection: An open SQLAlchemy connection.  The caller decides its
            transaction mode; use :meth:`create` or :meth:`from_engine` to
            get an autocommitting one.
    """

    def __init__(self, connection: SAConnection) -> None:
        self._connection = connection

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        dsn: str | URL,
        username: str | None = None,
        password: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Connection:
        """Open a connection to the database described by ``dsn``.

        Args:
            dsn: A SQLAlchemy database URL, e.g. ``"sqlite://"`` or
                ``"postgresql+psycopg2://localhost/app"``.
            username: Overrides the user name of the URL.
            password: Overrides the password of the URL.
            options: Driver-specific keyword arguments passed to the DB-API
                ``connect()`` call.

        Raises:
            ExecutionError: If the URL is malformed, the driver is not
                installed or the database cannot be reached.
        """
        try:
            url = make_url(dsn)
            if username is not None:
                url = url.set(username=username)
            if password is not None:
                url = url.set(password=password)
            engine = create_engine(url, connect_args=dict(options or {}))
        except (SQLAlchemyError, ImportError) as exc:
            raise ExecutionError(f"Cannot connect to the database: {_describe(exc)}") from exc
        return cls.from_engine(engine)

    @classmethod
    def from_engine(cls, engine: Engine) -> Connection:
        """Open an autocommitting connection from an existing engine.

        Raises:
            ExecutionError: If the database cannot be reached.
        """
        try:
            connection = engine.connect().execution_options(isolation_level="AUTOCOMMIT")
        except SQLAlchemyError as exc:
            raise ExecutionError(f"Cannot connect to the database: {_describe(exc)}") from exc
        logger.info("Connected to %s", engine.url.render_as_string(hide_password=True))
        return cls(connection)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def sqlalchemy_connection(self) -> SAConnection:
        """The underlying SQLAlchemy connection."""
        return self._connection

    @property
    def paramstyle(self) -> str:
        """DB-API paramstyle of the driver in use."""
        return self._connection.dialect.paramstyle

    # ------------------------------------------------------------------
    # Execution primitives
    # ------------------------------------------------------------------

    def select(self, sql: str, bindings: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute a query and return all rows as dicts keyed by column."""
        with self._errors(sql, bindings):
            result = self._execute(sql, bindings)
            return [dict(row) for row in result.mappings()]

    def select_first(self, sql: str, bindings: Sequence[Any] = ()) -> dict[str, Any] | None:
        """Execute a query and return its first row, or ``None``."""
        with self._errors(sql, bindings):
            row = self._execute(sql, bindings).mappings().first()
            return dict(row) if row is not None else None

    def insert(self, sql: str, bindings: Sequence[Any] = ()) -> int:
        """Execute an INSERT statement and return the number of inserted rows."""
        return self._affecting_statement(sql, bindings)

    def insert_get_id(self, sql: str, bindings: Sequence[Any] = ()) -> Any:
        """Execute an INSERT statement and return the generated identifier.

        When the statement returns rows (``INSERT … RETURNING id``) the first
        column of the first row is returned; otherwise the cursor's
        ``lastrowid``.
        """
        with self._errors(sql, bindings):
            result = self._execute(sql, bindings)
            if result.returns_rows:
                row = result.first()
                return row[0] if row is not None else None
            return result.lastrowid

    def update(self, sql: str, bindings: Sequence[Any] = ()) -> int:
        """Execute an UPDATE statement and return the number of affected rows."""
        return self._affecting_statement(sql, bindings)

    def delete(self, sql: str, bindings: Sequence[Any] = ()) -> int:
        """Execute a DELETE statement and return the number of affected rows."""
        return self._affecting_statement(sql, bindings)

    def statement(self, sql: str, bindings: Sequence[Any] = ()) -> None:
        """Execute any other statement (DDL, ``BEGIN``, ``SET``…)."""
        with self._errors(sql, bindings):
            self._execute(sql, bindings).close()

    def close(self) -> None:
        """Close the connection and dispose of its engine."""
        engine = self._connection.engine
        self._connection.close()
        engine.dispose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _affecting_statement(self, sql: str, bindings: Sequence[Any]) -> int:
        with self._errors(sql, bindings):
            result = self._execute(sql, bindings)
            count = result.rowcount
            result.close()
            return count

    def _execute(self, sql: str, bindings: Sequence[Any]) -> CursorResult[Any]:
        _check_bindings(bindings)
        logger.debug("Executing SQL: %s; bindings: %r", sql, list(bindings))
        if not bindings:
            return self._connection.exec_driver_sql(sql)
        statement, parameters = convert_placeholders(sql, bindings, self.paramstyle)
        return self._connection.exec_driver_sql(statement, parameters)

    @contextmanager
    def _errors(self, sql: str, bindings: Sequence[Any]) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            raise ExecutionError(_describe(exc), sql, bindings) from exc


def _check_bindings(bindings: Any) -> None:
    if isinstance(bindings, (str, bytes, Mapping)) or not isinstance(bindings, Sequence):
        raise BindingError(
            f"Bound values must be a sequence, {type(bindings).__name__} given"
        )
    for index, value in enumerate(bindings):
        if not isinstance(value, _BINDABLE_TYPES):
            raise BindingError(
                f"Bound value #{index} has unsupported type {type(value).__name__}; "
                "only scalar values can be bound"
            )


def _describe(exc: BaseException) -> str:
    """Return the driver's message, without SQLAlchemy's statement dump."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)
