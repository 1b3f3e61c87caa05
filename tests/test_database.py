"""Tests for the Database facade: construction, grammar selection and raw primitives."""
from __future__ import annotations

import pytest

from minidb import (
    CommonGrammar,
    Connection,
    Database,
    DatabaseConfig,
    DatabaseException,
    InvalidArgumentException,
    MySQLGrammar,
    PostgresGrammar,
    Query,
    SQLiteGrammar,
)
from minidb.connection import BindingError, ExecutionError


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(("driver", "grammar_cls"), [
    ("mysql", MySQLGrammar),
    ("sqlite", SQLiteGrammar),
    ("postgres", PostgresGrammar),
    ("pgsql", PostgresGrammar),
    ("oracle", CommonGrammar),
    (None, CommonGrammar),
])
def test_create_selects_grammar(driver, grammar_cls):
    db = Database.create({"driver": driver, "dsn": "sqlite://"})
    assert type(db.grammar) is grammar_cls
    db.connection.close()


def test_create_without_driver_uses_common_grammar():
    db = Database.create({"dns": "sqlite://"})
    assert type(db.grammar) is CommonGrammar
    assert db.table_prefix == ""
    db.connection.close()


def test_create_from_config_model():
    db = Database.create(DatabaseConfig(dsn="sqlite://", prefix="app_"))
    assert db.table_prefix == "app_"
    db.connection.close()


def test_create_with_invalid_config():
    with pytest.raises(InvalidArgumentException):
        Database.create({"driver": "sqlite"})


def test_create_rejects_unrecognised_keys():
    with pytest.raises(InvalidArgumentException, match="charset"):
        Database.create({"dsn": "sqlite://", "charset": "utf8"})


def test_create_takes_driver_settings_from_options():
    db = Database.create({"dsn": "sqlite://", "options": {"timeout": 5}})
    assert db.select_first("SELECT 1 AS one") == {"one": 1}
    db.connection.close()


@pytest.mark.parametrize("dsn", ["foo:bar", "nosuchdb://localhost/app"])
def test_create_with_unusable_dsn(dsn):
    with pytest.raises(DatabaseException, match="Cannot connect to the database") as exc_info:
        Database.create({"dsn": dsn})
    assert isinstance(exc_info.value.__cause__, ExecutionError)
    assert exc_info.value.sql is None


def test_constructor_defaults():
    connection = Connection.create("sqlite://")
    db = Database(connection)
    assert db.connection is connection
    assert type(db.grammar) is CommonGrammar
    assert db.table_prefix == ""
    connection.close()


def test_add_table_prefix():
    connection = Connection.create("sqlite://")
    db = Database(connection, SQLiteGrammar(), "pre_")
    assert db.add_table_prefix("items") == "pre_items"
    assert db.table_prefixer.prefix == "pre_"
    connection.close()


def test_prefix_is_read_only(database):
    with pytest.raises(AttributeError):
        database.table_prefix = "other_"


def test_table_returns_bound_query(database):
    query = database.table("items", "i")
    assert isinstance(query, Query)
    assert query.database is database
    assert query.table == "items"
    assert query.table_alias == "i"


def test_table_does_not_apply_prefix(prefixed_database):
    assert prefixed_database.table("items").table == "items"


# ---------------------------------------------------------------------------
# Raw primitives
# ---------------------------------------------------------------------------


@pytest.mark.integration
def test_insert_then_select_first_round_trip(database):
    new_id = database.insert_get_id(
        "INSERT INTO items (name, value, category) VALUES (?, ?, ?)", ["fig", 7, "fruit"]
    )
    assert new_id == 6
    row = database.select_first("SELECT * FROM items WHERE id = ?", [new_id])
    assert row == {"id": 6, "name": "fig", "value": 7, "category": "fruit"}


@pytest.mark.integration
def test_raw_primitives(database):
    assert len(database.select("SELECT * FROM items")) == 5
    assert database.select_first("SELECT * FROM items WHERE name = ?", ["zucchini"]) is None
    assert database.insert("INSERT INTO items (name) VALUES (?), (?)", ["g", "h"]) == 2
    assert database.update("UPDATE items SET value = ? WHERE value IS NULL", [0]) == 3
    assert database.delete("DELETE FROM items WHERE category IS NULL") == 2
    database.statement("DROP TABLE items")
    assert database.select("SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", ["items"]) == []


@pytest.mark.integration
def test_execution_error_message(database):
    with pytest.raises(DatabaseException) as exc_info:
        database.select("WRONG SQL", ["foo", "bar", True, 123])
    exc = exc_info.value
    assert str(exc).endswith('; SQL query: (WRONG SQL); bound values: ["foo", "bar", true, 123]')
    assert exc.sql == "WRONG SQL"
    assert exc.bindings == ["foo", "bar", True, 123]
    assert isinstance(exc.__cause__, ExecutionError)


@pytest.mark.integration
@pytest.mark.parametrize("method", [
    "select", "select_first", "insert", "insert_get_id", "update", "delete", "statement",
])
def test_every_primitive_translates_errors(database, method):
    with pytest.raises(DatabaseException, match=r"SQL query: \(SELECT \* FROM missing\)"):
        getattr(database, method)("SELECT * FROM missing")
    with pytest.raises(InvalidArgumentException) as exc_info:
        getattr(database, method)("SELECT ?", [[1, 2]])
    assert isinstance(exc_info.value.__cause__, BindingError)


def test_unexpected_errors_propagate_unchanged():
    class BrokenConnection:
        def select(self, sql, bindings):
            raise ZeroDivisionError("bug")

    db = Database(BrokenConnection())
    with pytest.raises(ZeroDivisionError):
        db.select("SELECT 1")
