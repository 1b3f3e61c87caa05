"""Shared pytest fixtures for minidb unit and integration tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

from minidb import Database
from minidb.grammar import CommonGrammar, MySQLGrammar, PostgresGrammar, SQLiteGrammar

ITEMS_DDL = (
    "CREATE TABLE {table} ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "name TEXT NOT NULL, "
    "value INTEGER, "
    "category TEXT)"
)

ITEMS = [
    ("apple", 10, "fruit"),
    ("banana", 20, "fruit"),
    ("carrot", 5, "veg"),
    ("daikon", None, "veg"),
    ("eggplant", 15, "veg"),
]


def seed_items(database: Database, rows: list[tuple] = ITEMS) -> None:
    """Create the ``items`` table (with the database's prefix) and fill it."""
    table = database.add_table_prefix("items")
    database.statement(ITEMS_DDL.format(table=table))
    for row in rows:
        database.insert(
            f"INSERT INTO {table} (name, value, category) VALUES (?, ?, ?)", list(row)
        )


@pytest.fixture()
def database() -> Iterator[Database]:
    """In-memory SQLite database holding the ``items`` table."""
    db = Database.create({"driver": "sqlite", "dsn": "sqlite://"})
    seed_items(db)
    yield db
    db.connection.close()


@pytest.fixture()
def prefixed_database() -> Iterator[Database]:
    """In-memory SQLite database with the ``pre_`` table prefix."""
    db = Database.create({"driver": "sqlite", "dsn": "sqlite://", "prefix": "pre_"})
    seed_items(db)
    yield db
    db.connection.close()


@pytest.fixture()
def empty_database() -> Iterator[Database]:
    db = Database.create({"driver": "sqlite", "dsn": "sqlite://"})
    yield db
    db.connection.close()


@pytest.fixture(scope="session")
def common() -> CommonGrammar:
    return CommonGrammar()


@pytest.fixture(scope="session")
def sqlite() -> SQLiteGrammar:
    return SQLiteGrammar()


@pytest.fixture(scope="session")
def postgres() -> PostgresGrammar:
    return PostgresGrammar()


@pytest.fixture(scope="session")
def mysql() -> MySQLGrammar:
    return MySQLGrammar()
