"""Unit tests for GrammarFactory."""
from __future__ import annotations

import pytest

from minidb.grammar import (
    CommonGrammar,
    GrammarFactory,
    MySQLGrammar,
    PostgresGrammar,
    SQLiteGrammar,
)


@pytest.mark.parametrize(("driver", "grammar_cls"), [
    ("mysql", MySQLGrammar),
    ("MySQL", MySQLGrammar),
    ("sqlite", SQLiteGrammar),
    ("postgres", PostgresGrammar),
    ("postgresql", PostgresGrammar),
    ("pgsql", PostgresGrammar),
    (" PGSQL ", PostgresGrammar),
])
def test_known_drivers(driver, grammar_cls):
    assert type(GrammarFactory.create(driver)) is grammar_cls


@pytest.mark.parametrize("driver", [None, "", "oracle", "sqlsrv"])
def test_unknown_drivers_fall_back_to_common(driver):
    assert type(GrammarFactory.create(driver)) is CommonGrammar


def test_create_returns_fresh_instances():
    assert GrammarFactory.create("mysql") is not GrammarFactory.create("mysql")


def test_register_decorator(monkeypatch):
    monkeypatch.setattr(GrammarFactory, "_grammars", dict(GrammarFactory._grammars))

    @GrammarFactory.register("MSSQL")
    class MSSQLGrammar(CommonGrammar):
        @property
        def dialect_name(self) -> str:
            return "mssql"

    assert type(GrammarFactory.create("mssql")) is MSSQLGrammar
    assert "mssql" in GrammarFactory.registered_drivers()


def test_registered_drivers_lists_builtins():
    drivers = GrammarFactory.registered_drivers()
    assert drivers == sorted(drivers)
    assert {"mysql", "sqlite", "postgres", "postgresql", "pgsql"} <= set(drivers)
