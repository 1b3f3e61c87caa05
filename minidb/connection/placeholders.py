"""Conversion of ``?`` placeholders to a DB-API driver's paramstyle.

Statements in minidb always use ``?`` placeholders, whatever the database.
Drivers declare the style they expect in ``paramstyle`` (PEP 249):

============  ==================  =====================================
paramstyle    placeholder         drivers
============  ==================  =====================================
``qmark``     ``?``               sqlite3, pyodbc
``format``    ``%s``              PyMySQL, mysqlclient, psycopg2
``pyformat``  ``%s``              psycopg2, psycopg
``numeric``   ``:1``              cx_Oracle
``named``     ``:name``           oracledb
============  ==================  =====================================

Question marks inside string literals (including PostgreSQL ``E'...'``
escape strings and ``$$...$$`` dollar quotes), quoted identifiers and
comments are left alone.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

_TOKEN_RE = re.compile(
    r"""
      (?<![\w$])[Ee]'(?:[^'\\]|\\.|'')*'  # PostgreSQL escape string
    | '(?:[^']|'')*'                      # string literal
    | (?<![\w$])\$(?P<tag>(?:[A-Za-z_]\w*)?)\$.*?\$(?P=tag)\$  # dollar quote
    | "(?:[^"]|"")*"                      # quoted identifier
    | `(?:[^`]|``)*`                      # MySQL quoted identifier
    | --[^\n]*                            # line comment
    | /\*.*?\*/                           # block comment
    | \?                                  # placeholder
    | %                                   # percent sign
    """,
    re.VERBOSE | re.DOTALL,
)

_PERCENT_STYLES = frozenset({"format", "pyformat"})


def convert_placeholders(
    sql: str,
    bindings: Sequence[Any],
    paramstyle: str,
) -> tuple[str, tuple[Any, ...] | dict[str, Any]]:
    """Rewrite ``sql`` and ``bindings`` for a driver's paramstyle.

    Args:
        sql: Statement with ``?`` placeholders.
        bindings: Positional values for the placeholders.
        paramstyle: The driver's DB-API ``paramstyle``.

    Returns:
        The statement and the parameters to hand to ``cursor.execute()``;
        parameters are a dict for the ``named`` style and a tuple otherwise.
    """
    if paramstyle == "qmark":
        return sql, tuple(bindings)

    counter = 0
    escape_percent = paramstyle in _PERCENT_STYLES

    def substitute(match: re.Match[str]) -> str:
        nonlocal counter
        token = match.group(0)
        if token == "?":
            counter += 1
            if escape_percent:
                return "%s"
            if paramstyle == "numeric":
                return f":{counter}"
            return f":p{counter}"
        if escape_percent:
            # Percent-style drivers interpolate the whole statement text.
            return token.replace("%", "%%")
        return token

    converted = _TOKEN_RE.sub(substitute, sql)
    if paramstyle == "named":
        return converted, {f"p{index}": value for index, value in enumerate(bindings, 1)}
    return converted, tuple(bindings)
