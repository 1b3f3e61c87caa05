"""Fluent query builder: clause accumulation and table prefixing."""
from minidb.builder.errors import InvalidArgumentError, InvalidQueryError, QueryBuilderError
from minidb.builder.expressions import Raw, raw
from minidb.builder.prefixer import TablePrefixer
from minidb.builder.query import BaseQuery

__all__ = [
    "BaseQuery",
    "Raw",
    "raw",
    "TablePrefixer",
    "QueryBuilderError",
    "InvalidArgumentError",
    "InvalidQueryError",
]
