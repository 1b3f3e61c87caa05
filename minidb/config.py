"""Pydantic model for the configuration consumed by :meth:`Database.create`.

Example::

    config = DatabaseConfig.model_validate({
        "driver": "postgres",
        "dsn": "postgresql+psycopg2://db.internal/app",
        "username": "app",
        "password": "secret",
        "options": {"connect_timeout": 5},
        "prefix": "blog_",
    })
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from minidb.errors import InvalidArgumentException


class DatabaseConfig(BaseModel):
    """Connection and dialect settings of a :class:`~minidb.Database`.

    Attributes:
        driver: Dialect name selecting the grammar (``"mysql"``,
            ``"sqlite"``, ``"postgres"``).  Unset or unknown names select the
            dialect-neutral grammar.
        dsn: SQLAlchemy database URL.  ``dns`` is accepted as an alias.
        username: Overrides the user name of the URL.
        password: Overrides the password of the URL.
        options: Keyword arguments for the DB-API driver's ``connect()``.
        prefix: Prepended to every table name used by queries.

    Any other key is a validation error.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    driver: str | None = None
    dsn: str = Field(validation_alias=AliasChoices("dsn", "dns"))
    username: str | None = None
    password: str | None = None
    options: dict[str, Any] | None = None
    prefix: str = ""

    @classmethod
    def load(cls, config: Mapping[str, Any] | DatabaseConfig) -> DatabaseConfig:
        """Validate a configuration mapping.

        Raises:
            InvalidArgumentException: If the mapping is not a valid
                configuration.
        """
        if isinstance(config, cls):
            return config
        try:
            return cls.model_validate(config)
        except ValidationError as exc:
            raise InvalidArgumentException(f"Invalid database configuration: {exc}") from exc
