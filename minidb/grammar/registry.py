"""Grammar registry.

Maps the ``driver`` configuration value to a :class:`Grammar` class.  The
built-in grammars are registered by :mod:`minidb.grammar`; applications can
add their own without touching the factory::

    from minidb.grammar.registry import GrammarFactory

    @GrammarFactory.register("mssql")
    class MSSQLGrammar(CommonGrammar):
        ...
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import ClassVar

from minidb.grammar.base import Grammar
from minidb.grammar.common import CommonGrammar

logger = logging.getLogger(__name__)


class GrammarFactory:
    """Registry mapping driver names to :class:`Grammar` classes.

    Names are matched case-insensitively.  Unknown and missing names resolve
    to :attr:`default`.
    """

    _grammars: ClassVar[dict[str, type[Grammar]]] = {}

    #: Grammar used when the driver is unset or not registered.
    default: ClassVar[type[Grammar]] = CommonGrammar

    @classmethod
    def register(cls, name: str) -> Callable[[type[Grammar]], type[Grammar]]:
        """Decorator that registers a grammar class under ``name``.

        Args:
            name: The driver name (e.g. ``"mysql"``).

        Returns:
            A decorator that registers and returns the grammar class.
        """

        def decorator(grammar_cls: type[Grammar]) -> type[Grammar]:
            cls.register_class(name, grammar_cls)
            return grammar_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, grammar_cls: type[Grammar]) -> None:
        """Register a grammar class without using the decorator form."""
        cls._grammars[name.lower()] = grammar_cls

    @classmethod
    def create(cls, name: str | None) -> Grammar:
        """Instantiate the grammar registered for ``name``.

        Args:
            name: The driver name, or ``None``.

        Returns:
            A fresh :class:`Grammar` instance; :attr:`default` when ``name``
            is ``None`` or unknown.
        """
        grammar_cls = cls._grammars.get(name.strip().lower()) if name else None
        if grammar_cls is None:
            if name:
                logger.debug("No grammar registered for driver %r, using %s", name, cls.default.__name__)
            grammar_cls = cls.default
        return grammar_cls()

    @classmethod
    def registered_drivers(cls) -> list[str]:
        """Return the sorted list of registered driver names."""
        return sorted(cls._grammars)
