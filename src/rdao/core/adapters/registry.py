"""Executor registry and factory.

Consumers should not hard-code executor class names.  The registry maps
database type names to executor classes; ``get_adapter()`` builds an
unopened executor, and ``from_settings()`` builds one whose default
``open()`` target and logging setup come from
:class:`~rdao.core.settings.RdaoSettings`.

Tags:
    rdao, database, registry, factory, singleton

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rdao.core.errors import ConfigError
from rdao.core.logging import configure_logging

from .base import BaseExecutor
from .mssql import MSSQLExecutor
from .types import DatabaseType

if TYPE_CHECKING:
    from rdao.core.settings import RdaoSettings


class AdapterRegistry:
    """
    Registry for executor factories.

    Pre-registered executors:
    - ``mssql`` / ``sqlserver`` - :class:`MSSQLExecutor`
    """

    def __init__(self):
        self._factories: dict[str, type[BaseExecutor]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["mssql"] = MSSQLExecutor
        self._factories["sqlserver"] = MSSQLExecutor  # Alias

    def register(self, name: str, executor_class: type[BaseExecutor]) -> None:
        """Register an executor factory."""
        self._factories[name.lower()] = executor_class

    def create(self, name: str, **kwargs: Any) -> BaseExecutor:
        name = name.lower()
        if name not in self._factories:
            raise ConfigError(f"Unknown database adapter: {name}")
        return self._factories[name](**kwargs)

    def list_adapters(self) -> list[str]:
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


def get_adapter(
    db_type: DatabaseType | str = DatabaseType.MSSQL,
    **kwargs: Any,
) -> BaseExecutor:
    """
    Get an (unopened) executor by type.

    Usage:
        executor = get_adapter("mssql", delivery_mode="bulk")
        executor.open("Server=db;Database=Shop;User Id=app;Password=...", on_open)
    """
    name = db_type.value if isinstance(db_type, DatabaseType) else db_type
    return adapter_registry.create(name, **kwargs)


def from_settings(settings: RdaoSettings | None = None, db_type: DatabaseType | str = DatabaseType.MSSQL) -> BaseExecutor:
    """Executor configured from ``RDAO_*`` settings; ``open()`` needs no target.

    Also applies ``log_level`` and ``json_logs`` through
    :func:`~rdao.core.logging.configure_logging`.
    """
    if settings is None:
        from rdao.core.settings import RdaoSettings

        settings = RdaoSettings()
    configure_logging(settings.log_level, settings.json_logs)
    return get_adapter(db_type, **settings.executor_options())


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "from_settings",
    "get_adapter",
]
