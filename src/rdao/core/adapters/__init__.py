"""Statement executors -- the RDAO interface over a native SQL driver.

Manifesto:
    Callers should read a table, a list, a key/value list or a single value
    from SQL Server with one call, without knowing how the driver delivers
    rows.  Each executor owns one connection and normalizes whatever the
    driver hands back into those four shapes.

    The executor is **import-guarded**: ``pymssql`` is only required at
    ``open()`` time, not at import time.

Architecture::

    BaseExecutor (base.py)           Callback + async entry points, guards,
        |                            diagnostics, shared core routines
        |-- MSSQLExecutor            pymssql (mssql.py)

    AdapterRegistry (registry.py)    name -> executor class; get_adapter()
    DatabaseConfig (types.py)        Connection parameters, ADO strings
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ ``executor.fetch_list("SELECT * FROM t WHERE id=" + user_input, cb)``
    ✅ ``executor.fetch_list(Query("SELECT * FROM t WHERE id=:id", {"id": user_input}), cb)``
    ❌ Two operations in flight on one executor
    ✅ One executor per concurrent unit of work

Tags:
    rdao, database, adapters, mssql, import-guarded, registry-pattern

Doc-Types:
    package-overview, architecture-map, module-index
"""

from rdao.core.dialect import Dialect, get_dialect
from rdao.core.protocols import Callback, DriverConnection, DriverCursor

from .base import BaseExecutor
from .mssql import MSSQLExecutor
from .registry import AdapterRegistry, adapter_registry, from_settings, get_adapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    # Types
    "DatabaseType",
    "DatabaseConfig",
    # Protocols / Abstractions
    "Callback",
    "DriverConnection",
    "DriverCursor",
    "Dialect",
    "get_dialect",
    # Base class
    "BaseExecutor",
    # Implementations
    "MSSQLExecutor",
    # Registry
    "AdapterRegistry",
    "adapter_registry",
    "from_settings",
    "get_adapter",
]
