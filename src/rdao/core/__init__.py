"""RDAO Core -- relational data access over a native SQL Server driver.

Manifesto:
    Application code wants rows in a handful of shapes: a table, a list of
    first-column values, a list of key/value pairs, one scalar, or the
    outcome of a write.  It should not care whether the driver streams rows
    one by one or hands them over in bulk, and it should be able to use
    either a ``callback(error, result)`` continuation or ``await``.

    - **One routine per operation:** callback and awaitable forms share it
    - **Fail-fast lifecycle:** busy and closed executors error immediately
    - **Typed errors:** adapter faults use ``RdaoError``; driver faults pass through
    - **Import-guarded driver:** ``pymssql`` is loaded at ``open()`` time

Architecture::

    Layer 1 -- Types & Errors
        errors.py          Structured error hierarchy (RdaoError, ...)
        result.py          Result[T] envelope (Ok / Err / try_result)
        protocols.py       Driver cursor / connection protocols, Callback

    Layer 2 -- SQL Text
        dialect.py         Literal rendering + catalog queries (MSSQL)
        templating.py      Query descriptors, sql_param, merge_params

    Layer 3 -- Result Shapes
        datatable.py       DataTable / DataRow
        accumulators.py    Table, list, key/value, scalar, outcome builders
        batch.py           execute() dispatch + Batch builder

    Layer 4 -- Executors
        adapters/          BaseExecutor, MSSQLExecutor, registry

    Ambient
        logging.py         structlog configuration + context binding
        settings.py        RDAO_* environment settings (pydantic-settings)

Tags:
    rdao, database, mssql, data-access, callback, asyncio

Doc-Types:
    package-overview, architecture-map, module-index
"""

from rdao.core.accumulators import NO_ROWS, ExecutionOutcome
from rdao.core.adapters import (
    BaseExecutor,
    DatabaseConfig,
    DatabaseType,
    MSSQLExecutor,
    from_settings,
    get_adapter,
)
from rdao.core.batch import Batch
from rdao.core.datatable import DataRow, DataTable
from rdao.core.errors import (
    ConfigError,
    ConnectionClosedError,
    ErrorCategory,
    ExecutorBusyError,
    ExecutorStateError,
    InvalidIdentifierError,
    QueryError,
    RdaoError,
    TemplateError,
)
from rdao.core.logging import configure_logging, get_logger
from rdao.core.result import Err, Ok, Result
from rdao.core.settings import RdaoSettings
from rdao.core.templating import Query, get_real_sql, merge_params, sql_date, sql_param

__all__ = [
    # Executors
    "BaseExecutor",
    "MSSQLExecutor",
    "get_adapter",
    "from_settings",
    "DatabaseConfig",
    "DatabaseType",
    "Batch",
    # Shapes
    "DataTable",
    "DataRow",
    "ExecutionOutcome",
    "NO_ROWS",
    # Templating
    "Query",
    "get_real_sql",
    "merge_params",
    "sql_date",
    "sql_param",
    # Errors
    "ErrorCategory",
    "RdaoError",
    "ConfigError",
    "QueryError",
    "TemplateError",
    "InvalidIdentifierError",
    "ExecutorStateError",
    "ConnectionClosedError",
    "ExecutorBusyError",
    # Result
    "Result",
    "Ok",
    "Err",
    # Ambient
    "RdaoSettings",
    "configure_logging",
    "get_logger",
]
