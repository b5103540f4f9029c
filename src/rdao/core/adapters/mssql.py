"""Microsoft SQL Server statement executor.

Uses ``pymssql`` (FreeTDS).  Connections are opened with ``autocommit=True``:
the adapter does not manage transactions, every statement commits as it
completes.

Install the driver::

    pip install pymssql

This executor is import-guarded: if ``pymssql`` is not installed a clear
:class:`~rdao.core.errors.ConfigError` is delivered by ``open()``.

Delivery modes:

- ``stream`` (default) - plain cursor; rows are iterated one at a time and
  paired with the cursor description.
- ``bulk`` - ``as_dict`` cursor; each result set is fetched at once as
  mappings keyed by column name.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from rdao.core.accumulators import RowAccumulator, cells_from_sequence
from rdao.core.errors import ConfigError
from rdao.core.protocols import DriverConnection, DriverCursor

from .base import BaseExecutor
from .types import DatabaseConfig, DatabaseType


class MSSQLExecutor(BaseExecutor):
    """SQL Server executor over one ``pymssql`` connection.

    Example:
        >>> executor = MSSQLExecutor(delivery_mode="bulk")
        >>> await executor.open_async("Server=db,1433;Database=Shop;User Id=app;Password=...")
        >>> await executor.fetch_kv_list_async("SELECT Id, Name FROM Customers")
        [(1, 'Ada'), (2, 'Grace')]
        >>> await executor.close_async()
    """

    db_type = DatabaseType.MSSQL

    def _connect_driver(self, config: DatabaseConfig) -> DriverConnection:
        try:
            import pymssql
        except ImportError:
            raise ConfigError(
                "pymssql is required for SQL Server. Install with: pip install pymssql"
            ) from None

        return pymssql.connect(
            server=config.host,
            port=str(config.port),
            user=config.username,
            password=config.password,
            database=config.database,
            login_timeout=config.connect_timeout,
            timeout=config.query_timeout,
            appname=config.appname,
            charset=config.charset,
            autocommit=True,
            **config.options,
        )

    def _disconnect_driver(self, conn: DriverConnection) -> None:
        conn.close()

    def _run_statement(
        self,
        sql: str,
        accumulator: RowAccumulator[Any],
        params: Sequence[Any] | None = None,
        *,
        all_result_sets: bool = False,
    ) -> Any:
        bulk = self.delivery_mode == "bulk"
        cursor = self._conn.cursor(as_dict=True) if bulk else self._conn.cursor()
        try:
            if params is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, tuple(params))
            description = self._drain(cursor, accumulator, bulk=bulk, all_result_sets=all_result_sets)
        finally:
            cursor.close()
        return accumulator.finish(description)

    def _drain(
        self,
        cursor: DriverCursor,
        accumulator: RowAccumulator[Any],
        *,
        bulk: bool,
        all_result_sets: bool,
    ) -> Sequence[Sequence[Any]] | None:
        """Feed result sets to ``accumulator``; return the first fed set's description.

        Only the first result set that has columns is fed unless
        ``all_result_sets`` is set; the rest are read and discarded so the
        connection is left clean for the next statement.
        """
        first_description = None
        fed = False
        while True:
            description = cursor.description
            if description:
                if not fed or all_result_sets:
                    if first_description is None:
                        first_description = description
                    if bulk:
                        accumulator.ingest_bulk(cursor.fetchall())
                    else:
                        for row in cursor:
                            accumulator.ingest_row(cells_from_sequence(row, description))
                    fed = True
                else:
                    cursor.fetchall()
            if not cursor.nextset():
                break
        return first_description


__all__ = [
    "MSSQLExecutor",
]
