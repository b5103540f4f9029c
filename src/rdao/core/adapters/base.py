"""Statement executor base class.

Manifesto:
    One executor wraps one driver connection and exposes the RDAO surface:
    four read shapes (table, list, key/value list, scalar), two write
    operations (``execute``, ``execute_single``), table introspection and
    the ``open``/``close`` lifecycle.  Backend subclasses supply only the
    driver calls; everything else (descriptor resolution, accumulation,
    diagnostics, lifecycle guards) lives here.

Features:
    - **Two entry points, one core routine:** ``op(..., callback)`` and
      ``await op_async(...)`` both run the same synchronous routine on the
      executor's single worker thread.  The routine returns ``Ok``/``Err``;
      the entry points translate it to ``callback(error, result)`` or to
      return/raise.
    - **Fail-fast lifecycle guards:** submitting while another operation is
      in flight yields :class:`ExecutorBusyError`; submitting to a closed
      executor yields :class:`ConnectionClosedError`; closing twice is a
      logged no-op.
    - **No partial results:** an error discards the accumulator.
    - **Explicit outcomes:** ``execute_single`` returns the
      :class:`ExecutionOutcome`; ``last_outcome`` mirrors the latest
      successful one.

Architecture::

    caller thread                         worker thread (1 per executor)
    ─────────────                         ──────────────────────────────
    fetch_list(q, cb) ──► _submit ──────► _fetch("fetch_list", q, List..)
         │ returns Future                    resolve SQL → driver → Ok/Err
         ▼                                            │
    cb(error, result)  ◄──────── done callback ◄──────┘
    await fetch_list_async(q) ◄─ asyncio.wrap_future ─┘

Tags:
    rdao, executor, adapter-pattern, callback, asyncio

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
import contextvars
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date, datetime, time as dtime
from typing import Any

from rdao.core.accumulators import (
    ExecutionOutcome,
    KeyValueAccumulator,
    ListAccumulator,
    OutcomeAccumulator,
    RowAccumulator,
    ScalarAccumulator,
    TableAccumulator,
)
from rdao.core.batch import Batch, run_exec, run_statements
from rdao.core.datatable import DataTable
from rdao.core.dialect import Dialect, get_dialect
from rdao.core.errors import (
    ConnectionClosedError,
    ExecutorBusyError,
    ExecutorStateError,
    InvalidConfigError,
    error_code,
)
from rdao.core.logging import LogContext, get_logger
from rdao.core.protocols import Callback, DriverConnection
from rdao.core.result import Err, Ok, Result
from rdao.core.templating import QueryDescriptor, get_real_sql, merge_params, sql_date, sql_param

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)

DELIVERY_MODES = ("stream", "bulk")


def _done(result: Result[Any]) -> Future:
    future: Future = Future()
    future.set_result(result)
    return future


class BaseExecutor(ABC):
    """
    Abstract statement executor.

    Subclasses implement ``_connect_driver``, ``_disconnect_driver`` and
    ``_run_statement``; all three run on the worker thread.
    """

    db_type: DatabaseType = DatabaseType.MSSQL

    def __init__(
        self,
        *,
        debug_mode: bool = True,
        delivery_mode: str = "stream",
        timeout_ms: int = 10000,
        default_target: DatabaseConfig | Mapping[str, Any] | str | None = None,
    ):
        if delivery_mode not in DELIVERY_MODES:
            raise InvalidConfigError("delivery_mode", delivery_mode)
        self.debug_mode = debug_mode
        self.delivery_mode = delivery_mode
        # Stored for callers; the driver governs actual timeouts.
        self.timeout_ms = timeout_ms
        self._default_target = default_target
        self._dialect: Dialect = get_dialect(self.db_type.value)
        self._config: DatabaseConfig | None = None
        self._conn: DriverConnection | None = None
        self._pool: ThreadPoolExecutor | None = None
        self._busy = threading.Lock()
        self._running: str | None = None
        self._last_outcome: ExecutionOutcome | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def config(self) -> DatabaseConfig | None:
        """Config of the current (or last attempted) connection."""
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    @property
    def last_outcome(self) -> ExecutionOutcome | None:
        """Outcome of the latest successful ``execute_single``."""
        return self._last_outcome

    @property
    def last_insert_id(self) -> Any:
        return self._last_outcome.last_identity if self._last_outcome else None

    @property
    def last_statement_changes(self) -> Any:
        return self._last_outcome.rows_affected if self._last_outcome else None

    # ------------------------------------------------------------------
    # Driver hooks (worker thread)
    # ------------------------------------------------------------------

    @abstractmethod
    def _connect_driver(self, config: DatabaseConfig) -> DriverConnection:
        """Open a driver connection; driver errors propagate unchanged."""
        ...

    @abstractmethod
    def _disconnect_driver(self, conn: DriverConnection) -> None:
        ...

    @abstractmethod
    def _run_statement(
        self,
        sql: str,
        accumulator: RowAccumulator[Any],
        params: Sequence[Any] | None = None,
        *,
        all_result_sets: bool = False,
    ) -> Any:
        """Execute ``sql`` and feed rows to ``accumulator``; return ``finish()``."""
        ...

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def debug(self, operation: str, event: str, **fields: Any) -> None:
        if self.debug_mode:
            logger.debug(f"rdao.{event}", operation=operation, **fields)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def _submit(
        self,
        operation: str,
        fn: Callable[..., Result[Any]],
        *args: Any,
        require_open: bool = True,
    ) -> Future:
        """Queue ``fn(*args)`` on the worker; returns a Future of a Result.

        An operation already in flight wins over every other check, so a
        call made while ``open`` is still connecting gets
        :class:`ExecutorBusyError`, not :class:`ConnectionClosedError`.
        Rejections decided here come back as an already-resolved Future.
        """
        if not self._busy.acquire(blocking=False):
            return _done(Err(ExecutorBusyError(operation, self._running)))
        if require_open and (self._pool is None or self._conn is None):
            self._release()
            return _done(Err(ConnectionClosedError(operation)))
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"rdao-{self.db_type.value}")
        self._running = operation
        ctx = contextvars.copy_context()
        try:
            return self._pool.submit(ctx.run, self._guarded, operation, fn, args)
        except RuntimeError as e:
            self._release()
            return _done(Err(ConnectionClosedError(operation).with_context(reason=str(e))))

    def _release(self) -> None:
        self._running = None
        self._busy.release()

    def _guarded(self, operation: str, fn: Callable[..., Result[Any]], args: tuple) -> Result[Any]:
        target = self._config.redacted() if self._config is not None else None
        try:
            with LogContext(db_operation=operation, db_target=target):
                return fn(*args)
        except Exception as e:  # hook bugs still reach the caller as Err
            return Err(e)
        finally:
            self._release()

    def _dispatch(self, callback: Callback | None, future: Future) -> Future:
        """Attach ``callback`` to ``future``.

        The callback runs on the worker thread once the operation finishes.
        A rejection made before submission (busy, closed) is already
        resolved, so its callback runs synchronously on the calling thread
        before this method returns.
        """
        if callback is not None:
            future.add_done_callback(lambda f: self._deliver(callback, f.result()))
        return future

    def _deliver(self, callback: Callback, result: Result[Any]) -> None:
        error, value = result.to_callback_args()
        try:
            callback(error, value)
        except Exception:
            logger.exception("rdao.callback.failed", callback=getattr(callback, "__name__", repr(callback)))
            raise

    async def _await(self, future: Future) -> Any:
        result: Result[Any] = await asyncio.wrap_future(future)
        return result.unwrap()

    # ------------------------------------------------------------------
    # Core routines (worker thread)
    # ------------------------------------------------------------------

    def _statement(
        self,
        operation: str,
        sql: str,
        accumulator: RowAccumulator[Any],
        params: Sequence[Any] | None = None,
        *,
        all_result_sets: bool = False,
    ) -> Result[Any]:
        ts = time.monotonic()
        self.debug(operation, "statement.started", sql=sql)
        try:
            value = self._run_statement(sql, accumulator, params, all_result_sets=all_result_sets)
        except Exception as e:
            self.debug(operation, "statement.failed", sql=sql, error_code=error_code(e))
            return Err(e)
        elapsed_ms = int((time.monotonic() - ts) * 1000)
        self.debug(operation, "statement.completed", elapsed_ms=elapsed_ms, rows=accumulator.row_count)
        return Ok(value)

    def _resolve(self, operation: str, query: QueryDescriptor) -> Result[str]:
        try:
            return Ok(get_real_sql(query, self._dialect))
        except Exception as e:
            self.debug(operation, "statement.failed", error_code=error_code(e))
            return Err(e)

    def _fetch(self, operation: str, query: QueryDescriptor, accumulator: RowAccumulator[Any]) -> Result[Any]:
        resolved = self._resolve(operation, query)
        if resolved.is_err():
            return resolved
        return self._statement(operation, resolved.value, accumulator)

    def _describe(self, table_name: str) -> Result[list]:
        try:
            name = self._dialect.validate_identifier(table_name)
        except Exception as e:
            self.debug("describe_table", "statement.failed", table=table_name, error_code=error_code(e))
            return Err(e)
        return self._statement("describe_table", self._dialect.describe_table_query(), ListAccumulator(), (name,))

    def _execute_single(self, query: QueryDescriptor) -> Result[ExecutionOutcome]:
        resolved = self._resolve("execute_single", query)
        if resolved.is_err():
            return resolved
        sql = f"{resolved.value}; {self._dialect.outcome_clause()}"
        result = self._statement("execute_single", sql, OutcomeAccumulator(), all_result_sets=True)
        if result.is_ok():
            self._last_outcome = result.value
            self.debug(
                "execute_single",
                "outcome.captured",
                rows_affected=result.value.rows_affected,
                last_identity=result.value.last_identity,
            )
        return result

    def _execute_multiple(self, queries: Sequence[QueryDescriptor]) -> Result[list[ExecutionOutcome]]:
        return run_statements(self._execute_single, queries)

    def _exec(self, params: Any) -> Result[Any]:
        return run_exec(self._execute_single, params)

    def _open(self, target: Any) -> Result[None]:
        if self._conn is not None:
            return Err(ExecutorStateError("Connection is already open"))
        try:
            config = DatabaseConfig.coerce(target)
        except Exception as e:
            self._shutdown_pool()
            return Err(e)
        self._config = config
        self.debug("open", "open.started", target=config.redacted())
        if config.ignored_options:
            self.debug("open", "open.options.ignored", keys=sorted(config.ignored_options))
        try:
            self._conn = self._connect_driver(config)
        except Exception as e:
            self.debug("open", "open.failed", target=config.redacted(), error_code=error_code(e))
            self._shutdown_pool()
            return Err(e)
        self.debug("open", "open.completed", target=config.redacted())
        return Ok(None)

    def _close(self) -> Result[None]:
        conn, self._conn = self._conn, None
        self._shutdown_pool()
        if conn is None:
            return Ok(None)
        self.debug("close", "close.started")
        try:
            self._disconnect_driver(conn)
        except Exception as e:
            self.debug("close", "close.failed", error_code=error_code(e))
            return Err(e)
        self.debug("close", "close.completed")
        return Ok(None)

    def _shutdown_pool(self) -> None:
        pool, self._pool = self._pool, None
        if pool is not None:
            # Called from the worker itself; it exits after this task.
            pool.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, target: Any = None, callback: Callback | None = None) -> Future:
        """Connect to ``target`` (config, mapping, or connection string)."""
        target = target if target is not None else self._default_target
        return self._dispatch(callback, self._submit("open", self._open, target, require_open=False))

    async def open_async(self, target: Any = None) -> None:
        target = target if target is not None else self._default_target
        return await self._await(self._submit("open", self._open, target, require_open=False))

    def close(self, callback: Callback | None = None) -> Future:
        """Close the connection; closing a closed executor is a no-op."""
        return self._dispatch(callback, self._close_future())

    async def close_async(self) -> None:
        return await self._await(self._close_future())

    def _close_future(self) -> Future:
        if self._pool is None and self._conn is None:
            self.debug("close", "close.skipped")
            return _done(Ok(None))
        return self._submit("close", self._close, require_open=False)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_table(self, query: QueryDescriptor, callback: Callback | None = None) -> Future:
        return self._dispatch(callback, self._submit("fetch_table", self._fetch, "fetch_table", query, TableAccumulator()))

    async def fetch_table_async(self, query: QueryDescriptor) -> DataTable:
        return await self._await(self._submit("fetch_table", self._fetch, "fetch_table", query, TableAccumulator()))

    def fetch_list(self, query: QueryDescriptor, callback: Callback | None = None) -> Future:
        return self._dispatch(callback, self._submit("fetch_list", self._fetch, "fetch_list", query, ListAccumulator()))

    async def fetch_list_async(self, query: QueryDescriptor) -> list:
        return await self._await(self._submit("fetch_list", self._fetch, "fetch_list", query, ListAccumulator()))

    def fetch_kv_list(self, query: QueryDescriptor, callback: Callback | None = None) -> Future:
        return self._dispatch(
            callback, self._submit("fetch_kv_list", self._fetch, "fetch_kv_list", query, KeyValueAccumulator())
        )

    async def fetch_kv_list_async(self, query: QueryDescriptor) -> list[tuple[Any, Any]]:
        return await self._await(
            self._submit("fetch_kv_list", self._fetch, "fetch_kv_list", query, KeyValueAccumulator())
        )

    def fetch_scalar(self, query: QueryDescriptor, callback: Callback | None = None) -> Future:
        """Column 0 of the first row, or ``NO_ROWS``."""
        return self._dispatch(
            callback, self._submit("fetch_scalar", self._fetch, "fetch_scalar", query, ScalarAccumulator())
        )

    async def fetch_scalar_async(self, query: QueryDescriptor) -> Any:
        return await self._await(
            self._submit("fetch_scalar", self._fetch, "fetch_scalar", query, ScalarAccumulator())
        )

    def describe_table(self, table_name: str, callback: Callback | None = None) -> Future:
        """Column names of ``table_name`` in catalog order."""
        return self._dispatch(callback, self._submit("describe_table", self._describe, table_name))

    async def describe_table_async(self, table_name: str) -> list[str]:
        return await self._await(self._submit("describe_table", self._describe, table_name))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def execute(self, params: Any, callback: Callback | None = None) -> Future:
        """One descriptor → ExecutionOutcome; a list → list of outcomes."""
        return self._dispatch(callback, self._submit("execute", self._exec, params))

    async def execute_async(self, params: Any) -> Any:
        return await self._await(self._submit("execute", self._exec, params))

    def execute_single(self, query: QueryDescriptor, callback: Callback | None = None) -> Future:
        return self._dispatch(callback, self._submit("execute_single", self._execute_single, query))

    async def execute_single_async(self, query: QueryDescriptor) -> ExecutionOutcome:
        return await self._await(self._submit("execute_single", self._execute_single, query))

    def execute_multiple(self, queries: Sequence[QueryDescriptor], callback: Callback | None = None) -> Future:
        return self._dispatch(callback, self._submit("execute_multiple", self._execute_multiple, list(queries)))

    async def execute_multiple_async(self, queries: Sequence[QueryDescriptor]) -> list[ExecutionOutcome]:
        return await self._await(self._submit("execute_multiple", self._execute_multiple, list(queries)))

    def batch(self) -> Batch:
        return Batch(self)

    # ------------------------------------------------------------------
    # Templating helpers
    # ------------------------------------------------------------------

    def sql_date(self, value: date | datetime | dtime | str) -> str:
        return sql_date(value, self._dialect)

    def sql_param(self, value: Any) -> str:
        return sql_param(value, self._dialect)

    def merge_params(self, sql: str, params: Mapping[str, Any] | Sequence[Any] | None) -> str:
        return merge_params(sql, params, self._dialect)

    def get_real_sql(self, query: QueryDescriptor) -> str:
        return get_real_sql(query, self._dialect)

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> BaseExecutor:
        await self.open_async()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close_async()

    def __repr__(self) -> str:
        state = "open" if self.is_connected else "closed"
        return f"{self.__class__.__name__}({state}, delivery_mode={self.delivery_mode!r})"


__all__ = [
    "BaseExecutor",
    "DELIVERY_MODES",
]
