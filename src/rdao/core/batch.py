"""Batch / exec collaborator.

Write statements reach the driver one at a time through the executor's
single-statement routine (``execute_single``).  This module decides what a
call to ``execute()`` means and runs sequences of statements:

- one descriptor (``str``, ``Query``, mapping)  → one ``ExecutionOutcome``
- a list or tuple of descriptors               → list of outcomes, in order

A sequence stops at the first failing statement; the caller then gets that
error and no outcome list (statements that already ran are not undone).

:class:`Batch` is a small builder for such sequences::

    batch = executor.batch()
    batch.add("INSERT INTO Tags (Name) VALUES (:name)", {"name": "red"})
    batch.add("INSERT INTO Tags (Name) VALUES (:name)", {"name": "blue"})
    outcomes = await batch.run_async()
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

from rdao.core.accumulators import ExecutionOutcome
from rdao.core.errors import TemplateError
from rdao.core.protocols import Callback
from rdao.core.result import Err, Ok, Result
from rdao.core.templating import Query, QueryDescriptor

if TYPE_CHECKING:
    from rdao.core.adapters.base import BaseExecutor

SingleRunner = Callable[[QueryDescriptor], Result[ExecutionOutcome]]


def is_statement_list(params: Any) -> bool:
    """True when ``params`` is a sequence of descriptors rather than one."""
    return isinstance(params, (list, tuple))


def run_statements(run_single: SingleRunner, queries: Sequence[QueryDescriptor]) -> Result[list[ExecutionOutcome]]:
    """Run descriptors in order, stopping at the first error."""
    outcomes: list[ExecutionOutcome] = []
    for query in queries:
        result = run_single(query)
        if result.is_err():
            return Err(result.error)
        outcomes.append(result.value)
    return Ok(outcomes)


def run_exec(run_single: SingleRunner, params: Any) -> Result[Any]:
    """Dispatch ``execute(params)``: one statement or a sequence."""
    if params is None:
        return Err(TemplateError("Nothing to execute"))
    if is_statement_list(params):
        return run_statements(run_single, params)
    return run_single(params)


class Batch:
    """Accumulates write statements for one executor."""

    def __init__(self, executor: BaseExecutor):
        self._executor = executor
        self._queries: list[QueryDescriptor] = []

    def add(
        self,
        sql: str | Query | Mapping[str, Any],
        params: Mapping[str, Any] | Sequence[Any] | None = None,
    ) -> Batch:
        """Append a statement; returns the batch for chaining."""
        if params is not None:
            if not isinstance(sql, str):
                raise TemplateError("params can only accompany raw SQL text")
            sql = Query(sql, params)
        self._queries.append(sql)
        return self

    def extend(self, queries: Sequence[QueryDescriptor]) -> Batch:
        self._queries.extend(queries)
        return self

    def clear(self) -> None:
        self._queries.clear()

    @property
    def queries(self) -> tuple[QueryDescriptor, ...]:
        return tuple(self._queries)

    def __len__(self) -> int:
        return len(self._queries)

    def run(self, callback: Callback | None = None) -> Future:
        """Run every statement via the executor (continuation form)."""
        return self._executor.execute_multiple(list(self._queries), callback)

    async def run_async(self) -> list[ExecutionOutcome]:
        return await self._executor.execute_multiple_async(list(self._queries))


__all__ = [
    "Batch",
    "is_statement_list",
    "run_exec",
    "run_statements",
]
