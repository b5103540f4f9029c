"""Row accumulators: one per result shape.

The driver hands rows to the executor in one of two delivery modes:

- **stream** - one row at a time, each a sequence of :class:`ColumnValue`
  cells carrying the column name from the cursor description;
- **bulk** - every row at once, each a mapping keyed by column name
  (``pymssql`` ``as_dict`` cursors).

Every accumulator exposes both feeding strategies.  ``ingest_bulk()`` walks
the mappings and feeds each one through ``ingest_row()``, so both modes run
through the same per-row code and build the same shape.  ``finish()``
returns the built value; an accumulator whose statement failed is simply
dropped, so no partially built value ever escapes.

Architecture::

    driver rows ──► ingest_row(cells) ──┐
    driver rows ──► ingest_bulk(maps) ──┴─► _accept(cells) ──► finish() ──► value

    TableAccumulator      DataTable          (columns registered once)
    ListAccumulator       [col0, ...]
    KeyValueAccumulator   [(col0, col1|col0), ...]
    ScalarAccumulator     col0 of first row | NO_ROWS
    OutcomeAccumulator    ExecutionOutcome(rows_affected, last_identity)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, NamedTuple, TypeVar

from rdao.core.datatable import DataTable

T = TypeVar("T")


class ColumnValue(NamedTuple):
    """One cell of a streamed row: column name plus driver value."""

    name: str
    value: Any


class _NoRows:
    """Sentinel for a scalar query that delivered no row."""

    _instance: _NoRows | None = None

    def __new__(cls) -> _NoRows:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_ROWS"


NO_ROWS = _NoRows()


@dataclass(frozen=True)
class ExecutionOutcome:
    """Rows affected and last generated identity of a write statement.

    Both values are passed through as the driver reports them;
    ``last_identity`` is ``None`` when the statement generated no identity.
    """

    rows_affected: Any = None
    last_identity: Any = None


def cells_from_mapping(row: Mapping[str, Any]) -> list[ColumnValue]:
    return [ColumnValue(name, value) for name, value in row.items()]


def cells_from_sequence(row: Sequence[Any], description: Sequence[Sequence[Any]] | None) -> list[ColumnValue]:
    names = [d[0] for d in description] if description else [""] * len(row)
    return [ColumnValue(name, value) for name, value in zip(names, row, strict=False)]


class RowAccumulator(Generic[T]):
    """Base accumulator: two feeding strategies, one per-row hook."""

    def __init__(self) -> None:
        self.row_count = 0

    def ingest_row(self, cells: Sequence[ColumnValue]) -> None:
        """Incremental feed: one streamed row."""
        self.row_count += 1
        self._accept(cells)

    def ingest_bulk(self, rows: Sequence[Mapping[str, Any]]) -> None:
        """Bulk feed: all rows as mappings."""
        for row in rows:
            self.ingest_row(cells_from_mapping(row))

    def _accept(self, cells: Sequence[ColumnValue]) -> None:
        raise NotImplementedError

    def finish(self, description: Sequence[Sequence[Any]] | None = None) -> T:
        raise NotImplementedError


class TableAccumulator(RowAccumulator[DataTable]):
    """Builds a :class:`DataTable`; columns come from the first row."""

    def __init__(self) -> None:
        super().__init__()
        self.table = DataTable()
        self._headers_read = False

    def _accept(self, cells: Sequence[ColumnValue]) -> None:
        if not self._headers_read:
            for cell in cells:
                self.table.add_column(cell.name)
            self._headers_read = True
        self.table.add_row(self.table.new_row([cell.value for cell in cells]))

    def finish(self, description: Sequence[Sequence[Any]] | None = None) -> DataTable:
        # Zero rows: fall back to whatever the cursor metadata reports.
        if not self._headers_read and description:
            for column in description:
                self.table.add_column(column[0])
            self._headers_read = True
        return self.table


class ListAccumulator(RowAccumulator[list]):
    def __init__(self) -> None:
        super().__init__()
        self.values: list[Any] = []

    def _accept(self, cells: Sequence[ColumnValue]) -> None:
        self.values.append(cells[0].value)

    def finish(self, description: Sequence[Sequence[Any]] | None = None) -> list:
        return self.values


class KeyValueAccumulator(RowAccumulator[list]):
    def __init__(self) -> None:
        super().__init__()
        self.pairs: list[tuple[Any, Any]] = []

    def _accept(self, cells: Sequence[ColumnValue]) -> None:
        if len(cells) > 1:
            self.pairs.append((cells[0].value, cells[1].value))
        else:
            self.pairs.append((cells[0].value, cells[0].value))

    def finish(self, description: Sequence[Sequence[Any]] | None = None) -> list:
        return self.pairs


class ScalarAccumulator(RowAccumulator[Any]):
    """Keeps column 0 of the first row; later rows are consumed and ignored."""

    def __init__(self) -> None:
        super().__init__()
        self.value: Any = NO_ROWS

    def _accept(self, cells: Sequence[ColumnValue]) -> None:
        if self.value is NO_ROWS:
            self.value = cells[0].value

    def finish(self, description: Sequence[Sequence[Any]] | None = None) -> Any:
        return self.value


class OutcomeAccumulator(RowAccumulator[ExecutionOutcome]):
    """Captures ``(rows_affected, last_identity)``.

    The outcome clause is appended after the caller's statement, so its row
    is always the last one delivered; rows the statement itself returns
    (``OUTPUT`` clauses) come earlier and are overwritten.
    """

    def __init__(self) -> None:
        super().__init__()
        self.outcome = ExecutionOutcome()

    def _accept(self, cells: Sequence[ColumnValue]) -> None:
        rows_affected = cells[0].value
        last_identity = cells[1].value if len(cells) > 1 else None
        self.outcome = ExecutionOutcome(rows_affected, last_identity)

    def finish(self, description: Sequence[Sequence[Any]] | None = None) -> ExecutionOutcome:
        return self.outcome


__all__ = [
    "NO_ROWS",
    "ColumnValue",
    "ExecutionOutcome",
    "RowAccumulator",
    "TableAccumulator",
    "ListAccumulator",
    "KeyValueAccumulator",
    "ScalarAccumulator",
    "OutcomeAccumulator",
    "cells_from_mapping",
    "cells_from_sequence",
]
