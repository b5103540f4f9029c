"""Tabular result container.

``DataTable`` is the "full table" result shape: an ordered list of column
names plus an ordered list of :class:`DataRow` values.  Columns are
registered with ``add_column()``; rows are created with ``new_row()`` (sized
to the current columns) and appended with ``add_row()``.

Examples:
    >>> table = DataTable()
    >>> table.add_column("id")
    0
    >>> table.add_column("name")
    1
    >>> table.add_row(table.new_row({"id": 1, "name": "Ada"}))
    >>> table.rows[0]["name"]
    'Ada'
    >>> table.to_dicts()
    [{'id': 1, 'name': 'Ada'}]
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any


class DataRow:
    """One row of a :class:`DataTable`; cells addressable by index or name."""

    __slots__ = ("_table", "items")

    def __init__(self, table: DataTable, items: list[Any]):
        self._table = table
        self.items = items

    def __getitem__(self, key: int | str) -> Any:
        if isinstance(key, str):
            return self.items[self._table.column_index(key)]
        return self.items[key]

    def __setitem__(self, key: int | str, value: Any) -> None:
        if isinstance(key, str):
            key = self._table.column_index(key)
        self.items[key] = value

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DataRow):
            return self.items == other.items
        if isinstance(other, (list, tuple)):
            return self.items == list(other)
        return NotImplemented

    def get(self, name: str, default: Any = None) -> Any:
        try:
            return self[name]
        except KeyError:
            return default

    def to_dict(self) -> dict[str, Any]:
        return dict(zip(self._table.columns, self.items, strict=False))

    def __repr__(self) -> str:
        return f"DataRow({self.items!r})"


class DataTable:
    """Ordered columns plus ordered rows."""

    def __init__(self, columns: Sequence[str] | None = None):
        self.columns: list[str] = []
        self.rows: list[DataRow] = []
        self._index: dict[str, int] = {}
        for name in columns or ():
            self.add_column(name)

    def add_column(self, name: str) -> int:
        """Register a column and return its position.

        Existing rows are padded with ``None``.  Duplicate names (``SELECT
        1, 2`` yields two unnamed columns) are kept; lookup by name resolves
        to the first of them.
        """
        position = len(self.columns)
        self._index.setdefault(name, position)
        self.columns.append(name)
        for row in self.rows:
            row.items.append(None)
        return position

    def column_index(self, name: str) -> int:
        try:
            return self._index[name]
        except KeyError:
            raise KeyError(f"Unknown column: {name}") from None

    def new_row(self, values: Mapping[str, Any] | Sequence[Any] | None = None) -> DataRow:
        """Create a row sized to the current columns (not yet appended).

        A mapping fills cells by column name (unknown keys are ignored); a
        sequence fills cells by position.
        """
        items: list[Any] = [None] * len(self.columns)
        if isinstance(values, Mapping):
            for name, value in values.items():
                if name in self._index:
                    items[self._index[name]] = value
        elif values is not None:
            for i, value in enumerate(values):
                if i >= len(items):
                    break
                items[i] = value
        return DataRow(self, items)

    def add_row(self, row: DataRow) -> None:
        self.rows.append(row)

    def column(self, name: str) -> list[Any]:
        """All values of one column, in row order."""
        idx = self.column_index(name)
        return [row.items[idx] for row in self.rows]

    def to_dicts(self) -> list[dict[str, Any]]:
        return [row.to_dict() for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[DataRow]:
        return iter(self.rows)

    def __repr__(self) -> str:
        return f"DataTable(columns={self.columns!r}, rows={len(self.rows)})"


__all__ = [
    "DataRow",
    "DataTable",
]
