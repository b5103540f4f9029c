"""
Canonical protocol definitions for the RDAO adapter.

The executor talks to the driver only through these shapes, so tests can
hand it a ``MagicMock`` or a small fake instead of a live SQL Server.

Architecture:
    ::

        protocols.py
        ├── DriverCursor      - DB-API cursor subset (execute, iterate, nextset)
        ├── DriverConnection  - DB-API connection subset (cursor, close)
        └── Callback          - continuation signature ``(error, result)``

Tags:
    protocol, connection, cursor, dbapi, rdao
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Any, Protocol, runtime_checkable

# Continuation: called once with (error, None) or (None, result).
Callback = Callable[[Exception | None, Any], None]


@runtime_checkable
class DriverCursor(Protocol):
    """
    Minimal DB-API cursor interface used by the executor.

    ``description`` is ``None`` until a statement that returns rows has
    run; afterwards it is a sequence of 7-tuples whose first element is the
    column name.
    """

    description: Sequence[Sequence[Any]] | None

    def execute(self, operation: str, params: Any = None) -> Any:
        """Execute one statement (or batch)."""
        ...

    def fetchone(self) -> Any:
        ...

    def fetchall(self) -> list:
        ...

    def nextset(self) -> bool | None:
        """Advance to the next result set of a batch."""
        ...

    def __iter__(self) -> Iterator[Any]:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class DriverConnection(Protocol):
    """Minimal DB-API connection interface used by the executor."""

    def cursor(self, *args: Any, **kwargs: Any) -> DriverCursor:
        ...

    def close(self) -> None:
        ...


__all__ = [
    "Callback",
    "DriverConnection",
    "DriverCursor",
]
