"""
Test support utilities for rdao tests.

Scripted stand-ins for a ``pymssql`` connection and a recorder for
``callback(error, result)`` continuations.  Fixtures built on them live in
``tests/conftest.py``.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Any

import structlog

TIMEOUT = 5

TEST_TARGET = {"host": "sql01", "database": "Shop", "username": "app", "password": "pw"}


class FakeCursor:
    """DB-API cursor over a fixed list of ``(columns, rows)`` result sets.

    ``columns=None`` models a statement that returns no rows (an INSERT).
    With ``fail_after=n`` the statement starts fine and ``error`` is raised
    once ``n`` rows have been delivered, counted across result sets.
    """

    def __init__(self, result_sets: list, *, as_dict: bool = False, error: Exception | None = None,
                 gate: threading.Event | None = None, fail_after: int | None = None):
        self._sets = list(result_sets)
        self._index = 0
        self.as_dict = as_dict
        self.error = error
        self.gate = gate
        self.fail_after = fail_after
        self.delivered = 0
        self.log_context: dict[str, Any] = {}
        self.executed: list[tuple[str, Any]] = []
        self.closed = False

    @property
    def description(self):
        if self._index >= len(self._sets):
            return None
        columns = self._sets[self._index][0]
        if not columns:
            return None
        return tuple((name, 1, None, None, None, None, None) for name in columns)

    def execute(self, operation: str, params: Any = None) -> None:
        self.executed.append((operation, params))
        self.log_context = structlog.contextvars.get_contextvars()
        if self.gate is not None:
            self.gate.wait(TIMEOUT)
        if self.error is not None and self.fail_after is None:
            raise self.error

    def _rows(self) -> list:
        if self._index >= len(self._sets):
            return []
        columns, rows = self._sets[self._index]
        if self.as_dict:
            return [dict(zip(columns, row)) for row in rows]
        return [tuple(row) for row in rows]

    def fetchone(self):
        rows = self._rows()
        return rows[0] if rows else None

    def fetchall(self) -> list:
        rows = self._rows()
        if self.fail_after is not None and self.delivered + len(rows) > self.fail_after:
            raise self.error
        self.delivered += len(rows)
        return rows

    def __iter__(self):
        for row in self._rows():
            if self.fail_after is not None and self.delivered >= self.fail_after:
                raise self.error
            self.delivered += 1
            yield row

    def nextset(self):
        self._index += 1
        return True if self._index < len(self._sets) else None

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    """Hands out one scripted cursor per ``cursor()`` call."""

    def __init__(self):
        self._scripts: deque = deque()
        self.cursors: list[FakeCursor] = []
        self.closed = False

    def script(self, result_sets: list | None = None, *, error: Exception | None = None,
               gate: threading.Event | None = None, fail_after: int | None = None) -> FakeConnection:
        self._scripts.append((result_sets or [], error, gate, fail_after))
        return self

    def cursor(self, as_dict: bool = False) -> FakeCursor:
        result_sets, error, gate, fail_after = self._scripts.popleft() if self._scripts else ([], None, None, None)
        cursor = FakeCursor(result_sets, as_dict=as_dict, error=error, gate=gate, fail_after=fail_after)
        self.cursors.append(cursor)
        return cursor

    @property
    def last_sql(self) -> str:
        return self.cursors[-1].executed[-1][0]

    @property
    def last_params(self) -> Any:
        return self.cursors[-1].executed[-1][1]

    def close(self) -> None:
        self.closed = True


class DriverError(Exception):
    """Stands in for ``pymssql.OperationalError`` (number + message)."""

    def __init__(self, number: int, message: str):
        super().__init__(number, message)
        self.number = number


class CallbackRecorder:
    """Callable continuation that records ``(error, result)`` once."""

    def __init__(self):
        self.calls: list[tuple[Exception | None, Any]] = []
        self._done = threading.Event()

    def __call__(self, error: Exception | None, result: Any) -> None:
        self.calls.append((error, result))
        self._done.set()

    def wait(self) -> tuple[Exception | None, Any]:
        assert self._done.wait(TIMEOUT), "callback was not invoked"
        return self.calls[0]



def assert_dict_subset(actual: dict, expected: dict, path: str = "") -> None:
    """Assert that ``expected`` is a subset of ``actual`` (recursive)."""
    for key, expected_value in expected.items():
        current_path = f"{path}.{key}" if path else key
        assert key in actual, f"Missing key at {current_path}"
        actual_value = actual[key]
        if isinstance(expected_value, dict) and isinstance(actual_value, dict):
            assert_dict_subset(actual_value, expected_value, current_path)
        else:
            assert actual_value == expected_value, (
                f"Mismatch at {current_path}: "
                f"expected {expected_value!r}, got {actual_value!r}"
            )
