"""
Shared pytest fixtures for rdao tests.

This module provides:
- Log capture (structlog) so executor diagnostics can be asserted on
- ``fake_conn``: a scripted stand-in for a ``pymssql`` connection
- ``open_executor`` / ``bulk_executor`` / ``any_executor``: opened executors

Usage:
    def test_list(open_executor, fake_conn):
        fake_conn.script([(["Id"], [(1,), (2,)])])
        assert open_executor.fetch_list("SELECT Id FROM t").result(5).unwrap() == [1, 2]
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog
from structlog.testing import capture_logs

# Ensure rdao and tests._support are importable
_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(_ROOT / "src"))
sys.path.insert(0, str(_ROOT))

from rdao.core.adapters.mssql import MSSQLExecutor  # noqa: E402
from tests._support import TEST_TARGET, TIMEOUT, FakeConnection  # noqa: E402


@pytest.fixture(autouse=True)
def log_events():
    """Capture structlog events for the duration of each test."""
    structlog.reset_defaults()
    with capture_logs() as logs:
        yield logs
    structlog.reset_defaults()


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def connect_mock(fake_conn):
    with patch("pymssql.connect", return_value=fake_conn) as mock_connect:
        yield mock_connect


def _open(executor: MSSQLExecutor) -> MSSQLExecutor:
    result = executor.open(TEST_TARGET).result(TIMEOUT)
    assert result.is_ok(), result
    return executor


@pytest.fixture
def open_executor(connect_mock):
    executor = _open(MSSQLExecutor())
    yield executor
    executor.close().result(TIMEOUT)


@pytest.fixture
def bulk_executor(connect_mock):
    executor = _open(MSSQLExecutor(delivery_mode="bulk"))
    yield executor
    executor.close().result(TIMEOUT)


@pytest.fixture(params=["stream", "bulk"])
def any_executor(request, connect_mock):
    """Parametrized over both delivery modes."""
    executor = _open(MSSQLExecutor(delivery_mode=request.param))
    yield executor
    executor.close().result(TIMEOUT)
