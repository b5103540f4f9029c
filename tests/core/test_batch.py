"""Tests for rdao.core.batch - execute() dispatch and the Batch builder."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from rdao.core.accumulators import ExecutionOutcome
from rdao.core.batch import Batch, is_statement_list, run_exec, run_statements
from rdao.core.errors import TemplateError
from rdao.core.result import Err, Ok
from rdao.core.templating import Query


class FakeRunner:
    """Single-statement runner that fails on the statements listed in ``fail``."""

    def __init__(self, fail: tuple = ()):
        self.fail = fail
        self.seen: list = []

    def __call__(self, query):
        self.seen.append(query)
        if query in self.fail:
            return Err(RuntimeError(f"failed: {query}"))
        return Ok(ExecutionOutcome(1, len(self.seen)))


class TestIsStatementList:
    @pytest.mark.parametrize("value,expected", [(["a"], True), (("a",), True), ("a", False), ({"sql": "a"}, False)])
    def test_detection(self, value, expected):
        assert is_statement_list(value) is expected


class TestRunStatements:
    def test_all_succeed(self):
        runner = FakeRunner()
        result = run_statements(runner, ["a", "b"])
        assert [o.last_identity for o in result.unwrap()] == [1, 2]

    def test_stops_at_first_error(self):
        runner = FakeRunner(fail=("b",))
        result = run_statements(runner, ["a", "b", "c"])
        assert result.is_err()
        assert str(result.error) == "failed: b"
        assert runner.seen == ["a", "b"]

    def test_empty_list(self):
        assert run_statements(FakeRunner(), []).unwrap() == []


class TestRunExec:
    def test_single(self):
        assert run_exec(FakeRunner(), "a").unwrap() == ExecutionOutcome(1, 1)

    def test_list(self):
        assert len(run_exec(FakeRunner(), ("a", "b")).unwrap()) == 2

    def test_none(self):
        result = run_exec(FakeRunner(), None)
        assert isinstance(result.error, TemplateError)


class TestBatch:
    def test_add_wraps_params_in_query(self):
        batch = Batch(MagicMock())
        batch.add("INSERT INTO t VALUES (:a)", {"a": 1}).add("DELETE FROM t")
        assert batch.queries == (Query("INSERT INTO t VALUES (:a)", {"a": 1}), "DELETE FROM t")
        assert len(batch) == 2

    def test_params_require_raw_sql(self):
        with pytest.raises(TemplateError, match="raw SQL"):
            Batch(MagicMock()).add(Query("SELECT 1"), [1])

    def test_extend_and_clear(self):
        batch = Batch(MagicMock()).extend(["a", "b"])
        assert len(batch) == 2
        batch.clear()
        assert len(batch) == 0

    def test_run_delegates_to_execute_multiple(self):
        executor = MagicMock()
        callback = MagicMock()
        Batch(executor).add("a").add("b").run(callback)
        executor.execute_multiple.assert_called_once_with(["a", "b"], callback)
