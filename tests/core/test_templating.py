"""Tests for rdao.core.templating - descriptors, literals and placeholder merging."""

from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

import pytest

from rdao.core.errors import TemplateError
from rdao.core.templating import Query, get_real_sql, merge_params, sql_date, sql_param


class TestSqlParam:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "NULL"),
            (True, "1"),
            (False, "0"),
            (42, "42"),
            (-7, "-7"),
            (1.5, "1.5"),
            (Decimal("10.25"), "10.25"),
            ("O'Brien", "N'O''Brien'"),
            (b"\x01\x02", "0x0102"),
            (dt.date(2024, 5, 1), "'20240501'"),
            (uuid.UUID("12345678-1234-5678-1234-567812345678"), "N'12345678-1234-5678-1234-567812345678'"),
        ],
    )
    def test_scalars(self, value, expected):
        assert sql_param(value) == expected

    def test_sequence_for_in_clause(self):
        assert sql_param([1, "a", None]) == "1, N'a', NULL"

    def test_set_is_sorted(self):
        assert sql_param({3, 1, 2}) == "1, 2, 3"

    def test_empty_sequence_rejected(self):
        with pytest.raises(TemplateError, match="empty sequence"):
            sql_param([])

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), Decimal("NaN")])
    def test_non_finite_rejected(self, value):
        with pytest.raises(TemplateError, match="non-finite"):
            sql_param(value)

    def test_unsupported_type(self):
        with pytest.raises(TemplateError, match="Unsupported parameter type: object"):
            sql_param(object())


class TestSqlDate:
    def test_datetime(self):
        assert sql_date(dt.datetime(2024, 1, 31, 23, 59, 59)) == "'2024-01-31T23:59:59.000'"

    def test_iso_string(self):
        assert sql_date("2024-01-31T08:00:00") == "'2024-01-31T08:00:00.000'"

    def test_bad_string(self):
        with pytest.raises(TemplateError, match="ISO 8601"):
            sql_date("31/01/2024")

    def test_not_a_date(self):
        with pytest.raises(TemplateError):
            sql_date(20240131)


class TestMergeParamsNamed:
    def test_basic(self):
        sql = merge_params("SELECT * FROM t WHERE id = :id AND name = :name", {"id": 5, "name": "x"})
        assert sql == "SELECT * FROM t WHERE id = 5 AND name = N'x'"

    def test_repeated_name(self):
        assert merge_params(":a + :a", {"a": 2}) == "2 + 2"

    def test_missing_name(self):
        with pytest.raises(TemplateError, match="Missing parameter: id") as exc_info:
            merge_params("SELECT :id", {})
        assert exc_info.value.context.sql == "SELECT :id"

    def test_extra_names_ignored(self):
        assert merge_params("SELECT :a", {"a": 1, "b": 2}) == "SELECT 1"

    def test_quoted_text_untouched(self):
        sql = "SELECT ':notaparam', \"col:x\", [weird:col] FROM t WHERE a = :a"
        assert merge_params(sql, {"a": 1}) == "SELECT ':notaparam', \"col:x\", [weird:col] FROM t WHERE a = 1"

    def test_escaped_quote_inside_literal(self):
        assert merge_params("SELECT 'it''s :x', :y", {"y": 1}) == "SELECT 'it''s :x', 1"

    def test_comments_untouched(self):
        sql = "SELECT :a -- :b\n/* :c */ FROM t"
        assert merge_params(sql, {"a": 1}) == "SELECT 1 -- :b\n/* :c */ FROM t"

    def test_double_colon_untouched(self):
        assert merge_params("SELECT geography::Point(:lat, :lon, 4326)", {"lat": 1.5, "lon": 2.5}) == (
            "SELECT geography::Point(1.5, 2.5, 4326)"
        )

    def test_value_with_placeholder_text_not_rescanned(self):
        assert merge_params("SELECT :a, :b", {"a": ":b", "b": 1}) == "SELECT N':b', 1"


class TestMergeParamsPositional:
    def test_basic(self):
        assert merge_params("INSERT INTO t VALUES (?, ?)", [1, "a"]) == "INSERT INTO t VALUES (1, N'a')"

    def test_tuple(self):
        assert merge_params("SELECT ?", (None,)) == "SELECT NULL"

    def test_question_mark_in_literal(self):
        assert merge_params("SELECT '?', ?", [1]) == "SELECT '?', 1"

    def test_too_few(self):
        with pytest.raises(TemplateError, match="Not enough parameters"):
            merge_params("SELECT ?, ?", [1])

    def test_too_many(self):
        with pytest.raises(TemplateError, match="Too many parameters"):
            merge_params("SELECT ?", [1, 2])

    def test_none_params_returns_sql(self):
        assert merge_params("SELECT ?", None) == "SELECT ?"

    def test_bad_params_type(self):
        with pytest.raises(TemplateError, match="mapping or a sequence"):
            merge_params("SELECT ?", "abc")


class TestGetRealSql:
    def test_plain_string(self):
        assert get_real_sql("SELECT 1") == "SELECT 1"

    def test_query(self):
        assert get_real_sql(Query("SELECT :x", {"x": 1})) == "SELECT 1"

    def test_query_without_params(self):
        assert get_real_sql(Query("SELECT ':x'")) == "SELECT ':x'"

    def test_mapping(self):
        assert get_real_sql({"sql": "SELECT ?", "params": [3]}) == "SELECT 3"

    def test_mapping_without_sql(self):
        with pytest.raises(TemplateError, match="no 'sql' key"):
            get_real_sql({"params": [1]})

    def test_mapping_sql_not_string(self):
        with pytest.raises(TemplateError, match="must be a string"):
            get_real_sql({"sql": 42})

    def test_unsupported_descriptor(self):
        with pytest.raises(TemplateError, match="Unsupported query descriptor"):
            get_real_sql(42)
