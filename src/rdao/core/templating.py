"""Query descriptors and SQL text resolution.

A *query descriptor* is whatever a caller hands an executor operation:

- raw SQL text (``str``), submitted as-is;
- a :class:`Query` (template plus parameter bindings);
- a mapping ``{"sql": ..., "params": ...}``.

``get_real_sql()`` turns any of these into final SQL text.  Named
placeholders (``:name``) bind from a mapping, positional placeholders
(``?``) bind from a sequence.  Values are rendered as literals by
``sql_param()`` through the active :class:`~rdao.core.dialect.Dialect`.
Placeholders inside string literals, quoted or bracketed identifiers and
comments are left alone.

Examples:
    >>> from rdao.core.templating import Query, get_real_sql
    >>> get_real_sql(Query("SELECT * FROM t WHERE name = :name", {"name": "O'Hara"}))
    "SELECT * FROM t WHERE name = N'O''Hara'"
    >>> get_real_sql({"sql": "SELECT ? + ?", "params": [1, 2]})
    'SELECT 1 + 2'
    >>> sql_param([1, 2, 3])
    '1, 2, 3'
"""

from __future__ import annotations

import datetime as dt
import math
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from rdao.core.dialect import Dialect, get_dialect
from rdao.core.errors import TemplateError

QueryDescriptor = Any  # str | Query | Mapping[str, Any]


@dataclass(frozen=True)
class Query:
    """SQL template plus its parameter bindings."""

    sql: str
    params: Mapping[str, Any] | Sequence[Any] | None = field(default=None)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Query:
        if "sql" not in data:
            raise TemplateError("Query mapping has no 'sql' key")
        sql = data["sql"]
        if not isinstance(sql, str):
            raise TemplateError(f"Query 'sql' must be a string, got {type(sql).__name__}")
        return cls(sql=sql, params=data.get("params"))


def _dialect(dialect: Dialect | None) -> Dialect:
    return dialect if dialect is not None else get_dialect("mssql")


def sql_date(value: dt.date | dt.datetime | dt.time | str, dialect: Dialect | None = None) -> str:
    """Render a date/time value (or ISO 8601 string) as a SQL literal."""
    if isinstance(value, str):
        try:
            value = dt.datetime.fromisoformat(value)
        except ValueError:
            raise TemplateError(f"Not an ISO 8601 date/time: {value!r}") from None
    if not isinstance(value, (dt.date, dt.time)):
        raise TemplateError(f"Not a date/time value: {value!r}")
    return _dialect(dialect).datetime_literal(value)


def sql_param(value: Any, dialect: Dialect | None = None) -> str:
    """Render one Python value as a SQL literal.

    Sequences (list, tuple, set) render as a comma-separated list so that
    ``IN (:ids)`` works.
    """
    d = _dialect(dialect)
    if value is None:
        return d.null_literal()
    if isinstance(value, bool):
        return d.boolean_literal(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise TemplateError(f"Cannot render non-finite float: {value!r}")
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise TemplateError(f"Cannot render non-finite decimal: {value!r}")
        return str(value)
    if isinstance(value, str):
        return d.string_literal(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return d.binary_literal(bytes(value))
    if isinstance(value, (dt.date, dt.time)):
        return d.datetime_literal(value)
    if isinstance(value, uuid.UUID):
        return d.string_literal(str(value))
    if isinstance(value, (list, tuple, set, frozenset)):
        if not value:
            raise TemplateError("Cannot render an empty sequence")
        items = sorted(value, key=repr) if isinstance(value, (set, frozenset)) else value
        return ", ".join(sql_param(item, d) for item in items)
    raise TemplateError(f"Unsupported parameter type: {type(value).__name__}")


def _is_name_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _skip_quoted(sql: str, i: int, close: str) -> int:
    """Index just past the quoted run starting at ``sql[i]``.

    A doubled closing character is an escape, not a terminator.
    """
    n = len(sql)
    i += 1
    while i < n:
        if sql[i] == close:
            if i + 1 < n and sql[i + 1] == close:
                i += 2
                continue
            return i + 1
        i += 1
    return n


def merge_params(
    sql: str,
    params: Mapping[str, Any] | Sequence[Any] | None,
    dialect: Dialect | None = None,
) -> str:
    """Substitute placeholders in ``sql`` with rendered literals.

    Raises:
        TemplateError: On a missing named parameter, or when the number of
            ``?`` placeholders differs from the number of positional values.
    """
    if params is None:
        return sql
    d = _dialect(dialect)
    named = isinstance(params, Mapping)
    if not named and (isinstance(params, (str, bytes)) or not isinstance(params, Sequence)):
        raise TemplateError(f"Parameters must be a mapping or a sequence, got {type(params).__name__}")

    out: list[str] = []
    position = 0
    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if ch == "'":
            end = _skip_quoted(sql, i, "'")
            out.append(sql[i:end])
            i = end
        elif ch == '"':
            end = _skip_quoted(sql, i, '"')
            out.append(sql[i:end])
            i = end
        elif ch == "[":
            end = _skip_quoted(sql, i, "]")
            out.append(sql[i:end])
            i = end
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            end = n if end == -1 else end
            out.append(sql[i:end])
            i = end
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = n if end == -1 else end + 2
            out.append(sql[i:end])
            i = end
        elif ch == ":" and named and i + 1 < n and _is_name_start(sql[i + 1]) and (i == 0 or sql[i - 1] != ":"):
            j = i + 1
            while j < n and _is_name_char(sql[j]):
                j += 1
            key = sql[i + 1 : j]
            if key not in params:
                raise TemplateError(f"Missing parameter: {key}").with_context(sql=sql)
            out.append(sql_param(params[key], d))
            i = j
        elif ch == "?" and not named:
            if position >= len(params):
                raise TemplateError(
                    f"Not enough parameters: placeholder #{position + 1} has no value"
                ).with_context(sql=sql)
            out.append(sql_param(params[position], d))
            position += 1
            i += 1
        else:
            out.append(ch)
            i += 1

    if not named and position != len(params):
        raise TemplateError(
            f"Too many parameters: {len(params)} given, {position} placeholders"
        ).with_context(sql=sql)
    return "".join(out)


def get_real_sql(query: QueryDescriptor, dialect: Dialect | None = None) -> str:
    """Resolve a query descriptor to final SQL text."""
    if isinstance(query, str):
        return query
    if isinstance(query, Query):
        return merge_params(query.sql, query.params, dialect)
    if isinstance(query, Mapping):
        q = Query.from_mapping(query)
        return merge_params(q.sql, q.params, dialect)
    raise TemplateError(f"Unsupported query descriptor: {type(query).__name__}")


__all__ = [
    "Query",
    "QueryDescriptor",
    "get_real_sql",
    "merge_params",
    "sql_date",
    "sql_param",
]
