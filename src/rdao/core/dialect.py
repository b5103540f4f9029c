"""SQL dialect abstraction for SQL text generation.

The templating module and the executor never hard-code SQL Server syntax;
they ask a ``Dialect`` for literals, the trailing outcome clause and the
catalog introspection query.  Only ``MSSQLDialect`` ships, but a second
backend registers its own dialect with :func:`register_dialect`.

Architecture::

    templating.sql_param(value)  ─┐
    executor.execute_single()     ├──► Dialect ──► MSSQLDialect
    executor.describe_table()    ─┘                N'it''s', 0x0A0B,
                                                   SELECT @@ROWCOUNT, ...

Examples:
    >>> from rdao.core.dialect import get_dialect
    >>> d = get_dialect("mssql")
    >>> d.string_literal("it's")
    "N'it''s'"
    >>> d.placeholder(0)
    '%s'

Guardrails:
    ❌ DON'T: Splice caller-supplied identifiers into catalog SQL
    ✅ DO: Bind them as parameters and run them through validate_identifier()

Tags:
    dialect, sql, mssql, sql-server, rdao
"""

from __future__ import annotations

import datetime as dt
from typing import Protocol, runtime_checkable

from rdao.core.errors import InvalidIdentifierError

# sysname length
MAX_IDENTIFIER_LENGTH = 128


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a **SQL fragment** (string) valid for the target
    database.
    """

    @property
    def name(self) -> str:
        ...

    def placeholder(self, index: int) -> str:
        """Driver placeholder for a bound parameter."""
        ...

    def null_literal(self) -> str:
        ...

    def boolean_literal(self, value: bool) -> str:
        ...

    def string_literal(self, value: str) -> str:
        """Quoted, escaped string literal."""
        ...

    def binary_literal(self, value: bytes) -> str:
        ...

    def datetime_literal(self, value: dt.datetime | dt.date | dt.time) -> str:
        ...

    def outcome_clause(self) -> str:
        """Statement appended to a write to report (rows-affected, last-identity)."""
        ...

    def describe_table_query(self) -> str:
        """Catalog query returning column names of one table, in order.

        Takes the table name as its single bound parameter.
        """
        ...

    def validate_identifier(self, name: str) -> str:
        """Return ``name`` unchanged or raise InvalidIdentifierError.

        Accepts any non-empty name of at most 128 characters.
        """
        ...


class MSSQLDialect:
    """Microsoft SQL Server (T-SQL) dialect, ``pymssql`` ``%s`` paramstyle."""

    @property
    def name(self) -> str:
        return "mssql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def null_literal(self) -> str:
        return "NULL"

    def boolean_literal(self, value: bool) -> str:
        return "1" if value else "0"

    def string_literal(self, value: str) -> str:
        return "N'" + value.replace("'", "''") + "'"

    def binary_literal(self, value: bytes) -> str:
        return "0x" + value.hex().upper() if value else "0x"

    def datetime_literal(self, value: dt.datetime | dt.date | dt.time) -> str:
        # ISO 8601 with 'T' is interpreted the same regardless of DATEFORMAT.
        if isinstance(value, dt.datetime):
            text = value.isoformat(timespec="milliseconds")
            if value.tzinfo is None:
                return f"'{text}'"
            return f"CAST('{text}' AS DATETIMEOFFSET)"
        if isinstance(value, dt.date):
            return f"'{value.strftime('%Y%m%d')}'"
        return f"'{value.isoformat()}'"

    def outcome_clause(self) -> str:
        return "SELECT @@ROWCOUNT AS rows_affected, SCOPE_IDENTITY() AS last_identity"

    def describe_table_query(self) -> str:
        return (
            "SELECT col.name FROM sys.tables AS tab "
            "INNER JOIN sys.columns AS col ON tab.object_id = col.object_id "
            f"WHERE tab.name = {self.placeholder(0)} ORDER BY col.column_id"
        )

    def validate_identifier(self, name: str) -> str:
        # Any sysname; the value is bound, never spliced into SQL.
        if not isinstance(name, str) or not 0 < len(name) <= MAX_IDENTIFIER_LENGTH:
            raise InvalidIdentifierError(name)
        return name


# =========================================================================
# Registry / Factory
# =========================================================================

# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "mssql": MSSQLDialect(),
    "sqlserver": MSSQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'sqlserver'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (lower-cased key)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "MSSQLDialect",
    "get_dialect",
    "register_dialect",
]
