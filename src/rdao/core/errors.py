"""
Structured error types for the RDAO adapter.

Driver errors (connect, execute, disconnect) are never wrapped: they reach
the caller's continuation exactly as ``pymssql`` raised them.  The types in
this module cover the errors the adapter raises *itself*: bad configuration,
unresolvable query descriptors, rejected identifiers, and misuse of an
executor's lifecycle.

Manifesto:
    - **Pass-through for the driver:** Callers already know how to read
      ``pymssql`` errors; re-wrapping them hides the error number.
    - **Typed errors for the adapter:** Everything the adapter decides to
      reject carries a category and structured context.
    - **Error chaining:** Preserve original exceptions as ``cause``.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                          RdaoError                            │
        │            (category, retryable, context, cause)              │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConfigError          QueryError            ExecutorStateError│
        │  (CONFIG)             (QUERY)               (STATE)           │
        │      │                    │                      │            │
        │  MissingConfigError   TemplateError        ConnectionClosed   │
        │  InvalidConfigError   InvalidIdentifier    ExecutorBusyError  │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = TemplateError("Missing parameter: id")
    >>> error.category
    <ErrorCategory.QUERY: 'QUERY'>
    >>> error.with_context(operation="fetch_table").context.operation
    'fetch_table'

Guardrails:
    ❌ DON'T: Wrap ``pymssql`` errors in RdaoError before delivering them
    ✅ DO: Deliver driver errors unchanged

    ❌ DON'T: Raise plain Exception for adapter-level rejections
    ✅ DO: Use the matching RdaoError subclass

Tags:
    error-handling, exception-hierarchy, error-context, rdao

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        CONFIG: Missing or invalid connection settings, missing driver
        QUERY: Descriptor resolution or identifier validation failures
        STATE: Executor used outside its open → execute → close lifecycle
        DATABASE: Reserved for callers classifying driver errors
        INTERNAL: Bugs, unexpected state
    """

    CONFIG = "CONFIG"
    QUERY = "QUERY"
    STATE = "STATE"
    DATABASE = "DATABASE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    ``to_dict()`` serializes only the fields that were set, so the context
    can be passed straight into a structlog event.

    Attributes:
        operation: Executor operation that raised (``fetch_table`` ...)
        sql: Resolved SQL text, when resolution got that far
        table: Table name for introspection errors
        target: Redacted connection target
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    sql: str | None = None
    table: str | None = None
    target: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "sql", "table", "target"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RdaoError(Exception):
    """
    Base exception for all errors raised by the adapter itself.

    Subclasses set ``default_category`` and ``default_retryable`` so call
    sites only pass a message (and optionally a cause).

    Examples:
        >>> error = RdaoError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    # Default category for this error type
    default_category: ErrorCategory = ErrorCategory.INTERNAL

    # Default retryable setting
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RdaoError:
        """
        Add context to this error (fluent API).

        Usage:
            raise TemplateError("Missing parameter").with_context(
                operation="fetch_list",
                sql="SELECT * FROM t WHERE id = :id",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(RdaoError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# QUERY ERRORS
# =============================================================================


class QueryError(RdaoError):
    """A query descriptor could not be turned into SQL text."""

    default_category = ErrorCategory.QUERY


class TemplateError(QueryError):
    """Descriptor shape is wrong or a placeholder has no bound value."""

    pass


class InvalidIdentifierError(QueryError):
    """An identifier was rejected before reaching the catalog query."""

    def __init__(self, identifier: Any, message: str | None = None):
        self.identifier = identifier
        super().__init__(message or f"Invalid SQL identifier: {identifier!r}")


# =============================================================================
# EXECUTOR STATE ERRORS
# =============================================================================


class ExecutorStateError(RdaoError):
    """Executor used outside its open -> execute -> close lifecycle."""

    default_category = ErrorCategory.STATE


class ConnectionClosedError(ExecutorStateError):
    """Operation submitted to an executor that is not open."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Connection is not open; cannot run {operation}")


class ExecutorBusyError(ExecutorStateError):
    """Operation submitted while another one is still in flight."""

    def __init__(self, operation: str, running: str | None = None):
        self.operation = operation
        self.running = running
        detail = f" ({running} in flight)" if running else ""
        super().__init__(f"Executor busy; cannot run {operation}{detail}")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable.

    Only meaningful for :class:`RdaoError`; driver errors report ``False``
    because the adapter has no basis to classify them.
    """
    if isinstance(error, RdaoError):
        return error.retryable
    return False


def error_code(error: BaseException) -> Any:
    """Best-effort error code for logging.

    ``pymssql`` errors carry the server message number as ``number`` or as
    the first positional argument; adapter errors report their class name.
    """
    if isinstance(error, RdaoError):
        return error.__class__.__name__
    number = getattr(error, "number", None)
    if number is not None:
        return number
    if error.args and isinstance(error.args[0], int):
        return error.args[0]
    return error.__class__.__name__


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "RdaoError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "QueryError",
    "TemplateError",
    "InvalidIdentifierError",
    "ExecutorStateError",
    "ConnectionClosedError",
    "ExecutorBusyError",
    "is_retryable",
    "error_code",
]
