"""
Result envelope for the executor's shared core routine.

Every executor operation runs one synchronous core routine on the worker
thread.  That routine returns ``Ok(value)`` or ``Err(error)`` instead of
raising, so the two public entry points (continuation and awaitable) can
each translate the same envelope into their own convention:

    ::

        ┌──────────────────┐      ┌───────────────────────────────┐
        │ core routine     │ ───> │ Ok(value) | Err(error)        │
        └──────────────────┘      └───────────────────────────────┘
                                     │                      │
                          callback(None, value)     await → value
                          callback(error, None)     await → raise error

Examples:
    >>> from rdao.core.result import Ok, Err, try_result
    >>> try_result(lambda: 1 + 1)
    Ok(2)
    >>> try_result(lambda: 1 / 0).is_err()
    True
    >>> Err(ValueError("boom")).to_callback_args()
    (ValueError('boom'), None)

Tags:
    result-type, error-handling, rdao

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from rdao.core.errors import RdaoError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def to_callback_args(self) -> tuple[Exception | None, T | None]:
        """``(error, result)`` pair for a continuation."""
        return None, self.value

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed outcome carrying ``error``; never carries a partial value."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def to_callback_args(self) -> tuple[Exception | None, T | None]:
        return self.error, None

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.error, RdaoError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {
                "error_type": type(self.error).__name__,
                "message": str(self.error),
            },
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Ok[T] | Err[T]


def try_result(f: Callable[[], T]) -> Result[T]:
    """Run ``f`` and wrap its return value or exception."""
    try:
        return Ok(f())
    except Exception as e:
        return Err(e)


__all__ = [
    "Ok",
    "Err",
    "Result",
    "try_result",
]
