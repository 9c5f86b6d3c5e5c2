"""
Structured error types for serial-spine.

The serial executor never wraps the errors raised by submitted work: a
work item's exception reaches its caller as the very same object.  The
types here cover the few ways a *caller* can misuse the executor itself,
and follow the same shape (category, context, ``to_dict``) so they log
cleanly through structlog.

Manifesto:
    - **Verbatim work errors:** Work item failures are never re-typed
    - **Typed misuse errors:** Misuse is reported with a dedicated class
    - **Stdlib-compatible:** Each error also subclasses the builtin a
      caller would naturally catch (``TypeError``, ``RuntimeError``)

Architecture:
    ::

        SerialSpineError (category, context)
          ├── InvalidWorkError   (VALIDATION, TypeError)
          └── ExecutorLoopError  (EXECUTION, RuntimeError)

Examples:
    >>> error = InvalidWorkError("work must be callable").with_context(got="int")
    >>> error.to_dict()["category"]
    'VALIDATION'

Tags:
    error-handling, exception-hierarchy, serial-spine, observability

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    EXECUTION = "EXECUTION"
    VALIDATION = "VALIDATION"
    INTERNAL = "INTERNAL"


class SerialSpineError(Exception):
    """
    Base exception for all serial-spine errors.

    Carries a :class:`ErrorCategory` and a free-form ``context`` dict that
    ends up in structured log output via :meth:`to_dict`.

    Subclasses set ``default_category`` for their domain.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SerialSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ExecutorLoopError("wrong loop").with_context(executor="cache")
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class InvalidWorkError(SerialSpineError, TypeError):
    """Submitted work item is not a zero-argument callable."""

    default_category = ErrorCategory.VALIDATION


class ExecutorLoopError(SerialSpineError, RuntimeError):
    """Submission from an event loop other than the one currently draining."""

    default_category = ErrorCategory.EXECUTION


__all__ = [
    "ErrorCategory",
    "SerialSpineError",
    "InvalidWorkError",
    "ExecutorLoopError",
]
