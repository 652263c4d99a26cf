"""
Structured error types for the remote invocation layer.

Remote calls fail in three broad ways, and each is handled differently:

- **Transient (false-positive limit):** the backend reports a quota or
  invocation limit that is known to be spurious. Retried automatically and
  hidden from failure toasts while retrying.
- **Application:** a genuine domain failure (validation, not found, conflict).
  Never retried; surfaced through a failure toast and, when it carries a
  ``code``, forwarded to monitoring.
- **Unknown:** a malformed raised value with no usable message. Normalized to
  the fallback text and treated like an application error.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                       EdgeguardError                         │
        │   (category, retryable, code, status_code, context, cause)   │
        ├──────────────────────────────────────────────────────────────┤
        │                                                              │
        │  AppError              FalsePositiveLimitError               │
        │  (APPLICATION)         (TRANSIENT, FALSE_POSITIVE_LIMIT)     │
        │                                                              │
        │  InvocationTimeoutError   ConfigError                        │
        │  (TIMEOUT)                (CONFIG)                           │
        │                               │                              │
        │                           InvalidConfigError                 │
        └──────────────────────────────────────────────────────────────┘

Examples:
    Raising a domain error that the handler will forward to monitoring:

    >>> raise AppError("Slot already booked", code="SLOT_TAKEN", status_code=409)
    Traceback (most recent call last):
    ...
    AppError: Slot already booked

    Chaining the original remote error:

    >>> try:
    ...     raise RuntimeError("Edge function quota exceeded")
    ... except RuntimeError as e:
    ...     err = FalsePositiveLimitError("book-appointment", cause=e)
    >>> err.code
    'FALSE_POSITIVE_LIMIT'

Tags:
    error-handling, exception-hierarchy, error-taxonomy, edgeguard
"""

from __future__ import annotations

from enum import Enum
from typing import Any

FALSE_POSITIVE_CODE = "FALSE_POSITIVE_LIMIT"


class ErrorCategory(str, Enum):
    """Error categories used for routing, logging and retry decisions."""

    TRANSIENT = "TRANSIENT"       # Known spurious limit/quota errors
    APPLICATION = "APPLICATION"   # Domain failures raised by remote operations
    TIMEOUT = "TIMEOUT"           # Attempt exceeded its deadline
    CONFIG = "CONFIG"             # Invalid layer configuration
    UNKNOWN = "UNKNOWN"           # Anything we cannot classify


class EdgeguardError(Exception):
    """
    Base exception for all errors raised by this library.

    Carries a category, a retryable flag, an optional machine-readable
    ``code`` and HTTP-style ``status_code``, free-form context and the
    underlying cause. Subclasses set ``default_category`` and
    ``default_retryable``.
    """

    default_category: ErrorCategory = ErrorCategory.UNKNOWN
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.code is not None:
            result["code"] = self.code
        if self.status_code is not None:
            result["status_code"] = self.status_code
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class AppError(EdgeguardError):
    """Application/domain error carrying ``code`` and ``status_code``."""

    default_category = ErrorCategory.APPLICATION


class FalsePositiveLimitError(EdgeguardError):
    """
    Rewritten terminal failure for a known false-positive limit error.

    Raised by ``RemoteInvoker.intercept_and_correct`` once retries are
    exhausted on an error the classifier recognised. The original error is
    kept as ``cause``.
    """

    default_category = ErrorCategory.TRANSIENT
    default_retryable = True

    def __init__(
        self,
        operation: str,
        *,
        attempts: int | None = None,
        cause: BaseException | None = None,
        message: str | None = None,
    ):
        self.operation = operation
        self.attempts = attempts
        super().__init__(
            message
            or (
                f"'{operation}' reported a usage limit that is a known false positive; "
                "the platform is not over capacity. Please try again shortly."
            ),
            code=FALSE_POSITIVE_CODE,
            cause=cause,
            context={"operation": operation, "attempts": attempts},
        )


class InvocationTimeoutError(EdgeguardError):
    """A single attempt exceeded its per-attempt timeout."""

    default_category = ErrorCategory.TIMEOUT

    def __init__(self, operation: str, timeout: float, attempt: int):
        self.operation = operation
        self.timeout = timeout
        self.attempt = attempt
        super().__init__(
            f"Operation '{operation}' timed out after {timeout}s (attempt {attempt})",
            code="INVOCATION_TIMEOUT",
            context={"operation": operation, "timeout": timeout, "attempt": attempt},
        )


class ConfigError(EdgeguardError):
    """Configuration error. Never retryable."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, EdgeguardError):
        return error.category
    if isinstance(error, TimeoutError):
        return ErrorCategory.TIMEOUT
    return ErrorCategory.UNKNOWN


__all__ = [
    "FALSE_POSITIVE_CODE",
    "ErrorCategory",
    "EdgeguardError",
    "AppError",
    "FalsePositiveLimitError",
    "InvocationTimeoutError",
    "ConfigError",
    "InvalidConfigError",
    "categorize_error",
]
