"""
Edgeguard core primitives.

- errors:      typed error hierarchy (AppError, FalsePositiveLimitError, ...)
- normalize:   any raised value -> NormalizedError
- diagnostics: bounded store of classified events
- logging:     structlog configuration
- settings:    pydantic-settings configuration
"""

from edgeguard.core.diagnostics import (
    ClassifiedError,
    DiagnosticsSnapshot,
    DiagnosticsStore,
)
from edgeguard.core.errors import (
    FALSE_POSITIVE_CODE,
    AppError,
    ConfigError,
    EdgeguardError,
    ErrorCategory,
    FalsePositiveLimitError,
    InvalidConfigError,
    InvocationTimeoutError,
    categorize_error,
)
from edgeguard.core.normalize import (
    FALLBACK_MESSAGE,
    NormalizedError,
    extract_message,
    get_message,
    normalize,
)

__all__ = [
    # Diagnostics
    "ClassifiedError",
    "DiagnosticsSnapshot",
    "DiagnosticsStore",
    # Errors
    "FALSE_POSITIVE_CODE",
    "AppError",
    "ConfigError",
    "EdgeguardError",
    "ErrorCategory",
    "FalsePositiveLimitError",
    "InvalidConfigError",
    "InvocationTimeoutError",
    "categorize_error",
    # Normalization
    "FALLBACK_MESSAGE",
    "NormalizedError",
    "extract_message",
    "get_message",
    "normalize",
]
