"""
Edgeguard - resilient invocation layer for remote function calls.

- edgeguard.core:          errors, normalization, diagnostics, logging, settings
- edgeguard.execution:     classifier, backoff policy, retry driver
- edgeguard.notifications: toast facade and channels
- edgeguard.handling:      generic error handler
- edgeguard.monitoring:    monitoring sinks
- edgeguard.api:           FastAPI diagnostics router
"""

__version__ = "0.1.0"

from edgeguard.core import *  # noqa
from edgeguard.core import __all__ as _core_all
from edgeguard.core.settings import EdgeguardSettings
from edgeguard.execution import (
    BackoffConfig,
    BackoffPolicy,
    ErrorClassifier,
    PredicateRule,
    RegexRule,
    RemoteInvoker,
)
from edgeguard.handling import ErrorHandler, HandledError
from edgeguard.notifications import Notifier, ToastKind
from edgeguard.service import (
    ResilienceService,
    clear_diagnostics,
    get_service,
    handle,
    handle_async_error,
    intercept_and_correct,
    invoke,
    is_transient_false_positive,
    protected_call,
    reset_service,
    set_service,
    snapshot,
)

__all__ = [
    *_core_all,
    "EdgeguardSettings",
    "BackoffConfig",
    "BackoffPolicy",
    "ErrorClassifier",
    "PredicateRule",
    "RegexRule",
    "RemoteInvoker",
    "ErrorHandler",
    "HandledError",
    "Notifier",
    "ToastKind",
    "ResilienceService",
    "clear_diagnostics",
    "get_service",
    "handle",
    "handle_async_error",
    "intercept_and_correct",
    "invoke",
    "is_transient_false_positive",
    "protected_call",
    "reset_service",
    "set_service",
    "snapshot",
]
