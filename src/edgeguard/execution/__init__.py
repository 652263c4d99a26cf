"""Edgeguard execution: classification, backoff and the retry driver.

MODULE MAP
──────────
  1. backoff.py     ─ BackoffConfig + BackoffPolicy (delay schedule)
  2. classifier.py  ─ ErrorClassifier + pluggable ClassificationRules
  3. invoker.py     ─ RemoteInvoker (invoke / intercept_and_correct)
"""

from edgeguard.execution.backoff import BackoffConfig, BackoffPolicy
from edgeguard.execution.classifier import (
    DEFAULT_SIGNATURES,
    ClassificationRule,
    ErrorClassifier,
    PredicateRule,
    RegexRule,
    default_rules,
)
from edgeguard.execution.invoker import (
    PROGRESS_NOTICE_AFTER,
    InvocationState,
    RemoteInvoker,
)

__all__ = [
    # Backoff
    "BackoffConfig",
    "BackoffPolicy",
    # Classification
    "DEFAULT_SIGNATURES",
    "ClassificationRule",
    "ErrorClassifier",
    "PredicateRule",
    "RegexRule",
    "default_rules",
    # Retry driver
    "PROGRESS_NOTICE_AFTER",
    "InvocationState",
    "RemoteInvoker",
]
