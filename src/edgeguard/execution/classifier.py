"""
Classification of spurious "limit exceeded" failures.

The remote-function backend occasionally reports quota or invocation-limit
errors that do not reflect real capacity. Those failures are safe to retry,
so the retry driver and the generic handler both ask the classifier first.

Manifesto:
    - **Rules, not control flow:** signatures are ``ClassificationRule``
      objects; adding one never touches the retry loop
    - **Single writer:** a positive classification is the only thing that
      records into the diagnostics store
    - **Message-based:** rules see the normalized message, so strings,
      dicts and exceptions classify identically

Architecture:
    ::

        raw error ──► extract_message() ──► rules (first match wins)
                                                 │
                              match ─────────────┼──────────── no match
                                │                               │
                    ClassifiedError → DiagnosticsStore        False
                    logger.warning("false_positive_detected")
                                │
                               True

Examples:
    >>> classifier = ErrorClassifier(DiagnosticsStore())
    >>> classifier.is_transient_false_positive("Edge Function quota exceeded")
    True
    >>> classifier.is_transient_false_positive("Appointment slot unavailable")
    False

    Adding a signature:

    >>> classifier.add_rule(RegexRule("gateway_429", r"too many requests"))

Tags:
    classification, rule-engine, transient-errors, edgeguard
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from edgeguard.core.diagnostics import ClassifiedError, DiagnosticsStore
from edgeguard.core.logging import get_logger
from edgeguard.core.normalize import extract_message

logger = get_logger(__name__)


@runtime_checkable
class ClassificationRule(Protocol):
    """A named predicate over a normalized error message."""

    @property
    def name(self) -> str:
        ...

    def matches(self, message: str) -> bool:
        ...


class RegexRule:
    """Case-insensitive regular-expression signature."""

    def __init__(self, name: str, pattern: str | re.Pattern[str]):
        self._name = name
        if isinstance(pattern, re.Pattern):
            self._pattern = re.compile(pattern.pattern, pattern.flags | re.IGNORECASE)
        else:
            self._pattern = re.compile(pattern, re.IGNORECASE)

    @property
    def name(self) -> str:
        return self._name

    @property
    def pattern(self) -> str:
        return self._pattern.pattern

    def matches(self, message: str) -> bool:
        return self._pattern.search(message) is not None

    def __repr__(self) -> str:
        return f"RegexRule({self._name!r}, {self._pattern.pattern!r})"


@dataclass(frozen=True)
class PredicateRule:
    """Wraps any ``str -> bool`` callable as a rule."""

    name: str
    predicate: Callable[[str], bool]

    def matches(self, message: str) -> bool:
        return bool(self.predicate(message))


DEFAULT_SIGNATURES: tuple[tuple[str, str], ...] = (
    ("max_invocations", r"maximum.*edge function.*invocations"),
    ("limit_reached", r"edge function.*limit.*reached"),
    ("invocation_limit_exceeded", r"invocation.*limit.*exceeded"),
    ("too_many_calls", r"too many.*edge function.*calls"),
    ("quota_exceeded", r"edge function.*quota.*exceeded"),
)


def default_rules() -> list[ClassificationRule]:
    """Fresh list of the built-in false-positive signatures."""
    return [RegexRule(name, pattern) for name, pattern in DEFAULT_SIGNATURES]


class ErrorClassifier:
    """Decides whether an error is a known transient false positive."""

    def __init__(
        self,
        store: DiagnosticsStore | None = None,
        rules: Iterable[ClassificationRule] | None = None,
    ):
        self.store = store if store is not None else DiagnosticsStore()
        self._rules: list[ClassificationRule] = (
            list(rules) if rules is not None else default_rules()
        )

    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return tuple(self._rules)

    def add_rule(self, rule: ClassificationRule) -> None:
        """Register an additional signature (evaluated after existing ones)."""
        self._rules.append(rule)

    def remove_rule(self, name: str) -> bool:
        """Drop every rule called ``name``; True if something was removed."""
        before = len(self._rules)
        self._rules = [rule for rule in self._rules if rule.name != name]
        return len(self._rules) != before

    def classify(self, raw: Any) -> str | None:
        """Name of the first matching rule, or None.

        A rule that raises is logged and treated as not matching.
        """
        message = extract_message(raw)
        for rule in self._rules:
            try:
                matched = rule.matches(message)
            except Exception as exc:
                logger.warning(
                    "classification_rule_failed",
                    rule=getattr(rule, "name", repr(rule)),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                continue
            if matched:
                return rule.name
        return None

    def is_transient_false_positive(self, raw: Any, *, operation: str | None = None) -> bool:
        """True iff ``raw`` matches a signature; records and logs the match."""
        message = extract_message(raw)
        rule_name = self.classify(message)
        if rule_name is None:
            return False

        entry = ClassifiedError(message=message, operation=operation, rule=rule_name)
        self.store.record(entry)
        logger.warning(
            "false_positive_detected",
            message=message,
            rule=rule_name,
            operation=operation,
            detected_at=entry.timestamp.isoformat(),
            action="auto_retry",
        )
        return True


__all__ = [
    "ClassificationRule",
    "RegexRule",
    "PredicateRule",
    "DEFAULT_SIGNATURES",
    "default_rules",
    "ErrorClassifier",
]
