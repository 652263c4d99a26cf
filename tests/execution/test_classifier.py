"""Tests for false-positive classification."""

import re

import pytest

from edgeguard.execution.classifier import (
    DEFAULT_SIGNATURES,
    ClassificationRule,
    ErrorClassifier,
    PredicateRule,
    RegexRule,
)
from tests._support.operations import FALSE_POSITIVE, GENUINE


class TestDefaultSignatures:
    """Each built-in signature, in any casing."""

    @pytest.mark.parametrize(
        "message, rule",
        [
            ("Maximum edge function invocations reached", "max_invocations"),
            ("Edge Function call limit has been reached", "limit_reached"),
            ("Invocation rate limit exceeded for project", "invocation_limit_exceeded"),
            ("Too many Edge Function calls in window", "too_many_calls"),
            ("EDGE FUNCTION QUOTA EXCEEDED", "quota_exceeded"),
        ],
    )
    def test_signature_matches(self, classifier, message, rule):
        assert classifier.classify(message) == rule
        assert classifier.is_transient_false_positive(message) is True

    @pytest.mark.parametrize(
        "message",
        [
            GENUINE,
            "Patient record not found",
            "",
            "edge function returned 500",
        ],
    )
    def test_genuine_errors_not_classified(self, classifier, message):
        assert classifier.is_transient_false_positive(message) is False

    def test_five_signatures(self):
        assert [name for name, _ in DEFAULT_SIGNATURES] == [
            "max_invocations",
            "limit_reached",
            "invocation_limit_exceeded",
            "too_many_calls",
            "quota_exceeded",
        ]


class TestRawShapes:
    """Classification works on the normalized message of any raised value."""

    def test_exception(self, classifier):
        assert classifier.is_transient_false_positive(RuntimeError(FALSE_POSITIVE)) is True

    def test_mapping(self, classifier):
        assert classifier.is_transient_false_positive({"error": FALSE_POSITIVE}) is True

    def test_none(self, classifier):
        assert classifier.is_transient_false_positive(None) is False


class TestDiagnosticsRecording:
    def test_match_is_recorded(self, classifier, store):
        classifier.is_transient_false_positive(FALSE_POSITIVE, operation="book-appointment")
        entry = store.entries()[0]
        assert entry.message == FALSE_POSITIVE
        assert entry.operation == "book-appointment"
        assert entry.rule == "max_invocations"
        assert entry.timestamp.tzinfo is not None

    def test_non_match_not_recorded(self, classifier, store):
        classifier.is_transient_false_positive(GENUINE)
        assert store.total_count == 0

    def test_classify_has_no_side_effects(self, classifier, store):
        assert classifier.classify(FALSE_POSITIVE) == "max_invocations"
        assert store.total_count == 0

    def test_default_store_created(self):
        assert ErrorClassifier().store is not None


class TestRules:
    def test_add_rule(self, classifier):
        assert classifier.is_transient_false_positive("429 Too Many Requests") is False
        classifier.add_rule(RegexRule("gateway_429", r"too many requests"))
        assert classifier.classify("429 Too Many Requests") == "gateway_429"

    def test_remove_rule(self, classifier):
        assert classifier.remove_rule("quota_exceeded") is True
        assert classifier.classify("edge function quota exceeded") is None
        assert classifier.remove_rule("quota_exceeded") is False

    def test_predicate_rule(self, store):
        rule = PredicateRule("startswith_limit", lambda m: m.startswith("limit:"))
        classifier = ErrorClassifier(store, rules=[rule])
        assert classifier.classify("limit: hourly") == "startswith_limit"
        assert classifier.classify(FALSE_POSITIVE) is None

    def test_rules_satisfy_protocol(self):
        assert isinstance(RegexRule("a", "x"), ClassificationRule)
        assert isinstance(PredicateRule("b", bool), ClassificationRule)

    def test_compiled_pattern_made_case_insensitive(self):
        rule = RegexRule("compiled", re.compile("quota"))
        assert rule.matches("QUOTA") is True

    def test_rules_view_is_immutable(self, classifier):
        assert isinstance(classifier.rules, tuple)
        assert len(classifier.rules) == 5

    def test_raising_rule_treated_as_no_match(self, classifier, store):
        def broken(message):
            raise RuntimeError("rule bug")

        classifier.add_rule(PredicateRule("broken", broken))

        assert classifier.classify("Specialist unavailable") is None
        assert classifier.is_transient_false_positive("Specialist unavailable") is False
        assert store.total_count == 0

    def test_raising_rule_does_not_hide_later_rules(self, store):
        def broken(message):
            raise RuntimeError("rule bug")

        classifier = ErrorClassifier(store, rules=[PredicateRule("broken", broken), RegexRule("quota", "quota")])
        assert classifier.classify("edge function quota exceeded") == "quota"
