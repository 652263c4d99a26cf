"""
Shared pytest fixtures and configuration for edgeguard tests.

This module provides:
- A recording sleep so retry tests never wait on real backoff
- Isolated services/stores per test (no shared diagnostics state)

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.
"""

from pathlib import Path

import pytest

from edgeguard.core.diagnostics import DiagnosticsStore
from edgeguard.execution.backoff import BackoffConfig, BackoffPolicy
from edgeguard.execution.classifier import ErrorClassifier
from edgeguard.execution.invoker import RemoteInvoker
from edgeguard.monitoring.sinks import MemoryMonitoringSink
from edgeguard.notifications.channels import MemoryChannel
from edgeguard.notifications.facade import Notifier
from edgeguard.service import ResilienceService, reset_service
from tests._support.operations import RecordingSleep

# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_default_service():
    """Ensure no test leaks the process-wide default service."""
    reset_service()
    yield
    reset_service()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def store() -> DiagnosticsStore:
    return DiagnosticsStore()


@pytest.fixture
def classifier(store) -> ErrorClassifier:
    return ErrorClassifier(store)


@pytest.fixture
def toasts() -> MemoryChannel:
    return MemoryChannel()


@pytest.fixture
def notifier(toasts) -> Notifier:
    return Notifier([toasts])


@pytest.fixture
def example_config() -> BackoffConfig:
    return BackoffConfig(max_attempts=5, base_delay=0.5, max_delay=3.0, backoff_multiplier=1.5)


@pytest.fixture
def invoker(classifier, notifier, recording_sleep, example_config) -> RemoteInvoker:
    return RemoteInvoker(
        classifier,
        BackoffPolicy(example_config),
        notifier,
        sleep=recording_sleep,
    )


@pytest.fixture
def monitoring_sink() -> MemoryMonitoringSink:
    return MemoryMonitoringSink()


@pytest.fixture
def service(toasts, recording_sleep, monitoring_sink, example_config) -> ResilienceService:
    return ResilienceService(
        example_config,
        notifier=Notifier([toasts]),
        monitoring=monitoring_sink,
        forward_to_monitoring=True,
        environment="production",
        sleep=recording_sleep,
    )
