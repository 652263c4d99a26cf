"""Composition root for the remote invocation layer.

``ResilienceService`` wires one diagnostics store, classifier, backoff
policy, notifier, invoker and error handler together. Build it once at
application start (``ResilienceService.from_settings()``) and pass it to
call sites; tests construct isolated instances.

For call sites that cannot receive the service explicitly, a module-level
default instance is created lazily and exposed through the convenience
functions below (``invoke``, ``handle``, ``snapshot``, ...).

Example:
    >>> service = ResilienceService.from_settings(EdgeguardSettings())
    >>> slots = await service.invoke("find-available-slots", fetch_slots)
    >>> service.snapshot().total_count
    0
"""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from edgeguard.core.diagnostics import DiagnosticsSnapshot, DiagnosticsStore
from edgeguard.core.logging import get_logger
from edgeguard.core.normalize import get_message, normalize
from edgeguard.core.settings import EdgeguardSettings
from edgeguard.execution.backoff import BackoffConfig, BackoffPolicy
from edgeguard.execution.classifier import ClassificationRule, ErrorClassifier
from edgeguard.execution.invoker import RemoteInvoker
from edgeguard.handling.handler import ErrorHandler, HandledError
from edgeguard.monitoring.protocol import MonitoringSink
from edgeguard.monitoring.sinks import LogMonitoringSink, WebhookMonitoringSink
from edgeguard.notifications.channels import LogChannel
from edgeguard.notifications.facade import Notifier
from edgeguard.notifications.protocol import ToastChannel

T = TypeVar("T")

logger = get_logger(__name__)


class ResilienceService:
    """Owns every component of the layer for one process."""

    def __init__(
        self,
        config: BackoffConfig | None = None,
        *,
        store: DiagnosticsStore | None = None,
        rules: Iterable[ClassificationRule] | None = None,
        notifier: Notifier | None = None,
        monitoring: MonitoringSink | None = None,
        forward_to_monitoring: bool | None = None,
        environment: str | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        attempt_timeout: float | None = None,
    ):
        self.config = config or BackoffConfig()
        self.store = store if store is not None else DiagnosticsStore()
        self.store.set_policy(self.config.summary())
        self.policy = BackoffPolicy(self.config)
        self.classifier = ErrorClassifier(self.store, rules)
        self.notifier = notifier or Notifier()

        invoker_kwargs: dict[str, Any] = {"attempt_timeout": attempt_timeout}
        if sleep is not None:
            invoker_kwargs["sleep"] = sleep
        self.invoker = RemoteInvoker(self.classifier, self.policy, self.notifier, **invoker_kwargs)

        self.handler = ErrorHandler(
            self.classifier,
            self.notifier,
            monitoring=monitoring,
            forward_to_monitoring=forward_to_monitoring,
            environment=environment,
        )

    @classmethod
    def from_settings(
        cls,
        settings: EdgeguardSettings | None = None,
        *,
        channels: Iterable[ToastChannel] | None = None,
        monitoring: MonitoringSink | None = None,
        **kwargs: Any,
    ) -> ResilienceService:
        """Build a service from environment-driven settings."""
        settings = settings or EdgeguardSettings()

        if monitoring is None:
            if settings.monitoring_webhook_url:
                monitoring = WebhookMonitoringSink(settings.monitoring_webhook_url)
            else:
                monitoring = LogMonitoringSink()

        service = cls(
            settings.to_backoff_config(),
            store=DiagnosticsStore(
                settings.diagnostics_capacity,
                recent_limit=settings.recent_limit,
            ),
            notifier=Notifier(channels if channels is not None else [LogChannel()]),
            monitoring=monitoring,
            forward_to_monitoring=settings.is_production,
            environment=settings.environment,
            attempt_timeout=settings.attempt_timeout,
            **kwargs,
        )
        logger.info(
            "resilience_service_initialized",
            environment=settings.environment,
            monitoring=monitoring.name,
            **service.config.summary(),
        )
        return service

    # ------------------------------------------------------------------ #
    # Exposed operations
    # ------------------------------------------------------------------ #

    async def invoke(self, name: str, op: Callable[[], Awaitable[T]], **kwargs: Any) -> T:
        return await self.invoker.invoke(name, op, **kwargs)

    async def intercept_and_correct(
        self,
        name: str,
        op: Callable[[], Awaitable[T]],
        *,
        silent: bool = False,
        **kwargs: Any,
    ) -> T:
        return await self.invoker.intercept_and_correct(name, op, silent=silent, **kwargs)

    def is_transient_false_positive(self, raw: Any) -> bool:
        return self.classifier.is_transient_false_positive(raw)

    def snapshot(self) -> DiagnosticsSnapshot:
        return self.store.snapshot()

    def clear_diagnostics(self) -> None:
        self.store.clear()
        logger.info("diagnostics_cleared")

    def handle(self, raw: Any, **options: Any) -> HandledError:
        return self.handler.handle(raw, **options)

    async def handle_async_error(self, awaitable: Awaitable[T], **options: Any):
        return await self.handler.handle_async_error(awaitable, **options)


# ---------------------------------------------------------------------- #
# Default instance
# ---------------------------------------------------------------------- #

_default_service: ResilienceService | None = None
_default_lock = threading.Lock()


def get_service() -> ResilienceService:
    """Return the process-wide service, building it from settings on first use."""
    global _default_service
    if _default_service is None:
        with _default_lock:
            if _default_service is None:
                _default_service = ResilienceService.from_settings()
    return _default_service


def set_service(service: ResilienceService) -> None:
    """Install ``service`` as the process-wide default."""
    global _default_service
    with _default_lock:
        _default_service = service


def reset_service() -> None:
    """Forget the default service (the next call rebuilds it)."""
    global _default_service
    with _default_lock:
        _default_service = None


async def invoke(name: str, op: Callable[[], Awaitable[T]], **kwargs: Any) -> T:
    """Run ``op`` through the default service's retry driver."""
    return await get_service().invoke(name, op, **kwargs)


protected_call = invoke


async def intercept_and_correct(
    name: str,
    op: Callable[[], Awaitable[T]],
    silent: bool = False,
    **kwargs: Any,
) -> T:
    return await get_service().intercept_and_correct(name, op, silent=silent, **kwargs)


def is_transient_false_positive(raw: Any) -> bool:
    return get_service().is_transient_false_positive(raw)


def snapshot() -> DiagnosticsSnapshot:
    return get_service().snapshot()


def clear_diagnostics() -> None:
    get_service().clear_diagnostics()


def handle(raw: Any, **options: Any) -> HandledError:
    return get_service().handle(raw, **options)


async def handle_async_error(awaitable: Awaitable[T], **options: Any):
    return await get_service().handle_async_error(awaitable, **options)


__all__ = [
    "ResilienceService",
    "get_service",
    "set_service",
    "reset_service",
    "invoke",
    "protected_call",
    "intercept_and_correct",
    "is_transient_false_positive",
    "snapshot",
    "clear_diagnostics",
    "handle",
    "handle_async_error",
    "get_message",
    "normalize",
]
