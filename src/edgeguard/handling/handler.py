"""Generic error handler for errors caught outside the retry driver.

UI actions and service helpers catch errors themselves and hand them here.
The handler normalizes the error, stays quiet for classified false
positives (the retry driver already informs the user), and otherwise logs,
shows a failure toast and forwards coded errors to monitoring in
production-like environments. It never raises.

Example:
    >>> handler = ErrorHandler(classifier, notifier)
    >>> try:
    ...     await create_appointment(payload)
    ... except Exception as exc:
    ...     result = handler.handle(exc, title="Failed to create appointment")
    >>> result.code
    'SLOT_TAKEN'

    Go-style tuples:

    >>> outcome = await handler.handle_async_error(fetch_profile(user_id))
    >>> if len(outcome) == 1:
    ...     return None  # already toasted
    >>> _, profile = outcome
"""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, TypeVar

from edgeguard.core.errors import FALSE_POSITIVE_CODE, AppError, FalsePositiveLimitError
from edgeguard.core.logging import get_logger
from edgeguard.core.normalize import NormalizedError, normalize
from edgeguard.core.settings import PRODUCTION_ENVIRONMENTS
from edgeguard.execution.classifier import ErrorClassifier
from edgeguard.monitoring.protocol import MonitoringEvent, MonitoringSink
from edgeguard.notifications.facade import Notifier

T = TypeVar("T")

logger = get_logger(__name__)

DEFAULT_TITLE = "Error"
AUTO_RETRY_MESSAGE = "Operation in progress (auto-retry)"


@dataclass(frozen=True)
class HandledError:
    """What the handler made of an error: message plus optional code."""

    message: str
    code: str | None = None

    @property
    def is_false_positive(self) -> bool:
        return self.code == FALSE_POSITIVE_CODE


def _is_rewritten_false_positive(raw: Any) -> bool:
    """True for errors the retry driver already rewrote after exhausting retries."""
    if isinstance(raw, FalsePositiveLimitError):
        return True
    return normalize(raw).code == FALSE_POSITIVE_CODE


class ErrorHandler:
    """Normalizes, logs, toasts and (optionally) monitors caught errors."""

    def __init__(
        self,
        classifier: ErrorClassifier,
        notifier: Notifier | None = None,
        *,
        monitoring: MonitoringSink | None = None,
        forward_to_monitoring: bool | None = None,
        environment: str | None = None,
    ):
        self.classifier = classifier
        self.notifier = notifier or Notifier()
        self.monitoring = monitoring
        if forward_to_monitoring is None:
            forward_to_monitoring = (environment or "").strip().lower() in PRODUCTION_ENVIRONMENTS
        self.forward_to_monitoring = forward_to_monitoring
        self.environment = environment

    @staticmethod
    def describe(raw: Any) -> NormalizedError:
        """Normalize ``raw``, reading ``AppError`` fields directly."""
        if isinstance(raw, AppError):
            return NormalizedError(
                message=raw.message or normalize(raw).message,
                code=raw.code,
                status_code=raw.status_code,
            )
        return normalize(raw)

    def handle(
        self,
        raw: Any,
        *,
        title: str | None = None,
        description: str | None = None,
        action: Any = None,
    ) -> HandledError:
        """Surface ``raw`` to the user and return its normalized form."""
        if _is_rewritten_false_positive(raw) or self.classifier.is_transient_false_positive(raw):
            logger.info("error_handled_as_false_positive", message=normalize(raw).message)
            return HandledError(message=AUTO_RETRY_MESSAGE, code=FALSE_POSITIVE_CODE)

        normalized = self.describe(raw)
        logger.error(
            "error_handled",
            message=normalized.message,
            code=normalized.code,
            status_code=normalized.status_code,
            error_type=type(raw).__name__,
        )

        self.notifier.error(
            title or DEFAULT_TITLE,
            description or normalized.message,
            action=action,
        )

        if normalized.code and self.forward_to_monitoring and self.monitoring is not None:
            self._forward(raw, normalized)

        return HandledError(message=normalized.message, code=normalized.code)

    async def handle_async_error(
        self,
        awaitable: Awaitable[T],
        **options: Any,
    ) -> tuple[None, T] | tuple[BaseException]:
        """Await ``awaitable`` and return ``(None, value)`` or ``(error,)``.

        On failure ``handle`` runs as a side effect and the original error
        object is returned to the caller.
        """
        try:
            value = await awaitable
        except Exception as exc:
            self.handle(exc, **options)
            return (exc,)
        return (None, value)

    def _forward(self, raw: Any, normalized: NormalizedError) -> None:
        event = MonitoringEvent(
            message=normalized.message,
            code=normalized.code or "",
            error_type=type(raw).__name__,
            status_code=normalized.status_code,
            environment=self.environment,
        )
        try:
            result = self.monitoring.capture(event)
        except Exception as exc:
            logger.warning("monitoring_forward_failed", sink=self.monitoring.name, error=str(exc))
            return
        if not result.success:
            logger.warning("monitoring_forward_failed", sink=result.sink_name, error=result.message)


__all__ = [
    "AUTO_RETRY_MESSAGE",
    "DEFAULT_TITLE",
    "ErrorHandler",
    "HandledError",
]
