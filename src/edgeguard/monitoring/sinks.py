"""Monitoring sinks: structured log, generic webhook, in-memory."""

from __future__ import annotations

import json
import urllib.error
import urllib.request

from edgeguard.core.logging import get_logger
from edgeguard.monitoring.protocol import DeliveryResult, MonitoringEvent

logger = get_logger(__name__)


class LogMonitoringSink:
    """Emits monitored errors as ``monitored_error`` log events."""

    def __init__(self, name: str = "log"):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def capture(self, event: MonitoringEvent) -> DeliveryResult:
        logger.error("monitored_error", **event.to_dict())
        return DeliveryResult.ok(self._name)


class WebhookMonitoringSink:
    """
    Generic webhook sink.

    POSTs the event as JSON to a URL.
    """

    def __init__(
        self,
        url: str,
        *,
        name: str = "webhook",
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
    ):
        self._name = name
        self._url = url
        self._headers = headers or {}
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self._name

    @property
    def url(self) -> str:
        return self._url

    def capture(self, event: MonitoringEvent) -> DeliveryResult:
        """Send event to the webhook."""
        headers = {"Content-Type": "application/json"}
        headers.update(self._headers)

        try:
            req = urllib.request.Request(
                self._url,
                data=json.dumps(event.to_dict()).encode("utf-8"),
                headers=headers,
                method="POST",
            )

            with urllib.request.urlopen(req, timeout=self._timeout) as response:
                return DeliveryResult.ok(
                    self._name,
                    response={"status": response.status},
                )

        except (urllib.error.URLError, OSError, ValueError) as e:
            logger.warning("monitoring_delivery_failed", sink=self._name, error=str(e))
            return DeliveryResult.fail(self._name, e)


class MemoryMonitoringSink:
    """Collects events in a list (tests, local development)."""

    def __init__(self, name: str = "memory"):
        self._name = name
        self.events: list[MonitoringEvent] = []

    @property
    def name(self) -> str:
        return self._name

    def capture(self, event: MonitoringEvent) -> DeliveryResult:
        self.events.append(event)
        return DeliveryResult.ok(self._name)


__all__ = ["LogMonitoringSink", "WebhookMonitoringSink", "MemoryMonitoringSink"]
