"""
Monitoring package.

Forwarding targets for coded application errors.
"""

from edgeguard.monitoring.protocol import DeliveryResult, MonitoringEvent, MonitoringSink
from edgeguard.monitoring.sinks import (
    LogMonitoringSink,
    MemoryMonitoringSink,
    WebhookMonitoringSink,
)

__all__ = [
    "MonitoringEvent",
    "DeliveryResult",
    "MonitoringSink",
    "LogMonitoringSink",
    "MemoryMonitoringSink",
    "WebhookMonitoringSink",
]
