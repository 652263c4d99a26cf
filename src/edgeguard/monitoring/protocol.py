"""
Monitoring sink protocol and data classes.

The generic error handler forwards coded application errors to an external
monitoring sink when running in a production-like environment. Sinks
report delivery as a ``DeliveryResult`` instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class MonitoringEvent:
    """A coded error forwarded to monitoring."""

    message: str
    code: str
    error_type: str
    status_code: int | None = None
    environment: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "error_type": self.error_type,
            "created_at": self.created_at.isoformat(),
        }
        if self.status_code is not None:
            result["status_code"] = self.status_code
        if self.environment:
            result["environment"] = self.environment
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result


@dataclass
class DeliveryResult:
    """Result of a monitoring delivery attempt."""

    sink_name: str
    success: bool
    message: str | None = None
    response: dict[str, Any] | None = None
    error: Exception | None = None
    delivered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def ok(cls, sink_name: str, message: str | None = None, **kwargs: Any) -> DeliveryResult:
        return cls(sink_name=sink_name, success=True, message=message, **kwargs)

    @classmethod
    def fail(cls, sink_name: str, error: Exception) -> DeliveryResult:
        return cls(sink_name=sink_name, success=False, error=error, message=str(error))


@runtime_checkable
class MonitoringSink(Protocol):
    """
    Protocol for monitoring sinks.

    Implementations must provide:
    - name: Unique sink identifier
    - capture(): Deliver an event, reporting failure in the result
    """

    @property
    def name(self) -> str:
        ...

    def capture(self, event: MonitoringEvent) -> DeliveryResult:
        ...


__all__ = ["MonitoringEvent", "DeliveryResult", "MonitoringSink"]
