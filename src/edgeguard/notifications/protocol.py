"""
Toast notification protocol and data classes.

Defines the interface for toast rendering channels and the ``Toast`` value
passed to them. Concrete channels live in channels.py; the facade that maps
invocation outcomes to toasts lives in facade.py.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class ToastKind(str, Enum):
    """What a toast reports."""

    SUCCESS = "success"                    # Recovered after retrying
    PROGRESS = "progress"                  # Still auto-correcting
    TERMINAL_FAILURE = "terminal-failure"  # Transient issue, retries exhausted
    ERROR = "error"                        # Generic handler failure toast


# Seconds a toast stays on screen
DEFAULT_DURATIONS: dict[ToastKind, float] = {
    ToastKind.SUCCESS: 2.0,
    ToastKind.PROGRESS: 1.5,
    ToastKind.TERMINAL_FAILURE: 4.0,
    ToastKind.ERROR: 4.0,
}


@dataclass(frozen=True)
class Toast:
    """A transient user-facing message."""

    kind: ToastKind
    title: str
    description: str | None = None
    duration: float = 2.0
    action: Any = None
    context: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "kind": self.kind.value,
            "title": self.title,
            "duration": self.duration,
            "created_at": self.created_at.isoformat(),
        }
        if self.description:
            result["description"] = self.description
        if self.action is not None:
            result["action"] = self.action
        if self.context:
            result["context"] = dict(self.context)
        return result


@runtime_checkable
class ToastChannel(Protocol):
    """
    Protocol for toast rendering surfaces.

    Implementations must provide:
    - name: Unique channel identifier
    - render(): Display a toast (may raise; the facade swallows failures)
    """

    @property
    def name(self) -> str:
        """Unique channel name."""
        ...

    def render(self, toast: Toast) -> None:
        """Display the toast."""
        ...


__all__ = ["ToastKind", "DEFAULT_DURATIONS", "Toast", "ToastChannel"]
