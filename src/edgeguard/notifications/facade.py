"""Notification facade: invocation outcomes -> toasts.

The retry driver and the generic handler never talk to a rendering surface
directly. They call the ``Notifier``, which builds a ``Toast`` with the
display duration for its kind and hands it to every registered channel.
Rendering failures are logged and swallowed; a broken toast surface must
never turn a successful remote call into a failure.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from edgeguard.core.logging import get_logger
from edgeguard.notifications.channels import LogChannel
from edgeguard.notifications.protocol import (
    DEFAULT_DURATIONS,
    Toast,
    ToastChannel,
    ToastKind,
)

logger = get_logger(__name__)


class Notifier:
    """Routes toasts to registered channels."""

    def __init__(
        self,
        channels: Iterable[ToastChannel] | None = None,
        *,
        durations: dict[ToastKind, float] | None = None,
    ):
        self._channels: dict[str, ToastChannel] = {}
        for channel in channels if channels is not None else [LogChannel()]:
            self.register(channel)
        self._durations = {**DEFAULT_DURATIONS, **(durations or {})}

    def register(self, channel: ToastChannel) -> None:
        """Register a channel (replaces one with the same name)."""
        self._channels[channel.name] = channel

    def unregister(self, name: str) -> None:
        """Unregister a channel by name."""
        self._channels.pop(name, None)

    def list_channels(self) -> list[str]:
        """List all registered channel names."""
        return sorted(self._channels)

    def duration_for(self, kind: ToastKind) -> float:
        return self._durations[kind]

    def notify(
        self,
        kind: ToastKind,
        title: str,
        description: str | None = None,
        *,
        action: Any = None,
        context: dict[str, Any] | None = None,
    ) -> Toast | None:
        """Render a toast on every channel. Never raises.

        Returns the toast that was built, or None if it could not be built.
        """
        try:
            toast = Toast(
                kind=ToastKind(kind),
                title=title,
                description=description,
                duration=self._durations[ToastKind(kind)],
                action=action,
                context=dict(context or {}),
            )
        except Exception as exc:
            logger.warning("toast_build_failed", kind=str(kind), title=title, error=str(exc))
            return None

        for channel in list(self._channels.values()):
            try:
                channel.render(toast)
            except Exception as exc:
                logger.warning(
                    "toast_render_failed",
                    channel=channel.name,
                    kind=toast.kind.value,
                    error=str(exc),
                )
        return toast

    # ------------------------------------------------------------------ #
    # Invocation outcomes
    # ------------------------------------------------------------------ #

    def recovered(self, operation: str, attempts: int) -> Toast | None:
        """The call succeeded after ``attempts`` attempts."""
        return self.notify(
            ToastKind.SUCCESS,
            "Operation completed successfully",
            f"Recovered automatically after {attempts} attempts",
            context={"operation": operation, "attempts": attempts},
        )

    def auto_correcting(self, operation: str, next_attempt: int, max_attempts: int) -> Toast | None:
        """Retries are still running; shown from the 4th attempt on."""
        return self.notify(
            ToastKind.PROGRESS,
            "Auto-correcting temporary issue...",
            f"Attempt {next_attempt} of {max_attempts}",
            context={"operation": operation, "attempt": next_attempt, "max_attempts": max_attempts},
        )

    def temporary_issue(self, operation: str, attempts: int) -> Toast | None:
        """A transient failure outlasted the retry budget."""
        return self.notify(
            ToastKind.TERMINAL_FAILURE,
            "Temporary issue, please try again shortly",
            "We're sorry, the service is briefly unavailable. Contact support if this persists.",
            context={"operation": operation, "attempts": attempts},
        )

    def error(self, title: str, description: str, *, action: Any = None) -> Toast | None:
        """Generic failure toast used by the error handler."""
        return self.notify(ToastKind.ERROR, title, description, action=action)


__all__ = ["Notifier"]
