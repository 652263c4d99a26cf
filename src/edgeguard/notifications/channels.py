"""Toast channels: structured log, console and in-memory."""

from __future__ import annotations

from collections import deque

from edgeguard.core.logging import get_logger
from edgeguard.notifications.protocol import Toast, ToastKind

logger = get_logger(__name__)


class LogChannel:
    """Renders toasts as structured log events (server-side default)."""

    def __init__(self, name: str = "log"):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def render(self, toast: Toast) -> None:
        if toast.kind in (ToastKind.ERROR, ToastKind.TERMINAL_FAILURE):
            logger.warning("toast_rendered", **toast.to_dict())
        else:
            logger.info("toast_rendered", **toast.to_dict())


class ConsoleChannel:
    """
    Console output channel for development.

    Prints toasts to stdout with formatting.
    """

    _COLORS = {
        ToastKind.SUCCESS: "\033[32m",           # Green
        ToastKind.PROGRESS: "\033[34m",          # Blue
        ToastKind.TERMINAL_FAILURE: "\033[33m",  # Yellow
        ToastKind.ERROR: "\033[31m",             # Red
    }

    def __init__(self, name: str = "console", *, color: bool = True):
        self._name = name
        self._color = color

    @property
    def name(self) -> str:
        return self._name

    def render(self, toast: Toast) -> None:
        if self._color:
            color = self._COLORS.get(toast.kind, "")
            reset = "\033[0m"
        else:
            color = reset = ""

        print(f"{color}[{toast.kind.value}] {toast.title}{reset}")
        if toast.description:
            print(f"  {toast.description}")


class MemoryChannel:
    """Keeps the most recent toasts in memory (tests, dashboards)."""

    def __init__(self, name: str = "memory", *, maxlen: int = 100):
        self._name = name
        self._toasts: deque[Toast] = deque(maxlen=maxlen)

    @property
    def name(self) -> str:
        return self._name

    @property
    def toasts(self) -> list[Toast]:
        return list(self._toasts)

    def kinds(self) -> list[ToastKind]:
        return [toast.kind for toast in self._toasts]

    def render(self, toast: Toast) -> None:
        self._toasts.append(toast)

    def clear(self) -> None:
        self._toasts.clear()


__all__ = ["LogChannel", "ConsoleChannel", "MemoryChannel"]
