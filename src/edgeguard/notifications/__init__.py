"""
Notification package.

Maps invocation outcomes to transient user-facing toasts.
"""

from edgeguard.notifications.channels import ConsoleChannel, LogChannel, MemoryChannel
from edgeguard.notifications.facade import Notifier
from edgeguard.notifications.protocol import (
    DEFAULT_DURATIONS,
    Toast,
    ToastChannel,
    ToastKind,
)

__all__ = [
    # Enums / constants
    "ToastKind",
    "DEFAULT_DURATIONS",
    # Data classes
    "Toast",
    # Protocols
    "ToastChannel",
    # Implementations
    "LogChannel",
    "ConsoleChannel",
    "MemoryChannel",
    # Facade
    "Notifier",
]
