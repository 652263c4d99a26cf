"""
Bounded in-memory diagnostics for classified false-positive errors.

Every time the classifier recognises a spurious limit error it records a
``ClassifiedError`` here. The store keeps the most recent entries only
(100 by default, oldest evicted first) and counts every recording, so an
operational dashboard can show both the running total and what happened
lately without the log growing for the lifetime of the process.

Manifesto:
    - **Bounded:** ``len(store) <= capacity`` holds after every call
    - **Counted:** ``total_count`` reflects every recording, evicted or not
    - **Read-only view:** ``snapshot()`` returns copies, never live state
    - **Process lifetime:** nothing is persisted; ``clear()`` for maintenance

Architecture:
    ::

        ErrorClassifier ──record()──► DiagnosticsStore
                                        │ deque(maxlen=capacity)
                                        │ total_count
                                        ▼
                         snapshot() ─► DiagnosticsSnapshot
                                        total_count
                                        recent[-recent_limit:]
                                        policy (BackoffConfig summary)

Guardrails:
    Mutations happen under a ``threading.Lock``. Under asyncio alone the
    append/evict pair is already atomic, but the store is also reachable
    from worker threads (e.g. a sync route handler reading the snapshot).

Tags:
    diagnostics, ring-buffer, observability, edgeguard
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

DEFAULT_CAPACITY = 100
DEFAULT_RECENT_LIMIT = 10


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ClassifiedError:
    """One classified false-positive event. Never mutated after creation."""

    message: str
    timestamp: datetime = field(default_factory=utcnow)
    operation: str | None = None
    rule: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.operation:
            result["operation"] = self.operation
        if self.rule:
            result["rule"] = self.rule
        return result


@dataclass(frozen=True)
class DiagnosticsSnapshot:
    """Read-only view of the store at a point in time."""

    total_count: int
    stored_count: int
    recent: tuple[ClassifiedError, ...]
    policy: dict[str, Any]
    taken_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_count": self.total_count,
            "stored_count": self.stored_count,
            "recent": [entry.to_dict() for entry in self.recent],
            "policy": dict(self.policy),
            "taken_at": self.taken_at.isoformat(),
        }


class DiagnosticsStore:
    """Bounded FIFO log of ``ClassifiedError`` entries plus counters."""

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        *,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        policy: dict[str, Any] | None = None,
    ):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if recent_limit < 1:
            raise ValueError(f"recent_limit must be >= 1, got {recent_limit}")
        self._entries: deque[ClassifiedError] = deque(maxlen=capacity)
        self._capacity = capacity
        self._recent_limit = recent_limit
        self._policy = dict(policy or {})
        self._total_count = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def total_count(self) -> int:
        return self._total_count

    def __len__(self) -> int:
        return len(self._entries)

    def set_policy(self, policy: dict[str, Any]) -> None:
        """Replace the retry-policy summary reported by ``snapshot()``."""
        with self._lock:
            self._policy = dict(policy)

    def record(self, entry: ClassifiedError) -> None:
        """Append an entry, evicting the oldest one when full."""
        with self._lock:
            self._entries.append(entry)
            self._total_count += 1

    def entries(self) -> list[ClassifiedError]:
        """All stored entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def snapshot(self) -> DiagnosticsSnapshot:
        """Totals, the most recent entries (most-recent-last) and the policy."""
        with self._lock:
            recent = tuple(self._entries)[-self._recent_limit:]
            return DiagnosticsSnapshot(
                total_count=self._total_count,
                stored_count=len(self._entries),
                recent=recent,
                policy=dict(self._policy),
            )

    def clear(self) -> None:
        """Empty the log and reset counters."""
        with self._lock:
            self._entries.clear()
            self._total_count = 0


__all__ = [
    "DEFAULT_CAPACITY",
    "DEFAULT_RECENT_LIMIT",
    "ClassifiedError",
    "DiagnosticsSnapshot",
    "DiagnosticsStore",
    "utcnow",
]
