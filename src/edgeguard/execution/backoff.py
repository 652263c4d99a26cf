"""Bounded exponential backoff for the retry driver.

Example:
    >>> from edgeguard.execution.backoff import BackoffConfig, BackoffPolicy
    >>>
    >>> policy = BackoffPolicy(BackoffConfig(max_attempts=5, base_delay=0.5,
    ...                                      max_delay=3.0, backoff_multiplier=1.5))
    >>> policy.delays()
    [0.5, 0.75, 1.125, 1.6875]
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

from edgeguard.core.errors import InvalidConfigError

JITTER_RANGE = 0.25


@dataclass(frozen=True)
class BackoffConfig:
    """Immutable retry schedule.

    Delay before attempt ``n + 1`` is
    ``min(base_delay * backoff_multiplier ** (n - 1), max_delay)``.

    Attributes:
        max_attempts: Total executions allowed, first call included
        base_delay: First delay in seconds
        max_delay: Delay cap in seconds
        backoff_multiplier: Exponential growth factor, must be > 1
        jitter: Spread delays by +/- 25% to avoid synchronized retries
    """

    max_attempts: int = 5
    base_delay: float = 0.5
    max_delay: float = 3.0
    backoff_multiplier: float = 1.5
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise InvalidConfigError("max_attempts", self.max_attempts, "max_attempts must be >= 1")
        if self.base_delay < 0:
            raise InvalidConfigError("base_delay", self.base_delay, "base_delay must be >= 0")
        if self.base_delay > self.max_delay:
            raise InvalidConfigError(
                "max_delay",
                self.max_delay,
                f"max_delay ({self.max_delay}) must be >= base_delay ({self.base_delay})",
            )
        if self.backoff_multiplier <= 1:
            raise InvalidConfigError(
                "backoff_multiplier",
                self.backoff_multiplier,
                "backoff_multiplier must be > 1",
            )

    def summary(self) -> dict[str, Any]:
        """Policy summary reported in diagnostics snapshots."""
        return {
            "retry_enabled": self.max_attempts > 1,
            "max_attempts": self.max_attempts,
            "max_retries": self.max_attempts,
            "base_delay": self.base_delay,
            "max_delay": self.max_delay,
            "backoff_multiplier": self.backoff_multiplier,
            "jitter": self.jitter,
        }


class BackoffPolicy:
    """Maps a one-based attempt number to the wait before the next attempt."""

    def __init__(self, config: BackoffConfig | None = None, *, rng: random.Random | None = None):
        self.config = config or BackoffConfig()
        self._rng = rng or random.Random()

    @property
    def max_attempts(self) -> int:
        return self.config.max_attempts

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after ``attempt`` failed (``attempt >= 1``)."""
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")

        cfg = self.config
        delay = min(
            cfg.base_delay * (cfg.backoff_multiplier ** (attempt - 1)),
            cfg.max_delay,
        )

        if cfg.jitter:
            jitter_amount = delay * JITTER_RANGE
            delay += self._rng.uniform(-jitter_amount, jitter_amount)
            delay = min(max(0.0, delay), cfg.max_delay)

        return delay

    def delays(self) -> list[float]:
        """Every delay an always-failing invocation would wait, in order."""
        return [self.delay_for(n) for n in range(1, self.config.max_attempts)]

    def should_retry(self, attempt: int) -> bool:
        """True while another attempt fits in the budget."""
        return attempt < self.config.max_attempts


__all__ = ["BackoffConfig", "BackoffPolicy", "JITTER_RANGE"]
