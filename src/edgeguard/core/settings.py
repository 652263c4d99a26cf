"""Environment-driven settings for the remote invocation layer.

The retry schedule, diagnostics bounds and monitoring target are read once
at application start and turned into the immutable objects the components
use (``BackoffConfig``, store capacity, sinks).

Features:
    - **EdgeguardSettings:** pydantic-settings model with ``EDGEGUARD_`` prefix
    - **.env file support:** Automatic loading via pydantic-settings
    - **Extra ignore:** Unknown env vars don't cause startup failures
    - **to_backoff_config():** validated ``BackoffConfig`` for the retry driver

Examples:
    >>> from edgeguard.core.settings import EdgeguardSettings
    >>> settings = EdgeguardSettings(max_attempts=3)
    >>> settings.to_backoff_config().max_attempts
    3

Tags:
    settings, configuration, pydantic, environment, edgeguard
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from edgeguard.execution.backoff import BackoffConfig

PRODUCTION_ENVIRONMENTS = frozenset({"production", "prod", "staging"})


class EdgeguardSettings(BaseSettings):
    """Settings for the invocation layer.

    Fields
    ──────
    environment            : Deployment environment name
    log_level              : Structlog log level
    json_logs              : Force JSON (True) / console (False) rendering
    max_attempts           : Attempts per logical invocation (first call included)
    base_delay             : First backoff delay, seconds
    max_delay              : Backoff cap, seconds
    backoff_multiplier     : Exponential growth factor (> 1)
    jitter                 : Randomise delays by +/- 25% (off by default)
    diagnostics_capacity   : Classified events kept in memory
    recent_limit           : Entries returned in a diagnostics snapshot
    attempt_timeout        : Optional per-attempt timeout, seconds
    monitoring_webhook_url : Optional URL receiving monitored errors
    """

    model_config = SettingsConfigDict(
        env_prefix="EDGEGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Environment ──────────────────────────────────────────────
    environment: str = "development"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Retry schedule ───────────────────────────────────────────
    max_attempts: int = Field(default=5, ge=1)
    base_delay: float = Field(default=0.5, ge=0)
    max_delay: float = Field(default=3.0, ge=0)
    backoff_multiplier: float = Field(default=1.5, gt=1)
    jitter: bool = False
    attempt_timeout: float | None = Field(default=None, gt=0)

    # ── Diagnostics ──────────────────────────────────────────────
    diagnostics_capacity: int = Field(default=100, ge=1)
    recent_limit: int = Field(default=10, ge=1)

    # ── Monitoring ───────────────────────────────────────────────
    monitoring_webhook_url: str | None = None

    @property
    def is_production(self) -> bool:
        """True for production-like environments (monitoring forwarding on)."""
        return self.environment.strip().lower() in PRODUCTION_ENVIRONMENTS

    def to_backoff_config(self) -> BackoffConfig:
        """Build the immutable retry schedule (validates base <= max)."""
        from edgeguard.execution.backoff import BackoffConfig

        return BackoffConfig(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            backoff_multiplier=self.backoff_multiplier,
            jitter=self.jitter,
        )
