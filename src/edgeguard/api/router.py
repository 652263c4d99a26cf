"""FastAPI router: read-only diagnostics for operational dashboards.

ARCHITECTURE
────────────
::

    create_diagnostics_router(service) → APIRouter
      GET    /diagnostics         ─ snapshot (totals, recent, policy)
      GET    /diagnostics/rules   ─ active false-positive signatures
      DELETE /diagnostics         ─ clear the log (maintenance)

    Depends on:
      ResilienceService ─ all reads go through its DiagnosticsStore
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from edgeguard.core.diagnostics import DiagnosticsSnapshot
from edgeguard.service import ResilienceService, get_service


class ClassifiedErrorResponse(BaseModel):
    """One recent classified event."""

    message: str
    timestamp: datetime
    operation: str | None = None
    rule: str | None = None


class DiagnosticsResponse(BaseModel):
    """Diagnostics snapshot."""

    total_count: int
    stored_count: int
    recent: list[ClassifiedErrorResponse] = Field(default_factory=list)
    policy: dict[str, Any] = Field(default_factory=dict)
    taken_at: datetime

    @classmethod
    def from_snapshot(cls, snap: DiagnosticsSnapshot) -> "DiagnosticsResponse":
        return cls(
            total_count=snap.total_count,
            stored_count=snap.stored_count,
            recent=[
                ClassifiedErrorResponse(
                    message=entry.message,
                    timestamp=entry.timestamp,
                    operation=entry.operation,
                    rule=entry.rule,
                )
                for entry in snap.recent
            ],
            policy=snap.policy,
            taken_at=snap.taken_at,
        )


class RuleResponse(BaseModel):
    name: str
    pattern: str | None = None


def create_diagnostics_router(
    service: ResilienceService | Callable[[], ResilienceService] | None = None,
    *,
    prefix: str = "/diagnostics",
    tags: list[str] | None = None,
) -> APIRouter:
    """Create the diagnostics router.

    Args:
        service: Service instance, a zero-argument provider, or None for
            the process-wide default
        prefix: URL prefix for all routes
        tags: OpenAPI tags

    Example:
        >>> app = FastAPI()
        >>> app.include_router(create_diagnostics_router(service))
    """
    if service is None:
        provider: Callable[[], ResilienceService] = get_service
    elif isinstance(service, ResilienceService):
        provider = lambda: service  # noqa: E731
    else:
        provider = service

    router = APIRouter(prefix=prefix, tags=tags or ["diagnostics"])

    @router.get("", response_model=DiagnosticsResponse)
    async def get_diagnostics():
        """Totals, the most recent classified errors and the retry policy."""
        return DiagnosticsResponse.from_snapshot(provider().snapshot())

    @router.get("/rules", response_model=list[RuleResponse])
    async def list_rules():
        """Active false-positive signatures, in evaluation order."""
        return [
            RuleResponse(name=rule.name, pattern=getattr(rule, "pattern", None))
            for rule in provider().classifier.rules
        ]

    @router.delete("")
    async def clear_diagnostics():
        """Empty the diagnostics log."""
        provider().clear_diagnostics()
        return {"status": "cleared"}

    return router


__all__ = [
    "ClassifiedErrorResponse",
    "DiagnosticsResponse",
    "RuleResponse",
    "create_diagnostics_router",
]
