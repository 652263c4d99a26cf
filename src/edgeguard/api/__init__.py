"""HTTP surface for operational dashboards."""

from edgeguard.api.router import create_diagnostics_router

__all__ = ["create_diagnostics_router"]
