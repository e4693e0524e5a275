"""API router package for endpoint composition."""

from .diagnostics import api_create_diagnostics_router
from .health import api_create_health_router

__all__ = ["api_create_diagnostics_router", "api_create_health_router"]
