"""FastAPI application factory for the health and diagnostics surface."""

from __future__ import annotations

from typing import Mapping

from fastapi import FastAPI

from hydrotrack.config import AppSettings
from hydrotrack.diagnostics import DiagnosticsRunner
from hydrotrack.health import HealthMonitor

from .routers import api_create_diagnostics_router, api_create_health_router


def create_api_application(
    settings: AppSettings,
    health_monitor: HealthMonitor,
    diagnostics_runner: DiagnosticsRunner | None = None,
    environment_source: Mapping[str, str | None] | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        health_monitor: Application-scoped health monitor used by health endpoints.
        diagnostics_runner: Optional runner; diagnostics routes mount only when provided
            and `settings.diagnostics_enabled` is true.
        environment_source: Optional explicit configuration mapping for diagnostics routes.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when health_monitor is None.
    """

    if health_monitor is None:
        raise ValueError("health_monitor must not be None")

    application = FastAPI(title="Hydrotrack")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return minimal service metadata.

        Returns:
            dict[str, str]: Service name, readiness marker and runtime environment.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        return {
            "service": "hydrotrack",
            "status": "ready",
            "environment": settings.environment_name,
            "executionContext": settings.execution_context,
        }

    application.include_router(api_create_health_router(health_monitor=health_monitor))
    if settings.diagnostics_enabled and diagnostics_runner is not None:
        application.include_router(
            api_create_diagnostics_router(
                diagnostics_runner=diagnostics_runner,
                environment_source=environment_source,
            )
        )

    return application
