"""Health endpoint router composition for aggregate status checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from hydrotrack.health import HealthMonitor, OverallStatus, health_status_to_payload


def api_create_health_router(health_monitor: HealthMonitor) -> APIRouter:
    """Create health-check router backed by the application health monitor.

    Args:
        health_monitor: Application-scoped health monitor.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when health_monitor is invalid.
    """

    if health_monitor is None:
        raise ValueError("health_monitor must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    async def api_health_status() -> JSONResponse:
        """Return aggregate health state.

        Returns:
            JSONResponse: HTTP 200 for healthy or degraded state, HTTP 503 when unhealthy.

        Raises:
            RuntimeError: Probe failures are reported in the payload, never raised.
        """

        health_status = await health_monitor.check_health()
        status_code = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if health_status.overall_status is OverallStatus.UNHEALTHY
            else status.HTTP_200_OK
        )
        return JSONResponse(content=health_status_to_payload(health_status), status_code=status_code)

    return router
