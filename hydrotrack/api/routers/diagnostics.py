"""Diagnostics router exposing configuration presence and robustness suites."""

from __future__ import annotations

from typing import Mapping

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from hydrotrack.config import env_describe_presence
from hydrotrack.diagnostics import DiagnosticsRunner, diagnostics_suite_to_payload


def api_create_diagnostics_router(
    diagnostics_runner: DiagnosticsRunner,
    environment_source: Mapping[str, str | None] | None = None,
) -> APIRouter:
    """Create diagnostics router.

    Args:
        diagnostics_runner: Runner executing the robustness suites.
        environment_source: Optional explicit configuration mapping instead of the process environment.

    Returns:
        APIRouter: Router exposing `/debug/env` and `/diagnostics` endpoints.

    Raises:
        ValueError: Raised when diagnostics_runner is invalid.
    """

    if diagnostics_runner is None:
        raise ValueError("diagnostics_runner must not be None")

    router = APIRouter(tags=["diagnostics"])

    @router.get("/debug/env")
    def api_debug_environment() -> JSONResponse:
        """Return which configuration keys are set, never their values."""

        presence = env_describe_presence(environment_source)
        payload = {
            "keys": presence,
            "configured": sorted(key for key, is_set in presence.items() if is_set),
            "missing": sorted(key for key, is_set in presence.items() if not is_set),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/diagnostics")
    async def api_diagnostics_run() -> JSONResponse:
        """Run every diagnostic suite.

        Returns:
            JSONResponse: Suite reports; HTTP 200 when no probe failed, else HTTP 503.

        Raises:
            RuntimeError: Probe failures are reported in the payload, never raised.
        """

        suites = await diagnostics_runner.run_comprehensive_tests()
        failed_total = sum(suite.summary.failed for suite in suites)
        payload = {
            "status": "pass" if failed_total == 0 else "fail",
            "suites": [diagnostics_suite_to_payload(suite) for suite in suites],
        }
        status_code = status.HTTP_200_OK if failed_total == 0 else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=payload, status_code=status_code)

    return router
