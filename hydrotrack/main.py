"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service
or runs one-shot health and diagnostics commands.
"""

import argparse
import asyncio
import json
import logging

import uvicorn

from hydrotrack.bootstrap import (
    bootstrap_configure_runtime,
    bootstrap_create_application,
    bootstrap_create_diagnostics_runner,
    bootstrap_create_health_monitor,
)
from hydrotrack.config import config_load_settings
from hydrotrack.diagnostics import diagnostics_render_report
from hydrotrack.health import OverallStatus, health_status_to_payload


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with code 1 when a one-shot command reports failure.
    """

    argument_parser = argparse.ArgumentParser(description="Hydrotrack runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "health-check", "diagnostics"),
        help="Runtime command: `api` starts server, `health-check` prints one aggregate health status, "
        "`diagnostics` runs the robustness suites",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
    bootstrap_configure_runtime(settings)

    if parsed_arguments.command == "health-check":
        health_monitor = bootstrap_create_health_monitor(settings)
        health_status = asyncio.run(health_monitor.check_health())
        print(json.dumps(health_status_to_payload(health_status), indent=2, default=str))
        if health_status.overall_status is not OverallStatus.HEALTHY:
            raise SystemExit(1)
        return

    if parsed_arguments.command == "diagnostics":
        health_monitor = bootstrap_create_health_monitor(settings)
        diagnostics_runner = bootstrap_create_diagnostics_runner(settings, health_monitor)
        suites = asyncio.run(diagnostics_runner.run_comprehensive_tests())
        print(diagnostics_render_report(suites))
        if any(suite.summary.failed for suite in suites):
            raise SystemExit(1)
        return

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


if __name__ == "__main__":
    main()
