"""Diagnostic harness running grouped robustness probes against the live runtime."""

from __future__ import annotations

import time
from typing import Awaitable, Callable, Final, Mapping, Sequence

from hydrotrack.adapters import ServiceAccountError, adapter_parse_service_account
from hydrotrack.config import (
    SENSITIVE_SERVER_KEYS,
    EnvironmentContext,
    env_collect_raw_values,
    env_validate,
)
from hydrotrack.errors import (
    BackendServiceError,
    ErrorKind,
    error_create_validation,
    handle_async,
    normalize_error,
    with_retry,
)
from hydrotrack.health import CheckStatus, HealthMonitor, health_status_to_payload

from .models import (
    DiagnosticOutcome,
    DiagnosticResult,
    DiagnosticStatus,
    DiagnosticSuiteReport,
    diagnostics_build_suite,
)

SUITE_ENVIRONMENT: Final[str] = "Environment Configuration"
SUITE_ERROR_HANDLING: Final[str] = "Error Handling"
SUITE_CONNECTIVITY: Final[str] = "Connectivity & Services"
SUITE_SECURITY: Final[str] = "Security Configuration"

ProbeBody = Callable[[], Awaitable[DiagnosticOutcome]]


class DiagnosticsRunner:
    """Run environment, error-handling, connectivity and security probe suites."""

    def __init__(
        self,
        execution_context: EnvironmentContext,
        health_monitor: HealthMonitor,
        environment_source: Mapping[str, str | None] | None = None,
        development_mode: bool | None = None,
    ):
        """Initialize diagnostics runner.

        Args:
            execution_context: Context deciding which probes apply; others are skipped.
            health_monitor: Application health monitor.
            environment_source: Optional explicit configuration mapping instead of the process environment.
            development_mode: Logging mode override for probes that log failures.

        Raises:
            ValueError: Raised when health_monitor is None.
        """

        if health_monitor is None:
            raise ValueError("health_monitor must not be None")
        self._execution_context = EnvironmentContext(execution_context)
        self._health_monitor = health_monitor
        self._environment_source = environment_source
        self._development_mode = development_mode

    async def run_comprehensive_tests(self) -> list[DiagnosticSuiteReport]:
        """Run every suite in a fixed order.

        Returns:
            list[DiagnosticSuiteReport]: Environment, error handling, connectivity and security reports.

        Raises:
            RuntimeError: Probe failures are reported as results, never raised.
        """

        return [
            await self.run_environment_suite(),
            await self.run_error_handling_suite(),
            await self.run_connectivity_suite(),
            await self.run_security_suite(),
        ]

    async def run_probe(self, name: str, body: ProbeBody) -> DiagnosticResult:
        """Run one probe, converting any raised failure into a `fail` result."""

        started = time.perf_counter()
        try:
            outcome = await body()
        except Exception as error:
            normalized_error = normalize_error(error)
            return DiagnosticResult(
                name=name,
                status=DiagnosticStatus.FAIL,
                message=normalized_error.internal_message,
                duration_ms=(time.perf_counter() - started) * 1000,
                details={"kind": normalized_error.kind.value, "code": normalized_error.code},
            )
        return DiagnosticResult(
            name=name,
            status=outcome.status,
            message=outcome.message,
            duration_ms=(time.perf_counter() - started) * 1000,
            details=outcome.details,
        )

    async def _run_suite(self, suite_name: str, probes: Sequence[tuple[str, ProbeBody]]) -> DiagnosticSuiteReport:
        results = [await self.run_probe(name, body) for name, body in probes]
        return diagnostics_build_suite(suite_name, results)

    def _is_client(self) -> bool:
        return self._execution_context is EnvironmentContext.CLIENT

    async def run_environment_suite(self) -> DiagnosticSuiteReport:
        async def _client_validation() -> DiagnosticOutcome:
            if not self._is_client():
                return DiagnosticOutcome(DiagnosticStatus.SKIP, "Client-side test skipped on server")
            env_validate(EnvironmentContext.CLIENT, self._environment_source)
            return DiagnosticOutcome(DiagnosticStatus.PASS, "All client environment variables are valid")

        async def _server_validation() -> DiagnosticOutcome:
            if self._is_client():
                return DiagnosticOutcome(DiagnosticStatus.SKIP, "Server-side test skipped on client")
            env_validate(EnvironmentContext.SERVER, self._environment_source)
            return DiagnosticOutcome(DiagnosticStatus.PASS, "All server environment variables are valid")

        async def _service_account_parsing() -> DiagnosticOutcome:
            if self._is_client():
                return DiagnosticOutcome(DiagnosticStatus.SKIP, "Server-side test skipped on client")
            raw_json = env_collect_raw_values(self._environment_source).get("SERVICE_ACCOUNT_JSON")
            if not raw_json or not raw_json.strip():
                raise ServiceAccountError("SERVICE_ACCOUNT_JSON not found")
            credentials = adapter_parse_service_account(raw_json)
            return DiagnosticOutcome(
                DiagnosticStatus.PASS,
                "Service account JSON parsed successfully",
                {"projectId": credentials.project_id, "clientEmail": credentials.client_email},
            )

        return await self._run_suite(
            SUITE_ENVIRONMENT,
            [
                ("Client Environment Validation", _client_validation),
                ("Server Environment Validation", _server_validation),
                ("Service Account JSON Parsing", _service_account_parsing),
            ],
        )

    async def run_error_handling_suite(self) -> DiagnosticSuiteReport:
        async def _backend_error_normalization() -> DiagnosticOutcome:
            normalized_error = normalize_error(BackendServiceError("auth/invalid-credential", "Invalid credentials"))
            if normalized_error.kind is not ErrorKind.AUTHORIZATION or not normalized_error.user_message:
                raise RuntimeError("Error normalization failed")
            return DiagnosticOutcome(
                DiagnosticStatus.PASS,
                "Backend service errors are properly normalized",
                {"userMessage": normalized_error.user_message},
            )

        async def _async_error_handling() -> DiagnosticOutcome:
            async def _failing_operation() -> None:
                raise RuntimeError("Test error")

            result, error = await handle_async(_failing_operation, "Diagnostics", self._development_mode)
            if result is not None or error is None:
                raise RuntimeError("Async error handling failed")
            return DiagnosticOutcome(
                DiagnosticStatus.PASS,
                "Async operations are properly wrapped with error handling",
            )

        async def _retry_fail_fast() -> DiagnosticOutcome:
            attempts = 0

            async def _invalid_operation() -> None:
                nonlocal attempts
                attempts += 1
                raise error_create_validation("Diagnostics validation failure")

            result, error = await handle_async(
                lambda: with_retry(
                    _invalid_operation,
                    max_attempts=3,
                    delay_ms=0,
                    context="Diagnostics",
                    development_mode=self._development_mode,
                )
            )
            if result is not None or error is None or error.kind is not ErrorKind.VALIDATION or attempts != 1:
                raise RuntimeError("Non-retryable failures were retried")
            return DiagnosticOutcome(DiagnosticStatus.PASS, "Validation failures are not retried")

        return await self._run_suite(
            SUITE_ERROR_HANDLING,
            [
                ("Backend Error Normalization", _backend_error_normalization),
                ("Async Error Handling", _async_error_handling),
                ("Retry Fail-Fast Policy", _retry_fail_fast),
            ],
        )

    async def run_connectivity_suite(self) -> DiagnosticSuiteReport:
        async def _health_monitor() -> DiagnosticOutcome:
            health_status = await self._health_monitor.check_health()
            failed_checks = [name for name, result in health_status.checks.items() if result.status is CheckStatus.FAIL]
            if failed_checks:
                return DiagnosticOutcome(
                    DiagnosticStatus.FAIL,
                    f"{len(failed_checks)} health checks failed",
                    health_status_to_payload(health_status),
                )
            return DiagnosticOutcome(
                DiagnosticStatus.PASS,
                "All health checks passed",
                health_status_to_payload(health_status),
            )

        async def _backend_initialization() -> DiagnosticOutcome:
            backend_result = await self._health_monitor.check_backend_services()
            if backend_result.status is CheckStatus.FAIL:
                return DiagnosticOutcome(DiagnosticStatus.FAIL, backend_result.message, backend_result.details)
            return DiagnosticOutcome(
                DiagnosticStatus.PASS,
                "Backend services initialized successfully",
                backend_result.details,
            )

        return await self._run_suite(
            SUITE_CONNECTIVITY,
            [
                ("Health Monitor", _health_monitor),
                ("Backend Initialization", _backend_initialization),
            ],
        )

    async def run_security_suite(self) -> DiagnosticSuiteReport:
        async def _variable_exposure() -> DiagnosticOutcome:
            if not self._is_client():
                return DiagnosticOutcome(DiagnosticStatus.SKIP, "Client exposure test skipped on server")
            raw_values = env_collect_raw_values(self._environment_source)
            exposed_keys = [key for key in SENSITIVE_SERVER_KEYS if (raw_values.get(key) or "").strip()]
            if exposed_keys:
                raise RuntimeError(f"Sensitive variables exposed to client: {', '.join(exposed_keys)}")
            return DiagnosticOutcome(DiagnosticStatus.PASS, "No sensitive environment variables exposed to client")

        async def _message_redaction() -> DiagnosticOutcome:
            secret_marker = "diagnostics-secret-marker"
            try:
                raise RuntimeError(f"credential rejected: {secret_marker}")
            except RuntimeError as error:
                normalized_error = normalize_error(error)
            if secret_marker in normalized_error.user_message:
                raise RuntimeError("Internal error text leaked into user message")
            if normalized_error.trace and normalized_error.trace in normalized_error.user_message:
                raise RuntimeError("Trace leaked into user message")
            return DiagnosticOutcome(DiagnosticStatus.PASS, "User-facing error messages are redacted")

        return await self._run_suite(
            SUITE_SECURITY,
            [
                ("Environment Variable Security", _variable_exposure),
                ("Error Message Redaction", _message_redaction),
            ],
        )


def diagnostics_render_report(suites: Sequence[DiagnosticSuiteReport]) -> str:
    """Render suite reports as a plain-text console summary."""

    lines: list[str] = []
    for suite in suites:
        lines.append(f"{suite.suite_name}:")
        lines.append(f"  passed:  {suite.summary.passed}")
        lines.append(f"  failed:  {suite.summary.failed}")
        lines.append(f"  skipped: {suite.summary.skipped}")
        lines.append(f"  time:    {suite.summary.duration_ms:.1f}ms")
        failed_results = [result for result in suite.results if result.status is DiagnosticStatus.FAIL]
        if failed_results:
            lines.append("  Failed tests:")
            lines.extend(f"    - {result.name}: {result.message}" for result in failed_results)
        lines.append("")

    total_passed = sum(suite.summary.passed for suite in suites)
    total_failed = sum(suite.summary.failed for suite in suites)
    lines.append(f"Overall: {total_passed} passed, {total_failed} failed")
    if total_failed == 0:
        lines.append("All robustness tests passed.")
    else:
        lines.append("Some tests failed. Address the issues before deployment.")
    return "\n".join(lines)
