"""Tests for health probe aggregation, caching and metrics."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from itertools import product
from typing import Any, Mapping, Sequence

import pytest

from hydrotrack.adapters import CachedIdentityService, Principal
from hydrotrack.config import EnvironmentContext
from hydrotrack.errors import BackendServiceError
from hydrotrack.health import (
    CHECK_BACKEND_SERVICES,
    CHECK_DATA_STORE,
    CHECK_ENVIRONMENT,
    CHECK_IDENTITY,
    HEALTH_CHECK_NAMES,
    CheckStatus,
    HealthCheckResult,
    HealthMonitor,
    OverallStatus,
    health_determine_overall_status,
    health_status_to_payload,
    health_validate_deployment,
)


class _FakeClock:
    """Manually advanced wall clock returning epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _StubDocumentStore:
    """Test double that records probe reads and can simulate failures."""

    def __init__(self, failure: Exception | None = None, delay_seconds: float = 0.0):
        self.calls: list[tuple[str, int]] = []
        self._failure = failure
        self._delay_seconds = delay_seconds

    def store_project_id(self) -> str:
        return "hydro-test"

    async def store_get(self, collection_path: str, limit: int) -> Sequence[Mapping[str, Any]]:
        self.calls.append((collection_path, limit))
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        if self._failure is not None:
            raise self._failure
        return []


def _build_server_source(include_optional: bool = True) -> dict[str, str]:
    """Create a server configuration mapping.

    Args:
        include_optional: Whether messaging, SMS and AI keys are set.

    Returns:
        dict[str, str]: Deterministic server configuration values.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    source = {
        "SERVICE_ACCOUNT_JSON": json.dumps(
            {"project_id": "hydro-test", "client_email": "svc@hydro-test.iam", "private_key": "key"}
        ),
    }
    if include_optional:
        source.update(
            {
                "TWILIO_ACCOUNT_SID": "AC123",
                "TWILIO_AUTH_TOKEN": "twilio-token",
                "TWILIO_PHONE_NUMBER": "+15550100",
                "TWILIO_MESSAGING_SID": "MG123",
                "GOOGLE_AI_API_KEY": "ai-key",
            }
        )
    return source


def _build_monitor(
    source: Mapping[str, str],
    document_store: _StubDocumentStore | None = None,
    clock: _FakeClock | None = None,
) -> HealthMonitor:
    """Create a server-context monitor wired with test doubles.

    Args:
        source: Configuration mapping.
        document_store: Optional document-store double.
        clock: Optional fake clock.

    Returns:
        HealthMonitor: Monitor under test.

    Raises:
        ValueError: Raised by HealthMonitor on invalid arguments.
    """

    return HealthMonitor(
        execution_context=EnvironmentContext.SERVER,
        identity_service=CachedIdentityService(auth_domain="hydro-test.firebaseapp.com"),
        document_store=document_store or _StubDocumentStore(),
        environment_source=source,
        clock=clock or _FakeClock(),
        development_mode=False,
    )


class _ScriptedHealthMonitor(HealthMonitor):
    """Monitor whose four probes return preset statuses."""

    def __init__(self, statuses: Mapping[str, CheckStatus]):
        super().__init__(
            execution_context=EnvironmentContext.SERVER,
            identity_service=None,
            document_store=None,
            environment_source={},
            development_mode=False,
        )
        self._statuses = dict(statuses)

    def _scripted(self, name: str) -> HealthCheckResult:
        return HealthCheckResult(
            status=self._statuses[name],
            message=f"{name} scripted",
            checked_at=datetime.now(timezone.utc),
        )

    async def check_environment(self) -> HealthCheckResult:
        return self._scripted(CHECK_ENVIRONMENT)

    async def check_backend_services(self) -> HealthCheckResult:
        return self._scripted(CHECK_BACKEND_SERVICES)

    async def check_data_store(self) -> HealthCheckResult:
        return self._scripted(CHECK_DATA_STORE)

    async def check_identity(self) -> HealthCheckResult:
        return self._scripted(CHECK_IDENTITY)


_STATUS_COMBINATIONS = list(product(list(CheckStatus), repeat=4))


@pytest.mark.parametrize("combination", _STATUS_COMBINATIONS)
def test_health_overall_status_for_every_check_combination(combination: tuple[CheckStatus, ...]) -> None:
    """Derive overall status for all 81 combinations of four probe outcomes.

    Args:
        combination: One status per check, in check-name order.

    Returns:
        None: Assertions validate the aggregation rule.

    Raises:
        AssertionError: Raised when aggregation violates the rule.
    """

    if CheckStatus.FAIL in combination:
        expected = OverallStatus.UNHEALTHY
    elif CheckStatus.WARN in combination:
        expected = OverallStatus.DEGRADED
    else:
        expected = OverallStatus.HEALTHY

    monitor = _ScriptedHealthMonitor(dict(zip(HEALTH_CHECK_NAMES, combination)))
    health_status = asyncio.run(monitor.check_health())

    assert len(_STATUS_COMBINATIONS) == 81
    assert health_determine_overall_status(combination) is expected
    assert health_status.overall_status is expected
    assert [health_status.checks[name].status for name in HEALTH_CHECK_NAMES] == list(combination)


def test_health_check_all_probes_pass_is_healthy() -> None:
    """Report healthy when configuration and collaborators are all available.

    Returns:
        None: Assertions validate the healthy path.

    Raises:
        AssertionError: Raised when any probe does not pass.
    """

    document_store = _StubDocumentStore()
    monitor = _build_monitor(_build_server_source(), document_store)

    health_status = asyncio.run(monitor.check_health())

    assert health_status.overall_status is OverallStatus.HEALTHY
    assert set(health_status.checks) == set(HEALTH_CHECK_NAMES)
    assert document_store.calls == [("health-check", 1)]
    assert health_status.checks[CHECK_IDENTITY].details == {
        "authenticated": False,
        "provider": "hydro-test.firebaseapp.com",
    }


def test_health_check_missing_optional_integrations_is_degraded() -> None:
    """Report degraded when only the backend-services probe warns.

    Returns:
        None: Assertions validate the pass/warn/pass/pass scenario.

    Raises:
        AssertionError: Raised when the aggregate is not degraded.
    """

    monitor = _build_monitor(_build_server_source(include_optional=False))

    health_status = asyncio.run(monitor.check_health())

    assert [health_status.checks[name].status for name in HEALTH_CHECK_NAMES] == [
        CheckStatus.PASS,
        CheckStatus.WARN,
        CheckStatus.PASS,
        CheckStatus.PASS,
    ]
    assert health_status.overall_status is OverallStatus.DEGRADED
    assert "TWILIO_AUTH_TOKEN" in health_status.checks[CHECK_BACKEND_SERVICES].details["missingIntegrations"]


def test_health_check_caches_within_window_and_recomputes_after() -> None:
    """Return the cached object inside 30 seconds and recompute afterwards.

    Returns:
        None: Assertions validate cache-window behavior.

    Raises:
        AssertionError: Raised when caching is incorrect.
    """

    clock = _FakeClock()
    document_store = _StubDocumentStore()
    monitor = _build_monitor(_build_server_source(), document_store, clock)

    first = asyncio.run(monitor.check_health())
    clock.advance(29.9)
    second = asyncio.run(monitor.check_health())
    clock.advance(0.2)
    third = asyncio.run(monitor.check_health())

    assert second is first
    assert third is not first
    assert third.checked_at > first.checked_at
    assert len(document_store.calls) == 2


def test_health_check_concurrent_callers_share_one_computation() -> None:
    """Probe once when several callers request health at the same time.

    Returns:
        None: Assertions validate single-flight recomputation.

    Raises:
        AssertionError: Raised when probes run more than once.
    """

    document_store = _StubDocumentStore(delay_seconds=0.01)
    monitor = _build_monitor(_build_server_source(), document_store)

    async def _scenario() -> list:
        return list(await asyncio.gather(*(monitor.check_health() for _ in range(5))))

    results = asyncio.run(_scenario())

    assert len(document_store.calls) == 1
    assert all(result is results[0] for result in results)


def test_health_check_failures_stay_inside_their_probe() -> None:
    """Keep probing every collaborator when one probe fails.

    Returns:
        None: Assertions validate independent failure domains.

    Raises:
        AssertionError: Raised when one failure affects other probes.
    """

    document_store = _StubDocumentStore(failure=BackendServiceError("firestore/unavailable", "backend down"))

    class _BrokenIdentityMonitor(HealthMonitor):
        async def check_identity(self) -> HealthCheckResult:
            raise RuntimeError("identity probe crashed")

    monitor = _BrokenIdentityMonitor(
        execution_context=EnvironmentContext.SERVER,
        identity_service=CachedIdentityService(auth_domain="hydro-test.firebaseapp.com"),
        document_store=document_store,
        environment_source=_build_server_source(),
        clock=_FakeClock(),
        development_mode=False,
    )

    health_status = asyncio.run(monitor.check_health())

    assert health_status.overall_status is OverallStatus.UNHEALTHY
    assert health_status.checks[CHECK_ENVIRONMENT].status is CheckStatus.PASS
    assert health_status.checks[CHECK_BACKEND_SERVICES].status is CheckStatus.PASS
    assert health_status.checks[CHECK_DATA_STORE].status is CheckStatus.FAIL
    assert health_status.checks[CHECK_DATA_STORE].details["code"] == "firestore/unavailable"
    assert health_status.checks[CHECK_IDENTITY].status is CheckStatus.FAIL
    assert health_status.checks[CHECK_IDENTITY].details == {"error": "identity probe crashed"}


def test_health_check_missing_collaborators_and_configuration_fail() -> None:
    """Fail every probe when configuration and collaborators are absent.

    Returns:
        None: Assertions validate uninitialized collaborator handling.

    Raises:
        AssertionError: Raised when missing collaborators are not reported.
    """

    monitor = HealthMonitor(
        execution_context=EnvironmentContext.SERVER,
        identity_service=None,
        document_store=None,
        environment_source={},
        development_mode=False,
    )

    health_status = asyncio.run(monitor.check_health())

    assert health_status.overall_status is OverallStatus.UNHEALTHY
    assert all(result.status is CheckStatus.FAIL for result in health_status.checks.values())
    assert health_status.checks[CHECK_ENVIRONMENT].details == {"missingKeys": ["SERVICE_ACCOUNT_JSON"]}
    assert asyncio.run(health_validate_deployment(monitor)) is False


def test_health_identity_probe_reports_signed_in_principal() -> None:
    """Report authentication state from the cached principal.

    Returns:
        None: Assertions validate identity probe details.

    Raises:
        AssertionError: Raised when identity details are incorrect.
    """

    identity_service = CachedIdentityService(auth_domain="hydro-test.firebaseapp.com")
    identity_service.identity_set_principal(Principal(uid="user-1", email="user@example.test"))
    monitor = HealthMonitor(
        execution_context=EnvironmentContext.SERVER,
        identity_service=identity_service,
        document_store=_StubDocumentStore(),
        environment_source=_build_server_source(),
        development_mode=False,
    )

    result = asyncio.run(monitor.check_identity())

    assert result.status is CheckStatus.PASS
    assert result.details["authenticated"] is True


def test_health_metrics_error_rate_uses_minimum_window_and_reset() -> None:
    """Compute error rate with a 0.1 hour floor and clear state on reset.

    Returns:
        None: Assertions validate metrics and reset behavior.

    Raises:
        AssertionError: Raised when metrics are incorrect.
    """

    clock = _FakeClock()
    document_store = _StubDocumentStore()
    monitor = _build_monitor(_build_server_source(), document_store, clock)

    for _ in range(3):
        monitor.record_error(RuntimeError("save failed"))
    clock.advance(60)

    early_metrics = monitor.health_metrics()
    assert monitor.error_count == 3
    assert early_metrics.error_rate == pytest.approx(30.0)
    assert early_metrics.uptime_ms == 60_000
    assert early_metrics.average_response_time == 0.0

    clock.advance(7_140)
    assert monitor.health_metrics().error_rate == pytest.approx(1.5)

    first = asyncio.run(monitor.check_health())
    monitor.reset_metrics()
    second = asyncio.run(monitor.check_health())

    assert monitor.error_count == 0
    assert second is not first
    assert second.metrics.uptime_ms == 0
    assert len(document_store.calls) == 2


def test_health_record_error_does_not_change_cached_status() -> None:
    """Leave the cached status untouched when errors are recorded.

    Returns:
        None: Assertions validate cache isolation from error recording.

    Raises:
        AssertionError: Raised when recording alters the cached status.
    """

    monitor = _build_monitor(_build_server_source())

    first = asyncio.run(monitor.check_health())
    monitor.record_error(BackendServiceError("firestore/internal", "internal"))
    second = asyncio.run(monitor.check_health())

    assert second is first
    assert second.metrics.error_rate == 0.0
    assert asyncio.run(health_validate_deployment(monitor)) is True


def test_health_status_payload_is_json_serializable() -> None:
    """Render the aggregate status as JSON-compatible data.

    Returns:
        None: Assertions validate payload rendering.

    Raises:
        AssertionError: Raised when the payload cannot be serialized.
    """

    monitor = _build_monitor(_build_server_source(include_optional=False))

    payload = health_status_to_payload(asyncio.run(monitor.check_health()))

    assert json.loads(json.dumps(payload))["status"] == "degraded"
    assert set(payload["checks"]) == set(HEALTH_CHECK_NAMES)
    assert set(payload["metrics"]) == {"errorRate", "averageResponseTime", "uptimeMs"}


def test_health_monitor_rejects_non_positive_cache_window() -> None:
    """Reject a zero cache window.

    Returns:
        None: Assertions validate constructor validation.

    Raises:
        AssertionError: Raised when invalid windows are accepted.
    """

    with pytest.raises(ValueError, match="cache_ttl_seconds"):
        HealthMonitor(EnvironmentContext.SERVER, None, None, environment_source={}, cache_ttl_seconds=0)
