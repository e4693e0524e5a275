"""Health check and aggregate health status contracts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Final, Iterable, Mapping


class CheckStatus(str, Enum):
    """Outcome of one health probe."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class OverallStatus(str, Enum):
    """Aggregate status across all health probes."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


CHECK_ENVIRONMENT: Final[str] = "environment"
CHECK_BACKEND_SERVICES: Final[str] = "backendServices"
CHECK_DATA_STORE: Final[str] = "dataStore"
CHECK_IDENTITY: Final[str] = "identity"
HEALTH_CHECK_NAMES: Final[tuple[str, ...]] = (
    CHECK_ENVIRONMENT,
    CHECK_BACKEND_SERVICES,
    CHECK_DATA_STORE,
    CHECK_IDENTITY,
)


@dataclass(frozen=True)
class HealthCheckResult:
    """Result of one health probe.

    Attributes:
        status: Probe outcome.
        message: Operational message.
        checked_at: UTC time the probe completed.
        details: Optional diagnostic payload.
    """

    status: CheckStatus
    message: str
    checked_at: datetime
    details: Any = None


@dataclass(frozen=True)
class HealthMetrics:
    """Derived monitor metrics.

    Attributes:
        error_rate: Recorded errors per hour, with a 0.1 hour floor on elapsed time.
        average_response_time: Average probe latency; always 0.0 until latency is instrumented.
        uptime_ms: Milliseconds since the monitor started or was reset.
    """

    error_rate: float
    average_response_time: float
    uptime_ms: int


@dataclass(frozen=True)
class HealthStatus:
    """Aggregate health status computed from all probes.

    Attributes:
        overall_status: Aggregate status.
        checked_at: UTC time of computation.
        checks: Read-only mapping of check name to probe result.
        metrics: Monitor metrics at computation time.
    """

    overall_status: OverallStatus
    checked_at: datetime
    checks: Mapping[str, HealthCheckResult]
    metrics: HealthMetrics


def health_determine_overall_status(statuses: Iterable[CheckStatus]) -> OverallStatus:
    """Combine probe outcomes: any fail is unhealthy, else any warn is degraded, else healthy."""

    collected = [CheckStatus(status) for status in statuses]
    if CheckStatus.FAIL in collected:
        return OverallStatus.UNHEALTHY
    if CheckStatus.WARN in collected:
        return OverallStatus.DEGRADED
    return OverallStatus.HEALTHY


def health_check_to_payload(result: HealthCheckResult) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "status": result.status.value,
        "message": result.message,
        "checkedAt": result.checked_at.isoformat(),
    }
    if result.details is not None:
        payload["details"] = result.details
    return payload


def health_status_to_payload(status: HealthStatus) -> dict[str, Any]:
    """Render a health status as a JSON-compatible payload."""

    return {
        "status": status.overall_status.value,
        "checkedAt": status.checked_at.isoformat(),
        "checks": {name: health_check_to_payload(result) for name, result in status.checks.items()},
        "metrics": {
            "errorRate": status.metrics.error_rate,
            "averageResponseTime": status.metrics.average_response_time,
            "uptimeMs": status.metrics.uptime_ms,
        },
    }
