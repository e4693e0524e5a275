"""Health monitoring package for probe aggregation and caching."""

from .models import (
    CHECK_BACKEND_SERVICES,
    CHECK_DATA_STORE,
    CHECK_ENVIRONMENT,
    CHECK_IDENTITY,
    HEALTH_CHECK_NAMES,
    CheckStatus,
    HealthCheckResult,
    HealthMetrics,
    HealthStatus,
    OverallStatus,
    health_check_to_payload,
    health_determine_overall_status,
    health_status_to_payload,
)
from .monitor import HEALTH_PROBE_COLLECTION, HealthMonitor, health_validate_deployment

__all__ = [
    "CHECK_BACKEND_SERVICES",
    "CHECK_DATA_STORE",
    "CHECK_ENVIRONMENT",
    "CHECK_IDENTITY",
    "CheckStatus",
    "HEALTH_CHECK_NAMES",
    "HEALTH_PROBE_COLLECTION",
    "HealthCheckResult",
    "HealthMetrics",
    "HealthMonitor",
    "HealthStatus",
    "OverallStatus",
    "health_check_to_payload",
    "health_determine_overall_status",
    "health_status_to_payload",
    "health_validate_deployment",
]
