"""Health monitor aggregating configuration and collaborator probes.

The monitor is constructed once by the application bootstrap and passed to
every consumer. Probe results are cached for a fixed window; concurrent callers
inside the window share one computation.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Awaitable, Callable, Final, Mapping

from hydrotrack.adapters import DocumentStorePort, IdentityServicePort
from hydrotrack.config import (
    CLIENT_OPTIONAL_KEYS,
    SERVER_OPTIONAL_KEYS,
    EnvironmentContext,
    EnvironmentValidationError,
    env_collect_raw_values,
    env_validate,
)
from hydrotrack.errors import log_error, normalize_error

from .models import (
    CHECK_BACKEND_SERVICES,
    CHECK_DATA_STORE,
    CHECK_ENVIRONMENT,
    CHECK_IDENTITY,
    CheckStatus,
    HealthCheckResult,
    HealthMetrics,
    HealthStatus,
    OverallStatus,
    health_determine_overall_status,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS: Final[float] = 30.0
HEALTH_PROBE_COLLECTION: Final[str] = "health-check"
_MILLISECONDS_PER_HOUR: Final[float] = 60 * 60 * 1000
_MINIMUM_ELAPSED_HOURS: Final[float] = 0.1

HealthProbe = Callable[[], Awaitable[HealthCheckResult]]


class HealthMonitor:
    """Compute, cache and expose aggregate application health."""

    def __init__(
        self,
        execution_context: EnvironmentContext,
        identity_service: IdentityServicePort | None,
        document_store: DocumentStorePort | None,
        environment_source: Mapping[str, str | None] | None = None,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] | None = None,
        development_mode: bool | None = None,
    ):
        """Initialize health monitor.

        Args:
            execution_context: Configuration context validated by the environment probe.
            identity_service: Identity collaborator, None when it failed to initialize.
            document_store: Document-store collaborator, None when it failed to initialize.
            environment_source: Optional explicit configuration mapping instead of the process environment.
            cache_ttl_seconds: Window during which a computed status is reused.
            clock: Wall-clock provider returning epoch seconds.
            development_mode: Logging mode override for recorded errors.

        Raises:
            ValueError: Raised when cache_ttl_seconds is not positive.
        """

        if cache_ttl_seconds <= 0:
            raise ValueError("cache_ttl_seconds must be > 0")

        self._execution_context = EnvironmentContext(execution_context)
        self._identity_service = identity_service
        self._document_store = document_store
        self._environment_source = environment_source
        self._cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock or time.time
        self._development_mode = development_mode

        self._error_count = 0
        self._start_time = self._clock()
        self._cached_status: HealthStatus | None = None
        self._cached_at: float | None = None
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def execution_context(self) -> EnvironmentContext:
        return self._execution_context

    @property
    def environment_source(self) -> Mapping[str, str | None] | None:
        return self._environment_source

    def _health_now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    def _health_cached_if_fresh(self, now: float) -> HealthStatus | None:
        if self._cached_status is None or self._cached_at is None:
            return None
        if now - self._cached_at < self._cache_ttl_seconds:
            return self._cached_status
        return None

    def _health_lock(self) -> asyncio.Lock:
        running_loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not running_loop:
            self._lock = asyncio.Lock()
            self._lock_loop = running_loop
        return self._lock

    async def check_health(self) -> HealthStatus:
        """Return the cached status inside the cache window, else probe and recompute.

        Returns:
            HealthStatus: Aggregate status. Calls within the window return the same object.

        Raises:
            RuntimeError: This method does not raise for probe failures; they become `fail` results.
        """

        cached_status = self._health_cached_if_fresh(self._clock())
        if cached_status is not None:
            return cached_status

        async with self._health_lock():
            computation_started = self._clock()
            cached_status = self._health_cached_if_fresh(computation_started)
            if cached_status is not None:
                return cached_status

            environment, backend_services, data_store, identity = await asyncio.gather(
                self._health_run_probe(CHECK_ENVIRONMENT, self.check_environment),
                self._health_run_probe(CHECK_BACKEND_SERVICES, self.check_backend_services),
                self._health_run_probe(CHECK_DATA_STORE, self.check_data_store),
                self._health_run_probe(CHECK_IDENTITY, self.check_identity),
            )
            checks = {
                CHECK_ENVIRONMENT: environment,
                CHECK_BACKEND_SERVICES: backend_services,
                CHECK_DATA_STORE: data_store,
                CHECK_IDENTITY: identity,
            }
            health_status = HealthStatus(
                overall_status=health_determine_overall_status(result.status for result in checks.values()),
                checked_at=datetime.fromtimestamp(computation_started, tz=timezone.utc),
                checks=MappingProxyType(checks),
                metrics=self.health_metrics(),
            )
            if health_status.overall_status is not OverallStatus.HEALTHY:
                logger.warning(
                    "health status %s: %s",
                    health_status.overall_status.value,
                    {name: result.status.value for name, result in checks.items()},
                )

            self._cached_status = health_status
            self._cached_at = computation_started
            return health_status

    async def _health_run_probe(self, name: str, probe: HealthProbe) -> HealthCheckResult:
        try:
            return await probe()
        except Exception as error:
            logger.exception("health probe %s raised unexpectedly", name)
            return HealthCheckResult(
                status=CheckStatus.FAIL,
                message=f"{name} check failed unexpectedly",
                checked_at=self._health_now(),
                details={"error": str(error) or type(error).__name__},
            )

    async def check_environment(self) -> HealthCheckResult:
        """Validate configuration keys for the monitor's execution context."""

        try:
            env_validate(self._execution_context, self._environment_source)
        except EnvironmentValidationError as error:
            return HealthCheckResult(
                status=CheckStatus.FAIL,
                message="Environment configuration issues detected",
                checked_at=self._health_now(),
                details={"missingKeys": list(error.missing_keys)},
            )
        return HealthCheckResult(
            status=CheckStatus.PASS,
            message="All required environment variables are properly configured",
            checked_at=self._health_now(),
        )

    async def check_backend_services(self) -> HealthCheckResult:
        """Confirm collaborators are initialized and report unconfigured optional integrations."""

        if self._identity_service is None or self._document_store is None:
            return HealthCheckResult(
                status=CheckStatus.FAIL,
                message="Firebase services are not properly initialized",
                checked_at=self._health_now(),
                details={
                    "identity": self._identity_service is not None,
                    "dataStore": self._document_store is not None,
                },
            )

        try:
            project_id = self._document_store.store_project_id()
            provider = self._identity_service.identity_provider_label()
        except Exception as error:
            normalized_error = normalize_error(error)
            return HealthCheckResult(
                status=CheckStatus.FAIL,
                message="Firebase services are not available",
                checked_at=self._health_now(),
                details={"kind": normalized_error.kind.value, "error": normalized_error.internal_message},
            )

        optional_keys = (
            CLIENT_OPTIONAL_KEYS if self._execution_context is EnvironmentContext.CLIENT else SERVER_OPTIONAL_KEYS
        )
        raw_values = env_collect_raw_values(self._environment_source)
        missing_integrations = [key for key in optional_keys if not (raw_values.get(key) or "").strip()]
        details = {"projectId": project_id, "provider": provider}
        if missing_integrations:
            return HealthCheckResult(
                status=CheckStatus.WARN,
                message="Firebase services are available; optional integrations are not configured",
                checked_at=self._health_now(),
                details={**details, "missingIntegrations": missing_integrations},
            )
        return HealthCheckResult(
            status=CheckStatus.PASS,
            message="Firebase services are available",
            checked_at=self._health_now(),
            details=details,
        )

    async def check_data_store(self) -> HealthCheckResult:
        """Read one document from the probe collection."""

        if self._document_store is None:
            return HealthCheckResult(
                status=CheckStatus.FAIL,
                message="Database connectivity issues detected",
                checked_at=self._health_now(),
                details={"error": "Firestore not initialized"},
            )
        try:
            await self._document_store.store_get(HEALTH_PROBE_COLLECTION, 1)
        except Exception as error:
            normalized_error = normalize_error(error)
            return HealthCheckResult(
                status=CheckStatus.FAIL,
                message="Database connectivity issues detected",
                checked_at=self._health_now(),
                details={
                    "kind": normalized_error.kind.value,
                    "code": normalized_error.code,
                    "error": normalized_error.internal_message,
                },
            )
        return HealthCheckResult(
            status=CheckStatus.PASS,
            message="Database is reachable and responsive",
            checked_at=self._health_now(),
        )

    async def check_identity(self) -> HealthCheckResult:
        """Read cached auth state from the identity collaborator."""

        if self._identity_service is None:
            return HealthCheckResult(
                status=CheckStatus.FAIL,
                message="Authentication service issues detected",
                checked_at=self._health_now(),
                details={"error": "Firebase Auth not initialized"},
            )
        try:
            principal = self._identity_service.identity_get_current_principal()
            provider = self._identity_service.identity_provider_label()
        except Exception as error:
            normalized_error = normalize_error(error)
            return HealthCheckResult(
                status=CheckStatus.FAIL,
                message="Authentication service issues detected",
                checked_at=self._health_now(),
                details={
                    "kind": normalized_error.kind.value,
                    "code": normalized_error.code,
                    "error": normalized_error.internal_message,
                },
            )
        return HealthCheckResult(
            status=CheckStatus.PASS,
            message="Authentication service is available",
            checked_at=self._health_now(),
            details={"authenticated": principal is not None, "provider": provider},
        )

    def health_metrics(self) -> HealthMetrics:
        """Return current metrics.

        The error rate divides by at least 0.1 hours, so it reads low right after start or reset.
        """

        elapsed_ms = max(self._clock() - self._start_time, 0.0) * 1000
        elapsed_hours = max(elapsed_ms / _MILLISECONDS_PER_HOUR, _MINIMUM_ELAPSED_HOURS)
        return HealthMetrics(
            error_rate=self._error_count / elapsed_hours,
            average_response_time=0.0,
            uptime_ms=int(elapsed_ms),
        )

    def record_error(self, value: object) -> None:
        """Count a failure and log it; the cached status is untouched until the next recompute."""

        self._error_count += 1
        log_error(normalize_error(value), "Health Monitor", self._development_mode)

    def reset_metrics(self) -> None:
        """Zero the error counter, restart the uptime clock and drop the cached status."""

        self._error_count = 0
        self._start_time = self._clock()
        self._cached_status = None
        self._cached_at = None


async def health_validate_deployment(monitor: HealthMonitor) -> bool:
    """Return True only when the aggregate status is healthy."""

    try:
        health_status = await monitor.check_health()
    except Exception:
        logger.exception("deployment health validation failed")
        return False
    return health_status.overall_status is OverallStatus.HEALTHY
