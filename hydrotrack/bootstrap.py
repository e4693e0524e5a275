"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

import httpx
from fastapi import FastAPI

from hydrotrack.adapters import (
    CachedIdentityService,
    FirestoreRestDocumentStore,
    ServiceAccountCredentials,
    ServiceAccountError,
    ServiceAccountTokenProvider,
    adapter_parse_service_account,
)
from hydrotrack.api import create_api_application
from hydrotrack.config import AppSettings, EnvironmentContext, config_load_settings, env_collect_raw_values
from hydrotrack.diagnostics import DiagnosticsRunner
from hydrotrack.errors import error_configure_development_mode
from hydrotrack.health import HealthMonitor

logger = logging.getLogger(__name__)


def _bootstrap_value(raw_values: Mapping[str, str | None], key: str) -> str | None:
    value = raw_values.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def bootstrap_configure_runtime(settings: AppSettings) -> None:
    """Apply process-wide runtime choices derived from settings once at startup."""

    error_configure_development_mode(settings.is_development)


def bootstrap_snapshot_environment(
    environment_source: Mapping[str, str | None] | None = None,
) -> Mapping[str, str | None]:
    """Read configuration keys once so probes never re-read the process environment or `.env`.

    Args:
        environment_source: Optional explicit configuration mapping.

    Returns:
        Mapping[str, str | None]: Read-only snapshot keyed by every known configuration key.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    return MappingProxyType(env_collect_raw_values(environment_source))


def bootstrap_parse_credentials(raw_values: Mapping[str, str | None]) -> ServiceAccountCredentials | None:
    """Parse service account credentials when configured.

    Args:
        raw_values: Raw configuration values keyed by configuration key.

    Returns:
        ServiceAccountCredentials | None: Parsed credentials, None when absent or unusable.

    Raises:
        RuntimeError: Unparseable credentials are logged and skipped, not raised.
    """

    service_account_json = _bootstrap_value(raw_values, "SERVICE_ACCOUNT_JSON")
    if service_account_json is None:
        return None
    try:
        return adapter_parse_service_account(service_account_json)
    except ServiceAccountError as error:
        logger.warning("service account credentials unusable, falling back to FIREBASE_PROJECT_ID: %s", error)
        return None


def bootstrap_resolve_project_id(raw_values: Mapping[str, str | None]) -> str | None:
    """Resolve the backend project id from service account credentials, else client configuration.

    Args:
        raw_values: Raw configuration values keyed by configuration key.

    Returns:
        str | None: Project identifier, None when neither source provides one.

    Raises:
        RuntimeError: Unparseable credentials are logged and skipped, not raised.
    """

    credentials = bootstrap_parse_credentials(raw_values)
    if credentials is not None:
        return credentials.project_id
    return _bootstrap_value(raw_values, "FIREBASE_PROJECT_ID")


def bootstrap_create_document_store(
    settings: AppSettings,
    raw_values: Mapping[str, str | None],
    transport: httpx.AsyncBaseTransport | None = None,
) -> FirestoreRestDocumentStore | None:
    """Build the document store, authenticated with the service account in server context.

    Args:
        settings: Validated runtime settings.
        raw_values: Raw configuration values keyed by configuration key.
        transport: Optional httpx transport passed to the store.

    Returns:
        FirestoreRestDocumentStore | None: Store, None when no project id is configured.

    Raises:
        ValueError: Raised when settings carry invalid values.
    """

    credentials = bootstrap_parse_credentials(raw_values)
    project_id = credentials.project_id if credentials is not None else _bootstrap_value(raw_values, "FIREBASE_PROJECT_ID")
    if project_id is None:
        return None

    token_provider: ServiceAccountTokenProvider | None = None
    if EnvironmentContext(settings.execution_context) is EnvironmentContext.SERVER:
        if credentials is None:
            logger.warning("no usable service account credentials; data store reads are unauthenticated")
        else:
            token_provider = ServiceAccountTokenProvider(credentials)

    return FirestoreRestDocumentStore(
        project_id=project_id,
        api_key=_bootstrap_value(raw_values, "FIREBASE_API_KEY"),
        base_url=settings.document_store_base_url,
        timeout_seconds=settings.document_store_timeout_seconds,
        transport=transport,
        token_provider=token_provider,
    )


def bootstrap_create_health_monitor(
    settings: AppSettings,
    environment_source: Mapping[str, str | None] | None = None,
) -> HealthMonitor:
    """Build the application-scoped health monitor and its collaborators.

    Collaborators that cannot be configured are passed as None so the monitor
    reports them as failed checks instead of failing startup.

    Args:
        settings: Validated runtime settings.
        environment_source: Optional explicit configuration mapping instead of the process environment.

    Returns:
        HealthMonitor: Monitor owned by the caller's lifetime scope, probing a configuration snapshot.

    Raises:
        ValueError: Raised when settings carry invalid values.
    """

    raw_values = bootstrap_snapshot_environment(environment_source)
    document_store = bootstrap_create_document_store(settings, raw_values)

    identity_service: CachedIdentityService | None = None
    if document_store is None:
        logger.warning("no backend project id configured; data store and identity probes will fail")
    else:
        project_id = document_store.store_project_id()
        auth_domain = _bootstrap_value(raw_values, "FIREBASE_AUTH_DOMAIN") or f"{project_id}.firebaseapp.com"
        identity_service = CachedIdentityService(auth_domain=auth_domain)

    return HealthMonitor(
        execution_context=EnvironmentContext(settings.execution_context),
        identity_service=identity_service,
        document_store=document_store,
        environment_source=raw_values,
        cache_ttl_seconds=settings.health_cache_ttl_seconds,
        development_mode=settings.is_development,
    )


def bootstrap_create_diagnostics_runner(
    settings: AppSettings,
    health_monitor: HealthMonitor,
    environment_source: Mapping[str, str | None] | None = None,
) -> DiagnosticsRunner:
    return DiagnosticsRunner(
        execution_context=EnvironmentContext(settings.execution_context),
        health_monitor=health_monitor,
        environment_source=environment_source if environment_source is not None else health_monitor.environment_source,
        development_mode=settings.is_development,
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional preloaded settings; loaded from environment when None.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    bootstrap_configure_runtime(resolved_settings)
    health_monitor = bootstrap_create_health_monitor(resolved_settings)
    diagnostics_runner = bootstrap_create_diagnostics_runner(resolved_settings, health_monitor)
    return create_api_application(
        settings=resolved_settings,
        health_monitor=health_monitor,
        diagnostics_runner=diagnostics_runner,
        environment_source=health_monitor.environment_source,
    )
