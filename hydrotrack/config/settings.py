"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEVELOPMENT_ENVIRONMENT_NAMES = frozenset({"development", "dev", "local", "test"})
EXECUTION_CONTEXT_NAMES = frozenset({"client", "server"})


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for API runtime and health probing.

    Environment variable names map directly to field names in uppercase.
    Example: `health_cache_ttl_seconds` reads from `HEALTH_CACHE_TTL_SECONDS`.

    Attributes:
        environment_name: Runtime environment label; development-like names enable verbose error logs.
        execution_context: Configuration context validated by health checks (`client` or `server`).
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Root logging level name.
        health_cache_ttl_seconds: Window during which a computed health status is reused.
        document_store_base_url: Firestore REST endpoint root.
        document_store_timeout_seconds: HTTP timeout for document store probes.
        diagnostics_enabled: Expose diagnostic endpoints on the HTTP API.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="production")
    execution_context: str = Field(default="server")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    health_cache_ttl_seconds: float = Field(default=30.0, gt=0)
    document_store_base_url: str = Field(default="https://firestore.googleapis.com/v1")
    document_store_timeout_seconds: float = Field(default=10.0, gt=0)
    diagnostics_enabled: bool = Field(default=False)

    @field_validator("environment_name", "log_level", "document_store_base_url")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("execution_context")
    @classmethod
    def _validate_execution_context(cls, value: str) -> str:
        normalized_value = value.strip().lower()
        if normalized_value not in EXECUTION_CONTEXT_NAMES:
            raise ValueError("execution_context must be one of: client, server")
        return normalized_value

    @property
    def is_development(self) -> bool:
        """Return whether the runtime environment allows verbose diagnostics."""

        return self.environment_name.lower() in DEVELOPMENT_ENVIRONMENT_NAMES


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error


def config_is_development_mode() -> bool:
    """Resolve development mode from the runtime environment name.

    Returns:
        bool: True when `ENVIRONMENT_NAME` is development-like. Invalid settings count as production.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    try:
        return config_load_settings().is_development
    except SettingsLoadError:
        return False
