"""Presence validation for client-facing and server-only configuration keys.

Validation runs in three steps: raw values are collected (from an explicit
mapping or from the process environment and `.env`), the required key set is
checked for completeness, and only then is an immutable `EnvironmentConfig`
built. Partially filled configuration never leaves this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class EnvironmentContext(str, Enum):
    """Execution context whose configuration keys are validated."""

    CLIENT = "client"
    SERVER = "server"


CLIENT_REQUIRED_KEYS: Final[tuple[str, ...]] = (
    "FIREBASE_API_KEY",
    "FIREBASE_AUTH_DOMAIN",
    "FIREBASE_PROJECT_ID",
    "FIREBASE_STORAGE_BUCKET",
    "FIREBASE_MESSAGING_SENDER_ID",
    "FIREBASE_APP_ID",
)
CLIENT_OPTIONAL_KEYS: Final[tuple[str, ...]] = (
    "FIREBASE_VAPID_KEY",
    "RECAPTCHA_SITE_KEY",
)
SERVER_REQUIRED_KEYS: Final[tuple[str, ...]] = ("SERVICE_ACCOUNT_JSON",)
SERVER_TELEPHONY_KEYS: Final[tuple[str, ...]] = (
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_PHONE_NUMBER",
    "TWILIO_MESSAGING_SID",
)
SERVER_OPTIONAL_KEYS: Final[tuple[str, ...]] = SERVER_TELEPHONY_KEYS + ("GOOGLE_AI_API_KEY",)

# Keys that must never be reachable from a client execution context.
SENSITIVE_SERVER_KEYS: Final[tuple[str, ...]] = (
    "SERVICE_ACCOUNT_JSON",
    "TWILIO_AUTH_TOKEN",
    "GOOGLE_AI_API_KEY",
)

_CONTEXT_KEYS: Final[dict[EnvironmentContext, tuple[tuple[str, ...], tuple[str, ...]]]] = {
    EnvironmentContext.CLIENT: (CLIENT_REQUIRED_KEYS, CLIENT_OPTIONAL_KEYS),
    EnvironmentContext.SERVER: (SERVER_REQUIRED_KEYS, SERVER_OPTIONAL_KEYS),
}

ALL_CONFIGURATION_KEYS: Final[tuple[str, ...]] = (
    CLIENT_REQUIRED_KEYS + CLIENT_OPTIONAL_KEYS + SERVER_REQUIRED_KEYS + SERVER_OPTIONAL_KEYS
)


class EnvironmentValidationError(ValueError):
    """Raised when required configuration keys are missing or blank.

    Attributes:
        context: Context whose validation failed.
        missing_keys: Required keys that were absent or blank, in declaration order.
    """

    def __init__(self, context: EnvironmentContext, missing_keys: tuple[str, ...]):
        label = "client" if context is EnvironmentContext.CLIENT else "server"
        super().__init__(
            f"Missing required {label} environment variables: {', '.join(missing_keys)}. "
            "Please check your .env file."
        )
        self.context = context
        self.missing_keys = missing_keys


@dataclass(frozen=True)
class EnvironmentConfig:
    """Validated configuration for one execution context.

    Attributes:
        context: Context the values were validated for.
        values: Read-only mapping of configuration key to trimmed value.
    """

    context: EnvironmentContext
    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return a configured value or `default` when the key was not set."""

        return self.values.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.values


class _RawEnvironmentSource(BaseSettings):
    """Settings model reading every known configuration key as optional text."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    firebase_api_key: str | None = None
    firebase_auth_domain: str | None = None
    firebase_project_id: str | None = None
    firebase_storage_bucket: str | None = None
    firebase_messaging_sender_id: str | None = None
    firebase_app_id: str | None = None
    firebase_vapid_key: str | None = None
    recaptcha_site_key: str | None = None
    service_account_json: str | None = None
    google_ai_api_key: str | None = None
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_phone_number: str | None = None
    twilio_messaging_sid: str | None = None


def env_collect_raw_values(source: Mapping[str, str | None] | None = None) -> dict[str, str | None]:
    """Collect raw values for every known configuration key.

    Args:
        source: Explicit key/value mapping. When None, the process environment and `.env` are read.

    Returns:
        dict[str, str | None]: Raw value per known key, None when absent.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if source is None:
        loaded_values = _RawEnvironmentSource().model_dump()
        return {key: loaded_values.get(key.lower()) for key in ALL_CONFIGURATION_KEYS}
    return {key: source.get(key) for key in ALL_CONFIGURATION_KEYS}


def _env_trimmed(value: str | None) -> str | None:
    if value is None:
        return None
    stripped_value = str(value).strip()
    return stripped_value or None


def env_validate(
    context: EnvironmentContext,
    source: Mapping[str, str | None] | None = None,
) -> EnvironmentConfig:
    """Validate configuration keys for an execution context.

    Args:
        context: Execution context to validate.
        source: Optional explicit key/value mapping used instead of the process environment.

    Returns:
        EnvironmentConfig: Required keys plus any non-blank optional keys, trimmed.

    Raises:
        EnvironmentValidationError: Raised when any required key is missing or blank.
    """

    required_keys, optional_keys = _CONTEXT_KEYS[EnvironmentContext(context)]
    raw_values = env_collect_raw_values(source)

    collected: dict[str, str] = {}
    missing_keys: list[str] = []
    for key in required_keys:
        value = _env_trimmed(raw_values.get(key))
        if value is None:
            missing_keys.append(key)
        else:
            collected[key] = value

    for key in optional_keys:
        value = _env_trimmed(raw_values.get(key))
        if value is not None:
            collected[key] = value

    if missing_keys:
        raise EnvironmentValidationError(EnvironmentContext(context), tuple(missing_keys))

    return EnvironmentConfig(context=EnvironmentContext(context), values=MappingProxyType(collected))


def env_is_valid(context: EnvironmentContext, source: Mapping[str, str | None] | None = None) -> bool:
    """Return whether `env_validate` would succeed for the context, without raising."""

    try:
        env_validate(context, source)
    except EnvironmentValidationError:
        return False
    return True


def env_get_config(
    context: EnvironmentContext,
    source: Mapping[str, str | None] | None = None,
) -> EnvironmentConfig | None:
    """Return validated configuration, or None after logging the validation failure."""

    try:
        return env_validate(context, source)
    except EnvironmentValidationError as error:
        logger.error(
            "environment validation failed",
            extra={"context": error.context.value, "missing_keys": list(error.missing_keys)},
        )
        return None


def env_describe_presence(source: Mapping[str, str | None] | None = None) -> dict[str, bool]:
    """Report which known configuration keys carry a non-blank value.

    Values themselves are never returned.
    """

    raw_values = env_collect_raw_values(source)
    return {key: _env_trimmed(raw_values.get(key)) is not None for key in ALL_CONFIGURATION_KEYS}
