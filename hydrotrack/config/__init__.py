"""Configuration package for runtime settings and environment key validation."""

from .env_validation import (
    CLIENT_OPTIONAL_KEYS,
    CLIENT_REQUIRED_KEYS,
    SENSITIVE_SERVER_KEYS,
    SERVER_OPTIONAL_KEYS,
    SERVER_REQUIRED_KEYS,
    SERVER_TELEPHONY_KEYS,
    EnvironmentConfig,
    EnvironmentContext,
    EnvironmentValidationError,
    env_collect_raw_values,
    env_describe_presence,
    env_get_config,
    env_is_valid,
    env_validate,
)
from .settings import AppSettings, SettingsLoadError, config_is_development_mode, config_load_settings

__all__ = [
    "AppSettings",
    "CLIENT_OPTIONAL_KEYS",
    "CLIENT_REQUIRED_KEYS",
    "EnvironmentConfig",
    "EnvironmentContext",
    "EnvironmentValidationError",
    "SENSITIVE_SERVER_KEYS",
    "SERVER_OPTIONAL_KEYS",
    "SERVER_REQUIRED_KEYS",
    "SERVER_TELEPHONY_KEYS",
    "SettingsLoadError",
    "config_is_development_mode",
    "config_load_settings",
    "env_collect_raw_values",
    "env_describe_presence",
    "env_get_config",
    "env_is_valid",
    "env_validate",
]
