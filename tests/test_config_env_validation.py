"""Tests for client and server configuration key validation."""

from __future__ import annotations

from itertools import combinations
from pathlib import Path

import pytest

from hydrotrack.config import (
    CLIENT_OPTIONAL_KEYS,
    CLIENT_REQUIRED_KEYS,
    SERVER_OPTIONAL_KEYS,
    EnvironmentContext,
    EnvironmentValidationError,
    env_describe_presence,
    env_get_config,
    env_is_valid,
    env_validate,
)


def _build_client_source() -> dict[str, str]:
    """Create a client source with every required key set.

    Returns:
        dict[str, str]: Deterministic client configuration values.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {key: f"value-for-{key.lower()}" for key in CLIENT_REQUIRED_KEYS}


_MISSING_KEY_SUBSETS = [
    subset
    for subset_size in range(1, len(CLIENT_REQUIRED_KEYS) + 1)
    for subset in combinations(CLIENT_REQUIRED_KEYS, subset_size)
]


@pytest.mark.parametrize("missing_subset", _MISSING_KEY_SUBSETS)
def test_config_env_validate_client_reports_exact_missing_key_set(missing_subset: tuple[str, ...]) -> None:
    """Report exactly the absent or blank required keys for every missing subset.

    Args:
        missing_subset: Required keys removed or blanked for this case.

    Returns:
        None: Assertions validate missing-key reporting.

    Raises:
        AssertionError: Raised when the reported set differs from the removed set.
    """

    source: dict[str, str] = _build_client_source()
    for index, key in enumerate(missing_subset):
        if index % 2 == 0:
            del source[key]
        else:
            source[key] = "   "

    with pytest.raises(EnvironmentValidationError) as error_info:
        env_validate(EnvironmentContext.CLIENT, source)

    assert set(error_info.value.missing_keys) == set(missing_subset)
    assert error_info.value.context is EnvironmentContext.CLIENT
    assert env_is_valid(EnvironmentContext.CLIENT, source) is False


def test_config_env_validate_client_with_required_keys_only_returns_exactly_those_keys() -> None:
    """Return a config holding only the six required keys when no optional key is set.

    Returns:
        None: Assertions validate the end-to-end client scenario.

    Raises:
        AssertionError: Raised when config contents differ from the input keys.
    """

    source = _build_client_source()

    config = env_validate(EnvironmentContext.CLIENT, source)

    assert set(config.values) == set(CLIENT_REQUIRED_KEYS)
    assert config.context is EnvironmentContext.CLIENT
    assert env_is_valid(EnvironmentContext.CLIENT, source) is True


def test_config_env_validate_trims_values_and_skips_blank_optional_keys() -> None:
    """Trim values and include optional keys only when non-blank.

    Returns:
        None: Assertions validate trimming and optional-key handling.

    Raises:
        AssertionError: Raised when optional keys are handled incorrectly.
    """

    source = _build_client_source()
    source["FIREBASE_API_KEY"] = "  padded-key  "
    source[CLIENT_OPTIONAL_KEYS[0]] = "vapid-public-key"
    source[CLIENT_OPTIONAL_KEYS[1]] = "  "

    config = env_validate(EnvironmentContext.CLIENT, source)

    assert config.get("FIREBASE_API_KEY") == "padded-key"
    assert config.get(CLIENT_OPTIONAL_KEYS[0]) == "vapid-public-key"
    assert CLIENT_OPTIONAL_KEYS[1] not in config


def test_config_env_validate_config_values_are_read_only() -> None:
    """Reject mutation of validated configuration values.

    Returns:
        None: Assertions validate immutability.

    Raises:
        AssertionError: Raised when values can be mutated.
    """

    config = env_validate(EnvironmentContext.CLIENT, _build_client_source())

    with pytest.raises(TypeError):
        config.values["FIREBASE_API_KEY"] = "changed"  # type: ignore[index]


def test_config_env_validate_server_requires_service_account_only() -> None:
    """Validate server context with only the credential blob and include set optional keys.

    Returns:
        None: Assertions validate server-context key sets.

    Raises:
        AssertionError: Raised when server validation behaves incorrectly.
    """

    with pytest.raises(EnvironmentValidationError) as error_info:
        env_validate(EnvironmentContext.SERVER, _build_client_source())
    assert error_info.value.missing_keys == ("SERVICE_ACCOUNT_JSON",)
    assert "SERVICE_ACCOUNT_JSON" in str(error_info.value)

    config = env_validate(
        EnvironmentContext.SERVER,
        {"SERVICE_ACCOUNT_JSON": "{}", "TWILIO_ACCOUNT_SID": "AC123"},
    )
    assert set(config.values) == {"SERVICE_ACCOUNT_JSON", "TWILIO_ACCOUNT_SID"}
    assert set(config.values).isdisjoint(CLIENT_REQUIRED_KEYS)
    assert "TWILIO_ACCOUNT_SID" in SERVER_OPTIONAL_KEYS


def test_config_env_validate_reads_process_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Read configuration from process environment when no explicit source is given.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        tmp_path: Temporary directory without a `.env` file.

    Returns:
        None: Assertions validate environment-backed collection.

    Raises:
        AssertionError: Raised when environment values are not collected.
    """

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SERVICE_ACCOUNT_JSON", '{"project_id": "hydro"}')
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "")

    config = env_validate(EnvironmentContext.SERVER)

    assert config.get("SERVICE_ACCOUNT_JSON") == '{"project_id": "hydro"}'
    assert "TWILIO_AUTH_TOKEN" not in config


def test_config_env_get_config_returns_none_on_failure() -> None:
    """Return None instead of raising when validation fails.

    Returns:
        None: Assertions validate the safe getter.

    Raises:
        AssertionError: Raised when the safe getter raises or returns config.
    """

    assert env_get_config(EnvironmentContext.CLIENT, {}) is None
    assert env_get_config(EnvironmentContext.CLIENT, _build_client_source()) is not None


def test_config_env_describe_presence_never_returns_values() -> None:
    """Report key presence as booleans only.

    Returns:
        None: Assertions validate presence reporting.

    Raises:
        AssertionError: Raised when values leak into the report.
    """

    presence = env_describe_presence({"SERVICE_ACCOUNT_JSON": "secret-material", "FIREBASE_APP_ID": " "})

    assert presence["SERVICE_ACCOUNT_JSON"] is True
    assert presence["FIREBASE_APP_ID"] is False
    assert all(isinstance(value, bool) for value in presence.values())
    assert "secret-material" not in repr(presence)
