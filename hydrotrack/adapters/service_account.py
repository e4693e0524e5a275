"""Parsing of the privileged service account credential blob."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ServiceAccountError(ValueError):
    """Raised when the service account blob is not valid credential JSON."""


class ServiceAccountCredentials(BaseModel):
    """Subset of service account fields used by the backend admin integration.

    Attributes:
        project_id: Backend project identifier.
        client_email: Service account email.
        private_key: PEM private key with real newlines.
        private_key_id: Optional key identifier.
        credential_type: Credential type, normally `service_account`.
        token_uri: OAuth token endpoint used to exchange the signed assertion.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    project_id: str = Field(min_length=1)
    client_email: str = Field(min_length=1)
    private_key: str = Field(min_length=1)
    private_key_id: str | None = None
    credential_type: str = Field(default="service_account", alias="type")
    token_uri: str = Field(default="https://oauth2.googleapis.com/token", min_length=1)

    def __repr__(self) -> str:
        return f"ServiceAccountCredentials(project_id={self.project_id!r}, client_email={self.client_email!r})"

    def adapter_service_account_info(self) -> dict[str, str]:
        """Return the credential in the service-account-info shape expected by google-auth."""

        info = self.model_dump(by_alias=True, exclude_none=True)
        return {key: str(value) for key, value in info.items()}


def adapter_parse_service_account(raw_json: str) -> ServiceAccountCredentials:
    """Parse `SERVICE_ACCOUNT_JSON`, tolerating escaped newlines.

    Values copied into env files often carry the private key with literal `\\n`
    sequences; these are converted to real newlines before and after decoding.

    Args:
        raw_json: Raw credential JSON text.

    Returns:
        ServiceAccountCredentials: Parsed credential subset.

    Raises:
        ServiceAccountError: Raised when the text is blank, not JSON, or lacks required fields.
    """

    stripped_json = raw_json.strip()
    if not stripped_json:
        raise ServiceAccountError("service account JSON must not be blank")

    try:
        payload = json.loads(stripped_json)
    except json.JSONDecodeError:
        try:
            payload = json.loads(stripped_json.replace("\\n", "\n"), strict=False)
        except json.JSONDecodeError as error:
            raise ServiceAccountError("service account JSON could not be decoded") from error

    if not isinstance(payload, dict):
        raise ServiceAccountError("service account JSON must be an object")

    private_key = payload.get("private_key")
    if isinstance(private_key, str):
        payload["private_key"] = private_key.replace("\\n", "\n")

    try:
        return ServiceAccountCredentials.model_validate(payload)
    except ValidationError as error:
        raise ServiceAccountError("Invalid service account structure") from error
