"""Bearer-token minting from service account credentials via google-auth."""

from __future__ import annotations

import asyncio
from typing import Final, Sequence

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_auth_requests
from google.oauth2 import service_account

from hydrotrack.errors import BackendServiceError

from .interfaces import AccessTokenProviderPort
from .service_account import ServiceAccountCredentials

DATASTORE_SCOPE: Final[str] = "https://www.googleapis.com/auth/datastore"


class ServiceAccountTokenProvider(AccessTokenProviderPort):
    """Access-token provider backed by a service account and the OAuth token endpoint."""

    def __init__(self, credentials: ServiceAccountCredentials, scopes: Sequence[str] = (DATASTORE_SCOPE,)):
        """Initialize token provider.

        Args:
            credentials: Parsed service account credentials.
            scopes: OAuth scopes requested for minted tokens.

        Raises:
            ValueError: Raised when credentials or scopes are missing.
        """

        if credentials is None:
            raise ValueError("credentials must not be None")
        if not scopes:
            raise ValueError("scopes must not be empty")
        self._credentials = credentials
        self._scopes = list(scopes)
        self._google_credentials: service_account.Credentials | None = None

    def _token_credentials(self) -> service_account.Credentials:
        if self._google_credentials is None:
            self._google_credentials = service_account.Credentials.from_service_account_info(
                self._credentials.adapter_service_account_info(),
                scopes=self._scopes,
            )
        return self._google_credentials

    async def token_get(self) -> str:
        """Return a valid access token, refreshing it off the event loop when expired.

        Returns:
            str: Bearer access token.

        Raises:
            BackendServiceError: Raised with `firestore/unauthenticated` when the key is unusable
                or the token exchange fails.
        """

        try:
            google_credentials = self._token_credentials()
            if not google_credentials.valid:
                await asyncio.to_thread(google_credentials.refresh, google_auth_requests.Request())
        except (ValueError, google_auth_exceptions.GoogleAuthError) as error:
            raise BackendServiceError(
                "firestore/unauthenticated",
                f"service account token could not be minted: {error}",
            ) from error

        if not google_credentials.token:
            raise BackendServiceError("firestore/unauthenticated", "service account token exchange returned no token")
        return google_credentials.token
