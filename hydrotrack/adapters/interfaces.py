"""Typed interfaces for identity-service and document-store collaborators."""

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence


@dataclass(frozen=True)
class Principal:
    """Signed-in identity as cached by the identity service.

    Attributes:
        uid: Stable identity-service user identifier.
        email: Optional email address.
        phone_number: Optional phone number used for SMS sign-in and reminders.
        display_name: Optional display name.
    """

    uid: str
    email: str | None = None
    phone_number: str | None = None
    display_name: str | None = None


class IdentityServicePort(Protocol):
    """Port definition for reading cached authentication state."""

    def identity_get_current_principal(self) -> Principal | None:
        """Return the currently cached principal without network access.

        Returns:
            Principal | None: Signed-in principal, None when signed out.

        Raises:
            BackendServiceError: Raised with an `auth/*` code when auth state is unavailable.
        """

    def identity_provider_label(self) -> str:
        """Return the identity provider label (auth domain) for diagnostics.

        Returns:
            str: Provider label.

        Raises:
            RuntimeError: Raised when provider metadata is unavailable.
        """


class AccessTokenProviderPort(Protocol):
    """Port definition for minting bearer tokens for privileged backend reads."""

    async def token_get(self) -> str:
        """Return a currently valid access token, refreshing it when expired.

        Returns:
            str: Bearer access token.

        Raises:
            BackendServiceError: Raised with a `firestore/unauthenticated` code when no token can be minted.
        """


class DocumentStorePort(Protocol):
    """Port definition for document-store reads used by liveness probing."""

    def store_project_id(self) -> str:
        """Return the backend project identifier the store is bound to.

        Returns:
            str: Project identifier.

        Raises:
            RuntimeError: Raised when the store is not configured.
        """

    async def store_get(self, collection_path: str, limit: int) -> Sequence[Mapping[str, Any]]:
        """Read up to `limit` documents from a collection.

        Args:
            collection_path: Slash-separated collection path.
            limit: Maximum number of documents.

        Returns:
            Sequence[Mapping[str, Any]]: Raw documents.

        Raises:
            BackendServiceError: Raised with a `firestore/*` code on failure.
        """
