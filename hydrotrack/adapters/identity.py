"""In-process identity-service adapter holding the cached principal."""

from __future__ import annotations

from .interfaces import IdentityServicePort, Principal


class CachedIdentityService(IdentityServicePort):
    """Identity adapter exposing auth state cached by the authentication layer."""

    def __init__(self, auth_domain: str, principal: Principal | None = None):
        """Initialize identity adapter.

        Args:
            auth_domain: Identity provider auth domain.
            principal: Optional initially signed-in principal.

        Raises:
            ValueError: Raised when auth_domain is blank.
        """

        normalized_auth_domain = auth_domain.strip()
        if not normalized_auth_domain:
            raise ValueError("auth_domain must not be blank")
        self._auth_domain = normalized_auth_domain
        self._principal = principal

    def identity_provider_label(self) -> str:
        return self._auth_domain

    def identity_get_current_principal(self) -> Principal | None:
        return self._principal

    def identity_set_principal(self, principal: Principal | None) -> None:
        """Replace the cached principal after sign-in or sign-out."""

        self._principal = principal
