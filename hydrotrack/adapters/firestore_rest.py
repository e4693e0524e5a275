"""Firestore REST document-store adapter used for liveness probing."""

from __future__ import annotations

from typing import Any, Final, Mapping, Sequence
from urllib.parse import quote

import httpx

from hydrotrack.errors import BackendServiceError

from .interfaces import AccessTokenProviderPort, DocumentStorePort

_HTTP_STATUS_CODES: Final[dict[int, str]] = {
    400: "firestore/failed-precondition",
    401: "firestore/unauthenticated",
    403: "firestore/permission-denied",
    404: "firestore/not-found",
    409: "firestore/aborted",
    429: "firestore/resource-exhausted",
    500: "firestore/internal",
    501: "firestore/unimplemented",
    503: "firestore/unavailable",
    504: "firestore/deadline-exceeded",
}


def adapter_firestore_error_code(status_code: int, rpc_status: str | None) -> str:
    """Map an HTTP failure to a `firestore/*` error code.

    Args:
        status_code: HTTP status code.
        rpc_status: Canonical RPC status name from the error body, such as `PERMISSION_DENIED`.

    Returns:
        str: Data-store error code.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if rpc_status:
        return "firestore/" + rpc_status.strip().lower().replace("_", "-")
    return _HTTP_STATUS_CODES.get(status_code, "firestore/unknown")


class FirestoreRestDocumentStore(DocumentStorePort):
    """Document store backed by the Firestore REST API."""

    _DATABASE_NAME: Final[str] = "(default)"

    def __init__(
        self,
        project_id: str,
        api_key: str | None = None,
        base_url: str = "https://firestore.googleapis.com/v1",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        token_provider: AccessTokenProviderPort | None = None,
    ):
        """Initialize the REST document store.

        Args:
            project_id: Backend project identifier.
            api_key: Optional web API key appended as `key` query parameter.
            base_url: Firestore REST endpoint root.
            timeout_seconds: HTTP timeout in seconds.
            transport: Optional httpx transport, used by tests to stub responses.
            token_provider: Optional bearer-token source for privileged server-side reads.

        Raises:
            ValueError: Raised when required values are invalid.
        """

        normalized_project_id = project_id.strip()
        normalized_base_url = base_url.strip()
        if not normalized_project_id:
            raise ValueError("project_id must not be blank")
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._project_id = normalized_project_id
        self._api_key = api_key.strip() if api_key and api_key.strip() else None
        self._base_url = normalized_base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._token_provider = token_provider

    def store_project_id(self) -> str:
        return self._project_id

    def _store_collection_url(self, collection_path: str) -> str:
        normalized_path = "/".join(quote(segment, safe="") for segment in collection_path.strip("/").split("/"))
        return (
            f"{self._base_url}/projects/{quote(self._project_id, safe='')}"
            f"/databases/{self._DATABASE_NAME}/documents/{normalized_path}"
        )

    async def store_get(self, collection_path: str, limit: int) -> Sequence[Mapping[str, Any]]:
        """Read up to `limit` documents from a collection.

        Args:
            collection_path: Slash-separated collection path.
            limit: Maximum number of documents.

        Returns:
            Sequence[Mapping[str, Any]]: Raw Firestore document resources.

        Raises:
            ValueError: Raised when arguments are invalid.
            BackendServiceError: Raised with a `firestore/*` code on transport, token or API failure.
        """

        if not collection_path.strip("/ "):
            raise ValueError("collection_path must not be blank")
        if limit < 1:
            raise ValueError("limit must be >= 1")

        query_parameters: dict[str, str | int] = {"pageSize": limit}
        if self._api_key:
            query_parameters["key"] = self._api_key
        headers: dict[str, str] = {}
        if self._token_provider is not None:
            headers["Authorization"] = f"Bearer {await self._token_provider.token_get()}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = await client.get(
                    self._store_collection_url(collection_path),
                    params=query_parameters,
                    headers=headers,
                )
        except httpx.TimeoutException as error:
            raise BackendServiceError("firestore/deadline-exceeded", f"document store request timed out: {error}") from error
        except httpx.TransportError as error:
            raise BackendServiceError("firestore/unavailable", f"document store unreachable: {error}") from error

        if response.status_code >= 400:
            raise self._store_error_from_response(response)

        try:
            payload = response.json()
        except ValueError as error:
            raise BackendServiceError("firestore/data-loss", "document store returned invalid JSON") from error

        documents = payload.get("documents", []) if isinstance(payload, dict) else []
        return [document for document in documents if isinstance(document, dict)][:limit]

    @staticmethod
    def _store_error_from_response(response: httpx.Response) -> BackendServiceError:
        rpc_status: str | None = None
        message = f"document store request failed with HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            error_body = body["error"]
            if isinstance(error_body.get("status"), str):
                rpc_status = error_body["status"]
            if isinstance(error_body.get("message"), str) and error_body["message"].strip():
                message = error_body["message"].strip()
        return BackendServiceError(
            code=adapter_firestore_error_code(response.status_code, rpc_status),
            message=message,
            custom_data={"http_status": response.status_code},
        )
