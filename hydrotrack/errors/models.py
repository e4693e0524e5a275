"""Project-native error taxonomy and typed exceptions."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification tag carried by every normalized error."""

    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NETWORK = "network"
    VALIDATION = "validation"
    BACKEND_SERVICE = "backend_service"
    ENVIRONMENT = "environment"
    UNKNOWN = "unknown"


class AppError(Exception):
    """Canonical normalized error.

    Fields are read-only once constructed. Only `user_message` may be shown to
    end users; `internal_message`, `details` and `trace` are for logs.

    Attributes:
        kind: Error classification.
        code: Optional machine-readable upstream code.
        internal_message: Diagnostic message.
        user_message: User-safe message.
        details: Optional opaque diagnostic payload.
        trace: Optional formatted traceback of the original failure.
    """

    def __init__(
        self,
        kind: ErrorKind,
        internal_message: str,
        user_message: str,
        code: str | None = None,
        details: Any = None,
        trace: str | None = None,
    ):
        super().__init__(internal_message)
        self._kind = ErrorKind(kind)
        self._internal_message = internal_message
        self._user_message = user_message
        self._code = code
        self._details = details
        self._trace = trace

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def code(self) -> str | None:
        return self._code

    @property
    def internal_message(self) -> str:
        return self._internal_message

    @property
    def user_message(self) -> str:
        return self._user_message

    @property
    def details(self) -> Any:
        return self._details

    @property
    def trace(self) -> str | None:
        return self._trace

    def __repr__(self) -> str:
        return f"AppError(kind={self._kind.value!r}, code={self._code!r}, user_message={self._user_message!r})"


class BackendServiceError(RuntimeError):
    """Failure raised by the managed identity or data-store platform.

    Attributes:
        code: Machine-readable code such as `auth/wrong-password` or `firestore/unavailable`.
        custom_data: Optional provider payload attached to the failure.
    """

    def __init__(self, code: str, message: str, custom_data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.custom_data = custom_data
