"""Canonical backend-service error-code semantics for error normalization."""

from __future__ import annotations

from enum import Enum
from typing import Final

from .models import ErrorKind

IDENTITY_CODE_PREFIX: Final[str] = "auth/"
DATA_STORE_CODE_PREFIX: Final[str] = "firestore/"
BACKEND_ERROR_FALLBACK_MESSAGE: Final[str] = "A Firebase service error occurred. Please try again."


class BackendErrorCode(str, Enum):
    """Known identity-service and data-store error codes."""

    AUTH_USER_NOT_FOUND = "auth/user-not-found"
    AUTH_WRONG_PASSWORD = "auth/wrong-password"
    AUTH_INVALID_CREDENTIAL = "auth/invalid-credential"
    AUTH_EMAIL_ALREADY_IN_USE = "auth/email-already-in-use"
    AUTH_WEAK_PASSWORD = "auth/weak-password"
    AUTH_INVALID_EMAIL = "auth/invalid-email"
    AUTH_USER_DISABLED = "auth/user-disabled"
    AUTH_TOO_MANY_REQUESTS = "auth/too-many-requests"
    AUTH_NETWORK_REQUEST_FAILED = "auth/network-request-failed"
    AUTH_INVALID_VERIFICATION_CODE = "auth/invalid-verification-code"
    AUTH_CODE_EXPIRED = "auth/code-expired"
    AUTH_MISSING_PHONE_NUMBER = "auth/missing-phone-number"
    AUTH_QUOTA_EXCEEDED = "auth/quota-exceeded"
    FIRESTORE_PERMISSION_DENIED = "firestore/permission-denied"
    FIRESTORE_NOT_FOUND = "firestore/not-found"
    FIRESTORE_ALREADY_EXISTS = "firestore/already-exists"
    FIRESTORE_RESOURCE_EXHAUSTED = "firestore/resource-exhausted"
    FIRESTORE_FAILED_PRECONDITION = "firestore/failed-precondition"
    FIRESTORE_ABORTED = "firestore/aborted"
    FIRESTORE_OUT_OF_RANGE = "firestore/out-of-range"
    FIRESTORE_UNIMPLEMENTED = "firestore/unimplemented"
    FIRESTORE_INTERNAL = "firestore/internal"
    FIRESTORE_UNAVAILABLE = "firestore/unavailable"
    FIRESTORE_DATA_LOSS = "firestore/data-loss"
    FIRESTORE_UNAUTHENTICATED = "firestore/unauthenticated"


BACKEND_ERROR_USER_MESSAGES: Final[dict[str, str]] = {
    BackendErrorCode.AUTH_USER_NOT_FOUND.value: "No account found with this email address.",
    BackendErrorCode.AUTH_WRONG_PASSWORD.value: "Incorrect password. Please try again.",
    BackendErrorCode.AUTH_INVALID_CREDENTIAL.value: "Invalid email or password. Please check your credentials.",
    BackendErrorCode.AUTH_EMAIL_ALREADY_IN_USE.value: "An account with this email already exists.",
    BackendErrorCode.AUTH_WEAK_PASSWORD.value: "Password should be at least 6 characters long.",
    BackendErrorCode.AUTH_INVALID_EMAIL.value: "Please enter a valid email address.",
    BackendErrorCode.AUTH_USER_DISABLED.value: "This account has been disabled. Please contact support.",
    BackendErrorCode.AUTH_TOO_MANY_REQUESTS.value: "Too many failed attempts. Please try again later.",
    BackendErrorCode.AUTH_NETWORK_REQUEST_FAILED.value: "Network error. Please check your connection.",
    BackendErrorCode.AUTH_INVALID_VERIFICATION_CODE.value: "Invalid verification code. Please try again.",
    BackendErrorCode.AUTH_CODE_EXPIRED.value: "Verification code has expired. Please request a new one.",
    BackendErrorCode.AUTH_MISSING_PHONE_NUMBER.value: "Please enter a valid phone number.",
    BackendErrorCode.AUTH_QUOTA_EXCEEDED.value: "SMS quota exceeded. Please try again later.",
    BackendErrorCode.FIRESTORE_PERMISSION_DENIED.value: "You do not have permission to access this data.",
    BackendErrorCode.FIRESTORE_NOT_FOUND.value: "The requested document was not found.",
    BackendErrorCode.FIRESTORE_ALREADY_EXISTS.value: "Document already exists.",
    BackendErrorCode.FIRESTORE_RESOURCE_EXHAUSTED.value: "Request quota exceeded. Please try again later.",
    BackendErrorCode.FIRESTORE_FAILED_PRECONDITION.value: "Database not properly configured. Please contact support.",
    BackendErrorCode.FIRESTORE_ABORTED.value: "Operation was aborted due to a conflict.",
    BackendErrorCode.FIRESTORE_OUT_OF_RANGE.value: "Invalid data range provided.",
    BackendErrorCode.FIRESTORE_UNIMPLEMENTED.value: "This operation is not supported.",
    BackendErrorCode.FIRESTORE_INTERNAL.value: "Internal server error. Please try again later.",
    BackendErrorCode.FIRESTORE_UNAVAILABLE.value: "Service is temporarily unavailable. Please try again.",
    BackendErrorCode.FIRESTORE_DATA_LOSS.value: "Unrecoverable data loss or corruption.",
    BackendErrorCode.FIRESTORE_UNAUTHENTICATED.value: "You must be signed in to perform this action.",
}

NON_RETRYABLE_ERROR_KINDS: Final[frozenset[ErrorKind]] = frozenset(
    {
        ErrorKind.AUTHENTICATION,
        ErrorKind.AUTHORIZATION,
        ErrorKind.VALIDATION,
    }
)


def error_user_message_for_code(error_code: str, fallback_message: str = BACKEND_ERROR_FALLBACK_MESSAGE) -> str:
    """Return the user-safe message for a backend error code.

    Args:
        error_code: Machine-readable backend error code.
        fallback_message: Message used when the code is not mapped.

    Returns:
        str: Mapped user message, else the fallback message.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return BACKEND_ERROR_USER_MESSAGES.get(error_code, fallback_message)


def error_classify_backend_code(error_code: str) -> ErrorKind:
    """Derive the error kind from a backend error code prefix and wording.

    Args:
        error_code: Machine-readable backend error code.

    Returns:
        ErrorKind: Authorization/authentication for identity codes, authorization or
        backend_service for data-store codes, backend_service otherwise.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if error_code.startswith(IDENTITY_CODE_PREFIX):
        if "permission" in error_code or "credential" in error_code:
            return ErrorKind.AUTHORIZATION
        return ErrorKind.AUTHENTICATION
    if error_code.startswith(DATA_STORE_CODE_PREFIX):
        if "permission" in error_code or "unauthenticated" in error_code:
            return ErrorKind.AUTHORIZATION
        return ErrorKind.BACKEND_SERVICE
    return ErrorKind.BACKEND_SERVICE
