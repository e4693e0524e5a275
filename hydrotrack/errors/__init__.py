"""Error taxonomy, backend code table and normalization helpers."""

from .error_codes import (
    BACKEND_ERROR_FALLBACK_MESSAGE,
    BACKEND_ERROR_USER_MESSAGES,
    DATA_STORE_CODE_PREFIX,
    IDENTITY_CODE_PREFIX,
    NON_RETRYABLE_ERROR_KINDS,
    BackendErrorCode,
    error_classify_backend_code,
    error_user_message_for_code,
)
from .handling import (
    GENERIC_USER_MESSAGE,
    error_configure_development_mode,
    error_create_authentication,
    error_create_network,
    error_create_validation,
    error_display_message,
    handle_async,
    log_error,
    normalize_error,
    with_retry,
)
from .models import AppError, BackendServiceError, ErrorKind

__all__ = [
    "AppError",
    "BACKEND_ERROR_FALLBACK_MESSAGE",
    "BACKEND_ERROR_USER_MESSAGES",
    "BackendErrorCode",
    "BackendServiceError",
    "DATA_STORE_CODE_PREFIX",
    "ErrorKind",
    "GENERIC_USER_MESSAGE",
    "IDENTITY_CODE_PREFIX",
    "NON_RETRYABLE_ERROR_KINDS",
    "error_classify_backend_code",
    "error_configure_development_mode",
    "error_create_authentication",
    "error_create_network",
    "error_create_validation",
    "error_display_message",
    "error_user_message_for_code",
    "handle_async",
    "log_error",
    "normalize_error",
    "with_retry",
]
