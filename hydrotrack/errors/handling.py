"""Error normalization, mode-aware logging and async failure combinators."""

from __future__ import annotations

import asyncio
import logging
import traceback
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Final, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hydrotrack.config import config_is_development_mode

from .error_codes import NON_RETRYABLE_ERROR_KINDS, error_classify_backend_code, error_user_message_for_code
from .models import AppError, BackendServiceError, ErrorKind

logger = logging.getLogger(__name__)

GENERIC_USER_MESSAGE: Final[str] = "An unexpected error occurred. Please try again."
NETWORK_USER_MESSAGE: Final[str] = "Please check your internet connection and try again."

ResultT = TypeVar("ResultT")

_default_development_mode: bool | None = None


class _AppErrorPayload(BaseModel):
    """Mapping shape already carrying normalized error fields."""

    model_config = ConfigDict(extra="ignore")

    kind: ErrorKind
    internal_message: str
    user_message: str
    code: str | None = None
    details: Any = None
    trace: str | None = None


class _BackendErrorPayload(BaseModel):
    """Mapping shape of a backend-service error as delivered over the wire."""

    model_config = ConfigDict(extra="ignore")

    code: str = Field(min_length=1)
    message: str = ""
    custom_data: Any = None


def _error_from_backend(code: str, message: str, custom_data: Any, trace: str | None) -> AppError:
    return AppError(
        kind=error_classify_backend_code(code),
        code=code,
        internal_message=message,
        user_message=error_user_message_for_code(code),
        details={"custom_data": custom_data},
        trace=trace,
    )


def _error_format_trace(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def normalize_error(value: object) -> AppError:
    """Convert any raised or reported failure into an `AppError`.

    Shapes are matched in a fixed order: already-normalized errors, backend-service
    errors, generic exceptions, plain strings, then anything else as an opaque value.

    Args:
        value: Exception instance, error payload mapping, string or arbitrary object.

    Returns:
        AppError: Normalized error. Already-normalized input is returned unchanged.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    if isinstance(value, AppError):
        return value

    if isinstance(value, BackendServiceError):
        return _error_from_backend(value.code, value.message, value.custom_data, _error_format_trace(value))

    if isinstance(value, Mapping):
        try:
            payload = _AppErrorPayload.model_validate(dict(value))
            return AppError(
                kind=payload.kind,
                code=payload.code,
                internal_message=payload.internal_message,
                user_message=payload.user_message,
                details=payload.details,
                trace=payload.trace,
            )
        except ValidationError:
            pass
        try:
            backend_payload = _BackendErrorPayload.model_validate(dict(value))
            return _error_from_backend(
                backend_payload.code,
                backend_payload.message,
                backend_payload.custom_data,
                None,
            )
        except ValidationError:
            pass

    if isinstance(value, Exception):
        return AppError(
            kind=ErrorKind.UNKNOWN,
            internal_message=str(value) or type(value).__name__,
            user_message=GENERIC_USER_MESSAGE,
            trace=_error_format_trace(value),
        )

    if isinstance(value, str):
        return AppError(kind=ErrorKind.UNKNOWN, internal_message=value, user_message=value)

    return AppError(
        kind=ErrorKind.UNKNOWN,
        internal_message="Unknown error occurred",
        user_message=GENERIC_USER_MESSAGE,
        details=value,
    )


def error_configure_development_mode(development_mode: bool | None) -> None:
    """Set the logging mode used when callers pass none; None resolves it from settings on next use."""

    global _default_development_mode
    _default_development_mode = development_mode


def _error_resolve_development_mode(development_mode: bool | None) -> bool:
    global _default_development_mode
    if development_mode is not None:
        return development_mode
    if _default_development_mode is None:
        _default_development_mode = config_is_development_mode()
    return _default_development_mode


def log_error(error: AppError, context: str | None = None, development_mode: bool | None = None) -> None:
    """Log a normalized error with verbosity gated by runtime mode.

    Args:
        error: Normalized error.
        context: Optional caller label rendered as a prefix.
        development_mode: Force verbose or redacted output. When None, the configured default is used,
            resolved once from settings if bootstrap did not set it.

    Returns:
        None: Emits one error log record.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    development_mode = _error_resolve_development_mode(development_mode)
    prefix = f"[{context}] " if context else ""

    if development_mode:
        payload = {
            "kind": error.kind.value,
            "code": error.code,
            "internal_message": error.internal_message,
            "user_message": error.user_message,
            "details": error.details,
            "trace": error.trace,
        }
        logger.error("%sAppError: %s", prefix, payload)
        return

    payload = {
        "kind": error.kind.value,
        "code": error.code,
        "user_message": error.user_message,
    }
    logger.error("%sError: %s", prefix, payload)


def error_display_message(value: object) -> str:
    """Return the user-safe message for any failure value."""

    return normalize_error(value).user_message


def error_create_authentication(message: str, code: str | None = None) -> AppError:
    return AppError(kind=ErrorKind.AUTHENTICATION, code=code, internal_message=message, user_message=message)


def error_create_network(message: str | None = None) -> AppError:
    return AppError(
        kind=ErrorKind.NETWORK,
        internal_message=message or "Network request failed",
        user_message=NETWORK_USER_MESSAGE,
    )


def error_create_validation(message: str, details: Any = None) -> AppError:
    return AppError(kind=ErrorKind.VALIDATION, internal_message=message, user_message=message, details=details)


async def handle_async(
    operation: Callable[[], Awaitable[ResultT]],
    context: str | None = None,
    development_mode: bool | None = None,
) -> tuple[ResultT | None, AppError | None]:
    """Run an async operation and return its result or its normalized failure.

    Args:
        operation: Zero-argument coroutine factory.
        context: Optional label; when set, failures are logged under it.
        development_mode: Logging mode override passed to `log_error`.

    Returns:
        tuple[ResultT | None, AppError | None]: `(result, None)` on success, `(None, error)` on failure.
            An operation that succeeds with None yields `(None, None)`, so callers must branch
            on the error side only.

    Raises:
        asyncio.CancelledError: Cancellation of the surrounding task is not intercepted.
    """

    try:
        result = await operation()
    except Exception as error:
        normalized_error = normalize_error(error)
        if context:
            log_error(normalized_error, context, development_mode)
        return None, normalized_error
    return result, None


async def _retry_wait(delay_seconds: float, cancel_event: asyncio.Event | None) -> bool:
    """Sleep between attempts; return True when the cancel event fired first."""

    if cancel_event is None:
        await asyncio.sleep(delay_seconds)
        return False
    if cancel_event.is_set():
        return True
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay_seconds)
    except asyncio.TimeoutError:
        return False
    return True


def _raise_normalized(normalized_error: AppError, original_error: Exception) -> None:
    if normalized_error is original_error:
        raise normalized_error
    raise normalized_error from original_error


async def with_retry(
    operation: Callable[[], Awaitable[ResultT]],
    max_attempts: int = 3,
    delay_ms: int = 1000,
    context: str | None = None,
    cancel_event: asyncio.Event | None = None,
    development_mode: bool | None = None,
) -> ResultT:
    """Retry an async operation with a fixed delay between attempts.

    Authentication, authorization and validation failures are raised on first
    occurrence. Setting `cancel_event` during a delay aborts the sequence and
    raises the most recent normalized failure.

    Args:
        operation: Zero-argument coroutine factory.
        max_attempts: Maximum number of invocations.
        delay_ms: Fixed delay between attempts in milliseconds.
        context: Optional label used in log output.
        cancel_event: Optional event that aborts pending retries.
        development_mode: Logging mode override passed to `log_error`.

    Returns:
        ResultT: First successful result.

    Raises:
        ValueError: Raised when max_attempts or delay_ms is invalid.
        AppError: Raised with the normalized failure when attempts are exhausted,
            the failure is not retryable, or the sequence is cancelled.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    if delay_ms < 0:
        raise ValueError("delay_ms must be >= 0")

    prefix = f"[{context}] " if context else ""
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as error:
            normalized_error = normalize_error(error)
            if attempt == max_attempts or normalized_error.kind in NON_RETRYABLE_ERROR_KINDS:
                log_error(normalized_error, context, development_mode)
                _raise_normalized(normalized_error, error)

            logger.warning("%sAttempt %d failed, retrying in %dms...", prefix, attempt, delay_ms)
            if await _retry_wait(delay_ms / 1000.0, cancel_event):
                logger.warning("%sRetry sequence cancelled after attempt %d", prefix, attempt)
                log_error(normalized_error, context, development_mode)
                _raise_normalized(normalized_error, error)

    raise RuntimeError("retry loop exited without result")
