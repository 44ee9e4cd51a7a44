"""Exception classes for Puter SDK."""

from __future__ import annotations

from typing import Any


class PuterError(Exception):
    """Base exception for all Puter SDK errors.

    Attributes:
        message: Human readable message.
        code: Machine readable error code.
        details: Raw error payload, when one was available.
    """

    def __init__(
        self,
        message: str = "An error occurred",
        code: str = "UNKNOWN_ERROR",
        details: Any = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)


class ValidationError(PuterError):
    """Invalid arguments, detected locally before any request is sent.

    This error is raised when:
    - A required argument is missing
    - An argument has the wrong type or shape
    - A key-value key exceeds the size limit
    """

    def __init__(
        self,
        message: str = "Validation error",
        field: str | None = None,
        details: Any = None,
    ) -> None:
        self.field = field
        super().__init__(message, "VALIDATION_ERROR", details)


class BackendError(PuterError):
    """Structured error reported by the Puter API.

    Attributes:
        status_code: HTTP status code, if the error came with one.
    """

    def __init__(
        self,
        message: str = "Request failed",
        code: str = "UNKNOWN_ERROR",
        details: Any = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, code, details)


class AuthenticationError(BackendError):
    """Authentication failed.

    This error is raised when:
    - The username or password is rejected
    - The OTP code is invalid
    - The API answers 401
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "AUTHENTICATION_FAILED",
        details: Any = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, code, details, status_code)


class TwoFactorRequiredError(AuthenticationError):
    """The account has two-factor authentication and no OTP was given."""

    def __init__(self, message: str = "Two-factor authentication required") -> None:
        super().__init__(message, "2FA_REQUIRED")


class NotFoundError(BackendError):
    """Resource not found.

    This error is raised when:
    - An app name doesn't exist
    - A path doesn't exist
    - Any other requested resource is not found
    """

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: str = "",
        message: str | None = None,
        code: str = "NOT_FOUND",
        details: Any = None,
        status_code: int | None = 404,
    ) -> None:
        self.resource = resource
        self.resource_id = resource_id
        if message is None:
            message = (
                f"{resource} '{resource_id}' not found" if resource_id else f"{resource} not found"
            )
        super().__init__(message, code, details, status_code)


class ConflictError(BackendError):
    """Resource conflict error.

    This error is raised when:
    - Creating an app whose name is taken
    - Creating a site on a subdomain that already exists
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        code: str = "CONFLICT",
        details: Any = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, code, details, status_code)


class TransportError(PuterError):
    """The request failed below the API level and carried no error body."""

    def __init__(
        self,
        message: str = "Request failed",
        cause: Exception | None = None,
        code: str = "TRANSPORT_ERROR",
    ) -> None:
        self.cause = cause
        super().__init__(message, code)


class ConnectionError(TransportError):
    """Failed to connect to the Puter API.

    This error is raised when:
    - Network is unavailable
    - API host is unreachable
    """

    def __init__(
        self,
        message: str = "Failed to connect to Puter API",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause, "CONNECTION_ERROR")


class TimeoutError(TransportError):
    """Request timed out."""

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(message, cause, "TIMEOUT")


class StreamError(TransportError):
    """Error while reading a streamed response body."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause, "STREAM_ERROR")


def error_from_body(
    error: Any,
    status_code: int | None = None,
    fallback: str = "Request failed",
) -> BackendError:
    """Build a typed error from the ``error`` member of a response body.

    Args:
        error: The ``error`` value, usually ``{"code": ..., "message": ...}``.
        status_code: HTTP status code of the response.
        fallback: Message used when the body carries none.

    Returns:
        The matching BackendError subclass.
    """
    if isinstance(error, dict):
        message = error.get("message") or fallback
        code = error.get("code") or "UNKNOWN_ERROR"
        details: Any = error
    elif isinstance(error, str) and error:
        message, code, details = error, "UNKNOWN_ERROR", error
    else:
        message, code, details = fallback, "UNKNOWN_ERROR", error

    if status_code == 401:
        return AuthenticationError(message, code, details, status_code)
    elif status_code == 404:
        return NotFoundError(message=message, code=code, details=details, status_code=status_code)
    elif status_code == 409:
        return ConflictError(message, code, details, status_code)
    return BackendError(message, code, details, status_code)


def raise_for_status(status_code: int, response_data: Any = None, reason: str = "") -> None:
    """Raise an appropriate exception for an HTTP status code.

    Args:
        status_code: HTTP status code.
        response_data: Parsed JSON response data.
        reason: HTTP reason phrase, used when the body has no message.

    Raises:
        AuthenticationError: For 401 status.
        NotFoundError: For 404 status.
        ConflictError: For 409 status.
        ValidationError: For 422 status without an error body.
        BackendError: For other 4xx/5xx status codes.
    """
    if status_code < 400:
        return

    data = response_data if isinstance(response_data, dict) else {}
    fallback = data.get("message") or reason or f"HTTP {status_code}"

    if data.get("error"):
        raise error_from_body(data["error"], status_code, fallback)
    if status_code == 422:
        raise ValidationError(fallback, details=data or None)
    raise error_from_body(None, status_code, fallback)
