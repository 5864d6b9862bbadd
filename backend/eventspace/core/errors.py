"""
Centralized error handling for booking, store, auth and payment failures.
Exception types plus a rule table so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from typing import Any

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Constants: user-facing messages
# ---------------------------------------------------------------------------

MSG_DATE_REQUIRED = "date required"
MSG_AUTH_REQUIRED = "authentication required"
MSG_NOT_FOUND_RECOVERY = "/"

# HTTP status codes for known error categories
STATUS_VALIDATION = 422
STATUS_UNAUTHORIZED = 401
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_BAD_GATEWAY = 502  # store, auth or payment service rejected the call
STATUS_GATEWAY_TIMEOUT = 504
STATUS_INTERNAL_ERROR = 500


class EventSpaceError(Exception):
    """Base for every error this service raises on purpose."""

    title = "Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "message": self.message}


class ConfigurationError(EventSpaceError):
    title = "Configuration error"

    def __init__(self, message: str, *, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []


class BookingValidationError(EventSpaceError):
    """Caught before any network call; shown next to the offending field."""

    title = "Validation error"

    def __init__(self, message: str, *, field: str | None = None, fields: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.field = field
        self.fields = fields or {}

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.field:
            out["field"] = self.field
        if self.fields:
            out["fields"] = self.fields
        return out


class AuthenticationRequired(EventSpaceError):
    title = "Authentication required"

    def __init__(self, message: str = MSG_AUTH_REQUIRED) -> None:
        super().__init__(message)


class PermissionDenied(EventSpaceError):
    title = "Permission denied"


class NotFoundError(EventSpaceError):
    """Rendered as a dedicated not-found view with a way back, never as a fatal error."""

    title = "Not found"

    def __init__(self, message: str, *, recovery_url: str = MSG_NOT_FOUND_RECOVERY) -> None:
        super().__init__(message)
        self.recovery_url = recovery_url

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["recovery_url"] = self.recovery_url
        return out


class ExternalServiceError(EventSpaceError):
    """Store, auth or payment call failed. message is the external service's text, verbatim when it gave one."""

    title = "Service error"

    def __init__(self, message: str, *, service: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class PaymentTimeout(ExternalServiceError):
    title = "Payment timeout"

    def __init__(self, message: str = "Payment service did not respond in time") -> None:
        super().__init__(message, service="payments")


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code). First match wins, so subclasses go first.
# ---------------------------------------------------------------------------

ERROR_RULES: list[tuple[type[EventSpaceError], int]] = [
    (BookingValidationError, STATUS_VALIDATION),
    (AuthenticationRequired, STATUS_UNAUTHORIZED),
    (PermissionDenied, STATUS_FORBIDDEN),
    (NotFoundError, STATUS_NOT_FOUND),
    (PaymentTimeout, STATUS_GATEWAY_TIMEOUT),
    (ExternalServiceError, STATUS_BAD_GATEWAY),
]


def status_for(exc: Exception) -> int:
    for exc_type, status_code in ERROR_RULES:
        if isinstance(exc, exc_type):
            return status_code
    return STATUS_INTERNAL_ERROR


def error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from a service call into an HTTPException.
    Uses ERROR_RULES for known error types; otherwise returns 500 with the exception message.
    """
    if isinstance(exc, EventSpaceError):
        return HTTPException(status_code=status_for(exc), detail=exc.to_dict())
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail={"title": "Error", "message": str(exc)})
