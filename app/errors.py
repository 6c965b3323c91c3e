"""
Exceptions raised by the donation bridge.

Every error carries an HTTP status and a default message. Errors with
``expose_message = False`` render only the default message; anything passed
to them is for the server log.
"""
from typing import Any, Optional


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    status_code = 500
    default_message = "Internal server error"
    expose_message = False

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> None:
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def public_message(self) -> str:
        """Message safe to return to the client."""
        return self.message if self.expose_message else self.default_message

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(BridgeError):
    """A required field is missing or has the wrong type."""

    status_code = 400
    default_message = "Invalid donation data"
    expose_message = True


class AuthError(BridgeError):
    """The shared-secret header is missing or does not match."""

    status_code = 401
    default_message = "Unauthorized"


class NotFound(BridgeError):
    """No donation with the requested id."""

    status_code = 404
    default_message = "Donation not found"
    expose_message = True


class InternalError(BridgeError):
    """Unexpected failure."""

    status_code = 500
    default_message = "Internal server error"


class StorageError(InternalError):
    """The backing database failed or is unavailable."""

    pass
