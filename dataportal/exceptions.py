"""Custom exceptions for the data portal API application."""
from typing import Any, Dict, Optional


class PortalError(Exception):
    """An error that is reported to the caller as a JSON body."""

    status_code = 500
    message = "Server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        """Override the default message and optionally add a detail."""
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """The response body."""
        content: Dict[str, Any] = {"error": self.message}
        if self.detail is not None:
            content["detail"] = self.detail
        return content


class ValidationError(PortalError):
    """Malformed or missing input."""

    status_code = 400
    message = "Invalid request"


class UnknownAction(PortalError):
    """The data explorer doesn't know the requested action."""

    status_code = 400
    message = "Unknown action"


class AuthRequired(PortalError):
    """No user id was sent with the request."""

    status_code = 401
    message = "Authentication required"


class InvalidCredentials(PortalError):
    """The username and password don't match an active user."""

    status_code = 401
    message = "Invalid username or password"


class SessionInvalid(PortalError):
    """The user id doesn't match an active user."""

    status_code = 401
    message = "Session invalid"


class Forbidden(PortalError):
    """The table is not on the allowlist."""

    status_code = 403
    message = "Table not accessible"


class MethodNotAllowed(PortalError):
    """Only POST and OPTIONS are served."""

    status_code = 405
    message = "Method not allowed"


class InternalError(PortalError):
    """An unexpected error while handling a request."""

    status_code = 500
    message = "Server error"


class DatabaseUnavailable(PortalError):
    """The warehouse couldn't be reached to store page connections."""

    status_code = 500
    message = "Database connection failed"
