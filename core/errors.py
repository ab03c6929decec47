"""
Error taxonomy for the admin console core.

Every error carries a user-facing ``message`` so screens can show it as-is.
"""


class AdminError(Exception):
    """Base class for all recoverable console errors."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthRequired(AdminError):
    """No token, or the backend answered 401 (session expired)."""

    default_message = "Authentication required. Please login again."


class NetworkError(AdminError):
    """The request could not complete (connection, DNS, timeout)."""

    default_message = "Network error. Please check your connection and try again."


class ServerError(AdminError):
    """Non-2xx response, or a 2xx envelope with ``success: false``."""

    def __init__(self, message: str = None, status: int = None):
        self.status = status
        if not message:
            message = f"Error {status}" if status else "Request failed"
        super().__init__(message)


class ValidationError(AdminError):
    """Input rejected before any request is sent."""

    default_message = "Please fill in all required fields"


class RequestInProgress(ValidationError):
    """A mutation for the same item is still waiting for the server."""

    default_message = "A request for this item is already in progress"


class ImageDecodeError(AdminError):
    default_message = "Could not read the selected image"


class ImageEncodeError(AdminError):
    default_message = "Could not compress the selected image"
