"""
Error taxonomy for the billing services.

Every service error carries the HTTP status the web API answers with, so
the same classes describe failures raised locally by the repository-backed
services and failures reported by the remote API.
"""

from typing import Optional


class TimebillError(Exception):
    """Base class for all billing service errors."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequestError(TimebillError):
    """A required field is missing or a value is malformed."""

    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(TimebillError):
    """No session is available."""

    status_code = 401
    default_message = "Unauthorized"


class StateError(TimebillError):
    """The operation conflicts with the current state of an entity."""

    status_code = 400
    default_message = "Invalid state"


class DuplicatePeriodError(StateError):
    """A salary credit already exists for the project and work month."""

    default_message = "This work month already has a credited record"


class NotFoundError(TimebillError):
    """The requested entity does not exist."""

    status_code = 404
    default_message = "Not found"


class DatabaseError(TimebillError):
    """Unhandled persistence failure.

    The message shown to callers is always generic; the underlying cause is
    chained and logged.
    """

    status_code = 500

    def __init__(self, message: Optional[str] = None):
        super().__init__(None)
        self.detail = message


class DuplicateRecordError(DatabaseError):
    """A unique constraint rejected an insert."""


class ApiError(TimebillError):
    """Non-2xx response from the web API.

    The message is the server's ``error`` string verbatim.
    """

    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(message or f"Request failed with status {status_code}")
        self.status_code = status_code


class NetworkError(TimebillError):
    """The web API could not be reached."""

    status_code = 0
    default_message = "Network error. Please try again."
