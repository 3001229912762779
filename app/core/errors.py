from contextlib import contextmanager
from typing import Iterator, Optional


class BookingAppError(Exception):
    """
    Base for every error the application translates into an HTTP response.
    `message` is always safe to show to the caller.
    """
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingAppError):
    status_code = 400
    default_message = "Invalid request."


class AuthError(BookingAppError):
    status_code = 401
    default_message = "Unauthorized. Please log in."

    def __init__(self, message: Optional[str] = None, redirect_to: Optional[str] = None):
        super().__init__(message)
        # HTML surfaces send the browser to the login page instead of a 401
        self.redirect_to = redirect_to


class NotFoundError(BookingAppError):
    status_code = 404
    default_message = "Not found."


class StorageError(BookingAppError):
    status_code = 500
    default_message = "A database error occurred."


class NotificationError(BookingAppError):
    # Never reaches a response; dispatch failures are logged only.
    status_code = 500
    default_message = "Failed to send notification."


@contextmanager
def storage_errors(message: str) -> Iterator[None]:
    """Re-labels a StorageError with the message for the operation that failed."""
    try:
        yield
    except StorageError as e:
        raise StorageError(message) from e
