"""
Domain errors raised by the account and mailbox services.

Each error carries the HTTP status it maps to; app.main turns any of them
into a ``{"error": message}`` response.
"""


class WebmailError(Exception):
    """Base class for errors reported back to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WebmailError):
    """A required field is missing or empty."""

    status_code = 400


class ConflictError(WebmailError):
    """The email address is already registered."""

    status_code = 400


class AuthError(WebmailError):
    """Credentials or session token were rejected."""

    status_code = 401


class ForbiddenError(WebmailError):
    """The authenticated user may not touch this mailbox or message."""

    status_code = 403


class NotFoundError(WebmailError):
    status_code = 404


class StorageUnavailableError(WebmailError):
    """The data directory is missing or read-only."""

    status_code = 503
