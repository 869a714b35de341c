"""Custom exceptions for the client."""

from typing import Any


class ClientError(Exception):
    """Base exception for client errors."""
    pass


class ApiError(ClientError):
    """API error with status code, message and the raw error payload."""

    def __init__(self, status_code: int, message: str, data: Any = None):
        self.status_code = status_code
        self.message = message
        self.data = data
        super().__init__(f"API Error {status_code}: {message}")


class AuthenticationError(ClientError):
    """Raised when a login is rejected."""
    pass


class VersionCheckError(ClientError):
    """Raised when the current version cannot be determined."""
    pass
