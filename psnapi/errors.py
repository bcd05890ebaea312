"""Exception hierarchy shared by the client and every API wrapper."""
from typing import Optional


class PSNError(Exception):
    """Base class for all psnapi errors."""


class ConfigError(PSNError):
    """Raised when the config file cannot be read or parsed."""


class ValidationError(PSNError, ValueError):
    """Raised when caller input is rejected before any request is made."""


class MissingFieldError(PSNError, KeyError):
    """Raised when a response document lacks a required key."""

    def __init__(self, field: str, document: str = 'document') -> None:
        super().__init__(field)
        self.field = field
        self.document = document

    def __str__(self) -> str:
        return f"{self.document} is missing required field '{self.field}'"


class RemoteError(PSNError):
    """Raised when an HTTP call fails or returns a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 url: str = '') -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class NotFoundError(RemoteError):
    """Raised when the remote resource does not exist (HTTP 404)."""


class AuthError(RemoteError):
    """Raised on HTTP 401/403 or when tokens cannot be obtained."""
