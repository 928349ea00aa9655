"""
Error taxonomy for the housing portal client.

- TransportError: the request never produced a usable envelope
- ServerError: the backend answered {success: false, error}
- ValidationError: a client-side check failed before any request
"""

from typing import Optional


class PortalError(Exception):
    """Base class for all client errors."""


class ConfigError(PortalError):
    """Missing or invalid settings."""


class TransportError(PortalError):
    """Network failure, timeout, or an unparseable response body."""


class ServerError(PortalError):
    """Logical failure reported by the backend envelope."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(PortalError):
    """Client-side validation failure; nothing was sent."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field
