"""Admin authentication errors.

Configuration and upstream errors are turned into JSON responses by the
OAuth endpoints. Token errors stay inside the authenticator, which reports
them only as "not authenticated".
"""

from typing import Any


class AuthError(Exception):
    """Base class for admin authentication failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AuthError):
    """A required credential or secret is missing."""


class UpstreamAuthError(AuthError):
    """Google rejected the exchange or returned an unacceptable identity."""

    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.detail = detail


class MalformedTokenError(AuthError):
    """Session token is structurally invalid, forged, or undecodable."""


class ExpiredSessionError(AuthError):
    """Session token is correctly signed but past its expiry."""
