"""Error types raised by sapbridge components.

Only ``ConfigError`` is fatal. The registry converts the others into
error-flagged tool results, so callers of a tool never see them.
"""


class SapBridgeError(Exception):
    """Base class for all sapbridge errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigError(SapBridgeError):
    """Required settings are missing or invalid."""


class BackendError(SapBridgeError):
    """The OData backend rejected a request or returned something unusable."""


class AuthError(SapBridgeError):
    """The destination broker could not issue a token or is not bound."""
