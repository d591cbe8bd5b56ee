"""
Exception hierarchy for catalog generation.

Fatal errors (configuration, authentication, token persistence) abort
a run; everything else is contained at the per-entry boundary.
"""

from datetime import datetime, timezone


class CatalogError(Exception):
    """Base exception for catalog generation errors."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        status_code: int | None = None,
        body: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)


class FatalError(CatalogError):
    """Raised when nothing useful can proceed; aborts the whole run."""

    pass


class ConfigurationError(FatalError):
    """Raised when required credentials are missing."""

    pass


class AuthError(FatalError):
    """Raised when the identity provider rejects the token exchange."""

    pass


class CredentialStoreError(FatalError):
    """Raised when a fresh credential cannot be persisted."""

    pass


class TransportError(CatalogError):
    """Raised when a metadata request fails at the HTTP level."""

    pass


class ResolutionError(CatalogError):
    """Raised when one or more relational lookups for a game fail."""

    pass
