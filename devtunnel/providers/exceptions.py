"""Provider-agnostic exceptions raised at the cloud API boundary."""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for cloud provider errors.

    Parameters
    ----------
    message : str
        Human-readable error description
    error_code : str | None
        Provider-specific error code, if the provider returned one
    """

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


class ProviderCredentialsError(ProviderError):
    """Raised when cloud credentials are missing or unusable."""


class ProviderAPIError(ProviderError):
    """Raised when a cloud API call is rejected."""


class ProviderConnectionError(ProviderError):
    """Raised when the cloud API endpoint cannot be reached."""
