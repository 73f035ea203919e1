"""Errors raised by devtunnel workflows.

Every step raises one of these and leaves printing and exit codes to the
top-level CLI handler.
"""

from __future__ import annotations


class TunnelError(Exception):
    """Base class for devtunnel errors."""


class ConfigurationError(TunnelError, ValueError):
    """Raised when a required setting is missing or invalid."""


class InstanceNotFoundError(TunnelError):
    """Raised when no instance carries the configured Name tag.

    Parameters
    ----------
    name : str
        Name tag that was searched for
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Instance not found: no instance tagged Name={name!r}")
        self.name = name


class InstanceRequestError(TunnelError):
    """Raised when the provider does not acknowledge a start or stop request."""


class TunnelEstablishmentError(TunnelError, RuntimeError):
    """Raised when the SOCKS tunnel cannot be brought up."""
