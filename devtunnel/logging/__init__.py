"""Logging helpers for routing CLI output between stdout and stderr."""

from devtunnel.logging.filters import StreamRoutingFilter
from devtunnel.logging.formatters import StreamFormatter

__all__ = ["StreamFormatter", "StreamRoutingFilter"]
