"""Core devtunnel functionality."""

from __future__ import annotations

from devtunnel.core.config import ConfigLoader, TunnelConfig, require

__all__ = [
    "ConfigLoader",
    "TunnelConfig",
    "require",
]
