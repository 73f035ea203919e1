"""Command-line interface for devtunnel."""

from __future__ import annotations

from devtunnel.cli.main import configure_logging

__all__ = ["configure_logging"]
