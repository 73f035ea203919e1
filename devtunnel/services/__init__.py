"""Local process services (SOCKS tunnel, proxied browser)."""

from __future__ import annotations

from devtunnel.services.browser import BrowserLauncher
from devtunnel.services.tunnel import SocksTunnelManager

__all__ = [
    "BrowserLauncher",
    "SocksTunnelManager",
]
