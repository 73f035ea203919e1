#!/usr/bin/env python3
"""devtunnel - remote development server and SOCKS tunnel controller."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

for _noisy_module in ["botocore", "boto3", "urllib3", "paramiko"]:
    logging.getLogger(_noisy_module).setLevel(logging.WARNING)

from devtunnel.core.config import ConfigLoader, TunnelConfig  # noqa: E402
from devtunnel.lifecycle import StartWorkflow, StatusWorkflow, StopWorkflow  # noqa: E402
from devtunnel.providers.aws.compute import EC2Manager  # noqa: E402
from devtunnel.services.browser import BrowserLauncher  # noqa: E402
from devtunnel.services.tunnel import SocksTunnelManager  # noqa: E402
from devtunnel.cli.main import main  # noqa: E402


class DevTunnel:
    """Start and stop the remote development server and its SOCKS tunnel.

    Parameters
    ----------
    config_loader : ConfigLoader | None
        Loader for the configuration. If None, reads ``.env``,
        ``devtunnel.yaml`` and the process environment.
    ec2_manager_factory : Callable[[str], Any] | None
        Factory taking a region and returning a compute provider
    tunnel_manager_factory : Callable[..., SocksTunnelManager] | None
        Factory for the SOCKS tunnel manager
    browser_launcher_factory : Callable[..., BrowserLauncher] | None
        Factory for the proxied browser launcher
    """

    def __init__(
        self,
        config_loader: ConfigLoader | None = None,
        ec2_manager_factory: Callable[[str], Any] | None = None,
        tunnel_manager_factory: Callable[..., SocksTunnelManager] | None = None,
        browser_launcher_factory: Callable[..., BrowserLauncher] | None = None,
    ) -> None:
        self._config_loader = config_loader or ConfigLoader()
        self._ec2_manager_factory = ec2_manager_factory or EC2Manager
        self._tunnel_manager_factory = tunnel_manager_factory or SocksTunnelManager
        self._browser_launcher_factory = browser_launcher_factory or BrowserLauncher
        self._config: TunnelConfig | None = None

    def _load_config(self) -> TunnelConfig:
        if self._config is None:
            self._config = self._config_loader.load_config()
        return self._config

    def _create_tunnel_manager(
        self, config: TunnelConfig, debug: bool = False
    ) -> SocksTunnelManager:
        return self._tunnel_manager_factory(
            port=config.tunnel_port,
            username=config.ssh_user,
            key_file=config.ssh_key,
            debug=debug,
        )

    def start(self, debug: bool = False, browser: bool = True) -> None:
        """Boot the server, open the SOCKS tunnel and launch a proxied browser.

        Parameters
        ----------
        debug : bool
            Run ssh verbosely with its output on the terminal
        browser : bool
            Launch the proxied browser once the tunnel is up (``--nobrowser``
            to skip)
        """
        config = self._load_config()

        browser_launcher = None
        if browser:
            browser_launcher = self._browser_launcher_factory(
                command=config.browser_command,
                port=config.tunnel_port,
                profile_dir=config.browser_profile,
            )

        StartWorkflow(
            config=config,
            ec2_manager=self._ec2_manager_factory(config.region),
            tunnel_manager=self._create_tunnel_manager(config, debug=debug),
            browser_launcher=browser_launcher,
        ).run()

    def stop(self) -> None:
        """Stop the server and kill any tunnel left on the local port."""
        config = self._load_config()

        StopWorkflow(
            config=config,
            ec2_manager=self._ec2_manager_factory(config.region),
            tunnel_manager=self._create_tunnel_manager(config),
        ).run()

    def status(self) -> dict[str, Any]:
        """Show the server state and whether the local tunnel is listening."""
        config = self._load_config()

        return StatusWorkflow(
            config=config,
            ec2_manager=self._ec2_manager_factory(config.region),
            tunnel_manager=self._create_tunnel_manager(config),
        ).run()


if __name__ == "__main__":
    main()
