"""Start, stop and status workflows for the development server.

Each workflow is a fixed sequence of named steps. Steps raise typed errors
from ``devtunnel.exceptions`` and never exit the process themselves.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from devtunnel.constants import (
    MAX_POLLING_ATTEMPTS,
    POLLING_INTERVAL_SECONDS,
    InstanceState,
)
from devtunnel.core.config import TunnelConfig
from devtunnel.providers.aws.compute import InstanceDescriptor
from devtunnel.services.browser import BrowserLauncher
from devtunnel.services.tunnel import SocksTunnelManager

logger = logging.getLogger(__name__)


class InstanceWorkflow:
    """Steps shared by every workflow: locating and polling the instance.

    Parameters
    ----------
    config : TunnelConfig
        Validated configuration
    ec2_manager : Any
        Compute provider exposing ``get_instance``, ``start_instance`` and
        ``stop_instance``
    poll_interval : float
        Seconds between status checks
    max_poll_attempts : int
        Status checks allowed after the first one
    """

    def __init__(
        self,
        config: TunnelConfig,
        ec2_manager: Any,
        poll_interval: float = POLLING_INTERVAL_SECONDS,
        max_poll_attempts: int = MAX_POLLING_ATTEMPTS,
    ) -> None:
        self.config = config
        self.ec2_manager = ec2_manager
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts

    def locate(self) -> InstanceDescriptor:
        """Find the instance tagged with the configured name.

        Raises
        ------
        InstanceNotFoundError
            If no instance carries the tag
        """
        instance = self.ec2_manager.get_instance(self.config.tunnel_name)
        logger.debug(
            "Located instance %s (%s) in state %s",
            instance.instance_id,
            instance.name,
            instance.state,
        )
        return instance

    def poll_until(self, target_state: str) -> InstanceDescriptor:
        """Re-fetch the instance until it reaches a state or the budget runs out.

        The instance is checked once, then up to ``max_poll_attempts`` more
        times, sleeping ``poll_interval`` between checks. Running out of
        attempts is not an error: a warning is logged and the last snapshot
        is returned so the caller can carry on.

        Parameters
        ----------
        target_state : str
            State to wait for, e.g. ``running``

        Returns
        -------
        InstanceDescriptor
            Snapshot from the last status check
        """
        checks = 0

        while True:
            instance = self.ec2_manager.get_instance(self.config.tunnel_name)
            checks += 1
            logger.info("Status: %s", instance.state)

            if instance.state == target_state:
                return instance

            if checks > self.max_poll_attempts:
                logger.warning(
                    "Instance did not reach '%s' after %d status checks "
                    "(last state: %s); continuing",
                    target_state,
                    checks,
                    instance.state,
                )
                return instance

            time.sleep(self.poll_interval)


class StartWorkflow(InstanceWorkflow):
    """Boot the instance, open the SOCKS tunnel and launch the browser.

    Parameters
    ----------
    config : TunnelConfig
        Validated configuration
    ec2_manager : Any
        Compute provider
    tunnel_manager : SocksTunnelManager
        Manager for the local SSH dynamic port forward
    browser_launcher : BrowserLauncher | None
        Launcher for the proxied browser; None skips the browser step
    """

    def __init__(
        self,
        config: TunnelConfig,
        ec2_manager: Any,
        tunnel_manager: SocksTunnelManager,
        browser_launcher: BrowserLauncher | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(config, ec2_manager, **kwargs)
        self.tunnel_manager = tunnel_manager
        self.browser_launcher = browser_launcher

    def run(self) -> InstanceDescriptor:
        """Execute the start sequence.

        Returns
        -------
        InstanceDescriptor
            Snapshot of the running instance the tunnel points at
        """
        logger.info("SSH Tunnel - Start")
        logger.info("==================")
        logger.info("")
        logger.info("Starting SSH tunnel setup...")
        logger.info('Starting "%s" EC2 instance', self.config.tunnel_name)

        instance = self.locate()
        self.request_start(instance)

        logger.info("Checking server state...")
        instance = self.poll_until(InstanceState.RUNNING.value)

        logger.info("Creating tunnel...")
        self.open_tunnel(instance)

        if self.browser_launcher is not None:
            logger.info("Launching browser...")
            self.launch_browser()

        logger.info("All done! Enjoy.")
        return instance

    def request_start(self, instance: InstanceDescriptor) -> None:
        self.ec2_manager.start_instance(instance.instance_id)

    def open_tunnel(self, instance: InstanceDescriptor) -> None:
        self.tunnel_manager.establish(instance.public_ip)

    def launch_browser(self) -> None:
        self.browser_launcher.launch(self.config.default_url)


class StopWorkflow(InstanceWorkflow):
    """Stop the instance and drop any tunnel still bound locally.

    Parameters
    ----------
    config : TunnelConfig
        Validated configuration
    ec2_manager : Any
        Compute provider
    tunnel_manager : SocksTunnelManager | None
        When given, processes left on the tunnel port are killed after the
        instance stops
    """

    def __init__(
        self,
        config: TunnelConfig,
        ec2_manager: Any,
        tunnel_manager: SocksTunnelManager | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(config, ec2_manager, **kwargs)
        self.tunnel_manager = tunnel_manager

    def run(self) -> InstanceDescriptor:
        """Execute the stop sequence.

        Returns
        -------
        InstanceDescriptor
            Snapshot from the last status check
        """
        logger.info("SSH Tunnel - Stop")
        logger.info("==================")
        logger.info("")
        logger.info("Starting SSH tunnel teardown...")
        logger.info('Stopping "%s" EC2 instance', self.config.tunnel_name)

        instance = self.locate()
        self.request_stop(instance)

        logger.info("Checking server state...")
        instance = self.poll_until(InstanceState.STOPPED.value)

        self.close_tunnel()

        logger.info("Server stopped, tunnel destroyed!")
        return instance

    def request_stop(self, instance: InstanceDescriptor) -> None:
        self.ec2_manager.stop_instance(instance.instance_id)

    def close_tunnel(self) -> None:
        if self.tunnel_manager is not None:
            self.tunnel_manager.clear_port()


class StatusWorkflow(InstanceWorkflow):
    """Report instance state and whether the local tunnel is up.

    Parameters
    ----------
    config : TunnelConfig
        Validated configuration
    ec2_manager : Any
        Compute provider
    tunnel_manager : SocksTunnelManager
        Used only to probe the local port
    """

    def __init__(
        self,
        config: TunnelConfig,
        ec2_manager: Any,
        tunnel_manager: SocksTunnelManager,
        **kwargs: Any,
    ) -> None:
        super().__init__(config, ec2_manager, **kwargs)
        self.tunnel_manager = tunnel_manager

    def run(self) -> dict[str, Any]:
        instance = self.locate()
        tunnel_up = self.tunnel_manager.is_listening()

        return {
            "instance_id": instance.instance_id,
            "name": instance.name,
            "state": instance.state,
            "public_ip": instance.public_ip,
            "tunnel_port": self.config.tunnel_port,
            "tunnel_listening": tunnel_up,
        }
