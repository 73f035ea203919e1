"""Launch a browser that routes its traffic through the SOCKS tunnel."""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


class BrowserLauncher:
    """Start a Chrome-compatible browser pointed at the local SOCKS proxy.

    Parameters
    ----------
    command : str
        Browser executable
    port : int
        Local SOCKS proxy port
    profile_dir : str
        User-data directory dedicated to the proxied session
    """

    def __init__(self, command: str, port: int, profile_dir: str) -> None:
        self.command = command
        self.port = port
        self.profile_dir = os.path.expanduser(profile_dir)

    def build_command(self, url: str) -> list[str]:
        return [
            self.command,
            f"--user-data-dir={self.profile_dir}",
            f"--proxy-server=socks5://localhost:{self.port}",
            url,
        ]

    def launch(self, url: str) -> subprocess.Popen | None:
        """Spawn the browser detached with its output suppressed.

        Best-effort: a browser that cannot be started is reported as a
        warning and does not fail the command.

        Parameters
        ----------
        url : str
            Page to open

        Returns
        -------
        subprocess.Popen | None
            The browser process, or None if it could not be started
        """
        command = self.build_command(url)
        logger.debug("Executing: %s", " ".join(command))

        try:
            return subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Unable to launch browser %s: %s", self.command, e)
            return None
