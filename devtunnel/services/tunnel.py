"""SOCKS5 tunnel management using the system ssh client.

This module provides a manager class that opens an SSH dynamic port forward
(``ssh -D``) to the development server and verifies that the local SOCKS
listener is accepting connections, retrying a bounded number of times.

Classes
-------
SocksTunnelManager
    Manager for a single SSH dynamic port forward

Examples
--------
>>> manager = SocksTunnelManager(port=1080, username="ubuntu", key_file="~/.ssh/dev.pem")
>>> manager.establish("203.0.113.10")

Notes
-----
A successful ssh process is spawned in its own session and never waited on,
so it outlives the devtunnel command. The process from a failed attempt is
terminated before the next one, and stale forwards are removed by killing
whatever process listens on the local port.
"""

from __future__ import annotations

import logging
import os
import signal
import socket
import subprocess
import time
from pathlib import Path

import paramiko
from paramiko.pkey import UnknownKeyType

from devtunnel.constants import (
    PORT_CLEANUP_TIMEOUT_SECONDS,
    PORT_PROBE_TIMEOUT_SECONDS,
    PROCESS_EXIT_TIMEOUT_SECONDS,
    TUNNEL_ATTEMPTS,
    TUNNEL_SETTLE_SECONDS,
)
from devtunnel.exceptions import ConfigurationError, TunnelEstablishmentError
from devtunnel.utils import validate_port

logger = logging.getLogger(__name__)


class SocksTunnelManager:
    """Manages an SSH dynamic port forward bound to a local port.

    Parameters
    ----------
    port : int
        Local port for the SOCKS listener
    username : str
        SSH login user on the remote host
    key_file : str
        Path to SSH private key file
    debug : bool
        Run ssh with ``-vv`` and leave its output attached to the terminal
    max_retries : int
        Retries allowed before giving up (default: TUNNEL_ATTEMPTS)

    Attributes
    ----------
    attempts : int
        Number of retries performed by the last ``establish`` call
    process : subprocess.Popen | None
        Most recently spawned ssh process
    """

    def __init__(
        self,
        port: int,
        username: str,
        key_file: str,
        debug: bool = False,
        max_retries: int = TUNNEL_ATTEMPTS,
    ) -> None:
        validate_port(port)
        self.port = port
        self.username = username
        self.key_file = key_file
        self.debug = debug
        self.max_retries = max_retries
        self.attempts = 0
        self.process: subprocess.Popen | None = None

    def validate_key_file(self) -> None:
        """Validate SSH key file exists, is readable and holds a private key.

        Raises
        ------
        ConfigurationError
            If the key file is missing, unreadable or not a private key
        """
        key_path = Path(self.key_file)

        if not key_path.exists():
            raise ConfigurationError(f"SSH key file not found: {self.key_file}")

        if not key_path.is_file():
            raise ConfigurationError(f"SSH key path is not a file: {self.key_file}")

        if not os.access(self.key_file, os.R_OK):
            raise ConfigurationError(f"SSH key file is not readable: {self.key_file}")

        try:
            paramiko.PKey.from_path(key_path)
        except paramiko.PasswordRequiredException:
            logger.warning(
                "SSH key %s is encrypted; ssh will need an agent to unlock it",
                self.key_file,
            )
        except (paramiko.SSHException, UnknownKeyType, ValueError) as e:
            raise ConfigurationError(
                f"SSH key file is not a valid private key: {self.key_file} ({e})"
            ) from e

    def build_command(self, host: str) -> list[str]:
        """Build the ssh command line for the dynamic port forward.

        Parameters
        ----------
        host : str
            Remote host IP address

        Returns
        -------
        list[str]
            Argument vector for ``subprocess``
        """
        command = [
            "ssh",
            "-D",
            str(self.port),
            "-N",
            "-o",
            "UserKnownHostsFile=/dev/null",
            "-o",
            "StrictHostKeyChecking=no",
            "-o",
            "ExitOnForwardFailure=yes",
            f"{self.username}@{host}",
            "-i",
            self.key_file,
        ]

        if self.debug:
            command.append("-vv")

        return command

    def find_port_owners(self) -> list[int]:
        """Return PIDs of processes listening on the local tunnel port.

        Returns
        -------
        list[int]
            Process IDs; empty when none are found or lsof is unavailable
        """
        try:
            result = subprocess.run(
                ["lsof", "-ti", f"tcp:{self.port}", "-sTCP:LISTEN"],
                capture_output=True,
                text=True,
                timeout=PORT_CLEANUP_TIMEOUT_SECONDS,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("Unable to list processes on port %s: %s", self.port, e)
            return []

        pids = []
        for line in result.stdout.split():
            if line.strip().isdigit():
                pids.append(int(line))

        return pids

    def clear_port(self) -> None:
        """Kill any process occupying the local tunnel port.

        Best-effort: every failure is logged and ignored.
        """
        for pid in self.find_port_owners():
            if pid == os.getpid():
                continue

            try:
                os.kill(pid, signal.SIGKILL)
                logger.debug("Killed process %s bound to port %s", pid, self.port)
            except OSError as e:
                logger.debug("Failed to kill process %s: %s", pid, e)

    def spawn(self, host: str) -> subprocess.Popen:
        """Start the ssh process in the background.

        Parameters
        ----------
        host : str
            Remote host IP address

        Returns
        -------
        subprocess.Popen
            The detached ssh process

        Raises
        ------
        TunnelEstablishmentError
            If the ssh executable cannot be started
        """
        command = self.build_command(host)
        logger.debug("Executing: %s", " ".join(command))

        output = None if self.debug else subprocess.DEVNULL

        try:
            self.process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=output,
                stderr=output,
                start_new_session=True,
            )
        except OSError as e:
            raise TunnelEstablishmentError(f"Unable to run ssh: {e}") from e

        return self.process

    def is_listening(self) -> bool:
        """Return whether the local tunnel port accepts TCP connections."""
        try:
            with socket.create_connection(
                ("localhost", self.port), timeout=PORT_PROBE_TIMEOUT_SECONDS
            ):
                return True
        except OSError:
            return False

    def terminate_process(self) -> None:
        """Stop the most recently spawned ssh process, if it is still running."""
        if self.process is None:
            return

        process = self.process
        self.process = None

        if process.poll() is not None:
            return

        process.terminate()
        try:
            process.wait(timeout=PROCESS_EXIT_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            logger.debug("ssh process %s ignored SIGTERM, killing", process.pid)
            process.kill()
            process.wait()

    def _attempt(self, host: str) -> bool:
        self.clear_port()
        self.spawn(host)
        time.sleep(TUNNEL_SETTLE_SECONDS)

        if self.is_listening():
            return True

        self.terminate_process()
        return False

    def establish(self, host: str | None) -> None:
        """Open the tunnel and verify it, retrying on failure.

        Parameters
        ----------
        host : str | None
            Remote host IP address

        Raises
        ------
        TunnelEstablishmentError
            If the host has no address or the port never starts listening
            within the retry budget
        """
        if not host:
            raise TunnelEstablishmentError(
                "Instance has no public IP address; tunnel could not be established"
            )

        self.validate_key_file()
        self.attempts = 0

        logger.info(
            "Opening SOCKS tunnel localhost:%s -> %s@%s", self.port, self.username, host
        )

        while not self._attempt(host):
            if self.attempts > self.max_retries:
                raise TunnelEstablishmentError("Tunnel could not be established")

            self.attempts += 1
            logger.info(
                "Tunnel not ready, retrying (%d/%d)...",
                self.attempts,
                self.max_retries + 1,
            )

        logger.info("SOCKS tunnel listening on localhost:%s", self.port)
