"""Global constants for devtunnel.

This module contains application-wide constants shared by the workflows,
the tunnel service and the CLI.
"""

from enum import Enum

POLLING_INTERVAL_SECONDS = 3
"""Delay between instance status checks in seconds.

Used by both the start and the stop workflow while waiting for the instance
to reach its target state.
"""

MAX_POLLING_ATTEMPTS = 20
"""Maximum number of additional status checks after the first one.

A polling loop performs at most ``MAX_POLLING_ATTEMPTS + 1`` checks, which
bounds the wait to roughly one minute with the default interval.
"""

TUNNEL_ATTEMPTS = 3
"""Number of retries allowed before tunnel creation is considered failed.

The tunnel is retried while the retry counter does not exceed this value,
so a port that never opens fails after ``TUNNEL_ATTEMPTS + 1`` retries.
"""

TUNNEL_SETTLE_SECONDS = 1.0
"""Delay in seconds between spawning ssh and probing the local port.

Gives the ssh client time to authenticate and bind the SOCKS listener.
"""

PORT_PROBE_TIMEOUT_SECONDS = 1.0
"""Timeout in seconds for the TCP connect used to probe the tunnel port."""

PORT_CLEANUP_TIMEOUT_SECONDS = 5
"""Timeout in seconds for looking up processes bound to the tunnel port."""

PROCESS_EXIT_TIMEOUT_SECONDS = 5
"""Seconds to wait for a failed ssh attempt to exit before killing it."""

DEFAULT_REGION = "us-east-1"
"""AWS region used when neither configuration nor environment names one."""

DEFAULT_CONFIG_FILE = "devtunnel.yaml"
"""YAML file holding optional configuration defaults.

Overridden by the ``DEVTUNNEL_CONFIG`` environment variable.
"""

DEFAULT_ENV_FILE = ".env"
"""Dotenv file loaded into the environment before validation.

Overridden by the ``DEVTUNNEL_ENV_FILE`` environment variable.
"""

DEFAULT_BROWSER_PROFILE = "~/chrome-with-proxy"
"""Browser user-data directory dedicated to the proxied session.

Keeping a separate profile stops the proxy flag from being ignored by an
already running browser instance.
"""

MACOS_CHROME_PATH = "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"
"""Chrome executable used on macOS when no browser is configured."""

DEFAULT_BROWSER_COMMAND = "google-chrome"
"""Chrome executable used on other platforms when no browser is configured."""

REQUIRED_CONFIG_KEYS = (
    "TUNNEL_NAME",
    "TUNNEL_PORT",
    "SSH_USER",
    "SSH_KEY",
    "TUNNEL_DEFAULT_URL",
)
"""Configuration keys that must be present and non-empty.

Checked in this order; the first missing key is reported.
"""

EXIT_SUCCESS = 0
"""Exit code indicating successful program completion."""

EXIT_ERROR = 1
"""Exit code indicating a general application error."""

EXIT_CONFIG_ERROR = 2
"""Exit code indicating a configuration error.

Used when the application terminates due to missing or invalid settings.
"""

EXIT_INTERRUPTED = 130
"""Exit code used when the user interrupts a command with Ctrl-C."""


class InstanceState(str, Enum):
    """Instance state values."""

    PENDING = "pending"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    TERMINATED = "terminated"
