"""Configuration loading and validation for devtunnel.

Settings are flat string values keyed by environment-variable names. They are
merged from built-in defaults, an optional YAML file, a ``.env`` file and the
process environment, then validated once and frozen into a ``TunnelConfig``.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from devtunnel.constants import (
    DEFAULT_BROWSER_COMMAND,
    DEFAULT_BROWSER_PROFILE,
    DEFAULT_CONFIG_FILE,
    DEFAULT_ENV_FILE,
    DEFAULT_REGION,
    MACOS_CHROME_PATH,
    REQUIRED_CONFIG_KEYS,
)
from devtunnel.exceptions import ConfigurationError
from devtunnel.utils import validate_port

logger = logging.getLogger(__name__)


def require(
    required_keys: Iterable[str], values: Mapping[str, str] | None = None
) -> None:
    """Check that every required key is present and non-empty.

    Parameters
    ----------
    required_keys : Iterable[str]
        Key names to check, in order
    values : Mapping[str, str] | None
        Mapping to check against. Defaults to the process environment.

    Raises
    ------
    ConfigurationError
        Naming the first key that is absent or empty
    """
    source = os.environ if values is None else values

    for key in required_keys:
        value = source.get(key)
        if value is None or not str(value).strip():
            raise ConfigurationError(f".env is missing the required `{key}` key")


def default_browser_command(platform: str | None = None) -> str:
    """Return the browser executable used when none is configured.

    Parameters
    ----------
    platform : str | None
        Platform identifier, defaults to ``sys.platform``

    Returns
    -------
    str
        Path or name of a Chrome-compatible executable
    """
    platform = platform or sys.platform
    if platform == "darwin":
        return MACOS_CHROME_PATH
    return DEFAULT_BROWSER_COMMAND


@dataclass(frozen=True)
class TunnelConfig:
    """Validated, immutable settings for one command invocation."""

    tunnel_name: str
    tunnel_port: int
    ssh_user: str
    ssh_key: str
    default_url: str
    region: str = DEFAULT_REGION
    browser_command: str = DEFAULT_BROWSER_COMMAND
    browser_profile: str = DEFAULT_BROWSER_PROFILE


class ConfigLoader:
    """Load and merge configuration sources into a ``TunnelConfig``.

    Parameters
    ----------
    environ : Mapping[str, str] | None
        Environment mapping to read from. Defaults to ``os.environ``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.environ = os.environ if environ is None else environ
        self.BUILT_IN_DEFAULTS: dict[str, str] = {
            "TUNNEL_BROWSER_PROFILE": DEFAULT_BROWSER_PROFILE,
        }

    def load_env_file(self, env_path: str | None = None) -> dict[str, str]:
        """Read a dotenv file without touching the process environment.

        Parameters
        ----------
        env_path : str | None
            Path to the dotenv file. If None, checks DEVTUNNEL_ENV_FILE,
            then falls back to ``.env``

        Returns
        -------
        dict[str, str]
            Values defined in the file; empty when the file does not exist
        """
        if env_path is None:
            env_path = self.environ.get("DEVTUNNEL_ENV_FILE", DEFAULT_ENV_FILE)

        if not Path(env_path).is_file():
            logger.debug("No dotenv file at %s", env_path)
            return {}

        return {
            key: value
            for key, value in dotenv_values(env_path).items()
            if value is not None
        }

    def load_file_defaults(self, config_path: str | None = None) -> dict[str, str]:
        """Load the ``defaults`` section of the YAML configuration file.

        Parameters
        ----------
        config_path : str | None
            Path to YAML config file. If None, checks DEVTUNNEL_CONFIG env var,
            then falls back to devtunnel.yaml

        Returns
        -------
        dict[str, str]
            Key/value defaults with interpolations resolved; empty when the
            file does not exist

        Raises
        ------
        ConfigurationError
            If the file cannot be parsed or its interpolations cannot be resolved
        """
        if config_path is None:
            config_path = self.environ.get("DEVTUNNEL_CONFIG", DEFAULT_CONFIG_FILE)

        config_file = Path(config_path)

        if not config_file.exists():
            return {}

        try:
            cfg = OmegaConf.load(config_file)
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML config file %s: %s", config_file, e)
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file {config_file}: {e}"
            ) from e

        if cfg is None or "defaults" not in cfg:
            return {}

        try:
            defaults: Any = OmegaConf.to_container(cfg.defaults, resolve=True)
        except OmegaConfBaseException as e:
            raise ConfigurationError(
                f"Configuration variable resolution error: {e}"
            ) from e

        if not isinstance(defaults, dict):
            raise ConfigurationError(
                f"'defaults' in {config_file} must be a mapping of settings"
            )

        return {
            str(key): str(value) for key, value in defaults.items() if value is not None
        }

    def load(self) -> dict[str, str]:
        """Merge all configuration sources.

        Returns
        -------
        dict[str, str]
            Built-in defaults, overridden by YAML file defaults, overridden by
            the dotenv file, overridden by the environment
        """
        merged = dict(self.BUILT_IN_DEFAULTS)
        merged.update(self.load_file_defaults())
        merged.update(self.load_env_file())

        for key, value in self.environ.items():
            if value != "":
                merged[key] = value

        return merged

    def build(self, values: Mapping[str, str]) -> TunnelConfig:
        """Validate merged values and freeze them into a ``TunnelConfig``.

        Parameters
        ----------
        values : Mapping[str, str]
            Merged configuration values

        Returns
        -------
        TunnelConfig
            Immutable configuration

        Raises
        ------
        ConfigurationError
            If a required key is missing or TUNNEL_PORT is not a valid port
        """
        require(REQUIRED_CONFIG_KEYS, values)

        raw_port = values["TUNNEL_PORT"].strip()
        try:
            port = int(raw_port)
            validate_port(port)
        except ValueError as e:
            raise ConfigurationError(
                f"TUNNEL_PORT must be a port number between 1-65535, got {raw_port!r}"
            ) from e

        region = (
            values.get("TUNNEL_REGION")
            or values.get("AWS_DEFAULT_REGION")
            or DEFAULT_REGION
        )

        return TunnelConfig(
            tunnel_name=values["TUNNEL_NAME"].strip(),
            tunnel_port=port,
            ssh_user=values["SSH_USER"].strip(),
            ssh_key=os.path.expanduser(values["SSH_KEY"].strip()),
            default_url=values["TUNNEL_DEFAULT_URL"].strip(),
            region=region,
            browser_command=values.get("TUNNEL_BROWSER") or default_browser_command(),
            browser_profile=os.path.expanduser(
                values.get("TUNNEL_BROWSER_PROFILE") or DEFAULT_BROWSER_PROFILE
            ),
        )

    def load_config(self) -> TunnelConfig:
        """Load, validate and return the configuration for this process."""
        return self.build(self.load())
