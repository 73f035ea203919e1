"""CLI entry point for devtunnel."""

from __future__ import annotations

import logging
import os
import sys

import fire

from devtunnel.constants import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_INTERRUPTED,
)
from devtunnel.exceptions import ConfigurationError, TunnelError
from devtunnel.logging import StreamFormatter, StreamRoutingFilter
from devtunnel.providers import (
    ProviderAPIError,
    ProviderConnectionError,
    ProviderCredentialsError,
)
from devtunnel.providers.aws.utils import get_aws_credentials_error_message
from devtunnel.utils import log_and_print_error


def get_devtunnel_class() -> type:
    """Get DevTunnel class on-demand to avoid circular imports.

    Returns
    -------
    type
        DevTunnel class
    """
    from devtunnel.__main__ import DevTunnel

    return DevTunnel


def handle_credentials_error(debug_mode: bool) -> None:
    """Handle provider credentials error.

    Parameters
    ----------
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderCredentialsError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    log_and_print_error("Cloud credentials not found")
    print(get_aws_credentials_error_message(), file=sys.stderr)
    sys.exit(EXIT_ERROR)


def handle_api_error(error: ProviderAPIError, debug_mode: bool) -> None:
    """Handle provider API error with context-specific messages.

    Parameters
    ----------
    error : ProviderAPIError
        The API error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderAPIError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    if error.error_code == "UnauthorizedOperation":
        log_and_print_error(
            "Insufficient IAM permissions. DescribeInstances, StartInstances "
            "and StopInstances are required."
        )
    elif error.error_code in ["ExpiredToken", "RequestExpired", "ExpiredTokenException"]:
        log_and_print_error(
            "Cloud credentials have expired. Refresh them (e.g. `aws sso login`)."
        )
    elif error.error_code == "IncorrectInstanceState":
        log_and_print_error("Instance cannot change state right now: %s", error)
    else:
        log_and_print_error("Cloud API error: %s", error)

    sys.exit(EXIT_ERROR)


def handle_connection_error(error: ProviderConnectionError, debug_mode: bool) -> None:
    """Handle unreachable cloud endpoint.

    Parameters
    ----------
    error : ProviderConnectionError
        The connection error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderConnectionError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    log_and_print_error("Unable to reach the cloud API: %s", error)
    sys.exit(EXIT_ERROR)


def handle_tunnel_error(error: TunnelError, debug_mode: bool) -> None:
    """Handle a workflow error by printing one line and exiting.

    Parameters
    ----------
    error : TunnelError
        The workflow error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    TunnelError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    log_and_print_error("%s", error)

    if isinstance(error, ConfigurationError):
        sys.exit(EXIT_CONFIG_ERROR)

    sys.exit(EXIT_ERROR)


def configure_logging(verbose: bool = False) -> None:
    """Send progress to stdout and warnings/errors to stderr.

    Parameters
    ----------
    verbose : bool
        Lower the level to DEBUG
    """
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(StreamFormatter("%(message)s"))
    stdout_handler.addFilter(StreamRoutingFilter("stdout"))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(StreamFormatter("%(message)s"))
    stderr_handler.addFilter(StreamRoutingFilter("stderr"))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=[stdout_handler, stderr_handler],
        force=True,
    )


def main() -> None:
    """Entry point for Fire CLI with graceful error handling.

    Fire maps the public methods of ``DevTunnel`` to the ``start``, ``stop``
    and ``status`` commands. Errors raised by any step end up here, where a
    single error line is printed and the exit code is chosen. Setting
    ``DEVTUNNEL_DEBUG=1`` re-raises instead so the traceback is shown.
    """
    debug_mode = os.environ.get("DEVTUNNEL_DEBUG") == "1"
    configure_logging(verbose=debug_mode)

    try:
        fire.Fire(get_devtunnel_class()())
    except ProviderCredentialsError:
        handle_credentials_error(debug_mode)
    except ProviderAPIError as e:
        handle_api_error(e, debug_mode)
    except ProviderConnectionError as e:
        handle_connection_error(e, debug_mode)
    except TunnelError as e:
        handle_tunnel_error(e, debug_mode)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)
