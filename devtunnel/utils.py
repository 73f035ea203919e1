"""Utility functions for devtunnel."""

import logging
import sys
from typing import Any


def log_and_print_error(message: str, *args: Any) -> None:
    """Log error message and print to stderr.

    Parameters
    ----------
    message : str
        Error message with optional format placeholders
    *args : Any
        Format arguments for message
    """
    logging.getLogger("devtunnel").debug(message, *args)
    formatted_msg = message % args if args else message
    print(f"Error: {formatted_msg}", file=sys.stderr)


def validate_port(port: int) -> None:
    """Validate port number is in valid range.

    Parameters
    ----------
    port : int
        Port number to validate

    Raises
    ------
    ValueError
        If port is not in valid range 1-65535
    """
    if not isinstance(port, int) or isinstance(port, bool) or port < 1 or port > 65535:
        raise ValueError(f"Port must be between 1-65535, got {port}")
