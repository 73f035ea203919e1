"""AWS-specific utility functions for devtunnel."""

from __future__ import annotations

from typing import Any


def extract_first_instance(response: dict[str, Any]) -> dict[str, Any] | None:
    """Extract first instance from AWS describe_instances response.

    Parameters
    ----------
    response : dict[str, Any]
        Response from boto3 describe_instances call

    Returns
    -------
    dict[str, Any] | None
        The first instance dictionary, or None if the response holds no
        reservations or instances
    """
    for reservation in response.get("Reservations") or []:
        instances = reservation.get("Instances") or []
        if instances:
            return instances[0]
    return None


def tags_to_dict(tags: list[dict[str, str]] | None) -> dict[str, str]:
    """Convert an EC2 tag list into a plain mapping.

    Parameters
    ----------
    tags : list[dict[str, str]] | None
        Tag list as returned by the EC2 API

    Returns
    -------
    dict[str, str]
        Mapping of tag keys to values
    """
    return {tag["Key"]: tag["Value"] for tag in tags or []}


def get_aws_credentials_error_message() -> str:
    """Get standard AWS credentials error message.

    Returns
    -------
    str
        Formatted AWS credentials error message
    """
    return (
        "Configure your credentials:\n"
        "  aws configure\n\n"
        "Or set environment variables:\n"
        "  export AWS_ACCESS_KEY_ID=...\n"
        "  export AWS_SECRET_ACCESS_KEY=..."
    )
