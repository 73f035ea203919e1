"""EC2 instance lookup and state changes for devtunnel."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import boto3

from devtunnel.exceptions import InstanceNotFoundError, InstanceRequestError
from devtunnel.providers.aws.constants import ACTIVE_INSTANCE_STATES, NAME_TAG_KEY
from devtunnel.providers.aws.errors import handle_aws_errors
from devtunnel.providers.aws.utils import extract_first_instance, tags_to_dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstanceDescriptor:
    """Read-only snapshot of a single EC2 instance."""

    instance_id: str
    name: str
    state: str
    public_ip: str | None = None

    @classmethod
    def from_api(cls, instance: dict[str, Any]) -> InstanceDescriptor:
        """Build a descriptor from a describe_instances instance entry.

        Parameters
        ----------
        instance : dict[str, Any]
            Single instance dictionary from the EC2 API

        Returns
        -------
        InstanceDescriptor
            Snapshot of the instance
        """
        tags = tags_to_dict(instance.get("Tags"))
        return cls(
            instance_id=instance["InstanceId"],
            name=tags.get(NAME_TAG_KEY, ""),
            state=instance["State"]["Name"],
            public_ip=instance.get("PublicIpAddress"),
        )


class EC2Manager:
    """Locate, start and stop the development server on EC2.

    Parameters
    ----------
    region : str
        AWS region for EC2 operations
    boto3_client_factory : Callable[..., Any] | None
        Optional factory for creating boto3 clients. If None, uses boto3.client
    """

    def __init__(
        self,
        region: str,
        boto3_client_factory: Callable[..., Any] | None = None,
    ) -> None:
        self.region = region
        self.boto3_client_factory = boto3_client_factory or boto3.client
        self.ec2_client = self.boto3_client_factory("ec2", region_name=region)

    def find_instance_by_name(self, name: str) -> InstanceDescriptor | None:
        """Return the first non-terminated instance carrying the Name tag.

        Parameters
        ----------
        name : str
            Value of the Name tag

        Returns
        -------
        InstanceDescriptor | None
            Fresh snapshot of the instance, or None if nothing matches
        """
        with handle_aws_errors():
            response = self.ec2_client.describe_instances(
                Filters=[
                    {"Name": f"tag:{NAME_TAG_KEY}", "Values": [name]},
                    {"Name": "instance-state-name", "Values": ACTIVE_INSTANCE_STATES},
                ]
            )

        instance = extract_first_instance(response)
        if instance is None:
            return None

        return InstanceDescriptor.from_api(instance)

    def get_instance(self, name: str) -> InstanceDescriptor:
        """Return the instance carrying the Name tag.

        Raises
        ------
        InstanceNotFoundError
            If no instance matches
        """
        instance = self.find_instance_by_name(name)
        if instance is None:
            raise InstanceNotFoundError(name)
        return instance

    def start_instance(self, instance_id: str) -> list[dict[str, Any]]:
        """Request an instance start.

        Parameters
        ----------
        instance_id : str
            Instance ID to start

        Returns
        -------
        list[dict[str, Any]]
            The ``StartingInstances`` state changes reported by EC2

        Raises
        ------
        InstanceRequestError
            If EC2 does not acknowledge the request
        """
        logger.debug("Requesting start of instance %s", instance_id)

        with handle_aws_errors():
            response = self.ec2_client.start_instances(InstanceIds=[instance_id])

        starting = response.get("StartingInstances")
        if not starting:
            raise InstanceRequestError("Unable to start instance")

        return starting

    def stop_instance(self, instance_id: str) -> list[dict[str, Any]]:
        """Request an instance stop.

        Parameters
        ----------
        instance_id : str
            Instance ID to stop

        Returns
        -------
        list[dict[str, Any]]
            The ``StoppingInstances`` state changes reported by EC2

        Raises
        ------
        InstanceRequestError
            If EC2 does not acknowledge the request
        """
        logger.debug("Requesting stop of instance %s", instance_id)

        with handle_aws_errors():
            response = self.ec2_client.stop_instances(InstanceIds=[instance_id])

        stopping = response.get("StoppingInstances")
        if not stopping:
            raise InstanceRequestError("Unable to stop instance")

        return stopping
