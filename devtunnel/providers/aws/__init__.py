"""AWS provider implementation."""

from devtunnel.providers.aws.compute import EC2Manager, InstanceDescriptor

__all__ = ["EC2Manager", "InstanceDescriptor"]
