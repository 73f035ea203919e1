"""Cloud provider boundary.

Only EC2 is supported; the exceptions defined here keep the rest of the
application independent of botocore.
"""

from __future__ import annotations

from devtunnel.providers.aws import EC2Manager, InstanceDescriptor
from devtunnel.providers.exceptions import (
    ProviderAPIError,
    ProviderConnectionError,
    ProviderCredentialsError,
    ProviderError,
)

__all__ = [
    "EC2Manager",
    "InstanceDescriptor",
    "ProviderError",
    "ProviderCredentialsError",
    "ProviderAPIError",
    "ProviderConnectionError",
]
