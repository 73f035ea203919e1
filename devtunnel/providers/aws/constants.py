"""AWS-specific constants for EC2 operations."""

ACTIVE_INSTANCE_STATES = [
    "pending",
    "running",
    "stopping",
    "stopped",
]
"""EC2 instance states considered active (not terminated).

Instances in these states can still be started or stopped. Terminated and
shutting-down instances are excluded from name lookups so a replaced server
with the same Name tag is not picked up by mistake.
"""

NAME_TAG_KEY = "Name"
"""Tag key used to locate the development server."""
