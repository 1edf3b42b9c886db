"""Disk domain types.

Disk is a point-in-time snapshot of a CBS disk as reported by
DescribeDisks. The provider is the only source of truth; nothing here
is cached between calls.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

# CBS sizes are whole GiB
GB = 1 << 30


class DiskState(StrEnum):
    """CBS DiskState values."""

    UNATTACHED = "UNATTACHED"
    ATTACHING = "ATTACHING"
    ATTACHED = "ATTACHED"
    DETACHING = "DETACHING"
    EXPANDING = "EXPANDING"
    ROLLBACKING = "ROLLBACKING"
    TORECYCLE = "TORECYCLE"
    DUMPING = "DUMPING"


# States at which a freshly created disk is usable
READY_STATES = frozenset({DiskState.UNATTACHED, DiskState.ATTACHED})


class VolumePhase(StrEnum):
    """Lifecycle phase of a volume as seen by the controller.

    REQUESTED and TERMINATED only exist within a single call.
    """

    REQUESTED = "REQUESTED"
    PROVISIONING = "PROVISIONING"
    UNATTACHED = "UNATTACHED"
    ATTACHED = "ATTACHED"
    TERMINATED = "TERMINATED"


class Disk(BaseModel):
    """Snapshot of a CBS disk."""

    model_config = ConfigDict(frozen=True)

    disk_id: str
    size_gb: int
    state: str | None = None
    instance_id: str | None = None

    @property
    def capacity_bytes(self) -> int:
        return self.size_gb * GB

    @property
    def is_attached(self) -> bool:
        return self.state == DiskState.ATTACHED

    @property
    def is_unattached(self) -> bool:
        return self.state == DiskState.UNATTACHED

    def attached_to(self, instance_id: str) -> bool:
        """Check if disk is attached to the given instance."""
        return self.is_attached and self.instance_id == instance_id


def bytes_to_gb(size_bytes: int) -> int:
    """Convert bytes to whole GiB, rounding down."""
    return size_bytes // GB
