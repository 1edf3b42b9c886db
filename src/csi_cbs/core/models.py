"""CSI controller request/response models.

These mirror the CSI ControllerService messages the driver handles. A
transport layer converts wire messages to and from these models.
"""

from enum import StrEnum

from pydantic import BaseModel, Field


class AccessMode(StrEnum):
    """CSI VolumeCapability.AccessMode.Mode."""

    UNKNOWN = "UNKNOWN"
    SINGLE_NODE_WRITER = "SINGLE_NODE_WRITER"
    SINGLE_NODE_READER_ONLY = "SINGLE_NODE_READER_ONLY"
    MULTI_NODE_READER_ONLY = "MULTI_NODE_READER_ONLY"
    MULTI_NODE_SINGLE_WRITER = "MULTI_NODE_SINGLE_WRITER"
    MULTI_NODE_MULTI_WRITER = "MULTI_NODE_MULTI_WRITER"


class AccessType(StrEnum):
    """CSI VolumeCapability access_type oneof."""

    MOUNT = "mount"
    BLOCK = "block"


class ControllerCapability(StrEnum):
    """CSI ControllerServiceCapability.RPC.Type."""

    CREATE_DELETE_VOLUME = "CREATE_DELETE_VOLUME"
    PUBLISH_UNPUBLISH_VOLUME = "PUBLISH_UNPUBLISH_VOLUME"
    LIST_VOLUMES = "LIST_VOLUMES"
    GET_CAPACITY = "GET_CAPACITY"
    CREATE_DELETE_SNAPSHOT = "CREATE_DELETE_SNAPSHOT"
    LIST_SNAPSHOTS = "LIST_SNAPSHOTS"
    EXPAND_VOLUME = "EXPAND_VOLUME"


class VolumeCapability(BaseModel):
    access_mode: AccessMode = AccessMode.SINGLE_NODE_WRITER
    access_type: AccessType = AccessType.MOUNT
    fs_type: str = ""
    mount_flags: list[str] = Field(default_factory=list)


class CapacityRange(BaseModel):
    required_bytes: int = 0
    limit_bytes: int = 0


class Volume(BaseModel):
    volume_id: str
    capacity_bytes: int
    attributes: dict[str, str] = Field(default_factory=dict)


# =============================================================================
# CreateVolume / DeleteVolume
# =============================================================================


class CreateVolumeRequest(BaseModel):
    name: str = ""
    capacity_range: CapacityRange | None = None
    volume_capabilities: list[VolumeCapability] = Field(default_factory=list)
    parameters: dict[str, str] = Field(default_factory=dict)


class CreateVolumeResponse(BaseModel):
    volume: Volume


class DeleteVolumeRequest(BaseModel):
    volume_id: str = ""


class DeleteVolumeResponse(BaseModel):
    pass


# =============================================================================
# ControllerPublishVolume / ControllerUnpublishVolume
# =============================================================================


class ControllerPublishVolumeRequest(BaseModel):
    volume_id: str = ""
    node_id: str = ""
    volume_capability: VolumeCapability | None = None
    readonly: bool = False


class ControllerPublishVolumeResponse(BaseModel):
    publish_info: dict[str, str] = Field(default_factory=dict)


class ControllerUnpublishVolumeRequest(BaseModel):
    volume_id: str = ""
    node_id: str = ""


class ControllerUnpublishVolumeResponse(BaseModel):
    pass


# =============================================================================
# ControllerGetCapabilities
# =============================================================================


class ControllerGetCapabilitiesResponse(BaseModel):
    capabilities: list[ControllerCapability]
