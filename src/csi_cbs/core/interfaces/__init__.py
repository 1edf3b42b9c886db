"""Core interfaces for the controller."""

from csi_cbs.core.interfaces.gateway import CreateDiskSpec, DiskGateway, GatewayError

__all__ = [
    "CreateDiskSpec",
    "DiskGateway",
    "GatewayError",
]
