"""CSI ControllerService implementation."""

from csi_cbs.controller.capabilities import SUPPORTED_CAPABILITIES, get_capabilities
from csi_cbs.controller.service import ControllerService

__all__ = [
    "ControllerService",
    "SUPPORTED_CAPABILITIES",
    "get_capabilities",
]
