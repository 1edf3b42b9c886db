"""Static controller capability declaration."""

from csi_cbs.core.models import ControllerCapability, ControllerGetCapabilitiesResponse

SUPPORTED_CAPABILITIES: tuple[ControllerCapability, ...] = (
    ControllerCapability.CREATE_DELETE_VOLUME,
    ControllerCapability.PUBLISH_UNPUBLISH_VOLUME,
)


def get_capabilities() -> ControllerGetCapabilitiesResponse:
    return ControllerGetCapabilitiesResponse(capabilities=list(SUPPORTED_CAPABILITIES))
