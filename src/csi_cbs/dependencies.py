"""Controller wiring for the embedding process."""

import logging

from csi_cbs.adapters import CbsDiskGateway
from csi_cbs.config import Settings, get_settings
from csi_cbs.controller import ControllerService
from csi_cbs.core.lock import KeyedLock, NullLock
from csi_cbs.logging_schema import LogEvent

logger = logging.getLogger(__name__)

# Singleton controller instance
_controller: ControllerService | None = None


def build_controller(settings: Settings) -> ControllerService:
    """Create a ControllerService talking to CBS with the given settings."""
    gateway = CbsDiskGateway(settings.cbs, settings.credentials)
    locks = KeyedLock() if settings.controller.serialize_operations else NullLock()
    return ControllerService(
        gateway=gateway,
        zone=settings.cbs.zone,
        poller=settings.poller,
        locks=locks,
    )


def init_controller(settings: Settings | None = None) -> ControllerService:
    """Initialize controller singleton.

    Must be called during process startup, before serving requests.
    """
    global _controller
    settings = settings or get_settings()
    if not settings.credentials.secret_id or not settings.credentials.secret_key:
        raise RuntimeError(
            "CBS credentials not configured. "
            "Set TENCENTCLOUD_CBS_API_SECRET_ID and TENCENTCLOUD_CBS_API_SECRET_KEY."
        )
    _controller = build_controller(settings)
    logger.info(
        "Controller ready",
        extra={
            "event": LogEvent.CONTROLLER_READY,
            "region": settings.cbs.region,
            "zone": settings.cbs.zone,
            "serialize_operations": settings.controller.serialize_operations,
        },
    )
    return _controller


def get_controller() -> ControllerService:
    """Get controller singleton.

    Raises:
        RuntimeError: If called before init_controller().
    """
    if _controller is None:
        raise RuntimeError("Controller not initialized. Call init_controller() first.")
    return _controller


def reset_controller() -> None:
    """Reset controller singleton (for testing)."""
    global _controller
    _controller = None
