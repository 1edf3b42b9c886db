"""Fixtures for controller unit tests."""

import pytest
from fakes import FakeClock, InMemoryDiskGateway, make_create_request

from csi_cbs.config import PollerConfig
from csi_cbs.controller import ControllerService
from csi_cbs.core.lock import KeyedLock
from csi_cbs.core.models import AccessMode, AccessType, CreateVolumeRequest, VolumeCapability


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gateway() -> InMemoryDiskGateway:
    return InMemoryDiskGateway()


@pytest.fixture
def poller_config() -> PollerConfig:
    return PollerConfig(interval=5.0, timeout=120.0)


@pytest.fixture
def controller(
    gateway: InMemoryDiskGateway,
    clock: FakeClock,
    poller_config: PollerConfig,
) -> ControllerService:
    """ControllerService on the in-memory gateway with a fake clock."""
    return ControllerService(
        gateway=gateway,
        zone="ap-guangzhou-3",
        poller=poller_config,
        clock=clock,
        locks=KeyedLock(),
    )


@pytest.fixture
def mount_capability() -> VolumeCapability:
    return VolumeCapability(
        access_mode=AccessMode.SINGLE_NODE_WRITER,
        access_type=AccessType.MOUNT,
        fs_type="ext4",
    )


@pytest.fixture
def create_request() -> CreateVolumeRequest:
    """Valid 10 GiB CreateVolume request with default parameters."""
    return make_create_request()
