"""Disk gateway interface for block storage provider operations."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from csi_cbs.core.domain import Disk


class GatewayError(Exception):
    """Provider or transport failure from a gateway call.

    Attributes:
        code: Provider error code (e.g. "InvalidDisk.NotFound"), or
              "timeout"/"transport" for client-side failures
        request_id: Provider request ID, if the provider answered
    """

    def __init__(self, message: str, code: str = "", request_id: str = "") -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}" if code else message)


class CreateDiskSpec(BaseModel):
    """Normalized disk creation intent."""

    model_config = ConfigDict(frozen=True)

    client_token: str
    disk_type: str
    charge_type: str
    size_gb: int
    zone: str
    prepaid_period: int | None = None
    renew_flag: str | None = None
    encrypt: bool = False


class DiskGateway(ABC):
    """Interface for block storage disk operations.

    Implementations:
    - CbsDiskGateway: Tencent Cloud CBS

    Gateways own no state. Every method raises GatewayError on provider
    or transport failure.
    """

    @abstractmethod
    async def create(self, spec: CreateDiskSpec) -> list[str]:
        """Create a disk.

        Args:
            spec: Disk creation parameters

        Returns:
            Provider-assigned disk IDs (empty if the provider assigned none)

        Idempotent: The same client_token yields the same disk.
        """
        ...

    @abstractmethod
    async def describe(self, disk_id: str) -> Disk | None:
        """Get current disk state.

        Returns:
            Disk snapshot, or None if the disk does not exist
        """
        ...

    @abstractmethod
    async def attach(self, disk_id: str, instance_id: str) -> None:
        """Request attachment of a disk to an instance.

        Returns once the provider accepted the request; the disk becomes
        ATTACHED asynchronously.
        """
        ...

    @abstractmethod
    async def detach(self, disk_id: str) -> None:
        """Request detachment of a disk from its instance."""
        ...

    @abstractmethod
    async def terminate(self, disk_id: str) -> None:
        """Request termination of a disk."""
        ...
