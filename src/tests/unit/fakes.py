"""Test doubles for the CBS controller."""

import asyncio

from csi_cbs.core.domain import Disk, DiskState
from csi_cbs.core.interfaces import CreateDiskSpec, DiskGateway, GatewayError
from csi_cbs.core.models import CapacityRange, CreateVolumeRequest, VolumeCapability

GB = 1 << 30


class FakeClock:
    """Clock that advances instantly on sleep."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.start = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # Let other tasks run, like a real timer would
        await asyncio.sleep(0)

    @property
    def elapsed(self) -> float:
        return self.now - self.start


class InMemoryDiskGateway(DiskGateway):
    """Stateful CBS stand-in.

    - create() dedups on client_token like CBS ClientToken
    - State changes settle after `settle_after` describe calls
    - `errors[method]` makes that method raise on every call
    - `describe_failures` makes the next N describe calls raise
    """

    def __init__(self, settle_after: int = 1) -> None:
        self.settle_after = settle_after
        self.disks: dict[str, Disk] = {}
        self.tokens: dict[str, str] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.errors: dict[str, Exception] = {}
        self.describe_failures = 0
        self._pending: dict[str, tuple[int, Disk]] = {}
        self._counter = 0

    def add_disk(
        self,
        disk_id: str,
        size_gb: int = 10,
        state: str = DiskState.UNATTACHED,
        instance_id: str | None = None,
    ) -> Disk:
        disk = Disk(disk_id=disk_id, size_gb=size_gb, state=state, instance_id=instance_id)
        self.disks[disk_id] = disk
        return disk

    def called(self, method: str) -> list[tuple]:
        return [args for name, args in self.calls if name == method]

    def _record(self, method: str, *args: object) -> None:
        self.calls.append((method, args))
        if method in self.errors:
            raise self.errors[method]

    def _schedule(self, disk: Disk) -> None:
        self._pending[disk.disk_id] = (self.settle_after, disk)

    async def create(self, spec: CreateDiskSpec) -> list[str]:
        self._record("create", spec)
        if spec.client_token in self.tokens:
            return [self.tokens[spec.client_token]]

        self._counter += 1
        disk_id = f"disk-{self._counter:08d}"
        self.tokens[spec.client_token] = disk_id
        self.disks[disk_id] = Disk(disk_id=disk_id, size_gb=spec.size_gb, state=None)
        self._schedule(
            Disk(disk_id=disk_id, size_gb=spec.size_gb, state=DiskState.UNATTACHED)
        )
        return [disk_id]

    async def describe(self, disk_id: str) -> Disk | None:
        self._record("describe", disk_id)
        if self.describe_failures > 0:
            self.describe_failures -= 1
            raise GatewayError("connection reset", code="transport")

        if disk_id in self._pending:
            remaining, final = self._pending[disk_id]
            if remaining <= 1:
                self.disks[disk_id] = final
                del self._pending[disk_id]
            else:
                self._pending[disk_id] = (remaining - 1, final)
        return self.disks.get(disk_id)

    async def attach(self, disk_id: str, instance_id: str) -> None:
        self._record("attach", disk_id, instance_id)
        disk = self._require(disk_id)
        self.disks[disk_id] = disk.model_copy(
            update={"state": DiskState.ATTACHING, "instance_id": instance_id}
        )
        self._schedule(
            disk.model_copy(update={"state": DiskState.ATTACHED, "instance_id": instance_id})
        )

    async def detach(self, disk_id: str) -> None:
        self._record("detach", disk_id)
        disk = self._require(disk_id)
        self.disks[disk_id] = disk.model_copy(update={"state": DiskState.DETACHING})
        self._schedule(
            disk.model_copy(update={"state": DiskState.UNATTACHED, "instance_id": None})
        )

    async def terminate(self, disk_id: str) -> None:
        self._record("terminate", disk_id)
        self._require(disk_id)
        del self.disks[disk_id]
        self._pending.pop(disk_id, None)

    def _require(self, disk_id: str) -> Disk:
        if disk_id not in self.disks:
            raise GatewayError(f"disk {disk_id} not found", code="InvalidDisk.NotFound")
        return self.disks[disk_id]

    def freeze(self) -> None:
        """Stop all pending state changes (disk never settles)."""
        self._pending.clear()


def make_create_request(
    name: str = "pvc-0001",
    required_bytes: int = 10 * GB,
    parameters: dict[str, str] | None = None,
    capabilities: list[VolumeCapability] | None = None,
) -> CreateVolumeRequest:
    return CreateVolumeRequest(
        name=name,
        capacity_range=CapacityRange(required_bytes=required_bytes),
        volume_capabilities=capabilities if capabilities is not None else [VolumeCapability()],
        parameters=parameters or {},
    )
