"""ControllerService - CSI volume lifecycle orchestration.

Each lifecycle call is a small state machine over the disk as reported
by CBS:

    REQUESTED -> PROVISIONING -> {UNATTACHED, ATTACHED} <-> ... -> TERMINATED

- CreateVolume: validate -> CreateDisks(ClientToken=name) -> poll until ready
- DeleteVolume: describe -> (absent: done) -> TerminateDisks, no polling
- ControllerPublishVolume: describe -> (attached here: done) -> AttachDisks -> poll
- ControllerUnpublishVolume: describe -> (unattached: done) -> DetachDisks -> poll

CBS is the only source of truth. Create relies on the provider-side
ClientToken for idempotency; the keyed lock only serializes calls made
through this process.

Configuration via PollerConfig (CBS_POLL_ env prefix).
"""

import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from csi_cbs.config import PollerConfig
from csi_cbs.controller.capabilities import get_capabilities
from csi_cbs.core.domain import READY_STATES, Disk, VolumePhase
from csi_cbs.core.errors import (
    CsiError,
    DeadlineExceededError,
    ErrorCode,
    FailedPreconditionError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UnimplementedError,
)
from csi_cbs.core.interfaces import CreateDiskSpec, DiskGateway, GatewayError
from csi_cbs.core.lock import KeyedLock, NullLock
from csi_cbs.core.models import (
    ControllerGetCapabilitiesResponse,
    ControllerPublishVolumeRequest,
    ControllerPublishVolumeResponse,
    ControllerUnpublishVolumeRequest,
    ControllerUnpublishVolumeResponse,
    CreateVolumeRequest,
    CreateVolumeResponse,
    DeleteVolumeRequest,
    DeleteVolumeResponse,
    Volume,
)
from csi_cbs.core.parameters import (
    DEFAULT_PARAMETER_TABLE,
    DiskParameters,
    ParameterTable,
    validate_create_request,
)
from csi_cbs.core.poller import Clock, PollTimeoutError, SystemClock, poll_until
from csi_cbs.logging import clear_request_context, set_request_id
from csi_cbs.logging_schema import Component, ErrorClass, LogEvent
from csi_cbs.metrics.collector import CSI_OPERATION_DURATION, CSI_OPERATION_TOTAL

logger = logging.getLogger(__name__)

_ERROR_CLASSES = {
    ErrorCode.INVALID_ARGUMENT: ErrorClass.PERMANENT,
    ErrorCode.NOT_FOUND: ErrorClass.PERMANENT,
    ErrorCode.FAILED_PRECONDITION: ErrorClass.PERMANENT,
    ErrorCode.DEADLINE_EXCEEDED: ErrorClass.TIMEOUT,
}


class ControllerService:
    """CSI ControllerService backed by a DiskGateway.

    Args:
        gateway: Provider gateway (CbsDiskGateway in production)
        zone: Availability zone new disks are placed in
        poller: Poll interval and deadline (default: from environment)
        clock: Time source for poll loops (default: SystemClock)
        locks: Per-volume lock registry (NullLock disables serialization)
        parameter_table: Valid StorageClass parameter values and defaults
    """

    def __init__(
        self,
        gateway: DiskGateway,
        zone: str,
        poller: PollerConfig | None = None,
        clock: Clock | None = None,
        locks: KeyedLock | NullLock | None = None,
        parameter_table: ParameterTable = DEFAULT_PARAMETER_TABLE,
    ) -> None:
        self._gateway = gateway
        self._zone = zone
        self._poller = poller or PollerConfig()
        self._clock = clock or SystemClock()
        self._locks = locks if locks is not None else KeyedLock()
        self._parameter_table = parameter_table

    # =========================================================================
    # Supported RPCs
    # =========================================================================

    async def create_volume(self, request: CreateVolumeRequest) -> CreateVolumeResponse:
        async with self._track("create_volume", volume_name=request.name):
            params = validate_create_request(
                request.name,
                request.volume_capabilities,
                request.parameters,
                request.capacity_range,
                self._parameter_table,
            )
            async with self._locks.hold(f"name:{request.name}"):
                return await self._create(request.name, params)

    async def delete_volume(self, request: DeleteVolumeRequest) -> DeleteVolumeResponse:
        async with self._track("delete_volume", volume_id=request.volume_id):
            if not request.volume_id:
                raise InvalidArgumentError("volume id is empty")
            async with self._locks.hold(f"id:{request.volume_id}"):
                await self._delete(request.volume_id)
            return DeleteVolumeResponse()

    async def controller_publish_volume(
        self, request: ControllerPublishVolumeRequest
    ) -> ControllerPublishVolumeResponse:
        async with self._track(
            "controller_publish_volume",
            volume_id=request.volume_id,
            node_id=request.node_id,
        ):
            if not request.volume_id:
                raise InvalidArgumentError("volume id is empty")
            if not request.node_id:
                raise InvalidArgumentError("node id is empty")
            if request.volume_capability is None:
                raise InvalidArgumentError("volume has no capabilities")
            async with self._locks.hold(f"id:{request.volume_id}"):
                await self._attach(request.volume_id, request.node_id)
            return ControllerPublishVolumeResponse()

    async def controller_unpublish_volume(
        self, request: ControllerUnpublishVolumeRequest
    ) -> ControllerUnpublishVolumeResponse:
        async with self._track(
            "controller_unpublish_volume",
            volume_id=request.volume_id,
            node_id=request.node_id,
        ):
            if not request.volume_id:
                raise InvalidArgumentError("volume id is empty")
            if not request.node_id:
                raise InvalidArgumentError("node id is empty")
            async with self._locks.hold(f"id:{request.volume_id}"):
                await self._detach(request.volume_id, request.node_id)
            return ControllerUnpublishVolumeResponse()

    async def controller_get_capabilities(self, request: Any = None) -> ControllerGetCapabilitiesResponse:
        return get_capabilities()

    # =========================================================================
    # Unsupported RPCs
    # =========================================================================

    async def validate_volume_capabilities(self, request: Any = None) -> None:
        self._unimplemented("validate_volume_capabilities")

    async def list_volumes(self, request: Any = None) -> None:
        self._unimplemented("list_volumes")

    async def get_capacity(self, request: Any = None) -> None:
        self._unimplemented("get_capacity")

    async def create_snapshot(self, request: Any = None) -> None:
        self._unimplemented("create_snapshot")

    async def delete_snapshot(self, request: Any = None) -> None:
        self._unimplemented("delete_snapshot")

    async def list_snapshots(self, request: Any = None) -> None:
        self._unimplemented("list_snapshots")

    async def controller_expand_volume(self, request: Any = None) -> None:
        self._unimplemented("controller_expand_volume")

    # =========================================================================
    # Lifecycle steps
    # =========================================================================

    async def _create(self, name: str, params: DiskParameters) -> CreateVolumeResponse:
        spec = CreateDiskSpec(
            client_token=name,
            disk_type=params.disk_type,
            charge_type=params.charge_type,
            size_gb=params.size_gb,
            zone=self._zone,
            prepaid_period=params.prepaid_period,
            renew_flag=params.renew_flag,
            encrypt=params.encrypt,
        )
        self._log_phase(VolumePhase.PROVISIONING, volume_name=name, size_gb=params.size_gb)

        try:
            disk_ids = await self._gateway.create(spec)
        except GatewayError as exc:
            raise InternalError(str(exc)) from exc

        if not disk_ids:
            raise InternalError(
                "create disk failed, no disk id found in create disk response"
            )
        disk_id = disk_ids[0]

        try:
            disk = await self._wait_for(
                disk_id,
                lambda d: d.state in READY_STATES,
                operation="create_volume",
            )
        except PollTimeoutError as exc:
            raise DeadlineExceededError(
                f"cbs disk {disk_id} is not ready before deadline exceeded"
            ) from exc

        logger.info(
            "Volume created",
            extra={
                "event": LogEvent.VOLUME_CREATED,
                "volume_name": name,
                "volume_id": disk.disk_id,
                "size_gb": disk.size_gb,
                "state": disk.state,
            },
        )
        return CreateVolumeResponse(
            volume=Volume(volume_id=disk.disk_id, capacity_bytes=disk.capacity_bytes)
        )

    async def _delete(self, disk_id: str) -> None:
        disk = await self._describe(disk_id)
        if disk is None:
            logger.info(
                "Volume already deleted",
                extra={
                    "event": LogEvent.VOLUME_DELETED,
                    "volume_id": disk_id,
                    "status": "already_deleted",
                },
            )
            return

        try:
            await self._gateway.terminate(disk_id)
        except GatewayError as exc:
            raise InternalError(str(exc)) from exc

        self._log_phase(VolumePhase.TERMINATED, volume_id=disk_id)
        logger.info(
            "Volume deleted",
            extra={"event": LogEvent.VOLUME_DELETED, "volume_id": disk_id},
        )

    async def _attach(self, disk_id: str, node_id: str) -> None:
        disk = await self._describe(disk_id)
        if disk is None:
            raise NotFoundError(f"disk {disk_id} not found")

        if disk.attached_to(node_id):
            logger.info(
                "Volume already attached",
                extra={
                    "event": LogEvent.VOLUME_ATTACHED,
                    "volume_id": disk_id,
                    "node_id": node_id,
                    "status": "already_attached",
                },
            )
            return
        if disk.is_attached:
            raise FailedPreconditionError(
                f"disk {disk_id} is attached to another instance {disk.instance_id} already"
            )

        try:
            await self._gateway.attach(disk_id, node_id)
        except GatewayError as exc:
            raise InternalError(str(exc)) from exc

        try:
            await self._wait_for(
                disk_id,
                lambda d: d.is_attached,
                operation="controller_publish_volume",
            )
        except PollTimeoutError as exc:
            # INTERNAL, not DEADLINE_EXCEEDED: the attach was accepted
            raise InternalError(
                f"cbs disk {disk_id} is not attached before deadline exceeded"
            ) from exc

        self._log_phase(VolumePhase.ATTACHED, volume_id=disk_id, node_id=node_id)
        logger.info(
            "Volume attached",
            extra={"event": LogEvent.VOLUME_ATTACHED, "volume_id": disk_id, "node_id": node_id},
        )

    async def _detach(self, disk_id: str, node_id: str) -> None:
        disk = await self._describe(disk_id)
        if disk is None:
            raise NotFoundError(f"disk {disk_id} not found")

        if disk.is_unattached:
            logger.info(
                "Volume already detached",
                extra={
                    "event": LogEvent.VOLUME_DETACHED,
                    "volume_id": disk_id,
                    "node_id": node_id,
                    "status": "already_detached",
                },
            )
            return

        try:
            await self._gateway.detach(disk_id)
        except GatewayError as exc:
            raise InternalError(str(exc)) from exc

        try:
            await self._wait_for(
                disk_id,
                lambda d: d.is_unattached,
                operation="controller_unpublish_volume",
            )
        except PollTimeoutError as exc:
            raise InternalError(
                f"cbs disk {disk_id} is not unattached before deadline exceeded"
            ) from exc

        self._log_phase(VolumePhase.UNATTACHED, volume_id=disk_id, node_id=node_id)
        logger.info(
            "Volume detached",
            extra={"event": LogEvent.VOLUME_DETACHED, "volume_id": disk_id, "node_id": node_id},
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _describe(self, disk_id: str) -> Disk | None:
        try:
            return await self._gateway.describe(disk_id)
        except GatewayError as exc:
            raise InternalError(str(exc)) from exc

    async def _wait_for(
        self, disk_id: str, predicate: Callable[[Disk], bool], operation: str
    ) -> Disk:
        return await poll_until(
            lambda: self._gateway.describe(disk_id),
            predicate,
            interval=self._poller.interval,
            timeout=self._poller.timeout,
            clock=self._clock,
            operation=operation,
        )

    def _unimplemented(self, operation: str) -> None:
        logger.debug(
            "Unsupported operation requested",
            extra={"event": LogEvent.OPERATION_UNSUPPORTED, "operation": operation},
        )
        raise UnimplementedError(f"{operation} is not supported")

    def _log_phase(self, phase: VolumePhase, **fields: Any) -> None:
        logger.info(
            "Volume phase changed",
            extra={"event": LogEvent.STATE_CHANGED, "phase": phase.value, **fields},
        )

    @asynccontextmanager
    async def _track(self, operation: str, **fields: Any) -> AsyncIterator[None]:
        """Scope a lifecycle call: request ID, metrics, failure logging.

        Unexpected exceptions are converted to InternalError so that no
        failure escapes the call untyped.
        """
        set_request_id()
        start = time.monotonic()
        result = "success"
        try:
            yield
        except CsiError as exc:
            result = exc.code.value
            rejected = exc.code == ErrorCode.INVALID_ARGUMENT
            error_class = _ERROR_CLASSES.get(exc.code, ErrorClass.PROVIDER)
            logger.warning(
                "Operation failed: %s",
                exc.message,
                extra={
                    "event": LogEvent.REQUEST_REJECTED if rejected else LogEvent.OPERATION_FAILED,
                    "component": Component.CONTROLLER,
                    "operation": operation,
                    "error_code": exc.code.value,
                    "error_class": error_class,
                    **fields,
                },
            )
            raise
        except Exception as exc:
            result = ErrorCode.INTERNAL.value
            logger.exception(
                "Operation failed unexpectedly",
                extra={
                    "event": LogEvent.OPERATION_FAILED,
                    "component": Component.CONTROLLER,
                    "operation": operation,
                    "error_code": result,
                    **fields,
                },
            )
            raise InternalError(str(exc)) from exc
        finally:
            CSI_OPERATION_TOTAL.labels(operation=operation, result=result).inc()
            CSI_OPERATION_DURATION.labels(operation=operation).observe(time.monotonic() - start)
            clear_request_context()
