"""Tencent Cloud CBS disk gateway.

Translates gateway calls into CBS API 2017-03-12 requests. The SDK
client is blocking, so every call runs in a worker thread under the
configured API timeout.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from tencentcloud.cbs.v20170312 import cbs_client, models
from tencentcloud.common import credential
from tencentcloud.common.exception.tencent_cloud_sdk_exception import (
    TencentCloudSDKException,
)
from tencentcloud.common.profile.client_profile import ClientProfile
from tencentcloud.common.profile.http_profile import HttpProfile

from csi_cbs.config import CbsConfig, CredentialConfig
from csi_cbs.core.domain import Disk
from csi_cbs.core.interfaces import CreateDiskSpec, DiskGateway, GatewayError
from csi_cbs.core.parameters import ENCRYPT_ENABLE
from csi_cbs.logging_schema import Component, LogEvent
from csi_cbs.metrics.collector import CBS_API_DURATION, CBS_API_ERRORS

logger = logging.getLogger(__name__)

# Error codes CBS returns for an unknown disk ID
NOT_FOUND_CODES = frozenset({
    "InvalidDisk.NotFound",
    "ResourceNotFound.NotFound",
})


def create_cbs_client(config: CbsConfig, credentials: CredentialConfig) -> cbs_client.CbsClient:
    """Create a CBS API client for the configured region."""
    http_profile = HttpProfile(reqTimeout=int(config.api_timeout))
    if config.endpoint:
        http_profile.endpoint = config.endpoint
    return cbs_client.CbsClient(
        credential.Credential(credentials.secret_id, credentials.secret_key),
        config.region,
        ClientProfile(httpProfile=http_profile),
    )


def _to_disk(data: Any) -> Disk:
    return Disk(
        disk_id=data.DiskId,
        size_gb=data.DiskSize or 0,
        state=data.DiskState,
        instance_id=data.InstanceId or None,
    )


class CbsDiskGateway(DiskGateway):
    """CBS-backed disk gateway."""

    def __init__(
        self,
        config: CbsConfig,
        credentials: CredentialConfig | None = None,
        client: cbs_client.CbsClient | None = None,
    ) -> None:
        self._config = config
        self._client = client or create_cbs_client(config, credentials or CredentialConfig())

    async def _call(self, operation: str, method: Callable[[Any], Any], request: Any) -> Any:
        start = time.monotonic()
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(method, request),
                timeout=self._config.api_timeout,
            )
        except TencentCloudSDKException as exc:
            code = exc.get_code() or "unknown"
            CBS_API_ERRORS.labels(operation=operation, error_code=code).inc()
            raise GatewayError(
                exc.get_message() or str(exc),
                code=code,
                request_id=exc.get_request_id() or "",
            ) from exc
        except asyncio.TimeoutError as exc:
            CBS_API_ERRORS.labels(operation=operation, error_code="timeout").inc()
            raise GatewayError(
                f"CBS {operation} timed out after {self._config.api_timeout:.0f}s",
                code="timeout",
            ) from exc
        finally:
            CBS_API_DURATION.labels(operation=operation).observe(time.monotonic() - start)

    async def create(self, spec: CreateDiskSpec) -> list[str]:
        request = models.CreateDisksRequest()
        request.ClientToken = spec.client_token
        request.DiskType = spec.disk_type
        request.DiskChargeType = spec.charge_type
        request.DiskSize = spec.size_gb
        request.DiskCount = 1

        if spec.prepaid_period is not None:
            prepaid = models.DiskChargePrepaid()
            prepaid.Period = spec.prepaid_period
            prepaid.RenewFlag = spec.renew_flag
            request.DiskChargePrepaid = prepaid

        if spec.encrypt:
            request.Encrypt = ENCRYPT_ENABLE

        placement = models.Placement()
        placement.Zone = spec.zone
        request.Placement = placement

        response = await self._call("create", self._client.CreateDisks, request)
        disk_ids = list(response.DiskIdSet or [])
        if not disk_ids:
            logger.warning(
                "CreateDisks returned no disk ID",
                extra={
                    "event": LogEvent.CBS_API_ERROR,
                    "component": Component.GATEWAY,
                    "volume_name": spec.client_token,
                    "cbs_request_id": response.RequestId,
                },
            )
        return disk_ids

    async def describe(self, disk_id: str) -> Disk | None:
        request = models.DescribeDisksRequest()
        request.DiskIds = [disk_id]

        try:
            response = await self._call("describe", self._client.DescribeDisks, request)
        except GatewayError as exc:
            if exc.code in NOT_FOUND_CODES:
                return None
            raise

        for data in response.DiskSet or []:
            if data.DiskId == disk_id:
                return _to_disk(data)
        return None

    async def attach(self, disk_id: str, instance_id: str) -> None:
        request = models.AttachDisksRequest()
        request.DiskIds = [disk_id]
        request.InstanceId = instance_id
        await self._call("attach", self._client.AttachDisks, request)

    async def detach(self, disk_id: str) -> None:
        request = models.DetachDisksRequest()
        request.DiskIds = [disk_id]
        await self._call("detach", self._client.DetachDisks, request)

    async def terminate(self, disk_id: str) -> None:
        request = models.TerminateDisksRequest()
        request.DiskIds = [disk_id]
        await self._call("terminate", self._client.TerminateDisks, request)
