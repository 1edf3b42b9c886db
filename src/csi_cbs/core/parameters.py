"""CreateVolume parameter validation.

Pure function: validates a CreateVolume request and returns fully
defaulted disk parameters. No provider call is issued before this passes.

Rules (first failure wins):
1. Name must be non-empty
2. Capabilities must be non-empty, mount access, SINGLE_NODE_WRITER only
3. diskType in DISK_TYPES (default CLOUD_BASIC)
4. diskChargeType in CHARGE_TYPES (default POSTPAID_BY_HOUR)
5. PREPAID only: period in PREPAID_PERIODS (default 1),
   renew flag in RENEW_FLAGS (default NOTIFY_AND_MANUAL_RENEW)
6. encrypt, if set, must be ENCRYPT
7. Capacity must round down to at least 1 GiB
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from csi_cbs.core.domain import bytes_to_gb
from csi_cbs.core.errors import InvalidArgumentError
from csi_cbs.core.models import AccessMode, AccessType, CapacityRange, VolumeCapability


class ParameterKey(StrEnum):
    """StorageClass parameter names."""

    DISK_TYPE = "diskType"
    CHARGE_TYPE = "diskChargeType"
    PREPAID_PERIOD = "diskChargeTypePrepaidPeriod"
    RENEW_FLAG = "diskChargePrepaidRenewFlag"
    ENCRYPT = "encrypt"


class DiskType(StrEnum):
    CLOUD_BASIC = "CLOUD_BASIC"
    CLOUD_PREMIUM = "CLOUD_PREMIUM"
    CLOUD_SSD = "CLOUD_SSD"


class ChargeType(StrEnum):
    PREPAID = "PREPAID"
    POSTPAID_BY_HOUR = "POSTPAID_BY_HOUR"


class RenewFlag(StrEnum):
    NOTIFY_AND_AUTO_RENEW = "NOTIFY_AND_AUTO_RENEW"
    NOTIFY_AND_MANUAL_RENEW = "NOTIFY_AND_MANUAL_RENEW"
    DISABLE_NOTIFY_AND_MANUAL_RENEW = "DISABLE_NOTIFY_AND_MANUAL_RENEW"


ENCRYPT_ENABLE = "ENCRYPT"


@dataclass(frozen=True)
class ParameterTable:
    """Valid values and defaults for StorageClass parameters."""

    disk_types: frozenset[str]
    charge_types: frozenset[str]
    prepaid_periods: frozenset[int]  # months
    renew_flags: frozenset[str]
    default_disk_type: str
    default_charge_type: str
    default_prepaid_period: int
    default_renew_flag: str
    encrypt_token: str


DEFAULT_PARAMETER_TABLE = ParameterTable(
    disk_types=frozenset(DiskType),
    charge_types=frozenset(ChargeType),
    prepaid_periods=frozenset({*range(1, 13), 24, 36}),
    renew_flags=frozenset(RenewFlag),
    default_disk_type=DiskType.CLOUD_BASIC,
    default_charge_type=ChargeType.POSTPAID_BY_HOUR,
    default_prepaid_period=1,
    default_renew_flag=RenewFlag.NOTIFY_AND_MANUAL_RENEW,
    encrypt_token=ENCRYPT_ENABLE,
)


class DiskParameters(BaseModel):
    """Validated, fully defaulted disk creation parameters."""

    model_config = ConfigDict(frozen=True)

    disk_type: str
    charge_type: str
    prepaid_period: int | None = None
    renew_flag: str | None = None
    encrypt: bool = False
    size_gb: int

    @property
    def is_prepaid(self) -> bool:
        return self.charge_type == ChargeType.PREPAID


def validate_capabilities(capabilities: Sequence[VolumeCapability]) -> None:
    """Reject anything but single-node-writer filesystem volumes."""
    if not capabilities:
        raise InvalidArgumentError("volume has no capabilities")

    for cap in capabilities:
        if cap.access_type == AccessType.BLOCK:
            raise InvalidArgumentError("block volume is not supported")
        if cap.access_mode != AccessMode.SINGLE_NODE_WRITER:
            raise InvalidArgumentError(
                f"access mode {cap.access_mode} is not supported, "
                "only SINGLE_NODE_WRITER"
            )


def _parse_prepaid_period(raw: str | None, table: ParameterTable) -> int:
    if raw is None:
        return table.default_prepaid_period
    try:
        period = int(raw)
    except ValueError:
        raise InvalidArgumentError(f"prepaid period {raw!r} is not valid") from None
    if period not in table.prepaid_periods:
        raise InvalidArgumentError(
            f"prepaid period {period} is not one of {sorted(table.prepaid_periods)}"
        )
    return period


def _validate_capacity(capacity_range: CapacityRange | None) -> int:
    if capacity_range is None:
        raise InvalidArgumentError("capacity range is required")

    required = capacity_range.required_bytes
    limit = capacity_range.limit_bytes
    if limit and limit < required:
        raise InvalidArgumentError(
            f"limit bytes {limit} is less than required bytes {required}"
        )

    size_gb = bytes_to_gb(required)
    if size_gb < 1:
        raise InvalidArgumentError(
            f"required bytes {required} is less than 1 GiB"
        )
    return size_gb


def validate_create_request(
    name: str,
    capabilities: Sequence[VolumeCapability],
    parameters: Mapping[str, str],
    capacity_range: CapacityRange | None,
    table: ParameterTable = DEFAULT_PARAMETER_TABLE,
) -> DiskParameters:
    """Validate CreateVolume input and apply defaults.

    Args:
        name: CSI volume name (idempotency token)
        capabilities: Requested volume capabilities
        parameters: StorageClass parameters
        capacity_range: Requested capacity
        table: Valid values and defaults

    Returns:
        DiskParameters ready to be sent to CBS

    Raises:
        InvalidArgumentError: On the first rule that fails
    """
    if not name:
        raise InvalidArgumentError("volume name is empty")

    validate_capabilities(capabilities)

    disk_type = parameters.get(ParameterKey.DISK_TYPE, table.default_disk_type)
    if disk_type not in table.disk_types:
        raise InvalidArgumentError(f"cbs type {disk_type!r} not supported")

    charge_type = parameters.get(ParameterKey.CHARGE_TYPE, table.default_charge_type)
    if charge_type not in table.charge_types:
        raise InvalidArgumentError(f"charge type {charge_type!r} not supported")

    prepaid_period: int | None = None
    renew_flag: str | None = None
    if charge_type == ChargeType.PREPAID:
        prepaid_period = _parse_prepaid_period(
            parameters.get(ParameterKey.PREPAID_PERIOD), table
        )
        renew_flag = parameters.get(ParameterKey.RENEW_FLAG, table.default_renew_flag)
        if renew_flag not in table.renew_flags:
            raise InvalidArgumentError(f"invalid renew flag {renew_flag!r}")

    encrypt = parameters.get(ParameterKey.ENCRYPT, "")
    if encrypt and encrypt != table.encrypt_token:
        raise InvalidArgumentError(f"volume encrypt {encrypt!r} not valid")

    size_gb = _validate_capacity(capacity_range)

    return DiskParameters(
        disk_type=disk_type,
        charge_type=charge_type,
        prepaid_period=prepaid_period,
        renew_flag=renew_flag,
        encrypt=bool(encrypt),
        size_gb=size_gb,
    )
