"""Controller configuration using pydantic-settings.

Configuration hierarchy:
- CredentialConfig: Tencent Cloud API credentials
- CbsConfig: Target region/zone and API client settings
- PollerConfig: State polling interval and deadline
- ControllerConfig: Lifecycle orchestration behavior
- LoggingConfig: Logging behavior
- Settings: Main config aggregating all sub-configs

Example: CBS_ZONE=ap-guangzhou-3 CBS_POLL_TIMEOUT=180
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CredentialConfig(BaseSettings):
    """Tencent Cloud API credentials.

    Env names match the secret keys mounted by the deployment manifest.
    """

    model_config = SettingsConfigDict(env_prefix="TENCENTCLOUD_CBS_API_")

    # Empty defaults force explicit configuration
    secret_id: str = Field(default="", description="API SecretId (required)")
    secret_key: str = Field(default="", description="API SecretKey (required)")


class CbsConfig(BaseSettings):
    """CBS API client configuration."""

    model_config = SettingsConfigDict(env_prefix="CBS_")

    region: str = Field(default="ap-guangzhou", description="Target region")
    zone: str = Field(default="ap-guangzhou-3", description="Placement availability zone")
    endpoint: str = Field(
        default="",
        description="Override API endpoint (empty = SDK default for region)",
    )
    api_timeout: float = Field(default=30.0, description="Per-call API timeout (seconds)")


class PollerConfig(BaseSettings):
    """Disk state polling configuration.

    The deadline is measured from the start of each poll loop, not from
    the start of the lifecycle call.
    """

    model_config = SettingsConfigDict(env_prefix="CBS_POLL_")

    interval: float = Field(default=5.0, gt=0, description="Seconds between describe calls")
    timeout: float = Field(default=120.0, gt=0, description="Seconds before giving up")


class ControllerConfig(BaseSettings):
    """Lifecycle orchestration configuration."""

    model_config = SettingsConfigDict(env_prefix="CBS_CONTROLLER_")

    # Per-volume serialization of lifecycle calls in this process
    serialize_operations: bool = Field(default=True)


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Supports both text and JSON formats:
    - text: Human-readable for local development
    - json: Structured logging for production (log aggregation)
    """

    model_config = SettingsConfigDict(env_prefix="CBS_LOGGING_")

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="text", description="Log format (text, json)")
    service_name: str = Field(default="csi-cbs-controller", description="Service identifier in logs")
    rate_limit_seconds: float = Field(
        default=5.0,
        description="Minimum seconds between identical non-error messages",
    )


class Settings(BaseSettings):
    """Main configuration aggregating all sub-configs.

    Sub-configs use their own prefixes (CBS_, CBS_POLL_, etc.)
    """

    model_config = SettingsConfigDict(
        env_prefix="CBS_CSI_",
        env_nested_delimiter="__",
    )

    credentials: CredentialConfig = Field(default_factory=CredentialConfig)
    cbs: CbsConfig = Field(default_factory=CbsConfig)
    poller: PollerConfig = Field(default_factory=PollerConfig)
    controller: ControllerConfig = Field(default_factory=ControllerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
