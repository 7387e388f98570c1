"""Application configuration using pydantic-settings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode

from provisioner.domain.models.polling import PollPolicy, ProvisioningStage
from provisioner.domain.models.resource import ResourceKind


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


# 1 IP address, host ping, email and ticket, automated notification,
# 0 GB bandwidth, reboot / remote console, vulnerability scanner, VPN users
DEFAULT_BASELINE_PRICES: tuple[int, ...] = (21, 55, 57, 58, 1800, 905, 418, 420)


class PollingSettings(BaseSettings):
    """Per-stage bounded wait configuration, in seconds."""

    order_discovery_timeout: float = Field(
        default=5 * 60 * 60, gt=0, alias="POLL_ORDER_DISCOVERY_TIMEOUT"
    )
    transactions_started_timeout: float = Field(
        default=60 * 60, gt=0, alias="POLL_TRANSACTIONS_STARTED_TIMEOUT"
    )
    transactions_ended_timeout: float = Field(
        default=10 * 60 * 60, gt=0, alias="POLL_TRANSACTIONS_ENDED_TIMEOUT"
    )
    login_details_timeout: float = Field(
        default=60 * 60, gt=0.5, alias="POLL_LOGIN_DETAILS_TIMEOUT"
    )
    base_period: float = Field(default=5.0, gt=0, alias="POLL_BASE_PERIOD")
    max_period: float = Field(default=10.0, gt=0, alias="POLL_MAX_PERIOD")

    model_config = {"env_prefix": "POLL_", "extra": "ignore", "populate_by_name": True}

    @model_validator(mode="after")
    def _check_periods(self) -> PollingSettings:
        if self.max_period < self.base_period:
            raise ValueError("max_period must not be lower than base_period")
        return self

    def policy_for(self, stage: ProvisioningStage) -> PollPolicy:
        timeouts = {
            ProvisioningStage.ORDER_DISCOVERY: self.order_discovery_timeout,
            ProvisioningStage.TRANSACTIONS_STARTED: self.transactions_started_timeout,
            ProvisioningStage.TRANSACTIONS_ENDED: self.transactions_ended_timeout,
            ProvisioningStage.LOGIN_DETAILS: self.login_details_timeout,
        }
        return PollPolicy(
            max_wait=timeouts[stage],
            base_period=self.base_period,
            cap_period=self.max_period,
        )

    def stage_policies(self) -> dict[ProvisioningStage, PollPolicy]:
        return {stage: self.policy_for(stage) for stage in ProvisioningStage}


class CatalogSettings(BaseSettings):
    """Product catalog configuration."""

    package_name: str = Field(default="Bare Metal Instance", alias="CATALOG_PACKAGE_NAME")
    port_speed: int = Field(default=10, alias="CATALOG_PORT_SPEED")
    prices: Annotated[list[int], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_BASELINE_PRICES), alias="CATALOG_PRICES"
    )
    ttl_seconds: float = Field(default=60.0, gt=0, alias="CATALOG_TTL_SECONDS")
    refresh_timeout: float = Field(default=120.0, gt=0, alias="CATALOG_REFRESH_TIMEOUT")
    refresh_base_period: float = Field(default=1.0, gt=0, alias="CATALOG_REFRESH_BASE_PERIOD")
    refresh_max_period: float = Field(default=10.0, gt=0, alias="CATALOG_REFRESH_MAX_PERIOD")

    model_config = {"env_prefix": "CATALOG_", "extra": "ignore", "populate_by_name": True}

    @field_validator("port_speed")
    @classmethod
    def _check_port_speed(cls, value: int) -> int:
        if value not in (10, 100, 1000):
            raise ValueError("port_speed must be one of 10, 100, 1000")
        return value

    @field_validator("prices", mode="before")
    @classmethod
    def _split_prices(cls, value: object) -> object:
        if isinstance(value, str):
            return [int(part) for part in value.split(",") if part.strip()]
        return value

    @property
    def refresh_policy(self) -> PollPolicy:
        return PollPolicy(
            max_wait=self.refresh_timeout,
            base_period=self.refresh_base_period,
            cap_period=max(self.refresh_max_period, self.refresh_base_period),
        )


class ObservabilitySettings(BaseSettings):
    """Observability configuration."""

    otlp_endpoint: str = Field(default="", alias="OTLP_ENDPOINT")
    console_traces: bool = Field(default=False, alias="CONSOLE_TRACES")
    service_name: str = Field(default="compute-provisioner", alias="SERVICE_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")
    metrics_port: int = Field(default=0, ge=0, alias="METRICS_PORT")
    tracing_enabled: bool = Field(default=False, alias="TRACING_ENABLED")

    model_config = {"env_prefix": "OBS_", "extra": "ignore", "populate_by_name": True}


class Settings(BaseSettings):
    """Main application settings."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    resource_kind: ResourceKind = Field(default=ResourceKind.BARE_METAL, alias="RESOURCE_KIND")

    polling: PollingSettings = Field(default_factory=PollingSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
