"""Unit tests for application configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from provisioner.config import (
    CatalogSettings,
    DEFAULT_BASELINE_PRICES,
    Environment,
    get_settings,
    ObservabilitySettings,
    PollingSettings,
    Settings,
)
from provisioner.domain.models.polling import ProvisioningStage
from provisioner.domain.models.resource import ResourceKind


class TestPollingSettings:
    def test_defaults(self) -> None:
        settings = PollingSettings()
        assert settings.order_discovery_timeout == 5 * 60 * 60
        assert settings.transactions_started_timeout == 60 * 60
        assert settings.transactions_ended_timeout == 10 * 60 * 60
        assert settings.login_details_timeout == 60 * 60
        assert settings.base_period == 5.0
        assert settings.max_period == 10.0

    def test_policy_per_stage(self) -> None:
        settings = PollingSettings(login_details_timeout=120, base_period=1, max_period=4)
        policy = settings.policy_for(ProvisioningStage.LOGIN_DETAILS)
        assert policy.max_wait == 120
        assert policy.base_period == 1
        assert policy.cap_period == 4

    def test_stage_policies_cover_every_stage(self) -> None:
        assert set(PollingSettings().stage_policies()) == set(ProvisioningStage)

    def test_rejects_max_period_below_base(self) -> None:
        with pytest.raises(ValidationError):
            PollingSettings(base_period=10, max_period=5)

    def test_rejects_tiny_login_timeout(self) -> None:
        with pytest.raises(ValidationError):
            PollingSettings(login_details_timeout=0.5)

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POLL_TRANSACTIONS_ENDED_TIMEOUT", "600")
        assert PollingSettings().transactions_ended_timeout == 600


class TestCatalogSettings:
    def test_defaults(self) -> None:
        settings = CatalogSettings()
        assert settings.package_name == "Bare Metal Instance"
        assert settings.port_speed == 10
        assert settings.prices == list(DEFAULT_BASELINE_PRICES)
        assert settings.ttl_seconds == 60.0

    def test_prices_from_comma_separated_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CATALOG_PRICES", "21, 55,905")
        assert CatalogSettings().prices == [21, 55, 905]

    def test_rejects_unknown_port_speed(self) -> None:
        with pytest.raises(ValidationError):
            CatalogSettings(port_speed=42)

    def test_refresh_policy(self) -> None:
        settings = CatalogSettings(refresh_timeout=30, refresh_base_period=2, refresh_max_period=8)
        policy = settings.refresh_policy
        assert policy.max_wait == 30
        assert policy.base_period == 2
        assert policy.cap_period == 8


class TestObservabilitySettings:
    def test_defaults(self) -> None:
        settings = ObservabilitySettings()
        assert settings.log_level == "INFO"
        assert settings.metrics_enabled is True
        assert settings.tracing_enabled is False
        assert settings.otlp_endpoint == ""
        assert settings.metrics_port == 0
        assert settings.log_json is True


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("RESOURCE_KIND", raising=False)
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT
        assert settings.debug is False
        assert settings.resource_kind == ResourceKind.BARE_METAL

    def test_nested_settings(self) -> None:
        settings = Settings()
        assert isinstance(settings.polling, PollingSettings)
        assert isinstance(settings.catalog, CatalogSettings)
        assert isinstance(settings.observability, ObservabilitySettings)

    def test_resource_kind_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESOURCE_KIND", "virtual_guest")
        assert Settings().resource_kind == ResourceKind.VIRTUAL_GUEST

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()
