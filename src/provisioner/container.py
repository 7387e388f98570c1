"""Composition root wiring the orchestrator to its collaborators."""

from __future__ import annotations

import structlog

from provisioner.config import get_settings, Settings
from provisioner.domain.ports.services import (
    CatalogGateway,
    EventPublisher,
    VendorGateway,
    WorkflowTelemetry,
)
from provisioner.domain.services.catalog_cache import CatalogCache
from provisioner.domain.services.provisioning_service import ProvisioningOrchestrator
from provisioner.infrastructure.messaging.event_publisher import InMemoryEventPublisher
from provisioner.infrastructure.observability.logging import setup_logging
from provisioner.infrastructure.observability.metrics import start_metrics_server
from provisioner.infrastructure.observability.telemetry import ObservabilityTelemetry
from provisioner.infrastructure.observability.tracing import setup_tracing
from provisioner.infrastructure.vendor.simulated import default_package, SimulatedVendorGateway


logger = structlog.get_logger(__name__)


class ServiceContainer:
    """Simple dependency injection container.

    Without explicit gateways the simulated vendor is used for both the
    order/resource API and the catalog.
    """

    _instance: ServiceContainer | None = None

    def __init__(
        self,
        settings: Settings | None = None,
        gateway: VendorGateway | None = None,
        catalog_gateway: CatalogGateway | None = None,
        event_publisher: EventPublisher | None = None,
        telemetry: WorkflowTelemetry | None = None,
    ) -> None:
        self._settings = settings or get_settings()

        if gateway is None:
            simulated = SimulatedVendorGateway(
                package=default_package(name=self._settings.catalog.package_name),
                kind=self._settings.resource_kind,
            )
            gateway = simulated
            catalog_gateway = catalog_gateway or simulated
        if catalog_gateway is None:
            raise ValueError("catalog_gateway is required with a custom vendor gateway")

        self._gateway = gateway
        self._catalog_gateway = catalog_gateway
        self._event_publisher = event_publisher or InMemoryEventPublisher()
        self._telemetry = telemetry or ObservabilityTelemetry()
        self._catalog_cache: CatalogCache | None = None
        self._orchestrator: ProvisioningOrchestrator | None = None

    @classmethod
    def get_instance(cls) -> ServiceContainer:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def gateway(self) -> VendorGateway:
        return self._gateway

    @property
    def event_publisher(self) -> EventPublisher:
        return self._event_publisher

    @property
    def telemetry(self) -> WorkflowTelemetry:
        return self._telemetry

    @property
    def catalog_cache(self) -> CatalogCache:
        if self._catalog_cache is None:
            catalog = self._settings.catalog
            self._catalog_cache = CatalogCache(
                self._catalog_gateway,
                package_name=catalog.package_name,
                ttl_seconds=catalog.ttl_seconds,
                refresh_policy=catalog.refresh_policy,
                telemetry=self._telemetry,
            )
        return self._catalog_cache

    @property
    def orchestrator(self) -> ProvisioningOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = ProvisioningOrchestrator(
                gateway=self._gateway,
                catalog=self.catalog_cache,
                kind=self._settings.resource_kind,
                policies=self._settings.polling.stage_policies(),
                baseline_prices=self._settings.catalog.prices,
                port_speed=self._settings.catalog.port_speed,
                event_publisher=self._event_publisher,
                telemetry=self._telemetry,
            )
        return self._orchestrator


def bootstrap(settings: Settings | None = None) -> ServiceContainer:
    """Configure logging, tracing and metrics, then build the shared container."""
    settings = settings or get_settings()
    observability = settings.observability
    setup_logging("DEBUG" if settings.debug else observability.log_level, observability.log_json)
    setup_tracing(observability)
    metrics_exposed = start_metrics_server(observability.metrics_enabled, observability.metrics_port)

    logger.info(
        "provisioner_started",
        environment=settings.environment.value,
        resource_kind=settings.resource_kind.value,
        metrics_port=observability.metrics_port if metrics_exposed else None,
    )
    ServiceContainer._instance = ServiceContainer(settings)
    return ServiceContainer._instance
