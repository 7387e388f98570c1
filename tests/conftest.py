"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import pytest

from provisioner.config import get_settings
from provisioner.container import ServiceContainer
from provisioner.domain.models.node import NodeTemplate
from provisioner.domain.models.polling import PollPolicy, ProvisioningStage
from provisioner.domain.models.resource import ResourceKind
from provisioner.domain.ports.services import WorkflowTelemetry
from provisioner.domain.services.catalog_cache import CatalogCache
from provisioner.domain.services.provisioning_service import ProvisioningOrchestrator
from provisioner.infrastructure.messaging.event_publisher import InMemoryEventPublisher
from provisioner.infrastructure.vendor.simulated import SimulatedVendorGateway


class RecordingTelemetry(WorkflowTelemetry):
    """Keeps every telemetry call in order for assertions."""

    def __init__(self) -> None:
        self.records: list[tuple[Any, ...]] = []
        self.open_spans: list[str] = []

    def of(self, kind: str) -> list[tuple[Any, ...]]:
        return [record[1:] for record in self.records if record[0] == kind]

    def poll_attempted(self, probe: str) -> None:
        self.records.append(("poll", probe))

    @contextmanager
    def stage_span(self, name: str, resource_ref: str) -> Iterator[None]:
        self.records.append(("span", name, resource_ref))
        self.open_spans.append(name)
        try:
            yield
        finally:
            self.open_spans.pop()

    def stage_finished(self, workflow: str, stage: str, outcome: str, duration: float) -> None:
        # outcomes must be recorded while the stage span is still open
        self.records.append(("stage", workflow, stage, outcome, list(self.open_spans)))

    def order_submitted(self, kind: str) -> None:
        self.records.append(("order", kind))

    def destroy_finished(self, kind: str, result: str) -> None:
        self.records.append(("destroy", kind, result))

    def catalog_refreshed(self, result: str) -> None:
        self.records.append(("catalog", result))


@pytest.fixture(autouse=True)
def reset_singletons() -> None:
    """Drop cached settings and the shared container between tests."""
    get_settings.cache_clear()
    ServiceContainer.reset()


@pytest.fixture
def fast_policy() -> PollPolicy:
    """Millisecond polling with a wait long enough for scripted vendors."""
    return PollPolicy(max_wait=2.0, base_period=0.001, cap_period=0.002)


@pytest.fixture
def short_policy() -> PollPolicy:
    """Wait that expires after a few attempts."""
    return PollPolicy(max_wait=0.05, base_period=0.001, cap_period=0.002)


@pytest.fixture
def baseline_prices() -> list[int]:
    return [21, 55, 57, 58, 1800, 905, 418, 420]


@pytest.fixture
def fast_policies(fast_policy: PollPolicy) -> dict[ProvisioningStage, PollPolicy]:
    return {stage: fast_policy for stage in ProvisioningStage}


@pytest.fixture
def event_publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture
def gateway() -> SimulatedVendorGateway:
    return SimulatedVendorGateway()


@pytest.fixture
def template() -> NodeTemplate:
    return NodeTemplate(
        domain="example.com",
        location="3",
        image_id="1693",
        hardware_id="1921,1267,273",
    )


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()


@pytest.fixture
def make_orchestrator(
    fast_policy: PollPolicy,
    fast_policies: dict[ProvisioningStage, PollPolicy],
    baseline_prices: list[int],
    event_publisher: InMemoryEventPublisher,
) -> Callable[..., ProvisioningOrchestrator]:
    """Build an orchestrator over a simulated vendor with millisecond polling."""

    def _make(
        gateway: SimulatedVendorGateway,
        kind: ResourceKind = ResourceKind.BARE_METAL,
        **overrides: Any,
    ) -> ProvisioningOrchestrator:
        policies = dict(fast_policies)
        policies.update(overrides.pop("policies", {}))
        telemetry = overrides.pop("telemetry", None)
        catalog = CatalogCache(
            gateway,
            package_name="Bare Metal Instance",
            ttl_seconds=60.0,
            refresh_policy=fast_policy,
            telemetry=telemetry,
        )
        return ProvisioningOrchestrator(
            gateway=gateway,
            catalog=catalog,
            kind=kind,
            policies=policies,
            baseline_prices=baseline_prices,
            port_speed=overrides.pop("port_speed", 10),
            event_publisher=event_publisher,
            telemetry=telemetry,
        )

    return _make
