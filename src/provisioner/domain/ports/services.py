"""Service port interfaces (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any

from provisioner.domain.models.base import DomainEvent
from provisioner.domain.models.catalog import PackageRef, ProductPackage
from provisioner.domain.models.order import BillingOrderStatus, Order, OrderReceipt
from provisioner.domain.models.resource import Resource, Transaction


class VendorGateway(ABC):
    """Port for the vendor's order, resource and billing API.

    The vendor is eventually consistent: a resource created by an order may be
    missing from ``list_resources`` for a while after the order is accepted.
    """

    @abstractmethod
    async def submit_order(self, order: Order) -> OrderReceipt:
        """Place an order for one resource."""

    @abstractmethod
    async def billing_order_status(self, order_id: int) -> BillingOrderStatus:
        """Get the approval status of a submitted order."""

    @abstractmethod
    async def get_resource(self, resource_id: int) -> Resource | None:
        """Retrieve a resource by ID. Returns None if it does not exist."""

    @abstractmethod
    async def list_resources(self) -> list[Resource]:
        """List every resource of the account."""

    @abstractmethod
    async def active_transaction(self, resource_id: int) -> Transaction | None:
        """Get the transaction currently running on a resource, if any."""

    @abstractmethod
    async def cancel_billing_item(self, billing_item_id: int) -> bool:
        """Cancel the billing item backing a resource."""

    @abstractmethod
    async def reboot(self, resource_id: int) -> None:
        """Hard-reboot a resource."""

    @abstractmethod
    async def suspend(self, resource_id: int) -> None:
        """Pause a resource."""

    @abstractmethod
    async def resume(self, resource_id: int) -> None:
        """Resume a paused resource."""


class CatalogGateway(ABC):
    """Port for the vendor's product catalog."""

    @abstractmethod
    async def active_package_by_name(self, name: str) -> PackageRef:
        """Find an active package by name."""

    @abstractmethod
    async def package_detail(self, package_id: int) -> ProductPackage:
        """Get the items and datacenters of a package."""


class EventPublisher(ABC):
    """Port for publishing domain events."""

    @abstractmethod
    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        """Publish an event."""

    @abstractmethod
    async def publish_batch(self, events: list[tuple[str, dict[str, Any]]]) -> None:
        """Publish a batch of events."""

    async def publish_event(self, event: DomainEvent) -> None:
        """Publish a domain event under its own type, JSON-compatible payload."""
        await self.publish(event.event_type, event.model_dump(mode="json"))


class WorkflowTelemetry(ABC):
    """Port for the metrics and trace spans of provisioning workflows."""

    @abstractmethod
    def poll_attempted(self, probe: str) -> None:
        """Record one evaluation of a polled probe."""

    @abstractmethod
    def stage_span(self, name: str, resource_ref: str) -> AbstractContextManager[None]:
        """Context spanning one bounded wait."""

    @abstractmethod
    def stage_finished(self, workflow: str, stage: str, outcome: str, duration: float) -> None:
        """Record how a bounded wait ended: passed, timed_out or failed."""

    @abstractmethod
    def order_submitted(self, kind: str) -> None:
        """Record a submitted order."""

    @abstractmethod
    def destroy_finished(self, kind: str, result: str) -> None:
        """Record the result of a destroy request."""

    @abstractmethod
    def catalog_refreshed(self, result: str) -> None:
        """Record the result of a catalog refresh."""
