"""Single-method probes polled by the provisioning workflows."""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from provisioner.domain.models.order import BillingOrderStatus, OrderReceipt
from provisioner.domain.models.resource import NO_BILLING_ITEM, Resource
from provisioner.domain.ports.services import VendorGateway
from provisioner.domain.services.transactions import TransactionTracker


logger = structlog.get_logger(__name__)


class ResourceProbe(ABC):
    """Boolean test over a resource, evaluated once per poll."""

    @abstractmethod
    async def test(self, resource: Resource) -> bool:
        """Evaluate the probe against the latest state of ``resource``."""


class TransactionsStarted(ResourceProbe):
    def __init__(self, tracker: TransactionTracker) -> None:
        self._tracker = tracker

    async def test(self, resource: Resource) -> bool:
        return await self._tracker.started(resource.id)


class TransactionsEnded(ResourceProbe):
    def __init__(self, tracker: TransactionTracker) -> None:
        self._tracker = tracker

    async def test(self, resource: Resource) -> bool:
        return await self._tracker.ended(resource.id)


class LoginDetailsPresent(ResourceProbe):
    """Re-fetches the resource and checks both addresses and a password are set."""

    def __init__(self, gateway: VendorGateway) -> None:
        self._gateway = gateway

    async def test(self, resource: Resource) -> bool:
        current = await self._gateway.get_resource(resource.id)
        if current is None:
            logger.debug("resource_missing", resource_id=resource.id)
            return False
        return current.has_login_details


class OrderApprovedAndDiscovered:
    """Waits for an order to be approved and its resource to be listed.

    The listed resource is kept in ``discovered``; it is the directory's copy,
    not the snapshot echoed in the receipt.
    """

    def __init__(self, gateway: VendorGateway) -> None:
        self._gateway = gateway
        self.discovered: Resource | None = None

    async def test(self, receipt: OrderReceipt) -> bool:
        status = await self._gateway.billing_order_status(receipt.order_id)
        if status != BillingOrderStatus.APPROVED:
            logger.debug("order_not_approved", order_id=receipt.order_id, status=status.value)
            return False

        hostname = receipt.order.resource.hostname
        echoed_id = receipt.resource.id if receipt.resource is not None else None
        resources = await self._gateway.list_resources()
        self.discovered = find_by_hostname(resources, hostname, preferred_id=echoed_id)
        if self.discovered is None:
            logger.debug("resource_not_listed", order_id=receipt.order_id, hostname=hostname)
            return False
        return True


def find_by_hostname(
    resources: list[Resource], hostname: str, preferred_id: int | None = None
) -> Resource | None:
    """Pick the ordered resource among those listed under ``hostname``.

    ``preferred_id`` wins, then a billable resource, then one whose billing
    item is not assigned yet. Quotes are never returned.
    """
    candidates = [
        resource
        for resource in resources
        if resource.hostname == hostname and resource.billing_item_id != NO_BILLING_ITEM
    ]
    for resource in candidates:
        if resource.id == preferred_id:
            return resource
    for resource in candidates:
        if resource.has_billing_item:
            return resource
    return candidates[0] if candidates else None
