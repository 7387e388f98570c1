"""Tracking of vendor transactions running on resources."""

from __future__ import annotations

import structlog

from provisioner.domain.events.resource_events import TransactionChanged
from provisioner.domain.models.resource import Transaction
from provisioner.domain.ports.services import EventPublisher, VendorGateway


logger = structlog.get_logger(__name__)


class TransactionTracker:
    """Observes the active-transaction feed of resources across polls.

    The vendor only exposes the transaction currently running on a resource,
    so completion is detected as "a transaction was seen, and now none is
    active". State is keyed by resource id. Create one tracker per workflow
    call; resources tracked by the same instance never share entries.
    """

    def __init__(
        self,
        gateway: VendorGateway,
        event_publisher: EventPublisher | None = None,
    ) -> None:
        self._gateway = gateway
        self._event_publisher = event_publisher
        self._last_seen: dict[int, Transaction] = {}

    def last_seen(self, resource_id: int) -> Transaction | None:
        return self._last_seen.get(resource_id)

    async def started(self, resource_id: int) -> bool:
        """True once any transaction is active on the resource."""
        active = await self._gateway.active_transaction(resource_id)
        if active is None:
            logger.debug("transactions_not_started", resource_id=resource_id)
            return False

        await self._record(resource_id, active)
        return True

    async def ended(self, resource_id: int) -> bool:
        """True exactly once per cycle: on the first poll with no active
        transaction after one has been observed."""
        active = await self._gateway.active_transaction(resource_id)
        if active is None:
            if self._last_seen.pop(resource_id, None) is None:
                return False
            logger.info("transactions_completed", resource_id=resource_id)
            return True

        await self._record(resource_id, active)
        return False

    async def _record(self, resource_id: int, active: Transaction) -> None:
        previous = self._last_seen.get(resource_id)
        self._last_seen[resource_id] = active
        if previous is None or active.same_as(previous):
            return

        logger.info(
            "transaction_changed",
            resource_id=resource_id,
            completed=previous.name,
            elapsed_seconds=previous.elapsed_seconds,
            current=active.name,
            average_duration_minutes=active.average_duration,
        )
        if self._event_publisher is not None:
            event = TransactionChanged(
                resource_id=resource_id,
                previous_name=previous.name,
                previous_elapsed_seconds=previous.elapsed_seconds,
                current_name=active.name,
                current_average_duration=active.average_duration,
            )
            await self._event_publisher.publish_event(event)
