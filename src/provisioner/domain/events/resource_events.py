"""Resource lifecycle domain events."""

from __future__ import annotations

from provisioner.domain.models.base import DomainEvent


class ResourceOrdered(DomainEvent):
    """Emitted when an order has been submitted."""

    order_id: int
    hostname: str
    event_type: str = "resource.ordered"


class TransactionChanged(DomainEvent):
    """Emitted when the active transaction of a resource is replaced by another."""

    resource_id: int
    previous_name: str
    previous_elapsed_seconds: int
    current_name: str
    current_average_duration: float
    event_type: str = "resource.transaction_changed"


class ResourceProvisioned(DomainEvent):
    """Emitted when a resource has passed every create gate."""

    resource_id: int
    hostname: str
    event_type: str = "resource.provisioned"


class ResourceDestroyed(DomainEvent):
    """Emitted when cancellation transactions of a resource have completed."""

    resource_id: int
    event_type: str = "resource.destroyed"


class StageTimedOut(DomainEvent):
    """Emitted when a bounded wait of a workflow is exhausted."""

    stage: str
    resource_ref: str
    max_wait: float
    event_type: str = "resource.stage_timed_out"
