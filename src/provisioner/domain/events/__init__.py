"""Domain events package."""

from provisioner.domain.events.resource_events import (
    ResourceDestroyed,
    ResourceOrdered,
    ResourceProvisioned,
    StageTimedOut,
    TransactionChanged,
)


__all__ = [
    "ResourceDestroyed",
    "ResourceOrdered",
    "ResourceProvisioned",
    "StageTimedOut",
    "TransactionChanged",
]
