"""Order and billing domain models."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import Field

from provisioner.domain.models.base import ValueObject
from provisioner.domain.models.catalog import ProductItemPrice
from provisioner.domain.models.resource import Resource


class BillingOrderStatus(str, Enum):
    """Approval status of a billing order."""

    APPROVED = "APPROVED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    UNRECOGNIZED = "UNRECOGNIZED"

    @classmethod
    def from_value(cls, value: str | None) -> BillingOrderStatus:
        if value is None:
            return cls.UNRECOGNIZED
        # The vendor spells statuses in UpperCamel ("PendingApproval")
        normalized = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", value.strip())
        try:
            return cls(normalized.upper())
        except ValueError:
            return cls.UNRECOGNIZED


class ResourceDraft(ValueObject):
    """Hostname and domain of a resource that has been ordered but not created."""

    hostname: str
    domain: str = ""


class Order(ValueObject):
    """Request to provision exactly one resource."""

    package_id: int
    location: str
    prices: list[ProductItemPrice] = Field(default_factory=list)
    quantity: int = 1
    use_hourly_pricing: bool = True
    resource: ResourceDraft

    @property
    def price_ids(self) -> list[int]:
        return [price.id for price in self.prices]


class OrderReceipt(ValueObject):
    """Vendor acknowledgement of a submitted order.

    ``resource`` is only set when the vendor already echoed the assigned
    resource; it may also be a stale snapshot.
    """

    order_id: int
    order: Order
    resource: Resource | None = None
