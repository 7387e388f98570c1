"""Compute resource domain models."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from provisioner.domain.models.base import ValueObject


# Vendor sentinel for "no billing item": a discarded quote or a resource that
# is not billable yet.
NO_BILLING_ITEM = -1


class ResourceKind(str, Enum):
    """Kinds of compute resources the vendor can provision."""

    BARE_METAL = "bare_metal"
    VIRTUAL_GUEST = "virtual_guest"


class Password(ValueObject):
    """Login credential entry of an operating system record."""

    username: str
    password: str


class OperatingSystem(ValueObject):
    """Operating system record, present once provisioning completes."""

    passwords: list[Password] = Field(default_factory=list)


class Resource(ValueObject):
    """Snapshot of a vendor compute resource.

    Snapshots are refreshed between polls; two snapshots of the same
    resource may differ in every field except ``id``.
    """

    id: int
    hostname: str
    domain: str = ""
    kind: ResourceKind = ResourceKind.BARE_METAL
    primary_ip_address: str | None = None
    primary_backend_ip_address: str | None = None
    billing_item_id: int | None = None
    operating_system: OperatingSystem | None = None
    status: str | None = None
    datacenter: str | None = None

    @property
    def has_billing_item(self) -> bool:
        return self.billing_item_id is not None and self.billing_item_id != NO_BILLING_ITEM

    @property
    def has_login_details(self) -> bool:
        return (
            self.primary_ip_address is not None
            and self.primary_backend_ip_address is not None
            and self.operating_system is not None
            and len(self.operating_system.passwords) > 0
        )

    @property
    def fully_qualified_domain_name(self) -> str:
        if not self.domain:
            return self.hostname
        return f"{self.hostname}.{self.domain}"


class Transaction(ValueObject):
    """Unit of vendor-side work currently active on a resource."""

    id: int
    name: str
    elapsed_seconds: int = 0
    average_duration: float = 0.0  # minutes

    def same_as(self, other: Transaction | None) -> bool:
        return other is not None and self.id == other.id and self.name == other.name
