"""Generic node representation exposed above the vendor models."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from provisioner.domain.models.base import ValueObject
from provisioner.domain.models.resource import Resource


class NodeStatus(str, Enum):
    """Canonical resource status."""

    PENDING = "pending"
    RUNNING = "running"
    SUSPENDED = "suspended"
    UNRECOGNIZED = "unrecognized"


class NodeMetadata(ValueObject):
    """Vendor-neutral view of a resource."""

    id: str
    hostname: str
    domain: str = ""
    status: NodeStatus = NodeStatus.UNRECOGNIZED
    vendor_status: str | None = None
    public_addresses: list[str] = Field(default_factory=list)
    private_addresses: list[str] = Field(default_factory=list)
    billing_item_id: int | None = None
    location: str | None = None


class LoginCredentials(ValueObject):
    """Initial login of a freshly provisioned resource."""

    user: str
    password: str = Field(repr=False)


class NodeTemplate(ValueObject):
    """What to order: where, which image and which hardware profile."""

    domain: str
    location: str
    image_id: str
    hardware_id: str


class NodeAndCredentials(ValueObject):
    """Result of a successful create workflow."""

    resource: Resource
    node_id: str
    credentials: LoginCredentials
