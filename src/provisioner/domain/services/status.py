"""Translation of vendor resource states to the canonical node status."""

from __future__ import annotations

from provisioner.domain.models.node import NodeMetadata, NodeStatus
from provisioner.domain.models.resource import Resource, ResourceKind


# Keys are the upper-cased vendor spellings (hardwareStatus.status is
# "Active", "Deploy2", ...; powerState.keyName is "RUNNING", ...).
HARDWARE_STATUS_TO_NODE_STATUS: dict[str, NodeStatus] = {
    "ACTIVE": NodeStatus.RUNNING,
    "DEPLOY": NodeStatus.PENDING,
    "DEPLOY2": NodeStatus.PENDING,
    "MACWAIT": NodeStatus.PENDING,
    "RECLAIM": NodeStatus.SUSPENDED,
}

POWER_STATE_TO_NODE_STATUS: dict[str, NodeStatus] = {
    "RUNNING": NodeStatus.RUNNING,
    "HALTED": NodeStatus.PENDING,
    "PAUSED": NodeStatus.SUSPENDED,
}

_TABLES: dict[ResourceKind, dict[str, NodeStatus]] = {
    ResourceKind.BARE_METAL: HARDWARE_STATUS_TO_NODE_STATUS,
    ResourceKind.VIRTUAL_GUEST: POWER_STATE_TO_NODE_STATUS,
}


def _lookup(table: dict[str, NodeStatus], value: str | None) -> NodeStatus:
    if not value:
        return NodeStatus.UNRECOGNIZED
    return table.get(value.strip().upper(), NodeStatus.UNRECOGNIZED)


def translate_hardware_status(value: str | None) -> NodeStatus:
    return _lookup(HARDWARE_STATUS_TO_NODE_STATUS, value)


def translate_power_state(value: str | None) -> NodeStatus:
    return _lookup(POWER_STATE_TO_NODE_STATUS, value)


def translate_status(kind: ResourceKind, value: str | None) -> NodeStatus:
    return _lookup(_TABLES[kind], value)


def resource_to_node(resource: Resource) -> NodeMetadata:
    """Convert a vendor resource snapshot into the generic node view."""
    public = [resource.primary_ip_address] if resource.primary_ip_address else []
    private = (
        [resource.primary_backend_ip_address] if resource.primary_backend_ip_address else []
    )
    return NodeMetadata(
        id=str(resource.id),
        hostname=resource.hostname,
        domain=resource.domain,
        status=translate_status(resource.kind, resource.status),
        vendor_status=resource.status,
        public_addresses=public,
        private_addresses=private,
        billing_item_id=resource.billing_item_id,
        location=resource.datacenter,
    )
