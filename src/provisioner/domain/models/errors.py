"""Provisioning exceptions."""

from __future__ import annotations


class ProvisioningError(Exception):
    """Base class for provisioning errors."""


class StageTimeoutError(ProvisioningError):
    """A bounded wait of a create or destroy workflow was exhausted.

    The resource and its billing state may be left partially changed.
    """

    def __init__(self, stage: str, resource_ref: str, max_wait: float) -> None:
        super().__init__(
            f"{stage} for {resource_ref} did not complete within {max_wait:g}s"
        )
        self.stage = stage
        self.resource_ref = resource_ref
        self.max_wait = max_wait


class NotBillableError(ProvisioningError):
    """Destroy requested on a resource without a billing item."""

    def __init__(self, resource_id: int) -> None:
        super().__init__(
            f"no billing item for resource({resource_id}) so the order cannot be cancelled"
        )
        self.resource_id = resource_id


class InvalidNodeIdError(ProvisioningError):
    """Node id is not the numeric id of a vendor resource."""

    def __init__(self, node_id: object) -> None:
        super().__init__(f"node id {node_id!r} is not a numeric resource id")
        self.node_id = node_id


class UnsupportedLifecycleOperationError(ProvisioningError):
    """Lifecycle operation not supported by the resource kind."""

    def __init__(self, operation: str, kind: str) -> None:
        super().__init__(f"{operation} is not supported for {kind} resources")
        self.operation = operation
        self.kind = kind


class CatalogUnavailableError(ProvisioningError):
    """Transient failure to fetch the product catalog."""


class CatalogAuthorizationError(ProvisioningError):
    """The catalog rejected the credentials. Never retried."""


class ImageNotFoundError(ProvisioningError):
    """Template refers to an image the catalog does not offer."""

    def __init__(self, image_id: str) -> None:
        super().__init__(f"image {image_id} not found in catalog")
        self.image_id = image_id


class HardwareProfileError(ProvisioningError):
    """Template refers to a malformed or unknown hardware profile."""


class BillingCancellationError(ProvisioningError):
    """The vendor refused to cancel a billing item."""

    def __init__(self, resource_id: int, billing_item_id: int) -> None:
        super().__init__(
            f"cancellation of billing item {billing_item_id} for resource({resource_id}) was refused"
        )
        self.resource_id = resource_id
        self.billing_item_id = billing_item_id
