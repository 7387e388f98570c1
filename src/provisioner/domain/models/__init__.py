"""Domain models package."""

from provisioner.domain.models.base import (
    DomainEvent,
    generate_id,
    utc_now,
    ValueObject,
)
from provisioner.domain.models.catalog import (
    Datacenter,
    HardwareProfile,
    PackageRef,
    ProductItem,
    ProductItemPrice,
    ProductPackage,
)
from provisioner.domain.models.node import (
    LoginCredentials,
    NodeAndCredentials,
    NodeMetadata,
    NodeStatus,
    NodeTemplate,
)
from provisioner.domain.models.order import (
    BillingOrderStatus,
    Order,
    OrderReceipt,
    ResourceDraft,
)
from provisioner.domain.models.polling import PollPolicy, ProvisioningStage
from provisioner.domain.models.resource import (
    NO_BILLING_ITEM,
    OperatingSystem,
    Password,
    Resource,
    ResourceKind,
    Transaction,
)


__all__ = [
    "BillingOrderStatus",
    "Datacenter",
    "DomainEvent",
    "HardwareProfile",
    "LoginCredentials",
    "NO_BILLING_ITEM",
    "NodeAndCredentials",
    "NodeMetadata",
    "NodeStatus",
    "NodeTemplate",
    "OperatingSystem",
    "Order",
    "OrderReceipt",
    "PackageRef",
    "Password",
    "PollPolicy",
    "ProductItem",
    "ProductItemPrice",
    "ProductPackage",
    "ProvisioningStage",
    "Resource",
    "ResourceDraft",
    "ResourceKind",
    "Transaction",
    "ValueObject",
    "generate_id",
    "utc_now",
]
