"""Product catalog domain models."""

from __future__ import annotations

from pydantic import Field

from provisioner.domain.models.base import ValueObject


class ProductItemPrice(ValueObject):
    """Orderable price line of a product item."""

    id: int
    item_id: int | None = None
    hourly_recurring_fee: float | None = None


class ProductItem(ValueObject):
    """Catalog item such as a core/memory unit, a disk or an image."""

    id: int
    description: str = ""
    units: str | None = None
    capacity: float | None = None
    category_codes: list[str] = Field(default_factory=list)
    prices: list[ProductItemPrice] = Field(default_factory=list)

    def in_category(self, code: str) -> bool:
        return code in self.category_codes

    @property
    def first_price(self) -> ProductItemPrice:
        if not self.prices:
            raise ValueError(f"product item {self.id} has no prices")
        return self.prices[0]


class Datacenter(ValueObject):
    """Location a package can be ordered in."""

    id: int
    name: str
    long_name: str = ""


class PackageRef(ValueObject):
    """Reduced view of an active package, as returned by the package listing."""

    id: int
    name: str


class ProductPackage(ValueObject):
    """Full package detail: orderable items and datacenters."""

    id: int
    name: str
    items: list[ProductItem] = Field(default_factory=list)
    datacenters: list[Datacenter] = Field(default_factory=list)

    def items_in_category(self, code: str) -> list[ProductItem]:
        return [item for item in self.items if item.in_category(code)]


class HardwareProfile(ValueObject):
    """Orderable combination of catalog items.

    ``id`` is the comma-joined first price ids of the items.
    """

    id: str
    items: list[ProductItem]

    @property
    def price_ids(self) -> list[int]:
        return [int(part) for part in self.id.split(",")]
