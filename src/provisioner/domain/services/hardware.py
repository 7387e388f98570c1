"""Hardware profiles, images and prices derived from the product package."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import product

from provisioner.domain.models.catalog import (
    HardwareProfile,
    ProductItem,
    ProductItemPrice,
    ProductPackage,
)
from provisioner.domain.models.errors import HardwareProfileError, ImageNotFoundError
from provisioner.domain.models.node import NodeTemplate
from provisioner.domain.models.resource import ResourceKind


IMAGE_CATEGORY = "os"
UPLINK_CATEGORY = "port_speed"

# Item roles combined into orderable profiles: compute/memory, primary disk
# and, for bare metal, the uplink.
PROFILE_CATEGORIES: dict[ResourceKind, tuple[str, ...]] = {
    ResourceKind.BARE_METAL: ("server_core", "disk0", UPLINK_CATEGORY),
    ResourceKind.VIRTUAL_GUEST: ("guest_core", "ram", "guest_disk0"),
}


def hardware_id(items: Iterable[ProductItem]) -> str:
    """Comma-joined first price ids of ``items``."""
    return ",".join(str(item.first_price.id) for item in items)


def uplink_items(package: ProductPackage, port_speed: int) -> list[ProductItem]:
    return [
        item
        for item in package.items_in_category(UPLINK_CATEGORY)
        if item.prices and item.capacity is not None and int(item.capacity) == port_speed
    ]


def list_hardware_profiles(
    package: ProductPackage, kind: ResourceKind, port_speed: int
) -> list[HardwareProfile]:
    """Enumerate every combination of one item per profile category."""
    groups: list[list[ProductItem]] = []
    for category in PROFILE_CATEGORIES[kind]:
        if category == UPLINK_CATEGORY:
            groups.append(uplink_items(package, port_speed))
        else:
            groups.append([i for i in package.items_in_category(category) if i.prices])

    return [
        HardwareProfile(id=hardware_id(combination), items=list(combination))
        for combination in product(*groups)
    ]


def list_images(package: ProductPackage) -> list[ProductItem]:
    return [item for item in package.items_in_category(IMAGE_CATEGORY) if item.prices]


def image_id(item: ProductItem) -> str:
    return str(item.first_price.id)


def find_image(package: ProductPackage, wanted: str) -> ProductItem | None:
    for item in list_images(package):
        if image_id(item) == wanted:
            return item
    return None


def _prices_by_id(package: ProductPackage) -> dict[int, tuple[ProductItem, ProductItemPrice]]:
    index: dict[int, tuple[ProductItem, ProductItemPrice]] = {}
    for item in package.items:
        for price in item.prices:
            index[price.id] = (item, price)
    return index


def resolve_prices(
    package: ProductPackage,
    template: NodeTemplate,
    port_speed: int,
    baseline: Iterable[int],
) -> list[ProductItemPrice]:
    """Resolve a template to the concrete price lines of an order.

    Image price, profile prices, the uplink for the configured port speed when
    the profile carries none, then the baseline prices applied to every order.
    """
    image = find_image(package, template.image_id)
    if image is None:
        raise ImageNotFoundError(template.image_id)

    try:
        profile_ids = [int(part) for part in template.hardware_id.split(",")]
    except ValueError as e:
        raise HardwareProfileError(f"malformed hardware id {template.hardware_id!r}") from e

    index = _prices_by_id(package)
    resolved: list[ProductItemPrice] = [image.first_price]
    has_uplink = False
    for price_id in profile_ids:
        if price_id not in index:
            raise HardwareProfileError(
                f"price {price_id} of hardware {template.hardware_id!r} not in package {package.id}"
            )
        item, price = index[price_id]
        has_uplink = has_uplink or item.in_category(UPLINK_CATEGORY)
        resolved.append(price)

    if not has_uplink:
        uplinks = uplink_items(package, port_speed)
        if not uplinks:
            raise HardwareProfileError(f"no {port_speed} Mbps uplink in package {package.id}")
        resolved.append(uplinks[0].first_price)

    resolved.extend(ProductItemPrice(id=price_id) for price_id in baseline)

    unique: dict[int, ProductItemPrice] = {}
    for price in resolved:
        unique.setdefault(price.id, price)
    return list(unique.values())
