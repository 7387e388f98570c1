"""Unit tests for hardware profiles, images and price resolution."""

from __future__ import annotations

import pytest

from provisioner.domain.models.catalog import ProductItem, ProductItemPrice, ProductPackage
from provisioner.domain.models.errors import HardwareProfileError, ImageNotFoundError
from provisioner.domain.models.node import NodeTemplate
from provisioner.domain.models.resource import ResourceKind
from provisioner.domain.services import hardware
from provisioner.infrastructure.vendor.simulated import default_package


@pytest.fixture
def package():
    return default_package()


def template_for(hardware_id: str, image_id: str = "1693") -> NodeTemplate:
    return NodeTemplate(domain="example.com", location="3", image_id=image_id, hardware_id=hardware_id)


class TestHardwareProfiles:
    def test_bare_metal_profiles_cover_every_combination(self, package) -> None:
        profiles = hardware.list_hardware_profiles(package, ResourceKind.BARE_METAL, port_speed=10)

        assert len(profiles) == 4
        assert {p.id for p in profiles} == {
            "1921,1267,273",
            "1921,1268,273",
            "1922,1267,273",
            "1922,1268,273",
        }

    def test_uplink_follows_port_speed(self, package) -> None:
        profiles = hardware.list_hardware_profiles(package, ResourceKind.BARE_METAL, port_speed=1000)

        assert all(profile.price_ids[-1] == 272 for profile in profiles)

    def test_unknown_port_speed_yields_no_profiles(self, package) -> None:
        assert hardware.list_hardware_profiles(package, ResourceKind.BARE_METAL, port_speed=42) == []

    def test_virtual_guest_categories_missing(self, package) -> None:
        assert hardware.list_hardware_profiles(package, ResourceKind.VIRTUAL_GUEST, port_speed=10) == []


class TestImages:
    def test_list_images(self, package) -> None:
        images = hardware.list_images(package)
        assert [hardware.image_id(image) for image in images] == ["1693", "1700"]

    def test_find_image(self, package) -> None:
        image = hardware.find_image(package, "1700")
        assert image is not None
        assert image.description.startswith("CentOS")

    def test_find_unknown_image(self, package) -> None:
        assert hardware.find_image(package, "9999") is None


class TestResolvePrices:
    def test_orders_image_profile_then_baseline(self, package) -> None:
        prices = hardware.resolve_prices(package, template_for("1921,1267,273"), 10, [21, 55])

        assert [price.id for price in prices] == [1693, 1921, 1267, 273, 21, 55]

    def test_adds_uplink_when_profile_has_none(self, package) -> None:
        prices = hardware.resolve_prices(package, template_for("1921,1267"), 100, [])

        assert [price.id for price in prices] == [1693, 1921, 1267, 274]

    def test_duplicates_removed(self, package) -> None:
        prices = hardware.resolve_prices(package, template_for("1921,1267,273"), 10, [273, 21, 21])

        assert [price.id for price in prices] == [1693, 1921, 1267, 273, 21]

    def test_unknown_image(self, package) -> None:
        with pytest.raises(ImageNotFoundError):
            hardware.resolve_prices(package, template_for("1921,1267,273", image_id="1"), 10, [])

    def test_malformed_hardware_id(self, package) -> None:
        with pytest.raises(HardwareProfileError):
            hardware.resolve_prices(package, template_for("large"), 10, [])

    def test_unknown_price_in_profile(self, package) -> None:
        with pytest.raises(HardwareProfileError):
            hardware.resolve_prices(package, template_for("1921,9999"), 10, [])

    def test_missing_uplink_for_port_speed(self, package) -> None:
        with pytest.raises(HardwareProfileError):
            hardware.resolve_prices(package, template_for("1921,1267"), 42, [])


def catalog_item(item_id: int, category: str, *price_ids: int, capacity: float | None = None) -> ProductItem:
    return ProductItem(
        id=item_id,
        capacity=capacity,
        category_codes=[category],
        prices=[ProductItemPrice(id=price_id, item_id=item_id) for price_id in price_ids],
    )


class TestUnpricedUplinks:
    @pytest.fixture
    def sparse_package(self) -> ProductPackage:
        return ProductPackage(
            id=50,
            name="Bare Metal Instance",
            items=[
                catalog_item(1, "server_core", 11),
                catalog_item(2, "disk0", 22),
                catalog_item(3, "port_speed", capacity=10),
                catalog_item(4, "port_speed", 44, capacity=10),
                catalog_item(5, "os", 55),
            ],
        )

    def test_profiles_skip_unpriced_uplink(self, sparse_package) -> None:
        profiles = hardware.list_hardware_profiles(sparse_package, ResourceKind.BARE_METAL, 10)

        assert [profile.id for profile in profiles] == ["11,22,44"]

    def test_resolve_picks_priced_uplink(self, sparse_package) -> None:
        prices = hardware.resolve_prices(sparse_package, template_for("11,22", image_id="55"), 10, [])

        assert [price.id for price in prices] == [55, 11, 22, 44]

    def test_only_unpriced_uplink_is_missing(self) -> None:
        package = ProductPackage(
            id=50,
            name="Bare Metal Instance",
            items=[catalog_item(3, "port_speed", capacity=10), catalog_item(5, "os", 55)],
        )

        assert hardware.uplink_items(package, 10) == []
        with pytest.raises(HardwareProfileError):
            hardware.resolve_prices(package, template_for("55", image_id="55"), 10, [])
