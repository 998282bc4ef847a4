"""Tests for product lookup and firmware-gated features."""

from __future__ import annotations

from lifxlan.protocol.products import (
    DEFAULT_REGISTRY,
    Features,
    FirmwareUpgrade,
    Product,
    ProductRegistry,
    merge_features,
    product_map_key,
)


def test_product_map_key_packs_vendor_high() -> None:
    assert product_map_key(1, 1) == (1 << 32) | 1
    assert product_map_key(1, 55) != product_map_key(55, 1)


def test_features_at_applies_upgrades_by_firmware() -> None:
    product = Product(
        vendor_id=1,
        product_id=1,
        name="test",
        features=Features(hev=False, color=False),
        upgrades=(
            FirmwareUpgrade(major=1, minor=1, features=Features(hev=True)),
            FirmwareUpgrade(major=1, minor=2, features=Features(color=True)),
        ),
    )

    at_1_1 = product.features_at((1, 1))
    assert at_1_1.hev is True
    assert at_1_1.color is False

    at_1_2 = product.features_at((1, 2))
    assert at_1_2.hev is True
    assert at_1_2.color is True

    base = product.features_at((0, 0))
    assert base.hev is False
    assert base.color is False


def test_registry_with_products_resolves_upgrade() -> None:
    product = Product(
        vendor_id=1,
        product_id=1,
        name="upgradable",
        features=Features(color=False),
        upgrades=(FirmwareUpgrade(major=1, minor=1, features=Features(color=True)),),
    )
    registry = DEFAULT_REGISTRY.with_products(product)

    found = registry.lookup(1, 1)
    assert found is product
    assert found.features_at((1, 2)).color is True
    assert found.features_at((1, 0)).color is False

    # The default table is untouched.
    default = DEFAULT_REGISTRY.lookup(1, 1)
    assert default is not None
    assert default.name == "Original 1000"


def test_higher_upgrade_wins_per_field() -> None:
    product = Product(
        vendor_id=1,
        product_id=99,
        name="layers",
        features=Features(temperature_range=(2500, 9000)),
        upgrades=(
            FirmwareUpgrade(major=2, minor=0, features=Features(temperature_range=(2000, 9000))),
            FirmwareUpgrade(major=3, minor=0, features=Features(temperature_range=(1500, 9000))),
        ),
    )
    assert product.features_at((3, 5)).min_kelvin == 1500
    assert product.features_at((2, 9)).min_kelvin == 2000
    assert product.features_at((1, 9)).min_kelvin == 2500


def test_invalid_temperature_range_falls_back() -> None:
    merged = merge_features(Features(temperature_range=()), Features(temperature_range=(2700, 6500)))
    assert merged.has_temperature_range
    assert (merged.min_kelvin, merged.max_kelvin) == (2700, 6500)
    assert not Features(temperature_range=(1,)).has_temperature_range


def test_default_registry_contents() -> None:
    tile = DEFAULT_REGISTRY.lookup(1, 55)
    assert tile is not None
    assert tile.features.chain is True
    assert tile.features.matrix is True
    assert product_map_key(1, 55) in DEFAULT_REGISTRY
    assert DEFAULT_REGISTRY.lookup(2, 55) is None
    assert len(DEFAULT_REGISTRY) > 20


def test_registry_from_raw_entries() -> None:
    registry = ProductRegistry.from_raw(
        7,
        "Acme",
        [{"pid": 3, "name": "Widget", "features": {"color": True, "temperature_range": [2000, 7000]}}],
    )
    product = registry.lookup(7, 3)
    assert product is not None
    assert product.vendor_name == "Acme"
    assert product.features.max_kelvin == 7000
