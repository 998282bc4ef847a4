"""Product identification and firmware-gated feature resolution.

The default table mirrors the public LIFX ``products.json`` for vendor 1.
Registries are plain values: pass a different one to a device (or build one
with :meth:`ProductRegistry.with_products`) instead of mutating the default.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Final

import msgspec

logger = logging.getLogger("lifxlan.products")

VALID_TEMPERATURE_RANGE_LENGTH: Final[int] = 2


def product_map_key(vendor_id: int, product_id: int) -> int:
    """Composite 64-bit registry key: vendor in the high word."""
    return (vendor_id << 32) | product_id


class Features(msgspec.Struct, frozen=True, kw_only=True, omit_defaults=True):
    """Capability flags. ``None`` means unset, so a fallback may fill it."""

    hev: bool | None = None
    color: bool | None = None
    chain: bool | None = None
    matrix: bool | None = None
    relays: bool | None = None
    buttons: bool | None = None
    infrared: bool | None = None
    multizone: bool | None = None
    extended_multizone: bool | None = None
    temperature_range: tuple[int, ...] | None = None

    @property
    def has_temperature_range(self) -> bool:
        return self.temperature_range is not None and len(self.temperature_range) == VALID_TEMPERATURE_RANGE_LENGTH

    @property
    def min_kelvin(self) -> int:
        return self.temperature_range[0] if self.has_temperature_range else 0  # type: ignore[index]

    @property
    def max_kelvin(self) -> int:
        return self.temperature_range[1] if self.has_temperature_range else 0  # type: ignore[index]

    def fallback(self, other: Features) -> Features:
        """Fill every unset field of this record from *other*."""
        values: dict[str, Any] = {}
        for name in self.__struct_fields__:
            if name == "temperature_range":
                continue
            mine = getattr(self, name)
            values[name] = mine if mine is not None else getattr(other, name)
        if self.has_temperature_range:
            values["temperature_range"] = self.temperature_range
        elif other.has_temperature_range:
            values["temperature_range"] = other.temperature_range
        return Features(**values)


def merge_features(*features: Features) -> Features:
    """Merge left to right; the first record that sets a field wins."""
    result = Features()
    for item in features:
        result = result.fallback(item)
    return result


class FirmwareUpgrade(msgspec.Struct, frozen=True, kw_only=True):
    """Features that change from firmware ``major.minor`` onwards."""

    major: int
    minor: int
    features: Features = msgspec.field(default_factory=Features)

    @property
    def version(self) -> tuple[int, int]:
        return (self.major, self.minor)

    def __str__(self) -> str:
        return f"({self.major}, {self.minor})"


class Product(msgspec.Struct, frozen=True, kw_only=True):
    vendor_id: int
    product_id: int
    name: str
    features: Features = msgspec.field(default_factory=Features)
    upgrades: tuple[FirmwareUpgrade, ...] = ()
    vendor_name: str = "LIFX"

    @property
    def key(self) -> int:
        return product_map_key(self.vendor_id, self.product_id)

    def features_at(self, firmware: tuple[int, int]) -> Features:
        """Resolve features for a device running *firmware* (major, minor).

        Upgrades at or below *firmware* apply; higher versions override lower
        ones field by field and the base features fill what none of them set.
        ``(0, 0)`` yields the base features.
        """
        applicable = sorted(
            (upgrade for upgrade in self.upgrades if tuple(firmware) >= upgrade.version),
            key=lambda upgrade: upgrade.version,
            reverse=True,
        )
        return merge_features(*(upgrade.features for upgrade in applicable), self.features)


class ProductRegistry:
    """Lookup table of known products keyed by :func:`product_map_key`."""

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: dict[int, Product] = {product.key: product for product in products}

    def lookup(self, vendor_id: int, product_id: int) -> Product | None:
        return self._products.get(product_map_key(vendor_id, product_id))

    def with_products(self, *products: Product) -> ProductRegistry:
        """Return a copy with *products* added or replaced."""
        merged = ProductRegistry(self._products.values())
        for product in products:
            merged._products[product.key] = product
        return merged

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, key: object) -> bool:
        return key in self._products

    @classmethod
    def from_raw(cls, vendor_id: int, vendor_name: str, raw: Iterable[Mapping[str, Any]]) -> ProductRegistry:
        """Build a registry from ``products.json`` shaped entries."""
        products = [
            msgspec.convert(
                {**entry, "vendor_id": vendor_id, "vendor_name": vendor_name, "product_id": entry["pid"]},
                Product,
            )
            for entry in raw
        ]
        logger.debug("Loaded %d products for vendor %d", len(products), vendor_id)
        return cls(products)


_KELVIN_FULL = [2500, 9000]
_KELVIN_WHITE = [2700, 6500]
_KELVIN_DAY_DUSK = [1500, 4000]
_KELVIN_MINI_WHITE = [2700, 2700]
_KELVIN_WIDE = [1500, 9000]

_EXTENDED_MULTIZONE = [{"major": 2, "minor": 77, "features": {"extended_multizone": True}}]
_WIDE_KELVIN_UPGRADE = [{"major": 3, "minor": 70, "features": {"temperature_range": _KELVIN_WIDE}}]


def _entry(
    pid: int,
    name: str,
    *,
    color: bool,
    kelvin: list[int],
    upgrades: list[Any] | None = None,
    **flags: bool,
) -> dict[str, Any]:
    features: dict[str, Any] = {"color": color, "temperature_range": kelvin}
    features.update(flags)
    return {"pid": pid, "name": name, "features": features, "upgrades": upgrades or []}


_LIFX_PRODUCTS: Final[list[dict[str, Any]]] = [
    _entry(1, "Original 1000", color=True, kelvin=_KELVIN_FULL),
    _entry(3, "Color 650", color=True, kelvin=_KELVIN_FULL),
    _entry(10, "White 800 (Low Voltage)", color=False, kelvin=_KELVIN_WHITE),
    _entry(11, "White 800 (High Voltage)", color=False, kelvin=_KELVIN_WHITE),
    _entry(18, "White 900 BR30 (Low Voltage)", color=False, kelvin=_KELVIN_WHITE),
    _entry(20, "Color 1000 BR30", color=True, kelvin=_KELVIN_FULL),
    _entry(22, "Color 1000", color=True, kelvin=_KELVIN_FULL),
    _entry(27, "LIFX A19", color=True, kelvin=_KELVIN_FULL, upgrades=_WIDE_KELVIN_UPGRADE),
    _entry(28, "LIFX BR30", color=True, kelvin=_KELVIN_FULL, upgrades=_WIDE_KELVIN_UPGRADE),
    _entry(29, "LIFX+ A19", color=True, kelvin=_KELVIN_FULL, infrared=True),
    _entry(30, "LIFX+ BR30", color=True, kelvin=_KELVIN_FULL, infrared=True),
    _entry(31, "LIFX Z", color=True, kelvin=_KELVIN_FULL, multizone=True, upgrades=_EXTENDED_MULTIZONE),
    _entry(32, "LIFX Z 2", color=True, kelvin=_KELVIN_FULL, multizone=True, upgrades=_EXTENDED_MULTIZONE),
    _entry(36, "LIFX Downlight", color=True, kelvin=_KELVIN_FULL),
    _entry(37, "LIFX Downlight", color=True, kelvin=_KELVIN_FULL),
    _entry(38, "LIFX Beam", color=True, kelvin=_KELVIN_FULL, multizone=True, upgrades=_EXTENDED_MULTIZONE),
    _entry(43, "LIFX A19", color=True, kelvin=_KELVIN_FULL, upgrades=_WIDE_KELVIN_UPGRADE),
    _entry(44, "LIFX BR30", color=True, kelvin=_KELVIN_FULL, upgrades=_WIDE_KELVIN_UPGRADE),
    _entry(45, "LIFX+ A19", color=True, kelvin=_KELVIN_FULL, infrared=True),
    _entry(46, "LIFX+ BR30", color=True, kelvin=_KELVIN_FULL, infrared=True),
    _entry(49, "LIFX Mini", color=True, kelvin=_KELVIN_FULL),
    _entry(50, "LIFX Mini Day and Dusk", color=False, kelvin=_KELVIN_DAY_DUSK),
    _entry(51, "LIFX Mini White", color=False, kelvin=_KELVIN_MINI_WHITE),
    _entry(52, "LIFX GU10", color=True, kelvin=_KELVIN_FULL),
    _entry(55, "LIFX Tile", color=True, kelvin=_KELVIN_FULL, chain=True, matrix=True),
    _entry(56, "LIFX Beam", color=True, kelvin=_KELVIN_FULL, multizone=True, upgrades=_EXTENDED_MULTIZONE),
    _entry(57, "LIFX Candle", color=True, kelvin=_KELVIN_WIDE, matrix=True),
    _entry(59, "LIFX Mini Color", color=True, kelvin=_KELVIN_FULL),
    _entry(60, "LIFX Mini Day and Dusk", color=False, kelvin=_KELVIN_DAY_DUSK),
    _entry(61, "LIFX Mini White", color=False, kelvin=_KELVIN_MINI_WHITE),
    _entry(70, "LIFX Switch", color=False, kelvin=[], relays=True, buttons=True),
    _entry(71, "LIFX Switch", color=False, kelvin=[], relays=True, buttons=True),
    _entry(90, "LIFX Clean", color=True, kelvin=_KELVIN_WIDE, hev=True),
]

DEFAULT_REGISTRY: Final[ProductRegistry] = ProductRegistry.from_raw(1, "LIFX", _LIFX_PRODUCTS)
