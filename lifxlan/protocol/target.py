"""Device target identifiers.

A target is the 64-bit little-endian form of a device MAC address; only the
first six bytes are meaningful. Zero is the wildcard :data:`ALL_DEVICES`,
which matches any target from either side of a comparison.
"""

from __future__ import annotations

import msgspec
from construct import Int64ul  # type: ignore

from .protocol import TARGET_MAC_LENGTH, UINT64_MAX


class Target(msgspec.Struct, frozen=True):
    """MAC-address-shaped device identifier."""

    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value <= UINT64_MAX:
            raise ValueError(f"Target {self.value} outside 64-bit range")

    @property
    def is_all_devices(self) -> bool:
        return self.value == 0

    def matches(self, other: Target) -> bool:
        """Return True if both targets are equal or either one is the wildcard."""
        return self.is_all_devices or other.is_all_devices or self.value == other.value

    def to_bytes(self) -> bytes:
        return Int64ul.build(self.value)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> Target:
        raw = bytes(data)
        if len(raw) < TARGET_MAC_LENGTH:
            raise ValueError(f"Target needs at least {TARGET_MAC_LENGTH} bytes, got {len(raw)}")
        return cls(Int64ul.parse(raw[:TARGET_MAC_LENGTH].ljust(8, b"\x00")))

    @classmethod
    def parse(cls, text: str) -> Target:
        """Parse ``aa:bb:cc:dd:ee:ff``; dash separated or bare hex also work.

        An empty string parses to :data:`ALL_DEVICES`.
        """
        text = text.strip()
        if not text:
            return ALL_DEVICES
        digits = text.replace(":", "").replace("-", "")
        if len(digits) != TARGET_MAC_LENGTH * 2:
            raise ValueError(f"Invalid target {text!r}: expected {TARGET_MAC_LENGTH} hex octets")
        try:
            raw = bytes.fromhex(digits)
        except ValueError as exc:
            raise ValueError(f"Invalid target {text!r}: {exc}") from exc
        return cls.from_bytes(raw)

    def __str__(self) -> str:
        return ":".join(f"{b:02x}" for b in self.to_bytes()[:TARGET_MAC_LENGTH])


ALL_DEVICES = Target(0)
