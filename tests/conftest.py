"""Pytest configuration for lifxlan tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from lifxlan.config.model import ClientConfig
from lifxlan.device import Device
from lifxlan.protocol.structures import HardwareVersion

from tests.mocks import MOCK_TARGET


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """configure_logging replaces root handlers; put the originals back."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def client_config() -> ClientConfig:
    return ClientConfig(
        broadcast_host="127.0.0.1",
        read_timeout=0.02,
        discovery_timeout=0.5,
        broadcast_attempts=2,
        broadcast_retry_interval=0.01,
    )


@pytest.fixture()
def make_device(client_config: ClientConfig):
    """Build a Device pointed at a mock service address."""

    def _make(address: tuple[str, int], **kwargs) -> Device:
        kwargs.setdefault("target", MOCK_TARGET)
        kwargs.setdefault("config", client_config)
        return Device(address[0], address[1], **kwargs)

    return _make


@pytest.fixture()
def tile_hardware() -> HardwareVersion:
    return HardwareVersion(vendor_id=1, product_id=55, hardware_version=1)
