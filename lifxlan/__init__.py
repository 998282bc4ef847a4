"""Asyncio client for the LIFX LAN protocol."""

__version__ = "0.4.0"

import logging

from .device import Device
from .protocol.protocol import AckResFlag, MessageType, ServiceType
from .protocol.target import ALL_DEVICES, Target
from .services.discovery import discover
from .services.flow import WaitForAcksError, read_next_response, wait_for_acks

logger = logging.getLogger(__name__)

__all__ = [
    "ALL_DEVICES",
    "AckResFlag",
    "Device",
    "MessageType",
    "ServiceType",
    "Target",
    "WaitForAcksError",
    "discover",
    "read_next_response",
    "wait_for_acks",
]
