"""Datagram transports for the LIFX LAN client."""

from .udp import Address, Connection, DatagramConnection, ShortWriteError

__all__ = ["Address", "Connection", "DatagramConnection", "ShortWriteError"]
