"""Tile capability for LIFX matrix devices."""

from .board import BoardData, IndexData, parse_board
from .color import ColorBoard
from .device import NoTilesError, TileDevice, wrap
from .rotation import Rotation, parse_rotation
from .tile import Coordinate, Tile

__all__ = [
    "BoardData",
    "ColorBoard",
    "Coordinate",
    "IndexData",
    "NoTilesError",
    "Rotation",
    "Tile",
    "TileDevice",
    "parse_board",
    "parse_rotation",
    "wrap",
]
