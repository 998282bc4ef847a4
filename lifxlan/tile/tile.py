"""A single tile and its placement on the board."""

from __future__ import annotations

import math
from typing import NamedTuple

import msgspec

from .messages import TileDeviceRecord
from .rotation import Rotation, parse_rotation


class Coordinate(NamedTuple):
    x: int
    y: int


class Tile(msgspec.Struct, frozen=True, kw_only=True):
    """Geometry of one physical tile.

    ``user_x`` and ``user_y`` are the tile's position in tile-size units and
    may be negative or fractional.
    """

    width: int = 8
    height: int = 8
    user_x: float = 0.0
    user_y: float = 0.0
    rotation: Rotation = Rotation.RIGHT_SIDE_UP

    @classmethod
    def from_record(cls, record: TileDeviceRecord) -> Tile:
        return cls(
            width=record.width,
            height=record.height,
            user_x=record.user_x,
            user_y=record.user_y,
            rotation=parse_rotation(record.accel_x, record.accel_y, record.accel_z),
        )

    def rotate(self, x: int, y: int) -> Coordinate:
        """Map local pixel ``(x, y)`` to the tile's rotated position.

        ``x`` indexes rows (``0 <= x < width``) and ``y`` columns
        (``0 <= y < height``). Board y grows upwards, so row 0 of an upright
        tile lands on its top board row. A tile lying flat is treated as
        upright.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError(f"({x}, {y}) is outside a {self.width}x{self.height} tile")

        if self.rotation == Rotation.UPSIDE_DOWN:
            return Coordinate(self.height - 1 - y, x)
        if self.rotation == Rotation.ROTATE_RIGHT:
            return Coordinate(self.width - 1 - x, self.height - 1 - y)
        if self.rotation == Rotation.ROTATE_LEFT:
            return Coordinate(x, y)
        return Coordinate(y, self.width - 1 - x)

    def board_coordinates(self) -> tuple[list[list[Coordinate]], Coordinate, Coordinate]:
        """Non-normalized board coordinates of every pixel of this tile.

        Returns ``(grid, min, max)`` where ``grid[x][y]`` is the board
        coordinate of local pixel ``(x, y)`` (possibly negative), and
        ``max`` is exclusive.
        """
        base_x = math.floor(self.width * self.user_x)
        base_y = math.floor(self.height * self.user_y)

        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        grid: list[list[Coordinate]] = []
        for i in range(self.width):
            column: list[Coordinate] = []
            for j in range(self.height):
                rx, ry = self.rotate(i, j)
                point = Coordinate(rx + base_x, ry + base_y)
                min_x = min(min_x, point.x)
                min_y = min(min_y, point.y)
                max_x = max(max_x, point.x + 1)
                max_y = max(max_y, point.y + 1)
                column.append(point)
            grid.append(column)

        if not grid or not grid[0]:
            return grid, Coordinate(base_x, base_y), Coordinate(base_x, base_y)
        return grid, Coordinate(int(min_x), int(min_y)), Coordinate(int(max_x), int(max_y))
