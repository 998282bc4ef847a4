"""Stitching a tile chain into one normalized board.

Board coordinates start at ``(0, 0)`` in the bottom-left corner of the
smallest rectangle covering every tile. Cells of that rectangle not covered
by any tile are empty.

With three 8x8 tiles arranged as::

    +--+    +--+
    |  |+--+|  |
    +--+|  |+--+
        +--+

the board is 24 wide and 12 high.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple

import msgspec

from .tile import Coordinate, Tile

logger = logging.getLogger("lifxlan.tile.board")


class IndexData(NamedTuple):
    """Which tile pixel sits on a board cell."""

    x: int
    y: int
    index: int


class BoardData(msgspec.Struct, frozen=True, kw_only=True):
    """Board size, ``data[x][y]`` lookup and its per-tile inverse.

    ``reverse_data[index][x][y]`` is the board coordinate of local pixel
    ``(x, y)`` of tile ``index``.
    """

    width: int
    height: int
    data: list[list[IndexData | None]]
    reverse_data: list[list[list[Coordinate]]]

    def on_tile(self, x: int, y: int) -> bool:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        return self.data[x][y] is not None

    def lookup(self, x: int, y: int) -> IndexData | None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return self.data[x][y]


EMPTY_BOARD = BoardData(width=0, height=0, data=[], reverse_data=[])


def parse_board(tiles: Sequence[Tile]) -> BoardData:
    """Build the board for *tiles*, in chain order.

    Overlapping tiles are not an error: the later tile owns the cell.
    """
    if not tiles:
        return EMPTY_BOARD

    placements = [tile.board_coordinates() for tile in tiles]
    min_x = min(lower.x for _, lower, _ in placements)
    min_y = min(lower.y for _, lower, _ in placements)
    max_x = max(upper.x for _, _, upper in placements)
    max_y = max(upper.y for _, _, upper in placements)
    width = max(0, max_x - min_x)
    height = max(0, max_y - min_y)

    data: list[list[IndexData | None]] = [[None] * height for _ in range(width)]
    reverse_data: list[list[list[Coordinate]]] = []
    for index, (grid, _, _) in enumerate(placements):
        tile_reverse: list[list[Coordinate]] = []
        for i, column in enumerate(grid):
            reverse_column: list[Coordinate] = []
            for j, point in enumerate(column):
                board_point = Coordinate(point.x - min_x, point.y - min_y)
                if data[board_point.x][board_point.y] is not None:
                    logger.debug("Tile %d overlaps board cell %s", index, board_point)
                data[board_point.x][board_point.y] = IndexData(x=i, y=j, index=index)
                reverse_column.append(board_point)
            tile_reverse.append(reverse_column)
        reverse_data.append(tile_reverse)

    return BoardData(width=width, height=height, data=data, reverse_data=reverse_data)
