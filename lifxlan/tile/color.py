"""Color boards and their mapping onto per-tile pixel buffers."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from ..protocol.structures import COLOR_BLACK, Color
from .board import BoardData
from .messages import TILE_COLOR_COUNT
from .tile import Tile


class ColorBoard:
    """A ``width`` x ``height`` grid of optional colors.

    ``None`` means "not part of this frame". Reads outside the grid return
    ``None``.
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Invalid color board size {width}x{height}")
        self.width = width
        self.height = height
        self._grid: list[list[Color | None]] = [[None] * height for _ in range(width)]

    def get(self, x: int, y: int) -> Color | None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return self._grid[x][y]

    def set(self, x: int, y: int, color: Color | None) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"({x}, {y}) is outside a {self.width}x{self.height} board")
        self._grid[x][y] = color

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColorBoard):
            return NotImplemented
        return self.width == other.width and self.height == other.height and self._grid == other._grid

    def __repr__(self) -> str:
        filled = sum(1 for column in self._grid for color in column if color is not None)
        return f"<ColorBoard {self.width}x{self.height} colors={filled}>"


def paint_tiles(
    board: BoardData,
    tiles: Sequence[Tile],
    colors: ColorBoard,
    sanitize: Callable[[Color], Color],
) -> list[list[Color]]:
    """Render *colors* into one 64-entry buffer per tile.

    Every tile starts all black; board cells off any tile are skipped.
    """
    black = sanitize(COLOR_BLACK)
    buffers = [[black] * TILE_COLOR_COUNT for _ in tiles]
    for x in range(board.width):
        for y in range(board.height):
            color = colors.get(x, y)
            if color is None:
                continue
            cell = board.data[x][y]
            if cell is None:
                continue
            offset = cell.x * tiles[cell.index].width + cell.y
            if offset < TILE_COLOR_COUNT:
                buffers[cell.index][offset] = sanitize(color)
    return buffers


def collect_tile_colors(
    board: BoardData,
    tile_index: int,
    width: int,
    tile_colors: Sequence[Color],
    into: ColorBoard,
) -> None:
    """Place one tile's reported colors onto *into* by board coordinate."""
    reverse = board.reverse_data[tile_index]
    for i, color in enumerate(tile_colors):
        x, y = divmod(i, width)
        if x >= len(reverse) or y >= len(reverse[x]):
            continue
        point = reverse[x][y]
        into.set(point.x, point.y, color)
