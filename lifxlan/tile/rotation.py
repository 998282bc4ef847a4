"""Tile orientation derived from the accelerometer reading."""

from __future__ import annotations

from enum import IntEnum


class Rotation(IntEnum):
    RIGHT_SIDE_UP = 0
    ROTATE_RIGHT = 1
    ROTATE_LEFT = 2
    FACE_DOWN = 3
    FACE_UP = 4
    UPSIDE_DOWN = 5

    def __str__(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


def parse_rotation(x: int, y: int, z: int) -> Rotation:
    """Pick the orientation from the dominant gravity axis.

    ``(-1, -1, -1)`` is what a tile reports without a reading; it is taken as
    right side up.
    """
    if x == -1 and y == -1 and z == -1:
        return Rotation.RIGHT_SIDE_UP

    abs_x, abs_y, abs_z = abs(x), abs(y), abs(z)
    if abs_x > abs_y and abs_x > abs_z:
        return Rotation.ROTATE_RIGHT if x > 0 else Rotation.ROTATE_LEFT
    if abs_z > abs_x and abs_z > abs_y:
        return Rotation.FACE_DOWN if z > 0 else Rotation.FACE_UP
    if y > 0:
        return Rotation.UPSIDE_DOWN
    return Rotation.RIGHT_SIDE_UP
