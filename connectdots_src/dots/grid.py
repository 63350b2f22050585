"""Value types shared by the board, the paths and the drag editor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class Color(IntEnum):
    """Fixed anchor palette. NO_COLOR marks an uncovered cell."""

    NO_COLOR = -1
    RED = 0
    GREEN = 1
    BLUE = 2
    YELLOW = 3
    MAGENTA = 4
    PINK = 5
    ORANGE = 6
    BROWN = 7
    WHITE = 8
    BLACK = 9

    @property
    def code(self) -> np.int8:
        """Return the int8 code stored in the board grid."""
        return np.int8(self.value)


NO_COLOR_CODE: np.int8 = Color.NO_COLOR.code

COLOR_NAMES: dict[str, Color] = {c.name.lower(): c for c in Color if c is not Color.NO_COLOR}

# one symbol per palette color for the ASCII level notation
COLOR_SYMBOLS: dict[str, Color] = {
    "R": Color.RED,
    "G": Color.GREEN,
    "B": Color.BLUE,
    "Y": Color.YELLOW,
    "M": Color.MAGENTA,
    "P": Color.PINK,
    "O": Color.ORANGE,
    "N": Color.BROWN,
    "W": Color.WHITE,
    "K": Color.BLACK,
}


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Immutable grid coordinate: x is the column, y the row."""

    x: int
    y: int

    def manhattan(self, other: Coordinate) -> int:
        """Return the Manhattan distance to another coordinate."""
        return abs(self.x - other.x) + abs(self.y - other.y)

    def is_adjacent(self, other: Coordinate) -> bool:
        """Return True if other is exactly one axis-aligned step away."""
        return self.manhattan(other) == 1

    def in_bounds(self, size: int) -> bool:
        """Return True if the coordinate lies on a size x size board."""
        return 0 <= self.x < size and 0 <= self.y < size


@dataclass(frozen=True, slots=True)
class Dot:
    """An anchor: a colored endpoint at a fixed location."""

    location: Coordinate
    color: Color


@dataclass(frozen=True, slots=True)
class Line:
    """A directed segment between two neighbouring cells."""

    start: Coordinate
    end: Coordinate
    color: Color

    def is_valid(self) -> bool:
        """Return True if the segment spans exactly one cell along one axis."""
        return self.start.is_adjacent(self.end)
