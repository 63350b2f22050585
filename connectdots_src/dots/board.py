"""Board state: per-cell colors, per-anchor paths and per-color connections."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from .errors import CoordinateOutOfRangeError, InvalidSizeError, InvariantViolationError
from .grid import COLOR_SYMBOLS, NO_COLOR_CODE, Color, Coordinate, Dot, Line

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


class Path:
    """Ordered segments drawn from one anchor, in drag order."""

    def __init__(self, start_anchor: Dot, end_anchor: Dot | None = None) -> None:
        """Create an empty path starting at start_anchor."""
        self.start_anchor = start_anchor
        self.end_anchor = end_anchor
        self.lines: list[Line] = []

    @property
    def color(self) -> Color:
        return self.start_anchor.color

    @property
    def tip(self) -> Coordinate:
        """Return the cell reached by the last segment, or the start anchor's cell."""
        if self.lines:
            return self.lines[-1].end
        return self.start_anchor.location

    def is_connected(self) -> bool:
        return self.end_anchor is not None

    def add_line(self, start: Coordinate, end: Coordinate) -> Line:
        """Append a segment in the path's color. Legality is the caller's concern."""
        line = Line(start, end, self.color)
        self.lines.append(line)
        return line

    def remove_line(self, start: Coordinate, end: Coordinate) -> bool:
        """Remove the segment going exactly from start to end. Returns True if found."""
        for i, line in enumerate(self.lines):
            if line.start == start and line.end == end:
                del self.lines[i]
                return True
        return False

    def contains_line(self, start: Coordinate, end: Coordinate) -> bool:
        """Return True if a segment going exactly from start to end is stored."""
        return any(line.start == start and line.end == end for line in self.lines)

    def reset(self) -> None:
        """Drop every segment and the end anchor."""
        self.lines = []
        self.end_anchor = None

    def __len__(self) -> int:
        return len(self.lines)

    def __repr__(self) -> str:
        return f"Path(start={self.start_anchor}, end={self.end_anchor}, lines={len(self.lines)})"


class ConnectionState(Enum):
    UNCONNECTED = "unconnected"
    DRAWING = "drawing"
    CONNECTED = "connected"


@dataclass(slots=True)
class Connection:
    """The pair of same-colored anchors and whether a path joins them.

    While DRAWING, start is the anchor being dragged from. While CONNECTED,
    start owns the segments and end is the anchor they reach.
    """

    color: Color
    anchors: list[Dot] = field(default_factory=list)
    state: ConnectionState = ConnectionState.UNCONNECTED
    start: Dot | None = None
    end: Dot | None = None

    def twin(self, anchor: Dot) -> Dot | None:
        """Return the other anchor of the pair, if it has been seeded."""
        return next((a for a in self.anchors if a != anchor), None)

    def begin(self, anchor: Dot) -> None:
        self.state = ConnectionState.DRAWING
        self.start, self.end = anchor, None

    def connect(self, start: Dot, end: Dot) -> None:
        self.state = ConnectionState.CONNECTED
        self.start, self.end = start, end

    def disconnect(self) -> None:
        self.state = ConnectionState.UNCONNECTED
        self.start = self.end = None

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED


class Board:
    """Square grid of cell colors plus the path registry keyed by anchor."""

    def __init__(self, size: int) -> None:
        """Create an empty size x size board."""
        if size <= 0:
            raise InvalidSizeError(f"Board size must be positive, got {size}")
        self.size = size
        self._colors: np.ndarray = np.full((size, size), NO_COLOR_CODE, dtype=np.int8)
        self._paths: dict[Dot, Path] = {}
        self._connections: dict[Color, Connection] = {}

    # ── cell access ──────────────────────────────────────────────────────── #

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.size and 0 <= y < self.size):
            raise CoordinateOutOfRangeError(x, y, self.size)

    def color_at(self, x: int, y: int) -> Color:
        """Return the color of cell (x, y)."""
        self._check(x, y)
        return Color(int(self._colors[y, x]))

    def set_color(self, x: int, y: int, color: Color) -> None:
        """Set the color of cell (x, y)."""
        self._check(x, y)
        self._colors[y, x] = color.code

    def cell_color(self, c: Coordinate) -> Color:
        return self.color_at(c.x, c.y)

    def set_cell_color(self, c: Coordinate, color: Color) -> None:
        self.set_color(c.x, c.y, color)

    def in_bounds(self, c: Coordinate) -> bool:
        return c.in_bounds(self.size)

    # ── anchors and paths ────────────────────────────────────────────────── #

    def init_anchor(self, dot: Dot) -> None:
        """Register a fresh empty path for dot and color its cell."""
        self._check(dot.location.x, dot.location.y)
        if dot.color is Color.NO_COLOR:
            raise ValueError("An anchor needs a palette color")

        conn = self._connections.setdefault(dot.color, Connection(dot.color))
        if dot not in conn.anchors:
            if len(conn.anchors) == 2:
                raise InvariantViolationError(
                    f"Color {dot.color.name} already has two anchors: {conn.anchors}"
                )
            conn.anchors.append(dot)

        self._paths[dot] = Path(dot)
        self.set_cell_color(dot.location, dot.color)

    def init_anchors(self, dots: Iterable[Dot]) -> None:
        for dot in dots:
            self.init_anchor(dot)

    def is_anchor(self, dot: Dot) -> bool:
        return dot in self._paths

    def is_anchor_cell(self, c: Coordinate) -> bool:
        """Return True if any anchor sits on cell c."""
        return self.anchor_at(c) is not None

    def anchor_at(self, c: Coordinate) -> Dot | None:
        """Return the anchor on cell c, or None if the cell holds none."""
        color = self.cell_color(c)
        if color is Color.NO_COLOR:
            return None
        dot = Dot(c, color)
        return dot if dot in self._paths else None

    def path_for(self, dot: Dot) -> Path:
        """Return the path record of an anchor."""
        try:
            return self._paths[dot]
        except KeyError:
            raise InvariantViolationError(f"No path registered for anchor {dot}") from None

    def connection_for(self, color: Color) -> Connection:
        """Return the connection record of a color."""
        try:
            return self._connections[color]
        except KeyError:
            raise InvariantViolationError(f"No connection registered for {color.name}") from None

    @property
    def paths(self) -> Mapping[Dot, Path]:
        return self._paths

    @property
    def connections(self) -> Mapping[Color, Connection]:
        return self._connections

    # ── whole-board operations ───────────────────────────────────────────── #

    def clear(self) -> None:
        """Drop every path and connection and reset every cell."""
        self._paths.clear()
        self._connections.clear()
        self._colors.fill(NO_COLOR_CODE)

    def coverage(self) -> int:
        """Return the number of cells holding an anchor or a segment."""
        return int(np.count_nonzero(self._colors != NO_COLOR_CODE))

    def cells(self) -> Iterator[Coordinate]:
        """Yield every coordinate in row-major order."""
        for y in range(self.size):
            for x in range(self.size):
                yield Coordinate(x, y)

    @property
    def grid(self) -> np.ndarray:
        """Return a copy of the color codes, indexed [y, x]."""
        return self._colors.copy()

    def board_str(self) -> str:
        """Return a bordered text view: anchors in upper case, segments in lower case."""

        def cell(token: str) -> str:
            return f"{token:>3}"

        top_line = "+" + "-" * (self.size * 4 - 1) + "+"
        lines = [top_line]
        for y in range(self.size):
            row_cells: list[str] = []
            for x in range(self.size):
                c = Coordinate(x, y)
                color = self.cell_color(c)
                if color is Color.NO_COLOR:
                    row_cells.append(cell("."))
                elif self.is_anchor_cell(c):
                    row_cells.append(cell(_symbol(color)))
                else:
                    row_cells.append(cell(_symbol(color).lower()))
            lines.append("|" + " ".join(row_cells) + "|")
        lines.append(top_line)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.board_str()

    def __repr__(self) -> str:
        return f"Board(size={self.size}, anchors={len(self._paths)})"


def _symbol(color: Color) -> str:
    return next(s for s, c in COLOR_SYMBOLS.items() if c is color)
