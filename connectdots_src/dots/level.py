"""Level value and its decoders (JSON level files and an ASCII notation)."""

from __future__ import annotations

import json
from collections import Counter, defaultdict
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidSizeError, MalformedLevelError, NoAnchorsError, UnknownColorError
from .grid import COLOR_NAMES, COLOR_SYMBOLS, Color, Coordinate, Dot

DIFFICULTIES: tuple[int, ...] = (0, 1, 2)  # easy, intermediate, advanced


@dataclass(frozen=True, slots=True)
class Level:
    """Board size plus the ordered anchor list of one puzzle."""

    size: int
    anchors: tuple[Dot, ...]
    difficulty: int | None = None

    def __post_init__(self) -> None:
        """Reject levels the board cannot be seeded from."""
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
            raise InvalidSizeError(f"Invalid value for size: {self.size!r}")
        if not self.anchors:
            raise NoAnchorsError("No dots found in the level")
        _validate_anchors(self.size, self.anchors)

    @property
    def colors(self) -> list[Color]:
        """Return the distinct anchor colors in first-seen order."""
        return list(dict.fromkeys(dot.color for dot in self.anchors))


def _validate_anchors(size: int, anchors: tuple[Dot, ...]) -> None:
    seen: set[Coordinate] = set()
    for dot in anchors:
        if not dot.location.in_bounds(size):
            raise MalformedLevelError(f"Dot at {dot.location} lies outside a {size}x{size} board")
        if dot.location in seen:
            raise MalformedLevelError(f"Two dots share the cell {dot.location}")
        seen.add(dot.location)

    for color, count in Counter(dot.color for dot in anchors).items():
        if count != 2:
            raise MalformedLevelError(
                f"Color '{color.name.lower()}' appears {count} times (should appear exactly twice)"
            )


def _int_field(raw: dict, key: str) -> int:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedLevelError(f"Field '{key}' must be an integer, got {value!r}")
    return value


def load_level(data: str | bytes) -> Level:
    """Decode a JSON level blob.

    The blob looks like ``{"size": 5, "difficulty": 0, "dots": [{"x": 0, "y": 0,
    "color": "red"}, ...]}``. Raises a LevelError subclass on any problem.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedLevelError(f"Level is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise MalformedLevelError("Level must be a JSON object")

    size = raw.get("size")
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise InvalidSizeError(f"Invalid value for size: {size!r}")

    difficulty = raw.get("difficulty")
    if difficulty is not None and difficulty not in DIFFICULTIES:
        raise MalformedLevelError(f"Invalid value for difficulty: {difficulty!r}")

    dots = raw.get("dots")
    if dots is None or dots == []:
        raise NoAnchorsError("No dots found in the level")
    if not isinstance(dots, list):
        raise MalformedLevelError("Field 'dots' must be a list")

    anchors: list[Dot] = []
    for entry in dots:
        if not isinstance(entry, dict):
            raise MalformedLevelError(f"Dot entry must be an object, got {entry!r}")
        name = entry.get("color")
        color = COLOR_NAMES.get(name) if isinstance(name, str) else None
        if color is None:
            raise UnknownColorError(f"Unknown dot color: {name!r}")
        anchors.append(Dot(Coordinate(_int_field(entry, "x"), _int_field(entry, "y")), color))

    return Level(size, tuple(anchors), difficulty)


def load_level_file(path: str | Path) -> Level:
    """Read and decode a JSON level file."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise MalformedLevelError(f"Cannot read level file {path}: {e}") from e
    return load_level(data)


def parse_ascii_level(board_str: str) -> Level:
    """Build a level from rows of color symbols, '.' marking empty cells.

    Symbols are the upper-case keys of COLOR_SYMBOLS, for example::

        R...R
        .....
        G.B.G
        .....
        B....
    """
    rows: list[str] = [line.strip() for line in board_str.strip("\n").splitlines() if line.strip()]
    if not rows:
        raise InvalidSizeError("Empty board")
    if any(len(r) != len(rows) for r in rows):
        raise MalformedLevelError("Board must be square")

    occurrences: dict[str, list[Coordinate]] = defaultdict(list)
    anchors: list[Dot] = []
    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            if ch == ".":
                continue
            color = COLOR_SYMBOLS.get(ch)
            if color is None:
                raise UnknownColorError(f"Unknown color symbol '{ch}'")
            occurrences[ch].append(Coordinate(x, y))
            anchors.append(Dot(Coordinate(x, y), color))

    for sym, coords in occurrences.items():
        if len(coords) != 2:
            raise MalformedLevelError(
                f"Symbol '{sym}' appears {len(coords)} times (should appear exactly twice)"
            )

    return Level(len(rows), tuple(anchors))
