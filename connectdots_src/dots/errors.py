"""Exceptions raised by the connect dots core."""


class CoordinateOutOfRangeError(IndexError):
    """A cell lookup fell outside the board."""

    def __init__(self, x: int, y: int, size: int) -> None:
        super().__init__(f"Coordinate ({x}, {y}) is outside a {size}x{size} board")
        self.x, self.y, self.size = x, y, size


class InvariantViolationError(RuntimeError):
    """Board, path and connection records disagree; the session state is undefined."""


class LevelError(ValueError):
    """A level could not be decoded. No partial level is produced."""


class InvalidSizeError(LevelError):
    """The level size is not a positive integer."""


class NoAnchorsError(LevelError):
    """The level declares no anchors."""


class UnknownColorError(LevelError):
    """An anchor names a color outside the palette."""


class MalformedLevelError(LevelError):
    """The level source is not valid JSON or does not have the expected shape."""
