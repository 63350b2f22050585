"""Level providers: where the next level comes from when a session advances."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from connectdots_src.util.config import BASE, get_int, get_key

from .level import Level, load_level_file

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class Exhausted:
    """Returned by a provider that has no more levels."""

    def __repr__(self) -> str:
        return "EXHAUSTED"


EXHAUSTED = Exhausted()


class LevelProvider(Protocol):
    def next_level(self) -> Level | Exhausted:
        """Return the next level, or EXHAUSTED. Raises LevelError on a bad level."""
        ...


class SequenceLevelProvider:
    """Serve levels from an in-memory sequence, in order."""

    def __init__(self, levels: Iterable[Level]) -> None:
        self._levels = iter(levels)

    def next_level(self) -> Level | Exhausted:
        return next(self._levels, EXHAUSTED)


class DirectoryLevelProvider:
    """Walk ``<root>/<size>/<n>.json`` level files.

    After ``n.json`` comes ``n+1.json`` of the same size; when that file is
    missing the walk moves to ``0.json`` of the next size, until the maximum
    board size has been searched.
    """

    def __init__(
        self,
        root: str | Path | None = None,
        size: int | None = None,
        index: int = -1,
        max_board_size: int | None = None,
    ) -> None:
        """Position the provider just before level index+1 of the given size."""
        if root is None:
            root = BASE.parent / str(get_key("levels.dir", "data"))
        self.root = Path(root)
        self.size = size if size is not None else get_int("board.default_size", 5)
        self.index = index
        self.max_board_size = (
            max_board_size if max_board_size is not None else get_int("levels.max_board_size", 10)
        )
        self.current_path: Path | None = None

    def level_path(self, size: int, index: int) -> Path:
        return self.root / str(size) / f"{index}.json"

    def next_level(self) -> Level | Exhausted:
        size, index = self.size, self.index + 1
        while True:
            path = self.level_path(size, index)
            logger.debug("Trying to load the level from %s", path)
            if path.is_file():
                break
            if size >= self.max_board_size:
                logger.info("No more level files under %s", self.root)
                return EXHAUSTED
            size, index = size + 1, 0

        level = load_level_file(path)
        self.size, self.index, self.current_path = size, index, path
        logger.debug("Loaded level %s", path)
        return level
