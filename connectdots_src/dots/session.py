"""Game session: one board, one drag editor, and the move/coverage bookkeeping."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from .board import Board
from .editor import DragOutcome, PathEditor, PointerEvent, PointerKind
from .errors import LevelError
from .levels import EXHAUSTED, Exhausted
from .segments import SegmentRegistry

if TYPE_CHECKING:
    from collections.abc import Callable

    from .grid import Coordinate
    from .level import Level
    from .levels import LevelProvider
    from .segments import SegmentDelta

logger = logging.getLogger(__name__)


class AdvanceResult(Enum):
    ADVANCED = "advanced"
    EXHAUSTED = "exhausted"


class GameSession:
    """Play one level at a time.

    coverage is the raw number of covered cells; the level is completed when
    a committed drag leaves every cell of the board covered. on_completed is
    called once per completion, and again only after repeat() or advance().
    """

    def __init__(
        self,
        level: Level,
        provider: LevelProvider | None = None,
        on_completed: Callable[[GameSession], None] | None = None,
    ) -> None:
        """Start a session on level. provider supplies the levels after it."""
        self.provider = provider
        self.on_completed = on_completed
        self.segments = SegmentRegistry()
        self.level: Level = level
        self.board: Board = Board(level.size)
        self.editor = PathEditor(self.board, self.segments)
        self.moves = 0
        self.coverage = 0
        self.completed = False
        self.finished = False
        self._seed(level)

    @classmethod
    def from_provider(
        cls,
        provider: LevelProvider,
        on_completed: Callable[[GameSession], None] | None = None,
    ) -> GameSession:
        """Start a session on the provider's first level."""
        level = provider.next_level()
        if isinstance(level, Exhausted):
            raise LevelError("The level provider has no levels")
        return cls(level, provider, on_completed)

    def _seed(self, level: Level) -> None:
        if self.board.size != level.size:
            self.board = Board(level.size)
            self.editor = PathEditor(self.board, self.segments)
        else:
            self.board.clear()
            self.editor.state.reset()
        self.level = level
        self.board.init_anchors(level.anchors)
        self.moves = 0
        self.completed = False
        self.coverage = self.board.coverage()

    # ── pointer input ────────────────────────────────────────────────────── #

    def handle(self, event: PointerEvent) -> None:
        """Process one pointer event to completion."""
        if event.kind is PointerKind.DOWN:
            self.pointer_down(event.cell)
        elif event.kind is PointerKind.MOVE:
            self.pointer_move(event.cell)
        else:
            self.pointer_up()

    def pointer_down(self, cell: Coordinate | None) -> None:
        if self.finished:
            return
        self.editor.pointer_down(cell)
        self.coverage = self.board.coverage()

    def pointer_move(self, cell: Coordinate | None) -> None:
        if self.finished:
            return
        self.editor.pointer_move(cell)
        self.coverage = self.board.coverage()

    def pointer_up(self) -> None:
        if self.finished:
            return
        outcome = self.editor.pointer_up()
        self.coverage = self.board.coverage()
        if outcome is DragOutcome.COMMITTED:
            self.moves += 1
            if self.coverage == self.area and not self.completed:
                self.completed = True
                logger.info("Level completed in %d moves", self.moves)
                if self.on_completed is not None:
                    self.on_completed(self)

    # ── derived metrics ──────────────────────────────────────────────────── #

    @property
    def area(self) -> int:
        return self.board.size * self.board.size

    @property
    def coverage_percent(self) -> int:
        """Return the share of non-anchor cells covered by segments, 0 to 100."""
        anchors = len(self.level.anchors)
        free = self.area - anchors
        if free <= 0:
            return 100
        return max(0, int((self.coverage - anchors) / free * 100.0))

    def drain_segment_deltas(self) -> list[SegmentDelta]:
        """Return the segment additions and removals since the last call."""
        return self.segments.drain()

    # ── level transitions ────────────────────────────────────────────────── #

    def repeat(self) -> None:
        """Restart the current level from scratch."""
        self.segments.reset()
        self._seed(self.level)
        self.finished = False
        logger.debug("Level repeated")

    def advance(self) -> AdvanceResult:
        """Move on to the provider's next level.

        A LevelError from the provider leaves the session untouched.
        """
        level = self.provider.next_level() if self.provider is not None else EXHAUSTED

        self.segments.reset()
        self.editor.state.reset()
        if isinstance(level, Exhausted):
            self.board.clear()
            self.moves = 0
            self.completed = False
            self.coverage = 0
            self.finished = True
            logger.info("No more levels to play")
            return AdvanceResult.EXHAUSTED

        self._seed(level)
        logger.debug("Advanced to a %dx%d level", level.size, level.size)
        return AdvanceResult.ADVANCED
