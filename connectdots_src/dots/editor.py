"""Drag state machine turning pointer events into path edits."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .errors import InvariantViolationError
from .grid import Color, Coordinate, Dot, Line

if TYPE_CHECKING:
    from .board import Board, Connection, Path
    from .segments import SegmentRegistry

logger = logging.getLogger(__name__)


class DrawAction(Enum):
    NONE = 0
    DRAW_LINE = 1
    ERASE_LINE = 2
    COMPLETE_PATH = 3


class PointerKind(Enum):
    DOWN = 0
    MOVE = 1
    UP = 2


class DragOutcome(Enum):
    """What a pointer-up did to the drag in progress."""

    IGNORED = "ignored"
    COMMITTED = "committed"
    ABANDONED = "abandoned"


@dataclass(frozen=True, slots=True)
class PointerEvent:
    """A pointer event already mapped to a board cell. cell is None outside the grid."""

    kind: PointerKind
    cell: Coordinate | None = None


@dataclass(slots=True)
class DragState:
    """Selection held between pointer-down and pointer-up."""

    source: Dot | None = None
    destination: Dot | None = None
    path: Path | None = None
    color: Color = Color.NO_COLOR
    square: Coordinate | None = None

    @property
    def editing(self) -> bool:
        return self.source is not None

    def reset(self) -> None:
        self.source = None
        self.destination = None
        self.path = None
        self.color = Color.NO_COLOR
        self.square = None


def next_action(
    board: Board,
    from_cell: Coordinate,
    to_cell: Coordinate,
    active_color: Color,
    dest_color: Color,
    path: Path,
    source: Dot,
    destination: Dot | None,
) -> DrawAction:
    """Decide how a hop from from_cell to to_cell edits the active path.

    Reads the board and the path but never mutates them.
    """
    if from_cell != path.tip:
        # the hop does not start at the live tip
        return DrawAction.NONE

    if destination is not None:
        return DrawAction.NONE

    if dest_color == active_color:
        anchor = board.anchor_at(to_cell)
        if anchor is not None and anchor != source and to_cell.is_adjacent(path.tip):
            return DrawAction.COMPLETE_PATH
        if path.contains_line(to_cell, from_cell):
            return DrawAction.ERASE_LINE
        return DrawAction.NONE

    if dest_color is Color.NO_COLOR:
        # only horizontal and vertical unit hops from the tip
        if to_cell.is_adjacent(path.tip):
            return DrawAction.DRAW_LINE
        return DrawAction.NONE

    return DrawAction.NONE


class PathEditor:
    """Interpret a drag gesture as extend, retract or complete edits on one path.

    The editor is Idle until a pointer-down lands on an anchor, then Editing
    until the next pointer-up. A pointer-up without a locked destination
    unwinds every segment of the drag, so an abandoned drag leaves no trace.
    """

    def __init__(self, board: Board, segments: SegmentRegistry) -> None:
        """Create an idle editor over board, reporting segment changes to segments."""
        self.board = board
        self.segments = segments
        self.state = DragState()

    @property
    def editing(self) -> bool:
        return self.state.editing

    def handle(self, event: PointerEvent) -> None:
        """Dispatch a pointer event to the matching handler."""
        if event.kind is PointerKind.DOWN:
            self.pointer_down(event.cell)
        elif event.kind is PointerKind.MOVE:
            self.pointer_move(event.cell)
        else:
            self.pointer_up()

    def pointer_down(self, cell: Coordinate | None) -> bool:
        """Select the anchor under cell. Returns True if a drag started."""
        if cell is None or not self.board.in_bounds(cell):
            return False

        if self.state.editing:
            # a down without the matching up; drop the unfinished drag first
            self._abandon()

        anchor = self.board.anchor_at(cell)
        if anchor is None:
            return False

        conn = self.board.connection_for(anchor.color)
        path = self.board.path_for(anchor)
        if conn.is_connected:
            self._disconnect(conn)

        conn.begin(anchor)
        self.state.source = anchor
        self.state.destination = None
        self.state.path = path
        self.state.color = anchor.color
        self.state.square = cell
        logger.debug("Drag started at %s (%s)", cell, anchor.color.name)
        return True

    def pointer_move(self, cell: Coordinate | None) -> DrawAction:
        """Apply the edit implied by moving the pointer onto cell."""
        state = self.state
        if not state.editing or cell is None or not self.board.in_bounds(cell):
            return DrawAction.NONE
        if cell == state.square:
            return DrawAction.NONE

        path = self.board.path_for(state.source)
        if path is not state.path:
            raise InvariantViolationError(f"Active path for {state.source} was replaced mid-drag")

        action = next_action(
            self.board,
            state.square,
            cell,
            state.color,
            self.board.cell_color(cell),
            path,
            state.source,
            state.destination,
        )
        if action is DrawAction.DRAW_LINE:
            self._add_line(path, path.tip, cell)
        elif action is DrawAction.ERASE_LINE:
            self._remove_line(path, state.square, cell)
        elif action is DrawAction.COMPLETE_PATH:
            state.destination = self.board.anchor_at(cell)
            self._add_line(path, path.tip, cell)
            path.end_anchor = state.destination

        state.square = cell
        return action

    def pointer_up(self) -> DragOutcome:
        """Finish the drag: commit a completed path or unwind an abandoned one."""
        if not self.state.editing:
            return DragOutcome.IGNORED

        if self.state.destination is not None:
            self._commit()
            outcome = DragOutcome.COMMITTED
        else:
            self._abandon()
            outcome = DragOutcome.ABANDONED

        self.state.reset()
        return outcome

    def _add_line(self, path: Path, start: Coordinate, end: Coordinate) -> None:
        line = path.add_line(start, end)
        self.board.set_cell_color(end, line.color)
        self.segments.add(line)

    def _remove_line(self, path: Path, tip: Coordinate, back_to: Coordinate) -> None:
        """Undo the last hop, which went from back_to to tip."""
        if not path.remove_line(back_to, tip):
            raise InvariantViolationError(f"No segment {back_to} -> {tip} to erase")
        self.segments.remove(Line(back_to, tip, path.color))
        if not self.board.is_anchor_cell(tip):
            self.board.set_cell_color(tip, Color.NO_COLOR)

    def _commit(self) -> None:
        source, destination = self.state.source, self.state.destination
        owner = self.state.path
        owner.end_anchor = destination

        mirror = self.board.path_for(destination)
        mirror.reset()
        mirror.end_anchor = source

        self.board.connection_for(source.color).connect(source, destination)
        logger.debug("Connected %s to %s with %d segments", source, destination, len(owner))

    def _abandon(self) -> None:
        """Unwind every segment of the drag in progress in one step."""
        source, path = self.state.source, self.state.path
        cleared = [line.end for line in path.lines if not self.board.is_anchor_cell(line.end)]
        for cell in cleared:
            self.board.set_cell_color(cell, Color.NO_COLOR)
        self.segments.remove_all(path.lines)
        path.reset()
        self.board.connection_for(source.color).disconnect()
        self.state.reset()
        logger.debug("Drag from %s abandoned", source)

    def _disconnect(self, conn: Connection) -> None:
        """Tear down a connected pair so one of its anchors can be redrawn."""
        owner = self.board.path_for(conn.start)
        mirror = self.board.path_for(conn.end)
        if not owner.lines or owner.end_anchor != conn.end:
            raise InvariantViolationError(f"Connected {conn.color.name} pair has no owning path")

        for line in owner.lines:
            if not self.board.is_anchor_cell(line.end):
                self.board.set_cell_color(line.end, Color.NO_COLOR)
        self.segments.remove_all(owner.lines)
        owner.reset()
        mirror.reset()
        conn.disconnect()
