"""Pytest suite for the drag state machine and its decision function."""

from __future__ import annotations

import numpy as np
import pytest

from connectdots_src.dots.board import Board, ConnectionState
from connectdots_src.dots.editor import (
    DragOutcome,
    DrawAction,
    PathEditor,
    PointerEvent,
    PointerKind,
    next_action,
)
from connectdots_src.dots.grid import Color, Coordinate, Dot, Line
from connectdots_src.dots.segments import DeltaKind, SegmentRegistry

# ────────────────────────────── Shared test data ────────────────────────────── #

RED_A = Dot(Coordinate(0, 0), Color.RED)
RED_B = Dot(Coordinate(0, 4), Color.RED)
BLUE_A = Dot(Coordinate(2, 2), Color.BLUE)
BLUE_B = Dot(Coordinate(4, 4), Color.BLUE)

RED_COLUMN = [Coordinate(0, y) for y in range(5)]


def c(x: int, y: int) -> Coordinate:
    return Coordinate(x, y)


@pytest.fixture
def board() -> Board:
    board = Board(5)
    board.init_anchors([RED_A, RED_B, BLUE_A, BLUE_B])
    return board


@pytest.fixture
def segments() -> SegmentRegistry:
    return SegmentRegistry()


@pytest.fixture
def editor(board: Board, segments: SegmentRegistry) -> PathEditor:
    return PathEditor(board, segments)


def drag(editor: PathEditor, cells: list[Coordinate]) -> list[DrawAction]:
    """Press on the first cell and move through the rest. Returns the move actions."""
    assert editor.pointer_down(cells[0])
    return [editor.pointer_move(cell) for cell in cells[1:]]


# ─────────────────────────── Decision function ──────────────────────────── #


def _decide(board: Board, path_cells: list[Coordinate], to_cell: Coordinate, **kw) -> DrawAction:
    """Build a red path through path_cells on board, then ask for the hop to to_cell."""
    path = board.path_for(RED_A)
    for a, b in zip(path_cells, path_cells[1:]):
        path.add_line(a, b)
        board.set_cell_color(b, Color.RED)
    from_cell = kw.pop("from_cell", path.tip)
    return next_action(
        board,
        from_cell,
        to_cell,
        Color.RED,
        board.cell_color(to_cell),
        path,
        RED_A,
        kw.pop("destination", None),
    )


@pytest.mark.parametrize(
    "path_cells, to_cell, expected",
    [
        ([c(0, 0)], c(0, 1), DrawAction.DRAW_LINE),
        ([c(0, 0)], c(1, 0), DrawAction.DRAW_LINE),
        ([c(0, 0)], c(1, 1), DrawAction.NONE),  # diagonal
        ([c(0, 0)], c(0, 2), DrawAction.NONE),  # jump
        ([c(0, 0), c(1, 0), c(2, 0), c(2, 1)], c(2, 2), DrawAction.NONE),  # blue anchor
        ([c(0, 0), c(0, 1)], c(0, 0), DrawAction.ERASE_LINE),
        ([c(0, 0), c(0, 1), c(0, 2), c(0, 3)], c(0, 4), DrawAction.COMPLETE_PATH),
        ([c(0, 0), c(0, 1), c(0, 2)], c(0, 4), DrawAction.NONE),  # twin not adjacent
        # revisiting an interior cell of the same path
        ([c(0, 0), c(0, 1), c(1, 1), c(1, 0)], c(0, 0), DrawAction.NONE),
        ([c(0, 0), c(0, 1), c(1, 1), c(1, 0)], c(0, 1), DrawAction.NONE),
    ],
)
def test_next_action_table(
    board: Board, path_cells: list[Coordinate], to_cell: Coordinate, expected: DrawAction
) -> None:
    assert _decide(board, path_cells, to_cell) is expected


def test_next_action_ignores_hops_not_starting_at_tip(board: Board) -> None:
    action = _decide(board, [c(0, 0), c(0, 1)], c(1, 2), from_cell=c(1, 1))
    assert action is DrawAction.NONE
    # an empty path's tip is its start anchor
    assert _decide(board, [c(0, 0)], c(0, 1), from_cell=c(3, 3)) is DrawAction.NONE


def test_next_action_after_lock_is_none(board: Board) -> None:
    cells = [c(0, 0), c(0, 1), c(0, 2), c(0, 3), c(0, 4)]
    for to_cell in (c(1, 4), c(0, 3), c(1, 3)):
        fresh = Board(5)
        fresh.init_anchors([RED_A, RED_B, BLUE_A, BLUE_B])
        assert _decide(fresh, cells, to_cell, destination=RED_B) is DrawAction.NONE


def test_next_action_is_pure(board: Board) -> None:
    path = board.path_for(RED_A)
    path.add_line(c(0, 0), c(0, 1))
    board.set_cell_color(c(0, 1), Color.RED)
    grid_before = board.grid
    lines_before = list(path.lines)

    args = (board, c(0, 1), c(0, 2), Color.RED, Color.NO_COLOR, path, RED_A, None)
    results = {next_action(*args) for _ in range(5)}

    assert results == {DrawAction.DRAW_LINE}
    assert np.array_equal(board.grid, grid_before)
    assert path.lines == lines_before


# ───────────────────────────── State machine ────────────────────────────── #


def test_pointer_down_on_empty_or_covered_cell_is_noop(editor: PathEditor, board: Board) -> None:
    assert not editor.pointer_down(c(3, 3))
    assert not editor.pointer_down(None)
    assert not editor.pointer_down(c(9, 9))
    assert not editor.editing

    board.set_color(1, 0, Color.RED)  # segment cell, not an anchor
    assert not editor.pointer_down(c(1, 0))
    assert not editor.editing


def test_moves_while_idle_are_ignored(editor: PathEditor, board: Board) -> None:
    grid = board.grid
    assert editor.pointer_move(c(0, 1)) is DrawAction.NONE
    assert editor.pointer_up() is DragOutcome.IGNORED
    assert np.array_equal(board.grid, grid)


def test_draw_and_complete(editor: PathEditor, board: Board, segments: SegmentRegistry) -> None:
    actions = drag(editor, RED_COLUMN)
    assert actions == [DrawAction.DRAW_LINE] * 3 + [DrawAction.COMPLETE_PATH]
    assert editor.state.destination == RED_B

    assert editor.pointer_up() is DragOutcome.COMMITTED
    assert not editor.editing

    owner = board.path_for(RED_A)
    mirror = board.path_for(RED_B)
    assert [(line.start, line.end) for line in owner.lines] == list(zip(RED_COLUMN, RED_COLUMN[1:]))
    assert owner.end_anchor == RED_B
    assert mirror.lines == [] and mirror.end_anchor == RED_A

    conn = board.connection_for(Color.RED)
    assert conn.state is ConnectionState.CONNECTED
    assert (conn.start, conn.end) == (RED_A, RED_B)

    assert board.coverage() == 5 + 2  # red column plus the blue anchors
    assert len(segments) == 4


def test_moves_after_lock_do_nothing(editor: PathEditor, board: Board) -> None:
    drag(editor, RED_COLUMN)
    grid = board.grid
    for cell in (c(1, 4), c(0, 3), c(0, 2), c(1, 3)):
        assert editor.pointer_move(cell) is DrawAction.NONE
    assert np.array_equal(board.grid, grid)
    assert len(board.path_for(RED_A)) == 4


def test_draw_then_retrace_restores_state(editor: PathEditor, board: Board) -> None:
    grid = board.grid
    editor.pointer_down(c(0, 0))
    assert editor.pointer_move(c(1, 0)) is DrawAction.DRAW_LINE
    assert board.color_at(1, 0) is Color.RED

    assert editor.pointer_move(c(0, 0)) is DrawAction.ERASE_LINE
    assert np.array_equal(board.grid, grid)
    assert board.path_for(RED_A).lines == []


def test_retract_several_steps(editor: PathEditor, board: Board) -> None:
    drag(editor, [c(0, 0), c(1, 0), c(1, 1), c(2, 1)])
    assert editor.pointer_move(c(1, 1)) is DrawAction.ERASE_LINE
    assert editor.pointer_move(c(1, 0)) is DrawAction.ERASE_LINE
    path = board.path_for(RED_A)
    assert path.lines == [Line(c(0, 0), c(1, 0), Color.RED)]
    assert board.color_at(1, 1) is Color.NO_COLOR
    assert board.color_at(2, 1) is Color.NO_COLOR
    assert board.color_at(1, 0) is Color.RED


def test_abandoned_drag_leaves_no_trace(
    editor: PathEditor, board: Board, segments: SegmentRegistry
) -> None:
    grid = board.grid
    drag(editor, RED_COLUMN[:4])
    assert board.coverage() == 7

    assert editor.pointer_up() is DragOutcome.ABANDONED
    assert np.array_equal(board.grid, grid)
    assert board.path_for(RED_A).lines == []
    assert board.connection_for(Color.RED).state is ConnectionState.UNCONNECTED
    assert len(segments) == 0

    deltas = segments.drain()
    assert [d.kind for d in deltas] == [DeltaKind.ADD] * 3 + [DeltaKind.REMOVE] * 3


def test_tracked_cell_recovers_after_stray_move(editor: PathEditor, board: Board) -> None:
    drag(editor, [c(0, 0), c(1, 0)])
    assert editor.pointer_move(c(3, 3)) is DrawAction.NONE  # jumped away from the tip
    assert editor.pointer_move(c(2, 0)) is DrawAction.NONE  # stale hop
    assert editor.pointer_move(c(1, 0)) is DrawAction.NONE  # back on the tip
    assert editor.pointer_move(c(2, 0)) is DrawAction.DRAW_LINE
    assert board.path_for(RED_A).tip == c(2, 0)


def test_stray_move_before_first_segment_draws_nothing(
    editor: PathEditor, board: Board, segments: SegmentRegistry
) -> None:
    editor.pointer_down(c(0, 0))
    assert editor.pointer_move(c(3, 3)) is DrawAction.NONE
    assert editor.pointer_move(c(0, 1)) is DrawAction.NONE  # next to the anchor, not the hop's start
    assert board.path_for(RED_A).lines == []
    assert board.color_at(0, 1) is Color.NO_COLOR
    assert len(segments) == 0

    assert editor.pointer_move(c(0, 0)) is DrawAction.NONE  # back on the anchor
    assert editor.pointer_move(c(0, 1)) is DrawAction.DRAW_LINE
    lines = board.path_for(RED_A).lines
    assert lines == [Line(c(0, 0), c(0, 1), Color.RED)]
    assert all(line.is_valid() for line in lines)


def test_stray_move_then_twin_does_not_complete(
    editor: PathEditor, board: Board, segments: SegmentRegistry
) -> None:
    green_a, green_b = Dot(c(4, 0), Color.GREEN), Dot(c(4, 1), Color.GREEN)
    board.init_anchors([green_a, green_b])

    editor.pointer_down(c(4, 0))
    assert editor.pointer_move(c(1, 3)) is DrawAction.NONE
    assert editor.pointer_move(c(4, 1)) is DrawAction.NONE
    assert editor.state.destination is None
    assert board.path_for(green_a).lines == []
    assert len(segments) == 0

    assert editor.pointer_move(c(4, 0)) is DrawAction.NONE
    assert editor.pointer_move(c(4, 1)) is DrawAction.COMPLETE_PATH
    assert board.path_for(green_a).lines == [Line(c(4, 0), c(4, 1), Color.GREEN)]
    assert editor.pointer_up() is DragOutcome.COMMITTED


def test_redrawing_a_connected_pair_from_its_other_end(editor: PathEditor, board: Board) -> None:
    drag(editor, RED_COLUMN)
    editor.pointer_up()

    # pressing the end anchor tears the connection down
    assert editor.pointer_down(c(0, 4))
    assert editor.state.source == RED_B
    assert editor.state.path is board.path_for(RED_B)
    for y in (1, 2, 3):
        assert board.color_at(0, y) is Color.NO_COLOR
    assert board.color_at(0, 0) is Color.RED
    assert board.color_at(0, 4) is Color.RED
    assert board.path_for(RED_A).lines == []
    assert board.path_for(RED_A).end_anchor is None

    actions = drag(editor, list(reversed(RED_COLUMN)))
    assert actions[-1] is DrawAction.COMPLETE_PATH
    editor.pointer_up()
    conn = board.connection_for(Color.RED)
    assert (conn.start, conn.end) == (RED_B, RED_A)
    assert len(board.path_for(RED_B)) == 4


def test_pressing_connected_pair_then_releasing_clears_it(editor: PathEditor, board: Board) -> None:
    drag(editor, RED_COLUMN)
    editor.pointer_up()
    editor.pointer_down(c(0, 0))
    editor.pointer_up()
    assert board.coverage() == 4
    assert board.connection_for(Color.RED).state is ConnectionState.UNCONNECTED


def test_second_down_abandons_unfinished_drag(editor: PathEditor, board: Board) -> None:
    drag(editor, [c(0, 0), c(1, 0), c(2, 0)])
    assert editor.pointer_down(c(2, 2))
    assert editor.state.source == BLUE_A
    assert board.color_at(1, 0) is Color.NO_COLOR
    assert board.color_at(2, 0) is Color.NO_COLOR
    assert board.path_for(RED_A).lines == []


def test_paths_do_not_cross_other_colors(editor: PathEditor, board: Board) -> None:
    drag(editor, [c(2, 2), c(2, 1), c(1, 1)])
    editor.pointer_up()  # abandoned, blue cleared
    drag(editor, [c(2, 2), c(3, 2)])
    editor.pointer_down(c(0, 0))  # abandons blue
    assert drag(editor, [c(0, 0), c(1, 0), c(2, 0), c(2, 1)])[-1] is DrawAction.DRAW_LINE
    assert editor.pointer_move(c(2, 2)) is DrawAction.NONE


def test_handle_dispatches_events(editor: PathEditor, board: Board) -> None:
    editor.handle(PointerEvent(PointerKind.DOWN, c(0, 0)))
    assert editor.state.source == RED_A
    editor.handle(PointerEvent(PointerKind.MOVE, c(0, 1)))
    assert board.path_for(RED_A).tip == c(0, 1)
    editor.handle(PointerEvent(PointerKind.MOVE, None))
    assert editor.state.square == c(0, 1)
    editor.handle(PointerEvent(PointerKind.UP))
    assert not editor.editing
    assert board.path_for(RED_A).lines == []
