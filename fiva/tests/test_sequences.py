import numpy as np

from fiva.engine.board import BoardState, to_cell
from fiva.engine.fiva import (
    CompletedFIVA, Direction, FivaTracker, find_axis_fiva, line_through, scan_from, windows_on_axis,
)


def board_with(team, cells):
    board = BoardState()
    for cell in cells:
        board.place(cell, team)
    return board


def test_horizontal_fiva():
    board = board_with(0, [41, 42, 43, 44, 45])
    found = scan_from(board, 43, 0)
    assert [(f.direction, f.cells) for f in found] == [(Direction.HORIZONTAL, (41, 42, 43, 44, 45))]


def test_vertical_fiva():
    cells = [to_cell(r, 6) for r in range(2, 7)]
    board = board_with(1, cells)
    found = scan_from(board, cells[-1], 1)
    assert len(found) == 1 and found[0].direction is Direction.VERTICAL
    assert found[0].cells == tuple(cells)


def test_diagonal_down_fiva():
    cells = [to_cell(1 + i, 2 + i) for i in range(5)]
    board = board_with(0, cells)
    found = scan_from(board, cells[2], 0)
    assert [f.direction for f in found] == [Direction.DIAGONAL_DOWN]


def test_diagonal_up_fiva():
    cells = [to_cell(8 - i, 1 + i) for i in range(5)]
    board = board_with(0, cells)
    found = scan_from(board, cells[0], 0)
    assert [f.direction for f in found] == [Direction.DIAGONAL_UP]
    assert found[0].cells == tuple(sorted(cells))


def test_four_chips_are_not_a_fiva():
    board = board_with(0, [41, 42, 43, 44])
    assert scan_from(board, 44, 0) == []
    board.place(45, 1)
    assert scan_from(board, 44, 0) == []


def test_corner_counts_as_wild():
    board = board_with(0, [1, 2, 3, 4])
    found = scan_from(board, 4, 0)
    assert len(found) == 1
    assert found[0].cells == (0, 1, 2, 3, 4)


def test_corner_is_wild_for_every_team():
    board = board_with(1, [91, 92, 93, 94])
    assert find_axis_fiva(board, 94, Direction.HORIZONTAL, 1) == (90, 91, 92, 93, 94)
    assert find_axis_fiva(board, 94, Direction.HORIZONTAL, 0) is None


def test_line_and_windows():
    assert line_through(45, Direction.HORIZONTAL) == list(range(40, 50))
    assert line_through(0, Direction.DIAGONAL_DOWN) == [i * 11 for i in range(10)]
    assert line_through(90, Direction.DIAGONAL_UP)[0] == 90
    windows = windows_on_axis(45, Direction.HORIZONTAL, through_cell=True)
    assert len(windows) == 5 and all(45 in w for w in windows)
    assert [min(w) for w in windows] == [41, 42, 43, 44, 45]
    assert len(windows_on_axis(45, Direction.HORIZONTAL)) == 6
    # short diagonal near a corner has no full window
    assert windows_on_axis(3, Direction.DIAGONAL_UP) == []


def test_tracker_dedupes_exact_cell_sets():
    tracker = FivaTracker(2)
    board = board_with(0, [1, 2, 3, 4])
    first = tracker.detect_from(board, 4, 0)
    again = tracker.detect_from(board, 4, 0)
    assert len(first) == 1 and again == []
    assert tracker.count_for(0) == 1 and tracker.count_for(1) == 0
    assert all(tracker.is_protected(c) for c in (0, 1, 2, 3, 4))
    assert not tracker.register(CompletedFIVA((0, 1, 2, 3, 4), 0, Direction.HORIZONTAL))


def play_in_order(cells, team=0):
    tracker = FivaTracker(2)
    board = BoardState()
    for cell in cells:
        board.place(cell, team)
        tracker.detect_from(board, cell, team)
    return tracker


def test_extending_a_run_upwards_adds_nothing():
    tracker = play_in_order(range(41, 47))
    assert tracker.count_for(0) == 1
    assert [f.cells for f in tracker.fivas_for(0)] == [(41, 42, 43, 44, 45)]
    assert not tracker.is_protected(46)


def test_extending_a_run_downwards_adds_the_earlier_window():
    tracker = play_in_order([42, 43, 44, 45, 46, 41])
    assert tracker.count_for(0) == 2
    assert [f.cells for f in tracker.fivas_for(0)] == [(42, 43, 44, 45, 46), (41, 42, 43, 44, 45)]


def test_extending_a_corner_run_adds_nothing():
    tracker = play_in_order([1, 2, 3, 4, 5])
    assert [f.cells for f in tracker.fivas_for(0)] == [(0, 1, 2, 3, 4)]


def first_valid_on_line(board, cell, direction, team):
    line = line_through(cell, direction)
    starts = sorted(range(len(line) - 4), key=lambda i: min(line[i:i + 5]))
    for i in starts:
        window = line[i:i + 5]
        if all(board.counts_for_team(c, team) for c in window):
            return tuple(sorted(window))
    return None


def test_tracker_matches_whole_line_reference():
    rng = np.random.default_rng(99)
    lines_with_old_fiva = 0
    for _ in range(60):
        board = BoardState()
        tracker = FivaTracker(2)
        seen = set()
        for cell in rng.permutation(100)[:70]:
            cell, team = int(cell), int(rng.integers(2))
            expected = []
            for d in Direction:
                before = first_valid_on_line(board, cell, d, team)
                if before is not None:
                    lines_with_old_fiva += 1
                board.place(cell, team)
                window = first_valid_on_line(board, cell, d, team)
                board.remove(cell)
                if window is not None and frozenset(window) not in seen:
                    seen.add(frozenset(window))
                    expected.append((d, window))
            board.place(cell, team)
            found = tracker.detect_from(board, cell, team)
            assert [(f.direction, f.cells) for f in found] == expected
            for d in Direction:
                assert find_axis_fiva(board, cell, d, team) == first_valid_on_line(board, cell, d, team)
    assert lines_with_old_fiva > 0
