# fiva/engine/fiva.py
"""
FIVA (five-in-a-row) detection.

After every chip placement the four full lines through the placed cell are
scanned for windows of 5 consecutive cells in which every cell is a corner or
holds the acting team's chip. Per line the first valid window (lowest cell index
first) is the candidate; it is recorded unless the exact same cell set is
already recorded.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .board import BoardState, in_bounds, to_cell, to_rc
from .board_layout import BOARD_SIZE

logger = logging.getLogger(__name__)

FIVA_LENGTH = 5


class Direction(str, Enum):
    HORIZONTAL = "H"
    VERTICAL = "V"
    DIAGONAL_DOWN = "D1"   # down-right
    DIAGONAL_UP = "D2"     # up-right

    @property
    def step(self) -> Tuple[int, int]:
        return _STEPS[self]


_STEPS = {
    Direction.HORIZONTAL: (0, 1),
    Direction.VERTICAL: (1, 0),
    Direction.DIAGONAL_DOWN: (1, 1),
    Direction.DIAGONAL_UP: (-1, 1),
}


@dataclass(frozen=True)
class CompletedFIVA:
    cells: Tuple[int, ...]
    team: int
    direction: Direction

    @property
    def cell_set(self) -> FrozenSet[int]:
        return frozenset(self.cells)

    def to_dict(self) -> Dict[str, object]:
        return {"cells": list(self.cells), "team": self.team, "direction": self.direction.value}


def _on_board(r: int, c: int) -> bool:
    return 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE


def line_through(cell: int, direction: Direction) -> List[int]:
    """All cells of the full row/column/diagonal through `cell`, in walking order."""
    dr, dc = direction.step
    r, c = to_rc(cell)
    while _on_board(r - dr, c - dc):
        r -= dr; c -= dc
    line: List[int] = []
    while _on_board(r, c):
        line.append(to_cell(r, c))
        r += dr; c += dc
    return line


def windows_on_axis(cell: int, direction: Direction, through_cell: bool = False) -> List[Tuple[int, ...]]:
    """5-cell windows along the full line through `cell`, ordered by their lowest cell index.

    through_cell=True keeps only the (at most 5) windows that contain `cell`.
    """
    line = line_through(cell, direction)
    windows = [tuple(line[i:i + FIVA_LENGTH]) for i in range(len(line) - FIVA_LENGTH + 1)]
    if through_cell:
        windows = [w for w in windows if cell in w]
    return sorted(windows, key=min)


def window_is_fiva(board: BoardState, window: Iterable[int], team: int) -> bool:
    return all(board.counts_for_team(cell, team) for cell in window)


def find_axis_fiva(
    board: BoardState,
    cell: int,
    direction: Direction,
    team: int,
) -> Optional[Tuple[int, ...]]:
    """First valid window on the whole line through `cell`, or None.

    The window need not contain `cell`: on a line that already holds a FIVA the
    earlier window wins, so extending a recorded run adds nothing new.
    """
    for window in windows_on_axis(cell, direction):
        if window_is_fiva(board, window, team):
            return tuple(sorted(window))
    return None


def scan_from(board: BoardState, cell: int, team: int) -> List[CompletedFIVA]:
    """Candidate FIVAs (one per axis at most) for a chip of `team` at `cell`. Pure."""
    found: List[CompletedFIVA] = []
    for direction in Direction:
        cells = find_axis_fiva(board, cell, direction, team)
        if cells is not None:
            found.append(CompletedFIVA(cells=cells, team=team, direction=direction))
    return found


class FivaTracker:
    """Completed FIVAs of one game, per-team counts and the removal-proof cells."""

    def __init__(self, teams: int = 2):
        self.completed: List[CompletedFIVA] = []
        self.counts: Dict[int, int] = {}
        self.protected: Set[int] = set()
        self._index: Set[FrozenSet[int]] = set()
        self.reset(teams)

    def reset(self, teams: int) -> None:
        self.completed = []
        self.counts = {team: 0 for team in range(int(teams))}
        self.protected = set()
        self._index = set()

    def register(self, fiva: CompletedFIVA) -> bool:
        key = fiva.cell_set
        if key in self._index:
            return False
        self._index.add(key)
        self.completed.append(fiva)
        self.protected.update(fiva.cells)
        self.counts[fiva.team] = self.counts.get(fiva.team, 0) + 1
        logger.info("FIVA completed for team %d (%s): %s", fiva.team, fiva.direction.value, list(fiva.cells))
        return True

    def detect_from(self, board: BoardState, cell: int, team: int) -> List[CompletedFIVA]:
        """Scan after a placement and record new FIVAs; returns the newly recorded ones."""
        if not in_bounds(cell):
            return []
        return [fiva for fiva in scan_from(board, cell, team) if self.register(fiva)]

    def is_protected(self, cell: int) -> bool:
        return cell in self.protected

    def count_for(self, team: int) -> int:
        return self.counts.get(team, 0)

    def fivas_for(self, team: int) -> List[CompletedFIVA]:
        return [f for f in self.completed if f.team == team]

    def __len__(self) -> int:
        return len(self.completed)
