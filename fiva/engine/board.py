# fiva/engine/board.py
from __future__ import annotations

from typing import List, Optional

import numpy as np

from .board_layout import BOARD_CELLS, BOARD_SIZE, is_corner
from .errors import EngineError, ErrorCode

EMPTY = -1


def in_bounds(cell: int) -> bool:
    return 0 <= cell < BOARD_CELLS


def to_rc(cell: int):
    return divmod(int(cell), BOARD_SIZE)


def to_cell(r: int, c: int) -> int:
    return int(r) * BOARD_SIZE + int(c)


class BoardState:
    """
    Chip occupancy of the 100 cells: team index per cell or EMPTY.
    Layout-agnostic; which card sits under a cell is the layout's business.
    """

    def __init__(self, chips: Optional[np.ndarray] = None):
        if chips is None:
            chips = np.full(BOARD_CELLS, EMPTY, dtype=np.int8)
        self.chips: np.ndarray = chips

    def _check(self, cell: int) -> int:
        if not in_bounds(cell):
            raise EngineError(ErrorCode.ERR_INVALID_POSITION, f"Invalid board position: {cell}", {"position": cell})
        return int(cell)

    def is_occupied(self, cell: int) -> bool:
        return in_bounds(cell) and self.chips[cell] != EMPTY

    def team_at(self, cell: int) -> Optional[int]:
        if not in_bounds(cell):
            return None
        chip = int(self.chips[cell])
        return None if chip == EMPTY else chip

    def counts_for_team(self, cell: int, team: int) -> bool:
        """Corners are wild for every team; any other cell needs the team's chip."""
        return is_corner(cell) or self.team_at(cell) == team

    def place(self, cell: int, team: int) -> None:
        cell = self._check(cell)
        if self.chips[cell] != EMPTY:
            raise EngineError(ErrorCode.ERR_TARGET_OCCUPIED, "Position already occupied", {"position": cell})
        self.chips[cell] = team

    def remove(self, cell: int) -> int:
        cell = self._check(cell)
        team = int(self.chips[cell])
        if team == EMPTY:
            raise EngineError(ErrorCode.ERR_NO_CHIP_TO_REMOVE, "No chip at this position to remove", {"position": cell})
        self.chips[cell] = EMPTY
        return team

    def clear(self) -> None:
        self.chips.fill(EMPTY)

    def occupied_cells(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(self.chips != EMPTY)]

    def empty_cells(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(self.chips == EMPTY)]

    def cells_of(self, team: int) -> List[int]:
        return [int(i) for i in np.flatnonzero(self.chips == team)]

    @property
    def chip_count(self) -> int:
        return int(np.count_nonzero(self.chips != EMPTY))

    def as_grid(self) -> np.ndarray:
        return self.chips.reshape(BOARD_SIZE, BOARD_SIZE)

    def copy(self) -> "BoardState":
        return BoardState(self.chips.copy())

    def __repr__(self) -> str:
        return f"BoardState(chips={self.chip_count})"
