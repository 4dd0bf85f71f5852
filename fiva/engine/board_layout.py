# fiva/engine/board_layout.py
"""
Loads the static card layouts for the 10x10 Fiva board from JSON.
Each cell is a card code (e.g., '7H') or 'BONUS' for the four corner wild cells.
In memory a layout is a flat tuple of 100 entries (index = row*10 + col) with None at the corners.
"""

from __future__ import annotations

import json
from collections import Counter
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .cards import Card, CardLike, as_card

__all__ = [
    "BOARD_SIZE", "BOARD_CELLS", "CORNER_CELLS", "BoardLayoutType", "Layout",
    "LAYOUTS", "get_layout", "positions_of", "is_corner", "validate_layout",
    "layout_description",
]

BOARD_SIZE = 10
BOARD_CELLS = BOARD_SIZE * BOARD_SIZE
CORNER_CELLS: Tuple[int, ...] = (0, 9, 90, 99)
_BONUS = "BONUS"

Layout = Tuple[Optional[Card], ...]


class BoardLayoutType(str, Enum):
    LEGACY = "legacy"
    DIGITAL_OPTIMIZED = "digital_optimized"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def toggled(self) -> "BoardLayoutType":
        if self is BoardLayoutType.LEGACY:
            return BoardLayoutType.DIGITAL_OPTIMIZED
        return BoardLayoutType.LEGACY


_DESCRIPTIONS = {
    BoardLayoutType.LEGACY: "Legacy (physical board layout, edge runs, face cards clustered in the middle)",
    BoardLayoutType.DIGITAL_OPTIMIZED: "Digital-Optimized (suit zones for faster visual scanning)",
}


def is_corner(cell: int) -> bool:
    return cell in CORNER_CELLS


def _boards_dir() -> Path:
    # this file: fiva/engine/board_layout.py
    # assets:     fiva/assets/boards/<name>.json
    return Path(__file__).resolve().parents[1] / "assets" / "boards"


def _load_board_layout_json(path: Path) -> List[List[str]]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    rows = int(data.get("rows", 0))
    cols = int(data.get("cols", 0))
    cells = data.get("cells", None)

    if rows != BOARD_SIZE or cols != BOARD_SIZE:
        raise ValueError(f"Board JSON must be 10x10, got {rows}x{cols} at {path}")

    if not (isinstance(cells, list) and len(cells) == BOARD_SIZE
            and all(isinstance(r, list) and len(r) == BOARD_SIZE for r in cells)):
        raise ValueError(f"Invalid 'cells' shape in {path}")

    return cells


def validate_layout(cells: List[str]) -> None:
    """Raise ValueError unless the flat 100-cell list is a playable layout.

    Corners must be BONUS, no other cell may be BONUS, no Jack may be printed,
    and every card must appear exactly twice.
    """
    if len(cells) != BOARD_CELLS:
        raise ValueError(f"Expected {BOARD_CELLS} cells, found {len(cells)}")

    bad_corners = [i for i in CORNER_CELLS if cells[i] != _BONUS]
    if bad_corners:
        raise ValueError(f"Corners must be '{_BONUS}': {bad_corners}")

    stray = [i for i, cell in enumerate(cells) if cell == _BONUS and i not in CORNER_CELLS]
    if stray:
        raise ValueError(f"'{_BONUS}' only allowed in corners, found at {stray}")

    counts = Counter(cell for cell in cells if cell != _BONUS)
    bad = {code: n for code, n in counts.items() if n != 2 or Card.parse(code).is_jack}
    if bad:
        raise ValueError(f"Card multiplicities invalid (expect each non-jack exactly twice): {bad}")


def _freeze(grid: List[List[str]]) -> Layout:
    flat = [cell for row in grid for cell in row]
    validate_layout(flat)
    return tuple(None if cell == _BONUS else Card.parse(cell) for cell in flat)


def _load_all() -> Dict[BoardLayoutType, Layout]:
    base = _boards_dir()
    return {t: _freeze(_load_board_layout_json(base / f"{t.value}.json")) for t in BoardLayoutType}


# Load, validate, and freeze
LAYOUTS: Dict[BoardLayoutType, Layout] = _load_all()


def get_layout(layout_type: BoardLayoutType = BoardLayoutType.LEGACY) -> Layout:
    return LAYOUTS[BoardLayoutType(layout_type)]


def positions_of(card: CardLike, layout: Layout) -> List[int]:
    card = as_card(card)
    if card.is_jack:
        return []
    return [i for i, cell in enumerate(layout) if cell == card]


def layout_description(layout_type: BoardLayoutType) -> str:
    return BoardLayoutType(layout_type).description
