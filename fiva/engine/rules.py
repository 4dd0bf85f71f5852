"""
Card play validation: Jack special rules, valid-position enumeration and dead cards.

validate_play and valid_positions share one per-cell predicate so that
`validate_play(card, cell).is_valid == (cell in valid_positions(card))` always holds.
"""
from __future__ import annotations

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Set

from .board import BoardState, in_bounds
from .board_layout import Layout, positions_of
from .cards import CardLike, JackType, as_card
from .errors import EngineError, ErrorCode

ProtectedFn = Callable[[int], bool]


class ActionKind(str, Enum):
    PLACE = "place"
    REMOVE = "remove"


@dataclass(frozen=True)
class PlayAction:
    kind: ActionKind
    position: int


@dataclass(frozen=True)
class PlayResult:
    action: Optional[PlayAction] = None
    code: Optional[ErrorCode] = None
    reason: str = ""

    @property
    def is_valid(self) -> bool:
        return self.action is not None

    @classmethod
    def valid(cls, kind: ActionKind, position: int) -> "PlayResult":
        return cls(action=PlayAction(kind, int(position)))

    @classmethod
    def invalid(cls, code: ErrorCode, reason: str) -> "PlayResult":
        return cls(code=code, reason=reason)

    def raise_if_invalid(self, **details) -> PlayAction:
        if self.action is None:
            raise EngineError(self.code or ErrorCode.ERR_INVALID_POSITION, self.reason, details)
        return self.action


def _never_protected(_: int) -> bool:
    return False


def validate_play(
    card: CardLike,
    position: int,
    layout: Layout,
    board: BoardState,
    acting_team: int,
    is_protected: ProtectedFn = _never_protected,
) -> PlayResult:
    if isinstance(position, bool) or not isinstance(position, numbers.Integral) or not in_bounds(position):
        return PlayResult.invalid(ErrorCode.ERR_INVALID_POSITION, f"Invalid board position: {position}")

    card = as_card(card)
    jack = JackType.classify(card)

    if jack is JackType.TWO_EYED:
        if board.is_occupied(position):
            return PlayResult.invalid(ErrorCode.ERR_TARGET_OCCUPIED, "Position already occupied")
        return PlayResult.valid(ActionKind.PLACE, position)

    if jack is JackType.ONE_EYED:
        owner = board.team_at(position)
        if owner is None:
            return PlayResult.invalid(ErrorCode.ERR_NO_CHIP_TO_REMOVE, "No chip at this position to remove")
        if owner == acting_team:
            return PlayResult.invalid(ErrorCode.ERR_CANNOT_REMOVE_OWN_CHIP, "Cannot remove your own team's chip")
        if is_protected(position):
            return PlayResult.invalid(ErrorCode.ERR_CHIP_PROTECTED, "Cannot remove chip from completed FIVA")
        return PlayResult.valid(ActionKind.REMOVE, position)

    board_card = layout[position]
    if board_card != card:
        shown = board_card.code if board_card is not None else "corner"
        return PlayResult.invalid(
            ErrorCode.ERR_NOT_MATCHING_CARD,
            f"Card {card.code} doesn't match board position {shown}",
        )
    if board.is_occupied(position):
        return PlayResult.invalid(ErrorCode.ERR_TARGET_OCCUPIED, "Position already occupied")
    return PlayResult.valid(ActionKind.PLACE, position)


def valid_positions(
    card: CardLike,
    layout: Layout,
    board: BoardState,
    acting_team: int,
    is_protected: ProtectedFn = _never_protected,
) -> Set[int]:
    card = as_card(card)
    jack = JackType.classify(card)

    if jack is JackType.TWO_EYED:
        return set(board.empty_cells())

    if jack is JackType.ONE_EYED:
        return {
            cell for cell in board.occupied_cells()
            if board.team_at(cell) != acting_team and not is_protected(cell)
        }

    return {cell for cell in positions_of(card, layout) if not board.is_occupied(cell)}


def is_dead_card(card: CardLike, layout: Layout, board: BoardState) -> bool:
    """A normal card is dead once every board occurrence holds a chip; Jacks never are."""
    card = as_card(card)
    if card.is_jack:
        return False
    positions = positions_of(card, layout)
    return bool(positions) and all(board.is_occupied(cell) for cell in positions)
