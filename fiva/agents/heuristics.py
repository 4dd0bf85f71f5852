# fiva/agents/heuristics.py
"""
Rule-based opponents.

RandomAgent picks a uniformly random legal move. HeuristicAgent follows a fixed
priority list (win, block, build, jacks, dead cards, random) with no look-ahead.
Runs are counted through a cell along the four axes, with corners as wild.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from overrides import overrides

from ..engine.board import BoardState, in_bounds, to_cell, to_rc
from ..engine.board_layout import BOARD_SIZE
from ..engine.fiva import FIVA_LENGTH, Direction
from ..engine.state import TeamColor
from .base_agent import DISCARD, AgentCtx, AgentMove, BaseAgent

logger = logging.getLogger(__name__)

BUILD_LENGTH = 4


def _on_board(r: int, c: int) -> bool:
    return 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE


def count_in_line(board: BoardState, cell: int, team: int, direction: Direction) -> int:
    """Length of the run through `cell` along one axis if `team` held `cell`."""
    dr, dc = direction.step
    r, c = to_rc(cell)
    cnt = 1
    rr, cc = r + dr, c + dc
    while _on_board(rr, cc) and board.counts_for_team(to_cell(rr, cc), team):
        cnt += 1; rr += dr; cc += dc
    rr, cc = r - dr, c - dc
    while _on_board(rr, cc) and board.counts_for_team(to_cell(rr, cc), team):
        cnt += 1; rr -= dr; cc -= dc
    return cnt


def run_length(board: BoardState, cell: int, team: int) -> int:
    """Longest run through `cell` over the four axes, corners counting as wild."""
    if not in_bounds(cell):
        return 0
    return max(count_in_line(board, cell, team, d) for d in Direction)


def _candidates(engine, player: int) -> Tuple[List[AgentMove], List[AgentMove], List[AgentMove]]:
    """Legal moves of `player` split into placements, removals and dead-card discards."""
    hand = engine.state.hands[player]
    legal = engine.legal_moves(player)
    places = [AgentMove(hand[i], i, cell) for i, cell in legal["place"]]
    removals = [AgentMove(hand[i], i, cell) for i, cell in legal["remove"]]
    discards = [AgentMove(hand[i], i, DISCARD, "Dead card (both positions occupied)")
                for i in legal["discard"]]
    return places, removals, discards


def _with_reason(move: AgentMove, reasoning: str) -> AgentMove:
    return AgentMove(move.card, move.hand_index, move.position, reasoning)


class AIDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def description(self) -> str:
        return {
            AIDifficulty.EASY: "Random valid moves",
            AIDifficulty.MEDIUM: "Tactical play with blocking",
            AIDifficulty.HARD: "Strategic with planning",
        }[self]


# --- Random ---
class RandomAgent(BaseAgent):
    def __init__(self, engine=None, seed: Optional[int] = None):
        super().__init__(engine)
        self.rng = np.random.default_rng(seed)

    @overrides
    def select_move(self, engine, ctx: Optional[AgentCtx] = None) -> Optional[AgentMove]:
        player = engine.current_player
        places, removals, discards = _candidates(engine, player)
        moves = places + removals + discards
        if not moves:
            return None
        move = moves[int(self.rng.integers(len(moves)))]
        return move if move.reasoning else _with_reason(move, "Random valid move")


# --- Heuristic ---
class HeuristicAgent(BaseAgent):
    def __init__(self, engine=None, difficulty: AIDifficulty = AIDifficulty.MEDIUM,
                 seed: Optional[int] = None):
        super().__init__(engine)
        self.difficulty = AIDifficulty(difficulty)
        self.rng = np.random.default_rng(seed)

    @overrides
    def make_new_agent(self, engine):
        return self.__class__(engine, difficulty=self.difficulty)

    @property
    def display_name(self) -> str:
        return f"AI ({self.difficulty.value.capitalize()})"

    def change_difficulty(self, difficulty: AIDifficulty) -> None:
        self.difficulty = AIDifficulty(difficulty)
        logger.info("Difficulty changed to %s", self.difficulty.value)

    @overrides
    def select_move(self, engine, ctx: Optional[AgentCtx] = None) -> Optional[AgentMove]:
        if self.difficulty is AIDifficulty.EASY:
            move = self.choose_random_move(engine)
        elif self.difficulty is AIDifficulty.MEDIUM:
            move = self.choose_smart_move(engine)
        else:
            move = self.choose_strategic_move(engine)

        if move is None:
            logger.debug("No valid moves for player %d", engine.current_player)
        else:
            logger.debug("Player %d: %s", engine.current_player, move.description)
        return move

    # --- tier 1 ---
    def choose_random_move(self, engine) -> Optional[AgentMove]:
        places, removals, discards = _candidates(engine, engine.current_player)
        if discards:
            return discards[0]
        moves = places + removals
        if not moves:
            return None
        return _with_reason(moves[int(self.rng.integers(len(moves)))], "Random valid move")

    # --- tier 2 ---
    def choose_smart_move(self, engine) -> Optional[AgentMove]:
        player = engine.current_player
        team = engine.config.team_for(player)
        board = engine.state.board
        places, removals, _ = _candidates(engine, player)
        # normal cards before jacks for the same goal
        places = sorted(places, key=lambda m: m.card.is_jack)

        # 1. complete own FIVA
        for move in places:
            if run_length(board, move.position, team) >= FIVA_LENGTH:
                return _with_reason(move, "Complete own FIVA!")

        # 2. block an opponent FIVA
        for opponent in self._opponents(engine, team):
            for move in places:
                if run_length(board, move.position, opponent) >= FIVA_LENGTH:
                    return _with_reason(move, f"Block {TeamColor.for_team(opponent).value} FIVA!")

        # 3. build a run of four
        for move in places:
            if run_length(board, move.position, team) >= BUILD_LENGTH:
                return _with_reason(move, "Build 4-in-a-row")

        # 4. jacks
        jack_move = self._strategic_jack_move(board, team, places, removals)
        if jack_move is not None:
            return jack_move

        # 5. dead cards, then anything legal
        fallback = self.choose_random_move(engine)
        if fallback is None or fallback.is_discard:
            return fallback
        return _with_reason(fallback, "Tactical random move")

    # --- tier 3 ---
    def choose_strategic_move(self, engine) -> Optional[AgentMove]:
        move = self.choose_smart_move(engine)
        if move is None:
            return None
        return _with_reason(move, "Strategic: " + move.reasoning)

    # --- helpers ---
    @staticmethod
    def _opponents(engine, team: int) -> List[int]:
        return [t for t in range(engine.config.num_teams) if t != team]

    def _strategic_jack_move(self, board: BoardState, team: int,
                             places: List[AgentMove], removals: List[AgentMove]) -> Optional[AgentMove]:
        # hand order decides which jack is considered first
        by_hand = sorted({m.hand_index for m in places + removals})
        for idx in by_hand:
            wild = [m for m in places if m.hand_index == idx and m.card.is_two_eyed_jack]
            if wild:
                best, best_score = None, 0
                for move in wild:
                    score = run_length(board, move.position, team)
                    if score >= FIVA_LENGTH:
                        return _with_reason(move, "Wild Jack: complete FIVA")
                    if score > best_score:
                        best, best_score = move, score
                reason = "create 4-in-a-row" if best_score == BUILD_LENGTH else "best strategic position"
                return _with_reason(best, f"Wild Jack: {reason}")

            cuts = [m for m in removals if m.hand_index == idx]
            if cuts:
                best, best_score = None, -1
                for move in cuts:
                    owner = board.team_at(move.position)
                    score = run_length(board, move.position, owner)
                    if score > best_score:
                        best, best_score = move, score
                reason = "block opponent FIVA threat" if best_score >= BUILD_LENGTH else "remove opponent chip"
                return _with_reason(best, f"Remove chip: {reason}")
        return None
