# fiva/agents/base_agent.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..engine.cards import Card

# Flexible context passed by the driver, e.g. {"seat": int, "turn": int, "engine": <GameEngine>}
# Agents should tolerate missing keys.
AgentCtx = Dict[str, Any]

DISCARD = -1


@dataclass(frozen=True)
class AgentMove:
    card: Card
    hand_index: int
    position: int          # board cell, or DISCARD for a dead-card discard
    reasoning: str = ""

    @property
    def is_discard(self) -> bool:
        return self.position == DISCARD

    @property
    def description(self) -> str:
        if self.is_discard:
            return f"Discard {self.card.code} - {self.reasoning}"
        return f"Play {self.card.code} at position {self.position} - {self.reasoning}"


class BaseAgent:
    """
    Minimal agent interface. The engine is the single source of truth; agents only read it
    and return an AgentMove (or None when the seat has nothing to play).
    """
    def __init__(self, engine=None):
        self.engine = engine
        self.seat: Optional[int] = None

    def reset(self, engine, seat: int) -> None:
        self.engine = engine
        self.seat = seat

    def select_move(self, engine, ctx: Optional[AgentCtx] = None) -> Optional[AgentMove]:
        raise NotImplementedError

    def make_new_agent(self, engine):
        return self.__class__(engine)

    @property
    def display_name(self) -> str:
        return self.__class__.__name__


def apply_move(engine, move: AgentMove) -> Dict[str, Any]:
    """Execute an agent's move on the engine and return the engine's move record."""
    if move.is_discard:
        return engine.discard_dead_card(move.card)
    return engine.play_card(move.card, move.position)
