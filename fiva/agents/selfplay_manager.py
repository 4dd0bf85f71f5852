# fiva/agents/selfplay_manager.py
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional

from ..engine.engine_core import GameEngine
from ..engine.state import GameConfig
from .base_agent import AgentCtx, BaseAgent, apply_move

logger = logging.getLogger(__name__)

MoveHook = Callable[[int, Dict[str, Any]], None]


class SelfPlayManager:
    """
    Runs whole games between agents on one engine.
    Seat i is played by agents[i % len(agents)].
    """

    def __init__(self, agents: List[BaseAgent], engine: GameEngine, max_steps: int = 400):
        self.engine = engine
        self.agents = list(agents)
        self.max_steps = int(max_steps)
        if not self.agents:
            raise ValueError("SelfPlayManager needs at least one agent")

    def play_episode(self, seed: Optional[int] = None, config: Optional[GameConfig] = None,
                     on_move: Optional[MoveHook] = None) -> Dict[str, Any]:
        if seed is not None:
            self.engine.seed(seed)
        self.engine.start_new_game(config)
        num_players = self.engine.config.num_players

        # Reset agents with seat indices
        for seat in range(num_players):
            self.agents[seat % len(self.agents)].reset(self.engine, seat)

        steps = 0
        truncated = False
        while not self.engine.is_terminal():
            if steps >= self.max_steps:
                truncated = True
                break
            seat = self.engine.current_player
            agent = self.agents[seat % len(self.agents)]
            ctx: AgentCtx = {"seat": seat, "turn": steps, "engine": self.engine}

            move = agent.select_move(self.engine, ctx)
            if move is None:
                # engine skips seats without moves, so this only happens on a broken agent
                logger.warning("Agent %s returned no move for seat %d", agent.display_name, seat)
                truncated = True
                break

            record = apply_move(self.engine, move)
            record["reasoning"] = move.reasoning
            steps += 1
            if on_move is not None:
                on_move(steps, record)

        summary = {
            "steps": steps,
            "winner": self.engine.winner,
            "fivas": self.engine.team_fiva_count,
            "terminated": self.engine.is_terminal(),
            "truncated": bool(truncated),
        }
        logger.info("Episode finished after %d steps: winner=%s fivas=%s",
                    steps, summary["winner"], summary["fivas"])
        return summary
