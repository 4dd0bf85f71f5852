# fiva/scripts/selfplay.py
from __future__ import annotations
import argparse
import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from ..agents.heuristics import AIDifficulty, HeuristicAgent, RandomAgent
from ..agents.selfplay_manager import SelfPlayManager
from ..engine.engine_core import GameEngine
from ..engine.state import GameConfig, TeamColor
from ..utils.jsonio import load_config
from ..utils.logging import CSVLogger, JSONLLogger
from ..utils.seeding import seed_from_cfg

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {"rules": {}, "engine": {}, "selfplay": {}}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Run headless Fiva games between computer opponents.")
    p.add_argument("--config", default=None, help="JSON config with 'rules', 'engine' and 'selfplay' sections")
    p.add_argument("--games", type=int, default=1)
    p.add_argument("--difficulty", choices=[d.value for d in AIDifficulty] + ["random"], default=None)
    p.add_argument("--log", default=None, help="append one JSON line per move to this file")
    p.add_argument("--results", default=None, help="append one CSV row per game to this file")
    p.add_argument("--seed", default=None, help="int or 'random'")
    p.add_argument("--set", dest="overrides", action="append", default=[],
                   help="dot-path override, e.g. --set rules.players=4")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def make_agents(difficulty: str, seed: int, n: int):
    if difficulty == "random":
        return [RandomAgent(seed=seed + i) for i in range(n)]
    return [HeuristicAgent(difficulty=AIDifficulty(difficulty), seed=seed + i) for i in range(n)]


def main(argv: Optional[List[str]] = None) -> Dict[str, int]:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg = load_config(args.config, DEFAULTS, args.overrides)
    sp_cfg = dict(cfg.get("selfplay", {}))
    if args.seed is not None:
        cfg["engine"]["seed"] = args.seed
    seed = seed_from_cfg(cfg, "engine")
    difficulty = args.difficulty or sp_cfg.get("difficulty", AIDifficulty.MEDIUM.value)

    config = GameConfig.from_dict(cfg)
    engine = GameEngine(config, seed=seed)
    agents = make_agents(difficulty, seed, config.num_players)
    mgr = SelfPlayManager(agents, engine, max_steps=int(sp_cfg.get("max_steps", 400)))

    move_log = JSONLLogger(args.log) if args.log else None
    results = CSVLogger(args.results) if args.results else None
    tally: Counter = Counter()
    try:
        for game in range(args.games):
            hook = None
            if move_log is not None:
                hook = lambda step, rec, g=game: move_log.log(step, {"game": g, **rec})
            out = mgr.play_episode(seed=seed + game, on_move=hook)
            label = "draw" if out["winner"] is None else TeamColor.for_team(out["winner"]).value
            logger.info("Game %d: %s after %d steps (fivas=%s)", game, label, out["steps"], out["fivas"])
            tally[label] += 1
            if results is not None:
                results.log({"game": game, "winner": label, "steps": out["steps"],
                             "fivas": out["fivas"], "truncated": out["truncated"]})
    finally:
        if move_log is not None:
            move_log.close()
        if results is not None:
            results.close()

    print(f"Self-play completed: {args.games} game(s), difficulty={difficulty}, seed={seed}")
    for label, wins in tally.most_common():
        print(f"  {label}: {wins}")
    return dict(tally)


if __name__ == "__main__":
    main()
