# fiva/utils/seeding.py
"""
Seed resolution for self-play runs.

Nothing here touches the global `random` / `np.random` state: the deck owns its
own `random.Random` and every agent its own numpy Generator, all derived from
the seed resolved here.
"""
from __future__ import annotations
from typing import Any, Dict

import numpy as np


def resolve_seed(seed: Any) -> int:
    """"random" or None draws a fresh seed; anything else is cast to int."""
    if seed is None or seed == "random":
        return int(np.random.default_rng().integers(2 ** 24))
    return int(seed)


def seed_from_cfg(cfg: Dict[str, Any], path: str = "engine") -> int:
    """Resolve `cfg[path]["seed"]` (e.g. the `engine.seed` key of a run config)."""
    return resolve_seed(cfg.get(path, {}).get("seed", "random"))
