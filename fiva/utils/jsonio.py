# fiva/utils/jsonio.py
"""
Run configuration files.

A run config has three sections, each optional:

    {"rules":    {"players": 4, "teams": 2, "player_names": [...], "player_teams": [...]},
     "engine":   {"layout": "legacy" | "digital_optimized", "seed": 7 | "random"},
     "selfplay": {"difficulty": "easy" | "medium" | "hard" | "random", "max_steps": 400}}

`rules` and `engine` feed GameConfig.from_dict; `selfplay` is read by the CLI.
"""
from __future__ import annotations
import json
import copy
import os
from typing import Any, Dict, Iterable, Optional


def load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(path: str, data: Dict[str, Any]) -> None:
    """Write `data` (e.g. GameConfig.to_dict()) as indented JSON, creating parent dirs."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


def deep_update(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge a partial config over a full one, section by section.

    {"rules": {"players": 2, "teams": 2}} updated with {"rules": {"players": 4}}
    keeps "teams". Non-dict values (player_names lists included) are replaced
    whole. Neither argument is modified.
    """
    out = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = deep_update(out[key], value)
        else:
            out[key] = value
    return out


def parse_override(text: str) -> Dict[str, Any]:
    """
    Parse a CLI override such as "rules.players=4" into {"rules.players": 4}.
    The value is read as JSON when possible, otherwise kept as a string, so
    "engine.seed=random" stays the string "random".
    """
    if "=" not in text:
        raise ValueError(f"Override must look like key=value, got {text!r}")
    key, raw = text.split("=", 1)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return {key.strip(): value}


def _set_path(cfg: Dict[str, Any], dotted: str, value: Any) -> None:
    *sections, leaf = dotted.split(".")
    for name in sections:
        if not isinstance(cfg.get(name), dict):
            cfg[name] = {}
        cfg = cfg[name]
    cfg[leaf] = value


def override_config(cfg: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply dotted overrides, e.g. {"rules.players": 4, "engine.layout": "legacy"}.
    Missing sections are created. Returns a new dict.
    """
    out = copy.deepcopy(cfg)
    for dotted, value in (overrides or {}).items():
        _set_path(out, dotted, value)
    return out


def load_config(path: Optional[str] = None, defaults: Optional[Dict[str, Any]] = None,
                overrides: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Build a run config: `defaults`, then the JSON file at `path` (if any), then
    the CLI's "--set section.key=value" strings. Later sources win.
    """
    cfg = copy.deepcopy(defaults or {})
    if path:
        cfg = deep_update(cfg, load_json(path))
    dotted: Dict[str, Any] = {}
    for text in overrides:
        dotted.update(parse_override(text))
    return override_config(cfg, dotted)
