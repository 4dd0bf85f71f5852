# fiva/engine/state.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .board import BoardState
from .board_layout import BoardLayoutType
from .cards import Card
from .fiva import FivaTracker

MIN_PLAYERS, MAX_PLAYERS = 2, 12
MIN_TEAMS, MAX_TEAMS = 2, 3


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, int(value)))


def _parse_seed(value: Any) -> Optional[int]:
    if value is None or value == "random":
        return None
    return int(value)


class TeamColor(str, Enum):
    """Chip colour per team index; at most three teams."""
    RED = "Red"
    BLUE = "Blue"
    GREEN = "Green"

    @classmethod
    def for_team(cls, index: int) -> "TeamColor":
        colors = list(cls)
        if 0 <= index < len(colors):
            return colors[index]
        return cls.RED

    @property
    def display_name(self) -> str:
        return self.value


class GamePhase(str, Enum):
    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


def cards_per_player(num_players: int) -> int:
    n = _clamp(num_players, MIN_PLAYERS, MAX_PLAYERS)
    if n == 2:
        return 7
    if n <= 4:
        return 6
    if n <= 6:
        return 5
    if n <= 9:
        return 4
    return 3


@dataclass
class GameConfig:
    """
    Match configuration. Out-of-range values are clamped rather than rejected:
    players to 2..12, teams to 2..3, team assignments to valid team indices.
    Missing assignments are filled round-robin and missing names get defaults.
    """
    num_players: int = 2
    num_teams: int = 2
    player_names: List[str] = field(default_factory=list)
    player_teams: List[int] = field(default_factory=list)
    layout: BoardLayoutType = BoardLayoutType.LEGACY

    # Reproducibility (None -> system randomness)
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.num_players = _clamp(self.num_players, MIN_PLAYERS, MAX_PLAYERS)
        self.num_teams = _clamp(self.num_teams, MIN_TEAMS, MAX_TEAMS)
        self.layout = BoardLayoutType(self.layout)

        teams = [_clamp(t, 0, self.num_teams - 1) for t in list(self.player_teams)[: self.num_players]]
        teams += [i % self.num_teams for i in range(len(teams), self.num_players)]
        self.player_teams = teams

        names = [str(n) for n in list(self.player_names)[: self.num_players]]
        names += [f"Player {i + 1}" for i in range(len(names), self.num_players)]
        self.player_names = names

    # --------- derived rules ---------

    @property
    def cards_per_player(self) -> int:
        return cards_per_player(self.num_players)

    @property
    def fivas_to_win(self) -> int:
        return 2 if self.num_teams == 2 else 1

    def team_for(self, player: int) -> int:
        if 0 <= player < len(self.player_teams):
            return self.player_teams[player]
        return 0

    def color_for(self, player: int) -> TeamColor:
        return TeamColor.for_team(self.team_for(player))

    def name_for(self, player: int) -> str:
        if 0 <= player < len(self.player_names):
            return self.player_names[player]
        return f"Player {player + 1}"

    @property
    def team_sizes(self) -> List[int]:
        return [self.player_teams.count(team) for team in range(self.num_teams)]

    @property
    def is_balanced(self) -> bool:
        sizes = [s for s in self.team_sizes if s > 0]
        return bool(sizes) and all(s == sizes[0] for s in sizes)

    @property
    def team_configuration_description(self) -> str:
        return "v".join(str(s) for s in self.team_sizes)

    # --------- factory & helpers ---------

    @classmethod
    def balanced(cls, players: int, teams: int) -> "GameConfig":
        return cls(num_players=players, num_teams=teams)

    @classmethod
    def custom(cls, players: int, teams: int, assignments: List[int],
               names: Optional[List[str]] = None) -> "GameConfig":
        return cls(num_players=players, num_teams=teams, player_teams=list(assignments),
                   player_names=list(names or []))

    @staticmethod
    def valid_configurations(players: int) -> List[Tuple[int, str]]:
        """Even team splits for a player count, e.g. 6 -> [(2, '3v3'), (3, '2v2v2')]."""
        out: List[Tuple[int, str]] = []
        if players % 2 == 0:
            out.append((2, f"{players // 2}v{players // 2}"))
        if players % 3 == 0:
            per = players // 3
            out.append((3, f"{per}v{per}v{per}"))
        return out

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "GameConfig":
        """
        Build a GameConfig from a nested dict like {"rules": {...}, "engine": {...}}.
        Flat dicts using the field names directly are accepted as well.
        """
        rules = dict(cfg.get("rules", {}))
        eng = dict(cfg.get("engine", {}))
        players = rules.get("players", cfg.get("num_players", 2))
        teams = rules.get("teams", cfg.get("num_teams", 2))
        return cls(
            num_players=int(players),
            num_teams=int(teams),
            player_names=list(rules.get("player_names", cfg.get("player_names", []))),
            player_teams=[int(t) for t in rules.get("player_teams", cfg.get("player_teams", []))],
            layout=BoardLayoutType(eng.get("layout", cfg.get("layout", BoardLayoutType.LEGACY.value))),
            seed=_parse_seed(eng.get("seed", cfg.get("seed", None))),
        )

    @classmethod
    def from_file(cls, path: str, overrides: Optional[Dict[str, Any]] = None) -> "GameConfig":
        from ..utils.jsonio import deep_update, load_json
        return cls.from_dict(deep_update(load_json(path), overrides or {}))

    def save(self, path: str) -> None:
        from ..utils.jsonio import save_json
        save_json(path, self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """Round-trip to a nested dict accepted by from_dict."""
        flat = asdict(self)
        return {
            "rules": {
                "players": flat["num_players"],
                "teams": flat["num_teams"],
                "player_names": flat["player_names"],
                "player_teams": flat["player_teams"],
            },
            "engine": {"layout": self.layout.value, "seed": self.seed},
        }


@dataclass
class GameState:
    """
    Runtime state owned by one GameEngine. Never shared between engines.
    """
    board: BoardState = field(default_factory=BoardState)
    hands: List[List[Card]] = field(default_factory=list)
    current_player: int = 0
    phase: GamePhase = GamePhase.SETUP
    winner: Optional[int] = None
    fivas: FivaTracker = field(default_factory=FivaTracker)
    layout_type: BoardLayoutType = BoardLayoutType.LEGACY

    # Card resting under each occupied cell (for deck bookkeeping on removal)
    board_cards: Dict[int, Card] = field(default_factory=dict)

    selected_index: Optional[int] = None
    last_card_played: Optional[Card] = None
    most_recent_discard: Optional[Card] = None
    turns_count: int = 0

    @property
    def is_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER

    def held_cards(self) -> List[Card]:
        return [card for hand in self.hands for card in hand]
