# fiva/engine/engine_core.py
"""
Turn / win controller.

GameEngine owns the configuration, deck, board, hands and FIVA bookkeeping of one
match. Commands validate first and raise EngineError before touching any state, so a
rejected play never consumes a card or advances the turn.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Set

from .board_layout import BoardLayoutType, Layout, get_layout
from .cards import Card, CardLike, as_card
from .deck import Deck
from .errors import EngineError, ErrorCode
from .events import EventBus, GameEvent, Listener
from .fiva import CompletedFIVA, FivaTracker
from .rules import ActionKind, PlayResult, is_dead_card, valid_positions, validate_play
from .state import GameConfig, GamePhase, GameState, TeamColor

logger = logging.getLogger(__name__)


class GameEngine:
    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None):
        self.config: GameConfig = config or GameConfig()
        self.random_seed: Optional[int] = seed if seed is not None else self.config.seed
        self.deck: Deck = Deck(seed=self.random_seed)
        self.state: GameState = GameState(layout_type=self.config.layout,
                                          fivas=FivaTracker(self.config.num_teams))
        self.events: EventBus = EventBus()
        self._lock = threading.RLock()

    def seed(self, seed: Optional[int]) -> None:
        self.random_seed = seed
        self.deck.seed(seed)

    def subscribe(self, listener: Listener):
        return self.events.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self.events.unsubscribe(listener)

    # ---- lifecycle ----------------------------------------------------------

    def start_new_game(self, config: Optional[GameConfig] = None) -> GameState:
        with self._lock:
            if config is not None:
                self.config = config
                if config.seed is not None:
                    self.seed(config.seed)
            cfg = self.config

            self.deck.shuffle_new_game()
            hands = [self.deck.draw_cards(cfg.cards_per_player) for _ in range(cfg.num_players)]

            self.state = GameState(
                hands=hands,
                phase=GamePhase.PLAYING,
                fivas=FivaTracker(cfg.num_teams),
                layout_type=cfg.layout,
            )
            logger.info(
                "New game: %d players, %d teams (%s), %d cards each, %d FIVA(s) to win",
                cfg.num_players, cfg.num_teams, cfg.team_configuration_description,
                cfg.cards_per_player, cfg.fivas_to_win,
            )
            assert self.verify_integrity(), "deck integrity broken after deal"
            self.events.emit(GameEvent.GAME_STARTED, players=cfg.num_players, teams=cfg.num_teams)
            return self.state

    def reset_for_new_game(self) -> GameState:
        return self.start_new_game()

    # ---- read-only queries --------------------------------------------------

    @property
    def layout(self) -> Layout:
        return get_layout(self.state.layout_type)

    @property
    def current_layout_type(self) -> BoardLayoutType:
        return self.state.layout_type

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    @property
    def current_player(self) -> int:
        return self.state.current_player

    @property
    def current_team(self) -> int:
        return self.config.team_for(self.state.current_player)

    @property
    def current_player_name(self) -> str:
        return self.config.name_for(self.state.current_player)

    @property
    def current_player_hand(self) -> List[Card]:
        if not self.state.hands:
            return []
        return list(self.state.hands[self.state.current_player])

    @property
    def team_fiva_count(self) -> Dict[int, int]:
        return dict(self.state.fivas.counts)

    @property
    def completed_fivas(self) -> List[CompletedFIVA]:
        return list(self.state.fivas.completed)

    @property
    def winner(self) -> Optional[int]:
        return self.state.winner

    @property
    def winner_color(self) -> Optional[TeamColor]:
        if self.state.winner is None:
            return None
        return TeamColor.for_team(self.state.winner)

    def is_terminal(self) -> bool:
        return self.state.phase is GamePhase.GAME_OVER

    def is_position_occupied(self, position: int) -> bool:
        return self.state.board.is_occupied(position)

    def get_chip_team(self, position: int) -> Optional[int]:
        return self.state.board.team_at(position)

    def get_chip_color(self, position: int) -> Optional[TeamColor]:
        team = self.state.board.team_at(position)
        return None if team is None else TeamColor.for_team(team)

    def is_part_of_completed_fiva(self, position: int) -> bool:
        return self.state.fivas.is_protected(position)

    def validate_play(self, card: CardLike, position: int, team: Optional[int] = None) -> PlayResult:
        return validate_play(
            card, position, self.layout, self.state.board,
            self.current_team if team is None else team,
            self.state.fivas.is_protected,
        )

    def valid_positions(self, card: CardLike, team: Optional[int] = None) -> Set[int]:
        return valid_positions(
            card, self.layout, self.state.board,
            self.current_team if team is None else team,
            self.state.fivas.is_protected,
        )

    def is_dead_card(self, card: CardLike) -> bool:
        return is_dead_card(card, self.layout, self.state.board)

    def legal_moves(self, player_index: int) -> Dict[str, List]:
        """Legal moves for a player: placements and removals as (hand_index, cell), dead-card discards as hand indices."""
        if not self.state.hands:
            return {"place": [], "remove": [], "discard": []}
        team = self.config.team_for(player_index)
        places: List = []
        removals: List = []
        discards: List[int] = []
        for idx, card in enumerate(self.state.hands[player_index]):
            if self.is_dead_card(card):
                discards.append(idx)
                continue
            target = removals if card.is_one_eyed_jack else places
            target.extend((idx, cell) for cell in sorted(self.valid_positions(card, team)))
        return {"place": places, "remove": removals, "discard": discards}

    def has_legal_action(self, player_index: int) -> bool:
        legal = self.legal_moves(player_index)
        return any(legal[k] for k in ("place", "remove", "discard"))

    def verify_integrity(self) -> bool:
        return self.deck.verify_integrity(held=self.state.held_cards())

    # ---- commands -----------------------------------------------------------

    def _require_playing(self) -> None:
        if self.state.phase is GamePhase.SETUP:
            raise EngineError(ErrorCode.ERR_GAME_NOT_STARTED, "Game not started")
        if self.state.phase is GamePhase.GAME_OVER:
            raise EngineError(ErrorCode.ERR_GAME_OVER, "Game is over", {"winner": self.state.winner})

    def select_card(self, index: int) -> Dict[str, Any]:
        """Select a hand card. A dead card is discarded right away and the turn passes."""
        with self._lock:
            self._require_playing()
            player = self.state.current_player
            hand = self.state.hands[player]
            if not (0 <= index < len(hand)):
                raise EngineError(ErrorCode.ERR_INVALID_HAND_INDEX, f"No card at hand index {index}",
                                  {"index": index, "hand_size": len(hand)})
            card = hand[index]
            if self.is_dead_card(card):
                logger.info("Player %d selected dead card %s, discarding", player, card)
                return self._discard_and_advance(index, auto=True)

            self.state.selected_index = index
            positions = sorted(self.valid_positions(card))
            logger.debug("Player %d selected %s (%d valid positions)", player, card, len(positions))
            self.events.emit(GameEvent.CARD_SELECTED, player=player, card=card.code, positions=positions)
            return {"player": player, "type": "select", "card": card.code, "index": index,
                    "valid_positions": positions}

    def play_selected_card(self, position: int) -> Dict[str, Any]:
        with self._lock:
            self._require_playing()
            index = self.state.selected_index
            if index is None:
                raise EngineError(ErrorCode.ERR_NO_CARD_SELECTED, "No card selected")
            return self._play(index, position)

    def play_card(self, card: CardLike, position: int) -> Dict[str, Any]:
        with self._lock:
            self._require_playing()
            card = as_card(card)
            hand = self.state.hands[self.state.current_player]
            if card not in hand:
                raise EngineError(ErrorCode.ERR_CARD_NOT_IN_HAND, f"Card {card.code} is not in hand",
                                  {"card": card.code, "player": self.state.current_player})
            index = self.state.selected_index
            if index is None or index >= len(hand) or hand[index] != card:
                index = hand.index(card)
            return self._play(index, position)

    def discard_dead_card(self, card: CardLike) -> Dict[str, Any]:
        with self._lock:
            self._require_playing()
            card = as_card(card)
            hand = self.state.hands[self.state.current_player]
            if card not in hand:
                raise EngineError(ErrorCode.ERR_CARD_NOT_IN_HAND, f"Card {card.code} is not in hand",
                                  {"card": card.code, "player": self.state.current_player})
            if not self.is_dead_card(card):
                raise EngineError(ErrorCode.ERR_CARD_NOT_DEAD, f"Card {card.code} can still be played",
                                  {"card": card.code})
            return self._discard_and_advance(hand.index(card), auto=False)

    def toggle_board_layout(self) -> BoardLayoutType:
        with self._lock:
            return self.set_board_layout(self.state.layout_type.toggled())

    def set_board_layout(self, layout_type: BoardLayoutType) -> BoardLayoutType:
        with self._lock:
            layout_type = BoardLayoutType(layout_type)
            self.state.layout_type = layout_type
            self.config.layout = layout_type
            logger.info("Board layout switched to %s", layout_type.value)
            self.events.emit(GameEvent.LAYOUT_CHANGED, layout=layout_type.value)
            return layout_type

    # ---- internals ----------------------------------------------------------

    def _play(self, index: int, position: int) -> Dict[str, Any]:
        state = self.state
        player = state.current_player
        team = self.config.team_for(player)
        hand = state.hands[player]
        card = hand[index]

        action = self.validate_play(card, position, team).raise_if_invalid(
            card=card.code, position=position, player=player)

        # validated: from here on the play is applied in full
        hand.pop(index)
        state.selected_index = None
        state.last_card_played = card
        move_record: Dict[str, Any] = {
            "player": player, "team": team, "type": action.kind.value,
            "card": card.code, "position": action.position, "fivas": [],
        }

        if action.kind is ActionKind.PLACE:
            state.board.place(action.position, team)
            state.board_cards[action.position] = card
            self.deck.place_on_board(card)
            self.events.emit(GameEvent.CHIP_PLACED, player=player, team=team,
                             position=action.position, card=card.code)
            for fiva in state.fivas.detect_from(state.board, action.position, team):
                move_record["fivas"].append(fiva.to_dict())
                self.events.emit(GameEvent.FIVA_COMPLETED, team=team, cells=list(fiva.cells),
                                 direction=fiva.direction.value, count=state.fivas.count_for(team))
        else:
            removed_team = state.board.remove(action.position)
            under = state.board_cards.pop(action.position, None)
            if under is not None:
                self.deck.discard(under, from_board=True)
            self.deck.discard(card)
            state.most_recent_discard = card
            move_record["removed_team"] = removed_team
            self.events.emit(GameEvent.CHIP_REMOVED, player=player, team=removed_team,
                             position=action.position, card=card.code)

        self._draw_replacement(player)
        self._finish_turn(player, team, move_record)
        return move_record

    def _discard_and_advance(self, index: int, auto: bool) -> Dict[str, Any]:
        state = self.state
        player = state.current_player
        team = self.config.team_for(player)
        card = state.hands[player].pop(index)
        self.deck.discard(card)
        state.most_recent_discard = card
        state.selected_index = None
        self.events.emit(GameEvent.CARD_DISCARDED, player=player, card=card.code, auto=auto)

        move_record: Dict[str, Any] = {
            "player": player, "team": team, "type": "auto-discard" if auto else "discard",
            "card": card.code, "position": None, "fivas": [],
        }
        self._draw_replacement(player)
        self._finish_turn(player, team, move_record)
        return move_record

    def _draw_replacement(self, player: int) -> Optional[Card]:
        card = self.deck.draw()
        if card is not None:
            self.state.hands[player].append(card)
        else:
            logger.debug("Deck exhausted, player %d keeps %d cards", player, len(self.state.hands[player]))
        return card

    def _advance_turn(self) -> None:
        state = self.state
        state.current_player = (state.current_player + 1) % self.config.num_players
        state.turns_count += 1
        self.events.emit(GameEvent.TURN_ADVANCED, current_player=state.current_player,
                         turns=state.turns_count)

    def _finish_turn(self, player: int, team: int, move_record: Dict[str, Any]) -> None:
        self._advance_turn()
        state = self.state
        if state.fivas.count_for(team) >= self.config.fivas_to_win:
            self._end_game(team)
        elif not any(self.has_legal_action(p) for p in range(self.config.num_players)):
            logger.info("No player can move, game ends without a winner")
            self._end_game(None)
        else:
            # players holding only unusable one-eyed jacks are skipped
            while not self.has_legal_action(state.current_player):
                logger.info("Player %d has no legal move, passing", state.current_player)
                self._advance_turn()
        move_record["winner"] = state.winner
        move_record["game_over"] = state.is_over
        assert self.verify_integrity(), "deck integrity broken"

    def _end_game(self, winner: Optional[int]) -> None:
        self.state.phase = GamePhase.GAME_OVER
        self.state.winner = winner
        self.state.selected_index = None
        if winner is not None:
            logger.info("Team %s wins with %d FIVA(s)", TeamColor.for_team(winner).value,
                        self.state.fivas.count_for(winner))
        self.events.emit(GameEvent.GAME_OVER, winner=winner,
                         color=None if winner is None else TeamColor.for_team(winner).value)
