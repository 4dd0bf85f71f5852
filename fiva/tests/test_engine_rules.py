import pytest

from fiva.engine.board_layout import BoardLayoutType
from fiva.engine.cards import Card
from fiva.engine.engine_core import GameEngine
from fiva.engine.errors import EngineError, ErrorCode
from fiva.engine.events import GameEvent
from fiva.engine.state import GamePhase, TeamColor

from conftest import give, new_engine


def snapshot(engine):
    s = engine.state
    return (s.current_player, [list(h) for h in s.hands], s.board.chips.copy().tolist(),
            engine.deck.cards_remaining, engine.deck.discards_count, engine.deck.cards_on_board)


def test_deal_sizes_and_phase():
    engine = new_engine()
    assert engine.phase is GamePhase.PLAYING
    assert [len(h) for h in engine.state.hands] == [7, 7]
    assert engine.deck.cards_remaining == 104 - 14
    assert engine.verify_integrity()

    big = new_engine(players=12, teams=3)
    assert [len(h) for h in big.state.hands] == [3] * 12
    assert big.config.fivas_to_win == 1


def test_commands_before_start_are_rejected():
    engine = GameEngine(seed=1)
    with pytest.raises(EngineError) as err:
        engine.select_card(0)
    assert err.value.code is ErrorCode.ERR_GAME_NOT_STARTED


def test_normal_card_play():
    engine = new_engine()
    card = give(engine, 0, "6D")
    record = engine.play_card("6D", 1)
    assert record["type"] == "place" and record["position"] == 1
    assert engine.get_chip_team(1) == 0
    assert engine.get_chip_color(1) is TeamColor.RED
    assert engine.current_player == 1
    assert len(engine.state.hands[0]) == 7
    assert engine.deck.is_in_play(card)
    assert engine.state.board_cards[1] == card
    assert engine.verify_integrity()


def test_select_then_play_selected():
    engine = new_engine()
    give(engine, 0, "2S", slot=3)
    info = engine.select_card(3)
    assert info["type"] == "select" and 13 in info["valid_positions"]
    assert engine.state.selected_index == 3
    engine.play_selected_card(13)
    assert engine.is_position_occupied(13)
    assert engine.state.selected_index is None


def test_selection_errors():
    engine = new_engine()
    with pytest.raises(EngineError) as err:
        engine.play_selected_card(13)
    assert err.value.code is ErrorCode.ERR_NO_CARD_SELECTED
    with pytest.raises(EngineError) as err:
        engine.select_card(7)
    assert err.value.code is ErrorCode.ERR_INVALID_HAND_INDEX


@pytest.mark.parametrize("setup, code, position, expected", [
    (lambda e: None, "9D", 5, ErrorCode.ERR_NOT_MATCHING_CARD),
    (lambda e: e.state.board.place(4, 1), "9D", 4, ErrorCode.ERR_TARGET_OCCUPIED),
    (lambda e: None, "9D", 100, ErrorCode.ERR_INVALID_POSITION),
    (lambda e: None, "JS", 55, ErrorCode.ERR_NO_CHIP_TO_REMOVE),
    (lambda e: e.state.board.place(55, 0), "JH", 55, ErrorCode.ERR_CANNOT_REMOVE_OWN_CHIP),
])
def test_rejected_play_leaves_state_untouched(setup, code, position, expected):
    engine = new_engine()
    setup(engine)
    give(engine, 0, code)
    before = snapshot(engine)
    with pytest.raises(EngineError) as err:
        engine.play_card(code, position)
    assert err.value.code is expected
    assert snapshot(engine) == before


def test_card_not_in_hand():
    engine = new_engine()
    missing = next(c for c in ("2S", "3S", "4S", "5S") if Card.parse(c) not in engine.state.hands[0])
    before = snapshot(engine)
    with pytest.raises(EngineError) as err:
        engine.play_card(missing, 13)
    assert err.value.code is ErrorCode.ERR_CARD_NOT_IN_HAND
    assert snapshot(engine) == before


def test_one_eyed_jack_removes_opponent_chip_and_discards_both_cards():
    engine = new_engine()
    two_spades = give(engine, 0, "2S")
    engine.play_card("2S", 13)
    jack = give(engine, 1, "JH")
    record = engine.play_card("JH", 13)
    assert record["type"] == "remove" and record["removed_team"] == 0
    assert not engine.is_position_occupied(13)
    assert not engine.deck.is_in_play(two_spades)
    assert engine.deck.is_discarded(two_spades) and engine.deck.is_discarded(jack)
    assert engine.state.most_recent_discard == jack
    assert engine.current_player == 0
    assert engine.verify_integrity()


def test_two_eyed_jack_may_take_a_corner():
    engine = new_engine()
    give(engine, 0, "JC")
    engine.play_card("JC", 0)
    assert engine.get_chip_team(0) == 0


def test_dead_card_is_discarded_on_select():
    engine = new_engine()
    engine.state.board.place(10, 1)
    engine.state.board.place(74, 1)
    card = give(engine, 0, "5D")
    assert engine.is_dead_card(card)
    events = []
    engine.subscribe(events.append)
    record = engine.select_card(0)
    assert record["type"] == "auto-discard"
    assert engine.deck.is_discarded(card)
    assert len(engine.state.hands[0]) == 7
    assert engine.current_player == 1
    assert [e.kind for e in events][:2] == [GameEvent.CARD_DISCARDED, GameEvent.TURN_ADVANCED]


def test_explicit_discard_requires_dead_card():
    engine = new_engine()
    give(engine, 0, "5D")
    with pytest.raises(EngineError) as err:
        engine.discard_dead_card("5D")
    assert err.value.code is ErrorCode.ERR_CARD_NOT_DEAD
    engine.state.board.place(10, 1)
    engine.state.board.place(74, 0)
    record = engine.discard_dead_card("5D")
    assert record["type"] == "discard"


def test_dead_card_after_both_copies_played_keeps_integrity():
    engine = new_engine()
    first = give(engine, 0, "5D")
    engine.play_card("5D", 10)
    give(engine, 1, "JD")
    engine.play_card("JD", 74)

    give(engine, 0, "5D")
    assert engine.is_dead_card("5D")
    record = engine.select_card(0)
    assert record["type"] == "auto-discard"
    assert engine.deck.is_in_play(first)
    assert engine.state.board_cards[10] == first
    assert engine.deck.is_discarded(first)
    assert engine.verify_integrity()


def test_explicit_discard_after_both_copies_played():
    engine = new_engine()
    give(engine, 0, "6D")
    engine.play_card("6D", 1)
    give(engine, 1, "JC")
    engine.play_card("JC", 73)

    give(engine, 0, "6D", slot=2)
    record = engine.discard_dead_card("6D")
    assert record["type"] == "discard"
    assert engine.deck.cards_on_board == 2
    assert engine.verify_integrity()
    assert engine.current_player == 1


def test_player_without_a_legal_move_is_skipped():
    engine = new_engine()
    # both 5D cells hold player 1's own chips: 5D is dead and the jacks have no target
    engine.state.board.place(10, 1)
    engine.state.board.place(74, 1)
    give(engine, 0, "5D")
    give(engine, 1, "JS", slot=0)
    give(engine, 1, "JH", slot=1)
    hand = engine.state.hands[1]
    engine.deck.cards.extend(hand[2:])
    del hand[2:]
    assert engine.verify_integrity()
    assert not engine.has_legal_action(1)

    turns = []
    engine.subscribe(lambda ev: turns.append(ev) if ev.kind is GameEvent.TURN_ADVANCED else None)
    record = engine.discard_dead_card("5D")
    assert not record["game_over"]
    assert engine.current_player == 0
    assert engine.state.turns_count == 2
    assert len(turns) == 2
    assert [card.code for card in engine.state.hands[1]] == ["JS", "JH"]


def test_fiva_protects_its_cells():
    engine = new_engine()
    for cell in (1, 2, 3):
        engine.state.board.place(cell, 0)
    give(engine, 0, "9D")
    record = engine.play_card("9D", 4)
    assert record["fivas"] == [{"cells": [0, 1, 2, 3, 4], "team": 0, "direction": "H"}]
    assert all(engine.is_part_of_completed_fiva(c) for c in range(5))

    give(engine, 1, "JS")
    assert not engine.valid_positions("JS") & {1, 2, 3, 4}
    before = snapshot(engine)
    with pytest.raises(EngineError) as err:
        engine.play_card("JS", 2)
    assert err.value.code is ErrorCode.ERR_CHIP_PROTECTED
    assert snapshot(engine) == before


def test_extending_a_recorded_fiva_does_not_count_again():
    engine = new_engine()
    for cell in (1, 2, 3):
        engine.state.board.place(cell, 0)
    give(engine, 0, "9D")
    engine.play_card("9D", 4)
    assert engine.team_fiva_count[0] == 1

    give(engine, 1, "2S")
    engine.play_card("2S", 13)

    give(engine, 0, "10D")
    record = engine.play_card("10D", 5)
    assert record["fivas"] == []
    assert engine.team_fiva_count[0] == 1
    assert engine.winner is None and not engine.is_terminal()
    assert not engine.is_part_of_completed_fiva(5)


def test_end_to_end_two_team_win_needs_two_fivas():
    engine = new_engine()
    seen = []
    engine.subscribe(lambda rec: seen.append(rec.kind))

    # four in a row next to the top-left corner
    for cell in (1, 2, 3):
        engine.state.board.place(cell, 0)
    give(engine, 0, "9D")
    engine.play_card("9D", 4)
    assert engine.team_fiva_count == {0: 1, 1: 0}
    assert engine.winner is None and not engine.is_terminal()

    give(engine, 1, "2S")
    engine.play_card("2S", 13)

    # second, independent FIVA down the right edge into the bottom-right corner
    for cell in (69, 79, 89):
        engine.state.board.place(cell, 0)
    give(engine, 0, "9C")
    record = engine.play_card("9C", 59)
    assert record["winner"] == 0 and record["game_over"]
    assert engine.team_fiva_count[0] == 2
    assert engine.winner == 0 and engine.winner_color is TeamColor.RED
    assert engine.is_terminal()
    assert GameEvent.FIVA_COMPLETED in seen and seen[-1] is GameEvent.GAME_OVER

    with pytest.raises(EngineError) as err:
        engine.play_card(engine.current_player_hand[0], 50)
    assert err.value.code is ErrorCode.ERR_GAME_OVER


def test_three_teams_win_on_first_fiva():
    engine = new_engine(players=3, teams=3)
    for cell in (1, 2, 3):
        engine.state.board.place(cell, 0)
    give(engine, 0, "9D")
    engine.play_card("9D", 4)
    assert engine.winner == 0
    assert engine.phase is GamePhase.GAME_OVER


def test_turns_cycle_through_all_players():
    engine = new_engine(players=4, teams=2)
    assert engine.config.player_teams == [0, 1, 0, 1]
    order = []
    for _ in range(5):
        player = engine.current_player
        order.append(player)
        idx, cell = engine.legal_moves(player)["place"][0]
        engine.play_card(engine.state.hands[player][idx], cell)
    assert order == [0, 1, 2, 3, 0]


def test_exhausted_deck_and_empty_hands_end_in_a_draw():
    engine = new_engine()
    give(engine, 0, "2S")
    deck = engine.deck
    # park every other card on the board bookkeeping so nothing can be drawn
    for card in deck.cards + engine.state.hands[0][1:] + engine.state.hands[1]:
        deck.place_on_board(card)
    deck.cards.clear()
    engine.state.hands[0][1:] = []
    engine.state.hands[1].clear()
    assert engine.verify_integrity()

    record = engine.play_card("2S", 13)
    assert record["game_over"] and record["winner"] is None
    assert engine.is_terminal() and engine.winner is None


def test_layout_toggle_changes_valid_positions():
    engine = new_engine()
    events = []
    engine.subscribe(events.append)
    legacy = engine.valid_positions("2C")
    assert engine.toggle_board_layout() is BoardLayoutType.DIGITAL_OPTIMIZED
    assert engine.current_layout_type is BoardLayoutType.DIGITAL_OPTIMIZED
    assert engine.valid_positions("2C") != legacy
    assert events[-1].kind is GameEvent.LAYOUT_CHANGED
    engine.reset_for_new_game()
    assert engine.current_layout_type is BoardLayoutType.DIGITAL_OPTIMIZED


def test_reset_starts_a_fresh_game():
    engine = new_engine()
    give(engine, 0, "6D")
    engine.play_card("6D", 1)
    engine.reset_for_new_game()
    assert engine.state.board.chip_count == 0
    assert engine.current_player == 0
    assert engine.team_fiva_count == {0: 0, 1: 0}
    assert engine.deck.cards_remaining == 104 - 14


def test_unsubscribe_stops_events():
    engine = new_engine()
    events = []
    unsubscribe = engine.subscribe(events.append)
    unsubscribe()
    give(engine, 0, "JD")
    engine.play_card("JD", 50)
    assert events == []


def test_same_seed_same_deal():
    a, b = new_engine(seed=9), new_engine(seed=9)
    assert a.state.hands == b.state.hands


def test_legal_moves_lists_every_option():
    engine = new_engine()
    give(engine, 0, "6D", slot=0)
    legal = engine.legal_moves(0)
    assert (0, 1) in legal["place"] and (0, 73) in legal["place"]
    assert legal["discard"] == []
