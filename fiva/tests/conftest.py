import pytest

from fiva.engine.cards import Card
from fiva.engine.engine_core import GameEngine
from fiva.engine.state import GameConfig


def give(engine, player, code, slot=0):
    """Swap `code` into a player's hand slot, keeping the 104-card multiset intact."""
    card = Card.parse(code)
    hand = engine.state.hands[player]
    if hand[slot] == card:
        return card
    old = hand[slot]
    others = [h for i, h in enumerate(engine.state.hands) if i != player]
    for pile in [engine.deck.cards, engine.deck.discard_pile, hand] + others:
        for i, c in enumerate(pile):
            if c == card and not (pile is hand and i == slot):
                pile[i] = old
                hand[slot] = card
                return card
    raise AssertionError(f"{code} is not available to hand out")


def new_engine(players=2, teams=2, seed=42, **kwargs):
    engine = GameEngine(GameConfig(num_players=players, num_teams=teams, **kwargs), seed=seed)
    engine.start_new_game()
    return engine


@pytest.fixture
def engine():
    return new_engine()
