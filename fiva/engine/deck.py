"""
Deck manager: two combined decks (104 cards), discard pile and cards resting on the board.
"""
from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Iterable, List, Optional

from .cards import Card, create_double_deck

logger = logging.getLogger(__name__)

DECK_SIZE = 104


class Deck:
    """Draw pile, discard pile and in-play multiset for one game.

    The top of the draw pile is the end of ``cards``. Shuffling is an explicit
    Fisher-Yates pass; without a seed the randomness comes from ``random.SystemRandom``.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.cards: List[Card] = []
        self.discard_pile: List[Card] = []
        self.in_play: Counter = Counter()
        self.rng: random.Random = rng or self._make_rng(seed)
        self._standard: Counter = Counter(create_double_deck())

    @staticmethod
    def _make_rng(seed: Optional[int]) -> random.Random:
        if seed is None:
            return random.SystemRandom()
        return random.Random(seed)

    def seed(self, seed: Optional[int]) -> None:
        self.rng = self._make_rng(seed)

    # ---- lifecycle ---------------------------------------------------------

    def shuffle_new_game(self) -> None:
        self.discard_pile.clear()
        self.in_play.clear()
        self.cards = create_double_deck()
        self._shuffle()
        logger.debug("New game deck ready with %d cards", len(self.cards))

    def reshuffle_discards(self) -> bool:
        if self.cards:
            logger.warning("Cannot reshuffle: deck still has %d cards", len(self.cards))
            return False
        if not self.discard_pile:
            logger.warning("Cannot reshuffle: discard pile is empty")
            return False
        self.cards = list(self.discard_pile)
        self.discard_pile.clear()
        self._shuffle()
        logger.debug("Deck replenished from discards with %d cards", len(self.cards))
        return True

    def _shuffle(self) -> None:
        cards = self.cards
        for i in range(len(cards) - 1, 0, -1):
            j = self.rng.randrange(i + 1)
            cards[i], cards[j] = cards[j], cards[i]

    # ---- card movement -----------------------------------------------------

    def draw(self) -> Optional[Card]:
        if not self.cards and self.discard_pile:
            self.reshuffle_discards()
        if not self.cards:
            logger.debug("Cannot draw: no cards available")
            return None
        card = self.cards.pop()
        logger.debug("Drew %s, %d cards remaining", card, len(self.cards))
        return card

    def draw_cards(self, count: int) -> List[Card]:
        drawn: List[Card] = []
        for _ in range(max(0, int(count))):
            card = self.draw()
            if card is None:
                break
            drawn.append(card)
        return drawn

    def discard(self, card: Card, from_board: bool = False) -> None:
        """Put `card` on the discard pile.

        Cards leaving a hand were never in play. Pass from_board=True for the card
        lying under a removed chip so its in-play entry is released as well.
        """
        self.discard_pile.append(card)
        if from_board:
            self.remove_from_board(card)

    def place_on_board(self, card: Card) -> None:
        self.in_play[card] += 1

    def remove_from_board(self, card: Card) -> None:
        if self.in_play[card] <= 0:
            self.in_play.pop(card, None)
            logger.warning("Card %s was not tracked as in play", card)
            return
        self.in_play[card] -= 1
        if self.in_play[card] == 0:
            del self.in_play[card]

    # ---- queries -----------------------------------------------------------

    @property
    def cards_remaining(self) -> int:
        return len(self.cards)

    @property
    def discards_count(self) -> int:
        return len(self.discard_pile)

    @property
    def cards_on_board(self) -> int:
        return sum(self.in_play.values())

    @property
    def total_tracked(self) -> int:
        return self.cards_remaining + self.discards_count + self.cards_on_board

    @property
    def is_exhausted(self) -> bool:
        return not self.cards and not self.discard_pile

    def is_in_deck(self, card: Card) -> bool:
        return card in self.cards

    def is_discarded(self, card: Card) -> bool:
        return card in self.discard_pile

    def is_in_play(self, card: Card) -> bool:
        return self.in_play[card] > 0

    def verify_integrity(self, held: Iterable[Card] = ()) -> bool:
        """Deck, discards, board and the given held cards must form the 104-card multiset."""
        found = Counter(self.cards) + Counter(self.discard_pile) + self.in_play + Counter(held)
        if found == self._standard:
            return True
        missing = self._standard - found
        extra = found - self._standard
        logger.warning(
            "Deck integrity check failed: %d/%d cards tracked, missing=%s extra=%s",
            sum(found.values()), DECK_SIZE,
            sorted(c.code for c in missing.elements()),
            sorted(c.code for c in extra.elements()),
        )
        return False

    def debug_info(self) -> str:
        return (
            f"Deck: {self.cards_remaining} | Discards: {self.discards_count} | "
            f"In play: {self.cards_on_board} | Total: {self.total_tracked}/{DECK_SIZE} | "
            f"Top: {[c.code for c in self.cards[-5:]]}"
        )
