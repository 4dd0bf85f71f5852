"""
Card model for Fiva: suits, ranks, Jack classification and the two-deck multiset.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Union


class Suit(str, Enum):
    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"
    SPADES = "S"

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


class Rank(str, Enum):
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"


SUITS: List[Suit] = list(Suit)
RANKS: List[Rank] = list(Rank)


@dataclass(frozen=True)
class Card:
    suit: Suit
    rank: Rank

    @classmethod
    def parse(cls, code: str) -> "Card":
        """Build a card from its code, e.g. '10D' or 'JC'."""
        if not isinstance(code, str) or len(code) < 2:
            raise ValueError(f"Invalid card code: {code!r}")
        rank_part, suit_part = code[:-1].upper(), code[-1].upper()
        try:
            return cls(suit=Suit(suit_part), rank=Rank(rank_part))
        except ValueError:
            raise ValueError(f"Invalid card code: {code!r}") from None

    @property
    def code(self) -> str:
        return f"{self.rank.value}{self.suit.value}"

    @property
    def is_jack(self) -> bool:
        return self.rank is Rank.JACK

    @property
    def is_two_eyed_jack(self) -> bool:
        return self.is_jack and self.suit in (Suit.DIAMONDS, Suit.CLUBS)

    @property
    def is_one_eyed_jack(self) -> bool:
        return self.is_jack and self.suit in (Suit.SPADES, Suit.HEARTS)

    @property
    def jack_type(self) -> "JackType":
        return JackType.classify(self)

    @property
    def display_name(self) -> str:
        return f"{self.rank.name.capitalize()} of {self.suit.display_name}"

    def __str__(self) -> str:
        return self.code


class JackType(str, Enum):
    TWO_EYED = "two_eyed"   # JC JD: wild placement
    ONE_EYED = "one_eyed"   # JS JH: remove an opponent chip
    NONE = "none"

    @staticmethod
    def classify(card: Union["Card", str]) -> "JackType":
        card = as_card(card)
        if card.is_two_eyed_jack:
            return JackType.TWO_EYED
        if card.is_one_eyed_jack:
            return JackType.ONE_EYED
        return JackType.NONE


CardLike = Union[Card, str]


def as_card(card: CardLike) -> Card:
    return card if isinstance(card, Card) else Card.parse(card)


def is_two_eyed_jack(card: CardLike) -> bool:
    return as_card(card).is_two_eyed_jack


def is_one_eyed_jack(card: CardLike) -> bool:
    return as_card(card).is_one_eyed_jack


def is_jack(card: CardLike) -> bool:
    return as_card(card).is_jack


def create_full_deck() -> List[Card]:
    return [Card(suit=suit, rank=rank) for suit in SUITS for rank in RANKS]


def create_double_deck() -> List[Card]:
    """The fixed 104-card multiset: two standard decks, Jacks included."""
    return create_full_deck() + create_full_deck()
