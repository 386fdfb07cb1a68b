from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

RANKS = "AKQJT98765432"
SUITS = "hdcs"

RANK_ORDER = "23456789TJQKA"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANK_ORDER, start=2)}

SUIT_NAMES = {"c": "clubs", "d": "diamonds", "h": "hearts", "s": "spades"}
SUIT_SYMBOLS = {"c": "♣", "d": "♦", "h": "♥", "s": "♠"}


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]

    @property
    def suit_name(self) -> str:
        return SUIT_NAMES[self.suit]

    @property
    def symbol(self) -> str:
        return f"{self.rank}{SUIT_SYMBOLS[self.suit]}"

    # Ordering looks at rank only; suits never break ties.
    def __lt__(self, other: "Card") -> bool:
        return self.value < other.value

    def __gt__(self, other: "Card") -> bool:
        return self.value > other.value


def parse_label(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    return Card(label[0].upper(), label[1].lower())


def try_parse_label(label: object) -> Optional[Card]:
    """Like parse_label but returns None for anything unparseable."""
    if not isinstance(label, str):
        return None
    try:
        return parse_label(label)
    except ValueError:
        return None


def parse_cards(labels: Iterable[str]) -> List[Card]:
    return [parse_label(label) for label in labels]


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def suit_symbol(suit: str) -> str:
    return SUIT_SYMBOLS.get(suit.lower(), "?")
