from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import IntEnum
from functools import total_ordering
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .cards import Card, cards_to_labels, try_parse_label

LOGGER = logging.getLogger("hand_engine.evaluator")


class HandCategory(IntEnum):
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title().replace(" A ", " a ").replace(" Of ", " of ")


@total_ordering
@dataclass(frozen=True, eq=False)
class HandEvaluation:
    """Best five cards plus the numbers that decide ties inside a category."""

    category: HandCategory
    selected_cards: Tuple[Card, ...]
    tiebreakers: Tuple[int, ...]

    @property
    def strength(self) -> Tuple[int, Tuple[int, ...]]:
        return int(self.category), self.tiebreakers

    @property
    def labels(self) -> List[str]:
        return cards_to_labels(self.selected_cards)

    @property
    def description(self) -> str:
        return describe(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandEvaluation):
            return NotImplemented
        return self.strength == other.strength

    def __lt__(self, other: "HandEvaluation") -> bool:
        return self.strength < other.strength

    def __hash__(self) -> int:
        return hash(self.strength)


@dataclass(frozen=True)
class ShowdownResult:
    name: str
    description: str
    winner: bool
    evaluation: Optional[HandEvaluation] = None


def evaluate_best(cards: Iterable[Card]) -> Optional[HandEvaluation]:
    """Return the strongest five-card hand out of the given cards (usually 7).

    Every C(n, 5) combination is classified independently; the maximum by
    category then tiebreakers wins. Fewer than five distinct cards yields None.
    """
    unique = list(dict.fromkeys(cards))
    if len(unique) < 5:
        return None

    best: Optional[HandEvaluation] = None
    for combo in itertools.combinations(unique, 5):
        evaluation = _evaluate_five(combo)
        if best is None or evaluation > best:
            best = evaluation
    assert best is not None
    LOGGER.debug(
        "best of %s => %s %s tiebreakers=%s",
        cards_to_labels(unique),
        best.category.name,
        best.labels,
        list(best.tiebreakers),
    )
    return best


def evaluate_labels(labels: Iterable[object]) -> Optional[HandEvaluation]:
    """Parse labels, silently dropping unparseable tokens, then evaluate."""
    cards = [card for card in (try_parse_label(label) for label in labels) if card is not None]
    return evaluate_best(cards)


def hand_description(labels: Iterable[object]) -> str:
    evaluation = evaluate_labels(labels)
    if evaluation is None:
        return "Invalid Hand"
    return evaluation.description


def determine_winner(hands: Sequence[Tuple[str, Sequence[str]]]) -> List[ShowdownResult]:
    """Evaluate each (name, cards) pair and flag everyone tied at the top."""
    evaluated = [(name, evaluate_labels(cards)) for name, cards in hands]
    scored = [evaluation for _, evaluation in evaluated if evaluation is not None]
    best = max(scored) if scored else None

    results: List[ShowdownResult] = []
    for name, evaluation in evaluated:
        if evaluation is None:
            results.append(ShowdownResult(name=name, description="Invalid Hand", winner=False))
            continue
        assert best is not None
        results.append(
            ShowdownResult(
                name=name,
                description=evaluation.description,
                winner=evaluation >= best,
                evaluation=evaluation,
            )
        )
    return results


def _evaluate_five(cards: Sequence[Card]) -> HandEvaluation:
    ordered = sorted(cards, key=lambda card: card.value, reverse=True)

    by_value: Dict[int, List[Card]] = {}
    for card in ordered:
        by_value.setdefault(card.value, []).append(card)
    # Largest group first, higher rank first within equal group sizes.
    groups = sorted(by_value.items(), key=lambda item: (len(item[1]), item[0]), reverse=True)
    counts = [len(group) for _, group in groups]

    is_flush = len({card.suit for card in ordered}) == 1
    straight = _straight(ordered)

    if is_flush and straight:
        high, run = straight
        category = HandCategory.ROYAL_FLUSH if high == 14 else HandCategory.STRAIGHT_FLUSH
        return HandEvaluation(category, tuple(run), (high,))
    if counts[0] == 4:
        (quad_value, quads), (kicker_value, kicker) = groups[0], groups[1]
        return HandEvaluation(HandCategory.FOUR_OF_A_KIND, tuple(quads + kicker), (quad_value, kicker_value))
    if counts[0] == 3 and counts[1] >= 2:
        (trip_value, trips), (pair_value, pair) = groups[0], groups[1]
        return HandEvaluation(HandCategory.FULL_HOUSE, tuple(trips + pair[:2]), (trip_value, pair_value))
    if is_flush:
        return HandEvaluation(HandCategory.FLUSH, tuple(ordered), tuple(card.value for card in ordered))
    if straight:
        high, run = straight
        return HandEvaluation(HandCategory.STRAIGHT, tuple(run), (high,))
    if counts[0] == 3:
        trip_value, trips = groups[0]
        kickers = [card for _, group in groups[1:] for card in group]
        return HandEvaluation(
            HandCategory.THREE_OF_A_KIND,
            tuple(trips + kickers),
            (trip_value,) + tuple(card.value for card in kickers),
        )
    if counts[0] == 2 and counts[1] == 2:
        (high_value, high_pair), (low_value, low_pair), (kicker_value, kicker) = groups[:3]
        return HandEvaluation(
            HandCategory.TWO_PAIR,
            tuple(high_pair + low_pair + kicker),
            (high_value, low_value, kicker_value),
        )
    if counts[0] == 2:
        pair_value, pair = groups[0]
        kickers = [card for _, group in groups[1:] for card in group]
        return HandEvaluation(
            HandCategory.PAIR,
            tuple(pair + kickers),
            (pair_value,) + tuple(card.value for card in kickers),
        )
    return HandEvaluation(HandCategory.HIGH_CARD, tuple(ordered), tuple(card.value for card in ordered))


def _straight(ordered: Sequence[Card]) -> Optional[Tuple[int, List[Card]]]:
    """Find five consecutive rank values, counting an Ace as 14 and as 1."""
    by_value: Dict[int, Card] = {}
    for card in ordered:
        by_value.setdefault(card.value, card)
    if 14 in by_value:  # Ace low
        by_value[1] = by_value[14]

    values = sorted(by_value, reverse=True)
    for idx in range(len(values) - 4):
        window = values[idx : idx + 5]
        if window[0] - window[4] == 4:
            return window[0], [by_value[value] for value in window]
    return None


_RANK_WORDS = {14: "Ace", 13: "King", 12: "Queen", 11: "Jack", 10: "10"}


def _rank_word(value: int) -> str:
    return _RANK_WORDS.get(value, str(value))


def describe(evaluation: HandEvaluation) -> str:
    """Human-readable label such as 'Two Pair, Aces and 9s'."""
    category = evaluation.category
    top = evaluation.tiebreakers
    if category == HandCategory.HIGH_CARD:
        return f"High Card {_rank_word(top[0])}"
    if category == HandCategory.PAIR:
        return f"Pair of {_rank_word(top[0])}s"
    if category == HandCategory.TWO_PAIR:
        return f"Two Pair, {_rank_word(top[0])}s and {_rank_word(top[1])}s"
    if category == HandCategory.THREE_OF_A_KIND:
        return f"Three of a Kind, {_rank_word(top[0])}s"
    if category == HandCategory.STRAIGHT:
        return f"Straight, {_rank_word(top[0])} High"
    if category == HandCategory.FLUSH:
        return f"Flush, {_rank_word(top[0])} High"
    if category == HandCategory.FULL_HOUSE:
        return f"Full House, {_rank_word(top[0])}s over {_rank_word(top[1])}s"
    if category == HandCategory.FOUR_OF_A_KIND:
        return f"Four of a Kind, {_rank_word(top[0])}s"
    if category == HandCategory.STRAIGHT_FLUSH:
        return f"Straight Flush, {_rank_word(top[0])} High"
    return "Royal Flush"
