from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from .cards import try_parse_label
from .models import STREETS, ZERO, ActionKind, HandInput

VALID_BOARD_SIZES = (0, 3, 4, 5)


class HandValidationError(ValueError):
    """Raised before settlement when a hand is structurally broken."""

    def __init__(self, issues: Sequence[str]) -> None:
        self.issues = list(issues)
        super().__init__("; ".join(self.issues))


def validate_hand(hand: HandInput) -> List[str]:
    """Return every problem found in the hand; an empty list means valid."""
    issues: List[str] = []
    config = hand.config

    if config.small_blind <= ZERO or config.big_blind <= ZERO:
        issues.append("Please enter valid blind values.")

    heroes = [player for player in hand.players if player.is_hero]
    if len(heroes) != 1:
        issues.append("Exactly one hero is required.")

    positions = [player.position for player in hand.players]
    if any(position is None for position in positions):
        issues.append("All players need a position assigned.")
    for position in positions:
        if position is not None and position not in config.seats:
            issues.append(f"Unknown position {position} for a {config.size}-max table.")
    for position, count in Counter(p for p in positions if p is not None).items():
        if count > 1:
            issues.append(f"Position {position} is taken by {count} players.")

    issues.extend(_card_issues(hand))
    issues.extend(_action_issues(hand))
    return issues


def ensure_valid(hand: HandInput) -> None:
    issues = validate_hand(hand)
    if issues:
        raise HandValidationError(issues)


def _card_issues(hand: HandInput) -> List[str]:
    issues: List[str] = []
    seen: List[str] = []

    for player in hand.players:
        if len(player.hole_cards) not in (0, 2):
            issues.append(f"{player.name} must have 0 or 2 hole cards.")
        seen.extend(player.hole_cards)
    if not any(player.has_cards for player in hand.players):
        issues.append("At least one player needs hole cards.")

    if len(hand.board) not in VALID_BOARD_SIZES:
        issues.append("Board must have 0, 3, 4 or 5 cards.")
    seen.extend(hand.board)

    labels = []
    for label in seen:
        card = try_parse_label(label)
        if card is None:
            issues.append(f"Unparseable card {label!r}.")
        else:
            labels.append(card.label)
    for label, count in Counter(labels).items():
        if count > 1:
            issues.append(f"Card {label} is used {count} times.")
    return issues


def _action_issues(hand: HandInput) -> List[str]:
    issues: List[str] = []
    seats = hand.config.seats

    if not hand.street_actions(STREETS[0]):
        issues.append("At least one preflop action is required.")

    folded = set()
    for street in STREETS:
        actions = hand.street_actions(street)
        if actions and len(hand.board) < street.board_size:
            issues.append(f"{street.value} actions need {street.board_size} board cards.")
        for entry in actions:
            if entry.position not in seats:
                issues.append(f"{street.value}: unknown position {entry.position}.")
                continue
            if entry.position in folded:
                issues.append(f"{street.value}: {entry.position} acts after folding.")
            if entry.kind in (ActionKind.FOLDS, ActionKind.CHECKS):
                if entry.amount != ZERO:
                    issues.append(f"{street.value}: {entry.position} {entry.kind.value} with an amount.")
            elif entry.amount <= ZERO:
                issues.append(f"{street.value}: {entry.position} {entry.kind.value} without an amount.")
            if entry.kind == ActionKind.FOLDS:
                folded.add(entry.position)
    return issues
