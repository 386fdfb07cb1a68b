from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .betting import complete_preflop, folded_positions
from .evaluator import HandEvaluation, evaluate_labels
from .models import STREETS, ZERO, ActionEntry, HandInput, PlayerEntry, Pot, PotShare, Street, TableConfig
from .table import seat_index

LOGGER = logging.getLogger("hand_engine.settlement")

CENT = Decimal("0.01")
WINNER_BY_FOLD = "Winner by fold"
AUTO_STACK_BIG_BLINDS = 100


@dataclass(frozen=True)
class Settlement:
    pot: Pot
    players: Tuple[PlayerEntry, ...]
    streets: Mapping[Street, Tuple[ActionEntry, ...]]
    contributions: Mapping[str, Decimal]
    active: Tuple[str, ...]
    showdown: bool
    evaluations: Mapping[str, HandEvaluation] = field(default_factory=dict)
    payouts: Mapping[str, Decimal] = field(default_factory=dict)


def fill_seats(config: TableConfig, players: Sequence[PlayerEntry]) -> List[PlayerEntry]:
    """Add a folding villain for every table position nobody occupies."""
    taken = {player.position for player in players if player.position}
    filled = list(players)
    for position in config.seats:
        if position not in taken:
            filled.append(
                PlayerEntry(
                    name=f"Villain {position}",
                    position=position,
                    stack=config.big_blind * AUTO_STACK_BIG_BLINDS,
                )
            )
    return filled


def completed_actions(hand: HandInput) -> Dict[Street, Tuple[ActionEntry, ...]]:
    """Per-street logs with the preflop auto-fold pass applied."""
    later = [entry.position for street in STREETS[1:] for entry in hand.street_actions(street)]
    streets = {street: hand.street_actions(street) for street in STREETS}
    streets[Street.PREFLOP] = tuple(
        complete_preflop(hand.config, streets[Street.PREFLOP], seats=hand.config.seats, acted_elsewhere=later)
    )
    return streets


def contributions(actions: Iterable[ActionEntry]) -> Dict[str, Decimal]:
    """Replay every entry; investing entries overwrite the running total."""
    totals: Dict[str, Decimal] = {}
    for entry in actions:
        if entry.is_investing:
            totals[entry.position] = entry.amount
    return totals


def pot_total(contributed: Mapping[str, Decimal]) -> Decimal:
    return sum(contributed.values(), ZERO)


def active_players(players: Iterable[PlayerEntry], actions: Iterable[ActionEntry]) -> List[PlayerEntry]:
    folded = folded_positions(actions)
    return [player for player in players if player.position and player.position not in folded]


def split_pot(total: Decimal, count: int) -> List[Decimal]:
    """Even shares rounded down to the cent; leftover cents go to the first shares."""
    if count <= 0:
        return []
    share = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    shares = [share] * count
    remainder = total - share * count
    idx = 0
    while remainder >= CENT:
        shares[idx] += CENT
        remainder -= CENT
        idx += 1
    # Sub-cent dust only appears when blinds carry more than two decimals.
    shares[0] += remainder
    return shares


def settle(hand: HandInput) -> Settlement:
    config = hand.config
    seats = config.seats
    players = sorted(
        fill_seats(config, hand.players),
        key=lambda player: seat_index(player.position or "", seats) if player.position in seats else len(seats),
    )
    streets = completed_actions(hand)
    log = [entry for street in STREETS for entry in streets[street]]

    contributed = contributions(log)
    total = pot_total(contributed)
    folded = folded_positions(log)
    active = active_players(players, log)
    showdown = len(active) > 1

    evaluations: Dict[str, HandEvaluation] = {}
    if showdown:
        for player in active:
            if not player.has_cards:
                continue
            evaluation = evaluate_labels(list(player.hole_cards) + list(hand.board))
            if evaluation is not None:
                evaluations[player.position] = evaluation  # type: ignore[index]

    payouts: Dict[str, Decimal] = {}
    distribution: Optional[Tuple[PotShare, ...]] = None
    if total > ZERO and len(active) == 1:
        winner = active[0]
        payouts[winner.position] = total  # type: ignore[index]
        distribution = (PotShare(winner.name, total, WINNER_BY_FOLD, tuple(winner.hole_cards)),)
    elif total > ZERO and evaluations:
        best = max(evaluations.values())
        winners = [player for player in active if player.position in evaluations and evaluations[player.position] == best]
        shares = []
        for player, amount in zip(winners, split_pot(total, len(winners))):
            payouts[player.position] = amount  # type: ignore[index]
            shares.append(PotShare(player.name, amount, evaluations[player.position].description, tuple(player.hole_cards)))
        distribution = tuple(shares)
    elif total > ZERO:
        LOGGER.warning("No evaluable hands among %s; leaving pot undistributed", [p.position for p in active])

    pot = Pot(
        amount=total,
        distribution=distribution,
        hero_pnl=hero_pnl(players, folded, contributed, payouts),
    )
    LOGGER.debug("Settled pot=%s showdown=%s payouts=%s", total, showdown, payouts)
    return Settlement(
        pot=pot,
        players=tuple(players),
        streets=streets,
        contributions=contributed,
        active=tuple(player.position for player in active),  # type: ignore[misc]
        showdown=showdown,
        evaluations=evaluations,
        payouts=payouts,
    )


def hero_pnl(
    players: Iterable[PlayerEntry],
    folded: Iterable[str],
    contributed: Mapping[str, Decimal],
    payouts: Mapping[str, Decimal],
) -> Decimal:
    hero = next((player for player in players if player.is_hero), None)
    if hero is None or not hero.position:
        return ZERO
    invested = contributed.get(hero.position, ZERO)
    if hero.position in set(folded):
        return -invested
    return payouts.get(hero.position, ZERO) - invested
