from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Collection, Dict, FrozenSet, Iterable, List, Optional, Sequence

from .models import (
    AGGRESSIVE,
    STREETS,
    ZERO,
    ActionEntry,
    ActionKind,
    HandInput,
    Street,
    TableConfig,
)
from .table import first_active_from, next_active_seat, preflop_order, street_opener

LOGGER = logging.getLogger("hand_engine.betting")

# BettingRound never stores progress. Every query replays the street log it
# was built with, so the same log always gives the same answers.

FACING_BET = [ActionKind.FOLDS, ActionKind.CALLS, ActionKind.RAISES]
UNOPENED = [ActionKind.CHECKS, ActionKind.BETS]


@dataclass(frozen=True)
class BetState:
    highest: Decimal
    aggressor: Optional[str]
    bet_count: int
    investments: Dict[str, Decimal]


def folded_positions(actions: Iterable[ActionEntry]) -> FrozenSet[str]:
    return frozenset(entry.position for entry in actions if entry.kind == ActionKind.FOLDS)


def _last_index(actions: Sequence[ActionEntry], kinds: Collection[ActionKind]) -> Optional[int]:
    for idx in range(len(actions) - 1, -1, -1):
        if actions[idx].kind in kinds:
            return idx
    return None


class BettingRound:
    """Betting queries for a single street."""

    def __init__(
        self,
        config: TableConfig,
        street: Street = Street.PREFLOP,
        actions: Iterable[ActionEntry] = (),
        seats: Optional[Sequence[str]] = None,
        folded: Iterable[str] = (),
    ) -> None:
        self.config = config
        self.street = Street(street)
        self.actions = tuple(actions)
        self.seats = tuple(seats) if seats else config.seats
        self.folded_before = frozenset(folded)

    @classmethod
    def for_hand(cls, hand: HandInput, street: Street) -> "BettingRound":
        earlier: List[ActionEntry] = []
        if street != Street.PREFLOP:
            # Preflop is closed once a later street is queried, so its silent
            # seats have already folded.
            later = [entry.position for prior in STREETS[1:] for entry in hand.street_actions(prior)]
            earlier.extend(
                complete_preflop(
                    hand.config,
                    hand.street_actions(Street.PREFLOP),
                    seats=hand.config.seats,
                    acted_elsewhere=later,
                )
            )
            for prior in STREETS[1 : STREETS.index(street)]:
                earlier.extend(hand.street_actions(prior))
        return cls(
            hand.config,
            street,
            hand.street_actions(street),
            seats=hand.config.seats,
            folded=folded_positions(earlier),
        )

    @property
    def is_preflop(self) -> bool:
        return self.street == Street.PREFLOP

    # Derived state ----------------------------------------------------

    def effective_actions(self) -> List[ActionEntry]:
        """The street log with forced blinds in front when preflop omits them."""
        if not self.is_preflop:
            return list(self.actions)
        posted = {entry.position for entry in self.actions if entry.kind == ActionKind.POSTS}
        seeds = [
            ActionEntry(position=position, kind=ActionKind.POSTS, amount=amount)
            for position, amount in (("SB", self.config.small_blind), ("BB", self.config.big_blind))
            if position in self.seats and position not in posted and position not in self.folded_before
        ]
        return seeds + list(self.actions)

    def folded(self) -> FrozenSet[str]:
        return self.folded_before | folded_positions(self.actions)

    def active_seats(self) -> List[str]:
        folded = self.folded()
        return [seat for seat in self.seats if seat not in folded]

    def bet_state(self) -> BetState:
        highest = self.config.big_blind if self.is_preflop else ZERO
        aggressor: Optional[str] = None
        bet_count = 0
        investments: Dict[str, Decimal] = {}
        for entry in self.effective_actions():
            if entry.is_investing:
                # Amounts are running totals for the street, never increments.
                investments[entry.position] = entry.amount
            if entry.kind in (ActionKind.BETS, ActionKind.RAISES):
                highest = max(highest, entry.amount)
                aggressor = entry.position
                bet_count += 1
            elif entry.kind == ActionKind.POSTS:
                highest = max(highest, entry.amount)
                if bet_count == 0 and entry.amount >= highest:
                    aggressor = entry.position
        return BetState(highest=highest, aggressor=aggressor, bet_count=bet_count, investments=investments)

    def investment(self, position: str) -> Decimal:
        return self.bet_state().investments.get(position, ZERO)

    # Queries ----------------------------------------------------------

    def has_outstanding_bet(self) -> bool:
        """True while some live seat has not answered the latest bet, raise or post."""
        actions = self.effective_actions()
        idx = _last_index(actions, AGGRESSIVE)
        if idx is None:
            return False
        aggressor = actions[idx].position
        responded = {entry.position for entry in actions[idx + 1 :]}
        expected = set(self.active_seats()) - {aggressor}
        return not expected.issubset(responded)

    def has_reset(self) -> bool:
        """True once every live seat has answered the latest bet."""
        actions = self.effective_actions()
        if _last_index(actions, AGGRESSIVE) is None:
            return False
        return not self.has_outstanding_bet()

    def legal_actions(self, position: Optional[str] = None) -> List[ActionKind]:
        if position is not None and position not in self.active_seats():
            return []
        first_preflop_round = self.is_preflop and not self.has_reset()
        if self.has_outstanding_bet() or first_preflop_round:
            return list(FACING_BET)
        return list(UNOPENED)

    def call_total(self) -> Decimal:
        """The street total a ``calls`` entry must carry."""
        return self.bet_state().highest

    def call_amount(self, position: str) -> Decimal:
        state = self.bet_state()
        return max(ZERO, state.highest - state.investments.get(position, ZERO))

    def next_to_act(self) -> Optional[str]:
        actions = self.effective_actions()
        active = self.active_seats()
        if not active:
            return None
        last_actor = actions[-1].position if actions else None

        bet_idx = _last_index(actions, (ActionKind.BETS, ActionKind.RAISES))
        if bet_idx is None:
            if last_actor is None:
                opener = street_opener(self.is_preflop, self.seats)
                return first_active_from(opener, self.seats, active)
            return next_active_seat(last_actor, self.seats, active)

        aggressor = actions[bet_idx].position
        responded = {entry.position for entry in actions[bet_idx + 1 :]}
        pending = [seat for seat in active if seat not in responded and seat != aggressor]
        if pending:
            return next_active_seat(last_actor, self.seats, pending)
        # Everyone answered: the seat after the aggressor opens the next street.
        return next_active_seat(aggressor, self.seats, active)

    def is_complete(self) -> bool:
        active = self.active_seats()
        if len(active) <= 1:
            return True
        if self.has_outstanding_bet():
            return False
        actions = self.effective_actions()
        acted = {entry.position for entry in actions if entry.kind != ActionKind.POSTS}
        idx = _last_index(actions, AGGRESSIVE)
        if idx is None or actions[idx].kind == ActionKind.POSTS:
            # Unopened street, or blinds only: every live seat (the big blind
            # included) gets one voluntary action.
            return set(active).issubset(acted)
        return True

    # Entry helpers ----------------------------------------------------

    def normalize(self, entry: ActionEntry) -> ActionEntry:
        """Rewrite an entry into the running-total form the log expects."""
        if entry.kind in (ActionKind.FOLDS, ActionKind.CHECKS):
            return replace(entry, amount=ZERO)
        if entry.kind == ActionKind.CALLS:
            return replace(entry, amount=self.call_total())
        if entry.amount <= ZERO:
            raise ValueError(f"{entry.kind.value} requires amount")
        return entry

    def apply(self, entry: ActionEntry) -> "BettingRound":
        """Return the round with ``entry`` appended, rejecting illegal moves."""
        if entry.position not in self.active_seats():
            raise RuntimeError("Seat not active")
        entry = self.normalize(entry)
        legal = self.legal_actions(entry.position)
        aggressive = {ActionKind.BETS, ActionKind.RAISES}

        if entry.kind == ActionKind.CHECKS and ActionKind.CHECKS not in legal:
            raise ValueError("Cannot check when facing a bet")
        if entry.kind in aggressive:
            if not aggressive.intersection(legal):
                raise ValueError(f"Illegal action {entry.kind.value} for {entry.position}")
            highest = self.call_total()
            if highest > ZERO and entry.amount <= highest:
                raise ValueError("Raise must exceed current bet")
        elif entry.kind != ActionKind.POSTS and entry.kind not in legal:
            raise ValueError(f"Illegal action {entry.kind.value} for {entry.position}")

        return BettingRound(
            self.config,
            self.street,
            self.actions + (entry,),
            seats=self.seats,
            folded=self.folded_before,
        )


def complete_preflop(
    config: TableConfig,
    actions: Sequence[ActionEntry],
    seats: Optional[Sequence[str]] = None,
    acted_elsewhere: Iterable[str] = (),
) -> List[ActionEntry]:
    """Fill the preflop log so every seat appears in turn order.

    Seats with no explicit entry anywhere in the hand fold when the first
    orbit reaches them; the blinds fold after their posts. Missing blind posts
    are put at the front. An empty log is returned unchanged.
    """
    if not actions:
        return []
    seats = tuple(seats) if seats else config.seats
    explicit = {entry.position for entry in actions} | set(acted_elsewhere)
    silent = {seat for seat in seats if seat not in explicit}

    posted = {entry.position for entry in actions if entry.kind == ActionKind.POSTS}
    completed = [
        ActionEntry(position=position, kind=ActionKind.POSTS, amount=amount)
        for position, amount in (("SB", config.small_blind), ("BB", config.big_blind))
        if position in seats and position not in posted
    ]

    order = preflop_order(seats)
    cursor = 0
    for entry in actions:
        if entry.kind != ActionKind.POSTS and entry.position in order:
            idx = order.index(entry.position)
            if idx >= cursor:
                completed.extend(_folds(order[cursor:idx], silent))
                cursor = idx + 1
            else:
                # The log wrapped into a second orbit; everyone left folds first.
                completed.extend(_folds(order[cursor:], silent))
                cursor = len(order)
        completed.append(entry)
    completed.extend(_folds(order[cursor:], silent))

    if silent:
        LOGGER.debug("Auto-folded silent seats: %s", [seat for seat in order if seat in silent])
    return completed


def _folds(positions: Iterable[str], silent: Collection[str]) -> List[ActionEntry]:
    return [ActionEntry(position=position, kind=ActionKind.FOLDS) for position in positions if position in silent]
