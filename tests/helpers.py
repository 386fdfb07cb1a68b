from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional, Tuple, Union

from hand_engine.cards import parse_cards
from hand_engine.evaluator import HandEvaluation, evaluate_best
from hand_engine.models import ActionEntry, ActionKind, HandInput, PlayerEntry, Street, TableConfig

Amount = Union[int, str, Decimal]


def config(size: int = 6, sb: Amount = 1, bb: Amount = 2) -> TableConfig:
    return TableConfig(size=size, small_blind=Decimal(str(sb)), big_blind=Decimal(str(bb)))


def act(position: str, kind: str, amount: Amount = 0) -> ActionEntry:
    return ActionEntry(position=position, kind=ActionKind(kind), amount=Decimal(str(amount)))


def log(*entries: Tuple) -> List[ActionEntry]:
    """Build an action log from (position, kind[, amount]) tuples."""
    return [act(*entry) for entry in entries]


def player(name: str, position: Optional[str], cards: str = "", hero: bool = False, stack: Amount = 200) -> PlayerEntry:
    return PlayerEntry(
        name=name,
        position=position,
        stack=Decimal(str(stack)),
        is_hero=hero,
        hole_cards=tuple(cards.split()),
    )


def make_hand(
    *,
    players: Iterable[PlayerEntry],
    size: int = 6,
    sb: Amount = 1,
    bb: Amount = 2,
    board: str = "",
    preflop: Iterable[ActionEntry] = (),
    flop: Iterable[ActionEntry] = (),
    turn: Iterable[ActionEntry] = (),
    river: Iterable[ActionEntry] = (),
) -> HandInput:
    actions = {
        Street.PREFLOP: tuple(preflop),
        Street.FLOP: tuple(flop),
        Street.TURN: tuple(turn),
        Street.RIVER: tuple(river),
    }
    return HandInput(
        config=config(size, sb, bb),
        players=tuple(players),
        board=tuple(board.split()),
        actions={street: entries for street, entries in actions.items() if entries},
    )


def heads_up_showdown() -> HandInput:
    """SB AhKh vs BB AsKs, blinds posted, SB completes, board runs out."""
    return make_hand(
        size=2,
        players=[
            player("Hero", "SB", "Ah Kh", hero=True),
            player("Villain", "BB", "As Ks"),
        ],
        board="2c 7d 9h Ts Jc",
        preflop=log(("SB", "posts", 1), ("BB", "posts", 2), ("SB", "calls", 2)),
    )


def evaluate(labels: str) -> HandEvaluation:
    evaluation = evaluate_best(parse_cards(labels.split()))
    assert evaluation is not None
    return evaluation
