from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .table import positions_for

ZERO = Decimal("0")


def _new_id() -> str:
    return uuid.uuid4().hex


def to_decimal(value: object) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


class Street(str, Enum):
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"

    @property
    def board_size(self) -> int:
        """Cumulative board cards required before this street can be played."""
        return BOARD_SIZES[self]


BOARD_SIZES = {Street.PREFLOP: 0, Street.FLOP: 3, Street.TURN: 4, Street.RIVER: 5}
STREETS: Tuple[Street, ...] = (Street.PREFLOP, Street.FLOP, Street.TURN, Street.RIVER)


class ActionKind(str, Enum):
    POSTS = "posts"
    BETS = "bets"
    RAISES = "raises"
    CALLS = "calls"
    CHECKS = "checks"
    FOLDS = "folds"


# Entries that set a new street high-water mark.
AGGRESSIVE = frozenset({ActionKind.POSTS, ActionKind.BETS, ActionKind.RAISES})
# Entries whose amount is the player's new total street investment.
INVESTING = frozenset({ActionKind.POSTS, ActionKind.BETS, ActionKind.RAISES, ActionKind.CALLS})


@dataclass(frozen=True)
class TableConfig:
    size: int = 6
    small_blind: Decimal = Decimal("1")
    big_blind: Decimal = Decimal("2")

    @property
    def seats(self) -> Tuple[str, ...]:
        return positions_for(self.size)


@dataclass(frozen=True)
class PlayerEntry:
    name: str
    position: Optional[str] = None
    stack: Decimal = ZERO
    is_hero: bool = False
    hole_cards: Tuple[str, ...] = ()
    id: str = field(default_factory=_new_id, compare=False)

    @property
    def has_cards(self) -> bool:
        return len(self.hole_cards) == 2


@dataclass(frozen=True)
class ActionEntry:
    position: str
    kind: ActionKind
    amount: Decimal = ZERO
    id: str = field(default_factory=_new_id, compare=False)

    @property
    def is_investing(self) -> bool:
        return self.kind in INVESTING


@dataclass(frozen=True)
class PotShare:
    player_name: str
    amount: Decimal
    hand: str
    cards: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Pot:
    amount: Decimal
    distribution: Optional[Tuple[PotShare, ...]]
    hero_pnl: Decimal


@dataclass(frozen=True)
class HandInput:
    """Everything a collaborator gathered for one hand: table, seats, board, log."""

    config: TableConfig
    players: Tuple[PlayerEntry, ...]
    board: Tuple[str, ...] = ()
    actions: Mapping[Street, Tuple[ActionEntry, ...]] = field(default_factory=dict)

    def street_actions(self, street: Street) -> Tuple[ActionEntry, ...]:
        return tuple(self.actions.get(street, ()))

    def all_actions(self) -> List[ActionEntry]:
        return [entry for street in STREETS for entry in self.street_actions(street)]

    def board_for(self, street: Street) -> Tuple[str, ...]:
        return tuple(self.board[: street.board_size])

    @property
    def hero(self) -> Optional[PlayerEntry]:
        return next((player for player in self.players if player.is_hero), None)

    def player_at(self, position: str) -> Optional[PlayerEntry]:
        return next((player for player in self.players if player.position == position), None)

    def with_actions(self, street: Street, actions: Sequence[ActionEntry]) -> "HandInput":
        updated: Dict[Street, Tuple[ActionEntry, ...]] = dict(self.actions)
        updated[street] = tuple(actions)
        return HandInput(config=self.config, players=self.players, board=self.board, actions=updated)

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> "HandInput":
        """Build a hand from the JSON shape an entry UI sends.

        ``{"table_size", "small_blind", "big_blind", "players": [...],
        "board": [...], "actions": {"preflop": [{"position", "action", "amount"}]}}``
        """
        if not isinstance(payload, Mapping):
            raise ValueError("hand must be an object")
        config = TableConfig(
            size=int(payload.get("table_size", 6)),  # type: ignore[arg-type]
            small_blind=to_decimal(payload.get("small_blind", 1)),
            big_blind=to_decimal(payload.get("big_blind", 2)),
        )

        raw_players = payload.get("players") or []
        if not isinstance(raw_players, list):
            raise ValueError("players must be a list")
        players = []
        for raw in raw_players:
            if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str):
                raise ValueError("player name required")
            cards = raw.get("cards") or []
            if not isinstance(cards, list):
                raise ValueError("player cards must be a list")
            players.append(
                PlayerEntry(
                    name=raw["name"],
                    position=raw.get("position") or None,
                    stack=to_decimal(raw.get("stack", 0)),
                    is_hero=bool(raw.get("is_hero", False)),
                    hole_cards=tuple(str(card) for card in cards),
                )
            )

        board = payload.get("board") or []
        if not isinstance(board, list):
            raise ValueError("board must be a list")

        raw_actions = payload.get("actions") or {}
        if not isinstance(raw_actions, Mapping):
            raise ValueError("actions must be an object keyed by street")
        actions: Dict[Street, Tuple[ActionEntry, ...]] = {}
        for street_name, entries in raw_actions.items():
            try:
                street = Street(street_name)
            except ValueError as exc:
                raise ValueError(f"Unknown street: {street_name}") from exc
            if not isinstance(entries, list):
                raise ValueError(f"{street.value} actions must be a list")
            actions[street] = tuple(action_from_payload(entry) for entry in entries)

        return cls(
            config=config,
            players=tuple(players),
            board=tuple(str(card) for card in board),
            actions=actions,
        )


def action_from_payload(raw: object) -> ActionEntry:
    if not isinstance(raw, Mapping) or not isinstance(raw.get("position"), str):
        raise ValueError("action position required")
    try:
        kind = ActionKind(raw.get("action"))
    except ValueError as exc:
        raise ValueError(f"Unsupported action {raw.get('action')}") from exc
    return ActionEntry(position=raw["position"], kind=kind, amount=to_decimal(raw.get("amount", 0)))
