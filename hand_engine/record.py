"""Versioned hand record handed to storage and replay collaborators.

The dict/JSON shape is a stable contract: a saved hand is loaded back and
re-rendered from this same structure, so ``record_from_dict(record_to_dict(r))``
must equal ``r`` field for field.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from .models import STREETS, ActionKind, HandInput, Pot, PotShare, to_decimal
from .settlement import settle
from .table import button_seat
from .validation import ensure_valid

LOGGER = logging.getLogger("hand_engine.record")

SCHEMA_VERSION = 1


@dataclass(frozen=True)
class GameInfo:
    table_size: int
    small_blind: Decimal
    big_blind: Decimal
    dealer_seat: int


@dataclass(frozen=True)
class PlayerRecord:
    name: str
    seat: int
    stack: Decimal
    position: Optional[str]
    is_hero: bool
    cards: Tuple[str, ...] = ()
    final_hand: Optional[str] = None
    final_cards: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class ActionRecord:
    player_name: str
    position: str
    action: ActionKind
    amount: Decimal


@dataclass(frozen=True)
class StreetRecord:
    name: str
    cards: Tuple[str, ...]
    actions: Tuple[ActionRecord, ...]


@dataclass(frozen=True)
class HandRecord:
    game_info: GameInfo
    players: Tuple[PlayerRecord, ...]
    streets: Tuple[StreetRecord, ...]
    pot: Pot
    showdown: bool
    schema_version: int = SCHEMA_VERSION


def build_record(hand: HandInput) -> HandRecord:
    """Validate, complete and settle a hand, then shape it as a record.

    Raises HandValidationError when the hand cannot be settled.
    """
    ensure_valid(hand)
    settlement = settle(hand)

    seat_numbers = {player.position: number for number, player in enumerate(settlement.players, start=1)}
    names = {player.position: player.name for player in settlement.players}

    players = []
    for player in settlement.players:
        evaluation = settlement.evaluations.get(player.position or "")
        players.append(
            PlayerRecord(
                name=player.name,
                seat=seat_numbers[player.position],
                stack=player.stack,
                position=player.position,
                is_hero=player.is_hero,
                cards=tuple(player.hole_cards),
                final_hand=evaluation.description if evaluation else None,
                final_cards=tuple(evaluation.labels) if evaluation else None,
            )
        )

    streets = []
    for street in STREETS:
        if len(hand.board) < street.board_size:
            break
        streets.append(
            StreetRecord(
                name=street.value,
                cards=hand.board_for(street),
                actions=tuple(
                    ActionRecord(
                        player_name=names.get(entry.position, entry.position),
                        position=entry.position,
                        action=entry.kind,
                        amount=entry.amount,
                    )
                    for entry in settlement.streets[street]
                ),
            )
        )

    record = HandRecord(
        game_info=GameInfo(
            table_size=hand.config.size,
            small_blind=hand.config.small_blind,
            big_blind=hand.config.big_blind,
            dealer_seat=seat_numbers.get(button_seat(hand.config.seats), 1),
        ),
        players=tuple(players),
        streets=tuple(streets),
        pot=settlement.pot,
        showdown=settlement.showdown,
    )
    LOGGER.debug("Built record: pot=%s showdown=%s", record.pot.amount, record.showdown)
    return record


# Encoding -------------------------------------------------------------


def record_to_dict(record: HandRecord) -> Dict[str, Any]:
    pot = record.pot
    return {
        "schema_version": record.schema_version,
        "game_info": {
            "table_size": record.game_info.table_size,
            "small_blind": record.game_info.small_blind,
            "big_blind": record.game_info.big_blind,
            "dealer_seat": record.game_info.dealer_seat,
        },
        "players": [
            {
                "name": player.name,
                "seat": player.seat,
                "stack": player.stack,
                "position": player.position,
                "is_hero": player.is_hero,
                "cards": list(player.cards),
                "final_hand": player.final_hand,
                "final_cards": list(player.final_cards) if player.final_cards is not None else None,
            }
            for player in record.players
        ],
        "streets": [
            {
                "name": street.name,
                "cards": list(street.cards),
                "actions": [
                    {
                        "player_name": action.player_name,
                        "position": action.position,
                        "action": action.action.value,
                        "amount": action.amount,
                    }
                    for action in street.actions
                ],
            }
            for street in record.streets
        ],
        "pot": {
            "amount": pot.amount,
            "distribution": (
                [
                    {
                        "player_name": share.player_name,
                        "amount": share.amount,
                        "hand": share.hand,
                        "cards": list(share.cards),
                    }
                    for share in pot.distribution
                ]
                if pot.distribution is not None
                else None
            ),
            "hero_pnl": pot.hero_pnl,
        },
        "showdown": record.showdown,
    }


def record_from_dict(data: Mapping[str, Any]) -> HandRecord:
    try:
        info = data["game_info"]
        raw_pot = data["pot"]
        distribution = raw_pot.get("distribution")
        return HandRecord(
            schema_version=int(data.get("schema_version", SCHEMA_VERSION)),
            game_info=GameInfo(
                table_size=int(info["table_size"]),
                small_blind=to_decimal(info["small_blind"]),
                big_blind=to_decimal(info["big_blind"]),
                dealer_seat=int(info["dealer_seat"]),
            ),
            players=tuple(
                PlayerRecord(
                    name=raw["name"],
                    seat=int(raw["seat"]),
                    stack=to_decimal(raw["stack"]),
                    position=raw.get("position"),
                    is_hero=bool(raw.get("is_hero", False)),
                    cards=tuple(raw.get("cards") or ()),
                    final_hand=raw.get("final_hand"),
                    final_cards=tuple(raw["final_cards"]) if raw.get("final_cards") is not None else None,
                )
                for raw in data["players"]
            ),
            streets=tuple(
                StreetRecord(
                    name=raw["name"],
                    cards=tuple(raw.get("cards") or ()),
                    actions=tuple(
                        ActionRecord(
                            player_name=action["player_name"],
                            position=action.get("position", action["player_name"]),
                            action=ActionKind(action["action"]),
                            amount=to_decimal(action.get("amount", 0)),
                        )
                        for action in raw.get("actions") or ()
                    ),
                )
                for raw in data["streets"]
            ),
            pot=Pot(
                amount=to_decimal(raw_pot["amount"]),
                distribution=(
                    tuple(
                        PotShare(
                            player_name=share["player_name"],
                            amount=to_decimal(share["amount"]),
                            hand=share["hand"],
                            cards=tuple(share.get("cards") or ()),
                        )
                        for share in distribution
                    )
                    if distribution is not None
                    else None
                ),
                hero_pnl=to_decimal(raw_pot["hero_pnl"]),
            ),
            showdown=bool(data.get("showdown", False)),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed hand record: {exc}") from exc


def _json_default(value: object) -> object:
    if isinstance(value, Decimal):
        # Strings keep every digit; to_decimal reads them back exactly.
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(record: HandRecord) -> str:
    return json.dumps(record_to_dict(record), default=_json_default)


def loads(raw: str) -> HandRecord:
    return record_from_dict(json.loads(raw, parse_float=Decimal))


def encode_payload(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, default=_json_default)
