import json
from decimal import Decimal

import pytest

from hand_engine.models import ActionKind
from hand_engine.record import build_record, dumps, loads, record_from_dict, record_to_dict
from hand_engine.validation import HandValidationError

from .helpers import heads_up_showdown, log, make_hand, player


def uncontested_hand():
    return make_hand(
        players=[player("Hero", "SB", "7c 2d", hero=True), player("Bob", "BTN")],
        preflop=log(("BTN", "raises", 5)),
    )


def test_build_record_for_heads_up_showdown():
    record = build_record(heads_up_showdown())

    assert record.schema_version == 1
    assert record.showdown
    assert record.game_info.table_size == 2
    assert record.game_info.dealer_seat == 1
    assert [street.name for street in record.streets] == ["preflop", "flop", "turn", "river"]
    assert [len(street.cards) for street in record.streets] == [0, 3, 4, 5]
    assert record.streets[-1].cards == ("2c", "7d", "9h", "Ts", "Jc")
    assert [action.action for action in record.streets[0].actions] == [
        ActionKind.POSTS,
        ActionKind.POSTS,
        ActionKind.CALLS,
    ]

    hero = record.players[0]
    assert (hero.name, hero.seat, hero.is_hero) == ("Hero", 1, True)
    assert hero.final_hand == "High Card Ace"
    assert len(hero.final_cards) == 5
    assert record.pot.amount == Decimal("4")
    assert [share.amount for share in record.pot.distribution] == [Decimal("2"), Decimal("2")]


def test_build_record_fills_seats_and_auto_folds():
    record = build_record(uncontested_hand())

    assert [(p.seat, p.position) for p in record.players] == [
        (1, "SB"),
        (2, "BB"),
        (3, "UTG"),
        (4, "MP"),
        (5, "CO"),
        (6, "BTN"),
    ]
    assert record.game_info.dealer_seat == 6
    assert not record.showdown
    assert [street.name for street in record.streets] == ["preflop"]

    actions = record.streets[0].actions
    assert len(actions) == 8
    assert actions[2].player_name == "Villain UTG"
    assert actions[2].action == ActionKind.FOLDS
    assert actions[5].player_name == "Bob"
    assert record.players[1].final_hand is None
    assert record.pot.hero_pnl == Decimal("-1")


def test_build_record_rejects_invalid_hand():
    hand = make_hand(players=[player("Hero", "SB", "Ah Kh", hero=True)])
    with pytest.raises(HandValidationError, match="preflop action"):
        build_record(hand)


def test_record_survives_dict_round_trip():
    for hand in (heads_up_showdown(), uncontested_hand()):
        record = build_record(hand)
        assert record_from_dict(record_to_dict(record)) == record


def test_record_survives_json_round_trip():
    record = build_record(heads_up_showdown())
    raw = dumps(record)
    payload = json.loads(raw)

    assert payload["schema_version"] == 1
    assert payload["game_info"]["big_blind"] == "2"
    assert payload["pot"]["distribution"][1]["player_name"] == "Villain"
    assert payload["players"][0]["final_cards"] is not None
    assert loads(raw) == record


def test_undistributed_pot_encodes_as_null():
    hand = make_hand(
        players=[player("Hero", "UTG", "9c 9d", hero=True), player("Ann", "CO"), player("Bo", "BTN")],
        board="Ah Kd 7c 2s 4h",
        preflop=log(("UTG", "folds"), ("CO", "raises", 6), ("BTN", "calls", 6)),
    )
    record = build_record(hand)
    assert record_to_dict(record)["pot"]["distribution"] is None
    assert loads(dumps(record)) == record


def test_record_from_dict_rejects_malformed_data():
    with pytest.raises(ValueError, match="Malformed hand record"):
        record_from_dict({"pot": {}})
    with pytest.raises(ValueError, match="Malformed hand record"):
        record_from_dict([])  # type: ignore[arg-type]


def test_json_keeps_every_digit_of_large_amounts():
    hand = make_hand(
        size=2,
        players=[
            player("Hero", "SB", "Ah Kh", hero=True, stack="123456789012345678.01"),
            player("Villain", "BB", "As Ks"),
        ],
        board="2c 7d 9h Ts Jc",
        preflop=log(("SB", "posts", 1), ("BB", "posts", 2), ("SB", "calls", 2)),
    )
    record = build_record(hand)
    raw = dumps(record)

    assert json.loads(raw)["players"][0]["stack"] == "123456789012345678.01"
    assert loads(raw).players[0].stack == Decimal("123456789012345678.01")
    assert loads(raw) == record
