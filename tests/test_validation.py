import pytest

from hand_engine.models import Street
from hand_engine.validation import HandValidationError, ensure_valid, validate_hand

from .helpers import act, heads_up_showdown, log, make_hand, player


def issues_for(**kwargs):
    kwargs.setdefault("players", [player("Hero", "SB", "Ah Kh", hero=True), player("Villain", "BB")])
    kwargs.setdefault("preflop", log(("SB", "calls", 2), ("BB", "checks")))
    kwargs.setdefault("size", 2)
    return validate_hand(make_hand(**kwargs))


def test_complete_hand_is_valid():
    assert validate_hand(heads_up_showdown()) == []
    assert issues_for() == []
    ensure_valid(heads_up_showdown())


def test_exactly_one_hero_required():
    assert "Exactly one hero is required." in issues_for(players=[player("A", "SB", "Ah Kh"), player("B", "BB")])
    assert "Exactly one hero is required." in issues_for(
        players=[player("A", "SB", "Ah Kh", hero=True), player("B", "BB", hero=True)]
    )


def test_positions_must_be_known_and_unique():
    issues = issues_for(players=[player("Hero", "SB", "Ah Kh", hero=True), player("Villain", "SB")])
    assert "Position SB is taken by 2 players." in issues
    issues = issues_for(players=[player("Hero", "SB", "Ah Kh", hero=True), player("Villain", "BTN")])
    assert "Unknown position BTN for a 2-max table." in issues
    issues = issues_for(players=[player("Hero", None, "Ah Kh", hero=True)])
    assert "All players need a position assigned." in issues


def test_blinds_must_be_positive():
    assert "Please enter valid blind values." in issues_for(sb=0)


def test_card_problems_are_reported():
    assert "Hero must have 0 or 2 hole cards." in issues_for(
        players=[player("Hero", "SB", "Ah", hero=True), player("Villain", "BB", "Kd Kc")]
    )
    assert "Card Ah is used 2 times." in issues_for(
        players=[player("Hero", "SB", "Ah Kh", hero=True), player("Villain", "BB", "Ah Qd")]
    )
    assert "Unparseable card 'Zz'." in issues_for(
        players=[player("Hero", "SB", "Ah Zz", hero=True), player("Villain", "BB")]
    )
    assert "At least one player needs hole cards." in issues_for(
        players=[player("Hero", "SB", hero=True), player("Villain", "BB")]
    )


def test_board_size_must_match_a_street():
    assert "Board must have 0, 3, 4 or 5 cards." in issues_for(board="2c 3d")
    assert issues_for(board="2c 3d 4s 5h") == []


def test_street_actions_need_board_cards():
    issues = issues_for(flop=log(("SB", "checks")))
    assert "flop actions need 3 board cards." in issues
    assert issues_for(board="2c 3d 9s", flop=log(("SB", "checks"))) == []


def test_action_problems_are_reported():
    assert "At least one preflop action is required." in issues_for(preflop=[])
    assert "preflop: SB acts after folding." in issues_for(preflop=log(("SB", "folds"), ("SB", "calls", 2)))
    assert "preflop: BB checks with an amount." in issues_for(preflop=log(("SB", "calls", 2), ("BB", "checks", 2)))
    assert "preflop: SB raises without an amount." in issues_for(preflop=log(("SB", "raises")))
    assert "preflop: unknown position CO." in issues_for(preflop=[act("CO", "folds")])


def test_ensure_valid_raises_with_every_issue():
    hand = make_hand(size=2, players=[player("A", "SB"), player("B", "BB")])
    with pytest.raises(HandValidationError) as excinfo:
        ensure_valid(hand)
    error = excinfo.value
    assert isinstance(error, ValueError)
    assert "Exactly one hero is required." in error.issues
    assert "At least one preflop action is required." in error.issues
    assert str(error) == "; ".join(error.issues)


def test_fold_carries_across_streets():
    hand = (
        heads_up_showdown()
        .with_actions(Street.PREFLOP, log(("SB", "folds")))
        .with_actions(Street.FLOP, log(("SB", "checks"), ("BB", "checks")))
    )
    assert "flop: SB acts after folding." in validate_hand(hand)
