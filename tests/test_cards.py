import pytest

from hand_engine.cards import Card, cards_to_labels, parse_cards, parse_label, suit_symbol, try_parse_label


def test_parse_label_normalises_case():
    card = parse_label("ah")
    assert card == Card("A", "h")
    assert card.label == "Ah"
    assert card.value == 14
    assert card.suit_name == "hearts"
    assert card.symbol == "A♥"


def test_card_validation_rejects_invalid_labels():
    with pytest.raises(ValueError, match="Invalid rank"):
        Card("1", "h")
    with pytest.raises(ValueError, match="Invalid suit"):
        Card("A", "x")
    with pytest.raises(ValueError, match="Invalid card label"):
        parse_label("10h")


def test_try_parse_label_returns_none_for_garbage():
    for label in ["", "A", "Ahh", "1h", "Ax", None, 14]:
        assert try_parse_label(label) is None, f"label={label!r}"
    assert try_parse_label("Td") == Card("T", "d")


def test_cards_order_by_rank_only():
    assert Card("K", "s") < Card("A", "c")
    assert Card("2", "h") < Card("T", "h")
    assert not Card("A", "h") < Card("A", "s")
    assert not Card("A", "h") > Card("A", "s")
    assert sorted(parse_cards(["9c", "Ah", "2d"]))[0].rank == "2"


def test_labels_and_symbols():
    cards = parse_cards(["Qs", "Jd", "3c"])
    assert cards_to_labels(cards) == ["Qs", "Jd", "3c"]
    assert suit_symbol("S") == "♠"
    assert suit_symbol("x") == "?"
