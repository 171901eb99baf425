from __future__ import annotations

import pytest

from turnsarsah.cards import (
    Card,
    InvalidCardCode,
    Rank,
    Suit,
    card_value,
    format_cards,
    iter_full_deck,
    parse_card,
    parse_cards,
)


@pytest.mark.parametrize(
    ("code", "rank", "suit"),
    [
        ("10H", Rank.TEN, Suit.HEARTS),
        ("qs", Rank.QUEEN, Suit.SPADES),
        ("AD", Rank.ACE, Suit.DIAMONDS),
        (" 2c ", Rank.TWO, Suit.CLUBS),
    ],
)
def test_parse_card_standard(code: str, rank: Rank, suit: Suit) -> None:
    card = parse_card(code)

    assert card.rank is rank
    assert card.suit is suit
    assert not card.is_wildcard


@pytest.mark.parametrize("code", ["W", "wild", "Joker"])
def test_parse_card_wildcard(code: str) -> None:
    card = parse_card(code)

    assert card.is_wildcard
    assert card.identity is None
    assert card_value(card) == 14


@pytest.mark.parametrize("code", ["", "H", "1X", "11H", "ZZ"])
def test_parse_card_rejects_bad_codes(code: str) -> None:
    with pytest.raises(InvalidCardCode):
        parse_card(code)


def test_invalid_card_code_is_value_error() -> None:
    assert issubclass(InvalidCardCode, ValueError)


def test_parse_cards_gives_unique_ids() -> None:
    cards = parse_cards(["7C", "7C", "W"])

    assert len({card.id for card in cards}) == 3
    assert cards[0].identity == cards[1].identity


def test_full_deck_has_52_distinct_cards() -> None:
    deck = list(iter_full_deck())

    assert len(deck) == 52
    assert len({card.identity for card in deck}) == 52


def test_card_code_round_trip() -> None:
    for card in iter_full_deck():
        assert parse_card(card.code()).identity == card.identity


def test_presentation_flags_do_not_change_identity() -> None:
    card = Card.standard(Rank.KING, Suit.SPADES)
    hidden = card.with_flags(blind=True, banned=True)

    assert hidden.identity == card.identity
    assert hidden.label() == "?"
    assert card.label() == "KS"
    assert hidden.with_flags(blind=False).label() == "KS"


def test_card_record_round_trip() -> None:
    cards = [Card.standard(Rank.TEN, Suit.HEARTS, "abc").with_flags(banned=True), Card.wildcard("w1")]

    restored = [Card.from_record(card.to_record()) for card in cards]

    assert restored == cards


def test_face_cards() -> None:
    assert Card.standard(Rank.JACK, Suit.CLUBS).is_face
    assert not Card.standard(Rank.ACE, Suit.CLUBS).is_face
    assert not Card.wildcard().is_face


def test_format_cards_uses_labels() -> None:
    assert format_cards(parse_cards(["10H", "W"])) == "10H WILD"
