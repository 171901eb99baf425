from __future__ import annotations

import pytest

from turnsarsah.cards import Card, Rank, Suit, parse_cards
from turnsarsah.damage import base_damage
from turnsarsah.hands import HAND_BONUSES, HandCategory, HandEvaluation, evaluate_hand


def _hand(*codes: str) -> list[Card]:
    return parse_cards(codes)


def test_royal_flush_scenario() -> None:
    hand = _hand("10H", "JH", "QH", "KH", "AH")

    evaluation = evaluate_hand(hand)

    assert evaluation.category is HandCategory.ROYAL_FLUSH
    assert evaluation.bonus == 300
    assert evaluation.contributing_indices == (0, 1, 2, 3, 4)
    assert base_damage(hand, evaluation) == 360


def test_one_pair_scenario() -> None:
    hand = _hand("7C", "7D")

    evaluation = evaluate_hand(hand)

    assert evaluation.category is HandCategory.ONE_PAIR
    assert evaluation.bonus == 10
    assert base_damage(hand, evaluation) == 24


def test_wildcard_scenario_beats_clean_sub_hand() -> None:
    hand = _hand("2C", "5D", "9H", "JS", "W")

    evaluation = evaluate_hand(hand)
    clean = evaluate_hand(hand[:4])

    assert evaluation.bonus >= clean.bonus
    assert evaluation.category is HandCategory.ONE_PAIR
    assert evaluation.contributing_indices == (3, 4)


@pytest.mark.parametrize("low", range(2, 10))
@pytest.mark.parametrize("suit", list(Suit))
def test_single_suit_runs_are_straight_flushes(low: int, suit: Suit) -> None:
    hand = [Card.standard(Rank(low + offset), suit) for offset in range(5)]

    assert evaluate_hand(hand).category is HandCategory.STRAIGHT_FLUSH


@pytest.mark.parametrize("suit", list(Suit))
def test_broadway_single_suit_is_royal(suit: Suit) -> None:
    hand = [Card.standard(Rank(rank), suit) for rank in (14, 13, 12, 11, 10)]

    assert evaluate_hand(hand).category is HandCategory.ROYAL_FLUSH


@pytest.mark.parametrize(
    ("codes", "expected"),
    [
        (("QC", "KD", "AH", "2S", "3C"), HandCategory.STRAIGHT),
        (("AC", "2D", "3H", "4S", "5C"), HandCategory.STRAIGHT),
        (("QH", "KH", "AH", "2H", "3H"), HandCategory.STRAIGHT_FLUSH),
        (("JC", "QD", "KH", "2S", "3C"), HandCategory.HIGH_CARD),
    ],
)
def test_wrap_around_straights(codes: tuple[str, ...], expected: HandCategory) -> None:
    assert evaluate_hand(_hand(*codes)).category is expected


def test_straight_uses_one_index_per_rank() -> None:
    evaluation = evaluate_hand(_hand("5C", "6D", "7H", "8S", "9C"))

    assert evaluation.category is HandCategory.STRAIGHT
    assert evaluation.contributing_indices == (0, 1, 2, 3, 4)


def test_short_hands_never_reach_straight_or_flush() -> None:
    evaluation = evaluate_hand(_hand("2C", "3C", "4C", "5C"))

    assert evaluation.category is HandCategory.HIGH_CARD
    assert evaluation.contributing_indices == (0, 1, 2, 3)


def test_empty_hand_is_zero_high_card() -> None:
    assert evaluate_hand([]) == HandEvaluation(HandCategory.HIGH_CARD, 0, ())


def test_four_of_a_kind_beats_full_house() -> None:
    evaluation = evaluate_hand(_hand("5C", "5D", "5H", "W", "W"))

    assert evaluation.category is HandCategory.FOUR_OF_A_KIND
    assert evaluation.bonus == HAND_BONUSES[HandCategory.FOUR_OF_A_KIND]


def test_five_equal_ranks_score_as_four_of_a_kind() -> None:
    evaluation = evaluate_hand(_hand("9C", "9D", "9H", "9S", "W"))

    assert evaluation.category is HandCategory.FOUR_OF_A_KIND
    assert evaluation.contributing_indices == (0, 1, 2, 3)


def test_full_house_indices_cover_trips_and_pair() -> None:
    evaluation = evaluate_hand(_hand("KC", "3D", "KH", "3S", "KD"))

    assert evaluation.category is HandCategory.FULL_HOUSE
    assert evaluation.contributing_indices == (0, 1, 2, 3, 4)


def test_two_pair_keeps_highest_pairs() -> None:
    evaluation = evaluate_hand(_hand("2C", "2D", "9C", "9D", "KC", "KS"))

    assert evaluation.category is HandCategory.TWO_PAIR
    assert evaluation.contributing_indices == (2, 3, 4, 5)


def test_two_pair_in_long_hand() -> None:
    evaluation = evaluate_hand(_hand("4C", "4D", "8H", "8S", "JC", "QD", "KH", "2S"))

    assert evaluation.category is HandCategory.TWO_PAIR
    assert evaluation.contributing_indices == (0, 1, 2, 3)


def test_wildcards_take_rank_and_suit_together() -> None:
    evaluation = evaluate_hand(_hand("10H", "JH", "QH", "W", "W"))

    assert evaluation.category is HandCategory.ROYAL_FLUSH
    assert evaluation.contributing_indices == (0, 1, 2, 3, 4)


def test_extra_wildcards_mirror_the_first() -> None:
    evaluation = evaluate_hand(_hand("AH", "W", "W", "W"))

    assert evaluation.category is HandCategory.FOUR_OF_A_KIND


@pytest.mark.parametrize(
    "codes",
    [
        ("2C", "5D", "9H", "JS"),
        ("7C", "8C", "9C", "10C"),
        ("KD", "KH", "3S", "3C"),
        ("AS", "AD", "AC", "4H"),
        ("2H", "7H", "9H", "QH"),
    ],
)
def test_wildcard_never_scores_below_lowest_substitute(codes: tuple[str, ...]) -> None:
    wild_hand = _hand(*codes, "W")
    lowest = _hand(*codes, "2C")

    assert evaluate_hand(wild_hand).bonus >= evaluate_hand(lowest).bonus


def test_evaluation_is_idempotent() -> None:
    hand = _hand("3C", "W", "9D", "W", "9S")

    assert evaluate_hand(hand) == evaluate_hand(hand)


def test_category_names_and_order() -> None:
    assert HandCategory.FULL_HOUSE.display_name == "Full House"
    assert HandCategory.HIGH_CARD < HandCategory.ONE_PAIR < HandCategory.ROYAL_FLUSH
    assert [category.bonus for category in HandCategory] == sorted(HAND_BONUSES.values())
