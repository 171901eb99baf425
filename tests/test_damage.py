from __future__ import annotations

from typing import Callable

import pytest

from turnsarsah.cards import parse_cards
from turnsarsah.damage import DamageCalculator
from turnsarsah.hands import HandCategory


def test_royal_flush_without_crit(scripted_rng: Callable) -> None:
    calculator = DamageCalculator(scripted_rng([0.99]))

    result = calculator.calculate(parse_cards(["10H", "JH", "QH", "KH", "AH"]))

    assert result.category is HandCategory.ROYAL_FLUSH
    assert result.base_damage == 360
    assert not result.is_critical
    assert result.final_damage == 360
    assert result.multiplier == 1.0


def test_crit_roll_multiplies_damage(scripted_rng: Callable) -> None:
    calculator = DamageCalculator(scripted_rng([0.05]))

    result = calculator.calculate(parse_cards(["10H", "JH", "QH", "KH", "AH"]))

    assert result.is_critical
    assert result.final_damage == 450


def test_no_aces_means_no_crit_roll(scripted_rng: Callable) -> None:
    calculator = DamageCalculator(scripted_rng([]))

    result = calculator.calculate(parse_cards(["7C", "7D"]))

    assert result.base_damage == 24
    assert result.final_damage == 24


def test_crit_chance_counts_aces_and_wildcards() -> None:
    calculator = DamageCalculator()
    hand = parse_cards(["W", "W"])
    result = calculator.calculate(hand)

    assert result.category is HandCategory.ONE_PAIR
    assert result.base_damage == 38
    assert result.evaluation is not None
    assert calculator.crit_chance(hand, result.evaluation) == pytest.approx(0.2)


def test_high_card_sums_top_two_cards() -> None:
    result = DamageCalculator().calculate(parse_cards(["2C", "9D", "KH"]))

    assert result.category is HandCategory.HIGH_CARD
    assert result.base_damage == 22


def test_single_card_high_card() -> None:
    result = DamageCalculator().calculate(parse_cards(["5S"]))

    assert result.base_damage == 5


def test_debuff_reduces_damage() -> None:
    result = DamageCalculator().calculate(parse_cards(["7C", "7D"]), debuff_active=True)

    assert result.multiplier == pytest.approx(0.8)
    assert result.final_damage == 19


def test_banned_category_zeroes_damage_without_rolling(scripted_rng: Callable) -> None:
    calculator = DamageCalculator(scripted_rng([]))

    result = calculator.calculate(parse_cards(["AC", "AD"]), banned_category=HandCategory.ONE_PAIR)

    assert result.banned
    assert result.final_damage == 0
    assert result.category is HandCategory.ONE_PAIR
    assert result.label == "One Pair (BANNED)"


def test_ban_only_applies_to_matching_category() -> None:
    result = DamageCalculator().calculate(parse_cards(["7C", "7D"]), banned_category=HandCategory.FLUSH)

    assert not result.banned
    assert result.final_damage == 24


def test_banned_flag_cards_are_ignored_unless_excluded() -> None:
    hand = parse_cards(["7C", "7D", "2H"])
    hand[1] = hand[1].with_flags(banned=True)
    calculator = DamageCalculator()

    assert calculator.calculate(hand).base_damage == 24
    assert calculator.calculate(hand, exclude_banned=True).base_damage == 9


def test_empty_selection_deals_nothing() -> None:
    result = DamageCalculator().calculate([])

    assert result.final_damage == 0
    assert result.category is HandCategory.HIGH_CARD
