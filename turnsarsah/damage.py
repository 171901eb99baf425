"""Damage calculation for player attacks."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Final, Sequence

from .cards import Card, Rank, card_value
from .hands import HandCategory, HandEvaluation, evaluate_hand

__all__ = [
    "DamageResult",
    "DamageCalculator",
    "CRIT_CHANCE_PER_CARD",
    "CRIT_MULTIPLIER",
    "DEBUFF_MULTIPLIER",
    "base_damage",
]

CRIT_CHANCE_PER_CARD: Final[float] = 0.1
CRIT_MULTIPLIER: Final[float] = 1.25
DEBUFF_MULTIPLIER: Final[float] = 0.8


@dataclass(frozen=True, slots=True)
class DamageResult:
    """Damage breakdown for a single attack."""

    base_damage: int
    is_critical: bool
    final_damage: int
    multiplier: float
    category: HandCategory
    banned: bool = False
    evaluation: HandEvaluation | None = None

    @property
    def label(self) -> str:
        if self.banned:
            return f"{self.category.display_name} (BANNED)"
        return self.category.display_name


def base_damage(cards: Sequence[Card], evaluation: HandEvaluation) -> int:
    """Return bonus plus the values of the contributing cards.

    High cards ignore the bonus table and sum the two strongest cards of the
    whole hand instead.
    """

    if not cards:
        return 0
    if evaluation.category is HandCategory.HIGH_CARD:
        return sum(sorted((card_value(card) for card in cards), reverse=True)[:2])
    return evaluation.bonus + sum(card_value(cards[index]) for index in evaluation.contributing_indices)


def _crit_cards(cards: Sequence[Card], indices: Sequence[int]) -> int:
    return sum(1 for index in indices if cards[index].is_wildcard or cards[index].rank is Rank.ACE)


class DamageCalculator:
    """Turn selected cards into a damage number.

    The calculator owns no state besides its random source; pass a seeded
    ``random.Random`` for reproducible crit rolls.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        crit_chance_per_card: float = CRIT_CHANCE_PER_CARD,
        crit_multiplier: float = CRIT_MULTIPLIER,
        debuff_multiplier: float = DEBUFF_MULTIPLIER,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.crit_chance_per_card = crit_chance_per_card
        self.crit_multiplier = crit_multiplier
        self.debuff_multiplier = debuff_multiplier

    def crit_chance(self, cards: Sequence[Card], evaluation: HandEvaluation) -> float:
        return min(1.0, self.crit_chance_per_card * _crit_cards(cards, evaluation.contributing_indices))

    def calculate(
        self,
        cards: Sequence[Card],
        debuff_active: bool = False,
        banned_category: HandCategory | None = None,
        *,
        exclude_banned: bool = False,
    ) -> DamageResult:
        """Evaluate ``cards`` and return the resulting damage.

        ``exclude_banned`` drops cards flagged as banned this turn before
        evaluation; otherwise presentation flags are ignored.
        """

        selection = [card for card in cards if not card.is_banned] if exclude_banned else list(cards)
        evaluation = evaluate_hand(selection)

        if banned_category is not None and evaluation.category is banned_category:
            return DamageResult(
                base_damage=0,
                is_critical=False,
                final_damage=0,
                multiplier=1.0,
                category=evaluation.category,
                banned=True,
                evaluation=evaluation,
            )

        damage = base_damage(selection, evaluation)
        multiplier = 1.0
        chance = self.crit_chance(selection, evaluation)
        is_critical = chance > 0.0 and self.rng.random() < chance
        if is_critical:
            multiplier *= self.crit_multiplier
        if debuff_active:
            multiplier *= self.debuff_multiplier

        return DamageResult(
            base_damage=damage,
            is_critical=is_critical,
            final_damage=int(math.floor(damage * multiplier)),
            multiplier=multiplier,
            category=evaluation.category,
            evaluation=evaluation,
        )
