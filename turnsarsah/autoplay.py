"""Greedy attack selection used by simulations and the benchmark."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Sequence

from .cards import Card
from .damage import base_damage
from .hands import HandCategory, HandEvaluation, evaluate_hand
from .rules import MAX_SELECTION, MAX_SWAP

__all__ = ["AttackChoice", "choose_attack", "choose_swap"]


@dataclass(frozen=True, slots=True)
class AttackChoice:
    indices: tuple[int, ...]
    evaluation: HandEvaluation
    expected_damage: int

    def cards(self, hand: Sequence[Card]) -> list[Card]:
        return [hand[index] for index in self.indices]


def choose_attack(
    hand: Sequence[Card],
    banned_category: HandCategory | None = None,
    *,
    max_selection: int = MAX_SELECTION,
) -> AttackChoice | None:
    """Return the selection with the highest base damage, or ``None`` for an empty hand.

    Banned-flagged cards are never selected and wildcards are always kept, which
    bounds the search to combinations of the remaining standard cards.
    """

    playable = [index for index, card in enumerate(hand) if not card.is_banned]
    wild = [index for index in playable if hand[index].is_wildcard][:max_selection]
    standard = [index for index in playable if not hand[index].is_wildcard]
    if not wild and not standard:
        return None

    best: AttackChoice | None = None
    for extra in range(min(max_selection - len(wild), len(standard)), -1, -1):
        for chosen in combinations(standard, extra):
            indices = tuple(sorted(wild + list(chosen)))
            if not indices:
                continue
            selection = [hand[index] for index in indices]
            evaluation = evaluate_hand(selection)
            damage = 0 if evaluation.category is banned_category else base_damage(selection, evaluation)
            if best is None or damage > best.expected_damage:
                best = AttackChoice(indices, evaluation, damage)
    return best


def choose_swap(
    hand: Sequence[Card],
    choice: AttackChoice | None,
    *,
    max_swap: int = MAX_SWAP,
) -> tuple[int, ...]:
    """Return the slots worth swapping when ``choice`` is only a high card.

    The highest standard card and every wildcard are kept; the rest are
    offered lowest rank first.
    """

    if choice is not None and choice.evaluation.category is not HandCategory.HIGH_CARD:
        return ()
    standard = [index for index, card in enumerate(hand) if not card.is_wildcard and card.rank is not None]
    standard.sort(key=lambda index: hand[index].rank)
    return tuple(sorted(standard[:-1][:max_swap]))
