"""Poker hand evaluation with wildcard substitution search."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Final, Sequence

from .cards import Card, Rank, Suit

__all__ = [
    "HandCategory",
    "HandEvaluation",
    "HAND_BONUSES",
    "MAX_SEARCHED_WILDCARDS",
    "evaluate_hand",
    "classify",
]

# Each wildcard takes one of 13 x 4 concrete cards; hands with more wildcards
# than this mirror the first substitution into the extra slots.
MAX_SEARCHED_WILDCARDS: Final[int] = 2


class HandCategory(IntEnum):
    """Scoring categories ordered by strength."""

    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def bonus(self) -> int:
        return HAND_BONUSES[self]


HAND_BONUSES: Final[dict[HandCategory, int]] = {
    HandCategory.HIGH_CARD: 0,
    HandCategory.ONE_PAIR: 10,
    HandCategory.TWO_PAIR: 20,
    HandCategory.THREE_OF_A_KIND: 50,
    HandCategory.STRAIGHT: 75,
    HandCategory.FLUSH: 100,
    HandCategory.FULL_HOUSE: 125,
    HandCategory.FOUR_OF_A_KIND: 150,
    HandCategory.STRAIGHT_FLUSH: 175,
    HandCategory.ROYAL_FLUSH: 300,
}

_ROYAL_RANKS: Final[frozenset[int]] = frozenset({10, 11, 12, 13, 14})
_STRAIGHT_GAPS: Final[list[int]] = [1, 1, 1, 1, 9]
_SEARCH_RANKS: Final[tuple[int, ...]] = tuple(int(rank) for rank in sorted(Rank, reverse=True))
_SEARCH_SUITS: Final[tuple[Suit, ...]] = tuple(Suit)


@dataclass(frozen=True, slots=True)
class HandEvaluation:
    """Result of evaluating a hand; indices refer to the evaluated hand."""

    category: HandCategory
    bonus: int
    contributing_indices: tuple[int, ...]

    @classmethod
    def empty(cls) -> "HandEvaluation":
        return cls(HandCategory.HIGH_CARD, 0, ())


def _is_straight(ranks: Sequence[int]) -> bool:
    unique = sorted(set(ranks))
    if len(unique) != 5:
        return False
    gaps = [unique[i + 1] - unique[i] for i in range(4)]
    gaps.append(13 - (unique[-1] - unique[0]))
    return sorted(gaps) == _STRAIGHT_GAPS


def _is_flush(suits: Sequence[Suit | None]) -> bool:
    return len(suits) == 5 and suits[0] is not None and all(suit == suits[0] for suit in suits)


def _first_of_each_rank(ranks: Sequence[int]) -> tuple[int, ...]:
    seen: set[int] = set()
    indices: list[int] = []
    for index, rank in enumerate(ranks):
        if rank not in seen:
            seen.add(rank)
            indices.append(index)
    return tuple(indices)


def _indices_of(ranks: Sequence[int], rank: int, limit: int) -> list[int]:
    return [index for index, value in enumerate(ranks) if value == rank][:limit]


def _groups(ranks: Sequence[int], size: int) -> list[int]:
    """Return ranks appearing at least ``size`` times, highest first."""

    counts = Counter(ranks)
    return sorted((rank for rank, count in counts.items() if count >= size), reverse=True)


def classify(ranks: Sequence[int], suits: Sequence[Suit | None]) -> tuple[HandCategory, tuple[int, ...]]:
    """Classify a wildcard-free hand given parallel rank values and suits."""

    if not ranks:
        return HandCategory.HIGH_CARD, ()

    flush = _is_flush(suits)
    straight = _is_straight(ranks)
    if flush and straight:
        everything = tuple(range(len(ranks)))
        if set(ranks) == _ROYAL_RANKS:
            return HandCategory.ROYAL_FLUSH, everything
        return HandCategory.STRAIGHT_FLUSH, everything

    quads = _groups(ranks, 4)
    if quads:
        return HandCategory.FOUR_OF_A_KIND, tuple(_indices_of(ranks, quads[0], 4))

    trips = _groups(ranks, 3)
    if trips:
        pairs = [rank for rank in _groups(ranks, 2) if rank != trips[0]]
        if pairs:
            indices = _indices_of(ranks, trips[0], 3) + _indices_of(ranks, pairs[0], 2)
            return HandCategory.FULL_HOUSE, tuple(sorted(indices))

    if flush:
        return HandCategory.FLUSH, tuple(range(len(ranks)))
    if straight:
        return HandCategory.STRAIGHT, _first_of_each_rank(ranks)

    if trips:
        return HandCategory.THREE_OF_A_KIND, tuple(_indices_of(ranks, trips[0], 3))

    pairs = _groups(ranks, 2)
    if len(pairs) >= 2:
        indices = _indices_of(ranks, pairs[0], 2) + _indices_of(ranks, pairs[1], 2)
        return HandCategory.TWO_PAIR, tuple(sorted(indices))
    if pairs:
        return HandCategory.ONE_PAIR, tuple(_indices_of(ranks, pairs[0], 2))

    return HandCategory.HIGH_CARD, tuple(range(len(ranks)))


def _search_wildcards(
    ranks: list[int],
    suits: list[Suit | None],
    wild_slots: Sequence[int],
) -> tuple[HandCategory, tuple[int, ...]]:
    searched = wild_slots[:MAX_SEARCHED_WILDCARDS]
    mirrored = wild_slots[MAX_SEARCHED_WILDCARDS:]

    best: tuple[HandCategory, tuple[int, ...]] | None = None

    def consider() -> None:
        nonlocal best
        for slot in mirrored:
            ranks[slot] = ranks[searched[0]]
            suits[slot] = suits[searched[0]]
        candidate = classify(ranks, suits)
        if best is None or HAND_BONUSES[candidate[0]] > HAND_BONUSES[best[0]]:
            best = candidate

    first = searched[0]
    for rank in _SEARCH_RANKS:
        for suit in _SEARCH_SUITS:
            ranks[first] = rank
            suits[first] = suit
            if len(searched) == 1:
                consider()
                continue
            second = searched[1]
            for other_rank in _SEARCH_RANKS:
                for other_suit in _SEARCH_SUITS:
                    ranks[second] = other_rank
                    suits[second] = other_suit
                    consider()

    assert best is not None
    return best


def evaluate_hand(cards: Sequence[Card]) -> HandEvaluation:
    """Return the best-scoring evaluation of ``cards``.

    Wildcards are replaced by every concrete (rank, suit) pair in turn and the
    highest bonus wins; the first candidate found wins a tie. Ranks are tried
    from Ace downward so ties favour higher cards.
    """

    if not cards:
        return HandEvaluation.empty()

    ranks = [0 if card.rank is None else int(card.rank) for card in cards]
    suits: list[Suit | None] = [card.suit for card in cards]
    wild_slots = [index for index, card in enumerate(cards) if card.is_wildcard]

    if wild_slots:
        category, indices = _search_wildcards(ranks, suits, wild_slots)
    else:
        category, indices = classify(ranks, suits)
    return HandEvaluation(category=category, bonus=HAND_BONUSES[category], contributing_indices=indices)
