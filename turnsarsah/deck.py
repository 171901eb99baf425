"""Shuffled card population with wildcard rolls and anti-clump damping."""

from __future__ import annotations

import random
import uuid
from typing import Final, Iterable, Sequence

from .cards import Card, iter_full_deck
from .logs import get_logger

__all__ = ["CardDeck", "JOKER_DRAW_PROBABILITY", "RESHUFFLE_THRESHOLD"]

logger = get_logger(__name__)

JOKER_DRAW_PROBABILITY: Final[float] = 0.05
WILDCARD_STREAK_DAMPING: Final[float] = 0.25
RESHUFFLE_THRESHOLD: Final[int] = 10


class CardDeck:
    """Deal cards for one encounter.

    Each draw first rolls for a wildcard, then takes the next standard card
    whose (rank, suit) is not already held. Wildcard odds shrink after every
    consecutive wildcard, and after ``clump_limit`` face cards in a row the
    next non-face card is pulled forward. An empty population is rebuilt and
    reshuffled in place, so ``draw`` always returns ``count`` cards.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        wildcard_probability: float = JOKER_DRAW_PROBABILITY,
        clump_limit: int = 2,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.wildcard_probability = wildcard_probability
        self.clump_limit = clump_limit
        self.cards: list[Card] = []
        self.reshuffles = 0
        self._wild_streak = 0
        self._face_streak = 0
        self.initialize()

    def __len__(self) -> int:
        return len(self.cards)

    def initialize(self) -> None:
        """Rebuild and shuffle the 52-card population."""

        self.cards = list(iter_full_deck())
        self.rng.shuffle(self.cards)

    def _new_id(self) -> str:
        return uuid.UUID(int=self.rng.getrandbits(128)).hex[:9]

    def _roll_wildcard(self) -> bool:
        chance = self.wildcard_probability * (WILDCARD_STREAK_DAMPING**self._wild_streak)
        return chance > 0.0 and self.rng.random() < chance

    def _take_standard(self, held: set[tuple]) -> Card:
        for attempt in range(2):
            eligible = [index for index, card in enumerate(self.cards) if card.identity not in held]
            if eligible:
                break
            self.initialize()
            self.reshuffles += 1
            logger.debug("deck_reshuffled", held=len(held), attempt=attempt)
        else:
            # Every identity is held: duplicates are the only way to deal.
            eligible = list(range(len(self.cards)))

        position = eligible[0]
        if self._face_streak >= self.clump_limit and self.cards[position].is_face:
            relief = next((index for index in eligible if not self.cards[index].is_face), None)
            if relief is not None:
                position = relief
        card = self.cards.pop(position)
        return Card(id=self._new_id(), suit=card.suit, rank=card.rank)

    def draw(self, count: int, held: Iterable[Card] = ()) -> list[Card]:
        """Draw ``count`` cards avoiding (rank, suit) duplicates of ``held``."""

        identities = {card.identity for card in held if card.identity is not None}
        drawn: list[Card] = []
        for _ in range(max(0, count)):
            if self._roll_wildcard():
                self._wild_streak += 1
                drawn.append(Card.wildcard(self._new_id()))
                continue
            self._wild_streak = 0
            card = self._take_standard(identities)
            self._face_streak = self._face_streak + 1 if card.is_face else 0
            identities.add(card.identity)
            drawn.append(card)
        return drawn

    def refill(self, hand: Sequence[Card], size: int) -> list[Card]:
        """Return ``hand`` topped up to ``size`` cards."""

        return list(hand) + self.draw(size - len(hand), held=hand)

    def discard(self, cards: Iterable[Card]) -> None:
        """Accept discarded cards; a thin population is rebuilt."""

        if len(self.cards) < RESHUFFLE_THRESHOLD:
            self.initialize()
            self.reshuffles += 1

    def swap(self, hand: Sequence[Card], indices: Iterable[int]) -> list[Card]:
        """Replace the cards at ``indices`` with fresh draws.

        Out-of-range and repeated indices are ignored. Replacements avoid
        duplicating anything in ``hand``, including the cards being swapped out.
        """

        current = list(hand)
        slots = [index for index in dict.fromkeys(indices) if 0 <= index < len(current)]
        replacements = self.draw(len(slots), held=current)
        outgoing = [current[slot] for slot in slots]
        for slot, card in zip(slots, replacements):
            current[slot] = card
        self.discard(outgoing)
        return current
