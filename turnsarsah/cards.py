"""Card abstractions and helpers for Turn Sarsah."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Any, Iterable, Iterator

__all__ = [
    "Suit",
    "Rank",
    "Card",
    "InvalidCardCode",
    "WILDCARD_VALUE",
    "FACE_RANKS",
    "iter_full_deck",
    "parse_card",
    "parse_cards",
    "card_value",
    "format_cards",
]

WILDCARD_VALUE = 14


class InvalidCardCode(ValueError):
    """Raised when a card code cannot be parsed."""


class Suit(str, Enum):
    """Enumeration of the four suits in a standard deck."""

    CLUBS = "C"
    DIAMONDS = "D"
    HEARTS = "H"
    SPADES = "S"


class Rank(IntEnum):
    """Card ranks valued for scoring; Ace is high."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def label(self) -> str:
        """Return the short label used in card codes."""

        return _RANK_LABELS.get(self, str(self.value))

    @classmethod
    def from_label(cls, label: str) -> "Rank":
        """Return the rank matching ``label`` (``"10"``, ``"J"``, ``"A"`` ...)."""

        for rank in cls:
            if rank.label == label.upper():
                return rank
        raise InvalidCardCode(f"unknown rank '{label}'")


_RANK_LABELS = {Rank.JACK: "J", Rank.QUEEN: "Q", Rank.KING: "K", Rank.ACE: "A"}

FACE_RANKS = frozenset({Rank.JACK, Rank.QUEEN, Rank.KING})


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing a physical card or a wildcard.

    ``is_blind`` and ``is_banned`` are presentation flags only; hand evaluation
    ignores them.
    """

    id: str
    suit: Suit | None = None
    rank: Rank | None = None
    is_wildcard: bool = False
    is_blind: bool = False
    is_banned: bool = False

    @classmethod
    def standard(cls, rank: Rank, suit: Suit, card_id: str | None = None) -> "Card":
        return cls(id=card_id or f"{rank.label}{suit.value}", suit=suit, rank=rank)

    @classmethod
    def wildcard(cls, card_id: str = "W") -> "Card":
        return cls(id=card_id, is_wildcard=True)

    @property
    def identity(self) -> tuple[Rank, Suit] | None:
        """Return the (rank, suit) pair used for duplicate detection."""

        if self.is_wildcard or self.rank is None or self.suit is None:
            return None
        return self.rank, self.suit

    @property
    def value(self) -> int:
        return card_value(self)

    @property
    def is_face(self) -> bool:
        return self.rank in FACE_RANKS

    def code(self) -> str:
        """Return the parseable code for this card (``"10H"``, ``"W"``)."""

        if self.is_wildcard or self.rank is None or self.suit is None:
            return "W"
        return f"{self.rank.label}{self.suit.value}"

    def label(self) -> str:
        """Create a display label that honours the face-down flag."""

        if self.is_blind:
            return "?"
        if self.is_wildcard:
            return "WILD"
        return self.code()

    def with_flags(self, *, blind: bool | None = None, banned: bool | None = None) -> "Card":
        """Return a copy with updated presentation flags."""

        return replace(
            self,
            is_blind=self.is_blind if blind is None else blind,
            is_banned=self.is_banned if banned is None else banned,
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "suit": self.suit.value if self.suit is not None else None,
            "rank": int(self.rank) if self.rank is not None else None,
            "is_wildcard": self.is_wildcard,
            "is_blind": self.is_blind,
            "is_banned": self.is_banned,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Card":
        suit = record.get("suit")
        rank = record.get("rank")
        return cls(
            id=str(record["id"]),
            suit=Suit(suit) if suit is not None else None,
            rank=Rank(rank) if rank is not None else None,
            is_wildcard=bool(record.get("is_wildcard", False)),
            is_blind=bool(record.get("is_blind", False)),
            is_banned=bool(record.get("is_banned", False)),
        )


def card_value(card: Card) -> int:
    """Return the scoring value of ``card``; wildcards count as an Ace."""

    if card.is_wildcard or card.rank is None:
        return WILDCARD_VALUE
    return int(card.rank)


def iter_full_deck() -> Iterator[Card]:
    """Yield the 52 standard cards in suit-major order."""

    for suit in Suit:
        for rank in Rank:
            yield Card.standard(rank, suit)


def parse_card(code: str) -> Card:
    """Parse a card code such as ``"10H"``, ``"qs"`` or ``"W"``."""

    text = code.strip().upper()
    if text in ("W", "WILD", "JOKER"):
        return Card.wildcard()
    if len(text) < 2:
        raise InvalidCardCode(f"invalid card code '{code}'")
    try:
        suit = Suit(text[-1])
    except ValueError as exc:
        raise InvalidCardCode(f"unknown suit in '{code}'") from exc
    return Card.standard(Rank.from_label(text[:-1]), suit)


def parse_cards(codes: Iterable[str]) -> list[Card]:
    """Parse several codes, giving each card a position-unique id."""

    cards: list[Card] = []
    for index, code in enumerate(codes):
        card = parse_card(code)
        cards.append(replace(card, id=f"{card.id}#{index}"))
    return cards


def format_cards(cards: Iterable[Card]) -> str:
    return " ".join(card.label() for card in cards)
