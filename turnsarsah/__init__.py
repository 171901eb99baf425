"""Top-level package for the Turn Sarsah rules engine."""

from . import actions, cards, conditions, damage, deck, engine, hands, rules, state

__all__ = [
    "actions",
    "cards",
    "conditions",
    "damage",
    "deck",
    "engine",
    "hands",
    "rules",
    "state",
]
