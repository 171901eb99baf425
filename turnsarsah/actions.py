"""Abstract action descriptors handed to the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, Mapping

__all__ = ["ActionType", "Action", "TIMING_HINTS", "make_action"]


class ActionType(str, Enum):
    """Kinds of effects a turn can produce."""

    IMPACT = "IMPACT"
    DAMAGE = "DAMAGE"
    HEAL = "HEAL"
    BLEED = "BLEED"
    HEAVY_BLEED = "HEAVY_BLEED"
    POISON = "POISON"
    CURED = "CURED"
    CONDITION_APPLIED = "CONDITION_APPLIED"
    CONDITION_RESISTED = "CONDITION_RESISTED"
    CONDITION_EXPIRED = "CONDITION_EXPIRED"
    AVOIDED = "AVOIDED"
    SKIPPED = "SKIPPED"
    PARALYZED = "PARALYZED"
    MISSED = "MISSED"
    SWAPPED = "SWAPPED"
    STAT_GROWTH = "STAT_GROWTH"
    RULES_CHANGED = "RULES_CHANGED"


# Suggested playback length in milliseconds; presentation layers may ignore it.
TIMING_HINTS: Final[dict[ActionType, int]] = {
    ActionType.IMPACT: 500,
    ActionType.DAMAGE: 300,
    ActionType.HEAL: 400,
    ActionType.BLEED: 800,
    ActionType.HEAVY_BLEED: 800,
    ActionType.POISON: 800,
    ActionType.CURED: 600,
    ActionType.CONDITION_APPLIED: 600,
    ActionType.CONDITION_RESISTED: 400,
    ActionType.CONDITION_EXPIRED: 200,
    ActionType.AVOIDED: 1000,
    ActionType.SKIPPED: 1000,
    ActionType.PARALYZED: 1000,
    ActionType.MISSED: 1000,
    ActionType.SWAPPED: 400,
    ActionType.STAT_GROWTH: 500,
    ActionType.RULES_CHANGED: 300,
}


@dataclass(frozen=True, slots=True)
class Action:
    """A timed effect descriptor: ``{type, timing_hint, payload}``."""

    type: ActionType
    timing_hint: int
    payload: Mapping[str, Any] = field(default_factory=dict)

    def to_record(self) -> dict[str, Any]:
        return {"type": self.type.value, "timing_hint": self.timing_hint, "payload": dict(self.payload)}


def make_action(action_type: ActionType, **payload: Any) -> Action:
    return Action(type=action_type, timing_hint=TIMING_HINTS[action_type], payload=payload)
