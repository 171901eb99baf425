"""Combatant state shared by the turn engine and persistence callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .conditions import ConditionName, ConditionSet, clear_conditions

__all__ = ["Combatant"]


@dataclass(slots=True)
class Combatant:
    """HP, attack and condition set for one side of an encounter.

    ``base_max_hp`` is the undebuffed ceiling. ``max_hp`` drops while
    Debilitating is active; the condition registry restores it.
    """

    name: str
    hp: int
    max_hp: int
    atk: int = 0
    base_max_hp: int | None = None
    conditions: ConditionSet = field(default_factory=ConditionSet)

    def __post_init__(self) -> None:
        if self.base_max_hp is None:
            self.base_max_hp = self.max_hp
        self.hp = max(0, min(self.hp, self.max_hp))

    @classmethod
    def fresh(cls, name: str, max_hp: int, atk: int = 0) -> "Combatant":
        return cls(name=name, hp=max_hp, max_hp=max_hp, atk=atk)

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    def has(self, name: str | ConditionName) -> bool:
        return name in self.conditions

    def take_damage(self, amount: int) -> int:
        """Subtract ``amount`` (floored at zero) and return the HP actually lost."""

        before = self.hp
        self.hp = max(0, self.hp - max(0, amount))
        return before - self.hp

    def heal(self, amount: int) -> int:
        """Add ``amount`` up to ``max_hp`` and return the HP actually restored."""

        before = self.hp
        self.hp = min(self.max_hp, self.hp + max(0, amount))
        return self.hp - before

    def raise_max_hp(self, amount: int) -> None:
        """Permanently raise the HP ceiling, keeping any debuff ratio intact."""

        assert self.base_max_hp is not None
        reduced = self.base_max_hp - self.max_hp
        self.base_max_hp += amount
        self.max_hp = self.base_max_hp - reduced

    def on_stage_cleared(self, heal: int = 0, max_hp_bonus: float = 0.0, full_heal: bool = False) -> None:
        """Drop temporary conditions, then apply the stage-clear rewards.

        ``full_heal`` restores HP to the (possibly raised) maximum and takes
        precedence over ``heal``.
        """

        assert self.base_max_hp is not None
        self.conditions, _ = clear_conditions(self.conditions)
        self.max_hp = self.base_max_hp
        if max_hp_bonus:
            self.raise_max_hp(int(self.base_max_hp * max_hp_bonus))
        if full_heal:
            self.hp = self.max_hp
        else:
            self.heal(heal)

    def to_record(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "base_max_hp": self.base_max_hp,
            "atk": self.atk,
            "conditions": self.conditions.to_pairs(),
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Combatant":
        """Restore a combatant snapshot without running any condition rules."""

        return cls(
            name=str(record["name"]),
            hp=int(record["hp"]),
            max_hp=int(record["max_hp"]),
            atk=int(record.get("atk", 0)),
            base_max_hp=int(record.get("base_max_hp", record["max_hp"])),
            conditions=ConditionSet.from_pairs(record.get("conditions", [])),
        )
