"""Timed status effects and their stacking rules.

A combatant's conditions live in an immutable :class:`ConditionSet`. The
module-level functions (:func:`apply_condition`, :func:`remove_condition`,
:func:`tick_conditions`, :func:`clear_conditions`) take a set and return a new
one, which keeps the escalation rules testable in isolation.
:class:`ConditionRegistry` applies those functions to a
:class:`~turnsarsah.state.Combatant` and keeps its maximum HP in step with
Debilitating.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Final, Iterator, Mapping, Sequence

from .logs import get_logger

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .state import Combatant

__all__ = [
    "PERMANENT_DURATION",
    "ConditionName",
    "Condition",
    "ConditionSet",
    "ConditionPreset",
    "CONDITION_PRESETS",
    "NEGATIVE_CONDITIONS",
    "EffectKind",
    "ConditionEffect",
    "ApplyOutcome",
    "TickOutcome",
    "apply_condition",
    "remove_condition",
    "tick_conditions",
    "clear_conditions",
    "ConditionRegistry",
]

logger = get_logger(__name__)

PERMANENT_DURATION: Final[int] = 999
DEBILITATING_MAX_HP_FACTOR: Final[float] = 0.8
POISON_ESCALATION_CHANCE: Final[float] = 0.5
DEFAULT_REGEN_AMOUNT: Final[int] = 10


class ConditionName(str, Enum):
    """Names of the conditions the rules engine knows about."""

    BLEEDING = "Bleeding"
    HEAVY_BLEEDING = "Heavy Bleeding"
    POISONING = "Poisoning"
    DEBILITATING = "Debilitating"
    PARALYZING = "Paralyzing"
    REGENERATING = "Regenerating"
    IMMUNE = "Immune"
    AVOIDING = "Avoiding"
    DAMAGE_REDUCING = "Damage Reducing"


NEGATIVE_CONDITIONS: Final[frozenset[str]] = frozenset(
    {
        ConditionName.BLEEDING.value,
        ConditionName.HEAVY_BLEEDING.value,
        ConditionName.POISONING.value,
        ConditionName.DEBILITATING.value,
        ConditionName.PARALYZING.value,
    }
)


def _key(name: str | ConditionName) -> str:
    return name.value if isinstance(name, ConditionName) else name


@dataclass(frozen=True, slots=True)
class ConditionPreset:
    """Default duration and per-tick damage for a named condition."""

    duration: int
    tick_damage: int = 0


CONDITION_PRESETS: Final[dict[str, ConditionPreset]] = {
    ConditionName.BLEEDING.value: ConditionPreset(duration=6, tick_damage=5),
    ConditionName.HEAVY_BLEEDING.value: ConditionPreset(duration=3, tick_damage=15),
    ConditionName.POISONING.value: ConditionPreset(duration=3, tick_damage=10),
    ConditionName.DEBILITATING.value: ConditionPreset(duration=3),
    ConditionName.PARALYZING.value: ConditionPreset(duration=2),
    ConditionName.REGENERATING.value: ConditionPreset(duration=9999),
    ConditionName.IMMUNE.value: ConditionPreset(duration=9999),
    ConditionName.AVOIDING.value: ConditionPreset(duration=9999),
    ConditionName.DAMAGE_REDUCING.value: ConditionPreset(duration=9999),
}


@dataclass(frozen=True, slots=True)
class Condition:
    """A timed effect held by one combatant."""

    name: str
    duration: int
    elapsed: int = 0
    description: str = ""
    payload: Any = None

    @property
    def is_permanent(self) -> bool:
        return self.duration >= PERMANENT_DURATION

    @property
    def remaining(self) -> int | None:
        if self.is_permanent:
            return None
        return max(0, self.duration - self.elapsed)

    def to_record(self) -> dict[str, Any]:
        return {
            "duration": self.duration,
            "elapsed": self.elapsed,
            "description": self.description,
            "payload": self.payload,
        }

    @classmethod
    def from_record(cls, name: str, record: Mapping[str, Any]) -> "Condition":
        return cls(
            name=name,
            duration=int(record["duration"]),
            elapsed=int(record.get("elapsed", 0)),
            description=str(record.get("description", "")),
            payload=record.get("payload"),
        )


@dataclass(frozen=True, slots=True)
class ConditionSet:
    """Immutable, insertion-ordered mapping of condition name to condition."""

    entries: tuple[Condition, ...] = ()

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return any(entry.name == _key(name) for entry in self.entries)

    def __iter__(self) -> Iterator[Condition]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, name: str | ConditionName) -> Condition | None:
        key = _key(name)
        for entry in self.entries:
            if entry.name == key:
                return entry
        return None

    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def with_condition(self, condition: Condition) -> "ConditionSet":
        """Return a set with ``condition`` inserted or replaced in place."""

        if condition.name in self:
            return ConditionSet(
                tuple(condition if entry.name == condition.name else entry for entry in self.entries)
            )
        return ConditionSet(self.entries + (condition,))

    def without(self, *names: str | ConditionName) -> "ConditionSet":
        keys = {_key(name) for name in names}
        return ConditionSet(tuple(entry for entry in self.entries if entry.name not in keys))

    def to_pairs(self) -> list[list[Any]]:
        """Return ``[name, record]`` pairs suitable for persistence."""

        return [[entry.name, entry.to_record()] for entry in self.entries]

    @classmethod
    def from_pairs(cls, pairs: Sequence[Sequence[Any]]) -> "ConditionSet":
        result = cls()
        for name, record in pairs:
            result = result.with_condition(Condition.from_record(str(name), record))
        return result


class EffectKind(str, Enum):
    """Kinds of effects produced when conditions tick."""

    BLEED = "BLEED"
    HEAVY_BLEED = "HEAVY_BLEED"
    POISON = "POISON"
    HEAL = "HEAL"
    CURED = "CURED"
    EXPIRED = "EXPIRED"

    @property
    def is_damage(self) -> bool:
        return self in (EffectKind.BLEED, EffectKind.HEAVY_BLEED, EffectKind.POISON)


_TICK_KINDS: Final[dict[str, EffectKind]] = {
    ConditionName.BLEEDING.value: EffectKind.BLEED,
    ConditionName.HEAVY_BLEEDING.value: EffectKind.HEAVY_BLEED,
    ConditionName.POISONING.value: EffectKind.POISON,
}


@dataclass(frozen=True, slots=True)
class ConditionEffect:
    """Damage, healing or bookkeeping produced by one condition tick."""

    kind: EffectKind
    amount: int
    source: str


@dataclass(frozen=True, slots=True)
class ApplyOutcome:
    """Result of an apply attempt.

    ``applied`` is ``True`` only when ``name`` was newly inserted; ``name`` is
    the condition that ended up applied (Heavy Bleeding after an escalation).
    ``removed`` can be non-empty even when nothing was inserted: Poisoning
    escalating onto an active Debilitating only drops the poison.
    """

    conditions: ConditionSet
    applied: bool
    name: str
    removed: tuple[str, ...] = ()
    refreshed: bool = False
    blocked_by_immunity: bool = False


@dataclass(frozen=True, slots=True)
class TickOutcome:
    """Result of an end-of-turn pass over a condition set."""

    conditions: ConditionSet
    effects: tuple[ConditionEffect, ...] = ()
    expired: tuple[str, ...] = ()


def _preset(name: str, presets: Mapping[str, ConditionPreset]) -> ConditionPreset:
    return presets.get(name, ConditionPreset(duration=1))


def _insert(
    conditions: ConditionSet,
    name: str,
    duration: int | None,
    description: str,
    payload: Any,
    presets: Mapping[str, ConditionPreset],
    removed: tuple[str, ...] = (),
) -> ApplyOutcome:
    existing = conditions.get(name)
    if existing is not None:
        if existing.is_permanent and (payload is not None or description):
            updated = replace(
                existing,
                payload=payload if payload is not None else existing.payload,
                description=description or existing.description,
            )
            return ApplyOutcome(conditions.with_condition(updated), False, name, removed, refreshed=True)
        return ApplyOutcome(conditions, False, name, removed)

    condition = Condition(
        name=name,
        duration=_preset(name, presets).duration if duration is None else duration,
        elapsed=0,
        description=description,
        payload=payload,
    )
    return ApplyOutcome(conditions.with_condition(condition), True, name, removed)


def apply_condition(
    conditions: ConditionSet,
    name: str | ConditionName,
    duration: int | None = None,
    description: str = "",
    payload: Any = None,
    *,
    rng: random.Random | None = None,
    presets: Mapping[str, ConditionPreset] = CONDITION_PRESETS,
) -> ApplyOutcome:
    """Apply ``name`` to ``conditions`` honouring immunity and stacking rules.

    ``duration`` defaults to the preset duration. The random source is only
    consulted for the Poisoning escalation roll.
    """

    key = _key(name)

    if ConditionName.IMMUNE.value in conditions and key in NEGATIVE_CONDITIONS:
        return ApplyOutcome(conditions, False, key, blocked_by_immunity=True)

    if key == ConditionName.BLEEDING.value:
        if ConditionName.HEAVY_BLEEDING.value in conditions:
            return ApplyOutcome(conditions, False, key)
        if key in conditions:
            heavy = ConditionName.HEAVY_BLEEDING.value
            return _insert(conditions.without(key), heavy, None, "", None, presets, removed=(key,))

    if key == ConditionName.POISONING.value and key in conditions:
        roll = (rng or random.Random()).random()
        if roll < POISON_ESCALATION_CHANCE:
            # An active Debilitating is kept as is, without a refresh.
            debilitating = ConditionName.DEBILITATING.value
            return _insert(conditions.without(key), debilitating, None, "", None, presets, removed=(key,))
        return ApplyOutcome(conditions, False, key)

    return _insert(conditions, key, duration, description, payload, presets)


def remove_condition(conditions: ConditionSet, name: str | ConditionName) -> tuple[ConditionSet, bool]:
    """Return ``conditions`` without ``name`` and whether anything was removed."""

    if name not in conditions:
        return conditions, False
    return conditions.without(name), True


def tick_conditions(
    conditions: ConditionSet,
    *,
    presets: Mapping[str, ConditionPreset] = CONDITION_PRESETS,
    cure_chance: float = 0.0,
    rng: random.Random | None = None,
) -> TickOutcome:
    """Run the end-of-turn pass: emit effects, advance timers, expire.

    Expiry is decided after every condition has ticked, so a condition on its
    last turn still produces its final effect.
    """

    effects: list[ConditionEffect] = []
    updated: list[Condition] = []
    expired: list[str] = []

    for condition in conditions:
        if cure_chance > 0.0 and condition.name in NEGATIVE_CONDITIONS:
            if (rng or random.Random()).random() < cure_chance:
                effects.append(ConditionEffect(EffectKind.CURED, 0, condition.name))
                expired.append(condition.name)
                continue

        kind = _TICK_KINDS.get(condition.name)
        if kind is not None:
            effects.append(ConditionEffect(kind, _preset(condition.name, presets).tick_damage, condition.name))
        elif condition.name == ConditionName.REGENERATING.value:
            amount = condition.payload if isinstance(condition.payload, int) else DEFAULT_REGEN_AMOUNT
            effects.append(ConditionEffect(EffectKind.HEAL, amount, condition.name))

        advanced = replace(condition, elapsed=condition.elapsed + 1)
        if not advanced.is_permanent and advanced.elapsed >= advanced.duration:
            expired.append(condition.name)
        updated.append(advanced)

    remaining = tuple(entry for entry in updated if entry.name not in expired)
    return TickOutcome(ConditionSet(remaining), tuple(effects), tuple(expired))


def clear_conditions(conditions: ConditionSet) -> tuple[ConditionSet, tuple[str, ...]]:
    """Drop every non-permanent condition, returning the new set and the names removed."""

    kept = tuple(entry for entry in conditions if entry.is_permanent)
    removed = tuple(entry.name for entry in conditions if not entry.is_permanent)
    return ConditionSet(kept), removed


@dataclass(slots=True)
class ConditionRegistry:
    """Apply condition rules to combatants.

    The registry writes the new condition set back to the combatant and keeps
    ``max_hp`` in line with Debilitating after every change.
    """

    rng: random.Random = field(default_factory=random.Random)
    presets: Mapping[str, ConditionPreset] = field(default_factory=lambda: dict(CONDITION_PRESETS))
    cure_chance: float = 0.0

    def apply(
        self,
        combatant: "Combatant",
        name: str | ConditionName,
        duration: int | None = None,
        description: str = "",
        payload: Any = None,
    ) -> ApplyOutcome:
        outcome = apply_condition(
            combatant.conditions,
            name,
            duration,
            description,
            payload,
            rng=self.rng,
            presets=self.presets,
        )
        combatant.conditions = outcome.conditions
        self._sync_max_hp(combatant)
        if outcome.applied or outcome.removed:
            logger.debug(
                "condition_applied",
                combatant=combatant.name,
                condition=outcome.name,
                replaced=list(outcome.removed),
            )
        elif outcome.blocked_by_immunity:
            logger.debug("condition_blocked", combatant=combatant.name, condition=outcome.name)
        return outcome

    def remove(self, combatant: "Combatant", name: str | ConditionName) -> bool:
        combatant.conditions, removed = remove_condition(combatant.conditions, name)
        if removed:
            self._sync_max_hp(combatant)
            logger.debug("condition_removed", combatant=combatant.name, condition=_key(name))
        return removed

    def tick(self, combatant: "Combatant") -> list[ConditionEffect]:
        """Advance ``combatant``'s conditions by one turn and return the effects.

        HP is left untouched: the caller folds the returned damage and healing.
        """

        outcome = tick_conditions(
            combatant.conditions,
            presets=self.presets,
            cure_chance=self.cure_chance,
            rng=self.rng,
        )
        combatant.conditions = outcome.conditions
        self._sync_max_hp(combatant)
        effects = list(outcome.effects)
        cured = {effect.source for effect in effects if effect.kind is EffectKind.CURED}
        for name in outcome.expired:
            if name not in cured:
                effects.append(ConditionEffect(EffectKind.EXPIRED, 0, name))
        return effects

    def clear(self, combatant: "Combatant") -> tuple[str, ...]:
        combatant.conditions, removed = clear_conditions(combatant.conditions)
        self._sync_max_hp(combatant)
        return removed

    def _sync_max_hp(self, combatant: "Combatant") -> None:
        if ConditionName.DEBILITATING.value in combatant.conditions:
            combatant.max_hp = int(combatant.base_max_hp * DEBILITATING_MAX_HP_FACTOR)
        else:
            combatant.max_hp = combatant.base_max_hp
        combatant.hp = max(0, min(combatant.hp, combatant.max_hp))
