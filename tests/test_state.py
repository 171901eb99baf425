from __future__ import annotations

import json
import random

from turnsarsah.conditions import ConditionName, ConditionRegistry
from turnsarsah.state import Combatant


def test_fresh_combatant_starts_at_full_hp() -> None:
    combatant = Combatant.fresh("Goblin", 80, atk=12)

    assert combatant.hp == combatant.max_hp == combatant.base_max_hp == 80
    assert combatant.atk == 12
    assert combatant.is_alive
    assert len(combatant.conditions) == 0


def test_hp_is_clamped_on_construction() -> None:
    assert Combatant("Over", hp=300, max_hp=200).hp == 200
    assert Combatant("Under", hp=-5, max_hp=200).hp == 0


def test_damage_and_heal_report_actual_change() -> None:
    combatant = Combatant.fresh("Player", 100)

    assert combatant.take_damage(30) == 30
    assert combatant.heal(50) == 30
    assert combatant.take_damage(500) == 100
    assert combatant.hp == 0
    assert not combatant.is_alive
    assert combatant.take_damage(-10) == 0


def test_raise_max_hp_keeps_debuff_gap() -> None:
    combatant = Combatant.fresh("Player", 200)
    ConditionRegistry(rng=random.Random(0)).apply(combatant, ConditionName.DEBILITATING)

    combatant.raise_max_hp(50)

    assert combatant.base_max_hp == 250
    assert combatant.max_hp == 210


def test_stage_clear_rewards() -> None:
    combatant = Combatant.fresh("Player", 200)
    registry = ConditionRegistry(rng=random.Random(0))
    registry.apply(combatant, ConditionName.BLEEDING)
    registry.apply(combatant, ConditionName.AVOIDING, payload=0.05)
    combatant.take_damage(100)

    combatant.on_stage_cleared(heal=50, max_hp_bonus=0.2)

    assert combatant.base_max_hp == 240
    assert combatant.max_hp == 240
    assert combatant.hp == 150
    assert combatant.conditions.names() == [ConditionName.AVOIDING.value]


def test_golden_goblin_clear_fully_heals_raised_ceiling() -> None:
    combatant = Combatant.fresh("Player", 200)
    combatant.take_damage(160)

    combatant.on_stage_cleared(heal=50, max_hp_bonus=0.2, full_heal=True)

    assert combatant.max_hp == 240
    assert combatant.hp == 240


def test_stage_clear_lifts_debilitating() -> None:
    combatant = Combatant.fresh("Player", 200)
    ConditionRegistry(rng=random.Random(0)).apply(combatant, ConditionName.DEBILITATING)

    combatant.on_stage_cleared(heal=50)

    assert combatant.max_hp == 200
    assert combatant.hp == 200


def test_record_round_trip_through_json() -> None:
    combatant = Combatant.fresh("Player", 200, atk=3)
    registry = ConditionRegistry(rng=random.Random(0))
    registry.apply(combatant, ConditionName.DEBILITATING)
    registry.apply(combatant, ConditionName.REGENERATING, payload=12)
    registry.tick(combatant)
    combatant.take_damage(40)

    restored = Combatant.from_record(json.loads(json.dumps(combatant.to_record())))

    assert restored == combatant
    assert restored.max_hp == 160
    assert restored.base_max_hp == 200
    assert restored.conditions.names() == [
        ConditionName.DEBILITATING.value,
        ConditionName.REGENERATING.value,
    ]


def test_has_accepts_enum_or_string() -> None:
    combatant = Combatant.fresh("Boss", 100)
    ConditionRegistry(rng=random.Random(0)).apply(combatant, "Immune")

    assert combatant.has(ConditionName.IMMUNE)
    assert combatant.has("Immune")
    assert not combatant.has("Bleeding")
