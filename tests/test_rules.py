from __future__ import annotations

import pytest

from turnsarsah.conditions import ConditionName
from turnsarsah.hands import HandCategory
from turnsarsah.rules import (
    DIFFICULTIES,
    STAGES,
    AttackCadence,
    BossRule,
    CardRestriction,
    ConditionChance,
    Difficulty,
    EncounterRules,
    InvalidEncounterRules,
    RegenTrigger,
    StatGrowth,
    build_encounter,
    new_player,
)
from turnsarsah.state import Combatant


@pytest.mark.parametrize("difficulty", list(Difficulty))
@pytest.mark.parametrize("stage", sorted(STAGES))
def test_every_stage_builds(stage: int, difficulty: Difficulty) -> None:
    rules, boss = build_encounter(stage, difficulty)

    assert rules.stage == stage
    assert boss.name == STAGES[stage].boss_name
    assert boss.hp == boss.max_hp > 0
    assert boss.atk > 0


def test_normal_goblin_matches_stage_table() -> None:
    rules, boss = build_encounter(1, "NORMAL")

    assert (boss.hp, boss.atk) == (150, 10)
    assert rules.on_hit == (ConditionChance(ConditionName.BLEEDING.value, 0.4),)
    assert rules.card_restriction is None
    assert rules.cadence is AttackCadence.EVERY_TURN


def test_easy_scales_boss_and_applies_overrides() -> None:
    _, goblin = build_encounter(1, Difficulty.EASY)
    _, troll = build_encounter(8, Difficulty.EASY)

    assert (goblin.hp, goblin.atk) == (120, 8)
    assert (troll.hp, troll.atk) == (280, 30)


def test_hard_override_keeps_scaled_hp_when_only_atk_given() -> None:
    _, golden = build_encounter(6, Difficulty.HARD)

    assert (golden.hp, golden.atk) == (420, 15)


@pytest.mark.parametrize(
    ("stage", "restriction"),
    [(2, CardRestriction.BAN_RANK), (3, CardRestriction.BLIND), (4, CardRestriction.BAN_SUIT)],
)
def test_restriction_stages(stage: int, restriction: CardRestriction) -> None:
    rules, _ = build_encounter(stage)

    assert rules.card_restriction is restriction


def test_golden_goblin_bans_hands_and_regenerates() -> None:
    rules, _ = build_encounter(6)

    assert HandCategory.ONE_PAIR in rules.banned_category_pool
    assert HandCategory.HIGH_CARD not in rules.banned_category_pool
    assert rules.regen_trigger == RegenTrigger(hp_fraction=0.5, amount=17)
    assert rules.clear_max_hp_bonus == pytest.approx(0.2)
    assert rules.clear_full_heal


@pytest.mark.parametrize("stage", [1, 5, 7, 10])
def test_only_golden_goblin_clear_fully_heals(stage: int) -> None:
    rules, _ = build_encounter(stage)

    assert not rules.clear_full_heal
    assert rules.clear_max_hp_bonus == 0.0


@pytest.mark.parametrize(
    ("difficulty", "swaps"),
    [(Difficulty.EASY, 3), (Difficulty.NORMAL, 2), (Difficulty.HARD, 2), (Difficulty.HELL, 1)],
)
def test_swap_budget_follows_difficulty(difficulty: Difficulty, swaps: int) -> None:
    rules, _ = build_encounter(4, difficulty)

    assert rules.swap_count == swaps


def test_troll_rests_every_other_turn() -> None:
    rules, _ = build_encounter(8)

    assert rules.cadence is AttackCadence.EVERY_OTHER_TURN
    assert rules.damage_reduction_percent == 10
    assert rules.on_hit[0].name == ConditionName.PARALYZING.value


def test_giant_goblin_doubles_attack_up_to_cap() -> None:
    rules, _ = build_encounter(9)
    easy_rules, _ = build_encounter(9, Difficulty.EASY)

    assert rules.stat_growth == StatGrowth(multiplier=2.0, only_after_acting=True, cap=160)
    assert rules.regen_trigger is not None
    assert easy_rules.regen_trigger is None


def test_goblin_lord_draws_from_rule_pool() -> None:
    normal, boss = build_encounter(10)
    hell, _ = build_encounter(10, Difficulty.HELL)

    assert normal.cadence is AttackCadence.RULE_POOL
    assert normal.rules_per_turn == 1
    assert normal.damage_reduction_percent == 20
    assert boss.atk == 20
    assert hell.rules_per_turn == 2
    assert hell.damage_reduction_percent == 30
    assert {rule.name for rule in normal.rule_pool} >= {"Frenzy", "War Cry"}


def test_crit_and_clear_settings_follow_difficulty() -> None:
    rules, _ = build_encounter(3, Difficulty.HARD)
    config = DIFFICULTIES[Difficulty.HARD]

    assert rules.crit_chance_per_card == config.crit_chance_per_card
    assert rules.crit_multiplier == config.crit_multiplier
    assert rules.clear_heal == 35


@pytest.mark.parametrize("stage", [0, 11, -1])
def test_unknown_stage_is_rejected(stage: int) -> None:
    with pytest.raises(InvalidEncounterRules):
        build_encounter(stage)


def test_unknown_difficulty_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_encounter(1, "NIGHTMARE")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"damage_reduction_percent": 120},
        {"damage_reduction_percent": -1},
        {"rules_per_turn": 0},
        {"cadence": AttackCadence.RULE_POOL},
        {"on_hit": (ConditionChance("Bleeding", 0.7), ConditionChance("Poisoning", 0.5))},
        {"avoid_chance": 1.5},
        {"boss_accuracy": -0.1},
        {"swap_count": -1},
    ],
)
def test_inconsistent_rules_are_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(InvalidEncounterRules):
        EncounterRules(**kwargs)  # type: ignore[arg-type]


def test_condition_chance_validates_probability() -> None:
    with pytest.raises(InvalidEncounterRules):
        ConditionChance("Bleeding", 1.2)


def test_rule_pool_rules_are_accepted() -> None:
    rules = EncounterRules(cadence=AttackCadence.RULE_POOL, rule_pool=(BossRule("Rest", skip_attack=True),))

    assert rules.rules_per_turn == 1


def test_stat_growth() -> None:
    assert StatGrowth(increment=5).grow(15) == 20
    assert StatGrowth(multiplier=2.0, cap=160).grow(100) == 160
    assert StatGrowth(multiplier=1.5).grow(15) == 22


def test_regen_trigger_threshold() -> None:
    trigger = RegenTrigger(hp_fraction=0.5, amount=10)
    boss = Combatant.fresh("Boss", 100)

    assert not trigger.is_triggered(boss)
    boss.take_damage(40)
    assert not trigger.is_triggered(boss)
    boss.take_damage(10)
    assert trigger.is_triggered(boss)


def test_full_fraction_trigger_needs_missing_hp() -> None:
    trigger = RegenTrigger(hp_fraction=1.0, amount=10)
    boss = Combatant.fresh("Boss", 100)

    assert not trigger.is_triggered(boss)
    boss.take_damage(1)
    assert trigger.is_triggered(boss)


def test_new_player_carries_passive_evasion() -> None:
    normal = new_player()
    hell = new_player(Difficulty.HELL)

    avoiding = normal.conditions.get(ConditionName.AVOIDING)
    assert normal.hp == 200
    assert avoiding is not None and avoiding.payload == pytest.approx(0.05)
    assert avoiding.is_permanent
    assert hell.hp == 180
    assert not hell.has(ConditionName.AVOIDING)
