"""Encounter configuration: per-stage modifiers, difficulty presets and the stage table."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Mapping

from .conditions import Condition, ConditionName
from .hands import HandCategory
from .state import Combatant

__all__ = [
    "MAX_HAND_SIZE",
    "MAX_SELECTION",
    "MAX_SWAP",
    "AttackCadence",
    "CardRestriction",
    "InvalidEncounterRules",
    "ConditionChance",
    "BossRule",
    "StatGrowth",
    "RegenTrigger",
    "EncounterRules",
    "BossOverride",
    "DifficultyConfig",
    "Difficulty",
    "DIFFICULTIES",
    "StageRule",
    "StageConfig",
    "STAGES",
    "build_encounter",
    "new_player",
]

MAX_HAND_SIZE: Final[int] = 8
MAX_SELECTION: Final[int] = 5
BLIND_CARD_COUNT: Final[int] = 2
REGEN_DURATION: Final[int] = 3
STAGE_CLEAR_HEAL: Final[int] = 50
MAX_SWAP: Final[int] = 5
DEFAULT_SWAP_COUNT: Final[int] = 2


class InvalidEncounterRules(ValueError):
    """Raised when encounter configuration is inconsistent."""


class AttackCadence(str, Enum):
    """How often the boss attacks."""

    EVERY_TURN = "every_turn"
    EVERY_OTHER_TURN = "every_other_turn"
    RULE_POOL = "rule_pool"


class CardRestriction(str, Enum):
    """Hand restrictions re-rolled at the end of every turn."""

    BAN_RANK = "ban_rank"
    BAN_SUIT = "ban_suit"
    BLIND = "blind"


def _check_probability(value: float, label: str) -> None:
    if not 0.0 <= value <= 1.0:
        raise InvalidEncounterRules(f"{label} must be within [0, 1], got {value}")


@dataclass(frozen=True, slots=True)
class ConditionChance:
    """One band of an on-hit probability table."""

    name: str
    probability: float

    def __post_init__(self) -> None:
        _check_probability(self.probability, f"probability for {self.name}")


@dataclass(frozen=True, slots=True)
class BossRule:
    """A rule the boss may draw from its pool for one turn."""

    name: str
    attack_multiplier: float = 1.0
    skip_attack: bool = False
    on_hit: tuple[ConditionChance, ...] = ()


@dataclass(frozen=True, slots=True)
class StatGrowth:
    """End-of-turn attack growth: ``atk * multiplier + increment``, optionally capped."""

    multiplier: float = 1.0
    increment: int = 0
    only_after_acting: bool = False
    cap: int | None = None

    def grow(self, atk: int) -> int:
        grown = int(math.floor(atk * self.multiplier)) + self.increment
        if self.cap is not None:
            grown = min(grown, self.cap)
        return max(0, grown)


@dataclass(frozen=True, slots=True)
class RegenTrigger:
    """Apply Regenerating once the boss is hurt below ``hp_fraction`` of its max HP."""

    hp_fraction: float
    amount: int
    duration: int = REGEN_DURATION

    def __post_init__(self) -> None:
        _check_probability(self.hp_fraction, "hp_fraction")

    def is_triggered(self, combatant: Combatant) -> bool:
        return combatant.hp < combatant.max_hp and combatant.hp <= combatant.max_hp * self.hp_fraction


@dataclass(frozen=True, slots=True)
class EncounterRules:
    """Plain-data modifiers the turn engine reads for one encounter."""

    stage: int = 0
    damage_reduction_percent: int = 0
    cadence: AttackCadence = AttackCadence.EVERY_TURN
    rule_pool: tuple[BossRule, ...] = ()
    rules_per_turn: int = 1
    banned_category: HandCategory | None = None
    banned_category_pool: tuple[HandCategory, ...] = ()
    card_restriction: CardRestriction | None = None
    on_hit: tuple[ConditionChance, ...] = ()
    stat_growth: StatGrowth | None = None
    regen_trigger: RegenTrigger | None = None
    avoid_chance: float = 0.05
    boss_accuracy: float = 1.0
    crit_chance_per_card: float = 0.1
    crit_multiplier: float = 1.25
    clear_heal: int = STAGE_CLEAR_HEAL
    clear_max_hp_bonus: float = 0.0
    clear_full_heal: bool = False
    swap_count: int = DEFAULT_SWAP_COUNT

    def __post_init__(self) -> None:
        if not 0 <= self.damage_reduction_percent <= 100:
            raise InvalidEncounterRules("damage_reduction_percent must be within [0, 100]")
        if self.swap_count < 0:
            raise InvalidEncounterRules("swap_count must not be negative")
        if self.rules_per_turn < 1:
            raise InvalidEncounterRules("rules_per_turn must be at least 1")
        if self.cadence is AttackCadence.RULE_POOL and not self.rule_pool:
            raise InvalidEncounterRules("rule_pool cadence requires a non-empty rule_pool")
        if sum(chance.probability for chance in self.on_hit) > 1.0 + 1e-9:
            raise InvalidEncounterRules("on-hit probabilities must not exceed 1 in total")
        _check_probability(self.avoid_chance, "avoid_chance")
        _check_probability(self.boss_accuracy, "boss_accuracy")
        _check_probability(self.crit_chance_per_card, "crit_chance_per_card")


@dataclass(frozen=True, slots=True)
class BossOverride:
    hp: int | None = None
    atk: int | None = None
    damage_reduction_percent: int | None = None


class Difficulty(str, Enum):
    EASY = "EASY"
    NORMAL = "NORMAL"
    HARD = "HARD"
    HELL = "HELL"


@dataclass(frozen=True, slots=True)
class DifficultyConfig:
    """Player stats, random tuning and boss scaling for one difficulty."""

    player_hp: int
    wildcard_probability: float
    crit_chance_per_card: float
    crit_multiplier: float
    avoid_chance: float
    clear_hp_bonus: int
    stage6_max_hp_bonus: float
    regen_percent: float
    bleed_probability: float
    late_bleed_probability: float
    poison_probability: float
    paralyze_probability: float
    swap_count: int = DEFAULT_SWAP_COUNT
    hp_scale: float = 1.0
    atk_scale: float = 1.0
    boss_overrides: Mapping[int, BossOverride] = field(default_factory=dict)
    stage9_has_regen: bool = True
    stage10_rule_count: int = 1


DIFFICULTIES: Final[dict[Difficulty, DifficultyConfig]] = {
    Difficulty.EASY: DifficultyConfig(
        player_hp=240,
        wildcard_probability=0.08,
        crit_chance_per_card=0.15,
        crit_multiplier=1.5,
        avoid_chance=0.05,
        clear_hp_bonus=50,
        stage6_max_hp_bonus=0.2,
        regen_percent=0.05,
        bleed_probability=0.2,
        late_bleed_probability=0.3,
        poison_probability=0.3,
        paralyze_probability=0.2,
        swap_count=3,
        hp_scale=0.8,
        atk_scale=0.8,
        boss_overrides={8: BossOverride(atk=30), 10: BossOverride(hp=380)},
        stage9_has_regen=False,
    ),
    Difficulty.NORMAL: DifficultyConfig(
        player_hp=200,
        wildcard_probability=0.05,
        crit_chance_per_card=0.1,
        crit_multiplier=1.25,
        avoid_chance=0.05,
        clear_hp_bonus=50,
        stage6_max_hp_bonus=0.2,
        regen_percent=0.05,
        bleed_probability=0.4,
        late_bleed_probability=0.3,
        poison_probability=0.5,
        paralyze_probability=0.35,
        swap_count=2,
        boss_overrides={10: BossOverride(atk=20, damage_reduction_percent=20)},
    ),
    Difficulty.HARD: DifficultyConfig(
        player_hp=180,
        wildcard_probability=0.03,
        crit_chance_per_card=0.08,
        crit_multiplier=1.2,
        avoid_chance=0.03,
        clear_hp_bonus=35,
        stage6_max_hp_bonus=0.1,
        regen_percent=0.08,
        bleed_probability=0.4,
        late_bleed_probability=0.3,
        poison_probability=0.5,
        paralyze_probability=0.2,
        swap_count=2,
        hp_scale=1.2,
        atk_scale=1.2,
        boss_overrides={
            1: BossOverride(hp=170, atk=15),
            2: BossOverride(hp=220, atk=20),
            3: BossOverride(hp=270, atk=25),
            4: BossOverride(hp=270, atk=25),
            5: BossOverride(hp=320, atk=15),
            6: BossOverride(atk=15),
            7: BossOverride(hp=320, atk=20),
            8: BossOverride(hp=370, atk=50),
            9: BossOverride(hp=370, atk=10),
            10: BossOverride(hp=420, atk=25, damage_reduction_percent=20),
        },
    ),
    Difficulty.HELL: DifficultyConfig(
        player_hp=180,
        wildcard_probability=0.03,
        crit_chance_per_card=0.05,
        crit_multiplier=1.2,
        avoid_chance=0.0,
        clear_hp_bonus=35,
        stage6_max_hp_bonus=0.1,
        regen_percent=0.08,
        bleed_probability=0.4,
        late_bleed_probability=0.3,
        poison_probability=0.5,
        paralyze_probability=0.2,
        swap_count=1,
        hp_scale=1.5,
        atk_scale=2.0,
        boss_overrides={
            1: BossOverride(hp=200, atk=15),
            2: BossOverride(hp=250, atk=20),
            3: BossOverride(hp=300, atk=25),
            4: BossOverride(hp=300, atk=25),
            5: BossOverride(hp=350, atk=15),
            6: BossOverride(atk=15),
            7: BossOverride(hp=350, atk=20),
            8: BossOverride(hp=400, atk=50, damage_reduction_percent=15),
            9: BossOverride(hp=400, atk=10, damage_reduction_percent=15),
            10: BossOverride(hp=450, atk=25, damage_reduction_percent=30),
        },
        stage10_rule_count=2,
    ),
}


class StageRule(str, Enum):
    BLEED_PROB = "BLEED_PROB"
    BAN_RANK = "BAN_RANK"
    BLIND = "BLIND"
    BAN_SUIT = "BAN_SUIT"
    POISON_PROB = "POISON_PROB"
    BAN_HAND = "BAN_HAND"
    ATK_UP = "ATK_UP"
    SKIP_TURN_REGEN = "SKIP_TURN_REGEN"
    ATK_DOUBLE_EACH_TURN = "ATK_DOUBLE_EACH_TURN"
    BOSS_ULTRA_RANDOM = "BOSS_ULTRA_RANDOM"


@dataclass(frozen=True, slots=True)
class StageConfig:
    stage: int
    boss_name: str
    hp: int
    atk: int
    rule: StageRule
    damage_reduction_percent: int = 0


STAGES: Final[dict[int, StageConfig]] = {
    1: StageConfig(1, "Goblin", 150, 10, StageRule.BLEED_PROB),
    2: StageConfig(2, "Goblin Skirmisher", 200, 15, StageRule.BAN_RANK),
    3: StageConfig(3, "Goblin Rider", 250, 20, StageRule.BLIND),
    4: StageConfig(4, "Hobgoblin", 250, 20, StageRule.BAN_SUIT),
    5: StageConfig(5, "Goblin Shaman", 300, 10, StageRule.POISON_PROB),
    6: StageConfig(6, "Golden Goblin", 350, 5, StageRule.BAN_HAND),
    7: StageConfig(7, "Elite Goblin", 300, 15, StageRule.ATK_UP),
    8: StageConfig(8, "Troll", 350, 40, StageRule.SKIP_TURN_REGEN, damage_reduction_percent=10),
    9: StageConfig(9, "Giant Goblin", 350, 5, StageRule.ATK_DOUBLE_EACH_TURN, damage_reduction_percent=10),
    10: StageConfig(10, "Goblin Lord", 400, 15, StageRule.BOSS_ULTRA_RANDOM, damage_reduction_percent=15),
}

# Categories the Golden Goblin rotates through; high cards stay playable.
BANNABLE_CATEGORIES: Final[tuple[HandCategory, ...]] = (
    HandCategory.ONE_PAIR,
    HandCategory.TWO_PAIR,
    HandCategory.THREE_OF_A_KIND,
    HandCategory.STRAIGHT,
    HandCategory.FLUSH,
)

ATK_UP_INCREMENT: Final[int] = 5
ATK_DOUBLE_CAP: Final[int] = 160


def _lord_rule_pool(config: DifficultyConfig) -> tuple[BossRule, ...]:
    return (
        BossRule("Savage Strike", on_hit=(ConditionChance(ConditionName.BLEEDING.value, config.bleed_probability),)),
        BossRule("Venom Blade", on_hit=(ConditionChance(ConditionName.POISONING.value, config.poison_probability),)),
        BossRule("Stunning Blow", on_hit=(ConditionChance(ConditionName.PARALYZING.value, config.paralyze_probability),)),
        BossRule("Frenzy", attack_multiplier=1.5),
        BossRule("War Cry", skip_attack=True),
    )


def _scaled(value: int, scale: float) -> int:
    return max(1, int(round(value * scale)))


def new_player(difficulty: Difficulty | str = Difficulty.NORMAL, name: str = "Player") -> Combatant:
    """Create the player combatant for ``difficulty`` with its passive Avoiding."""

    config = DIFFICULTIES[Difficulty(difficulty)]
    player = Combatant.fresh(name, config.player_hp)
    if config.avoid_chance > 0.0:
        player.conditions = player.conditions.with_condition(
            Condition(ConditionName.AVOIDING.value, duration=9999, description="passive evasion", payload=config.avoid_chance)
        )
    return player


def build_encounter(stage: int, difficulty: Difficulty | str = Difficulty.NORMAL) -> tuple[EncounterRules, Combatant]:
    """Return the rules and a fresh boss for ``stage`` under ``difficulty``."""

    if stage not in STAGES:
        raise InvalidEncounterRules(f"unknown stage {stage}; expected 1-{len(STAGES)}")
    config = DIFFICULTIES[Difficulty(difficulty)]
    entry = STAGES[stage]
    override = config.boss_overrides.get(stage, BossOverride())

    hp = override.hp if override.hp is not None else _scaled(entry.hp, config.hp_scale)
    atk = override.atk if override.atk is not None else _scaled(entry.atk, config.atk_scale)
    reduction = (
        override.damage_reduction_percent
        if override.damage_reduction_percent is not None
        else entry.damage_reduction_percent
    )
    regen_amount = max(1, int(hp * config.regen_percent))
    bleed = ConditionChance(ConditionName.BLEEDING.value, config.bleed_probability)

    options: dict[str, object] = {}
    rule = entry.rule
    if rule in (StageRule.BLEED_PROB, StageRule.BAN_RANK, StageRule.BLIND, StageRule.BAN_SUIT):
        options["on_hit"] = (bleed,)
        restriction = {
            StageRule.BAN_RANK: CardRestriction.BAN_RANK,
            StageRule.BLIND: CardRestriction.BLIND,
            StageRule.BAN_SUIT: CardRestriction.BAN_SUIT,
        }.get(rule)
        options["card_restriction"] = restriction
    elif rule is StageRule.POISON_PROB:
        options["on_hit"] = (ConditionChance(ConditionName.POISONING.value, config.poison_probability),)
    elif rule is StageRule.BAN_HAND:
        options["banned_category_pool"] = BANNABLE_CATEGORIES
        options["regen_trigger"] = RegenTrigger(hp_fraction=0.5, amount=regen_amount)
        options["clear_max_hp_bonus"] = config.stage6_max_hp_bonus
        options["clear_full_heal"] = True
    elif rule is StageRule.ATK_UP:
        options["on_hit"] = (ConditionChance(ConditionName.BLEEDING.value, config.late_bleed_probability),)
        options["stat_growth"] = StatGrowth(increment=ATK_UP_INCREMENT)
    elif rule is StageRule.SKIP_TURN_REGEN:
        options["cadence"] = AttackCadence.EVERY_OTHER_TURN
        options["on_hit"] = (ConditionChance(ConditionName.PARALYZING.value, config.paralyze_probability),)
        options["regen_trigger"] = RegenTrigger(hp_fraction=1.0, amount=regen_amount)
    elif rule is StageRule.ATK_DOUBLE_EACH_TURN:
        options["stat_growth"] = StatGrowth(multiplier=2.0, only_after_acting=True, cap=ATK_DOUBLE_CAP)
        if config.stage9_has_regen:
            options["regen_trigger"] = RegenTrigger(hp_fraction=1.0, amount=regen_amount)
    elif rule is StageRule.BOSS_ULTRA_RANDOM:
        options["cadence"] = AttackCadence.RULE_POOL
        options["rule_pool"] = _lord_rule_pool(config)
        options["rules_per_turn"] = config.stage10_rule_count
        options["regen_trigger"] = RegenTrigger(hp_fraction=1.0, amount=regen_amount)

    rules = EncounterRules(
        stage=stage,
        damage_reduction_percent=reduction,
        avoid_chance=config.avoid_chance,
        crit_chance_per_card=config.crit_chance_per_card,
        crit_multiplier=config.crit_multiplier,
        clear_heal=config.clear_hp_bonus,
        swap_count=config.swap_count,
        **options,  # type: ignore[arg-type]
    )
    return rules, Combatant.fresh(entry.boss_name, hp, atk)
