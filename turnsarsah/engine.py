"""Turn sequencing for one player-versus-boss encounter.

Each turn runs player attack, boss attack and end-of-turn resolution. Every
``resolve_*`` step only computes an :class:`Impact`; the matching ``apply_*``
step commits it, so a presentation layer can animate in between. All steps
append :class:`~turnsarsah.actions.Action` values to an internal log.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .actions import Action, ActionType, make_action
from .cards import Card, Rank, Suit
from .conditions import ConditionEffect, ConditionName, ConditionRegistry, EffectKind
from .damage import DamageCalculator
from .deck import CardDeck
from .hands import HandCategory
from .logs import get_logger
from .rules import (
    BLIND_CARD_COUNT,
    MAX_HAND_SIZE,
    MAX_SWAP,
    AttackCadence,
    BossRule,
    CardRestriction,
    ConditionChance,
    EncounterRules,
)
from .state import Combatant

__all__ = ["TurnPhase", "TurnStatus", "Impact", "TurnEngine"]

logger = get_logger(__name__)


class TurnPhase(str, Enum):
    READY_FOR_PLAYER_ACTION = "ready_for_player_action"
    PLAYER_ATTACK_RESOLVED = "player_attack_resolved"
    BOSS_ATTACK_RESOLVED = "boss_attack_resolved"
    END_OF_TURN_RESOLVED = "end_of_turn_resolved"


class TurnStatus(str, Enum):
    ONGOING = "ongoing"
    PLAYER_WON = "player_won"
    PLAYER_LOST = "player_lost"


@dataclass(frozen=True, slots=True)
class Impact:
    """Damage an attack would deal, computed before any HP changes."""

    damage: int
    is_critical: bool = False
    category: HandCategory | None = None
    banned: bool = False
    skipped: bool = False
    reason: str = ""
    on_hit: tuple[ConditionChance, ...] = ()

    @classmethod
    def skip(cls, reason: str) -> "Impact":
        return cls(damage=0, skipped=True, reason=reason)


_TICK_ACTIONS = {
    EffectKind.BLEED: ActionType.BLEED,
    EffectKind.HEAVY_BLEED: ActionType.HEAVY_BLEED,
    EffectKind.POISON: ActionType.POISON,
}


def _reduce(amount: int, percent: float) -> int:
    if percent <= 0:
        return amount
    return int(math.floor(amount * (100 - min(100.0, percent)) / 100))


class TurnEngine:
    """Drive turns between ``player`` and ``boss`` under ``rules``.

    The engine never raises for gameplay input. Calls made in the wrong phase
    are logged and still executed; calls made after the encounter is decided
    return zero-effect results.
    """

    def __init__(
        self,
        player: Combatant,
        boss: Combatant,
        rules: EncounterRules | None = None,
        rng: random.Random | None = None,
        calculator: DamageCalculator | None = None,
        registry: ConditionRegistry | None = None,
    ) -> None:
        self.player = player
        self.boss = boss
        self.rules = rules if rules is not None else EncounterRules()
        self.rng = rng if rng is not None else random.Random()
        self.calculator = calculator or DamageCalculator(
            self.rng,
            crit_chance_per_card=self.rules.crit_chance_per_card,
            crit_multiplier=self.rules.crit_multiplier,
        )
        self.registry = registry or ConditionRegistry(rng=self.rng)
        self.phase = TurnPhase.READY_FOR_PLAYER_ACTION
        self.turn = 0
        self.banned_category: HandCategory | None = self.rules.banned_category
        self.banned_rank: Rank | None = None
        self.banned_suit: Suit | None = None
        self.blind_slots: tuple[int, ...] = ()
        self.active_rules: tuple[BossRule, ...] = ()
        self.swaps_remaining = self.rules.swap_count
        self._boss_acted = False
        self._log: list[Action] = []
        self._roll_turn_restrictions()

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------
    def _emit(self, action_type: ActionType, **payload: object) -> Action:
        action = make_action(action_type, **payload)
        self._log.append(action)
        return action

    def _expect(self, step: str, allowed: tuple[TurnPhase, ...]) -> None:
        if self.phase not in allowed:
            logger.debug(
                "out_of_order_call",
                step=step,
                phase=self.phase.value,
                expected=[phase.value for phase in allowed],
            )

    def drain_actions(self) -> list[Action]:
        """Return every logged action and clear the log."""

        drained, self._log = self._log, []
        return drained

    @property
    def actions(self) -> tuple[Action, ...]:
        return tuple(self._log)

    def check_status(self) -> TurnStatus:
        if self.boss.hp <= 0:
            return TurnStatus.PLAYER_WON
        if self.player.hp <= 0:
            return TurnStatus.PLAYER_LOST
        return TurnStatus.ONGOING

    @property
    def is_over(self) -> bool:
        return self.check_status() is not TurnStatus.ONGOING

    # ------------------------------------------------------------------
    # Hand restrictions
    # ------------------------------------------------------------------
    def _roll_turn_restrictions(self) -> None:
        if self.rules.banned_category_pool:
            self.banned_category = self.rng.choice(self.rules.banned_category_pool)
        restriction = self.rules.card_restriction
        if restriction is CardRestriction.BAN_RANK:
            self.banned_rank = self.rng.choice(list(Rank))
        elif restriction is CardRestriction.BAN_SUIT:
            self.banned_suit = self.rng.choice(list(Suit))
        elif restriction is CardRestriction.BLIND:
            self.blind_slots = tuple(sorted(self.rng.sample(range(MAX_HAND_SIZE), BLIND_CARD_COUNT)))

    def restrict_hand(self, hand: Sequence[Card]) -> list[Card]:
        """Return ``hand`` with this turn's banned and blind flags set."""

        restricted: list[Card] = []
        for index, card in enumerate(hand):
            banned = (self.banned_rank is not None and card.rank is self.banned_rank) or (
                self.banned_suit is not None and card.suit is self.banned_suit
            )
            restricted.append(card.with_flags(blind=index in self.blind_slots, banned=banned))
        return restricted

    def swap_cards(self, hand: Sequence[Card], indices: Sequence[int], deck: CardDeck) -> list[Card]:
        """Replace the selected slots of ``hand`` from ``deck``, spending one swap.

        The phase is left untouched. An empty or oversized selection, or a
        spent budget, returns ``hand`` unchanged and logs a skip.
        """

        self._expect("swap_cards", (TurnPhase.READY_FOR_PLAYER_ACTION, TurnPhase.END_OF_TURN_RESOLVED))
        current = list(hand)
        if self.is_over:
            return current

        slots = [index for index in dict.fromkeys(indices) if 0 <= index < len(current)]
        if not slots:
            reason = "no cards selected"
        elif len(slots) > MAX_SWAP:
            reason = "too many cards"
        elif self.swaps_remaining <= 0:
            reason = "no swaps remaining"
        else:
            swapped = deck.swap(current, slots)
            self.swaps_remaining -= 1
            self._emit(
                ActionType.SWAPPED,
                source=self.player.name,
                count=len(slots),
                remaining=self.swaps_remaining,
            )
            return swapped
        self._emit(ActionType.SKIPPED, source=self.player.name, reason=reason)
        return current

    # ------------------------------------------------------------------
    # Player attack
    # ------------------------------------------------------------------
    def resolve_player_attack(self, cards: Sequence[Card]) -> Impact:
        """Score ``cards`` without touching HP."""

        self._expect("resolve_player_attack", (TurnPhase.READY_FOR_PLAYER_ACTION, TurnPhase.END_OF_TURN_RESOLVED))
        self.phase = TurnPhase.PLAYER_ATTACK_RESOLVED
        self._boss_acted = False

        if self.is_over:
            return Impact.skip("encounter over")
        if self.player.has(ConditionName.PARALYZING):
            self._emit(ActionType.PARALYZED, target=self.player.name)
            return Impact.skip("paralyzed")
        if not cards:
            self._emit(ActionType.SKIPPED, source=self.player.name, reason="no cards selected")
            return Impact.skip("no cards selected")

        result = self.calculator.calculate(
            cards,
            debuff_active=self.player.has(ConditionName.DEBILITATING),
            banned_category=self.banned_category,
            exclude_banned=True,
        )
        self._emit(
            ActionType.IMPACT,
            source=self.player.name,
            damage=result.final_damage,
            is_critical=result.is_critical,
            category=result.label,
        )
        return Impact(
            damage=result.final_damage,
            is_critical=result.is_critical,
            category=result.category,
            banned=result.banned,
        )

    def apply_player_attack(self, damage: int) -> list[Action]:
        """Deal ``damage`` to the boss after its damage reductions."""

        self._expect("apply_player_attack", (TurnPhase.PLAYER_ATTACK_RESOLVED,))
        if self.is_over:
            return []

        amount = _reduce(max(0, damage), self.rules.damage_reduction_percent)
        reducing = self.boss.conditions.get(ConditionName.DAMAGE_REDUCING)
        if reducing is not None and isinstance(reducing.payload, (int, float)):
            amount = _reduce(amount, reducing.payload)
        self.boss.take_damage(amount)
        return [self._emit(ActionType.DAMAGE, target=self.boss.name, amount=amount, hp=self.boss.hp)]

    # ------------------------------------------------------------------
    # Boss attack
    # ------------------------------------------------------------------
    def _pick_rules(self) -> tuple[BossRule, ...]:
        if self.rules.cadence is not AttackCadence.RULE_POOL:
            return ()
        count = min(self.rules.rules_per_turn, len(self.rules.rule_pool))
        return tuple(self.rng.sample(self.rules.rule_pool, count))

    def resolve_boss_attack(self) -> Impact:
        """Advance the turn counter and decide whether and how hard the boss hits."""

        self._expect("resolve_boss_attack", (TurnPhase.PLAYER_ATTACK_RESOLVED,))
        self.phase = TurnPhase.BOSS_ATTACK_RESOLVED
        self.turn += 1

        if self.is_over:
            return Impact.skip("encounter over")

        if self.rules.cadence is AttackCadence.EVERY_OTHER_TURN and self.turn % 2 == 0:
            self._emit(ActionType.SKIPPED, source=self.boss.name, reason="resting")
            return Impact.skip("resting")

        self.active_rules = self._pick_rules()
        if self.active_rules:
            self._emit(ActionType.RULES_CHANGED, source=self.boss.name, rules=[rule.name for rule in self.active_rules])
        for rule in self.active_rules:
            if rule.skip_attack:
                self._emit(ActionType.SKIPPED, source=self.boss.name, reason=rule.name)
                return Impact.skip(rule.name)

        if self.boss.has(ConditionName.PARALYZING):
            self._emit(ActionType.PARALYZED, target=self.boss.name)
            return Impact.skip("paralyzed")

        if self.rules.boss_accuracy < 1.0 and self.rng.random() >= self.rules.boss_accuracy:
            self._emit(ActionType.MISSED, source=self.boss.name)
            return Impact.skip("missed")

        multiplier = 1.0
        on_hit: list[ConditionChance] = []
        for rule in self.active_rules:
            multiplier *= rule.attack_multiplier
            on_hit.extend(rule.on_hit)
        damage = int(math.floor(self.boss.atk * multiplier))
        self._boss_acted = True
        self._emit(ActionType.IMPACT, source=self.boss.name, damage=damage, is_critical=False, category=None)
        return Impact(damage=damage, on_hit=tuple(on_hit))

    def _roll_on_hit(self, bands: Sequence[ConditionChance]) -> str | None:
        roll = self.rng.random()
        floor = 0.0
        for band in bands:
            ceiling = floor + band.probability
            if floor <= roll < ceiling:
                return band.name
            floor = ceiling
        return None

    def apply_boss_attack(self, damage: int, on_hit: Sequence[ConditionChance] | None = None) -> list[Action]:
        """Deal ``damage`` to the player, then roll at most one on-hit condition.

        ``on_hit`` overrides the encounter's probability table; it defaults to
        the bands carried by this turn's active boss rules.
        """

        self._expect("apply_boss_attack", (TurnPhase.BOSS_ATTACK_RESOLVED,))
        if self.is_over:
            return []

        produced: list[Action] = []
        avoiding = self.player.conditions.get(ConditionName.AVOIDING)
        if avoiding is not None:
            chance = avoiding.payload if isinstance(avoiding.payload, float) else self.rules.avoid_chance
            if self.rng.random() < chance:
                return [self._emit(ActionType.AVOIDED, target=self.player.name)]

        amount = max(0, damage)
        reducing = self.player.conditions.get(ConditionName.DAMAGE_REDUCING)
        if reducing is not None and isinstance(reducing.payload, (int, float)):
            amount = _reduce(amount, reducing.payload)
        self.player.take_damage(amount)
        produced.append(self._emit(ActionType.DAMAGE, target=self.player.name, amount=amount, hp=self.player.hp))

        if not self.player.is_alive:
            return produced

        if on_hit is None:
            on_hit = [band for rule in self.active_rules for band in rule.on_hit]
        bands = list(on_hit) or list(self.rules.on_hit)
        if not bands:
            return produced

        name = self._roll_on_hit(bands)
        if name is None:
            return produced
        outcome = self.registry.apply(self.player, name)
        if outcome.applied or outcome.removed:
            produced.append(
                self._emit(
                    ActionType.CONDITION_APPLIED,
                    target=self.player.name,
                    name=outcome.name,
                    replaced=list(outcome.removed),
                )
            )
        else:
            reason = "immune" if outcome.blocked_by_immunity else "already active"
            produced.append(self._emit(ActionType.CONDITION_RESISTED, target=self.player.name, name=name, reason=reason))
        return produced

    # ------------------------------------------------------------------
    # End of turn
    # ------------------------------------------------------------------
    def _fold_effects(self, combatant: Combatant, effects: Sequence[ConditionEffect]) -> list[Action]:
        produced: list[Action] = []
        for effect in effects:
            if effect.kind.is_damage:
                combatant.take_damage(effect.amount)
                produced.append(
                    self._emit(_TICK_ACTIONS[effect.kind], target=combatant.name, amount=effect.amount, hp=combatant.hp)
                )
            elif effect.kind is EffectKind.HEAL:
                healed = combatant.heal(effect.amount)
                produced.append(self._emit(ActionType.HEAL, target=combatant.name, amount=healed, hp=combatant.hp))
            elif effect.kind is EffectKind.CURED:
                produced.append(self._emit(ActionType.CURED, target=combatant.name, name=effect.source))
            else:
                produced.append(self._emit(ActionType.CONDITION_EXPIRED, target=combatant.name, name=effect.source))
        return produced

    def _grow_stats(self) -> list[Action]:
        growth = self.rules.stat_growth
        if growth is None or (growth.only_after_acting and not self._boss_acted):
            return []
        grown = growth.grow(self.boss.atk)
        if grown == self.boss.atk:
            return []
        self.boss.atk = grown
        return [self._emit(ActionType.STAT_GROWTH, target=self.boss.name, atk=grown)]

    def _trigger_regen(self) -> list[Action]:
        trigger = self.rules.regen_trigger
        if trigger is None or self.boss.has(ConditionName.REGENERATING) or not trigger.is_triggered(self.boss):
            return []
        outcome = self.registry.apply(
            self.boss,
            ConditionName.REGENERATING,
            duration=trigger.duration,
            description="boss regeneration",
            payload=trigger.amount,
        )
        if not outcome.applied:
            return []
        return [self._emit(ActionType.CONDITION_APPLIED, target=self.boss.name, name=outcome.name, replaced=[])]

    def process_end_turn(self) -> list[Action]:
        """Tick both condition sets, fold their effects into HP, then run stage growth."""

        self._expect("process_end_turn", (TurnPhase.BOSS_ATTACK_RESOLVED,))
        self.phase = TurnPhase.END_OF_TURN_RESOLVED
        if self.is_over:
            return []

        produced = self._fold_effects(self.player, self.registry.tick(self.player))
        produced.extend(self._fold_effects(self.boss, self.registry.tick(self.boss)))

        if not self.is_over:
            produced.extend(self._grow_stats())
            produced.extend(self._trigger_regen())
            before = (self.banned_category, self.banned_rank, self.banned_suit, self.blind_slots)
            self._roll_turn_restrictions()
            after = (self.banned_category, self.banned_rank, self.banned_suit, self.blind_slots)
            if after != before:
                produced.append(
                    self._emit(
                        ActionType.RULES_CHANGED,
                        banned_category=self.banned_category.display_name if self.banned_category else None,
                        banned_rank=self.banned_rank.label if self.banned_rank else None,
                        banned_suit=self.banned_suit.value if self.banned_suit else None,
                        blind_slots=list(self.blind_slots),
                    )
                )

        self.active_rules = ()
        logger.debug(
            "turn_resolved",
            turn=self.turn,
            player_hp=self.player.hp,
            boss_hp=self.boss.hp,
            status=self.check_status().value,
        )
        return produced

    def play_turn(self, cards: Sequence[Card]) -> list[Action]:
        """Run a whole turn, stopping as soon as the encounter is decided."""

        start = len(self._log)
        impact = self.resolve_player_attack(cards)
        if not impact.skipped:
            self.apply_player_attack(impact.damage)
        if not self.is_over:
            boss_impact = self.resolve_boss_attack()
            if not boss_impact.skipped:
                self.apply_boss_attack(boss_impact.damage, boss_impact.on_hit)
        if not self.is_over:
            self.process_end_turn()
        return list(self._log[start:])
