"""Seeded simulation harness for balancing stages and difficulties."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from .actions import Action
from .autoplay import choose_attack, choose_swap
from .cards import Card
from .conditions import ConditionName
from .deck import CardDeck
from .engine import TurnEngine, TurnStatus
from .logs import get_logger
from .rules import DIFFICULTIES, MAX_HAND_SIZE, STAGES, Difficulty, build_encounter, new_player
from .state import Combatant

__all__ = [
    "EncounterOutcome",
    "BenchmarkReport",
    "CampaignReport",
    "run_encounter",
    "run_benchmark",
    "run_campaign",
]

logger = get_logger(__name__)

DEFAULT_MAX_TURNS = 200


@dataclass(frozen=True, slots=True)
class EncounterOutcome:
    """Result of one simulated encounter."""

    stage: int
    status: TurnStatus
    turns: int
    player_hp: int
    boss_hp: int

    @property
    def won(self) -> bool:
        return self.status is TurnStatus.PLAYER_WON


@dataclass(frozen=True, slots=True)
class BenchmarkReport:
    """Aggregate statistics over repeated encounters of one stage."""

    stage: int
    difficulty: Difficulty
    encounters: int
    wins: int
    win_rate: float
    mean_turns: float
    median_turns: float
    p90_turns: float
    mean_player_hp: float


@dataclass(frozen=True, slots=True)
class CampaignReport:
    difficulty: Difficulty
    outcomes: tuple[EncounterOutcome, ...]

    @property
    def stages_cleared(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.won)

    @property
    def completed(self) -> bool:
        return self.stages_cleared == len(STAGES)


def run_encounter(
    stage: int,
    difficulty: Difficulty | str,
    rng: random.Random,
    *,
    player: Combatant | None = None,
    hand: Sequence[Card] = (),
    max_turns: int = DEFAULT_MAX_TURNS,
    observer: Callable[[int, Sequence[Card], list[Action]], None] | None = None,
) -> tuple[EncounterOutcome, list[Card]]:
    """Play ``stage`` with the greedy auto-player and return the outcome and final hand.

    ``observer`` receives the turn number, the cards played and the drained
    action log after every turn.
    """

    level = Difficulty(difficulty)
    rules, boss = build_encounter(stage, level)
    player = player if player is not None else new_player(level)
    deck = CardDeck(rng, wildcard_probability=DIFFICULTIES[level].wildcard_probability)
    engine = TurnEngine(player, boss, rules, rng)
    current = deck.refill(hand, MAX_HAND_SIZE)

    turns = 0
    while not engine.is_over and turns < max_turns:
        turns += 1
        played: list[Card] = []
        if player.has(ConditionName.PARALYZING):
            engine.play_turn([])
        else:
            view = engine.restrict_hand(current)
            choice = choose_attack(view, engine.banned_category)
            slots = choose_swap(view, choice) if engine.swaps_remaining > 0 else ()
            if slots:
                current = engine.swap_cards(current, slots, deck)
                view = engine.restrict_hand(current)
                choice = choose_attack(view, engine.banned_category)
            used = set(choice.indices) if choice is not None else set()
            played = choice.cards(view) if choice is not None else []
            engine.play_turn(played)
            current = [card for index, card in enumerate(current) if index not in used]
            deck.discard(card for index, card in enumerate(view) if index in used)
        drained = engine.drain_actions()
        if observer is not None:
            observer(turns, played, drained)
        current = deck.refill(current, MAX_HAND_SIZE)

    outcome = EncounterOutcome(
        stage=stage,
        status=engine.check_status(),
        turns=turns,
        player_hp=player.hp,
        boss_hp=boss.hp,
    )
    logger.debug("encounter_finished", stage=stage, status=outcome.status.value, turns=turns)
    return outcome, current


def run_benchmark(
    stage: int,
    difficulty: Difficulty | str = Difficulty.NORMAL,
    encounters: int = 50,
    seed: int = 0,
    *,
    max_turns: int = DEFAULT_MAX_TURNS,
) -> BenchmarkReport:
    """Simulate ``encounters`` fresh fights against ``stage`` and summarise them."""

    if encounters <= 0:
        raise ValueError("encounters must be positive")
    level = Difficulty(difficulty)
    rng = random.Random(seed)
    outcomes = [run_encounter(stage, level, rng, max_turns=max_turns)[0] for _ in range(encounters)]

    wins = np.array([outcome.won for outcome in outcomes], dtype=bool)
    turns = np.array([outcome.turns for outcome in outcomes], dtype=np.int64)
    player_hp = np.array([outcome.player_hp for outcome in outcomes], dtype=np.int64)

    return BenchmarkReport(
        stage=stage,
        difficulty=level,
        encounters=encounters,
        wins=int(wins.sum()),
        win_rate=float(wins.mean()),
        mean_turns=float(turns.mean()),
        median_turns=float(np.median(turns)),
        p90_turns=float(np.percentile(turns, 90)),
        mean_player_hp=float(player_hp.mean()),
    )


def run_campaign(
    difficulty: Difficulty | str = Difficulty.NORMAL,
    seed: int = 0,
    *,
    max_turns: int = DEFAULT_MAX_TURNS,
) -> CampaignReport:
    """Play the stages in order with one player, carrying HP and hand between them."""

    level = Difficulty(difficulty)
    rng = random.Random(seed)
    player = new_player(level)
    hand: list[Card] = []
    outcomes: list[EncounterOutcome] = []

    for stage in sorted(STAGES):
        outcome, hand = run_encounter(stage, level, rng, player=player, hand=hand, max_turns=max_turns)
        outcomes.append(outcome)
        if not outcome.won:
            break
        rules, _ = build_encounter(stage, level)
        player.on_stage_cleared(
            heal=rules.clear_heal,
            max_hp_bonus=rules.clear_max_hp_bonus,
            full_heal=rules.clear_full_heal,
        )
    return CampaignReport(difficulty=level, outcomes=tuple(outcomes))
