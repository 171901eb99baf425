"""Typer entry-point wiring for the Turn Sarsah CLI."""

from __future__ import annotations

import random
from typing import List, Sequence

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .. import benchmark
from ..actions import Action
from ..cards import Card, InvalidCardCode, parse_cards
from ..damage import DamageCalculator
from ..hands import HandCategory
from ..logs import configure_logging
from ..rules import STAGES, Difficulty, InvalidEncounterRules, build_encounter, new_player
from .render import describe_action, format_cards, render_combatants

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()


def _difficulty(value: str) -> Difficulty:
    try:
        return Difficulty(value.upper())
    except ValueError as exc:
        choices = ", ".join(level.value for level in Difficulty)
        raise typer.BadParameter(f"Unknown difficulty '{value}'. Choose from {choices}.") from exc


def _category(value: str | None) -> HandCategory | None:
    if value is None:
        return None
    key = value.upper().replace(" ", "_").replace("-", "_")
    try:
        return HandCategory[key]
    except KeyError as exc:
        raise typer.BadParameter(f"Unknown hand category '{value}'.") from exc


@app.callback()
def configure(
    log_level: str = typer.Option("WARNING", "--log-level", help="structlog level (DEBUG, INFO, WARNING ...)."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit log lines as JSON."),
) -> None:
    """Rules engine tooling for the Turn Sarsah card battler."""

    try:
        configure_logging(log_level, json=json_logs)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


@app.command()
def evaluate(
    cards: List[str] = typer.Argument(..., help="Card codes such as 10H QS AD W."),
    banned: str | None = typer.Option(None, help="Hand category that deals no damage."),
    debuffed: bool = typer.Option(False, "--debuffed", help="Attacker is Debilitating."),
    seed: int | None = typer.Option(None, help="Random seed for the critical-hit roll."),
) -> None:
    """Evaluate a hand and show the damage it would deal."""

    try:
        hand = parse_cards(cards)
    except InvalidCardCode as exc:
        raise typer.BadParameter(str(exc), param_hint="CARDS") from exc

    calculator = DamageCalculator(random.Random(seed))
    result = calculator.calculate(hand, debuff_active=debuffed, banned_category=_category(banned))
    evaluation = result.evaluation
    scoring: Sequence[Card] = [hand[index] for index in evaluation.contributing_indices] if evaluation else []

    table = Table(title="Hand Evaluation", box=box.SIMPLE_HEAVY)
    table.add_column("Field", justify="left", style="cyan")
    table.add_column("Value", justify="left")
    table.add_row("Hand", format_cards(hand))
    table.add_row("Category", result.label)
    table.add_row("Bonus", str(evaluation.bonus if evaluation else 0))
    table.add_row("Scoring cards", format_cards(scoring))
    table.add_row("Base damage", str(result.base_damage))
    table.add_row("Critical", "[bold red]yes[/bold red]" if result.is_critical else "no")
    table.add_row("Multiplier", f"{result.multiplier:.2f}")
    table.add_row("Final damage", f"[bold]{result.final_damage}[/bold]")
    console.print(table)


@app.command()
def simulate(
    stage: int = typer.Option(1, min=1, max=len(STAGES), help="Stage to fight."),
    difficulty: str = typer.Option("NORMAL", help="EASY, NORMAL, HARD or HELL."),
    seed: int | None = typer.Option(None, help="Random seed for reproducible fights (omit for randomness)."),
    max_turns: int = typer.Option(100, min=1, help="Stop after this many turns."),
) -> None:
    """Auto-play one encounter and print the action log turn by turn."""

    level = _difficulty(difficulty)
    try:
        rules, boss = build_encounter(stage, level)
    except InvalidEncounterRules as exc:
        raise typer.BadParameter(str(exc), param_hint="--stage") from exc
    player = new_player(level)
    console.print(render_combatants(player, boss, title=f"Stage {stage}: {boss.name} ({level.value})"))

    def observe(turn: int, played: Sequence[Card], actions: list[Action]) -> None:
        console.print(f"[bold cyan]Turn {turn}[/bold cyan]  played {format_cards(played)}")
        for action in actions:
            console.print(f"  {describe_action(action)}")

    outcome, _ = benchmark.run_encounter(
        stage,
        level,
        random.Random(seed),
        player=player,
        max_turns=max_turns,
        observer=observe,
    )
    console.print(render_combatants(player, boss, title="Result"))
    if outcome.won:
        console.print(f"[bold green]Victory in {outcome.turns} turn(s).[/bold green]")
    elif outcome.player_hp <= 0:
        console.print(f"[bold red]Defeat after {outcome.turns} turn(s).[/bold red]")
    else:
        console.print(f"[yellow]Undecided after {outcome.turns} turn(s).[/yellow]")


@app.command("benchmark")
def benchmark_cli(
    stage: int | None = typer.Option(None, min=1, max=len(STAGES), help="Single stage to benchmark (default: all)."),
    difficulty: str = typer.Option("NORMAL", help="EASY, NORMAL, HARD or HELL."),
    encounters: int = typer.Option(20, min=1, help="Encounters simulated per stage."),
    seed: int = typer.Option(123, help="Random seed for the benchmark."),
) -> None:
    """Run the auto-player against stages and report win rates."""

    level = _difficulty(difficulty)
    stages = [stage] if stage is not None else sorted(STAGES)

    table = Table(title=f"Stage Benchmark ({level.value})", box=box.SIMPLE_HEAVY)
    table.add_column("Stage", justify="center")
    table.add_column("Boss", justify="left")
    table.add_column("Win rate", justify="right")
    table.add_column("Mean turns", justify="right")
    table.add_column("Median", justify="right")
    table.add_column("P90", justify="right")
    table.add_column("Mean HP left", justify="right")

    for number in stages:
        report = benchmark.run_benchmark(number, level, encounters, seed)
        table.add_row(
            str(number),
            STAGES[number].boss_name,
            f"{report.win_rate:.0%}",
            f"{report.mean_turns:.1f}",
            f"{report.median_turns:.0f}",
            f"{report.p90_turns:.0f}",
            f"{report.mean_player_hp:.1f}",
        )

    console.print(table)
    console.print(f"[cyan]{encounters} encounter(s) per stage simulated.[/cyan]")


def main() -> None:
    """Entry-point for ``python -m turnsarsah.cli``."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
