"""Composable view primitives for the Turn Sarsah CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rich import box
from rich.console import RenderableType
from rich.table import Table

from ..conditions import Condition
from ..state import Combatant

HP_BAR_WIDTH = 20


def hp_bar(hp: int, max_hp: int, width: int = HP_BAR_WIDTH) -> str:
    filled = 0 if max_hp <= 0 else round(width * hp / max_hp)
    color = "green" if filled > width // 2 else "yellow" if filled > width // 5 else "red"
    return f"[{color}]{'#' * filled}[/{color}]{'.' * (width - filled)}"


def _condition_label(condition: Condition) -> str:
    remaining = condition.remaining
    if remaining is None:
        return condition.name
    return f"{condition.name} ({remaining})"


@dataclass(slots=True)
class CombatantView:
    """Renderable table of HP, attack and conditions."""

    combatants: Sequence[Combatant]

    def render(self) -> RenderableType:
        table = Table(box=box.ROUNDED, expand=True)
        table.add_column("Combatant", justify="left", style="bold")
        table.add_column("HP", justify="left")
        table.add_column("ATK", justify="right")
        table.add_column("Conditions", justify="left")

        for combatant in self.combatants:
            conditions = ", ".join(_condition_label(condition) for condition in combatant.conditions)
            table.add_row(
                combatant.name,
                f"{hp_bar(combatant.hp, combatant.max_hp)} {combatant.hp}/{combatant.max_hp}",
                str(combatant.atk),
                conditions or "-",
            )
        return table
