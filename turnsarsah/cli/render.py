"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Iterable

from rich.console import RenderableType
from rich.panel import Panel

from ..actions import Action, ActionType
from ..cards import Card
from ..state import Combatant
from .views import CombatantView

_SUIT_SYMBOLS = {
    "S": ("♠", "cyan"),
    "H": ("♥", "red"),
    "D": ("♦", "magenta"),
    "C": ("♣", "green"),
}


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    if card.is_blind:
        return "[dim]??[/dim]"
    if card.is_wildcard or card.rank is None or card.suit is None:
        return "[bold magenta]WILD[/bold magenta]"
    symbol, color = _SUIT_SYMBOLS[card.suit.value]
    label = f"[{color}]{card.rank.label}{symbol}[/{color}]"
    if card.is_banned:
        return f"[strike]{label}[/strike]"
    return label


def format_cards(cards: Iterable[Card]) -> str:
    return " ".join(format_card(card) for card in cards) or "-"


def describe_action(action: Action) -> str:
    """Return a one-line Rich description of ``action``."""

    data = action.payload
    kind = action.type
    if kind is ActionType.IMPACT:
        crit = " [bold red]CRITICAL[/bold red]" if data.get("is_critical") else ""
        category = f" ({data['category']})" if data.get("category") else ""
        return f"{data['source']} strikes for [bold]{data['damage']}[/bold]{category}{crit}"
    if kind in (ActionType.DAMAGE, ActionType.BLEED, ActionType.HEAVY_BLEED, ActionType.POISON):
        label = "damage" if kind is ActionType.DAMAGE else kind.value.lower().replace("_", " ")
        return f"{data['target']} takes [red]{data['amount']}[/red] {label} (HP {data['hp']})"
    if kind is ActionType.HEAL:
        return f"{data['target']} heals [green]{data['amount']}[/green] (HP {data['hp']})"
    if kind is ActionType.CONDITION_APPLIED:
        return f"{data['target']} is now [yellow]{data['name']}[/yellow]"
    if kind is ActionType.CONDITION_RESISTED:
        return f"{data['target']} resists {data['name']} ({data['reason']})"
    if kind is ActionType.CONDITION_EXPIRED:
        return f"{data['name']} wears off {data['target']}"
    if kind is ActionType.CURED:
        return f"{data['target']} shakes off {data['name']}"
    if kind is ActionType.AVOIDED:
        return f"{data['target']} [cyan]avoids[/cyan] the attack"
    if kind is ActionType.PARALYZED:
        return f"{data['target']} is paralyzed"
    if kind is ActionType.SKIPPED:
        return f"{data['source']} skips ({data['reason']})"
    if kind is ActionType.MISSED:
        return f"{data['source']} misses"
    if kind is ActionType.SWAPPED:
        return f"{data['source']} swaps {data['count']} card(s), {data['remaining']} swap(s) left"
    if kind is ActionType.STAT_GROWTH:
        return f"{data['target']} grows stronger (ATK {data['atk']})"
    details = ", ".join(f"{key}={value}" for key, value in data.items() if value)
    return f"rules change: {details}" if details else "rules change"


def render_combatants(player: Combatant, boss: Combatant, *, title: str = "Turn Sarsah") -> RenderableType:
    """Return a Rich panel describing both combatants."""

    view = CombatantView(combatants=(player, boss))
    return Panel(view.render(), title=title, padding=(0, 1), border_style="cyan")
