"""Rich terminal rendering for the battle screen.

The engine never waits; this module owns the pauses between messages so a
sequence reads like a fight. Pauses scale with the text-speed setting and are
skipped entirely under pytest.
"""
from __future__ import annotations
import os
import time
from typing import Iterable, Optional

from rich.align import Align
from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pokebattle.battle.chart import Matchup, matchup
from pokebattle.battle.core import AttackOutcome, Combatant
from pokebattle.battle.factory import strength_tier
from pokebattle.battle.session import BattleSession
from pokebattle.core.types import format_types

# Seconds at normal text speed
ATTACK_MESSAGE_DELAY = 1.2
BETWEEN_ATTACKS_DELAY = 0.8
BETWEEN_ROUNDS_DELAY = 0.6
SEQUENCE_END_DELAY = 0.5

_MATCHUP_BADGES = {
    Matchup.ADVANTAGE: "[bold green]⚔[/]",
    Matchup.MUTUAL: "[bold yellow]⚡[/]",
    Matchup.DISADVANTAGE: "[bold red]🛡[/]",
    Matchup.NEUTRAL: "",
}


def hp_bar(current: int, max_hp: int, width: int = 20) -> Text:
    max_hp = max(1, max_hp)
    current = max(0, min(current, max_hp))
    ratio = current / max_hp
    filled = int(round(ratio * width))
    if ratio <= 0.25:
        color = "red"
    elif ratio <= 0.5:
        color = "yellow"
    else:
        color = "green"
    bar = Text()
    bar.append("█" * filled, style=color)
    bar.append("░" * (width - filled), style="dim")
    bar.append(f" {current}/{max_hp}")
    return bar


def matchup_badge(c: Combatant, foe: Combatant) -> str:
    return _MATCHUP_BADGES[matchup(c.types, foe.types)]


class BattleView:
    def __init__(self, console: Optional[Console] = None, pace: float = 1.0):
        self.console = console or Console()
        self.pace = 0.0 if os.getenv('PYTEST_CURRENT_TEST') else pace
        self._second_attack = False

    def pause(self, seconds: float):
        if self.pace > 0 and seconds > 0:
            time.sleep(seconds * self.pace)

    def message(self, text: str, style: str = "white"):
        self.console.print(Text(text, style=style))

    def messages(self, lines: Iterable[str], style: str = "white"):
        for line in lines:
            self.message(line, style)

    def error(self, text: str):
        self.console.print(f"[bold red]{text}[/]")

    # ---------------- Cards -----------------
    def _card(self, c: Combatant, foe: Optional[Combatant], title_style: str) -> Panel:
        tier = strength_tier(c.strength)
        stats = Text.assemble(
            (str(c.attack), "bold"), " ATK  ",
            (str(c.max_hp), "bold"), " HP  ",
            (tier.name, tier.style), " STR",
        )
        name = Text.from_markup(f"[{title_style}]{c.name}[/] {format_types(c.types)}")
        if foe is not None:
            badge = matchup_badge(c, foe)
            if badge:
                name.append_text(Text.from_markup(" " + badge))
        return Panel(Group(name, hp_bar(c.current_hp or 0, c.max_hp), stats), box=ROUNDED, expand=False)

    def show_arena(self, session: BattleSession, coins: Optional[int] = None):
        header = f"Round [bold]{session.round_number}[/]   Wins [bold]{session.wins}[/]"
        if coins is not None:
            header += f"   Coins [bold yellow]{coins}[/]"
        self.console.print(Align.center(Text.from_markup(header)))
        self.console.print(self._card(session.opponent, None, "bold red"))
        self.console.print(Align.right(self._card(session.party.active(), session.opponent, "bold cyan")))

    def show_team(self, session: BattleSession):
        table = Table(title="Your Team", box=ROUNDED)
        table.add_column("#", justify="right")
        table.add_column("Name")
        table.add_column("Types")
        table.add_column("HP")
        table.add_column("ATK", justify="right")
        table.add_column("STR", justify="center")
        table.add_column("Status")
        for i, c in enumerate(session.party.members):
            if c.is_fainted():
                status = "[red]Fainted[/]"
            elif i == session.party.active_index:
                status = "[cyan]Active[/]"
            else:
                status = "Ready"
            tier = strength_tier(c.strength)
            name = f"{c.name} {matchup_badge(c, session.opponent)}".rstrip()
            table.add_row(str(i + 1), name, format_types(c.types), hp_bar(c.current_hp or 0, c.max_hp, width=10),
                          str(c.attack), f"[{tier.style}]{tier.name}[/]", status)
        self.console.print(table)

    # ---------------- Sequence pacing -----------------
    def begin_sequence(self):
        self._second_attack = False

    def show_outcome(self, outcome: AttackOutcome):
        """Per-attack callback handed to the engine."""
        if self._second_attack:
            self.pause(BETWEEN_ATTACKS_DELAY)
        style = "bold cyan" if outcome.is_player_attack else "bold red"
        self.message(outcome.describe(), style)
        self.pause(ATTACK_MESSAGE_DELAY)
        if self._second_attack:
            self.pause(BETWEEN_ROUNDS_DELAY)
        self._second_attack = not self._second_attack

    def end_sequence(self):
        self._second_attack = False
        self.pause(SEQUENCE_END_DELAY)
