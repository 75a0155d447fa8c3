"""Rich renderables for the map, the battle HUD, the log and the party.

Pure functions over :class:`GameContext`; nothing here mutates game state.
"""
from __future__ import annotations
from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.box import ROUNDED, HEAVY

from acemon.battle.core import Creature
from acemon.battle.experience import exp_to_next
from acemon.core.types import type_abbreviation, type_markup
from acemon.game.context import GameContext, Phase
from acemon.game.log import LogCategory
from acemon.world.grid import Tile, TileMap

console = Console()

TILE_GLYPHS = {
    Tile.PATH: "[grey50]·[/grey50]",
    Tile.GRASS: "[green]\"[/green]",
    Tile.WALL: "[bright_black]█[/bright_black]",
    Tile.HEAL: "[bold magenta]+[/bold magenta]",
}

CATEGORY_STYLES = {
    LogCategory.PLAYER: "bold cyan",
    LogCategory.ENEMY: "bold red",
    LogCategory.SYSTEM: "yellow",
    LogCategory.NORMAL: "white",
}

WEATHER_ICONS = {"Clear": "☀", "Rain": "☂", "Snow": "❄", "Fog": "≋"}

def _hp_style(ratio: float) -> str:
    if ratio > 0.5:
        return "green"
    if ratio > 0.2:
        return "yellow"
    return "red"

def hp_bar(cur: int, max_hp: int, width: int = 20) -> Text:
    """Block HP bar coloured green / yellow / red by remaining ratio."""
    max_hp = max(1, max_hp)
    cur = max(0, min(cur, max_hp))
    ratio = cur / max_hp
    filled = max(0, min(width, int(round(ratio * width))))
    bar = Text()
    bar.append("█" * filled, style=_hp_style(ratio))
    bar.append("░" * (width - filled), style="grey37")
    bar.append(f" {cur}/{max_hp}")
    return bar

def exp_bar(member: Creature, width: int = 20) -> Text:
    need = exp_to_next(member.level)
    filled = max(0, min(width, int(member.exp / max(1, need) * width)))
    bar = Text()
    bar.append("━" * filled, style="rgb(80,160,255)")
    bar.append("-" * (width - filled), style="grey37")
    return bar

def creature_line(member: Creature) -> str:
    rare = " [bold gold1]★[/bold gold1]" if member.rare else ""
    return f"[bold]{member.name}[/bold]{rare} Lv{member.level} {type_markup(member.type, type_abbreviation(member.type))}"

def render_map(world: TileMap, ctx: GameContext) -> Panel:
    px, py = ctx.position
    lines = []
    for y, row in enumerate(world.tiles):
        cells = []
        for x, code in enumerate(row):
            if (x, y) == (px, py):
                cells.append("[bold bright_white on blue]@[/bold bright_white on blue]")
            else:
                cells.append(TILE_GLYPHS[Tile(code)])
        lines.append(" ".join(cells))
    return Panel("\n".join(lines), title=f"{world.name} ({px},{py})", box=ROUNDED, expand=False)

def render_combatant(member: Optional[Creature], label: str, show_exp: bool = False) -> Panel:
    if member is None:
        return Panel("-", title=label, box=ROUNDED)
    rows = [Text.from_markup(creature_line(member)), hp_bar(member.hp, member.max_hp)]
    if show_exp:
        rows.append(exp_bar(member))
    return Panel(Group(*rows), title=label, box=HEAVY if member.rare else ROUNDED, expand=False)

def render_log(ctx: GameContext, last: int = 8) -> Panel:
    text = Text()
    entries = ctx.log.entries()[-last:]
    for i, entry in enumerate(entries):
        if i:
            text.append("\n")
        text.append(entry.msg, style=CATEGORY_STYLES.get(entry.category, "white"))
    return Panel(text, title="Log", box=ROUNDED)

def render_moves(member: Optional[Creature]) -> Table:
    table = Table(box=None, show_header=False, pad_edge=False)
    if member is None:
        return table
    for i, move in enumerate(member.moves, 1):
        table.add_row(f"[bold]{i}[/bold]", move.name, type_markup(move.type, type_abbreviation(move.type)), f"pow {move.power}")
    return table

def render_battle(ctx: GameContext) -> Group:
    icon = WEATHER_ICONS.get(ctx.weather.value, "")
    header = Text(f"{icon} {ctx.weather.value}", style="bold")
    parts = [header,
             render_combatant(ctx.opponent, "Opponent"),
             render_combatant(ctx.active, "You", show_exp=True)]
    if ctx.phase == Phase.IN_BATTLE:
        if ctx.must_switch:
            parts.append(Text("Your fighter is down! Choose another with 'switch N'.", style="bold red"))
        else:
            parts.append(render_moves(ctx.active))
    parts.append(render_log(ctx))
    return Group(*parts)

def render_party(ctx: GameContext) -> Table:
    table = Table(title="Team", box=ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("HP")
    table.add_column("ATK", justify="right")
    table.add_column("EXP", justify="right")
    for i, member in enumerate(ctx.party):
        marker = "▶ " if i == ctx.active_index and ctx.in_battle else ""
        table.add_row(str(i + 1), marker + creature_line(member), hp_bar(member.hp, member.max_hp, width=12),
                      str(member.atk), f"{member.exp}/{exp_to_next(member.level)}")
    return table

def render(world: TileMap, ctx: GameContext):
    if ctx.in_battle:
        return render_battle(ctx)
    return Group(render_map(world, ctx), render_log(ctx, last=4))

__all__ = [
    "console", "hp_bar", "exp_bar", "render_map", "render_battle", "render_log", "render_party", "render",
]
