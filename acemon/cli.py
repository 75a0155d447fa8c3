from __future__ import annotations
import argparse
import sys
import time
from collections import Counter
from typing import Callable, Dict, List, Optional, Sequence

from rich.table import Table

from acemon.core.errors import AcemonError
from acemon.core.logging import logger
from acemon.core.rng import RandomSource
from acemon.game.context import GameContext, Phase
from acemon.game.engine import GameEngine
from acemon.game.steps import Effect, Resolution, Step
from acemon.system.remote import OFFLINE_DEFAULTS
from acemon.system.settings import Settings
from acemon.ui.render import CATEGORY_STYLES, console, render, render_party

MOVES = {"w": (0, -1), "s": (0, 1), "a": (-1, 0), "d": (1, 0)}

HELP = (
    "[bold]Explore[/bold]: w/a/s/d, go X Y, lead N, party, quit\n"
    "[bold]Battle[/bold]: fight N, catch, run, switch N, party, quit\n"
    "Numbers (N) are the slot numbers shown on screen, starting at 1."
)

ANIMATION_TEXT = {
    "ball_shake": "...",
    "heal": "♪ ♫",
    "encounter_flash": "!!",
}

def play_steps(res: Resolution, pace: float, sleep: Callable[[float], None] = time.sleep):
    """Replay a resolution's steps on the console with real delays."""
    for step in res.steps:
        _play_step(step, pace, sleep)

def _play_step(step: Step, pace: float, sleep: Callable[[float], None]):
    if step.effect == Effect.LOG:
        console.print(step.message, style=CATEGORY_STYLES.get(step.category, "white"), markup=False)
    elif step.effect == Effect.PAUSE and pace > 0:
        sleep(step.pause_ms / 1000 * pace)
    elif step.effect == Effect.ANIMATE:
        text = ANIMATION_TEXT.get(step.data.get("name", ""))
        if text:
            console.print(text, style="dim")

def _parse_int(parts: Sequence[str], pos: int) -> Optional[int]:
    try:
        return int(parts[pos])
    except (IndexError, ValueError):
        return None

def _parse_slot(parts: Sequence[str], pos: int, count: int) -> Optional[int]:
    """1-based slot number as shown on screen -> 0-based index; None when out of range."""
    n = _parse_int(parts, pos)
    if n is None or not 1 <= n <= count:
        return None
    return n - 1

def dispatch(engine: GameEngine, ctx: GameContext, line: str) -> Optional[Resolution]:
    """Map one command line to an engine operation.

    Slot numbers (moves, team members) are 1-based as displayed. Returns None
    for commands the engine does not handle (help, party, quit, unknown input,
    numbers out of range).
    """
    parts = line.strip().lower().split()
    if not parts:
        return None
    cmd = parts[0]
    if cmd in MOVES:
        return engine.step(ctx, *MOVES[cmd])
    if cmd == "go":
        x, y = _parse_int(parts, 1), _parse_int(parts, 2)
        if x is None or y is None:
            return None
        return engine.walk_to(ctx, x, y)
    if cmd in ("fight", "f"):
        moves = ctx.active.moves if ctx.active is not None else ()
        slot = _parse_slot(parts, 1, len(moves))
        return None if slot is None else engine.attack(ctx, slot)
    if cmd in ("catch", "c"):
        return engine.capture(ctx)
    if cmd in ("run", "r"):
        return engine.flee(ctx)
    if cmd == "switch":
        slot = _parse_slot(parts, 1, len(ctx.party))
        return None if slot is None else engine.switch(ctx, slot)
    if cmd == "lead":
        slot = _parse_slot(parts, 1, len(ctx.party))
        return None if slot is None else engine.set_leader(ctx, slot)
    return None

def choose_starter(engine: GameEngine, ctx: GameContext, pace: float):
    console.print("[bold]Choose your partner:[/bold]")
    for i, species in enumerate(engine.catalog.starters, 1):
        console.print(f"  {i}) {species.name} ({species.type})")
    while ctx.phase == Phase.START:
        raw = input("> ").strip()
        if not raw.isdigit() or not 1 <= int(raw) <= len(engine.catalog.starters):
            console.print("Pick one of the numbers above.")
            continue
        species = engine.catalog.starters[int(raw) - 1]
        play_steps(engine.pick_starter(ctx, species.id), pace)

def build_engine(settings: Settings, *, remote: bool = True, seed: Optional[int] = None) -> GameEngine:
    tuning = settings.tuning()
    rng = RandomSource.seeded(seed) if seed is not None else RandomSource.from_env()
    engine = GameEngine(rng=rng, tuning=tuning, config=OFFLINE_DEFAULTS)
    if remote and settings.data.remote_config:
        engine.refresh_config(settings.data.config_url, settings.data.config_timeout)
    return engine

def play(engine: GameEngine, settings: Settings):
    pace = settings.data.pace
    ctx = engine.new_context()
    choose_starter(engine, ctx, pace)
    console.print(HELP)
    while True:
        console.print(render(engine.world, ctx))
        try:
            line = input("> ")
        except EOFError:
            break
        cmd = line.strip().lower()
        if cmd in ("quit", "q", "exit"):
            break
        if cmd in ("help", "?"):
            console.print(HELP)
            continue
        if cmd == "party":
            console.print(render_party(ctx))
            continue
        res = dispatch(engine, ctx, line)
        if res is None:
            console.print("Unknown command or number out of range. Type 'help'.", style="dim")
            continue
        if not res.changed:
            console.print("Nothing happens.", style="dim")
            continue
        play_steps(res, pace)
        if ctx.phase == Phase.ENCOUNTER_INTRO:
            console.print(render(engine.world, ctx))
            play_steps(engine.start_battle(ctx), pace)
    console.print("Goodbye!")

# ----------------------------------------------------------------------
# Unattended balance simulation
# ----------------------------------------------------------------------
OUTCOMES = {
    "victory": "won",
    "capture_success": "captured",
    "flee_success": "fled",
    "defeat": "lost",
}

def _bot_action(engine: GameEngine, ctx: GameContext) -> Resolution:
    if ctx.must_switch:
        return engine.switch(ctx, ctx.party.first_available())
    foe = ctx.opponent
    active = ctx.active
    assert foe is not None and active is not None
    if foe.rare and active.hp_fraction < 0.25:
        return engine.flee(ctx)
    if not ctx.party.is_full() and foe.hp_fraction < 0.4:
        return engine.capture(ctx)
    strongest = max(range(len(active.moves)), key=lambda i: active.moves[i].power)
    return engine.attack(ctx, strongest)

def _outcome(res: Resolution) -> Optional[str]:
    for pause, label in OUTCOMES.items():
        if res.has(Effect.PAUSE, pause):
            return label
    return None

def run_simulation(engine: GameEngine, encounters: int, starter_id: Optional[int] = None,
                   max_turns: int = 200) -> Dict[str, object]:
    """Play ``encounters`` battles with a simple bot and tally the outcomes."""
    ctx = engine.new_context()
    engine.pick_starter(ctx, starter_id if starter_id is not None else engine.catalog.starters[0].id)
    tally: Counter = Counter()
    rare_seen = 0
    turns: List[int] = []
    for _ in range(encounters):
        engine.begin_encounter(ctx)
        engine.start_battle(ctx)
        if ctx.opponent is not None and ctx.opponent.rare:
            rare_seen += 1
        outcome = None
        taken = 0
        while ctx.phase == Phase.IN_BATTLE and taken < max_turns:
            res = _bot_action(engine, ctx)
            taken += 1
            outcome = _outcome(res) or outcome
        if ctx.phase == Phase.IN_BATTLE:
            engine.finalize_battle(ctx)
            outcome = "stalled"
        tally[outcome or "unknown"] += 1
        turns.append(taken)
    summary: Dict[str, object] = {
        "encounters": encounters,
        "rare": rare_seen,
        "outcomes": dict(tally),
        "avg_turns": (sum(turns) / len(turns)) if turns else 0.0,
        "party": [(m.name, m.level) for m in ctx.party],
    }
    logger.info("SimulationDone", encounters=encounters, **{k: v for k, v in tally.items()})
    return summary

def summary_table(summary: Dict[str, object]) -> Table:
    table = Table(title="Simulation")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Encounters", str(summary["encounters"]))
    table.add_row("Rare encounters", str(summary["rare"]))
    outcomes = summary["outcomes"]
    assert isinstance(outcomes, dict)
    for label in ("won", "captured", "fled", "lost", "stalled"):
        table.add_row(label.capitalize(), str(outcomes.get(label, 0)))
    table.add_row("Avg turns", f"{summary['avg_turns']:.1f}")
    party = summary["party"]
    assert isinstance(party, list)
    table.add_row("Team", ", ".join(f"{name} Lv{lvl}" for name, lvl in party))
    return table

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="acemon", description="Turn-based creature collecting in the terminal.")
    parser.add_argument("--seed", type=int, default=None, help="seed the random source")
    parser.add_argument("--offline", action="store_true", help="skip the remote config fetch")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("play", help="interactive game (default)")
    sim = sub.add_parser("simulate", help="run an unattended bot for balance checks")
    sim.add_argument("--encounters", type=int, default=50)
    sim.add_argument("--starter", type=int, default=None, help="starter species id")
    return parser

def run(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.load()
    # Outside debug mode keep the console quiet while playing
    if not settings.data.debug and settings.data.log_level in {"INFO", "DEBUG"} and args.command != "simulate":
        logger.set_level("WARN")
    else:
        settings.apply_log_level()
    try:
        engine = build_engine(settings, remote=not args.offline, seed=args.seed)
    except AcemonError as e:
        console.print(f"[red]Cannot start:[/red] {e}")
        return 2
    if args.command == "simulate":
        console.print(summary_table(run_simulation(engine, max(0, args.encounters), args.starter)))
        return 0
    try:
        play(engine, settings)
    except KeyboardInterrupt:
        console.print("\nGoodbye!")
    return 0

if __name__ == "__main__":
    sys.exit(run())
