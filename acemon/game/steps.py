"""Ordered effect steps emitted by engine operations.

The engine applies every state change immediately and records what happened
as a list of steps. Pauses are explicit tokens; the presentation decides how
long (or whether) to actually wait.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from .log import LogCategory, LogEntry

if TYPE_CHECKING:
    from .context import GameContext, Phase

class Effect(str, Enum):
    LOG = "log"
    PAUSE = "pause"
    ANIMATE = "animate"
    HP = "hp"
    MOVE = "move"
    PHASE = "phase"

class Pause:
    """Named pacing delays in milliseconds."""
    AUTO_MOVE = 180
    BATTLE_INTRO = 2200
    HIT = 650
    MISS = 650
    BALL_THROW = 850
    BALL_SHAKE = 800
    FLEE = 600
    FLEE_SUCCESS = 500
    VICTORY = 1200
    CAPTURE_SUCCESS = 1500
    DEFEAT = 1300

@dataclass(frozen=True)
class Step:
    effect: Effect
    message: Optional[str] = None
    category: Optional[LogCategory] = None
    pause_ms: int = 0
    data: Dict[str, Any] = field(default_factory=dict)

@dataclass
class Resolution:
    ctx: "GameContext"
    steps: List[Step] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.steps)

    @property
    def logs(self) -> List[Step]:
        return [s for s in self.steps if s.effect == Effect.LOG]

    @property
    def messages(self) -> List[str]:
        return [s.message or "" for s in self.logs]

    @property
    def total_pause_ms(self) -> int:
        return sum(s.pause_ms for s in self.steps)

    def has(self, effect: Effect, name: Optional[str] = None) -> bool:
        for s in self.steps:
            if s.effect == effect and (name is None or s.data.get("name") == name):
                return True
        return False

class StepRecorder:
    def __init__(self, ctx: "GameContext"):
        self.ctx = ctx
        self.steps: List[Step] = []

    def log(self, msg: str, category: LogCategory = LogCategory.NORMAL) -> LogEntry:
        entry = self.ctx.log.push(msg, category)
        self.steps.append(Step(Effect.LOG, message=msg, category=entry.category, data={"id": entry.id}))
        return entry

    def pause(self, ms: int, reason: str = ""):
        self.steps.append(Step(Effect.PAUSE, pause_ms=int(ms), data={"name": reason} if reason else {}))

    def animate(self, name: str, **data: Any):
        self.steps.append(Step(Effect.ANIMATE, data={"name": name, **data}))

    def hp(self, target: str, old: int, new: int):
        self.steps.append(Step(Effect.HP, data={"target": target, "old": old, "new": new, "delta": new - old}))

    def move(self, x: int, y: int):
        self.steps.append(Step(Effect.MOVE, data={"x": x, "y": y}))

    def phase(self, phase: "Phase"):
        self.ctx.phase = phase
        self.steps.append(Step(Effect.PHASE, data={"phase": phase.value}))

    def resolve(self) -> Resolution:
        return Resolution(self.ctx, self.steps)

__all__ = ["Effect", "Pause", "Step", "Resolution", "StepRecorder"]
