"""Explicit game context threaded through every engine operation."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple
from acemon.battle.core import Creature, Weather
from acemon.battle.party import Party
from .log import BattleLog

class Phase(str, Enum):
    START = "start"
    EXPLORING = "exploring"
    ENCOUNTER_INTRO = "encounter_intro"
    IN_BATTLE = "in_battle"
    RESOLVED = "resolved"

BATTLE_PHASES = (Phase.ENCOUNTER_INTRO, Phase.IN_BATTLE, Phase.RESOLVED)

@dataclass
class GameContext:
    party: Party = field(default_factory=Party)
    position: Tuple[int, int] = (0, 0)
    phase: Phase = Phase.START
    active_index: int = 0
    opponent: Optional[Creature] = None
    weather: Weather = Weather.CLEAR
    busy: bool = False
    must_switch: bool = False
    auto_walking: bool = False
    log: BattleLog = field(default_factory=BattleLog)

    @property
    def active(self) -> Optional[Creature]:
        if 0 <= self.active_index < len(self.party):
            return self.party[self.active_index]
        return None

    @property
    def in_battle(self) -> bool:
        return self.phase in BATTLE_PHASES

__all__ = ["Phase", "GameContext", "BATTLE_PHASES"]
