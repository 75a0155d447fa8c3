"""Experience calculation, level-up handling & level caps.

Rules:
- EXP is awarded to the active battler only, on a knock-out.
- Gain = 40 per level the opponent is above the battler, else a flat 25.
- Reaching the next level costs ``threshold(level) = 50 + (level - 1) * 15``;
  the cost is consumed, so ``exp`` is always the progress inside the level.
- Each level-up adds +12 max HP and +3 attack and fully heals.
- Rare species stop at the rare cap; EXP past a cap is discarded.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, TYPE_CHECKING
from acemon.system.tuning import EngineTuning, DEFAULT_TUNING
MIN_LEVEL = 1
MAX_LEVEL = DEFAULT_TUNING.level_cap

if TYPE_CHECKING:
    from .core import Creature

def clamp_level(level: int, cap: int = MAX_LEVEL) -> int:
    try:
        return max(MIN_LEVEL, min(int(level), cap))
    except (TypeError, ValueError):
        return MIN_LEVEL

def level_cap(member: "Creature", tuning: EngineTuning = DEFAULT_TUNING) -> int:
    return tuning.level_cap_for(member.rare)

def exp_to_next(level: int, tuning: EngineTuning = DEFAULT_TUNING) -> int:
    """EXP needed to advance from ``level`` to ``level + 1``."""
    return tuning.exp_base + (max(MIN_LEVEL, level) - 1) * tuning.exp_increment

def exp_gain(enemy_level: int, your_level: int, tuning: EngineTuning = DEFAULT_TUNING) -> int:
    diff = int(enemy_level) - int(your_level)
    if diff > 0:
        return diff * tuning.exp_per_level_gap
    return tuning.exp_minimum

@dataclass
class LevelUpReport:
    gained: int
    before: int
    after: int
    levels: List[int] = field(default_factory=list)  # each level reached, in order
    capped: bool = False

    @property
    def leveled(self) -> bool:
        return self.after > self.before

def apply_experience(member: "Creature", gained: int, tuning: EngineTuning = DEFAULT_TUNING) -> LevelUpReport:
    """Add EXP to ``member`` and resolve every level-up it pays for.

    Members already at their cap gain nothing.
    """
    cap = level_cap(member, tuning)
    report = LevelUpReport(gained=0, before=member.level, after=member.level)
    if member.level >= cap:
        report.capped = True
        return report
    member.exp += max(0, int(gained))
    report.gained = max(0, int(gained))
    while member.exp >= exp_to_next(member.level, tuning):
        member.exp -= exp_to_next(member.level, tuning)
        member.level += 1
        member.max_hp += tuning.level_up_hp
        member.atk += tuning.level_up_atk
        member.heal_full()
        report.levels.append(member.level)
        if member.level >= cap:
            # leftover EXP is not banked at the cap
            member.exp = 0
            report.capped = True
            break
    report.after = member.level
    return report

__all__ = [
    "exp_gain","apply_experience","exp_to_next","clamp_level","level_cap","LevelUpReport","MIN_LEVEL","MAX_LEVEL"
]
