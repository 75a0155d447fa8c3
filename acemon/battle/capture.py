"""Capture & flee mechanics.

Capture chance rises linearly with damage dealt and is clamped to a band per
rarity class; rare opponents start far lower and top out far lower. Escape is
a flat chance per rarity class.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
from acemon.core.rng import RandomSource
from acemon.system.tuning import EngineTuning, DEFAULT_TUNING

if TYPE_CHECKING:
    from .core import Creature

@dataclass
class CaptureResult:
    success: bool
    chance: float
    roll: float

def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))

def capture_chance(max_hp: int, current_hp: int, rare: bool, tuning: EngineTuning = DEFAULT_TUNING) -> float:
    hp_fraction = max(0, min(current_hp, max_hp)) / max(1, max_hp)
    missing = 1 - hp_fraction
    if rare:
        return _clamp(tuning.capture_rare_base + missing * tuning.capture_damage_weight,
                      tuning.capture_rare_min, tuning.capture_rare_max)
    return _clamp(tuning.capture_common_base + missing * tuning.capture_damage_weight,
                  tuning.capture_common_min, tuning.capture_common_max)

def attempt_capture(rng: RandomSource, target: "Creature", tuning: EngineTuning = DEFAULT_TUNING) -> CaptureResult:
    chance = capture_chance(target.max_hp, target.hp, target.rare, tuning)
    roll = rng.random()
    return CaptureResult(roll < chance, chance, roll)

def flee_chance(rare: bool, tuning: EngineTuning = DEFAULT_TUNING) -> float:
    return tuning.flee_rare if rare else tuning.flee_common

def flee_success(rng: RandomSource, target: "Creature", tuning: EngineTuning = DEFAULT_TUNING) -> bool:
    """Return True if the escape succeeds against ``target``."""
    return rng.chance(flee_chance(target.rare, tuning))

__all__ = ["attempt_capture","capture_chance","flee_chance","flee_success","CaptureResult"]
