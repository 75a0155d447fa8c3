"""Factory helpers for constructing Creature instances from species templates.

Shared by the encounter generator, starter pick and capture.
"""
from __future__ import annotations
import math
from typing import Dict, Optional
from .core import Creature
from .experience import clamp_level
from acemon.data.catalog import Species
from acemon.system.remote import RemoteConfig, OFFLINE_DEFAULTS
from acemon.system.tuning import EngineTuning, DEFAULT_TUNING

def derive_stats(species: Species, level: int, tuning: EngineTuning = DEFAULT_TUNING) -> Dict[str, int]:
    hp = math.floor(species.max_hp * (1 + level / tuning.hp_level_divisor) + level * tuning.hp_per_level)
    atk = math.floor(species.atk * (1 + level / tuning.atk_level_divisor))
    return {"hp": hp, "atk": atk}

def effective_level(species: Species, level: int, tuning: EngineTuning = DEFAULT_TUNING) -> int:
    level = clamp_level(level, tuning.level_cap)
    if species.rare:
        level = min(level, tuning.rare_level_cap)
    return level

def create_instance(
    species: Species,
    level: int,
    suppress_rare_bonus: bool = False,
    *,
    tuning: EngineTuning = DEFAULT_TUNING,
    config: Optional[RemoteConfig] = None,
) -> Creature:
    """Build a full-health, zero-experience instance with a fresh uid.

    Rare species are capped at the rare level limit and, unless the bonus is
    suppressed, have both stats scaled by the configured power multipliers.
    """
    lvl = effective_level(species, level, tuning)
    stats = derive_stats(species, lvl, tuning)
    if species.rare and not suppress_rare_bonus:
        cfg = config or OFFLINE_DEFAULTS
        stats["hp"] = math.floor(stats["hp"] * cfg.hp_multiplier)
        stats["atk"] = math.floor(stats["atk"] * cfg.atk_multiplier)
    return Creature(species=species, level=lvl, max_hp=stats["hp"], atk=stats["atk"])

__all__ = ["create_instance", "derive_stats", "effective_level"]
