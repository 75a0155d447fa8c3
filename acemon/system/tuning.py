"""Engine tuning constants.

Every number that shapes encounters, damage, capture, escape and progression
lives here so presets (or the settings file) can retune the game without
touching the rules. Defaults reproduce the classic ruleset.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
import math
from typing import Any, Dict, Mapping
from acemon.core.errors import ValidationError

WEATHER_POWER_DEFAULT: Dict[str, Dict[str, float]] = {
    "Clear": {"Fire": 1.2},
    "Rain": {"Water": 1.3, "Fire": 0.7},
    "Snow": {"Ice": 1.3},
    "Fog": {},
}

@dataclass(frozen=True)
class EngineTuning:
    # party & levels
    team_limit: int = 6
    level_cap: int = 100
    rare_level_cap: int = 35
    starter_level: int = 5
    # exploration
    grass_encounter_chance: float = 0.15
    rare_level_bonus: int = 8
    common_level_jitter: int = 2
    # factory scaling
    hp_level_divisor: float = 18.0
    hp_per_level: float = 2.5
    atk_level_divisor: float = 45.0
    # damage
    power_divisor: float = 6.0
    level_divisor: float = 5.0
    attack_divisor: float = 16.0
    player_damage_bonus: int = 8
    variance_min: float = 0.85
    variance_max: float = 1.05
    min_damage: int = 2
    weather_power: Dict[str, Dict[str, float]] = field(default_factory=lambda: {k: dict(v) for k, v in WEATHER_POWER_DEFAULT.items()})
    player_miss: Dict[str, float] = field(default_factory=lambda: {"Snow": 0.05, "Fog": 0.10})
    enemy_miss: Dict[str, float] = field(default_factory=lambda: {"Snow": 0.12, "Fog": 0.22})
    # capture
    capture_common_base: float = 0.65
    capture_common_min: float = 0.15
    capture_common_max: float = 0.98
    capture_rare_base: float = 0.04
    capture_rare_min: float = 0.04
    capture_rare_max: float = 0.55
    capture_damage_weight: float = 0.30
    # escape
    flee_common: float = 0.88
    flee_rare: float = 0.35
    # experience
    exp_base: int = 50
    exp_increment: int = 15
    exp_per_level_gap: int = 40
    exp_minimum: int = 25
    level_up_hp: int = 12
    level_up_atk: int = 3
    # log
    log_limit: int = 40

    def level_cap_for(self, rare: bool) -> int:
        return self.rare_level_cap if rare else self.level_cap

    def validate(self) -> "EngineTuning":
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "weather_power":
                _check_power_table(value)
            elif isinstance(value, dict):
                _check_number_table(f.name, value)
            else:
                _number(f.name, value, integral=isinstance(f.default, int))
        probs = {
            "grass_encounter_chance": self.grass_encounter_chance,
            "flee_common": self.flee_common,
            "flee_rare": self.flee_rare,
        }
        for band in ("common", "rare"):
            for part in ("base", "min", "max"):
                name = f"capture_{band}_{part}"
                probs[name] = getattr(self, name)
        for table in ("player_miss", "enemy_miss"):
            for weather, p in getattr(self, table).items():
                probs[f"{table}.{weather}"] = p
        for name, p in probs.items():
            if not 0.0 <= p <= 1.0:
                raise ValidationError(f"{name} must be a probability, got {p}")
        if self.capture_common_min > self.capture_common_max or self.capture_rare_min > self.capture_rare_max:
            raise ValidationError("capture band min exceeds max")
        if not 1 <= self.rare_level_cap <= self.level_cap:
            raise ValidationError("rare_level_cap must lie within [1, level_cap]")
        if not 1 <= self.team_limit:
            raise ValidationError("team_limit must be positive")
        if self.min_damage < 1:
            raise ValidationError("min_damage must be at least 1")
        if self.variance_min <= 0 or self.variance_min > self.variance_max:
            raise ValidationError("variance band is empty or non-positive")
        for name in ("hp_level_divisor", "atk_level_divisor", "power_divisor", "level_divisor", "attack_divisor"):
            if getattr(self, name) <= 0:
                raise ValidationError(f"{name} must be positive")
        if self.exp_base <= 0 or self.exp_increment < 0:
            raise ValidationError("experience curve must be positive")
        if self.log_limit < 1:
            raise ValidationError("log_limit must be positive")
        return self

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, Any] | None) -> "EngineTuning":
        """Defaults patched with a mapping of field -> value.

        Unknown keys are rejected instead of silently ignored; typos in a
        settings file should be loud. Table fields merge per entry.
        """
        base = cls()
        if not overrides:
            return base
        if not isinstance(overrides, Mapping):
            raise ValidationError("tuning must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValidationError(f"Unknown tuning keys: {', '.join(unknown)}")
        patched: Dict[str, Any] = {}
        for key, value in overrides.items():
            current = getattr(base, key)
            if key == "weather_power":
                merged = {w: dict(t) for w, t in current.items()}
                merged.update(_check_power_table(value))
                patched[key] = merged
            elif isinstance(current, dict):
                merged = dict(current)
                merged.update(_check_number_table(key, value))
                patched[key] = merged
            else:
                patched[key] = _number(key, value, integral=isinstance(current, int))
        return replace(base, **patched).validate()

def _number(name: str, value: Any, *, integral: bool = False) -> Any:
    """Finite int/float (integral when asked); anything else is a ValidationError."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be numeric, got {value!r}")
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    if integral:
        if not number.is_integer():
            raise ValidationError(f"{name} must be a whole number, got {value!r}")
        return int(value)
    return number

def _check_number_table(name: str, table: Any) -> Dict[str, float]:
    if not isinstance(table, Mapping):
        raise ValidationError(f"{name} must be a mapping")
    checked: Dict[str, float] = {}
    for key, value in table.items():
        if not isinstance(key, str):
            raise ValidationError(f"{name} keys must be strings, got {key!r}")
        checked[key] = _number(f"{name}.{key}", value)
    return checked

def _check_power_table(table: Any) -> Dict[str, Dict[str, float]]:
    if not isinstance(table, Mapping):
        raise ValidationError("weather_power must be a mapping")
    checked: Dict[str, Dict[str, float]] = {}
    for weather, mods in table.items():
        if not isinstance(weather, str):
            raise ValidationError(f"weather_power keys must be strings, got {weather!r}")
        checked[weather] = _check_number_table(f"weather_power.{weather}", mods)
        if any(v < 0 for v in checked[weather].values()):
            raise ValidationError(f"weather_power.{weather} modifiers must be non-negative")
    return checked

DEFAULT_TUNING = EngineTuning()

__all__ = ["EngineTuning", "DEFAULT_TUNING", "WEATHER_POWER_DEFAULT"]
