"""Battle core: moves, battle instances, weather and the damage model.

Damage follows a simple linear shape::

    power' = power x weather modifier(move type)
    base   = floor(power' / 6 * level / 5 + attack / 16) (+ player bonus)
    damage = max(min_damage, floor(base x variance)),  variance in [0.85, 1.05)

Divisors, bonus, variance band and floor come from :class:`EngineTuning`.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, TYPE_CHECKING
import math
import uuid
from acemon.core.rng import RandomSource
from acemon.system.tuning import EngineTuning, DEFAULT_TUNING

if TYPE_CHECKING:
    from acemon.data.catalog import Species

class Weather(str, Enum):
    CLEAR = "Clear"
    RAIN = "Rain"
    SNOW = "Snow"
    FOG = "Fog"

WEATHER_POOL: Tuple[Weather, ...] = (Weather.CLEAR, Weather.RAIN, Weather.SNOW, Weather.FOG)

WEATHER_INTRO = {
    Weather.RAIN: "Heavy rain soaks the battlefield...",
    Weather.SNOW: "A blizzard cuts visibility!",
    Weather.FOG: "Thick fog hides everything...",
}

@dataclass(frozen=True)
class Move:
    name: str
    power: int
    type: str

def new_uid() -> str:
    return uuid.uuid4().hex

@dataclass
class Creature:
    """A battle-ready instance of a species template."""
    species: "Species"
    level: int
    max_hp: int
    atk: int
    current_hp: Optional[int] = None  # lazily initialized to max HP
    exp: int = 0
    uid: str = field(default_factory=new_uid)

    def __post_init__(self):
        self.max_hp = max(1, int(self.max_hp))
        if self.current_hp is None or self.current_hp > self.max_hp:
            self.current_hp = self.max_hp
        self.current_hp = max(0, int(self.current_hp))
        self.exp = max(0, int(self.exp))

    @property
    def name(self) -> str:
        return self.species.name

    @property
    def type(self) -> str:
        return self.species.type

    @property
    def moves(self) -> Tuple[Move, ...]:
        return self.species.moves

    @property
    def rare(self) -> bool:
        return self.species.rare

    @property
    def hp(self) -> int:
        return int(self.current_hp or 0)

    @property
    def hp_fraction(self) -> float:
        return self.hp / self.max_hp

    def is_fainted(self) -> bool:
        return self.hp <= 0

    def take_damage(self, amount: int) -> int:
        """Subtract damage (floored at 0); returns the new HP."""
        self.current_hp = max(0, self.hp - max(0, int(amount)))
        return self.current_hp

    def heal_full(self):
        self.current_hp = self.max_hp

    def fresh_copy(self) -> "Creature":
        """Same stats and progress at full health under a new identity."""
        return Creature(species=self.species, level=self.level, max_hp=self.max_hp, atk=self.atk,
                        current_hp=self.max_hp, exp=self.exp)

class BattleCore:
    def __init__(self, rng: Optional[RandomSource] = None, tuning: EngineTuning = DEFAULT_TUNING):
        self.rng = rng or RandomSource()
        self.tuning = tuning

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------
    def roll_weather(self) -> Weather:
        return self.rng.choice(WEATHER_POOL)

    def weather_modifier(self, move: Move, weather: Weather) -> float:
        table = self.tuning.weather_power.get(Weather(weather).value, {})
        return table.get(move.type, 1.0)

    def miss_chance(self, weather: Weather, *, for_player: bool) -> float:
        table = self.tuning.player_miss if for_player else self.tuning.enemy_miss
        return table.get(Weather(weather).value, 0.0)

    def roll_miss(self, weather: Weather, *, for_player: bool) -> bool:
        chance = self.miss_chance(weather, for_player=for_player)
        if chance <= 0:
            return False
        return self.rng.chance(chance)

    # ------------------------------------------------------------------
    # Damage
    # ------------------------------------------------------------------
    def base_damage(self, move: Move, attacker: Creature, weather: Weather, *, for_player: bool) -> int:
        t = self.tuning
        power = move.power * self.weather_modifier(move, weather)
        base = math.floor((power / t.power_divisor) * (attacker.level / t.level_divisor) + attacker.atk / t.attack_divisor)
        if for_player:
            base += t.player_damage_bonus
        return base

    def roll_variance(self) -> float:
        return self.rng.uniform(self.tuning.variance_min, self.tuning.variance_max)

    def calc_damage(self, move: Move, attacker: Creature, weather: Weather, *, for_player: bool) -> int:
        base = self.base_damage(move, attacker, weather, for_player=for_player)
        return max(self.tuning.min_damage, math.floor(base * self.roll_variance()))

__all__ = ["Weather", "WEATHER_POOL", "WEATHER_INTRO", "Move", "Creature", "BattleCore", "new_uid"]
