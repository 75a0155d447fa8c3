"""Wild encounter generation: trigger roll, weather, rarity, species & level."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from acemon.battle.core import Creature, Weather, BattleCore
from acemon.battle.factory import create_instance
from acemon.battle.party import Party
from acemon.core.logging import logger
from acemon.core.rng import RandomSource
from acemon.data.catalog import Catalog, Species
from acemon.system.remote import RemoteConfig, OFFLINE_DEFAULTS
from acemon.system.tuning import EngineTuning, DEFAULT_TUNING

@dataclass
class Encounter:
    opponent: Creature
    weather: Weather
    rare: bool

class EncounterGenerator:
    def __init__(
        self,
        catalog: Catalog,
        rng: RandomSource,
        tuning: EngineTuning = DEFAULT_TUNING,
        config: Optional[RemoteConfig] = None,
    ):
        self.catalog = catalog
        self.rng = rng
        self.tuning = tuning
        self.config = config or OFFLINE_DEFAULTS
        self._core = BattleCore(rng, tuning)

    def should_trigger(self) -> bool:
        """One roll per tall-grass tile entered."""
        return self.rng.chance(self.tuning.grass_encounter_chance)

    def rare_level(self, party: Party) -> int:
        return min(party.highest_level() + self.tuning.rare_level_bonus, self.tuning.rare_level_cap)

    def common_level(self, party: Party) -> int:
        jitter = self.tuning.common_level_jitter
        lvl = party.average_level() + self.rng.randint(-jitter, jitter)
        return max(1, min(lvl, self.tuning.level_cap))

    def pick(self, rare: bool) -> Species:
        pool = self.catalog.rare if rare else self.catalog.common
        return self.rng.choice(pool)

    def generate(self, party: Party) -> Encounter:
        weather = self._core.roll_weather()
        rare = self.rng.chance(self.config.spawn_rate)
        species = self.pick(rare)
        level = self.rare_level(party) if rare else self.common_level(party)
        opponent = create_instance(species, level, tuning=self.tuning, config=self.config)
        logger.debug("EncounterGenerated", species=species.name, level=opponent.level, rare=rare, weather=weather.value)
        return Encounter(opponent=opponent, weather=weather, rare=rare)

__all__ = ["Encounter", "EncounterGenerator"]
