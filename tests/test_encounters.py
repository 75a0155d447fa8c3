from acemon.battle.core import Weather
from acemon.battle.factory import create_instance
from acemon.battle.party import Party
from acemon.system.remote import RemoteConfig
from acemon.world.encounters import EncounterGenerator


def _party(catalog, *levels):
    return Party([create_instance(catalog.get(4), lvl) for lvl in levels])


def test_grass_trigger_roll(catalog, scripted_rng):
    gen = EncounterGenerator(catalog, scripted_rng([0.14, 0.15]))
    assert gen.should_trigger()
    assert not gen.should_trigger()


def test_rare_level_capped(catalog, scripted_rng):
    gen = EncounterGenerator(catalog, scripted_rng())
    assert gen.rare_level(_party(catalog, 5, 3)) == 13
    assert gen.rare_level(_party(catalog, 30)) == 35


def test_common_level_jitter(catalog, scripted_rng):
    gen = EncounterGenerator(catalog, scripted_rng([0.0, 0.99, 0.0]))
    party = _party(catalog, 4, 6)
    assert gen.common_level(party) == 3
    assert gen.common_level(party) == 7
    assert gen.common_level(_party(catalog, 1)) == 1


def test_generate_rare(catalog, scripted_rng):
    # weather, rarity, species
    gen = EncounterGenerator(catalog, scripted_rng([0.3, 0.0, 0.0]))
    enc = gen.generate(_party(catalog, 5))
    assert enc.weather == Weather.RAIN
    assert enc.rare and enc.opponent.rare
    assert enc.opponent.species is catalog.rare[0]
    assert enc.opponent.level == 13


def test_generate_common(catalog, scripted_rng):
    # weather, rarity, species, level jitter
    gen = EncounterGenerator(catalog, scripted_rng([0.0, 0.9, 0.0, 0.5]))
    enc = gen.generate(_party(catalog, 5))
    assert enc.weather == Weather.CLEAR
    assert not enc.rare
    assert enc.opponent.species is catalog.common[0]
    assert enc.opponent.level == 5
    assert enc.opponent.hp == enc.opponent.max_hp


def test_spawn_rate_from_config(catalog, scripted_rng):
    cfg = RemoteConfig(spawn_rate=1.0, hp_multiplier=1.0, atk_multiplier=1.0)
    gen = EncounterGenerator(catalog, scripted_rng(default=0.99), config=cfg)
    enc = gen.generate(_party(catalog, 10))
    assert enc.rare
    assert enc.opponent.level == 18
