import math

from acemon.battle.core import BattleCore, Creature, Move, Weather
from acemon.battle.factory import create_instance


def test_minimum_damage_floor(catalog, scripted_rng):
    core = BattleCore(scripted_rng(default=0.0))
    weakling = Creature(species=catalog.get(19), level=1, max_hp=10, atk=0)
    splash = Move("Splash", 0, "Normal")
    for weather in Weather:
        assert core.calc_damage(splash, weakling, weather, for_player=False) >= 2
        assert core.calc_damage(splash, weakling, weather, for_player=True) >= 2


def test_player_bonus_and_formula(catalog, scripted_rng):
    # variance draw 0.5 -> 0.85 + 0.2 * 0.5 = 0.95
    core = BattleCore(scripted_rng(default=0.5))
    charmander = create_instance(catalog.get(4), 5)
    scratch = charmander.moves[0]
    base = math.floor((40 / 6) * (5 / 5) + charmander.atk / 16)
    assert core.base_damage(scratch, charmander, Weather.RAIN, for_player=False) == base
    assert core.base_damage(scratch, charmander, Weather.RAIN, for_player=True) == base + 8
    assert core.calc_damage(scratch, charmander, Weather.RAIN, for_player=True) == math.floor((base + 8) * 0.95)


def test_weather_modifiers():
    core = BattleCore()
    water = Move("Water Gun", 40, "Water")
    fire = Move("Ember", 40, "Fire")
    ice = Move("Ice Beam", 90, "Ice")
    assert core.weather_modifier(water, Weather.RAIN) == 1.3
    assert core.weather_modifier(fire, Weather.RAIN) == 0.7
    assert core.weather_modifier(ice, Weather.SNOW) == 1.3
    assert core.weather_modifier(fire, Weather.CLEAR) == 1.2
    assert core.weather_modifier(water, Weather.FOG) == 1.0


def test_miss_chances_by_weather():
    core = BattleCore()
    assert core.miss_chance(Weather.CLEAR, for_player=True) == 0.0
    assert core.miss_chance(Weather.SNOW, for_player=True) == 0.05
    assert core.miss_chance(Weather.FOG, for_player=True) == 0.10
    assert core.miss_chance(Weather.SNOW, for_player=False) == 0.12
    assert core.miss_chance(Weather.FOG, for_player=False) == 0.22
    assert core.miss_chance(Weather.RAIN, for_player=False) == 0.0


def test_clear_weather_never_draws_for_miss(scripted_rng):
    rng = scripted_rng()
    core = BattleCore(rng)
    assert core.roll_miss(Weather.CLEAR, for_player=True) is False
    assert rng.draws == 0


def test_variance_band(scripted_rng):
    core = BattleCore(scripted_rng([0.0, 0.999999]))
    assert core.roll_variance() == 0.85
    assert 1.04 < core.roll_variance() < 1.05
