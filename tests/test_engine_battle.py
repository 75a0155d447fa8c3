import math

from acemon.battle.core import Creature, Weather
from acemon.battle.factory import create_instance
from acemon.game.context import Phase
from acemon.game.engine import GameEngine
from acemon.game.log import LogCategory
from acemon.game.steps import Effect, Pause
from acemon.world.encounters import Encounter


def _battle(engine, catalog, foe=None, weather=Weather.CLEAR, extra=()):
    ctx = engine.new_context()
    engine.pick_starter(ctx, 4)
    for member in extra:
        ctx.party.add(member)
    foe = foe or create_instance(catalog.get(16), 5)
    engine.begin_encounter(ctx, Encounter(foe, weather, foe.rare))
    engine.start_battle(ctx)
    return ctx


def _tank(catalog):
    return Creature(species=catalog.get(16), level=5, max_hp=999, atk=50)


def test_intro_then_battle(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    ctx = engine.new_context()
    engine.pick_starter(ctx, 4)
    foe = create_instance(catalog.get(16), 5)
    res = engine.begin_encounter(ctx, Encounter(foe, Weather.RAIN, False))
    assert ctx.phase == Phase.ENCOUNTER_INTRO
    assert res.has(Effect.PAUSE, "battle_intro")
    assert res.total_pause_ms == Pause.BATTLE_INTRO
    assert len(ctx.log) == 0
    # nothing can be done before the battle opens
    assert not engine.attack(ctx, 0).changed
    res = engine.start_battle(ctx)
    assert ctx.phase == Phase.IN_BATTLE
    assert res.messages == ["A wild Pidgey appeared!", "Heavy rain soaks the battlefield..."]
    assert not engine.start_battle(ctx).changed


def test_rare_intro_message(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    ctx = _battle(engine, catalog, foe=create_instance(catalog.get(150), 20))
    assert "Mewtwo" in ctx.log.messages()[0]
    assert ctx.log.messages()[0] != "A wild Mewtwo appeared!"


def test_repeated_attacks_end_battle(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    ctx = _battle(engine, catalog)
    foe = ctx.opponent
    starter = ctx.party[0]
    bound = math.ceil(foe.max_hp / engine.tuning.min_damage)
    hits = 0
    res = None
    while ctx.phase == Phase.IN_BATTLE and hits < bound:
        res = engine.attack(ctx, 0)
        hits += 1
    assert hits <= bound
    assert ctx.phase == Phase.EXPLORING
    assert ctx.opponent is None
    assert ctx.weather == Weather.CLEAR
    assert res.has(Effect.PAUSE, "victory")
    # knock-out skips the counter turn
    assert all(s.category != LogCategory.ENEMY for s in res.logs)
    assert starter.exp == 25


def test_player_miss_in_fog(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng([0.0]))
    ctx = _battle(engine, catalog, weather=Weather.FOG)
    foe = ctx.opponent
    res = engine.attack(ctx, 0)
    assert "Charmander's attack missed!" in res.messages
    assert foe.hp == foe.max_hp
    assert any(s.category == LogCategory.ENEMY for s in res.logs)


def test_bad_move_index_ignored(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    ctx = _battle(engine, catalog)
    assert not engine.attack(ctx, 4).changed
    assert not engine.attack(ctx, -1).changed


def test_busy_refuses_actions(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    ctx = _battle(engine, catalog, foe=_tank(catalog))
    ctx.busy = True
    assert not engine.attack(ctx, 0).changed
    assert not engine.capture(ctx).changed
    assert not engine.flee(ctx).changed
    ctx.busy = False
    assert engine.attack(ctx, 0).changed
    assert not ctx.busy


def test_forced_switch_blocks_actions(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    backup = create_instance(catalog.get(7), 5)
    ctx = _battle(engine, catalog, foe=_tank(catalog), extra=[backup])
    ctx.party[0].current_hp = 1
    res = engine.attack(ctx, 0)
    assert ctx.party[0].is_fainted()
    assert ctx.must_switch
    assert ctx.phase == Phase.IN_BATTLE
    assert "Charmander fainted!" in res.messages
    assert not engine.attack(ctx, 0).changed
    assert not engine.capture(ctx).changed
    assert not engine.flee(ctx).changed
    # fainted or already-active targets are refused
    assert not engine.switch(ctx, 0).changed
    assert not engine.switch(ctx, 9).changed
    res = engine.switch(ctx, 1)
    assert res.messages == ["Go, Squirtle!"]
    assert not ctx.must_switch
    assert ctx.active is backup
    assert engine.attack(ctx, 0).changed


def test_switch_does_not_cost_a_turn(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    backup = create_instance(catalog.get(7), 5)
    ctx = _battle(engine, catalog, extra=[backup])
    res = engine.switch(ctx, 1)
    assert all(s.category != LogCategory.ENEMY for s in res.logs)
    assert ctx.party[0].hp == ctx.party[0].max_hp


def test_total_defeat_resolves_without_input(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    ctx = _battle(engine, catalog, foe=_tank(catalog), weather=Weather.RAIN)
    ctx.party[0].current_hp = 1
    res = engine.attack(ctx, 0)
    assert res.has(Effect.PAUSE, "defeat")
    assert ctx.phase == Phase.EXPLORING
    assert ctx.opponent is None
    assert ctx.weather == Weather.CLEAR
    assert not ctx.must_switch and not ctx.busy
    assert ctx.party[0].hp == ctx.party[0].max_hp
    assert ctx.position in corridor.healing_tiles()


def test_capture_success_adds_fresh_copy(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng([0.0]))
    ctx = _battle(engine, catalog)
    foe = ctx.opponent
    foe.take_damage(20)
    res = engine.capture(ctx)
    shakes = [s for s in res.steps if s.effect == Effect.PAUSE and s.data.get("name") == "ball_shake"]
    assert len(shakes) == 3
    assert res.has(Effect.PAUSE, "ball_throw")
    assert len(ctx.party) == 2
    caught = ctx.party[1]
    assert caught.uid != foe.uid
    assert caught.name == foe.name and caught.level == foe.level
    assert caught.hp == caught.max_hp
    assert ctx.phase == Phase.EXPLORING


def test_capture_with_full_team(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng([0.0]))
    extra = [create_instance(catalog.get(19), 3) for _ in range(5)]
    ctx = _battle(engine, catalog, extra=extra)
    res = engine.capture(ctx)
    assert len(ctx.party) == 6
    assert any("full" in m for m in res.messages)
    assert ctx.phase == Phase.EXPLORING


def test_capture_failure_gives_enemy_turn(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng([0.99]))
    ctx = _battle(engine, catalog)
    res = engine.capture(ctx)
    assert "Oh no! Pidgey broke free!" in res.messages
    assert any(s.category == LogCategory.ENEMY for s in res.logs)
    assert ctx.phase == Phase.IN_BATTLE
    assert len(ctx.party) == 1


def test_flee_success(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng([0.0]))
    ctx = _battle(engine, catalog)
    res = engine.flee(ctx)
    assert "Got away safely!" in res.messages
    assert res.has(Effect.PAUSE, "flee_success")
    assert ctx.phase == Phase.EXPLORING
    assert ctx.opponent is None


def test_flee_from_rare_can_fail(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    ctx = _battle(engine, catalog, foe=create_instance(catalog.get(150), 5))
    res = engine.flee(ctx)
    assert "Got away safely!" not in res.messages
    assert any(s.category == LogCategory.ENEMY for s in res.logs)


def test_leader_change_refused_in_battle(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    ctx = _battle(engine, catalog, extra=[create_instance(catalog.get(7), 5)])
    assert not engine.set_leader(ctx, 1).changed


def test_finalize_battle_directly(catalog, corridor, scripted_rng):
    engine = GameEngine(catalog=catalog, world=corridor, rng=scripted_rng())
    ctx = _battle(engine, catalog, weather=Weather.SNOW)
    res = engine.finalize_battle(ctx)
    assert res.changed
    assert ctx.phase == Phase.EXPLORING
    assert ctx.weather == Weather.CLEAR
    assert ctx.position == (1, 1)
    assert not engine.finalize_battle(ctx).changed
