from acemon.battle.factory import create_instance
from acemon.core.rng import RandomSource
from acemon.game.context import Phase
from acemon.game.engine import GameEngine
from acemon.game.steps import Effect, Pause
from acemon.system.tuning import EngineTuning
from acemon.world.grid import load_world_map

NO_GRASS = EngineTuning.from_overrides({"grass_encounter_chance": 0.0})
ALWAYS_GRASS = EngineTuning.from_overrides({"grass_encounter_chance": 1.0})


def _started(engine):
    ctx = engine.new_context()
    engine.pick_starter(ctx, 4)
    return ctx


def test_pick_starter(catalog, corridor):
    engine = GameEngine(catalog=catalog, world=corridor, rng=RandomSource.seeded(1))
    ctx = engine.new_context()
    assert ctx.phase == Phase.START
    assert ctx.position == (1, 1)
    res = engine.pick_starter(ctx, 4)
    assert ctx.phase == Phase.EXPLORING
    assert len(ctx.party) == 1
    assert ctx.party[0].name == "Charmander" and ctx.party[0].level == 5
    assert len(res.logs) == 2
    # only once, and only real starters
    assert not engine.pick_starter(ctx, 7).changed
    assert not engine.pick_starter(engine.new_context(), 16).changed


def test_step_blocked_by_wall(catalog, corridor):
    engine = GameEngine(catalog=catalog, world=corridor, tuning=NO_GRASS)
    ctx = _started(engine)
    res = engine.step(ctx, -1, 0)
    assert not res.changed
    assert ctx.position == (1, 1)


def test_step_and_heal_tile(catalog, corridor):
    engine = GameEngine(catalog=catalog, world=corridor, tuning=NO_GRASS)
    ctx = _started(engine)
    ctx.party[0].take_damage(30)
    res = engine.step(ctx, 1, 0)
    assert ctx.position == (2, 1)
    assert res.has(Effect.MOVE)
    assert ctx.party[0].hp < ctx.party[0].max_hp
    res = engine.step(ctx, 1, 0)
    assert ctx.position == (3, 1)
    assert ctx.party[0].hp == ctx.party[0].max_hp
    assert "Your team is fully restored!" in res.messages


def test_walk_to_follows_path(catalog, corridor):
    engine = GameEngine(catalog=catalog, world=corridor, tuning=NO_GRASS)
    ctx = _started(engine)
    res = engine.walk_to(ctx, 3, 1)
    moves = [s.data for s in res.steps if s.effect == Effect.MOVE]
    assert moves == [{"x": 2, "y": 1}, {"x": 3, "y": 1}]
    pauses = [s.pause_ms for s in res.steps if s.effect == Effect.PAUSE]
    assert pauses == [Pause.AUTO_MOVE]
    assert ctx.position == (3, 1)
    assert not ctx.auto_walking


def test_walk_to_rejects_same_tile_and_walls(catalog, corridor):
    engine = GameEngine(catalog=catalog, world=corridor, tuning=NO_GRASS)
    ctx = _started(engine)
    assert not engine.walk_to(ctx, 1, 1).changed
    assert not engine.walk_to(ctx, 0, 1).changed
    assert not engine.walk_to(ctx, 40, 40).changed
    assert ctx.position == (1, 1)


def test_encounter_stops_auto_walk(catalog):
    engine = GameEngine(catalog=catalog, world=load_world_map(), rng=RandomSource.seeded(7), tuning=ALWAYS_GRASS)
    ctx = _started(engine)
    engine.walk_to(ctx, 1, 1)
    assert ctx.phase == Phase.ENCOUNTER_INTRO
    assert ctx.opponent is not None
    assert ctx.position != (1, 1)
    assert not ctx.auto_walking
    # no movement while the encounter is pending
    assert not engine.step(ctx, 0, 1).changed
    assert not engine.walk_to(ctx, 3, 3).changed


def test_set_leader_outside_battle(catalog, corridor):
    engine = GameEngine(catalog=catalog, world=corridor, tuning=NO_GRASS)
    ctx = _started(engine)
    assert not engine.set_leader(ctx, 0).changed
    second = create_instance(catalog.get(7), 4)
    ctx.party.add(second)
    res = engine.set_leader(ctx, 1)
    assert res.changed
    assert ctx.party.leader is second
