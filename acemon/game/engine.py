"""Game engine: exploration, encounters and the battle state machine.

Phases::

    START -> EXPLORING -> ENCOUNTER_INTRO -> IN_BATTLE -> RESOLVED -> EXPLORING

Every public operation takes a :class:`GameContext`, mutates it and returns a
:class:`Resolution` holding that context plus the ordered steps it produced.
An operation whose preconditions fail (wrong phase, busy, no opponent,
pending switch, bad index) is a no-op and returns no steps.

Within a player action the order is fixed: the player's effect, then the
opponent's counter-turn unless the opponent fainted, then any battle
resolution. ``busy`` is held for the duration so nothing can interleave.
"""
from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator, Optional
from acemon.battle.capture import attempt_capture, flee_success
from acemon.battle.core import BattleCore, Weather, WEATHER_INTRO
from acemon.battle.experience import apply_experience, exp_gain
from acemon.battle.factory import create_instance
from acemon.battle.party import Party
from acemon.core.logging import logger
from acemon.core.rng import RandomSource
from acemon.data.catalog import Catalog, load_catalog
from acemon.system.remote import RemoteConfig, OFFLINE_DEFAULTS, fetch_remote_config
from acemon.system.tuning import EngineTuning, DEFAULT_TUNING
from acemon.world.encounters import Encounter, EncounterGenerator
from acemon.world.grid import Tile, TileMap, load_world_map
from .context import GameContext, Phase
from .log import BattleLog, LogCategory
from .steps import Pause, Resolution, StepRecorder

SYSTEM = LogCategory.SYSTEM
PLAYER = LogCategory.PLAYER
ENEMY = LogCategory.ENEMY

class GameEngine:
    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        world: Optional[TileMap] = None,
        rng: Optional[RandomSource] = None,
        tuning: EngineTuning = DEFAULT_TUNING,
        config: Optional[RemoteConfig] = None,
    ):
        self.catalog = catalog or load_catalog()
        self.world = world or load_world_map()
        self.rng = rng or RandomSource.from_env()
        self.tuning = tuning
        self.core = BattleCore(self.rng, tuning)
        self.encounters = EncounterGenerator(self.catalog, self.rng, tuning, config or OFFLINE_DEFAULTS)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    @property
    def config(self) -> RemoteConfig:
        return self.encounters.config

    def use_config(self, config: RemoteConfig):
        self.encounters.config = config

    def refresh_config(self, url: str, timeout: float = 2.0) -> RemoteConfig:
        """Fetch remote config once; failures fall back silently."""
        self.use_config(fetch_remote_config(url, timeout))
        return self.config

    def new_context(self) -> GameContext:
        return GameContext(
            party=Party(limit=self.tuning.team_limit),
            position=self.world.start,
            log=BattleLog(self.tuning.log_limit),
        )

    def pick_starter(self, ctx: GameContext, species_id: int) -> Resolution:
        rec = StepRecorder(ctx)
        if ctx.phase != Phase.START:
            return self._ignored(rec, "pick_starter", "phase")
        species = next((s for s in self.catalog.starters if s.id == species_id), None)
        if species is None:
            return self._ignored(rec, "pick_starter", "not_a_starter")
        starter = create_instance(species, self.tuning.starter_level, tuning=self.tuning, config=self.config)
        ctx.party = Party([starter], limit=self.tuning.team_limit)
        ctx.active_index = 0
        rec.phase(Phase.EXPLORING)
        rec.log("Your adventure begins!", SYSTEM)
        rec.log(f"You received {starter.name}. A promising start!")
        logger.info("StarterPicked", species=starter.name, level=starter.level)
        return rec.resolve()

    # ------------------------------------------------------------------
    # Exploration
    # ------------------------------------------------------------------
    def step(self, ctx: GameContext, dx: int, dy: int) -> Resolution:
        """Move one tile (keyboard-style) and apply the tile's event."""
        rec = StepRecorder(ctx)
        if ctx.phase != Phase.EXPLORING or ctx.busy or ctx.auto_walking:
            return self._ignored(rec, "step", "not_exploring")
        nx, ny = ctx.position[0] + dx, ctx.position[1] + dy
        if not self.world.is_walkable(nx, ny):
            return self._ignored(rec, "step", "blocked")
        self._enter_tile(ctx, rec, nx, ny)
        return rec.resolve()

    def walk_to(self, ctx: GameContext, x: int, y: int) -> Resolution:
        """Click-to-move: follow the shortest path, one paced step at a time.

        Walking stops as soon as the phase leaves exploration; the rest of the
        path is dropped, not queued.
        """
        rec = StepRecorder(ctx)
        if ctx.phase != Phase.EXPLORING or ctx.busy or ctx.auto_walking:
            return self._ignored(rec, "walk_to", "not_exploring")
        if (x, y) == tuple(ctx.position):
            return self._ignored(rec, "walk_to", "same_tile")
        path = self.world.find_path(ctx.position, (x, y))
        if not path:
            return self._ignored(rec, "walk_to", "no_path")
        ctx.auto_walking = True
        walked = 0
        try:
            for i, (nx, ny) in enumerate(path):
                if ctx.phase != Phase.EXPLORING:
                    break
                if i:
                    rec.pause(Pause.AUTO_MOVE, "auto_move")
                self._enter_tile(ctx, rec, nx, ny)
                walked += 1
        finally:
            ctx.auto_walking = False
        logger.debug("AutoWalk", target=(x, y), planned=len(path), walked=walked)
        return rec.resolve()

    def _enter_tile(self, ctx: GameContext, rec: StepRecorder, x: int, y: int):
        ctx.position = (x, y)
        rec.move(x, y)
        tile = self.world.tile_at(x, y)
        if tile == Tile.HEAL:
            ctx.party.heal_all()
            rec.animate("heal")
            rec.log("Your team is fully restored!", SYSTEM)
        elif tile == Tile.GRASS and self.encounters.should_trigger():
            self._begin_encounter(ctx, rec, self.encounters.generate(ctx.party))

    def set_leader(self, ctx: GameContext, index: int) -> Resolution:
        """Outside battle: move a party member to the leader slot."""
        rec = StepRecorder(ctx)
        if ctx.phase != Phase.EXPLORING or ctx.busy:
            return self._ignored(rec, "set_leader", "phase")
        chosen = ctx.party.promote(index)
        if chosen is None:
            return self._ignored(rec, "set_leader", "index")
        ctx.active_index = 0
        rec.log(f"{chosen.name} is now the team leader.", SYSTEM)
        return rec.resolve()

    # ------------------------------------------------------------------
    # Encounter start
    # ------------------------------------------------------------------
    def begin_encounter(self, ctx: GameContext, encounter: Optional[Encounter] = None) -> Resolution:
        """Start an encounter directly (debug hooks, scripted fights)."""
        rec = StepRecorder(ctx)
        if ctx.phase != Phase.EXPLORING or ctx.busy or not len(ctx.party):
            return self._ignored(rec, "begin_encounter", "phase")
        self._begin_encounter(ctx, rec, encounter or self.encounters.generate(ctx.party))
        return rec.resolve()

    def _begin_encounter(self, ctx: GameContext, rec: StepRecorder, encounter: Encounter):
        ctx.opponent = encounter.opponent
        ctx.weather = Weather(encounter.weather)
        ctx.must_switch = False
        ctx.log.clear()
        first = ctx.party.first_available()
        ctx.active_index = first if first >= 0 else 0
        rec.phase(Phase.ENCOUNTER_INTRO)
        rec.animate("encounter_flash", rare=encounter.opponent.rare)
        rec.pause(Pause.BATTLE_INTRO, "battle_intro")
        logger.info("EncounterStart", species=encounter.opponent.name, level=encounter.opponent.level,
                    rare=encounter.opponent.rare, weather=ctx.weather.value)

    def start_battle(self, ctx: GameContext) -> Resolution:
        """Leave the encounter intro and open the battle."""
        rec = StepRecorder(ctx)
        if ctx.phase != Phase.ENCOUNTER_INTRO or ctx.opponent is None:
            return self._ignored(rec, "start_battle", "phase")
        rec.phase(Phase.IN_BATTLE)
        foe = ctx.opponent
        if foe.rare:
            rec.log(f"WARNING, HIGH ENERGY: {foe.name} detected!")
        else:
            rec.log(f"A wild {foe.name} appeared!")
        intro = WEATHER_INTRO.get(ctx.weather)
        if intro:
            rec.log(intro, SYSTEM)
        return rec.resolve()

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------
    @contextmanager
    def _action(self, ctx: GameContext) -> Iterator[None]:
        ctx.busy = True
        try:
            yield
        finally:
            ctx.busy = False

    def _can_act(self, ctx: GameContext) -> bool:
        return (ctx.phase == Phase.IN_BATTLE and not ctx.busy and not ctx.must_switch
                and ctx.opponent is not None and not ctx.opponent.is_fainted()
                and ctx.active is not None and not ctx.active.is_fainted())

    def attack(self, ctx: GameContext, move_index: int) -> Resolution:
        rec = StepRecorder(ctx)
        if not self._can_act(ctx):
            return self._ignored(rec, "attack", "state")
        player = ctx.active
        foe = ctx.opponent
        assert player is not None and foe is not None
        if not 0 <= move_index < len(player.moves):
            return self._ignored(rec, "attack", "move_index")
        move = player.moves[move_index]
        with self._action(ctx):
            rec.log(f"{player.name} used {move.name}!", PLAYER)
            if self.core.roll_miss(ctx.weather, for_player=True):
                rec.log(f"{player.name}'s attack missed!", SYSTEM)
                rec.pause(Pause.MISS, "miss")
                self._enemy_turn(ctx, rec)
                return rec.resolve()
            rec.animate("enemy_shake")
            dmg = self.core.calc_damage(move, player, ctx.weather, for_player=True)
            old = foe.hp
            foe.take_damage(dmg)
            rec.pause(Pause.HIT, "hit")
            rec.hp("opponent", old, foe.hp)
            rec.log(f"{foe.name} took {dmg} damage.")
            if foe.is_fainted():
                self._victory(ctx, rec)
                return rec.resolve()
            self._enemy_turn(ctx, rec)
        return rec.resolve()

    def _victory(self, ctx: GameContext, rec: StepRecorder):
        player = ctx.active
        foe = ctx.opponent
        assert player is not None and foe is not None
        rec.log(f"{foe.name} was defeated!", SYSTEM)
        rec.animate("enemy_faint")
        report = apply_experience(player, exp_gain(foe.level, player.level, self.tuning), self.tuning)
        if report.gained:
            rec.log(f"{player.name} gained {report.gained} EXP!")
        else:
            rec.log(f"{player.name} is already at its level cap.", SYSTEM)
        for lvl in report.levels:
            rec.log(f"LEVEL UP! {player.name} reached level {lvl}!", SYSTEM)
        logger.info("BattleWon", species=foe.name, exp=report.gained, level=player.level)
        rec.pause(Pause.VICTORY, "victory")
        self._finalize(ctx, rec, defeat=False)

    def capture(self, ctx: GameContext) -> Resolution:
        rec = StepRecorder(ctx)
        if not self._can_act(ctx):
            return self._ignored(rec, "capture", "state")
        foe = ctx.opponent
        assert foe is not None
        with self._action(ctx):
            rec.log("Capture sequence engaged!", SYSTEM)
            rec.animate("ball_throw")
            rec.pause(Pause.BALL_THROW, "ball_throw")
            rec.animate("opponent_hidden")
            for shake in range(3):
                rec.animate("ball_shake", shake=shake + 1)
                rec.pause(Pause.BALL_SHAKE, "ball_shake")
            result = attempt_capture(self.rng, foe, self.tuning)
            logger.debug("CaptureRoll", species=foe.name, chance=round(result.chance, 3), roll=round(result.roll, 3))
            if result.success:
                rec.log(f"Gotcha! {foe.name} was caught!", SYSTEM)
                rec.animate("capture_toast")
                recruit = foe.fresh_copy()
                if not ctx.party.add(recruit):
                    rec.log(f"Your team is full! {foe.name} could not join.", SYSTEM)
                logger.info("Captured", species=foe.name, level=foe.level, party=len(ctx.party))
                rec.pause(Pause.CAPTURE_SUCCESS, "capture_success")
                self._finalize(ctx, rec, defeat=False)
                return rec.resolve()
            rec.log(f"Oh no! {foe.name} broke free!", SYSTEM)
            rec.animate("opponent_visible")
            self._enemy_turn(ctx, rec)
        return rec.resolve()

    def flee(self, ctx: GameContext) -> Resolution:
        rec = StepRecorder(ctx)
        if not self._can_act(ctx):
            return self._ignored(rec, "flee", "state")
        foe = ctx.opponent
        assert foe is not None
        with self._action(ctx):
            rec.log("Looking for an escape route...", SYSTEM)
            rec.pause(Pause.FLEE, "flee")
            if flee_success(self.rng, foe, self.tuning):
                rec.log("Got away safely!", SYSTEM)
                rec.pause(Pause.FLEE_SUCCESS, "flee_success")
                self._finalize(ctx, rec, defeat=False)
                return rec.resolve()
            rec.log("The way is blocked! Can't escape!", SYSTEM)
            self._enemy_turn(ctx, rec)
        return rec.resolve()

    def switch(self, ctx: GameContext, index: int) -> Resolution:
        """Send out another living party member; clears a pending forced switch."""
        rec = StepRecorder(ctx)
        if ctx.phase != Phase.IN_BATTLE or ctx.busy:
            return self._ignored(rec, "switch", "phase")
        if not 0 <= index < len(ctx.party) or index == ctx.active_index:
            return self._ignored(rec, "switch", "index")
        chosen = ctx.party[index]
        if chosen.is_fainted():
            return self._ignored(rec, "switch", "fainted")
        ctx.active_index = index
        ctx.must_switch = False
        rec.animate("send_out", uid=chosen.uid)
        rec.log(f"Go, {chosen.name}!", PLAYER)
        return rec.resolve()

    # ------------------------------------------------------------------
    # Opponent turn & resolution
    # ------------------------------------------------------------------
    def _enemy_turn(self, ctx: GameContext, rec: StepRecorder):
        foe = ctx.opponent
        target = ctx.active
        if foe is None or foe.is_fainted() or target is None:
            return
        move = self.rng.choice(foe.moves)
        rec.log(f"{foe.name} attacks with {move.name}!", ENEMY)
        if self.core.roll_miss(ctx.weather, for_player=False):
            rec.log("The attack went wide!", SYSTEM)
            return
        rec.animate("player_shake")
        rec.animate("flash")
        dmg = self.core.calc_damage(move, foe, ctx.weather, for_player=False)
        rec.pause(Pause.HIT, "hit")
        old = target.hp
        target.take_damage(dmg)
        rec.hp("player", old, target.hp)
        rec.log(f"{target.name} took {dmg} damage.")
        if not target.is_fainted():
            return
        rec.log(f"{target.name} fainted!", SYSTEM)
        ctx.must_switch = True
        if not ctx.party.has_available():
            rec.log("Your team is out of energy. Retreating to the healing station...", SYSTEM)
            logger.info("BattleLost", species=foe.name)
            rec.pause(Pause.DEFEAT, "defeat")
            self._finalize(ctx, rec, defeat=True)

    def finalize_battle(self, ctx: GameContext, defeat: bool = False) -> Resolution:
        rec = StepRecorder(ctx)
        if not ctx.in_battle:
            return self._ignored(rec, "finalize_battle", "phase")
        self._finalize(ctx, rec, defeat=defeat)
        return rec.resolve()

    def _finalize(self, ctx: GameContext, rec: StepRecorder, *, defeat: bool):
        rec.phase(Phase.RESOLVED)
        if defeat:
            ctx.party.heal_all()
            centers = self.world.healing_tiles()
            if centers:
                ctx.position = self.rng.choice(centers)
                rec.move(*ctx.position)
        ctx.weather = Weather.CLEAR
        ctx.opponent = None
        ctx.busy = False
        ctx.must_switch = False
        ctx.auto_walking = False
        first = ctx.party.first_available()
        ctx.active_index = first if first >= 0 else 0
        rec.phase(Phase.EXPLORING)

    def _ignored(self, rec: StepRecorder, action: str, reason: str) -> Resolution:
        logger.debug("ActionIgnored", action=action, reason=reason, phase=rec.ctx.phase.value)
        return rec.resolve()

__all__ = ["GameEngine"]
