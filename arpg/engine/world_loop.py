"""WorldLoop: the authoritative single-threaded tick engine.

Phase cycle of ``tick(delta_ms, tick_input)``:
  1. Commands: apply queued UI/API actions in arrival order
  2. Player: movement from input (ignored during hit stun), attack triggers
  3. AI: one EnemyBrain update per living enemy
  4. Physics: integrate bodies and projectiles
  5. Combat: hit volumes vs enemies, contact vs player; deaths publish
     ENEMY_DEATH whose handler runs quests -> xp -> loot spawn
  6. Timers: volume lifetimes, hit windows, invulnerability, mana regen,
     world-item timers
  7. Pickups: pickupable world items overlapping the player
  8. End checks: defeat on player death, victory once per level
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from arpg.actions.combat import CombatResolver
from arpg.ai.brain import EnemyBrain
from arpg.core.enums import Domain, EquipSlot, Facing, QuestStatus
from arpg.core.inventory import Inventory
from arpg.core.loot import LootGenerator
from arpg.core.models import Enemy, Player, Rect, Vector2, WorldItem
from arpg.core.quests import QuestTracker
from arpg.core.stats import gain_xp, restore_mana
from arpg.core.world_state import WorldState
from arpg.engine import physics
from arpg.engine.commands import (
    IDLE, CommandQueue, DropFromInventory, EquipItem, StartQuest, TickInput, UnequipItem, UseItem,
)
from arpg.engine.drops import DropPlan
from arpg.engine.event_bus import (
    DropItem, EnemyDeath, EnemyStateChanged, EventBus, InventoryUpdated, LevelComplete,
    PlayerStatsChanged, QuestsUpdated,
)
from arpg.systems.rng import DeterministicRNG
from arpg.utils.event_log import SimEvent
from arpg.utils.persistence import LevelUnlocks

if TYPE_CHECKING:
    from concurrent.futures import Future

    from arpg.config import SimulationConfig
    from arpg.core.definitions import GameData, LevelDef
    from arpg.core.enums import AIState
    from arpg.engine.commands import Command
    from arpg.engine.event_bus import Event
    from arpg.systems.rng import RandomSource
    from arpg.utils.replay import ReplayRecorder

logger = logging.getLogger(__name__)


class WorldLoop:
    """The heartbeat of the simulation.

    Owns the composition of every gameplay service. The Inventory and
    QuestTracker outlive level loads; the WorldState is rebuilt per level.
    """

    __slots__ = (
        "_config", "_data", "_bus", "_rng", "_inventory", "_quests", "_unlocks",
        "_loot", "_combat", "_brain", "_commands", "_recorder", "_world", "_level",
        "_drop_plan", "_tick_events", "_loads", "_subscriptions",
    )

    def __init__(
        self,
        config: SimulationConfig,
        data: GameData,
        *,
        bus: EventBus | None = None,
        inventory: Inventory | None = None,
        quests: QuestTracker | None = None,
        unlocks: LevelUnlocks | None = None,
        loot_source: RandomSource | None = None,
        recorder: ReplayRecorder | None = None,
    ) -> None:
        self._config = config
        self._data = data
        self._bus = bus or EventBus()
        self._rng = DeterministicRNG(config.world_seed)
        self._inventory = inventory or Inventory(
            data, config.inventory_capacity, config.default_max_stack)
        self._quests = quests or QuestTracker(data.quests)
        self._unlocks = unlocks or LevelUnlocks(default_level=config.default_unlocked_level)
        self._loot = LootGenerator(data, loot_source or self._rng.stream(Domain.LOOT))
        self._combat = CombatResolver(config, self._bus, self._loot)
        self._brain = EnemyBrain(
            config,
            on_attack=lambda enemy, target: self._combat.enemy_attack(self._world, enemy, target),
            on_state_change=self._on_enemy_state_change,
        )
        self._commands = CommandQueue()
        self._recorder = recorder
        self._world: WorldState | None = None
        self._level: LevelDef | None = None
        self._drop_plan = DropPlan.unscripted()
        self._tick_events: list[SimEvent] = []
        self._loads = 0

        self._subscriptions = [
            self._bus.subscribe(EnemyDeath, self._on_enemy_death),
            self._bus.subscribe(DropItem, self._on_drop_item),
            self._bus.subscribe_all(self._record_event),
            self._inventory.on_change(
                lambda inv: self._bus.publish(InventoryUpdated(inventory=inv.serialize()))),
            self._quests.on_change(
                lambda tracker: self._bus.publish(QuestsUpdated(quests=tracker.to_dict()))),
        ]

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def data(self) -> GameData:
        return self._data

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def world(self) -> WorldState:
        if self._world is None:
            raise RuntimeError("No level loaded")
        return self._world

    @property
    def level(self) -> LevelDef | None:
        return self._level

    @property
    def inventory(self) -> Inventory:
        return self._inventory

    @property
    def quests(self) -> QuestTracker:
        return self._quests

    @property
    def unlocks(self) -> LevelUnlocks:
        return self._unlocks

    @property
    def combat(self) -> CombatResolver:
        return self._combat

    @property
    def commands(self) -> CommandQueue:
        return self._commands

    @property
    def drop_plan(self) -> DropPlan:
        return self._drop_plan

    @property
    def tick_events(self) -> list[SimEvent]:
        """Events published during the most recent tick."""
        return self._tick_events

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------

    def load_level(self, level_id: str) -> bool:
        """Build a fresh WorldState for *level_id*. Unknown ids leave state untouched."""
        level = self._data.level(level_id)
        if level is None:
            return False
        cfg = self._config

        if self._world is not None:
            self._world.timers.clear()

        start = Vector2(level.player_start.x, level.player_start.y)
        player = Player(pos=start, size=cfg.player_size)
        world = WorldState(cfg.world_seed, level_id, level.width, level.height, player)
        player.id = world.allocate_id()
        world.walls = [Rect(w.x, w.y, w.w, w.h) for w in level.walls]

        self._world = world
        self._level = level
        self._loads += 1

        for spawn in level.spawns:
            self.spawn_enemy(spawn.kind, Vector2(spawn.x, spawn.y))
        for placed in level.items:
            self.spawn_world_item(placed.item_id, placed.quantity, Vector2(placed.x, placed.y))

        if level.scripted_drops:
            source = self._rng.stream(Domain.DROP_PLAN, self._loads)
            self._drop_plan = DropPlan.roll(level.enemy_count, source, cfg.scripted_drop_offset)
        else:
            self._drop_plan = DropPlan.unscripted()

        for quest_id in level.auto_start_quests:
            self._quests.start_quest(quest_id)

        logger.info("Loaded level '%s' (%s): %d enemies, %d items, %d walls",
                    level_id, level.name, len(world.enemies), len(world.items), len(world.walls))
        return True

    def reset(self, level_id: str | None = None) -> bool:
        """Restart a level with fresh quests and an empty inventory."""
        target = level_id or (self._world.level_id if self._world else self._config.start_level)
        if self._data.level(target) is None:
            return False
        self._quests.reset_all()
        self._inventory.clear()
        return self.load_level(target)

    def spawn_enemy(self, kind: str, pos: Vector2) -> Enemy:
        world = self.world
        tmpl = self._data.enemy_template(kind)
        enemy = Enemy(
            id=world.allocate_id(),
            kind=kind,
            pos=pos,
            stats=tmpl.to_stats(),
            name=tmpl.name,
            size=self._config.enemy_size,
        )
        enemy.set_target(world.player)
        world.add_enemy(enemy)
        return enemy

    def spawn_world_item(self, item_id: str, quantity: int, pos: Vector2) -> WorldItem | None:
        """Place a loot object; pickupable after a short delay, despawns later."""
        if self._data.item(item_id) is None or quantity <= 0:
            return None
        world = self.world
        cfg = self._config
        item = WorldItem(uid=world.allocate_id(), item_id=item_id, quantity=quantity,
                         pos=pos, size=cfg.item_size)
        world.add_item(item)

        def _enable() -> None:
            item.can_pickup = True

        def _despawn() -> None:
            if world.remove_item(item.uid) is not None:
                logger.debug("World item %d (%s) despawned", item.uid, item_id)

        world.timers.schedule(cfg.item_pickup_delay_ms, _enable)
        item.despawn_timer = world.timers.schedule(cfg.item_despawn_ms, _despawn)
        return item

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def submit(self, command: Command, future: Future | None = None) -> None:
        """Queue a command for the next tick (thread-safe)."""
        self._commands.push(command, future)

    def apply_command(self, command: Command) -> bool:
        match command:
            case UseItem(item_id=item_id):
                return self.use_item(item_id)
            case EquipItem(item_id=item_id):
                return self.equip_item(item_id)
            case UnequipItem(slot=slot):
                return self.unequip_item(slot)
            case DropFromInventory(item_id=item_id, quantity=quantity):
                return self.drop_from_inventory(item_id, quantity)
            case StartQuest(quest_id=quest_id):
                return self.start_quest(quest_id)
        logger.warning("Unknown command %r", command)
        return False

    def use_item(self, item_id: str) -> bool:
        player = self.world.player
        if not player.alive:
            return False
        if not self._inventory.use_item(item_id, player.stats):
            return False
        self._publish_player_stats()
        return True

    def equip_item(self, item_id: str) -> bool:
        return self._inventory.equip_item(item_id)

    def unequip_item(self, slot: EquipSlot | str) -> bool:
        return self._inventory.unequip_item(slot)

    def start_quest(self, quest_id: str) -> bool:
        return self._quests.start_quest(quest_id)

    def drop_from_inventory(self, item_id: str, quantity: int = 1) -> bool:
        """Remove items from the inventory and request a world spawn beside the player."""
        if quantity <= 0 or not self._inventory.has_item(item_id, quantity):
            return False
        if not self._inventory.remove_item(item_id, quantity):
            return False
        player = self.world.player
        self._bus.publish(DropItem(item_id=item_id, quantity=quantity,
                                   x=player.pos.x + self._config.melee_offset, y=player.pos.y))
        return True

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _record_event(self, event: Event) -> None:
        tick = self._world.tick if self._world is not None else 0
        self._tick_events.append(SimEvent(tick=tick, category=event.name, data=event.to_dict()))

    def _on_enemy_state_change(self, enemy: Enemy, old: AIState, new: AIState) -> None:
        self._bus.publish(EnemyStateChanged(enemy_id=enemy.id, state=new.value, texture=enemy.texture))

    def _on_enemy_death(self, event: EnemyDeath) -> None:
        world = self.world
        player = world.player

        # Quests first, so rewards land before the kill's own xp.
        for quest_id in self._quests.on_enemy_killed(event.enemy_kind):
            quest = self._quests.get_quest(quest_id)
            if quest is None:
                continue
            if quest.gold_reward:
                self._inventory.add_gold(quest.gold_reward)
            self._award_xp(player, quest.xp_reward)

        self._award_xp(player, event.xp_reward)

        x, y = event.position
        for drop in self._drop_plan.drops_for_kill(world.kills, list(event.loot)):
            self.spawn_world_item(drop.item_id, drop.quantity, Vector2(x + drop.offset_x, y))

    def _on_drop_item(self, event: DropItem) -> None:
        self.spawn_world_item(event.item_id, event.quantity, Vector2(event.x, event.y))

    def _award_xp(self, player: Player, amount: int) -> None:
        if amount <= 0 or not player.alive:
            return
        cfg = self._config
        levels = gain_xp(player.stats, amount, cfg.xp_per_level_scale, cfg.stat_growth_hp,
                         cfg.stat_growth_attack, cfg.stat_growth_defense)
        logger.info("Gained %d XP [%d/%d]", amount, player.stats.xp, player.stats.xp_to_next)
        if levels:
            logger.info("Level up! Now level %d", player.stats.level)
        self._publish_player_stats()

    def _publish_player_stats(self) -> None:
        self._bus.publish(PlayerStatsChanged(stats=self.world.player.stats.to_dict()))

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, delta_ms: float | None = None, tick_input: TickInput = IDLE) -> bool:
        """Advance the simulation one frame. Returns False once the level is over."""
        world = self.world
        if world.is_over:
            return False
        delta = self._config.tick_delta_ms if delta_ms is None else delta_ms
        self._tick_events = []

        for command, future in self._commands.drain():
            result = self.apply_command(command)
            if future is not None:
                future.set_result(result)

        self._update_player(world, tick_input)

        for enemy in world.living_enemies():
            self._brain.update(enemy, delta)

        physics.step(world, delta)
        self._combat.resolve(world)
        self._advance_timers(world, delta)
        self._collect_pickups(world)
        self._check_end(world)

        world.tick += 1
        world.elapsed_ms += delta
        if self._recorder is not None:
            self._recorder.record_tick(world, self._tick_events)
        return True

    def run(self, max_ticks: int | None = None, controller=None) -> int:
        """Tick until the level ends or *max_ticks*. *controller(loop)* supplies input."""
        limit = max_ticks if max_ticks is not None else self._config.max_ticks
        ran = 0
        while ran < limit:
            tick_input = controller(self) if controller is not None else IDLE
            if not self.tick(tick_input=tick_input):
                break
            ran += 1
        if self._recorder is not None:
            self._recorder.flush()
        return ran

    def _update_player(self, world: WorldState, tick_input: TickInput) -> None:
        player = world.player
        if not player.alive:
            return
        if not player.hit_stun.active:
            direction = Vector2(tick_input.move_x, tick_input.move_y).normalized()
            player.velocity = direction * player.stats.speed
            if tick_input.move_x < 0:
                player.facing = Facing.LEFT
            elif tick_input.move_x > 0:
                player.facing = Facing.RIGHT
        if tick_input.face is not None:
            player.facing = tick_input.face
        if tick_input.melee:
            self._combat.spawn_melee(world)
        if tick_input.ranged:
            self._combat.spawn_ranged(world)

    def _advance_timers(self, world: WorldState, delta: float) -> None:
        for volume in list(world.volumes.values()):
            if volume.lifetime.advance(delta):
                world.remove_volume(volume.uid)

        for enemy in world.living_enemies():
            enemy.is_hit.advance(delta)

        player = world.player
        player.invulnerable.advance(delta)
        player.hit_stun.advance(delta)
        self._regen_mana(player, delta)

        world.timers.advance(delta)

    def _regen_mana(self, player: Player, delta: float) -> None:
        cfg = self._config
        player.mana_regen_elapsed += delta
        while player.mana_regen_elapsed >= cfg.mana_regen_interval_ms:
            player.mana_regen_elapsed -= cfg.mana_regen_interval_ms
            stats = player.stats
            if not player.alive or stats.mana >= stats.max_mana:
                continue
            amount = max(cfg.mana_regen_min, stats.max_mana * cfg.mana_regen_fraction)
            if restore_mana(stats, amount) > 0:
                self._publish_player_stats()

    def _collect_pickups(self, world: WorldState) -> None:
        player = world.player
        if not player.alive:
            return
        bounds = player.bounds()
        for item in list(world.items.values()):
            if not item.can_pickup or not item.bounds().overlaps(bounds):
                continue
            if not self._inventory.add_item(item.item_id, item.quantity):
                continue
            if item.despawn_timer is not None:
                item.despawn_timer.cancel()
            world.remove_item(item.uid)
            logger.info("Picked up %dx %s", item.quantity, item.item_id)

    def _check_end(self, world: WorldState) -> None:
        if not world.player.alive:
            if not world.defeat:
                world.defeat = True
                logger.info("Tick %d: Player defeated on '%s'", world.tick, world.level_id)
            return

        level = self._level
        all_dead = level is not None and level.enemy_count > 0 and not world.living_enemies()
        quest_done = (
            level is not None and level.victory_quest is not None
            and self._quests.get_quest_status(level.victory_quest) == QuestStatus.COMPLETED
        )
        if all_dead or quest_done:
            self._trigger_victory(world)

    def _trigger_victory(self, world: WorldState) -> None:
        if world.victory:
            return
        world.victory = True
        next_level = self._level.next_level if self._level else None
        if next_level:
            self._unlocks.unlock_level(next_level)
        logger.info("Tick %d: Victory on '%s'", world.tick, world.level_id)
        self._bus.publish(LevelComplete(level_id=world.level_id, next_level=next_level))
