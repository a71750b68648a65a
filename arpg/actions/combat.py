"""CombatResolver: hit volumes, contact damage, knockback, and deaths.

Two player attacks, each an edge-triggered spawn of a HitVolume:
  - Melee: a 48x48 box offset ahead of the player along its facing, alive
    for 100 ms, dealing the player's attack through the defense formula.
    The volume is spent on its first successful hit, so one swing damages
    at most one enemy, once.
  - Ranged: costs mana; travels along the movement direction (or facing
    when idle) and kills outright on the first enemy it touches. Walls and
    level bounds destroy it without damage (see engine.physics).

Enemies carry a short ``is_hit`` window after taking melee damage; a melee
volume overlapping an enemy inside that window does not register. Ranged
hits ignore the window.

Contact damage is separate: an enemy overlapping the player deals its
``damage`` stat through the defense formula, knocks the player back, and
opens a 1000 ms invulnerability window during which contact is ignored.

Deaths roll the enemy's loot table and publish ENEMY_DEATH; everything
that follows (quests, xp, drops) is wired by the WorldLoop.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from arpg.actions.damage import DamageRule, FixedDamage, LethalDamage
from arpg.core.enums import Facing, VolumeKind
from arpg.core.models import HitVolume, Vector2
from arpg.core.stats import apply_damage, spend_mana
from arpg.core.timers import Countdown
from arpg.engine.event_bus import EnemyDeath, PlayerDeath, PlayerStatsChanged

if TYPE_CHECKING:
    from arpg.config import SimulationConfig
    from arpg.core.loot import LootGenerator
    from arpg.core.models import Enemy, Player
    from arpg.core.world_state import WorldState
    from arpg.engine.event_bus import EventBus

logger = logging.getLogger(__name__)


def ranged_direction(player: Player, threshold: float = 10.0) -> Vector2:
    """Unit direction for a projectile: movement first, vertical before horizontal."""
    v = player.velocity
    if v.y < -threshold:
        return Vector2(0.0, -1.0)
    if v.y > threshold:
        return Vector2(0.0, 1.0)
    if v.x < -threshold:
        return Vector2(-1.0, 0.0)
    if v.x > threshold:
        return Vector2(1.0, 0.0)
    return Vector2(-1.0, 0.0) if player.facing == Facing.LEFT else Vector2(1.0, 0.0)


class CombatResolver:
    """Stateless combat rules applied to a WorldState."""

    __slots__ = ("_config", "_bus", "_loot")

    def __init__(self, config: SimulationConfig, bus: EventBus, loot: LootGenerator) -> None:
        self._config = config
        self._bus = bus
        self._loot = loot

    # ------------------------------------------------------------------
    # Player attacks
    # ------------------------------------------------------------------

    def spawn_melee(self, world: WorldState) -> HitVolume | None:
        player = world.player
        if not player.alive:
            return None
        cfg = self._config
        offset = -cfg.melee_offset if player.facing == Facing.LEFT else cfg.melee_offset
        volume = HitVolume(
            uid=world.allocate_id(),
            kind=VolumeKind.MELEE,
            source_id=player.id,
            pos=Vector2(player.pos.x + offset, player.pos.y),
            rule=FixedDamage(player.stats.attack),
            lifetime=Countdown(cfg.melee_lifetime_ms),
            width=cfg.melee_size,
            height=cfg.melee_size,
        )
        world.add_volume(volume)
        logger.debug("Melee swing at %s", volume.pos)
        return volume

    def spawn_ranged(self, world: WorldState) -> HitVolume | None:
        player = world.player
        cfg = self._config
        if not player.alive:
            return None
        if not spend_mana(player.stats, cfg.ranged_mana_cost):
            logger.debug("Not enough mana for ranged attack (%.1f/%.1f)",
                         player.stats.mana, cfg.ranged_mana_cost)
            return None
        self._publish_stats(player)

        direction = ranged_direction(player, cfg.moving_threshold)
        volume = HitVolume(
            uid=world.allocate_id(),
            kind=VolumeKind.RANGED,
            source_id=player.id,
            pos=player.pos,
            rule=LethalDamage(),
            lifetime=Countdown(cfg.ranged_lifetime_ms),
            velocity=direction * cfg.ranged_speed,
            radius=cfg.ranged_radius,
        )
        world.add_volume(volume)
        logger.debug("Ranged attack: velocity %s", volume.velocity)
        return volume

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, world: WorldState) -> list[Enemy]:
        """Resolve every hit volume and contact overlap. Returns enemies killed."""
        killed = self.resolve_volumes(world)
        self.resolve_contacts(world)
        return killed

    def resolve_volumes(self, world: WorldState) -> list[Enemy]:
        killed: list[Enemy] = []
        for volume in list(world.volumes.values()):
            if not volume.active:
                continue
            for enemy in world.living_enemies():
                if not volume.overlaps(enemy.bounds()):
                    continue
                if volume.kind == VolumeKind.MELEE and enemy.is_hit.active:
                    continue
                world.remove_volume(volume.uid)
                if self.damage_enemy(world, enemy, volume.rule):
                    killed.append(enemy)
                break
        return killed

    def resolve_contacts(self, world: WorldState) -> None:
        player = world.player
        for enemy in world.living_enemies():
            if not player.active or not player.alive or player.is_invulnerable:
                return
            if not enemy.bounds().overlaps(player.bounds()):
                continue
            damage = enemy.stats.damage or self._config.default_enemy_damage
            logger.info("Player hit by %s for %d damage!", enemy.kind, damage)
            if not self.damage_player(world, damage, defense_applies=True):
                continue
            away = (player.pos - enemy.pos).normalized()
            player.velocity = away * self._config.contact_knockback_speed
            player.invulnerable.start(self._config.player_invulnerable_ms)

    # ------------------------------------------------------------------
    # Damage application
    # ------------------------------------------------------------------

    def damage_enemy(self, world: WorldState, enemy: Enemy, rule: DamageRule) -> bool:
        """Apply *rule* to *enemy*, knock it back, and handle death. True if it died."""
        if not enemy.alive:
            return False
        hp = rule.apply(enemy.stats)
        logger.info("Hit %s #%d with %s [HP: %d/%d]", enemy.kind, enemy.id, rule.name,
                    hp, enemy.stats.max_hp)

        away = (enemy.pos - world.player.pos).normalized()
        enemy.velocity = away * self._config.enemy_knockback_speed
        enemy.is_hit.start(self._config.enemy_hit_window_ms)

        if hp <= 0:
            self._kill_enemy(world, enemy)
            return True
        return False

    def _kill_enemy(self, world: WorldState, enemy: Enemy) -> None:
        if enemy.dead:
            return
        enemy.dead = True
        drops = self._loot.roll_loot(enemy.stats.loot_table or "common_enemy")
        world.kills += 1
        world.remove_enemy(enemy.id)
        logger.info("%s died! Loot: %s", enemy.name or enemy.kind,
                    [f"{d.quantity}x {d.item_id}" for d in drops] or "none")
        self._bus.publish(EnemyDeath(
            enemy_id=enemy.id,
            enemy_kind=enemy.kind,
            position=(enemy.pos.x, enemy.pos.y),
            xp_reward=enemy.stats.xp_reward,
            loot=tuple((d.item_id, d.quantity) for d in drops),
        ))

    def damage_player(self, world: WorldState, amount: int, defense_applies: bool) -> bool:
        """Hurt the player unless invulnerable or already dead. True if it landed."""
        player = world.player
        if not player.active or not player.alive or player.is_invulnerable:
            return False
        hp = player.stats.hp
        new_hp = apply_damage(player.stats, amount, defense_applies)
        logger.debug("Player took %d damage [HP: %d/%d]", hp - new_hp, new_hp, player.stats.max_hp)
        player.hit_stun.start(self._config.player_hit_stun_ms)
        self._publish_stats(player)
        if new_hp <= 0:
            player.velocity = Vector2()
            logger.info("Player died!")
            self._bus.publish(PlayerDeath())
        return True

    def enemy_attack(self, world: WorldState, enemy: Enemy, target: Player) -> None:
        """AI attack: the enemy's fixed damage, bypassing the defense formula."""
        if not target.active or not enemy.alive:
            return
        damage = enemy.stats.damage or self._config.default_enemy_damage
        if self.damage_player(world, damage, defense_applies=False):
            logger.info("%s attacks player for %d damage", enemy.kind, damage)

    def _publish_stats(self, player: Player) -> None:
        self._bus.publish(PlayerStatsChanged(stats=player.stats.to_dict()))
