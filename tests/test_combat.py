"""Tests for hit volumes, contact damage, knockback and deaths."""

from arpg.actions.combat import ranged_direction
from arpg.actions.damage import FixedDamage, LethalDamage
from arpg.core.enums import Facing, VolumeKind
from arpg.core.models import Player, Rect, Vector2
from arpg.core.stats import Stats
from arpg.engine import physics
from arpg.engine.commands import TickInput
from arpg.engine.event_bus import EnemyDeath, PlayerDeath, PlayerStatsChanged

from tests.helpers.arena import Arena


class TestDamageRules:
    def test_fixed_damage_respects_defense(self):
        stats = Stats(hp=30, max_hp=30, defense=4)
        rule = FixedDamage(10)
        assert rule.preview(stats) == 6
        assert rule.apply(stats) == 24

    def test_lethal_damage_ignores_defense(self):
        stats = Stats(hp=80, max_hp=100, defense=50)
        assert LethalDamage().apply(stats) == 0


class TestMelee:
    def test_melee_box_is_offset_by_facing(self):
        arena = Arena()
        right = arena.loop.combat.spawn_melee(arena.world)
        arena.player.facing = Facing.LEFT
        left = arena.loop.combat.spawn_melee(arena.world)
        assert right.pos == Vector2(230.0, 150.0)
        assert left.pos == Vector2(170.0, 150.0)
        assert right.kind == VolumeKind.MELEE

    def test_melee_hit_applies_attack_minus_defense(self):
        arena = Arena()
        slime = arena.spawn("slime", 230, 150)
        arena.loop.combat.spawn_melee(arena.world)
        arena.loop.combat.resolve(arena.world)
        assert slime.stats.hp == 21
        assert slime.is_hit.active
        assert arena.world.volumes == {}

    def test_melee_knocks_enemy_away_from_player(self):
        arena = Arena()
        slime = arena.spawn("slime", 230, 150)
        arena.loop.combat.spawn_melee(arena.world)
        arena.loop.combat.resolve(arena.world)
        assert slime.velocity == Vector2(200.0, 0.0)

    def test_one_swing_hits_one_enemy(self):
        arena = Arena()
        a = arena.spawn("slime", 230, 140)
        b = arena.spawn("slime", 230, 160)
        arena.loop.combat.spawn_melee(arena.world)
        arena.loop.combat.resolve(arena.world)
        damaged = [e for e in (a, b) if e.stats.hp < e.stats.max_hp]
        assert len(damaged) == 1

    def test_hit_window_blocks_melee(self):
        arena = Arena()
        slime = arena.spawn("slime", 230, 150)
        slime.is_hit.start(200.0)
        volume = arena.loop.combat.spawn_melee(arena.world)
        arena.loop.combat.resolve(arena.world)
        assert slime.stats.hp == 30
        assert volume.uid in arena.world.volumes

    def test_dead_player_cannot_swing(self):
        arena = Arena()
        arena.player.stats.hp = 0
        assert arena.loop.combat.spawn_melee(arena.world) is None


class TestRanged:
    def test_ranged_spends_mana(self):
        arena = Arena()
        arena.player.stats.mana = 50.0
        volume = arena.loop.combat.spawn_ranged(arena.world)
        assert volume is not None
        assert arena.player.stats.mana == 40.0
        assert volume.velocity == Vector2(400.0, 0.0)
        assert arena.events_of(PlayerStatsChanged)

    def test_ranged_needs_enough_mana(self):
        arena = Arena()
        arena.player.stats.mana = 5.0
        assert arena.loop.combat.spawn_ranged(arena.world) is None
        assert arena.player.stats.mana == 5.0
        assert arena.world.volumes == {}

    def test_projectile_kills_outright_ignoring_hit_window(self):
        arena = Arena()
        slime = arena.spawn("slime", 300, 150)
        slime.is_hit.start(200.0)
        arena.player.stats.mana = 50.0
        arena.loop.combat.spawn_ranged(arena.world)
        physics.step(arena.world, 250.0)
        killed = arena.loop.combat.resolve(arena.world)
        assert killed == [slime]
        assert slime.dead
        assert arena.world.kills == 1

    def test_projectile_destroyed_by_wall(self):
        arena = Arena()
        arena.world.walls = [Rect(250.0, 100.0, 10.0, 100.0)]
        arena.player.stats.mana = 50.0
        arena.loop.combat.spawn_ranged(arena.world)
        assert physics.step(arena.world, 130.0) == 1
        assert arena.world.volumes == {}

    def test_projectile_destroyed_leaving_level(self):
        arena = Arena()
        arena.player.stats.mana = 50.0
        arena.player.facing = Facing.LEFT
        arena.loop.combat.spawn_ranged(arena.world)
        assert physics.step(arena.world, 600.0) == 1

    def test_projectile_edge_touching_wall_is_destroyed(self):
        arena = Arena()
        arena.world.walls = [Rect(250.0, 0.0, 10.0, 300.0)]
        assert arena.world.projectile_blocked(Vector2(240.0, 150.0), 16.0)
        assert not arena.world.projectile_blocked(Vector2(230.0, 150.0), 16.0)

    def test_projectile_cannot_reach_enemy_behind_wall(self):
        arena = Arena()
        arena.world.walls = [Rect(250.0, 0.0, 10.0, 300.0)]
        slime = arena.spawn("slime", 272, 150)
        arena.player.stats.mana = 50.0
        arena.run(1, TickInput(ranged=True))
        arena.run(20)
        assert slime.alive
        assert arena.world.volumes == {}


class TestRangedDirection:
    def _player(self, vx: float, vy: float, facing: Facing = Facing.RIGHT) -> Player:
        return Player(pos=Vector2(), velocity=Vector2(vx, vy), facing=facing)

    def test_vertical_movement_wins(self):
        assert ranged_direction(self._player(150.0, -150.0)) == Vector2(0.0, -1.0)
        assert ranged_direction(self._player(-150.0, 150.0)) == Vector2(0.0, 1.0)

    def test_horizontal_movement(self):
        assert ranged_direction(self._player(-150.0, 0.0)) == Vector2(-1.0, 0.0)

    def test_idle_uses_facing(self):
        assert ranged_direction(self._player(5.0, 0.0, Facing.LEFT)) == Vector2(-1.0, 0.0)
        assert ranged_direction(self._player(0.0, 0.0)) == Vector2(1.0, 0.0)


class TestContactAndAttacks:
    def test_contact_damage_uses_defense_and_grants_immunity(self):
        arena = Arena()
        arena.spawn("slime", 210, 150)
        arena.loop.combat.resolve_contacts(arena.world)
        # slime damage 8 against player defense 5
        assert arena.player.stats.hp == 97
        assert arena.player.is_invulnerable
        assert arena.player.velocity.x < 0
        arena.loop.combat.resolve_contacts(arena.world)
        assert arena.player.stats.hp == 97

    def test_ai_attack_bypasses_defense(self):
        arena = Arena()
        slime = arena.spawn("slime", 220, 150)
        arena.loop.combat.enemy_attack(arena.world, slime, arena.player)
        assert arena.player.stats.hp == 92
        assert arena.player.hit_stun.active

    def test_invulnerable_player_takes_no_damage(self):
        arena = Arena()
        arena.player.invulnerable.start(500.0)
        assert not arena.loop.combat.damage_player(arena.world, 50, defense_applies=False)
        assert arena.player.stats.hp == 100

    def test_player_death_publishes_once(self):
        arena = Arena()
        arena.player.stats.hp = 5
        assert arena.loop.combat.damage_player(arena.world, 50, defense_applies=False)
        assert arena.player.stats.hp == 0
        assert arena.player.velocity.is_zero()
        assert not arena.loop.combat.damage_player(arena.world, 50, defense_applies=False)
        assert len(arena.events_of(PlayerDeath)) == 1


class TestEnemyDeath:
    def test_death_event_carries_rolled_loot(self):
        arena = Arena()
        slime = arena.spawn("slime", 230, 150)
        arena.loop.combat.damage_enemy(arena.world, slime, LethalDamage())
        (event,) = arena.events_of(EnemyDeath)
        assert event.enemy_kind == "slime"
        assert event.position == (230.0, 150.0)
        assert event.xp_reward == 10
        assert event.loot == (("gem", 1),)
        assert slime.id not in arena.world.enemies
        assert not slime.active

    def test_dead_enemy_cannot_die_twice(self):
        arena = Arena()
        slime = arena.spawn("slime", 230, 150)
        combat = arena.loop.combat
        assert combat.damage_enemy(arena.world, slime, LethalDamage())
        assert not combat.damage_enemy(arena.world, slime, LethalDamage())
        assert len(arena.events_of(EnemyDeath)) == 1
        assert arena.world.kills == 1
