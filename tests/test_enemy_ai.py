"""Tests for the PATROL/CHASE enemy state machine."""

from arpg.ai.brain import EnemyBrain
from arpg.config import SimulationConfig
from arpg.core.enums import AIState
from arpg.core.models import Enemy, Player, Vector2
from arpg.core.stats import Stats


def _enemy(x: float = 0.0, y: float = 0.0, state: AIState = AIState.PATROL) -> Enemy:
    stats = Stats(hp=30, max_hp=30, speed=60.0, chase_distance=150.0, damage=8)
    return Enemy(id=1, kind="slime", pos=Vector2(x, y), stats=stats, state=state)


def _pair(player_x: float, state: AIState = AIState.PATROL) -> tuple[Enemy, Player]:
    enemy = _enemy(state=state)
    player = Player(pos=Vector2(player_x, 0.0))
    enemy.set_target(player)
    return enemy, player


class _Recorder:
    def __init__(self):
        self.attacks = []
        self.transitions = []

    def on_attack(self, enemy, target):
        self.attacks.append((enemy.id, target.id))

    def on_state_change(self, enemy, old, new):
        self.transitions.append((old, new))


def _brain(rec: _Recorder | None = None) -> EnemyBrain:
    rec = rec or _Recorder()
    return EnemyBrain(SimulationConfig(), on_attack=rec.on_attack, on_state_change=rec.on_state_change)


class TestPatrol:
    def test_spots_target_within_chase_distance(self):
        rec = _Recorder()
        enemy, _ = _pair(100.0)
        _brain(rec).update(enemy, 16.0)
        assert enemy.state == AIState.CHASE
        assert enemy.texture == "enemy_chase"
        assert rec.transitions == [(AIState.PATROL, AIState.CHASE)]

    def test_stays_put_when_target_far(self):
        enemy, _ = _pair(500.0)
        decision = _brain().update(enemy, 16.0)
        assert enemy.state == AIState.PATROL
        assert enemy.velocity.is_zero()
        assert not decision.attack

    def test_boundary_distance_does_not_trigger(self):
        enemy, _ = _pair(150.0)
        _brain().update(enemy, 16.0)
        assert enemy.state == AIState.PATROL


class TestChase:
    def test_steers_toward_target(self):
        enemy, _ = _pair(100.0, state=AIState.CHASE)
        _brain().update(enemy, 16.0)
        assert enemy.velocity == Vector2(60.0, 0.0)

    def test_keeps_chasing_inside_leash(self):
        # 200 is beyond chase_distance (150) but inside 150 * 1.5.
        enemy, _ = _pair(200.0, state=AIState.CHASE)
        _brain().update(enemy, 16.0)
        assert enemy.state == AIState.CHASE

    def test_loses_target_beyond_leash(self):
        rec = _Recorder()
        enemy, _ = _pair(300.0, state=AIState.CHASE)
        enemy.texture = "enemy_chase"
        _brain(rec).update(enemy, 16.0)
        assert enemy.state == AIState.PATROL
        assert enemy.texture == "enemy_normal"
        assert rec.transitions == [(AIState.CHASE, AIState.PATROL)]

    def test_target_deactivated_returns_to_patrol(self):
        enemy, player = _pair(50.0, state=AIState.CHASE)
        player.active = False
        _brain().update(enemy, 16.0)
        assert enemy.state == AIState.PATROL

    def test_no_target_returns_to_patrol(self):
        enemy = _enemy(state=AIState.CHASE)
        _brain().update(enemy, 16.0)
        assert enemy.state == AIState.PATROL

    def test_target_reference_is_weak(self):
        enemy = _enemy(state=AIState.CHASE)
        enemy.set_target(Player(pos=Vector2(10.0, 0.0)))
        # The temporary player has no other owner.
        assert enemy.target is None


class TestAttack:
    def test_attacks_in_engage_range_when_ready(self):
        rec = _Recorder()
        enemy, _ = _pair(20.0, state=AIState.CHASE)
        brain = _brain(rec)
        decision = brain.update(enemy, 16.0)
        assert decision.attack
        assert len(rec.attacks) == 1
        assert enemy.attack_cooldown == 1000.0
        assert enemy.velocity.is_zero()

    def test_cooldown_blocks_next_attack(self):
        rec = _Recorder()
        enemy, _ = _pair(20.0, state=AIState.CHASE)
        brain = _brain(rec)
        brain.update(enemy, 16.0)
        brain.update(enemy, 16.0)
        assert len(rec.attacks) == 1
        assert enemy.attack_cooldown == 984.0

    def test_attacks_again_once_cooldown_elapses(self):
        rec = _Recorder()
        enemy, _ = _pair(20.0, state=AIState.CHASE)
        brain = _brain(rec)
        brain.update(enemy, 16.0)
        brain.update(enemy, 1000.0)
        assert len(rec.attacks) == 2

    def test_cooldown_ticks_while_patrolling(self):
        enemy, _ = _pair(500.0)
        enemy.attack_cooldown = 500.0
        _brain().update(enemy, 100.0)
        assert enemy.attack_cooldown == 400.0


class TestSkips:
    def test_dead_enemy_is_skipped(self):
        enemy, _ = _pair(20.0, state=AIState.CHASE)
        enemy.dead = True
        enemy.attack_cooldown = 300.0
        assert _brain().update(enemy, 16.0) is None
        assert enemy.attack_cooldown == 300.0

    def test_knockback_survives_hit_window(self):
        enemy, _ = _pair(100.0, state=AIState.CHASE)
        enemy.velocity = Vector2(-200.0, 0.0)
        enemy.is_hit.start(200.0)
        _brain().update(enemy, 16.0)
        assert enemy.velocity == Vector2(-200.0, 0.0)
