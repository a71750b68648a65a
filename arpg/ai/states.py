"""AI state handlers: class-based, registry-dispatched.

Architecture:
  - AIContext bundles what a handler needs (enemy, target, config).
  - Each handler is a class implementing ``handle`` and returning an
    AIDecision: the next state, the desired velocity, and whether to attack.
  - Handlers are registered in STATE_HANDLERS by AIState key; new states are
    added by creating a class and inserting one dict entry.
  - Handlers never mutate the enemy. The EnemyBrain applies the decision.

State machine:
  PATROL -> CHASE (target within chase_distance)
  CHASE  -> PATROL (target beyond chase_distance * lose_target_mult, or gone)
  CHASE  -> CHASE  (engage: stop and attack when off cooldown | steer toward target)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from arpg.core.enums import AIState
from arpg.core.models import ZERO, Vector2

if TYPE_CHECKING:
    from arpg.config import SimulationConfig
    from arpg.core.models import Enemy, Player


# =====================================================================
# Context and decision
# =====================================================================

@dataclass(slots=True)
class AIContext:
    """All data a state handler might need."""

    enemy: Enemy
    target: Player | None
    config: SimulationConfig

    def distance_to_target(self) -> float | None:
        if self.target is None:
            return None
        return self.enemy.pos.distance_to(self.target.pos)


@dataclass(frozen=True, slots=True)
class AIDecision:
    """What an enemy wants to do this tick."""

    state: AIState
    velocity: Vector2 = ZERO
    attack: bool = False
    reason: str = ""


def target_available(target: Player | None) -> bool:
    """A target that has been deactivated or removed counts as lost."""
    return target is not None and target.active


def steer_toward(origin: Vector2, dest: Vector2, speed: float) -> Vector2:
    """Straight-line velocity from *origin* to *dest* at *speed*."""
    return (dest - origin).normalized() * speed


# =====================================================================
# Handlers
# =====================================================================

class StateHandler(ABC):
    """Abstract base for AI state handlers.

    Subclass and implement ``handle`` to define behaviour for an AIState.
    """

    @abstractmethod
    def handle(self, ctx: AIContext) -> AIDecision:
        ...


class PatrolHandler(StateHandler):
    def handle(self, ctx: AIContext) -> AIDecision:
        dist = ctx.distance_to_target() if target_available(ctx.target) else None
        if dist is not None and dist < ctx.enemy.stats.chase_distance:
            return AIDecision(AIState.CHASE, reason="Target spotted")
        return AIDecision(AIState.PATROL, reason="Patrolling")


class ChaseHandler(StateHandler):
    def handle(self, ctx: AIContext) -> AIDecision:
        enemy = ctx.enemy
        if not target_available(ctx.target):
            return AIDecision(AIState.PATROL, reason="Target gone")

        dist = ctx.distance_to_target()
        if dist > enemy.stats.chase_distance * ctx.config.lose_target_mult:
            return AIDecision(AIState.PATROL, reason="Lost target")

        if dist < ctx.config.engage_range:
            return AIDecision(
                AIState.CHASE,
                attack=enemy.attack_cooldown <= 0,
                reason="Engaging target",
            )

        return AIDecision(
            AIState.CHASE,
            velocity=steer_toward(enemy.pos, ctx.target.pos, enemy.stats.speed),
            reason="Chasing target",
        )


# =====================================================================
# Registry
# =====================================================================

STATE_HANDLERS: dict[AIState, StateHandler] = {
    AIState.PATROL: PatrolHandler(),
    AIState.CHASE: ChaseHandler(),
}

# Texture hint surfaced to the renderer per state.
STATE_TEXTURES: dict[AIState, str] = {
    AIState.PATROL: "enemy_normal",
    AIState.CHASE: "enemy_chase",
}
