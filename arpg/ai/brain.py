"""EnemyBrain: per-tick driver of the enemy state machine.

Each ``update`` call:
  1. Decrements the attack cooldown by the frame delta (it may go negative;
     only ``<= 0`` matters).
  2. Dispatches to the STATE_HANDLERS entry for the enemy's state.
  3. Applies the decision: state transition (with texture hint), velocity
     (unless the enemy is in its post-hit knockback window), and the attack.

Attacks are delegated to an injected callback so the combat layer decides
what "hit the player" means. The cooldown resets to the configured value
whenever an attack is attempted against a live target.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from arpg.ai.states import STATE_HANDLERS, STATE_TEXTURES, AIContext, AIDecision, PatrolHandler

if TYPE_CHECKING:
    from arpg.config import SimulationConfig
    from arpg.core.enums import AIState
    from arpg.core.models import Enemy, Player

logger = logging.getLogger(__name__)

_FALLBACK = PatrolHandler()

AttackFn = Callable[["Enemy", "Player"], None]
StateChangeFn = Callable[["Enemy", "AIState", "AIState"], None]


class EnemyBrain:
    """Dispatches enemy AI decisions based on their current state."""

    __slots__ = ("_config", "_on_attack", "_on_state_change")

    def __init__(
        self,
        config: SimulationConfig,
        on_attack: AttackFn | None = None,
        on_state_change: StateChangeFn | None = None,
    ) -> None:
        self._config = config
        self._on_attack = on_attack
        self._on_state_change = on_state_change

    def update(self, enemy: Enemy, delta_ms: float) -> AIDecision | None:
        """Run one AI tick for *enemy*. Inactive enemies are skipped."""
        if not enemy.alive:
            return None

        enemy.attack_cooldown -= delta_ms

        target = enemy.target
        ctx = AIContext(enemy=enemy, target=target, config=self._config)
        handler = STATE_HANDLERS.get(enemy.state, _FALLBACK)
        decision = handler.handle(ctx)

        self._transition(enemy, decision.state)

        # Knockback velocity wins while the hit window is open.
        if not enemy.is_hit.active:
            enemy.velocity = decision.velocity

        if decision.attack and target is not None:
            self._attack(enemy, target)

        return decision

    def _transition(self, enemy: Enemy, new_state: AIState) -> None:
        old_state = enemy.state
        if old_state == new_state:
            return
        enemy.state = new_state
        enemy.texture = STATE_TEXTURES.get(new_state, enemy.texture)
        logger.debug("Enemy %d (%s): %s -> %s", enemy.id, enemy.kind,
                     old_state.value, new_state.value)
        if self._on_state_change is not None:
            self._on_state_change(enemy, old_state, new_state)

    def _attack(self, enemy: Enemy, target: Player) -> None:
        if not target.active:
            return
        if self._on_attack is not None:
            self._on_attack(enemy, target)
        enemy.attack_cooldown = self._config.enemy_attack_cooldown_ms
