"""AI layer: PATROL/CHASE state handlers and the per-enemy brain."""

from arpg.ai.brain import EnemyBrain
from arpg.ai.states import STATE_HANDLERS

__all__ = ["EnemyBrain", "STATE_HANDLERS"]
