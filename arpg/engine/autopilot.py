"""Autopilot: a naive player controller for headless runs.

Walks toward the nearest living enemy, swings when in melee reach, and
fires a projectile when the target is lined up and mana allows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from arpg.core.enums import Facing
from arpg.engine.commands import IDLE, TickInput

if TYPE_CHECKING:
    from arpg.engine.world_loop import WorldLoop


class Autopilot:
    """Callable controller: ``autopilot(loop) -> TickInput``."""

    __slots__ = ("_melee_reach", "_align_tolerance", "_swing_every", "_ticks")

    def __init__(self, melee_reach: float = 40.0, align_tolerance: float = 12.0,
                 swing_every: int = 8) -> None:
        self._melee_reach = melee_reach
        self._align_tolerance = align_tolerance
        self._swing_every = swing_every
        self._ticks = 0

    def __call__(self, loop: WorldLoop) -> TickInput:
        self._ticks += 1
        world = loop.world
        player = world.player
        enemies = world.living_enemies()
        if not player.alive or not enemies:
            return IDLE

        target = min(enemies, key=lambda e: player.pos.distance_to(e.pos))
        dx = target.pos.x - player.pos.x
        dy = target.pos.y - player.pos.y
        dist = player.pos.distance_to(target.pos)

        if dist <= self._melee_reach:
            return TickInput(face=Facing.RIGHT if dx >= 0 else Facing.LEFT,
                             melee=self._ticks % self._swing_every == 0)

        aligned = abs(dy) <= self._align_tolerance
        ranged = (
            aligned
            and player.stats.mana >= loop.config.ranged_mana_cost
            and self._ticks % (self._swing_every * 4) == 0
        )
        return TickInput(move_x=dx, move_y=dy, ranged=ranged)
