"""Kinematic integrator: velocity x delta, walls, and level bounds.

Bodies are axis-aligned boxes. Each axis is resolved separately so a body
sliding along a wall keeps its tangential motion. Projectiles are not
blocked; touching a wall or leaving the level destroys them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from arpg.core.enums import VolumeKind
from arpg.core.models import Rect, Vector2

if TYPE_CHECKING:
    from arpg.core.world_state import WorldState

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def move_body(world: WorldState, pos: Vector2, velocity: Vector2, size: float, dt_s: float) -> Vector2:
    """Return the new center of a *size* box moved by *velocity* for *dt_s* seconds."""
    if velocity.is_zero() or dt_s <= 0:
        return pos
    half = size / 2
    x, y = pos.x, pos.y

    nx = _clamp(x + velocity.x * dt_s, half, world.width - half)
    if not any(Rect.centered(Vector2(nx, y), size, size).overlaps(w) for w in world.walls):
        x = nx

    ny = _clamp(y + velocity.y * dt_s, half, world.height - half)
    if not any(Rect.centered(Vector2(x, ny), size, size).overlaps(w) for w in world.walls):
        y = ny

    return Vector2(x, y)


def step(world: WorldState, delta_ms: float) -> int:
    """Integrate every moving body. Returns the number of projectiles destroyed."""
    dt_s = delta_ms / 1000.0

    player = world.player
    if player.active:
        player.pos = move_body(world, player.pos, player.velocity, player.size, dt_s)

    for enemy in world.living_enemies():
        enemy.pos = move_body(world, enemy.pos, enemy.velocity, enemy.size, dt_s)

    destroyed = 0
    for volume in list(world.volumes.values()):
        if volume.kind != VolumeKind.RANGED or volume.velocity.is_zero():
            continue
        volume.pos = volume.pos + volume.velocity * dt_s
        if world.projectile_blocked(volume.pos, volume.radius):
            world.remove_volume(volume.uid)
            destroyed += 1
            logger.debug("Projectile %d hit a wall at %s", volume.uid, volume.pos)
    return destroyed
