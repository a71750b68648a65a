"""Mutable authoritative world state: only mutated by the WorldLoop."""

from __future__ import annotations

from typing import TYPE_CHECKING

from arpg.core.models import Player, Rect, Vector2
from arpg.core.timers import TimerQueue

if TYPE_CHECKING:
    from arpg.core.models import Enemy, HitVolume, WorldItem


class WorldState:
    """The single source of truth for one loaded level."""

    __slots__ = (
        "tick", "elapsed_ms", "seed", "level_id", "width", "height", "player",
        "enemies", "items", "volumes", "walls", "timers", "kills",
        "victory", "defeat", "_next_id",
    )

    def __init__(self, seed: int, level_id: str, width: float, height: float, player: Player) -> None:
        self.tick: int = 0
        self.elapsed_ms: float = 0.0
        self.seed: int = seed
        self.level_id: str = level_id
        self.width: float = width
        self.height: float = height
        self.player: Player = player
        self.enemies: dict[int, Enemy] = {}
        self.items: dict[int, WorldItem] = {}
        self.volumes: dict[int, HitVolume] = {}
        self.walls: list[Rect] = []
        self.timers: TimerQueue = TimerQueue()
        self.kills: int = 0
        self.victory: bool = False
        self.defeat: bool = False
        self._next_id: int = 1

    @property
    def is_over(self) -> bool:
        return self.victory or self.defeat

    def allocate_id(self) -> int:
        eid = self._next_id
        self._next_id += 1
        return eid

    # -- enemies --

    def add_enemy(self, enemy: Enemy) -> None:
        self.enemies[enemy.id] = enemy

    def living_enemies(self) -> list[Enemy]:
        return [e for e in self.enemies.values() if e.alive]

    def remove_enemy(self, enemy_id: int) -> Enemy | None:
        enemy = self.enemies.pop(enemy_id, None)
        if enemy is not None:
            enemy.active = False
        return enemy

    # -- world items --

    def add_item(self, item: WorldItem) -> None:
        self.items[item.uid] = item

    def remove_item(self, uid: int) -> WorldItem | None:
        item = self.items.pop(uid, None)
        if item is not None:
            item.active = False
        return item

    # -- hit volumes --

    def add_volume(self, volume: HitVolume) -> None:
        self.volumes[volume.uid] = volume

    def remove_volume(self, uid: int) -> HitVolume | None:
        volume = self.volumes.pop(uid, None)
        if volume is not None:
            volume.active = False
        return volume

    # -- geometry --

    def projectile_blocked(self, center: Vector2, radius: float) -> bool:
        """True if a circle of *radius* touches a wall or its center leaves the level."""
        if center.x < 0 or center.y < 0 or center.x > self.width or center.y > self.height:
            return True
        return any(w.intersects_circle(center, radius) for w in self.walls)
