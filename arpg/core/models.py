"""Core data models: Vector2, Rect, Player, Enemy, WorldItem, HitVolume."""

from __future__ import annotations

import math
import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from arpg.core.enums import AIState, Facing, VolumeKind
from arpg.core.stats import Stats
from arpg.core.timers import Countdown, TimerHandle

if TYPE_CHECKING:
    from arpg.actions.damage import DamageRule


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Vector2:
    """Immutable 2D world coordinate / velocity in pixels."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> Vector2:
        return Vector2(self.x * k, self.y * k)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Vector2) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def normalized(self) -> Vector2:
        n = self.length()
        if n == 0.0:
            return Vector2()
        return Vector2(self.x / n, self.y / n)

    def is_zero(self) -> bool:
        return self.x == 0.0 and self.y == 0.0

    def __repr__(self) -> str:
        return f"({self.x:.1f}, {self.y:.1f})"


ZERO = Vector2()


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle (left/top origin)."""

    x: float
    y: float
    w: float
    h: float

    @classmethod
    def centered(cls, center: Vector2, w: float, h: float) -> Rect:
        return cls(center.x - w / 2, center.y - h / 2, w, h)

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center(self) -> Vector2:
        return Vector2(self.x + self.w / 2, self.y + self.h / 2)

    def overlaps(self, other: Rect) -> bool:
        return (
            self.x < other.right and other.x < self.right
            and self.y < other.bottom and other.y < self.bottom
        )

    def intersects_circle(self, center: Vector2, radius: float) -> bool:
        nx = min(max(center.x, self.x), self.right)
        ny = min(max(center.y, self.y), self.bottom)
        return (center.x - nx) ** 2 + (center.y - ny) ** 2 < radius * radius


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

@dataclass(slots=True, weakref_slot=True, eq=False)
class Player:
    """The player-controlled entity."""

    pos: Vector2
    stats: Stats = field(default_factory=lambda: Stats(
        hp=100, max_hp=100, mana=50.0, max_mana=50.0,
        attack=10, defense=5, speed=150.0,
        level=1, xp=0, xp_to_next=100,
    ))
    id: int = 0
    velocity: Vector2 = ZERO
    facing: Facing = Facing.RIGHT
    size: float = 24.0
    invulnerable: Countdown = field(default_factory=Countdown)
    hit_stun: Countdown = field(default_factory=Countdown)
    mana_regen_elapsed: float = 0.0
    active: bool = True

    @property
    def alive(self) -> bool:
        return self.stats.alive

    @property
    def is_invulnerable(self) -> bool:
        return self.invulnerable.active

    def bounds(self) -> Rect:
        return Rect.centered(self.pos, self.size, self.size)


@dataclass(slots=True, weakref_slot=True, eq=False)
class Enemy:
    """A hostile entity driven by the enemy state machine."""

    id: int
    kind: str
    pos: Vector2
    stats: Stats
    name: str = ""
    velocity: Vector2 = ZERO
    state: AIState = AIState.PATROL
    attack_cooldown: float = 0.0        # ms until the next attack; may go negative
    texture: str = "enemy_normal"
    size: float = 24.0
    is_hit: Countdown = field(default_factory=Countdown)
    dead: bool = False
    active: bool = True
    _target_ref: weakref.ref | None = None

    @property
    def alive(self) -> bool:
        return self.active and not self.dead and self.stats.alive

    @property
    def target(self) -> Player | None:
        """Current target, or None once it has been collected."""
        if self._target_ref is None:
            return None
        return self._target_ref()

    def set_target(self, target: Player | None) -> None:
        self._target_ref = weakref.ref(target) if target is not None else None

    def bounds(self) -> Rect:
        return Rect.centered(self.pos, self.size, self.size)


@dataclass(slots=True, eq=False)
class WorldItem:
    """A loot object lying in the world, waiting to be picked up."""

    uid: int
    item_id: str
    quantity: int
    pos: Vector2
    size: float = 24.0
    can_pickup: bool = False
    active: bool = True
    despawn_timer: TimerHandle | None = None

    def bounds(self) -> Rect:
        return Rect.centered(self.pos, self.size, self.size)


@dataclass(slots=True, eq=False)
class HitVolume:
    """Transient attack region: a melee box or a moving projectile circle."""

    uid: int
    kind: VolumeKind
    source_id: int
    pos: Vector2
    rule: DamageRule
    lifetime: Countdown
    velocity: Vector2 = ZERO
    width: float = 0.0
    height: float = 0.0
    radius: float = 0.0
    active: bool = True

    def overlaps(self, rect: Rect) -> bool:
        if self.kind == VolumeKind.RANGED:
            return rect.intersects_circle(self.pos, self.radius)
        return Rect.centered(self.pos, self.width, self.height).overlaps(rect)
