"""Synchronous, typed event bus: the causality backbone of a tick.

Events are frozen dataclasses. Handlers subscribe by event class (or to
everything) and run synchronously, in subscription order, inside
``publish``. A handler that raises is logged and does not stop the
remaining handlers or the publisher.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, ClassVar, TypeVar

from arpg.core.listeners import Subscription

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Event types
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Event:
    name: ClassVar[str] = "EVENT"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.name, **asdict(self)}


@dataclass(frozen=True, slots=True)
class EnemyDeath(Event):
    name: ClassVar[str] = "ENEMY_DEATH"

    enemy_id: int
    enemy_kind: str
    position: tuple[float, float]
    xp_reward: int
    loot: tuple[tuple[str, int], ...] = ()


@dataclass(frozen=True, slots=True)
class PlayerDeath(Event):
    name: ClassVar[str] = "PLAYER_DEATH"


@dataclass(frozen=True, slots=True)
class PlayerStatsChanged(Event):
    name: ClassVar[str] = "PLAYER_STATS_CHANGED"

    stats: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class InventoryUpdated(Event):
    name: ClassVar[str] = "INVENTORY_UPDATED"

    inventory: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DropItem(Event):
    name: ClassVar[str] = "DROP_ITEM"

    item_id: str
    quantity: int
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class EnemyStateChanged(Event):
    name: ClassVar[str] = "ENEMY_STATE_CHANGED"

    enemy_id: int
    state: str
    texture: str


@dataclass(frozen=True, slots=True)
class QuestsUpdated(Event):
    name: ClassVar[str] = "QUESTS_UPDATED"

    quests: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LevelComplete(Event):
    name: ClassVar[str] = "LEVEL_COMPLETE"

    level_id: str
    next_level: str | None = None


E = TypeVar("E", bound=Event)
Handler = Callable[[Any], None]


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------

class EventBus:
    """Publish/subscribe keyed on event class."""

    __slots__ = ("_handlers", "_wildcard", "_published")

    def __init__(self) -> None:
        self._handlers: dict[type[Event], list[Handler]] = defaultdict(list)
        self._wildcard: list[Handler] = []
        self._published = 0

    @property
    def published_count(self) -> int:
        return self._published

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Subscription:
        handlers = self._handlers[event_type]
        handlers.append(handler)
        return Subscription(lambda: self._detach(handlers, handler))

    def subscribe_all(self, handler: Callable[[Event], None]) -> Subscription:
        self._wildcard.append(handler)
        return Subscription(lambda: self._detach(self._wildcard, handler))

    @staticmethod
    def _detach(handlers: list[Handler], handler: Handler) -> None:
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    def publish(self, event: Event) -> None:
        self._published += 1
        logger.debug("Publish %s", event.name)
        for handler in list(self._handlers.get(type(event), ())) + list(self._wildcard):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed on %s", handler, event.name)

    def clear(self) -> None:
        self._handlers.clear()
        self._wildcard.clear()
