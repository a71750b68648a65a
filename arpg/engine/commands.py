"""Player input and the thread-safe command queue feeding the WorldLoop."""

from __future__ import annotations

import queue
from concurrent.futures import Future
from dataclasses import dataclass

from arpg.core.enums import EquipSlot, Facing


@dataclass(frozen=True, slots=True)
class TickInput:
    """Per-tick player input: a movement direction plus attack edge triggers."""

    move_x: float = 0.0
    move_y: float = 0.0
    melee: bool = False
    ranged: bool = False
    face: Facing | None = None       # turn without moving


IDLE = TickInput()


# ---------------------------------------------------------------------------
# Commands (UI / API actions applied at the start of a tick)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class UseItem:
    item_id: str


@dataclass(frozen=True, slots=True)
class EquipItem:
    item_id: str


@dataclass(frozen=True, slots=True)
class UnequipItem:
    slot: EquipSlot


@dataclass(frozen=True, slots=True)
class DropFromInventory:
    item_id: str
    quantity: int = 1


@dataclass(frozen=True, slots=True)
class StartQuest:
    quest_id: str


Command = UseItem | EquipItem | UnequipItem | DropFromInventory | StartQuest


class CommandQueue:
    """MPSC queue: API threads push commands; the WorldLoop drains them each tick.

    A producer that needs the outcome passes a Future, resolved with the
    command's boolean result on the engine thread.
    """

    __slots__ = ("_queue",)

    def __init__(self) -> None:
        self._queue: queue.Queue[tuple[Command, Future | None]] = queue.Queue()

    def push(self, command: Command, future: Future | None = None) -> None:
        """Thread-safe enqueue."""
        self._queue.put_nowait((command, future))

    def drain(self) -> list[tuple[Command, Future | None]]:
        commands: list[tuple[Command, Future | None]] = []
        while True:
            try:
                commands.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return commands

    @property
    def empty(self) -> bool:
        return self._queue.empty()
