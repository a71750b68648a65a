"""EngineManager: singleton wrapper that runs the WorldLoop on a background thread.

The API reads from an atomically-swapped immutable snapshot; the WorldLoop
mutates its WorldState exclusively on its own thread (single writer). API
actions travel to that thread as queued commands applied at the start of
the next tick.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path
from typing import TYPE_CHECKING

from arpg.api.schemas import WorldStateResponse
from arpg.core.definitions import GameData
from arpg.engine.commands import IDLE, TickInput
from arpg.engine.world_loop import WorldLoop
from arpg.utils.event_log import EventLog, SimEvent
from arpg.utils.persistence import JsonFileStore, LevelUnlocks, MemoryStore

if TYPE_CHECKING:
    from arpg.config import SimulationConfig
    from arpg.engine.commands import Command

logger = logging.getLogger(__name__)


class EngineManager:
    """Manages the simulation lifecycle on a background thread.

    Provides thread-safe access to:
      - latest snapshot (atomic reference swap)
      - event log (lock-guarded ring buffer)
      - control commands (start / pause / resume / step / reset)
      - player input (held movement plus one-shot attack triggers)
    """

    def __init__(
        self,
        config: SimulationConfig,
        data: GameData | None = None,
        save_path: str | Path | None = None,
    ) -> None:
        self._config = config
        self._data = data or GameData.load()
        self._tick_rate: float = config.tick_delta_ms / 1000.0

        store = JsonFileStore(save_path) if save_path is not None else MemoryStore()
        self._unlocks = LevelUnlocks(store, config.default_unlocked_level)

        self._loop: WorldLoop | None = None

        # Thread-safe shared state
        self._snapshot_lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._latest_snapshot: WorldStateResponse | None = None
        self._event_log = EventLog()
        self._input_lock = threading.Lock()
        self._held_input: TickInput = IDLE
        self._pending_melee = False
        self._pending_ranged = False

        # Control
        self._thread: threading.Thread | None = None
        self._running = threading.Event()
        self._paused = threading.Event()
        self._step_requested = threading.Event()
        self._stop_requested = threading.Event()
        self._step_done = threading.Event()

        self._build(config.start_level)

    # -- public properties --

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def paused(self) -> bool:
        return self._paused.is_set()

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    @tick_rate.setter
    def tick_rate(self, value: float) -> None:
        self._tick_rate = max(0.001, min(value, 2.0))

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def data(self) -> GameData:
        return self._data

    @property
    def unlocks(self) -> LevelUnlocks:
        return self._unlocks

    # -- snapshot access --

    def get_snapshot(self) -> WorldStateResponse | None:
        with self._snapshot_lock:
            return self._latest_snapshot

    # -- input and commands --

    def set_input(self, move_x: float, move_y: float, melee: bool = False, ranged: bool = False) -> None:
        """Store held movement; attack triggers fire once on the next tick."""
        with self._input_lock:
            self._held_input = TickInput(move_x=move_x, move_y=move_y)
            self._pending_melee = self._pending_melee or melee
            self._pending_ranged = self._pending_ranged or ranged

    def _take_input(self) -> TickInput:
        with self._input_lock:
            held = self._held_input
            tick_input = TickInput(move_x=held.move_x, move_y=held.move_y,
                                   melee=self._pending_melee, ranged=self._pending_ranged)
            self._pending_melee = False
            self._pending_ranged = False
        return tick_input

    def execute(self, command: Command, timeout: float = 2.0) -> bool:
        """Apply *command* and return its outcome.

        While ticking freely the command is queued for the engine thread;
        otherwise it is applied directly under the tick lock.
        """
        assert self._loop is not None
        if self.running and not self.paused:
            future: Future[bool] = Future()
            self._loop.submit(command, future)
            try:
                return future.result(timeout=timeout)
            except FutureTimeout:
                logger.warning("Command %r timed out waiting for the engine thread", command)
                return False
        with self._tick_lock:
            before = len(self._loop.tick_events)
            result = self._loop.apply_command(command)
            self._publish_snapshot_and_events(self._loop.tick_events[before:])
        return result

    # -- lifecycle --

    def start(self, paused: bool = False) -> None:
        if self._running.is_set():
            return
        self._stop_requested.clear()
        if paused:
            self._paused.set()
        else:
            self._paused.clear()
        self._running.set()
        self._thread = threading.Thread(target=self._run_loop, name="engine-loop", daemon=True)
        self._thread.start()
        logger.info("EngineManager started (tick_rate=%.3fs)", self._tick_rate)

    def pause(self) -> None:
        self._paused.set()
        logger.info("EngineManager paused at tick %d", self._current_tick())

    def resume(self) -> None:
        self._paused.clear()
        logger.info("EngineManager resumed at tick %d", self._current_tick())

    def step(self, timeout: float = 2.0) -> bool:
        """Execute exactly one tick, pausing first if needed.

        Blocks until the engine thread has finished the tick; returns False
        if it did not within *timeout* seconds.
        """
        if not self._running.is_set():
            self.start(paused=True)
        elif not self._paused.is_set():
            self.pause()
        self._step_done.clear()
        self._step_requested.set()
        return self._step_done.wait(timeout)

    def stop(self) -> None:
        self._stop_requested.set()
        self._paused.clear()
        self._running.clear()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        logger.info("EngineManager stopped.")

    def reset(self, level_id: str | None = None) -> bool:
        """Stop and rebuild on *level_id* (default: current level), left stopped."""
        target = level_id or (self._loop.world.level_id if self._loop else self._config.start_level)
        if self._data.level(target) is None:
            return False
        self.stop()
        self._event_log.clear()
        with self._input_lock:
            self._held_input = IDLE
            self._pending_melee = self._pending_ranged = False
        self._build(target)
        logger.info("EngineManager reset on level '%s'.", target)
        return True

    # -- internals --

    def _build(self, level_id: str) -> None:
        """Construct a WorldLoop and load *level_id*."""
        self._loop = WorldLoop(self._config, self._data, unlocks=self._unlocks)
        if not self._loop.load_level(level_id):
            logger.warning("Level '%s' unavailable, falling back to '%s'",
                           level_id, self._config.start_level)
            self._loop.load_level(self._config.start_level)
        self._publish_snapshot_and_events()

    def _run_loop(self) -> None:
        """Background thread main loop."""
        logger.info("Engine thread started.")
        assert self._loop is not None

        while not self._stop_requested.is_set():
            if self._paused.is_set() and not self._step_requested.is_set():
                time.sleep(0.01)
                continue

            single_step = self._step_requested.is_set()
            if single_step:
                self._step_requested.clear()

            with self._tick_lock:
                can_continue = self._loop.tick(tick_input=self._take_input())
                self._publish_snapshot_and_events()

            if single_step:
                self._step_done.set()

            if not can_continue:
                logger.info("Level ended at tick %d.", self._loop.world.tick)
                break

            if not single_step:
                time.sleep(self._tick_rate)

        self._running.clear()
        self._step_done.set()
        logger.info("Engine thread exited.")

    def _publish_snapshot_and_events(self, events: list[SimEvent] | None = None) -> None:
        assert self._loop is not None
        snap = WorldStateResponse.from_loop(self._loop)
        with self._snapshot_lock:
            self._latest_snapshot = snap

        if events is None:
            events = self._loop.tick_events
        if events:
            self._event_log.append_many(list(events))

    def _current_tick(self) -> int:
        if self._loop:
            return self._loop.world.tick
        return 0
