"""Replay serialization: records tick-by-tick state and events for later review."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from arpg.core.world_state import WorldState
    from arpg.utils.event_log import SimEvent

logger = logging.getLogger(__name__)


class ReplayRecorder:
    """Accumulates tick records and flushes them to a JSON replay file."""

    __slots__ = ("_path", "_ticks", "_seed", "_every")

    def __init__(self, path: str | Path, seed: int, every: int = 1) -> None:
        self._path = Path(path)
        self._seed = seed
        self._every = max(1, every)
        self._ticks: list[dict[str, Any]] = []

    @property
    def path(self) -> Path:
        return self._path

    @property
    def recorded(self) -> int:
        return len(self._ticks)

    def record_tick(self, world: WorldState, events: list[SimEvent]) -> None:
        # Ticks with events are always kept; quiet ticks are sampled.
        if not events and world.tick % self._every != 0:
            return
        player = world.player
        self._ticks.append(
            {
                "tick": world.tick,
                "player": {
                    "pos": [player.pos.x, player.pos.y],
                    "hp": player.stats.hp,
                    "mana": round(player.stats.mana, 2),
                },
                "enemies": [
                    {
                        "id": e.id,
                        "kind": e.kind,
                        "pos": [e.pos.x, e.pos.y],
                        "hp": e.stats.hp,
                        "state": e.state.value,
                    }
                    for e in world.living_enemies()
                ],
                "events": [e.data for e in events],
            }
        )

    def flush(self) -> None:
        """Write accumulated data to disk."""
        replay = {
            "version": "1.0",
            "seed": self._seed,
            "total_ticks": len(self._ticks),
            "ticks": self._ticks,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(replay, indent=2), encoding="utf-8")
        logger.info("Replay saved to %s (%d ticks)", self._path, len(self._ticks))
