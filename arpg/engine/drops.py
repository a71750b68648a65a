"""Per-level drop plan: decides which kills leave something on the ground.

Two modes:
  - Scripted: at level start pick kill ordinals in [1, enemy_count] for the
    rolled loot, one med_kit and one energy_kit. Ordinals are distinct
    whenever there are enough enemies. Each fires at most once per level.
  - Unscripted: every kill's rolled loot drops.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from arpg.systems.rng import rand_int

if TYPE_CHECKING:
    from arpg.systems.rng import RandomSource

logger = logging.getLogger(__name__)

MED_KIT = "med_kit"
ENERGY_KIT = "energy_kit"


@dataclass(frozen=True, slots=True)
class PlannedDrop:
    item_id: str
    quantity: int
    offset_x: float = 0.0


@dataclass(slots=True)
class DropPlan:
    """Kill-ordinal schedule for one level."""

    scripted: bool = False
    loot_on_kill: int = 0
    med_kit_on_kill: int = 0
    energy_kit_on_kill: int = 0
    kit_offset: float = 20.0
    _fired: set[str] = field(default_factory=set)

    @classmethod
    def unscripted(cls) -> DropPlan:
        return cls(scripted=False)

    @classmethod
    def roll(cls, enemy_count: int, source: RandomSource, kit_offset: float = 20.0) -> DropPlan:
        """Pick the scripted ordinals. Levels without enemies still get ordinal 1."""
        n = max(enemy_count, 1)
        used: set[int] = set()

        def pick() -> int:
            ordinal = rand_int(source, 1, n)
            while ordinal in used and len(used) < n:
                ordinal = rand_int(source, 1, n)
            used.add(ordinal)
            return ordinal

        med = pick()
        energy = pick()
        loot = pick()
        logger.info("Drop plan: loot on kill #%d, med_kit on #%d, energy_kit on #%d",
                    loot, med, energy)
        return cls(scripted=True, loot_on_kill=loot, med_kit_on_kill=med,
                   energy_kit_on_kill=energy, kit_offset=kit_offset)

    def _once(self, key: str, ordinal: int, kill_number: int) -> bool:
        if key in self._fired or kill_number != ordinal:
            return False
        self._fired.add(key)
        return True

    def drops_for_kill(self, kill_number: int, loot: list[tuple[str, int]]) -> list[PlannedDrop]:
        """Items to spawn for the *kill_number*-th kill (1-based) given its rolled loot."""
        if not self.scripted:
            return [PlannedDrop(item_id, qty) for item_id, qty in loot]

        drops: list[PlannedDrop] = []
        if self._once("loot", self.loot_on_kill, kill_number):
            drops.extend(PlannedDrop(item_id, qty) for item_id, qty in loot)
        if self._once(MED_KIT, self.med_kit_on_kill, kill_number):
            drops.append(PlannedDrop(MED_KIT, 1, self.kit_offset))
        if self._once(ENERGY_KIT, self.energy_kit_on_kill, kill_number):
            drops.append(PlannedDrop(ENERGY_KIT, 1, self.kit_offset))
        return drops
