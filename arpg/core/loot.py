"""Loot generation: weighted rolls against static loot tables.

Algorithm for ``roll_loot(table_id)``:
  1. Unknown table -> nothing drops (logged, non-fatal).
  2. One draw against ``drop_chance``; above it, nothing drops.
  3. Every guaranteed item drops once.
  4. ``rolls`` weighted picks from ``items``, each with a uniform quantity
     in ``[min_qty, max_qty]``.
  5. Repeated item ids are merged, keeping first-appearance order.

The generator is pure apart from its random source; seed the source and the
result is reproducible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from arpg.systems.rng import rand_int

if TYPE_CHECKING:
    from arpg.core.definitions import GameData, LootEntry
    from arpg.systems.rng import RandomSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LootDrop:
    """One consolidated drop: an item id and how many of it."""

    item_id: str
    quantity: int

    def to_dict(self) -> dict:
        return {"item_id": self.item_id, "quantity": self.quantity}


def weighted_select(entries: Sequence[LootEntry], source: RandomSource) -> LootEntry | None:
    """Pick one entry proportionally to its weight.

    The first entry whose cumulative weight reaches the draw wins; the last
    entry catches floating-point leftovers.
    """
    if not entries:
        return None
    total = sum(e.weight for e in entries)
    remaining = source.random() * total
    for entry in entries:
        remaining -= entry.weight
        if remaining <= 0:
            return entry
    return entries[-1]


def consolidate(drops: Sequence[LootDrop]) -> list[LootDrop]:
    merged: dict[str, int] = {}
    for drop in drops:
        merged[drop.item_id] = merged.get(drop.item_id, 0) + drop.quantity
    return [LootDrop(item_id, qty) for item_id, qty in merged.items()]


class LootGenerator:
    """Rolls loot tables from GameData using an injected random source."""

    __slots__ = ("_data", "_source")

    def __init__(self, data: GameData, source: RandomSource) -> None:
        self._data = data
        self._source = source

    def roll_loot(self, table_id: str) -> list[LootDrop]:
        table = self._data.loot_tables.get(table_id)
        if table is None:
            logger.warning("Loot table '%s' not found!", table_id)
            return []

        draw = self._source.random()
        if table.drop_chance <= 0.0 or draw > table.drop_chance:
            return []

        drops = [LootDrop(item_id, 1) for item_id in table.guaranteed_items]

        for _ in range(table.rolls):
            entry = weighted_select(table.items, self._source)
            if entry is None:
                continue
            qty = rand_int(self._source, entry.min_qty, entry.max_qty)
            drops.append(LootDrop(entry.id, qty))

        result = consolidate(drops)
        logger.debug("Rolled '%s': %s", table_id, result)
        return result
