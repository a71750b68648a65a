"""Inventory store: stackable item slots, equipment slots, and gold.

The store owns every mutation of the player's possessions. Each public
mutator either succeeds completely and notifies listeners once, or fails
(returns False) with no mutation and no notification. Mutations are staged
on a copy of the slot list and committed only when the whole operation fits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, Field, ValidationError

from arpg.core.enums import EffectKind, EquipSlot, ItemType
from arpg.core.listeners import Listeners, Subscription
from arpg.core.stats import heal, restore_mana

if TYPE_CHECKING:
    from arpg.core.definitions import GameData, ItemDef
    from arpg.core.stats import Stats

logger = logging.getLogger(__name__)

BASE_EQUIPMENT_STATS = ("attack", "defense", "speed")


@dataclass(slots=True)
class InventorySlot:
    """One stack: an item id and a quantity >= 1."""

    item_id: str
    quantity: int

    def copy(self) -> InventorySlot:
        return InventorySlot(self.item_id, self.quantity)

    def to_dict(self) -> dict:
        return {"item_id": self.item_id, "quantity": self.quantity}


class _SlotModel(BaseModel):
    item_id: str
    quantity: int = Field(ge=1)


class InventorySnapshot(BaseModel):
    """Validated shape of serialized inventory data."""

    items: list[_SlotModel] = Field(default_factory=list)
    gold: int = Field(0, ge=0)
    equipment: dict[EquipSlot, str | None] = Field(default_factory=dict)


def _empty_equipment() -> dict[EquipSlot, str | None]:
    return {slot: None for slot in EquipSlot}


class Inventory:
    """Player inventory: fixed-capacity slots, five equipment slots, gold."""

    __slots__ = ("_data", "_capacity", "_default_max_stack", "_slots", "_equipment", "gold", "_listeners")

    def __init__(self, data: GameData, capacity: int = 24, default_max_stack: int = 99) -> None:
        self._data = data
        self._capacity = capacity
        self._default_max_stack = default_max_stack
        self._slots: list[InventorySlot] = []
        self._equipment: dict[EquipSlot, str | None] = _empty_equipment()
        self.gold: int = 0
        self._listeners: Listeners[Inventory] = Listeners("inventory")

    # -- read accessors --

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def items(self) -> list[InventorySlot]:
        return [s.copy() for s in self._slots]

    @property
    def equipment(self) -> dict[EquipSlot, str | None]:
        return dict(self._equipment)

    @property
    def used_slots(self) -> int:
        return len(self._slots)

    @property
    def is_full(self) -> bool:
        return len(self._slots) >= self._capacity

    def has_item(self, item_id: str, quantity: int = 1) -> bool:
        return self.get_item_count(item_id) >= quantity

    def get_item_count(self, item_id: str) -> int:
        return sum(s.quantity for s in self._slots if s.item_id == item_id)

    def get_equipment_stats(self) -> dict[str, int]:
        """Sum per-stat bonuses across everything currently equipped."""
        totals = {name: 0 for name in BASE_EQUIPMENT_STATS}
        for item_id in self._equipment.values():
            if item_id is None:
                continue
            item = self._data.items.get(item_id)
            if item is None:
                continue
            for stat, value in item.stats.items():
                totals[stat] = totals.get(stat, 0) + value
        return totals

    # -- notifications --

    def on_change(self, callback: Callable[[Inventory], None]) -> Subscription:
        return self._listeners.add(callback)

    def _notify_change(self) -> None:
        self._listeners.notify(self)

    # -- staging helpers (operate on a working copy) --

    def _max_stack(self, item: ItemDef) -> int:
        return item.max_stack or self._default_max_stack

    def _place(self, slots: list[InventorySlot], item_id: str, item: ItemDef, quantity: int) -> bool:
        if item.stackable:
            max_stack = self._max_stack(item)
            existing = next(
                (s for s in slots if s.item_id == item_id and s.quantity < max_stack), None)
            if existing is not None:
                added = min(quantity, max_stack - existing.quantity)
                existing.quantity += added
                overflow = quantity - added
                if overflow > 0:
                    return self._new_stack(slots, item_id, overflow)
                return True
        return self._new_stack(slots, item_id, quantity)

    def _new_stack(self, slots: list[InventorySlot], item_id: str, quantity: int) -> bool:
        if len(slots) >= self._capacity:
            return False
        slots.append(InventorySlot(item_id, quantity))
        return True

    @staticmethod
    def _take(slots: list[InventorySlot], item_id: str, quantity: int) -> bool:
        for i, slot in enumerate(slots):
            if slot.item_id == item_id:
                slot.quantity -= quantity
                if slot.quantity <= 0:
                    del slots[i]
                return True
        return False

    def _staged(self) -> list[InventorySlot]:
        return [s.copy() for s in self._slots]

    # -- mutators --

    def add_item(self, item_id: str, quantity: int = 1) -> bool:
        item = self._data.item(item_id)
        if item is None:
            return False
        if quantity <= 0:
            logger.debug("Refusing to add non-positive quantity %d of '%s'", quantity, item_id)
            return False

        if item.type == ItemType.CURRENCY:
            self.gold += quantity
            logger.info("Added %d gold. Total: %d", quantity, self.gold)
            self._notify_change()
            return True

        slots = self._staged()
        if not self._place(slots, item_id, item, quantity):
            logger.info("Inventory full! Could not add %dx %s", quantity, item.name)
            return False
        self._slots = slots
        logger.info("Added %dx %s to inventory (%d/%d slots)", quantity, item.name,
                    len(self._slots), self._capacity)
        self._notify_change()
        return True

    def add_gold(self, amount: int) -> bool:
        if amount <= 0:
            return False
        self.gold += amount
        self._notify_change()
        return True

    def remove_item(self, item_id: str, quantity: int = 1) -> bool:
        if quantity <= 0:
            return False
        if not self._take(self._slots, item_id, quantity):
            logger.debug("Item '%s' not in inventory.", item_id)
            return False
        self._notify_change()
        return True

    def use_item(self, item_id: str, target: Stats) -> bool:
        """Apply a consumable's effect to *target* and consume one unit."""
        item = self._data.item(item_id)
        if item is None:
            return False
        if item.type != ItemType.CONSUMABLE:
            logger.info("Cannot use %s - not consumable.", item.name)
            return False
        if not self.has_item(item_id):
            logger.info("No %s in inventory.", item.name)
            return False

        effect = item.effect
        if effect is not None and effect.type == EffectKind.HEAL:
            healed = heal(target, effect.value)
            logger.info("Used %s: healed %d HP.", item.name, healed)
        elif effect is not None and effect.type == EffectKind.RESTORE:
            restored = restore_mana(target, effect.value)
            logger.info("Used %s: restored %.1f mana.", item.name, restored)
        else:
            logger.info("Used %s: no effect.", item.name)

        return self.remove_item(item_id, 1)

    def equip_item(self, item_id: str) -> bool:
        """Move one unit of *item_id* into its equipment slot, swapping out the occupant."""
        item = self._data.item(item_id)
        if item is None or item.slot is None:
            logger.info("Cannot equip %s - no slot defined.", item_id)
            return False
        if not self.has_item(item_id):
            logger.info("No %s in inventory.", item.name)
            return False

        slots = self._staged()
        current = self._equipment[item.slot]
        if current is not None:
            current_def = self._data.items.get(current)
            if current_def is None or not self._place(slots, current, current_def, 1):
                logger.info("Inventory full - cannot swap out %s.", current)
                return False
        self._take(slots, item_id, 1)

        self._slots = slots
        self._equipment[item.slot] = item_id
        logger.info("Equipped %s to %s.", item.name, item.slot.value)
        self._notify_change()
        return True

    def unequip_item(self, slot: EquipSlot | str) -> bool:
        try:
            slot = EquipSlot(slot)
        except ValueError:
            logger.info("Unknown equipment slot '%s'.", slot)
            return False
        item_id = self._equipment[slot]
        if item_id is None:
            logger.info("No item equipped in %s.", slot.value)
            return False
        item = self._data.items.get(item_id)
        slots = self._staged()
        if item is None or not self._place(slots, item_id, item, 1):
            logger.info("Inventory full - cannot unequip.")
            return False

        self._slots = slots
        self._equipment[slot] = None
        self._notify_change()
        return True

    def clear(self) -> None:
        self._slots = []
        self.gold = 0
        self._equipment = _empty_equipment()
        self._notify_change()

    # -- serialization --

    def serialize(self) -> dict:
        return {
            "items": [s.to_dict() for s in self._slots],
            "gold": self.gold,
            "equipment": {slot.value: item_id for slot, item_id in self._equipment.items()},
        }

    def deserialize(self, payload: dict) -> bool:
        """Load a serialized inventory. Malformed data is rejected untouched."""
        try:
            snap = InventorySnapshot.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Rejected inventory payload: %s", exc)
            return False
        if len(snap.items) > self._capacity:
            logger.warning("Rejected inventory payload: %d slots exceeds capacity %d",
                           len(snap.items), self._capacity)
            return False
        referenced = [s.item_id for s in snap.items] + [i for i in snap.equipment.values() if i]
        unknown = [i for i in referenced if i not in self._data.items]
        if unknown:
            logger.warning("Rejected inventory payload: unknown items %s", unknown)
            return False

        self._slots = [InventorySlot(s.item_id, s.quantity) for s in snap.items]
        self.gold = snap.gold
        equipment = _empty_equipment()
        equipment.update(snap.equipment)
        self._equipment = equipment
        self._notify_change()
        return True
