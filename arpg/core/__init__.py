"""Core data models: stats, entities, definitions, inventory and quests."""

from arpg.core.definitions import GameData
from arpg.core.enums import AIState, EquipSlot, Facing, ItemType, QuestStatus, Rarity
from arpg.core.inventory import Inventory
from arpg.core.models import Enemy, HitVolume, Player, Rect, Vector2, WorldItem
from arpg.core.quests import QuestTracker
from arpg.core.stats import Stats
from arpg.core.world_state import WorldState

__all__ = [
    "AIState",
    "Enemy",
    "EquipSlot",
    "Facing",
    "GameData",
    "HitVolume",
    "Inventory",
    "ItemType",
    "Player",
    "QuestStatus",
    "QuestTracker",
    "Rarity",
    "Rect",
    "Stats",
    "Vector2",
    "WorldItem",
    "WorldState",
]
