"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import Enum, IntEnum, unique


@unique
class AIState(str, Enum):
    """Finite-state-machine states for enemy AI."""

    PATROL = "PATROL"
    CHASE = "CHASE"


@unique
class Facing(str, Enum):
    """Horizontal facing used to aim melee swings and idle projectiles."""

    LEFT = "left"
    RIGHT = "right"


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    LOOT = 0
    DROP_PLAN = 1
    COMBAT = 2
    SPAWN = 3


@unique
class ItemType(str, Enum):
    """Item categories."""

    CURRENCY = "CURRENCY"
    CONSUMABLE = "CONSUMABLE"
    WEAPON = "WEAPON"
    ARMOR = "ARMOR"
    ACCESSORY = "ACCESSORY"
    MATERIAL = "MATERIAL"
    QUEST = "QUEST"


@unique
class Rarity(str, Enum):
    """Item rarity tiers."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


# UI tint per rarity (0xRRGGBB), surfaced to the rendering layer as a hint.
RARITY_COLORS: dict[Rarity, int] = {
    Rarity.COMMON: 0xFFFFFF,
    Rarity.UNCOMMON: 0x00FF00,
    Rarity.RARE: 0x0066FF,
    Rarity.EPIC: 0x9900FF,
    Rarity.LEGENDARY: 0xFF9900,
}


@unique
class EquipSlot(str, Enum):
    """The five recognized equipment slots."""

    MAIN_HAND = "main_hand"
    OFF_HAND = "off_hand"
    HEAD = "head"
    BODY = "body"
    ACCESSORY = "accessory"


@unique
class EffectKind(str, Enum):
    """Declarative consumable effect kinds."""

    HEAL = "heal"
    RESTORE = "restore"


@unique
class ObjectiveType(str, Enum):
    """Quest objective kinds."""

    KILL = "KILL"


@unique
class QuestStatus(str, Enum):
    """Quest lifecycle: INACTIVE -> ACTIVE -> COMPLETED."""

    INACTIVE = "INACTIVE"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


@unique
class VolumeKind(str, Enum):
    """Hit volume shapes produced by player attacks."""

    MELEE = "melee"
    RANGED = "ranged"
