"""Static game definitions: enemy kinds, items, loot tables, quests, levels.

Definitions are pydantic models validated once at load time, so a malformed
entry is rejected before the simulation starts rather than when it is first
used. At runtime ``GameData`` is read-only; lookups of unknown ids log a
warning and hand back a safe default.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from arpg.core.enums import EquipSlot, ItemType, QuestStatus, Rarity
from arpg.core.errors import ConfigError
from arpg.core.stats import Stats

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class _Def(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------------
# Enemies
# ---------------------------------------------------------------------------

class EnemyTemplate(_Def):
    """Per-kind template copied into a fresh Stats at spawn."""

    name: str
    sprite: str = "enemy_normal"
    hp: int = Field(gt=0)
    max_hp: int | None = Field(None, gt=0)
    attack: int = Field(0, ge=0)
    defense: int = Field(0, ge=0)
    speed: float = Field(ge=0)
    damage: int = Field(10, ge=0)
    chase_distance: float = Field(gt=0)
    xp_reward: int = Field(10, ge=0)
    loot_table: str = "common_enemy"

    def to_stats(self) -> Stats:
        return Stats(
            hp=self.hp,
            max_hp=self.max_hp or self.hp,
            attack=self.attack,
            defense=self.defense,
            speed=self.speed,
            damage=self.damage,
            chase_distance=self.chase_distance,
            xp_reward=self.xp_reward,
            loot_table=self.loot_table,
        )


FALLBACK_ENEMY = EnemyTemplate(
    name="Unknown", hp=10, speed=60.0, damage=5, chase_distance=100.0,
)


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

class HealEffect(_Def):
    type: Literal["heal"] = "heal"
    value: int = Field(gt=0)


class RestoreEffect(_Def):
    type: Literal["restore"] = "restore"
    value: float = Field(gt=0)


ItemEffect = Annotated[Union[HealEffect, RestoreEffect], Field(discriminator="type")]


class ItemDef(_Def):
    """Immutable blueprint for an item, referenced by its id."""

    name: str
    type: ItemType
    rarity: Rarity = Rarity.COMMON
    stackable: bool = False
    max_stack: int | None = Field(None, ge=1)
    effect: ItemEffect | None = None
    slot: EquipSlot | None = None
    stats: dict[str, int] = Field(default_factory=dict)
    description: str = ""
    frame: int = 0
    sprite: str | None = None
    custom_texture: bool = False

    @model_validator(mode="after")
    def _check_kind(self) -> ItemDef:
        if self.effect is not None and self.type != ItemType.CONSUMABLE:
            raise ValueError(f"effect given on non-consumable item of type {self.type.value}")
        if self.slot is not None and self.type in (ItemType.CURRENCY, ItemType.CONSUMABLE):
            raise ValueError(f"{self.type.value} items cannot be equipped")
        return self


# ---------------------------------------------------------------------------
# Loot tables
# ---------------------------------------------------------------------------

class LootEntry(_Def):
    id: str
    weight: float = Field(1.0, gt=0)
    min_qty: int = Field(1, ge=1)
    max_qty: int = Field(1, ge=1)

    @model_validator(mode="after")
    def _check_range(self) -> LootEntry:
        if self.max_qty < self.min_qty:
            raise ValueError(f"max_qty {self.max_qty} < min_qty {self.min_qty}")
        return self


class LootTable(_Def):
    drop_chance: float = Field(ge=0.0, le=1.0)
    rolls: int = Field(1, ge=0)
    guaranteed_items: list[str] = Field(default_factory=list)
    items: list[LootEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Quests
# ---------------------------------------------------------------------------

class ObjectiveDef(_Def):
    type: Literal["KILL"] = "KILL"
    target: str
    amount: int = Field(ge=1)
    current: int = Field(0, ge=0)


class QuestDef(_Def):
    title: str
    description: str = ""
    status: QuestStatus = QuestStatus.INACTIVE
    objectives: list[ObjectiveDef] = Field(min_length=1)
    xp_reward: int = Field(0, ge=0)
    gold_reward: int = Field(0, ge=0)


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

class Point(_Def):
    x: float
    y: float


class SpawnDef(_Def):
    kind: str
    x: float
    y: float


class WallDef(_Def):
    x: float
    y: float
    w: float = Field(gt=0)
    h: float = Field(gt=0)


class PlacedItem(_Def):
    item_id: str
    quantity: int = Field(1, ge=1)
    x: float
    y: float


class LevelDef(_Def):
    name: str
    next_level: str | None = None
    width: float = Field(1280.0, gt=0)
    height: float = Field(720.0, gt=0)
    player_start: Point = Point(x=640.0, y=360.0)
    spawns: list[SpawnDef] = Field(default_factory=list)
    walls: list[WallDef] = Field(default_factory=list)
    items: list[PlacedItem] = Field(default_factory=list)
    victory_quest: str | None = None
    auto_start_quests: list[str] = Field(default_factory=list)
    scripted_drops: bool = False

    @property
    def enemy_count(self) -> int:
        return len(self.spawns)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_ENEMIES = TypeAdapter(dict[str, EnemyTemplate])
_ITEMS = TypeAdapter(dict[str, ItemDef])
_LOOT = TypeAdapter(dict[str, LootTable])
_QUESTS = TypeAdapter(dict[str, QuestDef])
_LEVELS = TypeAdapter(dict[str, LevelDef])


def _validate(adapter: TypeAdapter, raw: Any, source: str) -> dict:
    try:
        return adapter.validate_python(raw)
    except ValidationError as exc:
        raise ConfigError(source, str(exc)) from exc


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(path.name, "file not found") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(path.name, f"invalid JSON: {exc}") from exc


@dataclass(frozen=True)
class GameData:
    """All static definitions, keyed by id. Read-only once constructed."""

    enemies: dict[str, EnemyTemplate]
    items: dict[str, ItemDef]
    loot_tables: dict[str, LootTable]
    quests: dict[str, QuestDef]
    levels: dict[str, LevelDef]

    def __post_init__(self) -> None:
        self._check_references()

    @classmethod
    def from_raw(
        cls,
        enemies: Any = None,
        items: Any = None,
        loot_tables: Any = None,
        quests: Any = None,
        levels: Any = None,
    ) -> GameData:
        """Validate plain dicts (as parsed from JSON) into definitions."""
        return cls(
            enemies=_validate(_ENEMIES, enemies or {}, "enemies"),
            items=_validate(_ITEMS, items or {}, "items"),
            loot_tables=_validate(_LOOT, loot_tables or {}, "loot_tables"),
            quests=_validate(_QUESTS, quests or {}, "quests"),
            levels=_validate(_LEVELS, levels or {}, "levels"),
        )

    @classmethod
    def load(cls, directory: str | Path | None = None) -> GameData:
        """Load and validate the JSON files in *directory* (default: bundled data)."""
        root = Path(directory) if directory is not None else DATA_DIR
        data = cls.from_raw(
            enemies=_read_json(root / "enemies.json"),
            items=_read_json(root / "items.json"),
            loot_tables=_read_json(root / "loot_tables.json"),
            quests=_read_json(root / "quests.json"),
            levels=_read_json(root / "levels.json"),
        )
        logger.info(
            "Loaded game data from %s: %d enemies, %d items, %d loot tables, %d quests, %d levels",
            root, len(data.enemies), len(data.items), len(data.loot_tables),
            len(data.quests), len(data.levels),
        )
        return data

    def _check_references(self) -> None:
        for table_id, table in self.loot_tables.items():
            for item_id in table.guaranteed_items:
                if item_id not in self.items:
                    raise ConfigError("loot_tables", f"{table_id}: unknown guaranteed item '{item_id}'")
            for entry in table.items:
                if entry.id not in self.items:
                    raise ConfigError("loot_tables", f"{table_id}: unknown item '{entry.id}'")
        for kind, tmpl in self.enemies.items():
            if tmpl.loot_table and tmpl.loot_table not in self.loot_tables:
                raise ConfigError("enemies", f"{kind}: unknown loot table '{tmpl.loot_table}'")
        for level_id, level in self.levels.items():
            for spawn in level.spawns:
                if spawn.kind not in self.enemies:
                    raise ConfigError("levels", f"{level_id}: unknown enemy kind '{spawn.kind}'")
            for placed in level.items:
                if placed.item_id not in self.items:
                    raise ConfigError("levels", f"{level_id}: unknown item '{placed.item_id}'")
            quest_refs = list(level.auto_start_quests)
            if level.victory_quest:
                quest_refs.append(level.victory_quest)
            for quest_id in quest_refs:
                if quest_id not in self.quests:
                    raise ConfigError("levels", f"{level_id}: unknown quest '{quest_id}'")
            if level.next_level and level.next_level not in self.levels:
                raise ConfigError("levels", f"{level_id}: unknown next level '{level.next_level}'")

    # -- lookups (ConfigMissing: warn + safe default) --

    def item(self, item_id: str) -> ItemDef | None:
        item = self.items.get(item_id)
        if item is None:
            logger.warning("Item '%s' not found in item definitions", item_id)
        return item

    def enemy_template(self, kind: str) -> EnemyTemplate:
        tmpl = self.enemies.get(kind)
        if tmpl is None:
            logger.warning("Enemy kind '%s' not found, using fallback template", kind)
            return FALLBACK_ENEMY
        return tmpl

    def loot_table(self, table_id: str) -> LootTable | None:
        table = self.loot_tables.get(table_id)
        if table is None:
            logger.warning("Loot table '%s' not found", table_id)
        return table

    def level(self, level_id: str) -> LevelDef | None:
        level = self.levels.get(level_id)
        if level is None:
            logger.warning("Level '%s' not found", level_id)
        return level
