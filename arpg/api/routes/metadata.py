"""Metadata endpoints: expose the static game definitions.

The definition models in ``arpg.core.definitions`` are served as-is, so
clients see exactly what the engine validated at load time.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from arpg.api.dependencies import get_engine_manager
from arpg.api.engine_manager import EngineManager
from arpg.core.definitions import EnemyTemplate, ItemDef, LevelDef, LootTable, QuestDef

router = APIRouter(prefix="/metadata", tags=["Metadata"])


@router.get("/items", response_model=dict[str, ItemDef])
def get_items(manager: EngineManager = Depends(get_engine_manager)) -> dict[str, ItemDef]:
    return manager.data.items


@router.get("/items/{item_id}", response_model=ItemDef)
def get_item(item_id: str, manager: EngineManager = Depends(get_engine_manager)) -> ItemDef:
    item = manager.data.items.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Unknown item '{item_id}'.")
    return item


@router.get("/enemies", response_model=dict[str, EnemyTemplate])
def get_enemies(manager: EngineManager = Depends(get_engine_manager)) -> dict[str, EnemyTemplate]:
    return manager.data.enemies


@router.get("/loot-tables", response_model=dict[str, LootTable])
def get_loot_tables(manager: EngineManager = Depends(get_engine_manager)) -> dict[str, LootTable]:
    return manager.data.loot_tables


@router.get("/quests", response_model=dict[str, QuestDef])
def get_quests(manager: EngineManager = Depends(get_engine_manager)) -> dict[str, QuestDef]:
    return manager.data.quests


@router.get("/levels", response_model=dict[str, LevelDef])
def get_levels(manager: EngineManager = Depends(get_engine_manager)) -> dict[str, LevelDef]:
    return manager.data.levels
