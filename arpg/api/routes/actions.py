"""Player actions: movement input, inventory, quests and level unlocks.

Inventory and quest actions are executed on the engine thread when it is
ticking, so the response reflects the real outcome.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from arpg.api.dependencies import get_engine_manager
from arpg.api.engine_manager import EngineManager
from arpg.api.schemas import (
    ActionResponse,
    InputRequest,
    ItemActionRequest,
    UnequipRequest,
    UnlockedLevelsResponse,
)
from arpg.engine.commands import (
    Command,
    DropFromInventory,
    EquipItem,
    StartQuest,
    UnequipItem,
    UseItem,
)

router = APIRouter()


def _run(manager: EngineManager, command: Command, failure: str) -> ActionResponse:
    if not manager.execute(command):
        raise HTTPException(status_code=409, detail=failure)
    return ActionResponse(status="ok")


def _require_item(manager: EngineManager, item_id: str) -> None:
    if item_id not in manager.data.items:
        raise HTTPException(status_code=404, detail=f"Unknown item '{item_id}'.")


@router.post("/input", response_model=ActionResponse)
def set_input(
    body: InputRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    manager.set_input(body.move_x, body.move_y, melee=body.melee, ranged=body.ranged)
    return ActionResponse(status="ok")


@router.post("/inventory/use", response_model=ActionResponse)
def use_item(
    body: ItemActionRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    _require_item(manager, body.item_id)
    return _run(manager, UseItem(body.item_id), f"Cannot use '{body.item_id}'.")


@router.post("/inventory/equip", response_model=ActionResponse)
def equip_item(
    body: ItemActionRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    _require_item(manager, body.item_id)
    return _run(manager, EquipItem(body.item_id), f"Cannot equip '{body.item_id}'.")


@router.post("/inventory/unequip", response_model=ActionResponse)
def unequip_item(
    body: UnequipRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    return _run(manager, UnequipItem(body.slot), f"Cannot unequip slot '{body.slot.value}'.")


@router.post("/inventory/drop", response_model=ActionResponse)
def drop_item(
    body: ItemActionRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    _require_item(manager, body.item_id)
    return _run(manager, DropFromInventory(body.item_id, body.quantity),
                f"Cannot drop {body.quantity} x '{body.item_id}'.")


@router.post("/quests/{quest_id}/start", response_model=ActionResponse)
def start_quest(
    quest_id: str,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    if quest_id not in manager.data.quests:
        raise HTTPException(status_code=404, detail=f"Unknown quest '{quest_id}'.")
    return _run(manager, StartQuest(quest_id), f"Quest '{quest_id}' is not inactive.")


@router.get("/levels/unlocked", response_model=UnlockedLevelsResponse)
def unlocked_levels(manager: EngineManager = Depends(get_engine_manager)) -> UnlockedLevelsResponse:
    return UnlockedLevelsResponse(unlocked=manager.unlocks.unlocked_levels())
