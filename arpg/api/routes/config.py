"""GET /api/v1/config: expose simulation configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from arpg.api.dependencies import get_engine_manager
from arpg.api.engine_manager import EngineManager
from arpg.api.schemas import SimulationConfigResponse

router = APIRouter()


@router.get("/config", response_model=SimulationConfigResponse)
def get_config(
    manager: EngineManager = Depends(get_engine_manager),
) -> SimulationConfigResponse:
    cfg = manager.config
    return SimulationConfigResponse(
        world_seed=cfg.world_seed,
        start_level=cfg.start_level,
        tick_delta_ms=cfg.tick_delta_ms,
        max_ticks=cfg.max_ticks,
        inventory_capacity=cfg.inventory_capacity,
        default_max_stack=cfg.default_max_stack,
        engage_range=cfg.engage_range,
        enemy_attack_cooldown_ms=cfg.enemy_attack_cooldown_ms,
        player_invulnerable_ms=cfg.player_invulnerable_ms,
        melee_lifetime_ms=cfg.melee_lifetime_ms,
        ranged_mana_cost=cfg.ranged_mana_cost,
        ranged_lifetime_ms=cfg.ranged_lifetime_ms,
        item_pickup_delay_ms=cfg.item_pickup_delay_ms,
        item_despawn_ms=cfg.item_despawn_ms,
        tick_rate=manager.tick_rate,
    )
