"""Pydantic response and request models for the REST API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from arpg.core.enums import EquipSlot

if TYPE_CHECKING:
    from arpg.engine.world_loop import WorldLoop


# --- Entities ---

class StatsSchema(BaseModel):
    hp: int
    max_hp: int
    mana: float = 0.0
    max_mana: float = 0.0
    attack: int = 0
    defense: int = 0
    speed: float = 0.0
    level: int = 1
    xp: int = 0
    xp_to_next: int = 100


class PlayerSchema(BaseModel):
    id: int
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    facing: str
    invulnerable: bool = False
    hit_stun: bool = False
    stats: StatsSchema


class EnemySchema(BaseModel):
    id: int
    kind: str
    name: str = ""
    x: float
    y: float
    hp: int
    max_hp: int
    state: str
    texture: str
    is_hit: bool = False
    attack_cooldown: float = 0.0


class WorldItemSchema(BaseModel):
    uid: int
    item_id: str
    quantity: int
    x: float
    y: float
    can_pickup: bool


class VolumeSchema(BaseModel):
    uid: int
    kind: str
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    radius: float = 0.0


# --- Inventory / quests ---

class SlotSchema(BaseModel):
    item_id: str
    quantity: int


class InventorySchema(BaseModel):
    items: list[SlotSchema] = Field(default_factory=list)
    gold: int = 0
    equipment: dict[str, str | None] = Field(default_factory=dict)
    equipment_stats: dict[str, int] = Field(default_factory=dict)
    capacity: int = 24


class ObjectiveSchema(BaseModel):
    type: str
    target: str
    amount: int
    current: int


class QuestSchema(BaseModel):
    quest_id: str
    title: str
    description: str = ""
    status: str
    objectives: list[ObjectiveSchema] = Field(default_factory=list)
    xp_reward: int = 0
    gold_reward: int = 0


# --- State ---

class WorldStateResponse(BaseModel):
    """Immutable per-tick snapshot published by the engine thread."""

    model_config = ConfigDict(frozen=True)

    tick: int
    elapsed_ms: float
    level_id: str
    width: float
    height: float
    victory: bool = False
    defeat: bool = False
    kills: int = 0
    player: PlayerSchema
    enemies: list[EnemySchema] = Field(default_factory=list)
    items: list[WorldItemSchema] = Field(default_factory=list)
    volumes: list[VolumeSchema] = Field(default_factory=list)
    inventory: InventorySchema
    quests: list[QuestSchema] = Field(default_factory=list)

    @classmethod
    def from_loop(cls, loop: WorldLoop) -> WorldStateResponse:
        world = loop.world
        p = world.player
        inv = loop.inventory
        return cls(
            tick=world.tick,
            elapsed_ms=world.elapsed_ms,
            level_id=world.level_id,
            width=world.width,
            height=world.height,
            victory=world.victory,
            defeat=world.defeat,
            kills=world.kills,
            player=PlayerSchema(
                id=p.id, x=p.pos.x, y=p.pos.y, vx=p.velocity.x, vy=p.velocity.y,
                facing=p.facing.value, invulnerable=p.is_invulnerable,
                hit_stun=p.hit_stun.active,
                stats=StatsSchema.model_validate(p.stats.to_dict()),
            ),
            enemies=[
                EnemySchema(
                    id=e.id, kind=e.kind, name=e.name, x=e.pos.x, y=e.pos.y,
                    hp=e.stats.hp, max_hp=e.stats.max_hp, state=e.state.value,
                    texture=e.texture, is_hit=e.is_hit.active,
                    attack_cooldown=e.attack_cooldown,
                )
                for e in world.living_enemies()
            ],
            items=[
                WorldItemSchema(uid=i.uid, item_id=i.item_id, quantity=i.quantity,
                                x=i.pos.x, y=i.pos.y, can_pickup=i.can_pickup)
                for i in world.items.values()
            ],
            volumes=[
                VolumeSchema(uid=v.uid, kind=v.kind.value, x=v.pos.x, y=v.pos.y,
                             width=v.width, height=v.height, radius=v.radius)
                for v in world.volumes.values()
            ],
            inventory=InventorySchema(
                **inv.serialize(),
                equipment_stats=inv.get_equipment_stats(),
                capacity=inv.capacity,
            ),
            quests=[QuestSchema(**q.to_dict()) for q in loop.quests.get_all_quests()],
        )


class EventSchema(BaseModel):
    tick: int
    category: str
    data: dict[str, Any] = Field(default_factory=dict)


class EventsResponse(BaseModel):
    events: list[EventSchema]


# --- Control ---

class ControlResponse(BaseModel):
    status: str
    message: str
    tick: int = 0


class InputRequest(BaseModel):
    move_x: float = Field(0.0, ge=-1.0, le=1.0)
    move_y: float = Field(0.0, ge=-1.0, le=1.0)
    melee: bool = False
    ranged: bool = False


class ItemActionRequest(BaseModel):
    item_id: str
    quantity: int = Field(1, ge=1)


class UnequipRequest(BaseModel):
    slot: EquipSlot


class ActionResponse(BaseModel):
    status: str
    message: str = ""


class UnlockedLevelsResponse(BaseModel):
    unlocked: list[str]


class SimulationConfigResponse(BaseModel):
    world_seed: int
    start_level: str
    tick_delta_ms: float
    max_ticks: int
    inventory_capacity: int
    default_max_stack: int
    engage_range: float
    enemy_attack_cooldown_ms: float
    player_invulnerable_ms: float
    melee_lifetime_ms: float
    ranged_mana_cost: float
    ranged_lifetime_ms: float
    item_pickup_delay_ms: float
    item_despawn_ms: float
    tick_rate: float
