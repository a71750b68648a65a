"""Arena: a small, fully-wired WorldLoop for end-to-end tests.

Uses its own compact game data so tests do not depend on the bundled
JSON balance numbers.

Usage:
    arena = Arena()
    slime = arena.spawn("slime", 230, 150)
    arena.loop.combat.spawn_melee(arena.world)
    arena.loop.combat.resolve(arena.world)
    assert slime.stats.hp == 21
"""

from __future__ import annotations

from typing import Any

from arpg.config import SimulationConfig
from arpg.core.definitions import GameData
from arpg.core.models import Enemy, Vector2
from arpg.engine.commands import IDLE, TickInput
from arpg.engine.event_bus import Event
from arpg.engine.world_loop import WorldLoop

ITEMS: dict[str, Any] = {
    "gold_coin": {"name": "Gold Coin", "type": "CURRENCY", "stackable": True},
    "potion": {
        "name": "Potion", "type": "CONSUMABLE", "stackable": True, "max_stack": 5,
        "effect": {"type": "heal", "value": 30},
    },
    "ether": {
        "name": "Ether", "type": "CONSUMABLE", "stackable": True, "max_stack": 5,
        "effect": {"type": "restore", "value": 20},
    },
    "med_kit": {
        "name": "Med Kit", "type": "CONSUMABLE", "stackable": True, "max_stack": 10,
        "effect": {"type": "heal", "value": 30},
    },
    "energy_kit": {
        "name": "Energy Kit", "type": "CONSUMABLE", "stackable": True, "max_stack": 10,
        "effect": {"type": "restore", "value": 25},
    },
    "bread": {"name": "Bread", "type": "CONSUMABLE", "stackable": True},
    "gem": {"name": "Gem", "type": "MATERIAL"},
    "ore": {"name": "Ore", "type": "MATERIAL", "stackable": True},
    "sword": {"name": "Sword", "type": "WEAPON", "slot": "main_hand", "stats": {"attack": 5}},
    "axe": {"name": "Axe", "type": "WEAPON", "slot": "main_hand", "stats": {"attack": 8}},
    "helm": {"name": "Helm", "type": "ARMOR", "slot": "head", "stats": {"defense": 2}},
}

ENEMIES: dict[str, Any] = {
    "slime": {
        "name": "Slime", "hp": 30, "attack": 4, "defense": 1, "speed": 60,
        "damage": 8, "chase_distance": 150, "xp_reward": 10, "loot_table": "slime_loot",
    },
    "dummy": {
        "name": "Dummy", "hp": 5, "speed": 0, "damage": 5, "chase_distance": 10,
        "xp_reward": 5, "loot_table": "common_enemy",
    },
}

LOOT_TABLES: dict[str, Any] = {
    "slime_loot": {"drop_chance": 1.0, "rolls": 1, "items": [{"id": "gem"}]},
    "common_enemy": {"drop_chance": 0.0, "rolls": 1, "items": [{"id": "bread"}]},
    "rich": {
        "drop_chance": 1.0, "rolls": 3, "guaranteed_items": ["gem"],
        "items": [{"id": "gem"}],
    },
}

QUESTS: dict[str, Any] = {
    "slay": {
        "title": "Slay Slimes",
        "objectives": [{"type": "KILL", "target": "slime", "amount": 2}],
        "xp_reward": 30,
        "gold_reward": 10,
    },
    "mixed": {
        "title": "Mixed Hunt",
        "objectives": [
            {"type": "KILL", "target": "slime", "amount": 1},
            {"type": "KILL", "target": "dummy", "amount": 2},
        ],
        "xp_reward": 5,
    },
}

LEVELS: dict[str, Any] = {
    "arena": {
        "name": "Arena", "next_level": "annex", "width": 400, "height": 300,
        "player_start": {"x": 200, "y": 150},
    },
    "annex": {
        "name": "Annex", "width": 400, "height": 300,
        "player_start": {"x": 200, "y": 150},
    },
    "trial": {
        "name": "Trial", "next_level": "annex", "width": 400, "height": 300,
        "player_start": {"x": 200, "y": 150},
        "spawns": [
            {"kind": "slime", "x": 60, "y": 60},
            {"kind": "slime", "x": 340, "y": 60},
            {"kind": "slime", "x": 60, "y": 240},
        ],
        "victory_quest": "slay",
        "auto_start_quests": ["slay"],
        "scripted_drops": True,
    },
}


def make_data(**overrides: Any) -> GameData:
    """Build the compact test GameData; keyword overrides replace whole sections."""
    sections = dict(
        enemies=ENEMIES, items=ITEMS, loot_tables=LOOT_TABLES, quests=QUESTS, levels=LEVELS,
    )
    sections.update(overrides)
    return GameData.from_raw(**sections)


class Arena:
    """Loads a level into a real WorldLoop and records every published event."""

    def __init__(self, level: str = "arena", data: GameData | None = None, **config_overrides: Any):
        self.config = SimulationConfig(start_level=level, **config_overrides)
        self.data = data or make_data()
        self.loop = WorldLoop(self.config, self.data)
        self.events: list[Event] = []
        self.loop.bus.subscribe_all(self.events.append)
        assert self.loop.load_level(level)

    @property
    def world(self):
        return self.loop.world

    @property
    def player(self):
        return self.loop.world.player

    def spawn(self, kind: str, x: float, y: float) -> Enemy:
        return self.loop.spawn_enemy(kind, Vector2(x, y))

    def run(self, ticks: int, tick_input: TickInput = IDLE) -> int:
        ran = 0
        for _ in range(ticks):
            if not self.loop.tick(tick_input=tick_input):
                break
            ran += 1
        return ran

    def events_of(self, event_type: type[Event]) -> list[Event]:
        return [e for e in self.events if isinstance(e, event_type)]
