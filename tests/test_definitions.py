"""Tests for static definition loading and validation."""

import json

import pytest

from arpg.core.definitions import FALLBACK_ENEMY, GameData
from arpg.core.enums import ItemType
from arpg.core.errors import ConfigError

from tests.helpers.arena import ENEMIES, ITEMS, LEVELS, LOOT_TABLES, make_data


class TestBundledData:
    def test_bundled_data_loads(self):
        data = GameData.load()
        assert "chamber" in data.levels
        assert data.items["med_kit"].type == ItemType.CONSUMABLE
        assert data.items["energy_kit"].effect is not None

    def test_bundled_levels_chain(self):
        data = GameData.load()
        assert data.levels["chamber"].next_level == "caves"
        assert data.levels["chamber"].scripted_drops


class TestValidation:
    def test_effect_on_non_consumable_rejected(self):
        items = {**ITEMS, "bad": {"name": "Bad", "type": "WEAPON",
                                  "effect": {"type": "heal", "value": 5}}}
        with pytest.raises(ConfigError):
            make_data(items=items)

    def test_unknown_field_rejected(self):
        items = {**ITEMS, "bad": {"name": "Bad", "type": "MATERIAL", "weight": 3}}
        with pytest.raises(ConfigError):
            make_data(items=items)

    def test_loot_table_reference_checked(self):
        tables = {**LOOT_TABLES, "broken": {"drop_chance": 1.0, "items": [{"id": "nope"}]}}
        with pytest.raises(ConfigError):
            make_data(loot_tables=tables)

    def test_enemy_loot_table_reference_checked(self):
        enemies = {**ENEMIES, "ghost": {"name": "Ghost", "hp": 5, "speed": 10,
                                        "chase_distance": 50, "loot_table": "missing"}}
        with pytest.raises(ConfigError):
            make_data(enemies=enemies)

    def test_level_spawn_kind_checked(self):
        levels = {**LEVELS, "bad": {"name": "Bad", "spawns": [{"kind": "dragon", "x": 1, "y": 1}]}}
        with pytest.raises(ConfigError):
            make_data(levels=levels)

    def test_inverted_quantity_range_rejected(self):
        tables = {**LOOT_TABLES, "t": {"drop_chance": 1.0,
                                       "items": [{"id": "ore", "min_qty": 3, "max_qty": 1}]}}
        with pytest.raises(ConfigError):
            make_data(loot_tables=tables)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigError):
            GameData.load(tmp_path)

    def test_invalid_json_raises(self, tmp_path):
        for name in ("enemies", "items", "loot_tables", "quests", "levels"):
            (tmp_path / f"{name}.json").write_text("{}", encoding="utf-8")
        (tmp_path / "items.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            GameData.load(tmp_path)

    def test_load_from_directory(self, tmp_path):
        sections = dict(enemies=ENEMIES, items=ITEMS, loot_tables=LOOT_TABLES,
                        quests={}, levels={"solo": {"name": "Solo"}})
        for name, payload in sections.items():
            (tmp_path / f"{name}.json").write_text(json.dumps(payload), encoding="utf-8")
        data = GameData.load(tmp_path)
        assert data.level("solo").enemy_count == 0


class TestLookups:
    def test_unknown_enemy_kind_uses_fallback(self):
        assert make_data().enemy_template("dragon") is FALLBACK_ENEMY

    def test_template_max_hp_defaults_to_hp(self):
        stats = make_data().enemy_template("slime").to_stats()
        assert stats.hp == stats.max_hp == 30
        assert stats.loot_table == "slime_loot"

    def test_unknown_ids_return_none(self):
        data = make_data()
        assert data.item("nope") is None
        assert data.level("nope") is None
        assert data.loot_table("nope") is None
