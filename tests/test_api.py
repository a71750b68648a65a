"""HTTP tests for the FastAPI layer, driven through a stopped engine.

The engine is created with ``autostart=False`` so every tick is an explicit
``/control/step`` and the assertions never race the background thread.
"""

import pytest
from fastapi.testclient import TestClient

from arpg.api.app import create_app
from arpg.config import SimulationConfig

from tests.helpers.arena import LEVELS, make_data

API = "/api/v1"

STASH = {
    "name": "Stash", "next_level": "annex", "width": 400, "height": 300,
    "player_start": {"x": 200, "y": 150},
    "items": [
        {"item_id": "potion", "quantity": 2, "x": 200, "y": 150},
        {"item_id": "sword", "x": 200, "y": 150},
        {"item_id": "ore", "quantity": 3, "x": 200, "y": 150},
    ],
}


@pytest.fixture
def client():
    config = SimulationConfig(
        start_level="stash",
        default_unlocked_level="stash",
        item_pickup_delay_ms=0.0,
        log_level="WARNING",
    )
    data = make_data(levels={**LEVELS, "stash": STASH})
    with TestClient(create_app(config, data=data, autostart=False)) as c:
        yield c


@pytest.fixture
def stocked(client):
    """Client whose player has picked up the stash on the first tick."""
    assert client.post(f"{API}/control/step").json()["status"] == "ok"
    return client


def _state(client) -> dict:
    resp = client.get(f"{API}/state")
    assert resp.status_code == 200
    return resp.json()


def _count(state: dict, item_id: str) -> int:
    return sum(s["quantity"] for s in state["inventory"]["items"] if s["item_id"] == item_id)


# ---------------------------------------------------------------------------
# State and events
# ---------------------------------------------------------------------------

class TestState:
    def test_initial_snapshot(self, client):
        state = _state(client)
        assert state["tick"] == 0
        assert state["level_id"] == "stash"
        assert state["player"]["x"] == 200.0
        assert len(state["items"]) == 3
        assert state["inventory"]["items"] == []
        assert state["inventory"]["capacity"] == 24

    def test_step_picks_up_stash(self, stocked):
        state = _state(stocked)
        assert state["tick"] == 1
        assert state["items"] == []
        assert _count(state, "potion") == 2
        assert _count(state, "ore") == 3

    def test_events_feed_reports_pickups(self, stocked):
        events = stocked.get(f"{API}/events", params={"since_tick": 0}).json()["events"]
        assert "INVENTORY_UPDATED" in {e["category"] for e in events}

    def test_events_limit(self, stocked):
        events = stocked.get(f"{API}/events", params={"limit": 1}).json()["events"]
        assert len(events) == 1

    def test_input_moves_player(self, client):
        assert client.post(f"{API}/input", json={"move_x": 1.0}).status_code == 200
        client.post(f"{API}/control/step")
        state = _state(client)
        assert state["player"]["x"] == pytest.approx(202.5)
        assert state["player"]["facing"] == "right"

    def test_input_out_of_range_rejected(self, client):
        assert client.post(f"{API}/input", json={"move_x": 2.0}).status_code == 422


# ---------------------------------------------------------------------------
# Control
# ---------------------------------------------------------------------------

class TestControl:
    def test_pause_requires_running(self, client):
        body = client.post(f"{API}/control/pause").json()
        assert body["status"] == "error"

    def test_step_reports_new_tick(self, client):
        body = client.post(f"{API}/control/step").json()
        assert body == {"status": "ok", "message": "Single tick executed.", "tick": 1}

    def test_reset_rebuilds_level(self, stocked):
        body = stocked.post(f"{API}/control/reset").json()
        assert body["tick"] == 0
        state = _state(stocked)
        assert state["inventory"]["items"] == []
        assert len(state["items"]) == 3

    def test_reset_to_other_level(self, client):
        client.post(f"{API}/control/reset", params={"level": "annex"})
        assert _state(client)["level_id"] == "annex"

    def test_reset_unknown_level(self, client):
        assert client.post(f"{API}/control/reset", params={"level": "nope"}).status_code == 404

    def test_unknown_action(self, client):
        assert client.post(f"{API}/control/rewind").status_code == 422

    def test_speed_updates_tick_rate(self, client):
        assert client.post(f"{API}/speed", params={"tps": 30}).status_code == 200
        assert client.get(f"{API}/config").json()["tick_rate"] == pytest.approx(1 / 30)

    def test_speed_bounds(self, client):
        assert client.post(f"{API}/speed", params={"tps": 0.1}).status_code == 422


# ---------------------------------------------------------------------------
# Inventory and quests
# ---------------------------------------------------------------------------

class TestActions:
    def test_use_item(self, stocked):
        assert stocked.post(f"{API}/inventory/use", json={"item_id": "potion"}).status_code == 200
        assert _count(_state(stocked), "potion") == 1

    def test_use_unknown_item(self, stocked):
        assert stocked.post(f"{API}/inventory/use", json={"item_id": "nope"}).status_code == 404

    def test_use_item_not_owned(self, stocked):
        resp = stocked.post(f"{API}/inventory/use", json={"item_id": "ether"})
        assert resp.status_code == 409

    def test_equip_and_unequip(self, stocked):
        assert stocked.post(f"{API}/inventory/equip", json={"item_id": "sword"}).status_code == 200
        inv = _state(stocked)["inventory"]
        assert inv["equipment"]["main_hand"] == "sword"
        assert inv["equipment_stats"]["attack"] == 5

        assert stocked.post(f"{API}/inventory/unequip", json={"slot": "main_hand"}).status_code == 200
        assert _count(_state(stocked), "sword") == 1

    def test_unequip_empty_slot(self, stocked):
        assert stocked.post(f"{API}/inventory/unequip", json={"slot": "head"}).status_code == 409

    def test_unequip_invalid_slot(self, stocked):
        assert stocked.post(f"{API}/inventory/unequip", json={"slot": "tail"}).status_code == 422

    def test_drop_spawns_world_item(self, stocked):
        resp = stocked.post(f"{API}/inventory/drop", json={"item_id": "ore", "quantity": 2})
        assert resp.status_code == 200
        state = _state(stocked)
        assert _count(state, "ore") == 1
        (item,) = state["items"]
        assert (item["item_id"], item["quantity"], item["x"]) == ("ore", 2, 230.0)

    def test_drop_more_than_owned(self, stocked):
        resp = stocked.post(f"{API}/inventory/drop", json={"item_id": "ore", "quantity": 5})
        assert resp.status_code == 409

    def test_start_quest(self, client):
        assert client.post(f"{API}/quests/slay/start").status_code == 200
        assert client.post(f"{API}/quests/slay/start").status_code == 409
        quests = {q["quest_id"]: q for q in _state(client)["quests"]}
        assert quests["slay"]["status"] == "ACTIVE"

    def test_start_unknown_quest(self, client):
        assert client.post(f"{API}/quests/nope/start").status_code == 404

    def test_unlocked_levels(self, client):
        assert client.get(f"{API}/levels/unlocked").json() == {"unlocked": ["stash"]}


# ---------------------------------------------------------------------------
# Config and metadata
# ---------------------------------------------------------------------------

class TestReadOnly:
    def test_config(self, client):
        cfg = client.get(f"{API}/config").json()
        assert cfg["start_level"] == "stash"
        assert cfg["item_pickup_delay_ms"] == 0.0
        assert cfg["tick_rate"] == pytest.approx(1 / 60)

    def test_metadata_items(self, client):
        items = client.get(f"{API}/metadata/items").json()
        assert "potion" in items
        sword = client.get(f"{API}/metadata/items/sword").json()
        assert sword["slot"] == "main_hand"
        assert sword["stats"] == {"attack": 5}

    def test_metadata_unknown_item(self, client):
        assert client.get(f"{API}/metadata/items/nope").status_code == 404

    @pytest.mark.parametrize("path, key", [
        ("enemies", "slime"),
        ("loot-tables", "slime_loot"),
        ("quests", "slay"),
        ("levels", "stash"),
    ])
    def test_metadata_collections(self, client, path, key):
        resp = client.get(f"{API}/metadata/{path}")
        assert resp.status_code == 200
        assert key in resp.json()
