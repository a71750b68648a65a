"""GET /api/v1/state and /api/v1/events: live snapshot and event feed."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from arpg.api.dependencies import get_engine_manager
from arpg.api.engine_manager import EngineManager
from arpg.api.schemas import EventSchema, EventsResponse, WorldStateResponse

router = APIRouter()


@router.get("/state", response_model=WorldStateResponse)
def get_state(manager: EngineManager = Depends(get_engine_manager)) -> WorldStateResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Simulation not initialized yet.")
    return snapshot


@router.get("/events", response_model=EventsResponse)
def get_events(
    since_tick: int | None = Query(None, ge=0, description="Only events at or after this tick"),
    limit: int = Query(100, ge=1, le=1000),
    manager: EngineManager = Depends(get_engine_manager),
) -> EventsResponse:
    log = manager.event_log
    events = log.since_tick(since_tick) if since_tick is not None else log.latest(limit)
    return EventsResponse(events=[
        EventSchema(tick=e.tick, category=e.category, data=e.data)
        for e in events[-limit:]
    ])
