"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arpg.api.dependencies import set_engine_manager
from arpg.api.engine_manager import EngineManager
from arpg.api.routes import api_router
from arpg.config import SimulationConfig
from arpg.core.definitions import GameData
from arpg.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    config: SimulationConfig | None = None,
    data: GameData | None = None,
    save_path: str | Path | None = None,
    autostart: bool = True,
) -> FastAPI:
    """Build and return the fully-configured FastAPI application.

    With ``autostart=False`` the engine is built but left stopped until a
    ``/control/start`` (or ``/control/step``) request arrives.
    """
    if config is None:
        config = SimulationConfig()

    _config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        manager = EngineManager(_config, data=data, save_path=save_path)
        set_engine_manager(manager)
        if autostart:
            manager.start()
        logger.info("API server started on level '%s'.", _config.start_level)
        yield
        manager.stop()
        set_engine_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Action RPG Simulation",
        description=(
            "Headless action-RPG gameplay core: stats, enemy AI, combat, loot, "
            "inventory and quests.\n\n"
            "## API Groups\n\n"
            "- **State** - Live world snapshot and event feed\n"
            "- **Control** - Simulation lifecycle: start, pause, resume, step, reset\n"
            "- **Actions** - Player input, inventory actions, quests and level unlocks\n"
            "- **Config** - Read-only simulation configuration\n"
            "- **Metadata** - Static game definitions loaded from JSON\n"
        ),
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Per-tick world snapshot and the simulation event feed."},
            {"name": "Control", "description": "Simulation lifecycle controls: start, pause, resume, single-step, reset and speed."},
            {"name": "Actions", "description": "Player movement and attacks, inventory use/equip/drop, quest start and unlocked levels."},
            {"name": "Config", "description": "Read-only simulation configuration parameters."},
            {"name": "Metadata", "description": "Item, enemy, loot table, quest and level definitions."},
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app
