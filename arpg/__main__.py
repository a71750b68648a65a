"""Entry point: ``python -m arpg`` (or the ``arpg`` console script).

Supports two modes:
  - ``arpg serve``  -> Launch the FastAPI server driving a live simulation
  - ``arpg cli``    -> Headless run with an autopilot player and a replay file
"""

from __future__ import annotations

import argparse
import logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Action RPG gameplay simulation")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--seed", type=int, default=42)
    srv.add_argument("--level", type=str, default="chamber")
    srv.add_argument("--save", type=str, default=None, help="JSON file for level unlocks")
    srv.add_argument("--paused", action="store_true", help="Do not start ticking until /control/start")
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Run a headless simulation with the autopilot")
    cli.add_argument("--seed", type=int, default=42)
    cli.add_argument("--level", type=str, default="chamber")
    cli.add_argument("--ticks", type=int, default=3600)
    cli.add_argument("--replay", type=str, default="replay.json")
    cli.add_argument("--save", type=str, default=None, help="JSON file for level unlocks")
    cli.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    return parser


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from arpg.api.app import create_app
    from arpg.config import SimulationConfig

    config = SimulationConfig(
        world_seed=args.seed,
        start_level=args.level,
        log_level=args.log_level,
    )
    app = create_app(config, save_path=args.save, autostart=not args.paused)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_cli(args: argparse.Namespace) -> int:
    from arpg.config import SimulationConfig
    from arpg.core.definitions import GameData
    from arpg.engine.autopilot import Autopilot
    from arpg.engine.world_loop import WorldLoop
    from arpg.utils.logging import setup_logging
    from arpg.utils.persistence import JsonFileStore, LevelUnlocks
    from arpg.utils.replay import ReplayRecorder

    config = SimulationConfig(
        world_seed=args.seed,
        start_level=args.level,
        max_ticks=args.ticks,
        replay_file=args.replay,
        log_level=args.log_level,
    )

    setup_logging(config.log_level)

    data = GameData.load()
    unlocks = LevelUnlocks(JsonFileStore(args.save), config.default_unlocked_level) if args.save else None
    recorder = ReplayRecorder(config.replay_file, config.world_seed)
    loop = WorldLoop(config, data, unlocks=unlocks, recorder=recorder)
    if not loop.load_level(config.start_level):
        logger.error("Unknown level '%s'", config.start_level)
        return 1

    ticks = loop.run(controller=Autopilot())
    world = loop.world
    outcome = "victory" if world.victory else "defeat" if world.defeat else "timeout"
    logger.info(
        "Level '%s' finished after %d ticks: %s (kills=%d, gold=%d, player level %d)",
        world.level_id, ticks, outcome, world.kills, loop.inventory.gold, world.player.stats.level,
    )
    logger.info("Done. Replay written to %s", config.replay_file)
    return 0


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None:
        args = parser.parse_args(["serve"])
    if args.command == "serve":
        _run_server(args)
    elif args.command == "cli":
        raise SystemExit(_run_cli(args))


if __name__ == "__main__":
    main()
