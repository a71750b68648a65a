"""Structured logging configuration."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO", quiet_libraries: bool = True) -> None:
    """Configure root logger with a clean format for simulation output."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)-5s] %(name)-25s | %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    if quiet_libraries:
        # Per-request access logs drown the simulation output.
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
