"""Exceptions raised by the engine.

Only malformed static configuration is an exception. Every runtime failure
(unknown id, full inventory, invalid operation, stale reference) is reported
through a boolean / optional return value instead.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Static game data failed validation at load time."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message
