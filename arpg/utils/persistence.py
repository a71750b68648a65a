"""Level-unlock persistence over a small key/value store."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

UNLOCKED_KEY = "unlocked_levels"


class UnlockStore(Protocol):
    def get(self, key: str) -> Any | None: ...
    def set(self, key: str, value: Any) -> None: ...
    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store; the default for tests and headless runs."""

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Store backed by a single JSON object on disk."""

    __slots__ = ("_path", "_lock")

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Corrupt save file %s, starting fresh", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if data.pop(key, None) is not None:
                self._write(data)


class LevelUnlocks:
    """Which levels the player may start. Unlocking is idempotent."""

    __slots__ = ("_store", "_default")

    def __init__(self, store: UnlockStore | None = None, default_level: str = "chamber") -> None:
        self._store = store if store is not None else MemoryStore()
        self._default = default_level

    def unlocked_levels(self) -> list[str]:
        stored = self._store.get(UNLOCKED_KEY)
        if isinstance(stored, list) and all(isinstance(x, str) for x in stored):
            return list(stored)
        return [self._default]

    def unlock_level(self, level_id: str) -> bool:
        unlocked = self.unlocked_levels()
        if level_id in unlocked:
            return False
        unlocked.append(level_id)
        self._store.set(UNLOCKED_KEY, unlocked)
        logger.info("Level unlocked: %s", level_id)
        return True

    def is_level_unlocked(self, level_id: str) -> bool:
        return level_id in self.unlocked_levels()

    def reset(self) -> None:
        self._store.delete(UNLOCKED_KEY)
