from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

from scorekeeper.engine.serializer import dumps_game, loads_game
from scorekeeper.engine.state import GameState

logger = logging.getLogger(__name__)

# One slot per app version; bump the suffix when the record shape changes.
STORAGE_KEY = "judgement-scorekeeper:v5"


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """Stores each key as a UTF-8 file inside `directory`."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9._-]", "_", key)
        return self.directory / f"{safe}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def load_game(storage: KeyValueStorage, key: str = STORAGE_KEY) -> GameState | None:
    """Return the saved game, or None when nothing usable is stored."""
    try:
        raw = storage.get_item(key)
        if not raw:
            return None
        return loads_game(raw)
    except ValueError as e:
        logger.warning("Ignoring malformed saved game under %s: %s", key, e)
        return None


def save_game(
    storage: KeyValueStorage, state: GameState, key: str = STORAGE_KEY
) -> None:
    storage.set_item(key, dumps_game(state))


def clear_game(storage: KeyValueStorage, key: str = STORAGE_KEY) -> None:
    storage.remove_item(key)
