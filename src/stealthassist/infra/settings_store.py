"""JSON-file persistence handle: credentials, usage, subscription and display settings."""

from __future__ import annotations

import copy
import json
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class SettingsStore:
    """Top-level key/value store persisted to a single JSON file.

    Loaded lazily on first access; every mutation is written immediately.
    Values handed out are deep copies, so callers cannot mutate stored state
    except through set() / update().
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._data: dict | None = None
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict:
        if self._data is None:
            if self._path.exists():
                with open(self._path, encoding="utf-8") as f:
                    self._data = json.load(f)
                logger.debug("Loaded store from %s", self._path)
            else:
                self._data = {}
        return self._data

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            data = self._load()
            if key not in data:
                return copy.deepcopy(default)
            return copy.deepcopy(data[key])

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = copy.deepcopy(value)
            self._save()
            logger.debug("Store key updated: %s", key)

    def update(self, key: str, mutate: Callable[[Any], Any], default: Any = None) -> Any:
        """Atomically read-modify-write one key. Returns the stored value."""
        with self._lock:
            current = self.get(key, default)
            new_value = mutate(current)
            self.set(key, new_value)
            return copy.deepcopy(new_value)
