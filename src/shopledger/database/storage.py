"""Key-value storage collaborators used by the in-memory ledger store."""

import copy
import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStorage(ABC):
    """Load/save JSON-shaped values under string keys."""

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key``, or None if absent."""
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass


class MemoryStorage(KeyValueStorage):
    """Dict-backed storage. Values are deep-copied in and out."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._values: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self, key: str) -> Optional[Any]:
        if key not in self._values:
            return None
        return copy.deepcopy(self._values[key])

    def save(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)


class JSONFileStorage(KeyValueStorage):
    """Store each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: str | Path):
        """Initialize file storage.

        Args:
            directory: Directory holding the JSON files (created if missing)
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key '{key}'")
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)

    def save(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        # Replace atomically
        tmp_path = path.with_suffix(".json.tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(value, fh, indent=2, ensure_ascii=False)
        tmp_path.replace(path)
        logger.debug("Saved storage key %s to %s", key, path)
