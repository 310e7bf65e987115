"""Simple durable key-value store backed by one JSON file."""

import copy
import json
import os
import uuid
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Union

from ..config import Config
from ..utils import setup_logger

logger = setup_logger(__name__)


class KeyValueStore:
    """
    JSON file of ``{key: value}`` pairs.

    Every ``set`` rewrites the whole file with an atomic temp-file rename.

    Usage:
        store = KeyValueStore()
        decks = store.get("savedDecks", [])
        store.set("savedDecks", decks)
    """

    def __init__(self, store_file: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize the store.

        Args:
            store_file: Path to the JSON file (defaults to Config.STORE_FILE)
        """
        self.store_file = Path(store_file or Config.STORE_FILE)
        self._data: Dict[str, Any] = {}
        self._file_lock = Lock()
        self._load()

    def _load(self) -> None:
        self._data = {}
        if not self.store_file.exists():
            return
        try:
            with open(self.store_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load store file %s: %s", self.store_file, e)
            return
        if isinstance(data, dict):
            self._data = data
        else:
            logger.warning("Ignoring store file %s: top level is not an object", self.store_file)

    def _save(self) -> None:
        """Write all data to disk (caller must hold the lock)."""
        self.store_file.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.store_file.with_name(f"{self.store_file.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
            os.replace(temp_file, self.store_file)
        except OSError:
            if temp_file.exists():
                temp_file.unlink()
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a value.

        Mutable values are deep-copied so callers cannot touch internal state.
        """
        with self._file_lock:
            value = self._data.get(key, default)
            if isinstance(value, (dict, list)):
                return copy.deepcopy(value)
            return value

    def set(self, key: str, value: Any) -> None:
        """Set a value and immediately persist."""
        with self._file_lock:
            self._data[key] = value
            self._save()

    def delete(self, key: str) -> bool:
        with self._file_lock:
            if key not in self._data:
                return False
            del self._data[key]
            self._save()
            return True

    def keys(self):
        with self._file_lock:
            return list(self._data.keys())

    def reload(self) -> None:
        """Reload from disk."""
        with self._file_lock:
            self._load()
