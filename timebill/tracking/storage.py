"""
Key-value persistence for local client state.

``KeyValueStore`` is the interface the time tracker and the CLI use to keep
state between invocations. ``MemoryStore`` backs tests; ``JsonFileStore``
keeps every key in a single JSON document written atomically.
"""

import copy
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

TIME_TRACKING_KEY = "timesheet-time-tracking"
CURRENT_WORKSPACE_KEY = "current-workspace-id"


class KeyValueStore(ABC):
    """Minimal JSON-value store keyed by string."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""


class MemoryStore(KeyValueStore):
    """In-process store. Values are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Store backed by one JSON file.

    The file is re-read on every access so that separate CLI invocations
    see each other's writes. Writes go to a temporary file in the same
    directory which then replaces the original, so a crash never leaves a
    half-written document. An unreadable or corrupt file reads as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse state file {self.path} (corrupted JSON): {e}")
            return {}
        except OSError as e:
            logger.error(f"Failed to read state file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"State file {self.path} does not hold an object, ignoring it")
            return {}
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(temp_path, self.path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)
        logger.debug(f"Saved {key} to {self.path}")

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)


def get_current_workspace_id(store: KeyValueStore) -> Optional[str]:
    """Last workspace selected with ``timebill workspace use``."""
    value = store.get(CURRENT_WORKSPACE_KEY)
    return value if isinstance(value, str) and value else None


def set_current_workspace_id(store: KeyValueStore, workspace_id: str) -> None:
    store.set(CURRENT_WORKSPACE_KEY, workspace_id)
