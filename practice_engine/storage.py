"""JSON-backed key/value persistence for session definitions and small user flags."""
from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

_LOGGER_NAME = "DrawStack.Engine"
_ENGINE_LOGGER = logging.getLogger(_LOGGER_NAME)

STORAGE_FILE = "drawstack_state.json"
MAX_RECENT_TAGS = 10

STORAGE_KEYS = {
    "custom_sessions": "drawstack.sessions.custom",
    "preset_overrides": "drawstack.sessions.classroomOverrides",
    "recent_tags": "drawstack.tags.recent",
    "audio_muted": "drawstack.audio.muted",
}


class KeyValueStore:
    """Single JSON document holding namespaced keys.

    Missing or corrupt files behave like an empty store; callers always supply the
    default they want back.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return
        except OSError as exc:
            _ENGINE_LOGGER.debug("State file %s unreadable: %s", self.path, exc)
            return
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            _ENGINE_LOGGER.debug("State file %s is not valid JSON (%s); using defaults", self.path, exc)
            return
        if isinstance(data, dict):
            self._data = data

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return deepcopy(default)
        return deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = deepcopy(value)
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._data, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self.path)


class RecentTags:
    """Most-recently-used tag ids, newest first."""

    def __init__(self, store: KeyValueStore, *, limit: int = MAX_RECENT_TAGS) -> None:
        self._store = store
        self._limit = max(1, int(limit))

    def ids(self) -> List[str]:
        value = self._store.get(STORAGE_KEYS["recent_tags"], [])
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if isinstance(item, str)][: self._limit]

    def record(self, tag_ids: Iterable[str]) -> List[str]:
        fresh = [str(tag_id) for tag_id in tag_ids if tag_id]
        merged: List[str] = []
        for tag_id in fresh + self.ids():
            if tag_id not in merged:
                merged.append(tag_id)
        merged = merged[: self._limit]
        self._store.set(STORAGE_KEYS["recent_tags"], merged)
        return merged


def load_muted(store: KeyValueStore) -> bool:
    value = store.get(STORAGE_KEYS["audio_muted"], False)
    return value if isinstance(value, bool) else False


def save_muted(store: KeyValueStore, muted: bool) -> None:
    store.set(STORAGE_KEYS["audio_muted"], bool(muted))


def default_state_path(base_dir: Optional[Path] = None) -> Path:
    base = Path(base_dir) if base_dir is not None else Path.home() / ".drawstack"
    return base / STORAGE_FILE
