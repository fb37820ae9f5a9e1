"""Built-in classroom presets plus user-authored sessions and overrides."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from practice_engine.errors import ValidationError
from practice_engine.models import SessionPreset, SessionStage
from practice_engine.storage import STORAGE_KEYS, KeyValueStore

_LOGGER_NAME = "DrawStack.Engine"
_ENGINE_LOGGER = logging.getLogger(_LOGGER_NAME)


def _preset(preset_id: str, name: str, description: str, stages: Sequence[Tuple[int, int, str]]) -> SessionPreset:
    return SessionPreset(
        id=preset_id,
        name=name,
        description=description,
        stages=tuple(
            SessionStage(image_count=count, duration_seconds=seconds, description=label)
            for count, seconds, label in stages
        ),
        builtin=True,
    )


BUILTIN_PRESETS: Tuple[SessionPreset, ...] = (
    _preset(
        "classic-figure",
        "Classic Figure Drawing",
        "Gesture warm-up building to longer studies",
        [
            (12, 30, "30 second gestures"),
            (10, 60, "1 minute poses"),
            (8, 120, "2 minute poses"),
            (6, 300, "5 minute poses"),
        ],
    ),
    _preset(
        "gesture-warmup",
        "Gesture Warm-up",
        "Fast gestures to loosen up",
        [
            (20, 30, "30 second gestures"),
            (10, 60, "1 minute gestures"),
        ],
    ),
    _preset(
        "long-pose",
        "Long Pose Study",
        "A short warm-up followed by sustained studies",
        [
            (5, 60, "1 minute warm-up"),
            (2, 600, "10 minute studies"),
            (1, 1200, "20 minute study"),
        ],
    ),
    _preset(
        "studio-mix",
        "Studio Mix",
        "Balanced mix of short and medium poses",
        [
            (10, 45, "45 second gestures"),
            (6, 180, "3 minute poses"),
            (3, 480, "8 minute poses"),
        ],
    ),
)


def quick_session_stages(
    image_count: int,
    duration_seconds: int,
    tag_filter: Iterable[str] = (),
) -> Tuple[SessionStage, ...]:
    return (
        SessionStage(
            image_count=int(image_count),
            duration_seconds=int(duration_seconds),
            description="Quick session",
            tag_filter=frozenset(tag_filter),
        ),
    )


class PresetCatalog:
    """Merges built-in presets, user overrides of them, and custom sessions."""

    def __init__(self, store: KeyValueStore, builtin: Sequence[SessionPreset] = BUILTIN_PRESETS) -> None:
        self._store = store
        self._builtin = tuple(builtin)

    def builtin(self) -> List[SessionPreset]:
        overrides = self._load_map(STORAGE_KEYS["preset_overrides"], builtin=True)
        return [overrides.get(preset.id, preset) for preset in self._builtin]

    def custom(self) -> List[SessionPreset]:
        return list(self._load_map(STORAGE_KEYS["custom_sessions"], builtin=False).values())

    def all(self) -> List[SessionPreset]:
        return self.builtin() + self.custom()

    def get(self, preset_id: str) -> Optional[SessionPreset]:
        for preset in self.all():
            if preset.id == preset_id:
                return preset
        return None

    def save_custom(self, preset: SessionPreset) -> None:
        if any(builtin.id == preset.id for builtin in self._builtin):
            raise ValidationError(f"'{preset.id}' is reserved by a built-in preset", field="id")
        raw = self._raw_list(STORAGE_KEYS["custom_sessions"])
        raw = [item for item in raw if item.get("id") != preset.id]
        raw.append(preset.to_dict())
        self._store.set(STORAGE_KEYS["custom_sessions"], raw)
        _ENGINE_LOGGER.info("Saved custom session %s (%d poses)", preset.id, preset.total_poses)

    def delete_custom(self, preset_id: str) -> bool:
        raw = self._raw_list(STORAGE_KEYS["custom_sessions"])
        kept = [item for item in raw if item.get("id") != preset_id]
        if len(kept) == len(raw):
            return False
        self._store.set(STORAGE_KEYS["custom_sessions"], kept)
        return True

    def override(self, preset: SessionPreset) -> None:
        if not any(builtin.id == preset.id for builtin in self._builtin):
            raise ValidationError(f"No built-in preset with id '{preset.id}'", field="id")
        raw = self._raw_list(STORAGE_KEYS["preset_overrides"])
        raw = [item for item in raw if item.get("id") != preset.id]
        raw.append(preset.to_dict())
        self._store.set(STORAGE_KEYS["preset_overrides"], raw)

    def reset_override(self, preset_id: str) -> None:
        raw = self._raw_list(STORAGE_KEYS["preset_overrides"])
        self._store.set(STORAGE_KEYS["preset_overrides"], [item for item in raw if item.get("id") != preset_id])

    def _raw_list(self, key: str) -> List[dict]:
        value = self._store.get(key, [])
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    def _load_map(self, key: str, *, builtin: bool) -> Dict[str, SessionPreset]:
        presets: Dict[str, SessionPreset] = {}
        for item in self._raw_list(key):
            try:
                preset = SessionPreset.from_dict(item, builtin=builtin)
            except ValidationError as exc:
                _ENGINE_LOGGER.debug("Ignoring stored preset under %s: %s", key, exc.full_message)
                continue
            presets[preset.id] = preset
        return presets
