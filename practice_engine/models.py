from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from practice_engine.errors import ValidationError


@dataclass(frozen=True)
class ImageRef:
    """Reference to an image owned by the external library store."""

    id: str
    filename: str
    path: str


@dataclass(frozen=True)
class Tag:
    id: str
    name: str
    parent_id: Optional[str] = None
    last_used: Optional[float] = None


def build_tag_path(tag: Tag, all_tags: Iterable[Tag]) -> str:
    """Return the display path for a tag by walking its parent chain, e.g. ``Pose/Standing``."""
    index = {candidate.id: candidate for candidate in all_tags}
    parts = [tag.name]
    seen = {tag.id}
    current = tag
    while current.parent_id:
        parent = index.get(current.parent_id)
        if parent is None or parent.id in seen:
            break
        parts.insert(0, parent.name)
        seen.add(parent.id)
        current = parent
    return "/".join(parts)


@dataclass(frozen=True)
class SessionStage:
    image_count: int
    duration_seconds: int
    description: Optional[str] = None
    tag_filter: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if int(self.image_count) <= 0:
            raise ValidationError("Stage image count must be greater than zero", field="image_count")
        if int(self.duration_seconds) <= 0:
            raise ValidationError("Stage duration must be greater than zero", field="duration_seconds")
        if not isinstance(self.tag_filter, frozenset):
            object.__setattr__(self, "tag_filter", frozenset(self.tag_filter or ()))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "imageCount": int(self.image_count),
            "durationSeconds": int(self.duration_seconds),
        }
        if self.description:
            payload["description"] = self.description
        if self.tag_filter:
            payload["tagFilter"] = sorted(self.tag_filter)
        return payload

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "SessionStage":
        try:
            count = int(data["imageCount"])
            duration = int(data["durationSeconds"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid stage payload: {exc}", field="stages") from exc
        description = data.get("description")
        tags = data.get("tagFilter") or ()
        if isinstance(tags, str):
            tags = (tags,)
        return SessionStage(
            image_count=count,
            duration_seconds=duration,
            description=str(description) if description else None,
            tag_filter=frozenset(str(tag) for tag in tags),
        )


@dataclass(frozen=True)
class SessionPreset:
    """A named, ordered list of stages (built-in classroom preset or custom session)."""

    id: str
    name: str
    stages: Tuple[SessionStage, ...]
    description: str = ""
    builtin: bool = False

    @property
    def total_poses(self) -> int:
        return sum(stage.image_count for stage in self.stages)

    @property
    def total_seconds(self) -> int:
        return sum(stage.image_count * stage.duration_seconds for stage in self.stages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "stages": [stage.to_dict() for stage in self.stages],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any], *, builtin: bool = False) -> "SessionPreset":
        preset_id = str(data.get("id") or "").strip()
        name = str(data.get("name") or "").strip()
        if not preset_id:
            raise ValidationError("Preset id is missing", field="id")
        if not name:
            raise ValidationError("Preset name is missing", field="name")
        raw_stages = data.get("stages")
        if not isinstance(raw_stages, list) or not raw_stages:
            raise ValidationError("Preset has no stages", field="stages")
        return SessionPreset(
            id=preset_id,
            name=name,
            stages=tuple(SessionStage.from_dict(stage) for stage in raw_stages),
            description=str(data.get("description") or ""),
            builtin=builtin,
        )


@dataclass
class TimerEntry:
    """Atomic unit of playback: one pose shown for ``duration_seconds``."""

    image_id: str
    duration_seconds: int
    stage_index: int
    pose_number: int


class PlaybackPhase(str, Enum):
    SETUP = "setup"
    LOADING = "loading"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class PlaybackSnapshot:
    current_index: int
    time_remaining: int
    is_paused: bool
    phase: PlaybackPhase
    total: int
    auto_advance: bool = True


def stage_boundaries(entries: Sequence[TimerEntry]) -> List[Tuple[int, int, int]]:
    """Collapse entries into ``(first_index, last_index, stage_index)`` runs."""
    runs: List[Tuple[int, int, int]] = []
    for idx, entry in enumerate(entries):
        if runs and runs[-1][2] == entry.stage_index and runs[-1][1] == idx - 1:
            first, _last, stage = runs[-1]
            runs[-1] = (first, idx, stage)
        else:
            runs.append((idx, idx, entry.stage_index))
    return runs
