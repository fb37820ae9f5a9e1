from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from practice_engine.errors import ErrorCode, PoolEmptyError, ValidationError, format_error_message
from practice_engine.library import JsonLibrary
from practice_engine.models import SessionStage, Tag, build_tag_path


def test_library_skips_invalid_records(tmp_path: Path) -> None:
    path = tmp_path / "library.json"
    path.write_text(
        json.dumps(
            {
                "images": [
                    {"id": "a", "filename": "a.jpg", "fullPath": "/x/a.jpg"},
                    {"id": "", "filename": "b.jpg", "fullPath": "/x/b.jpg"},
                    {"id": "c", "filename": "c.jpg"},
                    "garbage",
                ],
                "tags": [{"id": "t", "name": "Torso"}, {"id": "", "name": "nameless"}],
                "imageTags": [{"imageId": "a", "tagId": "t"}],
            }
        ),
        encoding="utf-8",
    )

    library = JsonLibrary(path)

    assert library.image_ids() == ("a",)
    assert [tag.id for tag in asyncio.run(library.get_all_tags())] == ["t"]
    assert [image.id for image in asyncio.run(library.get_images_by_tags(["t"]))] == ["a"]


def test_missing_library_file_is_empty(tmp_path: Path) -> None:
    library = JsonLibrary(tmp_path / "absent.json")

    assert asyncio.run(library.get_library_images()) == []
    assert asyncio.run(library.get_image("a")) is None


def test_tag_path_walks_parents_and_stops_on_cycles() -> None:
    tags = [Tag("root", "Pose"), Tag("mid", "Standing", parent_id="root"), Tag("leaf", "Contrapposto", parent_id="mid")]
    assert build_tag_path(tags[2], tags) == "Pose/Standing/Contrapposto"

    looped = [Tag("a", "A", parent_id="b"), Tag("b", "B", parent_id="a")]
    assert build_tag_path(looped[0], looped) == "B/A"


@pytest.mark.parametrize("count,duration", [(0, 30), (3, 0), (-1, 10)])
def test_stage_rejects_non_positive_values(count: int, duration: int) -> None:
    with pytest.raises(ValidationError):
        SessionStage(count, duration)


def test_stage_payload_uses_camel_case_keys() -> None:
    stage = SessionStage.from_dict({"imageCount": "4", "durationSeconds": 90, "tagFilter": "hands"})

    assert stage.tag_filter == frozenset({"hands"})
    assert stage.to_dict() == {"imageCount": 4, "durationSeconds": 90, "tagFilter": ["hands"]}


def test_format_error_message_variants() -> None:
    error = PoolEmptyError(0, SessionStage(1, 30, description="Gestures"))

    assert error.code is ErrorCode.POOL_EMPTY
    assert format_error_message(error) == "Session: Stage 1 (Gestures) has no images matching its tag filter"
    assert format_error_message(RuntimeError("boom")) == "boom"
    assert format_error_message(42) == "An unexpected error occurred"
