from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

import pytest

from practice_client import launcher
from practice_engine.errors import PoolEmptyError
from practice_engine.library import JsonLibrary
from practice_engine.presets import PresetCatalog
from practice_engine.storage import KeyValueStore


class RecordingNotifier:
    def __init__(self) -> None:
        self.warnings: List[str] = []
        self.errors: List[str] = []

    def warning(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


def _payload() -> dict:
    return {
        "images": [{"id": f"img{i}", "filename": f"img{i}.jpg", "fullPath": f"/lib/img{i}.jpg"} for i in range(4)],
        "tags": [{"id": "t-hands", "name": "Hands"}],
        "imageTags": [{"imageId": "img1", "tagId": "t-hands"}],
    }


def _catalog(tmp_path: Path) -> PresetCatalog:
    return PresetCatalog(KeyValueStore(tmp_path / "state.json"))


@pytest.fixture
def isolated_logging(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("DRAWSTACK_LOG_DIR", str(tmp_path / "logs"))
    logger = logging.getLogger("DrawStack")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield tmp_path / "logs"
    for handler in list(logger.handlers):
        if handler not in saved[0]:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def test_parser_modes_are_exclusive() -> None:
    parser = launcher.build_parser()

    args = parser.parse_args(["--library", "lib.json", "--quick", "5", "--seconds", "45", "--tags", "a, b"])
    assert args.quick == 5
    assert args.seconds == 45
    assert launcher._split_ids(args.tags) == ["a", "b"]

    with pytest.raises(SystemExit):
        parser.parse_args(["--library", "lib.json", "--quick", "5", "--preset", "long-pose"])


def test_default_preset_generates_classic_session(tmp_path: Path) -> None:
    args = launcher.build_parser().parse_args(["--library", "lib.json"])

    entries = launcher.prepare_entries(args, JsonLibrary.from_payload(_payload()), _catalog(tmp_path), RecordingNotifier())

    assert len(entries) == 36
    assert [entry.pose_number for entry in entries] == list(range(1, 37))


def test_images_limit_the_pool_in_order(tmp_path: Path) -> None:
    args = launcher.build_parser().parse_args(
        ["--library", "lib.json", "--images", "img3,img0", "--quick", "4", "--seconds", "30"]
    )

    entries = launcher.prepare_entries(args, JsonLibrary.from_payload(_payload()), _catalog(tmp_path), RecordingNotifier())

    assert len(entries) == 4
    assert {entry.image_id for entry in entries} == {"img0", "img3"}
    assert all(entry.duration_seconds == 30 for entry in entries)


def test_quick_session_defaults_to_settings_duration(tmp_path: Path) -> None:
    args = launcher.build_parser().parse_args(["--library", "lib.json", "--quick", "3"])

    entries = launcher.prepare_entries(
        args, JsonLibrary.from_payload(_payload()), _catalog(tmp_path), RecordingNotifier(), default_seconds=90
    )

    assert [entry.duration_seconds for entry in entries] == [90, 90, 90]


def test_quick_session_with_unmatched_tag_aborts(tmp_path: Path) -> None:
    notifier = RecordingNotifier()
    args = launcher.build_parser().parse_args(["--library", "lib.json", "--quick", "3", "--tags", "t-feet"])

    with pytest.raises(PoolEmptyError):
        launcher.prepare_entries(args, JsonLibrary.from_payload(_payload()), _catalog(tmp_path), notifier)

    assert len(notifier.errors) == 1


def test_unknown_preset_exits(tmp_path: Path) -> None:
    args = launcher.build_parser().parse_args(["--library", "lib.json", "--preset", "nope"])

    with pytest.raises(SystemExit) as excinfo:
        launcher.prepare_entries(args, JsonLibrary.from_payload(_payload()), _catalog(tmp_path), RecordingNotifier())

    assert "nope" in str(excinfo.value)


def test_list_presets_prints_builtins(tmp_path: Path, capsys, isolated_logging: Path) -> None:
    library_path = tmp_path / "lib.json"
    library_path.write_text(json.dumps(_payload()), encoding="utf-8")

    code = launcher.main(
        [
            "--library",
            str(library_path),
            "--list-presets",
            "--state",
            str(tmp_path / "state.json"),
            "--settings",
            str(tmp_path / "missing-settings.json"),
        ]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "classic-figure" in out
    assert "36 poses" in out
    assert (isolated_logging / "DrawStack").is_dir()
