"""End-to-end practice session walkthroughs driven through the controller."""
from __future__ import annotations

import asyncio
import random
from pathlib import Path
from typing import List

import pytest

from practice_client.session_controller import SessionController
from practice_engine.audio import AudioCues
from practice_engine.generator import generate_classroom_session
from practice_engine.library import JsonLibrary, LoggingNotifier
from practice_engine.models import PlaybackPhase, TimerEntry, stage_boundaries
from practice_engine.presets import PresetCatalog
from practice_engine.storage import KeyValueStore
from practice_engine.timers import TICK_INTERVAL_MS, TickTimers
from practice_input.events import KeyEvent


class AfterHarness:
    def __init__(self) -> None:
        self.scheduled: list[tuple[str, int, object]] = []
        self.cancelled: list[object] = []

    def after(self, ms: int, cb) -> str:
        handle = f"h{len(self.scheduled) + 1}"
        self.scheduled.append((handle, ms, cb))
        return handle

    def cancel(self, handle: object) -> None:
        self.cancelled.append(handle)

    def tick(self, times: int = 1) -> None:
        for _ in range(times):
            for handle, delay, cb in reversed(self.scheduled):
                if delay == TICK_INTERVAL_MS and handle not in self.cancelled:
                    cb()
                    break


class CueRecorder:
    def __init__(self) -> None:
        self.lengths: List[int] = []

    def __call__(self, samples, rate: int) -> None:
        self.lengths.append(len(samples))


def _library(count: int = 5) -> JsonLibrary:
    images = [{"id": f"pose{i}", "filename": f"pose{i}.jpg", "fullPath": f"/ref/pose{i}.jpg"} for i in range(count)]
    return JsonLibrary.from_payload({"images": images})


def _session(tmp_path: Path):
    harness = AfterHarness()
    recorder = CueRecorder()
    controller = SessionController(
        _library(),
        TickTimers(harness.after, harness.cancel),
        cues=AudioCues(output=recorder),
        store=KeyValueStore(tmp_path / "state.json"),
        image_size_provider=lambda image: (800.0, 600.0),
    )
    controller.container_resized(1000, 600)
    return controller, harness, recorder


def _entries(*durations: int) -> List[TimerEntry]:
    return [
        TimerEntry(image_id=f"pose{idx % 5}", duration_seconds=duration, stage_index=0, pose_number=idx + 1)
        for idx, duration in enumerate(durations)
    ]


def test_classic_preset_over_small_library(tmp_path: Path) -> None:
    preset = PresetCatalog(KeyValueStore(tmp_path / "state.json")).get("classic-figure")
    assert preset is not None

    entries = asyncio.run(
        generate_classroom_session(preset, _library(), LoggingNotifier(), random_source=random.Random(7))
    )

    assert len(entries) == 36
    assert stage_boundaries(entries) == [(0, 11, 0), (12, 21, 1), (22, 29, 2), (30, 35, 3)]
    durations = {entry.stage_index: entry.duration_seconds for entry in entries}
    assert durations == {0: 30, 1: 60, 2: 120, 3: 300}
    counts = {image_id: sum(1 for e in entries if e.image_id == image_id) for image_id in {e.image_id for e in entries}}
    assert len(counts) == 5
    assert all(count > 1 for count in counts.values())


def test_plumb_key_tap_and_hold(tmp_path: Path) -> None:
    controller, _harness, _recorder = _session(tmp_path)
    asyncio.run(controller.start_session(_entries(60, 60)))
    plumb = controller.overlay.plumb
    assert plumb.show_vertical is False

    controller.key_down(KeyEvent("v"))
    controller.key_up(KeyEvent("v"))
    assert plumb.show_vertical is True

    before = plumb.vertical_x
    controller.key_down(KeyEvent("v"))
    controller.key_down(KeyEvent("ArrowLeft"))
    controller.key_up(KeyEvent("ArrowLeft"))
    controller.key_up(KeyEvent("v"))

    assert plumb.vertical_x == pytest.approx(before - 0.01)
    assert plumb.show_vertical is True
    assert controller.playback.current_index == 0


def test_horizontal_angle_line_reads_zero(tmp_path: Path) -> None:
    controller, _harness, _recorder = _session(tmp_path)
    asyncio.run(controller.start_session(_entries(60)))
    geometry = controller.overlay.geometry

    controller.key_down(KeyEvent("a"))
    controller.pointer_down(*geometry.to_pixels(0.2, 0.3))
    controller.pointer_down(*geometry.to_pixels(0.8, 0.3))

    lines = controller.overlay.angle_tool.lines
    assert len(lines) == 1
    assert lines[0].point_a.x == pytest.approx(0.2)
    assert lines[0].point_b.x == pytest.approx(0.8)
    assert lines[0].angle_degrees(geometry.aspect) == pytest.approx(0.0, abs=1e-9)


def test_extend_then_reset_uses_extended_duration(tmp_path: Path) -> None:
    controller, harness, _recorder = _session(tmp_path)
    asyncio.run(controller.start_session(_entries(60, 30)))
    harness.tick(10)
    assert controller.snapshot().time_remaining == 50

    controller.extend(300)
    assert controller.snapshot().time_remaining == 350
    assert controller.playback.current_entry.duration_seconds == 360

    harness.tick(5)
    controller.key_down(KeyEvent("r"))
    assert controller.snapshot().time_remaining == 360

    controller.key_down(KeyEvent("r"))
    assert controller.snapshot().time_remaining == 360


def test_session_completes_exactly_once(tmp_path: Path) -> None:
    controller, harness, recorder = _session(tmp_path)
    asyncio.run(controller.start_session(_entries(2, 1)))

    harness.tick(2)
    assert controller.playback.current_index == 1
    assert len(recorder.lengths) == 1

    harness.tick(1)
    assert controller.playback.phase is PlaybackPhase.COMPLETED
    harness.tick(3)

    assert controller.playback.phase is PlaybackPhase.COMPLETED
    assert len(recorder.lengths) == 2
    assert recorder.lengths[1] > recorder.lengths[0]
    assert not controller.timers.tick_active

    controller.restart()
    assert controller.playback.phase is PlaybackPhase.ACTIVE
    assert controller.playback.current_index == 0
    assert controller.snapshot().time_remaining == 2
