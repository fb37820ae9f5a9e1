from __future__ import annotations

from typing import List, Tuple

import pytest

from practice_overlay.annotations import AngleLine, AngleTool, NormalizedPoint
from practice_overlay.geometry import ImageBounds, OverlayGeometry, fit_image_bounds
from practice_overlay.guides import COLOR_PRESETS, GridConfig, grid_lines
from practice_overlay.overlay import HORIZONTAL_LINE, VERTICAL_LINE, AnnotationOverlay
from practice_overlay.render import OverlayPainterAdapter, render_overlay


class FakeAdapter(OverlayPainterAdapter):
    def __init__(self) -> None:
        self.operations: List[Tuple[str, Tuple]] = []

    def set_pen(self, color: str, *, width: int = 2, opacity: float = 1.0) -> None:
        self.operations.append(("pen", (color, width)))

    def draw_line(self, x1: int, y1: int, x2: int, y2: int) -> None:
        self.operations.append(("line", (x1, y1, x2, y2)))

    def draw_circle_marker(self, x: int, y: int, radius: int, color: str) -> None:
        self.operations.append(("circle", (x, y, radius, color)))

    def draw_text(self, x: int, y: int, text: str, color: str) -> None:
        self.operations.append(("text", (x, y, text, color)))


def _overlay(container=(1000, 600), image=(800, 600)) -> AnnotationOverlay:
    overlay = AnnotationOverlay()
    overlay.geometry.recompute("image_changed", container_size=container, image_size=image)
    return overlay


def test_fit_image_bounds_centres_letterboxed_image() -> None:
    bounds = fit_image_bounds(1000, 600, 800, 600)

    assert bounds == ImageBounds(100.0, 0.0, 800.0, 600.0)
    assert fit_image_bounds(0, 600, 800, 600).is_empty


def test_normalized_mapping_uses_image_box_not_viewport() -> None:
    geometry = OverlayGeometry()
    geometry.recompute("image_changed", container_size=(1000, 600), image_size=(800, 600))

    assert geometry.to_normalized(500, 300) == (0.5, 0.5)
    assert geometry.to_normalized(50, 300) == pytest.approx((-0.0625, 0.5))
    assert geometry.to_normalized(50, 700, clamp=True) == (0.0, 1.0)
    assert geometry.to_pixels(0.25, 0.5) == (300.0, 300.0)


def test_recompute_on_resize_keeps_normalized_state() -> None:
    overlay = _overlay()
    overlay.plumb.show_vertical = True
    overlay.plumb.vertical_x = 0.25

    overlay.geometry.recompute("container_resized", container_size=(2000, 1200))

    assert overlay.geometry.to_pixels(overlay.plumb.vertical_x, 0)[0] == pytest.approx(600.0)
    with pytest.raises(ValueError):
        overlay.geometry.recompute("whenever")


def test_angle_tool_two_clicks_finalize_horizontal_line() -> None:
    tool = AngleTool()
    tool.toggle()

    assert tool.pointer_down(NormalizedPoint(0.2, 0.3)) is None
    assert tool.current is not None and tool.current.in_progress
    finished = tool.pointer_down(NormalizedPoint(0.8, 0.3))

    assert finished is not None
    assert tool.current is None
    assert tool.lines == [finished]
    assert finished.angle_degrees() == pytest.approx(0.0, abs=1e-9)


def test_angle_folding_treats_supplements_alike() -> None:
    rising = AngleLine("a", NormalizedPoint(0.0, 0.0), NormalizedPoint(1.0, -1.0))
    leaning = AngleLine("b", NormalizedPoint(1.0, 0.0), NormalizedPoint(0.0, -1.0))

    assert rising.angle_degrees() == pytest.approx(45.0)
    assert leaning.angle_degrees() == pytest.approx(135.0)
    assert rising.acute_reading() == pytest.approx(leaning.acute_reading())
    assert 0.0 <= leaning.angle_degrees() <= 180.0


def test_angle_uses_image_aspect() -> None:
    line = AngleLine("a", NormalizedPoint(0.0, 0.0), NormalizedPoint(1.0, 1.0))

    assert line.angle_degrees((2.0, 1.0)) == pytest.approx(26.565, abs=1e-3)


def test_remove_last_prefers_in_progress_line() -> None:
    tool = AngleTool()
    tool.toggle()
    tool.pointer_down(NormalizedPoint(0.1, 0.1))
    tool.pointer_down(NormalizedPoint(0.2, 0.2))
    tool.pointer_down(NormalizedPoint(0.5, 0.5))

    assert tool.remove_last() is True
    assert tool.current is None and len(tool.lines) == 1
    assert tool.remove_last() is True
    assert tool.lines == []
    assert tool.remove_last() is False


def test_grid_cell_size_uses_longer_side() -> None:
    bounds = ImageBounds(0, 0, 800, 400)
    config = GridConfig(mode=3)

    segments = grid_lines(bounds, config)
    verticals = [seg for seg in segments if seg[0] == seg[2]]
    horizontals = [seg for seg in segments if seg[1] == seg[3]]

    assert len(verticals) == 7
    assert len(horizontals) == 3
    assert grid_lines(bounds, GridConfig(mode=0)) == []

    config.show_diagonals = True
    assert len(grid_lines(bounds, config)) == 12


def test_grid_config_cycles_and_clamps() -> None:
    config = GridConfig()

    assert [config.cycle_mode() for _ in range(4)] == [1, 2, 3, 0]
    assert config.adjust_width(+10) == 5
    assert config.adjust_width(-10) == 1
    for _ in range(len(COLOR_PRESETS)):
        config.cycle_color()
    assert config.color_index == 0


def test_drag_vertical_line_is_clamped() -> None:
    overlay = _overlay()
    overlay.plumb.show_vertical = True

    assert overlay.pointer_down(502, 300) == VERTICAL_LINE
    assert overlay.pointer_move(2000, 300) is True
    assert overlay.plumb.vertical_x == 1.0
    overlay.pointer_up()
    assert overlay.drag_target is None
    assert overlay.pointer_move(500, 300) is False


def test_locked_plumb_lines_ignore_hits() -> None:
    overlay = _overlay()
    overlay.plumb.show_horizontal = True
    assert overlay.hit_test(500, 300) == HORIZONTAL_LINE

    overlay.plumb.locked = True
    assert overlay.hit_test(500, 300) is None


def test_dragging_angle_endpoint_updates_line() -> None:
    overlay = _overlay()
    overlay.angle_tool.toggle()
    overlay.pointer_down(180, 180)
    overlay.pointer_down(820, 180)
    line = overlay.angle_tool.lines[0]

    overlay.angle_tool.toggle()
    target = overlay.pointer_down(820, 180)
    assert target == f"angle:{line.id}:b"
    overlay.pointer_move(820, 420)

    moved = overlay.angle_tool.lines[0]
    assert moved.point_b == NormalizedPoint(0.9, 0.7)
    assert moved.point_a == line.point_a


def test_clear_annotations_drops_all_lines() -> None:
    overlay = _overlay()
    overlay.angle_tool.toggle()
    overlay.pointer_down(200, 200)
    overlay.pointer_down(400, 200)
    overlay.pointer_down(300, 300)

    overlay.clear_annotations()

    assert overlay.angle_tool.lines == []
    assert overlay.angle_tool.current is None
    assert overlay.angle_tool.active


def test_render_overlay_draws_guides_and_labels() -> None:
    overlay = _overlay()
    overlay.plumb.show_vertical = True
    overlay.grid.mode = 3
    overlay.angle_tool.toggle()
    overlay.pointer_down(180, 180)
    overlay.pointer_down(820, 180)

    adapter = FakeAdapter()
    render_overlay(adapter, overlay)

    lines = [value for op, value in adapter.operations if op == "line"]
    texts = [value for op, value in adapter.operations if op == "text"]
    assert (500, 0, 500, 600) in lines
    assert texts and texts[0][2] == "0.0°"


def test_angle_mode_click_on_vertex_starts_snapped_line() -> None:
    overlay = _overlay()
    overlay.angle_tool.toggle()
    overlay.pointer_down(180, 180)
    overlay.pointer_down(820, 180)
    first = overlay.angle_tool.lines[0]

    assert overlay.pointer_down(822, 182) is None
    assert overlay.drag_target is None
    assert overlay.angle_tool.current is not None
    assert overlay.angle_tool.current.point_a == first.point_b

    overlay.pointer_down(820, 420)

    second = overlay.angle_tool.lines[1]
    assert second.point_a == first.point_b
    assert second.point_b == NormalizedPoint(0.9, 0.7)


def test_second_click_near_plumb_line_finishes_angle() -> None:
    overlay = _overlay()
    overlay.plumb.show_vertical = True
    overlay.angle_tool.toggle()

    overlay.pointer_down(180, 180)
    assert overlay.pointer_down(502, 300) is None

    assert overlay.drag_target is None
    assert overlay.angle_tool.current is None
    assert len(overlay.angle_tool.lines) == 1
    assert overlay.angle_tool.lines[0].point_b.x == pytest.approx(0.5025)
    assert overlay.plumb.vertical_x == 0.5
