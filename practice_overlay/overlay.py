"""Overlay aggregate: geometry, angle tool, plumb lines, grid and pointer dragging."""
from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from practice_overlay.annotations import AngleTool, NormalizedPoint
from practice_overlay.geometry import OverlayGeometry, clamp_unit
from practice_overlay.guides import GridConfig, PlumbConfig

_LOGGER_NAME = "DrawStack.Overlay"
_OVERLAY_LOGGER = logging.getLogger(_LOGGER_NAME)

VERTICAL_LINE = "vertical-line"
HORIZONTAL_LINE = "horizontal-line"
ANGLE_PREFIX = "angle:"
HIT_TOLERANCE_PX = 8.0


def angle_target(line_id: str, endpoint: str) -> str:
    return f"{ANGLE_PREFIX}{line_id}:{endpoint}"


def parse_angle_target(target: str) -> Optional[Tuple[str, str]]:
    if not target.startswith(ANGLE_PREFIX):
        return None
    line_id, _, endpoint = target[len(ANGLE_PREFIX) :].rpartition(":")
    if not line_id or endpoint not in ("a", "b"):
        return None
    return line_id, endpoint


class AnnotationOverlay:
    """All overlay state is normalized to the current image bounds."""

    def __init__(self, *, hit_tolerance: float = HIT_TOLERANCE_PX) -> None:
        self.geometry = OverlayGeometry()
        self.angle_tool = AngleTool()
        self.plumb = PlumbConfig()
        self.grid = GridConfig()
        self.drag_target: Optional[str] = None
        self.hit_tolerance = hit_tolerance

    def clear_annotations(self) -> None:
        """Drop every angle line, finished or in progress. Required on every image change."""
        self.angle_tool.clear()
        self.drag_target = None

    def hit_test(self, px: float, py: float) -> Optional[str]:
        bounds = self.geometry.bounds
        if bounds.is_empty:
            return None
        tolerance = self.hit_tolerance
        endpoint_hit = self._endpoint_at(px, py)
        if endpoint_hit is not None:
            return angle_target(*endpoint_hit)
        if not self.plumb.locked:
            if self.plumb.show_vertical and bounds.top <= py <= bounds.bottom:
                vx, _ = self.geometry.to_pixels(self.plumb.vertical_x, 0.0)
                if abs(px - vx) <= tolerance:
                    return VERTICAL_LINE
            if self.plumb.show_horizontal and bounds.left <= px <= bounds.right:
                _, hy = self.geometry.to_pixels(0.0, self.plumb.horizontal_y)
                if abs(py - hy) <= tolerance:
                    return HORIZONTAL_LINE
        return None

    def pointer_down(self, px: float, py: float, *, color: Optional[str] = None) -> Optional[str]:
        """Feed the angle tool in angle mode, otherwise start a drag on a struck element.

        In angle mode a click on an existing endpoint snaps to it, so a new line can
        start (or finish) exactly on a vertex. Endpoints and plumb lines are dragged
        with angle mode off. Returns the drag target that was set, if any.
        """
        if self.angle_tool.active:
            self._angle_click(px, py, color)
            return None
        target = self.hit_test(px, py)
        if target is not None:
            self.drag_target = target
        return target

    def _angle_click(self, px: float, py: float, color: Optional[str]) -> None:
        point = self._snapped_point(px, py)
        if point is None:
            return
        finished = self.angle_tool.pointer_down(point, color or self.grid.color)
        if finished is not None:
            _OVERLAY_LOGGER.debug("Angle line %s finalized at %.1f deg", finished.id, finished.angle_degrees())

    def _snapped_point(self, px: float, py: float) -> Optional[NormalizedPoint]:
        hit = self._endpoint_at(px, py)
        if hit is not None:
            line = self.angle_tool.find(hit[0])
            if line is not None:
                return line.point_a if hit[1] == "a" else line.point_b
        coords = self.geometry.to_normalized(px, py, clamp=True)
        if coords is None:
            return None
        return NormalizedPoint(*coords)

    def _endpoint_at(self, px: float, py: float) -> Optional[Tuple[str, str]]:
        if self.geometry.bounds.is_empty:
            return None
        for line in reversed(self.angle_tool.lines):
            for endpoint, point in (("b", line.point_b), ("a", line.point_a)):
                ex, ey = self.geometry.to_pixels(point.x, point.y)
                if math.hypot(px - ex, py - ey) <= self.hit_tolerance:
                    return line.id, endpoint
        return None

    def pointer_move(self, px: float, py: float) -> bool:
        target = self.drag_target
        if target is None:
            return False
        coords = self.geometry.to_normalized(px, py, clamp=True)
        if coords is None:
            return False
        nx, ny = coords
        if target == VERTICAL_LINE:
            self.plumb.vertical_x = nx
            return True
        if target == HORIZONTAL_LINE:
            self.plumb.horizontal_y = ny
            return True
        parsed = parse_angle_target(target)
        if parsed is None:
            return False
        line_id, endpoint = parsed
        return self.angle_tool.move_endpoint(line_id, endpoint, NormalizedPoint(nx, ny)) is not None

    def pointer_up(self) -> None:
        self.drag_target = None

    def nudge_vertical(self, delta: float) -> float:
        self.plumb.vertical_x = clamp_unit(round(self.plumb.vertical_x + delta, 6))
        return self.plumb.vertical_x

    def nudge_horizontal(self, delta: float) -> float:
        self.plumb.horizontal_y = clamp_unit(round(self.plumb.horizontal_y + delta, 6))
        return self.plumb.horizontal_y
