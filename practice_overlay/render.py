from __future__ import annotations

from practice_overlay.annotations import AngleLine
from practice_overlay.guides import grid_lines
from practice_overlay.overlay import AnnotationOverlay

ENDPOINT_RADIUS = 5


class OverlayPainterAdapter:
    def set_pen(self, color: str, *, width: int = 2, opacity: float = 1.0) -> None: ...
    def draw_line(self, x1: int, y1: int, x2: int, y2: int) -> None: ...
    def draw_circle_marker(self, x: int, y: int, radius: int, color: str) -> None: ...
    def draw_text(self, x: int, y: int, text: str, color: str) -> None: ...


def render_overlay(adapter: OverlayPainterAdapter, overlay: AnnotationOverlay) -> None:
    geometry = overlay.geometry
    bounds = geometry.bounds
    if bounds.is_empty:
        return

    grid = overlay.grid
    if grid.active:
        adapter.set_pen(grid.color, width=grid.line_width, opacity=grid.opacity)
        for x1, y1, x2, y2 in grid_lines(bounds, grid):
            adapter.draw_line(int(round(x1)), int(round(y1)), int(round(x2)), int(round(y2)))

    plumb = overlay.plumb
    if plumb.show_vertical or plumb.show_horizontal:
        adapter.set_pen(plumb.color, width=plumb.width, opacity=plumb.opacity)
        if plumb.show_vertical:
            x, _ = geometry.to_pixels(plumb.vertical_x, 0.0)
            adapter.draw_line(int(round(x)), int(round(bounds.top)), int(round(x)), int(round(bounds.bottom)))
        if plumb.show_horizontal:
            _, y = geometry.to_pixels(0.0, plumb.horizontal_y)
            adapter.draw_line(int(round(bounds.left)), int(round(y)), int(round(bounds.right)), int(round(y)))

    aspect = geometry.aspect
    for line in overlay.angle_tool.lines:
        _render_angle_line(adapter, overlay, line, aspect)
    current = overlay.angle_tool.current
    if current is not None:
        x, y = geometry.to_pixels(current.point_a.x, current.point_a.y)
        adapter.draw_circle_marker(int(round(x)), int(round(y)), ENDPOINT_RADIUS, current.color)


def _render_angle_line(adapter: OverlayPainterAdapter, overlay: AnnotationOverlay, line: AngleLine, aspect) -> None:
    geometry = overlay.geometry
    ax, ay = (int(round(v)) for v in geometry.to_pixels(line.point_a.x, line.point_a.y))
    bx, by = (int(round(v)) for v in geometry.to_pixels(line.point_b.x, line.point_b.y))
    adapter.set_pen(line.color, width=2)
    adapter.draw_line(ax, ay, bx, by)
    adapter.draw_circle_marker(ax, ay, ENDPOINT_RADIUS, line.color)
    adapter.draw_circle_marker(bx, by, ENDPOINT_RADIUS, line.color)
    label = f"{line.acute_reading(aspect):.1f}°"
    adapter.draw_text((ax + bx) // 2 + 8, (ay + by) // 2 - 8, label, line.color)
