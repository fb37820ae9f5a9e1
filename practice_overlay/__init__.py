from .annotations import AngleLine, AngleTool, NormalizedPoint
from .geometry import ImageBounds, OverlayGeometry, clamp_unit, fit_image_bounds
from .guides import COLOR_PRESETS, GRID_CELL_COUNTS, GridConfig, PlumbConfig, grid_lines
from .overlay import HORIZONTAL_LINE, VERTICAL_LINE, AnnotationOverlay
from .render import OverlayPainterAdapter, render_overlay

__all__ = [
    "AngleLine",
    "AngleTool",
    "NormalizedPoint",
    "ImageBounds",
    "OverlayGeometry",
    "clamp_unit",
    "fit_image_bounds",
    "COLOR_PRESETS",
    "GRID_CELL_COUNTS",
    "GridConfig",
    "PlumbConfig",
    "grid_lines",
    "HORIZONTAL_LINE",
    "VERTICAL_LINE",
    "AnnotationOverlay",
    "OverlayPainterAdapter",
    "render_overlay",
]
