"""Plumb line and grid configuration plus derived grid geometry."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from practice_overlay.geometry import ImageBounds

GRID_CELL_COUNTS: Dict[int, int] = {1: 32, 2: 16, 3: 8}
GRID_MODES = (0, 1, 2, 3)
MIN_LINE_WIDTH = 1
MAX_LINE_WIDTH = 5


@dataclass(frozen=True)
class ColorPreset:
    name: str
    color: str


COLOR_PRESETS: Tuple[ColorPreset, ...] = (
    ColorPreset("Red", "#ff3b30"),
    ColorPreset("Cyan", "#00e5ff"),
    ColorPreset("Yellow", "#ffd60a"),
    ColorPreset("Green", "#34c759"),
    ColorPreset("Magenta", "#ff2d92"),
    ColorPreset("White", "#ffffff"),
    ColorPreset("Black", "#000000"),
)


@dataclass
class PlumbConfig:
    show_vertical: bool = False
    show_horizontal: bool = False
    vertical_x: float = 0.5
    horizontal_y: float = 0.5
    color: str = COLOR_PRESETS[0].color
    width: int = 1
    opacity: float = 0.8
    locked: bool = False
    show_plumb_tool: bool = False


@dataclass
class GridConfig:
    mode: int = 0
    show_diagonals: bool = False
    line_width: int = 1
    color_index: int = 0
    opacity: float = 0.6
    locked: bool = False

    @property
    def active(self) -> bool:
        return self.mode > 0

    @property
    def color(self) -> str:
        return COLOR_PRESETS[self.color_index % len(COLOR_PRESETS)].color

    def cycle_mode(self) -> int:
        self.mode = (self.mode + 1) % len(GRID_MODES)
        return self.mode

    def cycle_color(self) -> int:
        self.color_index = (self.color_index + 1) % len(COLOR_PRESETS)
        return self.color_index

    def adjust_width(self, delta: int) -> int:
        self.line_width = max(MIN_LINE_WIDTH, min(MAX_LINE_WIDTH, self.line_width + delta))
        return self.line_width


Segment = Tuple[float, float, float, float]


def grid_lines(bounds: ImageBounds, config: GridConfig) -> List[Segment]:
    """Pixel segments for the active grid, clipped to the image.

    Cells are square: the cell size is the longer image side divided by the density's
    cell count, so the shorter side shows fewer lines.
    """
    cells = GRID_CELL_COUNTS.get(config.mode)
    if not cells or bounds.is_empty:
        return []
    cell = max(bounds.width, bounds.height) / cells
    segments: List[Segment] = []
    x = bounds.left + cell
    while x < bounds.right - 1e-6:
        segments.append((x, bounds.top, x, bounds.bottom))
        x += cell
    y = bounds.top + cell
    while y < bounds.bottom - 1e-6:
        segments.append((bounds.left, y, bounds.right, y))
        y += cell
    if config.show_diagonals:
        segments.append((bounds.left, bounds.top, bounds.right, bounds.bottom))
        segments.append((bounds.right, bounds.top, bounds.left, bounds.bottom))
    return segments
