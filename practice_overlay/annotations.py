"""Angle measurement lines expressed in normalized image coordinates."""
from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from practice_overlay.geometry import clamp_unit

DEFAULT_ANGLE_COLOR = "#ff3b30"


@dataclass(frozen=True)
class NormalizedPoint:
    x: float
    y: float

    def clamped(self) -> "NormalizedPoint":
        return NormalizedPoint(clamp_unit(self.x), clamp_unit(self.y))


@dataclass(frozen=True)
class AngleLine:
    id: str
    point_a: NormalizedPoint
    point_b: NormalizedPoint
    color: str = DEFAULT_ANGLE_COLOR

    @property
    def in_progress(self) -> bool:
        return self.point_a == self.point_b

    def angle_degrees(self, aspect: Tuple[float, float] = (1.0, 1.0)) -> float:
        """Absolute inclination from horizontal in ``[0, 180]``.

        ``aspect`` scales the normalized deltas back to the rendered image's
        proportions so non-square images report the on-screen angle.
        """
        dx = (self.point_b.x - self.point_a.x) * aspect[0]
        dy = (self.point_b.y - self.point_a.y) * aspect[1]
        return abs(math.degrees(math.atan2(dy, dx)))

    def acute_reading(self, aspect: Tuple[float, float] = (1.0, 1.0)) -> float:
        angle = self.angle_degrees(aspect)
        return 180.0 - angle if angle > 90.0 else angle

    def with_endpoint(self, endpoint: str, point: NormalizedPoint) -> "AngleLine":
        if endpoint == "a":
            return replace(self, point_a=point.clamped())
        if endpoint == "b":
            return replace(self, point_b=point.clamped())
        raise ValueError(f"Unknown angle endpoint: {endpoint}")


class AngleTool:
    """Angle mode: first click starts a degenerate line, the second click finalizes it."""

    def __init__(self) -> None:
        self.active = False
        self.lines: List[AngleLine] = []
        self.current: Optional[AngleLine] = None
        self._ids = itertools.count(1)

    def toggle(self) -> bool:
        self.active = not self.active
        if not self.active:
            self.current = None
        return self.active

    def exit(self) -> None:
        self.active = False
        self.current = None

    def pointer_down(self, point: NormalizedPoint, color: str = DEFAULT_ANGLE_COLOR) -> Optional[AngleLine]:
        """Returns the finalized line on the second click, otherwise ``None``."""
        if not self.active:
            return None
        point = point.clamped()
        if self.current is None:
            self.current = AngleLine(id=f"angle-{next(self._ids)}", point_a=point, point_b=point, color=color)
            return None
        finished = replace(self.current, point_b=point)
        self.current = None
        self.lines.append(finished)
        return finished

    def remove_last(self) -> bool:
        if self.current is not None:
            self.current = None
            return True
        if self.lines:
            self.lines.pop()
            return True
        return False

    def clear(self) -> None:
        self.lines.clear()
        self.current = None

    def find(self, line_id: str) -> Optional[AngleLine]:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    def move_endpoint(self, line_id: str, endpoint: str, point: NormalizedPoint) -> Optional[AngleLine]:
        for index, line in enumerate(self.lines):
            if line.id == line_id:
                updated = line.with_endpoint(endpoint, point)
                self.lines[index] = updated
                return updated
        return None
