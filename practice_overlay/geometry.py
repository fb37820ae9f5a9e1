"""Rendered-image bounds and pixel <-> normalized coordinate mapping."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

_LOGGER_NAME = "DrawStack.Overlay"
_OVERLAY_LOGGER = logging.getLogger(_LOGGER_NAME)

RECOMPUTE_REASONS = ("image_changed", "container_resized", "fullscreen_toggled")


@dataclass(frozen=True)
class ImageBounds:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom


EMPTY_BOUNDS = ImageBounds(0.0, 0.0, 0.0, 0.0)


def fit_image_bounds(container_width: float, container_height: float, image_width: float, image_height: float) -> ImageBounds:
    """Contain-fit an image inside its container, centred on both axes."""
    if container_width <= 0 or container_height <= 0 or image_width <= 0 or image_height <= 0:
        return EMPTY_BOUNDS
    scale = min(container_width / image_width, container_height / image_height)
    width = image_width * scale
    height = image_height * scale
    left = (container_width - width) / 2.0
    top = (container_height - height) / 2.0
    return ImageBounds(left, top, width, height)


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


class OverlayGeometry:
    """Holds the current image bounds. Bounds are only refreshed through :meth:`recompute`."""

    def __init__(self) -> None:
        self.bounds: ImageBounds = EMPTY_BOUNDS
        self._container: Tuple[float, float] = (0.0, 0.0)
        self._image_size: Tuple[float, float] = (0.0, 0.0)

    def recompute(
        self,
        reason: str,
        *,
        container_size: Optional[Tuple[float, float]] = None,
        image_size: Optional[Tuple[float, float]] = None,
    ) -> ImageBounds:
        if reason not in RECOMPUTE_REASONS:
            raise ValueError(f"Unknown geometry recompute reason: {reason}")
        if container_size is not None:
            self._container = (float(container_size[0]), float(container_size[1]))
        if image_size is not None:
            self._image_size = (float(image_size[0]), float(image_size[1]))
        self.bounds = fit_image_bounds(*self._container, *self._image_size)
        _OVERLAY_LOGGER.debug(
            "Geometry recomputed (%s): container=%sx%s bounds=(%.1f, %.1f, %.1f, %.1f)",
            reason,
            self._container[0],
            self._container[1],
            self.bounds.left,
            self.bounds.top,
            self.bounds.width,
            self.bounds.height,
        )
        return self.bounds

    @property
    def aspect(self) -> Tuple[float, float]:
        if self.bounds.is_empty:
            return (1.0, 1.0)
        return (self.bounds.width, self.bounds.height)

    def to_normalized(self, px: float, py: float, *, clamp: bool = False) -> Optional[Tuple[float, float]]:
        bounds = self.bounds
        if bounds.is_empty:
            return None
        nx = (px - bounds.left) / bounds.width
        ny = (py - bounds.top) / bounds.height
        if clamp:
            return clamp_unit(nx), clamp_unit(ny)
        return nx, ny

    def to_pixels(self, nx: float, ny: float) -> Tuple[float, float]:
        bounds = self.bounds
        return bounds.left + nx * bounds.width, bounds.top + ny * bounds.height
