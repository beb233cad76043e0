"""
Viewport Transform - Pan and zoom for the editor and preview views

Each view mode keeps its own TransformState. A transform maps world
(image) coordinates to screen coordinates as:

    screen = world * scale + translate

Zooming and pinching keep the world point under the pointer (or under the
pinch midpoint) at the same screen position.
"""

import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class ViewMode(Enum):
    """Which view is on screen"""
    EDIT = "edit"          # source sheet with grid overlay
    PREVIEW = "preview"    # current animation frame


class ZoomDirection(Enum):
    IN = "in"
    OUT = "out"


@dataclass
class TransformState:
    """Pan and zoom of one view"""
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0

    def to_screen(self, x: float, y: float) -> Point:
        return (x * self.scale + self.translate_x, y * self.scale + self.translate_y)

    def to_world(self, x: float, y: float) -> Point:
        return ((x - self.translate_x) / self.scale, (y - self.translate_y) / self.scale)


@dataclass
class ViewportConfig:
    """Zoom limits and step"""
    min_scale: float = 0.1
    max_scale: float = 10.0
    zoom_step: float = 0.1


class ViewportController:
    """
    Owns one TransformState per ViewMode and edits the active one.

    Example:
        viewport = ViewportController()
        viewport.zoom(120, 80, ZoomDirection.IN)
        viewport.set_mode(ViewMode.PREVIEW)   # edit transform is kept as-is
        viewport.reset()                      # only resets preview
    """

    def __init__(self, config: Optional[ViewportConfig] = None, mode: ViewMode = ViewMode.EDIT):
        self.config = config or ViewportConfig()
        self.mode = mode
        self._transforms: Dict[ViewMode, TransformState] = {m: TransformState() for m in ViewMode}

        # Gesture state
        self._pan_offset: Optional[Point] = None
        self._pinch_distance: Optional[float] = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def transform(self) -> TransformState:
        """Transform of the active mode"""
        return self._transforms[self.mode]

    def transform_for(self, mode: ViewMode) -> TransformState:
        return self._transforms[mode]

    def set_mode(self, mode: ViewMode) -> None:
        """Switch the active view; the other view's transform is untouched"""
        if mode is self.mode:
            return
        self.end_pan()
        self.end_pinch()
        self.mode = mode
        logger.debug("View mode -> %s", mode.value)

    def screen_to_world(self, x: float, y: float) -> Point:
        return self.transform.to_world(x, y)

    def world_to_screen(self, x: float, y: float) -> Point:
        return self.transform.to_screen(x, y)

    # ------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------

    def clamp_scale(self, scale: float) -> float:
        return min(max(scale, self.config.min_scale), self.config.max_scale)

    def zoom_about(self, mx: float, my: float, factor: float) -> TransformState:
        """Scale by factor keeping screen point (mx, my) fixed"""
        t = self.transform
        new_scale = self.clamp_scale(t.scale * factor)
        ratio = new_scale / t.scale

        t.translate_x = mx - (mx - t.translate_x) * ratio
        t.translate_y = my - (my - t.translate_y) * ratio
        t.scale = new_scale
        return t

    def zoom(self, mx: float, my: float, direction: ZoomDirection) -> TransformState:
        """
        Wheel zoom at a pointer position relative to the viewport.

        Args:
            mx, my: Pointer position in viewport coordinates
            direction: ZoomDirection.IN or ZoomDirection.OUT
        """
        step = self.config.zoom_step
        factor = 1 + step if direction is ZoomDirection.IN else 1 - step
        return self.zoom_about(mx, my, factor)

    def wheel(self, mx: float, my: float, delta_y: float) -> TransformState:
        """Browser-style wheel event: negative delta zooms in"""
        return self.zoom(mx, my, ZoomDirection.IN if delta_y < 0 else ZoomDirection.OUT)

    # ------------------------------------------------------------------
    # Pan
    # ------------------------------------------------------------------

    @property
    def panning(self) -> bool:
        return self._pan_offset is not None

    def begin_pan(self, px: float, py: float) -> None:
        t = self.transform
        self._pan_offset = (px - t.translate_x, py - t.translate_y)

    def pan_to(self, px: float, py: float) -> TransformState:
        t = self.transform
        if self._pan_offset is None:
            return t
        t.translate_x = px - self._pan_offset[0]
        t.translate_y = py - self._pan_offset[1]
        return t

    def end_pan(self) -> None:
        self._pan_offset = None

    # ------------------------------------------------------------------
    # Pinch
    # ------------------------------------------------------------------

    def pinch(self, p1: Point, p2: Point) -> TransformState:
        """
        Feed one two-finger sample.

        The first sample of a gesture only records the finger distance;
        later samples scale by new/old distance around the midpoint.
        """
        distance = math.hypot(p2[0] - p1[0], p2[1] - p1[1])
        previous = self._pinch_distance
        self._pinch_distance = distance

        if not previous or distance <= 0:
            return self.transform

        mid_x = (p1[0] + p2[0]) / 2
        mid_y = (p1[1] + p2[1]) / 2
        return self.zoom_about(mid_x, mid_y, distance / previous)

    def end_pinch(self) -> None:
        self._pinch_distance = None

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> TransformState:
        """Reset the active view to {0, 0, 1}"""
        self._transforms[self.mode] = TransformState()
        self.end_pan()
        self.end_pinch()
        return self.transform
