"""
Input Router
============
Turns raw pointer and wheel events into camera gestures.

A single pointer drags (look-around in front mode, orbit in isometric mode),
two pointers pinch-zoom, the wheel zooms. Gestures outside their mode are
no-ops; the camera controller decides what each mode accepts.

Coordinates are viewport pixels. The router keeps no Qt types so it can be
driven by the viewport widget as well as by tests.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

from screencompare.config import EngineSettings
from screencompare.controller.camera_controller import CameraController

logger = logging.getLogger(__name__)

PointerId = int


class InputRouter:
    def __init__(self, controller: CameraController, settings: Optional[EngineSettings] = None) -> None:
        self.controller = controller
        self.settings = settings or controller.settings

        self._pointers: dict[PointerId, tuple[float, float]] = {}
        self._dragging: bool = False
        self._pinch_distance: Optional[float] = None

    @property
    def active_pointers(self) -> int:
        return len(self._pointers)

    @property
    def is_pinching(self) -> bool:
        return self._pinch_distance is not None

    # ------------------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------------------
    def pointer_down(self, pointer_id: PointerId, x: float, y: float) -> None:
        if pointer_id in self._pointers or len(self._pointers) >= 2:
            return
        self._pointers[pointer_id] = (x, y)

        if len(self._pointers) == 1:
            self._dragging = self.controller.start_drag()
            return

        # Second pointer: the single-pointer drag becomes a pinch
        if self._dragging:
            self.controller.end_drag()
            self._dragging = False
        self._pinch_distance = self._pointer_spread()
        logger.debug(f"Pinch started at {self._pinch_distance:.1f} px")

    def pointer_move(self, pointer_id: PointerId, x: float, y: float) -> bool:
        """Returns True if the camera changed."""
        if pointer_id not in self._pointers:
            return False
        last_x, last_y = self._pointers[pointer_id]
        self._pointers[pointer_id] = (x, y)

        if self._pinch_distance is not None:
            current = self._pointer_spread()
            if current <= 0.0 or self._pinch_distance <= 0.0:
                self._pinch_distance = current
                return False
            multiplier = self.pinch_multiplier(self._pinch_distance, current)
            self._pinch_distance = current
            return self.controller.zoom_by(multiplier)

        if self._dragging:
            return self.controller.drag_by(x - last_x, y - last_y)
        return False

    def pointer_up(self, pointer_id: PointerId) -> None:
        if self._pointers.pop(pointer_id, None) is None:
            return

        if self._pinch_distance is not None:
            # The remaining pointer does nothing until it is lifted too
            self._pinch_distance = None
            return

        if not self._pointers and self._dragging:
            self.controller.end_drag()
            self._dragging = False

    def cancel(self) -> None:
        """Drop every pointer, e.g. when the widget loses the mouse grab."""
        self._pointers.clear()
        self._pinch_distance = None
        if self._dragging:
            self.controller.end_drag()
            self._dragging = False

    # ------------------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------------------
    def wheel(self, delta: float) -> bool:
        """Positive delta zooms out, negative zooms in. Returns True if the camera changed."""
        if delta == 0 or not math.isfinite(delta):
            return False
        sensitivity = self.settings.wheel_sensitivity
        multiplier = 1.0 + sensitivity if delta > 0 else 1.0 - sensitivity
        return self.controller.zoom_by(multiplier)

    def pinch_multiplier(self, previous: float, current: float) -> float:
        """Spreading the fingers (current > previous) gives a multiplier < 1, i.e. zoom in."""
        return 1.0 + (previous / current - 1.0) * self.settings.pinch_sensitivity

    def _pointer_spread(self) -> float:
        (x1, y1), (x2, y2) = list(self._pointers.values())[:2]
        return math.hypot(x2 - x1, y2 - y1)
