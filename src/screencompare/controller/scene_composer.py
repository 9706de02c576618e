"""
Scene Composer
==============
Maintains the set of displayed screen geometries plus the viewer marker and
the axis indicator, and decides what changed between two updates.

Why is this file needed?
------------------------
1. Change detection: An update is compared by content equality over the
   typed inputs (screen specs, viewport size, theme). Identical input skips
   every rebuild.
2. Whole-scene replace: When the screen list changes, every geometry is
   rebuilt from scratch. Nothing is patched in place.
3. Decorations: The viewer marker fades in/out with the view mode; the axis
   indicator follows the furthest screen and the viewport height.

Note: This module is pure Python/NumPy and should NOT import PySide6 or PyVista.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Sequence, TYPE_CHECKING

import numpy as np

from screencompare.config import (
    THEME_COLORS, VIEWER_MARKER_RADIUS_M, AXIS_DASH_LENGTH_M, AXIS_GAP_LENGTH_M,
    REFERENCE_VIEWPORT_HEIGHT_PX, INDICATOR_LINE_WIDTH_PX, EngineSettings
)
from screencompare.model.camera_state import ViewMode, Theme
from screencompare.model.geometry_primitives import Vector, ORIGIN, FORWARD
from screencompare.model.panel_geometry import ScreenGeometry, build_screen_geometry, hex_to_rgb, RGB
from screencompare.model.presets import default_screen
from screencompare.model.screen import ScreenSpec, InvalidScreenSpecError

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class SceneKey:
    """Everything an update depends on. Compared by value."""
    screens: tuple[ScreenSpec, ...]
    viewport_size: tuple[int, int]
    theme: Theme


@dataclass(frozen=True)
class SceneUpdate:
    """What an `update()` call changed."""
    changed: bool = False
    geometry_rebuilt: bool = False
    distances_changed: bool = False
    theme_changed: bool = False
    size_changed: bool = False


@dataclass
class ViewerMarker:
    """Sphere at the viewer position, hidden in front mode (the camera sits inside it)."""
    radius: float = VIEWER_MARKER_RADIUS_M
    color: RGB = (0.0, 0.0, 0.0)
    opacity: float = 0.0
    target_opacity: float = 0.0

    @property
    def visible(self) -> bool:
        return self.opacity > 0.0

    @property
    def is_fading(self) -> bool:
        return self.opacity != self.target_opacity

    def set_mode(self, mode: ViewMode) -> None:
        self.target_opacity = 0.0 if mode == ViewMode.FRONT else 1.0

    def step(self, ratio: float, threshold: float) -> bool:
        """One fade step. Returns True if the opacity changed."""
        if not self.is_fading:
            return False
        opacity = self.opacity + (self.target_opacity - self.opacity) * ratio
        if abs(opacity - self.target_opacity) < threshold:
            opacity = self.target_opacity
        self.opacity = opacity
        return True


@dataclass
class AxisIndicator:
    """Dashed line from the viewer along the forward axis to the furthest screen."""
    length_m: float = 0.0
    color: RGB = (0.0, 0.0, 0.0)
    line_width: float = INDICATOR_LINE_WIDTH_PX
    dash_m: float = AXIS_DASH_LENGTH_M
    gap_m: float = AXIS_GAP_LENGTH_M

    def dash_segments(self) -> npt.NDArray[np.float64]:
        """(K, 2, 3) array of dash start/end points; the last dash is cut at the end."""
        if self.length_m <= 0.0:
            return np.empty((0, 2, 3), dtype=np.float64)
        starts = np.arange(0.0, self.length_m, self.dash_m + self.gap_m)
        ends = np.minimum(starts + self.dash_m, self.length_m)
        direction = FORWARD.to_array()
        origin = ORIGIN.to_array()
        return np.stack([
            origin + np.outer(starts, direction),
            origin + np.outer(ends, direction),
        ], axis=1)

    @property
    def end_point(self) -> Vector:
        return ORIGIN + FORWARD * self.length_m


def indicator_line_width(viewport_height_px: int) -> float:
    """Line width in pixels, scaled with the viewport height."""
    return max(1.0, viewport_height_px / REFERENCE_VIEWPORT_HEIGHT_PX * INDICATOR_LINE_WIDTH_PX)


# ------------------------------------------------------------------------------
# Composer
# ------------------------------------------------------------------------------
class SceneComposer:
    def __init__(self, settings: Optional[EngineSettings] = None) -> None:
        self.settings: EngineSettings = settings or EngineSettings()

        self.geometries: list[ScreenGeometry] = []
        self.specs: tuple[ScreenSpec, ...] = ()
        self.rejected: tuple[ScreenSpec, ...] = ()
        self.version: int = 0

        self.marker = ViewerMarker()
        self.indicator = AxisIndicator()
        self.theme: Theme = Theme.LIGHT
        self.viewport_size: tuple[int, int] = (0, 0)

        self._last_key: Optional[SceneKey] = None
        self._apply_theme(self.theme)

    @property
    def furthest_distance_m(self) -> float:
        return max((g.viewing_distance_m for g in self.geometries), default=0.0)

    def distance_signature(self) -> tuple[float, ...]:
        """Sorted viewing distances of the displayed screens, order-independent."""
        return tuple(sorted(spec.viewing_distance_m for spec in self.specs))

    def update(
        self,
        screens: Sequence[ScreenSpec],
        viewport_size: tuple[int, int],
        theme: Theme
    ) -> SceneUpdate:
        """
        Bring the scene in line with the given inputs.

        Invalid specs are skipped with a warning; an empty (or entirely
        invalid) list shows the default screen instead.
        """
        key = SceneKey(tuple(screens), (int(viewport_size[0]), int(viewport_size[1])), Theme(theme))
        last = self._last_key
        if key == last:
            return SceneUpdate()
        self._last_key = key

        screens_changed = last is None or key.screens != last.screens
        theme_changed = last is None or key.theme != last.theme
        size_changed = last is None or key.viewport_size != last.viewport_size

        distances_changed = False
        if screens_changed:
            previous_distances = self.distance_signature()
            self._rebuild(key.screens)
            distances_changed = self.distance_signature() != previous_distances

        if theme_changed:
            self._apply_theme(key.theme)
        if size_changed:
            self.viewport_size = key.viewport_size
            self.indicator.line_width = indicator_line_width(key.viewport_size[1])

        return SceneUpdate(
            changed=True,
            geometry_rebuilt=screens_changed,
            distances_changed=distances_changed,
            theme_changed=theme_changed,
            size_changed=size_changed
        )

    def step_marker(self) -> bool:
        return self.marker.step(self.settings.marker_fade_ratio, self.settings.marker_fade_threshold)

    def _rebuild(self, screens: tuple[ScreenSpec, ...]) -> None:
        geometries: list[ScreenGeometry] = []
        accepted: list[ScreenSpec] = []
        rejected: list[ScreenSpec] = []

        for spec in screens:
            try:
                geometry = build_screen_geometry(spec, index=len(geometries))
            except InvalidScreenSpecError as e:
                logger.warning(f"Skipping screen {spec.display_index}: {e}")
                rejected.append(spec)
                continue
            geometries.append(geometry)
            accepted.append(spec)

        if not geometries:
            fallback = default_screen()
            geometries.append(build_screen_geometry(fallback))
            accepted.append(fallback)

        self.geometries = geometries
        self.specs = tuple(accepted)
        self.rejected = tuple(rejected)
        self.indicator.length_m = self.furthest_distance_m
        self.version += 1

        logger.info(
            f"Scene rebuilt (v{self.version}): {len(geometries)} screen(s), "
            f"{len(rejected)} rejected, furthest {self.indicator.length_m:.3f} m"
        )

    def _apply_theme(self, theme: Theme) -> None:
        colors = THEME_COLORS[str(theme)]
        self.theme = theme
        self.marker.color = hex_to_rgb(colors["marker"])
        self.indicator.color = hex_to_rgb(colors["indicator"])
