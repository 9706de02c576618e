"""
Configuration & Global Constants
================================
This module serves as the central registry for the constants the viewport
engine and the host application share.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (palette entries, blend ratios,
   zoom limits...) scattered throughout the code.
2. Tuning: Values that are tunables rather than hard contracts are grouped
   in `EngineSettings`, so tests and the application can override them.

Exports:
    SCREEN_COLORS (tuple[str, ...]): Palette indexed by display number.
    THEME_COLORS (dict): Light/dark colour tables.
    EngineSettings: Tunables read by the viewport engine.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

# --- Physical constants ---
INCHES_TO_MM: float = 25.4
MM_TO_M: float = 1.0 / 1000.0

# --- Palette ---
SCREEN_COLORS: tuple[str, ...] = ("#9b5de5", "#00f5d4", "#f15bb5", "#00bbf9", "#fee440")
PANEL_TINT: float = 0.5
PANEL_OPACITY: float = 0.1
BORDER_TINT: float = 0.9

THEME_COLORS: dict[str, dict[str, str]] = {
    "light": {
        "background": "#f8f9fa",
        "indicator": "#333333",
        "marker": "#87ceeb",
    },
    "dark": {
        "background": "#1a1a1a",
        "indicator": "#e0e0e0",
        "marker": "#5fa8d3",
    },
}

# --- Geometry ---
BORDER_HEIGHT_RATIO: float = 0.05      # border thickness as a share of panel height
BORDER_DEPTH_M: float = 0.003
MIN_ARC_SEGMENTS: int = 32
ARC_SEGMENTS_PER_DEGREE: float = 2.0
COPLANAR_EPSILON_M: float = 0.001

VIEWER_MARKER_RADIUS_M: float = 0.1
AXIS_DASH_LENGTH_M: float = 0.02
AXIS_GAP_LENGTH_M: float = 0.01

# --- Defaults ---
DEFAULT_DISTANCE_MM: float = 600.0
DEFAULT_SCALING_PERCENT: float = 100.0
MAX_SCREENS: int = 4

# --- Screen metrics ---
RETINA_PPD: float = 60.0          # pixels per degree at which a screen counts as retina

# --- Camera ---
CAMERA_FOV_DEG: float = 55.0
CAMERA_NEAR_M: float = 0.01
CAMERA_FAR_M: float = 1000.0

TOP_MIN_HEIGHT_M: float = 0.8
TOP_HEIGHT_FACTOR: float = 1.5

ISO_MIN_DEPTH_M: float = 0.5
ISO_DEPTH_FACTOR: float = 1.0
ISO_HEIGHT_FACTOR: float = 0.4
ISO_SIDE_FACTOR: float = 0.6

POLAR_MIN: float = 0.1
POLAR_MAX: float = math.pi - 0.1
ZOOM_MIN: float = 0.2
ZOOM_MAX: float = 5.0
MIN_ORBIT_RADIUS_M: float = 0.05

# --- Timing ---
FRAME_INTERVAL_MS: int = 16
CAMERA_DEBOUNCE_MS: int = 150

# --- Render widths (pixels at the reference viewport height) ---
REFERENCE_VIEWPORT_HEIGHT_PX: int = 400
INDICATOR_LINE_WIDTH_PX: float = 2.0


@dataclass(frozen=True)
class EngineSettings:
    """Tunables for the animation, gesture and debounce behaviour."""
    blend_ratio: float = 0.1
    convergence_threshold: float = 0.001
    spring_back_ratio: float = 0.1
    spring_back_threshold: float = 0.001
    marker_fade_ratio: float = 0.15
    marker_fade_threshold: float = 0.01
    rotate_speed: float = 0.01       # radians per pixel (orbit)
    look_speed: float = 0.005        # radians per pixel (look-around)
    wheel_sensitivity: float = 0.1
    pinch_sensitivity: float = 0.5
    debounce_ms: int = CAMERA_DEBOUNCE_MS

    def __post_init__(self) -> None:
        if not 0.0 < self.blend_ratio < 1.0:
            raise ValueError(f"blend_ratio must be in (0, 1), got {self.blend_ratio}.")
        if not 0.0 < self.spring_back_ratio < 1.0:
            raise ValueError(f"spring_back_ratio must be in (0, 1), got {self.spring_back_ratio}.")
        if self.convergence_threshold <= 0.0:
            raise ValueError("convergence_threshold must be positive.")
        if self.debounce_ms < 0:
            raise ValueError("debounce_ms must not be negative.")
