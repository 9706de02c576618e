"""
Camera State (Data Model)
=========================
Pose, orbit, zoom and look-around state owned by the camera controller,
plus the per-mode interaction variants.

Classes:
    ViewMode: front / top / isometric.
    CameraPose: Position, look-at point and up vector.
    OrbitState, ZoomState, LookAroundState: Input-driven camera state.
    FrontInteraction, OrbitInteraction, DisabledInteraction: The gesture
        state valid in each view mode. Only one exists at a time.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import math
from typing import Union

from screencompare.config import POLAR_MIN, POLAR_MAX, ZOOM_MIN, ZOOM_MAX, MIN_ORBIT_RADIUS_M
from screencompare.model.geometry_primitives import (
    Vector, Spherical, ORIGIN, WORLD_UP, FORWARD, clamp, wrap_angle
)


class ViewMode(StrEnum):
    FRONT = "front"
    TOP = "top"
    ISOMETRIC = "isometric"


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"


@dataclass
class CameraPose:
    position: Vector = field(default_factory=lambda: ORIGIN.copy())
    look_at: Vector = field(default_factory=lambda: FORWARD.copy())
    up: Vector = field(default_factory=lambda: WORLD_UP.copy())

    @property
    def direction(self) -> Vector:
        """Unit view direction; falls back to the forward axis when degenerate."""
        direction = (self.look_at - self.position).normalize()
        if direction.magnitude == 0.0:
            return FORWARD.copy()
        return direction

    def copy(self) -> CameraPose:
        return CameraPose(self.position.copy(), self.look_at.copy(), self.up.copy())


@dataclass
class OrbitState:
    spherical: Spherical = field(default_factory=Spherical)
    target: Vector = field(default_factory=lambda: ORIGIN.copy())
    enabled: bool = False

    def set_spherical(self, spherical: Spherical) -> None:
        """Store `spherical` with the polar clamp and azimuth wrap applied."""
        self.spherical = Spherical(
            radius=max(MIN_ORBIT_RADIUS_M, spherical.radius),
            polar=clamp(spherical.polar, POLAR_MIN, POLAR_MAX),
            azimuth=wrap_angle(spherical.azimuth)
        )

    def rotate(self, delta_azimuth: float, delta_polar: float) -> None:
        self.set_spherical(Spherical(
            radius=self.spherical.radius,
            polar=self.spherical.polar + delta_polar,
            azimuth=self.spherical.azimuth + delta_azimuth
        ))

    def sync_from_position(self, position: Vector) -> None:
        """Re-derive the spherical coordinates from a camera position."""
        self.set_spherical(Spherical.from_offset(position - self.target))

    def camera_pose(self) -> CameraPose:
        return CameraPose(
            position=self.target + self.spherical.to_offset(),
            look_at=self.target.copy(),
            up=WORLD_UP.copy()
        )


@dataclass
class ZoomState:
    zoom_factor: float = 1.0
    base_distance: float = 1.0

    def apply(self, multiplier: float) -> None:
        """A multiplier > 1 zooms out, < 1 zooms in."""
        if multiplier <= 0.0 or not math.isfinite(multiplier):
            return
        self.zoom_factor = clamp(self.zoom_factor / multiplier, ZOOM_MIN, ZOOM_MAX)

    def reset(self, base_distance: float) -> None:
        self.zoom_factor = 1.0
        self.base_distance = base_distance

    @property
    def effective_radius(self) -> float:
        return max(MIN_ORBIT_RADIUS_M, self.base_distance / self.zoom_factor)


@dataclass
class LookAroundState:
    yaw: float = 0.0
    pitch: float = 0.0
    max_yaw: float = 0.0
    max_pitch: float = 0.0
    spring_back: bool = False

    def look_by(self, delta_yaw: float, delta_pitch: float) -> None:
        self.yaw = clamp(self.yaw + delta_yaw, -self.max_yaw, self.max_yaw)
        self.pitch = clamp(self.pitch + delta_pitch, -self.max_pitch, self.max_pitch)

    def decay(self, ratio: float, threshold: float) -> None:
        """One spring-back step toward zero offset."""
        if not self.spring_back:
            return
        self.yaw *= (1.0 - ratio)
        self.pitch *= (1.0 - ratio)
        if abs(self.yaw) < threshold and abs(self.pitch) < threshold:
            self.yaw = 0.0
            self.pitch = 0.0
            self.spring_back = False

    def apply_to(self, direction: Vector) -> Vector:
        """Rotate a view direction by the current yaw (about +Y) and pitch."""
        if self.yaw == 0.0 and self.pitch == 0.0:
            return direction
        horizontal = math.hypot(direction.x, direction.z)
        base_yaw = math.atan2(direction.x, -direction.z)
        base_pitch = math.atan2(direction.y, horizontal)
        yaw = base_yaw + self.yaw
        pitch = clamp(base_pitch + self.pitch, -math.pi / 2 + 1e-3, math.pi / 2 - 1e-3)
        return Vector(
            math.sin(yaw) * math.cos(pitch),
            math.sin(pitch),
            -math.cos(yaw) * math.cos(pitch)
        )


# ------------------------------------------------------------------------------
# Interaction variants
# ------------------------------------------------------------------------------
@dataclass
class FrontInteraction:
    """Look-around gesture state (front mode)."""
    look: LookAroundState = field(default_factory=LookAroundState)
    dragging: bool = False


@dataclass
class OrbitInteraction:
    """Orbit and zoom gesture state (isometric mode)."""
    orbit: OrbitState
    zoom: ZoomState
    dragging: bool = False


@dataclass
class DisabledInteraction:
    """No gesture is accepted (top mode)."""


Interaction = Union[FrontInteraction, OrbitInteraction, DisabledInteraction]
