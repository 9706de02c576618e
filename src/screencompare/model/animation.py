"""
Camera Animation Targets
========================
One variant per view mode, each built fresh when a mode is entered or the
screen set changes, seeded with the pose the camera had at that moment.

Every variant eases the live `CameraPose` toward its target with a fixed
blend ratio per tick and reports convergence. On convergence the pose is
snapped to the exact target.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from screencompare.model.camera_state import CameraPose
from screencompare.model.geometry_primitives import (
    Vector, Spherical, WORLD_UP, FORWARD, lerp, lerp_angle
)


OPPOSITE_DOT = -1.0 + 1e-9


def _perpendicular(target: Vector) -> Vector:
    """A unit vector at right angles to `target`, preferring world up."""
    for axis in (WORLD_UP, FORWARD):
        side = axis - target * axis.dot(target)
        if side.magnitude > 1e-6:
            return side.normalize()
    return Vector(1.0, 0.0, 0.0)


def _blend_unit(current: Vector, target: Vector, ratio: float) -> Vector:
    """
    Blend two unit vectors and renormalise.

    Exactly opposite vectors have no shorter side to blend through; the
    blend is tipped off the axis with a perpendicular component so it can
    swing round instead of staying put.
    """
    if current.dot(target) <= OPPOSITE_DOT:
        current = (current + _perpendicular(target) * ratio).normalize()
    blended = current.lerp(target, ratio).normalize()
    if blended.magnitude == 0.0:
        return target.copy()
    return blended


@dataclass
class FrontAnimation:
    """Blend position, look direction and up vector."""
    target_position: Vector
    target_direction: Vector
    target_up: Vector = field(default_factory=lambda: WORLD_UP.copy())

    def final_pose(self) -> CameraPose:
        return CameraPose(
            position=self.target_position.copy(),
            look_at=self.target_position + self.target_direction,
            up=self.target_up.copy()
        )

    def step(self, pose: CameraPose, ratio: float, threshold: float) -> bool:
        current_direction = pose.direction
        position = pose.position.lerp(self.target_position, ratio)
        direction = _blend_unit(current_direction, self.target_direction, ratio)
        up = _blend_unit(pose.up, self.target_up, ratio)

        pose.position = position
        pose.look_at = position + direction
        pose.up = up

        converged = (
            position.distance_to(self.target_position) < threshold
            and direction.distance_to(self.target_direction) < threshold
            and up.distance_to(self.target_up) < threshold
        )
        if converged:
            snapped = self.final_pose()
            pose.position, pose.look_at, pose.up = snapped.position, snapped.look_at, snapped.up
        return converged


@dataclass
class TopAnimation:
    """Blend position, look-at point and the substitute up vector independently."""
    target_position: Vector
    target_look_at: Vector
    target_up: Vector

    def final_pose(self) -> CameraPose:
        return CameraPose(self.target_position.copy(), self.target_look_at.copy(), self.target_up.copy())

    def step(self, pose: CameraPose, ratio: float, threshold: float) -> bool:
        pose.position = pose.position.lerp(self.target_position, ratio)
        pose.look_at = pose.look_at.lerp(self.target_look_at, ratio)
        pose.up = _blend_unit(pose.up, self.target_up, ratio)

        converged = (
            pose.position.distance_to(self.target_position) < threshold
            and pose.look_at.distance_to(self.target_look_at) < threshold
            and pose.up.distance_to(self.target_up) < threshold
        )
        if converged:
            snapped = self.final_pose()
            pose.position, pose.look_at, pose.up = snapped.position, snapped.look_at, snapped.up
        return converged


@dataclass
class IsometricAnimation:
    """
    Orbit toward the target instead of translating in a straight line:
    the pivot and the spherical coordinates around it are blended, the
    camera position is derived from them every step.
    """
    working_target: Vector
    working_spherical: Spherical
    target_orbit_target: Vector
    target_spherical: Spherical
    target_up: Vector = field(default_factory=lambda: WORLD_UP.copy())

    def final_pose(self) -> CameraPose:
        return CameraPose(
            position=self.target_orbit_target + self.target_spherical.to_offset(),
            look_at=self.target_orbit_target.copy(),
            up=self.target_up.copy()
        )

    def step(self, pose: CameraPose, ratio: float, threshold: float) -> bool:
        self.working_target = self.working_target.lerp(self.target_orbit_target, ratio)
        self.working_spherical = Spherical(
            radius=lerp(self.working_spherical.radius, self.target_spherical.radius, ratio),
            polar=lerp(self.working_spherical.polar, self.target_spherical.polar, ratio),
            azimuth=lerp_angle(self.working_spherical.azimuth, self.target_spherical.azimuth, ratio)
        )

        pose.position = self.working_target + self.working_spherical.to_offset()
        pose.look_at = self.working_target.copy()
        pose.up = _blend_unit(pose.up, self.target_up, ratio)

        final = self.final_pose()
        converged = (
            pose.position.distance_to(final.position) < threshold
            and self.working_target.distance_to(self.target_orbit_target) < threshold
            and pose.up.distance_to(self.target_up) < threshold
        )
        if converged:
            self.working_target = self.target_orbit_target.copy()
            self.working_spherical = self.target_spherical.copy()
            pose.position, pose.look_at, pose.up = final.position, final.look_at, final.up
        return converged


AnimationTarget = Union[FrontAnimation, TopAnimation, IsometricAnimation]
