"""
Camera Controller
=================
Owns the camera pose, the per-mode interaction state and the active
animation, and computes target poses on mode switches and screen changes.

Why is this file needed?
------------------------
1. State machine: Exactly one interaction variant (look-around, orbit or
   disabled) exists at a time, chosen by the view mode.
2. Targets: Front/top/isometric target poses are derived from the current
   screens (furthest viewing distance, largest field of view).
3. Animation: Retargeting never snaps. A fresh `AnimationTarget` seeded with
   the live pose is eased toward the target by `tick()`.

Note: This module is pure Python and does NOT import PySide6 or PyVista.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from screencompare.config import (
    EngineSettings, DEFAULT_DISTANCE_MM, MM_TO_M,
    TOP_MIN_HEIGHT_M, TOP_HEIGHT_FACTOR,
    ISO_MIN_DEPTH_M, ISO_DEPTH_FACTOR, ISO_HEIGHT_FACTOR, ISO_SIDE_FACTOR
)
from screencompare.model.animation import (
    AnimationTarget, FrontAnimation, TopAnimation, IsometricAnimation
)
from screencompare.model.camera_state import (
    ViewMode, CameraPose, OrbitState, ZoomState, LookAroundState,
    Interaction, FrontInteraction, OrbitInteraction, DisabledInteraction
)
from screencompare.model.geometry_primitives import Vector, Spherical, ORIGIN, WORLD_UP, FORWARD
from screencompare.model.screen import ScreenSpec

logger = logging.getLogger(__name__)

FALLBACK_DISTANCE_M: float = DEFAULT_DISTANCE_MM * MM_TO_M

# Offsets shorter than this carry no usable orbit direction
_DEGENERATE_OFFSET_M: float = 1e-9


class CameraController:
    def __init__(self, settings: Optional[EngineSettings] = None) -> None:
        self.settings: EngineSettings = settings or EngineSettings()

        self.mode: ViewMode = ViewMode.FRONT
        self.pose: CameraPose = CameraPose()
        self.animation: Optional[AnimationTarget] = None

        # Orbit and zoom persist across modes so re-entering isometric can
        # orbit away from the previous pivot.
        self.orbit: OrbitState = OrbitState()
        self.zoom: ZoomState = ZoomState()

        self._screens: tuple[ScreenSpec, ...] = ()
        self.interaction: Interaction = self._front_interaction()

    # ------------------------------------------------------------------------------
    # Screen-derived quantities
    # ------------------------------------------------------------------------------
    @property
    def screens(self) -> tuple[ScreenSpec, ...]:
        return self._screens

    @property
    def furthest_distance_m(self) -> float:
        if not self._screens:
            return FALLBACK_DISTANCE_M
        return max(spec.viewing_distance_m for spec in self._screens)

    @property
    def nearest_distance_m(self) -> float:
        if not self._screens:
            return FALLBACK_DISTANCE_M
        return min(spec.viewing_distance_m for spec in self._screens)

    def look_limits(self) -> tuple[float, float]:
        """(max_yaw, max_pitch): the largest half-angle field of view over all screens."""
        max_yaw = 0.0
        max_pitch = 0.0
        for spec in self._screens:
            size = spec.physical_size()
            distance = spec.viewing_distance_m
            max_yaw = max(max_yaw, math.atan2(size.width_m / 2, distance))
            max_pitch = max(max_pitch, math.atan2(size.height_m / 2, distance))
        return max_yaw, max_pitch

    def set_screens(self, screens: Sequence[ScreenSpec]) -> None:
        """
        Replace the screen set without moving the camera. Look-around limits
        follow immediately; targets are recomputed by `retarget()`.
        """
        self._screens = tuple(screens)
        if isinstance(self.interaction, FrontInteraction):
            self._refresh_look_limits(self.interaction.look)

    # ------------------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------------------
    def front_target(self) -> CameraPose:
        return CameraPose(position=ORIGIN.copy(), look_at=FORWARD.copy(), up=WORLD_UP.copy())

    def top_target(self) -> CameraPose:
        furthest = self.furthest_distance_m
        midpoint = Vector(0.0, 0.0, -furthest / 2)
        height = max(TOP_MIN_HEIGHT_M, furthest * TOP_HEIGHT_FACTOR)
        # Looking straight down, so the forward axis stands in for the up vector
        return CameraPose(
            position=Vector(0.0, height, midpoint.z),
            look_at=midpoint,
            up=FORWARD.copy()
        )

    def isometric_target(self) -> tuple[Vector, Spherical]:
        """Orbit pivot (midpoint between viewer and furthest screen) and the spherical offset around it."""
        furthest = self.furthest_distance_m
        depth = max(ISO_MIN_DEPTH_M, furthest * ISO_DEPTH_FACTOR)
        position = Vector(depth * ISO_SIDE_FACTOR, depth * ISO_HEIGHT_FACTOR, depth)
        pivot = Vector(0.0, 0.0, -furthest / 2)
        return pivot, Spherical.from_offset(position - pivot)

    def target_pose(self, mode: Optional[ViewMode] = None) -> CameraPose:
        """Final pose the camera settles at in `mode` (default: current mode), ignoring zoom."""
        mode = mode or self.mode
        if mode == ViewMode.FRONT:
            return self.front_target()
        if mode == ViewMode.TOP:
            return self.top_target()
        pivot, spherical = self.isometric_target()
        return CameraPose(position=pivot + spherical.to_offset(), look_at=pivot, up=WORLD_UP.copy())

    # ------------------------------------------------------------------------------
    # Mode switching
    # ------------------------------------------------------------------------------
    def set_mode(self, mode: ViewMode) -> bool:
        """Switch view mode and start animating toward its target. Returns False if unchanged."""
        mode = ViewMode(mode)
        if mode == self.mode:
            return False

        logger.info(f"View mode: {self.mode} -> {mode}")
        previous_pivot = self._live_orbit_pivot()
        if isinstance(self.interaction, FrontInteraction):
            # Ease from what is on screen, look-around offset included
            self.pose = self.render_pose()
        self.mode = mode

        if mode == ViewMode.FRONT:
            self.orbit.enabled = False
            self.zoom.reset(self.zoom.base_distance)
            self.interaction = self._front_interaction()
        elif mode == ViewMode.TOP:
            self.orbit.enabled = False
            self.interaction = DisabledInteraction()
        else:
            _, spherical = self.isometric_target()
            self.orbit.enabled = True
            self.zoom.reset(spherical.radius)
            self.interaction = OrbitInteraction(orbit=self.orbit, zoom=self.zoom)

        self._start_animation(previous_pivot)
        return True

    def retarget(self) -> None:
        """Recompute the current mode's target and ease toward it from the live pose."""
        logger.debug(f"Retargeting camera in {self.mode} mode (furthest {self.furthest_distance_m:.3f} m)")
        previous_pivot = self._live_orbit_pivot()
        if self.mode == ViewMode.ISOMETRIC:
            # The zoom factor survives a retarget; only the base distance moves
            _, spherical = self.isometric_target()
            self.zoom.base_distance = spherical.radius
        self._start_animation(previous_pivot)

    def _start_animation(self, previous_pivot: Vector) -> None:
        if self.mode == ViewMode.FRONT:
            target = self.front_target()
            self.animation = FrontAnimation(
                target_position=target.position,
                target_direction=target.direction,
                target_up=target.up
            )
        elif self.mode == ViewMode.TOP:
            target = self.top_target()
            self.animation = TopAnimation(
                target_position=target.position,
                target_look_at=target.look_at,
                target_up=target.up
            )
        else:
            pivot, spherical = self.isometric_target()
            target_spherical = Spherical(self.zoom.effective_radius, spherical.polar, spherical.azimuth)

            # Orbit around the previous pivot from wherever the camera is now
            offset = self.pose.position - previous_pivot
            if offset.magnitude < _DEGENERATE_OFFSET_M:
                previous_pivot = pivot.copy()
                offset = self.pose.position - previous_pivot
            self.animation = IsometricAnimation(
                working_target=previous_pivot.copy(),
                working_spherical=Spherical.from_offset(offset),
                target_orbit_target=pivot,
                target_spherical=target_spherical
            )

    def _live_orbit_pivot(self) -> Vector:
        """The pivot the camera is currently orbiting, mid-animation included."""
        if isinstance(self.animation, IsometricAnimation):
            return self.animation.working_target.copy()
        return self.orbit.target.copy()

    @property
    def is_animating(self) -> bool:
        return self.animation is not None

    # ------------------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------------------
    def start_drag(self) -> bool:
        """Begin a look-around or orbit drag. Returns False where dragging is disabled."""
        interaction = self.interaction
        if isinstance(interaction, FrontInteraction):
            self._refresh_look_limits(interaction.look)
            interaction.look.spring_back = False
            interaction.dragging = True
            return True
        if isinstance(interaction, OrbitInteraction) and interaction.orbit.enabled:
            self._interrupt_orbit_animation()
            interaction.dragging = True
            return True
        return False

    def drag_by(self, dx: float, dy: float) -> bool:
        """Apply a pointer delta in pixels. Returns True if the camera changed."""
        interaction = self.interaction
        if isinstance(interaction, FrontInteraction) and interaction.dragging:
            speed = self.settings.look_speed
            # Inverted: the scene, not the camera, follows the pointer
            interaction.look.look_by(-dx * speed, dy * speed)
            return True
        if isinstance(interaction, OrbitInteraction) and interaction.dragging:
            if self.animation is not None:
                self._interrupt_orbit_animation()
            speed = self.settings.rotate_speed
            interaction.orbit.rotate(-dx * speed, -dy * speed)
            self.pose = interaction.orbit.camera_pose()
            return True
        return False

    def end_drag(self) -> None:
        interaction = self.interaction
        if isinstance(interaction, FrontInteraction):
            if interaction.dragging:
                interaction.look.spring_back = True
            interaction.dragging = False
        elif isinstance(interaction, OrbitInteraction):
            interaction.dragging = False

    @property
    def is_dragging(self) -> bool:
        return getattr(self.interaction, "dragging", False)

    def zoom_by(self, multiplier: float) -> bool:
        """
        Apply a zoom multiplier (> 1 zooms out). Only valid in isometric mode.
        Returns True if the camera changed.
        """
        interaction = self.interaction
        if not isinstance(interaction, OrbitInteraction) or not interaction.orbit.enabled:
            return False

        zoom = interaction.zoom
        zoom.apply(multiplier)
        radius = zoom.effective_radius

        if isinstance(self.animation, IsometricAnimation):
            self.animation.target_spherical.radius = radius
            return True

        orbit = interaction.orbit
        orbit.set_spherical(Spherical(radius, orbit.spherical.polar, orbit.spherical.azimuth))
        self.pose = orbit.camera_pose()
        return True

    def _interrupt_orbit_animation(self) -> None:
        """Stop an in-flight isometric animation and continue from the live camera position."""
        if isinstance(self.animation, IsometricAnimation):
            self.orbit.target = self.animation.working_target.copy()
        self.animation = None
        self.orbit.sync_from_position(self.pose.position)
        self.zoom.base_distance = self.orbit.spherical.radius * self.zoom.zoom_factor

    # ------------------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------------------
    def tick(self) -> bool:
        """
        Advance spring-back and animation by one frame.

        Returns:
            True if anything visible changed and the frame should be re-rendered.
        """
        changed = False

        interaction = self.interaction
        if isinstance(interaction, FrontInteraction) and not interaction.dragging:
            look = interaction.look
            if look.spring_back:
                look.decay(self.settings.spring_back_ratio, self.settings.spring_back_threshold)
                changed = True

        animation = self.animation
        if animation is not None:
            converged = animation.step(
                self.pose, self.settings.blend_ratio, self.settings.convergence_threshold
            )
            changed = True
            if converged:
                self.animation = None
                if isinstance(animation, IsometricAnimation):
                    self.orbit.target = animation.target_orbit_target.copy()
                    self.orbit.sync_from_position(self.pose.position)
                logger.debug(f"Camera converged in {self.mode} mode at {self.pose.position.to_tuple()}")

        return changed

    def render_pose(self) -> CameraPose:
        """The pose to render: the animated pose plus any look-around offset."""
        interaction = self.interaction
        if isinstance(interaction, FrontInteraction):
            look = interaction.look
            if look.yaw != 0.0 or look.pitch != 0.0:
                direction = look.apply_to(self.pose.direction)
                return CameraPose(
                    position=self.pose.position.copy(),
                    look_at=self.pose.position + direction,
                    up=self.pose.up.copy()
                )
        return self.pose.copy()

    # ------------------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------------------
    def _front_interaction(self) -> FrontInteraction:
        interaction = FrontInteraction(look=LookAroundState())
        self._refresh_look_limits(interaction.look)
        return interaction

    def _refresh_look_limits(self, look: LookAroundState) -> None:
        look.max_yaw, look.max_pitch = self.look_limits()
        look.look_by(0.0, 0.0)
