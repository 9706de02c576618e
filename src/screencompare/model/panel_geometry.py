"""
Panel Geometry Builder
======================
Turns a `ScreenSpec` into tessellated panel and border surfaces in meters.

The builder is pure: it produces point/quad arrays and colours and knows
nothing about PyVista. The view converts `SurfaceMesh` objects into
renderable datasets.

Layout:
    * The viewer is at the origin, screens face +Z and sit at
      z = -viewing_distance.
    * Flat panels are a single quad, curved panels an arc of a vertical
      cylinder whose axis lies one radius in front of the panel midpoint
      (towards the viewer), so the panel is concave toward the viewer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Optional, TYPE_CHECKING

import numpy as np

from screencompare.config import (
    SCREEN_COLORS, PANEL_TINT, PANEL_OPACITY, BORDER_TINT,
    BORDER_HEIGHT_RATIO, BORDER_DEPTH_M, MIN_ARC_SEGMENTS,
    ARC_SEGMENTS_PER_DEGREE, COPLANAR_EPSILON_M
)
from screencompare.model.geometry_primitives import Vector
from screencompare.model.screen import ScreenSpec, InvalidScreenSpecError

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

RGB = tuple[float, float, float]


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass
class SurfaceMesh:
    """Quad surface: (N, 3) points and (M, 4) vertex indices per face."""
    points: npt.NDArray[np.float64]
    quads: npt.NDArray[np.int_]

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])

    @property
    def n_faces(self) -> int:
        return int(self.quads.shape[0])

    def translated(self, offset: Vector) -> SurfaceMesh:
        return SurfaceMesh(points=self.points + offset.to_array(), quads=self.quads.copy())

    def bounds(self) -> tuple[float, float, float, float, float, float]:
        """(x_min, x_max, y_min, y_max, z_min, z_max)"""
        mins = self.points.min(axis=0)
        maxs = self.points.max(axis=0)
        return (mins[0], maxs[0], mins[1], maxs[1], mins[2], maxs[2])


@dataclass
class PanelGeometry:
    width_m: float
    height_m: float
    curvature_radius_m: Optional[float]
    arc_angle_rad: float
    color_index: int
    position_along_axis_m: float
    segments: int
    color: RGB
    opacity: float
    mesh: SurfaceMesh

    @property
    def is_curved(self) -> bool:
        return self.curvature_radius_m is not None


@dataclass
class BorderGeometry:
    thickness_m: float
    depth_m: float
    color: RGB
    pieces: list[SurfaceMesh] = field(default_factory=list)


@dataclass
class ScreenGeometry:
    """Everything the scene needs to draw one screen."""
    display_index: int
    viewing_distance_m: float
    panel: PanelGeometry
    border: BorderGeometry


# ------------------------------------------------------------------------------
# Colours
# ------------------------------------------------------------------------------
def hex_to_rgb(color: str) -> RGB:
    """'#9b5de5' -> (0.608, 0.365, 0.898)"""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a #rrggbb colour, got '{color}'.")
    return tuple(int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4))  # type: ignore[return-value]


def scale_rgb(color: RGB, factor: float) -> RGB:
    return tuple(min(1.0, max(0.0, c * factor)) for c in color)  # type: ignore[return-value]


def palette_index(display_index: int) -> int:
    return (display_index - 1) % len(SCREEN_COLORS)


# ------------------------------------------------------------------------------
# Builder
# ------------------------------------------------------------------------------
def arc_segment_count(arc_angle_rad: float) -> int:
    """Tessellation density grows with the arc angle, never below the minimum."""
    return max(MIN_ARC_SEGMENTS, math.ceil(math.degrees(abs(arc_angle_rad)) * ARC_SEGMENTS_PER_DEGREE))


def build_screen_geometry(spec: ScreenSpec, index: int = 0) -> ScreenGeometry:
    """
    Build panel and border geometry for one screen.

    Args:
        spec: The screen to build.
        index: Position of the screen in the current list. Each index adds a
               small offset along the forward axis so screens sharing a
               distance never render coplanar.

    Raises:
        InvalidScreenSpecError: If `spec` cannot produce valid geometry.
    """
    spec.validate()
    if index < 0:
        raise ValueError(f"index must be >= 0, got {index}.")

    size = spec.physical_size()
    width_m = size.width_m
    height_m = size.height_m

    color_index = palette_index(spec.display_index)
    base_color = hex_to_rgb(SCREEN_COLORS[color_index])

    thickness = BORDER_HEIGHT_RATIO * height_m
    z_position = -spec.viewing_distance_m + index * COPLANAR_EPSILON_M
    offset = Vector(0.0, 0.0, z_position)

    radius = spec.curvature_radius_m
    if radius is None:
        arc_angle = 0.0
        segments = 1
        panel_mesh = flat_panel_mesh(width_m, height_m)
        border_pieces = flat_border_meshes(width_m, height_m, thickness, BORDER_DEPTH_M)
    else:
        arc_angle = width_m / radius
        if arc_angle >= 2.0 * math.pi or radius <= BORDER_DEPTH_M:
            raise InvalidScreenSpecError(
                f"curvature radius {spec.curvature_radius_mm} mm is too small for a "
                f"{width_m * 1000:.0f} mm wide panel."
            )
        segments = arc_segment_count(arc_angle)
        panel_mesh = curved_panel_mesh(width_m, height_m, radius, segments)
        border_pieces = curved_border_meshes(width_m, height_m, radius, thickness, BORDER_DEPTH_M, segments)

    panel = PanelGeometry(
        width_m=width_m,
        height_m=height_m,
        curvature_radius_m=radius,
        arc_angle_rad=arc_angle,
        color_index=color_index,
        position_along_axis_m=z_position,
        segments=segments,
        color=scale_rgb(base_color, PANEL_TINT),
        opacity=PANEL_OPACITY,
        mesh=panel_mesh.translated(offset)
    )
    border = BorderGeometry(
        thickness_m=thickness,
        depth_m=BORDER_DEPTH_M,
        color=scale_rgb(base_color, BORDER_TINT),
        pieces=[piece.translated(offset) for piece in border_pieces]
    )

    logger.debug(
        f"Built screen {spec.display_index}: {width_m:.3f} x {height_m:.3f} m, "
        f"arc {arc_angle:.3f} rad, z={z_position:.3f}"
    )
    return ScreenGeometry(
        display_index=spec.display_index,
        viewing_distance_m=spec.viewing_distance_m,
        panel=panel,
        border=border
    )


# ------------------------------------------------------------------------------
# Tessellation (local coordinates: panel midpoint at origin)
# ------------------------------------------------------------------------------
def flat_panel_mesh(width: float, height: float) -> SurfaceMesh:
    hw, hh = width / 2, height / 2
    points = np.array([
        [-hw, -hh, 0.0],
        [hw, -hh, 0.0],
        [hw, hh, 0.0],
        [-hw, hh, 0.0],
    ], dtype=np.float64)
    return SurfaceMesh(points=points, quads=np.array([[0, 1, 2, 3]], dtype=np.int_))


def arc_angles(arc_angle: float, segments: int) -> npt.NDArray[np.float64]:
    return np.linspace(-arc_angle / 2, arc_angle / 2, segments + 1)


def arc_points(
    radius: float,
    angles: npt.NDArray[np.float64],
    y: float,
    center_z: float
) -> npt.NDArray[np.float64]:
    """
    Points on a horizontal circle around the vertical axis through (0, y, center_z).
    Angle 0 is the point nearest the -Z side (the panel midpoint).
    """
    x = radius * np.sin(angles)
    z = center_z - radius * np.cos(angles)
    return np.c_[x, np.full_like(x, y), z]


def curved_panel_mesh(width: float, height: float, radius: float, segments: int) -> SurfaceMesh:
    angles = arc_angles(width / radius, segments)
    bottom = arc_points(radius, angles, -height / 2, center_z=radius)
    top = arc_points(radius, angles, height / 2, center_z=radius)
    points = np.vstack([bottom, top])

    n = segments + 1
    i = np.arange(segments)
    quads = np.c_[i, i + 1, n + i + 1, n + i]
    return SurfaceMesh(points=points, quads=quads.astype(np.int_))


def box_mesh(size: tuple[float, float, float], center: Vector, rotation_y: float = 0.0) -> SurfaceMesh:
    """Axis-aligned box of `size`, rotated about its own vertical axis, moved to `center`."""
    sx, sy, sz = (s / 2 for s in size)
    corners = [
        Vector(-sx, -sy, -sz), Vector(sx, -sy, -sz), Vector(sx, sy, -sz), Vector(-sx, sy, -sz),
        Vector(-sx, -sy, sz), Vector(sx, -sy, sz), Vector(sx, sy, sz), Vector(-sx, sy, sz),
    ]
    points = np.array([(c.rotate_y(rotation_y) + center).to_tuple() for c in corners], dtype=np.float64)
    quads = np.array([
        [0, 3, 2, 1],  # back
        [4, 5, 6, 7],  # front
        [0, 4, 7, 3],  # left
        [1, 2, 6, 5],  # right
        [3, 7, 6, 2],  # top
        [0, 1, 5, 4],  # bottom
    ], dtype=np.int_)
    return SurfaceMesh(points=points, quads=quads)


def arc_box_mesh(
    inner_radius: float,
    outer_radius: float,
    angles: npt.NDArray[np.float64],
    y_bottom: float,
    y_top: float,
    center_z: float
) -> SurfaceMesh:
    """
    Arc-swept box section: inner/outer curved faces, flat top/bottom caps and
    two end faces, sharing the cylinder axis of the panel.
    """
    rings = [
        arc_points(inner_radius, angles, y_bottom, center_z),
        arc_points(outer_radius, angles, y_bottom, center_z),
        arc_points(outer_radius, angles, y_top, center_z),
        arc_points(inner_radius, angles, y_top, center_z),
    ]
    n = len(angles)
    points = np.vstack(rings)

    quads: list[list[int]] = []
    for k in range(4):
        a = k * n
        b = ((k + 1) % 4) * n
        for i in range(n - 1):
            quads.append([a + i, a + i + 1, b + i + 1, b + i])

    # End faces close the section at both arc ends
    quads.append([0, n, 2 * n, 3 * n])
    last = n - 1
    quads.append([last + 3 * n, last + 2 * n, last + n, last])

    return SurfaceMesh(points=points, quads=np.array(quads, dtype=np.int_))


def flat_border_meshes(width: float, height: float, thickness: float, depth: float) -> list[SurfaceMesh]:
    """Top/bottom span the panel width, left/right span the full frame height."""
    offset_y = (height + thickness) / 2
    offset_x = (width + thickness) / 2
    return [
        box_mesh((width, thickness, depth), Vector(0.0, offset_y, 0.0)),
        box_mesh((width, thickness, depth), Vector(0.0, -offset_y, 0.0)),
        box_mesh((thickness, height + 2 * thickness, depth), Vector(-offset_x, 0.0, 0.0)),
        box_mesh((thickness, height + 2 * thickness, depth), Vector(offset_x, 0.0, 0.0)),
    ]


def curved_border_meshes(
    width: float,
    height: float,
    radius: float,
    thickness: float,
    depth: float,
    segments: int
) -> list[SurfaceMesh]:
    """
    Arc-swept top/bottom sections plus straight end pieces tangent to the
    arc at both panel edges.
    """
    arc_angle = width / radius
    angles = arc_angles(arc_angle, segments)
    inner = radius - depth / 2
    outer = radius + depth / 2
    half_h = height / 2

    pieces = [
        arc_box_mesh(inner, outer, angles, half_h, half_h + thickness, center_z=radius),
        arc_box_mesh(inner, outer, angles, -half_h - thickness, -half_h, center_z=radius),
    ]

    edge_angle = arc_angle / 2
    end_size = (thickness, height + 2 * thickness, depth)
    for side in (1.0, -1.0):
        a = side * edge_angle
        edge = Vector(radius * math.sin(a), 0.0, radius - radius * math.cos(a))
        # Unit tangent pointing away from the panel along the arc
        outward = Vector(math.cos(a), 0.0, math.sin(a)) * side
        center = edge + outward * (thickness / 2)
        pieces.append(box_mesh(end_size, center, rotation_y=-a))

    return pieces
