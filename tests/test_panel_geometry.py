import math

import numpy as np
import pytest

from screencompare.config import (
    BORDER_HEIGHT_RATIO, BORDER_DEPTH_M, COPLANAR_EPSILON_M, PANEL_OPACITY, SCREEN_COLORS
)
from screencompare.model.geometry_primitives import Vector
from screencompare.model.panel_geometry import (
    build_screen_geometry, arc_segment_count, box_mesh, hex_to_rgb, scale_rgb, palette_index
)
from screencompare.model.screen import InvalidScreenSpecError
from tests.conftest import make_spec


def test_flat_panel_is_a_single_quad_at_viewing_distance(flat_24):
    geometry = build_screen_geometry(flat_24)
    panel = geometry.panel

    assert not panel.is_curved
    assert panel.arc_angle_rad == 0.0
    assert panel.segments == 1
    assert panel.mesh.n_points == 4
    assert panel.mesh.n_faces == 1
    np.testing.assert_allclose(panel.mesh.points[:, 2], -0.6)

    x_min, x_max, y_min, y_max, _, _ = panel.mesh.bounds()
    assert x_max - x_min == pytest.approx(panel.width_m)
    assert y_max - y_min == pytest.approx(panel.height_m)
    assert panel.width_m / panel.height_m == pytest.approx(1920 / 1080)


def test_flat_border_surrounds_panel(flat_24):
    geometry = build_screen_geometry(flat_24)
    panel, border = geometry.panel, geometry.border

    assert len(border.pieces) == 4
    assert border.thickness_m == pytest.approx(BORDER_HEIGHT_RATIO * panel.height_m)
    assert border.thickness_m == pytest.approx(0.0149, abs=1e-4)
    assert border.depth_m == BORDER_DEPTH_M

    top, bottom, left, right = (piece.bounds() for piece in border.pieces)
    half_w, half_h = panel.width_m / 2, panel.height_m / 2
    t = border.thickness_m

    assert top[2] == pytest.approx(half_h)
    assert top[3] == pytest.approx(half_h + t)
    assert bottom[3] == pytest.approx(-half_h)
    assert left[1] == pytest.approx(-half_w)
    assert right[0] == pytest.approx(half_w)
    # Side pieces span the full frame height
    assert left[3] - left[2] == pytest.approx(panel.height_m + 2 * t)
    # Every piece is centred on the panel plane
    for piece in border.pieces:
        z_min, z_max = piece.bounds()[4:]
        assert (z_min + z_max) / 2 == pytest.approx(-0.6)
        assert z_max - z_min == pytest.approx(BORDER_DEPTH_M)


def test_curved_arc_angle_round_trip(curved_34):
    panel = build_screen_geometry(curved_34).panel

    assert panel.is_curved
    assert panel.arc_angle_rad == pytest.approx(panel.width_m / 1.5)
    assert panel.arc_angle_rad * panel.curvature_radius_m == pytest.approx(panel.width_m)
    assert panel.segments >= 32
    assert panel.segments == arc_segment_count(panel.arc_angle_rad)
    assert panel.mesh.n_points == 2 * (panel.segments + 1)
    assert panel.mesh.n_faces == panel.segments


def test_curved_panel_is_concave_toward_viewer(curved_34):
    panel = build_screen_geometry(curved_34).panel
    points = panel.mesh.points
    z = points[:, 2]

    # Midpoint sits at the nominal distance, the edges bend toward the viewer
    middle = np.argmin(np.abs(points[:, 0]))
    assert z[middle] == pytest.approx(-0.6, abs=1e-4)
    assert np.all(z >= -0.6 - 1e-12)
    assert z.max() > -0.6

    # Every point lies on the cylinder through the arc
    center_z = -0.6 + 1.5
    radii = np.hypot(points[:, 0], z - center_z)
    np.testing.assert_allclose(radii, 1.5)


def test_curved_border_matches_arc(curved_34):
    geometry = build_screen_geometry(curved_34)
    border = geometry.border

    assert len(border.pieces) == 4
    arc_top, arc_bottom, end_a, end_b = border.pieces
    n = geometry.panel.segments + 1
    assert arc_top.n_points == 4 * n
    assert arc_bottom.n_points == 4 * n
    assert end_a.n_points == 8
    assert end_b.n_points == 8

    # The frame scales with the panel height on curved screens too
    half_h = geometry.panel.height_m / 2
    assert border.thickness_m == pytest.approx(BORDER_HEIGHT_RATIO * geometry.panel.height_m)
    assert arc_top.bounds()[2] == pytest.approx(half_h)
    assert arc_top.bounds()[3] == pytest.approx(half_h + border.thickness_m)

    # End pieces are mirror images of each other
    a = end_a.bounds()
    b = end_b.bounds()
    assert a[0] == pytest.approx(-b[1])
    assert a[4] == pytest.approx(b[4])


@pytest.mark.parametrize("degrees, expected", [
    (0.0, 32),
    (10.0, 32),
    (15.9, 32),
    (30.4, 61),
    (89.9, 180),
])
def test_arc_segment_count(degrees, expected):
    assert arc_segment_count(math.radians(degrees)) == expected


def test_epsilon_offset_per_index():
    spec = make_spec()
    first = build_screen_geometry(spec, index=0)
    second = build_screen_geometry(spec, index=1)
    third = build_screen_geometry(spec, index=2)

    z = [g.panel.position_along_axis_m for g in (first, second, third)]
    assert z[1] - z[0] == pytest.approx(COPLANAR_EPSILON_M)
    assert z[2] - z[1] == pytest.approx(COPLANAR_EPSILON_M)
    assert second.panel.mesh.points[0, 2] == pytest.approx(-0.6 + COPLANAR_EPSILON_M)


def test_negative_index_is_rejected(flat_24):
    with pytest.raises(ValueError):
        build_screen_geometry(flat_24, index=-1)


def test_invalid_spec_produces_no_geometry():
    with pytest.raises(InvalidScreenSpecError):
        build_screen_geometry(make_spec(distance_mm=float("nan")))


def test_radius_too_small_for_width_is_rejected():
    # A 34" ultrawide is ~0.8 m wide, more than a full circle of 100 mm radius
    spec = make_spec(diagonal=34.0, resolution=(3440, 1440), curvature_mm=100.0)
    with pytest.raises(InvalidScreenSpecError, match="too small"):
        build_screen_geometry(spec)


def test_colours_follow_display_index():
    base = hex_to_rgb(SCREEN_COLORS[2])
    geometry = build_screen_geometry(make_spec(display_index=3))

    assert geometry.panel.color_index == 2
    assert geometry.panel.color == pytest.approx(scale_rgb(base, 0.5))
    assert geometry.border.color == pytest.approx(scale_rgb(base, 0.9))
    assert geometry.panel.opacity == PANEL_OPACITY


def test_palette_wraps_around():
    assert palette_index(1) == 0
    assert palette_index(5) == 4
    assert palette_index(6) == 0


def test_hex_to_rgb():
    assert hex_to_rgb("#9b5de5") == pytest.approx((155 / 255, 93 / 255, 229 / 255))
    with pytest.raises(ValueError):
        hex_to_rgb("#fff")


def test_box_mesh_rotation_keeps_size():
    box = box_mesh((0.2, 0.1, 0.05), Vector(1.0, 0.0, -1.0), rotation_y=math.pi / 2)
    x_min, x_max, y_min, y_max, z_min, z_max = box.bounds()

    assert box.n_faces == 6
    assert x_max - x_min == pytest.approx(0.05)
    assert z_max - z_min == pytest.approx(0.2)
    assert y_max - y_min == pytest.approx(0.1)
    assert (x_min + x_max) / 2 == pytest.approx(1.0)
