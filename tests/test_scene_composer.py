import logging

import numpy as np
import pytest

from screencompare.config import AXIS_DASH_LENGTH_M, AXIS_GAP_LENGTH_M, COPLANAR_EPSILON_M, THEME_COLORS
from screencompare.controller.scene_composer import (
    SceneComposer, AxisIndicator, ViewerMarker, indicator_line_width
)
from screencompare.model.camera_state import ViewMode, Theme
from screencompare.model.panel_geometry import hex_to_rgb
from screencompare.model.presets import default_screen
from tests.conftest import make_spec

SIZE = (800, 600)


@pytest.fixture
def composer(settings):
    return SceneComposer(settings)


def test_first_update_builds_everything(composer, flat_24):
    update = composer.update([flat_24], SIZE, Theme.LIGHT)

    assert update.changed
    assert update.geometry_rebuilt
    assert update.distances_changed
    assert update.theme_changed
    assert update.size_changed
    assert composer.version == 1
    assert len(composer.geometries) == 1


def test_identical_update_is_a_no_op(composer, flat_24):
    composer.update([flat_24], SIZE, Theme.LIGHT)
    geometries = composer.geometries

    # A fresh but equal spec must not trigger a rebuild
    update = composer.update([make_spec()], SIZE, Theme.LIGHT)

    assert not update.changed
    assert composer.version == 1
    assert composer.geometries is geometries


def test_theme_only_change_keeps_geometry(composer, flat_24):
    composer.update([flat_24], SIZE, Theme.LIGHT)
    update = composer.update([flat_24], SIZE, Theme.DARK)

    assert update.changed
    assert update.theme_changed
    assert not update.geometry_rebuilt
    assert composer.version == 1
    assert composer.marker.color == hex_to_rgb(THEME_COLORS["dark"]["marker"])
    assert composer.indicator.color == hex_to_rgb(THEME_COLORS["dark"]["indicator"])


@pytest.mark.parametrize("height, expected", [
    (400, 2.0),
    (800, 4.0),
    (100, 1.0),
    (10, 1.0),
])
def test_indicator_line_width_scales_with_height(height, expected):
    assert indicator_line_width(height) == pytest.approx(expected)


def test_resize_only_updates_line_width(composer, flat_24):
    composer.update([flat_24], (800, 400), Theme.LIGHT)
    update = composer.update([flat_24], (800, 800), Theme.LIGHT)

    assert update.size_changed
    assert not update.geometry_rebuilt
    assert composer.indicator.line_width == pytest.approx(4.0)


def test_empty_list_shows_default_screen(composer):
    composer.update([], SIZE, Theme.LIGHT)

    assert composer.specs == (default_screen(),)
    assert len(composer.geometries) == 1
    assert composer.indicator.length_m == pytest.approx(0.6)


def test_invalid_spec_is_skipped_with_warning(composer, flat_24, caplog):
    bad = make_spec(diagonal=0.0, display_index=2)

    with caplog.at_level(logging.WARNING):
        composer.update([bad, flat_24], SIZE, Theme.LIGHT)

    assert composer.specs == (flat_24,)
    assert composer.rejected == (bad,)
    assert "Skipping screen 2" in caplog.text
    # The first valid screen gets the first depth slot
    assert composer.geometries[0].panel.position_along_axis_m == pytest.approx(-0.6)


def test_all_invalid_falls_back_to_default(composer):
    composer.update([make_spec(distance_mm=-1.0)], SIZE, Theme.LIGHT)

    assert composer.specs == (default_screen(),)
    assert len(composer.rejected) == 1


def test_distances_changed_only_when_distances_change(composer):
    composer.update([make_spec(distance_mm=600)], SIZE, Theme.LIGHT)

    bigger = composer.update([make_spec(diagonal=27.0, distance_mm=600)], SIZE, Theme.LIGHT)
    assert bigger.geometry_rebuilt
    assert not bigger.distances_changed

    further = composer.update([make_spec(diagonal=27.0, distance_mm=800)], SIZE, Theme.LIGHT)
    assert further.distances_changed
    assert composer.indicator.length_m == pytest.approx(0.8)
    assert composer.version == 3


def test_reordering_screens_keeps_distances(composer):
    near = make_spec(distance_mm=600)
    far = make_spec(distance_mm=900, display_index=2)
    composer.update([near, far], SIZE, Theme.LIGHT)

    update = composer.update([far, near], SIZE, Theme.LIGHT)

    assert update.geometry_rebuilt
    assert not update.distances_changed


def test_same_distance_screens_are_offset(composer):
    composer.update([make_spec(), make_spec(diagonal=27.0, display_index=2)], SIZE, Theme.LIGHT)

    first, second = composer.geometries
    assert second.panel.position_along_axis_m - first.panel.position_along_axis_m == pytest.approx(COPLANAR_EPSILON_M)


def test_marker_fades_in_and_out(composer):
    marker = composer.marker
    assert not marker.visible

    marker.set_mode(ViewMode.ISOMETRIC)
    assert composer.step_marker()
    assert marker.opacity == pytest.approx(0.15)

    steps = 1
    while composer.step_marker():
        steps += 1
    assert marker.opacity == 1.0
    assert 10 < steps < 100

    marker.set_mode(ViewMode.FRONT)
    while composer.step_marker():
        pass
    assert marker.opacity == 0.0
    assert not marker.visible


def test_marker_at_target_does_not_step():
    marker = ViewerMarker()
    marker.set_mode(ViewMode.FRONT)
    assert not marker.step(0.15, 0.01)


def test_dashes_run_from_viewer_to_furthest_screen():
    indicator = AxisIndicator(length_m=0.1)
    segments = indicator.dash_segments()

    period = AXIS_DASH_LENGTH_M + AXIS_GAP_LENGTH_M
    assert segments.shape == (int(np.ceil(0.1 / period)), 2, 3)
    np.testing.assert_allclose(segments[0, 0], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(segments[0, 1], [0.0, 0.0, -AXIS_DASH_LENGTH_M])
    # Nothing goes past the end point, and everything stays on the axis
    assert segments[:, :, 2].min() >= -0.1 - 1e-12
    np.testing.assert_allclose(segments[:, :, :2], 0.0)
    assert indicator.end_point.z == pytest.approx(-0.1)


def test_zero_length_indicator_has_no_dashes():
    assert AxisIndicator().dash_segments().shape == (0, 2, 3)
