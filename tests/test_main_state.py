import logging

import pytest

from screencompare.config import MAX_SCREENS, EngineSettings
from screencompare.logging_config import setup_logging, PACKAGE_LOGGER
from screencompare.main import build_parser, build_state
from screencompare.model.camera_state import ViewMode, Theme
from screencompare.model.presets import (
    ALL_PRESETS, DEFAULT_PRESET_KEY, ULTRAWIDE_PRESET_KEY, get_preset, default_configuration
)
from screencompare.model.state import ViewerState
from tests.conftest import make_spec


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(level)


# ------------------------------------------------------------------------------
# Presets
# ------------------------------------------------------------------------------
def test_catalog_keys_are_unique_and_valid():
    assert len(ALL_PRESETS) == 17
    for key, preset in ALL_PRESETS.items():
        assert preset.key == key
        assert preset.to_spec().is_valid(), key


def test_preset_to_spec():
    spec = get_preset(ULTRAWIDE_PRESET_KEY).to_spec(display_index=3)

    assert spec.diagonal_inches == 34
    assert spec.resolution == (3440, 1440)
    assert spec.curvature_radius_mm == 1500
    assert spec.display_index == 3
    assert '34" UWQHD' in get_preset(ULTRAWIDE_PRESET_KEY).label


def test_unknown_preset_lists_known_keys():
    with pytest.raises(KeyError, match=DEFAULT_PRESET_KEY):
        get_preset("13-1-1")


# ------------------------------------------------------------------------------
# Viewer state
# ------------------------------------------------------------------------------
def test_default_state():
    state = ViewerState()

    assert state.screens == default_configuration()
    assert state.view_mode == ViewMode.FRONT
    assert state.theme == Theme.LIGHT
    assert isinstance(state.snapshot(), tuple)


def test_add_screen_numbers_and_limits():
    state = ViewerState(screens=[])
    for _ in range(MAX_SCREENS):
        added = state.add_screen(make_spec(display_index=9))
    assert added.display_index == MAX_SCREENS
    assert not state.can_add_screen

    with pytest.raises(ValueError, match="At most"):
        state.add_screen(make_spec())


def test_remove_screen_renumbers():
    state = ViewerState(screens=[])
    for diagonal in (24.0, 27.0, 32.0):
        state.add_screen(make_spec(diagonal=diagonal))

    removed = state.remove_screen(0)

    assert removed.diagonal_inches == 24.0
    assert [s.display_index for s in state.screens] == [1, 2]
    assert [s.diagonal_inches for s in state.screens] == [27.0, 32.0]


def test_replace_and_reset():
    state = ViewerState(view_mode=ViewMode.TOP)
    state.replace_screen(1, make_spec(diagonal=43.0, display_index=7))
    assert state.screens[1].display_index == 2
    assert state.screens[1].diagonal_inches == 43.0

    state.reset()
    assert state.screens == default_configuration()
    assert state.view_mode == ViewMode.TOP


# ------------------------------------------------------------------------------
# Command line
# ------------------------------------------------------------------------------
def test_defaults_from_empty_command_line():
    state = build_state(build_parser().parse_args([]))

    assert state.screens == default_configuration()
    assert state.view_mode == ViewMode.FRONT
    assert state.theme == Theme.LIGHT


def test_presets_view_and_theme_from_command_line():
    args = build_parser().parse_args([
        "--preset", "27-2560-1440", "--preset", "49-5120-1440", "--view", "isometric", "--dark"
    ])
    state = build_state(args)

    assert [s.diagonal_inches for s in state.screens] == [27, 49]
    assert [s.display_index for s in state.screens] == [1, 2]
    assert state.view_mode == ViewMode.ISOMETRIC
    assert state.theme == Theme.DARK


def test_extra_presets_are_dropped_with_warning(caplog):
    args = build_parser().parse_args(["--preset", DEFAULT_PRESET_KEY] * (MAX_SCREENS + 1))

    with caplog.at_level(logging.WARNING):
        state = build_state(args)

    assert len(state.screens) == MAX_SCREENS
    assert "screen limit reached" in caplog.text


@pytest.mark.parametrize("argv", [
    ["--preset", "13-1-1"],
    ["--view", "sideways"],
])
def test_invalid_arguments_exit(argv, capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(argv)


# ------------------------------------------------------------------------------
# Logging
# ------------------------------------------------------------------------------
def test_setup_logging_replaces_handlers(package_logger):
    setup_logging(logging.INFO)
    setup_logging(logging.DEBUG)

    assert package_logger.level == logging.DEBUG
    assert len(package_logger.handlers) == 1
    assert logging.getLogger("pyvista").level == logging.WARNING


def test_setup_logging_writes_file(package_logger, tmp_path):
    log_file = tmp_path / "screencompare.log"
    setup_logging(logging.DEBUG, log_file=str(log_file))
    assert len(package_logger.handlers) == 2

    logging.getLogger("screencompare.tests").info("hello from the test")
    for handler in package_logger.handlers:
        handler.flush()

    assert "hello from the test" in log_file.read_text(encoding="utf-8")


# ------------------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------------------
@pytest.mark.parametrize("kwargs", [
    dict(blend_ratio=0.0),
    dict(blend_ratio=1.0),
    dict(spring_back_ratio=1.5),
    dict(convergence_threshold=0.0),
    dict(debounce_ms=-1),
])
def test_engine_settings_reject_bad_tunables(kwargs):
    with pytest.raises(ValueError):
        EngineSettings(**kwargs)
