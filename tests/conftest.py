import os

# Qt must not try to open a display during tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("QT_API", "pyside6")

from typing import Optional

import pytest

from screencompare.config import EngineSettings
from screencompare.controller.camera_controller import CameraController
from screencompare.model.screen import ScreenSpec


def make_spec(
    diagonal: float = 24.0,
    resolution: tuple[int, int] = (1920, 1080),
    distance_mm: float = 600.0,
    curvature_mm: Optional[float] = None,
    display_index: int = 1,
) -> ScreenSpec:
    return ScreenSpec(
        diagonal_inches=diagonal,
        resolution=resolution,
        viewing_distance_mm=distance_mm,
        curvature_radius_mm=curvature_mm,
        display_index=display_index,
    )


def run_until_settled(controller: CameraController, max_ticks: int = 2000) -> int:
    """Tick until nothing changes any more; returns the number of ticks taken."""
    for i in range(max_ticks):
        if not controller.tick():
            return i
    raise AssertionError("camera did not settle")


@pytest.fixture
def flat_24() -> ScreenSpec:
    return make_spec()


@pytest.fixture
def curved_34() -> ScreenSpec:
    return make_spec(diagonal=34.0, resolution=(3440, 1440), curvature_mm=1500.0, display_index=2)


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture
def controller(settings: EngineSettings) -> CameraController:
    return CameraController(settings)
