"""Predefined Monitor Presets (Catalog)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from screencompare.config import DEFAULT_DISTANCE_MM, DEFAULT_SCALING_PERCENT
from screencompare.model.screen import ScreenSpec


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class MonitorPreset:
    diagonal_inches: float
    width_px: int
    height_px: int
    distance_mm: float
    curvature_radius_mm: Optional[float]
    name: str

    @property
    def key(self) -> str:
        """Catalog key, e.g. '34-3440-1440'."""
        return f"{self.diagonal_inches:g}-{self.width_px}-{self.height_px}"

    @property
    def label(self) -> str:
        return f'{self.diagonal_inches:g}" {self.name} ({self.width_px} x {self.height_px})'

    def to_spec(
        self,
        display_index: int = 1,
        scaling_percent: float = DEFAULT_SCALING_PERCENT
    ) -> ScreenSpec:
        return ScreenSpec(
            diagonal_inches=self.diagonal_inches,
            resolution=(self.width_px, self.height_px),
            viewing_distance_mm=self.distance_mm,
            curvature_radius_mm=self.curvature_radius_mm,
            scaling_percent=scaling_percent,
            display_index=display_index
        )


# ------------------------------------------------------------------------------
# Catalog
# ------------------------------------------------------------------------------
_PRESET_LIST: list[MonitorPreset] = [
    MonitorPreset(24, 1920, 1080, 600, None, "FHD"),
    MonitorPreset(27, 2560, 1440, 600, None, "QHD"),
    MonitorPreset(27, 3840, 2160, 600, None, "UHD 4K"),
    MonitorPreset(27, 5120, 2880, 600, None, "5K"),
    MonitorPreset(32, 2560, 1440, 650, None, "QHD"),
    MonitorPreset(32, 3840, 2160, 650, None, "UHD 4K"),
    MonitorPreset(32, 6144, 3456, 600, None, "6K"),
    MonitorPreset(32, 7680, 4320, 600, None, "8K"),
    MonitorPreset(34, 3440, 1440, 600, 1500, "UWQHD"),
    MonitorPreset(38, 3840, 1600, 600, 2300, "WQHD+"),
    MonitorPreset(40, 5120, 2160, 650, 2500, "5K2K"),
    MonitorPreset(43, 3840, 2160, 600, None, "UHD 4K"),
    MonitorPreset(45, 5120, 2160, 750, 800, "5K2K"),
    MonitorPreset(49, 5120, 1440, 600, 1800, "DQHD"),
    MonitorPreset(57, 7680, 2160, 650, 1000, "DUHD"),
    MonitorPreset(65, 3840, 2160, 1500, None, "UHD 4K"),
    MonitorPreset(65, 7680, 4320, 1500, None, "8K"),
]

ALL_PRESETS: dict[str, MonitorPreset] = {p.key: p for p in _PRESET_LIST}

DEFAULT_PRESET_KEY: str = "24-1920-1080"
ULTRAWIDE_PRESET_KEY: str = "34-3440-1440"


def get_preset(key: str) -> MonitorPreset:
    """
    Raises:
        KeyError: If the key is not in the catalog.
    """
    try:
        return ALL_PRESETS[key]
    except KeyError:
        raise KeyError(f"Unknown monitor preset '{key}'. Known presets: {', '.join(ALL_PRESETS)}") from None


def default_screen() -> ScreenSpec:
    """Placeholder screen shown when the screen list is empty."""
    preset = ALL_PRESETS[DEFAULT_PRESET_KEY]
    return ScreenSpec(
        diagonal_inches=preset.diagonal_inches,
        resolution=(preset.width_px, preset.height_px),
        viewing_distance_mm=DEFAULT_DISTANCE_MM,
        display_index=1
    )


def default_configuration() -> list[ScreenSpec]:
    """A flat 24" FHD next to a 34" 1500R ultrawide, both at 600 mm."""
    return [
        ALL_PRESETS[DEFAULT_PRESET_KEY].to_spec(display_index=1),
        ALL_PRESETS[ULTRAWIDE_PRESET_KEY].to_spec(display_index=2),
    ]
