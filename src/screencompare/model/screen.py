"""
Screen Specification
====================
The read-only description of one monitor, as supplied by the editing UI.

Classes:
    ScreenSpec: Immutable snapshot of one monitor configuration.
    PhysicalSize: Physical width/height derived from diagonal and resolution.
    ScreenMetrics: Field of view and pixel density figures for one screen.
    InvalidScreenSpecError: Raised for specs that cannot be turned into geometry.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Optional

from screencompare.config import INCHES_TO_MM, MM_TO_M, DEFAULT_SCALING_PERCENT, RETINA_PPD


class InvalidScreenSpecError(ValueError):
    """A screen spec has a non-finite or non-positive geometry input."""


@dataclass(frozen=True)
class PhysicalSize:
    width_inches: float
    height_inches: float

    @property
    def width_m(self) -> float:
        return self.width_inches * INCHES_TO_MM * MM_TO_M

    @property
    def height_m(self) -> float:
        return self.height_inches * INCHES_TO_MM * MM_TO_M


@dataclass(frozen=True)
class ScreenMetrics:
    """
    Derived figures shown next to the viewport for one screen.

    Angles are in degrees. The scaled values are None when the OS scaling
    is 100 %.
    """
    width_inches: float
    height_inches: float
    horizontal_fov_deg: float
    vertical_fov_deg: float
    ppi: float
    ppd: float
    scaled_resolution: Optional[tuple[int, int]] = None
    scaled_ppi: Optional[float] = None
    scaled_ppd: Optional[float] = None

    @property
    def is_retina(self) -> bool:
        """At RETINA_PPD pixels per degree single pixels stop being resolvable."""
        return self.ppd >= RETINA_PPD

    @property
    def is_scaled(self) -> bool:
        return self.scaled_resolution is not None


@dataclass(frozen=True)
class ScreenSpec:
    """
    One monitor configuration.

    The core never mutates a spec; the editing layer creates a new one on
    every edit. Equality is structural, which is what scene diffing relies on.
    """
    diagonal_inches: float
    resolution: tuple[int, int]
    viewing_distance_mm: float
    curvature_radius_mm: Optional[float] = None  # None = flat
    scaling_percent: float = DEFAULT_SCALING_PERCENT
    display_index: int = 1

    @property
    def is_curved(self) -> bool:
        return self.curvature_radius_mm is not None

    @property
    def aspect_ratio(self) -> float:
        width_px, height_px = self.resolution
        return width_px / height_px

    @property
    def viewing_distance_m(self) -> float:
        return self.viewing_distance_mm * MM_TO_M

    @property
    def curvature_radius_m(self) -> Optional[float]:
        if self.curvature_radius_mm is None:
            return None
        return self.curvature_radius_mm * MM_TO_M

    def validate(self) -> None:
        """
        Raises:
            InvalidScreenSpecError: If any geometry input is non-finite or <= 0.
        """
        _require_positive("diagonal_inches", self.diagonal_inches)
        _require_positive("viewing_distance_mm", self.viewing_distance_mm)
        _require_positive("scaling_percent", self.scaling_percent)

        if len(self.resolution) != 2:
            raise InvalidScreenSpecError(f"resolution must be (width, height), got {self.resolution!r}.")
        for name, value in zip(("resolution width", "resolution height"), self.resolution):
            _require_whole(name, value)

        if self.curvature_radius_mm is not None:
            _require_positive("curvature_radius_mm", self.curvature_radius_mm)

        _require_whole("display_index", self.display_index)

    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidScreenSpecError:
            return False
        return True

    def physical_size(self) -> PhysicalSize:
        """Physical panel size from diagonal and pixel aspect ratio."""
        self.validate()
        ratio = self.aspect_ratio
        height_inches = self.diagonal_inches / math.sqrt(ratio ** 2 + 1)
        width_inches = ratio * height_inches
        return PhysicalSize(width_inches=width_inches, height_inches=height_inches)

    def horizontal_half_angle(self) -> float:
        """
        Angle from the view axis to the panel edge, in radians.

        Curved panels bend their edges toward the viewer, so they cover a
        wider angle than a flat panel of the same width.
        """
        half_width = self.physical_size().width_m / 2
        distance = self.viewing_distance_m
        radius = self.curvature_radius_m
        if radius is None:
            return math.atan2(half_width, distance)
        half_arc = half_width / radius
        return math.atan2(radius * math.sin(half_arc), distance - radius * (1.0 - math.cos(half_arc)))

    def vertical_half_angle(self) -> float:
        return math.atan2(self.physical_size().height_m / 2, self.viewing_distance_m)

    def metrics(self) -> ScreenMetrics:
        """
        Size, field of view and pixel density of this screen.

        PPD is taken at the centre of the panel, where one degree spans
        2 * d * tan(0.5 deg) inches.

        Raises:
            InvalidScreenSpecError: If the spec fails `validate()`.
        """
        size = self.physical_size()
        width_px, height_px = self.resolution
        ppi = math.hypot(width_px, height_px) / self.diagonal_inches
        distance_inches = self.viewing_distance_mm / INCHES_TO_MM
        ppd = 2.0 * distance_inches * ppi * math.tan(math.radians(0.5))

        scaled = {}
        if self.scaling_percent != DEFAULT_SCALING_PERCENT:
            scale = self.scaling_percent / 100.0
            scaled = dict(
                scaled_resolution=(round(width_px / scale), round(height_px / scale)),
                scaled_ppi=ppi / scale,
                scaled_ppd=ppd / scale,
            )

        return ScreenMetrics(
            width_inches=size.width_inches,
            height_inches=size.height_inches,
            horizontal_fov_deg=math.degrees(2.0 * self.horizontal_half_angle()),
            vertical_fov_deg=math.degrees(2.0 * self.vertical_half_angle()),
            ppi=ppi,
            ppd=ppd,
            **scaled
        )


def _require_positive(name: str, value: float) -> None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidScreenSpecError(f"{name} must be a number, got {value!r}.") from None
    if not math.isfinite(number) or number <= 0.0:
        raise InvalidScreenSpecError(f"{name} must be a finite positive number, got {value!r}.")


def _require_whole(name: str, value: int) -> None:
    """Positive integer check; bools are rejected even though they are ints."""
    if isinstance(value, bool):
        raise InvalidScreenSpecError(f"{name} must be a whole number, got {value!r}.")
    _require_positive(name, value)
    if float(value) != int(value) or float(value) < 1.0:
        raise InvalidScreenSpecError(f"{name} must be a whole number >= 1, got {value!r}.")
