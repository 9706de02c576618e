"""
Geometric Primitives for the 3D viewport.

Coordinate convention: the viewer sits at the origin, +Y is up and the
screens are laid out along the forward axis -Z.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt


def wrap_angle(angle_rad: float) -> float:
    """Wrap an angle into the half-open interval (-pi, pi]."""
    wrapped = math.fmod(angle_rad + math.pi, 2.0 * math.pi)
    if wrapped <= 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def lerp_angle(current: float, target: float, t: float) -> float:
    """Blend two angles along the shorter arc, result wrapped into (-pi, pi]."""
    diff = wrap_angle(target - current)
    return wrap_angle(current + diff * t)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


@dataclass
class Vector:
    """
    A vector in 3D space representing direction and magnitude.
    Also used for points (camera position, look-at point).
    """
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar, self.z * scalar)

    def __truediv__(self, scalar: float) -> Vector:
        if scalar == 0.0: raise ZeroDivisionError
        return Vector(self.x / scalar, self.y / scalar, self.z / scalar)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def normalize(self) -> Vector:
        mag = self.magnitude
        if mag == 0.0: return Vector(0.0, 0.0, 0.0)
        return self / mag

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def distance_to(self, other: Vector) -> float:
        return (self - other).magnitude

    def lerp(self, other: Vector, t: float) -> Vector:
        """Linear interpolation towards `other` by ratio `t`."""
        return Vector(
            lerp(self.x, other.x, t),
            lerp(self.y, other.y, t),
            lerp(self.z, other.z, t)
        )

    def rotate_y(self, angle_rad: float) -> Vector:
        """Rotate vector around the vertical Y axis."""
        cos_a = math.cos(angle_rad)
        sin_a = math.sin(angle_rad)
        return Vector(
            self.x * cos_a + self.z * sin_a,
            self.y,
            -self.x * sin_a + self.z * cos_a
        )

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z])

    def copy(self) -> Vector:
        return Vector(self.x, self.y, self.z)


ORIGIN = Vector(0.0, 0.0, 0.0)
WORLD_UP = Vector(0.0, 1.0, 0.0)
FORWARD = Vector(0.0, 0.0, -1.0)


@dataclass
class Spherical:
    """
    Orbit representation relative to a pivot point.

    `polar` is measured from +Y, `azimuth` around +Y starting at +Z
    (so azimuth 0 puts the camera on the +Z side of the pivot).
    """
    radius: float = 1.0
    polar: float = math.pi / 2
    azimuth: float = 0.0

    @classmethod
    def from_offset(cls, offset: Vector) -> Spherical:
        """
        Spherical coordinates of `offset` (camera position minus pivot).

        A zero-length offset has no direction; it falls back to the default
        orientation instead of dividing by zero.
        """
        radius = offset.magnitude
        if radius == 0.0 or not math.isfinite(radius):
            return cls()
        polar = math.acos(clamp(offset.y / radius, -1.0, 1.0))
        azimuth = math.atan2(offset.x, offset.z)
        return cls(radius=radius, polar=polar, azimuth=azimuth)

    def to_offset(self) -> Vector:
        sin_polar = math.sin(self.polar)
        return Vector(
            self.radius * sin_polar * math.sin(self.azimuth),
            self.radius * math.cos(self.polar),
            self.radius * sin_polar * math.cos(self.azimuth)
        )

    def copy(self) -> Spherical:
        return Spherical(self.radius, self.polar, self.azimuth)
