"""Basic 3D value types used by shapes and renderers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

_SHORT_MAX = 32767


@dataclass(frozen=True)
class TextureVertex:
    """A 2D texture coordinate."""

    keys: ClassVar[tuple[str, ...]] = ("x", "y")
    x: float
    y: float


@dataclass(frozen=True)
class Vector3f:
    """A 3D vector supporting component-wise arithmetic."""

    keys: ClassVar[tuple[str, ...]] = ("x", "y", "z")
    x: float
    y: float
    z: float

    def __add__(self, other: Vector3f) -> Vector3f:
        if not isinstance(other, Vector3f):
            return NotImplemented
        return Vector3f(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3f) -> Vector3f:
        if not isinstance(other, Vector3f):
            return NotImplemented
        return Vector3f(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, other: Vector3f) -> Vector3f:
        if not isinstance(other, Vector3f):
            return NotImplemented
        return Vector3f(self.x * other.x, self.y * other.y, self.z * other.z)


@dataclass(frozen=True)
class Vector3fPair:
    """A pair of vectors, typically a bounding box."""

    keys: ClassVar[tuple[str, ...]] = ("min", "max")
    min: Vector3f
    max: Vector3f


@dataclass(frozen=True)
class Quaternion4s:
    """A quaternion stored as signed 16-bit fixed-point components."""

    keys: ClassVar[tuple[str, ...]] = ("x", "y", "z", "w")
    x: int
    y: int
    z: int
    w: int


@dataclass(frozen=True)
class Quaternion4f:
    """A quaternion with floating-point components."""

    keys: ClassVar[tuple[str, ...]] = ("x", "y", "z", "w")
    x: float
    y: float
    z: float
    w: float


@dataclass(frozen=True)
class RgbData:
    """An RGB colour with a flags byte."""

    keys: ClassVar[tuple[str, ...]] = ("red", "green", "blue", "rgbFlags")
    red: int
    green: int
    blue: int
    rgb_flags: int


def to_float(quaternion: Quaternion4f | Quaternion4s) -> Quaternion4f:
    """Return a floating-point quaternion, scaling fixed-point values by the short maximum."""
    if isinstance(quaternion, Quaternion4f):
        return quaternion
    if isinstance(quaternion, Quaternion4s):
        return Quaternion4f(
            quaternion.x / _SHORT_MAX,
            quaternion.y / _SHORT_MAX,
            quaternion.z / _SHORT_MAX,
            quaternion.w / _SHORT_MAX,
        )
    raise TypeError(f"cannot convert {type(quaternion).__name__} to a quaternion")