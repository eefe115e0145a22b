# cosmicclock/physics/frames.py
"""
Frame bookkeeping and the single crossing point into scene coordinates.

Source frames (ephemeris side) are right-handed: axis 0 points at the
vernal equinox, axis 2 at the north pole (equatorial) or ecliptic pole
(ecliptic). The scene uses Y as "up".

to_scene applies the fixed permutation

    scene.x = src.x      (axis 0 -> X)
    scene.y = src.z      (axis 2 -> Y, "up")
    scene.z = src.y      (axis 1 -> Z, "depth")

The permutation has determinant -1, so the scene is a mirror image of the
source frame. Angles and distances are unchanged as long as every vector
goes through to_scene. Earth spin is measured about scene +Y with the
usual right-hand rotation, which is why the sidereal spin is negated.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from cosmicclock.config.settings import OBLIQUITY_J2000_DEG


class Frame(str, Enum):
    GEO_EQUATORIAL = "geo-equatorial"
    GEO_ECLIPTIC = "geo-ecliptic"
    HELIO_ECLIPTIC = "helio-ecliptic"
    SCENE = "scene"


# rows pick the source component for each scene axis
SCENE_PERMUTATION = np.array(
    [
        [1.0, 0.0, 0.0],
        [0.0, 0.0, 1.0],
        [0.0, 1.0, 0.0],
    ],
    dtype=float,
)


@dataclass(frozen=True)
class CelestialVector:
    x: float
    y: float
    z: float
    frame: Frame
    unit: str = "au"

    @classmethod
    def from_array(cls, arr, frame: Frame, unit: str = "au") -> "CelestialVector":
        a = np.asarray(arr, dtype=float)
        if a.shape != (3,):
            raise ValueError(f"Cannot build a 3D vector from shape {a.shape}")
        return cls(float(a[0]), float(a[1]), float(a[2]), frame, unit)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def length(self) -> float:
        return float(np.linalg.norm(self.as_array()))


def to_scene(v: CelestialVector, scale: float = 1.0) -> np.ndarray:
    """
    Map a source-frame vector into scene coordinates.
    Returns a fresh numpy array; the input vector is never touched.
    """
    if v.frame == Frame.SCENE:
        raise ValueError("Vector is already in the scene frame")
    return SCENE_PERMUTATION @ v.as_array() * float(scale)


def unit(v) -> np.ndarray:
    out = np.array(v, dtype=float)
    n = np.linalg.norm(out)
    if n > 0:
        out = out / n
    return out


def angle_between(a, b) -> float:
    """Angle between two vectors in radians (nan if either is zero-length)."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    na = np.linalg.norm(a)
    nb = np.linalg.norm(b)
    if na == 0 or nb == 0:
        return float("nan")
    c = np.clip(np.dot(a, b) / (na * nb), -1.0, 1.0)
    return float(np.arccos(c))


def rotation_about_up(angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    return np.array(
        [
            [c, 0.0, s],
            [0.0, 1.0, 0.0],
            [-s, 0.0, c],
        ],
        dtype=float,
    )


def rotate_about_up(v, angle_rad: float) -> np.ndarray:
    return rotation_about_up(angle_rad) @ np.asarray(v, dtype=float)


def latlon_to_body(lat_deg: float, lon_deg: float, radius: float = 1.0) -> np.ndarray:
    """
    Body-fixed scene position of a surface point before spin is applied.
    East-positive longitude sweeps from +X towards +Z.
    """
    lat = math.radians(lat_deg)
    lon = math.radians(lon_deg)
    return np.array(
        [
            radius * math.cos(lat) * math.cos(lon),
            radius * math.sin(lat),
            radius * math.cos(lat) * math.sin(lon),
        ],
        dtype=float,
    )


def ecliptic_to_equatorial(v: CelestialVector, obliquity_deg: float = OBLIQUITY_J2000_DEG) -> CelestialVector:
    eps = math.radians(obliquity_deg)
    c, s = math.cos(eps), math.sin(eps)
    if v.frame == Frame.GEO_ECLIPTIC:
        target = Frame.GEO_EQUATORIAL
    else:
        raise ValueError(f"No equatorial counterpart for frame {v.frame.value}")
    return CelestialVector(
        v.x,
        c * v.y - s * v.z,
        s * v.y + c * v.z,
        target,
        v.unit,
    )


def radec_from_equatorial(v: CelestialVector) -> tuple[float, float]:
    """(right ascension in hours [0, 24), declination in degrees)."""
    r = v.length()
    if r == 0:
        raise ValueError("Zero-length vector has no direction")
    dec = math.degrees(math.asin(max(-1.0, min(1.0, v.z / r))))
    ra_deg = math.degrees(math.atan2(v.y, v.x)) % 360.0
    return ra_deg / 15.0, dec
