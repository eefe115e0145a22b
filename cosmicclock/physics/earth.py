# cosmicclock/physics/earth.py
"""
Earth orientation and Sun lighting for the Earth panel.

Two spin models are available and must be chosen explicitly:

  sidereal (default)
      Inertial scene. The Sun direction is the geocentric equatorial Sun
      vector; the globe spins by -GST + texture offset.

  subsolar
      Sun-fixed scene. The Sun is pinned to the scene X/Y plane at its
      declination and the globe spins so the subsolar meridian faces it.

Both put the same meridian under the Sun; they differ in which frame is
held still. Scene "up" is Earth's pole, so seasons follow from the Sun's
declination and no extra axial-tilt rotation is applied.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from cosmicclock.config.settings import MARKER_RADIUS_SCENE
from cosmicclock.physics.ephemeris import Body, EphemerisProvider, ObserverLocation
from cosmicclock.physics.frames import latlon_to_body, rotate_about_up, to_scene, unit
from cosmicclock.simulation.clock import ClockTick


class SpinModel(str, Enum):
    SIDEREAL = "sidereal"
    SUBSOLAR = "subsolar"


@dataclass(frozen=True)
class EarthOrientation:
    sun_direction: np.ndarray  # scene, unit length, Earth -> Sun
    spin_angle: float          # radians about scene +Y
    sidereal_hours: float
    subsolar_lon_deg: float
    subsolar_lat_deg: float
    sun_altitude_deg: float
    sun_azimuth_deg: float
    marker_position: np.ndarray  # observer marker in scene coordinates

    @property
    def daylight(self) -> bool:
        return is_daylight(self.sun_altitude_deg)


def is_daylight(altitude_deg: float) -> bool:
    # altitude exactly 0 counts as night
    return altitude_deg > 0.0


def sidereal_angle(sidereal_hours: float) -> float:
    return sidereal_hours * 15.0 * math.pi / 180.0


def subsolar_longitude(gst_hours: float, sun_ra_hours: float) -> float:
    """East-positive longitude (deg, in (-180, 180]) where the Sun is overhead."""
    return -((((gst_hours - sun_ra_hours) * 15.0 + 540.0) % 360.0) - 180.0)


class EarthOrientationModel:
    def __init__(self, provider: EphemerisProvider, spin_model: SpinModel = SpinModel.SIDEREAL):
        self.provider = provider
        self.spin_model = SpinModel(spin_model)

    def evaluate(
        self,
        tick: ClockTick,
        observer: ObserverLocation,
        texture_offset_deg: float = 0.0,
    ) -> EarthOrientation:
        when = tick.sim
        offset = math.radians(texture_offset_deg)

        gst = self.provider.sidereal_time(when)
        sun_eq = self.provider.geo_vector(Body.SUN, when)
        sun_ra, sun_dec = self.provider.equator(Body.SUN, when)
        lon_ss = subsolar_longitude(gst, sun_ra)

        if self.spin_model == SpinModel.SIDEREAL:
            sun_dir = unit(to_scene(sun_eq))
            spin = -sidereal_angle(gst) + offset
        else:
            dec = math.radians(sun_dec)
            sun_dir = np.array([math.cos(dec), math.sin(dec), 0.0], dtype=float)
            spin = math.radians(lon_ss) + offset

        hor = self.provider.horizon(observer, Body.SUN, when)
        # the texture offset only re-aligns the image; the marker follows true longitude
        marker = rotate_about_up(
            latlon_to_body(observer.latitude_deg, observer.longitude_deg, MARKER_RADIUS_SCENE),
            spin - offset,
        )

        return EarthOrientation(
            sun_direction=sun_dir,
            spin_angle=spin,
            sidereal_hours=gst,
            subsolar_lon_deg=lon_ss,
            subsolar_lat_deg=sun_dec,
            sun_altitude_deg=hor.altitude_deg,
            sun_azimuth_deg=hor.azimuth_deg,
            marker_position=marker,
        )
