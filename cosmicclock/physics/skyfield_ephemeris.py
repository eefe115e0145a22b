# cosmicclock/physics/skyfield_ephemeris.py
"""
EphemerisProvider backed by a JPL DE kernel through skyfield.
Install with the `skyfield` extra. The kernel is loaded (and downloaded on
first use) by skyfield's own loader.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Tuple

from skyfield.api import load, wgs84
from skyfield.errors import EphemerisRangeError
from skyfield.framelib import ecliptic_J2000_frame, true_equator_and_equinox_of_date

from cosmicclock.physics.ephemeris import (
    Body,
    ComputationError,
    HorizonCoords,
    ObserverLocation,
    as_utc,
)
from cosmicclock.physics.frames import CelestialVector, Frame, radec_from_equatorial

logger = logging.getLogger(__name__)

DEFAULT_KERNEL = "de421.bsp"

KERNEL_NAMES = {
    Body.SUN: "sun",
    Body.MERCURY: "mercury",
    Body.VENUS: "venus",
    Body.EARTH: "earth",
    Body.MOON: "moon",
    Body.MARS: "mars",
    Body.JUPITER: "jupiter barycenter",
}


class SkyfieldEphemeris:
    def __init__(self, kernel: str = DEFAULT_KERNEL, loader=None):
        loader = loader or load
        self.ts = loader.timescale()
        self.kernel = loader(kernel)
        logger.info("Loaded ephemeris kernel %s", kernel)

    def _time(self, when: datetime):
        return self.ts.from_datetime(as_utc(when))

    def _target(self, body: Body):
        return self.kernel[KERNEL_NAMES[Body(body)]]

    def helio_vector(self, body: Body, when: datetime) -> CelestialVector:
        t = self._time(when)
        try:
            pos = (self._target(body) - self.kernel["sun"]).at(t)
        except EphemerisRangeError as e:
            raise ComputationError(str(e)) from e
        return CelestialVector.from_array(pos.frame_xyz(ecliptic_J2000_frame).au, Frame.HELIO_ECLIPTIC)

    def geo_vector(self, body: Body, when: datetime, ecliptic: bool = False) -> CelestialVector:
        if Body(body) == Body.EARTH:
            raise ComputationError("Geocentric vector of Earth is undefined")
        t = self._time(when)
        try:
            pos = (self._target(body) - self.kernel["earth"]).at(t)
        except EphemerisRangeError as e:
            raise ComputationError(str(e)) from e
        if ecliptic:
            return CelestialVector.from_array(pos.frame_xyz(ecliptic_J2000_frame).au, Frame.GEO_ECLIPTIC)
        # equator of date, to match gmst
        return CelestialVector.from_array(pos.frame_xyz(true_equator_and_equinox_of_date).au, Frame.GEO_EQUATORIAL)

    def equator(self, body: Body, when: datetime) -> Tuple[float, float]:
        return radec_from_equatorial(self.geo_vector(body, when))

    def sidereal_time(self, when: datetime) -> float:
        return float(self._time(when).gmst)

    def horizon(self, observer: ObserverLocation, body: Body, when: datetime) -> HorizonCoords:
        t = self._time(when)
        site = self.kernel["earth"] + wgs84.latlon(
            observer.latitude_deg, observer.longitude_deg, elevation_m=observer.elevation_m
        )
        try:
            alt, az, _ = site.at(t).observe(self._target(body)).apparent().altaz()
        except EphemerisRangeError as e:
            raise ComputationError(str(e)) from e
        return HorizonCoords(altitude_deg=float(alt.degrees), azimuth_deg=float(az.degrees))
