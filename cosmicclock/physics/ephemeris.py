# cosmicclock/physics/ephemeris.py
"""
Ephemeris providers.

AnalyticEphemeris is a low-precision model that is good for drawing, not for
pointing a telescope:
  - planets from JPL's approximate Keplerian elements (Standish, table 1,
    valid 1800-2050, arcminute-level for the inner planets),
  - the Moon from the Astronomical Almanac low-precision series (~0.3 deg),
  - Greenwich mean sidereal time from the Meeus linear formula.

Heliocentric vectors, and the ecliptic geocentric vectors that feed the
scene, are referred to the J2000 ecliptic. Geocentric equatorial vectors
(and so RA/Dec and alt/az) are referred to the mean equator and equinox of
date, the same equinox GMST is measured from: ecliptic longitudes are
precessed by a linear rate and rotated by the mean obliquity of date.
Nutation, aberration and refraction are ignored.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Protocol, Tuple

import numpy as np

from cosmicclock.config.settings import JD_J2000, JD_UNIX_EPOCH, OBLIQUITY_J2000_DEG
from cosmicclock.physics.frames import (
    CelestialVector,
    Frame,
    ecliptic_to_equatorial,
    radec_from_equatorial,
)

AU_KM = 149_597_870.7
EARTH_RADIUS_KM = 6378.14

# general precession in ecliptic longitude, degrees per Julian century
PRECESSION_DEG_PER_CENTURY = 1.396971

VALID_START = datetime(1800, 1, 1, tzinfo=timezone.utc)
VALID_END = datetime(2051, 1, 1, tzinfo=timezone.utc)


class ComputationError(RuntimeError):
    """Raised when a provider cannot produce a value for the requested body/time."""


class Body(str, Enum):
    SUN = "Sun"
    MERCURY = "Mercury"
    VENUS = "Venus"
    EARTH = "Earth"
    MOON = "Moon"
    MARS = "Mars"
    JUPITER = "Jupiter"


@dataclass(frozen=True)
class ObserverLocation:
    latitude_deg: float
    longitude_deg: float
    elevation_m: float = 0.0


@dataclass(frozen=True)
class HorizonCoords:
    altitude_deg: float
    azimuth_deg: float


class EphemerisProvider(Protocol):
    def helio_vector(self, body: Body, when: datetime) -> CelestialVector:
        ...

    def geo_vector(self, body: Body, when: datetime, ecliptic: bool = False) -> CelestialVector:
        ...

    def equator(self, body: Body, when: datetime) -> Tuple[float, float]:
        ...

    def sidereal_time(self, when: datetime) -> float:
        ...

    def horizon(self, observer: ObserverLocation, body: Body, when: datetime) -> HorizonCoords:
        ...


def as_utc(when: datetime) -> datetime:
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


def julian_date(when: datetime) -> float:
    return as_utc(when).timestamp() / 86400.0 + JD_UNIX_EPOCH


def julian_centuries(when: datetime) -> float:
    return (julian_date(when) - JD_J2000) / 36525.0


def gmst_hours(when: datetime) -> float:
    d = julian_date(when) - JD_J2000
    return (18.697374558 + 24.06570982441908 * d) % 24.0


def mean_obliquity_deg(T: float) -> float:
    return OBLIQUITY_J2000_DEG - 0.0130042 * T


def precess_ecliptic(arr: np.ndarray, T: float) -> np.ndarray:
    """Rotate an ecliptic vector from the J2000 equinox to the equinox of date (T centuries)."""
    p = math.radians(PRECESSION_DEG_PER_CENTURY * T)
    c, s = math.cos(p), math.sin(p)
    x, y, z = arr
    return np.array([c * x - s * y, s * x + c * y, z], dtype=float)


def equatorial_to_horizon(
    ra_hours: float,
    dec_deg: float,
    observer: ObserverLocation,
    sidereal_hours: float,
) -> HorizonCoords:
    """
    RA/Dec to altitude/azimuth. Azimuth is measured from north through east.
    """
    ha = math.radians((sidereal_hours - ra_hours) * 15.0 + observer.longitude_deg)
    dec = math.radians(dec_deg)
    lat = math.radians(observer.latitude_deg)

    sin_alt = math.sin(dec) * math.sin(lat) + math.cos(dec) * math.cos(lat) * math.cos(ha)
    alt = math.degrees(math.asin(max(-1.0, min(1.0, sin_alt))))

    y = -math.cos(dec) * math.sin(ha)
    x = math.sin(dec) * math.cos(lat) - math.cos(dec) * math.cos(ha) * math.sin(lat)
    az = math.degrees(math.atan2(y, x)) % 360.0
    return HorizonCoords(altitude_deg=alt, azimuth_deg=az)


@dataclass(frozen=True)
class KeplerElements:
    # value at J2000 and rate per Julian century
    a: Tuple[float, float]
    e: Tuple[float, float]
    incl: Tuple[float, float]
    mean_lon: Tuple[float, float]
    peri_lon: Tuple[float, float]
    node_lon: Tuple[float, float]


ELEMENTS: Dict[Body, KeplerElements] = {
    Body.MERCURY: KeplerElements(
        (0.38709927, 0.00000037), (0.20563593, 0.00001906), (7.00497902, -0.00594749),
        (252.25032350, 149472.67411175), (77.45779628, 0.16047689), (48.33076593, -0.12534081),
    ),
    Body.VENUS: KeplerElements(
        (0.72333566, 0.00000390), (0.00677672, -0.00004107), (3.39467605, -0.00078890),
        (181.97909950, 58517.81538729), (131.60246718, 0.00268329), (76.67984255, -0.27769418),
    ),
    # Earth-Moon barycenter stands in for Earth
    Body.EARTH: KeplerElements(
        (1.00000261, 0.00000562), (0.01671123, -0.00004392), (-0.00001531, -0.01294668),
        (100.46457166, 35999.37244981), (102.93768193, 0.32327364), (0.0, 0.0),
    ),
    Body.MARS: KeplerElements(
        (1.52371034, 0.00001847), (0.09339410, 0.00007882), (1.84969142, -0.00813131),
        (-4.55343205, 19140.30268499), (-23.94362959, 0.44441088), (49.55953891, -0.29257343),
    ),
    Body.JUPITER: KeplerElements(
        (5.20288700, -0.00011607), (0.04838624, -0.00013253), (1.30439695, -0.00183714),
        (34.39644051, 3034.74612775), (14.72847983, 0.21252668), (100.47390909, 0.20469106),
    ),
}


def solve_kepler(mean_anomaly: float, e: float, tol: float = 1e-10, max_iter: int = 50) -> float:
    """Eccentric anomaly (rad) for mean anomaly M (rad), Newton iteration."""
    E = mean_anomaly + e * math.sin(mean_anomaly)
    for _ in range(max_iter):
        dE = (E - e * math.sin(E) - mean_anomaly) / (1.0 - e * math.cos(E))
        E -= dE
        if abs(dE) < tol:
            break
    return E


def heliocentric_ecliptic(elements: KeplerElements, T: float) -> np.ndarray:
    a = elements.a[0] + elements.a[1] * T
    e = elements.e[0] + elements.e[1] * T
    incl = math.radians(elements.incl[0] + elements.incl[1] * T)
    L = elements.mean_lon[0] + elements.mean_lon[1] * T
    peri = elements.peri_lon[0] + elements.peri_lon[1] * T
    node = elements.node_lon[0] + elements.node_lon[1] * T

    w = math.radians(peri - node)
    M = math.radians(((L - peri + 180.0) % 360.0) - 180.0)
    Om = math.radians(node)
    E = solve_kepler(M, e)

    x_orb = a * (math.cos(E) - e)
    y_orb = a * math.sqrt(1.0 - e * e) * math.sin(E)

    cos_w, sin_w = math.cos(w), math.sin(w)
    cos_Om, sin_Om = math.cos(Om), math.sin(Om)
    cos_i, sin_i = math.cos(incl), math.sin(incl)

    x = (cos_Om * cos_w - sin_Om * sin_w * cos_i) * x_orb + (-cos_Om * sin_w - sin_Om * cos_w * cos_i) * y_orb
    y = (sin_Om * cos_w + cos_Om * sin_w * cos_i) * x_orb + (-sin_Om * sin_w + cos_Om * cos_w * cos_i) * y_orb
    z = (sin_w * sin_i) * x_orb + (cos_w * sin_i) * y_orb
    return np.array([x, y, z], dtype=float)


def _sind(deg: float) -> float:
    return math.sin(math.radians(deg))


def _cosd(deg: float) -> float:
    return math.cos(math.radians(deg))


def moon_geocentric_ecliptic(T: float) -> np.ndarray:
    """Low-precision geocentric Moon (AU, ecliptic and equinox of date)."""
    lon = (
        218.32 + 481267.881 * T
        + 6.29 * _sind(135.0 + 477198.87 * T)
        - 1.27 * _sind(259.3 - 413335.36 * T)
        + 0.66 * _sind(235.7 + 890534.22 * T)
        + 0.21 * _sind(269.9 + 954397.74 * T)
        - 0.19 * _sind(357.5 + 35999.05 * T)
        - 0.11 * _sind(186.5 + 966404.03 * T)
    )
    lat = (
        5.13 * _sind(93.3 + 483202.02 * T)
        + 0.28 * _sind(228.2 + 960400.89 * T)
        - 0.28 * _sind(318.3 + 6003.15 * T)
        - 0.17 * _sind(217.6 - 407332.21 * T)
    )
    parallax = (
        0.9508
        + 0.0518 * _cosd(135.0 + 477198.87 * T)
        + 0.0095 * _cosd(259.3 - 413335.36 * T)
        + 0.0078 * _cosd(235.7 + 890534.22 * T)
        + 0.0028 * _cosd(269.9 + 954397.74 * T)
    )
    r_au = EARTH_RADIUS_KM / _sind(parallax) / AU_KM
    return r_au * np.array(
        [_cosd(lat) * _cosd(lon), _cosd(lat) * _sind(lon), _sind(lat)],
        dtype=float,
    )


class AnalyticEphemeris:
    """
    Deterministic, offline EphemerisProvider.
    Raises ComputationError outside the validity window of the element set.
    """

    def __init__(self, valid_start: datetime = VALID_START, valid_end: datetime = VALID_END):
        self.valid_start = as_utc(valid_start)
        self.valid_end = as_utc(valid_end)

    def _centuries(self, when: datetime) -> float:
        when = as_utc(when)
        if not (self.valid_start <= when < self.valid_end):
            raise ComputationError(
                f"{when.isoformat()} is outside the supported range "
                f"{self.valid_start.date()} .. {self.valid_end.date()}"
            )
        return julian_centuries(when)

    def _helio_array(self, body: Body, T: float) -> np.ndarray:
        if body == Body.SUN:
            return np.zeros(3, dtype=float)
        if body == Body.MOON:
            return heliocentric_ecliptic(ELEMENTS[Body.EARTH], T) + moon_geocentric_ecliptic(T)
        try:
            elements = ELEMENTS[body]
        except KeyError:
            raise ComputationError(f"No elements for body {body!r}") from None
        return heliocentric_ecliptic(elements, T)

    def helio_vector(self, body: Body, when: datetime) -> CelestialVector:
        T = self._centuries(when)
        return CelestialVector.from_array(self._helio_array(Body(body), T), Frame.HELIO_ECLIPTIC)

    def geo_vector(self, body: Body, when: datetime, ecliptic: bool = False) -> CelestialVector:
        body = Body(body)
        if body == Body.EARTH:
            raise ComputationError("Geocentric vector of Earth is undefined")
        T = self._centuries(when)
        # the lunar series is of date; the element sets are J2000
        if body == Body.MOON:
            of_date = moon_geocentric_ecliptic(T)
            j2000 = precess_ecliptic(of_date, -T)
        else:
            j2000 = self._helio_array(body, T) - self._helio_array(Body.EARTH, T)
            of_date = precess_ecliptic(j2000, T)
        if ecliptic:
            return CelestialVector.from_array(j2000, Frame.GEO_ECLIPTIC)
        v = CelestialVector.from_array(of_date, Frame.GEO_ECLIPTIC)
        return ecliptic_to_equatorial(v, mean_obliquity_deg(T))

    def equator(self, body: Body, when: datetime) -> Tuple[float, float]:
        return radec_from_equatorial(self.geo_vector(body, when))

    def sidereal_time(self, when: datetime) -> float:
        self._centuries(when)
        return gmst_hours(when)

    def horizon(self, observer: ObserverLocation, body: Body, when: datetime) -> HorizonCoords:
        ra, dec = self.equator(body, when)
        return equatorial_to_horizon(ra, dec, observer, self.sidereal_time(when))
