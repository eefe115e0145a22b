# cosmicclock/physics/orbits.py
"""
Heliocentric positions for the solar-system panel.

Positions are mapped at 1 scene unit = 1 AU. Semi-major axes are only
used to draw reference rings. The Moon's geocentric offset is scaled by
MOON_EXAGGERATION so it separates from Earth at AU scale.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from cosmicclock.config.settings import AU_SCENE, MOON_EXAGGERATION, TRAIL_CAPACITY
from cosmicclock.physics.ephemeris import Body, EphemerisProvider
from cosmicclock.physics.frames import to_scene
from cosmicclock.physics.trail import Trail
from cosmicclock.simulation.clock import ClockTick


@dataclass(frozen=True)
class TrackedBody:
    body: Body
    display_radius: float
    semi_major_axis_au: float
    color: str


TRACKED_BODIES: Tuple[TrackedBody, ...] = (
    TrackedBody(Body.MERCURY, 0.025, 0.387, "#b1a79b"),
    TrackedBody(Body.VENUS, 0.04, 0.723, "#e8c77a"),
    TrackedBody(Body.EARTH, 0.05, 1.000, "#5aa9ff"),
    TrackedBody(Body.MARS, 0.035, 1.524, "#d6613c"),
    TrackedBody(Body.JUPITER, 0.09, 5.203, "#d9b38c"),
)


@dataclass(frozen=True)
class SolarSystemState:
    positions: Dict[Body, np.ndarray]
    moon_position: np.ndarray
    moon_offset: np.ndarray  # unexaggerated, scene frame
    earth_sun_distance_au: float
    orbit_angle_deg: float


def orbit_angle_deg(position) -> float:
    """Angle of a scene position in the ecliptic (X/Z) plane, degrees."""
    return math.degrees(math.atan2(float(position[2]), float(position[0])))


class OrbitalPositionFeed:
    def __init__(
        self,
        provider: EphemerisProvider,
        bodies: Iterable[TrackedBody] = TRACKED_BODIES,
        trail_capacity: int = TRAIL_CAPACITY,
        moon_exaggeration: float = MOON_EXAGGERATION,
    ):
        self.provider = provider
        self.bodies = tuple(bodies)
        if not any(b.body == Body.EARTH for b in self.bodies):
            raise ValueError("Earth must be tracked; the Moon is placed relative to it")
        self.moon_exaggeration = float(moon_exaggeration)
        self.trails: Dict[Body, Trail] = {b.body: Trail(trail_capacity) for b in self.bodies}
        self.trails[Body.MOON] = Trail(trail_capacity)
        self.last: Optional[SolarSystemState] = None

    def update(self, tick: ClockTick) -> SolarSystemState:
        when = tick.sim

        positions: Dict[Body, np.ndarray] = {}
        for tracked in self.bodies:
            hv = self.provider.helio_vector(tracked.body, when)
            positions[tracked.body] = to_scene(hv, AU_SCENE)

        moon_offset = to_scene(self.provider.geo_vector(Body.MOON, when, ecliptic=True), AU_SCENE)
        earth = positions[Body.EARTH]
        moon = earth + self.moon_exaggeration * moon_offset

        # all lookups succeeded; only now touch the trails
        for body, pos in positions.items():
            self.trails[body].push(pos)
        self.trails[Body.MOON].push(moon)

        state = SolarSystemState(
            positions=positions,
            moon_position=moon,
            moon_offset=moon_offset,
            earth_sun_distance_au=float(np.linalg.norm(earth)),
            orbit_angle_deg=orbit_angle_deg(earth),
        )
        self.last = state
        return state

    def clear_trails(self) -> None:
        for trail in self.trails.values():
            trail.clear()
