# cosmicclock/simulation/panels.py
"""
Per-frame panel updates.

Each panel turns (tick, options snapshot) into a PanelFrame: named scene
transforms plus overlay text. A ComputationError disables only the panel
that raised it; the panel keeps its last good transforms and shows
placeholder text until a later frame succeeds.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

import numpy as np

from cosmicclock.config import settings
from cosmicclock.config.options import ViewerOptions
from cosmicclock.physics.cosmology import CosmologyToyModel
from cosmicclock.physics.earth import EarthOrientationModel, SpinModel
from cosmicclock.physics.ephemeris import ComputationError, EphemerisProvider, ObserverLocation
from cosmicclock.physics.orbits import OrbitalPositionFeed
from cosmicclock.simulation.clock import ClockTick

logger = logging.getLogger(__name__)

ZERO = np.zeros(3, dtype=float)


@dataclass(frozen=True)
class Transform:
    position: np.ndarray = field(default_factory=lambda: ZERO.copy())
    rotation: np.ndarray = field(default_factory=lambda: ZERO.copy())  # Euler XYZ, radians
    scale: float = 1.0


@dataclass(frozen=True)
class PanelFrame:
    name: str
    transforms: Dict[str, Transform]
    overlay: List[str]
    error: Optional[str] = None
    data: Optional[object] = None


def format_time(d: datetime) -> str:
    return d.strftime("%Y-%m-%d %H:%M:%S")


def format_local(d: datetime) -> str:
    return format_time(d.astimezone())


class Panel(ABC):
    name = "panel"
    title = "Panel"

    def __init__(self):
        self.last_good: Optional[PanelFrame] = None
        self.last_error: Optional[str] = None

    @abstractmethod
    def compute(self, tick: ClockTick, options: ViewerOptions) -> PanelFrame:
        ...

    def update(self, tick: ClockTick, options: ViewerOptions) -> PanelFrame:
        try:
            frame = self.compute(tick, options)
        except ComputationError as e:
            # warn once per outage, not once per frame
            if self.last_error is None:
                logger.warning("%s panel unavailable: %s", self.name, e)
            else:
                logger.debug("%s panel still unavailable: %s", self.name, e)
            self.last_error = str(e)
            transforms = self.last_good.transforms if self.last_good else {}
            return PanelFrame(
                name=self.name,
                transforms=transforms,
                overlay=[
                    self.title,
                    f"Sim time: {format_time(tick.sim)}",
                    "(unavailable)",
                    f"Error: {e}",
                ],
                error=str(e),
                data=self.last_good.data if self.last_good else None,
            )
        if self.last_error is not None:
            logger.info("%s panel recovered", self.name)
            self.last_error = None
        self.last_good = frame
        return frame


class EarthPanel(Panel):
    name = "earth"
    title = "Earth"

    def __init__(
        self,
        provider: EphemerisProvider,
        weather_lines: Optional[Callable[[], List[str]]] = None,
    ):
        super().__init__()
        self.provider = provider
        self.weather_lines = weather_lines
        self._models: Dict[SpinModel, EarthOrientationModel] = {}

    def model_for(self, spin_model) -> EarthOrientationModel:
        key = SpinModel(spin_model)
        if key not in self._models:
            self._models[key] = EarthOrientationModel(self.provider, key)
        return self._models[key]

    def compute(self, tick: ClockTick, options: ViewerOptions) -> PanelFrame:
        observer = ObserverLocation(options.latitude_deg, options.longitude_deg)
        orient = self.model_for(options.spin_model).evaluate(tick, observer, options.texture_offset_deg)

        spin = np.array([0.0, orient.spin_angle, 0.0], dtype=float)
        transforms = {
            "earth": Transform(rotation=spin),
            "atmosphere": Transform(rotation=spin),
            "sun_light": Transform(position=orient.sun_direction * settings.SUN_LIGHT_DISTANCE),
            "marker": Transform(position=orient.marker_position),
        }

        label = options.location_label or "Earth"
        overlay = [
            f"Earth ({label})",
            f"Local time: {format_local(tick.wall_now)}",
            f"Sim time: {format_time(tick.sim)} UTC",
            f"Sun altitude: {orient.sun_altitude_deg:.1f}°",
            f"Sun azimuth: {orient.sun_azimuth_deg:.1f}°",
            f"{'Daylight' if orient.daylight else 'Night'} at observer",
            f"Subsolar point: {orient.subsolar_lat_deg:.1f}°, {orient.subsolar_lon_deg:.1f}°",
        ]
        if self.weather_lines is not None:
            overlay.extend(self.weather_lines())

        return PanelFrame(name=self.name, transforms=transforms, overlay=overlay, data=orient)


class SolarPanel(Panel):
    name = "solar"
    title = "Solar System (inner)"

    def __init__(self, feed: OrbitalPositionFeed):
        super().__init__()
        self.feed = feed

    def compute(self, tick: ClockTick, options: ViewerOptions) -> PanelFrame:
        state = self.feed.update(tick)
        transforms = {"sun": Transform()}
        for body, pos in state.positions.items():
            transforms[body.value.lower()] = Transform(position=pos)
        transforms["moon"] = Transform(position=state.moon_position)

        overlay = [
            self.title,
            f"Sim time: {format_time(tick.sim)} UTC",
            f"Earth–Sun distance: {state.earth_sun_distance_au:.3f} AU",
            f"Orbit angle (approx): {state.orbit_angle_deg:.1f}°",
            f"Moon offset: ×{self.feed.moon_exaggeration:g} (not to scale)",
        ]
        return PanelFrame(name=self.name, transforms=transforms, overlay=overlay, data=state)


class CosmologyPanel(Panel):
    def __init__(self, model: CosmologyToyModel):
        super().__init__()
        self.model = model
        self.name = model.name
        self.title = model.title

    def compute(self, tick: ClockTick, options: ViewerOptions) -> PanelFrame:
        state = self.model.evaluate(tick, options)
        overlay = [self.title, f"Sim time: {format_time(tick.sim)} UTC"]
        transforms: Dict[str, Transform] = {}

        if state.sun_position is not None:
            transforms["sun"] = Transform(position=state.sun_position)
            overlay += [
                f"Model: Sun at ~{settings.GALACTIC_RADIUS_KPC:g} kpc; "
                f"orbit ~{settings.GALACTIC_PERIOD_YEARS / 1e6:.0f} Myr",
                f"Time exaggeration: ×{options.galaxy_exaggeration:,.0f}",
            ]
        else:
            # universe: a shell whose radius is the scale factor
            transforms["universe"] = Transform(scale=state.scale_factor)

        overlay += [
            f"Cosmic age: {state.age_gyr:.2f} Gyr",
            f"Scale factor a: {state.scale_factor:.3f}",
            f"Redshift z: {state.redshift:.2f}",
            f"Epoch: {state.epoch_label}",
            "Illustrative model, not physically precise",
        ]
        return PanelFrame(name=self.name, transforms=transforms, overlay=overlay, data=state)
