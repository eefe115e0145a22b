# cosmicclock/physics/cosmology.py
"""
Illustrative cosmology for the galaxy/universe panels.

Nothing here is physically precise. The scale factor blends a
matter-dominated t^(2/3) curve with a lambda-like exponential so that the
panel shows deceleration giving way to acceleration; it is a picture, not
a Friedmann solution.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from cosmicclock.config import settings
from cosmicclock.simulation.clock import ClockTick, ms_from_datetime


@dataclass(frozen=True)
class CosmologyState:
    age_gyr: float
    scale_factor: float
    redshift: float
    epoch_label: str
    orbit_angle_rad: Optional[float] = None
    sun_position: Optional[np.ndarray] = None


def scale_factor(age_gyr: float) -> float:
    t = min(max(age_gyr / settings.COSMIC_AGE_MAX_GYR, 0.0), 1.0)
    matter = t ** (2.0 / 3.0)
    dark_energy = math.exp((t - 1.0) * settings.LAMBDA_RATE)
    a = settings.MATTER_WEIGHT * matter + settings.LAMBDA_WEIGHT * dark_energy
    return min(max(a, settings.SCALE_FACTOR_FLOOR), 1.0)


def redshift(a: float) -> float:
    return 1.0 / a - 1.0


def epoch_label(age_gyr: float) -> str:
    for threshold, label in settings.EPOCH_BANDS:
        if age_gyr < threshold:
            return label
    return settings.EPOCH_BEYOND


def state_for_age(age_gyr: float, **extra) -> CosmologyState:
    a = scale_factor(age_gyr)
    return CosmologyState(
        age_gyr=float(age_gyr),
        scale_factor=a,
        redshift=redshift(a),
        epoch_label=epoch_label(age_gyr),
        **extra,
    )


class CosmologyToyModel(ABC):
    name: str = "cosmology"
    title: str = "Cosmology (toy)"

    @abstractmethod
    def evaluate(self, tick: ClockTick, options) -> CosmologyState:
        ...


class ScaleFactorModel(CosmologyToyModel):
    """Universe panel: driven by the user-chosen cosmic age."""

    name = "universe"
    title = "Universe (toy model)"

    def evaluate(self, tick: ClockTick, options) -> CosmologyState:
        return state_for_age(options.cosmic_age_gyr)


class GalacticOrbitModel(CosmologyToyModel):
    """
    Galaxy panel: simulated time since J2000, multiplied by an exaggeration
    factor, moves the Sun around a ~230 Myr galactic orbit drawn at radius
    GALACTIC_RADIUS_DRAW. The same elapsed time is added to the present
    cosmic age.
    """

    name = "galaxy"
    title = "Milky Way (stylized)"

    def __init__(
        self,
        period_years: float = settings.GALACTIC_PERIOD_YEARS,
        radius_draw: float = settings.GALACTIC_RADIUS_DRAW,
    ):
        self.period_ms = float(period_years) * settings.MS_PER_YEAR
        self.radius_draw = float(radius_draw)

    def effective_ms(self, tick: ClockTick, exaggeration: float) -> float:
        return (tick.sim_ms - ms_from_datetime(settings.J2000)) * float(exaggeration)

    def evaluate(self, tick: ClockTick, options) -> CosmologyState:
        effective = self.effective_ms(tick, options.galaxy_exaggeration)
        angle = (effective / self.period_ms) * 2.0 * math.pi
        sun = np.array(
            [self.radius_draw * math.cos(angle), 0.0, self.radius_draw * math.sin(angle)],
            dtype=float,
        )
        age = settings.PRESENT_AGE_GYR + effective / settings.MS_PER_YEAR / 1e9
        return state_for_age(age, orbit_angle_rad=angle, sun_position=sun)
