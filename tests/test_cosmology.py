from __future__ import annotations

import math

import numpy as np
import pytest

from cosmicclock.config import settings
from cosmicclock.config.options import build_options
from cosmicclock.physics.cosmology import (
    GalacticOrbitModel,
    ScaleFactorModel,
    epoch_label,
    redshift,
    scale_factor,
    state_for_age,
)
from cosmicclock.simulation.clock import ClockTick, ms_from_datetime

J2000_MS = ms_from_datetime(settings.J2000)


def _tick(sim_ms: float) -> ClockTick:
    return ClockTick(wall_now_ms=sim_ms, sim_ms=sim_ms, dt_real=0.0)


def test_present_day_values() -> None:
    state = state_for_age(13.8)
    assert state.scale_factor == pytest.approx(0.6316, abs=1e-3)
    assert state.redshift == pytest.approx(1.0 / state.scale_factor - 1.0)
    assert state.epoch_label == "dark energy era"


def test_scale_factor_bounds_and_clamping() -> None:
    assert scale_factor(30.0) == pytest.approx(1.0)
    assert scale_factor(500.0) == pytest.approx(1.0)
    assert scale_factor(-3.0) == scale_factor(0.0)
    assert scale_factor(0.0) >= settings.SCALE_FACTOR_FLOOR


def test_scale_factor_increases_with_age() -> None:
    a = [scale_factor(t) for t in np.linspace(0.0, 30.0, 61)]
    assert all(later > earlier for earlier, later in zip(a, a[1:]))


def test_redshift() -> None:
    assert redshift(1.0) == 0.0
    assert redshift(0.5) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "age, label",
    [
        (0.1, "recombination/dark ages"),
        (1.0, "first galaxies"),
        (3.0, "peak star formation"),
        (7.0, "maturing cosmic web"),
        (15.0, "dark energy era"),
        (25.0, "far future"),
        (10.0, "dark energy era"),
    ],
)
def test_epoch_bands(age, label) -> None:
    assert epoch_label(age) == label


def test_universe_model_follows_the_age_option() -> None:
    state = ScaleFactorModel().evaluate(_tick(J2000_MS), build_options(cosmic_age_gyr=5.0))
    assert state.age_gyr == 5.0
    assert state.sun_position is None
    assert state.epoch_label == "maturing cosmic web"


def test_galaxy_at_j2000_starts_on_the_x_axis() -> None:
    state = GalacticOrbitModel().evaluate(_tick(J2000_MS), build_options())
    assert state.orbit_angle_rad == 0.0
    np.testing.assert_allclose(state.sun_position, [settings.GALACTIC_RADIUS_DRAW, 0.0, 0.0])
    assert state.age_gyr == pytest.approx(settings.PRESENT_AGE_GYR)


def test_galaxy_quarter_orbit_with_exaggeration() -> None:
    exaggeration = 1_000_000.0
    years = settings.GALACTIC_PERIOD_YEARS / 4.0 / exaggeration
    sim_ms = J2000_MS + years * settings.MS_PER_YEAR
    state = GalacticOrbitModel().evaluate(_tick(sim_ms), build_options(galaxy_exaggeration=exaggeration))

    assert state.orbit_angle_rad == pytest.approx(math.pi / 2.0)
    np.testing.assert_allclose(state.sun_position, [0.0, 0.0, settings.GALACTIC_RADIUS_DRAW], atol=1e-9)
    assert state.age_gyr == pytest.approx(13.8 + 57.5e6 / 1e9)
