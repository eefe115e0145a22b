from __future__ import annotations

import os
from concurrent.futures import Executor, Future
from datetime import datetime, timezone

import pytest

from cosmicclock.physics.ephemeris import Body, ComputationError, HorizonCoords
from cosmicclock.physics.frames import CelestialVector, Frame
from cosmicclock.simulation.clock import ClockTick, ms_from_datetime

# no display in test runs
os.environ.setdefault("MPLBACKEND", "Agg")


class FakeWall:
    """Settable wall clock in milliseconds."""

    def __init__(self, now_ms: float = 0.0):
        self.now_ms = float(now_ms)

    def __call__(self) -> float:
        return self.now_ms


class StubProvider:
    """Fixed heliocentric positions; the Moon offset is a constant geocentric vector."""

    HELIO = {
        Body.SUN: (0.0, 0.0, 0.0),
        Body.MERCURY: (0.3, 0.1, 0.02),
        Body.VENUS: (-0.7, 0.1, 0.0),
        Body.EARTH: (0.6, 0.8, 0.0),
        Body.MARS: (0.0, -1.5, 0.03),
        Body.JUPITER: (5.0, 1.0, -0.1),
    }
    MOON_GEO = (0.001, 0.002, 0.0005)

    def __init__(self):
        self.fail = False

    def _check(self):
        if self.fail:
            raise ComputationError("stub provider failure")

    def helio_vector(self, body, when):
        self._check()
        return CelestialVector(*self.HELIO[Body(body)], Frame.HELIO_ECLIPTIC)

    def geo_vector(self, body, when, ecliptic=False):
        self._check()
        if Body(body) != Body.MOON:
            raise ComputationError("stub only knows the Moon")
        return CelestialVector(*self.MOON_GEO, Frame.GEO_ECLIPTIC)

    def equator(self, body, when):
        self._check()
        return 0.0, 0.0

    def sidereal_time(self, when):
        self._check()
        return 0.0

    def horizon(self, observer, body, when):
        self._check()
        return HorizonCoords(0.0, 0.0)


class ImmediateExecutor(Executor):
    """Runs submitted work synchronously; the returned future is already done."""

    def __init__(self):
        self.submitted = []

    def submit(self, fn, *args, **kwargs):
        self.submitted.append(args)
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class PendingExecutor(Executor):
    """Never runs anything; tests complete the futures by hand."""

    def __init__(self):
        self.submitted = []
        self.futures = []

    def submit(self, fn, *args, **kwargs):
        self.submitted.append(args)
        future = Future()
        self.futures.append(future)
        return future


def tick_at(when: datetime) -> ClockTick:
    ms = ms_from_datetime(when)
    return ClockTick(wall_now_ms=ms, sim_ms=ms, dt_real=0.0)


@pytest.fixture
def wall() -> FakeWall:
    return FakeWall(ms_from_datetime(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)))


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()
