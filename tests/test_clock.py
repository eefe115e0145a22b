from __future__ import annotations

from datetime import datetime, timezone

import pytest

from cosmicclock.simulation.clock import SimulationClock, datetime_from_ms, ms_from_datetime

from conftest import FakeWall


def test_one_real_second_at_3600x_is_one_simulated_hour() -> None:
    wall = FakeWall(0.0)
    clock = SimulationClock(speed=3600, wall_clock=wall, start_ms=0.0)
    tick = clock.tick(1000.0)
    assert tick.dt_real == pytest.approx(1.0)
    assert tick.sim_ms == pytest.approx(3_600_000.0)


def test_advance_equals_sum_of_real_deltas_times_speed() -> None:
    wall = FakeWall(10_000.0)
    clock = SimulationClock(speed=60, wall_clock=wall, start_ms=5_000.0)
    start = clock.sim_ms
    total_dt = 0.0
    for now in (10_016.0, 10_050.0, 10_051.5, 11_000.0, 12_345.0):
        total_dt += clock.tick(now).dt_real
    assert clock.sim_ms - start == pytest.approx(total_dt * 1000.0 * 60)


def test_paused_clock_does_not_advance() -> None:
    wall = FakeWall(0.0)
    clock = SimulationClock(speed=86400, paused=True, wall_clock=wall, start_ms=123.0)
    tick = clock.tick(5000.0)
    assert tick.sim_ms == 123.0
    assert tick.dt_real == pytest.approx(5.0)


def test_speed_zero_does_not_advance_even_when_running() -> None:
    wall = FakeWall(0.0)
    clock = SimulationClock(speed=1, wall_clock=wall, start_ms=0.0)
    clock.set_speed(0)
    clock.tick(1000.0)
    assert clock.sim_ms == 0.0
    assert clock.paused is False


def test_unpausing_resumes_from_the_paused_instant() -> None:
    wall = FakeWall(0.0)
    clock = SimulationClock(speed=60, wall_clock=wall, start_ms=0.0)
    clock.set_paused(True)
    clock.tick(10_000.0)
    clock.set_paused(False)
    clock.tick(11_000.0)
    assert clock.sim_ms == pytest.approx(60_000.0)


def test_backwards_wall_time_is_a_zero_length_frame() -> None:
    wall = FakeWall(0.0)
    clock = SimulationClock(speed=60, wall_clock=wall, start_ms=0.0)
    clock.tick(1000.0)
    sim_before = clock.sim_ms

    tick = clock.tick(400.0)
    assert tick.dt_real == 0.0
    assert clock.sim_ms == sim_before
    assert clock.last_wall_ms == 1000.0

    # the next forward step is measured from the last good wall time
    tick = clock.tick(2000.0)
    assert tick.dt_real == pytest.approx(1.0)


def test_reset_now_snaps_to_wall_clock() -> None:
    wall = FakeWall(1_000.0)
    clock = SimulationClock(speed=86400, wall_clock=wall, start_ms=1_000.0)
    clock.tick(2_000.0)
    assert clock.sim_ms != 2_000.0

    wall.now_ms = 2_000.0
    clock.reset_now()
    assert clock.sim_ms == 2_000.0


def test_tick_reads_wall_clock_when_not_given() -> None:
    wall = FakeWall(0.0)
    clock = SimulationClock(speed=1, wall_clock=wall, start_ms=0.0)
    wall.now_ms = 250.0
    tick = clock.tick()
    assert tick.wall_now_ms == 250.0
    assert tick.sim_ms == pytest.approx(250.0)


def test_datetime_ms_conversions() -> None:
    when = datetime(2024, 6, 20, 20, 51, tzinfo=timezone.utc)
    assert datetime_from_ms(ms_from_datetime(when)) == when
    # naive datetimes are read as UTC
    assert ms_from_datetime(datetime(1970, 1, 1)) == 0.0
