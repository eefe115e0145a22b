from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from cosmicclock.config.options import OptionsStore
from cosmicclock.physics.ephemeris import AnalyticEphemeris, ComputationError
from cosmicclock.simulation.clock import SimulationClock, ms_from_datetime
from cosmicclock.simulation.panels import Panel, format_time
from cosmicclock.simulation.runner import PANEL_NAMES, SimulationRunner


class FlakyEphemeris(AnalyticEphemeris):
    def __init__(self):
        super().__init__()
        self.fail = False

    def _centuries(self, when):
        if self.fail:
            raise ComputationError("ephemeris offline")
        return super()._centuries(when)


class FakeWeather:
    def __init__(self):
        self.polls = []
        self.refreshes = []
        self.closed = False

    def poll(self, lat, lon):
        self.polls.append((lat, lon))

    def refresh(self, lat, lon):
        self.refreshes.append((lat, lon))
        return True

    def overlay_lines(self):
        return ["Weather: clear sky, 21.0 °C"]

    def shutdown(self):
        self.closed = True


def _runner(wall, provider=None, **kwargs) -> SimulationRunner:
    clock = SimulationClock(wall_clock=wall, start_ms=wall())
    return SimulationRunner(provider=provider, clock=clock, **kwargs)


def test_all_panels_share_one_tick(wall) -> None:
    runner = _runner(wall)
    wall.now_ms += 1000.0
    frames = runner.step()
    assert list(frames) == list(PANEL_NAMES)
    stamp = format_time(runner.last_tick.sim)
    for frame in frames.values():
        assert frame.error is None
        assert any(stamp in line for line in frame.overlay)


def test_option_events_drive_the_clock(wall) -> None:
    store = OptionsStore()
    runner = _runner(wall, store=store)

    store.set("speed", 3600)
    assert runner.clock.speed == 3600.0
    store.set("paused", True)
    assert runner.clock.paused is True

    sim = runner.clock.sim_ms
    runner.step(wall.now_ms + 5000.0)
    assert runner.clock.sim_ms == sim


def test_reset_now_resets_clock_and_trails(wall) -> None:
    store = OptionsStore()
    runner = _runner(wall, store=store)
    store.set("speed", 86400)
    runner.run_headless(frames=3, frame_interval_s=1.0)
    assert runner.clock.sim_ms > wall.now_ms
    assert len(runner.feed.trails[next(iter(runner.feed.trails))]) == 3

    store.reset_now()
    assert runner.clock.sim_ms == wall.now_ms
    assert all(len(t) == 0 for t in runner.feed.trails.values())


def test_run_headless_advances_by_frames_times_interval_times_speed(wall) -> None:
    store = OptionsStore()
    runner = _runner(wall, store=store)
    store.set("speed", 60)
    start = runner.clock.sim_ms
    history = runner.run_headless(frames=10, frame_interval_s=0.5)
    assert len(history) == 10
    assert runner.frame_count == 10
    assert runner.clock.sim_ms - start == pytest.approx(10 * 0.5 * 60 * 1000.0)


def test_run_headless_needs_frames(wall) -> None:
    with pytest.raises(ValueError):
        _runner(wall).run_headless(frames=0, frame_interval_s=0.1)


def test_failing_provider_only_disables_its_panels(wall) -> None:
    provider = FlakyEphemeris()
    runner = _runner(wall, provider=provider)
    good = runner.step(wall.now_ms + 40.0)

    provider.fail = True
    frames = runner.step(wall.now_ms + 80.0)

    for name in ("earth", "solar"):
        assert frames[name].error == "ephemeris offline"
        assert "(unavailable)" in frames[name].overlay
        # last good transforms stay on screen
        assert frames[name].transforms is good[name].transforms
    for name in ("galaxy", "universe"):
        assert frames[name].error is None

    provider.fail = False
    recovered = runner.step(wall.now_ms + 120.0)
    assert recovered["earth"].error is None


def test_out_of_range_time_is_reported_not_raised(wall) -> None:
    wall.now_ms = ms_from_datetime(datetime(2080, 1, 1, tzinfo=timezone.utc))
    runner = _runner(wall)
    frames = runner.step()
    assert frames["earth"].error is not None
    assert frames["earth"].transforms == {}
    assert frames["universe"].error is None


def test_panel_selection(wall) -> None:
    runner = _runner(wall, panels=["galaxy", "universe"])
    assert list(runner.step()) == ["galaxy", "universe"]
    with pytest.raises(ValueError):
        _runner(wall, panels=["earth", "pluto"])


def test_weather_is_polled_and_shown(wall) -> None:
    weather = FakeWeather()
    store = OptionsStore()
    runner = _runner(wall, store=store, weather=weather)
    store.set("latitude_deg", 10.0)
    frames = runner.step()
    assert weather.polls == [(10.0, store.snapshot().longitude_deg)]
    assert "Weather: clear sky, 21.0 °C" in frames["earth"].overlay

    runner.close()
    assert weather.closed
    # closed runners stop listening
    store.set("speed", 60)
    assert runner.clock.speed == 1.0


def test_earth_panel_transforms(wall) -> None:
    frames = _runner(wall).step()
    earth = frames["earth"]
    assert set(earth.transforms) == {"earth", "atmosphere", "sun_light", "marker"}
    assert earth.transforms["earth"].rotation[1] == earth.data.spin_angle
    solar = frames["solar"]
    assert {"sun", "earth", "moon", "jupiter"} <= set(solar.transforms)
    assert frames["universe"].transforms["universe"].scale == pytest.approx(0.6316, abs=1e-3)


def test_refresh_weather_uses_the_current_observer(wall) -> None:
    weather = FakeWeather()
    store = OptionsStore()
    runner = _runner(wall, store=store, weather=weather)
    store.set("longitude_deg", 12.5)
    assert runner.refresh_weather() is True
    assert weather.refreshes == [(store.snapshot().latitude_deg, 12.5)]

    assert _runner(wall).refresh_weather() is False


def test_outage_is_logged_once_until_recovery(wall, caplog) -> None:
    provider = FlakyEphemeris()
    runner = _runner(wall, provider=provider, panels=["earth"])
    provider.fail = True
    with caplog.at_level(logging.DEBUG, logger="cosmicclock.simulation.panels"):
        for i in range(5):
            runner.step(wall.now_ms + 40.0 * (i + 1))
        provider.fail = False
        runner.step(wall.now_ms + 400.0)

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert sum(r.levelno == logging.DEBUG for r in caplog.records) == 4
    assert any("recovered" in r.getMessage() for r in caplog.records)
    assert runner.panels[0].last_error is None


def test_panel_base_is_abstract() -> None:
    with pytest.raises(TypeError):
        Panel()
