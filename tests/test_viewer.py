from __future__ import annotations

import matplotlib.pyplot as plt
import pytest

from cosmicclock.config.options import OptionsStore
from cosmicclock.data.weather import WeatherMonitor
from cosmicclock.simulation.clock import SimulationClock
from cosmicclock.simulation.runner import SimulationRunner
from cosmicclock.visualization.plots import plot_scale_factor_curve, plot_solar_trails
from cosmicclock.visualization.viewer import CosmicClockViewer

from conftest import ImmediateExecutor


@pytest.fixture
def viewer(wall):
    store = OptionsStore()
    runner = SimulationRunner(store=store, clock=SimulationClock(wall_clock=wall, start_ms=wall()))
    v = CosmicClockViewer(runner)
    yield v
    plt.close(v.fig)
    runner.close()


def test_animate_fills_every_overlay(viewer) -> None:
    viewer._animate(0)
    for name, text in viewer.overlays.items():
        assert text.get_text().strip(), name
    assert viewer.runner.frame_count == 1


def test_widgets_write_through_the_store(viewer) -> None:
    viewer.sliders[0].set_val(12.0)
    assert viewer.store.snapshot().latitude_deg == 12.0

    viewer.radio_speed.set_active(2)
    assert viewer.store.snapshot().speed == 3600.0
    assert viewer.runner.clock.speed == 3600.0

    viewer.chk_paused.set_active(0)
    assert viewer.store.snapshot().paused is True
    assert viewer.runner.clock.paused is True


def test_static_plots(tmp_path, wall) -> None:
    runner = SimulationRunner(clock=SimulationClock(wall_clock=wall, start_ms=wall()), panels=["solar"])
    runner.run_headless(frames=5, frame_interval_s=1.0)

    trails = plot_solar_trails(runner.feed, output_dir=str(tmp_path))
    curve = plot_scale_factor_curve(output_dir=str(tmp_path), marker_age_gyr=13.8)
    assert trails == str(tmp_path / "solar_trails.png")
    assert (tmp_path / "solar_trails.png").exists()
    assert curve == str(tmp_path / "scale_factor.png")
    assert (tmp_path / "scale_factor.png").exists()


def test_weather_button_only_with_weather(viewer, wall) -> None:
    assert viewer.btn_weather is None

    calls = []
    monitor = WeatherMonitor(fetcher=lambda lat, lon: calls.append((lat, lon)), executor=ImmediateExecutor())
    runner = SimulationRunner(clock=SimulationClock(wall_clock=wall, start_ms=wall()), weather=monitor)
    v = CosmicClockViewer(runner)
    try:
        assert v.btn_weather is not None
        v._on_refresh_weather(None)
        opts = runner.store.snapshot()
        assert calls == [(opts.latitude_deg, opts.longitude_deg)]
    finally:
        plt.close(v.fig)
        runner.close()
