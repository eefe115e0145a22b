# cosmicclock/simulation/runner.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from cosmicclock.config import settings
from cosmicclock.config.options import RESET_NOW, OptionChange, OptionsStore, ViewerOptions
from cosmicclock.data.weather import WeatherMonitor
from cosmicclock.physics.cosmology import GalacticOrbitModel, ScaleFactorModel
from cosmicclock.physics.ephemeris import AnalyticEphemeris, EphemerisProvider
from cosmicclock.physics.orbits import OrbitalPositionFeed
from cosmicclock.simulation.clock import ClockTick, SimulationClock
from cosmicclock.simulation.panels import CosmologyPanel, EarthPanel, Panel, PanelFrame, SolarPanel

logger = logging.getLogger(__name__)

PANEL_NAMES = ("earth", "solar", "galaxy", "universe")


class SimulationRunner:
    """
    Owns the clock, the options store and the panels.

    step() ticks the clock exactly once and feeds that single snapshot to
    every panel, so all panels of a frame agree on the time.
    Option changes reach the clock as events, never by shared state.
    """

    def __init__(
        self,
        provider: Optional[EphemerisProvider] = None,
        store: Optional[OptionsStore] = None,
        clock: Optional[SimulationClock] = None,
        weather: Optional[WeatherMonitor] = None,
        panels: Optional[Iterable[str]] = None,
        trail_capacity: int = settings.TRAIL_CAPACITY,
    ):
        self.provider = provider or AnalyticEphemeris()
        self.store = store or OptionsStore()
        opts = self.store.snapshot()
        self.clock = clock or SimulationClock(speed=opts.speed, paused=opts.paused)
        self.clock.set_speed(opts.speed)
        self.clock.set_paused(opts.paused)
        self.weather = weather

        self.feed = OrbitalPositionFeed(self.provider, trail_capacity=trail_capacity)
        weather_lines = weather.overlay_lines if weather is not None else None
        available: Dict[str, Panel] = {
            "earth": EarthPanel(self.provider, weather_lines=weather_lines),
            "solar": SolarPanel(self.feed),
            "galaxy": CosmologyPanel(GalacticOrbitModel()),
            "universe": CosmologyPanel(ScaleFactorModel()),
        }
        wanted = list(panels) if panels is not None else list(PANEL_NAMES)
        unknown = [p for p in wanted if p not in available]
        if unknown:
            raise ValueError(f"Unknown panel(s): {', '.join(unknown)}")
        self.panels: List[Panel] = [available[p] for p in wanted]

        self.frame_count = 0
        self.last_tick: Optional[ClockTick] = None
        self._unsubscribe = self.store.subscribe(self._on_option_change)

    def _on_option_change(self, change: OptionChange) -> None:
        if change.name == "paused":
            self.clock.set_paused(change.new)
        elif change.name == "speed":
            self.clock.set_speed(change.new)
        elif change.name == RESET_NOW:
            self.clock.reset_now()
            self.feed.clear_trails()
        elif change.name in ("latitude_deg", "longitude_deg"):
            logger.info("Observer moved: %s=%s", change.name, change.new)

    def step(self, wall_now_ms: Optional[float] = None) -> Dict[str, PanelFrame]:
        tick = self.clock.tick(wall_now_ms)
        options: ViewerOptions = self.store.snapshot()

        if self.weather is not None:
            self.weather.poll(options.latitude_deg, options.longitude_deg)

        frames = {panel.name: panel.update(tick, options) for panel in self.panels}
        self.frame_count += 1
        self.last_tick = tick
        return frames

    def refresh_weather(self) -> bool:
        """Explicit weather lookup for the current observer, ignoring the cooldown."""
        if self.weather is None:
            return False
        opts = self.store.snapshot()
        started = self.weather.refresh(opts.latitude_deg, opts.longitude_deg)
        if not started:
            logger.info("Weather refresh skipped: a lookup is already in flight")
        return started

    def run_headless(
        self,
        frames: int,
        frame_interval_s: float,
        start_wall_ms: Optional[float] = None,
    ) -> List[Dict[str, PanelFrame]]:
        """
        Drive `frames` steps with a synthetic wall clock spaced `frame_interval_s` apart.
        """
        if frames <= 0:
            raise ValueError("frames must be > 0")
        wall = self.clock.last_wall_ms if start_wall_ms is None else float(start_wall_ms)
        history = []
        for _ in range(int(frames)):
            wall += frame_interval_s * 1000.0
            history.append(self.step(wall))
        return history

    def close(self) -> None:
        self._unsubscribe()
        if self.weather is not None:
            self.weather.shutdown()
