# cosmicclock/visualization/viewer.py
"""
Live matplotlib viewer: four 3D panels plus control widgets.

Scene coordinates use Y as "up"; matplotlib's 3D axes use Z as "up", so
scene points are drawn as (x, z, y).
"""
from __future__ import annotations

import logging
import math
from typing import Dict, List

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.animation import FuncAnimation
from matplotlib.widgets import Button, CheckButtons, RadioButtons, Slider

from cosmicclock.config import settings
from cosmicclock.config.options import SPIN_MODELS
from cosmicclock.physics.ephemeris import Body
from cosmicclock.physics.frames import rotate_about_up
from cosmicclock.physics.orbits import TRACKED_BODIES
from cosmicclock.simulation.panels import PanelFrame
from cosmicclock.simulation.runner import SimulationRunner

logger = logging.getLogger(__name__)

BG = "#05060a"
FG = "#c8d3e6"
RING = "#335577"


def _mpl(points) -> np.ndarray:
    """Scene (N,3) or (3,) -> matplotlib axis order (x, z, y)."""
    p = np.atleast_2d(np.asarray(points, dtype=float))
    return p[:, [0, 2, 1]]


def _set_line(line, points) -> None:
    p = _mpl(points)
    line.set_data_3d(p[:, 0], p[:, 1], p[:, 2])


def _circle(radius: float, n: int = 128) -> np.ndarray:
    """Circle in the scene X/Z plane."""
    t = np.linspace(0.0, 2.0 * math.pi, n)
    return np.column_stack((radius * np.cos(t), np.zeros_like(t), radius * np.sin(t)))


def _meridian(lon_deg: float, n: int = 64) -> np.ndarray:
    lat = np.linspace(-math.pi / 2.0, math.pi / 2.0, n)
    lon = math.radians(lon_deg)
    return np.column_stack((np.cos(lat) * math.cos(lon), np.sin(lat), np.cos(lat) * math.sin(lon)))


class CosmicClockViewer:
    def __init__(self, runner: SimulationRunner):
        self.runner = runner
        self.store = runner.store

        self.fig = plt.figure(figsize=(14, 9), facecolor=BG)
        if self.fig.canvas.manager is not None:
            self.fig.canvas.manager.set_window_title("Cosmic Clock")
        self.axes: Dict[str, object] = {}
        self.overlays: Dict[str, object] = {}
        self.artists: Dict[str, object] = {}

        names = [p.name for p in runner.panels]
        for i, name in enumerate(names):
            ax = self.fig.add_subplot(2, 2, i + 1, projection="3d")
            ax.set_facecolor(BG)
            ax.set_axis_off()
            self.axes[name] = ax
            self.overlays[name] = ax.text2D(
                0.02, 0.98, "", transform=ax.transAxes, va="top", ha="left", color=FG, fontsize=8,
                family="monospace",
            )
            builder = getattr(self, f"_build_{name}")
            builder(ax)

        self.fig.subplots_adjust(left=0.01, right=0.80, bottom=0.02, top=0.98, wspace=0.02, hspace=0.04)
        self._build_controls()

        self.anim = None

    # ---- scene construction -------------------------------------------

    def _lim(self, ax, r: float) -> None:
        ax.set_xlim(-r, r)
        ax.set_ylim(-r, r)
        ax.set_zlim(-r, r)

    def _build_earth(self, ax) -> None:
        self._lim(ax, 1.3)
        self.artists["earth_meridians"] = [ax.plot([], [], [], color="#2a7fff", lw=0.6, alpha=0.6)[0] for _ in range(12)]
        self.artists["earth_greenwich"] = ax.plot([], [], [], color="#ffffff", lw=1.2)[0]
        _set_line(ax.plot([], [], [], color="#2a7fff", lw=0.8)[0], _circle(settings.EARTH_RADIUS_SCENE))
        self.artists["earth_marker"] = ax.plot([], [], [], "o", color="#ffcc33", ms=5)[0]
        self.artists["earth_sun"] = ax.plot([], [], [], color="#ffdd88", lw=2.0)[0]

    def _build_solar(self, ax) -> None:
        self._lim(ax, 2.0)
        ax.plot([0], [0], [0], "o", color="#ffcc66", ms=9)
        self.artists["solar_bodies"] = {}
        self.artists["solar_trails"] = {}
        for tracked in TRACKED_BODIES:
            _set_line(ax.plot([], [], [], color=RING, lw=0.5, alpha=0.5)[0], _circle(tracked.semi_major_axis_au))
            self.artists["solar_bodies"][tracked.body] = ax.plot(
                [], [], [], "o", color=tracked.color, ms=max(2.0, tracked.display_radius * 80)
            )[0]
            self.artists["solar_trails"][tracked.body] = ax.plot([], [], [], color=tracked.color, lw=0.7, alpha=0.5)[0]
        self.artists["solar_bodies"][Body.MOON] = ax.plot([], [], [], "o", color="#dddddd", ms=2)[0]

    def _build_galaxy(self, ax) -> None:
        self._lim(ax, 5.0)
        for i in range(1, 5):
            _set_line(ax.plot([], [], [], color="#1a2a44", lw=2.0, alpha=0.5)[0], _circle(float(i)))
        _set_line(ax.plot([], [], [], color=RING, lw=0.8)[0], _circle(settings.GALACTIC_RADIUS_DRAW))
        ax.plot([0], [0], [0], "o", color="#ff8866", ms=10)
        self.artists["galaxy_sun"] = ax.plot([], [], [], "o", color="#ffdd88", ms=5)[0]

    def _build_universe(self, ax) -> None:
        self._lim(ax, 1.1)
        self.artists["universe_shell"] = [ax.plot([], [], [], color="#7f9fff", lw=0.8)[0] for _ in range(3)]

    # ---- controls -----------------------------------------------------

    def _build_controls(self) -> None:
        opts = self.store.snapshot()
        x0, w = 0.83, 0.15

        ax_paused = self.fig.add_axes([x0, 0.90, w, 0.05], facecolor=BG)
        self.chk_paused = CheckButtons(ax_paused, ["paused"], [opts.paused])
        self.chk_paused.on_clicked(lambda _label: self.store.set("paused", not self.store.snapshot().paused))

        ax_speed = self.fig.add_axes([x0, 0.72, w, 0.16], facecolor=BG)
        labels = list(settings.SPEED_PRESETS.keys())
        active = labels.index(settings.speed_label(opts.speed))
        self.radio_speed = RadioButtons(ax_speed, labels, active=active)
        self.radio_speed.on_clicked(lambda label: self.store.set("speed", settings.SPEED_PRESETS[label]))

        ax_reset = self.fig.add_axes([x0, 0.66, w, 0.04])
        self.btn_reset = Button(ax_reset, "Reset to now")
        self.btn_reset.on_clicked(lambda _event: self.store.reset_now())

        ax_spin = self.fig.add_axes([x0, 0.57, w, 0.07], facecolor=BG)
        self.radio_spin = RadioButtons(ax_spin, list(SPIN_MODELS), active=SPIN_MODELS.index(opts.spin_model))
        self.radio_spin.on_clicked(lambda label: self.store.set("spin_model", label))

        self.sliders: List[Slider] = []
        specs = [
            ("latitude_deg", "lat", -90.0, 90.0, opts.latitude_deg),
            ("longitude_deg", "lon", -180.0, 180.0, opts.longitude_deg),
            ("texture_offset_deg", "tex°", settings.TEXTURE_OFFSET_MIN, settings.TEXTURE_OFFSET_MAX, opts.texture_offset_deg),
            ("galaxy_exaggeration", "gal×", settings.GALAXY_EXAGGERATION_MIN, settings.GALAXY_EXAGGERATION_MAX, opts.galaxy_exaggeration),
            ("cosmic_age_gyr", "Gyr", 0.0, settings.COSMIC_AGE_MAX_GYR, opts.cosmic_age_gyr),
        ]
        for i, (name, label, lo, hi, init) in enumerate(specs):
            ax_s = self.fig.add_axes([x0 + 0.03, 0.48 - i * 0.05, w - 0.05, 0.02], facecolor="#111827")
            slider = Slider(ax_s, label, lo, hi, valinit=init)
            slider.label.set_color(FG)
            slider.valtext.set_color(FG)
            slider.on_changed(lambda val, name=name: self.store.set(name, float(val)))
            self.sliders.append(slider)

        self.btn_weather = None
        if self.runner.weather is not None:
            ax_weather = self.fig.add_axes([x0, 0.16, w, 0.04])
            self.btn_weather = Button(ax_weather, "Refresh weather")
            self.btn_weather.on_clicked(self._on_refresh_weather)

    def _on_refresh_weather(self, _event) -> None:
        self.runner.refresh_weather()

    # ---- per-frame ----------------------------------------------------

    def _draw_earth(self, frame: PanelFrame) -> None:
        if frame.data is None:
            return
        orient = frame.data
        # meridians are drawn in true longitude, so they follow the marker, not the texture offset
        spin = orient.spin_angle - math.radians(self.store.snapshot().texture_offset_deg)
        for i, line in enumerate(self.artists["earth_meridians"]):
            pts = np.array([rotate_about_up(p, spin) for p in _meridian(i * 30.0)])
            _set_line(line, pts)
        greenwich = np.array([rotate_about_up(p, spin) for p in _meridian(0.0) * 1.005])
        _set_line(self.artists["earth_greenwich"], greenwich)
        _set_line(self.artists["earth_marker"], orient.marker_position)
        _set_line(self.artists["earth_sun"], np.vstack((np.zeros(3), orient.sun_direction * 1.25)))

    def _draw_solar(self, frame: PanelFrame) -> None:
        for body, line in self.artists["solar_bodies"].items():
            t = frame.transforms.get(body.value.lower())
            if t is not None:
                _set_line(line, t.position)
        for body, line in self.artists["solar_trails"].items():
            trail = self.runner.feed.trails[body]
            if len(trail):
                _set_line(line, trail.positions())

    def _draw_galaxy(self, frame: PanelFrame) -> None:
        sun = frame.transforms.get("sun")
        if sun is not None:
            _set_line(self.artists["galaxy_sun"], sun.position)

    def _draw_universe(self, frame: PanelFrame) -> None:
        shell = frame.transforms.get("universe")
        if shell is None:
            return
        a = shell.scale
        circle = _circle(a)
        planes = (circle, circle[:, [1, 0, 2]], circle[:, [0, 2, 1]])
        for line, pts in zip(self.artists["universe_shell"], planes):
            _set_line(line, pts)

    def _animate(self, _i):
        frames = self.runner.step()
        for name, frame in frames.items():
            self.overlays[name].set_text("\n".join(frame.overlay))
            self.overlays[name].set_color("#ff8866" if frame.error else FG)
            getattr(self, f"_draw_{name}")(frame)
        return []

    def show(self) -> None:
        self.anim = FuncAnimation(
            self.fig,
            self._animate,
            interval=settings.FRAME_INTERVAL_MS,
            blit=False,
            cache_frame_data=False,
        )
        plt.show()
