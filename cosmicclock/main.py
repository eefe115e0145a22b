# cosmicclock/main.py
import json
import logging
import os
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import numpy as np

from cosmicclock.cli import parse_args
from cosmicclock.config import settings
from cosmicclock.config.options import OptionsStore, build_options
from cosmicclock.data.weather import WeatherMonitor
from cosmicclock.physics.ephemeris import AnalyticEphemeris
from cosmicclock.simulation.panels import PanelFrame
from cosmicclock.simulation.runner import SimulationRunner

LOG_FORMAT = "%(asctime)s  %(levelname)-7s  %(message)s"
LOG_DATEFMT = "%H:%M:%S"

log = logging.getLogger("main")


def setup_logging(level: str = "INFO", log_file: str = None) -> None:
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=handlers,
        force=True,
    )


def _jsonable(o: Any) -> Any:
    if isinstance(o, np.ndarray):
        return o.tolist()
    if isinstance(o, (np.floating, np.integer)):
        return o.item()
    if isinstance(o, datetime):
        return o.isoformat()
    return repr(o)


def save_json(obj: Any, name_prefix: str) -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    out_dir = Path(settings.OUTPUT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    filename = out_dir / f"{name_prefix}_{ts}.json"
    with open(filename, "w") as f:
        json.dump(obj, f, indent=2, default=_jsonable)
    return str(filename)


def frame_to_dict(frame: PanelFrame) -> Dict[str, Any]:
    return {
        "overlay": list(frame.overlay),
        "error": frame.error,
        "transforms": {
            name: {"position": t.position, "rotation": t.rotation, "scale": t.scale}
            for name, t in frame.transforms.items()
        },
    }


def build_provider(args):
    if args.ephemeris == "skyfield":
        # optional extra: pip install cosmic-clock[skyfield]
        from cosmicclock.physics.skyfield_ephemeris import SkyfieldEphemeris

        return SkyfieldEphemeris(kernel=args.kernel)
    return AnalyticEphemeris()


def build_runner(args) -> SimulationRunner:
    options = build_options(
        paused=args.paused,
        speed=args.speed,
        latitude_deg=args.lat,
        longitude_deg=args.lon,
        location_label=args.label,
        spin_model=args.spin_model,
    )
    weather = WeatherMonitor() if args.weather else None
    return SimulationRunner(
        provider=build_provider(args),
        store=OptionsStore(options),
        weather=weather,
        panels=args.panels,
    )


def run_headless(runner: SimulationRunner, args) -> str:
    history = runner.run_headless(args.frames, args.frame_interval)
    last = history[-1]
    for name, frame in last.items():
        for line in frame.overlay:
            log.info("[%s] %s", name, line)

    errors = {name: f.error for name, f in last.items() if f.error}
    if errors:
        log.warning("Panels unavailable on the last frame: %s", ", ".join(errors))

    tick = runner.last_tick
    out = {
        "meta": {
            "frames": runner.frame_count,
            "frame_interval_s": args.frame_interval,
            "speed": runner.clock.speed,
            "paused": runner.clock.paused,
            "ephemeris": args.ephemeris,
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        },
        "options": asdict(runner.store.snapshot()),
        "sim_time_utc": tick.sim.isoformat(),
        "wall_time_utc": tick.wall_now.isoformat(),
        "panels": {name: frame_to_dict(frame) for name, frame in last.items()},
    }
    snapshot_file = save_json(out, "cosmicclock_snapshot")
    log.info("Saved snapshot: %s", snapshot_file)

    if args.save_plots:
        import matplotlib

        matplotlib.use("Agg")
        from cosmicclock.visualization.plots import plot_scale_factor_curve, plot_solar_trails

        try:
            plot_solar_trails(runner.feed)
            plot_scale_factor_curve(marker_age_gyr=runner.store.snapshot().cosmic_age_gyr)
            log.info("Plots generated.")
        except (OSError, ValueError) as e:
            log.warning("Plotting failed: %s", e)

    return snapshot_file


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)
    settings.validate_settings()
    os.makedirs(settings.OUTPUT_DIR, exist_ok=True)

    runner = build_runner(args)
    log.info(
        "Starting Cosmic Clock: observer=%s (%.4f, %.4f) speed=%s panels=%s",
        args.label, args.lat, args.lon, settings.speed_label(args.speed), ",".join(args.panels),
    )
    try:
        if args.headless:
            run_headless(runner, args)
        else:
            from cosmicclock.visualization.viewer import CosmicClockViewer

            CosmicClockViewer(runner).show()
    except KeyboardInterrupt:
        log.info("Interrupted.")
    finally:
        runner.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
