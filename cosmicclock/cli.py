# cosmicclock/cli.py
import argparse

from cosmicclock.config import settings
from cosmicclock.config.options import SPIN_MODELS
from cosmicclock.simulation.runner import PANEL_NAMES

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
EPHEMERIS_CHOICES = ("analytic", "skyfield")


def get_float(prompt, default=None, min_val=None, max_val=None):
    """
    Safe float input with optional default and limits. Non-interactive (EOF) returns default.
    """
    while True:
        try:
            user = input(prompt)
        except EOFError:
            return float(default) if default is not None else None
        if user.strip() == "" and default is not None:
            return float(default)
        try:
            val = float(user)
            if min_val is not None and val < min_val:
                raise ValueError
            if max_val is not None and val > max_val:
                raise ValueError
            return val
        except (ValueError, TypeError):
            print("❌ Please enter a valid number.")


def get_text(prompt, default=""):
    try:
        user = input(prompt).strip()
    except EOFError:
        return default
    return user or default


def ask_location(lat=settings.DEFAULT_LAT, lon=settings.DEFAULT_LON, label=settings.DEFAULT_LOCATION_LABEL):
    """
    Prompt for the observer location. Pressing Enter keeps each default.
    """
    print("\n📍 Observer Location")
    lat = get_float(f"Latitude in degrees (-90..90) [default {lat}]: ", default=lat, min_val=-90.0, max_val=90.0)
    lon = get_float(f"Longitude in degrees (-180..180) [default {lon}]: ", default=lon, min_val=-180.0, max_val=180.0)
    label = get_text(f"Label [default {label}]: ", default=label)
    print(f"✔ Observer set to {label} ({lat:.4f}, {lon:.4f})")
    return lat, lon, label


def _speed(value):
    try:
        speed = float(value)
    except ValueError:
        if value in settings.SPEED_PRESETS:
            return settings.SPEED_PRESETS[value]
        raise argparse.ArgumentTypeError(f"invalid speed: {value!r}")
    if speed not in settings.SPEED_PRESETS.values():
        allowed = ", ".join(f"{v:g}" for v in settings.SPEED_PRESETS.values())
        raise argparse.ArgumentTypeError(f"speed must be one of {allowed}")
    return speed


def _panels(value):
    names = [p.strip() for p in value.split(",") if p.strip()]
    unknown = [p for p in names if p not in PANEL_NAMES]
    if not names or unknown:
        raise argparse.ArgumentTypeError(f"panels must be a comma list of {', '.join(PANEL_NAMES)}")
    return names


def build_parser():
    parser = argparse.ArgumentParser(
        prog="cosmicclock",
        description="Live Earth, solar-system, galaxy and universe clock.",
    )
    parser.add_argument("--headless", action="store_true", help="Run without a window and write a JSON snapshot")
    parser.add_argument("--frames", type=int, default=50, help="Frames to run in headless mode")
    parser.add_argument(
        "--frame-interval",
        type=float,
        default=settings.FRAME_INTERVAL_MS / 1000.0,
        help="Seconds of wall time between headless frames",
    )
    parser.add_argument("--speed", type=_speed, default=settings.DEFAULT_SPEED, help="Playback speed (1, 60, 3600, 86400)")
    parser.add_argument("--paused", action="store_true", help="Start paused")
    parser.add_argument("--lat", type=float, default=settings.DEFAULT_LAT, help="Observer latitude (deg)")
    parser.add_argument("--lon", type=float, default=settings.DEFAULT_LON, help="Observer longitude (deg)")
    parser.add_argument("--label", default=settings.DEFAULT_LOCATION_LABEL, help="Observer label")
    parser.add_argument("--spin-model", choices=SPIN_MODELS, default=SPIN_MODELS[0], help="Earth orientation model")
    parser.add_argument("--panels", type=_panels, default=list(PANEL_NAMES), help="Comma list of panels to show")
    parser.add_argument("--ephemeris", choices=EPHEMERIS_CHOICES, default="analytic", help="Ephemeris provider")
    parser.add_argument("--kernel", default="de421.bsp", help="Kernel file for the skyfield provider")
    parser.add_argument(
        "--weather",
        action=argparse.BooleanOptionalAction,
        default=settings.WEATHER_ENABLED,
        help="Fetch current weather for the observer",
    )
    parser.add_argument("--save-plots", action="store_true", help="Save trail and scale-factor PNGs (headless)")
    parser.add_argument("--interactive", action="store_true", help="Prompt for the observer location")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="INFO")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    return parser


def parse_args(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.frames <= 0:
        parser.error("--frames must be > 0")
    if args.frame_interval < 0:
        parser.error("--frame-interval must be >= 0")
    if args.interactive:
        args.lat, args.lon, args.label = ask_location(args.lat, args.lon, args.label)
    return args
