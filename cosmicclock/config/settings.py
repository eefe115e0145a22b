"""
Project settings (constants + small helpers).
Units: astronomical units (AU) for positions, degrees for user-facing angles,
milliseconds for simulated time, seconds for wall-clock deltas.
"""
from __future__ import annotations

import os
from datetime import datetime, timezone

# Paths
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
OUTPUT_DIR = os.path.join(BASE_DIR, "outputs")

# Run
VALIDATE_ON_IMPORT = False

# Observer (Lawrence, KS)
DEFAULT_LAT = 38.9717
DEFAULT_LON = -95.2353
DEFAULT_LOCATION_LABEL = "Lawrence, KS"

# Time
J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
JD_UNIX_EPOCH = 2440587.5
JD_J2000 = 2451545.0
MS_PER_DAY = 86_400_000.0
MS_PER_YEAR = 365.25 * MS_PER_DAY

# Playback
SPEED_PRESETS = {
    "1x (real time)": 1.0,
    "60x (1 min/sec)": 60.0,
    "3600x (1 hr/sec)": 3600.0,
    "86400x (1 day/sec)": 86400.0,
}
DEFAULT_SPEED = 1.0
FRAME_INTERVAL_MS = 40

# Earth panel
EARTH_RADIUS_SCENE = 1.0
MARKER_RADIUS_SCENE = 1.01
SUN_LIGHT_DISTANCE = 5.0
TEXTURE_OFFSET_MIN = -180.0
TEXTURE_OFFSET_MAX = 180.0
DEFAULT_TEXTURE_OFFSET = 0.0
OBLIQUITY_J2000_DEG = 23.43928

# Solar system panel
AU_SCENE = 1.0  # 1 scene unit = 1 AU
MOON_EXAGGERATION = 60.0
TRAIL_CAPACITY = 360

# Galaxy panel (stylized)
GALACTIC_RADIUS_KPC = 8.2
GALACTIC_RADIUS_DRAW = 3.0
GALACTIC_PERIOD_YEARS = 230_000_000
GALAXY_EXAGGERATION_MIN = 1.0
GALAXY_EXAGGERATION_MAX = 200_000_000.0
DEFAULT_GALAXY_EXAGGERATION = 5_000_000.0

# Universe panel (toy cosmology)
PRESENT_AGE_GYR = 13.8
COSMIC_AGE_MAX_GYR = 30.0
DEFAULT_COSMIC_AGE_GYR = PRESENT_AGE_GYR
MATTER_WEIGHT = 0.6
LAMBDA_WEIGHT = 0.4
LAMBDA_RATE = 0.7
SCALE_FACTOR_FLOOR = 0.01
EPOCH_BANDS = (
    (0.5, "recombination/dark ages"),
    (1.5, "first galaxies"),
    (5.0, "peak star formation"),
    (10.0, "maturing cosmic web"),
    (20.0, "dark energy era"),
)
EPOCH_BEYOND = "far future"

# Weather side channel (Open-Meteo, no key required)
WEATHER_URL = "https://api.open-meteo.com/v1/forecast"
WEATHER_TIMEOUT_SEC = 10.0
WEATHER_RETRIES = 2
WEATHER_COOLDOWN_SEC = 600.0
WEATHER_ENABLED = False


def speed_label(speed: float) -> str:
    for label, value in SPEED_PRESETS.items():
        if value == float(speed):
            return label
    return f"{speed:g}x"


def validate_settings() -> None:
    if not -90.0 <= DEFAULT_LAT <= 90.0:
        raise ValueError("DEFAULT_LAT must be within [-90, 90]")
    if not -180.0 <= DEFAULT_LON <= 180.0:
        raise ValueError("DEFAULT_LON must be within [-180, 180]")
    if DEFAULT_SPEED not in SPEED_PRESETS.values():
        raise ValueError("DEFAULT_SPEED must be one of SPEED_PRESETS")
    if any(v < 0 for v in SPEED_PRESETS.values()):
        raise ValueError("SPEED_PRESETS must be >= 0")
    if TRAIL_CAPACITY <= 0:
        raise ValueError("TRAIL_CAPACITY must be > 0")
    if MOON_EXAGGERATION <= 0:
        raise ValueError("MOON_EXAGGERATION must be > 0")
    if GALAXY_EXAGGERATION_MAX < GALAXY_EXAGGERATION_MIN:
        raise ValueError("GALAXY_EXAGGERATION_MAX must be >= GALAXY_EXAGGERATION_MIN")
    if not GALAXY_EXAGGERATION_MIN <= DEFAULT_GALAXY_EXAGGERATION <= GALAXY_EXAGGERATION_MAX:
        raise ValueError("DEFAULT_GALAXY_EXAGGERATION out of range")
    if abs(MATTER_WEIGHT + LAMBDA_WEIGHT - 1.0) > 1e-12:
        raise ValueError("MATTER_WEIGHT + LAMBDA_WEIGHT must equal 1")
    if not 0.0 < SCALE_FACTOR_FLOOR < 1.0:
        raise ValueError("SCALE_FACTOR_FLOOR must be within (0, 1)")
    thresholds = [t for t, _ in EPOCH_BANDS]
    if thresholds != sorted(thresholds):
        raise ValueError("EPOCH_BANDS must be in ascending order")
    if WEATHER_COOLDOWN_SEC < 0:
        raise ValueError("WEATHER_COOLDOWN_SEC must be >= 0")


if VALIDATE_ON_IMPORT:
    validate_settings()
