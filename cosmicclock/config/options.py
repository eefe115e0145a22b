# cosmicclock/config/options.py
"""
Viewer options: one typed record, validated at the boundary.

OptionsStore is the only place options change. Each accepted change is
published as an OptionChange to subscribers; frame updates read an
immutable ViewerOptions snapshot instead of shared mutable state.

Field effects:
    paused               stop advancing simulated time
    speed                simulated seconds per wall second, one of SPEED_PRESETS
    latitude_deg         observer latitude, clamped to [-90, 90]
    longitude_deg        observer longitude, clamped to [-180, 180]
    location_label       name shown in the Earth overlay
    texture_offset_deg   meridian offset of the globe texture, clamped to [-180, 180]
    galaxy_exaggeration  time multiplier for the galaxy panel
    cosmic_age_gyr       age shown by the universe panel, clamped to [0, 30]
    spin_model           "sidereal" (inertial) or "subsolar" (sun-fixed) Earth spin
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, List, Optional

from cosmicclock.config import settings

logger = logging.getLogger(__name__)

RESET_NOW = "reset_now"
SPIN_MODELS = ("sidereal", "subsolar")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ViewerOptions:
    paused: bool = False
    speed: float = settings.DEFAULT_SPEED
    latitude_deg: float = settings.DEFAULT_LAT
    longitude_deg: float = settings.DEFAULT_LON
    location_label: str = settings.DEFAULT_LOCATION_LABEL
    texture_offset_deg: float = settings.DEFAULT_TEXTURE_OFFSET
    galaxy_exaggeration: float = settings.DEFAULT_GALAXY_EXAGGERATION
    cosmic_age_gyr: float = settings.DEFAULT_COSMIC_AGE_GYR
    spin_model: str = "sidereal"


@dataclass(frozen=True)
class OptionChange:
    name: str
    old: Any
    new: Any


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be numeric, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be finite")
    return value


def _clamp(name: str, value: Any, lo: float, hi: float) -> float:
    v = _number(name, value)
    out = max(lo, min(hi, v))
    if out != v:
        logger.warning("%s=%s out of range, clamped to %s", name, v, out)
    return out


def _validate_speed(value: Any) -> float:
    v = _number("speed", value)
    if v not in settings.SPEED_PRESETS.values():
        allowed = ", ".join(f"{s:g}" for s in settings.SPEED_PRESETS.values())
        raise ConfigError(f"speed must be one of {{{allowed}}}, got {v:g}")
    return v


def _validate_paused(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"paused must be a bool, got {value!r}")
    return value


def _validate_label(value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError("location_label must be a string")
    return value.strip()


def _validate_spin_model(value: Any) -> str:
    v = str(getattr(value, "value", value)).lower()
    if v not in SPIN_MODELS:
        raise ConfigError(f"spin_model must be one of {SPIN_MODELS}, got {value!r}")
    return v


VALIDATORS: Dict[str, Callable[[Any], Any]] = {
    "paused": _validate_paused,
    "speed": _validate_speed,
    "latitude_deg": lambda v: _clamp("latitude_deg", v, -90.0, 90.0),
    "longitude_deg": lambda v: _clamp("longitude_deg", v, -180.0, 180.0),
    "location_label": _validate_label,
    "texture_offset_deg": lambda v: _clamp(
        "texture_offset_deg", v, settings.TEXTURE_OFFSET_MIN, settings.TEXTURE_OFFSET_MAX
    ),
    "galaxy_exaggeration": lambda v: _clamp(
        "galaxy_exaggeration", v, settings.GALAXY_EXAGGERATION_MIN, settings.GALAXY_EXAGGERATION_MAX
    ),
    "cosmic_age_gyr": lambda v: _clamp("cosmic_age_gyr", v, 0.0, settings.COSMIC_AGE_MAX_GYR),
    "spin_model": _validate_spin_model,
}


def validate_option(name: str, value: Any) -> Any:
    try:
        validator = VALIDATORS[name]
    except KeyError:
        raise ConfigError(f"Unknown option: {name}") from None
    return validator(value)


def build_options(**overrides: Any) -> ViewerOptions:
    """ViewerOptions from defaults plus validated overrides."""
    values = {name: validate_option(name, value) for name, value in overrides.items()}
    return replace(ViewerOptions(), **values)


Listener = Callable[[OptionChange], None]


class OptionsStore:
    def __init__(self, options: Optional[ViewerOptions] = None):
        options = options or ViewerOptions()
        self._options = replace(
            options, **{f.name: validate_option(f.name, getattr(options, f.name)) for f in fields(ViewerOptions)}
        )
        self._listeners: List[Listener] = []

    def snapshot(self) -> ViewerOptions:
        return self._options

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, change: OptionChange) -> None:
        for listener in list(self._listeners):
            listener(change)

    def set(self, name: str, value: Any) -> Optional[OptionChange]:
        """
        Validate and apply one option. Returns the published change, or None
        when the validated value equals the current one.
        """
        new = validate_option(name, value)
        old = getattr(self._options, name)
        if new == old:
            return None
        self._options = replace(self._options, **{name: new})
        change = OptionChange(name=name, old=old, new=new)
        logger.debug("Option %s: %r -> %r", name, old, new)
        self._publish(change)
        return change

    def update(self, **values: Any) -> List[OptionChange]:
        # validate everything first so a bad value leaves the store untouched
        for name, value in values.items():
            validate_option(name, value)
        changes = []
        for name, value in values.items():
            change = self.set(name, value)
            if change is not None:
                changes.append(change)
        return changes

    def reset_now(self) -> OptionChange:
        change = OptionChange(name=RESET_NOW, old=None, new=None)
        self._publish(change)
        return change
