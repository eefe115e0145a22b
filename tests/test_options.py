from __future__ import annotations

import logging

import pytest

from cosmicclock.config import settings
from cosmicclock.config.options import (
    RESET_NOW,
    ConfigError,
    OptionChange,
    OptionsStore,
    ViewerOptions,
    build_options,
)


def test_defaults_are_lawrence_real_time() -> None:
    opts = OptionsStore().snapshot()
    assert (opts.latitude_deg, opts.longitude_deg) == (settings.DEFAULT_LAT, settings.DEFAULT_LON)
    assert opts.speed == 1.0
    assert opts.paused is False
    assert opts.spin_model == "sidereal"


def test_out_of_range_values_are_clamped_with_a_warning(caplog) -> None:
    store = OptionsStore()
    with caplog.at_level(logging.WARNING):
        store.set("latitude_deg", 120.0)
    assert store.snapshot().latitude_deg == 90.0
    assert "clamped" in caplog.text

    store.set("longitude_deg", -500)
    store.set("texture_offset_deg", 999.0)
    store.set("galaxy_exaggeration", 0.0)
    store.set("cosmic_age_gyr", 31.0)
    opts = store.snapshot()
    assert opts.longitude_deg == -180.0
    assert opts.texture_offset_deg == settings.TEXTURE_OFFSET_MAX
    assert opts.galaxy_exaggeration == settings.GALAXY_EXAGGERATION_MIN
    assert opts.cosmic_age_gyr == settings.COSMIC_AGE_MAX_GYR


@pytest.mark.parametrize(
    "name, value",
    [
        ("speed", 42),
        ("speed", "fast"),
        ("paused", "yes"),
        ("latitude_deg", float("nan")),
        ("latitude_deg", True),
        ("spin_model", "tidal"),
        ("no_such_option", 1),
    ],
)
def test_invalid_values_are_rejected(name, value) -> None:
    store = OptionsStore()
    before = store.snapshot()
    with pytest.raises(ConfigError):
        store.set(name, value)
    assert store.snapshot() == before


def test_config_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        build_options(speed=7)


def test_changes_are_published_once() -> None:
    store = OptionsStore()
    seen = []
    store.subscribe(seen.append)

    change = store.set("speed", 3600)
    assert change == OptionChange("speed", 1.0, 3600.0)
    assert store.set("speed", 3600.0) is None
    assert seen == [change]


def test_unsubscribe_stops_events() -> None:
    store = OptionsStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()
    store.set("paused", True)
    assert seen == []


def test_update_is_all_or_nothing() -> None:
    store = OptionsStore()
    with pytest.raises(ConfigError):
        store.update(latitude_deg=10.0, speed=5)
    assert store.snapshot().latitude_deg == settings.DEFAULT_LAT

    changes = store.update(latitude_deg=10.0, longitude_deg=20.0)
    assert [c.name for c in changes] == ["latitude_deg", "longitude_deg"]


def test_reset_now_is_an_event_not_state() -> None:
    store = OptionsStore()
    seen = []
    store.subscribe(seen.append)
    before = store.snapshot()
    store.reset_now()
    assert seen == [OptionChange(RESET_NOW, None, None)]
    assert store.snapshot() == before


def test_snapshots_are_immutable_and_independent() -> None:
    store = OptionsStore()
    first = store.snapshot()
    store.set("cosmic_age_gyr", 3.0)
    assert first.cosmic_age_gyr == settings.DEFAULT_COSMIC_AGE_GYR
    with pytest.raises(AttributeError):
        first.speed = 60.0


def test_initial_options_are_validated() -> None:
    store = OptionsStore(ViewerOptions(latitude_deg=-95.0, location_label="  Quito "))
    assert store.snapshot().latitude_deg == -90.0
    assert store.snapshot().location_label == "Quito"
    with pytest.raises(ConfigError):
        OptionsStore(ViewerOptions(speed=2.0))


def test_spin_model_accepts_any_case() -> None:
    assert build_options(spin_model="SubSolar").spin_model == "subsolar"
