"""
Current-weather side channel for the Earth overlay (Open-Meteo, no API key).

Nothing here feeds the astronomical model. Lookups run on a single worker
thread; results are only applied on the frame thread by
WeatherMonitor.poll(), so the frame loop never blocks and never races.

Rules:
 - at most one request in flight
 - at least `cooldown_sec` between automatic requests
 - a location change resets the cooldown and the last-known location at once;
   a result that was already in flight is still accepted when it lands
 - failures become a display string and are retried at the next eligible poll
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

import requests

from cosmicclock.config import settings

logger = logging.getLogger(__name__)

CURRENT_FIELDS = "temperature_2m,wind_speed_10m,weather_code,is_day"

# WMO weather interpretation codes, coarse
WEATHER_CODES = {
    0: "clear sky",
    1: "mainly clear",
    2: "partly cloudy",
    3: "overcast",
    45: "fog",
    48: "rime fog",
    51: "light drizzle",
    53: "drizzle",
    55: "dense drizzle",
    61: "light rain",
    63: "rain",
    65: "heavy rain",
    71: "light snow",
    73: "snow",
    75: "heavy snow",
    80: "rain showers",
    81: "rain showers",
    82: "violent rain showers",
    95: "thunderstorm",
    96: "thunderstorm with hail",
    99: "thunderstorm with hail",
}


class WeatherError(RuntimeError):
    pass


@dataclass(frozen=True)
class WeatherReport:
    temperature_c: float
    wind_speed_kmh: float
    weather_code: int
    is_day: bool
    latitude_deg: float
    longitude_deg: float
    fetched_at: datetime

    @property
    def description(self) -> str:
        return WEATHER_CODES.get(self.weather_code, f"code {self.weather_code}")

    def overlay_lines(self):
        return [
            f"Weather: {self.description}, {self.temperature_c:.1f} °C",
            f"Wind: {self.wind_speed_kmh:.1f} km/h ({'day' if self.is_day else 'night'})",
        ]


def _looks_like_html(text: str) -> bool:
    t = (text or "").lower()
    return ("<html" in t) or ("<!doctype html" in t)


def parse_weather(payload: dict, lat: float, lon: float) -> WeatherReport:
    try:
        current = payload["current"]
        return WeatherReport(
            temperature_c=float(current["temperature_2m"]),
            wind_speed_kmh=float(current["wind_speed_10m"]),
            weather_code=int(current["weather_code"]),
            is_day=bool(int(current["is_day"])),
            latitude_deg=float(lat),
            longitude_deg=float(lon),
            fetched_at=datetime.now(timezone.utc),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise WeatherError(f"Unexpected weather payload: {e}") from e


def fetch_weather(
    lat: float,
    lon: float,
    session: Optional[requests.Session] = None,
    retries: int = settings.WEATHER_RETRIES,
    timeout: float = settings.WEATHER_TIMEOUT_SEC,
) -> WeatherReport:
    """
    Blocking lookup with small retry/backoff. Raises WeatherError.
    Without a session, a short-lived one is opened and closed here.
    """
    if session is None:
        with requests.Session() as own:
            return fetch_weather(lat, lon, session=own, retries=retries, timeout=timeout)

    params = {"latitude": f"{lat:.4f}", "longitude": f"{lon:.4f}", "current": CURRENT_FIELDS}

    last_exc: Optional[Exception] = None
    for attempt in range(1, int(retries) + 2):
        try:
            resp = session.get(settings.WEATHER_URL, params=params, timeout=timeout)
            resp.raise_for_status()
            if _looks_like_html(resp.text):
                raise WeatherError("Weather service returned HTML instead of JSON")
            return parse_weather(resp.json(), lat, lon)

        except requests.HTTPError as he:
            last_exc = he
            status = he.response.status_code if he.response is not None else None
            if status is not None and 400 <= status < 500:
                raise WeatherError(f"Weather request rejected (HTTP {status})") from he

        except (requests.RequestException, WeatherError, ValueError) as e:
            last_exc = e

        logger.warning("Weather fetch attempt %d failed: %s", attempt, last_exc)
        if attempt <= retries:
            time.sleep(0.5 * attempt)

    raise WeatherError(f"Weather lookup failed: {last_exc}") from last_exc


Fetcher = Callable[[float, float], WeatherReport]


class WeatherMonitor:
    def __init__(
        self,
        fetcher: Fetcher = fetch_weather,
        cooldown_sec: float = settings.WEATHER_COOLDOWN_SEC,
        executor: Optional[Executor] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetcher = fetcher
        self.cooldown_sec = float(cooldown_sec)
        self._executor = executor
        self._clock = clock

        self.report: Optional[WeatherReport] = None
        self.error: Optional[str] = None
        self._future: Optional[Future] = None
        self._last_fetch_at: Optional[float] = None
        self._last_location: Optional[Tuple[float, float]] = None

    @property
    def in_flight(self) -> bool:
        return self._future is not None

    def _ensure_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="weather")
        return self._executor

    def _collect(self) -> None:
        future = self._future
        if future is None or not future.done():
            return
        self._future = None
        try:
            self.report = future.result()
            self.error = None
            logger.info("Weather updated: %s", self.report.description)
        except Exception as e:
            self.error = str(e) or e.__class__.__name__
            logger.warning("Weather lookup failed: %s", self.error)

    def _eligible(self, location: Tuple[float, float]) -> bool:
        if location != self._last_location:
            return True
        if self._last_fetch_at is None:
            return True
        return (self._clock() - self._last_fetch_at) >= self.cooldown_sec

    def _start(self, location: Tuple[float, float]) -> None:
        self._last_fetch_at = self._clock()
        self._last_location = location
        self._future = self._ensure_executor().submit(self._fetcher, location[0], location[1])

    def poll(self, lat: float, lon: float) -> None:
        """Call once per frame: collect a finished lookup, start a new one if due."""
        self._collect()

        location = (float(lat), float(lon))
        if self._last_location is not None and location != self._last_location:
            logger.debug("Location moved to %s; resetting weather cooldown", location)
            self._last_fetch_at = None
            self._last_location = None

        if self.in_flight:
            return
        if self._eligible(location):
            self._start(location)

    def refresh(self, lat: float, lon: float) -> bool:
        """Explicit refresh: ignores the cooldown but not the in-flight guard."""
        self._collect()
        if self.in_flight:
            return False
        self._start((float(lat), float(lon)))
        return True

    def overlay_lines(self):
        if self.report is not None:
            lines = self.report.overlay_lines()
        elif self.in_flight:
            lines = ["Weather: loading…"]
        else:
            lines = []
        if self.error:
            lines.append(f"Weather error: {self.error}")
        return lines

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
