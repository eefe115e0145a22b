# cosmicclock/simulation/clock.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from cosmicclock.config.settings import DEFAULT_SPEED

logger = logging.getLogger(__name__)


def wall_clock_ms() -> float:
    return time.time() * 1000.0


def datetime_from_ms(ms: float) -> datetime:
    return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)


def ms_from_datetime(when: datetime) -> float:
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.timestamp() * 1000.0


@dataclass(frozen=True)
class ClockTick:
    """
    One frame's view of time. Every panel updated in a frame reads the same tick.
    """
    wall_now_ms: float
    sim_ms: float
    dt_real: float  # seconds of wall time since the previous tick

    @property
    def wall_now(self) -> datetime:
        return datetime_from_ms(self.wall_now_ms)

    @property
    def sim(self) -> datetime:
        return datetime_from_ms(self.sim_ms)


class SimulationClock:
    """
    Simulated time that advances once per rendered frame at `speed` x real time.

    Speed 0 and paused both stop the clock but are separate flags.
    Wall time that runs backwards is treated as a zero-length frame.
    """

    def __init__(
        self,
        speed: float = DEFAULT_SPEED,
        paused: bool = False,
        wall_clock: Callable[[], float] = wall_clock_ms,
        start_ms: Optional[float] = None,
    ):
        self._wall_clock = wall_clock
        now = float(wall_clock())
        self._last_wall_ms = now
        self.sim_ms = float(now if start_ms is None else start_ms)
        self.speed = float(speed)
        self.paused = bool(paused)

    @property
    def last_wall_ms(self) -> float:
        return self._last_wall_ms

    def set_speed(self, speed: float) -> None:
        self.speed = float(speed)

    def set_paused(self, paused: bool) -> None:
        self.paused = bool(paused)

    def reset_now(self) -> None:
        self.sim_ms = float(self._wall_clock())
        logger.info("Simulated time reset to wall clock: %s", datetime_from_ms(self.sim_ms).isoformat())

    def tick(self, wall_now_ms: Optional[float] = None) -> ClockTick:
        now = float(self._wall_clock() if wall_now_ms is None else wall_now_ms)
        dt_real = (now - self._last_wall_ms) / 1000.0
        if dt_real < 0.0:
            logger.debug("Wall clock went backwards by %.3f s; treating frame as dt=0", -dt_real)
            dt_real = 0.0
        else:
            self._last_wall_ms = now

        if not self.paused and self.speed != 0.0:
            self.sim_ms += dt_real * 1000.0 * self.speed

        return ClockTick(wall_now_ms=now, sim_ms=self.sim_ms, dt_real=dt_real)
