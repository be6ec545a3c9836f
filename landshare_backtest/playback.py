"""
Playback controller for a precomputed history.

Two states, Stopped and Running. While running, a single timer fires every
`speed_ms` and advances the cursor by one month; it stops itself on the last
month. The controller never touches the history, only how much of it is shown.

Timer callbacks arrive on a worker thread, so state changes are serialized
through a re-entrant lock.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import MAX_MONTHS, DEFAULT_SPEED_MS, GRANULARITIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaybackState:
    current_month: int
    is_running: bool
    granularity: str
    speed_ms: int

    def to_dict(self) -> dict:
        return {
            "current_month": self.current_month,
            "is_running": self.is_running,
            "granularity": self.granularity,
            "speed_ms": self.speed_ms,
        }


def _daemon_timer(interval: float, function: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, function)
    timer.daemon = True
    return timer


class PlaybackController:
    def __init__(
        self,
        max_months: int = MAX_MONTHS,
        speed_ms: int = DEFAULT_SPEED_MS,
        timer_factory: Callable[[float, Callable[[], None]], object] = _daemon_timer,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        self.max_months = max_months
        self._speed_ms = self._check_speed(speed_ms)
        self._timer_factory = timer_factory
        self._on_tick = on_tick

        self._lock = threading.RLock()
        self._timer = None
        self._generation = 0
        self._current_month = 0
        self._is_running = False
        self._granularity = "monthly"

    # =========================================================================
    # Read-only state
    # =========================================================================

    @property
    def last_month(self) -> int:
        return self.max_months - 1

    @property
    def current_month(self) -> int:
        return self._current_month

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def granularity(self) -> str:
        return self._granularity

    @property
    def speed_ms(self) -> int:
        return self._speed_ms

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            return PlaybackState(
                current_month=self._current_month,
                is_running=self._is_running,
                granularity=self._granularity,
                speed_ms=self._speed_ms,
            )

    # =========================================================================
    # Commands
    # =========================================================================

    def start(self) -> None:
        with self._lock:
            if self._is_running or self._granularity == "annual":
                return
            self._is_running = True
            self._schedule()
            logger.debug("Playback started at month %d", self._current_month)

    def pause(self) -> None:
        with self._lock:
            self._cancel_timer()
            if self._is_running:
                logger.debug("Playback paused at month %d", self._current_month)
            self._is_running = False

    def step(self) -> None:
        with self._lock:
            if self._is_running:
                self.pause()
            self._current_month = min(self._current_month + 1, self.last_month)

    def reset(self) -> None:
        with self._lock:
            self.pause()
            self._current_month = 0

    def set_speed(self, speed_ms: int) -> None:
        """Takes effect from the next scheduled tick."""
        with self._lock:
            self._speed_ms = self._check_speed(speed_ms)

    def set_granularity(self, granularity: str) -> None:
        if granularity not in GRANULARITIES:
            raise ValueError(f"Unknown granularity: {granularity!r} (expected one of {GRANULARITIES})")
        with self._lock:
            self._granularity = granularity
            if granularity == "annual":
                # Annual view is static; no cursor
                self.reset()

    def close(self) -> None:
        """Cancel any pending tick. Call on teardown."""
        self.pause()

    # =========================================================================
    # Timer
    # =========================================================================

    def tick(self) -> None:
        self._advance()

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            # A timer cancelled after it already fired must not advance the cursor
            if generation != self._generation:
                return
            self._advance()

    def _advance(self) -> None:
        with self._lock:
            if not self._is_running:
                return
            self._cancel_timer()
            if self._current_month < self.last_month:
                self._current_month += 1
            if self._current_month >= self.last_month:
                self._is_running = False
                logger.debug("Playback reached month %d, stopping", self._current_month)
            else:
                self._schedule()
            month = self._current_month
        if self._on_tick is not None:
            self._on_tick(month)

    def _schedule(self) -> None:
        self._cancel_timer()
        generation = self._generation
        self._timer = self._timer_factory(self._speed_ms / 1000, lambda: self._on_timer(generation))
        self._timer.start()

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @staticmethod
    def _check_speed(speed_ms) -> int:
        speed_ms = int(speed_ms)
        if speed_ms <= 0:
            raise ValueError(f"Playback speed must be positive, got {speed_ms} ms")
        return speed_ms
