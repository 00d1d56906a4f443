"""Timer services for the Reload-Proof Scorekeeper application."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .key_value_store import KeyValueStore
from .scheduler import ScheduledCall, Scheduler
from ..models import TimerState
from ..utils import DEFAULT_INTERVAL_SECONDS, DEFAULT_TIMER_MINUTES, STORAGE_KEYS, fmt_countdown, now_ms
from ..utils.constants import INTERVAL_TICK_SECONDS, MATCH_CLOCK_TICK_SECONDS

logger = logging.getLogger(__name__)


@dataclass
class TimerReading:
    """What a timer shows at one instant."""
    remaining_ms: int
    is_running: bool
    display: str
    overtime: bool

    def to_json(self) -> dict:
        return {
            "remaining_ms": self.remaining_ms,
            "remaining_seconds": self.remaining_ms // 1000,
            "is_running": self.is_running,
            "display": self.display,
            "overtime": self.overtime,
        }


TickListener = Callable[[TimerReading], None]


def _as_int(value: object) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


class _CountdownBase:
    """
    Start/stop/reset state machine shared by both timers.

    Every transition cancels the pending tick and bumps a generation counter,
    so a callback that was already in flight sees a superseded generation and
    does nothing.
    """

    tick_seconds = MATCH_CLOCK_TICK_SECONDS

    def __init__(self, scheduler: Scheduler, default_ms: int):
        self.scheduler = scheduler
        self.default_ms = default_ms
        self.state = TimerState(remaining_ms=default_ms)
        self._listeners: List[TickListener] = []
        self._pending: Optional[ScheduledCall] = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Core timer controls
    # ------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        return self.state.is_running

    def start(self) -> None:
        """Start or resume the countdown from the stored remaining time."""
        if self.state.is_running:
            return

        now = now_ms()
        if self.state.remaining_ms is not None:
            self.state.end_timestamp = now + self.state.remaining_ms
            self.state.remaining_ms = None
        if self.state.end_timestamp is None:
            self.state.end_timestamp = now + self.default_ms

        self.state.is_running = True
        self._schedule_tick()
        self._changed()

    def stop(self) -> None:
        """Pause the countdown, storing a remaining time that is never negative."""
        if not self.state.is_running:
            return

        self._cancel_tick()
        if self.state.end_timestamp is not None:
            self.state.remaining_ms = max(0, self.state.end_timestamp - now_ms())
        else:
            self.state.remaining_ms = 0
        self.state.end_timestamp = None
        self.state.is_running = False
        self._changed()

    def toggle(self) -> None:
        if self.state.is_running:
            self.stop()
        else:
            self.start()

    def release(self) -> None:
        """Cancel the pending tick without changing the timer state."""
        self._cancel_tick()

    def _reset_to(self, remaining_ms: int) -> None:
        self._cancel_tick()
        self.state = TimerState(remaining_ms=remaining_ms)
        self._changed()

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def remaining_ms(self) -> int:
        """Raw remaining time; negative once a running countdown passes zero."""
        if self.state.is_running and self.state.end_timestamp is not None:
            return self.state.end_timestamp - now_ms()
        if self.state.remaining_ms is not None:
            return self.state.remaining_ms
        return self.default_ms

    def remaining_seconds(self) -> int:
        return int(self.remaining_ms() / 1000)

    def reading(self) -> TimerReading:
        return self._reading_for(self.remaining_ms())

    def add_listener(self, listener: TickListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _reading_for(self, remaining: int) -> TimerReading:
        display, overtime = fmt_countdown(remaining)
        return TimerReading(remaining, self.state.is_running, display, overtime)

    def _schedule_tick(self) -> None:
        self._cancel_tick()
        generation = self._generation
        self._pending = self.scheduler.call_later(
            self.tick_seconds, lambda: self._tick(generation)
        )

    def _cancel_tick(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _tick(self, generation: int) -> None:
        if generation != self._generation or not self.state.is_running:
            return

        self._pending = None
        remaining = self.remaining_ms()
        self._notify(self._reading_for(remaining))
        if remaining <= 0:
            self._expire()
        else:
            self._schedule_tick()

    def _expire(self) -> None:
        self.stop()

    def _changed(self) -> None:
        self._notify(self.reading())

    def _notify(self, reading: TimerReading) -> None:
        for listener in list(self._listeners):
            try:
                listener(reading)
            except Exception:
                logger.exception("Timer listener failed")


class CountdownTimer(_CountdownBase):
    """
    Match clock counting down to an absolute wall-clock end time.

    The end time, running flag and paused remaining time are persisted on
    every transition, so a restart mid-countdown resumes from the stored end
    point instead of the original duration.
    """

    tick_seconds = MATCH_CLOCK_TICK_SECONDS

    def __init__(
        self,
        store: KeyValueStore,
        scheduler: Scheduler,
        default_minutes: int = DEFAULT_TIMER_MINUTES,
    ):
        self.store = store
        self.default_minutes = default_minutes
        super().__init__(scheduler, default_minutes * 60 * 1000)
        self.load_state()

    def reset(self, minutes: Optional[int] = None) -> None:
        """
        Reset timer to specified minutes, idle.

        Zero is a valid length; negative or unreadable input uses the default.
        """
        try:
            minutes = int(minutes) if minutes is not None else self.default_minutes
        except (TypeError, ValueError):
            minutes = self.default_minutes
        if minutes < 0:
            minutes = self.default_minutes
        self._reset_to(minutes * 60 * 1000)

    def load_state(self) -> None:
        """Recover the persisted timer, accounting for time spent closed."""
        end = _as_int(self.store.get(STORAGE_KEYS["TIMER_END_TIME"]))
        running_flag = self.store.get(STORAGE_KEYS["TIMER_RUNNING"], False)
        remaining = _as_int(self.store.get(STORAGE_KEYS["TIMER_REMAINING"]))
        running = running_flag is True or running_flag == "true"

        if running and end is not None:
            self.state = TimerState(end_timestamp=end, is_running=True)
            if end - now_ms() <= 0:
                logger.info("Match clock expired while closed")
                self.stop()
            else:
                self._schedule_tick()
                self._notify(self.reading())
        elif remaining is not None:
            self.state = TimerState(remaining_ms=max(0, remaining))
            self._notify(self.reading())
        else:
            self.reset(self.default_minutes)

    def save_state(self) -> None:
        """Save timer state to storage."""
        self.state.validate()
        self.store.put(STORAGE_KEYS["TIMER_END_TIME"], self.state.end_timestamp)
        self.store.put(STORAGE_KEYS["TIMER_RUNNING"], self.state.is_running)
        self.store.put(STORAGE_KEYS["TIMER_REMAINING"], self.state.remaining_ms)

    def _expire(self) -> None:
        logger.info("Match clock reached zero")
        self.stop()

    def _changed(self) -> None:
        self.save_state()
        super()._changed()


class IntervalCountdownTimer(_CountdownBase):
    """
    Short point-to-point countdown.

    Never persisted, so it starts from its default on every construction.
    Unlike the match clock it clamps to zero on expiry and never shows
    overtime.
    """

    tick_seconds = INTERVAL_TICK_SECONDS

    def __init__(self, scheduler: Scheduler, default_seconds: int = DEFAULT_INTERVAL_SECONDS):
        self.default_seconds = default_seconds
        super().__init__(scheduler, default_seconds * 1000)

    def reset(self, seconds: Optional[int] = None) -> None:
        try:
            seconds = int(seconds) if seconds is not None else self.default_seconds
        except (TypeError, ValueError):
            seconds = self.default_seconds
        self._reset_to(max(1, seconds or self.default_seconds) * 1000)

    def remaining_ms(self) -> int:
        return max(0, super().remaining_ms())

    def _expire(self) -> None:
        self.stop()
        self.state.remaining_ms = 0
