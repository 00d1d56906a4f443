"""
Deferred callbacks for timer ticks and periodic auto-save.

The core treats itself as single-threaded: every scheduled callback runs
while holding the owner's lock, the same lock the HTTP layer takes around
each command.
"""
import logging
import threading
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class ScheduledCall(Protocol):
    """Handle to a pending callback."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Abstract interface for deferring work - supports DIP."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run ``callback`` once after ``delay_seconds``."""
        ...


class ThreadingScheduler:
    """Scheduler backed by daemon ``threading.Timer`` objects."""

    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        def _run() -> None:
            with self.lock:
                try:
                    callback()
                except Exception:
                    logger.exception("Scheduled callback failed")

        timer = threading.Timer(delay_seconds, _run)
        timer.daemon = True
        timer.start()
        return timer


class AutoSaver:
    """Periodically invokes a save callback until stopped."""

    def __init__(self, scheduler: Scheduler, save: Callable[[], object], interval_seconds: float):
        self.scheduler = scheduler
        self.save = save
        self.interval_seconds = interval_seconds
        self._pending: Optional[ScheduledCall] = None
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self._pending is not None

    def start(self) -> None:
        """Start auto-save functionality, replacing any previous loop."""
        self.stop()
        self._arm(self._generation)

    def stop(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _arm(self, generation: int) -> None:
        self._pending = self.scheduler.call_later(
            self.interval_seconds, lambda: self._fire(generation)
        )

    def _fire(self, generation: int) -> None:
        if generation != self._generation:
            return
        try:
            self.save()
        finally:
            if generation == self._generation:
                self._arm(generation)
