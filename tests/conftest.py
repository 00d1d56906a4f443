"""Shared fixtures: a controllable wall clock and a scheduler driven by it."""
from typing import Callable, List

import pytest

from scorekeeper.config import Settings
from scorekeeper.services import KeyValueStore, MemoryStorageBackend, ServiceFactory

START_MS = 1_700_000_000_000

CLOCK_TARGETS = (
    "scorekeeper.models.session_snapshot.now_ms",
    "scorekeeper.services.key_value_store.now_ms",
    "scorekeeper.services.session_manager.now_ms",
    "scorekeeper.services.timer_service.now_ms",
    "scorekeeper.services.scoreboard.now_ms",
    "scorekeeper.services.roster_service.now_ms",
    "scorekeeper.services.export_service.now_ms",
)


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


class ManualCall:
    def __init__(self, due: int, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Runs deferred callbacks only when the test advances the clock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.calls: List[ManualCall] = []

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ManualCall:
        call = ManualCall(self.clock.now + int(delay_seconds * 1000), callback)
        self.calls.append(call)
        return call

    def pending(self) -> List[ManualCall]:
        return [call for call in self.calls if not call.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every callback that comes due in order."""
        target = self.clock.now + int(seconds * 1000)
        while True:
            due = [call for call in self.pending() if call.due <= target]
            if not due:
                break
            call = min(due, key=lambda c: c.due)
            self.calls.remove(call)
            self.clock.now = max(self.clock.now, call.due)
            call.callback()
        self.clock.now = target


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock()
    for target in CLOCK_TARGETS:
        monkeypatch.setattr(target, fake)
    return fake


@pytest.fixture
def scheduler(clock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def backend() -> MemoryStorageBackend:
    return MemoryStorageBackend()


@pytest.fixture
def store(backend, clock) -> KeyValueStore:
    return KeyValueStore(backend)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        export_dir=str(tmp_path / "exports"),
        storage_quota_bytes=None,
    )


class RecordingSink:
    """Submission sink that remembers payloads instead of posting them."""

    def __init__(self, error: Exception = None):
        self.payloads = []
        self.error = error

    def submit(self, payload: dict) -> bool:
        if self.error is not None:
            raise self.error
        self.payloads.append(payload)
        return True


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_controller(settings, backend, scheduler, sink):
    """Build controllers that share one backend, as successive restarts would."""

    def _make(submission_sink=None):
        factory = ServiceFactory(
            settings,
            backend=backend,
            scheduler=scheduler,
            submission_sink=submission_sink or sink,
        )
        return factory.create_match_controller()

    return _make
