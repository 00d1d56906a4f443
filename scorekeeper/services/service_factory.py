"""
Service Factory for dependency injection.

This module wires one instance of every service for a running scorekeeper,
so nothing in the application relies on module-level singletons.
"""
import threading
from typing import Optional

import requests

from .export_service import ScoreExporter, SubmissionClient, SubmissionSinkInterface
from .key_value_store import KeyValueStore
from .match_controller import MatchController
from .roster_service import RosterService
from .scheduler import Scheduler, ThreadingScheduler
from .scoreboard import Scoreboard
from .session_manager import SessionStateManager
from .storage_backends import FileStorageBackend, StorageBackend
from .timer_service import CountdownTimer, IntervalCountdownTimer
from ..config import Settings


class ServiceFactory:
    """
    Factory for creating service instances with proper dependency injection.

    The backend, scheduler and HTTP session can be swapped out, which is how
    the tests run everything in memory against a manual clock.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        backend: Optional[StorageBackend] = None,
        scheduler: Optional[Scheduler] = None,
        http: Optional[requests.Session] = None,
        submission_sink: Optional[SubmissionSinkInterface] = None,
    ):
        """Initialize factory with default configurations."""
        self.settings = settings or Settings()
        self.lock = threading.RLock()
        self._backend = backend
        self._scheduler = scheduler
        self._http = http
        self._submission_sink = submission_sink

    def create_store(self) -> KeyValueStore:
        backend = self._backend or FileStorageBackend(
            self.settings.data_dir, quota_bytes=self.settings.storage_quota_bytes
        )
        return KeyValueStore(backend)

    def create_scheduler(self) -> Scheduler:
        return self._scheduler or ThreadingScheduler(self.lock)

    def create_roster_service(self, store: KeyValueStore) -> RosterService:
        return RosterService(
            store,
            roster_url=self.settings.roster_url,
            timeout_seconds=self.settings.http_timeout_seconds,
            http=self._http,
        )

    def create_submission_sink(self) -> SubmissionSinkInterface:
        if self._submission_sink is not None:
            return self._submission_sink
        return SubmissionClient(
            submit_url=self.settings.submit_url,
            timeout_seconds=self.settings.http_timeout_seconds,
            http=self._http,
        )

    def create_match_controller(self) -> MatchController:
        """
        Create a complete suite of services with proper dependencies.

        Returns:
            MatchController owning every service; call ``initialize`` on it
        """
        store = self.create_store()
        scheduler = self.create_scheduler()
        session = SessionStateManager(store)
        scoreboard = Scoreboard(session)
        clock_timer = CountdownTimer(
            store, scheduler, default_minutes=self.settings.default_timer_minutes
        )
        interval_timer = IntervalCountdownTimer(
            scheduler, default_seconds=self.settings.default_interval_seconds
        )
        return MatchController(
            store=store,
            session=session,
            scoreboard=scoreboard,
            clock_timer=clock_timer,
            interval_timer=interval_timer,
            roster_service=self.create_roster_service(store),
            submission_sink=self.create_submission_sink(),
            exporter=ScoreExporter(),
            scheduler=scheduler,
            export_dir=self.settings.export_dir,
            auto_save_interval_seconds=self.settings.auto_save_interval_seconds,
            lock=self.lock,
        )
