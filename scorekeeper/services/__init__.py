"""
Services package for the Reload-Proof Scorekeeper.

This package contains the storage, session, timer, scoring, roster and export
services, plus the factory that wires them into a MatchController.
"""
from .exceptions import (
    ScorekeeperError, StorageError, StorageFullError, ScoreValidationError,
    RosterFetchError, SubmissionError, RestorePendingError
)
from .storage_backends import StorageBackend, MemoryStorageBackend, FileStorageBackend
from .key_value_store import KeyValueStore, StorageUsage
from .session_manager import SessionStateManager, RestoreOutcome
from .scheduler import Scheduler, ThreadingScheduler, AutoSaver
from .timer_service import CountdownTimer, IntervalCountdownTimer, TimerReading
from .scoreboard import Scoreboard, possession_marker, project_rows
from .roster_service import RosterService, RosterLoadResult
from .export_service import ScoreExporter, SubmissionClient, ExportResult
from .match_controller import MatchController, StartupReport
from .service_factory import ServiceFactory

__all__ = [
    "ScorekeeperError", "StorageError", "StorageFullError", "ScoreValidationError",
    "RosterFetchError", "SubmissionError", "RestorePendingError",
    "StorageBackend", "MemoryStorageBackend", "FileStorageBackend",
    "KeyValueStore", "StorageUsage", "SessionStateManager", "RestoreOutcome",
    "Scheduler", "ThreadingScheduler", "AutoSaver",
    "CountdownTimer", "IntervalCountdownTimer", "TimerReading",
    "Scoreboard", "possession_marker", "project_rows",
    "RosterService", "RosterLoadResult", "ScoreExporter", "SubmissionClient",
    "ExportResult", "MatchController", "StartupReport", "ServiceFactory"
]
