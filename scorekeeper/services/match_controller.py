"""
Match controller for the Reload-Proof Scorekeeper application.

The controller owns one instance of every service for the lifetime of the
process and sequences startup: load the snapshot, settle the restore
decision, then load rosters and begin auto-saving.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .exceptions import RestorePendingError, RosterFetchError, ScoreValidationError, SubmissionError
from .export_service import ExportResult, ScoreExporter, SubmissionSinkInterface
from .key_value_store import KeyValueStore
from .match_commands import Command, CommandDispatcher, CommandResult
from .roster_service import RosterLoadResult, RosterService
from .scheduler import AutoSaver, Scheduler
from .scoreboard import Scoreboard
from .session_manager import RestoreOutcome, SessionStateManager
from .timer_service import CountdownTimer, IntervalCountdownTimer
from ..models import SessionSnapshot
from ..utils import AUTO_SAVE_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

ConfirmRestore = Callable[[SessionSnapshot], bool]


@dataclass
class StartupReport:
    """What happened during initialization."""
    restore_pending: bool = False
    restore_outcome: Optional[RestoreOutcome] = None
    roster: Optional[RosterLoadResult] = None

    def to_json(self) -> dict:
        return {
            "restore_pending": self.restore_pending,
            "restore_outcome": self.restore_outcome.value if self.restore_outcome else None,
            "roster_source": self.roster.source if self.roster else None,
            "warning": self.roster.warning if self.roster else None,
        }


class MatchController:
    """Single owner of match state, timers and collaborators."""

    def __init__(
        self,
        store: KeyValueStore,
        session: SessionStateManager,
        scoreboard: Scoreboard,
        clock_timer: CountdownTimer,
        interval_timer: IntervalCountdownTimer,
        roster_service: RosterService,
        submission_sink: SubmissionSinkInterface,
        exporter: ScoreExporter,
        scheduler: Scheduler,
        export_dir: str,
        auto_save_interval_seconds: float = AUTO_SAVE_INTERVAL_SECONDS,
        lock: Optional[threading.RLock] = None,
    ):
        self.store = store
        self.session = session
        self.scoreboard = scoreboard
        self.clock_timer = clock_timer
        self.interval_timer = interval_timer
        self.roster_service = roster_service
        self.submission_sink = submission_sink
        self.exporter = exporter
        self.export_dir = export_dir
        self.lock = lock or threading.RLock()
        self.autosaver = AutoSaver(scheduler, self.save, auto_save_interval_seconds)
        self.dispatcher = CommandDispatcher(self)
        self.restore_pending = False
        self.initialized = False
        self._exporting = False
        self.startup: Optional[StartupReport] = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------
    def initialize(self, confirm: Optional[ConfirmRestore] = None) -> StartupReport:
        """
        Load persisted state and run the startup sequence.

        With ``confirm`` the restore decision is taken synchronously. Without
        it a restorable session leaves the controller waiting for
        :meth:`resolve_restore`, and roster loading and auto-save wait too.
        """
        with self.lock:
            self.session.load()
            if not self.session.has_restorable_session():
                outcome = RestoreOutcome.NOT_OFFERED
            elif confirm is None:
                self.restore_pending = True
                self.startup = StartupReport(restore_pending=True)
                logger.info("Previous session found; waiting for restore decision")
                return self.startup
            else:
                outcome = self.session.restore_previous_session(confirm)
        return self._finish_startup(outcome)

    def resolve_restore(self, restore: bool) -> StartupReport:
        """Apply the user's restore decision and finish starting up."""
        with self.lock:
            if not self.restore_pending:
                raise ScoreValidationError("No previous session is awaiting a decision")
            self.restore_pending = False
            outcome = self.session.resolve_restore(restore)
        return self._finish_startup(outcome)

    def _finish_startup(self, outcome: RestoreOutcome) -> StartupReport:
        with self.lock:
            # stored totals are only a cache of the log
            self.scoreboard.rebuild()
        roster = self.refresh_teams()
        with self.lock:
            self.autosaver.start()
            self.initialized = True
            self.startup = StartupReport(restore_outcome=outcome, roster=roster)
            return self.startup

    def refresh_teams(self) -> RosterLoadResult:
        """Fetch rosters without holding the lock, then apply the result."""
        try:
            teams = self.roster_service.fetch_teams()
        except RosterFetchError as e:
            with self.lock:
                return self.roster_service.fall_back_to_cache(e)
        with self.lock:
            return self.roster_service.accept_teams(teams)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def dispatch(self, command: Command) -> CommandResult:
        with self.lock:
            return self.dispatcher.dispatch(command)

    def full_reset(self) -> None:
        """New match plus cleared roster cache and timers back to defaults."""
        with self.lock:
            self.session.reset()
            self.roster_service.clear_cache()
            self.clock_timer.reset()
            self.interval_timer.reset()
            logger.info("Full reset performed")

    def finish_match(self) -> ExportResult:
        """
        Submit the log, always write the local CSV, then start a new match.

        The submission runs outside the lock so the match stays usable while
        it is in flight. A submission failure is reported in the result. If
        the log changed meanwhile the CSV still records what was submitted,
        but the live match is kept. If the CSV cannot be written the session
        is left untouched.

        Raises:
            RestorePendingError: If the restore decision is still open
            ScoreValidationError: If no points have been logged or another
                                  export is already running
            OSError: If the CSV export cannot be written
        """
        with self.lock:
            if self.restore_pending:
                raise RestorePendingError("Resolve the previous session before exporting")
            if self._exporting:
                raise ScoreValidationError("An export is already in progress.")
            snapshot = self.session.snapshot
            if not snapshot.point_log:
                raise ScoreValidationError("No scores have been logged.")

            payload = self.exporter.build_payload(snapshot)
            result = ExportResult(
                filename=self.exporter.filename(snapshot),
                csv_text=self.exporter.to_csv(snapshot),
            )
            self._exporting = True

        try:
            try:
                result.submitted = self.submission_sink.submit(payload)
            except SubmissionError as e:
                logger.warning("Export to submission sink failed: %s", e)
                result.warning = str(e)

            with self.lock:
                result.path = self.exporter.write_text(result.filename, result.csv_text, self.export_dir)
                logger.info("CSV written: %s", result.path)

                current = self.session.snapshot
                if current is not snapshot or self.exporter.records(current) != payload["logs"]:
                    logger.warning("Score log changed during export; keeping the live match")
                    result.warning = "Scores changed during export; the match was not reset."
                    return result

                self.session.reset()
                self.session.flush()
                return result
        finally:
            with self.lock:
                self._exporting = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def save(self) -> bool:
        with self.lock:
            if self.restore_pending:
                return True
            return self.session.flush()

    def on_hidden(self) -> bool:
        """Client went to the background."""
        return self.save()

    def on_unload(self) -> dict:
        """Final save; reports whether the client should warn before leaving."""
        with self.lock:
            saved = self.save()
            warn = self.session.is_dirty or bool(self.session.snapshot.point_log)
            return {"saved": saved, "unsaved_warning": warn}

    def shutdown(self) -> None:
        with self.lock:
            self.autosaver.stop()
            self.save()
            self.clock_timer.release()
            self.interval_timer.release()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def view(self) -> dict:
        """Render-ready state of the whole match."""
        with self.lock:
            snapshot = self.session.snapshot
            return {
                "initialized": self.initialized,
                "restore_pending": self.restore_pending,
                "team_a": {
                    "name": snapshot.team_a_name,
                    "score": snapshot.team_a_score,
                    "roster": snapshot.team_a_roster,
                },
                "team_b": {
                    "name": snapshot.team_b_name,
                    "score": snapshot.team_b_score,
                    "roster": snapshot.team_b_roster,
                },
                "match_id": snapshot.match_id,
                "match_clock_label": snapshot.match_clock_label,
                "possession_start": snapshot.possession_start,
                "rows": [row.to_json() for row in self.scoreboard.rows()],
                "timer": self.clock_timer.reading().to_json(),
                "interval": self.interval_timer.reading().to_json(),
                "dirty": self.session.is_dirty,
                "saved_at": snapshot.saved_at,
                "teams": sorted(self.roster_service.teams.keys()),
                "storage": self.store.usage_info().to_json(),
            }
