"""
Session state manager for the Reload-Proof Scorekeeper application.

This module owns the canonical in-memory :class:`SessionSnapshot`, tracks
whether it has diverged from what is persisted, and coordinates saving it
through the :class:`KeyValueStore`.
"""
import logging
from enum import Enum
from typing import Callable, Optional

from .exceptions import ScoreValidationError
from .key_value_store import KeyValueStore
from ..models import PointEntry, SessionSnapshot
from ..utils import MARKERS, STORAGE_KEYS, now_ms
from ..utils.constants import RESTORE_WINDOW_MS, SESSION_STALE_MS

logger = logging.getLogger(__name__)

EDITABLE_POINT_FIELDS = ("scorer", "assist")
SNAPSHOT_FIELDS = (
    "team_a_name", "team_b_name", "team_a_roster", "team_b_roster",
    "match_clock_label", "possession_start",
)


class RestoreOutcome(Enum):
    """Result of the startup restore decision."""
    NOT_OFFERED = "not_offered"
    RESTORED = "restored"
    DISCARDED = "discarded"


class SessionStateManager:
    """
    Owns the live match snapshot and its persistence.

    Every mutation sets the dirty flag; only a successful :meth:`flush`
    clears it. A failed flush leaves the in-memory snapshot authoritative and
    the next flush retries.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.snapshot = SessionSnapshot.fresh()
        self.is_dirty = False
        self.loaded_from_storage = False

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> SessionSnapshot:
        """
        Load the persisted snapshot, synthesizing defaults on a miss.

        Corrupt data and snapshots older than 7 days are discarded.
        """
        data = self.store.get(STORAGE_KEYS["GAME_STATE"])
        self.loaded_from_storage = False

        if isinstance(data, dict):
            snapshot = SessionSnapshot.from_json(data)
            if now_ms() - snapshot.saved_at > SESSION_STALE_MS:
                logger.info("Discarding session snapshot older than 7 days")
                self.store.remove(STORAGE_KEYS["GAME_STATE"])
                snapshot = SessionSnapshot.fresh()
            else:
                self.loaded_from_storage = True
        else:
            if data is not None:
                logger.warning("Ignoring unrecognized session snapshot of type %s", type(data).__name__)
            snapshot = SessionSnapshot.fresh()

        self.snapshot = snapshot
        self.is_dirty = False
        return snapshot

    def mark_dirty(self) -> None:
        """Mark data as dirty (needs saving)."""
        self.is_dirty = True

    def flush(self) -> bool:
        """
        Persist the snapshot if it changed since the last successful save.

        Returns:
            True when nothing needed saving or the save succeeded
        """
        if not self.is_dirty:
            return True

        self.snapshot.saved_at = now_ms()
        success = self.store.put(STORAGE_KEYS["GAME_STATE"], self.snapshot.to_json())
        if success:
            self.is_dirty = False
        else:
            logger.warning("Session flush failed; will retry on next save")
        return success

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def update_fields(self, **fields) -> None:
        """
        Update team names, rosters, clock label or possession start.

        All fields are checked before any is applied, so a rejected call
        leaves the snapshot untouched.
        """
        for name, value in fields.items():
            if name not in SNAPSHOT_FIELDS:
                raise ScoreValidationError(f"Unknown session field: {name}")
            if name == "possession_start" and value not in MARKERS:
                raise ScoreValidationError(f"Possession start must be one of {', '.join(MARKERS)}")

        for name, value in fields.items():
            setattr(self.snapshot, name, "" if value is None else str(value))
        self.mark_dirty()

    def append_point(self, entry: PointEntry) -> None:
        if self.find_point(entry.id) is not None:
            raise ScoreValidationError(f"Duplicate point id: {entry.id}")
        self.snapshot.point_log.append(entry)
        self.mark_dirty()

    def update_point(self, point_id: str, **fields) -> bool:
        """
        Update scorer/assist of an existing point.

        Returns:
            False without side effects if the id is unknown

        Raises:
            ScoreValidationError: If a non-editable field is supplied
        """
        invalid = [name for name in fields if name not in EDITABLE_POINT_FIELDS]
        if invalid:
            raise ScoreValidationError(f"Cannot edit point fields: {', '.join(invalid)}")

        entry = self.find_point(point_id)
        if entry is None:
            return False
        for name, value in fields.items():
            setattr(entry, name, value)
        self.mark_dirty()
        return True

    def remove_point(self, point_id: str) -> Optional[PointEntry]:
        for idx, entry in enumerate(self.snapshot.point_log):
            if entry.id == point_id:
                removed = self.snapshot.point_log.pop(idx)
                self.mark_dirty()
                return removed
        return None

    def find_point(self, point_id: str) -> Optional[PointEntry]:
        return next((e for e in self.snapshot.point_log if e.id == point_id), None)

    def reset(self) -> None:
        """Replace the snapshot with fresh defaults and an empty log."""
        self.snapshot = SessionSnapshot.fresh()
        self.mark_dirty()

    # ------------------------------------------------------------------
    # Startup restoration
    # ------------------------------------------------------------------
    def has_restorable_session(self) -> bool:
        """True when a persisted snapshot younger than 24 hours was loaded."""
        return (
            self.loaded_from_storage
            and now_ms() - self.snapshot.saved_at < RESTORE_WINDOW_MS
        )

    def restore_previous_session(
        self, confirm: Callable[[SessionSnapshot], bool]
    ) -> RestoreOutcome:
        """
        Offer the loaded snapshot to the user and apply their choice.

        ``confirm`` blocks until the user decides; True keeps the loaded
        snapshot as live state, False resets to defaults.
        """
        if not self.has_restorable_session():
            return RestoreOutcome.NOT_OFFERED
        return self.resolve_restore(bool(confirm(self.snapshot)))

    def resolve_restore(self, restore: bool) -> RestoreOutcome:
        self.loaded_from_storage = False
        if restore:
            logger.info("Restored previous session with %d points", len(self.snapshot.point_log))
            return RestoreOutcome.RESTORED

        logger.info("Discarded previous session")
        self.reset()
        return RestoreOutcome.DISCARDED
