"""
SessionSnapshot model for the Reload-Proof Scorekeeper application.

This module contains the SessionSnapshot dataclass which represents the
complete persisted state of a match, including scores, rosters and the point
log, along with its JSON (de)serialization.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .point_entry import PointEntry
from ..utils import MARKER_M, MARKERS, SIDE_A, now_ms

logger = logging.getLogger(__name__)


@dataclass
class SessionSnapshot:
    """
    Represents the complete state of a match at a point in time.

    Attributes:
        team_a_score: Running total for Team A
        team_b_score: Running total for Team B
        team_a_name: Selected Team A name
        team_b_name: Selected Team B name
        team_a_roster: Team A players, newline-delimited
        team_b_roster: Team B players, newline-delimited
        match_clock_label: Free-form game time label
        point_log: Ordered list of recorded points
        possession_start: Marker ("M"/"F") assigned to the first point
        saved_at: Epoch milliseconds of the last persist
    """
    team_a_score: int = 0
    team_b_score: int = 0
    team_a_name: str = ""
    team_b_name: str = ""
    team_a_roster: str = ""
    team_b_roster: str = ""
    match_clock_label: str = ""
    point_log: List[PointEntry] = field(default_factory=list)
    possession_start: str = MARKER_M
    saved_at: int = 0

    @staticmethod
    def fresh(timestamp: Optional[int] = None) -> "SessionSnapshot":
        """Create a zeroed snapshot stamped with ``timestamp`` (default: now)."""
        return SessionSnapshot(saved_at=now_ms() if timestamp is None else timestamp)

    @property
    def match_id(self) -> str:
        return f"{self.team_a_name} vs {self.team_b_name}"

    def team_name(self, side: str) -> str:
        return self.team_a_name if side == SIDE_A else self.team_b_name

    def roster(self, side: str) -> str:
        return self.team_a_roster if side == SIDE_A else self.team_b_roster

    def to_json(self) -> dict:
        """
        Convert SessionSnapshot to JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "team_a_score": self.team_a_score,
            "team_b_score": self.team_b_score,
            "team_a_name": self.team_a_name,
            "team_b_name": self.team_b_name,
            "team_a_roster": self.team_a_roster,
            "team_b_roster": self.team_b_roster,
            "match_clock_label": self.match_clock_label,
            "point_log": [entry.to_json() for entry in self.point_log],
            "possession_start": self.possession_start,
            "saved_at": self.saved_at,
        }

    @staticmethod
    def from_json(data: dict) -> "SessionSnapshot":
        """
        Create SessionSnapshot from JSON dictionary.

        Malformed scalar fields fall back to their defaults and malformed log
        records are dropped.

        Args:
            data: Dictionary with snapshot data

        Returns:
            New SessionSnapshot instance
        """
        snap = SessionSnapshot()

        def _to_int(key: str) -> int:
            try:
                return max(0, int(data.get(key) or 0))
            except (TypeError, ValueError):
                return 0

        def _to_str(key: str) -> str:
            value = data.get(key)
            return value if isinstance(value, str) else ""

        snap.team_a_score = _to_int("team_a_score")
        snap.team_b_score = _to_int("team_b_score")
        snap.team_a_name = _to_str("team_a_name")
        snap.team_b_name = _to_str("team_b_name")
        snap.team_a_roster = _to_str("team_a_roster")
        snap.team_b_roster = _to_str("team_b_roster")
        snap.match_clock_label = _to_str("match_clock_label")
        snap.saved_at = _to_int("saved_at")

        start = data.get("possession_start")
        snap.possession_start = start if start in MARKERS else MARKER_M

        raw_log = data.get("point_log") or []
        if not isinstance(raw_log, list):
            raw_log = []
        seen_ids = set()
        for record in raw_log:
            if not isinstance(record, dict):
                continue
            try:
                entry = PointEntry.from_json(record)
            except ValueError as e:
                logger.warning("Dropping malformed point entry: %s", e)
                continue
            if entry.id in seen_ids:
                logger.warning("Dropping duplicate point entry %s", entry.id)
                continue
            seen_ids.add(entry.id)
            snap.point_log.append(entry)

        return snap
