"""
Score log reconciliation for the Reload-Proof Scorekeeper.

The point log is the source of truth. Team totals and the possession marker
are derived from it: appends update totals incrementally, while deletes
force a full rebuild because totals and markers are positional.
"""
import logging
import uuid
from typing import List, Optional

from .exceptions import ScoreValidationError
from .session_manager import SessionStateManager
from ..models import PointEntry, ScoreRow, SessionSnapshot
from ..utils import (
    MARKER_F, MARKER_M, MARKERS, SIDE_A, SIDE_B, SIDES, SPECIAL_OPTIONS,
    local_timestamp_str, now_ms
)

logger = logging.getLogger(__name__)


def possession_marker(index: int, start: str) -> str:
    """
    Marker for the point at ``index`` given the starting side.

    The first point takes the starting side; afterwards sides alternate in
    pairs: start, other, other, start, start, other, other, ...
    """
    start = MARKER_F if start == MARKER_F else MARKER_M
    other = MARKER_F if start == MARKER_M else MARKER_M
    if index == 0:
        return start
    block = (index - 1) // 2
    return other if block % 2 == 0 else start


def resolve_side(entry: PointEntry, team_a_name: str) -> str:
    """Side an entry counts toward; legacy entries fall back to name equality."""
    if entry.side in SIDES:
        return entry.side
    return SIDE_A if entry.team == team_a_name else SIDE_B


def project_rows(snapshot: SessionSnapshot) -> List[ScoreRow]:
    """Derive the score table from the log without touching the snapshot."""
    rows = []
    a_total = 0
    b_total = 0
    for idx, entry in enumerate(snapshot.point_log):
        side = resolve_side(entry, snapshot.team_a_name)
        if side == SIDE_A:
            a_total += 1
        else:
            b_total += 1
        rows.append(
            ScoreRow(
                point_id=entry.id,
                index=idx,
                marker=possession_marker(idx, snapshot.possession_start),
                side=side,
                team=entry.team,
                scorer=entry.scorer,
                assist=entry.assist,
                tally=f"{a_total}:{b_total}",
            )
        )
    return rows


def _require_side(side: str) -> str:
    side = (side or "").strip().upper()
    if side not in SIDES:
        raise ScoreValidationError("Team must be 'A' or 'B'")
    return side


def _require_player_fields(scorer: Optional[str], assist: Optional[str]) -> None:
    if not (scorer or "").strip() or not (assist or "").strip():
        raise ScoreValidationError("Please select both scorer and assist.")


def _require_id(point_id: Optional[str]) -> str:
    if not (point_id or "").strip():
        raise ScoreValidationError("No score selected.")
    return point_id


class Scoreboard:
    """Keeps the point log, team totals and possession markers consistent."""

    def __init__(self, session: SessionStateManager):
        self.session = session

    @property
    def snapshot(self) -> SessionSnapshot:
        return self.session.snapshot

    def append(self, side: str, scorer: str, assist: str) -> ScoreRow:
        """
        Record a new point for ``side``.

        Raises:
            ScoreValidationError: If the side is unknown or scorer/assist blank
        """
        side = _require_side(side)
        _require_player_fields(scorer, assist)

        snapshot = self.snapshot
        entry = PointEntry(
            id=uuid.uuid4().hex,
            match_id=snapshot.match_id,
            recorded_at=local_timestamp_str(now_ms()),
            team=snapshot.team_name(side),
            scorer=scorer,
            assist=assist,
            side=side,
        )
        self.session.append_point(entry)
        if side == SIDE_A:
            snapshot.team_a_score += 1
        else:
            snapshot.team_b_score += 1

        index = len(snapshot.point_log) - 1
        return ScoreRow(
            point_id=entry.id,
            index=index,
            marker=possession_marker(index, snapshot.possession_start),
            side=side,
            team=entry.team,
            scorer=scorer,
            assist=assist,
            tally=f"{snapshot.team_a_score}:{snapshot.team_b_score}",
        )

    def edit(self, point_id: str, scorer: str, assist: str) -> bool:
        """
        Change scorer and assist of an existing point.

        Returns:
            False if no point has this id; nothing is modified in that case
        """
        _require_id(point_id)
        _require_player_fields(scorer, assist)
        return self.session.update_point(point_id, scorer=scorer, assist=assist)

    def delete(self, point_id: str) -> Optional[PointEntry]:
        """Remove a point and rebuild every derived value after it."""
        _require_id(point_id)
        removed = self.session.remove_point(point_id)
        if removed is None:
            return None
        self.rebuild()
        return removed

    def rebuild(self) -> List[ScoreRow]:
        """Recount totals from the log and re-derive the table."""
        rows = project_rows(self.snapshot)
        a_total = sum(1 for row in rows if row.side == SIDE_A)
        b_total = len(rows) - a_total

        snapshot = self.snapshot
        if (snapshot.team_a_score, snapshot.team_b_score) != (a_total, b_total):
            logger.info(
                "Rebuilt totals %d:%d -> %d:%d",
                snapshot.team_a_score, snapshot.team_b_score, a_total, b_total,
            )
            snapshot.team_a_score = a_total
            snapshot.team_b_score = b_total
            self.session.mark_dirty()
        return rows

    def rows(self) -> List[ScoreRow]:
        return project_rows(self.snapshot)

    def set_possession_start(self, start: str) -> List[ScoreRow]:
        start = (start or "").strip().upper()
        if start not in MARKERS:
            raise ScoreValidationError("Possession start must be 'M' or 'F'")
        self.session.update_fields(possession_start=start)
        return self.rows()

    # ------------------------------------------------------------------
    # Player choices
    # ------------------------------------------------------------------
    def roster_players(self, side: str) -> List[str]:
        side = _require_side(side)
        return [line.strip() for line in self.snapshot.roster(side).split("\n") if line.strip()]

    def scorer_options(self, side: str) -> List[str]:
        return self.roster_players(side) + [SPECIAL_OPTIONS["NA"]]

    def assist_options(self, side: str) -> List[str]:
        return self.roster_players(side) + [SPECIAL_OPTIONS["NA"], SPECIAL_OPTIONS["CALLAHAN"]]
