"""PointEntry model: one recorded score in the match log."""
from dataclasses import dataclass, asdict
from typing import Optional

from ..utils import SIDES


@dataclass
class PointEntry:
    """
    A single recorded point.

    Attributes:
        id: Opaque identifier, unique within a session
        match_id: Match label at creation time ("A vs B")
        recorded_at: Local timestamp string of when the point was logged
        team: Resolved team name at creation time (never relabelled)
        scorer: Player credited with the score
        assist: Player credited with the assist
        side: Team letter ("A"/"B") captured at creation; None for legacy saves
    """
    id: str
    match_id: str
    recorded_at: str
    team: str
    scorer: str
    assist: str
    side: Optional[str] = None

    def to_json(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_json(data: dict) -> "PointEntry":
        """
        Create PointEntry from JSON dictionary.

        Raises:
            ValueError: If the record has no usable id
        """
        entry_id = data.get("id")
        if not entry_id:
            raise ValueError("Point entry is missing an id")

        side = data.get("side")
        return PointEntry(
            id=str(entry_id),
            match_id=str(data.get("match_id") or ""),
            recorded_at=str(data.get("recorded_at") or ""),
            team=str(data.get("team") or ""),
            scorer=str(data.get("scorer") or ""),
            assist=str(data.get("assist") or ""),
            side=side if side in SIDES else None,
        )

    def export_record(self, fallback_match_id: str = "") -> dict:
        """Record shape shared by the CSV export and the submission payload."""
        return {
            "GameID": self.match_id or fallback_match_id,
            "Time": self.recorded_at,
            "Team": self.team,
            "Score": self.scorer,
            "Assist": self.assist,
        }
