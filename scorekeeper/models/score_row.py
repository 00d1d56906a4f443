"""Dataclasses representing the derived score table."""

from dataclasses import dataclass, asdict


@dataclass
class ScoreRow:
    """Display projection of one point; rebuilt from the log, never stored."""

    point_id: str
    index: int
    marker: str
    side: str
    team: str
    scorer: str
    assist: str
    tally: str

    def to_json(self) -> dict:
        return asdict(self)
