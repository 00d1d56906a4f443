"""Cached team rosters with their own expiry."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..utils.constants import ROSTER_CACHE_TTL_MS


@dataclass
class RosterCache:
    """
    Team to players mapping fetched from the roster source.

    Attributes:
        teams: Players keyed by team name
        fetched_at: Epoch ms of the fetch
        expires_at: Epoch ms after which the cache is ignored
    """
    teams: Dict[str, List[str]] = field(default_factory=dict)
    fetched_at: int = 0
    expires_at: int = 0

    @staticmethod
    def create(teams: Dict[str, List[str]], fetched_at: int) -> "RosterCache":
        return RosterCache(
            teams=teams,
            fetched_at=fetched_at,
            expires_at=fetched_at + ROSTER_CACHE_TTL_MS,
        )

    def is_expired(self, now: int) -> bool:
        return now > self.expires_at

    def to_json(self) -> dict:
        return {
            "data": self.teams,
            "timestamp": self.fetched_at,
            "expires_at": self.expires_at,
        }

    @staticmethod
    def from_json(data: object) -> Optional["RosterCache"]:
        """Rebuild a cache record; returns None for anything unrecognizable."""
        if not isinstance(data, dict) or not isinstance(data.get("data"), dict):
            return None
        try:
            fetched_at = int(data.get("timestamp") or 0)
            expires_at = int(data.get("expires_at") or 0)
        except (TypeError, ValueError):
            return None

        teams = {
            name: [str(p) for p in players]
            for name, players in data["data"].items()
            if isinstance(name, str) and isinstance(players, list)
        }
        return RosterCache(teams=teams, fetched_at=fetched_at, expires_at=expires_at)
