"""
Roster service for the Reload-Proof Scorekeeper application.

This module fetches team rosters from the external roster source, accepting
either a JSON mapping or a column-oriented CSV sheet, and keeps a 24 hour
cache of the last good result in the KeyValueStore.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests

from .exceptions import RosterFetchError
from .key_value_store import KeyValueStore
from ..models import RosterCache
from ..utils import STORAGE_KEYS, csv_to_teams_map, now_ms, parse_csv
from ..utils.constants import DEFAULT_HTTP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

TeamsMap = Dict[str, List[str]]


@dataclass
class RosterLoadResult:
    """Outcome of loading teams at startup or on refresh."""
    teams: TeamsMap = field(default_factory=dict)
    source: str = "none"  # "network", "cache" or "none"
    warning: Optional[str] = None


def normalize_teams(data: object) -> TeamsMap:
    """
    Coerce a decoded JSON payload into ``{team: [players]}``.

    Entries with blank names or non-list values are dropped; player values
    are stringified and blanks skipped.
    """
    if not isinstance(data, dict):
        raise RosterFetchError("Roster JSON must be an object of team -> players")

    teams: TeamsMap = {}
    for name, players in data.items():
        if not isinstance(name, str) or not name.strip():
            continue
        if not isinstance(players, list):
            logger.warning("Dropping malformed roster entry for %s", name)
            continue
        teams[name.strip()] = [
            str(player).strip()
            for player in players
            if player is not None and str(player).strip()
        ]
    return teams


class RosterService:
    """Fetches team rosters and caches them independently of the session."""

    def __init__(
        self,
        store: KeyValueStore,
        roster_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        http: Optional[requests.Session] = None,
    ):
        self.store = store
        self.roster_url = roster_url
        self.timeout_seconds = timeout_seconds
        self.http = http or requests.Session()
        self.teams: TeamsMap = {}

    def fetch_teams(self) -> TeamsMap:
        """
        Fetch the current rosters from the roster source.

        Raises:
            RosterFetchError: If the source is unset, unreachable, or returns
                              something that cannot be read as rosters
        """
        if not self.roster_url:
            raise RosterFetchError("No roster URL configured")

        try:
            response = self.http.get(
                self.roster_url,
                timeout=self.timeout_seconds,
                headers={"Cache-Control": "no-cache"},
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise RosterFetchError(f"Failed to fetch teams: {e}") from e

        content_type = response.headers.get("Content-Type", "")
        if "application/json" in content_type or self.roster_url.endswith(".json"):
            try:
                return normalize_teams(response.json())
            except ValueError as e:
                raise RosterFetchError(f"Roster source returned invalid JSON: {e}") from e

        return csv_to_teams_map(parse_csv(response.text))

    def load_teams(self) -> RosterLoadResult:
        """
        Load teams, always preferring a fresh fetch.

        Falls back to a non-expired cache, then to an empty mapping with a
        warning the UI should show.
        """
        try:
            teams = self.fetch_teams()
        except RosterFetchError as e:
            return self.fall_back_to_cache(e)
        return self.accept_teams(teams)

    def accept_teams(self, teams: TeamsMap) -> RosterLoadResult:
        """Adopt freshly fetched teams and refresh the cache."""
        self.save_teams(teams)
        return RosterLoadResult(teams=teams, source="network")

    def fall_back_to_cache(self, error: RosterFetchError) -> RosterLoadResult:
        """Use the cached teams after a failed fetch, or none at all."""
        logger.warning("Primary team loading failed, attempting cache: %s", error)
        cached = self.load_cached_teams()
        if cached:
            self.teams = cached
            return RosterLoadResult(
                teams=cached,
                source="cache",
                warning="Using cached team list due to network error.",
            )
        self.teams = {}
        return RosterLoadResult(warning=f"Failed to load teams: {error}")

    def save_teams(self, teams: TeamsMap) -> bool:
        """Replace the in-memory teams and the cache wholesale."""
        self.teams = teams
        cache = RosterCache.create(teams, now_ms())
        return self.store.put(STORAGE_KEYS["TEAMS_DATA"], cache.to_json())

    def load_cached_teams(self) -> TeamsMap:
        """Return cached teams, removing the cache if it has expired."""
        cache = RosterCache.from_json(self.store.get(STORAGE_KEYS["TEAMS_DATA"]))
        if cache is None:
            return {}
        if cache.is_expired(now_ms()):
            self.store.remove(STORAGE_KEYS["TEAMS_DATA"])
            return {}
        return cache.teams

    def clear_cache(self) -> None:
        self.teams = {}
        self.store.remove(STORAGE_KEYS["TEAMS_DATA"])

    def players_for(self, team_name: str) -> List[str]:
        return list(self.teams.get(team_name, []))
