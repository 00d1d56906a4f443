"""Tests for roster fetching, parsing and the 24 hour cache."""
from unittest.mock import Mock

import pytest
import requests

from scorekeeper.models import RosterCache
from scorekeeper.services import RosterFetchError, RosterService
from scorekeeper.services.roster_service import normalize_teams
from scorekeeper.utils import STORAGE_KEYS
from scorekeeper.utils.constants import MS_PER_HOUR

ROSTER_URL = "https://example.test/rosters"


def _response(content_type: str, text: str = "", payload=None) -> Mock:
    response = Mock()
    response.headers = {"Content-Type": content_type}
    response.text = text
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def _service(store, response=None, error=None, url=ROSTER_URL) -> RosterService:
    http = Mock()
    if error is not None:
        http.get.side_effect = error
    else:
        http.get.return_value = response
    return RosterService(store, roster_url=url, timeout_seconds=2, http=http)


def test_json_roster_is_fetched_and_cached(store, clock) -> None:
    payload = {"Hawks": ["Ann", " Bea ", ""], "Owls": ["Cal"], "": ["ignored"]}
    service = _service(store, _response("application/json; charset=utf-8", payload=payload))

    result = service.load_teams()

    assert result.source == "network"
    assert result.warning is None
    assert result.teams == {"Hawks": ["Ann", "Bea"], "Owls": ["Cal"]}
    cached = RosterCache.from_json(store.get(STORAGE_KEYS["TEAMS_DATA"]))
    assert cached.teams == result.teams
    assert cached.expires_at == clock.now + 24 * MS_PER_HOUR
    service.http.get.assert_called_once()
    assert service.http.get.call_args.kwargs["timeout"] == 2


def test_csv_roster_is_column_oriented(store, clock) -> None:
    text = "Hawks,Owls,\r\nAnn,Cal,x\r\nBea,,y\r\n,Dee,\r\n"
    service = _service(store, _response("text/csv", text=text))

    teams = service.fetch_teams()

    assert teams == {"Hawks": ["Ann", "Bea"], "Owls": ["Cal", "Dee"]}


def test_network_failure_falls_back_to_cache(store, clock) -> None:
    store.put(STORAGE_KEYS["TEAMS_DATA"], RosterCache.create({"Hawks": ["Ann"]}, clock.now).to_json())
    service = _service(store, error=requests.ConnectionError("offline"))

    result = service.load_teams()

    assert result.source == "cache"
    assert result.teams == {"Hawks": ["Ann"]}
    assert "cached team list" in result.warning
    assert service.players_for("Hawks") == ["Ann"]


def test_network_failure_without_cache_warns(store, clock) -> None:
    service = _service(store, error=requests.Timeout("slow"))

    result = service.load_teams()

    assert result.source == "none"
    assert result.teams == {}
    assert result.warning.startswith("Failed to load teams")


def test_expired_cache_is_removed(store, backend, clock) -> None:
    old = RosterCache.create({"Hawks": ["Ann"]}, clock.now - 25 * MS_PER_HOUR)
    store.put(STORAGE_KEYS["TEAMS_DATA"], old.to_json())
    service = _service(store, url=None)

    result = service.load_teams()

    assert result.source == "none"
    assert STORAGE_KEYS["TEAMS_DATA"] not in backend.keys()


def test_http_error_status_is_a_fetch_error(store, clock) -> None:
    response = _response("application/json")
    response.raise_for_status.side_effect = requests.HTTPError("503 Service Unavailable")
    service = _service(store, response)

    with pytest.raises(RosterFetchError, match="503"):
        service.fetch_teams()


def test_invalid_json_is_a_fetch_error(store, clock) -> None:
    response = _response("application/json")
    response.json.side_effect = ValueError("Expecting value")
    service = _service(store, response)

    with pytest.raises(RosterFetchError):
        service.fetch_teams()


def test_clear_cache(store, backend, clock) -> None:
    service = _service(store, _response("application/json", payload={"Hawks": []}))
    service.load_teams()

    service.clear_cache()

    assert service.teams == {}
    assert STORAGE_KEYS["TEAMS_DATA"] not in backend.keys()


def test_normalize_teams_rejects_non_mapping() -> None:
    with pytest.raises(RosterFetchError):
        normalize_teams(["Hawks"])
    assert normalize_teams({"Hawks": "Ann", "Owls": [None, 7]}) == {"Owls": ["7"]}
