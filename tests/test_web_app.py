"""Tests for the Flask JSON API."""
import pytest

from scorekeeper.models import SessionSnapshot
from scorekeeper.ui.web_app import create_app
from scorekeeper.utils import STORAGE_KEYS
from scorekeeper.utils.constants import MS_PER_HOUR


@pytest.fixture
def controller(make_controller):
    controller = make_controller()
    controller.initialize()
    return controller


@pytest.fixture
def client(controller):
    app = create_app(controller)
    app.config["TESTING"] = True
    return app.test_client()


def _add(client, side="A", scorer="Ann", assist="Bea"):
    return client.post("/api/points", json={"side": side, "scorer": scorer, "assist": assist})


def test_state_endpoint(client) -> None:
    response = client.get("/api/state")
    data = response.get_json()

    assert response.status_code == 200
    assert data["success"] is True
    assert data["timer"]["display"] == "100:00"
    assert data["interval"]["display"] == "01:30"
    assert data["rows"] == []
    assert data["restore_pending"] is False


def test_add_edit_delete_point(client) -> None:
    response = _add(client)
    assert response.status_code == 200
    point_id = response.get_json()["row"]["point_id"]

    response = client.put(f"/api/points/{point_id}", json={"scorer": "Cal", "assist": "Dee"})
    assert response.get_json()["success"] is True

    state = client.get("/api/state").get_json()
    assert state["team_a"]["score"] == 1
    assert state["rows"][0]["scorer"] == "Cal"

    response = client.delete(f"/api/points/{point_id}")
    assert response.status_code == 200
    assert client.get("/api/state").get_json()["team_a"]["score"] == 0


def test_validation_errors_are_400(client) -> None:
    response = _add(client, assist="")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Please select both scorer and assist."

    response = client.post("/api/match/possession", json={"start": "X"})
    assert response.status_code == 400


def test_unknown_point_is_404(client) -> None:
    response = client.put("/api/points/missing", json={"scorer": "a", "assist": "b"})
    assert response.status_code == 404
    assert response.get_json()["message"] == "Could not find score to update."


def test_point_options(client) -> None:
    client.post("/api/match/roster", json={"side": "B", "players": "Cal\nDee"})
    data = client.get("/api/points/options/b").get_json()
    assert data["scorers"] == ["Cal", "Dee", "N/A"]
    assert data["assists"][-1] == "‼️CALLAHAN‼️"


def test_timer_routes(client) -> None:
    data = client.post("/api/timer/toggle").get_json()
    assert data["timer"]["is_running"] is True

    data = client.post("/api/timer/reset", json={"minutes": 45}).get_json()
    assert data["timer"]["is_running"] is False
    assert data["timer"]["remaining_seconds"] == 45 * 60

    data = client.post("/api/interval/reset", json={"seconds": 60}).get_json()
    assert data["timer"]["display"] == "01:00"

    assert client.post("/api/timer/rewind").status_code == 404


def test_export_csv_download(client) -> None:
    client.post("/api/match/teams", json={"side": "A", "team": "Hawks"})
    client.post("/api/match/teams", json={"side": "B", "team": "Owls"})
    _add(client, scorer='Smith, "Ace"')

    response = client.get("/api/match/export.csv")

    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert 'filename="Hawks vs Owls.csv"' in response.headers["Content-Disposition"]
    body = response.get_data(as_text=True)
    assert body.startswith("GameID,Time,Team,Score,Assist\r\n")
    assert '"Smith, ""Ace"""' in body


def test_finish_match(client, sink) -> None:
    assert client.post("/api/match/finish").status_code == 400

    _add(client)
    data = client.post("/api/match/finish").get_json()

    assert data["success"] is True
    assert data["submitted"] is True
    assert len(sink.payloads) == 1
    assert client.get("/api/state").get_json()["rows"] == []


def test_lifecycle_and_storage(client, controller) -> None:
    _add(client)
    assert client.post("/api/lifecycle/hidden").get_json()["saved"] is True
    assert client.post("/api/lifecycle/unload").get_json()["unsaved_warning"] is True

    usage = client.get("/api/storage").get_json()["storage"]
    assert usage["item_count"] > 0

    cleared = client.post("/api/storage/clear").get_json()["storage"]
    assert cleared["item_count"] == 0
    assert controller.store.get(STORAGE_KEYS["GAME_STATE"]) is None


def test_reset_route(client) -> None:
    _add(client)
    assert client.post("/api/match/reset", json={}).get_json()["success"] is True
    assert client.get("/api/state").get_json()["rows"] == []


def test_restore_flow_over_http(make_controller, store, clock) -> None:
    store.put(
        STORAGE_KEYS["GAME_STATE"],
        SessionSnapshot(team_a_name="Hawks", saved_at=clock.now - MS_PER_HOUR).to_json(),
    )
    controller = make_controller()
    controller.initialize()
    client = create_app(controller).test_client()

    assert client.get("/api/state").get_json()["restore_pending"] is True
    response = _add(client)
    assert response.status_code == 409
    assert client.post("/api/timer/start").status_code == 409
    assert client.post("/api/match/finish").status_code == 409

    assert client.post("/api/session/restore", json={}).status_code == 400
    data = client.post("/api/session/restore", json={"restore": True}).get_json()
    assert data["startup"]["restore_outcome"] == "restored"

    assert _add(client).status_code == 200
    assert client.get("/api/state").get_json()["team_a"]["name"] == "Hawks"
