import pytest

pytest.importorskip("httpx", reason="httpx is required by the FastAPI test client")

from fastapi.testclient import TestClient

from app.config.settings import settings
from app.main import app
from app.services.game_store import GAME_STORE

client = TestClient(app)


def _configure(egg_id, reward, winning_rate):
    GAME_STORE.update_egg(egg_id, reward, winning_rate)


def test_root_and_health():
    assert client.get("/").json()["ok"] is True

    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    echo = client.get("/api/test").json()
    assert echo["success"] is True
    assert echo["method"] == "GET"
    assert echo["url"] == "/api/test"


def test_game_state_initial():
    response = client.get("/api/game-state")
    assert response.status_code == 200
    payload = response.json()

    assert payload["brokenEggs"] == []
    assert payload["progress"] == 0
    assert len(payload["eggs"]) == settings.TOTAL_EGGS
    assert {"id", "broken", "reward", "winningRate", "manuallyBroken", "allowed"} <= set(payload["eggs"][0])
    assert "linkId" not in payload


def test_break_egg_flow():
    _configure(1, 250, 100)

    response = client.post("/api/break-egg", json={"eggId": 1})
    assert response.status_code == 200
    assert response.json() == {"eggId": 1, "reward": 250, "won": True, "success": True}

    again = client.post("/api/break-egg", json={"eggId": 1})
    assert again.status_code == 400
    assert "already broken" in again.json()["message"]

    state = client.get("/api/game-state").json()
    assert state["brokenEggs"] == [1]
    assert state["progress"] == pytest.approx(100 / settings.TOTAL_EGGS)


@pytest.mark.parametrize("egg_id", [0, -3, settings.TOTAL_EGGS + 1])
def test_break_egg_rejects_out_of_range_id(egg_id):
    response = client.post("/api/break-egg", json={"eggId": egg_id})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid egg ID"


@pytest.mark.parametrize("body", [{}, {"eggId": "abc"}, {"egg": 1}])
def test_break_egg_rejects_malformed_body(body):
    response = client.post("/api/break-egg", json=body)
    assert response.status_code == 400
    assert response.json()["message"]


def test_break_egg_through_link_reveals_and_consumes():
    _configure(2, "Free pizza", 100)
    _configure(3, 70, 0)
    link = GAME_STORE.create_custom_link(subdomain="promo", egg_id=2)

    state = client.get("/api/game-state", params={"linkId": link.id}).json()
    assert state["linkId"] == link.id
    assert state["allowedEggId"] == 2
    assert state["linkUsed"] is False

    response = client.post("/api/break-egg", json={"eggId": 2, "linkId": link.id})
    assert response.status_code == 200
    payload = response.json()
    assert payload["reward"] == "Free pizza"
    revealed = {egg["id"]: egg for egg in payload["eggs"]}
    assert revealed[2]["broken"] is True
    assert revealed[3]["reward"] == 0

    reused = client.post("/api/break-egg", json={"eggId": 4, "linkId": link.id})
    assert reused.status_code == 400
    assert "already been used" in reused.json()["message"]

    state = client.get("/api/game-state", params={"linkId": link.id}).json()
    assert state["linkUsed"] is True
    assert all(egg["reward"] == 0 for egg in state["eggs"] if egg["id"] != 2)


def test_unknown_link_is_404():
    assert client.get("/api/game-state", params={"linkId": 77}).status_code == 404

    response = client.post("/api/break-egg", json={"eggId": 1, "linkId": 77})
    assert response.status_code == 404
    assert "does not exist" in response.json()["message"]


def test_claim_rewards():
    empty = client.post("/api/claim-rewards")
    assert empty.status_code == 400
    assert empty.json() == {"message": "No rewards to claim"}

    _configure(5, 300, 100)
    client.post("/api/break-egg", json={"eggId": 5})

    claimed = client.post("/api/claim-rewards")
    assert claimed.status_code == 200
    assert claimed.json() == {"totalReward": 300, "success": True}

    board = client.get("/api/leaderboard").json()
    assert any(entry["score"] == 300 for entry in board)
    scores = [entry["score"] for entry in board]
    assert scores == sorted(scores, reverse=True)

    assert client.get("/api/game-state").json()["brokenEggs"] == []


def test_reset_game_preserves_configuration():
    _configure(6, "Voucher", 35)
    GAME_STORE.set_egg_broken(6, True)
    client.post("/api/break-egg", json={"eggId": 7})

    response = client.post("/api/reset-game")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    eggs = {egg["id"]: egg for egg in client.get("/api/admin/eggs").json()}
    assert not any(egg["broken"] for egg in eggs.values())
    assert eggs[6]["reward"] == "Voucher"
    assert eggs[6]["winningRate"] == 35
