import pytest

pytest.importorskip("httpx", reason="httpx is required by the FastAPI test client")

from fastapi.testclient import TestClient

from app.config.settings import settings
from app.main import app

client = TestClient(app)


def test_list_eggs_uses_camel_case():
    response = client.get("/api/admin/eggs")
    assert response.status_code == 200
    eggs = response.json()
    assert len(eggs) == settings.TOTAL_EGGS
    assert set(eggs[0]) == {"id", "reward", "winningRate", "broken", "manuallyBroken"}


@pytest.mark.parametrize("path", ["/api/admin/update-egg", "/api/admin/eggs"])
def test_update_egg(path):
    response = client.post(path, json={"eggId": 3, "reward": "Spa weekend", "winningRate": 12.5})
    assert response.status_code == 200
    egg = response.json()
    assert egg["reward"] == "Spa weekend"
    assert egg["winningRate"] == 12.5

    stored = {e["id"]: e for e in client.get("/api/admin/eggs").json()}[3]
    assert stored["reward"] == "Spa weekend"


@pytest.mark.parametrize("rate", [-1, 101, 1000])
def test_update_egg_rejects_winning_rate_out_of_range(rate):
    before = {e["id"]: e for e in client.get("/api/admin/eggs").json()}[1]

    response = client.post("/api/admin/update-egg", json={"eggId": 1, "reward": 100, "winningRate": rate})
    assert response.status_code == 400
    assert "winningRate" in response.json()["message"]

    after = {e["id"]: e for e in client.get("/api/admin/eggs").json()}[1]
    assert after == before


def test_update_unknown_egg_is_404():
    response = client.post("/api/admin/update-egg", json={"eggId": 50, "reward": 100, "winningRate": 50})
    assert response.status_code == 404
    assert response.json()["message"] == "Egg with ID 50 does not exist"


def test_set_egg_broken():
    response = client.post("/api/admin/set-egg-broken", json={"eggId": 4, "broken": True})
    assert response.status_code == 200
    assert response.json()["manuallyBroken"] is True

    state = client.get("/api/game-state").json()
    assert state["brokenEggs"] == [4]

    blocked = client.post("/api/break-egg", json={"eggId": 4})
    assert blocked.status_code == 400

    client.post("/api/admin/set-egg-broken", json={"eggId": 4, "broken": False})
    assert client.get("/api/game-state").json()["brokenEggs"] == []


def test_link_lifecycle():
    created = client.post(
        "/api/admin/links",
        json={"subdomain": "spring", "eggId": 2, "path": "/win", "protocol": "http"},
    )
    assert created.status_code == 201
    link = created.json()
    assert link["used"] is False
    assert link["active"] is True
    assert link["eggId"] == 2
    assert link["fullUrl"] == f"http://spring.{settings.DEFAULT_DOMAIN}/win?linkId={link['id']}"
    assert settings.MIN_REWARD <= link["reward"] <= settings.MAX_REWARD
    assert "createdAt" in link

    alias = client.post("/api/admin/create-link", json={"subdomain": "autumn", "domain": "example.com", "eggId": 3})
    assert alias.status_code == 201
    assert alias.json()["fullUrl"].startswith("https://autumn.example.com")

    listed = client.get("/api/admin/links").json()
    assert [entry["subdomain"] for entry in listed] == ["spring", "autumn"]
    assert client.get(f"/api/admin/links/{link['id']}").json()["subdomain"] == "spring"

    deleted = client.delete(f"/api/admin/links/{link['id']}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}

    missing = client.delete(f"/api/admin/links/{link['id']}")
    assert missing.status_code == 404
    assert "message" in missing.json()


@pytest.mark.parametrize(
    "body,status",
    [
        ({"subdomain": "x", "eggId": 1, "protocol": "ftp"}, 400),
        ({"subdomain": "no spaces", "eggId": 1}, 400),
        ({"subdomain": "", "eggId": 1}, 400),
        ({"subdomain": "ghost", "eggId": 99}, 404),
    ],
)
def test_create_link_rejects_bad_input(body, status):
    response = client.post("/api/admin/links", json=body)
    assert response.status_code == status
    assert response.json()["message"]


def test_admin_token(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_TOKEN", "s3cret")

    assert client.get("/api/admin/eggs").status_code == 401
    assert client.get("/api/admin/eggs", headers={"Authorization": "Bearer nope"}).status_code == 403

    ok = client.get("/api/admin/eggs", headers={"Authorization": "Bearer s3cret"})
    assert ok.status_code == 200

    # player routes stay public
    assert client.get("/api/game-state").status_code == 200


@pytest.mark.parametrize("reward", [True, False])
def test_update_egg_rejects_boolean_reward(reward):
    before = {e["id"]: e for e in client.get("/api/admin/eggs").json()}[1]

    response = client.post("/api/admin/update-egg", json={"eggId": 1, "reward": reward, "winningRate": 100})
    assert response.status_code == 400
    assert "reward" in response.json()["message"]

    after = {e["id"]: e for e in client.get("/api/admin/eggs").json()}[1]
    assert after == before


def test_update_egg_rejects_infinite_reward():
    response = client.post(
        "/api/admin/update-egg",
        content='{"eggId": 1, "reward": Infinity, "winningRate": 100}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Reward must be a finite number"
