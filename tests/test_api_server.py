"""
Tests for the FastAPI server: /health, /dev routes, admin refresh.

Uses the TestClient from conftest (temp SQLite, scheduler off, admin key set).
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from backend_devscore.api_server.server import create_app
from backend_devscore.config import Settings

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "database": "ok"}


def test_score_unknown_dev_returns_default(client):
    r = client.get("/dev/UnknownWallet111/score")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert data["address"] == "UnknownWallet111"
    assert data["score"] == 50
    assert data["rank"] == 0
    assert data["tier"] == "unranked"
    assert data["verified"] is False
    assert data["stats"]["total_launches"] == 0
    assert data["stats"]["total_volume"] == "0"
    assert data["history"] == []


def test_score_known_dev(client, add_dev, add_token, now):
    add_dev("d1", "WalletA", score=80, tier="platinum", verified=1, total_launches=4, successful_launches=3)
    add_dev("d2", "WalletB", score=90, tier="diamond")
    add_token("d1", symbol="OLD", created_at=now - 100)
    add_token("d1", symbol="NEW", created_at=now)

    r = client.get("/dev/WalletA/score")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["address"] == "WalletA"
    assert data["score"] == 80
    assert data["rank"] == 2
    assert data["tier"] == "platinum"
    assert data["verified"] is True
    assert data["stats"]["win_rate"] == 0.75
    assert [t["symbol"] for t in data["history"]] == ["NEW", "OLD"]


def test_leaderboard_sorting_and_meta(client, add_dev):
    add_dev("a", "WA", score=60, total_launches=1, total_volume="10")
    add_dev("b", "WB", score=90, total_launches=5, total_volume="5")
    add_dev("c", "WC", score=75, total_launches=2, total_volume="1000")
    add_dev("z", "WZ", score=99, total_launches=0)  # excluded: no launches

    r = client.get("/dev/leaderboard")
    assert r.status_code == 200
    body = r.json()
    assert [d["address"] for d in body["data"]] == ["WB", "WC", "WA"]
    assert body["meta"] == {"page": 1, "limit": 20, "total": 3}

    r = client.get("/dev/leaderboard", params={"sort_by": "total_volume"})
    assert [d["address"] for d in r.json()["data"]] == ["WC", "WA", "WB"]

    r = client.get("/dev/leaderboard", params={"sort_by": "score; DROP TABLE devs"})
    assert [d["address"] for d in r.json()["data"]] == ["WB", "WC", "WA"]


def test_leaderboard_win_rate(client, add_dev):
    add_dev("a", "WA", total_launches=4, successful_launches=1)
    data = client.get("/dev/leaderboard").json()["data"]
    assert data[0]["win_rate"] == 0.25


def test_leaderboard_pagination_and_limit_cap(client, add_dev):
    for i in range(5):
        add_dev(f"d{i}", f"W{i}", score=50 + i, total_launches=1)
    r = client.get("/dev/leaderboard", params={"page": 2, "limit": 2})
    body = r.json()
    assert [d["address"] for d in body["data"]] == ["W2", "W1"]
    assert body["meta"] == {"page": 2, "limit": 2, "total": 5}

    r = client.get("/dev/leaderboard", params={"limit": 500})
    assert r.json()["meta"]["limit"] == 100


def test_leaderboard_chain_filter(client, add_dev, add_token):
    add_dev("s", "WS", total_launches=1)
    add_dev("b", "WBase", total_launches=1)
    add_token("s", chain="solana")
    add_token("b", chain="base")
    body = client.get("/dev/leaderboard", params={"chain": "base"}).json()
    assert [d["address"] for d in body["data"]] == ["WBase"]
    assert body["meta"]["total"] == 1


def test_dev_tokens_paginated(client, add_dev, add_token, now):
    add_dev("d1", "WalletA")
    for i in range(3):
        add_token("d1", symbol=f"T{i}", created_at=now + i)
    r = client.get("/dev/WalletA/tokens", params={"page": 1, "limit": 2})
    assert r.status_code == 200
    assert [t["symbol"] for t in r.json()["data"]] == ["T2", "T1"]
    r = client.get("/dev/WalletA/tokens", params={"page": 2, "limit": 2})
    assert [t["symbol"] for t in r.json()["data"]] == ["T0"]


def test_dev_tokens_unknown_dev_empty(client):
    r = client.get("/dev/Nobody/tokens")
    assert r.status_code == 200
    assert r.json()["data"] == []


def test_refresh_requires_admin_key(client, add_dev):
    add_dev("d1", "WalletA")
    r = client.post("/dev/WalletA/refresh")
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": {"code": "UNAUTHORIZED", "message": "Invalid admin key"}}
    r = client.post("/dev/WalletA/refresh", headers={"X-Admin-Key": "wrong"})
    assert r.status_code == 401


def test_refresh_dev(client, add_dev, add_token):
    add_dev("d1", "WalletA", verified=1)
    add_token("d1", market_cap="100", ath_market_cap="400")
    r = client.post("/dev/WalletA/refresh", headers=ADMIN_HEADERS)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["dev_id"] == "d1"
    assert data["refreshed"] is True
    assert data["score"] == 80
    assert data["tier"] == "platinum"
    assert data["breakdown"]["win_rate_bonus"] == 20
    assert data["breakdown"]["verification_bonus"] == 10

    profile = client.get("/dev/WalletA/score").json()["data"]
    assert profile["score"] == 80
    assert profile["stats"]["total_launches"] == 1


def test_refresh_dev_without_tokens(client, add_dev):
    add_dev("d1", "WalletA")
    r = client.post("/dev/WalletA/refresh", headers=ADMIN_HEADERS)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["refreshed"] is False
    assert data["score"] is None


def test_refresh_unknown_dev_404(client):
    r = client.post("/dev/Nobody/refresh", headers=ADMIN_HEADERS)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "DEV_NOT_FOUND"


def test_admin_refresh_all(client, add_dev, add_token):
    add_dev("a", "WA")
    add_dev("b", "WB")
    add_token("a", status="rugged", market_cap="1", ath_market_cap="1")
    add_token("b", market_cap="1", ath_market_cap="10")
    r = client.post("/admin/dev-scores/refresh", headers=ADMIN_HEADERS)
    assert r.status_code == 200
    assert r.json() == {"success": True, "data": {"refreshed": True}}
    assert client.get("/dev/WA/score").json()["data"]["score"] == 35
    assert client.get("/dev/WB/score").json()["data"]["score"] == 70


def test_admin_disabled_without_key(storage, db_url):
    settings = Settings(database_url=db_url, admin_api_key=None, scheduler_enabled=False)
    with TestClient(create_app(storage=storage, settings=settings)) as c:
        r = c.post("/admin/dev-scores/refresh", headers={"X-Admin-Key": "anything"})
    assert r.status_code == 503
    assert r.json()["error"]["code"] == "ADMIN_DISABLED"


def test_lifespan_starts_and_stops_scheduler(storage, db_url):
    settings = Settings(database_url=db_url, scheduler_enabled=True, refresh_interval_sec=3600)
    with TestClient(create_app(storage=storage, settings=settings)) as c:
        assert c.get("/health").status_code == 200


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/no/such/route")
    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"


def test_invalid_query_param_uses_error_envelope(client):
    r = client.get("/dev/leaderboard", params={"page": "abc"})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["message"].startswith("page:")


def test_wrong_method_uses_error_envelope(client):
    r = client.get("/admin/dev-scores/refresh")
    assert r.status_code == 405
    assert r.json()["error"]["code"] == "HTTP_ERROR"
