"""
Recommendation API tests.

Runs the FastAPI app in-process (TestClient) with an in-memory store, so no
server or Firestore is needed.

Run:
----
    pytest roro_server/tests -v
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from roro_engine.storage import InMemoryExperimentStore
from roro_server.app import create_app
from roro_server.config import ServerConfig
from roro_server.identity import SESSION_COOKIE
from roro_server.state import AppState, set_state


@pytest.fixture
def client():
    set_state(AppState(ServerConfig(), store=InMemoryExperimentStore()))
    yield TestClient(create_app())
    set_state(None)


def _days_ago(days: int) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


def _payload(**overrides):
    payload = {
        "candidates": [
            {
                "id": 2,
                "name": "Osaka Museum Night",
                "category": "museum",
                "favorite_count": 2,
                "click_count": 1,
                "region": "Osaka",
                "event_date": _days_ago(40),
            },
            {
                "id": 1,
                "name": "Tokyo Hotel Fair",
                "category": "hotel",
                "favorite_count": 10,
                "click_count": 5,
                "region": "Tokyo",
                "event_date": _days_ago(5),
            },
        ],
        "viewer": {"favorited_categories": ["hotel"], "home_region": "Tokyo"},
    }
    payload.update(overrides)
    return payload


class TestRoot:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["store"] == "InMemoryExperimentStore"
        assert "/api/recommendations" in body["endpoints"]["recommendations"]

    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "healthy"
        assert body["store"]["available"] is True


class TestRecommendations:
    def test_default_mode_ranks_hotel_first(self, client):
        r = client.post("/api/recommendations", json=_payload())
        assert r.status_code == 200
        body = r.json()
        assert body["mode"] == "default"
        assert [item["id"] for item in body["results"]] == ["1", "2"]
        assert body["results"][0]["score"] > body["results"][1]["score"]
        assert body["results"][1]["reasons"] == ["fallback"]
        assert sum(body["weights"].values()) == pytest.approx(1.0)

    def test_issues_session_cookie(self, client):
        r = client.post("/api/recommendations", json=_payload())
        assert SESSION_COOKIE in r.cookies

    def test_weights_select_configurable_mode(self, client):
        r = client.post("/api/recommendations", json=_payload(weights={"w_popularity": "3", "w_recency": "1"}))
        body = r.json()
        assert body["mode"] == "configurable"
        assert sum(body["weights"].values()) == pytest.approx(1.0)
        assert body["weights"]["popularity"] > body["weights"]["recency"]

    def test_unusable_weights_fall_back_to_defaults(self, client):
        body = client.post("/api/recommendations", json=_payload(weights={"popularity": -1})).json()
        assert body["mode"] == "configurable"
        assert all(w == pytest.approx(0.2) for w in body["weights"].values())

    def test_empty_weights_still_select_configurable_mode(self, client):
        body = client.post("/api/recommendations", json=_payload(weights={})).json()
        assert body["mode"] == "configurable"
        assert client.post("/api/recommendations", json=_payload()).json()["mode"] == "default"

    def test_authenticated_viewer_reason(self, client):
        r = client.post("/api/recommendations", json=_payload(), headers={"X-User-Id": "42"})
        for item in r.json()["results"]:
            assert item["reasons"][0] == "not_yet_favorited"

    def test_english_reason(self, client):
        body = client.post("/api/recommendations", json=_payload(locale="en")).json()
        assert body["results"][0]["reason"].startswith("Recommended because it is")

    def test_excluded_items(self, client):
        payload = _payload()
        payload["viewer"]["excluded_item_ids"] = [1]
        body = client.post("/api/recommendations", json=payload).json()
        assert [item["id"] for item in body["results"]] == ["2"]

    def test_limit_clamped_to_max(self, client):
        candidates = [{"id": i, "name": f"event {i:03d}", "favorite_count": i} for i in range(80)]
        body = client.post("/api/recommendations", json={"candidates": candidates, "limit": 500}).json()
        assert len(body["results"]) == 50

    def test_default_limit(self, client):
        candidates = [{"id": i, "name": f"event {i:03d}"} for i in range(20)]
        body = client.post("/api/recommendations", json={"candidates": candidates}).json()
        assert len(body["results"]) == 5

    def test_zero_limit(self, client):
        body = client.post("/api/recommendations", json=_payload(limit=0)).json()
        assert body["results"] == []

    def test_empty_candidates(self, client):
        body = client.post("/api/recommendations", json={}).json()
        assert body["results"] == []

    def test_invalid_candidate_rejected(self, client):
        r = client.post("/api/recommendations", json={"candidates": [{"id": "1", "favorite_count": -3}]})
        assert r.status_code == 422


class TestHits:
    def test_duplicate_click_suppressed(self, client):
        first = client.post("/api/recommendations/hit", json={"item_id": 101}).json()
        second = client.post("/api/recommendations/hit", json={"item_id": "101"}).json()
        assert first == {"ok": True, "stored": True, "duplicate": False, "suppressed_window_sec": 10.0}
        assert second["duplicate"] is True
        assert second["stored"] is False

    def test_different_sessions_both_stored(self, client):
        client.post("/api/recommendations/hit", json={"item_id": "101"})
        with TestClient(client.app) as other:
            assert other.post("/api/recommendations/hit", json={"item_id": "101"}).json()["stored"]

    def test_blank_item_rejected(self, client):
        r = client.post("/api/recommendations/hit", json={"item_id": "  "})
        assert r.status_code == 400
        assert r.json()["ok"] is False

    def test_report_counts_clicks(self, client):
        client.post("/api/recommendations/hit", json={"item_id": "101"})
        client.post("/api/recommendations/hit", json={"item_id": "202"})
        client.post("/api/recommendations/hit", json={"item_id": "202"}, headers={"X-User-Id": "9"})
        body = client.get("/api/recommendations/report").json()
        assert body["ok"] is True
        assert [(r["item_id"], r["clicks"]) for r in body["rows"]] == [("202", 2), ("101", 1)]

    def test_report_bad_dates_use_defaults(self, client):
        body = client.get("/api/recommendations/report", params={"since": "garbage"}).json()
        assert body["ok"] is True
        assert body["rows"] == []
