"""Tests for the FastAPI API endpoints."""
from datetime import datetime
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

import session as sessions
from errors import AssistantError
from session import MonitoringSession

# Patch anthropic before importing api
with patch('anthropic.Anthropic'):
    from api import api, assistant_service, lifespan

NOW = datetime(2024, 6, 8, 12, 0)


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(api)


@pytest.fixture(autouse=True)
def fresh_session():
    """Install a deterministic session (no background ticker) for each test."""
    current = MonitoringSession(now=NOW, auto_tick=False)
    sessions.reset_session(current)
    yield current
    sessions.reset_session()


class TestShutdown:
    """The lifespan must not leave a ticker task behind."""

    @pytest.mark.asyncio
    async def test_lifespan_finishes_ticker(self):
        current = MonitoringSession(now=NOW)
        sessions.reset_session(current)
        current.playback.play()
        task = current.playback._ticker
        assert task is not None

        async with lifespan(api):
            pass

        assert task.done()
        assert current.playback.is_playing is False
        assert not current.playback.has_ticker


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestPlaybackEndpoints:
    """Tests for playback control endpoints."""

    def test_initial_state(self, client):
        response = client.get("/playback")
        assert response.status_code == 200
        playback = response.json()["playback"]
        assert playback["offset_hours"] == 0
        assert playback["total_hours"] == 168
        assert playback["is_playing"] is False
        assert [e["event_id"] for e in playback["active_events"]] == ["threat-001"]

    def test_seek_clamps(self, client):
        response = client.put("/playback/seek", json={"offset_hours": 200})
        assert response.status_code == 200
        playback = response.json()["playback"]
        assert playback["offset_hours"] == 168
        assert playback["is_playing"] is False

    def test_seek_strict_mode(self, client, fresh_session):
        fresh_session.playback.strict_seek = True
        response = client.put("/playback/seek", json={"offset_hours": -1})
        assert response.status_code == 422
        assert response.json()["status"] == "error"

    def test_play_and_pause(self, client):
        response = client.post("/playback/play")
        assert response.json()["playback"]["is_playing"] is True
        response = client.post("/playback/pause")
        assert response.json()["playback"]["is_playing"] is False
        response = client.post("/playback/pause")
        assert response.status_code == 200

    def test_set_speed(self, client):
        response = client.put("/playback/speed", json={"speed_multiplier": 4})
        assert response.status_code == 200
        assert response.json()["playback"]["speed_multiplier"] == 4

    def test_invalid_speed(self, client):
        response = client.put("/playback/speed", json={"speed_multiplier": 3})
        assert response.status_code == 422
        assert "not allowed" in response.json()["message"]

    def test_skip(self, client):
        response = client.post("/playback/skip", json={"direction": "forward"})
        assert response.json()["playback"]["offset_hours"] == 12
        response = client.post("/playback/skip", json={"direction": "back"})
        assert response.json()["playback"]["offset_hours"] == 0

    def test_skip_invalid_direction(self, client):
        response = client.post("/playback/skip", json={"direction": "sideways"})
        assert response.status_code == 422


class TestFleetEndpoints:
    """Tests for fleet endpoints."""

    def test_list_entities(self, client):
        response = client.get("/fleet/entities")
        assert response.status_code == 200
        entities = response.json()["entities"]
        assert len(entities) == 8
        assert entities[0]["entity_id"] == "patrol-mm-1"

    def test_stats(self, client):
        stats = client.get("/fleet/stats").json()["stats"]
        assert stats["total_drones"] == 8
        assert stats["active_patrols"] == 5

    def test_advance(self, client):
        response = client.post("/fleet/advance", json={"delta_seconds": 600})
        assert response.status_code == 200
        assert "patrol-mm-1" in response.json()["moved"]
        assert "patrol-sb-1" not in response.json()["moved"]

    def test_advance_negative(self, client):
        response = client.post("/fleet/advance", json={"delta_seconds": -5})
        assert response.status_code == 422

    def test_update_status(self, client):
        response = client.put("/fleet/patrol-sb-1/status", json={"status": "active"})
        assert response.status_code == 200
        assert response.json()["entity"]["status"] == "active"
        stats = client.get("/fleet/stats").json()["stats"]
        assert stats["active_patrols"] == 6

    def test_update_status_unknown_entity(self, client):
        response = client.put("/fleet/nope/status", json={"status": "active"})
        assert response.status_code == 404
        assert response.json()["status"] == "error"

    def test_update_status_invalid(self, client):
        response = client.put("/fleet/patrol-sb-1/status", json={"status": "flying"})
        assert response.status_code == 422


class TestMapEndpoints:
    """Tests for projection and overlay endpoints."""

    def test_project_session_bounds(self, client):
        response = client.post("/map/project", json={"lat": 0, "lng": 38})
        assert response.status_code == 200
        point = response.json()["point"]
        assert point["x"] == pytest.approx(50)
        assert point["y"] == pytest.approx(50)

    def test_project_custom_bounds(self, client):
        response = client.post("/map/project", json={
            "lat": -1, "lng": 36,
            "bounds": {"min_lat": -2, "max_lat": 0, "min_lng": 35, "max_lng": 37}
        })
        assert response.json()["point"] == {"x": 50, "y": 50}

    def test_project_clamps_to_margin(self, client):
        response = client.post("/map/project", json={"lat": 10, "lng": 50, "margin_pct": 5})
        assert response.json()["point"] == {"x": 95, "y": 5}

    def test_project_invalid_bounds(self, client):
        response = client.post("/map/project", json={
            "lat": -1, "lng": 36,
            "bounds": {"min_lat": 0, "max_lat": 0, "min_lng": 35, "max_lng": 37}
        })
        assert response.status_code == 422
        assert response.json()["status"] == "error"

    def test_project_invalid_margin(self, client):
        response = client.post("/map/project", json={"lat": 0, "lng": 38, "margin_pct": 75})
        assert response.status_code == 422

    def test_unproject(self, client):
        response = client.post("/map/unproject", json={"x": 50, "y": 50})
        point = response.json()["point"]
        assert point["lat"] == pytest.approx(0)
        assert point["lng"] == pytest.approx(38)

    def test_frame(self, client):
        client.put("/playback/seek", json={"offset_hours": 168})
        frame = client.get("/map/frame").json()["frame"]
        assert frame["offset_hours"] == 168
        assert [e["event_id"] for e in frame["active_events"]] == ["threat-010"]
        assert frame["fleet_stats"]["active_patrols"] == 5

    def test_overlays_in_sync(self, client):
        client.put("/playback/seek", json={"offset_hours": 72})
        client.post("/fleet/advance", json={"delta_seconds": 60})
        body = client.get("/map/overlays").json()
        assert body["in_sync"] is True
        assert len(body["layers"]) == 8
        assert all(l["frame_id"] == body["frame_id"] for l in body["layers"].values())


class TestAssistantEndpoint:
    """Tests for the assistant endpoint."""

    def test_ask(self, client):
        with patch.object(assistant_service, "ask", return_value="All quiet in Meru.") as mock_ask:
            response = client.post("/assistant/ask", json={"query": "Anything in Meru?"})
        assert response.status_code == 200
        assert response.json()["response"] == "All quiet in Meru."
        query, context = mock_ask.call_args.args
        assert query == "Anything in Meru?"
        assert "Active drones" in context

    def test_ask_empty_query(self, client):
        response = client.post("/assistant/ask", json={"query": "  "})
        assert response.status_code == 422

    def test_ask_upstream_failure(self, client):
        with patch.object(assistant_service, "ask", side_effect=AssistantError("upstream down")):
            response = client.post("/assistant/ask", json={"query": "Status?"})
        assert response.status_code == 502
        assert response.json() == {"status": "error", "message": "upstream down"}
