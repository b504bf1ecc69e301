"""Tests for the read-only admin API."""
import asyncio

import pytest
from fastapi.testclient import TestClient

from peach.api.app import create_app
from peach.core import display


@pytest.fixture
def api_client(registry):
    """TestClient bound to the same registry the sessions would use."""
    return TestClient(create_app(registry))


def seed(registry):
    async def _seed():
        receiver, transcript = await registry.join("general")
        await registry.join("empty")
        async with transcript.lock:
            transcript.append(display.message_line("alice", "hi", timestamp="01-01-2026_10:00:00"))
            await registry.publish("general", transcript.text())
        return receiver

    return asyncio.run(_seed())


def test_root_lists_endpoints(api_client):
    response = api_client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["default_room"] == "general"
    assert "/rooms" in body["endpoints"].values()


def test_health_counts_rooms(api_client, registry):
    seed(registry)

    body = api_client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["rooms"] == 2
    assert body["connections"] == 0


def test_list_rooms_includes_empty_rooms(api_client, registry):
    seed(registry)

    rooms = {room["name"]: room for room in api_client.get("/rooms").json()}

    assert set(rooms) == {"general", "empty"}
    assert rooms["general"]["transcript_lines"] == 1
    assert rooms["empty"]["transcript_lines"] == 0


def test_get_room_returns_transcript(api_client, registry):
    seed(registry)

    response = api_client.get("/rooms/general")

    assert response.status_code == 200
    assert response.json()["transcript"] == ["[01-01-2026_10:00:00][alice]: hi\n"]


def test_get_unknown_room_is_404(api_client):
    response = api_client.get("/rooms/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Room not found"


def test_metrics_report_published_messages(api_client, registry):
    seed(registry)

    body = api_client.get("/metrics").json()

    assert body["total_messages"] == 1
    assert body["total_rooms"] == 2
    assert body["subscriber_buffer"] == 100
    assert body["transcript_lines"] == 1
