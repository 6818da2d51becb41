import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

import voice_consult.main as main_module
from voice_consult.exceptions import SessionLookupError
from voice_consult.main import app
from voice_consult.session.registry import CallSessionRegistry


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def registry():
    registry = CallSessionRegistry()
    with patch.object(main_module, "registry", registry):
        yield registry


@pytest.fixture
def configured(channel_factory):
    with patch.object(main_module.settings, "vapi_api_key", "test-api-key"), \
            patch.object(main_module.settings, "vapi_assistant_id", None), \
            patch.object(main_module, "create_channel", channel_factory):
        yield channel_factory


def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["name"] == "Voice Consult"
    assert response_json["version"] == "1.0.0"
    assert "/sessions/{session_id}/call" in response_json["endpoints"]
    assert "/health" in response_json["endpoints"]


def test_health_check(client, registry):
    response = client.get("/health")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["status"] == "healthy"
    assert isinstance(response_json["vapi_api_key_configured"], bool)
    assert response_json["active_calls"] == 0


def test_app_configuration():
    assert app.title == "Voice Consult"
    assert app.version == "1.0.0"
    route_paths = [route.path for route in app.routes]
    assert "/sessions/{session_id}/call" in route_paths
    assert "/health" in route_paths
    assert "/" in route_paths


def test_status_of_new_session_is_idle(client, registry):
    response = client.get("/sessions/session-123/call")
    assert response.status_code == 200

    snapshot = response.json()
    assert snapshot["sessionId"] == "session-123"
    assert snapshot["state"] == "idle"
    assert snapshot["connected"] is False
    assert snapshot["busy"] is False
    assert snapshot["messages"] == []
    assert registry.sessions == {}


def test_start_unknown_session_returns_404(client, registry, configured):
    lookup = AsyncMock(side_effect=SessionLookupError("Session missing not found", not_found=True))
    with patch.object(main_module.api_client, "get_session_detail", lookup):
        response = client.post("/sessions/missing/call")

    assert response.status_code == 404
    assert configured.channels == []
    assert registry.get_session("missing") is None


def test_start_with_backend_down_returns_502(client, registry, configured):
    lookup = AsyncMock(side_effect=SessionLookupError("Could not load session s1"))
    with patch.object(main_module.api_client, "get_session_detail", lookup):
        response = client.post("/sessions/s1/call")

    assert response.status_code == 502
    assert configured.channels == []


def test_polling_unknown_sessions_registers_nothing(client, registry):
    for i in range(50):
        response = client.get(f"/sessions/unknown-{i}/call")
        assert response.json()["state"] == "idle"

    assert registry.sessions == {}


def test_session_kept_until_end_notifications_are_read(client, registry, configured, descriptor):
    lookup = AsyncMock(return_value=descriptor)
    generate = AsyncMock(return_value={"summary": "ok"})

    with patch.object(main_module.api_client, "get_session_detail", lookup), \
            patch.object(main_module.api_client, "generate_report", generate):
        client.post("/sessions/session-123/call")
        assert registry.active_count() == 1

        client.portal.call(configured.last.emit, "call-end")
        assert registry.get_session("session-123") is not None

        status = client.get("/sessions/session-123/call").json()

    assert status["state"] == "idle"
    assert [n["message"] for n in status["notifications"]] == ["Your report is generated!"]
    assert registry.sessions == {}


def test_stop_unknown_session_returns_404(client, registry):
    response = client.delete("/sessions/nobody/call")
    assert response.status_code == 404


def test_full_call_through_api(client, registry, configured, descriptor, transcript_message):
    lookup = AsyncMock(return_value=descriptor)
    generate = AsyncMock(return_value={"summary": "Tension headache"})

    with patch.object(main_module.api_client, "get_session_detail", lookup), \
            patch.object(main_module.api_client, "generate_report", generate):
        started = client.post("/sessions/session-123/call").json()
        assert started["state"] == "active"
        assert started["connected"] is True

        channel = configured.last
        client.portal.call(channel.emit, "message", transcript_message("user", "I have a headache"))
        client.portal.call(channel.emit, "message", transcript_message("assistant", "How long?"))

        status = client.get("/sessions/session-123/call").json()
        assert [m["text"] for m in status["messages"]] == ["I have a headache", "How long?"]

        stopped = client.delete("/sessions/session-123/call").json()

    assert stopped["state"] == "idle"
    assert [n["message"] for n in stopped["notifications"]] == ["Your report is generated!"]
    generate.assert_awaited_once()
    request = generate.await_args.args[0]
    assert [m.text for m in request.messages] == ["I have a headache", "How long?"]
    assert channel.listener_count() == 0
    assert registry.sessions == {}


def test_start_without_api_key_notifies(client, registry, channel_factory, descriptor):
    lookup = AsyncMock(return_value=descriptor)
    with patch.object(main_module.settings, "vapi_api_key", None), \
            patch.object(main_module, "create_channel", channel_factory), \
            patch.object(main_module.api_client, "get_session_detail", lookup):
        snapshot = client.post("/sessions/session-123/call").json()

    assert snapshot["state"] == "idle"
    assert snapshot["notifications"][0]["level"] == "error"
    assert snapshot["notifications"][0]["message"] == "Missing VAPI_API_KEY"
    assert channel_factory.channels == []
    assert registry.sessions == {}
