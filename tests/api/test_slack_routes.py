"""
Tests for the archive HTTP route.
"""

import json

import pytest
from fastapi.testclient import TestClient

from slack_archiver.api.routes import slack as slack_routes
from slack_archiver.config import Settings
from slack_archiver.integrations.slack.transport import get_default_transport
from slack_archiver.main import app
from slack_archiver.services.retrieval import ERROR_PREFIX, retrieve

from fakes import (
    CHANNEL_ID,
    PERMALINK,
    ROOT_TS,
    FakeTransport,
    error_response,
    raw_message,
    replies_response,
    user_response,
)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    settings = Settings(
        _env_file=None,
        slack_api_token="xoxc-from-env",
        slack_api_cookie="xoxd-from-env",
        archive_dir=str(tmp_path / "archive"),
        fetch_users=True,
    )
    monkeypatch.setattr(slack_routes, "get_settings", lambda: settings)
    return settings


@pytest.fixture
def transport(monkeypatch):
    transport = FakeTransport(
        {
            ("conversations.replies", ROOT_TS): replies_response([raw_message(ROOT_TS, user="U1")]),
            ("users.info", "U1"): user_response("U1"),
        }
    )

    async def retrieve_with_fake(credentials, permalink, feature_flags):
        return await retrieve(credentials, permalink, feature_flags, transport=transport)

    monkeypatch.setattr(slack_routes, "retrieve", retrieve_with_fake)
    return transport


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_archive_saves_file(client, settings, transport):
    response = client.post("/api/slack/archive", json={"permalink": PERMALINK})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["file_name"] == f"{CHANNEL_ID}-{ROOT_TS}.json"
    # fetch_users comes from settings when the request has no flags
    assert body["components"]["users"]["U1"]["id"] == "U1"

    with open(body["saved_path"], encoding="utf-8") as f:
        saved = json.load(f)
    assert saved == body["components"]


def test_archive_uses_settings_credentials(client, settings, transport):
    client.post("/api/slack/archive", json={"permalink": PERMALINK, "save": False})

    request = transport.requests[0]
    assert request.headers["cookie"] == "d=xoxd-from-env"
    assert "token=xoxc-from-env" in request.body


def test_archive_without_save(client, settings, transport):
    response = client.post(
        "/api/slack/archive",
        json={"permalink": PERMALINK, "save": False, "feature_flags": {"fetch_users": False}},
    )

    body = response.json()
    assert body["saved_path"] is None
    assert "users" not in body["components"]
    assert transport.calls_to("users.info") == []


def test_invalid_token_is_bad_request(client, settings, transport):
    response = client.post(
        "/api/slack/archive", json={"permalink": PERMALINK, "api_token": "xoxb-bot-token"}
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith(ERROR_PREFIX)
    assert transport.requests == []


def test_invalid_permalink_is_bad_request(client, settings, transport):
    response = client.post("/api/slack/archive", json={"permalink": "not a url"})

    assert response.status_code == 400


def test_remote_failure_is_bad_gateway(client, settings, transport):
    transport.responses[("users.info", "U1")] = error_response("user_not_found")

    response = client.post("/api/slack/archive", json={"permalink": PERMALINK})

    assert response.status_code == 502
    assert "user_not_found" in response.json()["detail"]


def test_shutdown_closes_shared_transport():
    transport = get_default_transport()

    with TestClient(app):
        pass

    assert get_default_transport.cache_info().currsize == 0
    assert get_default_transport() is not transport
