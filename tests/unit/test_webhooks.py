"""
Unit tests for webhook endpoints.
"""

import hashlib
import hmac
import json
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient

from review_notifier.config import settings
from review_notifier.main import app
from review_notifier.models.events import PullRequestEvent
from review_notifier.services.notification_sync import get_notification_sync


@pytest.fixture
def mock_sync():
    """Mock notification sync engine."""
    sync = MagicMock()
    sync.handle_event = AsyncMock()
    app.dependency_overrides[get_notification_sync] = lambda: sync
    yield sync
    app.dependency_overrides.clear()


@pytest.fixture
def client(mock_sync):
    """Create test client."""
    return TestClient(app)


def post_event(client, event_type, payload, headers=None, raw=None):
    body = raw if raw is not None else json.dumps(payload).encode()
    all_headers = {
        "X-GitHub-Event": event_type,
        "X-GitHub-Delivery": "delivery-1",
        "Content-Type": "application/json",
    }
    all_headers.update(headers or {})
    return client.post("/webhooks/github", content=body, headers=all_headers)


def generate_signature(payload: bytes, secret: str) -> str:
    """Generate webhook signature."""
    return "sha256=" + hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def test_get_acknowledges(client, mock_sync):
    response = client.get("/webhooks/github")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    mock_sync.handle_event.assert_not_awaited()


def test_pull_request_opened_is_processed(client, mock_sync, pull_request_payload):
    response = post_event(client, "pull_request", {
        "action": "opened",
        "pull_request": pull_request_payload(teams=["frontend"]),
    })

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    mock_sync.handle_event.assert_awaited_once()
    event = mock_sync.handle_event.await_args.args[0]
    assert isinstance(event, PullRequestEvent)
    assert event.pull_request.id == 1001


def test_review_submitted_is_processed(client, mock_sync, pull_request_payload):
    response = post_event(client, "pull_request_review", {
        "action": "submitted",
        "review": {"id": 1, "state": "approved"},
        "pull_request": pull_request_payload(),
    })

    assert response.json() == {"ok": True}
    mock_sync.handle_event.assert_awaited_once()


def test_unknown_event_type_is_ignored(client, mock_sync):
    response = post_event(client, "issue_comment", {"action": "created"})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    mock_sync.handle_event.assert_not_awaited()


def test_closed_action_is_ignored(client, mock_sync, pull_request_payload):
    response = post_event(client, "pull_request", {
        "action": "closed",
        "pull_request": pull_request_payload(),
    })

    assert response.json() == {"ok": True}
    mock_sync.handle_event.assert_not_awaited()


def test_malformed_payload_is_acknowledged(client, mock_sync):
    response = post_event(client, "pull_request", None, raw=b"{broken")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    mock_sync.handle_event.assert_not_awaited()


def test_form_encoded_payload(client, mock_sync, pull_request_payload):
    payload = json.dumps({"action": "edited", "pull_request": pull_request_payload()})

    response = post_event(
        client,
        "pull_request",
        None,
        raw=urlencode({"payload": payload}).encode(),
        headers={"Content-Type": "application/x-www-form-urlencoded"}
    )

    assert response.json() == {"ok": True}
    mock_sync.handle_event.assert_awaited_once()


def test_processing_failure_still_acknowledged(client, mock_sync, pull_request_payload):
    mock_sync.handle_event.side_effect = RuntimeError("boom")

    response = post_event(client, "pull_request", {
        "action": "opened",
        "pull_request": pull_request_payload(),
    })

    assert response.status_code == 200
    assert response.json() == {"ok": True}


class TestSignature:
    """Signature checks when a webhook secret is configured."""

    @pytest.fixture(autouse=True)
    def secret(self, monkeypatch):
        monkeypatch.setattr(settings, "webhook_secret", "s3cret")

    def test_valid_signature_is_processed(self, client, mock_sync, pull_request_payload):
        body = json.dumps({"action": "opened", "pull_request": pull_request_payload()}).encode()

        response = post_event(
            client, "pull_request", None, raw=body,
            headers={"X-Hub-Signature-256": generate_signature(body, "s3cret")}
        )

        assert response.json() == {"ok": True}
        mock_sync.handle_event.assert_awaited_once()

    def test_invalid_signature_is_ignored(self, client, mock_sync, pull_request_payload):
        response = post_event(
            client, "pull_request",
            {"action": "opened", "pull_request": pull_request_payload()},
            headers={"X-Hub-Signature-256": "sha256=deadbeef"}
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        mock_sync.handle_event.assert_not_awaited()

    def test_missing_signature_is_ignored(self, client, mock_sync, pull_request_payload):
        response = post_event(client, "pull_request", {
            "action": "opened",
            "pull_request": pull_request_payload(),
        })

        assert response.json() == {"ok": True}
        mock_sync.handle_event.assert_not_awaited()
