"""
Tests for the ghl-sync function endpoint.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from crm_dashboard.main import app
from crm_dashboard.services.ghl.client import GHLApiError, GHLCredentialsError
from crm_dashboard.services.ghl_sync_service import UnknownActionError

client = TestClient(app)

SYNC_URL = "/functions/v1/ghl-sync"


@pytest.fixture
def invoke_mock(monkeypatch):
    mock = AsyncMock()
    monkeypatch.setattr("crm_dashboard.routes.ghl_sync.invoke", mock)
    return mock


def test_action_result_returned_unmodified(invoke_mock):
    invoke_mock.return_value = {"contacts": [{"id": "c1"}], "meta": {"total": 1}}

    response = client.post(SYNC_URL, json={"action": "get_contacts", "data": {"limit": 5}})

    assert response.status_code == 200
    assert response.json() == {"contacts": [{"id": "c1"}], "meta": {"total": 1}}
    invoke_mock.assert_awaited_once_with("get_contacts", {"limit": 5})


def test_unknown_action_is_400(invoke_mock):
    invoke_mock.side_effect = UnknownActionError("nope")

    response = client.post(SYNC_URL, json={"action": "nope"})

    assert response.status_code == 400
    assert response.json() == {"error": "Unknown action: nope"}


def test_missing_credentials_is_500(invoke_mock):
    invoke_mock.side_effect = GHLCredentialsError()

    response = client.post(SYNC_URL, json={"action": "get_stats"})

    assert response.status_code == 500
    assert response.json() == {"error": "GHL credentials not configured"}


def test_upstream_failure_is_500(invoke_mock):
    invoke_mock.side_effect = GHLApiError("Invalid JWT", status_code=401)

    response = client.post(SYNC_URL, json={"action": "test_connection"})

    assert response.status_code == 500
    assert response.json() == {"error": "Invalid JWT"}


def test_invalid_body_is_400(invoke_mock):
    response = client.post(
        SYNC_URL, content=b"not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert "error" in response.json()
    invoke_mock.assert_not_awaited()


def test_preflight_allows_supabase_headers():
    response = client.options(
        SYNC_URL,
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "x-client-info" in response.headers["Access-Control-Allow-Headers"]


def test_response_carries_request_id(invoke_mock):
    invoke_mock.return_value = {"success": True}

    response = client.post(
        SYNC_URL, json={"action": "test_connection"}, headers={"X-Request-ID": "req-1"}
    )

    assert response.headers["X-Request-ID"] == "req-1"


def test_auth_required_when_enabled(monkeypatch, invoke_mock):
    monkeypatch.setattr("crm_dashboard.auth.verify.settings.REQUIRE_AUTH", True)

    response = client.post(SYNC_URL, json={"action": "get_contacts"})

    assert response.status_code == 401
    invoke_mock.assert_not_awaited()
