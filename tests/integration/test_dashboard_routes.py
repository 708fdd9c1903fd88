"""
Tests for the dashboard view endpoints.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from crm_dashboard.main import app
from crm_dashboard.services.dashboard_service import DashboardService
from crm_dashboard.services.ghl.client import GHLApiError, GHLCredentialsError

client = TestClient(app)

CONTACTS = [
    {
        "id": "c1",
        "contactName": "Ann Lee",
        "email": "ann@x.com",
        "dateAdded": "2024-01-15T10:00:00Z",
        "attributions": [{"medium": "calendar", "pageUrl": "https://book/ann"}],
        "tags": ["vip"],
    },
    {
        "id": "c2",
        "firstName": "Bob",
        "email": "bob@x.com",
        "type": "customer",
        "customFields": [{"id": "f1", "value": "https://files/documents/download/1"}],
    },
]


def _appointments():
    now = datetime.now(UTC)
    return [
        {"id": "past", "title": "Old", "startTime": (now - timedelta(days=10)).isoformat(),
         "status": "confirmed"},
        {"id": "future", "title": "Next", "startTime": (now + timedelta(days=10)).isoformat(),
         "appoinmentStatus": "showed", "contact": {"name": "Cara"}},
        {"id": "undated", "title": "Unknown time"},
    ]


@pytest.fixture
def invoke_mock(monkeypatch):
    """Fresh dashboard state per test, loading through a mocked adapter."""
    service = DashboardService()
    mock = AsyncMock()
    monkeypatch.setattr("crm_dashboard.routes.dashboard.dashboard_service", service)
    monkeypatch.setattr("crm_dashboard.services.dashboard_service.invoke", mock)
    return mock


def test_contacts_view_loads_and_filters(invoke_mock):
    invoke_mock.return_value = {"contacts": CONTACTS}

    response = client.get("/dashboard/contacts", params={"appointment": "booked"})

    assert response.status_code == 200
    data = response.json()
    assert data["filtered_count"] == 1
    assert data["total_count"] == 2
    assert data["has_active_filters"] is True
    row = data["contacts"][0]
    assert row["name"] == "Ann Lee"
    assert row["initials"] == "AL"
    assert row["type"] == "lead"
    assert row["source"] == "Direct"
    assert row["booking_url"] == "https://book/ann"
    invoke_mock.assert_awaited_once_with("get_contacts", {"limit": 100})


def test_contacts_view_resume_and_type_filters(invoke_mock):
    invoke_mock.return_value = {"contacts": CONTACTS}

    response = client.get("/dashboard/contacts", params={"resume": "has-resume", "type": "cust"})

    data = response.json()
    assert [row["id"] for row in data["contacts"]] == ["c2"]
    assert data["contacts"][0]["resume_url"] == "https://files/documents/download/1"


def test_contacts_view_reuses_loaded_collection(invoke_mock):
    invoke_mock.return_value = {"contacts": CONTACTS}

    client.get("/dashboard/contacts")
    client.get("/dashboard/contacts", params={"search": "bob"})

    assert invoke_mock.await_count == 1


def test_contacts_view_limit_truncates_rows(invoke_mock):
    invoke_mock.return_value = {"contacts": CONTACTS}

    data = client.get("/dashboard/contacts", params={"limit": 1}).json()

    assert data["shown"] == 1
    assert data["filtered_count"] == 2
    assert data["truncated"] is True


def test_invalid_filter_value_rejected(invoke_mock):
    response = client.get("/dashboard/contacts", params={"appointment": "maybe"})
    assert response.status_code == 422


def test_appointments_view_orders_and_counts(invoke_mock):
    invoke_mock.return_value = {"events": _appointments()}

    response = client.get("/dashboard/appointments")

    assert response.status_code == 200
    data = response.json()
    assert [row["id"] for row in data["appointments"]] == ["future", "past", "undated"]
    assert data["counts"] == {"today": 0, "upcoming": 1, "past": 2}
    future = data["appointments"][0]
    assert future["status"] == "showed"
    assert future["badge_variant"] == "default"
    assert future["time_bucket"] == "upcoming"
    assert future["contact_name"] == "Cara"
    assert data["appointments"][2]["status"] == "pending"


def test_appointments_view_time_and_status_filters(invoke_mock):
    invoke_mock.return_value = {"events": _appointments()}

    data = client.get("/dashboard/appointments", params={"time": "past", "status": "confirm"}).json()

    assert [row["id"] for row in data["appointments"]] == ["past"]


def test_unknown_timezone_rejected(invoke_mock):
    response = client.get("/dashboard/appointments", params={"tz": "Mars/Olympus"})
    assert response.status_code == 400


def test_refresh_failure_keeps_previous_data(invoke_mock):
    invoke_mock.return_value = {"contacts": CONTACTS}
    client.post("/dashboard/contacts/refresh")

    invoke_mock.side_effect = GHLApiError("GHL service temporarily unavailable.")
    response = client.post("/dashboard/contacts/refresh")

    assert response.status_code == 502
    assert response.json()["detail"] == "GHL service temporarily unavailable."

    invoke_mock.side_effect = None
    data = client.get("/dashboard/contacts").json()
    assert data["total_count"] == 2


def test_refresh_unknown_view(invoke_mock):
    response = client.post("/dashboard/pipelines/refresh")
    assert response.status_code == 404


def test_first_load_failure_is_502(invoke_mock):
    invoke_mock.side_effect = GHLApiError("Invalid JWT")

    response = client.get("/dashboard/appointments")

    assert response.status_code == 502


def test_stats(invoke_mock):
    invoke_mock.return_value = {
        "totalContacts": 12,
        "totalOpportunities": 2,
        "totalValue": 500,
        "conversionRate": "50.0",
        "recentContacts": [],
        "pipelineData": [],
        "appointments": [],
    }

    response = client.get("/dashboard/stats")

    assert response.status_code == 200
    assert response.json()["conversionRate"] == "50.0"
    invoke_mock.assert_awaited_once_with("get_stats", None)


def test_connection_test_success_and_failure(invoke_mock):
    invoke_mock.return_value = {"success": True, "location": {"name": "Main Office"}}

    data = client.post("/dashboard/connection/test").json()
    assert data["connected"] is True
    assert data["location_name"] == "Main Office"

    invoke_mock.side_effect = GHLApiError("Location not found")
    response = client.post("/dashboard/connection/test")
    assert response.status_code == 502

    state = client.get("/dashboard/connection").json()
    assert state["connected"] is False
    assert state["last_error"] == "Location not found"


def test_refresh_failure_marks_disconnected(invoke_mock):
    invoke_mock.return_value = {"contacts": CONTACTS}
    client.get("/dashboard/contacts")
    assert client.get("/dashboard/connection").json()["connected"] is True

    invoke_mock.side_effect = GHLCredentialsError()
    response = client.post("/dashboard/contacts/refresh")
    assert response.status_code == 502

    state = client.get("/dashboard/connection").json()
    assert state["connected"] is False
    assert state["last_error"] == "GHL credentials not configured"


def test_stats_failure_marks_disconnected(invoke_mock):
    invoke_mock.side_effect = GHLApiError("GHL service temporarily unavailable.")

    response = client.get("/dashboard/stats")

    assert response.status_code == 502
    assert client.get("/dashboard/connection").json()["connected"] is False


def test_non_object_reply_is_502(invoke_mock):
    invoke_mock.return_value = []

    response = client.get("/dashboard/contacts")

    assert response.status_code == 502
    assert "Invalid response format" in response.json()["detail"]
    assert client.get("/dashboard/connection").json()["connected"] is False


def test_misconfigured_default_timezone_is_named(monkeypatch, invoke_mock):
    monkeypatch.setattr("crm_dashboard.routes.dashboard.settings.DASHBOARD_TIMEZONE", "Nowhere/Zone")

    response = client.get("/dashboard/appointments")

    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown timezone: Nowhere/Zone"
