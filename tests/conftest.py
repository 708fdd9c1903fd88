import pytest

from crm_dashboard.config import settings

GHL_BASE_URL = "https://ghl.test"


@pytest.fixture
def ghl_settings(monkeypatch):
    """Configured GHL credentials pointing at a test host."""
    monkeypatch.setattr(settings, "GHL_API_KEY", "test-key")
    monkeypatch.setattr(settings, "GHL_LOCATION_ID", "loc-123")
    monkeypatch.setattr(settings, "GHL_API_BASE_URL", GHL_BASE_URL)
    return settings


@pytest.fixture
def missing_ghl_settings(monkeypatch):
    monkeypatch.setattr(settings, "GHL_API_KEY", None)
    monkeypatch.setattr(settings, "GHL_LOCATION_ID", None)
    return settings


class FakeGHLClient:
    """Stands in for GHLClient; records calls and replays canned responses."""

    def __init__(self, responses: dict | None = None, error: Exception | None = None):
        self.responses = responses or {}
        self.error = error
        self.calls: list[tuple[str, tuple]] = []

    async def _reply(self, name: str, *args):
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error
        return self.responses.get(name, {})

    async def get_contacts(self, limit):
        return await self._reply("get_contacts", limit)

    async def get_appointments(self, start, end):
        return await self._reply("get_appointments", start, end)

    async def get_pipelines(self):
        return await self._reply("get_pipelines")

    async def get_opportunities(self, limit):
        return await self._reply("get_opportunities", limit)

    async def get_location(self):
        return await self._reply("get_location")


@pytest.fixture
def fake_ghl_client():
    return FakeGHLClient
