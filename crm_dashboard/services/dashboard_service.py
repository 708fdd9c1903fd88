"""
Dashboard service.

Owns the per-view record collections and the GHL connection state, and
loads everything through the ghl-sync adapter so the dashboard sees exactly
what the function returns.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from crm_dashboard.config import settings
from crm_dashboard.features.records import APPOINTMENTS_VIEW, CONTACTS_VIEW, RecordViewState
from crm_dashboard.infrastructure.observability.logging import get_logger
from crm_dashboard.services.ghl.client import GHLApiError, GHLSyncError
from crm_dashboard.services.ghl_sync_service import invoke

logger = get_logger(__name__)


@dataclass(slots=True)
class ConnectionState:
    connected: bool = False
    location_name: str | None = None
    last_error: str | None = None
    checked_at: datetime | None = None


class DashboardService:
    """Record views, stats and connection state for the dashboard."""

    def __init__(self):
        self.contacts = RecordViewState(CONTACTS_VIEW, self._load_contacts)
        self.appointments = RecordViewState(APPOINTMENTS_VIEW, self._load_appointments)
        self.connection = ConnectionState()

    def view(self, name: str) -> RecordViewState:
        views = {"contacts": self.contacts, "appointments": self.appointments}
        if name not in views:
            raise KeyError(name)
        return views[name]

    def _mark_connected(self) -> None:
        self.connection.connected = True
        self.connection.last_error = None
        self.connection.checked_at = datetime.now(UTC)

    def _mark_disconnected(self, error: str) -> None:
        self.connection.connected = False
        self.connection.last_error = error
        self.connection.checked_at = datetime.now(UTC)

    async def _fetch(self, action: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run an adapter action; any failure marks the dashboard disconnected."""
        try:
            result = await invoke(action, data)
            if not isinstance(result, dict):
                raise GHLApiError(
                    f"Invalid response format: expected a JSON object from {action}"
                )
        except GHLSyncError as e:
            self._mark_disconnected(str(e))
            logger.warning("GHL fetch failed", action=action, error=str(e))
            raise

        self._mark_connected()
        return result

    async def _load_contacts(self) -> list[dict[str, Any]]:
        data = await self._fetch("get_contacts", {"limit": settings.DASHBOARD_CONTACT_LIMIT})
        return data.get("contacts") or []

    async def _load_appointments(self) -> list[dict[str, Any]]:
        data = await self._fetch("get_appointments")
        return data.get("events") or []

    async def fetch_stats(self) -> dict[str, Any]:
        return await self._fetch("get_stats")

    async def test_connection(self) -> ConnectionState:
        """Probe the location; a failure marks the dashboard disconnected."""
        result = await self._fetch("test_connection")

        location = result.get("location") or {}
        self.connection.location_name = location.get("name") if isinstance(location, dict) else None
        logger.info("GHL connection verified", location_name=self.connection.location_name)
        return self.connection


# Singleton instance for application use
dashboard_service = DashboardService()
