"""
ghl-sync action router.

Accepts an action name plus optional parameters, forwards to the fixed
upstream GHL endpoints and returns the upstream JSON. Only `get_stats` and
`test_connection` reshape the response.
"""

import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from crm_dashboard.config import settings
from crm_dashboard.infrastructure.observability.logging import get_logger, log_sync_action
from crm_dashboard.services.ghl.client import GHLClient, GHLSyncError, ghl_client

logger = get_logger(__name__)

RECENT_CONTACTS_COUNT = 5

ActionHandler = Callable[[GHLClient, dict[str, Any]], Awaitable[Any]]


class UnknownActionError(GHLSyncError):
    """Action name is not one the adapter serves."""

    status_code = 400

    def __init__(self, action: str | None):
        super().__init__(f"Unknown action: {action}")
        self.action = action


def appointment_window(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Default appointment window: now minus/plus the configured number of days."""
    now = now or datetime.now(UTC)
    window = timedelta(days=settings.GHL_APPOINTMENT_WINDOW_DAYS)
    return now - window, now + window


def _limit(data: dict[str, Any]) -> int:
    return data.get("limit") or settings.GHL_DEFAULT_LIMIT


def compute_stats(
    contacts_data: dict[str, Any],
    opportunities_data: dict[str, Any],
    appointments_data: dict[str, Any],
) -> dict[str, Any]:
    """
    Aggregate dashboard stats from raw upstream responses.

    Conversion rate is won / fetched opportunities as a percentage with one
    decimal place; total value sums `monetaryValue`, treating absent as 0.
    """
    opportunities = opportunities_data.get("opportunities") or []
    total_value = sum(opp.get("monetaryValue") or 0 for opp in opportunities)
    won = [opp for opp in opportunities if opp.get("status") == "won"]
    conversion_rate = (len(won) / len(opportunities)) * 100 if opportunities else 0

    meta = contacts_data.get("meta") or {}

    return {
        "totalContacts": meta.get("total") or 0,
        "totalOpportunities": len(opportunities),
        "totalValue": total_value,
        "conversionRate": f"{conversion_rate:.1f}",
        "recentContacts": (contacts_data.get("contacts") or [])[:RECENT_CONTACTS_COUNT],
        "pipelineData": opportunities,
        "appointments": appointments_data.get("events") or [],
    }


async def _get_contacts(client: GHLClient, data: dict[str, Any]) -> Any:
    return await client.get_contacts(_limit(data))


async def _get_appointments(client: GHLClient, data: dict[str, Any]) -> Any:
    default_start, default_end = appointment_window()
    return await client.get_appointments(
        data.get("startDate") or default_start,
        data.get("endDate") or default_end,
    )


async def _get_pipelines(client: GHLClient, data: dict[str, Any]) -> Any:
    return await client.get_pipelines()


async def _get_opportunities(client: GHLClient, data: dict[str, Any]) -> Any:
    return await client.get_opportunities(_limit(data))


async def _get_stats(client: GHLClient, data: dict[str, Any]) -> Any:
    contacts_data = await client.get_contacts(1)
    opportunities_data = await client.get_opportunities(settings.GHL_STATS_OPPORTUNITY_LIMIT)
    start, end = appointment_window()
    appointments_data = await client.get_appointments(start, end)
    return compute_stats(contacts_data, opportunities_data, appointments_data)


async def _test_connection(client: GHLClient, data: dict[str, Any]) -> Any:
    location = await client.get_location()
    # Upstream wraps the location under "location"; unwrap when present
    if isinstance(location, dict) and isinstance(location.get("location"), dict):
        location = location["location"]
    return {"success": True, "location": location}


ACTION_REGISTRY: dict[str, ActionHandler] = {
    "get_contacts": _get_contacts,
    "get_appointments": _get_appointments,
    "get_pipelines": _get_pipelines,
    "get_opportunities": _get_opportunities,
    "get_stats": _get_stats,
    "test_connection": _test_connection,
}


async def invoke(
    action: str | None,
    data: dict[str, Any] | None = None,
    client: GHLClient | None = None,
) -> Any:
    """
    Run one adapter action.

    Raises:
        UnknownActionError: action is not registered
        GHLCredentialsError: API key or location id missing
        GHLApiError: upstream failure
    """
    handler = ACTION_REGISTRY.get(action or "")
    if handler is None:
        logger.warning("Rejected unknown GHL action", action=action)
        raise UnknownActionError(action)

    started = time.time()
    try:
        result = await handler(client or ghl_client, data or {})
    except GHLSyncError as e:
        log_sync_action(action, False, round((time.time() - started) * 1000, 2), error=str(e))
        raise

    log_sync_action(action, True, round((time.time() - started) * 1000, 2))
    return result
