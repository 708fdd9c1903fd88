"""
Dashboard API Routes
Filtered table views over the loaded GHL collections, stat cards and the
connection indicator. Filtering runs on the in-memory collection; only the
refresh endpoints and the first read of a view go upstream.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query, status

from crm_dashboard.auth.verify import auth_dependency
from crm_dashboard.config import settings
from crm_dashboard.features.records import FilterCriteria, bucket_counts
from crm_dashboard.features.records.criteria import AppointmentFilter, ResumeFilter, TimeFilter
from crm_dashboard.infrastructure.observability.logging import get_logger
from crm_dashboard.models.api.dashboard_response import (
    AppointmentRowResponse,
    AppointmentsViewResponse,
    ConnectionStatusResponse,
    ContactRowResponse,
    ContactsViewResponse,
    RefreshResponse,
    StatsResponse,
)
from crm_dashboard.models.domain.record_domain import Appointment, Contact
from crm_dashboard.services.dashboard_service import dashboard_service
from crm_dashboard.services.ghl.client import GHLSyncError

logger = get_logger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _now(tz_name: str | None) -> datetime:
    """Current time in the requested zone, truncated to the second."""
    zone = tz_name or settings.DASHBOARD_TIMEZONE
    try:
        tz = ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown timezone: {zone}"
        ) from None
    return datetime.now(tz).replace(microsecond=0)


def _row_limit(limit: int | None) -> int:
    return limit or settings.DISPLAY_ROW_LIMIT


def _upstream_failure(e: GHLSyncError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/contacts", response_model=ContactsViewResponse)
async def list_contacts(
    claims: dict = Depends(auth_dependency),
    search: str = Query(default="", description="Matches name or email"),
    appointment: AppointmentFilter = Query(default="all", description="Calendar booking filter"),
    resume: ResumeFilter = Query(default="all", description="Resume upload filter"),
    contact_type: str = Query(default="all", alias="type", description="Contact type contains"),
    date_from: date | None = Query(default=None, description="Added on or after"),
    date_to: date | None = Query(default=None, description="Added on or before"),
    limit: int | None = Query(default=None, ge=1, le=500, description="Rows to return"),
    tz: str | None = Query(default=None, description="IANA timezone for day bounds"),
):
    """Filtered contacts in upstream order."""
    now = _now(tz)
    view = dashboard_service.contacts

    try:
        await view.ensure_loaded()
    except GHLSyncError as e:
        logger.error("Failed to load contacts", error=str(e))
        raise _upstream_failure(e)

    criteria = FilterCriteria(
        search=search,
        status_filter=contact_type,
        appointment_filter=appointment,
        resume_filter=resume,
        date_from=date_from,
        date_to=date_to,
    )
    page = view.page(criteria, now, _row_limit(limit))

    return ContactsViewResponse(
        contacts=[ContactRowResponse(**Contact(record).to_dict()) for record in page.rows],
        shown=page.shown,
        filtered_count=page.filtered_count,
        total_count=page.total_count,
        truncated=page.truncated,
        has_active_filters=criteria.has_active_filters(),
        refreshed_at=view.refreshed_at,
    )


@router.get("/appointments", response_model=AppointmentsViewResponse)
async def list_appointments(
    claims: dict = Depends(auth_dependency),
    search: str = Query(default="", description="Matches contact name or title"),
    time: TimeFilter = Query(default="all", description="Time bucket"),
    status_filter: str = Query(default="all", alias="status", description="Status contains"),
    date_from: date | None = Query(default=None, description="Starts on or after"),
    date_to: date | None = Query(default=None, description="Starts on or before"),
    limit: int | None = Query(default=None, ge=1, le=500, description="Rows to return"),
    tz: str | None = Query(default=None, description="IANA timezone for buckets and day bounds"),
):
    """Filtered appointments, most recent start first."""
    now = _now(tz)
    view = dashboard_service.appointments

    try:
        await view.ensure_loaded()
    except GHLSyncError as e:
        logger.error("Failed to load appointments", error=str(e))
        raise _upstream_failure(e)

    criteria = FilterCriteria(
        search=search,
        time_filter=time,
        status_filter=status_filter,
        date_from=date_from,
        date_to=date_to,
    )
    page = view.page(criteria, now, _row_limit(limit))

    return AppointmentsViewResponse(
        appointments=[
            AppointmentRowResponse(**Appointment(record).to_dict(now)) for record in page.rows
        ],
        counts=bucket_counts(view.records, now),
        shown=page.shown,
        filtered_count=page.filtered_count,
        total_count=page.total_count,
        truncated=page.truncated,
        has_active_filters=criteria.has_active_filters(),
        refreshed_at=view.refreshed_at,
    )


@router.post("/{view_name}/refresh", response_model=RefreshResponse)
async def refresh_view(view_name: str, claims: dict = Depends(auth_dependency)):
    """Reload a view's collection; on failure the previous collection stays."""
    try:
        view = dashboard_service.view(view_name)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown view: {view_name}"
        ) from None

    try:
        records = await view.refresh()
    except GHLSyncError as e:
        logger.error("View refresh failed", view=view_name, error=str(e))
        raise _upstream_failure(e)

    return RefreshResponse(view=view_name, total_count=len(records), refreshed_at=view.refreshed_at)


@router.get("/stats", response_model=StatsResponse)
async def get_stats(claims: dict = Depends(auth_dependency)):
    """Stat cards: contact total, opportunity value and conversion rate."""
    try:
        stats = await dashboard_service.fetch_stats()
    except GHLSyncError as e:
        logger.error("Failed to fetch stats", error=str(e))
        raise _upstream_failure(e)

    return StatsResponse(**stats)


@router.get("/connection", response_model=ConnectionStatusResponse)
async def connection_status(claims: dict = Depends(auth_dependency)):
    connection = dashboard_service.connection
    return ConnectionStatusResponse(
        connected=connection.connected,
        location_name=connection.location_name,
        last_error=connection.last_error,
        checked_at=connection.checked_at,
    )


@router.post("/connection/test", response_model=ConnectionStatusResponse)
async def test_connection(claims: dict = Depends(auth_dependency)):
    """Probe GHL with the configured credentials."""
    try:
        connection = await dashboard_service.test_connection()
    except GHLSyncError as e:
        raise _upstream_failure(e)

    return ConnectionStatusResponse(
        connected=connection.connected,
        location_name=connection.location_name,
        last_error=connection.last_error,
        checked_at=connection.checked_at,
    )
