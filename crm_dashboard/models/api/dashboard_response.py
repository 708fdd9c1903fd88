# crm_dashboard/models/api/dashboard_response.py
"""
Dashboard API response models.
Used by routes for output formatting.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class ContactRowResponse(BaseModel):
    """One row of the contacts table."""

    id: str | None = Field(None, description="GHL contact ID")
    name: str = Field(..., description="Display name")
    initials: str = Field(..., description="Avatar initials")
    email: str | None = Field(None, description="Email address")
    phone: str | None = Field(None, description="Phone number")
    type: str = Field(..., description="Contact classification")
    source: str = Field(..., description="Acquisition source")
    has_appointment: bool = Field(..., description="Booked through a calendar")
    booking_url: str | None = Field(None, description="Calendar booking page")
    resume_url: str | None = Field(None, description="Uploaded resume link")
    location: str | None = Field(None, description="City, state, country")
    company_name: str | None = Field(None, description="Company")
    tags: list[str] = Field(default_factory=list, description="Contact tags")
    date_added: datetime | None = Field(None, description="When the contact was created")
    date_updated: datetime | None = Field(None, description="When the contact was last updated")
    dnd: bool = Field(default=False, description="Do-not-disturb flag")


class AppointmentRowResponse(BaseModel):
    """One row of the appointments table."""

    id: str | None = Field(None, description="GHL event ID")
    title: str | None = Field(None, description="Appointment title")
    calendar_id: str | None = Field(None, description="Calendar ID")
    contact_id: str | None = Field(None, description="Contact ID")
    status: str = Field(..., description="Resolved appointment status")
    badge_variant: Literal["default", "secondary", "destructive", "outline"] = Field(
        ..., description="Status badge style"
    )
    time_bucket: Literal["today", "upcoming", "past"] = Field(
        ..., description="Start time relative to now"
    )
    start_time: datetime | None = Field(None, description="Start time")
    end_time: datetime | None = Field(None, description="End time")
    duration_minutes: int = Field(default=0, description="Duration in minutes")
    address: str | None = Field(None, description="Location")
    notes: str | None = Field(None, description="Notes")
    contact_name: str = Field(..., description="Contact display name")
    contact_email: str | None = Field(None, description="Contact email")
    contact_phone: str | None = Field(None, description="Contact phone")


class ViewPageResponse(BaseModel):
    """Counts shared by the dashboard tables ("N of M")."""

    shown: int = Field(..., description="Rows included in this response")
    filtered_count: int = Field(..., description="Records matching the filters")
    total_count: int = Field(..., description="Records in the loaded collection")
    truncated: bool = Field(..., description="More matches exist than were returned")
    has_active_filters: bool = Field(..., description="Any filter is narrowing the view")
    refreshed_at: datetime | None = Field(None, description="When the collection was loaded")


class ContactsViewResponse(ViewPageResponse):
    contacts: list[ContactRowResponse] = Field(..., description="Visible contacts")


class AppointmentsViewResponse(ViewPageResponse):
    appointments: list[AppointmentRowResponse] = Field(..., description="Visible appointments")
    counts: dict[str, int] = Field(
        ..., description="today / upcoming (incl. today) / past over the whole collection"
    )


class RefreshResponse(BaseModel):
    view: str = Field(..., description="Refreshed view")
    total_count: int = Field(..., description="Records now loaded")
    refreshed_at: datetime | None = Field(None, description="When the collection was loaded")


class StatsResponse(BaseModel):
    """Dashboard stat cards."""

    totalContacts: int = Field(..., description="Contacts in the location")
    totalOpportunities: int = Field(..., description="Opportunities fetched")
    totalValue: float = Field(..., description="Sum of opportunity values")
    conversionRate: str = Field(..., description="Won percentage, one decimal place")
    recentContacts: list[dict[str, Any]] = Field(default_factory=list)
    pipelineData: list[dict[str, Any]] = Field(default_factory=list)
    appointments: list[dict[str, Any]] = Field(default_factory=list)


class ConnectionStatusResponse(BaseModel):
    connected: bool = Field(..., description="Last contact with GHL succeeded")
    location_name: str | None = Field(None, description="Connected location name")
    last_error: str | None = Field(None, description="Most recent failure message")
    checked_at: datetime | None = Field(None, description="When the state last changed")
