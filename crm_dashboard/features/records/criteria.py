"""
Filter criteria and per-view configuration.

A view definition says which derived fields each predicate reads for that
entity, including which timestamp the date range targets.
"""

from dataclasses import dataclass
from datetime import date
from typing import Literal

from . import derived
from .derived import Accessor

TimeFilter = Literal["all", "upcoming", "past", "today"]
AppointmentFilter = Literal["all", "booked", "no-appointment"]
ResumeFilter = Literal["all", "has-resume", "no-resume"]

ALL = "all"

# Time bucket selector -> accepted buckets (None accepts everything)
TIME_FILTER_ACCEPTS: dict[str, frozenset[str] | None] = {
    "all": None,
    "upcoming": frozenset({"upcoming", "today"}),
    "past": frozenset({"past"}),
    "today": frozenset({"today"}),
}


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Active filter selections for one view. Frozen so it can key a cache."""

    search: str = ""
    time_filter: TimeFilter = "all"
    status_filter: str = ALL
    appointment_filter: AppointmentFilter = "all"
    resume_filter: ResumeFilter = "all"
    date_from: date | None = None
    date_to: date | None = None

    def has_active_filters(self) -> bool:
        return bool(
            self.search
            or self.time_filter != ALL
            or (self.status_filter and self.status_filter != ALL)
            or self.appointment_filter != ALL
            or self.resume_filter != ALL
            or self.date_from
            or self.date_to
        )


@dataclass(frozen=True, slots=True)
class RecordView:
    """Which record fields a view's predicates and ordering read."""

    name: str
    display_name: Accessor
    secondary_text: Accessor
    status: Accessor
    date_field: str
    time_bucket_field: str | None = None
    sort_field: str | None = None
    presence_filters: bool = False


CONTACTS_VIEW = RecordView(
    name="contacts",
    display_name=derived.contact_name,
    secondary_text=derived.prop("email"),
    status=derived.contact_type,
    date_field="dateAdded",
    presence_filters=True,
)

# Contacts keep upstream order; only appointments are sorted.
APPOINTMENTS_VIEW = RecordView(
    name="appointments",
    display_name=derived.appointment_contact_name,
    secondary_text=derived.prop("title"),
    status=derived.appointment_status,
    date_field="startTime",
    time_bucket_field="startTime",
    sort_field="startTime",
)
