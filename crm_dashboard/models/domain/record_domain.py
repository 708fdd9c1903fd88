# crm_dashboard/models/domain/record_domain.py
"""
Record Domain Models
Read-only views over raw GHL contact and appointment JSON.
Used by routes to build table rows; every derived value comes from the
records feature's resolver so filtering and display agree.
"""

from datetime import datetime

from crm_dashboard.features.records import derived


class Contact:
    """Domain model for a GHL contact with derived display fields."""

    def __init__(self, data: dict):
        self.id = data.get("id")
        self.name = derived.contact_name(data)
        self.initials = derived.initials(self.name)
        self.email = data.get("email")
        self.phone = data.get("phone")
        self.type = derived.contact_type(data)
        self.source = derived.contact_source(data)
        self.company_name = data.get("companyName")
        self.location = derived.contact_location(data)
        self.tags = [tag for tag in data.get("tags") or [] if isinstance(tag, str)]
        self.date_added = derived.safe_timestamp(data.get("dateAdded"))
        self.date_updated = derived.safe_timestamp(data.get("dateUpdated"))
        self.dnd = bool(data.get("dnd"))
        self.raw_data = data

    def has_appointment(self) -> bool:
        return derived.has_appointment(self.raw_data)

    def booking_url(self) -> str | None:
        return derived.booking_url(self.raw_data)

    def resume_url(self) -> str | None:
        return derived.resume_url(self.raw_data)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "initials": self.initials,
            "email": self.email,
            "phone": self.phone,
            "type": self.type,
            "source": self.source,
            "has_appointment": self.has_appointment(),
            "booking_url": self.booking_url(),
            "resume_url": self.resume_url(),
            "location": self.location,
            "company_name": self.company_name,
            "tags": self.tags,
            "date_added": self.date_added.isoformat() if self.date_added else None,
            "date_updated": self.date_updated.isoformat() if self.date_updated else None,
            "dnd": self.dnd,
        }


class Appointment:
    """Domain model for a GHL calendar event."""

    def __init__(self, data: dict):
        self.id = data.get("id")
        self.title = data.get("title")
        self.calendar_id = data.get("calendarId")
        self.contact_id = data.get("contactId")
        self.status = derived.appointment_status(data)
        self.start_time = derived.safe_timestamp(data.get("startTime"))
        self.end_time = derived.safe_timestamp(data.get("endTime"))
        self.address = data.get("address")
        self.notes = data.get("notes")
        self.contact_name = derived.appointment_contact_name(data)
        contact = data.get("contact") if isinstance(data.get("contact"), dict) else {}
        self.contact_email = contact.get("email")
        self.contact_phone = contact.get("phone")
        self.raw_data = data

    def badge_variant(self) -> str:
        return derived.status_badge_variant(self.status)

    def time_bucket(self, now: datetime) -> str:
        return derived.appointment_time_bucket(self.raw_data, now)

    def duration_minutes(self) -> int:
        """Get appointment duration in minutes."""
        if not self.start_time or not self.end_time:
            return 0
        return int((self.end_time - self.start_time).total_seconds() / 60)

    def to_dict(self, now: datetime) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "title": self.title,
            "calendar_id": self.calendar_id,
            "contact_id": self.contact_id,
            "status": self.status,
            "badge_variant": self.badge_variant(),
            "time_bucket": self.time_bucket(now),
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_minutes": self.duration_minutes(),
            "address": self.address,
            "notes": self.notes,
            "contact_name": self.contact_name,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
        }
