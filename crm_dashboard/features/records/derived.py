"""
Derived fields for contact and appointment records.

Records are the raw upstream JSON objects. Several fields can come from more
than one property; each precedence chain is an ordered list of accessors
evaluated first-non-empty-wins, so the order itself can be tested.
Nothing here raises on malformed input.
"""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, Literal

Record = dict[str, Any]
Accessor = Callable[[Record], Any]
TimeBucket = Literal["today", "upcoming", "past"]
BadgeVariant = Literal["default", "secondary", "destructive", "outline"]

UNKNOWN_CONTACT_NAME = "Unknown"
UNKNOWN_APPOINTMENT_CONTACT = "Unknown Contact"
DEFAULT_APPOINTMENT_STATUS = "pending"
DEFAULT_CONTACT_TYPE = "lead"
DEFAULT_CONTACT_SOURCE = "Direct"
PLACEHOLDER_INITIALS = "?"

CALENDAR_MEDIUM = "calendar"
RESUME_MARKERS = ("documents/download", ".pdf")

POSITIVE_STATUSES = {"confirmed", "showed", "completed"}
NEGATIVE_STATUSES = {"cancelled", "noshow", "no-show"}


class TimestampError(ValueError):
    """Raised for a timestamp value that is present but cannot be parsed."""


def prop(name: str) -> Accessor:
    """Accessor for a top-level property."""
    return lambda record: record.get(name)


def first_non_empty(record: Record, accessors: Iterable[Accessor], default: Any = None) -> Any:
    """Return the first accessor result that is truthy, else `default`."""
    for accessor in accessors:
        value = accessor(record)
        if value:
            return value
    return default


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an upstream timestamp.

    Accepts ISO-8601 strings (a trailing "Z" included) and epoch
    milliseconds. Naive values are taken as UTC.

    Returns:
        datetime | None: aware datetime, or None when the value is absent

    Raises:
        TimestampError: value is present but malformed
    """
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        raise TimestampError(f"Unsupported timestamp: {value!r}")

    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError) as e:
            raise TimestampError(f"Timestamp out of range: {value!r}") from e

    if not isinstance(value, str):
        raise TimestampError(f"Unsupported timestamp: {value!r}")

    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise TimestampError(f"Malformed timestamp: {value!r}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def safe_timestamp(value: Any) -> datetime | None:
    """Like parse_timestamp, but malformed values also come back as None."""
    try:
        return parse_timestamp(value)
    except TimestampError:
        return None


def _as_aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def time_bucket(start: Any, now: datetime) -> TimeBucket:
    """
    Classify a start timestamp relative to `now`.

    "today" is the calendar day of `now` in now's timezone (UTC when naive).
    Missing and malformed timestamps are "past".
    """
    moment = safe_timestamp(start)
    if moment is None:
        return "past"

    now = _as_aware(now)
    if moment.astimezone(now.tzinfo).date() == now.date():
        return "today"
    if moment > now:
        return "upcoming"
    return "past"


# Contacts


def _joined_contact_name(contact: Record) -> str:
    first = first_non_empty(contact, (prop("firstNameRaw"), prop("firstName")), "")
    last = first_non_empty(contact, (prop("lastNameRaw"), prop("lastName")), "")
    return f"{first} {last}".strip()


CONTACT_NAME_SOURCES: tuple[Accessor, ...] = (prop("contactName"), _joined_contact_name)


def contact_name(contact: Record) -> str:
    return first_non_empty(contact, CONTACT_NAME_SOURCES, UNKNOWN_CONTACT_NAME)


def initials(name: str) -> str:
    """Upper-cased first letters of the first two name tokens."""
    if not name or name in (UNKNOWN_CONTACT_NAME, UNKNOWN_APPOINTMENT_CONTACT):
        return PLACEHOLDER_INITIALS
    return "".join(token[0] for token in name.split()[:2]).upper() or PLACEHOLDER_INITIALS


def contact_initials(contact: Record) -> str:
    return initials(contact_name(contact))


def contact_type(contact: Record) -> str:
    return contact.get("type") or DEFAULT_CONTACT_TYPE


def contact_source(contact: Record) -> str:
    return contact.get("source") or DEFAULT_CONTACT_SOURCE


def calendar_attribution(contact: Record) -> Record | None:
    """First attribution whose medium is exactly "calendar"."""
    for attribution in contact.get("attributions") or []:
        if isinstance(attribution, dict) and attribution.get("medium") == CALENDAR_MEDIUM:
            return attribution
    return None


def has_appointment(contact: Record) -> bool:
    return calendar_attribution(contact) is not None


def booking_url(contact: Record) -> str | None:
    attribution = calendar_attribution(contact)
    return (attribution or {}).get("pageUrl") or None


def resume_url(contact: Record) -> str | None:
    """Value of the first custom field that looks like an uploaded document link."""
    for custom_field in contact.get("customFields") or []:
        if not isinstance(custom_field, dict):
            continue
        value = custom_field.get("value")
        if isinstance(value, str) and value and any(m in value for m in RESUME_MARKERS):
            return value
    return None


def has_resume(contact: Record) -> bool:
    return resume_url(contact) is not None


def contact_location(contact: Record) -> str | None:
    parts = [contact.get(key) for key in ("city", "state", "country")]
    return ", ".join(part for part in parts if part) or None


# Appointments

APPOINTMENT_STATUS_SOURCES: tuple[Accessor, ...] = (
    prop("appointmentStatus"),
    prop("appoinmentStatus"),  # legacy upstream spelling
    prop("status"),
)


def appointment_status(appointment: Record) -> str:
    return first_non_empty(appointment, APPOINTMENT_STATUS_SOURCES, DEFAULT_APPOINTMENT_STATUS)


def _snapshot(appointment: Record) -> Record:
    contact = appointment.get("contact")
    return contact if isinstance(contact, dict) else {}


def _joined_snapshot_name(appointment: Record) -> str:
    contact = _snapshot(appointment)
    return f"{contact.get('firstName') or ''} {contact.get('lastName') or ''}".strip()


APPOINTMENT_CONTACT_NAME_SOURCES: tuple[Accessor, ...] = (
    lambda appointment: _snapshot(appointment).get("name"),
    _joined_snapshot_name,
)


def appointment_contact_name(appointment: Record) -> str:
    return first_non_empty(
        appointment, APPOINTMENT_CONTACT_NAME_SOURCES, UNKNOWN_APPOINTMENT_CONTACT
    )


def appointment_time_bucket(appointment: Record, now: datetime) -> TimeBucket:
    return time_bucket(appointment.get("startTime"), now)


def status_badge_variant(status: str | None) -> BadgeVariant:
    normalized = (status or "").lower()
    if normalized in POSITIVE_STATUSES:
        return "default"
    if normalized in NEGATIVE_STATUSES:
        return "destructive"
    return "secondary"
