"""
Record filtering and ordering.

`visible_records` is a pure function of (records, criteria, now, view): it
never mutates the input and never reads the clock. Predicates run in a fixed
order and the first failure rejects the record. Display truncation lives in
`paginate_for_display`, on top of the full result.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, time

from .criteria import (
    ALL,
    APPOINTMENTS_VIEW,
    CONTACTS_VIEW,
    TIME_FILTER_ACCEPTS,
    FilterCriteria,
    RecordView,
)
from .derived import (
    Record,
    TimestampError,
    has_appointment,
    has_resume,
    parse_timestamp,
    safe_timestamp,
    time_bucket,
)

DEFAULT_DISPLAY_LIMIT = 50

Predicate = Callable[[Record, FilterCriteria, datetime, RecordView], bool]


def _text(value) -> str:
    return value.lower() if isinstance(value, str) else ""


def matches_search(record: Record, criteria: FilterCriteria, now: datetime, view: RecordView) -> bool:
    if not criteria.search:
        return True
    query = criteria.search.lower()
    candidates = (view.display_name(record), view.secondary_text(record))
    return any(query in _text(candidate) for candidate in candidates)


def matches_time_bucket(
    record: Record, criteria: FilterCriteria, now: datetime, view: RecordView
) -> bool:
    if view.time_bucket_field is None:
        return True
    accepted = TIME_FILTER_ACCEPTS.get(criteria.time_filter)
    if accepted is None:
        return True
    return time_bucket(record.get(view.time_bucket_field), now) in accepted


def matches_status(record: Record, criteria: FilterCriteria, now: datetime, view: RecordView) -> bool:
    wanted = criteria.status_filter.lower() if criteria.status_filter else ALL
    if wanted == ALL:
        return True
    # Containment, not equality: "show" matches "no-show"
    return wanted in _text(view.status(record))


def matches_presence(
    record: Record, criteria: FilterCriteria, now: datetime, view: RecordView
) -> bool:
    if not view.presence_filters:
        return True

    if criteria.appointment_filter != ALL:
        if has_appointment(record) != (criteria.appointment_filter == "booked"):
            return False

    if criteria.resume_filter != ALL:
        if has_resume(record) != (criteria.resume_filter == "has-resume"):
            return False

    return True


def day_bounds(
    criteria: FilterCriteria, now: datetime
) -> tuple[datetime | None, datetime | None]:
    """Inclusive instants for the date range, in the timezone of `now`."""
    tz = now.tzinfo or UTC
    lower = datetime.combine(criteria.date_from, time.min, tzinfo=tz) if criteria.date_from else None
    upper = datetime.combine(criteria.date_to, time.max, tzinfo=tz) if criteria.date_to else None
    return lower, upper


def matches_date_range(
    record: Record, criteria: FilterCriteria, now: datetime, view: RecordView
) -> bool:
    lower, upper = day_bounds(criteria, now)
    if lower is None and upper is None:
        return True

    try:
        moment = parse_timestamp(record.get(view.date_field))
    except TimestampError:
        # A bound is active and the value cannot be compared against it
        return False

    if moment is None:
        return True
    if lower is not None and moment < lower:
        return False
    if upper is not None and moment > upper:
        return False
    return True


PREDICATES: tuple[Predicate, ...] = (
    matches_search,
    matches_time_bucket,
    matches_status,
    matches_presence,
    matches_date_range,
)


def matches(record: Record, criteria: FilterCriteria, now: datetime, view: RecordView) -> bool:
    return all(predicate(record, criteria, now, view) for predicate in PREDICATES)


def sort_key(value) -> float:
    """Epoch seconds; missing or malformed timestamps sort as 0."""
    moment = safe_timestamp(value)
    return moment.timestamp() if moment else 0.0


def visible_records(
    records: Sequence[Record],
    criteria: FilterCriteria,
    now: datetime,
    view: RecordView,
) -> list[Record]:
    """Records passing every predicate, ordered as the view requires."""
    visible = [record for record in records if matches(record, criteria, now, view)]
    if view.sort_field:
        visible.sort(key=lambda record: sort_key(record.get(view.sort_field)), reverse=True)
    return visible


def visible_contacts(
    records: Sequence[Record], criteria: FilterCriteria, now: datetime
) -> list[Record]:
    return visible_records(records, criteria, now, CONTACTS_VIEW)


def visible_appointments(
    records: Sequence[Record], criteria: FilterCriteria, now: datetime
) -> list[Record]:
    return visible_records(records, criteria, now, APPOINTMENTS_VIEW)


@dataclass(slots=True)
class DisplayPage:
    """Rows to render plus the counts behind an "N of M" label."""

    rows: list[Record]
    filtered_count: int
    total_count: int
    limit: int

    @property
    def shown(self) -> int:
        return len(self.rows)

    @property
    def truncated(self) -> bool:
        return self.filtered_count > len(self.rows)


def paginate_for_display(
    visible: Sequence[Record], total_count: int, limit: int = DEFAULT_DISPLAY_LIMIT
) -> DisplayPage:
    return DisplayPage(
        rows=list(visible[: max(limit, 0)]),
        filtered_count=len(visible),
        total_count=total_count,
        limit=limit,
    )


def bucket_counts(appointments: Sequence[Record], now: datetime) -> dict[str, int]:
    """Header counts over the whole collection; "upcoming" includes today."""
    buckets = [time_bucket(a.get("startTime"), now) for a in appointments]
    today = buckets.count("today")
    return {
        "today": today,
        "upcoming": buckets.count("upcoming") + today,
        "past": buckets.count("past"),
    }
