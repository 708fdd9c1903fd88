"""
Records feature package.

Derived-field resolution, filter criteria, the filter/sort engine, and the
in-memory view state the dashboard tables read from.
"""

from .criteria import APPOINTMENTS_VIEW, CONTACTS_VIEW, FilterCriteria, RecordView
from .engine import (
    DisplayPage,
    bucket_counts,
    paginate_for_display,
    visible_appointments,
    visible_contacts,
    visible_records,
)
from .view_state import RecordViewState

__all__ = [
    "APPOINTMENTS_VIEW",
    "CONTACTS_VIEW",
    "DisplayPage",
    "FilterCriteria",
    "RecordView",
    "RecordViewState",
    "bucket_counts",
    "paginate_for_display",
    "visible_appointments",
    "visible_contacts",
    "visible_records",
]
