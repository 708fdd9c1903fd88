from datetime import UTC, datetime, timedelta, timezone

import pytest

from crm_dashboard.features.records import derived
from crm_dashboard.features.records.derived import TimestampError

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


class TestFirstNonEmpty:
    def test_returns_first_truthy_in_order(self):
        record = {"a": "", "b": None, "c": "third", "d": "fourth"}
        accessors = [derived.prop(k) for k in "abcd"]

        assert derived.first_non_empty(record, accessors) == "third"

    def test_falls_back_to_default(self):
        assert derived.first_non_empty({}, [derived.prop("x")], "fallback") == "fallback"


class TestContactName:
    def test_contact_name_wins(self):
        contact = {"contactName": "Ann Lee", "firstName": "Other", "lastName": "Person"}
        assert derived.contact_name(contact) == "Ann Lee"

    def test_raw_name_parts_preferred_over_plain(self):
        contact = {"firstNameRaw": "ann", "firstName": "Ann", "lastName": "Lee"}
        assert derived.contact_name(contact) == "ann Lee"

    def test_single_part_is_trimmed(self):
        assert derived.contact_name({"lastName": "Lee"}) == "Lee"

    def test_placeholder_when_no_name(self):
        assert derived.contact_name({"email": "x@y.com"}) == "Unknown"

    def test_initials_use_first_two_tokens(self):
        assert derived.contact_initials({"contactName": "ann marie lee"}) == "AM"

    def test_initials_placeholder_for_unknown(self):
        assert derived.contact_initials({}) == "?"


class TestAppointmentStatus:
    def test_legacy_key_honoured_before_default(self):
        appointment = {"appointmentStatus": None, "appoinmentStatus": "showed"}
        assert derived.appointment_status(appointment) == "showed"

    def test_current_key_wins_over_legacy(self):
        appointment = {"appointmentStatus": "confirmed", "appoinmentStatus": "showed", "status": "x"}
        assert derived.appointment_status(appointment) == "confirmed"

    def test_plain_status_used_last(self):
        assert derived.appointment_status({"status": "booked"}) == "booked"

    def test_defaults_to_pending(self):
        assert derived.appointment_status({}) == "pending"

    @pytest.mark.parametrize(
        "status,variant",
        [
            ("Confirmed", "default"),
            ("showed", "default"),
            ("no-show", "destructive"),
            ("cancelled", "destructive"),
            ("pending", "secondary"),
            (None, "secondary"),
        ],
    )
    def test_badge_variant(self, status, variant):
        assert derived.status_badge_variant(status) == variant


class TestAppointmentContactName:
    def test_snapshot_name(self):
        assert derived.appointment_contact_name({"contact": {"name": "Bob Ray"}}) == "Bob Ray"

    def test_snapshot_parts(self):
        appointment = {"contact": {"firstName": "Bob", "lastName": "Ray"}}
        assert derived.appointment_contact_name(appointment) == "Bob Ray"

    def test_missing_snapshot(self):
        assert derived.appointment_contact_name({"contact": None}) == "Unknown Contact"


class TestContactFlags:
    def test_calendar_attribution_means_booked(self):
        contact = {"attributions": [{"medium": "form"}, {"medium": "calendar", "pageUrl": "u"}]}

        assert derived.has_appointment(contact) is True
        assert derived.booking_url(contact) == "u"

    def test_medium_must_match_exactly(self):
        contact = {"attributions": [{"medium": "Calendar"}]}
        assert derived.has_appointment(contact) is False

    def test_resume_url_first_matching_field(self):
        contact = {
            "customFields": [
                {"id": "1", "value": "hello"},
                {"id": "2", "value": "https://x/documents/download/abc"},
                {"id": "3", "value": "https://x/cv.pdf"},
            ]
        }
        assert derived.resume_url(contact) == "https://x/documents/download/abc"

    def test_resume_url_pdf(self):
        assert derived.resume_url({"customFields": [{"value": "https://x/cv.pdf"}]}) == (
            "https://x/cv.pdf"
        )

    def test_no_resume(self):
        assert derived.resume_url({"customFields": [{"value": 12}]}) is None
        assert derived.has_resume({}) is False

    def test_defaults(self):
        assert derived.contact_type({}) == "lead"
        assert derived.contact_source({}) == "Direct"

    def test_location_line(self):
        assert derived.contact_location({"city": "Austin", "country": "US"}) == "Austin, US"
        assert derived.contact_location({}) is None


class TestTimestamps:
    def test_iso_with_z(self):
        assert derived.parse_timestamp("2024-01-10T10:00:00Z") == datetime(
            2024, 1, 10, 10, tzinfo=UTC
        )

    def test_date_only_is_utc_midnight(self):
        assert derived.parse_timestamp("2024-01-10") == datetime(2024, 1, 10, tzinfo=UTC)

    def test_epoch_millis(self):
        assert derived.parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=UTC)

    def test_missing_is_none(self):
        assert derived.parse_timestamp(None) is None
        assert derived.parse_timestamp("") is None

    def test_malformed_raises(self):
        with pytest.raises(TimestampError):
            derived.parse_timestamp("not a date")

    def test_safe_timestamp_swallows_malformed(self):
        assert derived.safe_timestamp("not a date") is None


class TestTimeBucket:
    def test_today(self):
        assert derived.time_bucket("2024-03-15T20:00:00Z", NOW) == "today"

    def test_earlier_today_is_still_today(self):
        assert derived.time_bucket("2024-03-15T01:00:00Z", NOW) == "today"

    def test_upcoming(self):
        assert derived.time_bucket((NOW + timedelta(days=2)).isoformat(), NOW) == "upcoming"

    def test_past(self):
        assert derived.time_bucket("2024-01-01T00:00:00Z", NOW) == "past"

    def test_missing_and_malformed_are_past(self):
        assert derived.time_bucket(None, NOW) == "past"
        assert derived.time_bucket("garbage", NOW) == "past"

    def test_day_follows_timezone_of_now(self):
        # 23:30 UTC on the 15th is already the 16th at UTC+2
        plus_two = timezone(timedelta(hours=2))
        now = datetime(2024, 3, 16, 0, 15, tzinfo=plus_two)

        assert derived.time_bucket("2024-03-15T23:30:00Z", now) == "today"
