from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from calkit.codecs import ics
from calkit.domain import (
    AttendeeStatus,
    AttendeeType,
    DecodeError,
    Instant,
    InvalidConversion,
    PlainDate,
    ProviderId,
    ZonedCivilTime,
)

STAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)

ALL_DAY_EVENT = """BEGIN:VEVENT
UID:allday-1
DTSTAMP:20240101T000000Z
DTSTART;VALUE=DATE:20240301
DTEND;VALUE=DATE:20240302
SUMMARY:Holiday
END:VEVENT
"""

MEETING = """BEGIN:VEVENT
UID:meeting-1
DTSTAMP:20240101T000000Z
DTSTART;TZID=America/New_York:20240312T090000
DTEND;TZID=America/New_York:20240312T100000
SUMMARY:Planning
LOCATION:Room 4
STATUS:CONFIRMED
RRULE:FREQ=WEEKLY;BYDAY=TU
ATTENDEE;CN=Ann;PARTSTAT=ACCEPTED;ROLE=REQ-PARTICIPANT:mailto:ann@example.com
ATTENDEE;PARTSTAT=X-MAYBE;ROLE=OPT-PARTICIPANT:mailto:bob@example.com
ATTENDEE;CUTYPE=ROOM;PARTSTAT=NEEDS-ACTION:mailto:room4@example.com
END:VEVENT
"""


def _calendar(*events: str) -> str:
    body = "".join(events)
    return f"BEGIN:VCALENDAR\nVERSION:2.0\nPRODID:-//test//EN\n{body}END:VCALENDAR\n"


ALL_DAY = _calendar(ALL_DAY_EVENT)


def test_detect_type():
    assert ics.detect_type(ALL_DAY) == ics.CALENDAR
    assert ics.detect_type(MEETING) == ics.EVENT
    assert ics.detect_type("") == ics.CALENDAR


def test_all_day_end_is_inclusive():
    event = ics.decode(ALL_DAY)

    assert event.id == "allday-1"
    assert event.all_day is True
    assert event.start == PlainDate(date(2024, 3, 1))
    assert event.end == PlainDate(date(2024, 3, 1))
    assert event.provider_id is ProviderId.ICS


def test_all_day_export_restores_exclusive_end():
    text = ics.encode(ics.decode(ALL_DAY), stamp=STAMP)

    assert "DTSTART;VALUE=DATE:20240301" in text
    assert "DTEND;VALUE=DATE:20240302" in text
    assert ics.decode(text).end == PlainDate(date(2024, 3, 1))


def test_bare_vevent_with_tzid_and_attendees():
    event = ics.decode(MEETING)

    assert event.start == ZonedCivilTime(datetime(2024, 3, 12, 9, 0), "America/New_York")
    assert event.end == ZonedCivilTime(datetime(2024, 3, 12, 10, 0), "America/New_York")
    assert event.status == "confirmed"
    assert event.location == "Room 4"
    assert event.recurrence == ("RRULE:FREQ=WEEKLY;BYDAY=TU",)

    ann, bob, room = event.attendees
    assert (ann.email, ann.name, ann.status, ann.type) == (
        "ann@example.com",
        "Ann",
        AttendeeStatus.ACCEPTED,
        AttendeeType.REQUIRED,
    )
    assert (bob.status, bob.type) == (AttendeeStatus.UNKNOWN, AttendeeType.OPTIONAL)
    assert (room.status, room.type) == (AttendeeStatus.NEEDS_ACTION, AttendeeType.RESOURCE)


def test_windows_tzid_is_mapped_to_iana():
    text = MEETING.replace("TZID=America/New_York", "TZID=Eastern Standard Time")
    event = ics.decode(text)
    assert event.start == ZonedCivilTime(datetime(2024, 3, 12, 9, 0), "America/New_York")


def test_utc_and_floating_date_times():
    utc = MEETING.replace("DTSTART;TZID=America/New_York:20240312T090000", "DTSTART:20240312T130000Z").replace(
        "DTEND;TZID=America/New_York:20240312T100000", "DTEND:20240312T140000Z"
    )
    assert ics.decode(utc).start == Instant(datetime(2024, 3, 12, 13, 0, tzinfo=timezone.utc))

    floating = MEETING.replace("DTSTART;TZID=America/New_York:", "DTSTART:").replace(
        "DTEND;TZID=America/New_York:", "DTEND:"
    )
    event = ics.decode(floating, floating_time_zone="Europe/Berlin")
    assert event.start == ZonedCivilTime(datetime(2024, 3, 12, 9, 0), "Europe/Berlin")


def test_duration_replaces_missing_end():
    text = MEETING.replace("DTEND;TZID=America/New_York:20240312T100000", "DURATION:PT1H30M")
    event = ics.decode(text)
    assert event.end == ZonedCivilTime(datetime(2024, 3, 12, 10, 30), "America/New_York")


def test_missing_end_and_duration_uses_start():
    text = MEETING.replace("DTEND;TZID=America/New_York:20240312T100000\n", "")
    event = ics.decode(text)
    assert event.end == event.start


def test_round_trip_keeps_times_and_attendees():
    original = ics.decode(MEETING)
    decoded = ics.decode(ics.encode(original, stamp=STAMP))

    assert decoded.start == original.start
    assert decoded.end == original.end
    assert decoded.all_day == original.all_day
    assert decoded.status == original.status
    assert decoded.recurrence == original.recurrence
    assert {(item.email, item.status, item.type) for item in decoded.attendees} == {
        (item.email, item.status, item.type) for item in original.attendees
    }


def test_encode_calendar_wraps_events():
    events = [ics.decode(ALL_DAY), ics.decode(MEETING)]
    text = ics.encode_calendar(events, prod_id="-//calkit test//EN", stamp=STAMP)

    assert text.startswith("BEGIN:VCALENDAR")
    assert "PRODID:-//calkit test//EN" in text
    assert "VERSION:2.0" in text
    kind, result = ics.import_ics(text)
    assert kind == ics.CALENDAR
    assert [event.id for event in result.events] == ["allday-1", "meeting-1"]


def test_batch_import_reports_failures():
    no_start = "BEGIN:VEVENT\nUID:broken-1\nDTSTAMP:20240101T000000Z\nSUMMARY:No start\nEND:VEVENT\n"
    backwards = MEETING.replace("UID:meeting-1", "UID:broken-2").replace("T100000", "T080000")
    text = _calendar(ALL_DAY_EVENT, no_start, backwards)

    kind, result = ics.import_ics(text)

    assert kind == ics.CALENDAR
    assert [event.id for event in result.events] == ["allday-1"]
    assert [(failure.index, failure.item_id) for failure in result.failures] == [(1, "broken-1"), (2, "broken-2")]
    assert not result.ok


def test_import_of_bare_event():
    kind, result = ics.import_ics(MEETING)
    assert kind == ics.EVENT
    assert result.ok and result.events[0].id == "meeting-1"


def test_decode_errors():
    with pytest.raises(DecodeError):
        ics.decode("")
    with pytest.raises(DecodeError):
        ics.decode("BEGIN:VCALENDAR\nVERSION:2.0\nEND:VCALENDAR\n")
    with pytest.raises(DecodeError) as excinfo:
        ics.decode(MEETING.replace("UID:meeting-1\n", ""))
    assert "UID" in excinfo.value.reason


def test_recurrence_dates_are_decoded():
    text = MEETING.replace(
        "RRULE:FREQ=WEEKLY;BYDAY=TU\n",
        "RRULE:FREQ=WEEKLY;BYDAY=TU\n"
        "RDATE:20240330T130000Z\n"
        "EXDATE;TZID=America/New_York:20240319T090000,20240326T090000\n",
    )
    event = ics.decode(text)

    assert event.recurrence == (
        "RRULE:FREQ=WEEKLY;BYDAY=TU",
        "RDATE:20240330T130000Z",
        "EXDATE;TZID=America/New_York:20240319T090000,20240326T090000",
    )


def test_recurrence_exceptions_are_exported(meeting):
    lines = (
        "RRULE:FREQ=WEEKLY;COUNT=4",
        "EXDATE;TZID=America/New_York:20240319T090000",
        "EXDATE:20240326T130000Z",
    )
    text = ics.encode(replace(meeting, recurrence=lines), stamp=STAMP)

    assert "EXDATE;TZID=America/New_York:20240319T090000" in text
    assert "EXDATE:20240326T130000Z" in text
    assert ics.decode(text).recurrence == lines


def test_unreadable_recurrence_line_is_an_invalid_conversion(meeting):
    with pytest.raises(InvalidConversion):
        ics.encode(replace(meeting, recurrence=("EXDATE:not-a-date",)), stamp=STAMP)


def test_encode_calendar_adds_time_zone_definitions(meeting, holiday):
    text = ics.encode_calendar([holiday, meeting], stamp=STAMP)

    assert text.count("BEGIN:VTIMEZONE") == 1
    assert "TZID:America/New_York" in text
    assert text.index("BEGIN:VTIMEZONE") < text.index("BEGIN:VEVENT")
    _, result = ics.import_ics(text)
    assert [event.start for event in result.events] == [holiday.start, meeting.start]


def test_floating_free_calendar_needs_no_time_zone_definitions(holiday):
    assert "BEGIN:VTIMEZONE" not in ics.encode_calendar([holiday], stamp=STAMP)


def test_second_pass_of_repeated_hour_is_written_in_utc(repeated_hour_meeting):
    text = ics.encode(repeated_hour_meeting, stamp=STAMP)

    assert "DTSTART:20241103T063000Z" in text
    assert "DTEND:20241103T070000Z" in text
    decoded = ics.decode(text)
    assert decoded.start == Instant(datetime(2024, 11, 3, 6, 30, tzinfo=timezone.utc))
    assert decoded.end == Instant(datetime(2024, 11, 3, 7, 0, tzinfo=timezone.utc))
