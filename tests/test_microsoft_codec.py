from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from calkit.codecs import google, ics, microsoft
from calkit.domain import AttendeeStatus, AttendeeType, DecodeError, Instant, PlainDate, ZonedCivilTime

REVIEW = {
    "id": "m-1",
    "subject": "Design review",
    "body": {"contentType": "text", "content": "Bring sketches"},
    "start": {"dateTime": "2024-03-12T09:00:00.0000000", "timeZone": "Eastern Standard Time"},
    "end": {"dateTime": "2024-03-12T10:00:00.0000000", "timeZone": "Eastern Standard Time"},
    "originalStartTimeZone": "Eastern Standard Time",
    "originalEndTimeZone": "Eastern Standard Time",
    "location": {"displayName": "Room 4"},
    "showAs": "busy",
    "categories": ["Red category"],
    "attendees": [
        {
            "emailAddress": {"address": "ann@example.com", "name": "Ann"},
            "status": {"response": "tentativelyAccepted"},
            "type": "required",
        },
        {
            "emailAddress": {"address": "bob@example.com"},
            "status": {"response": "organizer"},
            "type": "optional",
        },
    ],
}

ALL_DAY = {
    "id": "m-2",
    "subject": "Offsite",
    "isAllDay": True,
    "start": {"dateTime": "2024-03-01T00:00:00.0000000", "timeZone": "UTC"},
    "end": {"dateTime": "2024-03-02T00:00:00.0000000", "timeZone": "UTC"},
}


def test_decode_windows_zone():
    event = microsoft.decode(REVIEW)

    assert event.start == ZonedCivilTime(datetime(2024, 3, 12, 9, 0), "America/New_York")
    assert event.end == ZonedCivilTime(datetime(2024, 3, 12, 10, 0), "America/New_York")
    assert event.title == "Design review"
    assert event.description == "Bring sketches"
    assert event.location == "Room 4"
    assert event.status == "busy"
    assert event.color == "tomato"
    assert event.metadata["originalStartTimeZone"] == {
        "raw": "Eastern Standard Time",
        "parsed": "America/New_York",
    }
    assert [(item.name, item.status, item.type) for item in event.attendees] == [
        ("Ann", AttendeeStatus.TENTATIVE, AttendeeType.REQUIRED),
        (None, AttendeeStatus.ACCEPTED, AttendeeType.OPTIONAL),
    ]


def test_utc_zone_decodes_to_instant():
    payload = {
        "id": "m-3",
        "start": {"dateTime": "2024-03-12T13:00:00.0000000", "timeZone": "UTC"},
        "end": {"dateTime": "2024-03-12T14:00:00.1234567", "timeZone": "UTC"},
    }
    event = microsoft.decode(payload)
    assert event.start == Instant(datetime(2024, 3, 12, 13, 0, tzinfo=timezone.utc))
    assert event.end.value.microsecond == 123456


def test_unknown_zone_is_read_as_utc():
    payload = {
        "id": "m-4",
        "start": {"dateTime": "2024-03-12T13:00:00", "timeZone": "Mars Standard Time"},
        "end": {"dateTime": "2024-03-12T14:00:00", "timeZone": "Mars Standard Time"},
    }
    assert microsoft.decode(payload).start == Instant(datetime(2024, 3, 12, 13, 0, tzinfo=timezone.utc))


def test_all_day_event():
    event = microsoft.decode(ALL_DAY)

    assert event.all_day is True
    assert event.start == event.end == PlainDate(date(2024, 3, 1))
    payload = microsoft.encode(event)
    assert payload["isAllDay"] is True
    assert payload["end"] == {"dateTime": "2024-03-02T00:00:00.0000000", "timeZone": "UTC"}


def test_encode_reuses_original_zone_names():
    payload = microsoft.encode(microsoft.decode(REVIEW))

    assert payload["start"] == {"dateTime": "2024-03-12T09:00:00.0000000", "timeZone": "Eastern Standard Time"}
    assert payload["originalStartTimeZone"] == "Eastern Standard Time"
    assert payload["categories"] == ["Red category"]
    assert payload["showAs"] == "busy"
    assert payload["body"] == {"contentType": "text", "content": "Bring sketches"}
    assert payload["attendees"][0]["status"] == {"response": "tentativelyAccepted"}


def test_encode_moved_event_uses_iana_zone():
    event = microsoft.decode(REVIEW)
    moved = event.with_times(
        ZonedCivilTime(datetime(2024, 3, 12, 9, 0), "Europe/London"),
        ZonedCivilTime(datetime(2024, 3, 12, 10, 0), "Europe/London"),
    )
    assert microsoft.encode(moved)["start"]["timeZone"] == "Europe/London"


def test_html_body_falls_back_to_preview():
    payload = {**REVIEW, "body": {"contentType": "html", "content": "<p>Hi</p>"}, "bodyPreview": "Hi"}
    assert microsoft.decode(payload).description == "Hi"


def test_color_from_category_encodes_when_none_stored():
    event = microsoft.decode({**ALL_DAY, "categories": []})
    assert event.color is None
    assert "categories" not in microsoft.encode(event)


def test_round_trip():
    original = microsoft.decode(REVIEW)
    decoded = microsoft.decode(microsoft.encode(original))

    assert decoded.start == original.start
    assert decoded.end == original.end
    assert decoded.all_day == original.all_day
    assert {item.email for item in decoded.attendees} == {item.email for item in original.attendees}


@pytest.mark.parametrize(
    "payload",
    [
        {**REVIEW, "id": None},
        {**REVIEW, "end": None},
        {**REVIEW, "start": {"dateTime": "next tuesday", "timeZone": "UTC"}},
        {**REVIEW, "attendees": [{"status": {"response": "accepted"}}]},
        {**REVIEW, "isAllDay": "sometimes"},
    ],
)
def test_malformed_payloads_raise_decode_error(payload):
    with pytest.raises(DecodeError):
        microsoft.decode(payload)


def test_recolor_replaces_the_color_category():
    event = replace(microsoft.decode(REVIEW), color="basil")

    payload = microsoft.encode(event)
    assert payload["categories"] == ["Green category"]
    assert microsoft.decode({**REVIEW, **payload, "id": "m-1"}).color == "basil"


def test_recolor_keeps_other_categories():
    event = microsoft.decode({**REVIEW, "categories": ["Red category", "Project X"]})

    assert microsoft.encode(replace(event, color="basil"))["categories"] == ["Green category", "Project X"]
    assert microsoft.encode(replace(event, color="peacock"))["categories"] == ["Project X"]
    assert microsoft.encode(event)["categories"] == ["Red category", "Project X"]


def test_second_pass_of_repeated_hour_is_sent_in_utc(repeated_hour_meeting):
    payload = microsoft.encode(repeated_hour_meeting)

    assert payload["start"] == {"dateTime": "2024-11-03T06:30:00.0000000", "timeZone": "UTC"}
    assert payload["end"] == {"dateTime": "2024-11-03T07:00:00.0000000", "timeZone": "UTC"}
    decoded = microsoft.decode({**payload, "id": repeated_hour_meeting.id})
    assert decoded.start == Instant(datetime(2024, 11, 3, 6, 30, tzinfo=timezone.utc))
    assert decoded.end == Instant(datetime(2024, 11, 3, 7, 0, tzinfo=timezone.utc))


def test_google_event_in_repeated_hour_keeps_its_instant_in_other_codecs():
    event = google.decode(
        {
            "id": "g-fold",
            "start": {"dateTime": "2024-11-03T01:30:00-05:00", "timeZone": "America/New_York"},
            "end": {"dateTime": "2024-11-03T02:00:00-05:00", "timeZone": "America/New_York"},
        }
    )
    expected = Instant(datetime(2024, 11, 3, 6, 30, tzinfo=timezone.utc))

    assert event.start.to_instant() == expected
    assert microsoft.decode({**microsoft.encode(event), "id": event.id}).start == expected
    assert ics.decode(ics.encode(event)).start == expected
