"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from calkit.config import DefaultCalendarSettings, StoreSettings, get_settings
from calkit.domain import Attendee, AttendeeStatus, CalendarEvent, Instant, PlainDate, ProviderId, ZonedCivilTime

NEW_YORK = "America/New_York"


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store_settings():
    return StoreSettings(default_time_zone=NEW_YORK, default_event_duration=60, week_starts_on=1)


@pytest.fixture
def calendar_settings():
    return DefaultCalendarSettings(provider_id=ProviderId.GOOGLE, account_id="me@example.com", calendar_id="primary")


@pytest.fixture
def meeting():
    """Confirmed one hour meeting in New York."""
    return CalendarEvent(
        id="evt-meeting",
        title="Planning",
        start=ZonedCivilTime(datetime(2024, 3, 12, 9, 0), NEW_YORK),
        end=ZonedCivilTime(datetime(2024, 3, 12, 10, 0), NEW_YORK),
        provider_id=ProviderId.GOOGLE,
        attendees=(
            Attendee(email="ann@example.com", name="Ann", status=AttendeeStatus.ACCEPTED),
            Attendee(email="bob@example.com", status=AttendeeStatus.NEEDS_ACTION),
        ),
    )


@pytest.fixture
def holiday():
    """Two day all-day event, 1 and 2 March 2024."""
    return CalendarEvent(
        id="evt-holiday",
        title="Offsite",
        start=PlainDate(date(2024, 3, 1)),
        end=PlainDate(date(2024, 3, 2)),
        all_day=True,
        provider_id=ProviderId.GOOGLE,
    )


@pytest.fixture
def repeated_hour_meeting():
    """Half hour starting at the second 01:30 of New York's 2024 fall-back night."""
    start = ZonedCivilTime.from_instant(Instant(datetime(2024, 11, 3, 6, 30, tzinfo=timezone.utc)), NEW_YORK)
    end = ZonedCivilTime.from_instant(Instant(datetime(2024, 11, 3, 7, 0, tzinfo=timezone.utc)), NEW_YORK)
    return CalendarEvent(id="evt-repeated", title="Night shift", start=start, end=end, provider_id=ProviderId.GOOGLE)
