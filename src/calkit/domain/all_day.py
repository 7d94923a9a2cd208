"""All-day boundary rule.

Google, Microsoft and iCalendar encode an all-day event's end as the day
*after* the last included day. The canonical model stores the inclusive last
day instead, so a one-day event has ``start == end``.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Tuple

from .models import CalendarEvent
from .temporal import Instant, PlainDate, resolve_to_instant

_LAST_MOMENT = timedelta(milliseconds=1)


def exclusive_to_inclusive_end(start: PlainDate, exclusive_end: PlainDate) -> PlainDate:
    """Last included day. An end before ``start`` is returned as is and fails validation."""

    if exclusive_end.value > start.value:
        return exclusive_end.add_days(-1)
    if exclusive_end.value < start.value:
        return exclusive_end
    return start


def inclusive_to_exclusive_end(inclusive_end: PlainDate) -> PlainDate:
    return inclusive_end.add_days(1)


def display_bounds(event: CalendarEvent, zone: str) -> Tuple[Instant, Instant]:
    """Closed interval covered by ``event`` as seen from ``zone``."""

    start = resolve_to_instant(event.start, zone)
    if isinstance(event.end, PlainDate):
        next_day = resolve_to_instant(inclusive_to_exclusive_end(event.end), zone)
        return start, Instant(next_day.value - _LAST_MOMENT)
    return start, resolve_to_instant(event.end, zone)
