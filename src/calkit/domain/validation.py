from __future__ import annotations

import logging
from typing import List

from .enums import Ordering, ValidationCode
from .errors import InvalidEvent, ValidationError
from .models import CalendarEvent
from .temporal import PlainDate, compare, same_kind

logger = logging.getLogger(__name__)


def validate(event: CalendarEvent) -> List[ValidationError]:
    """Check the canonical event invariants. An empty list means valid."""

    errors: List[ValidationError] = []
    if not event.id:
        errors.append(ValidationError(ValidationCode.MISSING_ID, "event id is empty"))

    if not same_kind(event.start, event.end):
        errors.append(
            ValidationError(
                ValidationCode.VARIANT_MISMATCH,
                f"start is {type(event.start).__name__} but end is {type(event.end).__name__}",
            )
        )
    elif compare(event.end, event.start, event.reference_zone) is Ordering.BEFORE:
        errors.append(
            ValidationError(ValidationCode.END_BEFORE_START, f"end {event.end} is before start {event.start}")
        )

    if event.all_day != isinstance(event.start, PlainDate):
        errors.append(
            ValidationError(
                ValidationCode.ALL_DAY_MISMATCH,
                f"allDay={event.all_day} does not match a {type(event.start).__name__} start",
            )
        )

    seen: set[str] = set()
    for attendee in event.attendees:
        if attendee.key in seen:
            errors.append(
                ValidationError(ValidationCode.DUPLICATE_ATTENDEE, f"attendee {attendee.email} is listed twice")
            )
        seen.add(attendee.key)
    return errors


def ensure_valid(event: CalendarEvent) -> CalendarEvent:
    errors = validate(event)
    if errors:
        logger.debug("Event %s failed validation: %s", event.id, errors)
        raise InvalidEvent(event.id, errors)
    return event


def is_valid(event: CalendarEvent) -> bool:
    return not validate(event)
