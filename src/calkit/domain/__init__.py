"""Canonical calendar event model."""

from __future__ import annotations

from .all_day import display_bounds, exclusive_to_inclusive_end, inclusive_to_exclusive_end
from .enums import AttendeeStatus, AttendeeType, Ordering, ProviderId, ValidationCode
from .errors import (
    CalkitError,
    DecodeError,
    InvalidArgument,
    InvalidConversion,
    InvalidEvent,
    PersistenceError,
    ReadOnlyEvent,
    StaleMutation,
    UnknownEvent,
    ValidationError,
)
from .models import Attendee, CalendarEvent, Conference, create_draft_event, create_draft_id, is_draft_id
from .temporal import (
    Instant,
    PlainDate,
    TemporalValue,
    ZonedCivilTime,
    compare,
    resolve_to_instant,
    to_plain_date,
    with_zone,
)
from .validation import ensure_valid, validate

__all__ = [
    "Attendee",
    "AttendeeStatus",
    "AttendeeType",
    "CalendarEvent",
    "CalkitError",
    "Conference",
    "DecodeError",
    "Instant",
    "InvalidArgument",
    "InvalidConversion",
    "InvalidEvent",
    "Ordering",
    "PersistenceError",
    "PlainDate",
    "ProviderId",
    "ReadOnlyEvent",
    "StaleMutation",
    "TemporalValue",
    "UnknownEvent",
    "ValidationCode",
    "ValidationError",
    "ZonedCivilTime",
    "compare",
    "create_draft_event",
    "create_draft_id",
    "display_bounds",
    "ensure_valid",
    "exclusive_to_inclusive_end",
    "inclusive_to_exclusive_end",
    "is_draft_id",
    "resolve_to_instant",
    "to_plain_date",
    "validate",
    "with_zone",
]
