"""JSON views of canonical events for command line and service output."""

from __future__ import annotations

from .models import (
    AttendeePayload,
    ConferencePayload,
    EventPayload,
    ImportFailurePayload,
    TemporalPayload,
    TransitionPayload,
)
from .serializers import serialize_event, serialize_import_result, serialize_transitions

__all__ = [
    "AttendeePayload",
    "ConferencePayload",
    "EventPayload",
    "ImportFailurePayload",
    "TemporalPayload",
    "TransitionPayload",
    "serialize_event",
    "serialize_import_result",
    "serialize_transitions",
]
