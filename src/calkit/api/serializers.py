from __future__ import annotations

from typing import Any, Dict, Iterable, List

from ..codecs.base import ImportResult
from ..domain import CalendarEvent
from ..timezones import Transition
from .models import EventPayload, ImportFailurePayload, TransitionPayload


def serialize_event(event: CalendarEvent, *, display_zone: str = "UTC") -> Dict[str, Any]:
    return EventPayload.from_domain(event, display_zone=display_zone).model_dump(by_alias=True)


def serialize_import_result(result: ImportResult, *, display_zone: str = "UTC") -> Dict[str, Any]:
    return {
        "events": [serialize_event(event, display_zone=display_zone) for event in result.events],
        "failures": [ImportFailurePayload.from_domain(item).model_dump(by_alias=True) for item in result.failures],
    }


def serialize_transitions(transitions: Iterable[Transition], zone: str) -> List[Dict[str, Any]]:
    return [TransitionPayload.from_domain(item, zone).model_dump(by_alias=True) for item in transitions]
