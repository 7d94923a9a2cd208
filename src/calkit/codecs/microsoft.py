"""Microsoft Graph style event objects.

Graph sends wall-clock ``dateTime`` strings (seven fractional digits) next to
a ``timeZone`` that can be an IANA id or a Windows zone name. Outlook's own
zone names are remembered in ``metadata`` so that an exported event keeps the
zone its organizer picked.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..domain.all_day import exclusive_to_inclusive_end, inclusive_to_exclusive_end
from ..domain.enums import AttendeeStatus, AttendeeType, ProviderId
from ..domain.errors import DecodeError, InvalidConversion
from ..domain.models import Attendee, CalendarEvent
from ..domain.temporal import UTC, Instant, PlainDate, TemporalValue, ZonedCivilTime, unambiguous_bounds
from .base import checked
from .colors import color_from_microsoft, color_to_microsoft, is_color_category
from .windows_zones import is_utc, to_iana

logger = logging.getLogger(__name__)

RESPONSE_STATUS: Dict[str, AttendeeStatus] = {
    "accepted": AttendeeStatus.ACCEPTED,
    "organizer": AttendeeStatus.ACCEPTED,
    "declined": AttendeeStatus.DECLINED,
    "tentativelyAccepted": AttendeeStatus.TENTATIVE,
    "notResponded": AttendeeStatus.NEEDS_ACTION,
    "none": AttendeeStatus.UNKNOWN,
}

_RESPONSE_BY_STATUS: Dict[AttendeeStatus, str] = {
    AttendeeStatus.ACCEPTED: "accepted",
    AttendeeStatus.DECLINED: "declined",
    AttendeeStatus.TENTATIVE: "tentativelyAccepted",
    AttendeeStatus.NEEDS_ACTION: "notResponded",
    AttendeeStatus.UNKNOWN: "none",
}

ATTENDEE_TYPES: Dict[str, AttendeeType] = {
    "required": AttendeeType.REQUIRED,
    "optional": AttendeeType.OPTIONAL,
    "resource": AttendeeType.RESOURCE,
}

SHOW_AS = {value.lower(): value for value in ("free", "tentative", "busy", "oof", "workingElsewhere", "unknown")}

_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


class MicrosoftDateTimeTimeZone(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_time: str = Field(alias="dateTime")
    time_zone: Optional[str] = Field(default=None, alias="timeZone")


class MicrosoftEmailAddress(BaseModel):
    address: Optional[str] = None
    name: Optional[str] = None


class MicrosoftResponseStatus(BaseModel):
    response: Optional[str] = None


class MicrosoftAttendee(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email_address: Optional[MicrosoftEmailAddress] = Field(default=None, alias="emailAddress")
    status: Optional[MicrosoftResponseStatus] = None
    type: Optional[str] = None


class MicrosoftItemBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_type: Optional[str] = Field(default=None, alias="contentType")
    content: Optional[str] = None


class MicrosoftLocation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    display_name: Optional[str] = Field(default=None, alias="displayName")


class MicrosoftEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[MicrosoftItemBody] = None
    body_preview: Optional[str] = Field(default=None, alias="bodyPreview")
    start: Optional[MicrosoftDateTimeTimeZone] = None
    end: Optional[MicrosoftDateTimeTimeZone] = None
    is_all_day: bool = Field(default=False, alias="isAllDay")
    location: Optional[MicrosoftLocation] = None
    show_as: Optional[str] = Field(default=None, alias="showAs")
    web_link: Optional[str] = Field(default=None, alias="webLink")
    attendees: List[MicrosoftAttendee] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    original_start_time_zone: Optional[str] = Field(default=None, alias="originalStartTimeZone")
    original_end_time_zone: Optional[str] = Field(default=None, alias="originalEndTimeZone")


def parse_graph_datetime(text: str) -> datetime:
    try:
        return datetime.fromisoformat(_EXTRA_FRACTION.sub(r"\1", text.strip()))
    except ValueError as exc:
        raise DecodeError(f"invalid dateTime {text!r}") from exc


def format_graph_datetime(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%S.%f") + "0"


def _parse_time(value: MicrosoftDateTimeTimeZone) -> TemporalValue:
    parsed = parse_graph_datetime(value.date_time)
    if parsed.tzinfo is not None:
        instant = Instant(parsed)
        zone = to_iana(value.time_zone)
        return ZonedCivilTime.from_instant(instant, zone) if zone and not is_utc(zone) else instant
    zone = to_iana(value.time_zone or "UTC")
    if zone is None:
        logger.debug("Unknown Graph time zone %r, reading as UTC", value.time_zone)
        zone = "UTC"
    if is_utc(zone):
        return Instant(parsed.replace(tzinfo=UTC))
    return ZonedCivilTime(parsed, zone)


def _parse_date(value: MicrosoftDateTimeTimeZone) -> PlainDate:
    return PlainDate(parse_graph_datetime(value.date_time).date())


def _parse_attendee(attendee: MicrosoftAttendee) -> Attendee:
    email = attendee.email_address.address if attendee.email_address else None
    if not email:
        raise DecodeError("attendee without an email address")
    response = attendee.status.response if attendee.status else None
    return Attendee(
        email=email,
        name=attendee.email_address.name if attendee.email_address else None,
        status=RESPONSE_STATUS.get(response or "", AttendeeStatus.UNKNOWN),
        type=ATTENDEE_TYPES.get((attendee.type or "").lower(), AttendeeType.REQUIRED),
    )


def _zone_hint(raw: Optional[str]) -> Optional[Dict[str, Optional[str]]]:
    if not raw:
        return None
    return {"raw": raw, "parsed": to_iana(raw)}


def decode(
    payload: Mapping[str, Any],
    *,
    account_id: str = "",
    calendar_id: str = "",
    read_only: bool = False,
) -> CalendarEvent:
    if not isinstance(payload, Mapping):
        raise DecodeError("Microsoft event payload must be an object")
    item_id = payload.get("id")
    try:
        model = MicrosoftEvent.model_validate(payload)
    except PydanticValidationError as exc:
        raise DecodeError(f"malformed Microsoft event ({exc.error_count()} field errors)", item_id=item_id) from exc

    if not model.id:
        raise DecodeError("Microsoft event without an id")
    if model.start is None or model.end is None:
        raise DecodeError("Microsoft event without start or end", item_id=model.id)

    try:
        if model.is_all_day:
            start: TemporalValue = _parse_date(model.start)
            end: TemporalValue = exclusive_to_inclusive_end(start, _parse_date(model.end))
        else:
            start = _parse_time(model.start)
            end = _parse_time(model.end)
        attendees = tuple(_parse_attendee(item) for item in model.attendees)
    except InvalidConversion as exc:
        raise DecodeError(str(exc), item_id=model.id) from exc
    except DecodeError as exc:
        raise DecodeError(exc.reason, item_id=model.id) from exc

    metadata: Dict[str, Any] = {}
    start_hint = _zone_hint(model.original_start_time_zone)
    end_hint = _zone_hint(model.original_end_time_zone)
    if start_hint:
        metadata["originalStartTimeZone"] = start_hint
    if end_hint:
        metadata["originalEndTimeZone"] = end_hint
    if model.categories:
        metadata["categories"] = list(model.categories)

    description = None
    if model.body and model.body.content and (model.body.content_type or "text").lower() == "text":
        description = model.body.content
    elif model.body_preview:
        description = model.body_preview

    return checked(
        CalendarEvent(
            id=model.id,
            title=model.subject,
            description=description,
            location=model.location.display_name if model.location else None,
            url=model.web_link,
            start=start,
            end=end,
            all_day=model.is_all_day,
            attendees=attendees,
            status=model.show_as.lower() if model.show_as else None,
            color=color_from_microsoft(model.categories),
            read_only=read_only,
            provider_id=ProviderId.MICROSOFT,
            account_id=account_id,
            calendar_id=calendar_id,
            metadata=metadata,
        )
    )


def encode_time(value: TemporalValue, hint: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
    raw_zone = hint.get("raw") if hint else None
    if isinstance(value, PlainDate):
        return {"dateTime": f"{value.isoformat()}T00:00:00.0000000", "timeZone": raw_zone or "UTC"}
    if isinstance(value, Instant):
        return {"dateTime": format_graph_datetime(value.value.replace(tzinfo=None)), "timeZone": "UTC"}
    if isinstance(value, ZonedCivilTime):
        zone = raw_zone if hint and hint.get("parsed") == value.zone else value.zone
        return {"dateTime": format_graph_datetime(value.civil), "timeZone": zone}
    raise TypeError(f"Unsupported temporal value: {value!r}")


def _encode_attendee(attendee: Attendee) -> Dict[str, Any]:
    address: Dict[str, str] = {"address": attendee.email}
    if attendee.name:
        address["name"] = attendee.name
    return {
        "emailAddress": address,
        "status": {"response": _RESPONSE_BY_STATUS[attendee.status]},
        "type": attendee.type.value,
    }


def _encode_categories(color: Optional[str], saved: Sequence[str]) -> List[str]:
    """Saved categories with the leading color category swapped for ``color``."""

    categories = list(saved)
    if color_from_microsoft(categories) == color:
        return categories
    if categories and is_color_category(categories[0]):
        categories = categories[1:]
    category = color_to_microsoft(color)
    if category:
        categories.insert(0, category)
    return categories


def encode(event: CalendarEvent) -> Dict[str, Any]:
    metadata = event.metadata or {}
    start_hint = metadata.get("originalStartTimeZone")
    end_hint = metadata.get("originalEndTimeZone")
    end = inclusive_to_exclusive_end(event.end) if isinstance(event.end, PlainDate) else event.end
    start, end = unambiguous_bounds(event.start, end)

    categories = _encode_categories(event.color, metadata.get("categories") or ())

    payload: Dict[str, Any] = {
        "id": None if event.is_draft else event.id,
        "subject": event.title,
        "body": {"contentType": "text", "content": event.description} if event.description else None,
        "start": encode_time(start, start_hint),
        "end": encode_time(end, end_hint),
        "isAllDay": event.all_day,
        "location": {"displayName": event.location} if event.location else None,
        "showAs": SHOW_AS.get(event.status or ""),
        "webLink": event.url,
        "categories": categories or None,
        "originalStartTimeZone": start_hint.get("raw") if start_hint else None,
        "originalEndTimeZone": end_hint.get("raw") if end_hint else None,
    }
    if event.attendees:
        payload["attendees"] = [_encode_attendee(attendee) for attendee in event.attendees]
    return {key: value for key, value in payload.items() if value is not None}
