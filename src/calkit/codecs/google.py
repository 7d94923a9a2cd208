"""Google Calendar style event objects."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..domain.all_day import exclusive_to_inclusive_end, inclusive_to_exclusive_end
from ..domain.enums import AttendeeStatus, AttendeeType, ProviderId
from ..domain.errors import DecodeError, InvalidConversion
from ..domain.models import Attendee, CalendarEvent, Conference
from ..domain.temporal import Instant, PlainDate, TemporalValue, ZonedCivilTime
from .base import checked
from .colors import color_from_google, color_to_google

logger = logging.getLogger(__name__)

RESPONSE_STATUS: Dict[str, AttendeeStatus] = {
    "accepted": AttendeeStatus.ACCEPTED,
    "declined": AttendeeStatus.DECLINED,
    "tentative": AttendeeStatus.TENTATIVE,
    "needsAction": AttendeeStatus.NEEDS_ACTION,
}

_RESPONSE_BY_STATUS = {status: response for response, status in RESPONSE_STATUS.items()}

DEFAULT_CONFERENCE_NAME = "Google Meet"


class GoogleEventTime(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[str] = None
    date_time: Optional[str] = Field(default=None, alias="dateTime")
    time_zone: Optional[str] = Field(default=None, alias="timeZone")


class GoogleAttendee(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    response_status: Optional[str] = Field(default=None, alias="responseStatus")
    optional: bool = False
    resource: bool = False


class GoogleEntryPoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entry_point_type: Optional[str] = Field(default=None, alias="entryPointType")
    uri: Optional[str] = None
    label: Optional[str] = None
    meeting_code: Optional[str] = Field(default=None, alias="meetingCode")
    access_code: Optional[str] = Field(default=None, alias="accessCode")
    passcode: Optional[str] = None
    password: Optional[str] = None
    pin: Optional[str] = None


class GoogleConferenceSolution(BaseModel):
    name: Optional[str] = None


class GoogleConferenceData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conference_id: Optional[str] = Field(default=None, alias="conferenceId")
    conference_solution: Optional[GoogleConferenceSolution] = Field(default=None, alias="conferenceSolution")
    entry_points: List[GoogleEntryPoint] = Field(default_factory=list, alias="entryPoints")


class GoogleEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None
    html_link: Optional[str] = Field(default=None, alias="htmlLink")
    color_id: Optional[Union[str, int]] = Field(default=None, alias="colorId")
    start: Optional[GoogleEventTime] = None
    end: Optional[GoogleEventTime] = None
    attendees: List[GoogleAttendee] = Field(default_factory=list)
    recurrence: List[str] = Field(default_factory=list)
    conference_data: Optional[GoogleConferenceData] = Field(default=None, alias="conferenceData")


def _parse_date(value: GoogleEventTime) -> PlainDate:
    if not value.date:
        raise DecodeError("all-day boundary without a date")
    return PlainDate.parse(value.date)


def _parse_date_time(value: GoogleEventTime) -> TemporalValue:
    if not value.date_time:
        raise DecodeError("timed boundary without a dateTime")
    try:
        parsed = datetime.fromisoformat(value.date_time)
    except ValueError as exc:
        raise DecodeError(f"invalid dateTime {value.date_time!r}") from exc
    if parsed.tzinfo is None:
        if not value.time_zone:
            raise DecodeError(f"dateTime {value.date_time!r} has no offset and no timeZone")
        return ZonedCivilTime(parsed, value.time_zone)
    instant = Instant(parsed)
    if value.time_zone:
        return ZonedCivilTime.from_instant(instant, value.time_zone)
    return instant


def _parse_attendee(attendee: GoogleAttendee) -> Attendee:
    if not attendee.email:
        raise DecodeError("attendee without an email")
    if attendee.resource:
        kind = AttendeeType.RESOURCE
    elif attendee.optional:
        kind = AttendeeType.OPTIONAL
    else:
        kind = AttendeeType.REQUIRED
    return Attendee(
        email=attendee.email,
        name=attendee.display_name,
        status=RESPONSE_STATUS.get(attendee.response_status or "", AttendeeStatus.UNKNOWN),
        type=kind,
    )


def _parse_conference(data: Optional[GoogleConferenceData]) -> Optional[Conference]:
    """Conference details from ``conferenceData``; ``None`` without a video entry point."""

    if data is None:
        return None
    video = next((item for item in data.entry_points if item.entry_point_type == "video" and item.uri), None)
    if video is None:
        return None
    solution = data.conference_solution
    return Conference(
        join_url=video.uri,
        name=solution.name if solution and solution.name else DEFAULT_CONFERENCE_NAME,
        id=data.conference_id,
        meeting_code=video.meeting_code or video.access_code,
        password=video.passcode or video.password,
        phone_numbers=tuple(
            item.uri for item in data.entry_points if item.entry_point_type == "phone" and item.uri
        ),
    )


def decode(
    payload: Mapping[str, Any],
    *,
    account_id: str = "",
    calendar_id: str = "",
    read_only: bool = False,
) -> CalendarEvent:
    if not isinstance(payload, Mapping):
        raise DecodeError("Google event payload must be an object")
    item_id = payload.get("id")
    try:
        model = GoogleEvent.model_validate(payload)
    except PydanticValidationError as exc:
        raise DecodeError(f"malformed Google event ({exc.error_count()} field errors)", item_id=item_id) from exc

    if not model.id:
        raise DecodeError("Google event without an id")
    if model.start is None or model.end is None:
        raise DecodeError("Google event without start or end", item_id=model.id)

    try:
        all_day = model.start.date_time is None
        if all_day:
            start: TemporalValue = _parse_date(model.start)
            end: TemporalValue = exclusive_to_inclusive_end(start, _parse_date(model.end))
        else:
            start = _parse_date_time(model.start)
            end = _parse_date_time(model.end)
        attendees = tuple(_parse_attendee(item) for item in model.attendees)
    except InvalidConversion as exc:
        raise DecodeError(str(exc), item_id=model.id) from exc
    except DecodeError as exc:
        raise DecodeError(exc.reason, item_id=model.id) from exc

    return checked(
        CalendarEvent(
            id=model.id,
            title=model.summary,
            description=model.description,
            location=model.location,
            url=model.html_link,
            start=start,
            end=end,
            all_day=all_day,
            attendees=attendees,
            status=model.status.lower() if model.status else None,
            color=color_from_google(str(model.color_id) if model.color_id is not None else None),
            read_only=read_only,
            recurrence=tuple(model.recurrence),
            conference=_parse_conference(model.conference_data),
            provider_id=ProviderId.GOOGLE,
            account_id=account_id,
            calendar_id=calendar_id,
        )
    )


def encode_time(value: TemporalValue) -> Dict[str, str]:
    if isinstance(value, PlainDate):
        return {"date": value.isoformat()}
    if isinstance(value, Instant):
        return {"dateTime": value.isoformat()}
    if isinstance(value, ZonedCivilTime):
        return {"dateTime": value.isoformat(), "timeZone": value.zone}
    raise TypeError(f"Unsupported temporal value: {value!r}")


def _encode_attendee(attendee: Attendee) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"email": attendee.email}
    if attendee.name:
        payload["displayName"] = attendee.name
    response = _RESPONSE_BY_STATUS.get(attendee.status)
    if response:
        payload["responseStatus"] = response
    if attendee.type is AttendeeType.OPTIONAL:
        payload["optional"] = True
    elif attendee.type is AttendeeType.RESOURCE:
        payload["resource"] = True
    return payload


def _conference_label(url: str) -> str:
    parts = urlsplit(url)
    return parts.netloc + parts.path if parts.netloc else url


def _encode_conference(conference: Conference) -> Dict[str, Any]:
    video: Dict[str, Any] = {
        "entryPointType": "video",
        "uri": conference.join_url,
        "label": _conference_label(conference.join_url),
    }
    if conference.meeting_code:
        video["meetingCode"] = conference.meeting_code
        video["accessCode"] = conference.meeting_code
    if conference.password:
        video["password"] = conference.password
        video["passcode"] = conference.password
    entry_points = [video]
    for number in conference.phone_numbers:
        phone: Dict[str, Any] = {
            "entryPointType": "phone",
            "uri": number if number.startswith("tel:") else f"tel:{number}",
            "label": number,
        }
        if conference.meeting_code:
            phone["accessCode"] = conference.meeting_code
            phone["pin"] = conference.meeting_code
        entry_points.append(phone)

    name = conference.name or DEFAULT_CONFERENCE_NAME
    payload: Dict[str, Any] = {
        "conferenceSolution": {
            "name": name,
            "key": {"type": "hangoutsMeet" if "google" in name.lower() else "addOn"},
        },
        "entryPoints": entry_points,
    }
    if conference.id:
        payload["conferenceId"] = conference.id
    return payload


def encode(event: CalendarEvent) -> Dict[str, Any]:
    end = inclusive_to_exclusive_end(event.end) if isinstance(event.end, PlainDate) else event.end
    payload: Dict[str, Any] = {
        "id": None if event.is_draft else event.id,
        "summary": event.title,
        "description": event.description,
        "location": event.location,
        "htmlLink": event.url,
        "status": event.status,
        "colorId": color_to_google(event.color),
        "start": encode_time(event.start),
        "end": encode_time(end),
    }
    if event.attendees:
        payload["attendees"] = [_encode_attendee(attendee) for attendee in event.attendees]
    if event.recurrence:
        payload["recurrence"] = list(event.recurrence)
    if event.conference:
        payload["conferenceData"] = _encode_conference(event.conference)
        payload["conferenceDataVersion"] = 1
    return {key: value for key, value in payload.items() if value is not None}
