from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..codecs.base import ImportFailure
from ..codecs.colors import color_hex
from ..domain import Attendee, CalendarEvent, Conference, Instant, PlainDate, TemporalValue, ZonedCivilTime
from ..domain.all_day import display_bounds
from ..timezones import Transition


class TemporalPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: str
    value: str
    time_zone: Optional[str] = Field(default=None, alias="timeZone")

    @classmethod
    def from_domain(cls, value: TemporalValue) -> "TemporalPayload":
        if isinstance(value, Instant):
            return cls(kind="instant", value=value.isoformat())
        if isinstance(value, ZonedCivilTime):
            return cls(kind="zoned", value=value.isoformat(), time_zone=value.zone)
        if isinstance(value, PlainDate):
            return cls(kind="date", value=value.isoformat())
        raise TypeError(f"Unsupported temporal value: {value!r}")


class AttendeePayload(BaseModel):
    email: str
    name: Optional[str] = None
    status: str
    type: str

    @classmethod
    def from_domain(cls, attendee: Attendee) -> "AttendeePayload":
        return cls(
            email=attendee.email,
            name=attendee.name,
            status=attendee.status.value,
            type=attendee.type.value,
        )


class ConferencePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    join_url: str = Field(alias="joinUrl")
    meeting_code: Optional[str] = Field(default=None, alias="meetingCode")
    phone_numbers: List[str] = Field(default_factory=list, alias="phoneNumbers")

    @classmethod
    def from_domain(cls, conference: Conference) -> "ConferencePayload":
        return cls(
            id=conference.id,
            name=conference.name,
            join_url=conference.join_url,
            meeting_code=conference.meeting_code,
            phone_numbers=list(conference.phone_numbers),
        )


class EventPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    url: Optional[str] = None
    start: TemporalPayload
    end: TemporalPayload
    all_day: bool = Field(alias="allDay")
    display_start: str = Field(alias="displayStart")
    display_end: str = Field(alias="displayEnd")
    attendees: List[AttendeePayload] = Field(default_factory=list)
    status: Optional[str] = None
    color: Optional[str] = None
    color_hex: Optional[str] = Field(default=None, alias="colorHex")
    read_only: bool = Field(default=False, alias="readOnly")
    recurrence: List[str] = Field(default_factory=list)
    conference: Optional[ConferencePayload] = None
    provider_id: str = Field(alias="providerId")
    account_id: str = Field(default="", alias="accountId")
    calendar_id: str = Field(default="", alias="calendarId")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, event: CalendarEvent, *, display_zone: str = "UTC") -> "EventPayload":
        display_start, display_end = display_bounds(event, display_zone)
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            location=event.location,
            url=event.url,
            start=TemporalPayload.from_domain(event.start),
            end=TemporalPayload.from_domain(event.end),
            all_day=event.all_day,
            display_start=display_start.isoformat(),
            display_end=display_end.isoformat(),
            attendees=[AttendeePayload.from_domain(attendee) for attendee in event.attendees],
            status=event.status,
            color=event.color,
            color_hex=color_hex(event.color) if event.color else None,
            read_only=event.read_only,
            recurrence=list(event.recurrence),
            conference=ConferencePayload.from_domain(event.conference) if event.conference else None,
            provider_id=event.provider_id.value,
            account_id=event.account_id,
            calendar_id=event.calendar_id,
            metadata=dict(event.metadata),
        )


class ImportFailurePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    index: int
    reason: str
    item_id: Optional[str] = Field(default=None, alias="itemId")

    @classmethod
    def from_domain(cls, failure: ImportFailure) -> "ImportFailurePayload":
        return cls(index=failure.index, reason=failure.reason, item_id=failure.item_id)


class TransitionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    instant: str
    local_date_time: str = Field(alias="localDateTime")
    offset_before: str = Field(alias="offsetBefore")
    offset_after: str = Field(alias="offsetAfter")

    @classmethod
    def from_domain(cls, transition: Transition, zone: str) -> "TransitionPayload":
        return cls(
            instant=transition.instant.isoformat(),
            local_date_time=transition.local_datetime(zone).isoformat(),
            offset_before=transition.offset_before,
            offset_after=transition.offset_after,
        )
