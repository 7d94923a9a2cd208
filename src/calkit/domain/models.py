from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional, Tuple
from uuid import uuid4

from .enums import AttendeeStatus, AttendeeType, ProviderId
from .errors import InvalidConversion
from .temporal import (
    UTC_ZONE,
    Instant,
    PlainDate,
    TemporalValue,
    ZonedCivilTime,
    round_to_quarter_hour,
    to_plain_date,
    with_zone,
)

DRAFT_ID_PREFIX = "draft_"


def create_event_id() -> str:
    return uuid4().hex


def create_draft_id() -> str:
    return f"{DRAFT_ID_PREFIX}{create_event_id()}"


def is_draft_id(event_id: str) -> bool:
    return event_id.startswith(DRAFT_ID_PREFIX)


def temporal_to_record(value: TemporalValue) -> Dict[str, Any]:
    if isinstance(value, Instant):
        return {"type": "instant", "value": value.isoformat()}
    if isinstance(value, ZonedCivilTime):
        record: Dict[str, Any] = {"type": "zoned", "value": value.civil.isoformat(), "timeZone": value.zone}
        if value.is_second_occurrence:
            record["fold"] = 1
        return record
    if isinstance(value, PlainDate):
        return {"type": "date", "value": value.isoformat()}
    raise TypeError(f"Unsupported temporal value: {value!r}")


def temporal_from_record(record: Mapping[str, Any]) -> TemporalValue:
    kind = record.get("type")
    raw = str(record.get("value") or "")
    if kind == "instant":
        return Instant.parse(raw)
    if kind == "zoned":
        try:
            civil = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise InvalidConversion(f"Not an ISO 8601 date-time: {raw!r}") from exc
        if record.get("fold"):
            civil = civil.replace(fold=1)
        return ZonedCivilTime(civil, str(record.get("timeZone") or ""))
    if kind == "date":
        return PlainDate.parse(raw)
    raise InvalidConversion(f"Unknown temporal record type: {kind!r}")


@dataclass(frozen=True, slots=True)
class Attendee:
    email: str
    name: Optional[str] = None
    status: AttendeeStatus = AttendeeStatus.UNKNOWN
    type: AttendeeType = AttendeeType.REQUIRED

    @property
    def key(self) -> str:
        return self.email.strip().casefold()

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Attendee":
        return cls(
            email=str(record["email"]),
            name=record.get("name"),
            status=AttendeeStatus(record.get("status") or AttendeeStatus.UNKNOWN),
            type=AttendeeType(record.get("type") or AttendeeType.REQUIRED),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "name": self.name,
            "status": self.status.value,
            "type": self.type.value,
        }


@dataclass(frozen=True, slots=True)
class Conference:
    """Online meeting attached to an event."""

    join_url: str
    name: Optional[str] = None
    id: Optional[str] = None
    meeting_code: Optional[str] = None
    password: Optional[str] = None
    phone_numbers: Tuple[str, ...] = ()

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Conference":
        return cls(
            join_url=str(record["joinUrl"]),
            name=record.get("name"),
            id=record.get("id"),
            meeting_code=record.get("meetingCode"),
            password=record.get("password"),
            phone_numbers=tuple(record.get("phoneNumbers") or ()),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "joinUrl": self.join_url,
            "meetingCode": self.meeting_code,
            "password": self.password,
            "phoneNumbers": list(self.phone_numbers),
        }


@dataclass(frozen=True, slots=True)
class CalendarEvent:
    """Provider-agnostic calendar event.

    For all-day events ``start`` and ``end`` are :class:`PlainDate` values and
    ``end`` is the last day the event covers (inclusive). Codecs translate from
    and to the exclusive end dates used on the wire.
    """

    id: str
    start: TemporalValue
    end: TemporalValue
    all_day: bool = False
    provider_id: ProviderId = ProviderId.ICS
    account_id: str = ""
    calendar_id: str = ""
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    url: Optional[str] = None
    attendees: Tuple[Attendee, ...] = ()
    status: Optional[str] = None
    color: Optional[str] = None
    read_only: bool = False
    recurrence: Tuple[str, ...] = ()
    conference: Optional[Conference] = None
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    @property
    def is_draft(self) -> bool:
        return is_draft_id(self.id)

    @property
    def reference_zone(self) -> str:
        """Zone used to resolve this event's own boundaries."""

        for value in (self.start, self.end):
            if isinstance(value, ZonedCivilTime):
                return value.zone
        return UTC_ZONE

    def with_times(self, start: TemporalValue, end: TemporalValue) -> "CalendarEvent":
        return replace(self, start=start, end=end, all_day=isinstance(start, PlainDate))

    def with_id(self, event_id: str) -> "CalendarEvent":
        return replace(self, id=event_id)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CalendarEvent":
        return cls(
            id=str(record["id"]),
            start=temporal_from_record(record["start"]),
            end=temporal_from_record(record["end"]),
            all_day=bool(record.get("allDay", False)),
            provider_id=ProviderId(record.get("providerId") or ProviderId.ICS),
            account_id=record.get("accountId") or "",
            calendar_id=record.get("calendarId") or "",
            title=record.get("title"),
            description=record.get("description"),
            location=record.get("location"),
            url=record.get("url"),
            attendees=tuple(Attendee.from_record(item) for item in record.get("attendees") or ()),
            status=record.get("status"),
            color=record.get("color"),
            read_only=bool(record.get("readOnly", False)),
            recurrence=tuple(record.get("recurrence") or ()),
            conference=Conference.from_record(record["conference"]) if record.get("conference") else None,
            metadata=dict(record.get("metadata") or {}),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "url": self.url,
            "start": temporal_to_record(self.start),
            "end": temporal_to_record(self.end),
            "allDay": self.all_day,
            "attendees": [attendee.to_record() for attendee in self.attendees],
            "status": self.status,
            "color": self.color,
            "readOnly": self.read_only,
            "recurrence": list(self.recurrence),
            "conference": self.conference.to_record() if self.conference else None,
            "providerId": self.provider_id.value,
            "accountId": self.account_id,
            "calendarId": self.calendar_id,
            "metadata": dict(self.metadata),
        }


def create_draft_event(
    *,
    time_zone: str,
    duration_minutes: int,
    start: Optional[TemporalValue] = None,
    end: Optional[TemporalValue] = None,
    all_day: bool = False,
    provider_id: ProviderId = ProviderId.GOOGLE,
    account_id: str = "",
    calendar_id: str = "",
    title: Optional[str] = None,
    now: Optional[Instant] = None,
) -> CalendarEvent:
    """Build an unsaved event, filling missing times from the defaults.

    Without a start, timed drafts begin at the current time in ``time_zone``
    rounded to the nearest quarter hour and all-day drafts cover today.
    """

    reference = now or Instant.now()
    if start is None:
        if all_day:
            start = to_plain_date(reference, time_zone)
        else:
            start = round_to_quarter_hour(with_zone(reference, time_zone))
    if end is None:
        end = _default_end(start, duration_minutes)
    return CalendarEvent(
        id=create_draft_id(),
        start=start,
        end=end,
        all_day=isinstance(start, PlainDate),
        provider_id=provider_id,
        account_id=account_id,
        calendar_id=calendar_id,
        title=title,
    )


def _default_end(start: TemporalValue, duration_minutes: int) -> TemporalValue:
    duration = timedelta(minutes=duration_minutes)
    if isinstance(start, PlainDate):
        return start
    if isinstance(start, Instant):
        return Instant(start.value + duration)
    if isinstance(start, ZonedCivilTime):
        # Elapsed time, so a draft spanning a DST change keeps its length.
        return ZonedCivilTime.from_instant(Instant(start.to_instant().value + duration), start.zone)
    raise TypeError(f"Unsupported temporal value: {start!r}")
