"""iCalendar (RFC 5545) text, parsed and generated with :mod:`icalendar`."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Optional, Tuple

from icalendar import Calendar, Event, vCalAddress, vDDDLists, vRecur
from icalendar.parser import Contentline

from ..domain.all_day import exclusive_to_inclusive_end, inclusive_to_exclusive_end
from ..domain.enums import AttendeeStatus, AttendeeType, ProviderId
from ..domain.errors import DecodeError, InvalidConversion
from ..domain.models import Attendee, CalendarEvent
from ..domain.temporal import UTC, UTC_ZONE, Instant, PlainDate, TemporalValue, ZonedCivilTime, unambiguous_bounds
from .base import ImportResult, checked
from .windows_zones import to_iana

logger = logging.getLogger(__name__)

DEFAULT_PRODID = "-//calkit//calkit//EN"

CALENDAR = "calendar"
EVENT = "event"

PARTSTAT: dict[str, AttendeeStatus] = {
    "ACCEPTED": AttendeeStatus.ACCEPTED,
    "DECLINED": AttendeeStatus.DECLINED,
    "TENTATIVE": AttendeeStatus.TENTATIVE,
    "NEEDS-ACTION": AttendeeStatus.NEEDS_ACTION,
}

ROLE: dict[str, AttendeeType] = {
    "REQ-PARTICIPANT": AttendeeType.REQUIRED,
    "CHAIR": AttendeeType.REQUIRED,
    "OPT-PARTICIPANT": AttendeeType.OPTIONAL,
    "NON-PARTICIPANT": AttendeeType.RESOURCE,
}

RESOURCE_CUTYPES = frozenset({"RESOURCE", "ROOM"})

RECURRENCE_PROPERTIES = ("RRULE", "RDATE", "EXDATE")

_PARTSTAT_BY_STATUS = {status: name for name, status in PARTSTAT.items()}
_ROLE_BY_TYPE = {
    AttendeeType.REQUIRED: "REQ-PARTICIPANT",
    AttendeeType.OPTIONAL: "OPT-PARTICIPANT",
    AttendeeType.RESOURCE: "NON-PARTICIPANT",
}
_MAILTO = re.compile(r"^mailto:", re.IGNORECASE)


def detect_type(text: str) -> str:
    """``calendar`` for VCALENDAR text, ``event`` for a bare VEVENT."""

    normalized = text.strip().upper()
    if "BEGIN:VCALENDAR" in normalized:
        return CALENDAR
    if "BEGIN:VEVENT" in normalized:
        return EVENT
    return CALENDAR


def _parse(text: str) -> Any:
    if not text or not text.strip():
        raise DecodeError("empty iCalendar text")
    try:
        return Calendar.from_ical(text)
    except (ValueError, KeyError, IndexError) as exc:
        raise DecodeError(f"unreadable iCalendar text: {exc}") from exc


def _text(component: Any, name: str) -> Optional[str]:
    value = component.get(name)
    if value is None:
        return None
    text = str(value)
    return text or None


def _decode_time(component: Any, name: str, floating_time_zone: str) -> Optional[TemporalValue]:
    prop = component.get(name)
    if prop is None:
        return None
    value = getattr(prop, "dt", None)
    if isinstance(value, datetime):
        tzid = prop.params.get("TZID") if hasattr(prop, "params") else None
        zone = to_iana(str(tzid)) if tzid else None
        if zone:
            return ZonedCivilTime(value.replace(tzinfo=None), zone)
        if value.tzinfo is None:
            return ZonedCivilTime(value, floating_time_zone)
        return Instant(value)
    if isinstance(value, date):
        return PlainDate(value)
    raise DecodeError(f"{name} is not a DATE or DATE-TIME")


def _shift(value: TemporalValue, duration: timedelta) -> TemporalValue:
    if isinstance(value, PlainDate):
        return PlainDate(value.value + timedelta(days=duration.days))
    if isinstance(value, Instant):
        return Instant(value.value + duration)
    if isinstance(value, ZonedCivilTime):
        return ZonedCivilTime.from_instant(Instant(value.to_instant().value + duration), value.zone)
    raise TypeError(f"Unsupported temporal value: {value!r}")


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _decode_attendee(address: Any) -> Attendee:
    email = _MAILTO.sub("", str(address)).strip()
    if not email:
        raise DecodeError("ATTENDEE without an address")
    params = getattr(address, "params", {})
    cutype = str(params.get("CUTYPE", "")).upper()
    if cutype in RESOURCE_CUTYPES:
        kind = AttendeeType.RESOURCE
    else:
        kind = ROLE.get(str(params.get("ROLE", "")).upper(), AttendeeType.REQUIRED)
    name = params.get("CN")
    return Attendee(
        email=email,
        name=str(name) if name else None,
        status=PARTSTAT.get(str(params.get("PARTSTAT", "")).upper(), AttendeeStatus.UNKNOWN),
        type=kind,
    )


def _decode_recurrence(component: Any) -> Tuple[str, ...]:
    lines = []
    for name in RECURRENCE_PROPERTIES:
        for value in _as_list(component.get(name)):
            lines.append(str(component.content_line(name, value)))
    return tuple(lines)


def _decode_component(component: Any, floating_time_zone: str) -> CalendarEvent:
    uid = _text(component, "UID")
    if not uid:
        raise DecodeError("VEVENT without a UID")
    try:
        start = _decode_time(component, "DTSTART", floating_time_zone)
        if start is None:
            raise DecodeError("VEVENT without a DTSTART", item_id=uid)
        end = _decode_time(component, "DTEND", floating_time_zone)
        if end is None:
            duration = component.get("DURATION")
            end = _shift(start, duration.dt) if duration is not None else start
        if isinstance(start, PlainDate) and isinstance(end, PlainDate):
            end = exclusive_to_inclusive_end(start, end)
        attendees = tuple(_decode_attendee(address) for address in _as_list(component.get("ATTENDEE")))
    except InvalidConversion as exc:
        raise DecodeError(str(exc), item_id=uid) from exc
    except DecodeError as exc:
        raise DecodeError(exc.reason, item_id=uid) from exc

    status = _text(component, "STATUS")
    return checked(
        CalendarEvent(
            id=uid,
            title=_text(component, "SUMMARY"),
            description=_text(component, "DESCRIPTION"),
            location=_text(component, "LOCATION"),
            url=_text(component, "URL"),
            start=start,
            end=end,
            all_day=isinstance(start, PlainDate),
            attendees=attendees,
            status=status.lower() if status else None,
            recurrence=_decode_recurrence(component),
            provider_id=ProviderId.ICS,
        )
    )


def decode(text: str, *, floating_time_zone: str = UTC_ZONE) -> CalendarEvent:
    """Decode the first VEVENT of ``text``, wrapped in a VCALENDAR or not."""

    components = _parse(text).walk("VEVENT")
    if not components:
        raise DecodeError("no VEVENT found")
    return _decode_component(components[0], floating_time_zone)


def decode_calendar(text: str, *, floating_time_zone: str = UTC_ZONE) -> ImportResult:
    result = ImportResult()
    for index, component in enumerate(_parse(text).walk("VEVENT")):
        try:
            result.events.append(_decode_component(component, floating_time_zone))
        except DecodeError as exc:
            logger.warning("Skipping VEVENT #%d: %s", index, exc)
            result.add_failure(index, exc)
    return result


def import_ics(text: str, *, floating_time_zone: str = UTC_ZONE) -> Tuple[str, ImportResult]:
    kind = detect_type(text)
    if kind == CALENDAR:
        return kind, decode_calendar(text, floating_time_zone=floating_time_zone)
    result = ImportResult()
    try:
        result.events.append(decode(text, floating_time_zone=floating_time_zone))
    except DecodeError as exc:
        logger.warning("Skipping VEVENT: %s", exc)
        result.add_failure(0, exc)
    return kind, result


def _ical_value(value: TemporalValue) -> Any:
    if isinstance(value, PlainDate):
        return value.value
    if isinstance(value, Instant):
        return value.value
    if isinstance(value, ZonedCivilTime):
        return value.to_datetime()
    raise TypeError(f"Unsupported temporal value: {value!r}")


def _encode_attendee(attendee: Attendee) -> vCalAddress:
    address = vCalAddress(f"mailto:{attendee.email}")
    if attendee.name:
        address.params["CN"] = attendee.name
    partstat = _PARTSTAT_BY_STATUS.get(attendee.status)
    if partstat:
        address.params["PARTSTAT"] = partstat
    address.params["ROLE"] = _ROLE_BY_TYPE[attendee.type]
    if attendee.type is AttendeeType.RESOURCE:
        address.params["CUTYPE"] = "RESOURCE"
    return address


def _add_recurrence(component: Event, line: str) -> None:
    """Add one ``RRULE``, ``RDATE`` or ``EXDATE`` content line to ``component``."""

    try:
        name, params, value = Contentline(line).parts()
        name = name.upper()
        if name == "RRULE":
            component.add("rrule", vRecur.from_ical(value))
        elif name in ("RDATE", "EXDATE"):
            tzid = params.get("TZID")
            zone = (to_iana(str(tzid)) or str(tzid)) if tzid else None
            component.add(name.lower(), vDDDLists.from_ical(value, timezone=zone))
        else:
            logger.debug("Not exporting recurrence line %r", line)
    except ValueError as exc:
        raise InvalidConversion(f"unreadable recurrence line {line!r}") from exc


def to_component(event: CalendarEvent, *, stamp: Optional[datetime] = None) -> Event:
    component = Event()
    component.add("uid", event.id)
    component.add("dtstamp", stamp or datetime.now(UTC))
    component.add("summary", event.title or "")
    end = inclusive_to_exclusive_end(event.end) if isinstance(event.end, PlainDate) else event.end
    start, end = unambiguous_bounds(event.start, end)
    component.add("dtstart", _ical_value(start))
    component.add("dtend", _ical_value(end))
    for name, value in (
        ("description", event.description),
        ("location", event.location),
        ("url", event.url),
        ("status", event.status.upper() if event.status else None),
    ):
        if value:
            component.add(name, value)
    for attendee in event.attendees:
        component.add("attendee", _encode_attendee(attendee))
    for line in event.recurrence:
        _add_recurrence(component, line)
    return component


def encode(event: CalendarEvent, *, stamp: Optional[datetime] = None) -> str:
    return to_component(event, stamp=stamp).to_ical().decode("utf-8")


def encode_calendar(
    events: Iterable[CalendarEvent],
    *,
    prod_id: str = DEFAULT_PRODID,
    stamp: Optional[datetime] = None,
) -> str:
    """VCALENDAR text holding ``events`` and a VTIMEZONE for each zone they use."""

    calendar = Calendar()
    calendar.add("prodid", prod_id)
    calendar.add("version", "2.0")
    for event in events:
        calendar.add_component(to_component(event, stamp=stamp))
    calendar.add_missing_timezones()
    return calendar.to_ical().decode("utf-8")
