"""Calendar time values.

Event boundaries are one of three variants:

* :class:`Instant` - an absolute point on the UTC timeline;
* :class:`ZonedCivilTime` - a wall-clock date and time bound to an IANA zone;
* :class:`PlainDate` - a calendar day without time or zone (all-day events).

Values of different variants are never compared directly. Every comparison goes
through :func:`resolve_to_instant` with an explicit reference zone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .enums import Ordering
from .errors import InvalidConversion

UTC = timezone.utc
UTC_ZONE = "UTC"


def load_zone(name: str) -> ZoneInfo:
    if not name:
        raise InvalidConversion("Time zone name is required")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidConversion(f"Unknown time zone: {name!r}") from exc


def is_known_zone(name: str) -> bool:
    try:
        load_zone(name)
    except InvalidConversion:
        return False
    return True


@dataclass(frozen=True, slots=True)
class Instant:
    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None or self.value.utcoffset() is None:
            raise InvalidConversion(f"Instant requires an aware datetime, got {self.value!r}")
        object.__setattr__(self, "value", self.value.astimezone(UTC))

    @classmethod
    def now(cls) -> "Instant":
        return cls(datetime.now(UTC))

    @classmethod
    def parse(cls, text: str) -> "Instant":
        try:
            parsed = datetime.fromisoformat(text.strip())
        except ValueError as exc:
            raise InvalidConversion(f"Not an ISO 8601 date-time: {text!r}") from exc
        return cls(parsed)

    @classmethod
    def from_epoch_milliseconds(cls, value: int) -> "Instant":
        return cls(datetime.fromtimestamp(value / 1000, UTC))

    @property
    def epoch_milliseconds(self) -> int:
        delta = self.value - datetime(1970, 1, 1, tzinfo=UTC)
        return delta // timedelta(milliseconds=1)

    def isoformat(self) -> str:
        timespec = "milliseconds" if self.value.microsecond else "seconds"
        return self.value.isoformat(timespec=timespec).replace("+00:00", "Z")

    def __str__(self) -> str:
        return self.isoformat()


@dataclass(frozen=True, slots=True)
class ZonedCivilTime:
    """Wall-clock time in ``zone``.

    ``civil`` is naive; its ``fold`` attribute picks the earlier or later
    occurrence of an ambiguous wall-clock time, as in :mod:`datetime`.
    """

    civil: datetime
    zone: str

    def __post_init__(self) -> None:
        if self.civil.tzinfo is not None:
            raise InvalidConversion("ZonedCivilTime expects a naive civil datetime")
        load_zone(self.zone)

    @classmethod
    def from_instant(cls, instant: Instant, zone: str) -> "ZonedCivilTime":
        local = instant.value.astimezone(load_zone(zone))
        return cls(local.replace(tzinfo=None), zone)

    @property
    def tzinfo(self) -> ZoneInfo:
        return load_zone(self.zone)

    @property
    def is_second_occurrence(self) -> bool:
        """True for the later reading of a wall-clock time that a backward offset change repeats."""

        if not self.civil.fold:
            return False
        zone = self.tzinfo
        return self.civil.replace(tzinfo=zone, fold=0).utcoffset() != self.civil.replace(tzinfo=zone).utcoffset()

    def to_datetime(self) -> datetime:
        return self.civil.replace(tzinfo=self.tzinfo)

    def to_instant(self) -> Instant:
        return Instant(self.to_datetime())

    def isoformat(self) -> str:
        return self.to_datetime().isoformat()

    def __str__(self) -> str:
        return f"{self.isoformat()}[{self.zone}]"


@dataclass(frozen=True, slots=True)
class PlainDate:
    value: date

    def __post_init__(self) -> None:
        if isinstance(self.value, datetime):
            raise InvalidConversion("PlainDate expects a date without time of day")

    @classmethod
    def parse(cls, text: str) -> "PlainDate":
        try:
            return cls(date.fromisoformat(text.strip()))
        except ValueError as exc:
            raise InvalidConversion(f"Not an ISO 8601 date: {text!r}") from exc

    def add_days(self, days: int) -> "PlainDate":
        return PlainDate(self.value + timedelta(days=days))

    def at_midnight(self, zone: str) -> datetime:
        return datetime.combine(self.value, time(), tzinfo=load_zone(zone))

    def isoformat(self) -> str:
        return self.value.isoformat()

    def __str__(self) -> str:
        return self.isoformat()


TemporalValue = Union[Instant, ZonedCivilTime, PlainDate]


def _unsupported(value: object) -> TypeError:
    return TypeError(f"Unsupported temporal value: {value!r}")


def resolve_to_instant(value: TemporalValue, reference_zone: str = UTC_ZONE) -> Instant:
    """Pin ``value`` to the UTC timeline.

    ``reference_zone`` only matters for :class:`PlainDate`, which resolves to
    midnight in that zone. A :class:`ZonedCivilTime` already carries its zone.
    """

    if isinstance(value, Instant):
        return value
    if isinstance(value, ZonedCivilTime):
        return value.to_instant()
    if isinstance(value, PlainDate):
        return Instant(value.at_midnight(reference_zone))
    raise _unsupported(value)


def compare(a: TemporalValue, b: TemporalValue, reference_zone: str = UTC_ZONE) -> Ordering:
    left = resolve_to_instant(a, reference_zone).value
    right = resolve_to_instant(b, reference_zone).value
    if left < right:
        return Ordering.BEFORE
    if left > right:
        return Ordering.AFTER
    return Ordering.EQUAL


def with_zone(value: TemporalValue, zone: str) -> ZonedCivilTime:
    if isinstance(value, Instant):
        return ZonedCivilTime.from_instant(value, zone)
    if isinstance(value, ZonedCivilTime):
        return ZonedCivilTime.from_instant(value.to_instant(), zone)
    if isinstance(value, PlainDate):
        raise InvalidConversion("A plain date has no offset to reinterpret in another zone")
    raise _unsupported(value)


def to_plain_date(value: TemporalValue, zone: str = UTC_ZONE) -> PlainDate:
    if isinstance(value, PlainDate):
        return value
    if isinstance(value, (Instant, ZonedCivilTime)):
        return PlainDate(with_zone(value, zone).civil.date())
    raise _unsupported(value)


def same_kind(a: TemporalValue, b: TemporalValue) -> bool:
    return type(a) is type(b)


def unambiguous_bounds(start: TemporalValue, end: TemporalValue) -> Tuple[TemporalValue, TemporalValue]:
    """Both bounds as Instants when either is the later pass of a repeated wall-clock time.

    A zone name next to a wall-clock time cannot tell the two passes apart.
    """

    if any(isinstance(value, ZonedCivilTime) and value.is_second_occurrence for value in (start, end)):
        return resolve_to_instant(start), resolve_to_instant(end)
    return start, end


def round_to_quarter_hour(value: ZonedCivilTime) -> ZonedCivilTime:
    quarters = round(value.civil.minute / 15)
    base = value.civil.replace(minute=0, second=0, microsecond=0)
    return ZonedCivilTime(base + timedelta(minutes=15 * quarters), value.zone)


__all__ = [
    "Instant",
    "PlainDate",
    "TemporalValue",
    "UTC",
    "UTC_ZONE",
    "ZonedCivilTime",
    "compare",
    "is_known_zone",
    "load_zone",
    "resolve_to_instant",
    "round_to_quarter_hour",
    "same_kind",
    "to_plain_date",
    "unambiguous_bounds",
    "with_zone",
]
