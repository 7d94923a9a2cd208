"""UTC offset transitions (DST starts and ends) for IANA zones.

:mod:`zoneinfo` has no "next transition" query, so the finder scans forward
from the current point in fixed steps until the zone's UTC offset changes and
then bisects that step down to the exact second.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo, available_timezones

import orjson

from ..domain.errors import InvalidArgument, InvalidConversion
from ..domain.temporal import UTC, Instant, load_zone

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_HORIZON = timedelta(days=366 * 50)
DEFAULT_SCAN_STEP = timedelta(days=1)


def format_offset(offset: timedelta) -> str:
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, remainder = divmod(abs(total), 3600)
    minutes, seconds = divmod(remainder, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}"
    if seconds:
        text += f":{seconds:02d}"
    return text


def _nanoseconds(offset: timedelta) -> int:
    return int(offset.total_seconds()) * 1_000_000_000


@dataclass(frozen=True, slots=True)
class Transition:
    instant: Instant
    offset_before: str
    offset_before_nanoseconds: int
    offset_after: str
    offset_after_nanoseconds: int

    def local_datetime(self, zone: str) -> datetime:
        return self.instant.value.astimezone(load_zone(zone))

    def to_record(self, zone: str) -> Dict[str, Any]:
        return {
            "dateTime": f"{self.local_datetime(zone).isoformat()}[{zone}]",
            "before": {"offset": self.offset_before, "offsetNanoseconds": self.offset_before_nanoseconds},
            "after": {"offset": self.offset_after, "offsetNanoseconds": self.offset_after_nanoseconds},
        }


def _offset_at(tz: ZoneInfo, epoch_seconds: int) -> timedelta:
    offset = datetime.fromtimestamp(epoch_seconds, UTC).astimezone(tz).utcoffset()
    if offset is None:
        raise InvalidConversion(f"{getattr(tz, 'key', tz)} has no UTC offset at epoch second {epoch_seconds}")
    return offset


def _next_transition(tz: ZoneInfo, after: int, horizon: int, step: int) -> Optional[int]:
    """Return the first epoch second after ``after`` whose offset differs."""

    current = _offset_at(tz, after)
    low = after
    while low < horizon:
        high = min(low + step, horizon)
        if _offset_at(tz, high) != current:
            while high - low > 1:
                middle = (low + high) // 2
                if _offset_at(tz, middle) == current:
                    low = middle
                else:
                    high = middle
            return high
        low = high
    return None


def find_transitions(
    zone: str,
    *,
    start: Optional[date] = None,
    max_transitions: Optional[int] = None,
    until: Optional[date] = None,
    horizon: timedelta = DEFAULT_SEARCH_HORIZON,
    scan_step: timedelta = DEFAULT_SCAN_STEP,
) -> List[Transition]:
    """List the offset transitions of ``zone`` in chronological order.

    Exactly one of ``max_transitions`` (a count) or ``until`` (an exclusive
    local date) bounds the search. The search starts at local midnight of
    ``start``, today in ``zone`` by default. Zones without further transitions
    yield whatever was found, possibly nothing.
    """

    if (max_transitions is None) == (until is None):
        raise InvalidArgument("Pass exactly one of max_transitions or until")
    if max_transitions is not None and max_transitions < 0:
        raise InvalidArgument("max_transitions must not be negative")
    if scan_step <= timedelta(0):
        raise InvalidArgument("scan_step must be positive")

    tz = load_zone(zone)
    start_date = start or datetime.now(tz).date()
    origin = datetime.combine(start_date, time(), tzinfo=tz)
    cursor = int(origin.timestamp())

    if until is not None:
        limit_at = int(datetime.combine(until, time(), tzinfo=tz).timestamp())
    else:
        limit_at = int((origin + horizon).timestamp())
    step = max(1, int(scan_step.total_seconds()))

    transitions: List[Transition] = []
    previous = _offset_at(tz, cursor)
    while max_transitions is None or len(transitions) < max_transitions:
        found = _next_transition(tz, cursor, limit_at, step)
        if found is None:
            break
        if until is not None and datetime.fromtimestamp(found, UTC).astimezone(tz).date() >= until:
            break
        after = _offset_at(tz, found)
        transitions.append(
            Transition(
                instant=Instant(datetime.fromtimestamp(found, UTC)),
                offset_before=format_offset(previous),
                offset_before_nanoseconds=_nanoseconds(previous),
                offset_after=format_offset(after),
                offset_after_nanoseconds=_nanoseconds(after),
            )
        )
        previous = after
        cursor = found
    logger.debug("Found %d transitions for %s from %s", len(transitions), zone, start_date)
    return transitions


def zone_file_name(zone: str) -> str:
    return f"{zone.replace('/', '_')}.json"


def find_all_transitions(
    output_dir: Path,
    *,
    start: date,
    until: date,
    zones: Optional[Iterable[str]] = None,
    scan_step: timedelta = DEFAULT_SCAN_STEP,
) -> Dict[str, int]:
    """Write every zone's transitions between ``start`` and ``until`` as JSON.

    Returns the number of transitions written per zone.
    """

    output_dir.mkdir(parents=True, exist_ok=True)
    counts: Dict[str, int] = {}
    for zone in sorted(zones if zones is not None else available_timezones()):
        logger.info("Processing time zone %s", zone)
        transitions = find_transitions(zone, start=start, until=until, scan_step=scan_step)
        payload = [transition.to_record(zone) for transition in transitions]
        (output_dir / zone_file_name(zone)).write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2) + b"\n")
        counts[zone] = len(transitions)
    return counts


__all__ = [
    "DEFAULT_SCAN_STEP",
    "DEFAULT_SEARCH_HORIZON",
    "Transition",
    "find_all_transitions",
    "find_transitions",
    "format_offset",
    "zone_file_name",
]
