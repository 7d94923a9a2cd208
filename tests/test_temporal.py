from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from calkit.domain import (
    Instant,
    InvalidConversion,
    Ordering,
    PlainDate,
    ZonedCivilTime,
    compare,
    resolve_to_instant,
    to_plain_date,
    with_zone,
)
from calkit.domain.temporal import is_known_zone, round_to_quarter_hour, unambiguous_bounds

NEW_YORK = "America/New_York"


def test_instant_requires_aware_datetime():
    with pytest.raises(InvalidConversion):
        Instant(datetime(2024, 1, 1, 12, 0))


def test_instant_is_normalized_to_utc():
    instant = Instant(datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2))))
    assert instant.value.hour == 10
    assert instant.isoformat() == "2024-01-01T10:00:00Z"


def test_instant_epoch_milliseconds():
    instant = Instant.from_epoch_milliseconds(1_700_000_000_000)
    assert instant.epoch_milliseconds == 1_700_000_000_000
    assert Instant.from_epoch_milliseconds(0).isoformat() == "1970-01-01T00:00:00Z"


def test_instant_parse_accepts_z_suffix():
    assert Instant.parse("2024-03-10T07:00:00Z") == Instant(datetime(2024, 3, 10, 7, tzinfo=timezone.utc))
    with pytest.raises(InvalidConversion):
        Instant.parse("yesterday")


def test_plain_date_resolves_to_midnight_in_reference_zone():
    resolved = resolve_to_instant(PlainDate(date(2024, 3, 1)), NEW_YORK)
    assert resolved.isoformat() == "2024-03-01T05:00:00Z"
    assert resolve_to_instant(PlainDate(date(2024, 3, 1))).isoformat() == "2024-03-01T00:00:00Z"


def test_zoned_time_uses_fold_for_repeated_hour():
    first = ZonedCivilTime(datetime(2024, 11, 3, 1, 30), NEW_YORK)
    second = ZonedCivilTime(datetime(2024, 11, 3, 1, 30, fold=1), NEW_YORK)
    assert first.to_instant().isoformat() == "2024-11-03T05:30:00Z"
    assert second.to_instant().isoformat() == "2024-11-03T06:30:00Z"


def test_zoned_time_rejects_unknown_zone_and_aware_civil():
    with pytest.raises(InvalidConversion):
        ZonedCivilTime(datetime(2024, 1, 1), "Mars/Olympus_Mons")
    with pytest.raises(InvalidConversion):
        ZonedCivilTime(datetime(2024, 1, 1, tzinfo=timezone.utc), "UTC")
    assert not is_known_zone("Mars/Olympus_Mons")
    assert is_known_zone(NEW_YORK)


def test_compare_across_variants_uses_reference_zone():
    early = Instant(datetime(2024, 3, 1, 4, 0, tzinfo=timezone.utc))
    day = PlainDate(date(2024, 3, 1))
    assert compare(early, day, NEW_YORK) is Ordering.BEFORE
    assert compare(early, day, "UTC") is Ordering.AFTER
    assert compare(day, day) is Ordering.EQUAL


def test_with_zone_keeps_the_instant():
    zoned = with_zone(Instant(datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)), NEW_YORK)
    assert zoned.civil == datetime(2024, 7, 1, 8, 0)
    moved = with_zone(zoned, "Europe/London")
    assert moved.civil == datetime(2024, 7, 1, 13, 0)
    assert moved.to_instant() == zoned.to_instant()


def test_with_zone_rejects_plain_date():
    with pytest.raises(InvalidConversion):
        with_zone(PlainDate(date(2024, 3, 1)), NEW_YORK)


def test_to_plain_date_uses_local_day():
    late = Instant(datetime(2024, 3, 1, 3, 0, tzinfo=timezone.utc))
    assert to_plain_date(late, NEW_YORK) == PlainDate(date(2024, 2, 29))
    assert to_plain_date(late) == PlainDate(date(2024, 3, 1))


def test_unsupported_value_raises_type_error():
    with pytest.raises(TypeError):
        resolve_to_instant("2024-03-01")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("minute", "expected"),
    [(8, datetime(2024, 3, 1, 9, 15)), (52, datetime(2024, 3, 1, 9, 45)), (53, datetime(2024, 3, 1, 10, 0))],
)
def test_round_to_quarter_hour(minute, expected):
    value = ZonedCivilTime(datetime(2024, 3, 1, 9, minute, 30), NEW_YORK)
    assert round_to_quarter_hour(value).civil == expected


def test_second_occurrence_needs_a_repeated_hour():
    assert ZonedCivilTime(datetime(2024, 11, 3, 1, 30, fold=1), NEW_YORK).is_second_occurrence
    assert not ZonedCivilTime(datetime(2024, 11, 3, 1, 30), NEW_YORK).is_second_occurrence
    assert not ZonedCivilTime(datetime(2024, 3, 12, 9, 0, fold=1), NEW_YORK).is_second_occurrence


def test_unambiguous_bounds_resolve_both_ends_of_a_repeated_hour():
    start = ZonedCivilTime(datetime(2024, 11, 3, 1, 30, fold=1), NEW_YORK)
    end = ZonedCivilTime(datetime(2024, 11, 3, 2, 0), NEW_YORK)

    assert unambiguous_bounds(start, end) == (
        Instant(datetime(2024, 11, 3, 6, 30, tzinfo=timezone.utc)),
        Instant(datetime(2024, 11, 3, 7, 0, tzinfo=timezone.utc)),
    )


def test_unambiguous_bounds_leave_ordinary_times_alone():
    start = ZonedCivilTime(datetime(2024, 3, 12, 9, 0), NEW_YORK)
    end = ZonedCivilTime(datetime(2024, 3, 12, 10, 0), NEW_YORK)
    assert unambiguous_bounds(start, end) == (start, end)
