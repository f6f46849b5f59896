from datetime import date, datetime, timedelta, timezone

import pytest

from timebook.errors import InvalidRange
from timebook.shared.time_range import TimeRange
from timebook.shared.validators import strip_timezone


def test_rejects_empty_and_inverted_ranges():
    with pytest.raises(InvalidRange):
        TimeRange(datetime(2030, 1, 1, 10), datetime(2030, 1, 1, 10))
    with pytest.raises(InvalidRange):
        TimeRange(datetime(2030, 1, 1, 11), datetime(2030, 1, 1, 10))


def test_touching_ranges_do_not_overlap():
    morning = TimeRange(datetime(2030, 1, 1, 9), datetime(2030, 1, 1, 10))
    next_hour = TimeRange(datetime(2030, 1, 1, 10), datetime(2030, 1, 1, 11))
    assert not morning.overlaps(next_hour)
    assert not next_hour.overlaps(morning)


def test_partial_and_nested_overlap():
    slot = TimeRange(datetime(2030, 1, 1, 9), datetime(2030, 1, 1, 10))
    half = TimeRange(datetime(2030, 1, 1, 9, 30), datetime(2030, 1, 1, 10))
    spanning = TimeRange(datetime(2030, 1, 1, 8), datetime(2030, 1, 1, 12))

    assert slot.overlaps(half) and half.overlaps(slot)
    assert slot.overlaps(spanning)
    assert slot.contains(half)
    assert not half.contains(slot)
    assert spanning.contains(slot)


def test_day_and_hour_helpers():
    day = TimeRange.for_day(date(2030, 1, 1))
    assert day.start == datetime(2030, 1, 1)
    assert day.end == datetime(2030, 1, 2)

    bucket = TimeRange.hour_bucket(date(2030, 1, 1), 22)
    assert bucket.start == datetime(2030, 1, 1, 22)
    assert bucket.duration_minutes == 60

    booking = TimeRange.starting_at(datetime(2030, 1, 1, 14), 45)
    assert booking.end == datetime(2030, 1, 1, 14, 45)


def test_offset_datetimes_keep_wall_clock():
    aware = datetime(2030, 1, 1, 13, tzinfo=timezone(timedelta(hours=2)))

    assert strip_timezone(aware) == datetime(2030, 1, 1, 13)
    assert strip_timezone(datetime(2030, 1, 1, 13)) == datetime(2030, 1, 1, 13)
    assert strip_timezone(None) is None
