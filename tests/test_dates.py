from datetime import datetime, timedelta, timezone

from pommikit.dates import time_is_same_day, time_is_within_range

UTC = timezone.utc
PLUS_THREE = timezone(timedelta(hours=3))


def test_same_day_same_instant():
    t = datetime(2024, 5, 17, 12, 0, tzinfo=UTC)
    assert time_is_same_day(t, t)


def test_same_day_different_hours():
    t1 = datetime(2024, 5, 17, 0, 0, 1, tzinfo=UTC)
    t2 = datetime(2024, 5, 17, 23, 59, 59, tzinfo=UTC)
    assert time_is_same_day(t1, t2)


def test_different_days():
    t1 = datetime(2024, 5, 17, 23, 59, tzinfo=UTC)
    t2 = datetime(2024, 5, 18, 0, 1, tzinfo=UTC)
    assert not time_is_same_day(t1, t2)


def test_same_year_month_different_year():
    t1 = datetime(2023, 5, 17, tzinfo=UTC)
    t2 = datetime(2024, 5, 17, tzinfo=UTC)
    assert not time_is_same_day(t1, t2)


def test_same_day_uses_each_times_own_zone():
    t1 = datetime(2024, 1, 1, 22, 0, tzinfo=UTC)
    t2 = datetime(2024, 1, 2, 1, 0, tzinfo=PLUS_THREE)
    # Same instant, but different local calendar dates.
    assert t1 == t2
    assert not time_is_same_day(t1, t2)


def test_within_range_inside():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    end = datetime(2024, 1, 31, tzinfo=UTC)
    assert time_is_within_range(datetime(2024, 1, 15, tzinfo=UTC), start, end)


def test_within_range_endpoints_inclusive():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    end = datetime(2024, 1, 31, tzinfo=UTC)
    assert time_is_within_range(start, start, end)
    assert time_is_within_range(end, start, end)


def test_within_range_outside():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    end = datetime(2024, 1, 31, tzinfo=UTC)
    assert not time_is_within_range(datetime(2023, 12, 31, tzinfo=UTC), start, end)
    assert not time_is_within_range(datetime(2024, 2, 1, tzinfo=UTC), start, end)


def test_within_range_equal_bounds():
    point = datetime(2024, 1, 1, tzinfo=UTC)
    assert time_is_within_range(point, point, point)
    assert not time_is_within_range(point + timedelta(seconds=1), point, point)


def test_within_range_equal_instants_across_zones():
    t = datetime(2024, 1, 1, 22, 0, tzinfo=UTC)
    same = datetime(2024, 1, 2, 1, 0, tzinfo=PLUS_THREE)
    assert time_is_within_range(same, t, t)


def test_within_range_reversed_bounds_only_matches_endpoints():
    start = datetime(2024, 1, 31, tzinfo=UTC)
    end = datetime(2024, 1, 1, tzinfo=UTC)
    assert not time_is_within_range(datetime(2024, 1, 15, tzinfo=UTC), start, end)
    assert time_is_within_range(start, start, end)
    assert time_is_within_range(end, start, end)