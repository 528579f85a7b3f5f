from datetime import date, datetime, timezone

from domain_analytics.analytics.date_range import resolve_range
from domain_analytics.analytics.recalculator import recalculate, recalculate_all
from domain_analytics.analytics.series import filter_series, last_days
from domain_analytics.domain.models import DomainRecord, MetricValue, TimeSeriesPoint

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _days(count, start=1):
    return [
        TimeSeriesPoint(date_key=f"2024-03-{day:02d}", pageviews=day)
        for day in range(start, start + count)
    ]


def _hours(day="2024-03-15"):
    return [
        TimeSeriesPoint(date_key=f"{day} {hour:02d}:00", pageviews=hour)
        for hour in range(24)
    ]


def test_day_ranges_take_last_n_day_points_in_order():
    points = list(reversed(_days(10)))

    result = filter_series(points, "7d")

    assert [p.date_key for p in result] == [f"2024-03-{d:02d}" for d in range(4, 11)]


def test_short_series_is_not_padded():
    assert len(filter_series(_days(5), "28d")) == 5


def test_day_ranges_skip_hour_points():
    result = filter_series(_days(3) + _hours(), "7d")

    assert all(" " not in p.date_key for p in result)
    assert len(result) == 3


def test_unknown_key_shapes_count_as_days():
    points = _days(2) + [TimeSeriesPoint(date_key="week-11")]

    result = filter_series(points, "90d")

    assert [p.date_key for p in result] == ["2024-03-01", "2024-03-02", "week-11"]


def test_hourly_ranges_return_hour_points_in_ascending_order():
    hours = _hours()
    shuffled = [hours[5], hours[1], hours[3]] + _days(3)

    result = filter_series(shuffled, "today")

    assert [p.date_key for p in result] == [
        "2024-03-15 01:00",
        "2024-03-15 03:00",
        "2024-03-15 05:00",
    ]
    assert filter_series(list(reversed(hours)), "yesterday") == tuple(hours)


def test_hourly_range_without_hour_points_is_empty():
    assert filter_series(_days(7), "yesterday") == ()


def test_custom_without_bounds_behaves_like_seven_days():
    points = _days(10)
    assert filter_series(points, "custom") == filter_series(points, "7d")


def test_custom_bounds_select_days_inside_window():
    window = resolve_range(
        "custom", "UTC", now=NOW, custom=(date(2024, 3, 3), date(2024, 3, 6))
    )

    result = filter_series(_days(10), "custom", bounds=window)

    assert [p.date_key for p in result] == [
        "2024-03-03",
        "2024-03-04",
        "2024-03-05",
        "2024-03-06",
    ]


def test_short_custom_bounds_select_hours():
    window = resolve_range(
        "custom", "UTC", now=NOW, custom=(date(2024, 3, 14), date(2024, 3, 15))
    )
    points = _days(15) + _hours("2024-03-13") + _hours("2024-03-14") + _hours()

    result = filter_series(points, "custom", bounds=window)

    assert len(result) == 48
    assert result[0].date_key == "2024-03-14 00:00"
    assert result[-1].date_key == "2024-03-15 23:00"


def test_last_days_with_non_positive_count():
    assert last_days(_days(3), 0) == ()


def test_recalculate_replaces_only_the_series():
    record = DomainRecord(
        id="d1",
        domain="a.com",
        name="A",
        visits=MetricValue(current=999, previous=10),
        time_series=tuple(_days(10)),
    )

    updated = recalculate(record, "7d")

    assert len(updated.time_series) == 7
    assert updated.visits == record.visits
    assert len(record.time_series) == 10


def test_recalculate_all_keeps_order():
    a = DomainRecord(id="a", domain="a.com", name="A", time_series=tuple(_days(3)))
    b = DomainRecord(id="b", domain="b.com", name="B")

    result = recalculate_all([a, b], "today")

    assert [d.id for d in result] == ["a", "b"]
    assert result[0].time_series == ()


def test_recalculate_is_idempotent():
    record = DomainRecord(
        id="d1", domain="a.com", name="A", time_series=tuple(_days(10) + _hours())
    )

    once = recalculate(record, "28d")

    assert recalculate(once, "28d") == once
