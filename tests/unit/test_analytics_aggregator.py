import pytest

from domain_analytics.analytics.aggregator import CrossDomainAggregator
from domain_analytics.domain.models import DomainRecord, MetricValue, TimeSeriesPoint


def _record(domain_id, *, visitors=0, bounces=0, avg_time=0, realtime=0, series=()):
    return DomainRecord(
        id=domain_id,
        domain=f"{domain_id}.com",
        name=domain_id.upper(),
        visitors=MetricValue(current=visitors, previous=0),
        bounces=MetricValue(current=bounces, previous=0),
        avg_time=MetricValue(current=avg_time, previous=0),
        realtime_visitors=realtime,
        time_series=tuple(series),
    )


def _point(key, pageviews=0, visits=0, avg_time=0.0):
    return TimeSeriesPoint(
        date_key=key, pageviews=pageviews, visits=visits, avg_time=avg_time
    )


def test_empty_collection_aggregates_to_zero():
    totals = CrossDomainAggregator().aggregate([], "7d")

    assert totals.pageviews == 0
    assert totals.visits == 0
    assert totals.visitors == 0
    assert totals.bounce_rate == 0.0
    assert totals.avg_time == 0
    assert totals.realtime_total == 0
    assert totals.domain_count == 0
    assert totals.time_series == ()


def test_series_values_are_summed_per_key():
    a = _record("a", series=[_point("2024-01-01", pageviews=100, visits=80)])
    b = _record(
        "b",
        series=[
            _point("2024-01-01", pageviews=50, visits=40),
            _point("2024-01-02", pageviews=10, visits=5),
        ],
    )

    totals = CrossDomainAggregator().aggregate([a, b], "7d")

    assert [p.date_key for p in totals.time_series] == ["2024-01-01", "2024-01-02"]
    assert totals.time_series[0].pageviews == 150
    assert totals.pageviews == 160
    assert totals.visits == 125


def test_avg_time_is_merged_by_domain_count():
    series = CrossDomainAggregator().merge_series(
        [
            [_point("2024-01-01", avg_time=60)],
            [_point("2024-01-01", avg_time=30)],
        ]
    )

    assert series[0].avg_time == 45


def test_domains_missing_a_key_still_count_in_avg_time_divisor():
    series = CrossDomainAggregator().merge_series(
        [
            [_point("2024-01-01", avg_time=60), _point("2024-01-02", avg_time=90)],
            [_point("2024-01-01", avg_time=30)],
        ]
    )

    assert series[1].avg_time == 45


def test_summary_values_come_from_domain_records():
    a = _record(
        "a",
        visitors=70,
        bounces=30,
        avg_time=60,
        realtime=3,
        series=[_point("2024-01-01", visits=150)],
    )
    b = _record(
        "b",
        visitors=40,
        bounces=20,
        avg_time=30,
        realtime=4,
        series=[_point("2024-01-01", visits=100)],
    )

    totals = CrossDomainAggregator().aggregate([a, b], "7d")

    assert totals.visitors == 110
    assert totals.bounce_rate == pytest.approx(20.0)
    assert totals.avg_time == 45
    assert totals.realtime_total == 7
    assert totals.domain_count == 2


def test_bounce_rate_is_zero_without_visits():
    a = _record("a", bounces=30)

    assert CrossDomainAggregator().aggregate([a], "7d").bounce_rate == 0.0


def test_aggregate_respects_range_filtering():
    series = [_point(f"2024-01-{day:02d}", pageviews=1) for day in range(1, 11)]
    a = _record("a", series=series)

    totals = CrossDomainAggregator().aggregate([a], "7d")

    assert totals.pageviews == 7
    assert totals.time_series[0].date_key == "2024-01-04"
