from datetime import datetime, timezone

from domain_analytics.analytics.date_range import previous_range, resolve_range
from domain_analytics.domain.models import Granularity
from domain_analytics.sources.synthetic import SAMPLE_DOMAINS, SyntheticDataSource

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _fetch(selector="28d", seed=0):
    window = resolve_range(selector, "UTC", now=NOW)
    source = SyntheticDataSource(seed, clock=lambda: NOW)
    return source.fetch_domains(window, previous_range(window))


def test_generates_one_record_per_sample_domain():
    records = _fetch()

    assert [r.domain for r in records] == [s.domain for s in SAMPLE_DOMAINS]
    assert records[0].id == "domain-1"
    assert records[0].name == "Casino Royal"
    assert records[0].tags == frozenset({"casino", "gaming"})
    assert [r.favorite for r in records[:3]] == [True, True, False]
    assert all(0 <= r.realtime_visitors <= 50 for r in records)


def test_series_mixes_daily_history_with_recent_hours():
    series = _fetch()[0].time_series
    daily = [p for p in series if p.granularity is Granularity.DAY]
    hourly = [p for p in series if p.granularity is Granularity.HOUR]

    assert len(daily) == 88
    assert daily[-1].date_key == "2024-03-13"
    assert len(hourly) == 48
    assert hourly[0].date_key == "2024-03-14 00:00"
    assert hourly[-1].date_key == "2024-03-15 23:00"


def test_same_seed_and_day_is_deterministic():
    assert _fetch(seed=3) == _fetch(seed=3)
    assert _fetch(seed=3)[0].pageviews != _fetch(seed=4)[0].pageviews


def test_summary_matches_points_inside_window():
    record = _fetch("today")[0]
    today = [p for p in record.time_series if p.day == "2024-03-15"]
    yesterday = [p for p in record.time_series if p.day == "2024-03-14"]

    assert record.pageviews.current == sum(p.pageviews for p in today)
    assert record.pageviews.previous == sum(p.pageviews for p in yesterday)
    assert record.avg_time.current == round(sum(p.avg_time for p in today) / 24)
