from datetime import date, datetime, timezone

from domain_analytics import DIContainer
from domain_analytics.core.config import DashboardConfig
from domain_analytics.domain.models import Granularity, MetricKind

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _dashboard():
    return DIContainer.create_demo_dashboard(
        seed=1, config=DashboardConfig(default_range="7d"), clock=lambda: NOW
    )


def test_demo_dashboard_end_to_end():
    dashboard = _dashboard()
    dashboard.refresh()

    view = dashboard.view()

    assert len(view.domains) == 10
    assert len(view.favorites) == 2
    visitors = [d.visitors.current for d in view.domains]
    assert visitors == sorted(visitors, reverse=True)
    assert all(len(d.time_series) == 7 for d in view.domains)
    assert view.totals.domain_count == 10
    assert view.totals.pageviews == sum(p.pageviews for p in view.totals.time_series)
    assert view.totals.visitors == sum(visitors)


def test_switching_to_today_charts_hours():
    dashboard = _dashboard()
    dashboard.refresh("today")
    state = dashboard.default_state().with_updates(date_range="today")

    view = dashboard.view(state)

    series = view.domains[0].time_series
    assert len(series) == 48
    assert all(p.granularity is Granularity.HOUR for p in series)


def test_custom_range_charts_requested_days():
    dashboard = _dashboard()
    dashboard.refresh("custom", custom=(date(2024, 3, 1), date(2024, 3, 10)))
    state = dashboard.default_state().with_updates(date_range="custom")

    view = dashboard.view(state)

    keys = [p.date_key for p in view.domains[0].time_series]
    assert keys[0] == "2024-03-01"
    assert keys[-1] == "2024-03-10"
    assert len(keys) == 10


def test_search_tag_and_export_flow():
    dashboard = _dashboard()
    dashboard.refresh()
    state = dashboard.default_state().with_updates(
        selected_tags={"casino"},
        sort_by="name_asc",
        active_metrics=(MetricKind.VISITS, MetricKind.AVG_TIME),
    )

    view = dashboard.view(state)
    assert [d.name for d in view.domains] == ["Casino Royal", "Poker Stars"]

    lines = dashboard.export_csv(state).split("\n")
    assert len(lines) == 3
    assert lines[1].startswith('"casino-royal.com","Casino Royal"')
    assert dashboard.export_filename(state) == "domain-analytics-7d-2024-03-15.csv"

    dashboard.create_tag("vip")
    dashboard.set_domain_tags("domain-3", ["vip"])
    vip_view = dashboard.view(state.with_updates(selected_tags={"vip"}))
    assert [d.domain for d in vip_view.domains] == ["pokerstars.net"]
