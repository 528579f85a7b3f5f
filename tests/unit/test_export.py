import builtins
import sys
from datetime import date

import pytest

from domain_analytics.domain.models import DomainRecord, MetricKind, MetricValue
from domain_analytics.utils.export import (
    build_csv,
    export_filename,
    export_headers,
    export_rows,
    to_dataframe,
)

ALL_METRICS = tuple(MetricKind)


def _record():
    return DomainRecord(
        id="d1",
        domain="a.com",
        name="A",
        pageviews=MetricValue(current=1200, previous=1000),
        bounces=MetricValue(current=25.0, previous=10),
        avg_time=MetricValue(current=65, previous=60),
        tags=frozenset({"saas", "b2b"}),
        favorite=True,
        realtime_visitors=7,
    )


def test_headers_follow_active_metrics():
    headers = export_headers((MetricKind.PAGEVIEWS, MetricKind.BOUNCES))

    assert headers == [
        "Domain",
        "Name",
        "Pageviews",
        "Pageviews Change (%)",
        "Pageviews Previous",
        "Bounces (%)",
        "Bounces (%) Change (%)",
        "Bounces (%) Previous",
        "Tags",
        "Favorite",
        "Realtime Visitors",
    ]


def test_row_formats_each_metric():
    row = export_rows(
        [_record()], (MetricKind.PAGEVIEWS, MetricKind.BOUNCES, MetricKind.AVG_TIME)
    )[0]

    assert row == [
        "a.com",
        "A",
        "1200",
        "20.0",
        "1000",
        "25.0",
        "150.0",
        "10",
        "1:05",
        "8.3",
        "60",
        "b2b; saas",
        "Yes",
        "7",
    ]


def test_csv_quotes_every_field_without_trailing_newline():
    text = build_csv([_record()], (MetricKind.VISITS,))
    lines = text.split("\n")

    assert len(lines) == 2
    assert lines[0].startswith('"Domain","Name","Visits"')
    assert lines[1] == '"a.com","A","0","0.0","0","b2b; saas","Yes","7"'
    assert not text.endswith("\n")


def test_csv_escapes_embedded_quotes():
    record = _record().model_copy(update={"name": 'The "Best" Site'})

    text = build_csv([record], ())

    assert '"The ""Best"" Site"' in text


def test_empty_collection_exports_only_headers():
    assert build_csv([], ALL_METRICS).count("\n") == 0


def test_export_filename():
    assert (
        export_filename("28d", date(2024, 3, 15))
        == "domain-analytics-28d-2024-03-15.csv"
    )
    with pytest.raises(ValueError):
        export_filename("1y", date(2024, 3, 15))


def test_to_dataframe_returns_export_rows(monkeypatch):
    class FakePandasModule:
        def __init__(self):
            self.data = None
            self.columns = None

        def DataFrame(self, data, columns=None):
            self.data = data
            self.columns = columns
            return data

    fake_pd = FakePandasModule()
    monkeypatch.setitem(sys.modules, "pandas", fake_pd)
    metrics = (MetricKind.PAGEVIEWS,)

    frame = to_dataframe([_record()], metrics)

    assert frame == export_rows([_record()], metrics)
    assert fake_pd.columns == export_headers(metrics)
    assert frame[0][:3] == ["a.com", "A", "1200"]


def test_to_dataframe_raises_without_pandas(monkeypatch):
    real_import = builtins.__import__

    def fake_import(name, *args, **kwargs):
        if name == "pandas":
            raise ImportError("no pandas")
        return real_import(name, *args, **kwargs)

    monkeypatch.setattr(builtins, "__import__", fake_import)

    with pytest.raises(RuntimeError):
        to_dataframe([_record()], (MetricKind.VISITS,))
