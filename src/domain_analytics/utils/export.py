"""Tabular export of the displayed domain collection."""

from __future__ import annotations

import csv
import io
from datetime import date
from typing import Any, Iterable, List, Sequence, Union

from domain_analytics.domain.models import DateRange, DomainRecord, MetricKind
from domain_analytics.utils.formatting import format_duration


def export_headers(active_metrics: Sequence[MetricKind]) -> List[str]:
    headers = ["Domain", "Name"]
    for kind in active_metrics:
        label = "Bounces (%)" if kind is MetricKind.BOUNCES else kind.label
        headers.extend([label, f"{label} Change (%)", f"{label} Previous"])
    headers.extend(["Tags", "Favorite", "Realtime Visitors"])
    return headers


def export_rows(
    domains: Iterable[DomainRecord], active_metrics: Sequence[MetricKind]
) -> List[List[str]]:
    """One row per domain, in the order given."""

    rows: List[List[str]] = []
    for domain in domains:
        row = [domain.domain, domain.name]
        for kind in active_metrics:
            value = domain.metric(kind)
            row.extend(
                [
                    _current_cell(kind, value.current),
                    f"{value.change:.1f}",
                    _plain(value.previous),
                ]
            )
        row.extend(
            [
                "; ".join(sorted(domain.tags)),
                "Yes" if domain.favorite else "No",
                str(domain.realtime_visitors),
            ]
        )
        rows.append(row)
    return rows


def build_csv(
    domains: Iterable[DomainRecord], active_metrics: Sequence[MetricKind]
) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(export_headers(active_metrics))
    writer.writerows(export_rows(domains, active_metrics))
    return buffer.getvalue().rstrip("\n")


def export_filename(date_range: Union[DateRange, str], today: date) -> str:
    return f"domain-analytics-{DateRange(date_range).value}-{today.isoformat()}.csv"


def to_dataframe(
    domains: Iterable[DomainRecord], active_metrics: Sequence[MetricKind]
) -> Any:
    """Export the same rows to a pandas DataFrame."""

    try:
        import pandas as pd  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pandas is required for dataframe export") from exc

    return pd.DataFrame(
        export_rows(domains, active_metrics), columns=export_headers(active_metrics)
    )


def _current_cell(kind: MetricKind, value: Union[int, float]) -> str:
    if kind is MetricKind.AVG_TIME:
        return format_duration(value)
    if kind is MetricKind.BOUNCES:
        return f"{value:.1f}"
    return _plain(value)


def _plain(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
