"""Pure business-logic helpers for cross-domain aggregation."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from domain_analytics.analytics.series import filter_series
from domain_analytics.domain.interfaces import IAggregator
from domain_analytics.domain.models import (
    AggregatedMetrics,
    AggregationRule,
    DateRange,
    DomainRecord,
    MetricKind,
    Number,
    ResolvedRange,
    TimeSeriesPoint,
)


class CrossDomainAggregator(IAggregator):
    """Performs read-only calculations over a domain collection.

    Pageview and visit totals come from the merged, range-filtered series.
    Visitors, bounce rate and average time come from each domain's summary
    ``MetricValue`` instead, because visitors are not additive day by day and
    per-day bounce/time figures are already intra-day averages.
    """

    def aggregate(
        self,
        domains: Iterable[DomainRecord],
        selector: Union[DateRange, str],
        *,
        bounds: Optional[ResolvedRange] = None,
    ) -> AggregatedMetrics:
        domains = list(domains)
        if not domains:
            return AggregatedMetrics.empty()

        series = self.merge_series(
            [filter_series(d.time_series, selector, bounds=bounds) for d in domains]
        )
        pageviews = sum(point.pageviews for point in series)
        visits = sum(point.visits for point in series)
        return AggregatedMetrics(
            pageviews=pageviews,
            visits=visits,
            visitors=self.total_visitors(domains),
            bounce_rate=self.calculate_bounce_rate(domains, visits),
            avg_time=self.average_time(domains),
            realtime_total=sum(d.realtime_visitors for d in domains),
            domain_count=len(domains),
            time_series=series,
        )

    def merge_series(
        self, series_per_domain: Sequence[Sequence[TimeSeriesPoint]]
    ) -> Tuple[TimeSeriesPoint, ...]:
        """Merge points by date key, ascending.

        ``avg_time`` is divided by the number of domains, not weighted by
        visits; domains missing a key still count in the divisor.
        """

        domain_count = len(series_per_domain)
        if domain_count == 0:
            return ()
        totals: Dict[str, Dict[MetricKind, Number]] = {}
        for series in series_per_domain:
            for point in series:
                bucket = totals.setdefault(point.date_key, dict.fromkeys(MetricKind, 0))
                for kind in MetricKind:
                    bucket[kind] += point.value(kind)

        merged: List[TimeSeriesPoint] = []
        for date_key in sorted(totals):
            bucket = totals[date_key]
            values = {
                kind.value: self._merge_value(kind, bucket[kind], domain_count)
                for kind in MetricKind
            }
            merged.append(TimeSeriesPoint(date_key=date_key, **values))
        return tuple(merged)

    def total_visitors(self, domains: Sequence[DomainRecord]) -> Number:
        return sum(d.visitors.current for d in domains)

    def calculate_bounce_rate(
        self, domains: Sequence[DomainRecord], series_visits: Number
    ) -> float:
        if series_visits <= 0:
            return 0.0
        bounces = sum(d.bounces.current for d in domains)
        return round(bounces / series_visits * 100, 1)

    def average_time(self, domains: Sequence[DomainRecord]) -> int:
        if not domains:
            return 0
        return round(sum(d.avg_time.current for d in domains) / len(domains))

    @staticmethod
    def _merge_value(kind: MetricKind, total: Number, domain_count: int) -> Number:
        if kind.series_rule is AggregationRule.MEAN:
            return total / domain_count
        return total
