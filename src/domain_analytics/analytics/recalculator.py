"""Per-domain chart recalculation for a selected range."""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

from domain_analytics.analytics.series import filter_series
from domain_analytics.domain.models import DateRange, DomainRecord, ResolvedRange


def recalculate(
    domain: DomainRecord,
    selector: Union[DateRange, str],
    *,
    bounds: Optional[ResolvedRange] = None,
) -> DomainRecord:
    """Restrict ``domain``'s series to ``selector``.

    Summary metrics are left untouched: they come from a range-scoped upstream
    query and stay authoritative even when the local series disagrees.
    """

    series = filter_series(domain.time_series, selector, bounds=bounds)
    return domain.model_copy(update={"time_series": series})


def recalculate_all(
    domains: Iterable[DomainRecord],
    selector: Union[DateRange, str],
    *,
    bounds: Optional[ResolvedRange] = None,
) -> List[DomainRecord]:
    return [recalculate(domain, selector, bounds=bounds) for domain in domains]
