"""One synchronous recomputation of every filter stage."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from domain_analytics.analytics.aggregator import CrossDomainAggregator
from domain_analytics.analytics.filters import filter_and_sort, partition_favorites
from domain_analytics.analytics.recalculator import recalculate_all
from domain_analytics.domain.interfaces import IAggregator
from domain_analytics.domain.models import (
    DashboardView,
    DomainRecord,
    FilterState,
    ResolvedRange,
)

logger = logging.getLogger(__name__)


def compute_view(
    domains: Iterable[DomainRecord],
    state: FilterState,
    *,
    aggregator: Optional[IAggregator] = None,
    bounds: Optional[ResolvedRange] = None,
) -> DashboardView:
    """Recalculate, filter, sort, partition and aggregate ``domains``.

    The summary panel aggregates the filtered collection, so totals follow the
    active search and tag selection.
    """

    aggregator = aggregator or CrossDomainAggregator()
    recalculated = recalculate_all(domains, state.date_range, bounds=bounds)
    filtered = filter_and_sort(
        recalculated,
        search_query=state.search_query,
        selected_tags=state.selected_tags,
        sort_by=state.sort_by,
    )
    partitioned = partition_favorites(filtered)
    totals = aggregator.aggregate(filtered, state.date_range, bounds=bounds)
    logger.debug(
        "view_computed",
        extra={
            "date_range": state.date_range.value,
            "input_domains": len(recalculated),
            "visible_domains": len(filtered),
            "favorites": len(partitioned.favorites),
        },
    )
    return DashboardView(
        state=state,
        domains=filtered,
        favorites=partitioned.favorites,
        regular=partitioned.regular,
        totals=totals,
    )
