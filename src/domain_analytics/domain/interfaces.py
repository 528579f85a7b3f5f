"""Domain-level interfaces defining contracts for dashboard collaborators."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional, Protocol, Sequence

from .models import AggregatedMetrics, DateRange, DomainRecord, ResolvedRange

Clock = Callable[[], datetime]


class IDataSource(Protocol):
    """Supplies range-scoped domain records from an analytics backend."""

    def fetch_domains(
        self, window: ResolvedRange, previous: ResolvedRange
    ) -> List[DomainRecord]:
        """Return one record per tracked website with summaries for ``window``.

        Summary ``previous`` values must come from the ``previous`` window.
        Per-website failures are normalized into zero-valued records.
        """


class IAggregator(Protocol):
    """Derives the cross-domain summary panel from a domain collection."""

    def aggregate(
        self,
        domains: Sequence[DomainRecord],
        selector: DateRange,
        *,
        bounds: Optional[ResolvedRange] = None,
    ) -> AggregatedMetrics:
        """Merge range-filtered series and summary totals across ``domains``."""
