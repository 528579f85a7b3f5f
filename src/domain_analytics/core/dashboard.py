"""Dashboard facade holding caller-owned state between recomputations."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from domain_analytics.analytics import tags as tag_ops
from domain_analytics.analytics.aggregator import CrossDomainAggregator
from domain_analytics.analytics.date_range import (
    Bound,
    coerce_zone,
    previous_range,
    resolve_range,
)
from domain_analytics.analytics.pipeline import compute_view
from domain_analytics.core.config import DashboardConfig
from domain_analytics.domain.exceptions import DashboardNotLoadedError
from domain_analytics.domain.interfaces import Clock, IAggregator, IDataSource
from domain_analytics.domain.models import (
    DashboardSnapshot,
    DashboardView,
    DateRange,
    DomainRecord,
    FilterState,
)
from domain_analytics.utils.export import build_csv, export_filename
from domain_analytics.utils.validators import validate_metrics


class Dashboard:
    """High-level API over a data source and the pure analytics pipeline.

    The instance owns the fetched domain collection; ``refresh`` is the only
    way to replace it. Favorite and tag edits are kept as overlays keyed by
    domain id so they survive the next refresh.
    """

    def __init__(
        self,
        config: DashboardConfig,
        source: IDataSource,
        *,
        aggregator: Optional[IAggregator] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._source = source
        self._aggregator = aggregator or CrossDomainAggregator()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._logger = logger or logging.getLogger(__name__)
        self._snapshot: Optional[DashboardSnapshot] = None
        self._favorite_overlay: Dict[str, bool] = {}
        self._tag_overlay: Dict[str, FrozenSet[str]] = {}
        self._created_tags: List[str] = []
        self._deleted_tags: Set[str] = set()

    @property
    def config(self) -> DashboardConfig:
        return self._config

    @property
    def snapshot(self) -> DashboardSnapshot:
        if self._snapshot is None:
            raise DashboardNotLoadedError()
        return self._snapshot

    def refresh(
        self,
        date_range: Optional[DateRange | str] = None,
        *,
        custom: Optional[Tuple[Bound, Bound]] = None,
    ) -> DashboardSnapshot:
        """Fetch a fresh collection for ``date_range`` and replace the snapshot."""

        selector = date_range or self._config.default_range
        window = resolve_range(
            selector, self._config.time_zone, now=self._clock(), custom=custom
        )
        previous = previous_range(window)
        domains = self._apply_overlays(self._source.fetch_domains(window, previous))
        self._snapshot = DashboardSnapshot(
            domains=domains,
            window=window,
            available_tags=self._build_catalog(domains),
            fetched_at=self._clock(),
        )
        self._logger.info(
            "dashboard_refreshed",
            extra={
                "date_range": window.selector.value,
                "start": window.start.isoformat(),
                "end": window.end.isoformat(),
                "domains": len(domains),
            },
        )
        return self._snapshot

    def default_state(self) -> FilterState:
        return FilterState(
            date_range=DateRange(self._config.default_range),
            sort_by=self._config.default_sort,
            active_metrics=validate_metrics(self._config.active_metrics),
        )

    def view(self, state: Optional[FilterState] = None) -> DashboardView:
        snapshot = self.snapshot
        state = state or self.default_state()
        window = snapshot.window
        if state.date_range is not window.selector:
            self._logger.debug(
                "view_range_differs_from_fetch",
                extra={
                    "requested": state.date_range.value,
                    "fetched": window.selector.value,
                },
            )
        bounds = window if window.selector is DateRange.CUSTOM else None
        return compute_view(
            snapshot.domains, state, aggregator=self._aggregator, bounds=bounds
        )

    def toggle_favorite(self, domain_id: str) -> DomainRecord:
        domains = tag_ops.toggle_favorite(self.snapshot.domains, domain_id)
        record = _find(domains, domain_id)
        self._favorite_overlay[domain_id] = record.favorite
        self._replace(domains=domains)
        return record

    def set_domain_tags(self, domain_id: str, tags: Iterable[str]) -> DomainRecord:
        domains = tag_ops.set_domain_tags(self.snapshot.domains, domain_id, tags)
        record = _find(domains, domain_id)
        self._tag_overlay[domain_id] = record.tags
        self._deleted_tags.difference_update(record.tags)
        catalog = list(self.snapshot.available_tags)
        catalog.extend(tag for tag in sorted(record.tags) if tag not in catalog)
        self._replace(domains=domains, available_tags=tuple(catalog))
        return record

    def create_tag(self, tag: str) -> Tuple[str, ...]:
        catalog = tag_ops.create_tag(self.snapshot.available_tags, tag)
        created = catalog[-1]
        self._created_tags.append(created)
        self._deleted_tags.discard(created)
        self._replace(available_tags=catalog)
        return catalog

    def delete_tag(self, tag: str) -> Tuple[str, ...]:
        catalog, domains = tag_ops.delete_tag(
            self.snapshot.available_tags, self.snapshot.domains, tag
        )
        self._deleted_tags.add(tag)
        self._created_tags = [name for name in self._created_tags if name != tag]
        self._tag_overlay = {
            domain_id: tags - {tag} for domain_id, tags in self._tag_overlay.items()
        }
        self._replace(domains=domains, available_tags=catalog)
        return catalog

    def export_csv(self, state: Optional[FilterState] = None) -> str:
        view = self.view(state)
        return build_csv(view.domains, view.state.active_metrics)

    def export_filename(self, state: Optional[FilterState] = None) -> str:
        state = state or self.default_state()
        return export_filename(state.date_range, self._today())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _apply_overlays(self, domains: Sequence[DomainRecord]) -> List[DomainRecord]:
        updated: List[DomainRecord] = []
        for domain in domains:
            tags = self._tag_overlay.get(domain.id, domain.tags) - self._deleted_tags
            favorite = self._favorite_overlay.get(domain.id, domain.favorite)
            if tags != domain.tags or favorite != domain.favorite:
                domain = domain.model_copy(update={"tags": tags, "favorite": favorite})
            updated.append(domain)
        return updated

    def _build_catalog(self, domains: Sequence[DomainRecord]) -> Tuple[str, ...]:
        catalog = list(tag_ops.collect_tags(domains))
        catalog.extend(tag for tag in self._created_tags if tag not in catalog)
        return tuple(tag for tag in catalog if tag not in self._deleted_tags)

    def _replace(self, **changes: Sequence[object]) -> None:
        # model_copy skips validation, so keep the tuple field types here
        update = {name: tuple(value) for name, value in changes.items()}
        self._snapshot = self.snapshot.model_copy(update=update)

    def _today(self) -> date:
        return self._clock().astimezone(coerce_zone(self._config.time_zone)).date()


def _find(domains: Sequence[DomainRecord], domain_id: str) -> DomainRecord:
    return next(domain for domain in domains if domain.id == domain_id)
