"""Deterministic synthetic data source for demos and tests."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from domain_analytics.domain.interfaces import Clock
from domain_analytics.domain.models import (
    DomainRecord,
    MetricValue,
    ResolvedRange,
    TimeSeriesPoint,
)

from .umami import favicon_url

HISTORY_DAYS = 90
HOURLY_DAYS = 2


@dataclass(frozen=True)
class SampleDomain:
    domain: str
    name: str
    tags: Tuple[str, ...]


SAMPLE_DOMAINS: Tuple[SampleDomain, ...] = (
    SampleDomain("casino-royal.com", "Casino Royal", ("casino", "gaming")),
    SampleDomain("betonline.io", "Bet Online", ("betting", "sports")),
    SampleDomain("pokerstars.net", "Poker Stars", ("casino", "poker")),
    SampleDomain("shopify-store.com", "E-Shop Pro", ("ecommerce",)),
    SampleDomain("crypto-exchange.io", "Crypto Exchange", ("crypto", "finance")),
    SampleDomain("news-portal.com", "News Portal", ("media", "news")),
    SampleDomain("fitness-tracker.app", "Fitness App", ("health", "mobile")),
    SampleDomain("learning-platform.edu", "EduLearn", ("education", "saas")),
    SampleDomain("social-network.social", "SocialHub", ("social", "community")),
    SampleDomain("analytics-dashboard.io", "Analytics Pro", ("saas", "b2b")),
)


class SyntheticDataSource:
    """Generates plausible per-domain statistics from a seed.

    Each series holds daily points for the last 90 days except the two most
    recent, which are covered by 24 hourly points each. Summary metrics are
    summed from the series points falling inside the requested windows, so
    ``change`` is consistent with the generated history.
    """

    def __init__(
        self,
        seed: int = 0,
        *,
        clock: Optional[Clock] = None,
        domains: Sequence[SampleDomain] = SAMPLE_DOMAINS,
        favorites: int = 2,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._seed = seed
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._domains = list(domains)
        self._favorites = favorites
        self._logger = logger or logging.getLogger(__name__)

    def fetch_domains(
        self, window: ResolvedRange, previous: ResolvedRange
    ) -> List[DomainRecord]:
        now = self._clock()
        today = now.astimezone(window.start.tzinfo).date()
        records = [
            self._build_record(index, sample, today, window, previous, now)
            for index, sample in enumerate(self._domains)
        ]
        self._logger.debug(
            "synthetic_domains_generated",
            extra={"seed": self._seed, "domains": len(records)},
        )
        return records

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _build_record(
        self,
        index: int,
        sample: SampleDomain,
        today: date,
        window: ResolvedRange,
        previous: ResolvedRange,
        now: datetime,
    ) -> DomainRecord:
        rng = random.Random(f"{self._seed}:{sample.domain}:{today.isoformat()}")
        series = generate_series(rng, today)
        current_points = _points_within(series, window)
        previous_points = _points_within(series, previous)
        return DomainRecord(
            id=f"domain-{index + 1}",
            domain=sample.domain,
            name=sample.name,
            favicon=favicon_url(sample.domain),
            pageviews=_summed(current_points, previous_points, "pageviews"),
            visits=_summed(current_points, previous_points, "visits"),
            visitors=_summed(current_points, previous_points, "visitors"),
            bounces=_summed(current_points, previous_points, "bounces"),
            avg_time=MetricValue(
                current=_mean_time(current_points),
                previous=_mean_time(previous_points),
            ),
            time_series=series,
            favorite=index < self._favorites,
            tags=frozenset(sample.tags),
            realtime_visitors=rng.randint(0, 50),
            last_update=now,
        )


def generate_series(
    rng: random.Random, today: date, days: int = HISTORY_DAYS
) -> Tuple[TimeSeriesPoint, ...]:
    points: List[TimeSeriesPoint] = []
    for offset in range(days - 1, HOURLY_DAYS - 1, -1):
        day = today - timedelta(days=offset)
        points.append(
            TimeSeriesPoint(
                date_key=day.isoformat(),
                pageviews=rng.randint(100, 5000),
                visits=rng.randint(80, 3000),
                visitors=rng.randint(50, 2000),
                bounces=rng.randint(20, 60),
                avg_time=rng.randint(30, 300),
            )
        )
    for offset in range(HOURLY_DAYS - 1, -1, -1):
        points.extend(_hourly_points(rng, today - timedelta(days=offset)))
    return tuple(points)


def _hourly_points(rng: random.Random, day: date) -> Iterable[TimeSeriesPoint]:
    for hour in range(24):
        yield TimeSeriesPoint(
            date_key=f"{day.isoformat()} {hour:02d}:00",
            pageviews=rng.randint(50, 300),
            visits=rng.randint(40, 200),
            visitors=rng.randint(30, 150),
            bounces=rng.randint(10, 40),
            avg_time=rng.randint(20, 180),
        )


def _points_within(
    series: Sequence[TimeSeriesPoint], window: ResolvedRange
) -> List[TimeSeriesPoint]:
    first = window.start.date().isoformat()
    last = window.end.date().isoformat()
    return [point for point in series if first <= point.day <= last]


def _summed(
    current: Sequence[TimeSeriesPoint], previous: Sequence[TimeSeriesPoint], field: str
) -> MetricValue:
    return MetricValue(
        current=sum(getattr(point, field) for point in current),
        previous=sum(getattr(point, field) for point in previous),
    )


def _mean_time(points: Sequence[TimeSeriesPoint]) -> int:
    if not points:
        return 0
    return round(sum(point.avg_time for point in points) / len(points))
