"""Range filtering of a single domain's chart series."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple, Union

from domain_analytics.analytics.date_range import coerce_selector
from domain_analytics.domain.models import (
    DateRange,
    Granularity,
    ResolvedRange,
    TimeSeriesPoint,
)

# Custom windows up to this many calendar days are charted hourly.
HOURLY_WINDOW_MAX_DAYS = 2


def filter_series(
    points: Iterable[TimeSeriesPoint],
    selector: Union[DateRange, str],
    *,
    bounds: Optional[ResolvedRange] = None,
) -> Tuple[TimeSeriesPoint, ...]:
    """Return the subsequence of ``points`` charted for ``selector``.

    ``today``/``yesterday`` keep every hour-keyed point, since the upstream
    fetch already scopes the 24h window. Day ranges keep day-keyed points only
    and take the last N. Keys of unrecognised shape are treated as days there;
    hour keys are skipped. Results are always in ascending key order.
    """

    range_ = coerce_selector(selector)
    if range_.is_hourly:
        return _chronological(point for point in points if _is_hourly(point))
    if range_ is DateRange.CUSTOM and bounds is not None:
        return _within_bounds(points, bounds)
    return last_days(points, range_.days)


def last_days(
    points: Iterable[TimeSeriesPoint], count: int
) -> Tuple[TimeSeriesPoint, ...]:
    """Last ``count`` day points in ascending key order, never padded."""

    if count <= 0:
        return ()
    daily = _chronological(point for point in points if not _is_hourly(point))
    return daily[-count:]


def _within_bounds(
    points: Iterable[TimeSeriesPoint], bounds: ResolvedRange
) -> Tuple[TimeSeriesPoint, ...]:
    hourly = bounds.days <= HOURLY_WINDOW_MAX_DAYS
    first_day = bounds.start.date().isoformat()
    last_day = bounds.end.date().isoformat()
    return _chronological(
        point
        for point in points
        if _is_hourly(point) is hourly and first_day <= point.day <= last_day
    )


def _chronological(points: Iterable[TimeSeriesPoint]) -> Tuple[TimeSeriesPoint, ...]:
    return tuple(sorted(points, key=lambda point: point.date_key))


def _is_hourly(point: TimeSeriesPoint) -> bool:
    return point.granularity is Granularity.HOUR
