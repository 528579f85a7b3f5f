"""Zoned resolution of symbolic range selectors into concrete instants."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from domain_analytics.domain.exceptions import InvalidRangeError
from domain_analytics.domain.models import DateRange, ResolvedRange

logger = logging.getLogger(__name__)

Bound = Union[date, datetime]


def resolve_range(
    selector: Union[DateRange, str],
    time_zone: Union[str, tzinfo],
    *,
    now: Optional[datetime] = None,
    custom: Optional[Tuple[Bound, Bound]] = None,
) -> ResolvedRange:
    """Return start/end instants for ``selector`` in the reporting zone.

    "Now" is converted into ``time_zone`` before any day boundary is taken, so
    the result does not depend on the process's ambient zone. Multi-day
    windows span exactly N calendar days including today. ``custom`` without
    explicit bounds resolves like ``7d``.
    """

    range_ = coerce_selector(selector)
    zone = coerce_zone(time_zone)

    if range_ is DateRange.CUSTOM and custom is not None:
        return _resolve_custom(custom, zone)
    if range_ is DateRange.CUSTOM:
        logger.debug("custom_range_fallback", extra={"fallback": "7d"})

    today = _zoned_now(zone, now).date()
    if range_ is DateRange.YESTERDAY:
        first = last = today - timedelta(days=1)
    elif range_ is DateRange.TODAY:
        first = last = today
    else:
        last = today
        first = today - timedelta(days=range_.days - 1)

    return ResolvedRange(
        selector=range_,
        start=start_of_day(first, zone),
        end=end_of_day(last, zone),
    )


def previous_range(window: ResolvedRange) -> ResolvedRange:
    """Comparison window of equal calendar length ending just before ``window``."""

    zone = window.start.tzinfo
    if zone is None:
        raise InvalidRangeError("Range bounds must be timezone-aware")
    first_day = window.start.date()
    return ResolvedRange(
        selector=window.selector,
        start=start_of_day(first_day - timedelta(days=window.days), zone),
        end=end_of_day(first_day - timedelta(days=1), zone),
    )


def range_days(selector: Union[DateRange, str]) -> int:
    return coerce_selector(selector).days


def start_of_day(day: date, zone: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=zone)


def end_of_day(day: date, zone: tzinfo) -> datetime:
    return datetime.combine(day, time.max, tzinfo=zone)


def coerce_selector(selector: Union[DateRange, str]) -> DateRange:
    try:
        return DateRange(selector)
    except ValueError as exc:
        raise InvalidRangeError(
            f"Unsupported range selector '{selector}'",
            context={"allowed": [member.value for member in DateRange]},
        ) from exc


def coerce_zone(time_zone: Union[str, tzinfo]) -> tzinfo:
    if isinstance(time_zone, tzinfo):
        return time_zone
    try:
        return ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidRangeError(
            f"Unknown time zone '{time_zone}'", context={"time_zone": time_zone}
        ) from exc


# ----------------------------------------------------------------------
# Internal helpers
# ----------------------------------------------------------------------
def _zoned_now(zone: tzinfo, now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone)


def _resolve_custom(custom: Tuple[Bound, Bound], zone: tzinfo) -> ResolvedRange:
    start = _localize(custom[0], zone, end=False)
    end = _localize(custom[1], zone, end=True)
    if start > end:
        raise InvalidRangeError(
            "Custom range start is after its end",
            context={"start": start.isoformat(), "end": end.isoformat()},
        )
    return ResolvedRange(selector=DateRange.CUSTOM, start=start, end=end)


def _localize(bound: Bound, zone: tzinfo, *, end: bool) -> datetime:
    if not isinstance(bound, datetime):
        return end_of_day(bound, zone) if end else start_of_day(bound, zone)
    if bound.tzinfo is None:
        return bound.replace(tzinfo=zone)
    return bound.astimezone(zone)
