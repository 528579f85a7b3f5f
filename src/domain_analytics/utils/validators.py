"""Input validation helpers used across the dashboard."""

from __future__ import annotations

from typing import Iterable, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from domain_analytics.domain.exceptions import InvalidTagError
from domain_analytics.domain.models import MetricKind

MAX_TAG_LENGTH = 50


def validate_tag_name(tag: str) -> str:
    """Return the trimmed tag or raise ``InvalidTagError``."""

    trimmed = tag.strip()
    if not trimmed:
        raise InvalidTagError("Tag name must be non-empty")
    if len(trimmed) > MAX_TAG_LENGTH:
        raise InvalidTagError(
            "Tag name exceeds maximum length",
            context={"tag": trimmed, "max_length": MAX_TAG_LENGTH},
        )
    return trimmed


def validate_time_zone(name: str) -> None:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone '{name}'") from exc


def validate_metrics(names: Iterable[str]) -> Tuple[MetricKind, ...]:
    metrics = []
    for name in names:
        try:
            metrics.append(MetricKind(name))
        except ValueError as exc:
            raise ValueError(
                f"Unknown metric '{name}'. "
                f"Available: {[kind.value for kind in MetricKind]}"
            ) from exc
    return tuple(dict.fromkeys(metrics))
