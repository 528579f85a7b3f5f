"""Domain value objects representing dashboard analytics concepts."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, FrozenSet, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from domain_analytics.utils.formatting import (
    format_duration,
    format_number,
    format_percent,
)

Number = Union[int, float]

DAY_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
HOUR_KEY_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$"
)


def calculate_change(current: Number, previous: Number) -> float:
    """Percentage delta from ``previous`` to ``current`` rounded to one decimal.

    A zero ``previous`` yields ``100.0`` when there is any current activity and
    ``0.0`` otherwise, so the result is always finite.
    """

    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


class AggregationRule(str, Enum):
    """How per-key values merge across domains."""

    SUM = "sum"
    MEAN = "mean"


class MetricKind(str, Enum):
    """The five tracked metrics."""

    PAGEVIEWS = "pageviews"
    VISITS = "visits"
    VISITORS = "visitors"
    BOUNCES = "bounces"
    AVG_TIME = "avg_time"

    @classmethod
    def _missing_(cls, value: object) -> Optional["MetricKind"]:
        if isinstance(value, str):
            normalized = _METRIC_ALIASES.get(value, value.strip().lower())
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def label(self) -> str:
        return _METRIC_LABELS[self]

    @property
    def series_rule(self) -> AggregationRule:
        if self is MetricKind.AVG_TIME:
            return AggregationRule.MEAN
        return AggregationRule.SUM

    def format_value(self, value: Number) -> str:
        if self is MetricKind.AVG_TIME:
            return format_duration(value)
        if self is MetricKind.BOUNCES:
            return format_percent(value)
        return format_number(value)


_METRIC_ALIASES = {"avgTime": "avg_time", "avg-time": "avg_time"}

_METRIC_LABELS = {
    MetricKind.PAGEVIEWS: "Pageviews",
    MetricKind.VISITS: "Visits",
    MetricKind.VISITORS: "Visitors",
    MetricKind.BOUNCES: "Bounces",
    MetricKind.AVG_TIME: "Avg. Time",
}

DEFAULT_ACTIVE_METRICS: Tuple[MetricKind, ...] = (
    MetricKind.PAGEVIEWS,
    MetricKind.VISITS,
    MetricKind.VISITORS,
)


class DateRange(str, Enum):
    """Symbolic reporting windows selectable by the operator."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_7_DAYS = "7d"
    LAST_28_DAYS = "28d"
    LAST_90_DAYS = "90d"
    CUSTOM = "custom"

    @property
    def days(self) -> int:
        return _RANGE_DAYS[self]

    @property
    def is_hourly(self) -> bool:
        return self in (DateRange.TODAY, DateRange.YESTERDAY)


_RANGE_DAYS = {
    DateRange.TODAY: 1,
    DateRange.YESTERDAY: 1,
    DateRange.LAST_7_DAYS: 7,
    DateRange.LAST_28_DAYS: 28,
    DateRange.LAST_90_DAYS: 90,
    DateRange.CUSTOM: 7,
}


class SortOption(str, Enum):
    """Supported domain orderings."""

    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    VISITORS_DESC = "visitors_desc"
    VISITORS_ASC = "visitors_asc"
    PAGEVIEWS_DESC = "pageviews_desc"


class Granularity(str, Enum):
    DAY = "day"
    HOUR = "hour"
    UNKNOWN = "unknown"


def granularity_of(date_key: str) -> Granularity:
    """Classify a series key by its shape."""

    if DAY_KEY_PATTERN.match(date_key):
        return Granularity.DAY
    if HOUR_KEY_PATTERN.match(date_key):
        return Granularity.HOUR
    return Granularity.UNKNOWN


class MetricValue(BaseModel):
    """Summary triple for one KPI over the active range."""

    model_config = ConfigDict(frozen=True)

    current: Number = 0
    previous: Number = 0

    @field_validator("current", "previous")
    @classmethod
    def validate_non_negative(cls, value: Number) -> Number:
        if value < 0:
            raise ValueError("metric values must be non-negative")
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def change(self) -> float:
        return calculate_change(self.current, self.previous)

    @classmethod
    def zero(cls) -> "MetricValue":
        return cls(current=0, previous=0)


class TimeSeriesPoint(BaseModel):
    """One chart bucket, either a calendar day or a single hour."""

    model_config = ConfigDict(frozen=True)

    date_key: str
    pageviews: int = Field(default=0, ge=0)
    visits: int = Field(default=0, ge=0)
    visitors: int = Field(default=0, ge=0)
    bounces: int = Field(default=0, ge=0)
    avg_time: float = Field(default=0.0, ge=0)

    @property
    def granularity(self) -> Granularity:
        return granularity_of(self.date_key)

    @property
    def day(self) -> str:
        return self.date_key[:10]

    def value(self, kind: MetricKind) -> Number:
        return getattr(self, kind.value)


class DomainRecord(BaseModel):
    """Display-ready metrics for one tracked website."""

    model_config = ConfigDict(frozen=True)

    id: str
    domain: str
    name: str
    pageviews: MetricValue = Field(default_factory=MetricValue.zero)
    visits: MetricValue = Field(default_factory=MetricValue.zero)
    visitors: MetricValue = Field(default_factory=MetricValue.zero)
    bounces: MetricValue = Field(default_factory=MetricValue.zero)
    avg_time: MetricValue = Field(default_factory=MetricValue.zero)
    time_series: Tuple[TimeSeriesPoint, ...] = Field(default_factory=tuple)
    favorite: bool = False
    tags: FrozenSet[str] = Field(default_factory=frozenset)
    realtime_visitors: int = Field(default=0, ge=0)
    favicon: Optional[str] = None
    last_update: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def validate_identity(self) -> "DomainRecord":
        if not self.id.strip():
            raise ValueError("id must be a non-empty string")
        return self

    def metric(self, kind: MetricKind) -> MetricValue:
        return getattr(self, kind.value)


class ResolvedRange(BaseModel):
    """Concrete zoned instants for a range selector."""

    model_config = ConfigDict(frozen=True)

    selector: DateRange
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def validate_bounds(self) -> "ResolvedRange":
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("range bounds must be timezone-aware")
        if self.start > self.end:
            raise ValueError("range start must not be after its end")
        return self

    @property
    def days(self) -> int:
        return (self.end.date() - self.start.date()).days + 1

    @property
    def start_ms(self) -> int:
        return int(self.start.timestamp() * 1000)

    @property
    def end_ms(self) -> int:
        return int(self.end.timestamp() * 1000)


class AggregatedMetrics(BaseModel):
    """Cross-domain summary panel values; derived, never stored."""

    model_config = ConfigDict(frozen=True)

    pageviews: int = 0
    visits: int = 0
    visitors: Number = 0
    bounce_rate: float = 0.0
    avg_time: int = 0
    realtime_total: int = 0
    domain_count: int = 0
    time_series: Tuple[TimeSeriesPoint, ...] = Field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "AggregatedMetrics":
        return cls()


class FilterState(BaseModel):
    """Single source of truth for every filter stage."""

    model_config = ConfigDict(frozen=True)

    date_range: DateRange = DateRange.LAST_28_DAYS
    search_query: str = ""
    sort_by: SortOption = SortOption.VISITORS_DESC
    selected_tags: FrozenSet[str] = Field(default_factory=frozenset)
    active_metrics: Tuple[MetricKind, ...] = DEFAULT_ACTIVE_METRICS

    @field_validator("active_metrics")
    @classmethod
    def dedupe_metrics(cls, value: Tuple[MetricKind, ...]) -> Tuple[MetricKind, ...]:
        return tuple(dict.fromkeys(value))

    def with_updates(self, **changes: Any) -> "FilterState":
        data = self.model_dump()
        data.update(changes)
        return FilterState.model_validate(data)


class PartitionedDomains(BaseModel):
    model_config = ConfigDict(frozen=True)

    favorites: Tuple[DomainRecord, ...] = Field(default_factory=tuple)
    regular: Tuple[DomainRecord, ...] = Field(default_factory=tuple)


class DashboardSnapshot(BaseModel):
    """One fetch cycle worth of domain records."""

    model_config = ConfigDict(frozen=True)

    domains: Tuple[DomainRecord, ...]
    window: ResolvedRange
    available_tags: Tuple[str, ...] = Field(default_factory=tuple)
    fetched_at: datetime


class DashboardView(BaseModel):
    """Result of recomputing every filter stage for one state."""

    model_config = ConfigDict(frozen=True)

    state: FilterState
    domains: Tuple[DomainRecord, ...]
    favorites: Tuple[DomainRecord, ...]
    regular: Tuple[DomainRecord, ...]
    totals: AggregatedMetrics
