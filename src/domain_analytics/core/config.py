"""Dashboard configuration management helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from domain_analytics.domain.models import DateRange, SortOption
from domain_analytics.utils.validators import validate_metrics, validate_time_zone


def _str_to_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value: {value}") from exc


def _str_to_list(value: str | None, default: List[str]) -> List[str]:
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class DashboardConfig:
    """Immutable configuration object loaded from env or files."""

    default_range: str = "28d"
    default_sort: str = "visitors_desc"
    time_zone: str = "UTC"
    active_metrics: List[str] = field(
        default_factory=lambda: ["pageviews", "visits", "visitors"]
    )
    api_base_url: Optional[str] = None
    request_timeout_seconds: int = 30
    max_retries: int = 3

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        defaults = cls()
        return cls(
            default_range=os.getenv("DASHBOARD_DEFAULT_RANGE", defaults.default_range),
            default_sort=os.getenv("DASHBOARD_DEFAULT_SORT", defaults.default_sort),
            time_zone=os.getenv("DASHBOARD_TIME_ZONE", defaults.time_zone),
            active_metrics=_str_to_list(
                os.getenv("DASHBOARD_ACTIVE_METRICS"), defaults.active_metrics
            ),
            api_base_url=os.getenv("DASHBOARD_API_BASE_URL", defaults.api_base_url),
            request_timeout_seconds=_str_to_int(
                os.getenv("DASHBOARD_REQUEST_TIMEOUT_SECONDS"),
                defaults.request_timeout_seconds,
            ),
            max_retries=_str_to_int(
                os.getenv("DASHBOARD_MAX_RETRIES"), defaults.max_retries
            ),
        )

    @classmethod
    def from_file(cls, path: str) -> "DashboardConfig":
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        raw = file_path.read_text()
        data: Dict[str, Any]
        suffix = file_path.suffix.lower()
        if suffix == ".json":
            data = json.loads(raw)
        elif suffix in {".yaml", ".yml"}:
            data = cls._load_yaml(raw)
        else:
            raise ValueError("Unsupported config format. Use JSON or YAML.")
        return cls(**cls._merge_with_defaults(data))

    def validate(self) -> None:
        allowed_ranges = {member.value for member in DateRange}
        if self.default_range not in allowed_ranges:
            raise ValueError(f"default_range must be one of {sorted(allowed_ranges)}")
        allowed_sorts = {member.value for member in SortOption}
        if self.default_sort not in allowed_sorts:
            raise ValueError(f"default_sort must be one of {sorted(allowed_sorts)}")
        validate_time_zone(self.time_zone)
        if not isinstance(self.active_metrics, list):
            raise ValueError("active_metrics must be a list")
        validate_metrics(self.active_metrics)
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be greater than zero")
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")

    @classmethod
    def _merge_with_defaults(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        defaults = cls()
        return {
            name: data.get(name, getattr(defaults, name))
            for name in (
                "default_range",
                "default_sort",
                "time_zone",
                "active_metrics",
                "api_base_url",
                "request_timeout_seconds",
                "max_retries",
            )
        }

    @staticmethod
    def _load_yaml(raw: str) -> Dict[str, Any]:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to parse YAML config files") from exc
        return yaml.safe_load(raw) or {}
