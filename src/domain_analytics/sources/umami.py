"""Umami analytics adapter built on top of ``BaseDataSource``."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import httpx

from domain_analytics.analytics.series import HOURLY_WINDOW_MAX_DAYS
from domain_analytics.domain.exceptions import (
    DataSourceAuthError,
    DataSourceError,
    DataSourceRateLimitError,
    DataSourceUnavailableError,
)
from domain_analytics.domain.interfaces import Clock
from domain_analytics.domain.models import (
    DomainRecord,
    MetricKind,
    MetricValue,
    Number,
    ResolvedRange,
    TimeSeriesPoint,
)

from .base import BaseDataSource, SourceConfig

PERSONAL_WEBSITES_PATH = "/api/me/websites"
TEAMS_PATH = "/api/me/teams"
TEAM_WEBSITES_PATH = "/api/teams/{team_id}/websites"
STATS_PATH = "/api/websites/{website_id}/stats"
PAGEVIEWS_PATH = "/api/websites/{website_id}/pageviews"

FAVICON_URL = "https://www.google.com/s2/favicons?domain={domain}&sz=32"

_COUNTED_METRICS = (
    MetricKind.PAGEVIEWS,
    MetricKind.VISITS,
    MetricKind.VISITORS,
    MetricKind.BOUNCES,
)


class UmamiDataSource(BaseDataSource):
    """Concrete source that reads website statistics from an Umami instance."""

    def __init__(
        self,
        http_client: httpx.Client,
        config: SourceConfig,
        *,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(config, logger=logger)
        self._http = http_client
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def fetch_domains(
        self, window: ResolvedRange, previous: ResolvedRange
    ) -> List[DomainRecord]:
        websites = self.fetch_websites()
        unit = "hour" if window.days <= HOURLY_WINDOW_MAX_DAYS else "day"
        records: List[DomainRecord] = []
        failures = 0
        for website in websites:
            try:
                records.append(self._fetch_domain(website, window, previous, unit))
            except DataSourceError as exc:
                failures += 1
                self.logger.warning(
                    "domain_fetch_failed",
                    extra={"website_id": website_id(website), "error": str(exc)},
                )
                records.append(zero_record(website, now=self._clock()))
        self.logger.info(
            "domains_fetched",
            extra={"websites": len(websites), "failures": failures, "unit": unit},
        )
        return records

    def fetch_websites(self) -> List[Mapping[str, Any]]:
        """Personal plus team websites, de-duplicated by id."""

        personal = self.execute(self._get_optional, PERSONAL_WEBSITES_PATH)
        teams = self.execute(self._get, TEAMS_PATH)

        team_websites: List[Mapping[str, Any]] = []
        for team in _data(teams):
            path = TEAM_WEBSITES_PATH.format(team_id=team.get("id"))
            try:
                payload = self.execute(self._get, path)
            except DataSourceError as exc:
                self.logger.warning(
                    "team_websites_skipped",
                    extra={"team": team.get("name"), "error": str(exc)},
                )
                continue
            team_websites.extend(_data(payload))

        unique: Dict[str, Mapping[str, Any]] = {}
        for website in [*_data(personal), *team_websites]:
            key = website_id(website)
            if key:
                unique[key] = website
        return list(unique.values())

    def fetch_stats(self, site_id: str, start_ms: int, end_ms: int) -> Mapping[str, Any]:
        return self.execute(
            self._get,
            STATS_PATH.format(website_id=site_id),
            {"startAt": start_ms, "endAt": end_ms},
        )

    def fetch_pageviews(
        self,
        site_id: str,
        start_ms: int,
        end_ms: int,
        unit: str = "day",
        time_zone: Optional[str] = None,
    ) -> Mapping[str, Any]:
        params: Dict[str, Any] = {"startAt": start_ms, "endAt": end_ms, "unit": unit}
        if time_zone:
            params["timezone"] = time_zone
        return self.execute(
            self._get, PAGEVIEWS_PATH.format(website_id=site_id), params
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _fetch_domain(
        self,
        website: Mapping[str, Any],
        window: ResolvedRange,
        previous: ResolvedRange,
        unit: str,
    ) -> DomainRecord:
        site_id = website_id(website)
        current = self.fetch_stats(site_id, window.start_ms, window.end_ms)
        prior = self.fetch_stats(site_id, previous.start_ms, previous.end_ms)
        pageviews = self.fetch_pageviews(
            site_id,
            window.start_ms,
            window.end_ms,
            unit,
            getattr(window.start.tzinfo, "key", None),
        )
        series = convert_pageviews(pageviews, unit)
        return convert_stats(website, current, prior, series, now=self._clock())

    def _get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        response = self._request(path, params)
        self._raise_for_status(response, path)
        return self._decode(response, path)

    def _get_optional(self, path: str) -> Any:
        response = self._request(path, None)
        if not response.is_success:
            self.logger.debug(
                "optional_request_empty",
                extra={"path": path, "status_code": response.status_code},
            )
            return {}
        return self._decode(response, path)

    def _request(
        self, path: str, params: Optional[Mapping[str, Any]]
    ) -> httpx.Response:
        try:
            return self._http.get(
                self.config.url(path),
                params=params,
                headers={"Authorization": f"Bearer {self.config.api_token}"},
                timeout=self.config.timeout,
            )
        except httpx.TransportError as exc:
            raise DataSourceUnavailableError(
                "Umami backend unreachable", context={"path": path}
            ) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, path: str) -> None:
        status = response.status_code
        context = {"status_code": status, "path": path}
        if status in (401, 403):
            raise DataSourceAuthError(context=context)
        if status == 429:
            raise DataSourceRateLimitError(context=context)
        if status >= 500:
            raise DataSourceUnavailableError(context=context)
        if status >= 400:
            raise DataSourceError(f"Umami request failed ({status})", context=context)

    @staticmethod
    def _decode(response: httpx.Response, path: str) -> Any:
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise DataSourceError(
                "Malformed Umami response", context={"path": path}
            ) from exc


def website_id(website: Mapping[str, Any]) -> str:
    key = website.get("id") or website.get("website_id")
    return str(key) if key else ""


def favicon_url(domain: Optional[str]) -> Optional[str]:
    return FAVICON_URL.format(domain=domain) if domain else None


def convert_stats(
    website: Mapping[str, Any],
    current: Mapping[str, Any],
    previous: Mapping[str, Any],
    series: Sequence[TimeSeriesPoint],
    *,
    now: Optional[datetime] = None,
) -> DomainRecord:
    """Map Umami stats payloads for two windows into a ``DomainRecord``.

    Accepts both ``{"pageviews": {"value": n}}`` and flat ``{"pageviews": n}``
    payload shapes.
    """

    metrics = {
        kind.value: MetricValue(
            current=_stat(current, kind.value), previous=_stat(previous, kind.value)
        )
        for kind in _COUNTED_METRICS
    }
    metrics[MetricKind.AVG_TIME.value] = MetricValue(
        current=_average_time(current), previous=_average_time(previous)
    )
    return DomainRecord(
        **_identity(website),
        **metrics,
        time_series=tuple(series),
        last_update=now or datetime.now(timezone.utc),
    )


def convert_pageviews(payload: Any, unit: str) -> Tuple[TimeSeriesPoint, ...]:
    """Chart points from a pageviews payload; only pageviews are populated."""

    items = payload.get("pageviews") if isinstance(payload, Mapping) else None
    if not isinstance(items, list):
        return ()
    points: List[TimeSeriesPoint] = []
    for item in items:
        raw_key = item.get("t") or item.get("x")
        if not raw_key:
            continue
        points.append(
            TimeSeriesPoint(
                date_key=normalize_date_key(str(raw_key), unit),
                pageviews=int(item.get("y") or 0),
            )
        )
    return tuple(points)


def normalize_date_key(raw: str, unit: str) -> str:
    """``YYYY-MM-DD`` for day buckets, ``YYYY-MM-DD HH:00`` for hour buckets."""

    text = raw.strip().replace("T", " ")
    if unit == "hour" and len(text) >= 13:
        return f"{text[:13]}:00"
    return text[:10]


def zero_record(
    website: Mapping[str, Any], *, now: Optional[datetime] = None
) -> DomainRecord:
    return DomainRecord(
        **_identity(website), last_update=now or datetime.now(timezone.utc)
    )


def _identity(website: Mapping[str, Any]) -> Dict[str, Any]:
    domain = website.get("domain") or website.get("name") or website_id(website)
    return {
        "id": website_id(website),
        "domain": domain,
        "name": website.get("name") or domain,
        "favicon": favicon_url(website.get("domain")),
    }


def _stat(payload: Mapping[str, Any], key: str) -> Number:
    value = payload.get(key, 0) if isinstance(payload, Mapping) else 0
    if isinstance(value, Mapping):
        value = value.get("value", 0)
    return value or 0


def _average_time(payload: Mapping[str, Any]) -> int:
    visits = _stat(payload, "visits")
    if visits <= 0:
        return 0
    return round(_stat(payload, "totaltime") / visits)


def _data(payload: Any) -> List[Mapping[str, Any]]:
    if isinstance(payload, Mapping):
        items = payload.get("data") or []
    elif isinstance(payload, list):
        items = payload
    else:
        items = []
    return [item for item in items if isinstance(item, Mapping)]
