"""Dependency injection container for building fully-wired Dashboard instances."""

from __future__ import annotations

from typing import Optional

import httpx

from domain_analytics.analytics.aggregator import CrossDomainAggregator
from domain_analytics.core.config import DashboardConfig
from domain_analytics.core.dashboard import Dashboard
from domain_analytics.domain.interfaces import Clock, IAggregator, IDataSource
from domain_analytics.sources.base import SourceConfig
from domain_analytics.sources.synthetic import SyntheticDataSource
from domain_analytics.sources.umami import UmamiDataSource


class DIContainer:
    """Factory helpers that assemble a Dashboard with default wiring."""

    @staticmethod
    def create_dashboard(
        *,
        api_token: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        config: Optional[DashboardConfig] = None,
        http_client: Optional[httpx.Client] = None,
        clock: Optional[Clock] = None,
    ) -> Dashboard:
        token = DIContainer._normalize_token(api_token, api_key)
        cfg = config or DashboardConfig.from_env()
        resolved_base_url = base_url or cfg.api_base_url
        if not token:
            raise ValueError("An API token must be supplied")
        if not resolved_base_url:
            raise ValueError("A base URL must be supplied or configured")

        source_config = SourceConfig(
            api_token=token,
            base_url=resolved_base_url,
            timeout=float(cfg.request_timeout_seconds),
            max_retries=cfg.max_retries,
        )
        client = http_client or DIContainer._build_http_client(source_config)
        source = UmamiDataSource(client, source_config, clock=clock)
        return Dashboard(cfg, source, aggregator=CrossDomainAggregator(), clock=clock)

    @staticmethod
    def create_demo_dashboard(
        *,
        seed: int = 0,
        config: Optional[DashboardConfig] = None,
        clock: Optional[Clock] = None,
    ) -> Dashboard:
        cfg = config or DashboardConfig()
        source = SyntheticDataSource(seed, clock=clock)
        return Dashboard(cfg, source, aggregator=CrossDomainAggregator(), clock=clock)

    @staticmethod
    def create_custom_dashboard(
        *,
        config: DashboardConfig,
        source: IDataSource,
        aggregator: Optional[IAggregator] = None,
        clock: Optional[Clock] = None,
    ) -> Dashboard:
        return Dashboard(config, source, aggregator=aggregator, clock=clock)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build_http_client(source_config: SourceConfig) -> httpx.Client:
        return httpx.Client(timeout=source_config.timeout)

    @staticmethod
    def _normalize_token(*tokens: Optional[str]) -> Optional[str]:
        """Allow both api_token and api_key kwargs while preventing conflicts."""
        provided = [token for token in tokens if token]
        if not provided:
            return None
        if len(set(provided)) > 1:
            raise ValueError("Conflicting API tokens supplied")
        return provided[0]
