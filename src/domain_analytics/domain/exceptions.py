"""Exception hierarchy for domain analytics failures."""

from __future__ import annotations

from typing import Any, Mapping


class DomainAnalyticsError(Exception):
    """Base class for all domain-level errors in the analytics dashboard."""

    default_message = "Domain analytics error occurred"

    def __init__(
        self, message: str | None = None, *, context: Mapping[str, Any] | None = None
    ):
        self.message = message or self.default_message
        self.context: Mapping[str, Any] = dict(context or {})
        formatted = self._format_message()
        super().__init__(formatted)

    def _format_message(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


class InvalidRangeError(DomainAnalyticsError):
    """Range selector, time zone or custom bounds cannot be resolved."""

    default_message = "Invalid date range"


class DataSourceError(DomainAnalyticsError):
    """Generic upstream statistics failure."""

    default_message = "Data source error"


class DataSourceUnavailableError(DataSourceError):
    """Analytics backend is down or unreachable."""

    default_message = "Data source is unavailable"


class DataSourceRateLimitError(DataSourceError):
    """Analytics backend refuses requests due to rate limiting."""

    default_message = "Data source rate limit exceeded"


class DataSourceAuthError(DataSourceError):
    """Authentication against the analytics backend failed."""

    default_message = "Data source authentication failed"


class TagError(DomainAnalyticsError):
    """Tag catalog operation rejected."""

    default_message = "Tag error"


class DuplicateTagError(TagError):
    default_message = "Tag already exists"


class InvalidTagError(TagError):
    default_message = "Invalid tag name"


class DomainNotFoundError(DomainAnalyticsError):
    """Raised when a mutation targets an unknown domain id."""

    default_message = "Domain not found"


class DashboardNotLoadedError(DomainAnalyticsError):
    """Raised when the dashboard is queried before its first refresh."""

    default_message = "Dashboard has not been refreshed yet"
