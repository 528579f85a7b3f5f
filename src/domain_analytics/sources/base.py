"""Data source abstractions and shared retry/logging behavior."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

from domain_analytics.domain.exceptions import (
    DataSourceError,
    DataSourceRateLimitError,
    DataSourceUnavailableError,
)
from domain_analytics.domain.models import DomainRecord, ResolvedRange

T = TypeVar("T")

# Failures worth another attempt; anything else fails the website immediately.
TRANSIENT_ERRORS: Tuple[Type[DataSourceError], ...] = (
    DataSourceRateLimitError,
    DataSourceUnavailableError,
)


@dataclass(frozen=True)
class SourceConfig:
    """Connection settings for an analytics backend."""

    api_token: str
    base_url: str
    timeout: float = 30.0
    max_retries: int = 3
    backoff_factor: float = 0.5

    def __post_init__(self) -> None:
        problems = [
            message
            for failed, message in (
                (not self.api_token, "api_token must be provided"),
                (not self.base_url, "base_url must be provided"),
                (self.timeout <= 0, "timeout must be greater than zero"),
                (self.max_retries < 0, "max_retries cannot be negative"),
                (self.backoff_factor <= 0, "backoff_factor must be greater than zero"),
            )
            if failed
        ]
        if problems:
            raise ValueError("; ".join(problems))

    @property
    def attempts(self) -> int:
        return self.max_retries + 1

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


class BaseDataSource(ABC):
    """Fetches website statistics, retrying transient backend failures.

    Subclasses implement ``fetch_domains`` and route each backend call
    through ``execute``. Rate limits and outages are retried with exponential
    backoff; auth and request errors surface on the first attempt so a single
    broken website can be degraded without delaying the rest.
    """

    def __init__(
        self,
        config: SourceConfig,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(
            f"{__name__}.{self.__class__.__name__}"
        )

    @abstractmethod
    def fetch_domains(
        self, window: ResolvedRange, previous: ResolvedRange
    ) -> List[DomainRecord]:
        """Return one record per tracked website for ``window``."""

    def execute(self, call: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        name = getattr(call, "__name__", "call")
        attempt = 0
        while True:
            self.log_attempt(name, attempt)
            try:
                return call(*args, **kwargs)
            except TRANSIENT_ERRORS as exc:
                if attempt + 1 >= self.config.attempts:
                    self.logger.error(
                        "source_retries_exhausted",
                        extra={"call": name, "attempts": attempt + 1},
                        exc_info=exc,
                    )
                    raise
                delay = self._backoff_delay(attempt)
                if isinstance(exc, DataSourceRateLimitError):
                    self.handle_rate_limit(exc, delay)
                else:
                    self.handle_backoff(exc, delay)
                self._sleep(delay)
                attempt += 1
            except DataSourceError:
                raise
            except Exception as exc:
                self.logger.exception("source_call_failed", extra={"call": name})
                raise DataSourceError(
                    "Unexpected data source failure",
                    context={"source": self.__class__.__name__, "call": name},
                ) from exc

    def log_attempt(self, call_name: str, attempt: int) -> None:
        self.logger.debug(
            "source_request",
            extra={
                "call": call_name,
                "attempt": attempt,
                "source": self.__class__.__name__,
            },
        )

    def handle_rate_limit(self, error: DataSourceRateLimitError, delay: float) -> None:
        """Hook run before sleeping on a 429; subclasses may honor Retry-After."""

        self.handle_backoff(error, delay)

    def handle_backoff(self, error: DataSourceError, delay: float) -> None:
        self.logger.warning(
            "source_backoff",
            extra={
                "delay": delay,
                "reason": type(error).__name__,
                "source": self.__class__.__name__,
                "context": error.context,
            },
        )

    def _backoff_delay(self, attempt: int) -> float:
        return self.config.backoff_factor * 2**attempt

    def _sleep(self, delay: float) -> None:
        time.sleep(delay)
