"""Per-domain web analytics dashboard engine following Clean Architecture layering."""

from .core.container import DIContainer
from .core.dashboard import Dashboard

__all__ = [
    "Dashboard",
    "DIContainer",
    "domain",
    "analytics",
    "core",
    "sources",
    "utils",
]
