"""Display formatting helpers for metric values."""

from __future__ import annotations

from typing import Union

Number = Union[int, float]


def format_number(num: Number) -> str:
    """Compact large counts with ``k``/``M`` suffixes (``1234`` -> ``1.2k``)."""

    if num >= 1_000_000:
        return _trim(f"{num / 1_000_000:.1f}") + "M"
    if num >= 1_000:
        return _trim(f"{num / 1_000:.1f}") + "k"
    if float(num).is_integer():
        return str(int(num))
    return f"{num:.1f}"


def format_time(seconds: Number) -> str:
    """Human readable duration: ``45s``, ``1m 5s``, ``2m``."""

    total = int(round(seconds))
    if total < 60:
        return f"{total}s"
    minutes, remaining = divmod(total, 60)
    if remaining == 0:
        return f"{minutes}m"
    return f"{minutes}m {remaining}s"


def format_duration(seconds: Number) -> str:
    """Clock style duration used on cards and exports (``65`` -> ``1:05``)."""

    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def format_percent(value: Number) -> str:
    return f"{value:.1f}%"


def format_change(change: float) -> str:
    """Signed percentage with one decimal (``-5.2`` -> ``-5.2%``)."""

    sign = "+" if change > 0 else "-" if change < 0 else ""
    return f"{sign}{abs(change):.1f}%"


def change_direction(change: float) -> str:
    if change > 0:
        return "positive"
    if change < 0:
        return "negative"
    return "neutral"


def change_arrow(change: float) -> str:
    if change > 0:
        return "↑"
    if change < 0:
        return "↓"
    return "→"


def bounce_rate(bounces: Number, visits: Number) -> int:
    """Whole-percent bounce rate; zero visits yields ``0``."""

    if visits == 0:
        return 0
    return round(bounces / visits * 100)


def _trim(value: str) -> str:
    return value[:-2] if value.endswith(".0") else value
