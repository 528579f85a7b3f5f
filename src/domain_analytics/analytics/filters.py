"""Search, tag and sort filtering over domain collections."""

from __future__ import annotations

import logging
import unicodedata
from typing import Callable, Dict, Iterable, List, Sequence, Tuple, Union

from domain_analytics.domain.models import (
    DomainRecord,
    PartitionedDomains,
    SortOption,
)

logger = logging.getLogger(__name__)

SortKey = Callable[[DomainRecord], object]


def filter_by_search(domains: Sequence[DomainRecord], query: str) -> List[DomainRecord]:
    """Case-insensitive substring match on domain or display name."""

    if not query.strip():
        return list(domains)
    needle = query.casefold()
    return [
        domain
        for domain in domains
        if needle in domain.domain.casefold() or needle in domain.name.casefold()
    ]


def filter_by_tags(
    domains: Sequence[DomainRecord], selected_tags: Iterable[str]
) -> List[DomainRecord]:
    """Keep domains carrying any of ``selected_tags``."""

    wanted = frozenset(selected_tags)
    if not wanted:
        return list(domains)
    return [domain for domain in domains if domain.tags & wanted]


def sort_domains(
    domains: Sequence[DomainRecord], sort_by: Union[SortOption, str]
) -> List[DomainRecord]:
    """Stable sort; an unrecognised ``sort_by`` keeps the input order."""

    try:
        option = SortOption(sort_by)
    except ValueError:
        logger.debug("unknown_sort_option", extra={"sort_by": sort_by})
        return list(domains)
    key, reverse = _SORTS[option]
    return sorted(domains, key=key, reverse=reverse)


def filter_and_sort(
    domains: Sequence[DomainRecord],
    *,
    search_query: str = "",
    selected_tags: Iterable[str] = (),
    sort_by: Union[SortOption, str] = SortOption.NAME_ASC,
) -> List[DomainRecord]:
    """Apply search, then tag filter, then sort."""

    filtered = filter_by_search(domains, search_query)
    filtered = filter_by_tags(filtered, selected_tags)
    return sort_domains(filtered, sort_by)


def partition_favorites(domains: Iterable[DomainRecord]) -> PartitionedDomains:
    """Split into pinned and regular domains, keeping relative order.

    Call after sorting so both halves reflect the chosen order.
    """

    favorites: List[DomainRecord] = []
    regular: List[DomainRecord] = []
    for domain in domains:
        (favorites if domain.favorite else regular).append(domain)
    return PartitionedDomains(favorites=favorites, regular=regular)


def _name_key(domain: DomainRecord) -> str:
    decomposed = unicodedata.normalize("NFKD", domain.name)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


_SORTS: Dict[SortOption, Tuple[SortKey, bool]] = {
    SortOption.NAME_ASC: (_name_key, False),
    SortOption.NAME_DESC: (_name_key, True),
    SortOption.VISITORS_DESC: (lambda d: d.visitors.current, True),
    SortOption.VISITORS_ASC: (lambda d: d.visitors.current, False),
    SortOption.PAGEVIEWS_DESC: (lambda d: d.pageviews.current, True),
}
