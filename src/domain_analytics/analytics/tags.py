"""Tag catalog and per-domain favorite/tag mutations.

Every function returns new collections; records are replaced, never mutated.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Sequence, Tuple

from domain_analytics.domain.exceptions import DomainNotFoundError, DuplicateTagError
from domain_analytics.domain.models import DomainRecord
from domain_analytics.utils.validators import validate_tag_name


def collect_tags(domains: Iterable[DomainRecord]) -> Tuple[str, ...]:
    tags: set[str] = set()
    for domain in domains:
        tags.update(domain.tags)
    return tuple(sorted(tags))


def create_tag(catalog: Sequence[str], tag: str) -> Tuple[str, ...]:
    name = validate_tag_name(tag)
    if name in catalog:
        raise DuplicateTagError(context={"tag": name})
    return (*catalog, name)


def delete_tag(
    catalog: Sequence[str], domains: Sequence[DomainRecord], tag: str
) -> Tuple[Tuple[str, ...], List[DomainRecord]]:
    """Remove ``tag`` from the catalog and from every domain carrying it."""

    remaining = tuple(existing for existing in catalog if existing != tag)
    updated = [
        domain.model_copy(update={"tags": domain.tags - {tag}})
        if tag in domain.tags
        else domain
        for domain in domains
    ]
    return remaining, updated


def set_domain_tags(
    domains: Sequence[DomainRecord], domain_id: str, tags: Iterable[str]
) -> List[DomainRecord]:
    cleaned = frozenset(validate_tag_name(tag) for tag in tags)
    return _replace(domains, domain_id, lambda d: d.model_copy(update={"tags": cleaned}))


def toggle_favorite(
    domains: Sequence[DomainRecord], domain_id: str
) -> List[DomainRecord]:
    return _replace(
        domains, domain_id, lambda d: d.model_copy(update={"favorite": not d.favorite})
    )


def _replace(
    domains: Sequence[DomainRecord],
    domain_id: str,
    change: Callable[[DomainRecord], DomainRecord],
) -> List[DomainRecord]:
    found = False
    updated: List[DomainRecord] = []
    for domain in domains:
        if domain.id == domain_id:
            updated.append(change(domain))
            found = True
        else:
            updated.append(domain)
    if not found:
        raise DomainNotFoundError(context={"domain_id": domain_id})
    return updated
