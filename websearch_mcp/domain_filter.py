"""
Domain allow-list matching.

An allow-list entry matches its own hostname and every subdomain of it:
"ftrack.com" admits "ftrack.com" and "developer.ftrack.com" but not
"notftrack.com". An empty allow-list means no restriction.
"""
from __future__ import annotations

from typing import Iterable, Sequence
from urllib.parse import urlparse

from .models import SearchResult


def normalize_domains(values: Iterable[str]) -> tuple[str, ...]:
    """Lower-case, strip and de-duplicate domains, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        domain = value.strip().lower()
        if domain:
            seen.setdefault(domain, None)
    return tuple(seen)


def domain_from_url(url: str) -> str | None:
    """Return the hostname of an absolute http(s) URL, or None if it has none."""
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not host:
        return None
    return host


def is_allowed(domain: str | None, allow_list: Sequence[str]) -> bool:
    if not allow_list:
        return True
    if not domain:
        return False
    domain = domain.lower()
    for entry in allow_list:
        entry = entry.lower()
        if domain == entry or domain.endswith("." + entry):
            return True
    return False


def filter_results(results: Iterable[SearchResult], allow_list: Sequence[str]) -> list[SearchResult]:
    """Keep results whose domain passes the allow-list, in their original order."""
    return [r for r in results if is_allowed(r.domain, allow_list)]
